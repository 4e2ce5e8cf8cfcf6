"""Small molecule row accessors (SML lines)."""

from __future__ import annotations

from mztabcols.core.section import Section
from mztabcols.views.base import EvidenceMixin, SectionRow, column_property

__all__ = ['SmallMoleculeRow']


class SmallMoleculeRow(EvidenceMixin, SectionRow):
    """
    Named access to a small molecule row.

    ``identifier``, ``smiles`` and ``inchi_key`` are bar-separated lists so that
    ambiguous identifications keep their candidates side by side.
    """

    SECTION = Section.Small_Molecule

    identifier = column_property('identifier')
    chemical_formula = column_property('chemical_formula')
    smiles = column_property('smiles')
    inchi_key = column_property('inchi_key')
    description = column_property('description')
    exp_mass_to_charge = column_property('exp_mass_to_charge')
    calc_mass_to_charge = column_property('calc_mass_to_charge')
    taxid = column_property('taxid')
    species = column_property('species')

    def add_identifier(self, identifier: str) -> None:
        self.record.append('identifier', identifier)

    def add_smiles(self, smiles: str) -> None:
        self.record.append('smiles', smiles)

    def add_inchi_key(self, inchi_key: str) -> None:
        self.record.append('inchi_key', inchi_key)
