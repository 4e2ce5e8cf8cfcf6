"""
Per-section column catalogues.

Each row-bearing section has an ordered list of stable (mandatory) columns,
numbered ``01``, ``02``, ... in declaration order, followed by fixed-name
optional columns whose base orders follow directly after the mandatory block.
Free-form and abundance columns registered without an explicit order take one
past the largest order registered so far.

    Section          Stable   Catalogued optional columns
    --------------   ------   ------------------------------------------------
    Protein          01-10    best score, score, reliability, num_psms,
                              num_peptides_distinct, num_peptides_unique, uri,
                              go_terms
    Peptide          01-12    best score, score, reliability, uri
    PSM              01-17    score, reliability, uri
    Small molecule   01-16    best score, score, reliability, uri
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from mztabcols.core.column import ColumnDescriptor, ColumnFamily
from mztabcols.core.errors import SchemaViolation
from mztabcols.core.section import Section
from mztabcols.core.values import ValueType

__all__ = [
    'BEST_SEARCH_ENGINE_SCORE',
    'SEARCH_ENGINE_SCORE',
    'RELIABILITY',
    'URI',
    'GO_TERMS',
    'SectionCatalogue',
    'get_catalogue',
]

BEST_SEARCH_ENGINE_SCORE = 'best_search_engine_score'
SEARCH_ENGINE_SCORE = 'search_engine_score'
RELIABILITY = 'reliability'
URI = 'uri'
GO_TERMS = 'go_terms'

_T = ValueType

_STABLE_LAYOUT = {
    Section.Protein: [
        ('accession', _T.STRING),
        ('description', _T.STRING),
        ('taxid', _T.INTEGER),
        ('species', _T.STRING),
        ('database', _T.STRING),
        ('database_version', _T.STRING),
        ('search_engine', _T.PARAM_LIST),
        ('ambiguity_members', _T.STRING_LIST),
        ('modifications', _T.MODIFICATION_LIST),
        ('protein_coverage', _T.DOUBLE),
    ],
    Section.Peptide: [
        ('sequence', _T.STRING),
        ('accession', _T.STRING),
        ('unique', _T.BOOLEAN),
        ('database', _T.STRING),
        ('database_version', _T.STRING),
        ('search_engine', _T.PARAM_LIST),
        ('modifications', _T.MODIFICATION_LIST),
        ('retention_time', _T.DOUBLE_LIST),
        ('retention_time_window', _T.DOUBLE_LIST),
        ('charge', _T.INTEGER),
        ('mass_to_charge', _T.DOUBLE),
        ('spectra_ref', _T.SPECTRA_REF_LIST),
    ],
    Section.PSM: [
        ('sequence', _T.STRING),
        ('PSM_ID', _T.INTEGER),
        ('accession', _T.STRING),
        ('unique', _T.BOOLEAN),
        ('database', _T.STRING),
        ('database_version', _T.STRING),
        ('search_engine', _T.PARAM_LIST),
        ('modifications', _T.MODIFICATION_LIST),
        ('retention_time', _T.DOUBLE_LIST),
        ('charge', _T.INTEGER),
        ('exp_mass_to_charge', _T.DOUBLE),
        ('calc_mass_to_charge', _T.DOUBLE),
        ('spectra_ref', _T.SPECTRA_REF_LIST),
        ('pre', _T.STRING),
        ('post', _T.STRING),
        ('start', _T.STRING),
        ('end', _T.STRING),
    ],
    Section.Small_Molecule: [
        ('identifier', _T.STRING_BAR_LIST),
        ('chemical_formula', _T.STRING),
        ('smiles', _T.STRING_BAR_LIST),
        ('inchi_key', _T.STRING_BAR_LIST),
        ('description', _T.STRING),
        ('exp_mass_to_charge', _T.DOUBLE),
        ('calc_mass_to_charge', _T.DOUBLE),
        ('charge', _T.INTEGER),
        ('retention_time', _T.DOUBLE_LIST),
        ('taxid', _T.INTEGER),
        ('species', _T.STRING),
        ('database', _T.STRING),
        ('database_version', _T.STRING),
        ('spectra_ref', _T.SPECTRA_REF_LIST),
        ('search_engine', _T.PARAM_LIST),
        ('modifications', _T.MODIFICATION_LIST),
    ],
}

_FAMILY = ColumnFamily

# Ordered after the stable block of each section
_OPTIONAL_LAYOUT = {
    Section.Protein: [
        (BEST_SEARCH_ENGINE_SCORE, _T.DOUBLE, _FAMILY.BEST_SCORE),
        (SEARCH_ENGINE_SCORE, _T.DOUBLE, _FAMILY.SCORE),
        (RELIABILITY, _T.RELIABILITY, _FAMILY.FIXED),
        ('num_psms', _T.INTEGER, _FAMILY.INDEXED),
        ('num_peptides_distinct', _T.INTEGER, _FAMILY.INDEXED),
        ('num_peptides_unique', _T.INTEGER, _FAMILY.INDEXED),
        (URI, _T.URI, _FAMILY.FIXED),
        (GO_TERMS, _T.GO_TERM_LIST, _FAMILY.FIXED),
    ],
    Section.Peptide: [
        (BEST_SEARCH_ENGINE_SCORE, _T.DOUBLE, _FAMILY.BEST_SCORE),
        (SEARCH_ENGINE_SCORE, _T.DOUBLE, _FAMILY.SCORE),
        (RELIABILITY, _T.RELIABILITY, _FAMILY.FIXED),
        (URI, _T.URI, _FAMILY.FIXED),
    ],
    Section.PSM: [
        (SEARCH_ENGINE_SCORE, _T.DOUBLE, _FAMILY.SCORE),
        (RELIABILITY, _T.RELIABILITY, _FAMILY.FIXED),
        (URI, _T.URI, _FAMILY.FIXED),
    ],
    Section.Small_Molecule: [
        (BEST_SEARCH_ENGINE_SCORE, _T.DOUBLE, _FAMILY.BEST_SCORE),
        (SEARCH_ENGINE_SCORE, _T.DOUBLE, _FAMILY.SCORE),
        (RELIABILITY, _T.RELIABILITY, _FAMILY.FIXED),
        (URI, _T.URI, _FAMILY.FIXED),
    ],
}

# Section name as spelled inside abundance headers
_ABUNDANCE_TOKENS = {
    Section.Protein: 'protein',
    Section.Peptide: 'peptide',
    Section.PSM: 'psm',
    Section.Small_Molecule: 'smallmolecule',
}


@dataclass(frozen=True)
class SectionCatalogue:
    """
    Fixed column layout of one row-bearing section.

    Attributes:
        section: Data section (``Section.Peptide``, ...)
        stable: Mandatory columns in display order
        optional: Catalogued optional column templates keyed by name
        abundance_token: Section name used in abundance headers
    """

    section: Section
    stable: Tuple[ColumnDescriptor, ...]
    optional: Dict[str, ColumnDescriptor] = field(default_factory=dict)
    abundance_token: str = ''

    def template(self, name: str) -> Optional[ColumnDescriptor]:
        """Catalogued optional column template, or None."""
        return self.optional.get(name)

    def templates(self, family: ColumnFamily) -> list[ColumnDescriptor]:
        return [column for column in self.optional.values() if column.family is family]

    @property
    def optional_prefixes(self) -> tuple:
        """Header prefixes that mark a column as optional in this section."""
        prefixes = ['opt_', f"{self.abundance_token}_abundance_"]
        prefixes.extend(self.optional)
        return tuple(prefixes)


def _build_catalogue(section: Section) -> SectionCatalogue:
    stable = tuple(
        ColumnDescriptor(name, value_type, order)
        for order, (name, value_type) in enumerate(_STABLE_LAYOUT[section], start=1)
    )
    first_optional = len(stable) + 1
    optional = {
        name: ColumnDescriptor(name, value_type, order, family=family)
        for order, (name, value_type, family) in enumerate(
            _OPTIONAL_LAYOUT[section], start=first_optional
        )
    }
    return SectionCatalogue(section, stable, optional, _ABUNDANCE_TOKENS[section])


_CATALOGUES = {section: _build_catalogue(section) for section in _STABLE_LAYOUT}


def get_catalogue(section: Section) -> SectionCatalogue:
    """
    Column catalogue for a row-bearing section (data or header variant).

    Raises:
        SchemaViolation: If the section has no column layout (COM, MTD)
    """
    if not isinstance(section, Section):
        raise TypeError(f"section must be Section, got {type(section)}")
    if not section.is_table:
        raise SchemaViolation(f"Section {section.name} has no column layout")
    return _CATALOGUES[section.to_data_section()]
