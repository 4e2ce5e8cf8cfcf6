"""Protein row accessors (PRT lines)."""

from __future__ import annotations

from typing import Any

from mztabcols.core.elements import IndexedElement
from mztabcols.core.section import Section
from mztabcols.views.base import SectionRow, column_property

__all__ = ['ProteinRow']


class ProteinRow(SectionRow):
    """
    Named access to a protein row.

    Examples:
        >>> from mztabcols.core import ColumnRegistry, MsRun, Section
        >>> registry = ColumnRegistry.create(Section.Protein)
        >>> _ = registry.seed_mandatory()
        >>> _ = registry.add_indexed(registry.catalogue.template('num_psms'), MsRun(1))
        >>> row = ProteinRow.new(registry)
        >>> row.accession = 'P12345'
        >>> row.add_ambiguity_member('P12346')
        >>> row.set_num_psms(MsRun(1), 4)
    """

    SECTION = Section.Protein

    accession = column_property('accession')
    description = column_property('description')
    taxid = column_property('taxid', "NCBI taxonomy id.")
    species = column_property('species')
    ambiguity_members = column_property('ambiguity_members')
    protein_coverage = column_property('protein_coverage', "Sequence coverage, 0 to 1.")
    go_terms = column_property('go_terms')

    def add_ambiguity_member(self, accession: str) -> None:
        self.record.append('ambiguity_members', accession)

    def add_go_term(self, term: str) -> None:
        """Append a ``GO:nnnnnnn`` accession."""
        self.record.append('go_terms', term)

    def _per_run(self, name: str, run: IndexedElement) -> str:
        return f"{name}_{run.reference}"

    def num_psms(self, run: IndexedElement) -> Any:
        return self.record.get_value(self._per_run('num_psms', run))

    def set_num_psms(self, run: IndexedElement, value) -> None:
        self.record.set_value(self._per_run('num_psms', run), value)

    def num_peptides_distinct(self, run: IndexedElement) -> Any:
        return self.record.get_value(self._per_run('num_peptides_distinct', run))

    def set_num_peptides_distinct(self, run: IndexedElement, value) -> None:
        self.record.set_value(self._per_run('num_peptides_distinct', run), value)

    def num_peptides_unique(self, run: IndexedElement) -> Any:
        return self.record.get_value(self._per_run('num_peptides_unique', run))

    def set_num_peptides_unique(self, run: IndexedElement, value) -> None:
        self.record.set_value(self._per_run('num_peptides_unique', run), value)
