"""Peptide row accessors (PEP lines)."""

from __future__ import annotations

from mztabcols.core.section import Section
from mztabcols.views.base import EvidenceMixin, SectionRow, column_property

__all__ = ['PeptideRow']


class PeptideRow(EvidenceMixin, SectionRow):
    """
    Named access to a peptide row.

    Examples:
        >>> from mztabcols.core import ColumnRegistry, Section
        >>> registry = ColumnRegistry.create(Section.Peptide)
        >>> _ = registry.seed_mandatory()
        >>> row = PeptideRow.new(registry)
        >>> row.sequence = 'PEPTIDER'
        >>> row.charge = 2
        >>> row.add_modification('3|4-MOD:00412')
    """

    SECTION = Section.Peptide

    sequence = column_property('sequence')
    accession = column_property('accession')
    unique = column_property('unique', "Whether the peptide maps to a single protein.")
    retention_time_window = column_property('retention_time_window')
    mass_to_charge = column_property('mass_to_charge')

    def add_retention_time_window(self, value: float) -> None:
        self.record.append('retention_time_window', value)
