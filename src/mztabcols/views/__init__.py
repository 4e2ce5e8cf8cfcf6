"""
Section row views.

Thin named-accessor façades over :class:`~mztabcols.core.record.Record`, one
per row-bearing section. Views hold no state of their own; every accessor reads
or writes the underlying record through its registry.

Examples:
    >>> from mztabcols.core import ColumnRegistry, Section
    >>> from mztabcols.views import PeptideRow
    >>>
    >>> registry = ColumnRegistry.create(Section.Peptide)
    >>> _ = registry.seed_mandatory()
    >>> row = PeptideRow.new(registry)
    >>> row.charge = 2
    >>> row.charge
    2
"""

from mztabcols.views.base import SectionRow, EvidenceMixin, column_property
from mztabcols.views.protein import ProteinRow
from mztabcols.views.peptide import PeptideRow
from mztabcols.views.psm import PSMRow
from mztabcols.views.small_molecule import SmallMoleculeRow

VIEW_CLASSES = {
    view.SECTION: view for view in (ProteinRow, PeptideRow, PSMRow, SmallMoleculeRow)
}


def view_for(record):
    """Wrap ``record`` in the view class of its section."""
    return VIEW_CLASSES[record.section](record)


__all__ = [
    'SectionRow',
    'EvidenceMixin',
    'column_property',
    'ProteinRow',
    'PeptideRow',
    'PSMRow',
    'SmallMoleculeRow',
    'VIEW_CLASSES',
    'view_for',
]
