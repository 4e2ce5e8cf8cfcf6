"""
Core column model: sections, values, descriptors, registries and records.

This package provides the building blocks every other module uses:

1. Section: Line-level section enumeration and prefixes
2. ValueType / codec: Typed cell values and their text form
3. ColumnDescriptor: Identity, header and logical position of one column
4. ColumnRegistry: Ordered, position-addressed set of columns for one section
5. Record: One data row stored by logical position

Examples:
    >>> from mztabcols.core import ColumnRegistry, Record, Section
    >>>
    >>> registry = ColumnRegistry.create(Section.Peptide)
    >>> _ = registry.seed_mandatory()
    >>> registry.header_line().split('\\t')[:3]
    ['PEH', 'sequence', 'accession']
    >>>
    >>> record = Record(registry)
    >>> record.set_text('charge', '2')
    >>> record.get_value('charge')
    2
"""

from mztabcols.core.section import Section
from mztabcols.core.elements import MsRun, Assay, StudyVariable, IndexedElement
from mztabcols.core.errors import (
    MzTabColumnError,
    SchemaViolation,
    UnboundSection,
    MalformedCell,
    MissingPrerequisite,
)
from mztabcols.core.values import (
    MISSING,
    ValueType,
    MzBoolean,
    Reliability,
    Param,
    Modification,
    ModificationType,
    SpectraRef,
    SplitList,
    cv_param,
    user_param,
    is_missing,
)
from mztabcols.core.codec import parse_cell, render_cell
from mztabcols.core.column import ColumnDescriptor, ColumnFamily
from mztabcols.core.registry import ColumnRegistry
from mztabcols.core.record import Record

__all__ = [
    'Section',
    'MsRun',
    'Assay',
    'StudyVariable',
    'IndexedElement',
    'MzTabColumnError',
    'SchemaViolation',
    'UnboundSection',
    'MalformedCell',
    'MissingPrerequisite',
    'MISSING',
    'ValueType',
    'MzBoolean',
    'Reliability',
    'Param',
    'Modification',
    'ModificationType',
    'SpectraRef',
    'SplitList',
    'cv_param',
    'user_param',
    'is_missing',
    'parse_cell',
    'render_cell',
    'ColumnDescriptor',
    'ColumnFamily',
    'ColumnRegistry',
    'Record',
]
