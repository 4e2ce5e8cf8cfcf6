"""
mztabcols - Column registry and record store for mzTab-style tables

Assigns every column of a protein, peptide, PSM or small molecule table a
sortable logical position, keeps the registry of mandatory and optional columns
consistent as columns are added, and stores typed rows that render to and load
from tab-separated lines.
"""

__version__ = "0.1.0"

from mztabcols.core.section import Section
from mztabcols.core.registry import ColumnRegistry
from mztabcols.core.record import Record
from mztabcols.core.values import MISSING, ValueType

__all__ = [
    "Section",
    "ColumnRegistry",
    "Record",
    "MISSING",
    "ValueType",
]
