"""
Indexed elements referenced by optional columns.

Runs, assays and study variables are declared in a file's metadata block and
owned by the metadata model. Columns only carry a back-reference to them by
their 1-based index, which is all that is needed to derive a column's logical
position suffix and header fragment (e.g. ``_ms_run[2]``).

Examples:
    >>> from mztabcols.core.elements import MsRun, StudyVariable
    >>> MsRun(2).reference
    'ms_run[2]'
    >>> StudyVariable(1).reference
    'study_variable[1]'
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import ClassVar, Union

__all__ = [
    'IndexedElement',
    'MsRun',
    'Assay',
    'StudyVariable',
    'parse_element_reference',
]


@dataclass(frozen=True)
class IndexedElement:
    """
    Cross-reference to a numbered metadata entity.

    Attributes:
        index: 1-based index as declared in the metadata section
    """

    index: int
    kind: ClassVar[str] = 'element'

    def __post_init__(self):
        if isinstance(self.index, bool) or not isinstance(self.index, int):
            raise TypeError(f"index must be int, got {type(self.index)}")
        if self.index <= 0:
            raise ValueError(f"index must be a positive 1-based integer, got {self.index}")

    @property
    def reference(self) -> str:
        """Header/cell fragment such as ``ms_run[1]``."""
        return f"{self.kind}[{self.index}]"

    def __str__(self) -> str:
        return self.reference


@dataclass(frozen=True)
class MsRun(IndexedElement):
    """A measurement run (``ms_run[n]``)."""
    kind: ClassVar[str] = 'ms_run'


@dataclass(frozen=True)
class Assay(IndexedElement):
    """A quantified assay (``assay[n]``)."""
    kind: ClassVar[str] = 'assay'


@dataclass(frozen=True)
class StudyVariable(IndexedElement):
    """A study variable grouping assays (``study_variable[n]``)."""
    kind: ClassVar[str] = 'study_variable'


ElementType = Union[MsRun, Assay, StudyVariable]

_ELEMENT_CLASSES = {cls.kind: cls for cls in (MsRun, Assay, StudyVariable)}
_REFERENCE_RE = re.compile(r'^(?P<kind>ms_run|assay|study_variable)\[(?P<index>\d+)\]$')


def parse_element_reference(text: str) -> ElementType:
    """
    Parse ``ms_run[1]``, ``assay[3]`` or ``study_variable[2]``.

    Raises:
        ValueError: If text is not a recognised element reference
    """
    match = _REFERENCE_RE.match(str(text).strip())
    if not match:
        raise ValueError(f"Not an indexed element reference: '{text}'")
    return _ELEMENT_CLASSES[match.group('kind')](int(match.group('index')))
