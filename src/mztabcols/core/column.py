"""
Column descriptors.

A descriptor is the immutable identity of one column: its stable name, declared
value type and two-digit base order, plus whatever family-specific parts are
needed to tell repeated instances apart (score id, indexed element, abundance
field). Header text and logical position are both computed from those parts,
never stored.

Column families:

    Family       Header                                       Position suffix
    ----------   ------------------------------------------   ------------------
    STABLE       accession                                    -
    FIXED        reliability, uri, go_terms                   -
    INDEXED      num_psms_ms_run[2]                           element
    BEST_SCORE   best_search_engine_score[1]                  score id
    SCORE        search_engine_score[1]_ms_run[2]             score id, element
    NAMED        opt_global_x, opt_assay[1]_x, opt_*_cv_*_*   element
    ABUNDANCE    protein_abundance_stdev_study_variable[1]    element, field

Examples:
    >>> from mztabcols.core.column import ColumnDescriptor, ColumnFamily
    >>> from mztabcols.core.elements import MsRun
    >>> from mztabcols.core.values import ValueType
    >>> template = ColumnDescriptor('search_engine_score', ValueType.DOUBLE, '14',
    ...                             family=ColumnFamily.SCORE)
    >>> column = template.bind(score_id=1, element=MsRun(2))
    >>> column.header, column.position
    ('search_engine_score[1]_ms_run[2]', '14001002')
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from mztabcols.core.elements import IndexedElement
from mztabcols.core.position import format_order, make_position
from mztabcols.core.values import Param, ValueType

__all__ = [
    'ColumnFamily',
    'ColumnDescriptor',
    'named_column',
    'cv_named_column',
    'cv_column_name',
]


class ColumnFamily(Enum):
    """How a column's header and position are derived."""
    STABLE = 'stable'
    FIXED = 'fixed'
    INDEXED = 'indexed'
    BEST_SCORE = 'best_score'
    SCORE = 'score'
    NAMED = 'named'
    ABUNDANCE = 'abundance'

    @property
    def is_optional(self) -> bool:
        return self is not ColumnFamily.STABLE


@dataclass(frozen=True)
class ColumnDescriptor:
    """
    Immutable description of one column.

    Attributes:
        name: Stable column name. For NAMED columns this is the free-form part
            after the scope (``my_value`` or ``cv_MS:1002217_decoy_peptide``);
            for ABUNDANCE columns the part before the element
            (``protein_abundance_stdev``).
        value_type: Declared cell value type
        order: Two-digit base order
        family: Column family, see module docstring
        element: Indexed element (run, assay or study variable)
        score_id: Search engine score id for score families
        param: Source CV parameter of a CV-named column
        abundance_field: 1 value, 2 standard deviation, 3 standard error
    """

    name: str
    value_type: ValueType
    order: str
    family: ColumnFamily = ColumnFamily.STABLE
    element: Optional[IndexedElement] = None
    score_id: Optional[int] = None
    param: Optional[Param] = None
    abundance_field: Optional[int] = None

    def __post_init__(self):
        if not self.name or not isinstance(self.name, str):
            raise ValueError(f"Column name must be a non-empty string, got {self.name!r}")
        if not isinstance(self.value_type, ValueType):
            raise TypeError(f"value_type must be ValueType, got {type(self.value_type)}")
        object.__setattr__(self, 'order', format_order(self.order))
        if self.element is not None and not isinstance(self.element, IndexedElement):
            raise TypeError(f"element must be an IndexedElement, got {type(self.element)}")
        if self.score_id is not None:
            if isinstance(self.score_id, bool) or not isinstance(self.score_id, int):
                raise TypeError(f"score_id must be int, got {type(self.score_id)}")
            if self.score_id <= 0:
                raise ValueError(f"score_id must be positive, got {self.score_id}")

    @property
    def header(self) -> str:
        """Rendered header text."""
        family = self.family
        if family in (ColumnFamily.STABLE, ColumnFamily.FIXED):
            return self.name
        if family is ColumnFamily.NAMED:
            scope = self.element.reference if self.element is not None else 'global'
            return f"opt_{scope}_{self.name}"
        text = self.name
        if self.score_id is not None:
            text += f"[{self.score_id}]"
        if self.element is not None:
            text += f"_{self.element.reference}"
        return text

    @property
    def position(self) -> str:
        """Logical position: base order plus score id, element and field suffixes."""
        return make_position(
            self.order,
            (
                self.score_id,
                self.element.index if self.element is not None else None,
                self.abundance_field,
            ),
        )

    @property
    def is_optional(self) -> bool:
        return self.family.is_optional

    def with_order(self, order) -> ColumnDescriptor:
        """Copy of this descriptor moved to another base order."""
        return dataclasses.replace(self, order=format_order(order))

    def bind(
        self,
        *,
        element: Optional[IndexedElement] = None,
        score_id: Optional[int] = None,
    ) -> ColumnDescriptor:
        """Copy of this template with its element and score id filled in."""
        return dataclasses.replace(self, element=element, score_id=score_id)

    def __str__(self) -> str:
        return self.header


def cv_column_name(param: Param) -> str:
    """
    Free-form name of a CV-named column: ``cv_<accession>_<label>``.

    Spaces in the parameter name become underscores.

    Raises:
        ValueError: If the parameter lacks an accession or a name
    """
    if not isinstance(param, Param):
        raise TypeError(f"param must be Param, got {type(param)}")
    if not param.accession or not param.name:
        raise ValueError(f"CV-named column needs accession and name, got {param}")
    label = '_'.join(param.name.split())
    return f"cv_{param.accession}_{label}"


def named_column(
    name: str,
    value_type: ValueType,
    order,
    element: Optional[IndexedElement] = None,
) -> ColumnDescriptor:
    """Free-form optional column ``opt_<scope>_<name>``."""
    if not name or any(char.isspace() for char in name):
        raise ValueError(f"Optional column name must be non-empty without whitespace: {name!r}")
    return ColumnDescriptor(
        name, value_type, order, family=ColumnFamily.NAMED, element=element,
    )


def cv_named_column(
    param: Param,
    value_type: ValueType,
    order,
    element: Optional[IndexedElement] = None,
) -> ColumnDescriptor:
    """Optional column named after a CV parameter, ``opt_<scope>_cv_<accession>_<label>``."""
    return ColumnDescriptor(
        cv_column_name(param), value_type, order,
        family=ColumnFamily.NAMED, element=element, param=param,
    )
