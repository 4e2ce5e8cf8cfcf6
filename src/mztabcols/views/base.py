"""
Shared machinery for section row views.

A view wraps a :class:`~mztabcols.core.record.Record` and exposes its cells as
named accessors. Accessors resolve their column by header through the record's
registry at call time, so a view can be laid over any registry: asking for a
column the registry does not hold raises UnboundSection rather than returning
a default.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

from mztabcols.core.codec import parse_modification, parse_param
from mztabcols.core.column import cv_column_name
from mztabcols.core.columns import BEST_SEARCH_ENGINE_SCORE, SEARCH_ENGINE_SCORE
from mztabcols.core.elements import IndexedElement, MsRun, StudyVariable
from mztabcols.core.errors import UnboundSection
from mztabcols.core.record import Record
from mztabcols.core.registry import ColumnRegistry
from mztabcols.core.section import Section
from mztabcols.core.values import Modification, Param, SpectraRef

__all__ = ['column_property', 'SectionRow', 'EvidenceMixin']


def column_property(header: str, doc: Optional[str] = None) -> property:
    """Read/write property over the cell of ``header``."""

    def getter(self):
        return self.record.get_value(header)

    def setter(self, value):
        self.record.set_value(header, value)

    return property(getter, setter, doc=doc or f"Value of the ``{header}`` column.")


class SectionRow:
    """
    Named accessors common to every row-bearing section.

    Attributes:
        record: Underlying position-addressed record
    """

    SECTION: Optional[Section] = None

    def __init__(self, record: Record):
        if not isinstance(record, Record):
            raise TypeError(f"record must be Record, got {type(record)}")
        self.record = record

    @classmethod
    def new(cls, registry: ColumnRegistry, runs: Optional[Mapping[int, MsRun]] = None):
        """Empty row bound to ``registry``."""
        return cls(Record(registry, runs))

    @property
    def registry(self) -> ColumnRegistry:
        return self.record.registry

    def render(self) -> str:
        return self.record.render()

    def __str__(self) -> str:
        return self.record.render()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.record!r})"

    def set_text(self, header: str, text: Optional[str]) -> None:
        """Parse and store cell text for ``header``."""
        self.record.set_text(header, text)

    database = column_property('database')
    database_version = column_property('database_version')
    search_engine = column_property('search_engine', "Search engine parameters.")
    modifications = column_property('modifications')
    reliability = column_property('reliability')
    uri = column_property('uri')

    def add_search_engine(self, param) -> None:
        """Append a search engine parameter (Param or ``[..]`` text)."""
        if isinstance(param, str):
            param = parse_param(param)
        self.record.append('search_engine', param)

    def add_modification(self, modification) -> None:
        """Append a modification (Modification or its text form)."""
        if isinstance(modification, str):
            modification = parse_modification(modification, self.record.section)
        if not isinstance(modification, Modification):
            raise TypeError(f"Expected Modification, got {type(modification)}")
        self.record.append('modifications', modification)

    # -------------------------------------------------------------------------
    # Search engine scores
    # -------------------------------------------------------------------------

    def _score_column(self, name: str, score_id: int, run: Optional[MsRun]):
        template = self.registry.catalogue.template(name)
        if template is None:
            raise UnboundSection(f"{self.registry.section.name} has no {name} columns")
        return self.record.column(template.bind(score_id=score_id, element=run))

    def best_search_engine_score(self, score_id: int) -> Any:
        return self.record.get_value(self._score_column(BEST_SEARCH_ENGINE_SCORE, score_id, None))

    def set_best_search_engine_score(self, score_id: int, value) -> None:
        self.record.set_value(self._score_column(BEST_SEARCH_ENGINE_SCORE, score_id, None), value)

    def search_engine_score(self, score_id: int, run: Optional[MsRun] = None) -> Any:
        """Score ``search_engine_score[score_id]`` (per run when ``run`` is given)."""
        return self.record.get_value(self._score_column(SEARCH_ENGINE_SCORE, score_id, run))

    def set_search_engine_score(self, score_id: int, value, run: Optional[MsRun] = None) -> None:
        self.record.set_value(self._score_column(SEARCH_ENGINE_SCORE, score_id, run), value)

    # -------------------------------------------------------------------------
    # Abundance
    # -------------------------------------------------------------------------

    def _abundance_header(self, kind: str, element: IndexedElement) -> str:
        token = self.registry.catalogue.abundance_token
        return f"{token}_{kind}_{element.reference}"

    def abundance(self, element: IndexedElement) -> Any:
        """Abundance for an assay, run or study variable."""
        return self.record.get_value(self._abundance_header('abundance', element))

    def set_abundance(self, element: IndexedElement, value) -> None:
        self.record.set_value(self._abundance_header('abundance', element), value)

    def abundance_stdev(self, study_variable: StudyVariable) -> Any:
        return self.record.get_value(self._abundance_header('abundance_stdev', study_variable))

    def set_abundance_stdev(self, study_variable: StudyVariable, value) -> None:
        self.record.set_value(self._abundance_header('abundance_stdev', study_variable), value)

    def abundance_std_error(self, study_variable: StudyVariable) -> Any:
        return self.record.get_value(self._abundance_header('abundance_std_error', study_variable))

    def set_abundance_std_error(self, study_variable: StudyVariable, value) -> None:
        self.record.set_value(self._abundance_header('abundance_std_error', study_variable), value)

    # -------------------------------------------------------------------------
    # Free-form optional columns
    # -------------------------------------------------------------------------

    @staticmethod
    def _opt_header(name, element: Optional[IndexedElement]) -> str:
        if isinstance(name, Param):
            name = cv_column_name(name)
        scope = element.reference if element is not None else 'global'
        return f"opt_{scope}_{name}"

    def opt(self, name, element: Optional[IndexedElement] = None) -> Any:
        """
        Value of a free-form optional column.

        Args:
            name: Column name, or the CV parameter of a CV-named column
            element: Scope element; None for ``opt_global_*``
        """
        return self.record.get_value(self._opt_header(name, element))

    def set_opt(self, name, value, element: Optional[IndexedElement] = None) -> None:
        self.record.set_value(self._opt_header(name, element), value)


class EvidenceMixin:
    """Accessors for rows backed by spectra (peptide, PSM, small molecule)."""

    retention_time = column_property('retention_time', "Retention times in seconds.")
    charge = column_property('charge')
    spectra_ref = column_property('spectra_ref')

    def add_retention_time(self, value: float) -> None:
        self.record.append('retention_time', value)

    def add_spectra_ref(self, run: MsRun, reference: str) -> None:
        """Append ``ms_run[n]:reference``."""
        if not isinstance(run, MsRun):
            raise TypeError(f"run must be MsRun, got {type(run)}")
        self.record.append('spectra_ref', SpectraRef(run, reference))
