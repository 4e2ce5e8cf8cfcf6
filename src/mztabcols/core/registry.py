"""
Column registry: the ordered set of columns of one section instance.

A registry is a mutable builder owned by whoever is assembling a table. It
starts empty, is seeded with the section's mandatory columns, and then grows as
optional columns are registered for the runs, assays and study variables a file
declares. Columns are never removed.

Registration families:

    add_indexed        fixed name, position suffix from an indexed element
                       (num_psms_ms_run[2])
    add_score_family   score id (and optionally a run) embedded in the header
                       (best_search_engine_score[1], search_engine_score[1]_ms_run[2])
    add_named          free-form opt_global_<name> / opt_<element>_<name>
    add_cv_named       free-form named after a CV parameter
    add_abundance      one column per assay/run, three per study variable

Invariants:
    - Logical positions are unique within the registry.
    - Every position in the union mapping is in exactly one of the stable and
      optional mappings; abundance positions are also in the abundance mapping.
    - Sorting positions as text gives the display order.
    - A failed registration leaves every mapping untouched.

Examples:
    >>> from mztabcols.core.registry import ColumnRegistry
    >>> from mztabcols.core.section import Section
    >>> from mztabcols.core.elements import MsRun
    >>> registry = ColumnRegistry.create(Section.PSM)
    >>> _ = registry.seed_mandatory()
    >>> score = registry.catalogue.template('search_engine_score')
    >>> registry.add_score_family(score, 1, MsRun(2)).header
    'search_engine_score[1]_ms_run[2]'
"""

from __future__ import annotations

import logging
from typing import Dict, Iterator, List, Optional

from mztabcols.core.column import (
    ColumnDescriptor,
    ColumnFamily,
    cv_named_column,
    named_column,
)
from mztabcols.core.columns import (
    GO_TERMS,
    RELIABILITY,
    URI,
    SectionCatalogue,
    get_catalogue,
)
from mztabcols.core.elements import Assay, IndexedElement, MsRun, StudyVariable
from mztabcols.core.errors import SchemaViolation
from mztabcols.core.position import column_order, format_order, next_order
from mztabcols.core.section import Section
from mztabcols.core.values import Param, ValueType

__all__ = ['ColumnRegistry']

logger = logging.getLogger(__name__)

# (name suffix, field digit) of the abundance columns of a study variable
_STUDY_VARIABLE_ABUNDANCE = (
    ('abundance', 1),
    ('abundance_stdev', 2),
    ('abundance_std_error', 3),
)


class ColumnRegistry:
    """
    Ordered, position-addressed set of columns for one section.

    Attributes:
        section: Header variant of the bound section (e.g. ``Section.Peptide_Header``)
        data_section: Data variant of the bound section (e.g. ``Section.Peptide``)
        catalogue: Fixed column layout of the section
    """

    def __init__(self, section: Section):
        """
        Bind a new, empty registry to a row-bearing section.

        Prefer :meth:`create`; both accept the data or the header variant.

        Raises:
            SchemaViolation: If the section has no column layout
        """
        self.catalogue: SectionCatalogue = get_catalogue(section)
        self.section: Section = section.to_header_section()
        self.data_section: Section = section.to_data_section()
        self._stable: Dict[str, ColumnDescriptor] = {}
        self._optional: Dict[str, ColumnDescriptor] = {}
        self._abundance: Dict[str, ColumnDescriptor] = {}
        self._columns: Dict[str, ColumnDescriptor] = {}

    @classmethod
    def create(cls, section: Section) -> ColumnRegistry:
        """New empty registry for ``section``."""
        return cls(section)

    # =========================================================================
    # Commit
    # =========================================================================

    def _commit(self, columns: List[ColumnDescriptor]) -> List[ColumnDescriptor]:
        """Insert ``columns`` all together, or none of them."""
        seen = set()
        for column in columns:
            try:
                position = column.position
            except ValueError as e:
                raise SchemaViolation(
                    f"Column '{column.name}' has no valid logical position in {self.section.name}: {e}"
                )
            if position in self._columns or position in seen:
                existing = self._columns.get(position)
                clash = existing.header if existing is not None else column.header
                logger.warning(
                    f"Rejected column '{column.header}' in {self.section.name}: "
                    f"position {position} already taken by '{clash}'"
                )
                raise SchemaViolation(
                    f"Column '{column.header}' resolves to logical position {position}, "
                    f"already used by '{clash}' in {self.section.name}"
                )
            seen.add(position)

        for column in columns:
            position = column.position
            if column.is_optional:
                self._optional[position] = column
            else:
                self._stable[position] = column
            if column.family is ColumnFamily.ABUNDANCE:
                self._abundance[position] = column
            self._columns[position] = column
            logger.debug(f"Registered {self.section.name} column '{column.header}' at {position}")

        self._stable = dict(sorted(self._stable.items()))
        self._optional = dict(sorted(self._optional.items()))
        self._abundance = dict(sorted(self._abundance.items()))
        self._columns = dict(sorted(self._columns.items()))
        return columns

    def _free_order(self, order=None) -> str:
        """Explicit order, normalised; otherwise one past the largest registered order."""
        try:
            if order is not None:
                return format_order(order)
            return next_order(self._columns)
        except ValueError as e:
            raise SchemaViolation(f"No base order available in {self.section.name}: {e}")

    # =========================================================================
    # Registration
    # =========================================================================

    def seed_mandatory(self) -> List[ColumnDescriptor]:
        """
        Register the section's mandatory columns, ordered ``01``, ``02``, ...

        Raises:
            SchemaViolation: If the mandatory columns are already present
        """
        return self._commit(list(self.catalogue.stable))

    def _catalogued(self, descriptor: ColumnDescriptor, families) -> Optional[ColumnDescriptor]:
        if not isinstance(descriptor, ColumnDescriptor):
            raise TypeError(f"descriptor must be ColumnDescriptor, got {type(descriptor)}")
        template = self.catalogue.template(descriptor.name)
        if template is None or template.family not in families:
            logger.debug(
                f"Ignoring '{descriptor.name}': not a {'/'.join(f.value for f in families)} "
                f"column of {self.section.name}"
            )
            return None
        return template

    def add_indexed(
        self,
        descriptor: ColumnDescriptor,
        element: MsRun,
    ) -> Optional[ColumnDescriptor]:
        """
        Register a fixed-name column repeated per run.

        The base order comes from the section catalogue; the element's index
        becomes the position suffix and the header reads ``<name>_<element>``
        (e.g. ``num_psms_ms_run[2]``).

        Args:
            descriptor: Catalogued template (or any descriptor with the same name)
            element: Run the column belongs to

        Returns:
            The registered column, or None if ``descriptor`` is not an indexed
            column of this section

        Raises:
            TypeError: If ``element`` is not an MsRun
            SchemaViolation: If the column is already registered
        """
        if not isinstance(element, MsRun):
            raise TypeError(f"indexed columns are scoped to an MsRun, got {type(element)}")
        template = self._catalogued(descriptor, (ColumnFamily.INDEXED,))
        if template is None:
            return None
        return self._commit([template.bind(element=element)])[0]

    def add_score_family(
        self,
        descriptor: ColumnDescriptor,
        score_id: int,
        element: Optional[MsRun] = None,
    ) -> Optional[ColumnDescriptor]:
        """
        Register a best or per-run search engine score column.

        Args:
            descriptor: ``best_search_engine_score`` or ``search_engine_score``
                template of this section
            score_id: Index of the score definition in the metadata
            element: Run of a per-run score; None for an overall score

        Returns:
            The registered column, or None if the descriptor's name is not a
            score column of this section

        Raises:
            SchemaViolation: If the column is already registered

        Examples:
            >>> col = registry.add_score_family(template, 3)
            >>> col.header
            'best_search_engine_score[3]'
        """
        if element is not None and not isinstance(element, MsRun):
            raise TypeError(f"score columns are scoped to an MsRun, got {type(element)}")
        template = self._catalogued(descriptor, (ColumnFamily.BEST_SCORE, ColumnFamily.SCORE))
        if template is None:
            return None
        return self._commit([template.bind(element=element, score_id=score_id)])[0]

    def add_named(
        self,
        name: str,
        value_type: ValueType,
        order=None,
        element: Optional[IndexedElement] = None,
    ) -> ColumnDescriptor:
        """
        Register a free-form optional column ``opt_<scope>_<name>``.

        Args:
            name: Column name after the scope prefix
            value_type: Declared cell type
            order: Base order; defaults to one past the largest order in use
            element: Assay, study variable or run scope; None for ``global``

        Raises:
            SchemaViolation: If the position is taken or no order is left
        """
        column = named_column(name, value_type, self._free_order(order), element)
        return self._commit([column])[0]

    def add_cv_named(
        self,
        param: Param,
        value_type: ValueType,
        order=None,
        element: Optional[IndexedElement] = None,
    ) -> ColumnDescriptor:
        """Register ``opt_<scope>_cv_<accession>_<label>`` for a CV parameter."""
        column = cv_named_column(param, value_type, self._free_order(order), element)
        return self._commit([column])[0]

    def _abundance_order(self, kind: type, order=None) -> str:
        if order is not None:
            return self._free_order(order)
        for column in self._abundance.values():
            if type(column.element) is kind:
                return column.order
        return self._free_order()

    def add_abundance(self, element: IndexedElement, order=None) -> List[ColumnDescriptor]:
        """
        Register abundance columns for one assay, run or study variable.

        An assay or run gets one column (``<section>_abundance_assay[n]``); a study
        variable gets three sharing one order (abundance, stdev, std_error).
        Columns of the same element kind share a base order.

        Raises:
            SchemaViolation: If any of the columns is already registered
        """
        if not isinstance(element, (Assay, MsRun, StudyVariable)):
            raise TypeError(f"abundance needs an Assay, MsRun or StudyVariable, got {type(element)}")
        base = self._abundance_order(type(element), order)
        token = self.catalogue.abundance_token
        if isinstance(element, StudyVariable):
            fields = _STUDY_VARIABLE_ABUNDANCE
        else:
            fields = (('abundance', None),)
        columns = [
            ColumnDescriptor(
                f"{token}_{suffix}", ValueType.DOUBLE, base,
                family=ColumnFamily.ABUNDANCE, element=element, abundance_field=field,
            )
            for suffix, field in fields
        ]
        return self._commit(columns)

    def _add_fixed(self, name: str, order=None) -> ColumnDescriptor:
        template = self.catalogue.template(name)
        if template is None:
            raise SchemaViolation(f"{self.section.name} has no '{name}' column")
        if order is not None:
            template = template.with_order(self._free_order(order))
        return self._commit([template])[0]

    def add_reliability(self, order=None) -> ColumnDescriptor:
        """Register the ``reliability`` column."""
        return self._add_fixed(RELIABILITY, order)

    def add_uri(self, order=None) -> ColumnDescriptor:
        """Register the ``uri`` column."""
        return self._add_fixed(URI, order)

    def add_go_terms(self) -> ColumnDescriptor:
        """Register the ``go_terms`` column (protein tables only)."""
        return self._add_fixed(GO_TERMS)

    # =========================================================================
    # Queries
    # =========================================================================

    @property
    def stable_columns(self) -> Dict[str, ColumnDescriptor]:
        return dict(self._stable)

    @property
    def optional_columns(self) -> Dict[str, ColumnDescriptor]:
        return dict(self._optional)

    @property
    def abundance_columns(self) -> Dict[str, ColumnDescriptor]:
        return dict(self._abundance)

    @property
    def columns(self) -> Dict[str, ColumnDescriptor]:
        """Union of stable and optional columns keyed by logical position."""
        return dict(self._columns)

    def positions(self) -> List[str]:
        return list(self._columns)

    def headers(self) -> List[str]:
        return [column.header for column in self._columns.values()]

    def header_line(self) -> str:
        """Section prefix and every header in display order, tab-separated."""
        return '\t'.join([self.section.prefix] + self.headers())

    def __str__(self) -> str:
        return self.header_line()

    def __repr__(self) -> str:
        return (
            f"ColumnRegistry({self.section.name}, stable={len(self._stable)}, "
            f"optional={len(self._optional)})"
        )

    def offset_map(self) -> Dict[int, ColumnDescriptor]:
        """Columns by 1-based offset in a data line (offset 0 is the prefix)."""
        return {offset: column for offset, column in enumerate(self._columns.values(), start=1)}

    def find_by_position(self, position: str) -> Optional[ColumnDescriptor]:
        return self._columns.get(position)

    def find_by_header(self, header: str) -> Optional[ColumnDescriptor]:
        """Column whose header matches ``header`` (trimmed, case-insensitive)."""
        if header is None:
            return None
        key = header.strip().lower()
        for column in self._columns.values():
            if column.header.lower() == key:
                return column
        return None

    def find_by_order(self, order) -> List[ColumnDescriptor]:
        """All columns sharing a base order, in position order."""
        key = format_order(order)
        return [
            column for position, column in self._columns.items()
            if column_order(position) == key
        ]

    def is_optional_header(self, header: str) -> bool:
        """
        Whether ``header`` names an optional column of this section.

        Decided from the header text alone, so it works for columns whose
        position cannot be known without run or assay context.
        """
        key = header.strip().lower()
        return any(key.startswith(prefix.lower()) for prefix in self.catalogue.optional_prefixes)

    def __len__(self) -> int:
        return len(self._columns)

    def __contains__(self, item) -> bool:
        if isinstance(item, ColumnDescriptor):
            return self._columns.get(item.position) == item
        return item in self._columns

    def __iter__(self) -> Iterator[ColumnDescriptor]:
        return iter(list(self._columns.values()))
