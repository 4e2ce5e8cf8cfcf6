"""
Position-addressed record store.

A Record is one data row of a section. It holds cell values keyed by logical
position and is bound to the ColumnRegistry that defines those positions; every
read or write is checked against the registry's current columns, so columns
registered after the record was created are visible to it.

Reading and writing:
    - ``get`` / ``set`` address a cell by logical position
    - ``get_value`` / ``set_value`` / ``set_text`` / ``append`` address it by
      descriptor or header text
    - values are type-checked on ``set`` and parsed through the cell codec on
      ``set_text``

Loading a data line never stops at the first bad cell: malformed cells are left
missing and returned as diagnostics next to the record.

Examples:
    >>> from mztabcols.core.record import Record
    >>> from mztabcols.core.registry import ColumnRegistry
    >>> from mztabcols.core.section import Section
    >>> registry = ColumnRegistry.create(Section.Peptide)
    >>> _ = registry.seed_mandatory()
    >>> record = Record(registry)
    >>> record.set_value('charge', 2)
    >>> record.render().split('\\t')[10]
    '2'
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from mztabcols.core.codec import coerce_value, parse_cell, render_cell
from mztabcols.core.column import ColumnDescriptor
from mztabcols.core.elements import MsRun
from mztabcols.core.errors import MalformedCell, MissingPrerequisite, UnboundSection
from mztabcols.core.registry import ColumnRegistry
from mztabcols.core.section import Section
from mztabcols.core.values import MISSING, SplitList

__all__ = ['Record']

logger = logging.getLogger(__name__)

ColumnKey = Union[ColumnDescriptor, str]


class Record:
    """
    One row of a section, stored by logical position.

    Attributes:
        registry: Column registry the record is bound to
        runs: Declared runs by 1-based index, used to resolve spectra references
    """

    def __init__(
        self,
        registry: ColumnRegistry,
        runs: Optional[Mapping[int, MsRun]] = None,
    ):
        if not isinstance(registry, ColumnRegistry):
            raise TypeError(f"registry must be ColumnRegistry, got {type(registry)}")
        self.registry = registry
        self.runs = runs
        self._cells: Dict[str, Any] = {}

    @property
    def section(self) -> Section:
        """Data section of the row (``Section.Peptide``, ...)."""
        return self.registry.data_section

    # =========================================================================
    # Column resolution
    # =========================================================================

    def _by_position(self, position: str) -> ColumnDescriptor:
        column = self.registry.find_by_position(position)
        if column is None:
            raise UnboundSection(
                f"No column at position '{position}' in {self.registry.section.name}"
            )
        return column

    def column(self, key: ColumnKey) -> ColumnDescriptor:
        """
        Resolve a descriptor or header text against the bound registry.

        Raises:
            UnboundSection: If the registry has no such column
        """
        if isinstance(key, ColumnDescriptor):
            column = self.registry.find_by_position(key.position)
            if column is None or column.header != key.header:
                raise UnboundSection(
                    f"Column '{key.header}' is not registered in {self.registry.section.name}"
                )
            return column
        column = self.registry.find_by_header(key)
        if column is None:
            raise UnboundSection(
                f"Column '{key}' is not registered in {self.registry.section.name}"
            )
        return column

    # =========================================================================
    # Position access
    # =========================================================================

    def get(self, position: str) -> Any:
        """Value at ``position``; MISSING if the cell was never set."""
        self._by_position(position)
        return self._cells.get(position, MISSING)

    def set(self, position: str, value: Any) -> None:
        """
        Store ``value`` at ``position`` after checking it against the column type.

        None and MISSING clear the cell.

        Raises:
            UnboundSection: If the position is not registered
            TypeError: If the value does not fit the column's value type
        """
        column = self._by_position(position)
        self._cells[position] = coerce_value(value, column.value_type)

    # =========================================================================
    # Typed access
    # =========================================================================

    def get_value(self, key: ColumnKey) -> Any:
        return self.get(self.column(key).position)

    def set_value(self, key: ColumnKey, value: Any) -> None:
        self.set(self.column(key).position, value)

    def set_text(self, key: ColumnKey, text: Optional[str]) -> None:
        """
        Parse ``text`` as the column's value type and store it.

        Raises:
            MalformedCell: If the text does not parse; the cell is left unchanged
            MissingPrerequisite: If a spectra reference cannot be resolved
        """
        column = self.column(key)
        self._cells[column.position] = parse_cell(
            text,
            column.value_type,
            section=self.section,
            runs=self.runs,
            column=column.header,
        )

    def get_text(self, key: ColumnKey) -> str:
        """Rendered cell text of a column."""
        column = self.column(key)
        return render_cell(self._cells.get(column.position, MISSING), column.value_type)

    def append(self, key: ColumnKey, item: Any) -> SplitList:
        """
        Append one item to a list cell, creating the list on first append.

        Returns:
            The updated list value

        Raises:
            TypeError: If the column is not a list column or the item has the wrong kind
        """
        column = self.column(key)
        value_type = column.value_type
        if not value_type.is_list:
            raise TypeError(f"Column '{column.header}' holds {value_type.name}, not a list")
        new_item = coerce_value([item], value_type)[0]
        current = self._cells.get(column.position, MISSING)
        if current is MISSING:
            current = SplitList(value_type.delimiter)
            self._cells[column.position] = current
        current.append(new_item)
        return current

    # =========================================================================
    # Rendering
    # =========================================================================

    def cells(self) -> List[str]:
        """Rendered cells in display order."""
        return [
            render_cell(self._cells.get(position, MISSING), column.value_type)
            for position, column in self.registry.columns.items()
        ]

    def render(self) -> str:
        """Data line: section prefix, then every cell, tab-separated."""
        return '\t'.join([self.section.prefix] + self.cells())

    def to_dict(self) -> Dict[str, str]:
        """Rendered cells keyed by header, in display order."""
        return dict(zip(self.registry.headers(), self.cells()))

    def __str__(self) -> str:
        return self.render()

    def __repr__(self) -> str:
        filled = sum(1 for value in self._cells.values() if value is not MISSING)
        return f"Record({self.section.name}, {filled}/{len(self.registry)} cells set)"

    def __eq__(self, other) -> bool:
        if not isinstance(other, Record):
            return NotImplemented
        return self.registry is other.registry and self.cells() == other.cells()

    __hash__ = None

    # =========================================================================
    # Loading
    # =========================================================================

    @classmethod
    def from_cells(
        cls,
        registry: ColumnRegistry,
        cells: Sequence[str],
        runs: Optional[Mapping[int, MsRun]] = None,
    ) -> Tuple[Record, List[Exception]]:
        """
        Build a record from cell texts given in display order.

        Args:
            registry: Registry describing the columns
            cells: One text per registered column (no section prefix)
            runs: Declared runs for spectra-reference resolution

        Returns:
            (record, errors) where errors lists MalformedCell and
            MissingPrerequisite diagnostics; the affected cells stay missing

        Raises:
            MalformedCell: If the number of cells does not match the registry
        """
        columns = list(registry.columns.values())
        if len(cells) != len(columns):
            raise MalformedCell(
                '\t'.join(cells), 'LINE',
                reason=f"expected {len(columns)} cells for {registry.section.name}, got {len(cells)}",
            )

        record = cls(registry, runs)
        errors: List[Exception] = []
        for column, text in zip(columns, cells):
            try:
                record.set_text(column, text)
            except (MalformedCell, MissingPrerequisite) as e:
                errors.append(e)

        if errors:
            logger.warning(
                f"{len(errors)} of {len(columns)} cells could not be loaded "
                f"in {registry.data_section.name} row"
            )
        return record, errors

    @classmethod
    def from_line(
        cls,
        registry: ColumnRegistry,
        line: str,
        runs: Optional[Mapping[int, MsRun]] = None,
    ) -> Tuple[Record, List[Exception]]:
        """
        Build a record from a full data line (``PEP<TAB>...``).

        Raises:
            MalformedCell: If the prefix is not the registry's data prefix or the
                cell count is wrong
        """
        parts = line.rstrip('\r\n').split('\t')
        prefix = parts[0].strip()
        if prefix != registry.data_section.prefix:
            raise MalformedCell(
                line.rstrip('\r\n'), 'LINE',
                reason=f"expected prefix {registry.data_section.prefix}, got '{prefix}'",
            )
        return cls.from_cells(registry, parts[1:], runs)
