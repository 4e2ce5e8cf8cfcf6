"""
Exception hierarchy for the column model.

Registry errors (SchemaViolation) are raised immediately and leave the registry
unchanged. Cell errors (MalformedCell) carry enough context for a caller to log
them as validation diagnostics and keep going with the next cell.
"""

from __future__ import annotations

from typing import Any, Optional

__all__ = [
    'MzTabColumnError',
    'SchemaViolation',
    'UnboundSection',
    'MalformedCell',
    'MissingPrerequisite',
]


class MzTabColumnError(Exception):
    """Base class for all column-model errors."""
    pass


class SchemaViolation(MzTabColumnError):
    """Raised when a column registration would break the registry's invariants."""
    pass


class UnboundSection(MzTabColumnError):
    """Raised when a record or view is asked for a column its registry does not hold."""
    pass


class MalformedCell(MzTabColumnError, ValueError):
    """
    Raised when cell text does not parse as its column's declared type.

    Attributes:
        text: Offending cell text
        value_type: Expected value type
        column: Header of the column being parsed, when known
        reason: Short description of what went wrong
    """

    def __init__(
        self,
        text: str,
        value_type: Any,
        column: Optional[str] = None,
        reason: Optional[str] = None,
    ):
        self.text = text
        self.value_type = value_type
        self.column = column
        self.reason = reason
        super().__init__(self._format())

    def _format(self) -> str:
        type_name = getattr(self.value_type, 'name', self.value_type)
        where = f" in column '{self.column}'" if self.column else ""
        why = f": {self.reason}" if self.reason else ""
        return f"Cannot parse '{self.text}' as {type_name}{where}{why}"

    def with_column(self, column: str) -> MalformedCell:
        """Copy of this error annotated with the column header."""
        return MalformedCell(self.text, self.value_type, column, self.reason)


class MissingPrerequisite(MzTabColumnError):
    """Raised when an operation needs context (e.g. run metadata) that was not supplied."""
    pass
