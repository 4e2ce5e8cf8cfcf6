"""
Logical position arithmetic.

A logical position is the textual address of a column inside one section's
registry. It is built from a two-digit, zero-padded base order followed by
optional suffix components, each zero-padded to three digits:

    Position      Column
    -----------   ----------------------------------------------
    "01"          accession
    "08"          best_search_engine_score (no suffix)
    "08001"       best_search_engine_score[1]
    "09001002"    search_engine_score[1]_ms_run[2]
    "11003"       num_psms_ms_run[3]
    "20002001"    protein_abundance_study_variable[2]
    "20002002"    protein_abundance_stdev_study_variable[2]

Because every component has a fixed width, plain string comparison of two
positions gives the same answer as comparing their numeric components in
order, so a registry kept sorted by position is also sorted for display.

Everything that depends on the base order goes through :func:`column_order`;
nothing else slices positions.
"""

from __future__ import annotations

from typing import Iterable, Optional

__all__ = [
    'ORDER_WIDTH',
    'SUFFIX_WIDTH',
    'MAX_ORDER',
    'MAX_SUFFIX',
    'format_order',
    'column_order',
    'make_position',
    'next_order',
]

ORDER_WIDTH = 2
SUFFIX_WIDTH = 3
MAX_ORDER = 10 ** ORDER_WIDTH - 1
MAX_SUFFIX = 10 ** SUFFIX_WIDTH - 1


def format_order(order: int | str) -> str:
    """
    Normalise a base order to its two-character form.

    Args:
        order: Integer order or its textual form ("7", "07")

    Returns:
        Zero-padded order, e.g. ``"07"``

    Raises:
        ValueError: If the order is not an integer within 0..99
    """
    try:
        value = int(str(order).strip())
    except ValueError:
        raise ValueError(f"Column order must be an integer, got '{order}'")
    if not 0 <= value <= MAX_ORDER:
        raise ValueError(f"Column order {value} outside 0..{MAX_ORDER}")
    return f"{value:0{ORDER_WIDTH}d}"


def column_order(position: str) -> str:
    """
    Extract the base order from a logical position.

    The base order is always the first two characters.

    Examples:
        >>> column_order("09001002")
        '09'
    """
    if len(position) < ORDER_WIDTH or not position[:ORDER_WIDTH].isdigit():
        raise ValueError(f"Malformed logical position: '{position}'")
    return position[:ORDER_WIDTH]


def make_position(order: int | str, suffixes: Iterable[Optional[int]] = ()) -> str:
    """
    Compose a logical position from a base order and suffix components.

    None components are skipped, so callers can pass optional parts directly.

    Raises:
        ValueError: If a component is negative or wider than three digits
    """
    parts = [format_order(order)]
    for component in suffixes:
        if component is None:
            continue
        if not 0 <= component <= MAX_SUFFIX:
            raise ValueError(
                f"Position suffix {component} outside 0..{MAX_SUFFIX}"
            )
        parts.append(f"{component:0{SUFFIX_WIDTH}d}")
    return ''.join(parts)


def next_order(positions: Iterable[str]) -> str:
    """
    One past the largest base order among ``positions``.

    Returns ``"01"`` for an empty registry.

    Raises:
        ValueError: If the next order would not fit in two digits
    """
    orders = [int(column_order(p)) for p in positions]
    return format_order(max(orders) + 1 if orders else 1)
