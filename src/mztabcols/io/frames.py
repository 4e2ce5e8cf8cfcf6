"""
Record <-> pandas DataFrame materialisation.

Rows of one section are often easier to inspect or aggregate as a table. This
module converts a list of records into a DataFrame whose columns are the
registry headers in display order, and back.

Column dtypes:
    - INTEGER and DOUBLE columns use the nullable ``Float64`` dtype: missing
      cells are ``pd.NA`` while a stored ``NaN`` stays ``NaN``
      (INTEGER columns stay float so that both kinds of value fit)
    - every other column holds the rendered cell text, missing cells None

Converting back parses each cell through the codec, so list, parameter and
modification columns round-trip through their text form. In plain ``float64``
columns (frames built elsewhere) ``NaN`` can only mean missing. Malformed cells
are reported, never dropped silently.

Examples:
    >>> from mztabcols.io.frames import records_to_frame, frame_to_records
    >>> df = records_to_frame(records)
    >>> df['charge'].mean()
    2.5
    >>> restored, errors = frame_to_records(registry, df)
"""

from __future__ import annotations

import logging
import math
from typing import Any, List, Mapping, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from mztabcols.core.codec import render_cell
from mztabcols.core.elements import MsRun
from mztabcols.core.errors import MalformedCell, MissingPrerequisite, UnboundSection
from mztabcols.core.record import Record
from mztabcols.core.registry import ColumnRegistry
from mztabcols.core.values import ValueType, is_missing

__all__ = ['records_to_frame', 'frame_to_records']

logger = logging.getLogger(__name__)


def _numeric_array(values: List[Any]) -> pd.arrays.FloatingArray:
    """Masked float array; the mask marks missing cells, NaN values stay unmasked."""
    mask = np.array([is_missing(v) for v in values], dtype=bool)
    data = np.array(
        [np.nan if missing else float(v) for v, missing in zip(values, mask)],
        dtype=np.float64,
    )
    return pd.arrays.FloatingArray(data, mask)


def records_to_frame(
    records: Sequence[Record],
    registry: Optional[ColumnRegistry] = None,
) -> pd.DataFrame:
    """
    Tabulate records of one registry.

    Args:
        records: Records bound to the same registry
        registry: Registry giving the columns; defaults to the first record's.
            Required when ``records`` is empty.

    Returns:
        DataFrame with one row per record and one column per header

    Raises:
        ValueError: If records are bound to different registries, or no
            registry can be determined
    """
    if registry is None:
        if not records:
            raise ValueError("Cannot infer columns from an empty record list; pass registry")
        registry = records[0].registry
    for record in records:
        if record.registry is not registry:
            raise ValueError("All records must be bound to the same registry")

    data = {}
    for position, column in registry.columns.items():
        values = [record.get(position) for record in records]
        if column.value_type.is_numeric:
            data[column.header] = pd.Series(_numeric_array(values))
        else:
            data[column.header] = pd.Series(
                [None if is_missing(v) or v == [] else render_cell(v, column.value_type)
                 for v in values],
                dtype=object,
            )
    return pd.DataFrame(data, columns=registry.headers())


def _cell_text(value: Any, value_type: ValueType, nan_is_missing: bool) -> Optional[str]:
    if value is None or value is pd.NA:
        return None
    if isinstance(value, (np.integer, np.floating)):
        value = value.item()
    if isinstance(value, float):
        if math.isnan(value) and nan_is_missing:
            return None
        if value_type is ValueType.INTEGER and value.is_integer():
            return str(int(value))
        return render_cell(value, ValueType.DOUBLE)
    return str(value)


def frame_to_records(
    registry: ColumnRegistry,
    frame: pd.DataFrame,
    runs: Optional[Mapping[int, MsRun]] = None,
) -> Tuple[List[Record], List[Exception]]:
    """
    Rebuild records from a DataFrame produced by :func:`records_to_frame`.

    Frame columns are matched to registry columns by header (case-insensitive).
    Registry columns absent from the frame stay missing.

    Returns:
        (records, errors) with one record per frame row; ``errors`` collects
        MalformedCell and MissingPrerequisite diagnostics of every row

    Raises:
        UnboundSection: If the frame has a column the registry does not know
    """
    matched = []
    for offset, header in enumerate(frame.columns):
        column = registry.find_by_header(str(header))
        if column is None:
            raise UnboundSection(
                f"Frame column '{header}' is not registered in {registry.section.name}"
            )
        series = frame.iloc[:, offset]
        # only nullable dtypes can tell a NaN value from a missing cell
        nan_is_missing = not isinstance(series.dtype, pd.api.extensions.ExtensionDtype)
        matched.append((column, series.array, nan_is_missing))

    records = []
    errors: List[Exception] = []
    for row in range(len(frame)):
        record = Record(registry, runs)
        for column, values, nan_is_missing in matched:
            text = _cell_text(values[row], column.value_type, nan_is_missing)
            try:
                record.set_text(column, text)
            except (MalformedCell, MissingPrerequisite) as e:
                errors.append(e)
        records.append(record)

    if errors:
        logger.warning(f"{len(errors)} cells could not be loaded from frame of {len(frame)} rows")
    return records, errors
