"""
Cell codec: text <-> typed value.

Parsing and rendering are inverses up to normalisation:

    render(parse(text)) == normalize(text)     for every legal text
    parse(render(value)) == value              for every legal value

where normalisation trims whitespace around cells, list items and parameter
fields, writes doubles in their shortest round-trip form (``1`` -> ``1.0``) and
spells special numbers canonically (``NaN``, ``INF``, ``-INF``).

The missing token ``null`` (and blank text) parses to MISSING for every value
type; MISSING and empty lists render as ``null``. Any other text that does not
fit the declared type raises :class:`MalformedCell`; the codec never substitutes
a default.

Grammars:
    param          [cv_label, accession, name, value]       (fields may be empty,
                                                              commas quoted with "")
    modification   [pos[param]|pos[param]...-]TYPE:accession[neutral loss param]
                   or a bare [param] neutral loss (peptide/PSM only)
    spectra_ref    ms_run[n]:reference

Examples:
    >>> from mztabcols.core.codec import parse_cell, render_cell
    >>> from mztabcols.core.values import ValueType
    >>> parse_cell(' 2 ', ValueType.INTEGER)
    2
    >>> render_cell(parse_cell('[MS,MS:1001207,Mascot,]', ValueType.PARAM), ValueType.PARAM)
    '[MS, MS:1001207, Mascot, ]'
"""

from __future__ import annotations

import math
import re
from typing import Any, Mapping, Optional
from urllib.parse import urlparse

from mztabcols.core.elements import MsRun
from mztabcols.core.errors import MalformedCell, MissingPrerequisite
from mztabcols.core.section import Section
from mztabcols.core.values import (
    MISSING,
    NULL_TOKEN,
    BAR,
    ValueType,
    MzBoolean,
    Reliability,
    Param,
    ModificationType,
    Modification,
    SpectraRef,
    SplitList,
    is_missing,
)

__all__ = [
    'split_top_level',
    'parse_cell',
    'render_cell',
    'parse_param',
    'parse_modification',
    'parse_spectra_ref',
    'coerce_value',
]

_INTEGER_RE = re.compile(r'^[+-]?\d+$')
_DOUBLE_RE = re.compile(r'^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?$')
_GO_TERM_RE = re.compile(r'^GO:\d{7}$')
_POSITION_RE = re.compile(r'^(?P<position>\d+)(?P<param>\[.*\])?$', re.DOTALL)
_MOD_TYPE_RE = re.compile(r'(?P<type>UNIMOD|CHEMMOD|SUBST|MOD):')
_ACCESSION_PATTERNS = {
    ModificationType.MOD: re.compile(r'^\d+$'),
    ModificationType.UNIMOD: re.compile(r'^\d+$'),
    ModificationType.CHEMMOD: re.compile(r'^(?:[+-]\d+(?:\.\d+)?|[A-Za-z][A-Za-z0-9+-]*)$'),
    ModificationType.SUBST: re.compile(r'^[A-Z]+$'),
}
_SPECTRA_REF_RE = re.compile(r'^ms_run\[(?P<index>\d+)\]:(?P<reference>\S.*)$')

# Sections whose modification cells may carry neutral losses
_NEUTRAL_LOSS_SECTIONS = (Section.Peptide, Section.PSM)


def split_top_level(text: str, delimiter: str) -> list[str]:
    """
    Split on ``delimiter`` outside square brackets and double quotes.

    Examples:
        >>> split_top_level('3[MS, MS:1, p, 0.8]|4-MOD:00412,UNIMOD:35', ',')
        ['3[MS, MS:1, p, 0.8]|4-MOD:00412', 'UNIMOD:35']
    """
    parts = []
    depth = 0
    quoted = False
    start = 0
    for i, char in enumerate(text):
        if char == '"':
            quoted = not quoted
        elif quoted:
            continue
        elif char == '[':
            depth += 1
        elif char == ']':
            depth = max(depth - 1, 0)
        elif char == delimiter and depth == 0:
            parts.append(text[start:i])
            start = i + 1
    parts.append(text[start:])
    return parts


# =============================================================================
# Scalars
# =============================================================================

def _parse_integer(text: str) -> int:
    if not _INTEGER_RE.match(text):
        raise MalformedCell(text, ValueType.INTEGER, reason="not an integer")
    return int(text)


def _parse_double(text: str) -> float:
    special = text.upper()
    if special == 'NAN':
        return math.nan
    if special in ('INF', '+INF'):
        return math.inf
    if special == '-INF':
        return -math.inf
    if not _DOUBLE_RE.match(text):
        raise MalformedCell(text, ValueType.DOUBLE, reason="not a number")
    return float(text)


def _render_double(value: float) -> str:
    if math.isnan(value):
        return 'NaN'
    if math.isinf(value):
        return 'INF' if value > 0 else '-INF'
    return repr(float(value))


def _parse_boolean(text: str) -> MzBoolean:
    token = text.lower()
    if token in ('1', 'true'):
        return MzBoolean.TRUE
    if token in ('0', 'false'):
        return MzBoolean.FALSE
    raise MalformedCell(text, ValueType.BOOLEAN, reason="expected 0 or 1")


def _parse_reliability(text: str) -> Reliability:
    try:
        return Reliability(int(text))
    except ValueError:
        raise MalformedCell(text, ValueType.RELIABILITY, reason="expected 1, 2 or 3")


def _parse_uri(text: str) -> str:
    if any(char.isspace() for char in text):
        raise MalformedCell(text, ValueType.URI, reason="whitespace in URI")
    parsed = urlparse(text)
    if not parsed.scheme or not (parsed.netloc or parsed.path):
        raise MalformedCell(text, ValueType.URI, reason="URI needs a scheme and a location")
    return text


def _parse_go_term(text: str) -> str:
    if not _GO_TERM_RE.match(text):
        raise MalformedCell(text, ValueType.GO_TERM_LIST, reason="expected GO:nnnnnnn")
    return text


# =============================================================================
# Parameters, modifications, spectra references
# =============================================================================

def _unquote(text: str) -> str:
    text = text.strip()
    if len(text) >= 2 and text[0] == '"' and text[-1] == '"':
        return text[1:-1].strip()
    return text


def parse_param(text: str) -> Param:
    """
    Parse ``[cv_label, accession, name, value]``.

    Unquoted commas beyond the fourth field are taken to be part of the name.

    Raises:
        MalformedCell: If the text is not a bracketed 4-tuple
    """
    text = text.strip()
    if len(text) < 2 or text[0] != '[' or text[-1] != ']':
        raise MalformedCell(text, ValueType.PARAM, reason="parameter must be enclosed in []")
    fields = split_top_level(text[1:-1], ',')
    if len(fields) < 4:
        raise MalformedCell(
            text, ValueType.PARAM, reason=f"expected 4 fields, found {len(fields)}"
        )
    if len(fields) > 4:
        fields = fields[:2] + [','.join(fields[2:-1])] + fields[-1:]
    cv_label, accession, name, value = (_unquote(field) for field in fields)
    return Param(cv_label, accession, name, value)


def _parse_positions(text: str, source: str) -> tuple:
    pairs = []
    for item in split_top_level(text, BAR):
        match = _POSITION_RE.match(item.strip())
        if not match:
            raise MalformedCell(
                source, ValueType.MODIFICATION_LIST, reason=f"bad position '{item}'"
            )
        param = parse_param(match.group('param')) if match.group('param') else None
        pairs.append((int(match.group('position')), param))
    return tuple(pairs)


def _find_type_token(text: str) -> Optional[re.Match]:
    """First MOD/UNIMOD/CHEMMOD/SUBST token at bracket depth 0, at start or after '-'."""
    depth = 0
    for i, char in enumerate(text):
        if char == '[':
            depth += 1
        elif char == ']':
            depth = max(depth - 1, 0)
        elif depth == 0 and (i == 0 or text[i - 1] == '-'):
            match = _MOD_TYPE_RE.match(text, i)
            if match:
                return match
    return None


def parse_modification(text: str, section: Optional[Section] = None) -> Modification:
    """
    Parse one modification.

    Args:
        text: Modification text, e.g. ``3|4-MOD:00412`` or ``UNIMOD:35``
        section: Section of the owning column. Neutral losses are only legal
            for Peptide and PSM; None disables section checks.

    Raises:
        MalformedCell: If the text does not follow the modification grammar
    """
    text = text.strip()
    section = section.to_data_section() if section is not None else None
    allows_neutral_loss = section is None or section in _NEUTRAL_LOSS_SECTIONS

    if text.startswith('['):
        if not allows_neutral_loss:
            raise MalformedCell(
                text, ValueType.MODIFICATION_LIST,
                reason=f"neutral losses are not allowed in the {section.name} section",
            )
        return Modification(ModificationType.NEUTRAL_LOSS, neutral_loss=parse_param(text))

    match = _find_type_token(text)
    if match is None:
        raise MalformedCell(text, ValueType.MODIFICATION_LIST, reason="no modification type")

    positions = ()
    if match.start() > 0:
        position_text = text[:match.start() - 1]
        if not position_text:
            raise MalformedCell(text, ValueType.MODIFICATION_LIST, reason="empty position list")
        positions = _parse_positions(position_text, text)

    mod_type = ModificationType(match.group('type'))
    rest = text[match.end():]
    neutral_loss = None
    bracket = rest.find('[')
    if bracket >= 0:
        if not allows_neutral_loss:
            raise MalformedCell(
                text, ValueType.MODIFICATION_LIST,
                reason=f"neutral losses are not allowed in the {section.name} section",
            )
        neutral_loss = parse_param(rest[bracket:])
        rest = rest[:bracket]
    accession = rest.strip()
    if not _ACCESSION_PATTERNS[mod_type].match(accession):
        raise MalformedCell(
            text, ValueType.MODIFICATION_LIST,
            reason=f"bad {mod_type.value} accession '{accession}'",
        )
    return Modification(mod_type, accession, positions, neutral_loss)


def parse_spectra_ref(text: str, runs: Optional[Mapping[int, MsRun]]) -> SpectraRef:
    """
    Parse ``ms_run[n]:reference``.

    Args:
        text: Spectra reference text
        runs: Declared runs by 1-based index

    Raises:
        MissingPrerequisite: If no run lookup was supplied or run n is not declared
        MalformedCell: If the text does not follow the grammar
    """
    text = text.strip()
    match = _SPECTRA_REF_RE.match(text)
    if not match:
        raise MalformedCell(
            text, ValueType.SPECTRA_REF_LIST, reason="expected ms_run[n]:reference"
        )
    if runs is None:
        raise MissingPrerequisite(
            f"Cannot resolve '{text}': no ms_run metadata supplied"
        )
    index = int(match.group('index'))
    run = runs.get(index)
    if run is None:
        raise MissingPrerequisite(f"Cannot resolve '{text}': ms_run[{index}] is not declared")
    return SpectraRef(run, match.group('reference').strip())


def _render_spectra_ref(ref: SpectraRef) -> str:
    if ref.ms_run is None:
        raise MissingPrerequisite(
            f"Cannot render spectra reference '{ref.reference}' before its ms_run is known"
        )
    return f"{ref.ms_run.reference}:{ref.reference}"


# =============================================================================
# Public entry points
# =============================================================================

_SCALAR_PARSERS = {
    ValueType.STRING: lambda text: text,
    ValueType.INTEGER: _parse_integer,
    ValueType.DOUBLE: _parse_double,
    ValueType.BOOLEAN: _parse_boolean,
    ValueType.URI: _parse_uri,
    ValueType.PARAM: parse_param,
    ValueType.RELIABILITY: _parse_reliability,
}


def _parse_item(
    text: str,
    value_type: ValueType,
    section: Optional[Section],
    runs: Optional[Mapping[int, MsRun]],
):
    if value_type is ValueType.MODIFICATION_LIST:
        return parse_modification(text, section)
    if value_type is ValueType.SPECTRA_REF_LIST:
        return parse_spectra_ref(text, runs)
    if value_type is ValueType.GO_TERM_LIST:
        return _parse_go_term(text)
    return _SCALAR_PARSERS[value_type.item_type](text)


def parse_cell(
    text: Optional[str],
    value_type: ValueType,
    *,
    section: Optional[Section] = None,
    runs: Optional[Mapping[int, MsRun]] = None,
    column: Optional[str] = None,
) -> Any:
    """
    Parse cell text as ``value_type``.

    Args:
        text: Raw cell text (None and blank text are treated as missing)
        value_type: Declared type of the column
        section: Owning section, used by modification grammar checks
        runs: Declared runs by index, needed for spectra references
        column: Column header, attached to MalformedCell for diagnostics

    Returns:
        Typed value or MISSING

    Raises:
        MalformedCell: If the text does not parse as value_type
        MissingPrerequisite: If a spectra reference cannot be resolved
    """
    if text is None:
        return MISSING
    text = str(text).strip()
    if not text or text == NULL_TOKEN:
        return MISSING

    try:
        if not value_type.is_list:
            return _SCALAR_PARSERS[value_type](text)

        items = SplitList(value_type.delimiter)
        for raw in split_top_level(text, value_type.delimiter):
            item = raw.strip()
            if not item or item == NULL_TOKEN:
                raise MalformedCell(text, value_type, reason="empty list item")
            try:
                items.append(_parse_item(item, value_type, section, runs))
            except MalformedCell as e:
                raise MalformedCell(text, value_type, reason=e.reason or str(e))
        return items
    except MalformedCell as e:
        raise e.with_column(column) if column and not e.column else e


def _render_item(item: Any, value_type: ValueType) -> str:
    if value_type is ValueType.SPECTRA_REF_LIST:
        return _render_spectra_ref(item)
    if value_type is ValueType.DOUBLE_LIST:
        return _render_double(item)
    return str(item)


def render_cell(value: Any, value_type: Optional[ValueType] = None) -> str:
    """
    Render a typed value as cell text.

    MISSING, None, blank text and empty lists render as ``null``.

    Raises:
        MissingPrerequisite: If a spectra reference has no owning run
    """
    if is_missing(value):
        return NULL_TOKEN
    if isinstance(value, list):
        if not value:
            return NULL_TOKEN
        delimiter = getattr(value, 'delimiter', None) or (
            value_type.delimiter if value_type is not None else BAR
        )
        item_type = value_type or ValueType.STRING_BAR_LIST
        if isinstance(value[0], SpectraRef):
            item_type = ValueType.SPECTRA_REF_LIST
        elif isinstance(value[0], float):
            item_type = ValueType.DOUBLE_LIST
        return delimiter.join(_render_item(item, item_type) for item in value)
    if isinstance(value, MzBoolean):
        return value.value
    if isinstance(value, Reliability):
        return str(int(value))
    if isinstance(value, float):
        return _render_double(value)
    if isinstance(value, str) and not value.strip():
        return NULL_TOKEN
    return str(value)


# =============================================================================
# Python-side value checks
# =============================================================================

_SCALAR_KINDS = {
    ValueType.STRING: (str,),
    ValueType.INTEGER: (int,),
    ValueType.DOUBLE: (float, int),
    ValueType.BOOLEAN: (MzBoolean, bool),
    ValueType.URI: (str,),
    ValueType.PARAM: (Param,),
    ValueType.RELIABILITY: (Reliability, int),
}

_RICH_ITEM_KINDS = {
    ValueType.MODIFICATION_LIST: (Modification,),
    ValueType.SPECTRA_REF_LIST: (SpectraRef,),
    ValueType.GO_TERM_LIST: (str,),
}


def _coerce_scalar(value: Any, value_type: ValueType) -> Any:
    kinds = _SCALAR_KINDS[value_type]
    if value_type.is_numeric and isinstance(value, bool):
        raise TypeError(f"{value_type.name} cell does not accept bool")
    if not isinstance(value, kinds):
        raise TypeError(
            f"{value_type.name} cell expects {' or '.join(k.__name__ for k in kinds)}, "
            f"got {type(value).__name__}"
        )
    if isinstance(value, str) and not value.strip():
        return MISSING
    if value_type is ValueType.DOUBLE:
        return float(value)
    if value_type is ValueType.BOOLEAN and isinstance(value, bool):
        return MzBoolean.of(value)
    if value_type is ValueType.RELIABILITY:
        return Reliability(value)
    if value_type is ValueType.URI:
        return _parse_uri(value.strip())
    return value


def coerce_value(value: Any, value_type: ValueType) -> Any:
    """
    Check a Python value against ``value_type`` and normalise it.

    None and blank text become MISSING; plain lists become SplitLists with the
    type's delimiter; ints become floats for DOUBLE; bools become MzBoolean.

    Raises:
        TypeError: If the value (or a list item) has the wrong kind
        ValueError: If a list item is blank text
    """
    if is_missing(value):
        return MISSING
    if not value_type.is_list:
        return _coerce_scalar(value, value_type)

    if isinstance(value, (str, bytes)) or not isinstance(value, (list, tuple)):
        raise TypeError(f"{value_type.name} cell expects a list, got {type(value).__name__}")
    items = SplitList(value_type.delimiter)
    for item in value:
        if value_type in _RICH_ITEM_KINDS:
            if not isinstance(item, _RICH_ITEM_KINDS[value_type]):
                raise TypeError(
                    f"{value_type.name} items must be "
                    f"{_RICH_ITEM_KINDS[value_type][0].__name__}, got {type(item).__name__}"
                )
            items.append(item)
        else:
            coerced = _coerce_scalar(item, value_type.item_type)
            if coerced is MISSING:
                raise ValueError(f"{value_type.name} items must not be blank")
            items.append(coerced)
    return items
