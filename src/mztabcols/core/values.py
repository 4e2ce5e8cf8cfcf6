"""
Typed cell values.

Each column declares one member of the closed :class:`ValueType` enumeration.
Cells hold either a Python value of the matching kind or the :data:`MISSING`
sentinel, which renders as the literal token ``null``.

    ValueType            Python value                  List delimiter
    ------------------   ---------------------------   --------------
    STRING               str                           -
    INTEGER              int                           -
    DOUBLE               float (NaN / +-inf allowed)   -
    BOOLEAN              MzBoolean                     -
    URI                  str (absolute URI)            -
    PARAM                Param                         -
    RELIABILITY          Reliability                   -
    STRING_LIST          SplitList[str]                ','
    STRING_BAR_LIST      SplitList[str]                '|'
    GO_TERM_LIST         SplitList[str]                ','
    DOUBLE_LIST          SplitList[float]              '|'
    PARAM_LIST           SplitList[Param]              '|'
    MODIFICATION_LIST    SplitList[Modification]       ','
    SPECTRA_REF_LIST     SplitList[SpectraRef]         '|'

The delimiter belongs to the value type, not to a particular cell: bar lists
hold alternative or repeated readings (scores, retention times), comma lists
hold conjunctive readings (modifications, ambiguity members).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum, auto
from typing import Iterable, Optional

from mztabcols.core.elements import MsRun

__all__ = [
    'MISSING',
    'NULL_TOKEN',
    'BAR',
    'COMMA',
    'ValueType',
    'MzBoolean',
    'Reliability',
    'Param',
    'cv_param',
    'user_param',
    'ModificationType',
    'Modification',
    'SpectraRef',
    'SplitList',
    'is_missing',
]

NULL_TOKEN = 'null'
BAR = '|'
COMMA = ','


class _Missing(Enum):
    """Singleton type of the missing-value sentinel."""
    MISSING = NULL_TOKEN

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return 'MISSING'


MISSING = _Missing.MISSING
"""Value of an absent cell. Renders as ``null``."""


def is_missing(value) -> bool:
    """True for the missing sentinel and for None."""
    return value is None or value is MISSING


class ValueType(Enum):
    """Closed set of cell value types."""
    STRING = auto()
    INTEGER = auto()
    DOUBLE = auto()
    BOOLEAN = auto()
    URI = auto()
    PARAM = auto()
    RELIABILITY = auto()
    STRING_LIST = auto()
    STRING_BAR_LIST = auto()
    GO_TERM_LIST = auto()
    DOUBLE_LIST = auto()
    PARAM_LIST = auto()
    MODIFICATION_LIST = auto()
    SPECTRA_REF_LIST = auto()

    @property
    def is_list(self) -> bool:
        return self in _LIST_LAYOUT

    @property
    def delimiter(self) -> Optional[str]:
        """Fixed list delimiter, or None for scalar types."""
        layout = _LIST_LAYOUT.get(self)
        return layout[0] if layout else None

    @property
    def item_type(self) -> Optional[ValueType]:
        """Scalar type of list items, or None for scalar types and rich items."""
        layout = _LIST_LAYOUT.get(self)
        return layout[1] if layout else None

    @property
    def is_numeric(self) -> bool:
        return self in (ValueType.INTEGER, ValueType.DOUBLE)


# list type -> (delimiter, item scalar type or None for rich items)
_LIST_LAYOUT = {
    ValueType.STRING_LIST: (COMMA, ValueType.STRING),
    ValueType.STRING_BAR_LIST: (BAR, ValueType.STRING),
    ValueType.GO_TERM_LIST: (COMMA, ValueType.STRING),
    ValueType.DOUBLE_LIST: (BAR, ValueType.DOUBLE),
    ValueType.PARAM_LIST: (BAR, ValueType.PARAM),
    ValueType.MODIFICATION_LIST: (COMMA, None),
    ValueType.SPECTRA_REF_LIST: (BAR, None),
}


class MzBoolean(Enum):
    """Boolean cell value; together with MISSING this is a tri-state."""
    TRUE = '1'
    FALSE = '0'

    def __bool__(self) -> bool:
        return self is MzBoolean.TRUE

    @classmethod
    def of(cls, flag: bool) -> MzBoolean:
        return cls.TRUE if flag else cls.FALSE


class Reliability(IntEnum):
    """Identification reliability tier."""
    HIGH = 1
    MEDIUM = 2
    POOR = 3

    @property
    def label(self) -> str:
        return f"{self.name.lower()} reliability"


@dataclass(frozen=True)
class Param:
    """
    Bracketed parameter ``[cv_label, accession, name, value]``.

    A parameter with a CV label is a controlled-vocabulary parameter; without
    one it is a user parameter. Empty fields are stored as None.

    Examples:
        >>> cv_param('MS', 'MS:1001207', 'Mascot')
        Param(cv_label='MS', accession='MS:1001207', name='Mascot', value=None)
        >>> user_param('my score', '0.93').is_cv_param
        False
    """

    cv_label: Optional[str] = None
    accession: Optional[str] = None
    name: Optional[str] = None
    value: Optional[str] = None

    def __post_init__(self):
        for attr in ('cv_label', 'accession', 'name', 'value'):
            raw = getattr(self, attr)
            if raw is None:
                continue
            text = str(raw).strip()
            object.__setattr__(self, attr, text or None)

    @property
    def is_cv_param(self) -> bool:
        return self.cv_label is not None

    def __str__(self) -> str:
        fields = [
            self.cv_label or '',
            self.accession or '',
            _quote(self.name or ''),
            _quote(self.value or ''),
        ]
        return '[' + ', '.join(fields) + ']'


def _quote(text: str) -> str:
    return f'"{text}"' if ',' in text else text


def cv_param(cv_label: str, accession: str, name: str, value: Optional[str] = None) -> Param:
    """Controlled-vocabulary parameter."""
    if not cv_label:
        raise ValueError("CV parameter needs a CV label")
    return Param(cv_label, accession, name, value)


def user_param(name: str, value: Optional[str] = None) -> Param:
    """User (free) parameter without CV label or accession."""
    return Param(None, None, name, value)


class ModificationType(Enum):
    """Modification identifier namespace."""
    MOD = 'MOD'
    UNIMOD = 'UNIMOD'
    CHEMMOD = 'CHEMMOD'
    SUBST = 'SUBST'
    NEUTRAL_LOSS = 'NEUTRAL_LOSS'


@dataclass(frozen=True)
class Modification:
    """
    A position-tagged modification or substitution.

    Attributes:
        type: Identifier namespace (MOD, UNIMOD, CHEMMOD, SUBST)
        accession: Identifier within the namespace ("00412", "35", "+159.93")
        positions: Ordered (position, reliability param or None) pairs;
            more than one pair means the site is ambiguous
        neutral_loss: Optional neutral-loss parameter. A modification of type
            NEUTRAL_LOSS carries only this parameter.

    Examples:
        >>> m = Modification(ModificationType.MOD, '00412', ((3, None), (4, None)))
        >>> m.position_numbers
        (3, 4)
    """

    type: ModificationType
    accession: Optional[str] = None
    positions: tuple = ()
    neutral_loss: Optional[Param] = None

    def __post_init__(self):
        pairs = []
        for item in self.positions:
            if isinstance(item, int):
                pairs.append((item, None))
            else:
                position, param = item
                pairs.append((int(position), param))
        object.__setattr__(self, 'positions', tuple(pairs))
        if self.type is ModificationType.NEUTRAL_LOSS:
            if self.neutral_loss is None:
                raise ValueError("NEUTRAL_LOSS modification needs a neutral_loss parameter")
        elif not self.accession:
            raise ValueError(f"{self.type.value} modification needs an accession")

    @property
    def position_numbers(self) -> tuple:
        return tuple(position for position, _ in self.positions)

    @property
    def is_ambiguous(self) -> bool:
        return len(self.positions) > 1

    def __str__(self) -> str:
        if self.type is ModificationType.NEUTRAL_LOSS:
            return str(self.neutral_loss)
        text = ''
        if self.positions:
            text = BAR.join(
                f"{position}{param if param is not None else ''}"
                for position, param in self.positions
            ) + '-'
        text += f"{self.type.value}:{self.accession}"
        if self.neutral_loss is not None:
            text += str(self.neutral_loss)
        return text


@dataclass(frozen=True)
class SpectraRef:
    """
    Reference to a spectrum in a run's spectrum file: ``ms_run[n]:<reference>``.

    Attributes:
        ms_run: Owning run (None until the run metadata is known)
        reference: Native spectrum reference, e.g. ``index=5`` or ``scan=1234``
    """

    ms_run: Optional[MsRun]
    reference: str


class SplitList(list):
    """
    List cell value that remembers its fixed delimiter.

    Compares equal to a plain list with the same items.
    """

    def __init__(self, delimiter: str, items: Iterable = ()):
        super().__init__(items)
        self.delimiter = delimiter

    def __repr__(self) -> str:
        return f"SplitList({self.delimiter!r}, {list.__repr__(self)})"
