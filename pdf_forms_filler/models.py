"""Data models shared by the form rewrite engine."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional, Set

from pypdf.generic import DictionaryObject, IndirectObject


class FieldType(Enum):
    """AcroForm field types (/FT)."""
    BUTTON = "/Btn"
    TEXT = "/Tx"
    CHOICE = "/Ch"
    SIGNATURE = "/Sig"


# /Ff bit positions, 1-based as numbered in the PDF reference
RADIO_BIT = 16
PUSH_BUTTON_BIT = 17
RICH_TEXT_BIT = 26

OFF_STATE = "Off"


def flag_set(flags: int, bit: int) -> bool:
    """Check a 1-based /Ff bit."""
    return bool((flags >> (bit - 1)) & 1)


class UnsupportedValuePolicy(Enum):
    """What to do with a value supplied for a signature or push button."""
    IGNORE = "ignore"
    WARN = "warn"
    ERROR = "error"


class DuplicateNamePolicy(Enum):
    """What to do when a qualified name matches more than one field."""
    APPLY_ALL = "apply_all"
    FIRST = "first"
    ERROR = "error"


@dataclass(frozen=True)
class RichText:
    """Text field value carrying both a plain (/V) and rich (/RV) string."""
    plain: str
    rich: Optional[str] = None

    @property
    def rich_value(self) -> str:
        return self.plain if self.rich is None else self.rich


@dataclass(frozen=True)
class InheritedProperties:
    """Inheritable field attributes passed down from ancestor fields."""
    field_type: Optional[str] = None  # /FT
    flags: Optional[int] = None  # /Ff
    default_appearance: Optional[str] = None  # /DA
    options: Any = None  # /Opt array


# Field variants, resolved once per node from (own ?? inherited) attributes

@dataclass(frozen=True)
class ButtonField:
    kind = "button"
    flags: int = 0

    @property
    def is_push_button(self) -> bool:
        return flag_set(self.flags, PUSH_BUTTON_BIT)

    @property
    def is_radio(self) -> bool:
        return flag_set(self.flags, RADIO_BIT)


@dataclass(frozen=True)
class TextField:
    kind = "text"
    flags: int = 0
    default_appearance: Optional[str] = None

    @property
    def is_rich(self) -> bool:
        return flag_set(self.flags, RICH_TEXT_BIT)


@dataclass(frozen=True)
class ChoiceField:
    kind = "choice"
    flags: int = 0
    default_appearance: Optional[str] = None


@dataclass(frozen=True)
class SignatureField:
    kind = "signature"


@dataclass(frozen=True)
class UnknownField:
    kind = "unknown"
    field_type: Optional[str] = None


@dataclass(frozen=True)
class FieldReference:
    """One child of a rewritten kids/fields collection.

    ``existing`` children were already indirect and must be re-fetched
    before they are rewritten; the others were inline and have been given a
    freshly allocated number, with their content held in ``value``.
    """
    ref: IndirectObject
    existing: bool
    value: Optional[DictionaryObject] = None


@dataclass
class FillReport:
    """Outcome of one fill() call."""
    filled: List[str] = field(default_factory=list)
    ignored: List[str] = field(default_factory=list)
    unmatched: List[str] = field(default_factory=list)
    appearances: int = 0
    _seen: Set[str] = field(default_factory=set, repr=False, compare=False)

    def mark_filled(self, name: str) -> None:
        self.filled.append(name)
        self._seen.add(name)

    def mark_ignored(self, name: str) -> None:
        self.ignored.append(name)
        self._seen.add(name)

    def seen(self, name: str) -> bool:
        return name in self._seen
