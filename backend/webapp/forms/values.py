"""Typed field values — the closed set of shapes a rule can consume.

Raw request values arrive untyped (strings, numbers, dicts, None). Each rule
declares the ValueKind it needs; the matching coercer is picked once when the
rule is built, so per-call work is a single coercion plus the check itself.
"""

import json
import re
from enum import Enum
from typing import Any, Callable, Optional

from pydantic import BaseModel, ConfigDict

_INT_PATTERN = re.compile(r"^[+-]?\d+$")


class ValueKind(str, Enum):
    TEXT = "text"
    INTEGER = "integer"
    MAPPING = "mapping"


class TypedValue(BaseModel):
    """A raw value plus its interpretation under one ValueKind.

    ``parsed`` is False when the raw value is present but could not be read
    as the requested kind (e.g. "abc" as an integer, broken JSON as a mapping).
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    kind: ValueKind
    raw: Any = None
    text: str = ""
    number: Optional[int] = None
    mapping: Optional[dict] = None
    parsed: bool = True

    @property
    def is_null(self) -> bool:
        return self.raw is None

    @property
    def is_blank(self) -> bool:
        return self.raw is None or not self.text.strip()


def _text_of(raw: Any) -> str:
    return "" if raw is None else str(raw)


def as_text(raw: Any) -> TypedValue:
    return TypedValue(kind=ValueKind.TEXT, raw=raw, text=_text_of(raw))


def as_integer(raw: Any) -> TypedValue:
    text = _text_of(raw)
    if raw is None:
        return TypedValue(kind=ValueKind.INTEGER, raw=raw, text=text)
    if isinstance(raw, bool) or not _INT_PATTERN.match(text.strip()):
        return TypedValue(kind=ValueKind.INTEGER, raw=raw, text=text, parsed=False)
    try:
        number = int(text.strip())
    except ValueError:
        # past the interpreter's integer string conversion limit
        return TypedValue(kind=ValueKind.INTEGER, raw=raw, text=text, parsed=False)
    return TypedValue(kind=ValueKind.INTEGER, raw=raw, text=text, number=number)


def as_mapping(raw: Any) -> TypedValue:
    """Read a language -> text mapping from a dict or a JSON object string.

    Anything that is not an object of string (or null) values is treated as an
    empty mapping with ``parsed=False``.
    """
    text = _text_of(raw)
    source = raw
    if isinstance(raw, (str, bytes)):
        try:
            source = json.loads(raw)
        except ValueError:
            source = None

    if not isinstance(source, dict) or not all(
        v is None or isinstance(v, str) for v in source.values()
    ):
        return TypedValue(
            kind=ValueKind.MAPPING, raw=raw, text=text, mapping={}, parsed=raw is None
        )

    cleaned = {str(k): v.strip() for k, v in source.items() if v is not None and v.strip()}
    return TypedValue(kind=ValueKind.MAPPING, raw=raw, text=text, mapping=cleaned)


COERCERS: dict[ValueKind, Callable[[Any], TypedValue]] = {
    ValueKind.TEXT: as_text,
    ValueKind.INTEGER: as_integer,
    ValueKind.MAPPING: as_mapping,
}


def coercer_for(kind: ValueKind) -> Callable[[Any], TypedValue]:
    return COERCERS[kind]
