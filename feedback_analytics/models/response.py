"""
Tagged representation of a raw feedback response value.

Feedback forms hand back numbers, numeric strings or ``{"score": n}``
objects. Each shape is captured once, when the snapshot is built, so the
aggregation views only ever see a rating or ``None``.
"""
import math
import numbers
import re
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union

# Leading numeric prefix, the way a lenient float parse reads "8/10" as 8
_LEADING_FLOAT = re.compile(r'\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)')


def _finite(value) -> Optional[float]:
    value = float(value)
    return value if math.isfinite(value) else None


def _is_number(value) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


@dataclass(frozen=True)
class Numeric:
    value: float

    def rating(self) -> Optional[float]:
        return _finite(self.value)

    def to_raw(self):
        return self.value


@dataclass(frozen=True)
class Textual:
    raw: str

    def rating(self) -> Optional[float]:
        match = _LEADING_FLOAT.match(self.raw)
        if not match:
            return None
        return _finite(match.group(1))

    def to_raw(self):
        return self.raw


@dataclass(frozen=True)
class Scored:
    score: Any

    def rating(self) -> Optional[float]:
        if not _is_number(self.score):
            return None
        return _finite(self.score)

    def to_raw(self):
        return {'score': self.score}


@dataclass(frozen=True)
class Absent:
    def rating(self) -> Optional[float]:
        return None

    def to_raw(self):
        return None


ABSENT = Absent()

ResponseValue = Union[Numeric, Textual, Scored, Absent]


def classify_response(raw) -> ResponseValue:
    """Wrap *raw* in the matching response variant. Never raises."""
    if isinstance(raw, (Numeric, Textual, Scored, Absent)):
        return raw
    if _is_number(raw):
        return Numeric(raw)
    if isinstance(raw, str):
        return Textual(raw)
    if isinstance(raw, Mapping) and 'score' in raw:
        return Scored(raw['score'])
    return ABSENT
