"""
Values that live on the tapes, in memory cells and in the accumulator.

A value is either an integer (``Int``) or a single character (``Char``).
Arithmetic is partial:

    Int  + Int   -> Int        (wraps to signed 32-bit)
    Int  - Int   -> Int        (wraps to signed 32-bit)
    Char - Char  -> Int        (code point distance)
    anything else -> IncompatibleTypes

Comparisons against plain Python ints are only meaningful for ``Int``;
a ``Char`` is never equal to, less than or greater than an integer.
"""

from __future__ import annotations
from typing import Union

from .errors import IncompatibleTypes

__all__ = ['Value', 'Int', 'Char', 'INT_MIN', 'INT_MAX',
           'value_from_json', 'value_to_json']


INT_MIN = -(1 << 31)
INT_MAX = (1 << 31) - 1


def _wrap_i32(n: int) -> int:
    """Wrap an arbitrary Python int to signed 32-bit two's complement."""
    n &= 0xFFFFFFFF
    return n - (1 << 32) if n & 0x80000000 else n


class Value:
    """Base class for tape/memory values. Use ``Int`` or ``Char``."""

    __slots__ = ()

    def add(self, other: Value) -> Value:
        raise IncompatibleTypes(self, other, '+')

    def sub(self, other: Value) -> Value:
        raise IncompatibleTypes(self, other, '-')

    def is_zero(self) -> bool:
        return False

    def is_negative(self) -> bool:
        return False


class Int(Value):
    """Signed 32-bit integer value."""

    __slots__ = ('value',)

    def __init__(self, value: int):
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"Int expects an int, got {value!r}")
        if not INT_MIN <= value <= INT_MAX:
            raise ValueError(f"Int out of 32-bit range: {value}")
        self.value = value

    def add(self, other: Value) -> Value:
        if isinstance(other, Int):
            return Int(_wrap_i32(self.value + other.value))
        raise IncompatibleTypes(self, other, '+')

    def sub(self, other: Value) -> Value:
        if isinstance(other, Int):
            return Int(_wrap_i32(self.value - other.value))
        raise IncompatibleTypes(self, other, '-')

    def is_zero(self) -> bool:
        return self.value == 0

    def is_negative(self) -> bool:
        return self.value < 0

    # --- comparisons (against Int or plain int) ---

    def _other(self, other):
        if isinstance(other, Int):
            return other.value
        if isinstance(other, int) and not isinstance(other, bool):
            return other
        return None

    def __eq__(self, other):
        rhs = self._other(other)
        if rhs is None:
            return NotImplemented if not isinstance(other, Value) else False
        return self.value == rhs

    def __lt__(self, other):
        rhs = self._other(other)
        return False if rhs is None else self.value < rhs

    def __le__(self, other):
        rhs = self._other(other)
        return False if rhs is None else self.value <= rhs

    def __gt__(self, other):
        rhs = self._other(other)
        return False if rhs is None else self.value > rhs

    def __ge__(self, other):
        rhs = self._other(other)
        return False if rhs is None else self.value >= rhs

    def __hash__(self):
        return hash(('Int', self.value))

    def __repr__(self):
        return f"Int({self.value})"

    def __str__(self):
        return str(self.value)


class Char(Value):
    """Single character value."""

    __slots__ = ('value',)

    def __init__(self, value: str):
        if not isinstance(value, str) or len(value) != 1:
            raise ValueError(f"Char expects a single character, got {value!r}")
        self.value = value

    def sub(self, other: Value) -> Value:
        if isinstance(other, Char):
            return Int(ord(self.value) - ord(other.value))
        raise IncompatibleTypes(self, other, '-')

    def __eq__(self, other):
        if isinstance(other, Char):
            return self.value == other.value
        if isinstance(other, (Value, int)):
            return False
        return NotImplemented

    # A Char is never ordered against an integer.
    def __lt__(self, other):
        return False

    __le__ = __gt__ = __ge__ = __lt__

    def __hash__(self):
        return hash(('Char', self.value))

    def __repr__(self):
        return f"Char({self.value!r})"

    def __str__(self):
        return self.value


# ──────────────────────────────────────────────
# JSON interchange
# ──────────────────────────────────────────────

def value_from_json(raw: Union[int, str]) -> Value:
    """JSON integer -> Int, one-character JSON string -> Char."""
    if isinstance(raw, bool):
        raise ValueError(f"Not a value: {raw!r}")
    if isinstance(raw, int):
        return Int(raw)
    if isinstance(raw, str):
        return Char(raw)
    raise ValueError(f"Not a value: {raw!r}")


def value_to_json(value: Value) -> Union[int, str]:
    return value.value
