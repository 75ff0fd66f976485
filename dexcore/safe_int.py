"""Safe integer wrapper for reserve and share arithmetic.

Pool math runs on unbounded Python ints, but the protocol still has to
reject the results a fixed-width ledger would reject:
- Subtraction underflow raises Underflow (a balance below its reserve)
- Division by zero raises DivisionByZero
- Reserves must fit in 112 bits
- Price accumulators wrap instead of overflowing

Usage pattern:
    from dexcore.safe_int import S

    def shares_for(amount: int, total_supply: int, reserve: int) -> int:
        return (S(amount) * total_supply // reserve).value
"""

from __future__ import annotations

import math

from dexcore.constants import UINT112_MAX, UINT256_MAX


class SafeIntError(ArithmeticError):
    """Base class for SafeInt arithmetic errors."""

    pass


class DivisionByZero(SafeIntError):
    """Division by zero."""

    pass


class Underflow(SafeIntError):
    """Subtraction would produce negative result."""

    pass


class Uint112Overflow(SafeIntError):
    """Value exceeds the uint112 reserve domain."""

    pass


class SafeInt:
    """Non-negative integer with checked arithmetic.

    Attributes:
        value: The underlying integer value (read-only)
    """

    __slots__ = ("_value",)
    _value: int

    def __init__(self, value: int | SafeInt) -> None:
        if isinstance(value, SafeInt):
            self._value = value._value
        elif isinstance(value, int) and not isinstance(value, bool):
            self._value = value
        else:
            raise TypeError(f"SafeInt requires int, got {type(value).__name__}")

    @property
    def value(self) -> int:
        """The underlying integer value."""
        return self._value

    def __repr__(self) -> str:
        return f"SafeInt({self._value})"

    def __str__(self) -> str:
        return str(self._value)

    def __hash__(self) -> int:
        return hash(self._value)

    # --- Arithmetic operations ---

    def __add__(self, other: SafeInt | int) -> SafeInt:
        return SafeInt(self._value + _extract_value(other))

    def __radd__(self, other: int) -> SafeInt:
        return SafeInt(other + self._value)

    def __sub__(self, other: SafeInt | int) -> SafeInt:
        """Subtract other from self.

        Raises:
            Underflow: If result would be negative
        """
        other_val = _extract_value(other)
        result = self._value - other_val
        if result < 0:
            raise Underflow(f"Underflow: {self._value} - {other_val} = {result}")
        return SafeInt(result)

    def __rsub__(self, other: int) -> SafeInt:
        result = other - self._value
        if result < 0:
            raise Underflow(f"Underflow: {other} - {self._value} = {result}")
        return SafeInt(result)

    def __mul__(self, other: SafeInt | int) -> SafeInt:
        return SafeInt(self._value * _extract_value(other))

    def __rmul__(self, other: int) -> SafeInt:
        return SafeInt(other * self._value)

    def __floordiv__(self, other: SafeInt | int) -> SafeInt:
        """Integer division, rounding toward zero for non-negative operands.

        Raises:
            DivisionByZero: If other is zero
        """
        other_val = _extract_value(other)
        if other_val == 0:
            raise DivisionByZero(f"Division by zero: {self._value} // 0")
        return SafeInt(self._value // other_val)

    def __lshift__(self, bits: int) -> SafeInt:
        return SafeInt(self._value << bits)

    # --- Comparison operations ---

    def __eq__(self, other: object) -> bool:
        if isinstance(other, SafeInt):
            return self._value == other._value
        if isinstance(other, int):
            return self._value == other
        return NotImplemented

    def __lt__(self, other: SafeInt | int) -> bool:
        return self._value < _extract_value(other)

    def __le__(self, other: SafeInt | int) -> bool:
        return self._value <= _extract_value(other)

    def __gt__(self, other: SafeInt | int) -> bool:
        return self._value > _extract_value(other)

    def __ge__(self, other: SafeInt | int) -> bool:
        return self._value >= _extract_value(other)

    # --- Conversion ---

    def __int__(self) -> int:
        return self._value

    def __bool__(self) -> bool:
        return self._value != 0

    def __index__(self) -> int:
        return self._value

    # --- Named operations ---

    def sqrt(self) -> SafeInt:
        """Floor of the square root.

        Raises:
            Underflow: If the value is negative
        """
        if self._value < 0:
            raise Underflow(f"Square root of negative value: {self._value}")
        return SafeInt(math.isqrt(self._value))

    def min(self, other: SafeInt | int) -> SafeInt:
        return SafeInt(min(self._value, _extract_value(other)))

    def max(self, other: SafeInt | int) -> SafeInt:
        return SafeInt(max(self._value, _extract_value(other)))

    def wrapping_add(self, other: SafeInt | int, modulus: int = UINT256_MAX + 1) -> SafeInt:
        """Add modulo ``modulus`` (uint256 by default), like an EVM accumulator."""
        return SafeInt((self._value + _extract_value(other)) % modulus)

    def to_uint112(self) -> int:
        """Convert to int, validating the reserve domain.

        Raises:
            Uint112Overflow: If value is negative or exceeds 2^112-1
        """
        if self._value < 0 or self._value > UINT112_MAX:
            raise Uint112Overflow(f"Value outside uint112: {self._value}")
        return self._value

    @classmethod
    def zero(cls) -> SafeInt:
        return cls(0)


def _extract_value(x: SafeInt | int) -> int:
    """Extract integer value from SafeInt or int."""
    if isinstance(x, SafeInt):
        return x._value
    return x


# Convenience alias for concise code
S = SafeInt
