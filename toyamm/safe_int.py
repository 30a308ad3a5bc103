"""Checked integer arithmetic for pool balances.

Balances and reserves are unsigned 128-bit values. Pricing multiplies two
such values together, so intermediates are kept as unbounded Python ints
wrapped in SafeInt and only narrowed back to 128 bits at the end:

    from toyamm.safe_int import S

    numerator = S(amount_in) * S(997) * S(reserve_out)   # may exceed 2^128
    amount_out = (numerator // denominator).to_u128()    # raises if it doesn't fit

Errors are raised instead of producing invalid results:
- Division by zero raises DivisionByZero
- Subtraction below zero raises Underflow
- Narrowing a value outside [0, 2^128-1] raises U128Overflow
"""

from __future__ import annotations

U128_MAX = 2**128 - 1


class SafeIntError(ArithmeticError):
    """Base class for SafeInt arithmetic errors."""

    pass


class DivisionByZero(SafeIntError):
    """Division by zero."""

    pass


class Underflow(SafeIntError):
    """Subtraction would produce a negative result."""

    pass


class U128Overflow(SafeIntError):
    """Value does not fit in an unsigned 128-bit integer."""

    pass


class SafeInt:
    """Integer with checked arithmetic.

    Attributes:
        value: The underlying integer value (read-only)
    """

    __slots__ = ("_value",)
    _value: int

    def __init__(self, value: int | SafeInt) -> None:
        """Create a SafeInt from an integer or another SafeInt.

        Raises:
            TypeError: If value is not an int or SafeInt (bool is rejected)
        """
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

    # --- Arithmetic operations ---

    def __add__(self, other: SafeInt | int) -> SafeInt:
        return SafeInt(self._value + _extract_value(other))

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

    def __mul__(self, other: SafeInt | int) -> SafeInt:
        return SafeInt(self._value * _extract_value(other))

    def __floordiv__(self, other: SafeInt | int) -> SafeInt:
        """Integer division, rounding down.

        Raises:
            DivisionByZero: If other is zero
        """
        other_val = _extract_value(other)
        if other_val == 0:
            raise DivisionByZero(f"Division by zero: {self._value} // 0")
        return SafeInt(self._value // other_val)

    def __truediv__(self, other: object) -> SafeInt:
        raise TypeError("SafeInt only supports floor division (//)")

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

    def to_u128(self) -> int:
        """Narrow to int, validating unsigned 128-bit bounds.

        Raises:
            U128Overflow: If value is negative or exceeds 2^128-1
        """
        if self._value < 0:
            raise U128Overflow(f"Negative value cannot be u128: {self._value}")
        if self._value > U128_MAX:
            raise U128Overflow(f"Value exceeds u128 max: {self._value}")
        return self._value


def _extract_value(x: SafeInt | int) -> int:
    """Extract integer value from SafeInt or int."""
    if isinstance(x, SafeInt):
        return x._value
    return x


# Convenience alias for concise code
S = SafeInt
