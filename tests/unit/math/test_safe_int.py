"""Tests for SafeInt checked arithmetic."""

import pytest

from dexcore.constants import UINT112_MAX, UINT256_MAX
from dexcore.safe_int import (
    DivisionByZero,
    S,
    SafeInt,
    SafeIntError,
    Uint112Overflow,
    Underflow,
)


class TestSafeIntConstruction:
    """Tests for SafeInt construction."""

    def test_from_int(self):
        """SafeInt can be constructed from int."""
        assert SafeInt(42).value == 42

    def test_from_safeint(self):
        """SafeInt can be constructed from another SafeInt."""
        assert SafeInt(SafeInt(42)).value == 42

    def test_from_invalid_type_raises(self):
        """SafeInt rejects strings, floats and bools."""
        with pytest.raises(TypeError):
            SafeInt("42")  # type: ignore
        with pytest.raises(TypeError):
            SafeInt(3.14)  # type: ignore
        with pytest.raises(TypeError):
            SafeInt(True)

    def test_alias_s(self):
        """S is an alias for SafeInt."""
        assert S is SafeInt

    def test_zero_constructor(self):
        assert SafeInt.zero().value == 0


class TestSafeIntArithmetic:
    """Tests for SafeInt arithmetic operations."""

    def test_add(self):
        assert (S(10) + S(5)).value == 15
        assert (S(10) + 5).value == 15
        assert (5 + S(10)).value == 15

    def test_sub(self):
        assert (S(10) - S(3)).value == 7
        assert (10 - S(3)).value == 7
        assert (S(5) - 5).value == 0

    def test_sub_underflow_raises(self):
        """A balance can never drop below its reserve silently."""
        with pytest.raises(Underflow) as exc_info:
            S(5) - S(10)
        assert "5 - 10" in str(exc_info.value)

    def test_rsub_underflow_raises(self):
        with pytest.raises(Underflow):
            5 - S(10)

    def test_mul_large(self):
        """Products of two uint112 reserves are exact."""
        assert (S(UINT112_MAX) * UINT112_MAX).value == UINT112_MAX**2

    def test_floordiv(self):
        assert (S(10) // S(3)).value == 3
        assert (S(10) // 3).value == 3

    def test_floordiv_by_zero_raises(self):
        with pytest.raises(DivisionByZero) as exc_info:
            S(10) // S(0)
        assert "Division by zero" in str(exc_info.value)

    def test_lshift(self):
        assert (S(3) << 112).value == 3 * 2**112

    def test_errors_share_base(self):
        """All arithmetic failures derive from SafeIntError and ArithmeticError."""
        for error in (DivisionByZero, Underflow, Uint112Overflow):
            assert issubclass(error, SafeIntError)
            assert issubclass(error, ArithmeticError)


class TestSafeIntComparison:
    """Tests for SafeInt comparison operations."""

    def test_eq(self):
        assert S(5) == S(5)
        assert S(5) == 5
        assert S(5) != 6

    def test_ordering(self):
        assert S(5) < S(6)
        assert S(5) <= 5
        assert S(6) > 5
        assert S(6) >= S(6)

    def test_hash(self):
        """Equal SafeInts hash the same."""
        assert {S(42): "value"}[S(42)] == "value"


class TestSafeIntNamedOps:
    """Tests for SafeInt named operations."""

    def test_sqrt_floors(self):
        """sqrt rounds down, like the integer square root used for shares."""
        assert S(16).sqrt().value == 4
        assert S(17).sqrt().value == 4
        assert S(15).sqrt().value == 3
        assert S(0).sqrt().value == 0

    def test_sqrt_large(self):
        assert (S(10**18) * 4 * 10**18).sqrt().value == 2 * 10**18

    def test_sqrt_negative_raises(self):
        with pytest.raises(Underflow):
            S(-1).sqrt()

    def test_min_max(self):
        assert S(3).min(5).value == 3
        assert S(3).max(S(5)).value == 5

    def test_wrapping_add(self):
        """Accumulators wrap at 2**256."""
        assert S(UINT256_MAX).wrapping_add(1).value == 0
        assert S(UINT256_MAX).wrapping_add(5).value == 4
        assert S(10).wrapping_add(5, modulus=12).value == 3


class TestSafeIntBounds:
    """Tests for domain validation."""

    def test_to_uint112(self):
        assert S(UINT112_MAX).to_uint112() == UINT112_MAX
        with pytest.raises(Uint112Overflow):
            S(UINT112_MAX + 1).to_uint112()
