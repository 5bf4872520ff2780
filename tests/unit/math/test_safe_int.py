"""Tests for SafeInt checked arithmetic."""

import pytest

from basket_amm.safe_int import DivisionByZero, S, SafeInt, SafeIntError, Underflow


class TestSafeIntConstruction:
    """Tests for SafeInt construction."""

    def test_from_int(self):
        assert SafeInt(42).value == 42

    def test_from_safeint(self):
        """SafeInt can be constructed from another SafeInt."""
        assert SafeInt(SafeInt(42)).value == 42

    def test_alias_s(self):
        assert S is SafeInt

    def test_from_invalid_type_raises(self):
        with pytest.raises(TypeError):
            SafeInt("42")  # type: ignore
        with pytest.raises(TypeError):
            SafeInt(3.14)  # type: ignore


class TestSafeIntArithmetic:
    """Tests for checked arithmetic."""

    def test_add_and_radd(self):
        assert (S(2) + 3).value == 5
        assert (3 + S(2)).value == 5

    def test_sub_zero_result(self):
        assert (S(5) - 5).value == 0

    def test_sub_underflow_raises(self):
        with pytest.raises(Underflow):
            S(3) - 5

    def test_mul_and_rmul(self):
        assert (S(6) * 7).value == 42
        assert (7 * S(6)).value == 42

    def test_floordiv(self):
        assert (S(7) // 2).value == 3

    def test_floordiv_by_zero_raises(self):
        with pytest.raises(DivisionByZero):
            S(7) // 0

    def test_ceiling_div(self):
        assert S(7).ceiling_div(2).value == 4
        assert S(8).ceiling_div(2).value == 4
        assert S(0).ceiling_div(5).value == 0

    def test_ceiling_div_by_zero_raises(self):
        with pytest.raises(DivisionByZero):
            S(7).ceiling_div(0)

    def test_abs_diff_is_symmetric(self):
        assert S(3).abs_diff(10).value == 7
        assert S(10).abs_diff(3).value == 7

    def test_errors_are_arithmetic_errors(self):
        """Pools rely on catching SafeIntError as an ArithmeticError."""
        assert issubclass(SafeIntError, ArithmeticError)
        assert issubclass(Underflow, SafeIntError)
        assert issubclass(DivisionByZero, SafeIntError)


class TestSafeIntComparison:
    def test_eq(self):
        assert S(5) == S(5)
        assert S(5) == 5
        assert S(5) != 6

    def test_ordering_with_int(self):
        assert S(1) < 2
        assert S(2) <= 2
        assert S(3) > 2
        assert S(2) >= S(2)


class TestSafeIntConversion:
    def test_int(self):
        assert int(S(42)) == 42

    def test_bool(self):
        assert bool(S(1))
        assert not bool(S(0))

    def test_hash_matches_int(self):
        assert hash(S(42)) == hash(42)

    def test_repr(self):
        assert repr(S(42)) == "SafeInt(42)"
