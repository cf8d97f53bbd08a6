"""Tests for the Rational numerator/denominator pair."""

import math

import pytest

from exifcodec.rational import Rational


class TestConstruction:
    def test_default_denominator(self):
        r = Rational(72)
        assert r.numerator == 72
        assert r.denominator == 1
        assert not r.signed

    def test_unsigned_rejects_negative(self):
        with pytest.raises(ValueError):
            Rational(-1, 2)

    def test_unsigned_upper_bound(self):
        Rational(0xFFFFFFFF, 0xFFFFFFFF)
        with pytest.raises(ValueError):
            Rational(0x100000000, 1)

    def test_signed_range(self):
        Rational(-0x80000000, 1, signed=True)
        with pytest.raises(ValueError):
            Rational(0x80000000, 1, signed=True)

    def test_non_int_rejected(self):
        with pytest.raises(TypeError):
            Rational(1.5, 2)

    def test_bool_rejected(self):
        with pytest.raises(TypeError):
            Rational(True, 1)

    def test_immutable(self):
        r = Rational(1, 2)
        with pytest.raises(AttributeError):
            r.numerator = 3


class TestToFloat:
    def test_plain_division(self):
        assert Rational(72, 1).to_float() == 72.0
        assert float(Rational(1, 4)) == 0.25

    def test_zero_over_zero_is_nan(self):
        assert math.isnan(Rational(0, 0).to_float())

    def test_positive_over_zero_is_inf(self):
        assert Rational(5, 0).to_float() == math.inf

    def test_negative_over_zero_is_minus_inf(self):
        assert Rational(-5, 0, signed=True).to_float() == -math.inf


class TestFromFloat:
    def test_integral(self):
        assert Rational.from_float(72.0) == Rational(72, 1)

    def test_half(self):
        assert Rational.from_float(0.5) == Rational(1, 2)

    def test_third(self):
        assert Rational.from_float(1 / 3) == Rational(1, 3)

    def test_signed_negative(self):
        assert Rational.from_float(-2.5, signed=True) == Rational(-5, 2, signed=True)

    def test_unsigned_negative_rejected(self):
        with pytest.raises(ValueError):
            Rational.from_float(-1.0)

    def test_too_large_rejected(self):
        with pytest.raises(ValueError):
            Rational.from_float(5e9)

    def test_nan(self):
        assert Rational.from_float(math.nan) == Rational(0, 0)

    def test_infinities(self):
        assert Rational.from_float(math.inf) == Rational(1, 0)
        assert Rational.from_float(-math.inf, signed=True) == Rational(-1, 0, signed=True)

    def test_fields_fit_for_large_fraction(self):
        r = Rational.from_float(4000000000.5)
        assert r.numerator <= 0xFFFFFFFF
        assert abs(r.to_float() - 4000000000.5) < 1

    def test_best_precision_is_no_worse(self):
        default = Rational.from_float(math.pi)
        best = Rational.from_float(math.pi, best_precision=True)
        assert abs(best.to_float() - math.pi) <= abs(default.to_float() - math.pi)

    def test_round_trip_through_float(self):
        for value in (0.1, 2.8, 300.0, 1 / 7):
            assert abs(Rational.from_float(value).to_float() - value) < 1e-6


class TestEqualityAndFormatting:
    def test_field_wise_equality(self):
        assert Rational(72, 1) == Rational(72, 1)
        assert Rational(72, 1) != Rational(144, 2)

    def test_signedness_is_part_of_identity(self):
        assert Rational(1, 2) != Rational(1, 2, signed=True)

    def test_simplify(self):
        assert Rational(144, 2).simplify() == Rational(72, 1)
        assert Rational(-6, 4, signed=True).simplify() == Rational(-3, 2, signed=True)

    def test_simplify_leaves_zero_denominator(self):
        assert Rational(0, 0).simplify() == Rational(0, 0)

    def test_str(self):
        assert str(Rational(72, 1)) == '72/1'
