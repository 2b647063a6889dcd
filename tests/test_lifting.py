"""Tests for the bivariate combiner and the leading-coefficient Hensel lifter."""

import pytest

from mpoly_factor import bivariate_combine, hensel_lift_with_leading_coeffs
from mpoly_factor.core.domains import QQ, ZZ
from mpoly_factor.core.poly import polynomial_ring, prod
from mpoly_factor.errors import InvalidInputError


class TestBivariateCombine:
    def setup_method(self):
        self.R, (self.x, self.y) = polynomial_ring(QQ, ["x", "y"])

    def test_three_linear_factors_with_content(self):
        x, y = self.x, self.y
        p = y * (y * x + 1) * ((y + 1) * x + y) * ((y + 2) * x + y)
        ok, content, factors = bivariate_combine(p, 0, 1, 1, [x + 1, 2 * x + 1, 3 * x + 1])
        assert ok
        assert content.degrees() == (0, 1)
        assert len(factors) == 3
        assert content * prod(factors, self.R) == p
        assert set(factors) == {y * x + 1, (y + 1) * x + y, (y + 2) * x + y}

    def test_spurious_split_is_recombined(self):
        x, y = self.x, self.y
        # x^2 - y is irreducible but splits at y = 4
        ok, content, factors = bivariate_combine(x ** 2 - y, 0, 1, 4, [x - 2, x + 2])
        assert ok
        assert content == 1
        assert factors == [x ** 2 - y]

    def test_partial_recombination(self):
        x, y = self.x, self.y
        p = (x ** 2 - y) * (x + y)
        ok, content, factors = bivariate_combine(p, 0, 1, 4, [x - 2, x + 2, x + 4])
        assert ok
        assert content * prod(factors, self.R) == p
        assert set(factors) == {x ** 2 - y, x + y}

    def test_integer_input(self):
        S, (u, v) = polynomial_ring(ZZ, ["x", "y"])
        p = (u * v - 2) * (u + v + 1)
        image = p.evaluate({1: 2})
        ok, content, factors = bivariate_combine(p, 0, 1, 2, [u - 1, u + 3])
        assert image == 2 * (u - 1) * (u + 3)
        assert ok
        assert all(f.ring is S for f in factors)
        assert content * prod(factors, S) == p

    def test_main_variable_second(self):
        x, y = self.x, self.y
        p = (x * y + 1) * (y - x)
        ok, content, factors = bivariate_combine(p, 1, 0, 1, [y + 1, y - 1])
        assert ok
        assert content * prod(factors, self.R) == p
        assert len(factors) == 2

    def test_vanishing_leading_coefficient(self):
        x, y = self.x, self.y
        p = (y * x + 1) * (x + y)
        ok, content, factors = bivariate_combine(p, 0, 1, 0, [x])
        assert not ok
        assert content is None and factors == []

    def test_wrong_image(self):
        x, y = self.x, self.y
        ok, _, _ = bivariate_combine(x ** 2 - y ** 2, 0, 1, 1, [x + 1, x + 2])
        assert not ok

    def test_repeated_image_factors(self):
        x, y = self.x, self.y
        ok, _, _ = bivariate_combine(x ** 2 - y, 0, 1, 0, [x, x])
        assert not ok

    def test_bad_arguments(self):
        x, y = self.x, self.y
        with pytest.raises(InvalidInputError):
            bivariate_combine(x * y, 0, 0, 1, [x])
        with pytest.raises(InvalidInputError):
            bivariate_combine(x * y + 1, 0, 1, 1, [self.R.constant(2)])
        T, (a, b, c) = polynomial_ring(QQ, ["x", "y", "z"])
        with pytest.raises(InvalidInputError):
            bivariate_combine(a * b + c, 0, 1, 1, [a + 1])


class TestHenselLiftWithLeadingCoeffs:
    def setup_method(self):
        self.R, (self.x, self.y, self.z) = polynomial_ring(QQ, ["x", "y", "z"])
        x, y, z = self.x, self.y, self.z
        self.fac = [y * x ** 2 + z, (z + 1) * x ** 3 + x * y + z, (y * z + 1) * x ** 2 + 1]
        self.images = [x ** 2 + 1, 2 * x ** 3 + x + 1, 2 * x ** 2 + 1]
        self.lcs = [y, z + 1, y * z + 1]

    def test_reconstructs_factors_in_order(self):
        F = prod(self.fac, self.R)
        ok, lifted = hensel_lift_with_leading_coeffs(F, self.images, self.lcs, 0, [1, 2], [1, 1])
        assert ok
        assert lifted == self.fac

    def test_leading_coefficients_are_imposed(self):
        F = prod(self.fac, self.R)
        ok, lifted = hensel_lift_with_leading_coeffs(F, self.images, self.lcs, 0, [1, 2], [1, 1])
        assert ok
        assert [f.leading_coefficient(0) for f in lifted] == self.lcs

    def test_image_scaling_is_ignored(self):
        x = self.x
        F = prod(self.fac, self.R)
        images = [3 * (x ** 2 + 1), 2 * x ** 3 + x + 1, 4 * x ** 2 + 2]
        ok, lifted = hensel_lift_with_leading_coeffs(F, images, self.lcs, 0, [1, 2], [1, 1])
        assert ok
        assert lifted == self.fac

    def test_integer_ring_input(self):
        S, (x, y) = polynomial_ring(ZZ, ["x", "y"])
        fac = [y * x + 1, x - y]
        F = prod(fac, S)
        ok, lifted = hensel_lift_with_leading_coeffs(F, [2 * x + 1, x - 2], [y, S.one], 0, [1], [2])
        assert ok
        assert prod(lifted, S.to_field()) == F.to_field()
        assert lifted == [f.to_field() for f in fac]

    def test_length_mismatch_raises(self):
        F = prod(self.fac, self.R)
        with pytest.raises(InvalidInputError):
            hensel_lift_with_leading_coeffs(F, self.images, self.lcs[:2], 0, [1, 2], [1, 1])
        with pytest.raises(InvalidInputError):
            hensel_lift_with_leading_coeffs(F, self.images, self.lcs, 0, [1, 2], [1])

    def test_bad_variable_order_raises(self):
        F = prod(self.fac, self.R)
        with pytest.raises(InvalidInputError):
            hensel_lift_with_leading_coeffs(F, self.images, self.lcs, 0, [0, 2], [1, 1])
        with pytest.raises(InvalidInputError):
            hensel_lift_with_leading_coeffs(F, self.images, self.lcs, 0, [1], [1])

    def test_leading_coefficient_vanishing_at_point(self):
        F = prod(self.fac, self.R)
        ok, lifted = hensel_lift_with_leading_coeffs(F, self.images, self.lcs, 0, [1, 2], [0, 1])
        assert not ok
        assert lifted == []

    def test_inconsistent_leading_coefficients(self):
        y, z = self.y, self.z
        F = prod(self.fac, self.R)
        ok, _ = hensel_lift_with_leading_coeffs(F, self.images, [y, z, y * z + 1], 0, [1, 2], [1, 1])
        assert not ok

    def test_wrong_images(self):
        x = self.x
        F = prod(self.fac, self.R)
        images = [x ** 2 + 2, 2 * x ** 3 + x + 1, 2 * x ** 2 + 1]
        ok, _ = hensel_lift_with_leading_coeffs(F, images, self.lcs, 0, [1, 2], [1, 1])
        assert not ok


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
