"""End-to-end tests for the factorization driver."""

import dataclasses
from fractions import Fraction

import pytest

from mpoly_factor import (
    DEFAULT_CONFIG, Fac, FactorConfig, FactorizationFailedError, InvalidInputError,
    QQ, ZZ, factor, is_irreducible, polynomial_ring,
)
from mpoly_factor.factor.orchestrator import _distribute_leading_coefficient, _lift_grouped


def _as_dict(fac):
    return dict(fac.items())


class TestFactorBivariate:
    def setup_method(self):
        self.R, (self.x, self.y) = polynomial_ring(ZZ, ["x", "y"])

    def test_mixed_multiplicities(self):
        x, y = self.x, self.y
        f = (x + y + 1) * (x * y - 2) * (x - y) ** 2
        fac = factor(f)
        assert fac.unit == 1
        assert _as_dict(fac) == {x + y + 1: 1, x * y - 2: 1, x - y: 2}
        assert fac.expand() == f

    def test_content_is_factored(self):
        x, y = self.x, self.y
        f = 6 * (y ** 2 - 1) * (x ** 2 + y)
        fac = factor(f)
        assert fac.unit == 6
        assert _as_dict(fac) == {y - 1: 1, y + 1: 1, x ** 2 + y: 1}

    def test_irreducible_in_two_variables(self):
        x, y = self.x, self.y
        f = x ** 2 - y
        fac = factor(f)
        assert _as_dict(fac) == {f: 1}

    def test_negative_unit(self):
        x, y = self.x, self.y
        f = -3 * (x * y + 1) * (x + 2 * y)
        fac = factor(f)
        assert fac.unit == -3
        assert _as_dict(fac) == {x * y + 1: 1, x + 2 * y: 1}


class TestFactorMultivariate:
    def setup_method(self):
        self.R, (self.x, self.y, self.z) = polynomial_ring(ZZ, ["x", "y", "z"])

    def test_non_constant_leading_coefficient(self):
        x, y, z = self.x, self.y, self.z
        f = (x * y + z) * (x + y * z + 1)
        fac = factor(f)
        assert _as_dict(fac) == {x * y + z: 1, x + y * z + 1: 1}
        assert fac.expand() == f

    def test_constant_leading_coefficient(self):
        x, y, z = self.x, self.y, self.z
        f = (x + y ** 2 + z ** 2) * (x + y * z + 1)
        fac = factor(f)
        assert _as_dict(fac) == {x + y ** 2 + z ** 2: 1, x + y * z + 1: 1}

    def test_irreducible(self):
        x, y, z = self.x, self.y, self.z
        f = x ** 2 + y * z + 1
        assert _as_dict(factor(f)) == {f: 1}

    def test_repeated_factor(self):
        x, y, z = self.x, self.y, self.z
        f = (x * y - z) ** 3 * (x + z)
        fac = factor(f)
        assert _as_dict(fac) == {x * y - z: 3, x + z: 1}

    def test_content_in_other_variables(self):
        _, (x, y, z, _) = polynomial_ring(ZZ, ["x", "y", "z", "w"])
        # main variable y; its coefficients share the content x + z
        f = (x ** 2 + y) * (z + x)
        fac = factor(f)
        assert _as_dict(fac) == {x ** 2 + y: 1, x + z: 1}
        assert fac.expand() == f

    def test_irreducible_with_split_images(self):
        x, y, z = self.x, self.y, self.z
        # (1 + 3y^2)(1 + 3z^2) is a square at every point of {-1, 0, 1}^2
        f = x ** 2 - (1 + 3 * y ** 2) * (1 + 3 * z ** 2)
        config = FactorConfig(eval_bound=1, eval_growth=0)
        assert _as_dict(factor(f, config)) == {f: 1}

    def test_exhausted_attempts(self):
        x, y, z = self.x, self.y, self.z
        f = (y ** 3 - y) * x ** 2 + x + z ** 2 + 1
        config = FactorConfig(max_attempts=1, eval_bound=1, eval_growth=0)
        with pytest.raises(FactorizationFailedError):
            factor(f, config)

    def test_distributed_leading_coefficients(self):
        x, y, z = self.x, self.y, self.z
        f = ((y + z) * x + 1) * (y * x + z ** 2)
        fac = factor(f)
        assert _as_dict(fac) == {(y + z) * x + 1: 1, y * x + z ** 2: 1}

    def test_shared_leading_coefficient_factor(self):
        x, y, z = self.x, self.y, self.z
        f = (y * x + z) * (y * x + z + 1) * (y * x - z)
        fac = factor(f)
        assert _as_dict(fac) == {y * x + z: 1, y * x + z + 1: 1, y * x - z: 1}

    def test_leading_coefficient_free_of_first_variable(self):
        x, y, z = self.x, self.y, self.z
        f = (z * x + y ** 2 + z ** 2) * (x + y ** 2 + 1)
        fac = factor(f)
        assert _as_dict(fac) == {z * x + y ** 2 + z ** 2: 1, x + y ** 2 + 1: 1}

    def test_uncached_ring(self):
        S, (x, y, z) = polynomial_ring(ZZ, ["x", "y", "z"], cached=False)
        f = (x * y + z) * (x + y * z + 1)
        fac = factor(f)
        assert all(p.ring is S for p in fac.factors())
        assert _as_dict(fac) == {x * y + z: 1, x + y * z + 1: 1}


class TestLeadingCoefficientTargets:
    def setup_method(self):
        self.R, (self.x, self.y, self.z) = polynomial_ring(ZZ, ["x", "y", "z"])

    def test_targets_follow_bivariate_factors(self):
        x, y, z = self.x, self.y, self.z
        lc_fac = factor(y * (y + z))
        # bivariate image of ((y + z)x + 1)(yx + z^2) at z = 2
        bfactors = [(y + 2) * x + 1, y * x + 4]
        targets = _distribute_leading_coefficient(lc_fac, bfactors, 0, 1, {2: 2})
        assert targets == [y + z, y]

    def test_repeated_factor_is_shared(self):
        x, y, z = self.x, self.y, self.z
        lc_fac = factor(y ** 2)
        bfactors = [y * x + 3, y * x + 4]
        assert _distribute_leading_coefficient(lc_fac, bfactors, 0, 1, {2: 3}) == [y, y]

    def test_unit_goes_to_first_target(self):
        x, y, z = self.x, self.y, self.z
        lc_fac = factor(-2 * z * (z + y))
        # z is the bivariate variable here, y is fixed at 1
        bfactors = [z * x + 1, (z + 1) * x + 5]
        targets = _distribute_leading_coefficient(lc_fac, bfactors, 0, 2, {1: 1})
        assert targets == [-2 * z, y + z]

    def test_image_without_first_variable_is_ambiguous(self):
        x, y, z = self.x, self.y, self.z
        lc_fac = factor(z)
        bfactors = [2 * x + y ** 2 + 4, x + y ** 2 + 1]
        assert _distribute_leading_coefficient(lc_fac, bfactors, 0, 1, {2: 2}) is None

    def test_colliding_images_are_ambiguous(self):
        x, y, z = self.x, self.y, self.z
        lc_fac = factor(y * (y + z))
        bfactors = [y * x + 1, y * x + 2]
        assert _distribute_leading_coefficient(lc_fac, bfactors, 0, 1, {2: 0}) is None

    def test_unaccounted_leading_coefficient(self):
        x, y, z = self.x, self.y, self.z
        lc_fac = factor(y * (y + z))
        bfactors = [(y + 2) * x + 1, (y + 3) * x + 4]
        assert _distribute_leading_coefficient(lc_fac, bfactors, 0, 1, {2: 2}) is None

    def test_lift_with_targets(self):
        x, y, z = self.x, self.y, self.z
        pp = ((y + z) * x + 1) * (y * x + z ** 2)
        grouped = [3 * x + 1, x + 4]
        factors = _lift_grouped(pp, grouped, [y + z, y], 0, [1, 2], {1: 1, 2: 2})
        assert factors == [(y + z) * x + 1, y * x + z ** 2]

    def test_lift_with_full_leading_coefficient(self):
        x, y, z = self.x, self.y, self.z
        pp = ((y + z) * x + 1) * (y * x + z ** 2)
        grouped = [3 * x + 1, x + 4]
        factors = _lift_grouped(pp, grouped, None, 0, [1, 2], {1: 1, 2: 2})
        assert factors == [(y + z) * x + 1, y * x + z ** 2]


class TestFactorRational:
    def test_rational_unit(self):
        R, (x, y) = polynomial_ring(QQ, ["x", "y"])
        f = (x * Fraction(1, 2) + 1) * (y - 3)
        fac = factor(f)
        assert fac.unit == Fraction(1, 2)
        assert _as_dict(fac) == {x + 2: 1, y - 3: 1}
        assert all(p.ring is R for p in fac.factors())
        assert fac.expand() == f

    def test_rational_bivariate(self):
        R, (x, y) = polynomial_ring(QQ, ["x", "y"])
        f = (x * y * Fraction(2, 3) - 1) * (x - y)
        fac = factor(f)
        assert fac.unit == Fraction(1, 3)
        assert _as_dict(fac) == {2 * x * y - 3: 1, x - y: 1}


class TestBoundaries:
    def setup_method(self):
        self.R, (self.x, self.y) = polynomial_ring(ZZ, ["x", "y"])

    def test_constant(self):
        fac = factor(self.R.constant(-4))
        assert fac.unit == -4
        assert len(fac) == 0
        assert fac.expand() == -4

    def test_zero_raises(self):
        with pytest.raises(InvalidInputError):
            factor(self.R.zero)

    def test_univariate(self):
        x = self.x
        fac = factor(x ** 4 - 1)
        assert _as_dict(fac) == {x - 1: 1, x + 1: 1, x ** 2 + 1: 1}

    def test_idempotent(self):
        x, y = self.x, self.y
        f = (x ** 2 + y) * (x * y + 3) ** 2
        first = factor(f)
        second = factor(first.expand())
        assert first == second

    def test_refactoring_factors(self):
        x, y = self.x, self.y
        fac = factor((x * y + 1) * (x - y) ** 2)
        for p, _ in fac:
            again = factor(p)
            assert _as_dict(again) == {p: 1}
            assert again.unit == 1

    def test_deterministic(self):
        x, y = self.x, self.y
        f = (x * y - 2) * (x + y + 1)
        assert factor(f) == factor(f)

    def test_exhausted_attempts(self):
        x, y = self.x, self.y
        # Every y in [-1, 1] kills the leading coefficient in x.
        f = (y ** 3 - y) * x ** 2 + x + 1
        config = FactorConfig(max_attempts=1, eval_bound=1, eval_growth=0)
        with pytest.raises(FactorizationFailedError):
            factor(f, config)

    def test_widening_range_recovers(self):
        x, y = self.x, self.y
        f = (y ** 3 - y) * x ** 2 + x + 1
        config = FactorConfig(max_attempts=8, eval_bound=1, eval_growth=1)
        fac = factor(f, config)
        assert fac.expand() == f


class TestIsIrreducible:
    def setup_method(self):
        self.R, (self.x, self.y) = polynomial_ring(ZZ, ["x", "y"])

    def test_irreducible(self):
        x, y = self.x, self.y
        assert is_irreducible(x ** 2 + y ** 2)
        assert is_irreducible(2 * x + 4 * y)

    def test_reducible(self):
        x, y = self.x, self.y
        assert not is_irreducible(x ** 2 - y ** 2)
        assert not is_irreducible(x ** 2)

    def test_constant(self):
        assert not is_irreducible(self.R.constant(5))


class TestConfig:
    def test_defaults(self):
        assert DEFAULT_CONFIG.max_attempts == 32
        assert DEFAULT_CONFIG.eval_range(0) == (-3, 3)
        assert DEFAULT_CONFIG.eval_range(2) == (-7, 7)

    def test_frozen(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            DEFAULT_CONFIG.seed = 1

    def test_validation(self):
        with pytest.raises(ValueError):
            FactorConfig(max_attempts=0)
        with pytest.raises(ValueError):
            FactorConfig(eval_bound=0)
        with pytest.raises(ValueError):
            FactorConfig(eval_growth=-1)


class TestFac:
    def setup_method(self):
        self.R, (self.x, self.y) = polynomial_ring(ZZ, ["x", "y"])

    def test_expand(self):
        x, y = self.x, self.y
        fac = Fac(self.R, -2, {x + y: 2, x: 1})
        assert fac.expand() == -2 * x * (x + y) ** 2
        assert fac[x + y] == 2
        assert x in fac

    def test_bad_multiplicity(self):
        with pytest.raises(InvalidInputError):
            Fac(self.R, 1, {self.x: 0})

    def test_foreign_factor(self):
        S, (u, _) = polynomial_ring(QQ, ["x", "y"])
        with pytest.raises(InvalidInputError):
            Fac(self.R, 1, {u: 1})


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
