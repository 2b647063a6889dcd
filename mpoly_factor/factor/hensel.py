"""Multivariate Hensel lifting with prescribed leading coefficients.

Given F in K[x, y_1, ..., y_m], factors u_i(x) of F(x, alpha), and the true
leading coefficients lc_i(y) of the factors of F with respect to x, recover
the factors f_i of F with f_i(x, alpha) ~ u_i and lc_x(f_i) == lc_i.

The point alpha is first moved to the origin.  Variables are then introduced
one at a time in the given order; for y_j:

  1. restrict F and the lc_i to y_{j+1} = ... = y_m = 0
  2. overwrite the leading coefficient of each current factor with lc_i
  3. for k = 1 .. deg_{y_j}(F): take the y_j^k coefficient c of the residual
     and solve   sum_i delta_i * prod_{l != i} f_l(y_j = 0) = c
     with deg_x(delta_i) < deg_x(f_i); then f_i += delta_i * y_j^k

Step 3 is a multivariate Diophantine equation.  It is solved recursively
over y_1 .. y_{j-1}, working modulo the monomial ideal given by the
per-variable degree bounds of F, down to univariate Bezout cofactors of the
base factors.

Lifting happens over the fraction field of F's domain.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Sequence, Tuple

from ..core import upoly
from ..core.poly import MPoly, PolyRing, prod
from ..core.upoly import UPoly
from ..errors import InvalidInputError

logger = logging.getLogger(__name__)


class _Diophant:
    """Solver for sum_i delta_i * prod_{l != i} a_l == c over the lifted variables.

    Attributes:
        ring:      field ring everything lives in
        x:         main variable index
        bounds:    {variable index: degree bound} defining the truncation ideal
        base:      the factors at the origin, as dense univariate polynomials
        cofactors: Bezout cofactors of ``base``
    """

    def __init__(self, ring: PolyRing, x: int, bounds: Dict[int, int],
                 base: Sequence[UPoly], cofactors: Sequence[UPoly]):
        self.ring = ring
        self.x = x
        self.bounds = bounds
        self.base = base
        self.cofactors = cofactors

    def solve(self, a: Sequence[MPoly], c: MPoly, variables: Sequence[int]) -> List[MPoly]:
        if not variables:
            deltas = upoly.solve_diophantine(self.base, self.cofactors, upoly.from_mpoly(c, self.x))
            return [upoly.to_mpoly(self.ring, d, self.x) for d in deltas]

        v = variables[-1]
        inner = variables[:-1]
        window = {w: self.bounds[w] for w in variables}
        a0 = [ai.evaluate({v: 0}) for ai in a]
        cofactor_products = [prod((al for l, al in enumerate(a) if l != i), self.ring)
                             for i in range(len(a))]

        sigma = self.solve(a0, c.evaluate({v: 0}), inner)
        residual = (c - sum((s * b for s, b in zip(sigma, cofactor_products)), self.ring.zero)).truncate(window)
        for m in range(1, self.bounds[v] + 1):
            if residual.is_zero():
                break
            cm = residual.coefficient(v, m)
            if cm.is_zero():
                continue
            deltas = [d.mul_var_power(v, m) for d in self.solve(a0, cm, inner)]
            sigma = [s + d for s, d in zip(sigma, deltas)]
            correction = sum((d * b for d, b in zip(deltas, cofactor_products)), self.ring.zero)
            residual = (residual - correction).truncate(window)
        return sigma


def _impose_leading_coefficient(f: MPoly, lc: MPoly, x: int) -> MPoly:
    d = f.degree(x)
    return f - f.leading_coefficient(x).mul_var_power(x, d) + lc.mul_var_power(x, d)


def _lift_variable(
    target: MPoly,
    factors: List[MPoly],
    x: int,
    v: int,
    lifted_vars: Sequence[int],
    solver: _Diophant,
) -> Tuple[bool, List[MPoly]]:
    ring = target.ring
    at_zero = [f.evaluate({v: 0}) for f in factors]
    residual = target - prod(factors, ring)
    for k in range(1, solver.bounds[v] + 1):
        if residual.is_zero():
            break
        c = residual.coefficient(v, k)
        if c.is_zero():
            continue
        deltas = solver.solve(at_zero, c, lifted_vars)
        factors = [f + d.mul_var_power(v, k) for f, d in zip(factors, deltas)]
        residual = target - prod(factors, ring)
    return residual.is_zero(), factors


def hensel_lift_with_leading_coeffs(
    F: MPoly,
    univariate_factors: Sequence[MPoly],
    target_leading_coeffs: Sequence[MPoly],
    main_var: int,
    variable_order: Sequence[int],
    eval_point: Sequence,
) -> Tuple[bool, List[MPoly]]:
    """Recover the factors of F from a univariate image and known leading coefficients.

    Args:
        F:                     polynomial to factor
        univariate_factors:    pairwise coprime polynomials in x = main_var whose
                               product is F evaluated at the point (after the
                               rescaling below)
        target_leading_coeffs: one polynomial per factor, free of x, multiplying
                               to lc_x(F)
        main_var:              index of x
        variable_order:        the other variables, in the order they are lifted
        eval_point:            eval_point[k] is the value of variable_order[k]

    Returns:
        (ok, factors) with factors in input order, lc_x(factors[i]) equal to
        target_leading_coeffs[i] and prod(factors) == F.  ok is False when the
        point is bad or the lift does not close; the caller should retry.

    Raises:
        InvalidInputError: mismatched argument lengths or malformed arguments.
    """
    if len(univariate_factors) != len(target_leading_coeffs):
        raise InvalidInputError(
            f"{len(univariate_factors)} factors but {len(target_leading_coeffs)} leading coefficients")
    if len(variable_order) != len(eval_point):
        raise InvalidInputError(
            f"{len(variable_order)} variables but {len(eval_point)} evaluation values")
    ring = F.ring.to_field()
    x = F.ring.check_index(main_var)
    order = [F.ring.check_index(v) for v in variable_order]
    if x in order or len(set(order)) != len(order):
        raise InvalidInputError(f"bad variable order {list(variable_order)} for main variable {x}")
    for i in F.variables():
        if i != x and i not in order:
            raise InvalidInputError(f"{F} involves {F.ring.symbols[i]}, which is not being lifted")
    if not univariate_factors:
        return False, []

    A = F.to_field()
    lcs = [F.ring(lc).to_field() for lc in target_leading_coeffs]
    for lc in lcs:
        if lc.degree(x) > 0:
            raise InvalidInputError(f"leading coefficient {lc} involves the main variable")
    if prod(lcs, ring) != A.leading_coefficient(x):
        logger.debug("lift: leading coefficients do not multiply to lc(F)")
        return False, []

    # Move the evaluation point to the origin.
    alphas = [ring.domain.convert(a) for a in eval_point]
    for v, a in zip(order, alphas):
        A = A.shift(v, a)
        lcs = [lc.shift(v, a) for lc in lcs]
    origin = {v: 0 for v in order}

    factors: List[MPoly] = []
    for u, lc in zip(univariate_factors, lcs):
        u = F.ring(u).to_field()
        if u.degree(x) <= 0:
            return False, []
        lc0 = lc.evaluate(origin).constant_coefficient()
        if lc0 == 0:
            logger.debug("lift: target leading coefficient %s vanishes at the point", lc)
            return False, []
        factors.append(u.scale(lc0 / u.leading_coefficient(x).constant_coefficient()))
    if prod(factors, ring) != A.evaluate(origin):
        logger.debug("lift: univariate factors do not multiply to F at the point")
        return False, []

    base = [upoly.from_mpoly(f, x) for f in factors]
    cofactors = upoly.bezout_cofactors(base)
    if cofactors is None:
        logger.debug("lift: univariate factors are not coprime")
        return False, []
    solver = _Diophant(ring, x, {v: A.degree(v) for v in order}, base, cofactors)

    for j, v in enumerate(order):
        rest = {w: 0 for w in order[j + 1:]}
        target = A.evaluate(rest)
        factors = [
            _impose_leading_coefficient(f, lc.evaluate(rest), x)
            for f, lc in zip(factors, lcs)
        ]
        ok, factors = _lift_variable(target, factors, x, v, order[:j], solver)
        if not ok:
            logger.debug("lift: residual does not vanish after lifting %s", ring.symbols[v])
            return False, []

    for v, a in zip(order, alphas):
        factors = [f.shift(v, -a) for f in factors]
    return True, factors
