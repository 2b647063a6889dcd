"""Bivariate Hensel lifting with combinatorial recombination.

Given p(x, y) and the factors of p(x, alpha), lift the factors as power series
in (y - alpha) and find out which products of lifted pieces are true factors
of p.

Pipeline:
  1. shift y -> y + alpha so the point is the origin
  2. strip the content in y, leaving qq primitive in x with lc(y) = lc_x(qq)
  3. make the base factors monic and lift them linearly, one power of y per
     step, up to deg_y(qq) + 1 (the correction for each factor comes from the
     multi-factor Bezout cofactors of the base factors)
  4. try subsets of lifted pieces by increasing size: lc * prod(pieces),
     truncated at the bound, has a primitive part that is a true factor
     exactly when it divides what is left of qq
  5. shift the factors back; content = p / prod(factors)

Series in y are lists of UPoly (dense univariate in x), indexed by the power
of y, so rows[j] is the coefficient of y^j.
"""

from __future__ import annotations

import logging
from fractions import Fraction
from itertools import combinations
from typing import List, Optional, Sequence, Tuple

from ..core import upoly
from ..core.poly import MPoly, PolyRing, prod
from ..core.upoly import UPoly
from ..errors import InvalidInputError

logger = logging.getLogger(__name__)

Series = List[UPoly]


def _series(poly: MPoly, x: int, y: int, bound: int) -> Series:
    rows: Series = [[] for _ in range(bound)]
    for j, c in poly.coefficients(y).items():
        if j < bound:
            rows[j] = upoly.from_mpoly(c, x)
    return rows


def _series_mul(a: Series, b: Series, bound: int) -> Series:
    """Product of two series truncated mod y^bound."""
    out: Series = [[] for _ in range(bound)]
    for i, ai in enumerate(a[:bound]):
        if not ai:
            continue
        for j, bj in enumerate(b[:bound - i]):
            if bj:
                out[i + j] = upoly.add(out[i + j], upoly.mul(ai, bj))
    return out


def _series_to_mpoly(rows: Series, ring: PolyRing, x: int, y: int) -> MPoly:
    terms = {}
    for j, row in enumerate(rows):
        for i, c in enumerate(row):
            if c != 0:
                exp = [0] * ring.nvars
                exp[x] = i
                exp[y] = j
                terms[tuple(exp)] = c
    return ring.from_dict(terms)


def _inverse_series(lc: UPoly, bound: int) -> List[Fraction]:
    """Power series inverse of a polynomial in y with lc[0] != 0."""
    inv = [Fraction(0)] * bound
    inv[0] = 1 / lc[0]
    for j in range(1, bound):
        s = sum((lc[t] * inv[j - t] for t in range(1, min(j, len(lc) - 1) + 1)), Fraction(0))
        inv[j] = -s * inv[0]
    return inv


def _monic_series(qq: MPoly, lc: UPoly, x: int, y: int, bound: int) -> Series:
    """qq / lc(y) as a power series in y, monic in x."""
    rows = _series(qq, x, y, bound)
    inv = _inverse_series(lc, bound)
    out: Series = []
    for j in range(bound):
        acc: UPoly = []
        for t in range(j + 1):
            if rows[t] and inv[j - t] != 0:
                acc = upoly.add(acc, upoly.scale(rows[t], inv[j - t]))
        out.append(acc)
    return out


def _lift(base: Sequence[UPoly], cofactors: Sequence[UPoly], target: Series, bound: int) -> List[Series]:
    """Linear Hensel lifting of monic base factors to precision y^bound."""
    lifted: List[Series] = [[list(b)] + [[] for _ in range(bound - 1)] for b in base]
    for k in range(1, bound):
        approx = lifted[0]
        for piece in lifted[1:]:
            approx = _series_mul(approx, piece, k + 1)
        error = upoly.sub(target[k], approx[k])
        if not error:
            continue
        for piece, delta in zip(lifted, upoly.solve_diophantine(base, cofactors, error)):
            piece[k] = delta
    return lifted


def _candidate(target: MPoly, pieces: Sequence[Series], x: int, y: int, bound: int) -> Optional[MPoly]:
    """Primitive part of lc(target) * prod(pieces) truncated mod y^bound."""
    acc = pieces[0]
    for piece in pieces[1:]:
        acc = _series_mul(acc, piece, bound)
    lc = upoly.from_mpoly(target.leading_coefficient(x), y)
    lc_rows: Series = [[c] if c != 0 else [] for c in lc[:bound]]
    acc = _series_mul(lc_rows, acc, bound)
    cand = _series_to_mpoly(acc, target.ring, x, y).primitive_part(x)
    if cand.degree(x) <= 0:
        return None
    return cand.normalize()


def _recombine(qq: MPoly, lifted: List[Series], x: int, y: int, bound: int) -> List[MPoly]:
    """Group lifted pieces into true factors of qq, smallest subsets first."""
    remaining = list(range(len(lifted)))
    target = qq
    found: List[MPoly] = []
    size = 1
    while 2 * size <= len(remaining):
        hit = None
        for subset in combinations(remaining, size):
            # With an even split, a subset and its complement name the same factor.
            if 2 * size == len(remaining) and subset[0] != remaining[0]:
                continue
            cand = _candidate(target, [lifted[i] for i in subset], x, y, bound)
            if cand is None:
                continue
            ok, quotient = target.divides(cand)
            if ok:
                hit = (subset, cand, quotient)
                break
        if hit is None:
            size += 1
            continue
        subset, cand, target = hit
        found.append(cand)
        remaining = [i for i in remaining if i not in subset]
        logger.debug("recombination: pieces %s form %s", subset, cand)
    if remaining:
        found.append(target.primitive_part(x).normalize())
    return found


def bivariate_combine(
    p: MPoly,
    main_var: int,
    other_var: int,
    alpha,
    univariate_factors: Sequence[MPoly],
) -> Tuple[bool, Optional[MPoly], List[MPoly]]:
    """Lift a factorization of p(x, alpha) to the true factorization of p(x, y).

    Args:
        p:                  polynomial involving only x = main_var and y = other_var
        main_var:           index of x
        other_var:          index of y
        alpha:              the value of y at which the univariate factors were taken
        univariate_factors: pairwise coprime factors of p(x, alpha), product equal
                            to p(x, alpha) up to a constant

    Returns:
        (ok, content, factors).  When ok, p == content * prod(factors) exactly,
        content depends on y only and every factor is normalized.  ok is False
        for a bad evaluation point; the caller should retry with another one.
    """
    ring = p.ring
    x = ring.check_index(main_var)
    y = ring.check_index(other_var)
    if x == y:
        raise InvalidInputError("main_var and other_var must differ")
    for i in p.variables():
        if i not in (x, y):
            raise InvalidInputError(f"{p} involves {ring.symbols[i]}, expected only "
                                    f"{ring.symbols[x]} and {ring.symbols[y]}")
    bad = (False, None, [])
    if not univariate_factors or p.degree(x) <= 0:
        return bad

    field = ring.to_field()
    alpha = field.domain.convert(alpha)
    q = p.to_field().shift(y, alpha)
    content = q.content(x)
    qq = q.divexact(content)
    lc = upoly.from_mpoly(qq.leading_coefficient(x), y)
    if lc[0] == 0:
        logger.debug("bivariate: leading coefficient vanishes at %s", alpha)
        return bad

    base: List[UPoly] = []
    for u in univariate_factors:
        b = upoly.from_mpoly(u.to_field(), x)
        if upoly.degree(b) <= 0:
            raise InvalidInputError(f"univariate factor {u} must have positive degree")
        base.append(upoly.monic(b))
    image = upoly.from_mpoly(qq.evaluate({y: 0}), x)
    if image != upoly.scale(upoly.product(base), lc[0]):
        logger.debug("bivariate: factors do not multiply to p(x, %s)", alpha)
        return bad
    cofactors = upoly.bezout_cofactors(base)
    if cofactors is None:
        logger.debug("bivariate: univariate factors are not coprime")
        return bad

    bound = qq.degree(y) + 1
    lifted = _lift(base, cofactors, _monic_series(qq, lc, x, y, bound), bound)
    factors = [
        f.shift(y, -alpha).normalize().to_ring(ring)
        for f in _recombine(qq, lifted, x, y, bound)
    ]
    ok, cont = p.divides(prod(factors, ring))
    if not ok or cont.degree(x) > 0:
        logger.debug("bivariate: recombination did not reconstruct %s", p)
        return bad
    return True, cont, factors
