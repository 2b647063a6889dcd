"""Conversion utilities between MPoly and SymPy's sparse polynomial rings.

SymPy supplies the two primitive services the factorization core consumes
rather than implements:

  gcd                 -- multivariate gcd over ZZ or QQ
  factor_univariate   -- the univariate factorization oracle

Both work on ``sympy.polys.rings.PolyElement`` values, which are dictionaries
of exponent tuples just like MPoly, so conversion is a coefficient-by-
coefficient copy.
"""

from __future__ import annotations

import functools
import logging
from fractions import Fraction
from typing import List, Tuple

from sympy import QQ as SYMPY_QQ, ZZ as SYMPY_ZZ
from sympy.polys.rings import PolyRing as SympyPolyRing

from ..errors import InvalidInputError
from .poly import MPoly, PolyRing

logger = logging.getLogger(__name__)


@functools.lru_cache(maxsize=None)
def _sympy_ring(symbols: Tuple[str, ...], is_field: bool) -> SympyPolyRing:
    """SymPy ring with the same variable order; built once per signature."""
    return SympyPolyRing(symbols, SYMPY_QQ if is_field else SYMPY_ZZ)


def _to_sympy_coeff(c, is_field: bool):
    if is_field:
        c = Fraction(c)
        return SYMPY_QQ(c.numerator, c.denominator)
    return SYMPY_ZZ(int(c))


def _from_sympy_coeff(c, is_field: bool):
    if is_field:
        return Fraction(int(c.numerator), int(c.denominator))
    return int(c)


def to_sympy(poly: MPoly):
    """Convert an MPoly to a SymPy PolyElement over the matching domain."""
    is_field = poly.ring.domain.is_field
    sring = _sympy_ring(poly.ring.symbols, is_field)
    return sring.from_dict({
        exp: _to_sympy_coeff(c, is_field) for exp, c in poly.terms()
    })


def from_sympy(elem, ring: PolyRing) -> MPoly:
    """Convert a SymPy PolyElement back into ``ring``."""
    is_field = elem.ring.domain.is_Field
    return ring.from_dict({
        tuple(exp): _from_sympy_coeff(c, is_field) for exp, c in elem.items()
    })


def gcd(a: MPoly, b: MPoly) -> MPoly:
    """Greatest common divisor, normalized (integral, primitive, positive leading term)."""
    if a.ring is not b.ring:
        raise InvalidInputError(f"gcd across rings {a.ring!r} and {b.ring!r}")
    if a.is_zero():
        return b.normalize()
    if b.is_zero():
        return a.normalize()
    if a.is_constant() or b.is_constant():
        return a.ring.one
    g = from_sympy(to_sympy(a).gcd(to_sympy(b)), a.ring)
    return g.normalize()


def factor_univariate(poly: MPoly, idx: int) -> Tuple[object, List[Tuple[MPoly, int]]]:
    """Univariate factorization oracle.

    ``poly`` must involve no variable other than x_idx.  Returns
    (unit, [(irreducible, multiplicity), ...]) with unit * prod(f**e) == poly
    and every factor normalized.
    """
    ring = poly.ring
    for i in poly.variables():
        if i != idx:
            raise InvalidInputError(f"{poly} is not univariate in {ring.symbols[idx]}")
    if poly.is_zero():
        raise InvalidInputError("cannot factor the zero polynomial")
    is_field = ring.domain.is_field
    sring = _sympy_ring((ring.symbols[idx],), is_field)
    elem = sring.from_dict({
        (exp[idx],): _to_sympy_coeff(c, is_field) for exp, c in poly.terms()
    })
    _coeff, sym_factors = elem.factor_list()

    factors: List[Tuple[MPoly, int]] = []
    product = ring.one
    for f, mult in sym_factors:
        terms = {}
        for (k,), c in f.items():
            exp = [0] * ring.nvars
            exp[idx] = k
            terms[tuple(exp)] = _from_sympy_coeff(c, is_field)
        p = ring.from_dict(terms).normalize()
        if p.is_constant():
            continue
        factors.append((p, mult))
        product = product * p ** mult
    unit = poly.divexact(product).constant_coefficient()
    logger.debug("univariate oracle: %s -> %d factors", poly, len(factors))
    return unit, factors
