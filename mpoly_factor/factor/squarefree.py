"""Squarefree decomposition in characteristic zero.

Yun's algorithm, run one variable at a time.  For a variable v, every
irreducible factor that involves v is peeled off with its multiplicity via
gcd(g, dg/dv); what is left is the content of g with respect to v, which no
longer involves v and is handed on to the next variable with the same
multiplicity.  After the last variable only a constant remains.

  squarefree_decompose(x^2 * (x + y)^3 * 6)  ->  unit 6, {x: 2, x + y: 3}
"""

from __future__ import annotations

import logging
from typing import Dict, List, Tuple

from ..core.backend import gcd
from ..core.fac import Fac
from ..core.poly import MPoly, prod
from ..errors import FactorizationFailedError, InvalidInputError

logger = logging.getLogger(__name__)


def _yun(g: MPoly, v: int) -> Tuple[List[Tuple[MPoly, int]], MPoly]:
    """Split g into squarefree parts involving x_v plus the remaining content.

    Returns ([(a_i, i), ...], rest) with g == rest * prod(a_i ** i) up to a
    constant, every a_i squarefree and involving x_v, rest free of x_v.
    """
    dg = g.derivative(v)
    a0 = gcd(g, dg)
    b = g.divexact(a0)
    c = dg.divexact(a0)
    d = c - b.derivative(v)
    parts: List[Tuple[MPoly, int]] = []
    i = 1
    while b.degree(v) > 0:
        a = gcd(b, d)
        b_next = b.divexact(a)
        c = d.divexact(a)
        d = c - b_next.derivative(v)
        if a.degree(v) > 0:
            parts.append((a.normalize(), i))
        b = b_next
        i += 1
    rest = g.divexact(prod((a ** k for a, k in parts), g.ring))
    return parts, rest


def squarefree_decompose(f: MPoly) -> Fac:
    """Decompose f into pairwise coprime squarefree factors with multiplicities.

    Raises InvalidInputError for the zero polynomial.  A constant returns an
    empty factor list whose unit is f itself.
    """
    if f.is_zero():
        raise InvalidInputError("squarefree decomposition of the zero polynomial")
    ring = f.ring
    if f.is_constant():
        return Fac(ring, f.constant_coefficient())

    _, g = f.normal_form()
    found: Dict[MPoly, int] = {}
    work: List[Tuple[MPoly, int]] = [(g, 1)]
    for v in range(ring.nvars):
        pending: List[Tuple[MPoly, int]] = []
        for h, mult in work:
            if h.degree(v) <= 0:
                pending.append((h, mult))
                continue
            parts, rest = _yun(h, v)
            for a, i in parts:
                found[a] = found.get(a, 0) + mult * i
            if not rest.is_constant():
                pending.append((rest, mult))
        work = pending

    expanded = prod((a ** e for a, e in found.items()), ring)
    unit = f.divexact(expanded)
    if not unit.is_constant():
        # Every variable was visited, so only a constant can be left over.
        raise FactorizationFailedError(f"squarefree decomposition left a non-constant part {unit}")
    logger.debug("squarefree: %s -> %d components", f, len(found))
    return Fac(ring, unit.constant_coefficient(), found)


def is_squarefree(f: MPoly) -> bool:
    """True when no irreducible factor of f occurs more than once (False for 0)."""
    if f.is_zero():
        return False
    return all(e == 1 for _, e in squarefree_decompose(f))
