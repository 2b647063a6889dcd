"""Dense univariate polynomial arithmetic over the rationals.

A univariate polynomial is a list of Fraction coefficients, lowest degree
first, with no trailing zeros:

  UPoly = List[Fraction]

  3*x^2 + 1  ->  [Fraction(1), Fraction(0), Fraction(3)]

The zero polynomial is the empty list.  These helpers carry the extended
Euclidean algorithm and the multi-factor Bezout cofactors that Hensel lifting
needs to solve for its correction terms.
"""

from __future__ import annotations

from fractions import Fraction
from typing import List, Optional, Sequence, Tuple

from ..errors import InvalidInputError
from .poly import MPoly, PolyRing

UPoly = List[Fraction]


def trim(a: Sequence) -> UPoly:
    """Drop trailing zero coefficients."""
    out = [Fraction(c) for c in a]
    while out and out[-1] == 0:
        out.pop()
    return out


def degree(a: UPoly) -> int:
    return len(a) - 1


def add(a: UPoly, b: UPoly) -> UPoly:
    if len(a) < len(b):
        a, b = b, a
    out = list(a)
    for i, c in enumerate(b):
        out[i] += c
    return trim(out)


def sub(a: UPoly, b: UPoly) -> UPoly:
    out = list(a) + [Fraction(0)] * max(0, len(b) - len(a))
    for i, c in enumerate(b):
        out[i] -= c
    return trim(out)


def mul(a: UPoly, b: UPoly) -> UPoly:
    if not a or not b:
        return []
    out = [Fraction(0)] * (len(a) + len(b) - 1)
    for i, ca in enumerate(a):
        if ca == 0:
            continue
        for j, cb in enumerate(b):
            out[i + j] += ca * cb
    return trim(out)


def scale(a: UPoly, c) -> UPoly:
    return trim([x * c for x in a])


def monic(a: UPoly) -> UPoly:
    if not a:
        return []
    lc = a[-1]
    return [c / lc for c in a]


def divmod_(a: UPoly, b: UPoly) -> Tuple[UPoly, UPoly]:
    """Return (q, r) with a == q*b + r and deg r < deg b."""
    if not b:
        raise ZeroDivisionError("division by the zero polynomial")
    r = list(a)
    db = degree(b)
    if len(r) <= db:
        return [], trim(r)
    q = [Fraction(0)] * (len(r) - db)
    lc = b[-1]
    for k in range(len(r) - 1, db - 1, -1):
        c = r[k] / lc
        q[k - db] = c
        if c != 0:
            for j, cb in enumerate(b):
                r[k - db + j] -= c * cb
    return trim(q), trim(r[:db])


def rem(a: UPoly, b: UPoly) -> UPoly:
    return divmod_(a, b)[1]


def gcdex(a: UPoly, b: UPoly) -> Tuple[UPoly, UPoly, UPoly]:
    """Return (s, t, g) with s*a + t*b == g == monic gcd(a, b)."""
    r0, r1 = trim(a), trim(b)
    s0, s1 = [Fraction(1)], []
    t0, t1 = [], [Fraction(1)]
    while r1:
        q, r = divmod_(r0, r1)
        r0, r1 = r1, r
        s0, s1 = s1, sub(s0, mul(q, s1))
        t0, t1 = t1, sub(t0, mul(q, t1))
    if not r0:
        return [], [], []
    lc = r0[-1]
    return scale(s0, 1 / lc), scale(t0, 1 / lc), monic(r0)


def gcd(a: UPoly, b: UPoly) -> UPoly:
    return gcdex(a, b)[2]


def product(polys: Sequence[UPoly]) -> UPoly:
    out: UPoly = [Fraction(1)]
    for p in polys:
        out = mul(out, p)
    return out


def bezout_cofactors(factors: Sequence[UPoly]) -> Optional[List[UPoly]]:
    """Cofactors s_i with sum_i s_i * prod_{j != i} f_j == 1 and deg s_i < deg f_i.

    Returns None when the factors are not pairwise coprime.
    """
    if len(factors) == 1:
        return [[Fraction(1)]] if degree(factors[0]) > 0 else None
    out: List[UPoly] = []
    for i, f in enumerate(factors):
        others = product([g for j, g in enumerate(factors) if j != i])
        s, _t, g = gcdex(others, f)
        if g != [Fraction(1)]:
            return None
        out.append(rem(s, f))
    return out


def solve_diophantine(factors: Sequence[UPoly], cofactors: Sequence[UPoly], c: UPoly) -> List[UPoly]:
    """delta_i with sum_i delta_i * prod_{j != i} f_j == c and deg delta_i < deg f_i.

    Exact whenever deg c < sum(deg f_i).
    """
    return [rem(mul(c, s), f) for f, s in zip(factors, cofactors)]


def from_mpoly(p: MPoly, idx: int) -> UPoly:
    """Coefficients of a polynomial that only involves x_idx."""
    out = [Fraction(0)] * (max(p.degree(idx), -1) + 1)
    for exp, coeff in p.terms():
        if any(e for i, e in enumerate(exp) if i != idx):
            raise InvalidInputError(f"{p} involves variables other than {p.ring.symbols[idx]}")
        out[exp[idx]] = Fraction(coeff)
    return trim(out)


def to_mpoly(ring: PolyRing, a: UPoly, idx: int) -> MPoly:
    base = [0] * ring.nvars
    terms = {}
    for k, c in enumerate(a):
        if c != 0:
            base[idx] = k
            terms[tuple(base)] = c
    return ring.from_dict(terms)
