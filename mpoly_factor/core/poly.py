"""Exact sparse multivariate polynomials over ZZ or QQ.

A polynomial is stored as a dictionary mapping monomial exponent tuples to
nonzero coefficients of its ring's domain.

  terms    =  Dict[Exponent, coefficient]
  Exponent =  Tuple[int, ...]   (one int per variable, giving that variable's degree)

Example (ring QQ[x, y]):
  x^2*y + 3  ->  {(2, 1): Fraction(1), (0, 0): Fraction(3)}

The zero polynomial has no terms.  ``MPoly`` values are immutable: every
operation returns a new polynomial and the term dictionary of an existing
value is never written to after construction.

Rings are parents: ``polynomial_ring(domain, names)`` returns the same
``PolyRing`` object for the same (domain, names) pair unless ``cached=False``
is requested.
"""

from __future__ import annotations

import math
import threading
from fractions import Fraction
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from ..errors import DivisionError, DomainError, InvalidInputError
from .domains import Domain, ensure_exact, get_domain

# Exponent tuple: element i is the degree of variable x_i in the monomial.
Exponent = Tuple[int, ...]


class PolyRing:
    """Polynomial ring D[x_0, ..., x_{n-1}] with a fixed variable order."""

    __slots__ = ("domain", "symbols", "nvars", "_zero_exp")

    def __init__(self, domain: Domain, symbols: Sequence[str]):
        self.domain = ensure_exact(domain)
        self.symbols = tuple(str(s) for s in symbols)
        if not self.symbols:
            raise InvalidInputError("a polynomial ring needs at least one variable")
        if len(set(self.symbols)) != len(self.symbols):
            raise InvalidInputError(f"variable names must be distinct: {self.symbols}")
        self.nvars = len(self.symbols)
        self._zero_exp = (0,) * self.nvars

    # ---- Constructors ----

    @property
    def zero(self) -> "MPoly":
        return MPoly(self, {})

    @property
    def one(self) -> "MPoly":
        return self.constant(1)

    @property
    def gens(self) -> Tuple["MPoly", ...]:
        return tuple(self.gen(i) for i in range(self.nvars))

    def gen(self, idx: int) -> "MPoly":
        """Return the polynomial representing the single variable x_idx."""
        self.check_index(idx)
        exp = [0] * self.nvars
        exp[idx] = 1
        return MPoly(self, {tuple(exp): self.domain.one})

    def constant(self, value) -> "MPoly":
        coeff = self.domain.convert(value)
        if coeff == 0:
            return self.zero
        return MPoly(self, {self._zero_exp: coeff})

    def from_dict(self, terms: Mapping[Exponent, object]) -> "MPoly":
        """Build a polynomial from {exponent: coefficient}, converting coefficients."""
        out: Dict[Exponent, object] = {}
        for exp, coeff in terms.items():
            exp = tuple(int(e) for e in exp)
            if len(exp) != self.nvars or any(e < 0 for e in exp):
                raise InvalidInputError(f"bad exponent {exp} for {self.nvars} variables")
            c = self.domain.convert(coeff)
            if c != 0:
                out[exp] = out.get(exp, 0) + c
        return MPoly(self, _canonicalize(out))

    def from_coefficients(self, idx: int, coeffs: Mapping[int, "MPoly"]) -> "MPoly":
        """Return sum(c * x_idx^k) for a {k: c} mapping of polynomials free of x_idx."""
        out: Dict[Exponent, object] = {}
        for k, c in coeffs.items():
            for exp, coeff in c._terms.items():
                shifted = exp[:idx] + (exp[idx] + k,) + exp[idx + 1:]
                out[shifted] = out.get(shifted, 0) + coeff
        return MPoly(self, _canonicalize(out))

    def __call__(self, value) -> "MPoly":
        if isinstance(value, MPoly):
            if value.ring is not self:
                raise DomainError(f"{value!r} belongs to {value.ring!r}, not {self!r}")
            return value
        return self.constant(value)

    # ---- Utility ----

    def check_index(self, idx: int) -> int:
        if not isinstance(idx, int) or idx < 0 or idx >= self.nvars:
            raise InvalidInputError(f"Invalid variable index {idx} for nvars={self.nvars}")
        return idx

    def change_domain(self, domain: Domain) -> "PolyRing":
        if domain is self.domain:
            return self
        return polynomial_ring(domain, self.symbols)[0]

    def to_field(self) -> "PolyRing":
        """The same variables over the fraction field of the domain."""
        return self.change_domain(self.domain.field)

    def __repr__(self) -> str:
        return f"PolyRing({self.domain!r}, {list(self.symbols)})"


def _canonicalize(terms: Dict[Exponent, object]) -> Dict[Exponent, object]:
    """Drop any monomials with coefficient zero."""
    return {exp: coeff for exp, coeff in terms.items() if coeff != 0}


class MPoly:
    """Immutable multivariate polynomial.

    Attributes:
        ring:   the PolyRing this polynomial belongs to
        _terms: {exponent tuple: nonzero coefficient}, never mutated
    """

    __slots__ = ("ring", "_terms")

    def __init__(self, ring: PolyRing, terms: Dict[Exponent, object]):
        self.ring = ring
        self._terms = terms

    # ---- Coercion ----

    def _coerce(self, other) -> Optional["MPoly"]:
        if isinstance(other, MPoly):
            if other.ring is not self.ring:
                raise DomainError(f"cannot combine polynomials from {self.ring!r} and {other.ring!r}")
            return other
        if isinstance(other, (int, Fraction)):
            return self.ring.constant(other)
        return None

    # ---- Arithmetic ----

    def __add__(self, other) -> "MPoly":
        other = self._coerce(other)
        if other is None:
            return NotImplemented
        if not other._terms:
            return self
        if not self._terms:
            return other
        out = dict(self._terms)
        for exp, coeff in other._terms.items():
            out[exp] = out.get(exp, 0) + coeff
        return MPoly(self.ring, _canonicalize(out))

    __radd__ = __add__

    def __neg__(self) -> "MPoly":
        return MPoly(self.ring, {exp: -coeff for exp, coeff in self._terms.items()})

    def __sub__(self, other) -> "MPoly":
        other = self._coerce(other)
        if other is None:
            return NotImplemented
        if not other._terms:
            return self
        out = dict(self._terms)
        for exp, coeff in other._terms.items():
            out[exp] = out.get(exp, 0) - coeff
        return MPoly(self.ring, _canonicalize(out))

    def __rsub__(self, other) -> "MPoly":
        other = self._coerce(other)
        if other is None:
            return NotImplemented
        return other - self

    def __mul__(self, other) -> "MPoly":
        other = self._coerce(other)
        if other is None:
            return NotImplemented
        if not self._terms or not other._terms:
            return self.ring.zero
        out: Dict[Exponent, object] = {}
        for exp_a, coeff_a in self._terms.items():
            for exp_b, coeff_b in other._terms.items():
                # Multiply monomials by adding their exponents component-wise
                exp = tuple(a + b for a, b in zip(exp_a, exp_b))
                out[exp] = out.get(exp, 0) + coeff_a * coeff_b
        return MPoly(self.ring, _canonicalize(out))

    __rmul__ = __mul__

    def __pow__(self, n: int) -> "MPoly":
        if not isinstance(n, int) or n < 0:
            raise InvalidInputError(f"exponent must be a non-negative int, got {n!r}")
        result = self.ring.one
        base = self
        while n:
            if n & 1:
                result = result * base
            n >>= 1
            if n:
                base = base * base
        return result

    def scale(self, c) -> "MPoly":
        """Multiply every coefficient by the scalar c (converted to the domain)."""
        c = self.ring.domain.convert(c)
        if c == 0:
            return self.ring.zero
        return MPoly(self.ring, {exp: coeff * c for exp, coeff in self._terms.items()})

    def mul_var_power(self, idx: int, k: int) -> "MPoly":
        """Return self * x_idx^k."""
        if k == 0:
            return self
        return MPoly(
            self.ring,
            {exp[:idx] + (exp[idx] + k,) + exp[idx + 1:]: c for exp, c in self._terms.items()},
        )

    # ---- Exact division ----

    def divexact(self, divisor, check: bool = True) -> "MPoly":
        """Return q with self == q * divisor.

        Runs the division algorithm in lexicographic order.  With ``check`` a
        nonzero remainder raises DivisionError; without it the quotient built so
        far is returned as soon as a leading term fails to divide.
        """
        divisor = self.ring(divisor)
        if not divisor._terms:
            raise ZeroDivisionError("exact division by the zero polynomial")
        domain = self.ring.domain
        if divisor.is_constant():
            c = divisor.constant_coefficient()
            return MPoly(self.ring, _canonicalize(
                {exp: domain.divexact(coeff, c, check) for exp, coeff in self._terms.items()}))

        lead_exp = max(divisor._terms)
        lead_coeff = divisor._terms[lead_exp]
        remainder = dict(self._terms)
        quotient: Dict[Exponent, object] = {}
        while remainder:
            exp = max(remainder)
            coeff = remainder[exp]
            q_exp = tuple(a - b for a, b in zip(exp, lead_exp))
            if any(e < 0 for e in q_exp):
                if check:
                    raise DivisionError(f"{divisor} does not divide {self}")
                break
            try:
                q_coeff = domain.divexact(coeff, lead_coeff, check=True)
            except DivisionError:
                if check:
                    raise DivisionError(f"{divisor} does not divide {self}") from None
                break
            quotient[q_exp] = q_coeff
            for d_exp, d_coeff in divisor._terms.items():
                t = tuple(a + b for a, b in zip(q_exp, d_exp))
                value = remainder.get(t, 0) - q_coeff * d_coeff
                if value == 0:
                    remainder.pop(t, None)
                else:
                    remainder[t] = value
        return MPoly(self.ring, quotient)

    def divides(self, divisor) -> Tuple[bool, Optional["MPoly"]]:
        """Return (True, q) with self == q * divisor, or (False, None)."""
        divisor = self.ring(divisor)
        if not divisor._terms:
            return (not self._terms), (self.ring.zero if not self._terms else None)
        for i in range(self.ring.nvars):
            if self.degree(i) >= 0 and self.degree(i) < divisor.degree(i):
                return False, None
        try:
            return True, self.divexact(divisor, check=True)
        except DivisionError:
            return False, None

    # ---- Comparison / Hashing ----

    def __eq__(self, other) -> bool:
        if isinstance(other, MPoly):
            return other.ring is self.ring and other._terms == self._terms
        if isinstance(other, (int, Fraction)):
            if other == 0:
                return not self._terms
            return self.is_constant() and self.constant_coefficient() == other
        return NotImplemented

    def __hash__(self):
        if self.is_constant():
            # Consistent with equality against plain scalars.
            return hash(self.constant_coefficient())
        return hash(frozenset(self._terms.items()))

    def __bool__(self) -> bool:
        return bool(self._terms)

    def __repr__(self) -> str:
        if not self._terms:
            return "0"
        parts = []
        for exp, coeff in self.terms():
            names = [
                name if e == 1 else f"{name}^{e}"
                for name, e in zip(self.ring.symbols, exp) if e > 0
            ]
            if not names:
                parts.append(str(coeff))
            elif coeff == 1:
                parts.append("*".join(names))
            elif coeff == -1:
                parts.append("-" + "*".join(names))
            else:
                c = f"({coeff})" if isinstance(coeff, Fraction) and coeff.denominator != 1 else str(coeff)
                parts.append(c + "*" + "*".join(names))
        return " + ".join(parts).replace("+ -", "- ")

    # ---- Inspection ----

    def terms(self) -> List[Tuple[Exponent, object]]:
        """(exponent, coefficient) pairs in descending lexicographic order."""
        return sorted(self._terms.items(), reverse=True)

    def is_zero(self) -> bool:
        return not self._terms

    def is_constant(self) -> bool:
        return not self._terms or (len(self._terms) == 1 and self.ring._zero_exp in self._terms)

    def constant_coefficient(self):
        return self._terms.get(self.ring._zero_exp, self.ring.domain.zero)

    def leading_term(self) -> Tuple[Exponent, object]:
        """Lexicographically largest (exponent, coefficient)."""
        if not self._terms:
            raise InvalidInputError("the zero polynomial has no leading term")
        exp = max(self._terms)
        return exp, self._terms[exp]

    def degree(self, idx: int) -> int:
        """Degree in x_idx; -1 for the zero polynomial."""
        self.ring.check_index(idx)
        if not self._terms:
            return -1
        return max(exp[idx] for exp in self._terms)

    def degrees(self) -> Tuple[int, ...]:
        """Degree vector: per-variable maximum exponent."""
        if not self._terms:
            return (-1,) * self.ring.nvars
        return tuple(max(col) for col in zip(*self._terms))

    def total_degree(self) -> int:
        if not self._terms:
            return -1
        return max(sum(exp) for exp in self._terms)

    def variables(self) -> List[int]:
        """Indices of the variables that occur with positive degree."""
        return [i for i, d in enumerate(self.degrees()) if d > 0]

    def coefficients(self, idx: int) -> Dict[int, "MPoly"]:
        """View as a polynomial in x_idx: {power: coefficient free of x_idx}."""
        self.ring.check_index(idx)
        buckets: Dict[int, Dict[Exponent, object]] = {}
        for exp, coeff in self._terms.items():
            k = exp[idx]
            buckets.setdefault(k, {})[exp[:idx] + (0,) + exp[idx + 1:]] = coeff
        return {k: MPoly(self.ring, terms) for k, terms in buckets.items()}

    def coefficient(self, idx: int, k: int) -> "MPoly":
        """Coefficient of x_idx^k, as a polynomial free of x_idx."""
        self.ring.check_index(idx)
        return MPoly(self.ring, {
            exp[:idx] + (0,) + exp[idx + 1:]: coeff
            for exp, coeff in self._terms.items() if exp[idx] == k
        })

    def leading_coefficient(self, idx: int) -> "MPoly":
        """Leading coefficient with respect to x_idx (a polynomial in the others)."""
        d = self.degree(idx)
        if d < 0:
            return self.ring.zero
        return self.coefficient(idx, d)

    # ---- Calculus and substitution ----

    def derivative(self, idx: int) -> "MPoly":
        self.ring.check_index(idx)
        out: Dict[Exponent, object] = {}
        for exp, coeff in self._terms.items():
            k = exp[idx]
            if k == 0:
                continue
            out[exp[:idx] + (k - 1,) + exp[idx + 1:]] = coeff * k
        return MPoly(self.ring, out)

    def evaluate(self, values: Mapping[int, object]) -> "MPoly":
        """Substitute x_i = values[i]; the result stays in the same ring."""
        domain = self.ring.domain
        point = {self.ring.check_index(i): domain.convert(v) for i, v in values.items()}
        if not point:
            return self
        out: Dict[Exponent, object] = {}
        for exp, coeff in self._terms.items():
            new_exp = list(exp)
            for i, v in point.items():
                if exp[i]:
                    coeff = coeff * v ** exp[i]
                    new_exp[i] = 0
            if coeff != 0:
                key = tuple(new_exp)
                out[key] = out.get(key, 0) + coeff
        return MPoly(self.ring, _canonicalize(out))

    def shift(self, idx: int, a) -> "MPoly":
        """Substitute x_idx -> x_idx + a."""
        a = self.ring.domain.convert(a)
        if a == 0 or self.degree(idx) <= 0:
            return self
        coeffs = self.coefficients(idx)
        linear = self.ring.gen(idx) + a
        # Horner scheme in x_idx
        result = self.ring.zero
        for k in range(self.degree(idx), -1, -1):
            result = result * linear
            c = coeffs.get(k)
            if c is not None:
                result = result + c
        return result

    def truncate(self, bounds: Mapping[int, int]) -> "MPoly":
        """Drop every term whose degree in some x_i exceeds bounds[i]."""
        return MPoly(self.ring, {
            exp: coeff for exp, coeff in self._terms.items()
            if all(exp[i] <= b for i, b in bounds.items())
        })

    # ---- Content and normalization ----

    def content(self, idx: int) -> "MPoly":
        """Gcd of the coefficients of self viewed as a polynomial in x_idx."""
        from .backend import gcd

        result = self.ring.zero
        for c in self.coefficients(idx).values():
            result = gcd(result, c)
            if result.is_constant():
                return self.ring.one
        return result

    def primitive_part(self, idx: int) -> "MPoly":
        c = self.content(idx)
        if c.is_constant():
            return self
        return self.divexact(c)

    def normal_form(self) -> Tuple[object, "MPoly"]:
        """Split self as unit * p with p integral, primitive, positive leading coefficient."""
        if not self._terms:
            return self.ring.domain.zero, self
        domain = self.ring.domain
        fracs = [Fraction(c) for c in self._terms.values()]
        den = 1
        for f in fracs:
            den = den * f.denominator // math.gcd(den, f.denominator)
        num = 0
        for f in fracs:
            num = math.gcd(num, f.numerator * (den // f.denominator))
        unit = Fraction(num, den)
        if self.leading_term()[1] < 0:
            unit = -unit
        p = MPoly(self.ring, {
            exp: domain.convert(Fraction(c) / unit) for exp, c in self._terms.items()
        })
        return domain.convert(unit), p

    def normalize(self) -> "MPoly":
        return self.normal_form()[1]

    def monic(self) -> "MPoly":
        """Divide by the lexicographic leading coefficient (field domains only)."""
        if not self.ring.domain.is_field:
            raise DomainError("monic() needs a field coefficient domain")
        _, lc = self.leading_term()
        return MPoly(self.ring, {exp: c / lc for exp, c in self._terms.items()})

    def change_domain(self, domain: Domain) -> "MPoly":
        """Map the coefficients into ``domain`` (ZZ requires integral coefficients)."""
        return self.to_ring(self.ring.change_domain(domain))

    def to_ring(self, ring: PolyRing) -> "MPoly":
        """The same polynomial in another ring over the same variables."""
        if ring is self.ring:
            return self
        if ring.symbols != self.ring.symbols:
            raise DomainError(f"cannot move {self} from {self.ring!r} to {ring!r}")
        return MPoly(ring, {exp: ring.domain.convert(c) for exp, c in self._terms.items()})

    def to_field(self) -> "MPoly":
        return self.change_domain(self.ring.domain.field)


_RING_CACHE: Dict[Tuple[str, Tuple[str, ...]], PolyRing] = {}
_RING_CACHE_LOCK = threading.Lock()


def polynomial_ring(
    domain: Domain, names: Iterable[str], cached: bool = True
) -> Tuple[PolyRing, Tuple[MPoly, ...]]:
    """Return (R, gens) for R = domain[names].

    With ``cached`` (the default) the same ring object is returned for the
    same construction data; ``cached=False`` always builds a fresh ring that
    does not compare identical to any other.
    """
    names = tuple(str(n) for n in names)
    domain = ensure_exact(domain)
    if not cached:
        ring = PolyRing(domain, names)
        return ring, ring.gens
    if get_domain(domain.name) is not domain:
        # Unregistered domain instance: never shadow the cached entry.
        ring = PolyRing(domain, names)
        return ring, ring.gens
    key = (domain.name, names)
    with _RING_CACHE_LOCK:
        ring = _RING_CACHE.get(key)
        if ring is None:
            ring = PolyRing(domain, names)
            _RING_CACHE[key] = ring
    return ring, ring.gens


def prod(polys: Iterable[MPoly], ring: PolyRing) -> MPoly:
    """Product of an iterable of polynomials (ring.one when empty)."""
    result = ring.one
    for p in polys:
        result = result * p
    return result
