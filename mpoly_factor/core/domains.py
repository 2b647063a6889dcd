"""Exact characteristic-zero coefficient domains.

Two domains are supported, and only these two:

  ZZ  -- the integer ring, elements are Python ``int``
  QQ  -- the rational field, elements are ``fractions.Fraction``

Inexact values (floats, complex numbers, decimals) are rejected at conversion
so that every downstream identity test is exact.

Domains are parents in the sense of a computer algebra system: one object per
construction key, held in a process-wide registry.  ``get_domain`` returns the
registered object; entries are inserted once and never replaced.
"""

from __future__ import annotations

import math
import numbers
import threading
from fractions import Fraction
from typing import Dict

from ..errors import DivisionError, DomainError


class Domain:
    """Interface every coefficient domain implements."""

    name: str = ""
    is_field: bool = False

    @property
    def zero(self):
        return self.convert(0)

    @property
    def one(self):
        return self.convert(1)

    @property
    def field(self) -> "Domain":
        """The fraction field of this domain."""
        raise NotImplementedError

    def convert(self, value):
        raise NotImplementedError

    def __call__(self, value):
        return self.convert(value)

    def is_unit(self, a) -> bool:
        raise NotImplementedError

    def divexact(self, a, b, check: bool = True):
        raise NotImplementedError

    def gcd(self, a, b):
        raise NotImplementedError

    def __repr__(self) -> str:
        return self.name


def _reject_inexact(value, name: str) -> None:
    if isinstance(value, bool):
        return
    if isinstance(value, (float, complex)) or not isinstance(value, numbers.Rational):
        raise DomainError(f"cannot convert {value!r} of type {type(value).__name__} to {name}")


class IntegerRing(Domain):
    """The ring of integers."""

    name = "ZZ"
    is_field = False

    @property
    def field(self) -> Domain:
        return get_domain("QQ")

    def convert(self, value) -> int:
        _reject_inexact(value, self.name)
        if isinstance(value, numbers.Integral):
            return int(value)
        frac = Fraction(value)
        if frac.denominator != 1:
            raise DomainError(f"{value!r} is not an integer")
        return frac.numerator

    def is_unit(self, a) -> bool:
        return a in (1, -1)

    def divexact(self, a, b, check: bool = True) -> int:
        if b == 0:
            raise ZeroDivisionError("exact division by zero")
        q, r = divmod(a, b)
        if check and r != 0:
            raise DivisionError(f"{b} does not divide {a}")
        return q

    def gcd(self, a, b) -> int:
        return math.gcd(a, b)


class RationalField(Domain):
    """The field of rational numbers."""

    name = "QQ"
    is_field = True

    @property
    def field(self) -> Domain:
        return self

    def convert(self, value) -> Fraction:
        _reject_inexact(value, self.name)
        return Fraction(value)

    def is_unit(self, a) -> bool:
        return a != 0

    def divexact(self, a, b, check: bool = True) -> Fraction:
        if b == 0:
            raise ZeroDivisionError("exact division by zero")
        return Fraction(a) / b

    def gcd(self, a, b) -> Fraction:
        # Any nonzero element generates the unit ideal.
        if a == 0 and b == 0:
            return Fraction(0)
        return Fraction(1)


_REGISTRY: Dict[str, Domain] = {}
_REGISTRY_LOCK = threading.Lock()
_FACTORIES = {"ZZ": IntegerRing, "QQ": RationalField}


def get_domain(name: str, cached: bool = True) -> Domain:
    """Return the domain called ``name`` ("ZZ" or "QQ").

    The cached path hands out one object per name for the process lifetime.
    ``cached=False`` builds a fresh, unregistered instance.
    """
    try:
        factory = _FACTORIES[name]
    except KeyError:
        raise DomainError(f"unsupported coefficient domain {name!r}; expected ZZ or QQ") from None
    if not cached:
        return factory()
    with _REGISTRY_LOCK:
        domain = _REGISTRY.get(name)
        if domain is None:
            domain = factory()
            _REGISTRY[name] = domain
    return domain


ZZ = get_domain("ZZ")
QQ = get_domain("QQ")


def ensure_exact(domain: Domain) -> Domain:
    """Reject any domain outside the closed {ZZ, QQ} set."""
    if not isinstance(domain, (IntegerRing, RationalField)):
        raise DomainError(f"unsupported coefficient domain {domain!r}; expected ZZ or QQ")
    return domain
