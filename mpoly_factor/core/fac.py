"""Factor-list value: a unit together with irreducible factors and multiplicities.

Invariant: ``fac.unit * prod(p ** e for p, e in fac) == original`` exactly.
"""

from __future__ import annotations

from typing import Dict, Iterator, List, Mapping, Optional, Tuple

from ..errors import InvalidInputError
from .poly import MPoly, PolyRing


class Fac:
    """Immutable factorization result.

    Attributes:
        ring: ring of the factored polynomial (needed to expand an empty list)
        unit: element of ring.domain
    """

    __slots__ = ("ring", "unit", "_factors")

    def __init__(self, ring: PolyRing, unit, factors: Optional[Mapping[MPoly, int]] = None):
        self.ring = ring
        self.unit = ring.domain.convert(unit)
        self._factors: Dict[MPoly, int] = {}
        for p, e in (factors or {}).items():
            if not isinstance(e, int) or e < 1:
                raise InvalidInputError(f"multiplicity must be a positive int, got {e!r}")
            if p.ring is not ring:
                raise InvalidInputError(f"factor {p} does not belong to {ring!r}")
            self._factors[p] = self._factors.get(p, 0) + e

    def __iter__(self) -> Iterator[Tuple[MPoly, int]]:
        return iter(self._factors.items())

    def __len__(self) -> int:
        return len(self._factors)

    def __contains__(self, p) -> bool:
        return p in self._factors

    def __getitem__(self, p: MPoly) -> int:
        return self._factors[p]

    def items(self) -> List[Tuple[MPoly, int]]:
        return list(self._factors.items())

    def factors(self) -> List[MPoly]:
        return list(self._factors)

    def expand(self) -> MPoly:
        """Multiply the factorization back out."""
        result = self.ring.constant(self.unit)
        for p, e in self._factors.items():
            result = result * p ** e
        return result

    def __eq__(self, other) -> bool:
        if not isinstance(other, Fac):
            return NotImplemented
        return self.ring is other.ring and self.unit == other.unit and self._factors == other._factors

    __hash__ = None

    def __repr__(self) -> str:
        body = ", ".join(f"({p}, {e})" for p, e in self._factors.items())
        return f"Fac(unit={self.unit}, [{body}])"
