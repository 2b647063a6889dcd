"""Multivariate polynomial factorization over ZZ and QQ."""

from .config import FactorConfig, DEFAULT_CONFIG
from .errors import (
    FactorizationError, InvalidInputError, DomainError, DivisionError, FactorizationFailedError,
)
from .core import ZZ, QQ, MPoly, PolyRing, Fac, polynomial_ring, get_domain
from .factor import (
    squarefree_decompose, is_squarefree, bivariate_combine,
    hensel_lift_with_leading_coeffs, factor, is_irreducible,
)

# Squarefree factorization is exposed under its conventional name as well.
factor_squarefree = squarefree_decompose

__version__ = "0.1.0"
