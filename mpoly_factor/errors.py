"""Exception hierarchy for the factorization core.

Retryable conditions (bad evaluation point, unresolved split, leading
coefficient mismatch) are reported as ``ok = False`` return values and never
raised.  Everything here is fatal for the call that raised it.
"""


class FactorizationError(Exception):
    """Base class for all errors raised by mpoly_factor."""


class InvalidInputError(FactorizationError, ValueError):
    """Malformed input: zero polynomial, mismatched argument lengths, bad index."""


class DomainError(InvalidInputError):
    """Coefficient or ring that the exact characteristic-zero core cannot use."""


class DivisionError(FactorizationError, ArithmeticError):
    """A checked exact division found a nonzero remainder."""


class FactorizationFailedError(FactorizationError):
    """Every evaluation point was rejected or the final verification failed."""
