"""Multivariate factorization driver.

Sequence for a nonzero f over ZZ or QQ:

  1. squarefree decomposition
  2. per squarefree component g: main variable x = smallest positive degree,
     content of g in the other variables (factored recursively), primitive
     part pp
  3. pp univariate   -> univariate oracle
     pp bivariate    -> random point, univariate oracle, Bivariate Combiner
     pp with more    -> random point, univariate oracle, Bivariate Combiner on
                        a bivariate image to group the univariate factors, then
                        the Leading-Coefficient Lifter.  The targets come from
                        matching the factors of lc_x(pp) against the leading
                        coefficients of the bivariate factors; when that is
                        ambiguous every factor gets lc_x(pp) in full
  4. verify by exact division; a bad point means another try, up to
     FactorConfig.max_attempts
  5. the unit is whatever constant is left after dividing f by the factors

Evaluation points come from a random.Random seeded by the config, so the same
input and config always take the same path.
"""

from __future__ import annotations

import logging
import random
from typing import Dict, List, Optional, Sequence

from ..config import DEFAULT_CONFIG, FactorConfig
from ..core.backend import factor_univariate, gcd
from ..core.fac import Fac
from ..core.poly import MPoly, prod
from ..errors import DivisionError, FactorizationFailedError, InvalidInputError
from .bivariate import bivariate_combine
from .hensel import hensel_lift_with_leading_coeffs
from .squarefree import squarefree_decompose

logger = logging.getLogger(__name__)


def _is_good_image(pp: MPoly, image: MPoly, x: int) -> bool:
    """The image keeps the degree in x and stays squarefree."""
    if image.degree(x) != pp.degree(x):
        return False
    return gcd(image, image.derivative(x)).is_constant()


def _draw_point(rng: random.Random, variables: Sequence[int], config: FactorConfig,
                attempt: int) -> Dict[int, int]:
    low, high = config.eval_range(attempt)
    return {v: rng.randint(low, high) for v in variables}


def _univariate(pp: MPoly, x: int) -> List[MPoly]:
    return [f for f, _ in factor_univariate(pp, x)[1]]


def _factor_bivariate(pp: MPoly, x: int, y: int, rng: random.Random,
                      config: FactorConfig) -> List[MPoly]:
    for attempt in range(config.max_attempts):
        point = _draw_point(rng, [y], config, attempt)
        image = pp.evaluate(point)
        if not _is_good_image(pp, image, x):
            logger.debug("bivariate: rejected point %s", point)
            continue
        images = _univariate(image, x)
        if len(images) == 1:
            return [pp]
        ok, content, factors = bivariate_combine(pp, x, y, point[y], images)
        if ok and content.is_constant():
            return factors
        logger.debug("bivariate: combination failed at %s, retrying", point)
    raise FactorizationFailedError(f"no usable evaluation point for {pp} after {config.max_attempts} attempts")


def _distribute_leading_coefficient(lc_fac: Fac, bfactors: List[MPoly], x: int, y: int,
                                    rest_point: Dict[int, int]) -> Optional[List[MPoly]]:
    """Split lc_x(pp) among the factors of the bivariate image.

    Every irreducible q of the leading coefficient is evaluated at the rest of
    the point; the power of q(y) dividing lc_x of a bivariate factor tells how
    often q belongs to that factor.  Returns None when the images of the q's
    cannot be told apart or do not account for every leading coefficient.
    """
    ring = lc_fac.ring
    images = []
    for q, e in lc_fac:
        qi = q.evaluate(rest_point)
        if qi.degree(y) <= 0:
            return None
        images.append((q, e, qi.normalize()))
    for i, (_, _, a) in enumerate(images):
        for _, _, b in images[i + 1:]:
            if not gcd(a, b).is_constant():
                return None

    targets: List[MPoly] = []
    used = [0] * len(images)
    for b in bfactors:
        rest = b.leading_coefficient(x)
        target = ring.one
        for j, (q, _, qi) in enumerate(images):
            ok, quotient = rest.divides(qi)
            while ok:
                rest = quotient
                target = target * q
                used[j] += 1
                ok, quotient = rest.divides(qi)
        if not rest.is_constant():
            return None
        targets.append(target)
    if used != [e for _, e, _ in images]:
        return None
    targets[0] = targets[0].scale(lc_fac.unit)
    return targets


def _lift_grouped(pp: MPoly, grouped: List[MPoly], lcs: Optional[List[MPoly]], x: int,
                  others: List[int], point: Dict[int, int]) -> Optional[List[MPoly]]:
    """Lift a trusted grouping of univariate factors to the factors of pp.

    With ``lcs`` the targets multiply to lc_x(pp) and pp is lifted as is.
    Without them a constant leading coefficient is split along the images and
    a non-constant one is given to every factor in full.
    """
    ring = pp.ring
    target = pp.to_field()
    images = [g.to_field() for g in grouped]
    lc = target.leading_coefficient(x)
    if lcs is not None:
        lcs = [c.to_field() for c in lcs]
    elif lc.is_constant():
        lcs = [u.leading_coefficient(x) for u in images[:-1]]
        lcs.append(lc.divexact(prod(lcs, target.ring)))
    else:
        # The extra powers of lc are removed by taking primitive parts afterwards.
        lcs = [lc] * len(images)
        target = target * lc ** (len(images) - 1)

    ok, lifted = hensel_lift_with_leading_coeffs(
        target, images, lcs, x, others, [point[v] for v in others])
    if not ok:
        return None
    factors = [f.primitive_part(x).normalize().to_ring(ring) for f in lifted]
    remaining = pp
    for f in factors:
        try:
            remaining = remaining.divexact(f)
        except DivisionError:
            return None
    if not remaining.is_constant():
        return None
    return factors


def _factor_multivariate(pp: MPoly, x: int, others: List[int], rng: random.Random,
                         config: FactorConfig) -> List[MPoly]:
    y, rest = others[0], others[1:]
    lc = pp.leading_coefficient(x)
    lc_fac = None if lc.is_constant() else factor(lc, config)
    for attempt in range(config.max_attempts):
        point = _draw_point(rng, others, config, attempt)
        image = pp.evaluate(point)
        if not _is_good_image(pp, image, x):
            logger.debug("multivariate: rejected point %s", point)
            continue
        images = _univariate(image, x)
        if len(images) == 1:
            return [pp]
        rest_point = {v: point[v] for v in rest}
        bivariate = pp.evaluate(rest_point)
        ok, content, bfactors = bivariate_combine(bivariate, x, y, point[y], images)
        if not ok:
            logger.debug("multivariate: bivariate image did not recombine at %s", point)
            continue
        if len(bfactors) == 1:
            return [pp]
        grouped = [b.evaluate({y: point[y]}) for b in bfactors]

        lcs = None
        if lc_fac is not None and content.is_constant():
            lcs = _distribute_leading_coefficient(lc_fac, bfactors, x, y, rest_point)
        factors = _lift_grouped(pp, grouped, lcs, x, others, point)
        if factors is None and lcs is not None:
            logger.debug("multivariate: distributed leading coefficients failed at %s", point)
            factors = _lift_grouped(pp, grouped, None, x, others, point)
        if factors is not None:
            return factors
        logger.debug("multivariate: lift failed at %s, retrying", point)
    raise FactorizationFailedError(f"no usable evaluation point for {pp} after {config.max_attempts} attempts")


def _factor_squarefree(g: MPoly, rng: random.Random, config: FactorConfig) -> List[MPoly]:
    """Irreducible factors of a squarefree g, normalized, constants dropped."""
    present = g.variables()
    if not present:
        return []
    x = min(present, key=lambda i: (g.degree(i), i))
    if len(present) == 1:
        return _univariate(g, x)

    out: List[MPoly] = []
    content = g.content(x)
    if not content.is_constant():
        out.extend(_factor_squarefree(content, rng, config))
        g = g.divexact(content)
    others = [i for i in g.variables() if i != x]
    if not others:
        out.extend(_univariate(g, x))
    elif len(others) == 1:
        out.extend(_factor_bivariate(g, x, others[0], rng, config))
    else:
        out.extend(_factor_multivariate(g, x, others, rng, config))
    return out


def factor(f: MPoly, config: Optional[FactorConfig] = None) -> Fac:
    """Factor f into irreducibles over its coefficient domain.

    Returns a Fac with unit * prod(p ** e) == f.  Factors are integral,
    primitive and have a positive leading coefficient.

    Raises:
        InvalidInputError:        f is zero
        FactorizationFailedError: every evaluation point was rejected
    """
    config = config or DEFAULT_CONFIG
    if f.is_zero():
        raise InvalidInputError("cannot factor the zero polynomial")
    ring = f.ring
    if f.is_constant():
        return Fac(ring, f.constant_coefficient())

    rng = random.Random(config.seed)
    collected: Dict[MPoly, int] = {}
    for g, e in squarefree_decompose(f):
        for p in _factor_squarefree(g, rng, config):
            collected[p] = collected.get(p, 0) + e

    try:
        unit = f.divexact(prod((p ** e for p, e in collected.items()), ring))
    except DivisionError as exc:
        raise FactorizationFailedError(f"factors do not reconstruct {f}") from exc
    if not unit.is_constant():
        raise FactorizationFailedError(f"factors of {f} leave a non-constant cofactor {unit}")
    logger.debug("factor: %s -> %d irreducible factors", f, len(collected))
    return Fac(ring, unit.constant_coefficient(), collected)


def is_irreducible(f: MPoly, config: Optional[FactorConfig] = None) -> bool:
    """True when f is not a constant and has exactly one irreducible factor, once."""
    if f.is_constant():
        return False
    fac = factor(f, config)
    return len(fac) == 1 and next(iter(fac))[1] == 1
