from .domains import Domain, IntegerRing, RationalField, ZZ, QQ, get_domain
from .poly import Exponent, MPoly, PolyRing, polynomial_ring, prod
from .fac import Fac
from .backend import gcd, factor_univariate
