from .squarefree import squarefree_decompose, is_squarefree
from .bivariate import bivariate_combine
from .hensel import hensel_lift_with_leading_coeffs
from .orchestrator import factor, is_irreducible
