"""limma: linear models and empirical Bayes statistics for microarray data.

Python wrappers for the R limma package, called through rpy2.

Functional API:
    >>> import microarray_workflow.limma as limma
    >>> model = limma.lm_fit(eset, design)
    >>> model = limma.e_bayes(model)
    >>> table = limma.top_table(model, coef=2)

Method chaining:
    >>> table = limma.lm_fit(eset, design).e_bayes().top_table(coef=2)
"""

# Check/install the limma R package on module import
from ..r_utils import ensure_r_dependencies
ensure_r_dependencies(["limma"])

from .normalize_between_arrays import normalize_between_arrays
from .lm_fit import lm_fit, LimmaModel
from .contrasts_fit import contrasts_fit, make_contrasts
from .e_bayes import e_bayes
from .top_table import top_table, TOP_TABLE_COLUMNS
from .decide_tests import decide_tests
from .utils import _limma

__all__ = [
    "normalize_between_arrays",
    "lm_fit",
    "make_contrasts",
    "contrasts_fit",
    "e_bayes",
    "top_table",
    "decide_tests",
    "LimmaModel",
    "TOP_TABLE_COLUMNS",
    "_limma",
]
