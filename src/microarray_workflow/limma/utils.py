from typing import Any
from bioc2ri.lazy_r_env import get_r_environment

_limma_pkg: Any = None


def _limma() -> Any:
    """Lazily import and return the R `limma` package via rpy2.

    Returns:
        Any: Handle to the imported R `limma` package.

    Notes:
        The package is imported once and cached in a module-level variable.
    """
    global _limma_pkg
    if _limma_pkg is None:
        _r = get_r_environment()
        _limma_pkg = _r.importr("limma")
    return _limma_pkg


def r_matrix_to_dataframe(rmat: Any) -> "pd.DataFrame":
    """Convert a named R matrix (e.g. a contrast matrix) to a pandas DataFrame."""
    import numpy as np
    import pandas as pd

    r = get_r_environment()
    base = r.ro.baseenv
    rn = base["rownames"](rmat)
    cn = base["colnames"](rmat)
    with r.localconverter(r.default_converter + r.numpy2ri.converter):
        values = np.asarray(r.get_conversion().rpy2py(base["as.matrix"](rmat)))
    return pd.DataFrame(
        values,
        index=None if rn is r.ro.NULL else [str(x) for x in rn],
        columns=None if cn is r.ro.NULL else [str(x) for x in cn],
    )
