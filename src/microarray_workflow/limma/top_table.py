"""
Ranked table of differentially expressed probes using limma::topTable.
"""

from __future__ import annotations
from typing import Any, Optional, Union
import pandas as pd

from .utils import _limma
from .checks import check_limma_model
from .lm_fit import LimmaModel

# limma column -> column name used in Python results
TOP_TABLE_COLUMNS = {
    "logFC": "log_fc",
    "AveExpr": "ave_expr",
    "t": "t_statistic",
    "F": "f_statistic",
    "P.Value": "p_value",
    "adj.P.Val": "adj_p_value",
    "B": "b_statistic",
}

ADJUST_METHODS = ("BH", "BY", "holm", "hochberg", "hommel", "bonferroni", "fdr", "none")


def top_table(
    model: LimmaModel,
    coef: Optional[Union[int, str]] = None,
    n: Optional[int] = None,
    adjust_method: str = "BH",
    sort_by: str = "PValue",
    **kwargs: Any
) -> pd.DataFrame:
    """
    Extract the ranked table of probes from a moderated fit.

    Wraps ``limma::topTable``. Runs eBayes with default settings if the model
    has not been moderated yet.

    Args:
        model: LimmaModel.
        coef: Coefficient (1-based index or name) to test. None tests all
            coefficients jointly with the moderated F-statistic.
        n: Number of probes to return (None = all).
        adjust_method: Multiple testing correction. Default: "BH".
        sort_by: "PValue", "logFC", "AveExpr", "B" or "none".
        **kwargs: Additional args forwarded to R (``lfc``, ``p.value``, ...).

    Returns:
        pd.DataFrame with columns:
            - probe_id: probe / probeset identifier
            - log_fc: log2 fold-change
            - ave_expr: average log2 expression
            - t_statistic: moderated t-statistic
            - p_value: raw p-value
            - adj_p_value: adjusted p-value
            - b_statistic: log-odds of differential expression
        For F-tests, one column per coefficient replaces log_fc, t_statistic
        and b_statistic is replaced by f_statistic.

    Raises:
        TypeError: If model is not a LimmaModel.
        ValueError: If adjust_method is unknown or coef is out of range.

    Example:
        >>> results = limma.top_table(model, coef=2, n=10)
    """
    from bioc2ri.lazy_r_env import get_r_environment
    from .e_bayes import e_bayes

    check_limma_model(model)
    if adjust_method not in ADJUST_METHODS:
        raise ValueError(
            f"Unknown adjust_method '{adjust_method}'. Choose from {list(ADJUST_METHODS)}"
        )

    r = get_r_environment()
    limma_pkg = _limma()

    if model.ebayes is None:
        model = e_bayes(model)
    eb = model.ebayes

    if n is None:
        n = int(r.ro.baseenv["nrow"](eb)[0])

    # A single contrast is tested on its own
    if coef is None and model.contrasts is not None and model.contrasts.shape[1] == 1:
        coef = 1

    names = model.coefficient_names
    if isinstance(coef, int) and names and not 1 <= coef <= len(names):
        raise ValueError(f"coef must be between 1 and {len(names)}, got {coef}")
    if isinstance(coef, str) and names and coef not in names:
        raise ValueError(f"Unknown coefficient '{coef}'. Available: {names}")

    if coef is None:
        sort_by_map = {"PValue": "F", "logFC": "F", "AveExpr": "F", "B": "F", "F": "F", "none": "none"}
        sort_by_r = sort_by_map.get(sort_by, "F")
        coef_r = r.ro.NULL
    else:
        sort_by_map = {"PValue": "p", "logFC": "logFC", "AveExpr": "AveExpr", "B": "B", "F": "B", "none": "none"}
        sort_by_r = sort_by_map.get(sort_by, "p")
        coef_r = coef

    call_kwargs = {"number": n, "adjust.method": adjust_method, "coef": coef_r, "sort.by": sort_by_r}
    call_kwargs.update(kwargs)

    top_r = limma_pkg.topTable(eb, **call_kwargs)

    with r.localconverter(r.default_converter + r.pandas2ri.converter):
        df = r.get_conversion().rpy2py(top_r)

    # topTable adds an ID column when the fit carries probe annotation
    if "ID" in df.columns:
        df = df.set_index("ID")
    df.index = [str(x) for x in df.index]

    return df.reset_index(names="probe_id").rename(columns=TOP_TABLE_COLUMNS)
