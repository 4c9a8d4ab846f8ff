"""
Contrasts between coefficients using limma::makeContrasts and limma::contrasts.fit.
"""

from __future__ import annotations
from typing import Sequence, Union
from dataclasses import replace
import numpy as np
import pandas as pd

from .utils import _limma, r_matrix_to_dataframe
from .checks import check_limma_model_fitted
from .lm_fit import LimmaModel


def make_contrasts(
    levels: Union[Sequence[str], pd.DataFrame],
    *contrasts: str,
    **named_contrasts: str,
) -> pd.DataFrame:
    """
    Build a contrast matrix from expressions in the coefficient names.

    Wraps ``limma::makeContrasts``. Coefficient names must be syntactically
    valid R names, so use ``model_matrix(..., intercept=False, prefix="")``
    style group-means designs with simple level names.

    Args:
        levels: Coefficient names, or a design matrix whose columns are used.
        *contrasts: Contrast expressions, e.g. ``"treated - control"``.
        **named_contrasts: Named contrast expressions; the keyword becomes the
            contrast name.

    Returns:
        pd.DataFrame: Coefficients x contrasts.

    Example:
        >>> cm = make_contrasts(design, TvsC="treated - control")
        >>> model.contrasts_fit(cm).e_bayes().top_table(coef="TvsC")
    """
    from bioc2ri.lazy_r_env import get_r_environment

    if isinstance(levels, pd.DataFrame):
        levels = list(levels.columns)
    levels = [str(level) for level in levels]
    if not contrasts and not named_contrasts:
        raise ValueError("At least one contrast expression is required")

    r = get_r_environment()
    limma_pkg = _limma()

    exprs = list(contrasts) + list(named_contrasts.values())
    cm_r = limma_pkg.makeContrasts(
        contrasts=r.StrVector(exprs),
        levels=r.StrVector(levels),
    )
    cm = r_matrix_to_dataframe(cm_r)
    cm.index = levels
    cm.columns = list(contrasts) + list(named_contrasts.keys())
    return cm


def _align_contrast_rows(cm: pd.DataFrame, coefs: Sequence[str]) -> pd.DataFrame:
    """Order the rows of a contrast matrix like the model coefficients.

    Labelled rows are matched by name; a default RangeIndex is taken positionally.
    """
    coefs = [str(c) for c in coefs]
    if isinstance(cm.index, pd.RangeIndex):
        if len(cm) != len(coefs):
            raise ValueError(
                f"Contrast matrix has {len(cm)} rows but the model has {len(coefs)} coefficients"
            )
        cm = cm.copy()
        cm.index = coefs
        return cm

    cm = cm.copy()
    cm.index = [str(x) for x in cm.index]
    unknown = [x for x in cm.index if x not in coefs]
    missing = [c for c in coefs if c not in cm.index]
    if unknown or missing or cm.index.duplicated().any():
        raise ValueError(
            "Contrast matrix rows do not match the model coefficients: "
            f"unknown rows {unknown}, missing coefficients {missing}"
        )
    return cm.reindex(coefs)


def contrasts_fit(
    model: LimmaModel,
    contrast: Union[Sequence[Union[int, float]], pd.DataFrame],
) -> LimmaModel:
    """
    Apply contrasts to a fitted linear model.

    Wraps ``limma::contrasts.fit``. Returns a LimmaModel with the contrast_fit
    slot set; any previous eBayes result is dropped.

    Args:
        model: LimmaModel from lm_fit().
        contrast: 1D contrast vector (one weight per coefficient) or a contrast
            matrix from make_contrasts().

    Returns:
        LimmaModel: With contrast_fit and contrasts set.

    Raises:
        TypeError: If model is not a LimmaModel.
        ValueError: If the model is not fitted, the contrast has the wrong length
            or the contrast matrix rows do not name the model coefficients.

    Example:
        >>> model_c = limma.contrasts_fit(model, [0, 1, -1])
        >>> results = model_c.e_bayes().top_table()
    """
    from bioc2ri.lazy_r_env import get_r_environment
    from ..r_init import numpy_to_r_matrix

    check_limma_model_fitted(model)

    r = get_r_environment()
    limma_pkg = _limma()

    coefs = list(model.design.columns) if model.design is not None else None

    if isinstance(contrast, pd.DataFrame):
        cm = contrast.astype(float)
        if coefs is not None:
            cm = _align_contrast_rows(cm, coefs)
    else:
        vec = np.asarray(contrast, dtype=float)
        if vec.ndim != 1:
            raise ValueError("Contrast vector must be one-dimensional")
        if coefs is not None and len(vec) != len(coefs):
            raise ValueError(
                f"Contrast has {len(vec)} weights but the model has {len(coefs)} coefficients"
            )
        cm = pd.DataFrame({"contrast1": vec}, index=coefs)

    contrast_r = numpy_to_r_matrix(
        cm.to_numpy(),
        rownames=None if coefs is None else list(cm.index),
        colnames=[str(c) for c in cm.columns],
    )

    fit_r = limma_pkg.contrasts_fit(model.lm_fit, contrasts=contrast_r)

    return replace(model, contrast_fit=fit_r, contrasts=cm, ebayes=None)
