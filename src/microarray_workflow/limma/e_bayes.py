"""
Empirical Bayes moderation of probe-wise variances using limma::eBayes.
"""

from __future__ import annotations
from typing import Any
from dataclasses import replace

from .utils import _limma
from .checks import check_limma_model_fitted
from .lm_fit import LimmaModel


def e_bayes(
    model: LimmaModel,
    proportion: float = 0.01,
    trend: bool = False,
    robust: bool = False,
    **kwargs: Any
) -> LimmaModel:
    """
    Compute moderated t-statistics, moderated F-statistic and log-odds.

    Wraps ``limma::eBayes``. The contrast fit is moderated when present,
    otherwise the lmFit result.

    Args:
        model: LimmaModel from lm_fit() or contrasts_fit().
        proportion: Assumed proportion of differentially expressed probes.
        trend: Allow an intensity-dependent trend for the prior variance.
        robust: Robustify the hyperparameter estimation against outlier variances.
        **kwargs: Additional args forwarded to R.

    Returns:
        LimmaModel: With the ebayes slot set.

    Raises:
        TypeError: If model is not a LimmaModel.
        ValueError: If model is not fitted or proportion is outside (0, 1).
    """
    check_limma_model_fitted(model)
    if not 0 < proportion < 1:
        raise ValueError(f"proportion must be in (0, 1), got {proportion}")

    limma_pkg = _limma()

    r_fit = model.contrast_fit if model.contrast_fit is not None else model.lm_fit

    call_kwargs = {"proportion": proportion, "trend": trend, "robust": robust}
    call_kwargs.update(kwargs)

    eb = limma_pkg.eBayes(r_fit, **call_kwargs)

    return replace(model, ebayes=eb)
