"""
Fit a linear model per probe using limma::lmFit.

This module provides the LimmaModel dataclass that carries the R fit objects
between steps, and the lm_fit function that creates it.
"""

from __future__ import annotations
from typing import Any, Dict, Literal, Optional, Sequence, TypeVar, Union
from dataclasses import dataclass
import pandas as pd

from .utils import _limma
from .checks import check_se, check_assay_exists, check_r_assay, check_design

# Type variable for SummarizedExperiment variants
SE = TypeVar("SE")


@dataclass
class LimmaModel:
    """Container for limma linear model fit results.

    Each step (contrasts_fit, e_bayes) returns a new LimmaModel with one more
    slot filled; the R objects themselves are never modified.

    Attributes:
        sample_names: Sample names of the expression set.
        feature_names: Probe / probeset identifiers.
        lm_fit: MArrayLM object from lmFit.
        design: Design matrix used for fitting.
        contrast_fit: MArrayLM object from contrasts.fit (optional).
        contrasts: Contrast matrix applied, coefficients x contrasts (optional).
        ebayes: MArrayLM object from eBayes (optional).
        method: Fitting method used.
        metadata: Additional metadata.
    """
    sample_names: Optional[Sequence[str]] = None
    feature_names: Optional[Sequence[str]] = None
    lm_fit: Optional[Any] = None
    design: Optional[pd.DataFrame] = None
    contrast_fit: Optional[Any] = None
    contrasts: Optional[pd.DataFrame] = None
    ebayes: Optional[Any] = None
    method: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None

    @property
    def coefficient_names(self) -> list:
        """Names of the coefficients (or contrasts) that top_table can report."""
        if self.contrasts is not None:
            return [str(c) for c in self.contrasts.columns]
        if self.design is not None:
            return [str(c) for c in self.design.columns]
        return []

    def e_bayes(
        self,
        proportion: float = 0.01,
        trend: bool = False,
        robust: bool = False,
        **kwargs: Any
    ) -> "LimmaModel":
        """Apply empirical Bayes moderation. See :func:`e_bayes`."""
        from .e_bayes import e_bayes as _e_bayes
        return _e_bayes(self, proportion=proportion, trend=trend, robust=robust, **kwargs)

    def contrasts_fit(
        self,
        contrast: Union[Sequence[float], pd.DataFrame],
    ) -> "LimmaModel":
        """Apply contrasts to the fitted model. See :func:`contrasts_fit`."""
        from .contrasts_fit import contrasts_fit as _contrasts_fit
        return _contrasts_fit(self, contrast=contrast)

    def top_table(
        self,
        coef: Optional[Union[int, str]] = None,
        n: Optional[int] = None,
        adjust_method: str = "BH",
        sort_by: str = "PValue",
        **kwargs: Any
    ) -> pd.DataFrame:
        """Extract the ranked table of probes. See :func:`top_table`."""
        from .top_table import top_table as _top_table
        return _top_table(self, coef=coef, n=n, adjust_method=adjust_method, sort_by=sort_by, **kwargs)

    def decide_tests(
        self,
        method: str = "separate",
        adjust_method: str = "BH",
        p_value: float = 0.05,
        lfc: float = 0,
        **kwargs: Any
    ) -> pd.DataFrame:
        """Classify probes as up / down / not significant. See :func:`decide_tests`."""
        from .decide_tests import decide_tests as _decide_tests
        return _decide_tests(self, method=method, adjust_method=adjust_method, p_value=p_value, lfc=lfc, **kwargs)


def lm_fit(
    se: SE,
    design: pd.DataFrame,
    assay: str = "exprs",
    method: Literal["ls", "robust"] = "ls",
    **kwargs: Any,
) -> LimmaModel:
    """
    Fit a linear model to every probe using limma::lmFit.

    The assay must be R-backed: expression sets from ``affy.just_rma`` are,
    others need ``initialize_r()`` first.

    Args:
        se: SummarizedExperiment with log2 expression values.
        design: Design matrix (samples x coefficients), e.g. from
            ``design.model_matrix``.
        assay: Expression assay to use. Default: "exprs".
        method: "ls" for least squares or "robust" for M-estimation.
        **kwargs: Additional args forwarded to R (``weights``, ``block``, ...).

    Returns:
        LimmaModel: Container with the fitted model.

    Raises:
        TypeError: If inputs are of the wrong type or the assay is not R-backed.
        KeyError: If the assay doesn't exist.
        ValueError: If the design doesn't match the samples.

    Example:
        >>> import microarray_workflow.limma as limma
        >>> model = limma.lm_fit(eset, design)
        >>> table = model.e_bayes().top_table(coef=2)
    """
    from ..r_init import get_rmat, pandas_to_r_matrix

    check_se(se)
    check_assay_exists(se, assay)
    check_r_assay(se, assay)
    sample_names = list(se.column_names) if se.column_names is not None else None
    n_samples = len(sample_names) if sample_names is not None else se.shape[1]
    check_design(design, n_samples, sample_names)

    limma_pkg = _limma()

    exprs_r = get_rmat(se, assay)
    design_r = pandas_to_r_matrix(design)

    fit = limma_pkg.lmFit(exprs_r, design_r, method=method, **kwargs)

    return LimmaModel(
        sample_names=sample_names,
        feature_names=list(se.row_names) if se.row_names is not None else None,
        lm_fit=fit,
        design=design,
        method=method,
    )
