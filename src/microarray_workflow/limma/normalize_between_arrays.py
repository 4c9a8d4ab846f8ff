"""
Between-array normalization of single-channel intensities using
limma::normalizeBetweenArrays.

RMA already quantile-normalizes Affymetrix arrays. This step is for
expression sets built from summarised intensities exported by other
platforms (Illumina BeadStudio / GenomeStudio, Nimblegen), after log2
transformation.
"""

from __future__ import annotations
from typing import TypeVar

from .utils import _limma
from .checks import check_se, check_assay_exists, check_r_assay

SE = TypeVar("SE")

NORMALIZE_METHODS = ("none", "scale", "quantile", "cyclicloess")


def normalize_between_arrays(
    se: SE,
    assay: str = "exprs",
    normalized_assay: str = "exprs_norm",
    method: str = "quantile",
    in_place: bool = False,
    **kwargs
) -> SE:
    """
    Normalize log-expression values between arrays.

    Args:
        se: SummarizedExperiment with an R-backed log2 expression assay.
        assay: Input assay name. Default: "exprs".
        normalized_assay: Output assay name. Default: "exprs_norm".
        method: One of "none", "scale", "quantile", "cyclicloess".
        in_place: If True, modify se in place. Default: False.
        **kwargs: Additional args forwarded to R.

    Returns:
        SummarizedExperiment with the normalized assay added.

    Example:
        >>> se = initialize_r(se, assay="exprs")
        >>> se = limma.normalize_between_arrays(se, method="quantile")
    """
    from bioc2ri.lazy_r_env import get_r_environment
    from ..r_init import get_rmat
    from ..rmatrixadapter import RMatrixAdapter

    check_se(se)
    check_assay_exists(se, assay)
    check_r_assay(se, assay)
    if method not in NORMALIZE_METHODS:
        raise ValueError(
            f"Unknown normalization method '{method}'. Choose from {list(NORMALIZE_METHODS)}"
        )

    r = get_r_environment()
    limma_pkg = _limma()

    out_r = limma_pkg.normalizeBetweenArrays(get_rmat(se, assay), method=method, **kwargs)

    output = se._define_output(in_place=in_place)
    new_assays = dict(output.assays)
    new_assays[normalized_assay] = RMatrixAdapter(out_r, r)
    output._assays = new_assays

    return output
