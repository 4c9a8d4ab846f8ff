"""
Input validation for limma wrappers.

Accepts any SummarizedExperiment-like object (duck typed on ``assays`` and
``assay_names``) and LimmaModel instances.
"""

from __future__ import annotations
from typing import Any, Optional, Sequence
import pandas as pd


def check_se(se: Any, name: str = "se") -> None:
    """Check that input is a SummarizedExperiment-like object."""
    for attr in ("assays", "assay_names"):
        if not hasattr(se, attr):
            raise TypeError(
                f"Expected `{name}` to be a SummarizedExperiment-like object, "
                f"got {type(se).__name__} which lacks '{attr}'"
            )


def check_r_assay(se: Any, assay: str) -> None:
    """Check that the assay exists and is R-backed."""
    from ..r_init import check_r_initialized
    check_r_initialized(se, assay)


def check_assay_exists(se: Any, assay: str) -> None:
    if assay not in se.assay_names:
        raise KeyError(
            f"Assay '{assay}' not found. Available assays: {list(se.assay_names)}"
        )


def check_design(
    design: Any,
    n_samples: Optional[int] = None,
    sample_names: Optional[Sequence[str]] = None,
) -> None:
    """Check that design is a numeric DataFrame matching the samples.

    A design with a labelled (non-default) index must list the samples in the
    same order as the expression set.
    """
    if not isinstance(design, pd.DataFrame):
        raise TypeError(
            f"Expected `design` to be a pandas DataFrame, got {type(design).__name__}"
        )
    if design.shape[1] == 0:
        raise ValueError("Design matrix has no columns")
    if n_samples is not None and len(design) != n_samples:
        raise ValueError(
            f"Design matrix has {len(design)} rows but expected {n_samples} samples"
        )
    non_numeric = [
        c for c in design.columns if not pd.api.types.is_numeric_dtype(design[c])
    ]
    if non_numeric:
        raise ValueError(f"Design matrix has non-numeric columns: {non_numeric}")
    if design.isna().to_numpy().any():
        raise ValueError("Design matrix contains missing values")
    if sample_names is not None and not isinstance(design.index, pd.RangeIndex):
        labels = [str(x) for x in design.index]
        expected = [str(x) for x in sample_names]
        if labels != expected:
            raise ValueError(
                "Design matrix rows do not match the expression set samples: "
                f"{labels} != {expected}"
            )


def check_limma_model(model: Any) -> None:
    from .lm_fit import LimmaModel
    if not isinstance(model, LimmaModel):
        raise TypeError(f"Expected a LimmaModel, got {type(model).__name__}")


def check_limma_model_fitted(model: Any) -> None:
    """Check that the LimmaModel holds an lmFit result."""
    check_limma_model(model)
    if model.lm_fit is None:
        raise ValueError("LimmaModel.lm_fit is None - model has not been fitted")
