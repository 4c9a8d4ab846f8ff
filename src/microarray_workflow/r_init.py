"""
R backing for SummarizedExperiment assays.

Expression sets built in Python (for example from already summarised Illumina
intensities) need their assay converted to an R matrix before limma can use it.
Expression sets returned by ``affy.just_rma`` are R-backed already.

Usage:
    >>> from microarray_workflow import initialize_r
    >>> se = initialize_r(se, assay="exprs")
"""

from __future__ import annotations
from typing import Any, Optional, Sequence, TypeVar
import numpy as np
import pandas as pd

from .rmatrixadapter import RMatrixAdapter

# SummarizedExperiment, RangedSummarizedExperiment, ...
SE = TypeVar("SE")


def numpy_to_r_matrix(
    mat: np.ndarray,
    rownames: Optional[Sequence[str]] = None,
    colnames: Optional[Sequence[str]] = None,
) -> Any:
    """Convert a 2D numpy array to an R matrix, optionally setting dimnames."""
    from bioc2ri import numpy_plugin
    from bioc2ri.rnames import set_rownames, set_colnames
    from bioc2ri.rutils import is_r

    np_eng = numpy_plugin()
    rmat = np_eng.py2r(np.asarray(mat))
    if rownames is not None:
        if not is_r(rownames):
            rownames = np_eng.py2r(np.asarray(rownames, dtype=str))
        rmat = set_rownames(rmat, rownames)
    if colnames is not None:
        if not is_r(colnames):
            colnames = np_eng.py2r(np.asarray(colnames, dtype=str))
        rmat = set_colnames(rmat, colnames)
    return rmat


def pandas_to_r_matrix(df: pd.DataFrame) -> Any:
    """Convert a numeric DataFrame (e.g. a design matrix) to a named R matrix."""
    return numpy_to_r_matrix(
        df.to_numpy(dtype=float),
        rownames=[str(x) for x in df.index],
        colnames=[str(x) for x in df.columns],
    )


def initialize_r(se: SE, assay: str = "exprs", in_place: bool = False) -> SE:
    """
    Convert an assay of a SummarizedExperiment into an R-backed RMatrixAdapter.

    Row and column names of the SE become the R matrix dimnames.

    Args:
        se: Input SummarizedExperiment (any BiocPy variant).
        assay: Name of the assay to convert. Default: "exprs".
        in_place: If True, modify se in place. If False, return a new SE.

    Returns:
        The same SE type with the assay converted.

    Raises:
        KeyError: If the assay does not exist.
    """
    if assay not in se.assay_names:
        raise KeyError(f"Assay '{assay}' not found. Available: {list(se.assay_names)}")

    arr = se.assays[assay]
    if isinstance(arr, RMatrixAdapter):
        return se

    from bioc2ri.lazy_r_env import get_r_environment

    rmat = numpy_to_r_matrix(
        np.asarray(arr, dtype=float),
        rownames=se.row_names,
        colnames=se.column_names,
    )

    new_assays = dict(se.assays)
    new_assays[assay] = RMatrixAdapter(rmat, get_r_environment())

    output = se._define_output(in_place=in_place)
    output._assays = new_assays
    return output


def check_r_initialized(se: Any, assay: str) -> None:
    """
    Raise unless ``assay`` exists and is an RMatrixAdapter.

    Raises:
        KeyError: If the assay does not exist.
        TypeError: If the assay is not R-backed.
    """
    if assay not in se.assay_names:
        raise KeyError(f"Assay '{assay}' not found. Available: {list(se.assay_names)}")
    if not isinstance(se.assays[assay], RMatrixAdapter):
        raise TypeError(
            f"Assay '{assay}' is not R-initialized. "
            f"Call initialize_r(se, assay='{assay}') first."
        )


def is_r_initialized(se: Any, assay: str) -> bool:
    """Return True if ``assay`` exists and is an RMatrixAdapter."""
    if assay not in se.assay_names:
        return False
    return isinstance(se.assays[assay], RMatrixAdapter)


def get_rmat(se: Any, assay: str) -> Any:
    """Return the R matrix behind an R-initialized assay."""
    check_r_initialized(se, assay)
    return se.assays[assay].rmat
