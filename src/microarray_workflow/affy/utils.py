"""Lazy R package handles and ExpressionSet conversion shared by the affy wrappers."""

from typing import Any, Optional
import pandas as pd
from bioc2ri.lazy_r_env import get_r_environment

_affy_pkg: Any = None
_biobase_pkg: Any = None


def _affy() -> Any:
    """Lazily import and return the R `affy` package via rpy2 (cached)."""
    global _affy_pkg
    if _affy_pkg is None:
        _affy_pkg = get_r_environment().importr("affy")
    return _affy_pkg


def _biobase() -> Any:
    """Lazily import and return the R `Biobase` package via rpy2 (cached)."""
    global _biobase_pkg
    if _biobase_pkg is None:
        _biobase_pkg = get_r_environment().importr("Biobase")
    return _biobase_pkg


def phenotype_to_r(pheno: pd.DataFrame) -> Any:
    """Convert a phenotype table to a ``Biobase::AnnotatedDataFrame``.

    Sample identifiers become the row names, which is what affy matches
    against the CEL file names.
    """
    r = get_r_environment()
    data = pheno.copy()
    data.index = [str(s) for s in pheno.index]
    with r.localconverter(r.default_converter + r.pandas2ri.converter):
        df_r = r.get_conversion().py2rpy(data)
    return _biobase().AnnotatedDataFrame(data=df_r)


def _r_scalar_str(x: Any) -> Optional[str]:
    r = get_r_environment()
    if x is r.ro.NULL or len(x) == 0:
        return None
    return str(x[0])


def eset_to_se(
    eset: Any,
    pheno: Optional[pd.DataFrame] = None,
    assay: str = "exprs",
    normalization: str = "rma",
):
    """
    Wrap a Biobase ExpressionSet as a SummarizedExperiment.

    The expression matrix stays in R behind an RMatrixAdapter. Column data is
    ``pheno`` when given (already validated, same order as the arrays),
    otherwise the ExpressionSet's own pData.
    """
    from summarizedexperiment import SummarizedExperiment
    from ..phenodata import phenotype_to_biocframe
    from ..rmatrixadapter import RMatrixAdapter

    r = get_r_environment()
    biobase = _biobase()

    exprs_r = biobase.exprs(eset)
    adapter = RMatrixAdapter(exprs_r, r)

    row_names = adapter.get_rownames()
    column_names = adapter.get_colnames()

    if pheno is None:
        with r.localconverter(r.default_converter + r.pandas2ri.converter):
            pheno = r.get_conversion().rpy2py(biobase.pData(eset))
        pheno.index = [str(s) for s in pheno.index]
    else:
        pheno = pheno.copy()
        pheno.index = [str(s) for s in pheno.index]
        if column_names is not None and list(pheno.index) != column_names:
            raise ValueError(
                "Array order does not match the phenotype table: "
                f"{column_names} != {list(pheno.index)}"
            )

    column_data = phenotype_to_biocframe(pheno) if pheno.shape[1] > 0 else None

    return SummarizedExperiment(
        assays={assay: adapter},
        row_names=row_names,
        column_names=column_names if column_names is not None else list(pheno.index),
        column_data=column_data,
        metadata={
            "annotation": _r_scalar_str(biobase.annotation(eset)),
            "normalization": normalization,
        },
    )
