"""
Read CEL files and compute RMA expression values in one step using affy::justRMA.
"""

from __future__ import annotations
from pathlib import Path
from typing import Any, Union
import pandas as pd

from .utils import _affy, phenotype_to_r, eset_to_se
from ..phenodata import check_phenotype_table, match_cel_files


def just_rma(
    pheno: pd.DataFrame,
    celfile_path: Union[str, Path],
    background: bool = True,
    normalize: bool = True,
    verbose: bool = False,
    assay: str = "exprs",
    **kwargs: Any,
):
    """
    RMA-normalize the arrays listed in a phenotype table.

    Wraps ``affy::justRMA``: background correction, quantile normalization and
    median-polish summarisation to log2 probeset expression values, without
    building an AffyBatch in memory.

    Args:
        pheno: Phenotype table whose index holds the CEL file names.
        celfile_path: Directory containing the CEL files.
        background: Apply RMA background correction. Default: True.
        normalize: Apply quantile normalization. Default: True.
        verbose: Let affy report progress. Default: False.
        assay: Name of the expression assay. Default: "exprs".
        **kwargs: Additional args forwarded to R (``cdfname``, ``destructive``, ...).

    Returns:
        SummarizedExperiment: probesets x samples, R-backed ``exprs`` assay,
        phenotype table as column data, chip annotation in metadata.

    Raises:
        NotADirectoryError: If ``celfile_path`` does not exist.
        FileNotFoundError: If a sample has no CEL file.

    Example:
        >>> pheno = read_phenotype_table("pdata.txt")
        >>> eset = affy.just_rma(pheno, "celfiles/")
        >>> eset.shape
        (12625, 12)
    """
    from bioc2ri.lazy_r_env import get_r_environment

    check_phenotype_table(pheno)
    files = match_cel_files(pheno, celfile_path)

    r = get_r_environment()
    affy_pkg = _affy()

    eset = affy_pkg.justRMA(
        filenames=r.StrVector([Path(f).name for f in files]),
        celfile_path=str(Path(celfile_path).absolute()),
        phenoData=phenotype_to_r(pheno),
        background=background,
        normalize=normalize,
        verbose=verbose,
        **kwargs,
    )

    return eset_to_se(eset, pheno=pheno, assay=assay, normalization="rma")
