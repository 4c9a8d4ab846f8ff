"""
Probe-level data: read CEL files into an AffyBatch with affy::ReadAffy and
summarise it with affy::rma.

Use this two-step route when the raw probe intensities are needed as well,
e.g. for quality assessment before normalization.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Sequence, Union
import pandas as pd

from .utils import _affy, _biobase, phenotype_to_r, eset_to_se
from ..phenodata import check_phenotype_table, match_cel_files


@dataclass
class RawIntensities:
    """Raw probe-level intensities of a set of arrays.

    Attributes:
        affybatch: The R AffyBatch object.
        sample_names: Sample identifiers, in array order.
        cdf_name: Chip description (CDF) name of the arrays.
        pheno: Phenotype table the arrays were read with.
    """
    affybatch: Any
    sample_names: Sequence[str] = field(default_factory=list)
    cdf_name: Optional[str] = None
    pheno: Optional[pd.DataFrame] = None

    @property
    def n_samples(self) -> int:
        return len(self.sample_names)

    def rma(self, background: bool = True, normalize: bool = True, **kwargs: Any):
        """Summarise to expression values. See :func:`rma`."""
        return rma(self, background=background, normalize=normalize, **kwargs)


def read_affy(
    pheno: pd.DataFrame,
    celfile_path: Union[str, Path],
    **kwargs: Any,
) -> RawIntensities:
    """
    Read the CEL files listed in a phenotype table into an AffyBatch.

    Wraps ``affy::ReadAffy``.

    Args:
        pheno: Phenotype table whose index holds the CEL file names.
        celfile_path: Directory containing the CEL files.
        **kwargs: Additional args forwarded to R (``cdfname``, ``compress``, ...).

    Returns:
        RawIntensities holding the AffyBatch.

    Raises:
        NotADirectoryError: If ``celfile_path`` does not exist.
        FileNotFoundError: If a sample has no CEL file.
    """
    from bioc2ri.lazy_r_env import get_r_environment

    check_phenotype_table(pheno)
    files = match_cel_files(pheno, celfile_path)

    r = get_r_environment()
    affy_pkg = _affy()

    affybatch = affy_pkg.ReadAffy(
        filenames=r.StrVector([Path(f).name for f in files]),
        celfile_path=str(Path(celfile_path).absolute()),
        phenoData=phenotype_to_r(pheno),
        **kwargs,
    )

    sample_names = [str(s) for s in _biobase().sampleNames(affybatch)]
    cdf_name = str(affy_pkg.cdfName(affybatch)[0])

    return RawIntensities(
        affybatch=affybatch,
        sample_names=sample_names,
        cdf_name=cdf_name,
        pheno=pheno,
    )


def rma(
    raw: RawIntensities,
    background: bool = True,
    normalize: bool = True,
    assay: str = "exprs",
    **kwargs: Any,
):
    """
    RMA-summarise an AffyBatch to log2 probeset expression values.

    Wraps ``affy::rma``.

    Args:
        raw: RawIntensities from read_affy().
        background: Apply RMA background correction. Default: True.
        normalize: Apply quantile normalization. Default: True.
        assay: Name of the expression assay. Default: "exprs".
        **kwargs: Additional args forwarded to R.

    Returns:
        SummarizedExperiment as returned by just_rma().

    Raises:
        TypeError: If ``raw`` is not a RawIntensities.
    """
    if not isinstance(raw, RawIntensities):
        raise TypeError(f"Expected RawIntensities, got {type(raw).__name__}")

    eset = _affy().rma(raw.affybatch, background=background, normalize=normalize, **kwargs)
    return eset_to_se(eset, pheno=raw.pheno, assay=assay, normalization="rma")
