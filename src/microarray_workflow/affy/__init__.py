"""affy: RMA preprocessing of Affymetrix 3' expression arrays.

Python wrappers for the R affy package, called through rpy2.

    >>> import microarray_workflow.affy as affy
    >>> eset = affy.just_rma(pheno, "celfiles/")

or, keeping the probe-level data:

    >>> raw = affy.read_affy(pheno, "celfiles/")
    >>> eset = raw.rma()
"""

# Check/install affy and Biobase on module import
from ..r_utils import ensure_r_dependencies
ensure_r_dependencies(["Biobase", "affy"])

from .just_rma import just_rma
from .read_affy import read_affy, rma, RawIntensities
from .utils import _affy, _biobase, eset_to_se, phenotype_to_r

__all__ = [
    "just_rma",
    "read_affy",
    "rma",
    "RawIntensities",
    "eset_to_se",
    "phenotype_to_r",
    "_affy",
    "_biobase",
]
