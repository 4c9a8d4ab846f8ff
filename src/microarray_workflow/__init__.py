"""microarray_workflow: Affymetrix microarray analysis with affy and limma from Python.

Reading phenotype data, building design matrices and reporting are plain
pandas. RMA normalization and the linear-model statistics run in the R
packages affy and limma, whose submodules are loaded lazily so that no R
dependency check happens until they are used.

Usage:
    >>> from microarray_workflow import read_phenotype_table, model_matrix
    >>> import microarray_workflow.affy as affy      # checks/installs affy
    >>> import microarray_workflow.limma as limma    # checks/installs limma
    >>> pheno = read_phenotype_table("pdata.txt")
    >>> eset = affy.just_rma(pheno, "celfiles/")
    >>> design = model_matrix(pheno, ["Target", "Time"])
    >>> table = limma.lm_fit(eset, design).e_bayes().top_table(coef=2)
"""

from __future__ import annotations

import importlib

# Core exports that don't require R
from .rmatrixadapter import RMatrixAdapter
from .r_init import (
    initialize_r,
    check_r_initialized,
    is_r_initialized,
    get_rmat,
    numpy_to_r_matrix,
    pandas_to_r_matrix,
)
from .r_utils import (
    ensure_r_dependencies,
    is_r_package_installed,
    check_renv,
    is_renv_installed,
    activate_renv,
    has_renv,
    create_renv,
    get_lib_paths,
    install_base_dependencies,
    install_workflow_dependencies,
    BASE_R_PACKAGES,
    WORKFLOW_R_PACKAGES,
)
from .phenodata import (
    read_phenotype_table,
    check_phenotype_table,
    phenotype_to_biocframe,
    list_cel_files,
    match_cel_files,
)
from .design import combine_factors, model_matrix
from .platforms import (
    PlatformPackage,
    PLATFORMS,
    packages_for_platform,
    platform_table,
    install_platform_packages,
)
from .report import write_top_table, format_top_table, summarize_decisions, volcano_plot
from .workflow import WorkflowConfig, WorkflowResult, run_workflow

__all__ = [
    "RMatrixAdapter",
    "initialize_r",
    "check_r_initialized",
    "is_r_initialized",
    "get_rmat",
    "numpy_to_r_matrix",
    "pandas_to_r_matrix",
    "ensure_r_dependencies",
    "is_r_package_installed",
    "check_renv",
    "is_renv_installed",
    "activate_renv",
    "has_renv",
    "create_renv",
    "get_lib_paths",
    "install_base_dependencies",
    "install_workflow_dependencies",
    "BASE_R_PACKAGES",
    "WORKFLOW_R_PACKAGES",
    "read_phenotype_table",
    "check_phenotype_table",
    "phenotype_to_biocframe",
    "list_cel_files",
    "match_cel_files",
    "combine_factors",
    "model_matrix",
    "PlatformPackage",
    "PLATFORMS",
    "packages_for_platform",
    "platform_table",
    "install_platform_packages",
    "write_top_table",
    "format_top_table",
    "summarize_decisions",
    "volcano_plot",
    "WorkflowConfig",
    "WorkflowResult",
    "run_workflow",
    # Lazy-loaded submodules
    "affy",
    "limma",
    "annotation",
    "rhelp",
]

# Submodules imported on first attribute access (PEP 562)
_LAZY_SUBMODULES = {"affy", "limma", "annotation", "rhelp"}


def __getattr__(name: str):
    """Lazy loading of submodules per PEP 562."""
    if name in _LAZY_SUBMODULES:
        module = importlib.import_module(f".{name}", __name__)
        globals()[name] = module
        return module
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def __dir__():
    """Include lazy submodules in dir() output."""
    return list(__all__)
