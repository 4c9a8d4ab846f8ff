"""R package installation and renv management.

Every statistical step of the workflow runs inside a Bioconductor package. The
helpers here make sure those packages exist in the R library that rpy2 talks to,
optionally inside a project-local renv.
"""

from __future__ import annotations
from pathlib import Path
from typing import Iterable, Optional, Sequence, Union

# Packages already checked during this process
_checked_packages: set = set()

_RPY2_HINT = (
    "rpy2 is not installed. Please install it via 'pip install rpy2' "
    "or use the provided conda environment."
)

# Base R packages needed before any analysis submodule is imported
BASE_R_PACKAGES = [
    "BiocManager",
    "Biobase",
    "BiocGenerics",
    "S4Vectors",
    "methods",
    "utils",
    "tools",
]

# Packages used by the example workflow: RMA with affy, models with limma
WORKFLOW_R_PACKAGES = ("affy", "Biobase", "limma")

_CRAN_BASE = ["methods", "utils", "tools"]
_BIOC_BASE = ["Biobase", "BiocGenerics", "S4Vectors"]


def _rpackages():
    try:
        import rpy2.robjects.packages as rpackages
    except ImportError as err:
        raise ImportError(_RPY2_HINT) from err
    return rpackages


def _install_from_cran(packages: Sequence[str]) -> None:
    from rpy2.robjects.vectors import StrVector

    utils = _rpackages().importr("utils")
    utils.chooseCRANmirror(ind=1)
    utils.install_packages(StrVector(list(packages)))


def _bioc_manager():
    """Return BiocManager, installing it from CRAN first if needed."""
    rpackages = _rpackages()
    if not rpackages.isinstalled("BiocManager"):
        print("Installing BiocManager...")
        _install_from_cran(["BiocManager"])
    return rpackages.importr("BiocManager")


def is_r_package_installed(package: str) -> bool:
    """Return True if ``package`` is installed in the active R library.

    Returns False instead of raising when rpy2 or the R library it embeds
    cannot be loaded.
    """
    try:
        rpackages = _rpackages()
    except (ImportError, OSError, RuntimeError):
        return False
    return bool(rpackages.isinstalled(package))


# =============================================================================
# renv management
# =============================================================================

def check_renv(install: bool = False) -> bool:
    """
    Check if renv is installed in R, optionally install it.

    Args:
        install: If True, install renv from CRAN when it is missing.

    Returns:
        True if renv is installed (or was just installed), False otherwise.

    Raises:
        ImportError: If rpy2 is not installed.
    """
    rpackages = _rpackages()
    installed = rpackages.isinstalled("renv")

    if not installed and install:
        print("renv not found. Installing...")
        _install_from_cran(["renv"])
        installed = rpackages.isinstalled("renv")
        print("renv installed successfully." if installed else "Failed to install renv.")

    return installed


def is_renv_installed() -> bool:
    """Check if renv is installed in R."""
    return check_renv(install=False)


def has_renv(path: Optional[Union[str, Path]] = None) -> bool:
    """
    Check whether ``path`` (default: cwd) holds an renv project.

    Looks for ``renv/activate.R``; ``renv.lock`` is absent after a bare init.
    """
    path = Path.cwd() if path is None else Path(path)
    return (path / "renv" / "activate.R").exists()


def _require_renv_package() -> None:
    if not _rpackages().isinstalled("renv"):
        raise RuntimeError(
            "renv is not installed in R. Install it with: check_renv(install=True)"
        )


def activate_renv(path: Optional[Union[str, Path]] = None) -> bool:
    """
    Activate the renv project found in ``path`` (default: cwd).

    Returns:
        True if an renv was activated, False if ``path`` holds none.

    Raises:
        ImportError: If rpy2 is not installed.
        RuntimeError: If the renv R package is not installed.
    """
    _require_renv_package()
    from rpy2.robjects import r

    path = Path.cwd() if path is None else Path(path)
    if not has_renv(path):
        print(f"No renv found in {path} (missing renv/activate.R)")
        return False

    path_str = str(path.absolute()).replace("\\", "/")
    r(f'setwd("{path_str}")')
    r('source("renv/activate.R")')

    print(f"Activated renv in {path}")
    print(f"Library paths: {get_lib_paths()[:2]}...")
    return True


def create_renv(path: Union[str, Path]) -> None:
    """
    Initialise a bare renv project in ``path`` and activate it.

    Raises:
        ImportError: If rpy2 is not installed.
        RuntimeError: If the renv R package is not installed.
    """
    _require_renv_package()
    from rpy2.robjects import r

    path = Path(path).absolute()
    path.mkdir(parents=True, exist_ok=True)
    path_str = str(path).replace("\\", "/")

    r(f'setwd("{path_str}")')
    r("renv::init(bare = TRUE)")
    r('source("renv/activate.R")')

    print(f"Created new renv in {path}")
    print(f"renv library: {get_lib_paths()[0]}")


def get_lib_paths() -> list:
    """Return the R library paths currently in use."""
    try:
        from rpy2.robjects import r
    except ImportError as err:
        raise ImportError(_RPY2_HINT) from err
    return list(r(".libPaths()"))


# =============================================================================
# Dependency installation
# =============================================================================

def _activate_for_install(use_renv: bool, renv_path: Optional[Union[str, Path]]) -> None:
    if not use_renv:
        return
    renv_path = Path.cwd() if renv_path is None else Path(renv_path)
    if not has_renv(renv_path):
        raise RuntimeError(
            f"No renv found in {renv_path}. "
            f"Create an renv first with: create_renv('{renv_path}')"
        )
    _require_renv_package()
    activate_renv(renv_path)


def install_base_dependencies(
    use_renv: bool = False,
    renv_path: Optional[Union[str, Path]] = None,
) -> None:
    """
    Install the base R packages needed before any analysis submodule.

    Args:
        use_renv: If True, install into the renv found at ``renv_path``.
        renv_path: renv project directory. Default: cwd.

    Raises:
        ImportError: If rpy2 is not installed.
        RuntimeError: If ``use_renv`` is set but no renv exists at ``renv_path``.
    """
    rpackages = _rpackages()
    _activate_for_install(use_renv, renv_path)

    bioc_manager = _bioc_manager()

    missing_cran = [pkg for pkg in _CRAN_BASE if not rpackages.isinstalled(pkg)]
    if missing_cran:
        print(f"Installing CRAN packages: {', '.join(missing_cran)}")
        _install_from_cran(missing_cran)

    missing_bioc = [pkg for pkg in _BIOC_BASE if not rpackages.isinstalled(pkg)]
    if missing_bioc:
        from rpy2.robjects.vectors import StrVector

        print(f"Installing Bioconductor packages: {', '.join(missing_bioc)}")
        bioc_manager.install(StrVector(missing_bioc), ask=False)

    print("Base R dependencies installed successfully.")


def ensure_r_dependencies(packages: Iterable[str]) -> None:
    """
    Make sure the given R packages are installed.

    Each package is checked once per process. Missing packages are installed
    with ``BiocManager::install``, which also resolves CRAN packages.

    Args:
        packages: R package names, e.g. ``["limma"]`` or ``["affy", "Biobase"]``.

    Example:
        >>> ensure_r_dependencies(["affy", "limma"])
    """
    to_check = [pkg for pkg in packages if pkg not in _checked_packages]
    if not to_check:
        return

    rpackages = _rpackages()
    missing = [pkg for pkg in to_check if not rpackages.isinstalled(pkg)]

    if missing:
        from rpy2.robjects.vectors import StrVector

        print(f"Missing R packages detected: {', '.join(missing)}")
        print("Attempting to install via BiocManager...")
        _bioc_manager().install(StrVector(missing), ask=False)
        print("R packages installed successfully.")

    _checked_packages.update(to_check)


def install_workflow_dependencies(
    use_renv: bool = False,
    renv_path: Optional[Union[str, Path]] = None,
) -> None:
    """
    Install everything the example workflow needs: base packages, affy and limma.

    Equivalent to running in R::

        if (!requireNamespace("BiocManager", quietly = TRUE))
            install.packages("BiocManager")
        BiocManager::install(c("affy", "limma"))
    """
    install_base_dependencies(use_renv=use_renv, renv_path=renv_path)
    ensure_r_dependencies(WORKFLOW_R_PACKAGES)
