"""
Access to R's help system from Python.

Every statistical step is documented by the package that implements it. These
helpers return that documentation as text instead of opening a pager or a
browser, so it can be read from a notebook or a terminal::

    >>> print(help_text("topTable", package="limma"))
    >>> list_vignettes("affy")
"""

from __future__ import annotations
from typing import Any, Optional
import pandas as pd

_help_fn: Any = None

# Renders the first help page found for `topic` as plain text lines
_HELP_TEXT_R = """
function(topic, package) {
    h <- if (is.null(package)) utils::help((topic)) else utils::help((topic), package = (package))
    paths <- as.character(h)
    if (length(paths) == 0) return(character(0))
    rd <- utils:::.getHelpFile(paths[[1]])
    out <- tempfile(fileext = ".txt")
    on.exit(unlink(out))
    tools::Rd2txt(rd, out = out, options = list(underline_titles = FALSE))
    readLines(out)
}
"""

_VIGNETTES_R = """
function(p) {
    v <- utils::vignette(package = p)$results
    data.frame(package = v[, "Package"], item = v[, "Item"], title = v[, "Title"],
               stringsAsFactors = FALSE)
}
"""


def _r():
    from bioc2ri.lazy_r_env import get_r_environment
    return get_r_environment()


def _help_text_fn() -> Any:
    global _help_fn
    if _help_fn is None:
        _help_fn = _r().ro.r(_HELP_TEXT_R)
    return _help_fn


def _check_installed(package: str) -> None:
    from .r_utils import is_r_package_installed

    if not is_r_package_installed(package):
        raise KeyError(f"R package '{package}' is not installed")


def help_text(topic: str, package: Optional[str] = None) -> str:
    """
    Return the R help page for ``topic`` as plain text.

    Equivalent to ``?topic`` / ``help(topic, package=package)`` in R.

    Raises:
        KeyError: If the package is not installed or has no such help page.
    """
    r = _r()
    if package is not None:
        _check_installed(package)

    lines = _help_text_fn()(topic, r.ro.NULL if package is None else package)
    if len(lines) == 0:
        where = f" in package '{package}'" if package else ""
        raise KeyError(f"No R help page for '{topic}'{where}")
    return "\n".join(str(line) for line in lines)


def list_vignettes(package: str) -> pd.DataFrame:
    """
    List the vignettes shipped with an R package.

    Equivalent to ``vignette(package=package)`` / ``browseVignettes(package)``.

    Returns:
        DataFrame with columns package, item, title.
    """
    _check_installed(package)
    r = _r()

    results = r.ro.r(_VIGNETTES_R)(package)
    with r.localconverter(r.default_converter + r.pandas2ri.converter):
        df = r.get_conversion().rpy2py(results)
    if len(df) == 0:
        return pd.DataFrame(columns=["package", "item", "title"])
    return df.reset_index(drop=True)[["package", "item", "title"]].astype(str)


def package_version(package: str) -> str:
    """Return the installed version of an R package."""
    _check_installed(package)
    r = _r()
    version = r.ro.r("function(p) as.character(utils::packageVersion(p))")(package)
    return str(version[0])


def limma_users_guide() -> str:
    """Return the file path of the limma User's Guide PDF."""
    from .r_utils import ensure_r_dependencies

    ensure_r_dependencies(["limma"])
    path = _r().ro.r("function() limma::limmaUsersGuide(view = FALSE)")()
    return str(path[0])
