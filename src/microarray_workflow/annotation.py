"""
Probe annotation with Bioconductor chip annotation packages (AnnotationDbi).

RMA reports probeset identifiers. The chip's annotation package (for example
``hgu95av2.db`` for arrays whose ExpressionSet annotation is ``hgu95av2``)
maps them to gene symbols and names.
"""

from __future__ import annotations
import warnings
from typing import Any, Sequence
import pandas as pd

from .r_utils import ensure_r_dependencies

DEFAULT_COLUMNS = ("SYMBOL", "GENENAME")

_annotation_dbi_pkg: Any = None


def _annotation_dbi() -> Any:
    """Lazily import and return the R `AnnotationDbi` package (cached)."""
    global _annotation_dbi_pkg
    if _annotation_dbi_pkg is None:
        from bioc2ri.lazy_r_env import get_r_environment

        ensure_r_dependencies(["AnnotationDbi"])
        _annotation_dbi_pkg = get_r_environment().importr("AnnotationDbi")
    return _annotation_dbi_pkg


def _clean_value(value: Any):
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return None
    value = str(value)
    return None if value == "NA" else value


def annotation_package_name(annotation: str) -> str:
    """Return the annotation package for a chip, e.g. ``hgu95av2`` -> ``hgu95av2.db``."""
    if not annotation:
        raise ValueError("Chip annotation name is empty")
    return annotation if annotation.endswith(".db") else f"{annotation}.db"


def annotate_probes(
    probe_ids: Sequence[str],
    package: str,
    columns: Sequence[str] = DEFAULT_COLUMNS,
    keytype: str = "PROBEID",
) -> pd.DataFrame:
    """
    Look up annotation for probe identifiers.

    Wraps ``AnnotationDbi::select``. Probes mapping to several genes get their
    values joined with ``"|"``; probes absent from the package get missing values.

    Args:
        probe_ids: Probe / probeset identifiers.
        package: Annotation package, e.g. "hgu95av2.db".
        columns: Annotation columns to retrieve. Default: SYMBOL, GENENAME.
        keytype: Key type of ``probe_ids``. Default: "PROBEID".

    Returns:
        DataFrame indexed by probe id (input order) with one column per
        requested annotation column.
    """
    from bioc2ri.lazy_r_env import get_r_environment

    probe_ids = [str(p) for p in probe_ids]
    columns = list(columns)
    if not columns:
        raise ValueError("At least one annotation column is required")

    package = annotation_package_name(package)
    ensure_r_dependencies([package])

    r = get_r_environment()
    dbi = _annotation_dbi()
    # ChipDb objects are exported under the package name
    db_obj = r.ro.r(f"{package}::{package}")

    mapped = dbi.select(
        db_obj,
        keys=r.StrVector(probe_ids),
        columns=r.StrVector(columns),
        keytype=keytype,
    )
    with r.localconverter(r.default_converter + r.pandas2ri.converter):
        mapped = r.get_conversion().rpy2py(mapped)

    # NA_character_ may survive conversion as the string "NA"
    for col in [keytype] + columns:
        mapped[col] = mapped[col].map(_clean_value)

    collapsed = (
        mapped.dropna(subset=columns, how="all")
        .groupby(keytype, sort=False)[columns]
        .agg(lambda s: "|".join(dict.fromkeys(str(v) for v in s.dropna())) or None)
    )
    result = collapsed.reindex(probe_ids)
    result.index.name = "probe_id"

    n_missing = int(result.isna().all(axis=1).sum())
    if n_missing:
        warnings.warn(f"{n_missing} probes have no annotation in {package}", stacklevel=2)
    return result


def annotate_top_table(
    table: pd.DataFrame,
    package: str,
    columns: Sequence[str] = DEFAULT_COLUMNS,
) -> pd.DataFrame:
    """
    Add annotation columns to a top table, right after ``probe_id``.

    Row order and all statistics are preserved.
    """
    if "probe_id" not in table.columns:
        raise KeyError("Top table has no 'probe_id' column")

    ann = annotate_probes(table["probe_id"].tolist(), package, columns=columns)
    out = table.copy()
    for pos, col in enumerate(ann.columns, start=1):
        out.insert(pos, col.lower(), ann[col].to_numpy())
    return out
