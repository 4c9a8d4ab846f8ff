"""
Design matrices derived from phenotype group labels.

The workflow combines one or more phenotype columns into a single factor and
builds the model matrix of that factor, as in R::

    combn <- factor(paste(pData(pd)[, 1], pData(pd)[, 2], sep = "_"))
    design <- model.matrix(~ combn)

Both are deterministic functions of the labels, so they are computed in pandas.
"""

from __future__ import annotations
from typing import Optional, Sequence, Union
import pandas as pd

from .phenodata import check_phenotype_table

INTERCEPT = "(Intercept)"


def _as_columns(columns: Union[str, Sequence[str]]) -> list:
    if isinstance(columns, str):
        return [columns]
    columns = list(columns)
    if not columns:
        raise ValueError("At least one phenotype column is required")
    return columns


def combine_factors(
    pheno: pd.DataFrame,
    columns: Union[str, Sequence[str]],
    sep: str = "_",
) -> pd.Categorical:
    """
    Paste phenotype columns into one factor with lexically sorted levels.

    Args:
        pheno: Phenotype table (samples x variables).
        columns: Column name or names to combine.
        sep: Separator placed between the values. Default: "_".

    Returns:
        pd.Categorical with one value per sample, in table order.

    Raises:
        KeyError: If a column is not in the table.
        ValueError: If a sample has a missing label.
    """
    check_phenotype_table(pheno)
    columns = _as_columns(columns)

    unknown = [c for c in columns if c not in pheno.columns]
    if unknown:
        raise KeyError(
            f"Phenotype columns {unknown} not found. Available: {list(pheno.columns)}"
        )

    values = pheno[columns]
    blank = values.isna() | (values.astype(str).apply(lambda c: c.str.strip()) == "")
    if blank.to_numpy().any():
        bad = pheno.index[blank.any(axis=1)].tolist()
        raise ValueError(f"Missing group labels for samples: {bad}")

    labels = values.astype(str).agg(sep.join, axis=1)
    return pd.Categorical(labels, categories=sorted(labels.unique()))


def model_matrix(
    pheno: pd.DataFrame,
    columns: Union[str, Sequence[str]],
    sep: str = "_",
    intercept: bool = True,
    prefix: Optional[str] = None,
) -> pd.DataFrame:
    """
    Build the design matrix of the combined phenotype factor.

    With ``intercept=True`` this is R's ``model.matrix(~ f)`` (treatment
    contrasts): an ``(Intercept)`` column followed by one indicator for each
    level except the first. With ``intercept=False`` it is ``model.matrix(~ 0 + f)``:
    one indicator per level, each coefficient a group mean.

    Args:
        pheno: Phenotype table (samples x variables).
        columns: Column name or names defining the groups.
        sep: Separator used when combining several columns. Default: "_".
        intercept: Include an intercept column. Default: True.
        prefix: Prefix of the indicator column names. Default: the column names
            joined with ``sep``.

    Returns:
        Float DataFrame (samples x coefficients) indexed by sample identifier.

    Raises:
        KeyError: If a column is not in the table.
        ValueError: If labels are missing, or only one group exists while an
            intercept is requested.

    Example:
        >>> design = model_matrix(pheno, ["Target", "Time"])
        >>> list(design.columns)
        ['(Intercept)', 'Target_Timecontrol_late', 'Target_Timetreated_early', ...]
    """
    columns = _as_columns(columns)
    factor = combine_factors(pheno, columns, sep=sep)
    levels = list(factor.categories)

    if intercept and len(levels) < 2:
        raise ValueError(
            f"Need at least two groups to contrast against a baseline, got {levels}"
        )

    prefix = sep.join(columns) if prefix is None else prefix
    indicators = pd.DataFrame(
        {f"{prefix}{level}": (factor == level).astype(float) for level in levels},
        index=pheno.index,
    )

    if not intercept:
        return indicators

    design = indicators.iloc[:, 1:].copy()
    design.insert(0, INTERCEPT, 1.0)
    return design
