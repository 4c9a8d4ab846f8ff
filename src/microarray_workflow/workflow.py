"""
The example analysis: from CEL files and a phenotype table to a ranked table of
differentially expressed probesets.

In R the workflow reads::

    library(affy); library(limma)
    pd <- read.AnnotatedDataFrame("pdata.txt", header = TRUE, row.names = 1, as.is = TRUE)
    eset <- justRMA(phenoData = pd, celfile.path = celfiles)
    combn <- factor(paste(pData(pd)[, 1], pData(pd)[, 2], sep = "_"))
    design <- model.matrix(~ combn)
    fit <- lmFit(eset, design)
    efit <- eBayes(fit)
    topTable(efit, coef = 2)

``run_workflow`` performs the same calls. Every step is delegated to the R
packages; failures raised in R propagate unchanged.
"""

from __future__ import annotations
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping, Optional, Sequence, Union
import pandas as pd

from .design import model_matrix
from .phenodata import read_phenotype_table


@dataclass
class WorkflowConfig:
    """Parameters of the example workflow.

    Attributes:
        phenotype_path: Tab-delimited phenotype file (first column: CEL file names).
        celfile_path: Directory holding the CEL files.
        factor_columns: Phenotype columns combined into the grouping factor.
        sep: Separator used when combining the columns.
        intercept: Treatment-contrast design (True) or group means (False).
        coef: Coefficient reported in the top table (1-based index or name).
        number: Number of probesets in the top table (None = all).
        adjust_method: Multiple testing correction.
        output_path: Write the top table here when given.
        annotate: Add gene symbols and names from the chip annotation package.
        verbose: Print progress.
    """
    phenotype_path: Union[str, Path]
    celfile_path: Union[str, Path]
    factor_columns: Sequence[str] = ()
    sep: str = "_"
    intercept: bool = True
    coef: Optional[Union[int, str]] = 2
    number: Optional[int] = 10
    adjust_method: str = "BH"
    output_path: Optional[Union[str, Path]] = None
    annotate: bool = False
    verbose: bool = True

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "WorkflowConfig":
        """Build a config from a plain mapping, e.g. parsed JSON or YAML."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(mapping) - known)
        if unknown:
            raise TypeError(f"Unknown workflow options: {unknown}")
        values = dict(mapping)
        if isinstance(values.get("factor_columns"), str):
            values["factor_columns"] = [values["factor_columns"]]
        return cls(**values)


@dataclass
class WorkflowResult:
    """Objects produced by each step of the workflow."""
    phenotype: pd.DataFrame
    expression_set: Any
    design: pd.DataFrame
    model: Any
    top_table: pd.DataFrame
    output_path: Optional[Path] = None


def run_workflow(config: WorkflowConfig) -> WorkflowResult:
    """
    Run the example workflow.

    Steps: read the phenotype table, RMA-normalize the arrays, build the design
    matrix, fit the per-probe linear model, moderate with empirical Bayes and
    extract the top table.

    Args:
        config: Workflow parameters.

    Returns:
        WorkflowResult with the intermediate objects and the top table.

    Example:
        >>> cfg = WorkflowConfig("pdata.txt", "celfiles/", factor_columns=["Target", "Time"])
        >>> result = run_workflow(cfg)
        >>> result.top_table.head()
    """
    from . import affy, limma
    from .report import format_top_table, write_top_table

    def say(msg: str) -> None:
        if config.verbose:
            print(msg)

    pheno = read_phenotype_table(config.phenotype_path)
    say(f"Read phenotype data for {len(pheno)} samples")

    columns = list(config.factor_columns) or list(pheno.columns[:2])

    eset = affy.just_rma(pheno, config.celfile_path)
    say(f"RMA expression values: {eset.shape[0]} probesets x {eset.shape[1]} arrays")

    design = model_matrix(pheno, columns, sep=config.sep, intercept=config.intercept)
    say(f"Design matrix with coefficients: {list(design.columns)}")

    model = limma.lm_fit(eset, design)
    model = limma.e_bayes(model)
    table = limma.top_table(
        model,
        coef=config.coef,
        n=config.number,
        adjust_method=config.adjust_method,
    )

    if config.annotate:
        from .annotation import annotate_top_table

        chip = (eset.metadata or {}).get("annotation")
        if not chip:
            raise ValueError("Expression set carries no chip annotation name")
        table = annotate_top_table(table, chip)

    say(format_top_table(table))

    written = None
    if config.output_path is not None:
        written = write_top_table(table, config.output_path)
        say(f"Top table written to {written}")

    return WorkflowResult(
        phenotype=pheno,
        expression_set=eset,
        design=design,
        model=model,
        top_table=table,
        output_path=written,
    )
