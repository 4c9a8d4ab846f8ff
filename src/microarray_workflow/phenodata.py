"""
Phenotype tables: sample identifiers mapped to experimental group labels.

The table is a tab-delimited text file with a header line. Its first column
holds the sample identifiers, which for Affymetrix data are the CEL file names::

    Name            Target     Time
    a1.CEL          control    early
    a2.CEL          control    late
    b1.CEL          treated    early
    ...

This mirrors ``Biobase::read.AnnotatedDataFrame(file, header=TRUE, row.names=1,
as.is=TRUE)``.
"""

from __future__ import annotations
from pathlib import Path
from typing import Any, List, Union
import pandas as pd

CEL_SUFFIXES = (".cel", ".cel.gz")


def check_phenotype_table(pheno: Any, name: str = "pheno") -> None:
    """Check that ``pheno`` is a usable phenotype table."""
    if not isinstance(pheno, pd.DataFrame):
        raise TypeError(
            f"Expected `{name}` to be a pandas DataFrame, got {type(pheno).__name__}"
        )
    if pheno.shape[0] == 0:
        raise ValueError(f"`{name}` has no samples")
    if pheno.shape[1] == 0:
        raise ValueError(f"`{name}` has no phenotype columns")
    samples = pheno.index.to_series().astype(str).str.strip()
    if (samples == "").any() or pheno.index.isna().any():
        raise ValueError(f"`{name}` has empty sample identifiers")
    dup = samples[samples.duplicated()].unique().tolist()
    if dup:
        raise ValueError(f"`{name}` has duplicated sample identifiers: {dup}")


def read_phenotype_table(
    path: Union[str, Path],
    sep: str = "\t",
    index_col: int = 0,
) -> pd.DataFrame:
    """
    Read a phenotype table from a delimited text file.

    All values are kept as strings; leading and trailing whitespace is removed.

    Args:
        path: Path to the phenotype file.
        sep: Field separator. Default: tab.
        index_col: Column holding the sample identifiers. Default: first column.

    Returns:
        DataFrame indexed by sample identifier (index name ``sample``).

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        ValueError: If the table is empty or sample identifiers are not unique.

    Example:
        >>> pheno = read_phenotype_table("pdata.txt")
        >>> pheno["Target"].unique()
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"Phenotype file not found: {path}")

    pheno = pd.read_csv(
        path,
        sep=sep,
        index_col=index_col,
        dtype=str,
        keep_default_na=False,
    )
    pheno.columns = [str(c).strip() for c in pheno.columns]
    pheno.index = pd.Index([str(s).strip() for s in pheno.index], name="sample")
    pheno = pheno.apply(lambda col: col.str.strip())

    check_phenotype_table(pheno)
    return pheno


def phenotype_to_biocframe(pheno: pd.DataFrame):
    """Convert a phenotype table to a BiocFrame usable as ``column_data``."""
    from biocframe import BiocFrame

    check_phenotype_table(pheno)
    return BiocFrame(
        {col: pheno[col].tolist() for col in pheno.columns},
        row_names=[str(s) for s in pheno.index],
    )


def list_cel_files(celfile_path: Union[str, Path]) -> List[str]:
    """
    List CEL files in a directory (``.CEL`` / ``.cel.gz``, any case), sorted.

    Raises:
        NotADirectoryError: If ``celfile_path`` is not a directory.
    """
    celfile_path = Path(celfile_path)
    if not celfile_path.is_dir():
        raise NotADirectoryError(f"CEL file directory not found: {celfile_path}")
    return sorted(
        p.name
        for p in celfile_path.iterdir()
        if p.is_file() and p.name.lower().endswith(CEL_SUFFIXES)
    )


def match_cel_files(pheno: pd.DataFrame, celfile_path: Union[str, Path]) -> List[str]:
    """
    Resolve the raw-data file of every sample, in phenotype-table order.

    Returns:
        Absolute file paths, one per row of ``pheno``.

    Raises:
        NotADirectoryError: If ``celfile_path`` is not a directory.
        FileNotFoundError: Naming every sample without a file.
    """
    check_phenotype_table(pheno)
    celfile_path = Path(celfile_path)
    if not celfile_path.is_dir():
        raise NotADirectoryError(f"CEL file directory not found: {celfile_path}")

    files = []
    missing = []
    for sample in pheno.index:
        candidate = celfile_path / str(sample)
        if candidate.is_file():
            files.append(str(candidate.absolute()))
        else:
            missing.append(str(sample))

    if missing:
        raise FileNotFoundError(
            f"No raw data file in {celfile_path} for samples: {missing}"
        )
    return files
