"""Shared fixtures: phenotype tables on disk and simulated log2 expression data."""

import numpy as np
import pandas as pd
import pytest

from microarray_workflow import is_r_package_installed


def r_packages_available(*packages: str) -> bool:
    """True when rpy2, bioc2ri and all the given R packages can be used."""
    try:
        import bioc2ri  # noqa: F401
    except ImportError:
        return False
    return all(is_r_package_installed(pkg) for pkg in packages)


PHENO_TEXT = (
    "Name\tTarget\tTime\n"
    "a1.CEL\tcontrol\tearly\n"
    "a2.CEL\tcontrol\tearly\n"
    "b1.CEL\tcontrol\tlate\n"
    "b2.CEL\tcontrol\tlate\n"
    "c1.CEL\ttreated\tearly\n"
    "c2.CEL\ttreated\tearly\n"
    "d1.CEL\ttreated\tlate\n"
    "d2.CEL\ttreated\tlate\n"
)


@pytest.fixture
def pheno_file(tmp_path):
    """Tab-delimited phenotype file for eight arrays in a 2x2 layout."""
    path = tmp_path / "pdata.txt"
    path.write_text(PHENO_TEXT)
    return path


@pytest.fixture
def pheno(pheno_file):
    from microarray_workflow import read_phenotype_table
    return read_phenotype_table(pheno_file)


@pytest.fixture
def celfile_dir(tmp_path, pheno):
    """Directory with an (empty) CEL file for every sample plus unrelated files."""
    d = tmp_path / "celfiles"
    d.mkdir()
    for sample in pheno.index:
        (d / sample).write_bytes(b"")
    (d / "notes.txt").write_text("not a CEL file")
    return d


@pytest.fixture
def mock_expression():
    """Simulated log2 RMA-like values: 200 probesets x 8 arrays.

    The first 20 probesets are up by 3 log2 units in treated arrays.
    """
    rng = np.random.default_rng(42)
    n_probes, n_samples = 200, 8
    exprs = rng.normal(loc=8.0, scale=0.3, size=(n_probes, n_samples))
    exprs[:20, 4:] += 3.0
    probe_ids = [f"{1000 + i}_at" for i in range(n_probes)]
    samples = ["a1.CEL", "a2.CEL", "b1.CEL", "b2.CEL", "c1.CEL", "c2.CEL", "d1.CEL", "d2.CEL"]
    return exprs, probe_ids, samples


@pytest.fixture
def top_table_df():
    """A small top table with the columns returned by limma.top_table."""
    return pd.DataFrame({
        "probe_id": ["1000_at", "1001_at", "1002_at", "1003_at"],
        "log_fc": [3.1, -2.4, 0.2, 1.5],
        "ave_expr": [9.5, 8.1, 7.9, 6.2],
        "t_statistic": [25.3, -18.2, 1.1, 4.0],
        "p_value": [1.2e-12, 3.4e-10, 0.29, 0.002],
        "adj_p_value": [2.4e-10, 3.4e-8, 0.41, 0.04],
        "b_statistic": [18.5, 13.2, -6.1, -1.0],
    })
