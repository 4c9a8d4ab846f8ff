"""Reporting of differential expression results: tables, decision counts and volcano plots."""

from pathlib import Path
from typing import Optional, Union

import numpy as np
import pandas as pd
import matplotlib.pyplot as plt
import seaborn as sns

# Python result column -> limma column, in topTable order
R_COLUMN_NAMES = {
    "probe_id": "ID",
    "log_fc": "logFC",
    "ave_expr": "AveExpr",
    "t_statistic": "t",
    "f_statistic": "F",
    "p_value": "P.Value",
    "adj_p_value": "adj.P.Val",
    "b_statistic": "B",
}

DECISION_LABELS = {-1: "Down", 0: "NotSig", 1: "Up"}


def to_r_names(table: pd.DataFrame) -> pd.DataFrame:
    """Rename top table columns back to limma's ``topTable`` names."""
    return table.rename(columns=R_COLUMN_NAMES)


def format_top_table(table: pd.DataFrame, digits: int = 3) -> str:
    """Render a top table as fixed-width text, p-values in scientific notation."""
    df = table.copy()
    for col in df.columns:
        if not pd.api.types.is_float_dtype(df[col]):
            continue
        if "p_value" in col:
            df[col] = df[col].map(lambda v: f"{v:.{digits}e}")
        else:
            df[col] = df[col].map(lambda v: f"{v:.{digits}f}")
    return df.to_string(index=False)


def write_top_table(
    table: pd.DataFrame,
    path: Union[str, Path],
    r_names: bool = False,
    digits: Optional[int] = None,
) -> Path:
    """
    Write a top table as a tab-delimited text file.

    Args:
        table: Result of ``top_table``.
        path: Output file; parent directories are created.
        r_names: Use limma's column names (ID, logFC, AveExpr, t, P.Value,
            adj.P.Val, B). Default: False.
        digits: Round floats to this many significant digits. Default: no rounding.

    Returns:
        The path written.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    out = to_r_names(table) if r_names else table
    float_format = None if digits is None else f"%.{digits}g"
    out.to_csv(path, sep="\t", index=False, float_format=float_format)
    return path


def summarize_decisions(decisions: pd.DataFrame) -> pd.DataFrame:
    """
    Count probes called down, not significant and up for each coefficient.

    Equivalent to ``summary(decideTests(fit))`` in R.

    Missing decisions (NA p-values) are not counted.

    Returns:
        DataFrame with rows Down, NotSig, Up and one column per coefficient.
    """
    arr = decisions.to_numpy(dtype=float, na_value=np.nan)
    values = set(np.unique(arr[~np.isnan(arr)]).tolist())
    if not values <= set(DECISION_LABELS):
        raise ValueError(f"Decisions must be -1, 0 or 1, got {sorted(values)}")

    counts = {
        col: [int((decisions[col] == code).sum()) for code in DECISION_LABELS]
        for col in decisions.columns
    }
    return pd.DataFrame(counts, index=list(DECISION_LABELS.values()))


def volcano_plot(
    results: pd.DataFrame,
    logfc_col: str = "log_fc",
    fdr_col: str = "adj_p_value",
    fdr_threshold: float = 0.05,
    logfc_threshold: float = 1.0,
    figsize: tuple = (10, 8),
    title: str = "Volcano Plot",
    xlabel: str = "log₂(Fold Change)",
    ylabel: str = "-log₁₀(Adjusted p-value)",
    save_path: Optional[str] = None,
    **kwargs
) -> plt.Figure:
    """
    Volcano plot of a top table: log fold-change against -log10 adjusted p-value.

    Args:
        results: Top table from ``limma.top_table``.
        logfc_col: Column with log fold-changes. Default: "log_fc".
        fdr_col: Column with adjusted p-values. Default: "adj_p_value".
        fdr_threshold: Significance threshold. Default: 0.05.
        logfc_threshold: Fold-change threshold for highlighting. Default: 1.0.
        figsize: Figure size.
        title, xlabel, ylabel: Labels.
        save_path: Save the figure here when given.
        **kwargs:
            - point_size (default 40)
            - sig_color (default '#e74c3c')
            - nonsig_color (default '#95a5a6')
            - alpha (default 0.7)
            - dpi for the saved figure (default 300)

    Returns:
        matplotlib.figure.Figure

    Example:
        >>> fig = volcano_plot(table, logfc_threshold=0.5, save_path="volcano.png")
    """
    point_size = kwargs.get("point_size", 40)
    sig_color = kwargs.get("sig_color", "#e74c3c")
    nonsig_color = kwargs.get("nonsig_color", "#95a5a6")
    alpha = kwargs.get("alpha", 0.7)
    dpi = kwargs.get("dpi", 300)

    for col in (logfc_col, fdr_col):
        if col not in results.columns:
            raise KeyError(f"Column '{col}' not found in results")

    df = results.copy()
    # p-values of exactly zero would map to infinity
    floor = np.finfo(float).tiny
    df["neg_log10_fdr"] = -np.log10(df[fdr_col].clip(lower=floor))

    sig_mask = (df[fdr_col] < fdr_threshold) & (np.abs(df[logfc_col]) > logfc_threshold)
    sig_label = f"FDR < {fdr_threshold}, |logFC| > {logfc_threshold}"
    df["status"] = np.where(sig_mask, sig_label, "Not significant")

    fig, ax = plt.subplots(figsize=figsize, dpi=100)
    sns.scatterplot(
        data=df,
        x=logfc_col,
        y="neg_log10_fdr",
        hue="status",
        hue_order=["Not significant", sig_label],
        palette={"Not significant": nonsig_color, sig_label: sig_color},
        s=point_size,
        alpha=alpha,
        edgecolor="none",
        ax=ax,
    )

    ax.axvline(-logfc_threshold, color="#34495e", linestyle="--", linewidth=1.2, alpha=0.6, zorder=0)
    ax.axvline(logfc_threshold, color="#34495e", linestyle="--", linewidth=1.2, alpha=0.6, zorder=0)
    ax.axhline(-np.log10(fdr_threshold), color="#34495e", linestyle="--", linewidth=1.2, alpha=0.6, zorder=0)

    ax.set_xlabel(xlabel, fontsize=13, fontweight="bold")
    ax.set_ylabel(ylabel, fontsize=13, fontweight="bold")
    ax.set_title(title, fontsize=15, fontweight="bold", pad=20)
    ax.grid(True, alpha=0.2, linestyle=":", linewidth=0.8)
    ax.set_axisbelow(True)
    ax.legend(loc="upper right", frameon=True, fontsize=10, title=None)

    n_sig = int(sig_mask.sum())
    stats_text = (
        f"Significant: {n_sig}/{len(df)}\n"
        f"Up-regulated: {int((sig_mask & (df[logfc_col] > 0)).sum())}\n"
        f"Down-regulated: {int((sig_mask & (df[logfc_col] < 0)).sum())}"
    )
    ax.text(
        0.02, 0.98,
        stats_text,
        transform=ax.transAxes,
        fontsize=10,
        verticalalignment="top",
        bbox=dict(boxstyle="round", facecolor="white", alpha=0.85),
        family="monospace",
    )

    fig.tight_layout()

    if save_path:
        fig.savefig(save_path, dpi=dpi, bbox_inches="tight", facecolor="white")
        print(f"Figure saved to: {save_path}")

    return fig
