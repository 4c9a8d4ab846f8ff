"""limma wrappers on simulated log2 expression data.

Requires R with limma; skipped otherwise.
"""

import numpy as np
import pandas as pd
import pytest

from conftest import r_packages_available

if not r_packages_available("limma"):
    pytest.skip("R package limma not available", allow_module_level=True)

from summarizedexperiment import SummarizedExperiment

import microarray_workflow.limma as limma
from microarray_workflow import initialize_r, model_matrix, summarize_decisions, RMatrixAdapter
from microarray_workflow.limma import LimmaModel


@pytest.fixture
def eset(mock_expression):
    exprs, probe_ids, samples = mock_expression
    se = SummarizedExperiment(
        assays={"exprs": exprs},
        row_names=probe_ids,
        column_names=samples,
    )
    return initialize_r(se, assay="exprs")


@pytest.fixture
def design(pheno):
    return model_matrix(pheno, ["Target"])


@pytest.fixture
def model(eset, design):
    return limma.lm_fit(eset, design)


def test_lm_fit(model, design, mock_expression):
    _, probe_ids, samples = mock_expression

    assert isinstance(model, LimmaModel)
    assert model.lm_fit is not None
    assert model.ebayes is None
    assert model.feature_names == probe_ids
    assert model.sample_names == samples
    assert model.coefficient_names == ["(Intercept)", "Targettreated"]


def test_lm_fit_requires_r_assay(mock_expression, design):
    exprs, probe_ids, samples = mock_expression
    se = SummarizedExperiment(assays={"exprs": exprs}, row_names=probe_ids, column_names=samples)

    with pytest.raises(TypeError, match="initialize_r"):
        limma.lm_fit(se, design)


def test_lm_fit_design_mismatch(eset, design):
    with pytest.raises(ValueError, match="rows"):
        limma.lm_fit(eset, design.iloc[:6])

    with pytest.raises(ValueError, match="do not match"):
        limma.lm_fit(eset, design.iloc[::-1])


def test_lm_fit_unknown_assay(eset, design):
    with pytest.raises(KeyError):
        limma.lm_fit(eset, design, assay="counts")


def test_e_bayes_keeps_fit(model):
    moderated = limma.e_bayes(model)

    assert moderated.ebayes is not None
    assert moderated.lm_fit is model.lm_fit
    assert model.ebayes is None


def test_e_bayes_proportion(model):
    with pytest.raises(ValueError):
        limma.e_bayes(model, proportion=1.5)


def test_top_table(model):
    table = model.e_bayes().top_table(coef=2, n=10)

    assert list(table.columns) == [
        "probe_id", "log_fc", "ave_expr", "t_statistic",
        "p_value", "adj_p_value", "b_statistic",
    ]
    assert len(table) == 10
    # the simulated up-regulated probesets come first
    assert set(table["probe_id"]) <= {f"{1000 + i}_at" for i in range(20)}
    assert (table["log_fc"] > 2).all()
    assert table["p_value"].is_monotonic_increasing


def test_top_table_by_name_and_all_rows(model):
    by_index = limma.top_table(model, coef=2, n=None)
    by_name = limma.top_table(model, coef="Targettreated", n=None)

    assert len(by_index) == 200
    assert by_index["probe_id"].tolist() == by_name["probe_id"].tolist()


def test_top_table_f_test(model):
    table = limma.top_table(model, coef=None, n=5)
    assert "f_statistic" in table.columns


def test_top_table_bad_arguments(model):
    with pytest.raises(ValueError, match="coef"):
        limma.top_table(model, coef=3)
    with pytest.raises(ValueError, match="Unknown coefficient"):
        limma.top_table(model, coef="Time")
    with pytest.raises(ValueError, match="adjust_method"):
        limma.top_table(model, coef=2, adjust_method="magic")


def test_contrasts_on_group_means(eset, pheno):
    design = model_matrix(pheno, ["Target"], intercept=False, prefix="")
    assert list(design.columns) == ["control", "treated"]

    cm = limma.make_contrasts(design, TvsC="treated - control")
    assert cm.loc["treated", "TvsC"] == 1
    assert cm.loc["control", "TvsC"] == -1

    model = limma.lm_fit(eset, design).contrasts_fit(cm)
    assert model.coefficient_names == ["TvsC"]

    table = model.top_table(n=20)
    reference = limma.top_table(limma.lm_fit(eset, model_matrix(pheno, ["Target"])), coef=2, n=20)

    np.testing.assert_allclose(table["log_fc"], reference["log_fc"])


def test_contrast_rows_matched_by_name(eset, pheno):
    design = model_matrix(pheno, ["Target"], intercept=False, prefix="")
    assert list(design.columns) == ["control", "treated"]

    # levels listed in the opposite order to the design columns
    cm = limma.make_contrasts(["treated", "control"], TvsC="treated - control")
    assert list(cm.index) == ["treated", "control"]

    model = limma.lm_fit(eset, design).contrasts_fit(cm)
    assert model.contrasts.loc["treated", "TvsC"] == 1
    assert list(model.contrasts.index) == ["control", "treated"]

    table = model.top_table(n=20).set_index("probe_id")
    reference = limma.top_table(
        limma.lm_fit(eset, model_matrix(pheno, ["Target"])), coef=2, n=20
    ).set_index("probe_id")

    assert (table["log_fc"] > 2).all()
    np.testing.assert_allclose(
        table["log_fc"], reference.loc[table.index, "log_fc"]
    )


def test_contrast_rows_must_name_coefficients(eset, pheno):
    design = model_matrix(pheno, ["Target"], intercept=False, prefix="")
    model = limma.lm_fit(eset, design)
    cm = pd.DataFrame({"TvsC": [1.0, -1.0]}, index=["treated", "untreated"])

    with pytest.raises(ValueError, match="untreated"):
        limma.contrasts_fit(model, cm)


def test_contrast_matrix_without_row_labels(model):
    cm = pd.DataFrame({"treated": [0.0, 1.0]})

    fitted = limma.contrasts_fit(model, cm)

    assert list(fitted.contrasts.index) == ["(Intercept)", "Targettreated"]
    assert fitted.contrasts.loc["Targettreated", "treated"] == 1


def test_contrast_vector_length(model):
    with pytest.raises(ValueError, match="coefficients"):
        limma.contrasts_fit(model, [0, 1, -1])


def test_contrast_vector(model):
    fitted = limma.contrasts_fit(model, [0, 1])
    assert fitted.contrasts.shape == (2, 1)
    assert fitted.ebayes is None


def test_decide_tests(model):
    decisions = limma.decide_tests(model)

    assert decisions.shape == (200, 2)
    assert list(decisions.columns) == ["(Intercept)", "Targettreated"]
    assert (decisions.loc["1000_at":"1019_at", "Targettreated"] == 1).all()

    summary = summarize_decisions(decisions)
    assert summary["Targettreated"].sum() == 200
    assert summary.loc["Up", "Targettreated"] >= 20


def test_decide_tests_keeps_missing(mock_expression, design):
    exprs, probe_ids, samples = mock_expression
    exprs = exprs.copy()
    exprs[-1, :] = np.nan
    se = initialize_r(
        SummarizedExperiment(assays={"exprs": exprs}, row_names=probe_ids, column_names=samples),
        assay="exprs",
    )

    decisions = limma.decide_tests(limma.lm_fit(se, design))

    assert (decisions.dtypes == "Int64").all()
    assert decisions.loc[probe_ids[-1]].isna().all()
    assert summarize_decisions(decisions)["Targettreated"].sum() == 199


def test_normalize_between_arrays(eset):
    out = limma.normalize_between_arrays(eset, method="quantile")

    assert "exprs_norm" in out.assay_names
    assert "exprs_norm" not in eset.assay_names
    norm = out.assays["exprs_norm"]
    assert isinstance(norm, RMatrixAdapter)

    sorted_cols = np.sort(norm.to_numpy(), axis=0)
    np.testing.assert_allclose(sorted_cols[:, 0], sorted_cols[:, -1])


def test_normalize_unknown_method(eset):
    with pytest.raises(ValueError, match="method"):
        limma.normalize_between_arrays(eset, method="vsn")


def test_design_without_sample_index(eset, design):
    # RangeIndex designs skip the sample-name check
    plain = design.reset_index(drop=True)
    assert isinstance(limma.lm_fit(eset, plain), LimmaModel)
