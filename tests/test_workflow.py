"""Tests for the example workflow orchestration.

The affy and limma steps are replaced by recording fakes so the order of calls
and the handling of their results can be checked without R.
"""

import sys
from types import SimpleNamespace

import pandas as pd
import pytest

import microarray_workflow
from microarray_workflow import WorkflowConfig, run_workflow


class TestWorkflowConfig:

    def test_defaults(self):
        cfg = WorkflowConfig("pdata.txt", "cel/")

        assert cfg.coef == 2
        assert cfg.number == 10
        assert cfg.adjust_method == "BH"
        assert cfg.output_path is None

    def test_from_mapping(self):
        cfg = WorkflowConfig.from_mapping({
            "phenotype_path": "pdata.txt",
            "celfile_path": "cel/",
            "factor_columns": "Target",
            "number": 25,
        })

        assert cfg.factor_columns == ["Target"]
        assert cfg.number == 25

    def test_from_mapping_rejects_unknown(self):
        with pytest.raises(TypeError, match="colour"):
            WorkflowConfig.from_mapping({
                "phenotype_path": "p", "celfile_path": "c", "colour": "red",
            })


@pytest.fixture
def fake_r_steps(monkeypatch, top_table_df):
    calls = []

    eset = SimpleNamespace(shape=(200, 8), metadata={"annotation": "hgu95av2"})

    def just_rma(pheno, celfile_path):
        calls.append(("just_rma", list(pheno.index), str(celfile_path)))
        return eset

    def lm_fit(se, design):
        calls.append(("lm_fit", se, list(design.columns)))
        return "fit"

    def e_bayes(model):
        calls.append(("e_bayes", model))
        return "efit"

    def top_table(model, coef, n, adjust_method):
        calls.append(("top_table", model, coef, n, adjust_method))
        return top_table_df

    fake_affy = SimpleNamespace(just_rma=just_rma)
    fake_limma = SimpleNamespace(lm_fit=lm_fit, e_bayes=e_bayes, top_table=top_table)

    monkeypatch.setitem(sys.modules, "microarray_workflow.affy", fake_affy)
    monkeypatch.setitem(sys.modules, "microarray_workflow.limma", fake_limma)
    monkeypatch.setattr(microarray_workflow, "affy", fake_affy, raising=False)
    monkeypatch.setattr(microarray_workflow, "limma", fake_limma, raising=False)
    return calls


def test_steps_in_order(fake_r_steps, pheno_file, tmp_path):
    cfg = WorkflowConfig(
        pheno_file, tmp_path, factor_columns=["Target", "Time"], verbose=False,
    )

    result = run_workflow(cfg)

    assert [c[0] for c in fake_r_steps] == ["just_rma", "lm_fit", "e_bayes", "top_table"]
    assert fake_r_steps[1][2][0] == "(Intercept)"
    assert fake_r_steps[3] == ("top_table", "efit", 2, 10, "BH")
    assert result.model == "efit"
    assert list(result.design.index) == list(result.phenotype.index)
    assert result.output_path is None


def test_default_factor_columns(fake_r_steps, pheno_file, tmp_path):
    result = run_workflow(WorkflowConfig(pheno_file, tmp_path, verbose=False))

    assert result.design.shape == (8, 4)


def test_writes_output(fake_r_steps, pheno_file, tmp_path, top_table_df):
    out = tmp_path / "results" / "top.txt"
    cfg = WorkflowConfig(pheno_file, tmp_path, output_path=out, verbose=False)

    result = run_workflow(cfg)

    assert result.output_path == out
    assert pd.read_csv(out, sep="\t")["probe_id"].tolist() == top_table_df["probe_id"].tolist()


def test_verbose_prints_table(fake_r_steps, pheno_file, tmp_path, capsys):
    run_workflow(WorkflowConfig(pheno_file, tmp_path, factor_columns=["Target"]))

    out = capsys.readouterr().out
    assert "Read phenotype data for 8 samples" in out
    assert "1000_at" in out


def test_annotation_step(fake_r_steps, pheno_file, tmp_path, monkeypatch):
    import microarray_workflow.annotation as annotation

    seen = {}

    def annotate_top_table(table, package):
        seen["package"] = package
        return table.assign(symbol="GENE")

    monkeypatch.setattr(annotation, "annotate_top_table", annotate_top_table)

    result = run_workflow(
        WorkflowConfig(pheno_file, tmp_path, annotate=True, verbose=False)
    )

    assert seen["package"] == "hgu95av2"
    assert (result.top_table["symbol"] == "GENE").all()
