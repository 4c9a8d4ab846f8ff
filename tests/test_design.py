"""Tests for combining phenotype columns and building design matrices."""

import numpy as np
import pandas as pd
import pytest

from microarray_workflow import combine_factors, model_matrix


class TestCombineFactors:

    def test_pastes_columns_with_separator(self, pheno):
        factor = combine_factors(pheno, ["Target", "Time"])

        assert list(factor)[:3] == ["control_early", "control_early", "control_late"]
        assert list(factor.categories) == [
            "control_early", "control_late", "treated_early", "treated_late",
        ]

    def test_single_column_by_name(self, pheno):
        factor = combine_factors(pheno, "Target")

        assert list(factor.categories) == ["control", "treated"]

    def test_levels_sorted_not_in_appearance_order(self):
        pheno = pd.DataFrame({"g": ["b", "a", "c", "a"]}, index=["s1", "s2", "s3", "s4"])

        factor = combine_factors(pheno, "g", sep=":")

        assert list(factor.categories) == ["a", "b", "c"]

    def test_unknown_column(self, pheno):
        with pytest.raises(KeyError, match="Dose"):
            combine_factors(pheno, ["Target", "Dose"])

    def test_missing_label(self):
        pheno = pd.DataFrame({"g": ["a", "", "b"]}, index=["s1", "s2", "s3"])

        with pytest.raises(ValueError, match="s2"):
            combine_factors(pheno, "g")

    def test_empty_column_list(self, pheno):
        with pytest.raises(ValueError):
            combine_factors(pheno, [])


class TestModelMatrix:

    def test_treatment_contrasts(self, pheno):
        design = model_matrix(pheno, ["Target", "Time"])

        assert list(design.columns) == [
            "(Intercept)",
            "Target_Timecontrol_late",
            "Target_Timetreated_early",
            "Target_Timetreated_late",
        ]
        assert list(design.index) == list(pheno.index)
        assert (design["(Intercept)"] == 1.0).all()
        # Reference group rows have only the intercept
        np.testing.assert_array_equal(
            design.loc["a1.CEL"].to_numpy(), [1.0, 0.0, 0.0, 0.0]
        )
        np.testing.assert_array_equal(
            design.loc["d2.CEL"].to_numpy(), [1.0, 0.0, 0.0, 1.0]
        )

    def test_group_means(self, pheno):
        design = model_matrix(pheno, "Target", intercept=False, prefix="")

        assert list(design.columns) == ["control", "treated"]
        assert design.sum(axis=1).eq(1.0).all()
        assert design["treated"].sum() == 4

    def test_combn_prefix(self, pheno):
        design = model_matrix(pheno, ["Target", "Time"], prefix="combn")

        assert list(design.columns) == [
            "(Intercept)", "combncontrol_late", "combntreated_early", "combntreated_late",
        ]

    def test_full_rank(self, pheno):
        design = model_matrix(pheno, ["Target", "Time"])

        assert np.linalg.matrix_rank(design.to_numpy()) == design.shape[1]

    def test_float_dtype(self, pheno):
        design = model_matrix(pheno, "Time")

        assert all(dtype == np.float64 for dtype in design.dtypes)

    def test_single_group_with_intercept(self):
        pheno = pd.DataFrame({"g": ["a", "a"]}, index=["s1", "s2"])

        with pytest.raises(ValueError, match="two groups"):
            model_matrix(pheno, "g")

    def test_single_group_without_intercept(self):
        pheno = pd.DataFrame({"g": ["a", "a"]}, index=["s1", "s2"])

        design = model_matrix(pheno, "g", intercept=False)

        assert list(design.columns) == ["ga"]

    def test_deterministic(self, pheno):
        pd.testing.assert_frame_equal(
            model_matrix(pheno, ["Target", "Time"]),
            model_matrix(pheno.copy(), ["Target", "Time"]),
        )
