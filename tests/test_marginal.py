"""
Unit tests for src/analysis/marginal.py.

Covers:
- Overall policy equals the sample mean of per-row predicted probabilities.
- Attribute and quantile groupings partition the dataset; n-weighted group
  means reproduce the overall mean.
- Delta-method standard errors for both linearizations.
- InvalidGrouping for unknown keys, bad bin counts and incomplete profiles.
- Reference-profile prediction consistency with the intercept-only interval.
- Scenario: overall average probability in [0.25, 0.40] for N=1000, seed=123.
"""

from __future__ import annotations

import numpy as np
import pytest

from src.analysis.intervals import intercept_probability, z_critical
from src.analysis.marginal import (
    PREDICTION_COLUMNS,
    AttributeGrouping,
    OverallGrouping,
    QuantileGrouping,
    marginal_predictions,
    prediction_table,
    profile_prediction,
)
from src.modeling.errors import InvalidGrouping, UndefinedInterval
from src.modeling.logit import fit_logit, predict_proba, sigmoid
from src.modeling.predictors import Predictor, build_design_matrix, column


# ---------------------------------------------------------------------------
# Class: overall policy
# ---------------------------------------------------------------------------

class TestOverall:

    def test_equals_sample_mean_of_row_probabilities(self, scenario_model, scenario_df):
        [overall] = marginal_predictions(scenario_model, scenario_df)
        expected = predict_proba(scenario_model, scenario_df).mean()
        assert overall.probability == pytest.approx(expected, abs=1e-12)
        assert overall.group == "overall"
        assert overall.n_obs == len(scenario_df)

    def test_equals_observed_positive_rate(self, scenario_model, scenario_df):
        """With an intercept, the MLE reproduces the observed rate exactly."""
        [overall] = marginal_predictions(scenario_model, scenario_df)
        observed = (scenario_df["label"] == "yes").mean()
        assert overall.probability == pytest.approx(observed, abs=1e-8)

    def test_scenario_average_probability_band(self, scenario_model, scenario_df):
        [overall] = marginal_predictions(scenario_model, scenario_df)
        assert 0.25 <= overall.probability <= 0.40

    def test_bounds_ordered_in_unit_interval(self, scenario_model, scenario_df):
        [overall] = marginal_predictions(scenario_model, scenario_df)
        assert 0.0 <= overall.lower <= overall.probability <= overall.upper <= 1.0
        assert overall.std_error > 0

    def test_deterministic(self, scenario_model, scenario_df):
        a = prediction_table(scenario_model, scenario_df, AttributeGrouping())
        b = prediction_table(scenario_model, scenario_df, AttributeGrouping())
        assert a.equals(b)


# ---------------------------------------------------------------------------
# Class: grouping policies
# ---------------------------------------------------------------------------

class TestGroupings:

    def test_attribute_grouping_four_cells(self, scenario_model, scenario_df):
        preds = marginal_predictions(scenario_model, scenario_df, AttributeGrouping())
        assert [p.group for p in preds] == [
            "shape_indicator=0, coating_indicator=0",
            "shape_indicator=0, coating_indicator=1",
            "shape_indicator=1, coating_indicator=0",
            "shape_indicator=1, coating_indicator=1",
        ]
        assert sum(p.n_obs for p in preds) == len(scenario_df)

    def test_group_means_match_row_subsets(self, scenario_model, scenario_df):
        probs = predict_proba(scenario_model, scenario_df)
        preds = marginal_predictions(scenario_model, scenario_df, AttributeGrouping())
        cell = (scenario_df["shape_indicator"] == 1) & (scenario_df["coating_indicator"] == 0)
        expected = probs[cell.to_numpy()].mean()
        assert preds[2].probability == pytest.approx(expected, abs=1e-12)

    @pytest.mark.parametrize(
        "grouping",
        [AttributeGrouping(), AttributeGrouping(keys=("coating_indicator",)), QuantileGrouping()],
    )
    def test_weighted_group_means_recover_overall(self, scenario_model, scenario_df, grouping):
        [overall] = marginal_predictions(scenario_model, scenario_df)
        preds = marginal_predictions(scenario_model, scenario_df, grouping)
        weighted = sum(p.probability * p.n_obs for p in preds) / len(scenario_df)
        assert weighted == pytest.approx(overall.probability, abs=1e-12)

    def test_shape_effect_direction(self, scenario_model, scenario_df):
        """Positive shape coefficient → shape=1 groups sit above shape=0 groups."""
        preds = marginal_predictions(
            scenario_model, scenario_df, AttributeGrouping(keys=("shape_indicator",))
        )
        assert preds[1].probability > preds[0].probability

    def test_attribute_groups_follow_numeric_key_order(self, scenario_model, scenario_df):
        df = scenario_df.assign(batch=np.arange(len(scenario_df)) % 12)
        preds = marginal_predictions(scenario_model, df, AttributeGrouping(keys=("batch",)))
        assert [p.group for p in preds] == [f"batch={k}" for k in range(12)]

    def test_quantile_bins(self, scenario_model, scenario_df):
        preds = marginal_predictions(scenario_model, scenario_df, QuantileGrouping(n_bins=4))
        assert [p.group for p in preds] == ["size Q1", "size Q2", "size Q3", "size Q4"]
        assert all(p.n_obs == 250 for p in preds)

    def test_quantile_bins_keep_numeric_order_past_nine(self, scenario_model, scenario_df):
        preds = marginal_predictions(scenario_model, scenario_df, QuantileGrouping(n_bins=10))
        assert [p.group for p in preds][-2:] == ["size Q9", "size Q10"]

    def test_policy_names(self):
        assert OverallGrouping().name == "overall"
        assert AttributeGrouping().name == "by_shape_indicator_coating_indicator"
        assert QuantileGrouping().name == "size_quantiles"

    def test_prediction_table_columns(self, scenario_model, scenario_df):
        table = prediction_table(scenario_model, scenario_df, AttributeGrouping())
        assert list(table.columns) == PREDICTION_COLUMNS
        assert len(table) == 4

    def test_does_not_mutate_dataset(self, scenario_model, scenario_df):
        before = scenario_df.copy()
        marginal_predictions(scenario_model, scenario_df, QuantileGrouping())
        assert scenario_df.equals(before)


# ---------------------------------------------------------------------------
# Class: invalid groupings
# ---------------------------------------------------------------------------

class TestInvalidGrouping:

    def test_unknown_attribute_key(self, scenario_model, scenario_df):
        with pytest.raises(InvalidGrouping):
            marginal_predictions(scenario_model, scenario_df, AttributeGrouping(keys=("colour",)))

    def test_empty_attribute_keys(self, scenario_model, scenario_df):
        with pytest.raises(InvalidGrouping):
            marginal_predictions(scenario_model, scenario_df, AttributeGrouping(keys=()))

    def test_unknown_quantile_column(self, scenario_model, scenario_df):
        with pytest.raises(InvalidGrouping):
            marginal_predictions(scenario_model, scenario_df, QuantileGrouping(column="weight"))

    @pytest.mark.parametrize("n_bins", [0, -1])
    def test_bad_bin_count(self, scenario_model, scenario_df, n_bins):
        with pytest.raises(InvalidGrouping):
            marginal_predictions(scenario_model, scenario_df, QuantileGrouping(n_bins=n_bins))

    def test_quantiles_of_binary_column(self, scenario_model, scenario_df):
        """Duplicate bin edges cannot form equal-count bins."""
        with pytest.raises(InvalidGrouping):
            marginal_predictions(
                scenario_model, scenario_df, QuantileGrouping(column="shape_indicator", n_bins=4)
            )

    def test_bad_linearization(self, scenario_model, scenario_df):
        with pytest.raises(ValueError):
            marginal_predictions(scenario_model, scenario_df, linearization="bootstrap")


# ---------------------------------------------------------------------------
# Class: delta method
# ---------------------------------------------------------------------------

class TestDeltaMethod:

    def test_average_predictor_gradient(self, scenario_model, scenario_df):
        X, _ = build_design_matrix(scenario_df)
        x_bar = X.mean(axis=0)
        s = float(sigmoid(x_bar @ scenario_model.coefficients))
        g = s * (1 - s) * x_bar
        expected_se = np.sqrt(g @ scenario_model.covariance @ g)

        [overall] = marginal_predictions(scenario_model, scenario_df)
        assert overall.std_error == pytest.approx(expected_se)
        z = z_critical(0.95)
        assert overall.lower == pytest.approx(overall.probability - z * expected_se)
        assert overall.upper == pytest.approx(overall.probability + z * expected_se)

    def test_per_row_gradient(self, scenario_model, scenario_df):
        X, _ = build_design_matrix(scenario_df)
        p = predict_proba(scenario_model, scenario_df)
        g = (p * (1 - p)) @ X / len(p)
        expected_se = np.sqrt(g @ scenario_model.covariance @ g)

        [overall] = marginal_predictions(scenario_model, scenario_df, linearization="per_row")
        assert overall.std_error == pytest.approx(expected_se)

    def test_linearizations_agree_closely(self, scenario_model, scenario_df):
        [a] = marginal_predictions(scenario_model, scenario_df)
        [b] = marginal_predictions(scenario_model, scenario_df, linearization="per_row")
        assert a.probability == b.probability
        assert a.std_error == pytest.approx(b.std_error, rel=0.25)

    def test_interval_clamped_to_unit_interval(self, model_factory, scenario_df):
        """A huge covariance would push Wald bounds past [0, 1]."""
        model = model_factory(covariance=np.eye(4) * 100.0)
        for pred in marginal_predictions(model, scenario_df, AttributeGrouping()):
            assert pred.lower == 0.0
            assert pred.upper == 1.0

    def test_negative_variance_is_undefined(self, model_factory, scenario_df):
        model = model_factory(covariance=-np.eye(4))
        with pytest.raises(UndefinedInterval):
            marginal_predictions(model, scenario_df)


# ---------------------------------------------------------------------------
# Class: reference-profile prediction
# ---------------------------------------------------------------------------

class TestProfilePrediction:

    def test_zero_profile_matches_intercept(self, scenario_model):
        profile = {"size": 0.0, "shape_indicator": 0, "coating_indicator": 0}
        result = profile_prediction(scenario_model, profile)
        baseline = intercept_probability(scenario_model)
        assert result.probability == pytest.approx(baseline.probability)
        assert result.lower == pytest.approx(baseline.lower)
        assert result.upper == pytest.approx(baseline.upper)

    def test_bounds_ordered(self, scenario_model):
        profile = {"size": 1.0, "shape_indicator": 1, "coating_indicator": 1}
        result = profile_prediction(scenario_model, profile)
        assert 0.0 < result.lower <= result.probability <= result.upper < 1.0
        assert result.term == "size=1, shape_indicator=1, coating_indicator=1"

    def test_transformed_predictor(self, scenario_model, scenario_df):
        """Profiles are given on the transformed scale of each predictor."""
        centered = fit_logit(scenario_df, [
            Predictor("size_centered", lambda d: d["size"] - 1.0),
            column("shape_indicator"),
            column("coating_indicator"),
        ])
        result = profile_prediction(
            centered, {"size_centered": 0.0, "shape_indicator": 1, "coating_indicator": 0}
        )
        expected = profile_prediction(
            scenario_model, {"size": 1.0, "shape_indicator": 1, "coating_indicator": 0}
        )
        assert result.term == "size_centered=0, shape_indicator=1, coating_indicator=0"
        assert result.probability == pytest.approx(expected.probability, abs=1e-6)
        assert result.lower == pytest.approx(expected.lower, abs=1e-6)
        assert result.upper == pytest.approx(expected.upper, abs=1e-6)

    def test_missing_predictor(self, scenario_model):
        with pytest.raises(InvalidGrouping):
            profile_prediction(scenario_model, {"size": 1.0})
