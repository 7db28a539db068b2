"""
Test Suite for Evaluation Module
================================

Tests for fit metrics and the evaluation outputs.
"""

import json

import numpy as np
import pandas as pd
import pytest

from shooting_report.evaluation import calculate_fit_metrics, evaluate_fit


@pytest.fixture
def predicted_monthly():
    """Two boroughs over 12 months with known predictions."""
    months = pd.date_range("2021-01-01", periods=12, freq="MS")
    incidents = np.arange(12) * 2 + 10
    return pd.DataFrame({
        "month": list(months) * 2,
        "region": ["BRONX"] * 12 + ["QUEENS"] * 12,
        "incidents": np.concatenate([incidents, incidents + 5]),
        "predicted": np.concatenate([incidents, incidents + 5]).astype(float),
    })


class TestCalculateFitMetrics:
    """Tests for calculate_fit_metrics."""

    def test_perfect_fit(self, predicted_monthly):
        """Test that exact predictions give zero error and R² of one."""
        metrics = calculate_fit_metrics(predicted_monthly)

        assert metrics['overall']['rmse'] == pytest.approx(0.0)
        assert metrics['overall']['mae'] == pytest.approx(0.0)
        assert metrics['overall']['r2'] == pytest.approx(1.0)
        assert metrics['overall']['n_samples'] == 24

    def test_per_region(self, predicted_monthly):
        """Test that metrics are reported for each region."""
        predicted_monthly = predicted_monthly.copy()
        predicted_monthly.loc[predicted_monthly["region"] == "QUEENS", "predicted"] += 2.0

        metrics = calculate_fit_metrics(predicted_monthly)

        assert set(metrics['per_region']) == {"BRONX", "QUEENS"}
        assert metrics['per_region']['BRONX']['rmse'] == pytest.approx(0.0)
        assert metrics['per_region']['QUEENS']['rmse'] == pytest.approx(2.0)
        assert metrics['per_region']['QUEENS']['mean_error'] == pytest.approx(-2.0)

    def test_missing_predictions_ignored(self, predicted_monthly):
        """Test that rows without a prediction are left out."""
        predicted_monthly = predicted_monthly.copy()
        predicted_monthly.loc[0:3, "predicted"] = np.nan

        metrics = calculate_fit_metrics(predicted_monthly)
        assert metrics['overall']['n_samples'] == 20

    def test_single_point_r2_undefined(self, predicted_monthly):
        """Test that R² is None for a region with a single month."""
        metrics = calculate_fit_metrics(predicted_monthly.iloc[:13])

        assert metrics['per_region']['QUEENS']['r2'] is None
        assert metrics['per_region']['QUEENS']['rmse'] == pytest.approx(0.0)

    def test_no_predictions(self, predicted_monthly):
        """Test that a degenerate fit yields no metrics."""
        predicted_monthly = predicted_monthly.assign(predicted=np.nan)
        assert calculate_fit_metrics(predicted_monthly) is None


class TestEvaluateFit:
    """Tests for evaluate_fit."""

    def test_outputs(self, predicted_monthly, tmp_path):
        """Test that metrics JSON and residual chart are written."""
        result = evaluate_fit(predicted_monthly, output_dir=str(tmp_path))

        with open(result['metrics_file']) as f:
            saved = json.load(f)

        assert saved['overall']['n_samples'] == 24
        assert result['figures'] == ["06_residuals.png"]
        assert (tmp_path / "figures" / "06_residuals.png").exists()

    def test_degenerate_outputs(self, predicted_monthly, tmp_path):
        """Test that a degenerate fit writes null metrics and no chart."""
        result = evaluate_fit(predicted_monthly.assign(predicted=np.nan), output_dir=str(tmp_path))

        assert result['metrics'] is None
        assert result['figures'] == []

    def test_single_point_region_is_valid_json(self, predicted_monthly, tmp_path):
        """Test that a region with one month writes a null R² and strict JSON."""
        single = predicted_monthly.iloc[:13]

        result = evaluate_fit(single, output_dir=str(tmp_path))

        def reject_constant(token):
            raise ValueError(f"Non-standard JSON constant: {token}")

        with open(result['metrics_file']) as f:
            saved = json.load(f, parse_constant=reject_constant)

        assert saved['per_region']['QUEENS']['n_samples'] == 1
        assert saved['per_region']['QUEENS']['r2'] is None
        assert saved['per_region']['BRONX']['r2'] == pytest.approx(1.0)
