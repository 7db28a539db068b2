"""
Test Suite for Visualization Module
===================================

Tests that every chart renders to disk.
"""

import matplotlib
matplotlib.use("Agg")

import pandas as pd
import pytest

from shooting_report.aggregation import build_aggregates
from shooting_report.cleaning import clean_incidents
from shooting_report.model import fit_monthly_model, with_predictions
from shooting_report.visualization import (
    generate_figures, plot_actual_vs_predicted, plot_region_totals,
)


class TestGenerateFigures:
    """Tests for generate_figures."""

    @pytest.fixture
    def aggregates(self, make_raw):
        """Aggregates of 300 cleaned incidents."""
        return build_aggregates(clean_incidents(make_raw(300, seed=5)))

    def test_descriptive_figures(self, aggregates, tmp_path):
        """Test that the four descriptive charts are saved."""
        figures = generate_figures(aggregates, output_dir=str(tmp_path))

        assert len(figures) == 4
        for name in figures:
            assert (tmp_path / name).exists()

    def test_with_predictions(self, aggregates, tmp_path):
        """Test that the actual vs predicted chart is added when predictions exist."""
        monthly = aggregates['monthly_by_region']
        predicted = with_predictions(monthly, fit_monthly_model(monthly))

        figures = generate_figures(aggregates, output_dir=str(tmp_path), predicted_monthly=predicted)

        assert "05_actual_vs_predicted.png" in figures
        assert (tmp_path / "05_actual_vs_predicted.png").exists()

    def test_region_bar_order(self, aggregates):
        """Test that bars follow the ascending order of the totals table."""
        fig = plot_region_totals(aggregates['regions'])
        widths = [patch.get_width() for patch in fig.axes[0].patches]

        assert widths == sorted(widths)

    def test_empty_predictions_no_legend(self, tmp_path):
        """Test that an empty prediction table renders without a legend."""
        empty = pd.DataFrame({
            "month": pd.Series([], dtype="datetime64[ns]"),
            "region": pd.Series([], dtype=str),
            "incidents": pd.Series([], dtype="int64"),
            "predicted": pd.Series([], dtype=float),
        })
        path = tmp_path / "05_actual_vs_predicted.png"

        fig = plot_actual_vs_predicted(empty, save_path=str(path))

        assert fig.axes[0].get_legend() is None
        assert path.exists()
