"""
Test Suite for Report Module
============================

Tests for the Markdown report.
"""

from shooting_report.aggregation import build_aggregates
from shooting_report.cleaning import clean_incidents, summarize_cleaning
from shooting_report.report import build_report, write_report


def _table_rows(text):
    """Cell values of every Markdown table row in the text."""
    return [
        [cell.strip() for cell in line.strip("|").split("|")]
        for line in text.splitlines()
        if line.startswith("|")
    ]


class TestReport:
    """Tests for build_report and write_report."""

    def _inputs(self, raw):
        cleaned = clean_incidents(raw)
        return summarize_cleaning(raw, cleaned), build_aggregates(cleaned)

    def test_contents(self, raw_incidents):
        """Test that counts, figures and coefficients appear in the report."""
        summary, aggregates = self._inputs(raw_incidents)

        text = build_report(
            summary,
            aggregates,
            ["01_daily_incidents.png", "05_actual_vs_predicted.png"],
            coefficients={"intercept": 12.5, "month": -0.25},
            metrics={'overall': {'rmse': 1.0, 'mae': 0.5, 'r2': 0.8}},
            reference_region="BRONX",
        )

        assert "Records after cleaning: 100" in text
        assert "![Shooting incidents per day](figures/01_daily_incidents.png)" in text
        assert ["month", "-0.2500"] in _table_rows(text)
        assert "reference borough: BRONX" in text
        assert "R²: 0.800" in text

    def test_degenerate_model(self, raw_incidents):
        """Test that a missing fit is stated instead of a coefficient table."""
        summary, aggregates = self._inputs(raw_incidents)

        text = build_report(summary, aggregates, [], coefficients={})
        assert "could not be fitted" in text

    def test_write(self, tmp_path):
        """Test that the report is written to the given path."""
        path = write_report("# Title\n", str(tmp_path / "out" / "report.md"))

        with open(path, encoding="utf-8") as f:
            assert f.read() == "# Title\n"

    def test_borough_table(self, raw_incidents):
        """Test that the borough totals are rendered as a pipe table."""
        summary, aggregates = self._inputs(raw_incidents)

        text = build_report(summary, aggregates, [], coefficients={})
        rows = _table_rows(text)
        regions = aggregates['regions']

        assert rows[0] == ["region", "incidents"]
        assert set(rows[1][0]) <= set(":-")
        body = rows[2:2 + len(regions)]
        assert [row[0] for row in body] == [str(r) for r in regions["region"]]
        assert [int(row[1]) for row in body] == regions["incidents"].tolist()

    def test_undefined_r2(self, raw_incidents):
        """Test that an undefined R² is shown as n/a."""
        summary, aggregates = self._inputs(raw_incidents)

        text = build_report(
            summary, aggregates, [],
            coefficients={"intercept": 1.0},
            metrics={'overall': {'rmse': 0.0, 'mae': 0.0, 'r2': None}},
        )
        assert "R²: n/a" in text
