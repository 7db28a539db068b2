"""
Report Module
=============

Writes the Markdown report that ties the charts and the model together.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, Any, List, Optional

import pandas as pd

from shooting_report.evaluation import format_r2

logger = logging.getLogger(__name__)

FIGURE_CAPTIONS = {
    "01_daily_incidents.png": "Shooting incidents per day",
    "02_borough_totals.png": "Total incidents by borough",
    "03_calendar_month_average.png": "Average incidents per calendar month",
    "04_hourly_incidents.png": "Incidents by hour of day",
    "05_actual_vs_predicted.png": "Monthly incidents per borough, actual vs predicted",
    "06_residuals.png": "Distribution of model residuals",
}


def build_report(
    cleaning_summary: Dict[str, Any],
    aggregates: Dict[str, pd.DataFrame],
    figures: List[str],
    figures_dir: str = "figures",
    coefficients: Optional[Dict[str, float]] = None,
    metrics: Optional[Dict[str, Any]] = None,
    reference_region: Optional[str] = None
) -> str:
    """
    Render the report as Markdown text.

    Args:
        cleaning_summary: Dictionary from summarize_cleaning
        aggregates: Dictionary from build_aggregates
        figures: Figure file names to embed, in order
        figures_dir: Figure directory relative to the report
        coefficients: Model coefficients (optional)
        metrics: Fit metrics from calculate_fit_metrics (optional)
        reference_region: Region absorbed into the intercept

    Returns:
        Markdown document
    """
    lines = [
        "# NYPD Shooting Incidents",
        "",
        f"_Generated {datetime.now().strftime('%Y-%m-%d %H:%M')}_",
        "",
        "## Data",
        "",
        f"- Records downloaded: {cleaning_summary['rows_before']}",
        f"- Records after cleaning: {cleaning_summary['rows_after']}",
        f"- Records dropped (missing or unparsable values): {cleaning_summary['rows_dropped']}",
    ]
    if cleaning_summary.get("date_min"):
        lines.append(
            f"- Period covered: {cleaning_summary['date_min']} to {cleaning_summary['date_max']}"
        )

    lines += ["", "## Incidents by borough", ""]
    lines.append(aggregates['regions'].to_markdown(index=False))

    lines += ["", "## Charts", ""]
    for name in figures:
        caption = FIGURE_CAPTIONS.get(name, name)
        lines += [f"![{caption}]({figures_dir}/{name})", ""]

    lines += ["## Linear model", ""]
    if coefficients:
        lines += [
            "Monthly incidents per borough regressed on the month and the borough "
            f"(reference borough: {reference_region}).",
            "",
        ]
        coef_df = pd.DataFrame(
            list(coefficients.items()),
            columns=["term", "estimate"]
        )
        lines.append(coef_df.to_markdown(index=False, floatfmt=".4f"))
    else:
        lines.append("The model could not be fitted: too few monthly observations.")

    if metrics:
        overall = metrics['overall']
        lines += [
            "",
            f"- RMSE: {overall['rmse']:.2f}",
            f"- MAE: {overall['mae']:.2f}",
            f"- R²: {format_r2(overall['r2'], digits=3)}",
        ]

    lines.append("")
    return "\n".join(lines)


def write_report(text: str, output_path: str = "reports/report.md") -> str:
    """
    Write the rendered report to disk.

    Args:
        text: Markdown document from build_report
        output_path: Destination file

    Returns:
        Path to the written file
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, 'w', encoding='utf-8') as f:
        f.write(text)

    logger.info(f"Report written to {output_path}")
    return str(output_path)
