"""
Visualization Module
====================

Descriptive charts of the aggregated incident counts.

Functions:
    - plot_daily_counts: Incidents over time
    - plot_region_totals: Incidents per borough
    - plot_calendar_month_average: Average incidents per calendar month
    - plot_hourly_counts: Incidents per hour of day
    - plot_actual_vs_predicted: Monthly counts against model predictions
    - generate_figures: Render every chart to a directory
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import matplotlib.pyplot as plt
import pandas as pd
import seaborn as sns

logger = logging.getLogger(__name__)

# Set style for all plots
plt.style.use('seaborn-v0_8-whitegrid')
sns.set_palette("husl")


def _finish(fig: plt.Figure, save_path: Optional[str], label: str) -> plt.Figure:
    plt.tight_layout()
    if save_path:
        fig.savefig(save_path, dpi=150, bbox_inches='tight')
        logger.info(f"{label} saved to {save_path}")
    return fig


def plot_daily_counts(
    daily: pd.DataFrame,
    rolling_window: int = 30,
    figsize: Tuple[int, int] = (14, 5),
    save_path: Optional[str] = None
) -> plt.Figure:
    """
    Line chart of daily incidents with a rolling mean.

    Args:
        daily: Output of daily_counts
        rolling_window: Days in the rolling mean
        figsize: Figure size (width, height)
        save_path: Path to save the figure (optional)

    Returns:
        Matplotlib Figure object
    """
    fig, ax = plt.subplots(figsize=figsize)
    ax.plot(daily["date"], daily["incidents"], linewidth=0.6, alpha=0.6, label='Daily')

    rolling = daily.set_index("date")["incidents"].rolling(f"{rolling_window}D").mean()
    ax.plot(rolling.index, rolling.values, color='red', linewidth=1.5,
            label=f'{rolling_window}-day mean')

    ax.set_title('Shooting Incidents Over Time', fontsize=14, fontweight='bold')
    ax.set_xlabel('Date')
    ax.set_ylabel('Incidents')
    ax.legend(loc='upper right', fontsize=8)

    return _finish(fig, save_path, "Daily incidents plot")


def plot_region_totals(
    regions: pd.DataFrame,
    figsize: Tuple[int, int] = (10, 5),
    save_path: Optional[str] = None
) -> plt.Figure:
    """
    Horizontal bar chart of incidents per borough, in the table's order.

    Args:
        regions: Output of region_totals
        figsize: Figure size (width, height)
        save_path: Path to save the figure (optional)

    Returns:
        Matplotlib Figure object
    """
    fig, ax = plt.subplots(figsize=figsize)
    labels = regions["region"].astype(str)
    ax.barh(labels, regions["incidents"], color='steelblue', alpha=0.8)

    for y, value in enumerate(regions["incidents"]):
        ax.text(value, y, f" {value}", va='center', fontsize=9)

    ax.set_title('Incidents by Borough', fontsize=14, fontweight='bold')
    ax.set_xlabel('Incidents')

    return _finish(fig, save_path, "Borough totals plot")


def plot_calendar_month_average(
    calendar_average: pd.DataFrame,
    figsize: Tuple[int, int] = (10, 5),
    save_path: Optional[str] = None
) -> plt.Figure:
    """
    Bar chart of the average city-wide incidents for each calendar month.

    Args:
        calendar_average: Output of monthly_average_by_calendar_month
        figsize: Figure size (width, height)
        save_path: Path to save the figure (optional)

    Returns:
        Matplotlib Figure object
    """
    fig, ax = plt.subplots(figsize=figsize)
    ax.bar(calendar_average["month_name"], calendar_average["average_incidents"],
           color='coral', alpha=0.8)

    overall = calendar_average["average_incidents"].mean()
    ax.axhline(overall, color='red', linestyle='--', label=f'Mean: {overall:.1f}')

    ax.set_title('Average Monthly Incidents by Calendar Month', fontsize=14, fontweight='bold')
    ax.set_xlabel('Month')
    ax.set_ylabel('Average incidents')
    ax.legend(fontsize=8)

    return _finish(fig, save_path, "Calendar month plot")


def plot_hourly_counts(
    hourly: pd.DataFrame,
    figsize: Tuple[int, int] = (10, 5),
    save_path: Optional[str] = None
) -> plt.Figure:
    """
    Bar chart of incidents per hour of day.

    Args:
        hourly: Output of hourly_counts
        figsize: Figure size (width, height)
        save_path: Path to save the figure (optional)

    Returns:
        Matplotlib Figure object
    """
    fig, ax = plt.subplots(figsize=figsize)
    ax.bar(hourly["hour"], hourly["incidents"], color='slateblue', alpha=0.8)
    ax.set_xticks(range(0, 24, 2))
    ax.set_title('Incidents by Hour of Day', fontsize=14, fontweight='bold')
    ax.set_xlabel('Hour')
    ax.set_ylabel('Incidents')

    return _finish(fig, save_path, "Hourly incidents plot")


def plot_actual_vs_predicted(
    predicted_monthly: pd.DataFrame,
    figsize: Tuple[int, int] = (14, 6),
    save_path: Optional[str] = None
) -> plt.Figure:
    """
    Monthly incidents per borough, observed (solid) and fitted (dashed).

    Args:
        predicted_monthly: Output of with_predictions
        figsize: Figure size (width, height)
        save_path: Path to save the figure (optional)

    Returns:
        Matplotlib Figure object
    """
    fig, ax = plt.subplots(figsize=figsize)
    groups = list(predicted_monthly.groupby("region", observed=True))
    colors = sns.color_palette("husl", max(len(groups), 1))

    for color, (region, group) in zip(colors, groups):
        ax.plot(group["month"], group["incidents"], color=color, linewidth=1.2,
                alpha=0.8, label=f'{region}')
        ax.plot(group["month"], group["predicted"], color=color, linestyle='--',
                linewidth=1.5)

    ax.set_title('Monthly Incidents: Actual (solid) vs Predicted (dashed)',
                 fontsize=14, fontweight='bold')
    ax.set_xlabel('Month')
    ax.set_ylabel('Incidents')
    if groups:
        ax.legend(loc='upper right', fontsize=8)

    return _finish(fig, save_path, "Actual vs predicted plot")


def generate_figures(
    aggregates: Dict[str, pd.DataFrame],
    output_dir: str = "reports/figures/",
    predicted_monthly: Optional[pd.DataFrame] = None,
    show_plots: bool = False
) -> List[str]:
    """
    Render every chart for the report.

    Args:
        aggregates: Dictionary from build_aggregates
        output_dir: Directory to save figures
        predicted_monthly: Output of with_predictions (optional)
        show_plots: Whether to display plots interactively

    Returns:
        Names of the saved figure files
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    figures = []

    logger.info("Generating daily incidents chart...")
    plot_daily_counts(aggregates['daily'], save_path=str(output_dir / "01_daily_incidents.png"))
    figures.append("01_daily_incidents.png")

    logger.info("Generating borough totals chart...")
    plot_region_totals(aggregates['regions'], save_path=str(output_dir / "02_borough_totals.png"))
    figures.append("02_borough_totals.png")

    logger.info("Generating calendar month chart...")
    plot_calendar_month_average(
        aggregates['calendar_month_average'],
        save_path=str(output_dir / "03_calendar_month_average.png")
    )
    figures.append("03_calendar_month_average.png")

    logger.info("Generating hourly chart...")
    plot_hourly_counts(aggregates['hourly'], save_path=str(output_dir / "04_hourly_incidents.png"))
    figures.append("04_hourly_incidents.png")

    if predicted_monthly is not None:
        logger.info("Generating actual vs predicted chart...")
        plot_actual_vs_predicted(
            predicted_monthly,
            save_path=str(output_dir / "05_actual_vs_predicted.png")
        )
        figures.append("05_actual_vs_predicted.png")

    if show_plots:
        plt.show()
    else:
        plt.close('all')

    return figures
