"""
Aggregation Module
==================

Groups cleaned incident records into time-bucketed counts.

Groups with no incidents produce no row: a missing (month, region) key
means "no data", never a zero count.

Functions:
    - daily_counts: Incidents per calendar date
    - region_totals: Incidents per borough, ascending
    - monthly_region_counts: Incidents per (month, borough), the model input
    - monthly_average_by_calendar_month: Mean city-wide count per calendar month
    - hourly_counts: Incidents per hour of day
    - build_aggregates: All of the above in one dictionary
"""

import calendar
import logging
from typing import Dict

import pandas as pd

logger = logging.getLogger(__name__)


def _truncate_to_month(dates: pd.Series) -> pd.Series:
    return dates.dt.to_period("M").dt.to_timestamp()


def daily_counts(cleaned: pd.DataFrame) -> pd.DataFrame:
    """Incidents per exact date, in chronological order."""
    counts = cleaned.groupby("occurred_date").size()
    return counts.rename("incidents").rename_axis("date").reset_index()


def region_totals(cleaned: pd.DataFrame) -> pd.DataFrame:
    """Incidents per region, ascending by count."""
    counts = cleaned.groupby("region", observed=True).size()
    counts = counts.sort_values(kind="stable")
    return counts.rename("incidents").reset_index()


def monthly_region_counts(cleaned: pd.DataFrame) -> pd.DataFrame:
    """
    Count incidents per (month, region).

    Month is the occurrence date truncated to the first day of its month.
    Only combinations with at least one incident appear.

    Args:
        cleaned: Output of clean_incidents

    Returns:
        DataFrame with columns month, region, incidents ordered by month then region
    """
    month = _truncate_to_month(cleaned["occurred_date"])
    counts = (
        cleaned.assign(month=month)
        .groupby(["month", "region"], observed=True)
        .size()
    )
    return counts.rename("incidents").reset_index()


def monthly_average_by_calendar_month(cleaned: pd.DataFrame) -> pd.DataFrame:
    """
    Average city-wide monthly count for each calendar month.

    The city-wide total of every observed month is averaged across the
    years in which that calendar month has incidents.

    Args:
        cleaned: Output of clean_incidents

    Returns:
        DataFrame with columns calendar_month, month_name, years, average_incidents
    """
    totals = cleaned.groupby(_truncate_to_month(cleaned["occurred_date"])).size()
    by_calendar_month = totals.groupby(totals.index.month)

    result = pd.DataFrame({
        "years": by_calendar_month.size(),
        "average_incidents": by_calendar_month.mean().astype(float),
    })
    result.index.name = "calendar_month"
    result = result.reset_index()
    result.insert(1, "month_name", [calendar.month_abbr[m] for m in result["calendar_month"]])
    return result


def hourly_counts(cleaned: pd.DataFrame) -> pd.DataFrame:
    """Incidents per hour of day (0-23)."""
    hours = cleaned["occurred_time"].map(lambda t: t.hour).astype(int)
    counts = cleaned.groupby(hours.rename("hour")).size()
    return counts.rename("incidents").reset_index()


def build_aggregates(cleaned: pd.DataFrame) -> Dict[str, pd.DataFrame]:
    """
    Compute every aggregate view consumed by the charts and the model.

    Args:
        cleaned: Output of clean_incidents

    Returns:
        Dictionary containing:
            - daily: daily_counts
            - regions: region_totals
            - monthly_by_region: monthly_region_counts
            - calendar_month_average: monthly_average_by_calendar_month
            - hourly: hourly_counts
    """
    logger.info("=" * 60)
    logger.info("AGGREGATING INCIDENT COUNTS")
    logger.info("=" * 60)

    aggregates = {
        'daily': daily_counts(cleaned),
        'regions': region_totals(cleaned),
        'monthly_by_region': monthly_region_counts(cleaned),
        'calendar_month_average': monthly_average_by_calendar_month(cleaned),
        'hourly': hourly_counts(cleaned),
    }

    logger.info(f"  Days with incidents: {len(aggregates['daily'])}")
    logger.info(f"  Regions: {len(aggregates['regions'])}")
    logger.info(f"  (month, region) rows: {len(aggregates['monthly_by_region'])}")

    return aggregates


def print_aggregation_summary(aggregates: Dict[str, pd.DataFrame]) -> None:
    """
    Print regional totals and the monthly table size.

    Args:
        aggregates: Dictionary from build_aggregates
    """
    print("\n" + "=" * 50)
    print("AGGREGATION SUMMARY")
    print("=" * 50)
    print(f"Days with incidents: {len(aggregates['daily'])}")
    print(f"(month, region) rows: {len(aggregates['monthly_by_region'])}")
    print("\nIncidents by region:")
    for _, row in aggregates['regions'].iterrows():
        print(f"  {row['region']:<15} {row['incidents']:>8}")
    print("=" * 50 + "\n")
