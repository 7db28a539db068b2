"""
Data Cleaning Module
====================

Turns the raw text table into typed incident records.

Every function returns a new DataFrame and leaves its input untouched.

Functions:
    - parse_incidents: Drop irrelevant columns and parse dates, times and categories
    - drop_incomplete: Remove rows with any missing value
    - clean_incidents: parse_incidents followed by drop_incomplete
    - summarize_cleaning: Diagnostic counts for human inspection
"""

import logging
from enum import Enum
from typing import Dict, Any, List, Optional

import pandas as pd

logger = logging.getLogger(__name__)


class Borough(str, Enum):
    """The five NYC boroughs used as incident regions."""

    BRONX = "BRONX"
    BROOKLYN = "BROOKLYN"
    MANHATTAN = "MANHATTAN"
    QUEENS = "QUEENS"
    STATEN_ISLAND = "STATEN ISLAND"

    @classmethod
    def values(cls) -> List[str]:
        return [member.value for member in cls]


class AgeGroup(str, Enum):
    """Age brackets recorded for perpetrators and victims."""

    UNDER_18 = "<18"
    AGE_18_24 = "18-24"
    AGE_25_44 = "25-44"
    AGE_45_64 = "45-64"
    AGE_65_PLUS = "65+"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def values(cls) -> List[str]:
        return [member.value for member in cls]


class UnknownCategoryError(ValueError):
    """Raised in strict mode when a region outside Borough is found."""


# Source column -> cleaned column
COLUMN_RENAMES = {
    "OCCUR_DATE": "occurred_date",
    "OCCUR_TIME": "occurred_time",
    "BORO": "region",
    "PRECINCT": "precinct",
    "PERP_AGE_GROUP": "perpetrator_age_group",
    "VIC_AGE_GROUP": "victim_age_group",
}

DROP_COLUMNS = [
    "INCIDENT_KEY",
    "LOC_OF_OCCUR_DESC",
    "JURISDICTION_CODE",
    "LOC_CLASSFCTN_DESC",
    "LOCATION_DESC",
    "STATISTICAL_MURDER_FLAG",
    "PERP_SEX",
    "PERP_RACE",
    "VIC_SEX",
    "VIC_RACE",
    "X_COORD_CD",
    "Y_COORD_CD",
    "Latitude",
    "Longitude",
    "Lon_Lat",
]

DATE_FORMAT = "%m/%d/%Y"
TIME_FORMAT = "%H:%M:%S"

REGION_DTYPE = pd.CategoricalDtype(Borough.values())
AGE_GROUP_DTYPE = pd.CategoricalDtype(AgeGroup.values())


def normalize_text(series: pd.Series) -> pd.Series:
    """Trim and upper-case text values; blanks become missing."""
    normalized = series.astype("string").str.strip().str.upper()
    return normalized.replace("", pd.NA)


def to_category(series: pd.Series, dtype: pd.CategoricalDtype) -> pd.Series:
    """Map text onto a closed category set. Values outside it become NaN."""
    return normalize_text(series).astype(object).astype(dtype)


def find_unknown_regions(raw: pd.DataFrame, column: str = "BORO") -> Dict[str, int]:
    """
    Count non-missing region values that are not a known borough.

    Args:
        raw: Raw DataFrame
        column: Source region column

    Returns:
        Mapping of unknown value -> number of rows
    """
    regions = normalize_text(raw[column]).dropna()
    unknown = regions[~regions.isin(Borough.values())]
    return {str(value): int(count) for value, count in unknown.value_counts().items()}


def _parse_precinct(series: pd.Series) -> pd.Series:
    precinct = pd.to_numeric(series, errors="coerce")
    return precinct.where(precinct % 1 == 0).astype("Int64")


def parse_incidents(
    raw: pd.DataFrame,
    drop_columns: Optional[List[str]] = None,
    strict: bool = False
) -> pd.DataFrame:
    """
    Drop low-relevance columns and convert the rest to typed values.

    Values that fail to parse become missing; nothing is filtered here.

    Args:
        raw: Raw DataFrame as read from the source CSV
        drop_columns: Columns removed unconditionally (default: DROP_COLUMNS)
        strict: Raise UnknownCategoryError on region values outside Borough

    Returns:
        New DataFrame with renamed, typed columns
    """
    if drop_columns is None:
        drop_columns = DROP_COLUMNS

    df = raw.drop(columns=drop_columns, errors="ignore")

    unknown = find_unknown_regions(df)
    if unknown:
        if strict:
            raise UnknownCategoryError(f"Unknown region values: {unknown}")
        logger.warning(f"Discarding rows with unknown region values: {unknown}")

    return _convert_columns(df)


def _convert_columns(df: pd.DataFrame) -> pd.DataFrame:
    parsed = pd.DataFrame({
        "occurred_date": pd.to_datetime(df["OCCUR_DATE"], format=DATE_FORMAT, errors="coerce"),
        "occurred_time": pd.to_datetime(df["OCCUR_TIME"], format=TIME_FORMAT, errors="coerce").dt.time,
        "region": to_category(df["BORO"], REGION_DTYPE),
        "precinct": _parse_precinct(df["PRECINCT"]),
        "perpetrator_age_group": to_category(df["PERP_AGE_GROUP"], AGE_GROUP_DTYPE),
        "victim_age_group": to_category(df["VIC_AGE_GROUP"], AGE_GROUP_DTYPE),
    }, index=df.index)

    # Columns outside the known schema are carried through untouched
    extra = df.drop(columns=list(COLUMN_RENAMES))
    return pd.concat([parsed, extra], axis=1)


def drop_incomplete(parsed: pd.DataFrame) -> pd.DataFrame:
    """Remove every row that has a missing value in any column."""
    return parsed.dropna().reset_index(drop=True)


def clean_incidents(
    raw: pd.DataFrame,
    drop_columns: Optional[List[str]] = None,
    strict: bool = False
) -> pd.DataFrame:
    """
    Produce the cleaned incident table.

    Args:
        raw: Raw DataFrame as read from the source CSV
        drop_columns: Columns removed unconditionally (default: DROP_COLUMNS)
        strict: Raise UnknownCategoryError on region values outside Borough

    Returns:
        DataFrame with no missing values and consistent column types
    """
    cleaned = drop_incomplete(parse_incidents(raw, drop_columns, strict))

    logger.info(
        f"Cleaning kept {len(cleaned)} of {len(raw)} rows "
        f"({len(raw) - len(cleaned)} dropped)"
    )
    return cleaned


def summarize_cleaning(
    raw: pd.DataFrame,
    cleaned: pd.DataFrame,
    drop_columns: Optional[List[str]] = None
) -> Dict[str, Any]:
    """
    Build a diagnostic summary of what cleaning removed.

    Args:
        raw: Raw DataFrame
        cleaned: Output of clean_incidents
        drop_columns: Columns that were dropped (default: DROP_COLUMNS)

    Returns:
        Dictionary with row counts, missing values per column and date range
    """
    if drop_columns is None:
        drop_columns = DROP_COLUMNS

    parsed = _convert_columns(raw.drop(columns=drop_columns, errors="ignore"))
    missing = parsed.isna().sum()

    summary = {
        "rows_before": int(len(raw)),
        "rows_after": int(len(cleaned)),
        "rows_dropped": int(len(raw) - len(cleaned)),
        "missing_by_column": {col: int(n) for col, n in missing[missing > 0].items()},
        "unknown_regions": find_unknown_regions(raw),
        "date_min": None,
        "date_max": None,
    }

    if len(cleaned):
        summary["date_min"] = cleaned["occurred_date"].min().strftime("%Y-%m-%d")
        summary["date_max"] = cleaned["occurred_date"].max().strftime("%Y-%m-%d")

    return summary


def print_cleaning_summary(summary: Dict[str, Any]) -> None:
    """
    Print the cleaning summary to console.

    Args:
        summary: Dictionary from summarize_cleaning
    """
    print("\n" + "=" * 50)
    print("CLEANING SUMMARY")
    print("=" * 50)
    print(f"Rows before cleaning: {summary['rows_before']}")
    print(f"Rows after cleaning: {summary['rows_after']}")
    print(f"Rows dropped: {summary['rows_dropped']}")

    if summary["missing_by_column"]:
        print("\nMissing or unparsable values:")
        for col, count in summary["missing_by_column"].items():
            print(f"  {col}: {count}")

    if summary["unknown_regions"]:
        print(f"\nUnknown regions: {summary['unknown_regions']}")

    if summary["date_min"]:
        print(f"\nDate range: {summary['date_min']} to {summary['date_max']}")
    print("=" * 50 + "\n")
