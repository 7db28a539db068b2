"""
Data Loader Module
==================

Handles dataset download, CSV ingestion, and basic data quality checks.

Functions:
    - load_config: Load YAML configuration file
    - fetch_data: Download the incident CSV over HTTP
    - load_data: Load the incident CSV from disk
    - validate_schema: Fail fast when expected columns are missing
    - validate_data: Check data quality constraints
    - print_data_summary: Console summary of the raw table
"""

import io
import logging
from pathlib import Path
from typing import Dict, Any, List, Optional, Tuple

import pandas as pd
import requests
import yaml

from .cleaning import COLUMN_RENAMES, Borough, normalize_text

logger = logging.getLogger(__name__)

DEFAULT_URL = (
    "https://data.cityofnewyork.us/api/views/833y-fsy8/rows.csv?accessType=DOWNLOAD"
)
DEFAULT_TIMEOUT = 60

# Source columns the analysis depends on
REQUIRED_COLUMNS = list(COLUMN_RENAMES)

# The NYC open data export writes "(null)" for unrecorded categorical values
NA_VALUES = ["", "(null)", "(NULL)"]


def load_config(config_path: str = "config/config.yaml") -> Dict[str, Any]:
    """
    Load configuration from YAML file.

    Args:
        config_path: Path to the configuration file

    Returns:
        Dictionary containing configuration parameters

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If config file is malformed
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, 'r') as f:
        config = yaml.safe_load(f)

    logger.info(f"Loaded configuration from {config_path}")
    return config or {}


def _read_incident_csv(source) -> pd.DataFrame:
    # Everything is read as text; typing happens in the cleaning stage
    return pd.read_csv(source, dtype=str, na_values=NA_VALUES, keep_default_na=True)


def fetch_data(
    url: str = DEFAULT_URL,
    timeout: float = DEFAULT_TIMEOUT,
    required_columns: Optional[List[str]] = None
) -> pd.DataFrame:
    """
    Download the incident dataset with a single HTTP GET.

    There is no retry: any network or HTTP error aborts the run.

    Args:
        url: Location of the CSV export
        timeout: Seconds to wait for the server
        required_columns: Columns the table must contain (default: REQUIRED_COLUMNS)

    Returns:
        DataFrame with every column as text

    Raises:
        requests.RequestException: If the download fails
        ValueError: If the downloaded table is missing expected columns
    """
    logger.info(f"Fetching dataset from {url}")

    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as e:
        logger.error(f"Dataset download failed: {e}")
        raise

    df = _read_incident_csv(io.BytesIO(response.content))
    logger.info(f"Downloaded {df.shape[0]} rows × {df.shape[1]} columns")

    validate_schema(df, required_columns)
    return df


def load_data(
    file_path: str,
    required_columns: Optional[List[str]] = None
) -> pd.DataFrame:
    """
    Load the incident CSV from a local file.

    Args:
        file_path: Path to the CSV file
        required_columns: Columns the table must contain (default: REQUIRED_COLUMNS)

    Returns:
        DataFrame with every column as text

    Raises:
        FileNotFoundError: If data file doesn't exist
        ValueError: If the table is missing expected columns
    """
    file_path = Path(file_path)

    if not file_path.exists():
        raise FileNotFoundError(f"Data file not found: {file_path}")

    df = _read_incident_csv(file_path)
    logger.info(f"Loaded data from {file_path}: {df.shape[0]} rows × {df.shape[1]} columns")

    validate_schema(df, required_columns)
    return df


def validate_schema(df: pd.DataFrame, required_columns: Optional[List[str]] = None) -> None:
    """
    Raise ValueError if any required column is absent.

    Args:
        df: Raw DataFrame
        required_columns: Columns that must be present
    """
    if required_columns is None:
        required_columns = REQUIRED_COLUMNS

    missing = [col for col in required_columns if col not in df.columns]
    if missing:
        raise ValueError(
            f"Dataset is missing required columns: {missing}. "
            f"Columns found: {list(df.columns)}"
        )


def validate_data(df: pd.DataFrame, strict: bool = True) -> Tuple[bool, Dict[str, Any]]:
    """
    Validate raw data quality before cleaning.

    Checks:
        - No missing values in the analysed columns
        - Every borough value belongs to the known set

    Args:
        df: Raw DataFrame to validate
        strict: If True, raise errors on validation failure

    Returns:
        Tuple of (is_valid, validation_report)
    """
    columns = [col for col in REQUIRED_COLUMNS if col in df.columns]
    report = {
        "total_rows": len(df),
        "total_columns": len(df.columns),
        "column_names": list(df.columns),
        "issues": []
    }

    # Check 1: Missing values
    missing_counts = df[columns].isnull().sum()
    total_missing = int(missing_counts.sum())
    if total_missing > 0:
        issue = f"Missing values in analysed columns: {total_missing}"
        report["issues"].append(issue)
        report["missing_by_column"] = {
            col: int(count) for col, count in missing_counts[missing_counts > 0].items()
        }
        logger.warning(issue)

    # Check 2: Borough values outside the known set
    if "BORO" in df.columns:
        boroughs = normalize_text(df["BORO"]).dropna()
        unknown = sorted(set(boroughs) - set(Borough.values()))
        if unknown:
            issue = f"Unknown borough values: {unknown}"
            report["issues"].append(issue)
            logger.warning(issue)

    is_valid = len(report["issues"]) == 0
    report["is_valid"] = is_valid

    if strict and not is_valid:
        raise ValueError(f"Data validation failed: {report['issues']}")

    return is_valid, report


def print_data_summary(df: pd.DataFrame) -> None:
    """
    Print a formatted summary of the raw dataset to console.

    Args:
        df: DataFrame to summarize
    """
    print("\n" + "=" * 60)
    print("DATASET SUMMARY")
    print("=" * 60)
    print(f"Shape: {df.shape[0]} rows × {df.shape[1]} columns")
    print(f"Memory Usage: {df.memory_usage(deep=True).sum() / 1024:.2f} KB")
    print("\nColumn Information:")
    print("-" * 40)

    for col in df.columns:
        non_null = df[col].count()
        null_pct = (1 - non_null / len(df)) * 100 if len(df) else 0.0
        print(f"  {col}: {non_null} non-null ({null_pct:.1f}% missing)")

    print("=" * 60 + "\n")
