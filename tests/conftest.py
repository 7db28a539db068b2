"""
Shared fixtures: synthetic raw incident tables in the source CSV layout.
"""

import sys
from pathlib import Path

import numpy as np
import pandas as pd
import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

BOROUGHS = ["BRONX", "BROOKLYN", "MANHATTAN", "QUEENS", "STATEN ISLAND"]
AGE_GROUPS = ["<18", "18-24", "25-44", "45-64", "65+", "UNKNOWN"]


def make_raw_incidents(n_rows: int = 100, seed: int = 42) -> pd.DataFrame:
    """Raw table with every value valid, all columns as text."""
    rng = np.random.default_rng(seed)
    dates = pd.Timestamp("2020-01-01") + pd.to_timedelta(rng.integers(0, 730, n_rows), unit="D")
    hours = rng.integers(0, 24, n_rows)
    minutes = rng.integers(0, 60, n_rows)

    return pd.DataFrame({
        "INCIDENT_KEY": [str(230000000 + i) for i in range(n_rows)],
        "OCCUR_DATE": list(dates.strftime("%m/%d/%Y")),
        "OCCUR_TIME": [f"{h:02d}:{m:02d}:00" for h, m in zip(hours, minutes)],
        "BORO": list(rng.choice(BOROUGHS, n_rows)),
        "LOC_OF_OCCUR_DESC": "OUTSIDE",
        "PRECINCT": [str(p) for p in rng.integers(1, 124, n_rows)],
        "JURISDICTION_CODE": "0",
        "STATISTICAL_MURDER_FLAG": "false",
        "PERP_AGE_GROUP": list(rng.choice(AGE_GROUPS, n_rows)),
        "PERP_SEX": "M",
        "VIC_AGE_GROUP": list(rng.choice(AGE_GROUPS, n_rows)),
        "VIC_SEX": "M",
        "Latitude": "40.7128",
        "Longitude": "-74.0060",
    })


def raw_from_records(records) -> pd.DataFrame:
    """Raw table from (date 'MM/DD/YYYY', borough) pairs; other fields valid."""
    return pd.DataFrame({
        "OCCUR_DATE": [date for date, _ in records],
        "OCCUR_TIME": ["12:30:00"] * len(records),
        "BORO": [boro for _, boro in records],
        "PRECINCT": ["40"] * len(records),
        "PERP_AGE_GROUP": ["25-44"] * len(records),
        "VIC_AGE_GROUP": ["18-24"] * len(records),
    })


@pytest.fixture
def raw_incidents():
    """100 valid raw rows over 2020-2021."""
    return make_raw_incidents()


@pytest.fixture
def make_raw():
    """Factory for raw tables of a given size."""
    return make_raw_incidents


@pytest.fixture
def records_to_raw():
    """Factory for raw tables from (date, borough) pairs."""
    return raw_from_records
