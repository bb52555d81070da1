"""Pytest configuration and shared fixtures for the pop_covid tests.

This module provides fixtures for:
- A small world geometry built from boxes (no download needed)
- Input tables in the three CSV layouts the loader expects
- Paths pointing every input and output into tmp_path
"""

from pathlib import Path

import matplotlib

matplotlib.use("Agg")

import geopandas as gpd
import pandas as pd
import pytest
from shapely.geometry import box

from pop_covid.config import Config, Paths


# ============================================================================
# Geometry Fixtures
# ============================================================================

@pytest.fixture
def world() -> gpd.GeoDataFrame:
    """Four rectangular 'countries' with Natural Earth style columns."""
    return gpd.GeoDataFrame(
        {
            "NAME_LONG": ["Democratic Republic of the Congo", "France", "Brazil", "India"],
            "ADM0_A3": ["COD", "FRA", "BRA", "IND"],
        },
        geometry=[
            box(12, -13, 31, 5),
            box(-5, 42, 8, 51),
            box(-74, -33, -35, 5),
            box(68, 8, 97, 35),
        ],
        crs="EPSG:4326",
    )


# ============================================================================
# Input Table Fixtures
# ============================================================================

@pytest.fixture
def covid_raw() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "Country": [
                "France", "France", "France", "France",
                "Brazil", "Brazil", "Brazil", "Brazil",
                "India", "India",
                "Atlantis", "Atlantis",
            ],
            "Date": [
                "2023-01-01", "2023-12-31", "2024-01-01", "2024-06-30",
                "2023-01-01", "2023-12-31", "2024-01-01", "2024-06-30",
                "2023-01-01", "2023-12-31",
                "2023-01-01", "2023-12-31",
            ],
            "Cases": [100, 1100, 1100, 1600, 50, 5050, 5050, 15050, 10, 5, 1, 2],
            "Deaths": [0] * 12,
        }
    )


@pytest.fixture
def population_raw() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "Country": ["France", "Brazil", "India", "France", "Brazil"],
            "Year": [2023, 2023, 2023, 2024, 2024],
            "pop": [68e6, 216e6, 1428e6, 68.2e6, 217e6],
        }
    )


@pytest.fixture
def population_2024_raw() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "country": ["DR Congo", "France", "Brazil", "India", "Atlantis"],
            "pop2024": [109e6, 68.2e6, 217e6, 1441e6, 0],
        }
    )


# ============================================================================
# Path / Config Fixtures
# ============================================================================

@pytest.fixture
def paths(tmp_path: Path, covid_raw, population_raw, population_2024_raw) -> Paths:
    """Paths with the fixture tables written as CSV under tmp_path."""
    data_dir = tmp_path / "data"
    data_dir.mkdir()

    p = Paths(
        covid_csv=str(data_dir / "covid.csv"),
        population_csv=str(data_dir / "population.csv"),
        population_2024_csv=str(data_dir / "population_24.csv"),
        world_geometry=str(data_dir / "world.geojson"),
        fig_dir=str(tmp_path / "outputs" / "figures"),
        tab_dir=str(tmp_path / "outputs" / "tables"),
    )
    covid_raw.to_csv(p.covid_csv, index=False)
    population_raw.to_csv(p.population_csv, index=False)
    population_2024_raw.to_csv(p.population_2024_csv, index=False)
    return p


@pytest.fixture
def config() -> Config:
    return Config()
