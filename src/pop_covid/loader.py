"""
loader.py
---------
Read the three pre-aggregated input tables.

Inputs
------
data/derived/01_COVID-19_global_data_country.csv   (Country, Date, Cases, ...)
data/derived/03_population_by_country.csv          (Country, Year, pop)
data/derived/04_population_by_country_24.csv       (country, pop2024)

Column names are lower-cased on load (country, date, cases, year, pop,
pop2024). Missing files and malformed CSV propagate unchanged.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict

import pandas as pd

from .config import Paths
from .exceptions import SchemaError

logger = logging.getLogger(__name__)

COVID_COLUMNS: Dict[str, str] = {"Country": "country", "Date": "date", "Cases": "cases"}
POPULATION_COLUMNS: Dict[str, str] = {"Country": "country", "Year": "year", "pop": "pop"}
POPULATION_2024_COLUMNS: Dict[str, str] = {"country": "country", "pop2024": "pop2024"}


@dataclass(frozen=True)
class Inputs:
    covid: pd.DataFrame
    population: pd.DataFrame
    population_2024: pd.DataFrame


def read_table(path: str, columns: Dict[str, str]) -> pd.DataFrame:
    """Read a CSV, check the required columns and rename them."""
    df = pd.read_csv(path)

    missing = set(columns) - set(df.columns)
    if missing:
        raise SchemaError(path, missing)

    df = df.rename(columns=columns)
    logger.info(f"Loaded: {path} | shape: {df.shape}")
    return df


def load_covid(path: str) -> pd.DataFrame:
    df = read_table(path, COVID_COLUMNS)

    df["date"] = pd.to_datetime(df["date"], errors="coerce")
    n_bad = int(df["date"].isna().sum())
    if n_bad:
        logger.warning(f"Dropped {n_bad} row(s) with unparseable Date from {path}")
        df = df.dropna(subset=["date"]).copy()

    df["year"] = df["date"].dt.year.astype(int)
    df["country"] = df["country"].astype(str)
    df["cases"] = pd.to_numeric(df["cases"], errors="coerce")
    return df


def load_population(path: str) -> pd.DataFrame:
    df = read_table(path, POPULATION_COLUMNS)
    df["country"] = df["country"].astype(str)

    df["year"] = pd.to_numeric(df["year"], errors="coerce")
    n_bad = int(df["year"].isna().sum())
    if n_bad:
        logger.warning(f"Dropped {n_bad} row(s) with missing or non-numeric Year from {path}")
        df = df.dropna(subset=["year"]).copy()

    df["year"] = df["year"].astype(int)
    df["pop"] = pd.to_numeric(df["pop"], errors="coerce")
    return df


def load_population_2024(path: str) -> pd.DataFrame:
    df = read_table(path, POPULATION_2024_COLUMNS)
    df["country"] = df["country"].astype(str)
    df["pop2024"] = pd.to_numeric(df["pop2024"], errors="coerce")
    return df


def load_inputs(paths: Paths) -> Inputs:
    return Inputs(
        covid=load_covid(paths.covid_csv),
        population=load_population(paths.population_csv),
        population_2024=load_population_2024(paths.population_2024_csv),
    )
