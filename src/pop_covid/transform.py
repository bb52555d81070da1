"""
transform.py
------------
Country-name normalization, log1p scaling and annual case-change
aggregation.

Negative annual changes (data revisions) are clamped to zero growth.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, Mapping, Optional

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)

COUNTRY_ALIASES: Dict[str, str] = {"DR Congo": "Democratic Republic of the Congo"}


def check_aliases(aliases: Mapping[str, str]) -> None:
    chained = sorted(set(aliases.values()) & set(aliases))
    if chained:
        raise ValueError(f"Alias targets must not also be alias keys: {chained}")


def normalize_country_names(
    names: pd.Series, aliases: Optional[Mapping[str, str]] = None
) -> pd.Series:
    """Exact-string alias substitution; names without an alias pass through."""
    aliases = COUNTRY_ALIASES if aliases is None else aliases
    check_aliases(aliases)
    return names.map(lambda s: aliases.get(s, s))


def log1p(values):
    """ln(x + 1), element-wise."""
    return np.log1p(values)


def clamp_non_negative(values: pd.Series) -> pd.Series:
    return values.clip(lower=0)


def _drop_duplicate_keys(df: pd.DataFrame, keys) -> pd.DataFrame:
    dup = df.duplicated(subset=list(keys), keep="first")
    if dup.any():
        logger.warning(
            f"Dropped {int(dup.sum())} duplicate {tuple(keys)} row(s) after alias substitution: "
            f"{sorted(df.loc[dup, 'country'].unique())}"
        )
        df = df.loc[~dup].copy()
    return df


def annual_case_change(
    covid: pd.DataFrame, aliases: Optional[Mapping[str, str]] = None
) -> pd.DataFrame:
    """
    First and last reported case count per (country, year).

    Country names go through the alias table first. Returns one row per
    (country, year) with case_start, case_end, case_change (clamped at
    zero) and log_case_change.
    """
    df = covid.copy()
    df["country"] = normalize_country_names(df["country"], aliases)
    df = df.sort_values(["country", "date"], kind="mergesort")

    annual = (
        df.groupby(["country", "year"], as_index=False)
        .agg(case_start=("cases", "first"), case_end=("cases", "last"))
    )

    raw_change = annual["case_end"] - annual["case_start"]
    n_negative = int((raw_change < 0).sum())
    if n_negative:
        logger.info(f"Clamped {n_negative} negative annual case change(s) to zero")

    annual["case_change"] = clamp_non_negative(raw_change)
    annual["log_case_change"] = log1p(annual["case_change"])
    return annual


def prepare_population_2024(
    df: pd.DataFrame, aliases: Optional[Mapping[str, str]] = None
) -> pd.DataFrame:
    out = df.copy()
    out["country"] = normalize_country_names(out["country"], aliases)
    out = _drop_duplicate_keys(out, ["country"])

    out["log_pop2024"] = log1p(out["pop2024"])
    return out.reset_index(drop=True)


def prepare_population(
    df: pd.DataFrame, aliases: Optional[Mapping[str, str]] = None
) -> pd.DataFrame:
    out = df.copy()
    out["country"] = normalize_country_names(out["country"], aliases)
    out = _drop_duplicate_keys(out, ["country", "year"])

    out["log_pop"] = log1p(out["pop"])
    return out.reset_index(drop=True)


def case_change_for_years(annual: pd.DataFrame, years: Iterable[int] = (2023, 2024)) -> pd.DataFrame:
    """
    Total clamped case change per country over the given years.

    The years are summed rather than taking the first year's row for each
    country, so a two-year map shows two years of growth. A country with no
    reported change in any of the years stays NaN (no data) instead of 0.
    """
    sub = annual[annual["year"].isin(list(years))]
    out = sub.groupby("country", as_index=False).agg(
        case_change=("case_change", lambda s: s.sum(min_count=1))
    )

    n_missing = int(out["case_change"].isna().sum())
    if n_missing:
        logger.warning(f"{n_missing} country(ies) have no case data for years {list(years)}")

    out["log_case_change"] = log1p(out["case_change"])
    return out
