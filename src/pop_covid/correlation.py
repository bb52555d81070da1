"""
correlation.py
--------------
Correlation between log population and log annual COVID-19 case change.

Outputs
-------
outputs/figures/03_plot-correlation.png
outputs/tables/correlation_summary.csv
outputs/tables/ols_log_case_change_on_log_pop.csv

Notes
-----
- Population and case tables are inner-joined on (country, year); keys
  present on one side only are reported, not kept.
- Pearson r uses pairwise-complete rows.
- The fitted line is plain OLS with its 95% mean confidence band.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import List, Optional, Sequence, Tuple

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import statsmodels.formula.api as smf

from .config import Config, Paths

logger = logging.getLogger(__name__)

KEYS: Tuple[str, str] = ("country", "year")
TIDY_COLUMNS: List[str] = ["term", "coef", "se", "t", "p", "n_obs", "r2"]


@dataclass(frozen=True)
class MergeResult:
    merged: pd.DataFrame
    unmatched_left: List[tuple]
    unmatched_right: List[tuple]


@dataclass(frozen=True)
class CorrelationResult:
    r: float
    n_obs: int
    n_excluded: int
    n_merged: int
    slope: float = np.nan
    intercept: float = np.nan
    r2: float = np.nan


def merge_country_year(
    left: pd.DataFrame, right: pd.DataFrame, keys: Sequence[str] = KEYS
) -> MergeResult:
    keys = list(keys)
    merged = left.merge(right, on=keys, how="inner")

    audit = left[keys].drop_duplicates().merge(
        right[keys].drop_duplicates(), on=keys, how="outer", indicator=True
    )
    only_left = audit.loc[audit["_merge"] == "left_only", keys]
    only_right = audit.loc[audit["_merge"] == "right_only", keys]

    return MergeResult(
        merged=merged,
        unmatched_left=list(only_left.itertuples(index=False, name=None)),
        unmatched_right=list(only_right.itertuples(index=False, name=None)),
    )


def pearson_correlation(df: pd.DataFrame, x: str, y: str) -> Tuple[float, int, int]:
    """Pairwise-complete Pearson r; returns (r, n_obs, n_excluded)."""
    complete = df[[x, y]].dropna()
    n_obs = len(complete)
    n_excluded = len(df) - n_obs
    if n_obs < 2:
        return np.nan, n_obs, n_excluded
    return float(complete[x].corr(complete[y])), n_obs, n_excluded


def fit_ols(df: pd.DataFrame, x: str, y: str):
    """OLS y ~ x on complete rows, or None with fewer than 3 of them."""
    complete = df[[x, y]].dropna()
    if len(complete) < 3:
        return None
    return smf.ols(f"{y} ~ {x}", data=complete).fit()


def tidy_ols(model) -> pd.DataFrame:
    tidy = pd.DataFrame(
        {
            "term": model.params.index,
            "coef": model.params.values,
            "se": model.bse.values,
            "t": model.tvalues.values,
            "p": model.pvalues.values,
        }
    )
    tidy["n_obs"] = int(model.nobs)
    tidy["r2"] = model.rsquared
    return tidy


def plot_correlation(
    df: pd.DataFrame,
    x: str,
    y: str,
    out_path: str,
    model=None,
    title: str = "Correlation with Log Transformations",
    xlabel: str = "Log of Population",
    ylabel: str = "Log of Annual COVID-19 Case",
    dpi: int = 300,
) -> None:
    """Scatter of x vs y with the fitted OLS line and 95% confidence band."""
    complete = df[[x, y]].dropna()

    fig, ax = plt.subplots(figsize=(7, 7))
    try:
        ax.scatter(complete[x], complete[y], s=12, color="black")

        if model is not None:
            x_line = np.linspace(complete[x].min(), complete[x].max(), 200)
            pred = model.get_prediction(pd.DataFrame({x: x_line})).summary_frame(alpha=0.05)
            ax.fill_between(
                x_line, pred["mean_ci_lower"], pred["mean_ci_upper"],
                color="grey", alpha=0.3, linewidth=0,
            )
            ax.plot(x_line, pred["mean"], color="blue", linewidth=1.5)

        ax.set_xlabel(xlabel)
        ax.set_ylabel(ylabel)
        ax.set_title(title, loc="left")
        for side in ("top", "right", "bottom", "left"):
            ax.spines[side].set_visible(False)
        ax.grid(True, linewidth=0.5, alpha=0.4)
        ax.tick_params(length=0)
        fig.tight_layout()
        fig.savefig(out_path, dpi=dpi)
    finally:
        plt.close(fig)

    logger.info(f"Saved: {out_path}")


def analyze_correlation(
    population: pd.DataFrame,
    annual: pd.DataFrame,
    paths: Paths,
    cfg: Optional[Config] = None,
    x: str = "log_pop",
    y: str = "log_case_change",
) -> CorrelationResult:
    """Merge, correlate, fit and plot; writes the summary tables."""
    cfg = cfg or Config()

    res = merge_country_year(population, annual)
    data = res.merged
    logger.info(f"Merged population and cases: shape {data.shape}")
    if res.unmatched_left or res.unmatched_right:
        logger.warning(
            f"Dropped in merge: {len(res.unmatched_left)} population key(s) and "
            f"{len(res.unmatched_right)} case key(s) without a (country, year) match"
        )

    r, n_obs, n_excluded = pearson_correlation(data, x, y)
    if n_excluded:
        logger.warning(f"Excluded {n_excluded} row(s) with a missing '{x}' or '{y}'")
    logger.info(f"Pearson r({x}, {y}) = {r:.6f} | n = {n_obs}")

    model = fit_ols(data, x, y)
    if model is None:
        logger.warning(f"Too few complete rows ({n_obs}) to fit a regression line")
        pd.DataFrame(columns=TIDY_COLUMNS).to_csv(paths.ols_csv, index=False)
        logger.info(f"Saved: {paths.ols_csv} | shape: (0, {len(TIDY_COLUMNS)})")
        result = CorrelationResult(r=r, n_obs=n_obs, n_excluded=n_excluded, n_merged=len(data))
    else:
        tidy = tidy_ols(model)
        tidy.to_csv(paths.ols_csv, index=False)
        logger.info(f"Saved: {paths.ols_csv}")
        result = CorrelationResult(
            r=r,
            n_obs=n_obs,
            n_excluded=n_excluded,
            n_merged=len(data),
            slope=float(model.params[x]),
            intercept=float(model.params["Intercept"]),
            r2=float(model.rsquared),
        )

    pd.DataFrame([asdict(result)]).to_csv(paths.correlation_summary_csv, index=False)
    logger.info(f"Saved: {paths.correlation_summary_csv}")

    plot_correlation(data, x, y, paths.correlation_png, model=model, dpi=cfg.scatter_dpi)
    return result
