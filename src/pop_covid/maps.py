"""
maps.py
-------
Choropleth world maps: exact-name join of a country table to world
polygons, fixed-width classification into the palette bins, and PNG
rendering.

Outputs
-------
outputs/figures/01_plot-population_map.png
outputs/figures/02_plot-COVID19_2324.png
outputs/tables/unmatched_*.csv   (names that found no polygon)

Notes
-----
- Names that find no polygon are reported in JoinResult.unmatched; the
  caller decides whether to warn, fail or ignore.
- Countries without data are drawn white.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

import geopandas as gpd
import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
from matplotlib.cm import ScalarMappable
from matplotlib.colors import BoundaryNorm, ListedColormap

from .config import MapStyle
from .exceptions import UnmatchedCountriesError

logger = logging.getLogger(__name__)

ON_UNMATCHED = ("warn", "raise", "ignore")


@dataclass(frozen=True)
class JoinResult:
    joined: gpd.GeoDataFrame
    unmatched: List[str]
    n_matched: int


def join_to_world(
    data: pd.DataFrame,
    world: gpd.GeoDataFrame,
    name_col: str,
    value_col: str,
    world_name_col: str = "NAME_LONG",
) -> JoinResult:
    """
    Attach data[value_col] to every world polygon whose world_name_col
    equals data[name_col] exactly.

    Every polygon is kept (value NaN where no data matched). A name that
    appears more than once in data keeps its first row.
    """
    sub = data[[name_col, value_col]]
    dup = sub[name_col].duplicated(keep="first")
    if dup.any():
        logger.warning(
            f"{int(dup.sum())} duplicate name(s) in '{name_col}' before map join, keeping first: "
            f"{sorted(sub.loc[dup, name_col].unique())}"
        )
        sub = sub.loc[~dup]

    world_names = set(world[world_name_col].dropna())
    names = sub[name_col]
    is_matched = names.isin(world_names)
    unmatched = sorted(names[~is_matched].astype(str).unique())

    joined = world.copy()
    joined[value_col] = joined[world_name_col].map(sub.set_index(name_col)[value_col])

    return JoinResult(joined=joined, unmatched=unmatched, n_matched=int(is_matched.sum()))


def fixed_width_breaks(values, n_bins: int = 7) -> np.ndarray:
    """n_bins + 1 equally spaced edges spanning the finite values."""
    v = np.asarray(values, dtype=float)
    v = v[np.isfinite(v)]
    if v.size == 0:
        raise ValueError("No finite values to classify")

    lo, hi = float(v.min()), float(v.max())
    if lo == hi:
        lo, hi = lo - 0.5, hi + 0.5
    return np.linspace(lo, hi, n_bins + 1)


def classify_fixed_width(values: pd.Series, breaks: np.ndarray) -> pd.Series:
    """Bin index 0..len(breaks)-2 per value; lowest edge inclusive, NaN kept."""
    return pd.cut(values, bins=breaks, labels=False, include_lowest=True)


def bin_colors(codes: pd.Series, palette) -> List[str]:
    """Palette color for each bin index, lightest for bin 0."""
    return [palette[int(c)] for c in codes]


def render_choropleth(
    join: JoinResult,
    value_col: str,
    title: str,
    out_path: str,
    style: Optional[MapStyle] = None,
) -> None:
    style = style or MapStyle()
    height_in = style.figsize[1]

    fig = plt.figure(figsize=style.figsize, dpi=style.dpi)
    try:
        ax = fig.add_axes([0.0, 0.0, 1.0, 1.0 - style.top_margin_in / height_in])
        gdf = join.joined
        has_value = gdf[value_col].notna()

        if (~has_value).any():
            gdf[~has_value].plot(
                ax=ax,
                color=style.missing_color,
                edgecolor=style.border_color,
                linewidth=style.border_width,
            )

        if has_value.any():
            breaks = fixed_width_breaks(gdf.loc[has_value, value_col], style.n_bins)
            codes = classify_fixed_width(gdf.loc[has_value, value_col], breaks)
            logger.debug(f"Bin counts for '{value_col}': {codes.value_counts().sort_index().to_dict()}")

            gdf[has_value].plot(
                ax=ax,
                color=bin_colors(codes, style.palette),
                edgecolor=style.border_color,
                linewidth=style.border_width,
            )

            left = (1.0 - style.legend_shrink) / 2
            cax = fig.add_axes([left, style.legend_pad, style.legend_shrink, 0.025])
            cmap = ListedColormap(list(style.palette))
            legend = ScalarMappable(norm=BoundaryNorm(breaks, cmap.N), cmap=cmap)
            legend.set_array([])
            fig.colorbar(legend, cax=cax, orientation="horizontal", ticks=list(breaks), format="%.1f")
            cax.tick_params(labelsize=5)
        else:
            logger.warning(f"No country has a value for '{value_col}'; drawing an empty map")

        ax.set_title(title, fontsize=8, pad=2)
        ax.set_axis_off()
        fig.savefig(out_path, dpi=style.dpi, facecolor="white")
    finally:
        plt.close(fig)

    logger.info(f"Saved: {out_path}")


def write_unmatched_audit(
    unmatched: List[str],
    out_csv: str,
    world: Optional[gpd.GeoDataFrame] = None,
    world_name_col: str = "NAME_LONG",
    world_code_col: str = "ADM0_A3",
) -> pd.DataFrame:
    """
    Save unmatched names with an ISO3 guess and, where the guess exists in
    the world geometry, the polygon name an alias should point to.
    """
    audit = pd.DataFrame({"country": list(unmatched)})

    if len(audit):
        try:
            import country_converter as coco  # type: ignore
        except ImportError as e:
            raise ImportError("Install: pip install country_converter") from e

        iso3 = coco.convert(audit["country"].tolist(), to="ISO3")
        if isinstance(iso3, str):
            iso3 = [iso3]
        audit["iso3_guess"] = iso3
    else:
        audit["iso3_guess"] = pd.Series(dtype=str)

    if world is not None and world_code_col in world.columns:
        lookup = world.drop_duplicates(world_code_col).set_index(world_code_col)[world_name_col]
        audit["suggested_name"] = audit["iso3_guess"].map(lookup)
    else:
        audit["suggested_name"] = np.nan

    audit.to_csv(out_csv, index=False)
    logger.info(f"Saved: {out_csv} | shape: {audit.shape}")
    return audit


def plot_country_map(
    data: pd.DataFrame,
    world: gpd.GeoDataFrame,
    name_col: str,
    value_col: str,
    title: str,
    out_path: str,
    style: Optional[MapStyle] = None,
    world_name_col: str = "NAME_LONG",
    on_unmatched: str = "warn",
    audit_csv: Optional[str] = None,
) -> JoinResult:
    """Join data to the world geometry, report unmatched names, render."""
    if on_unmatched not in ON_UNMATCHED:
        raise ValueError(f"on_unmatched must be one of {ON_UNMATCHED}, got {on_unmatched!r}")

    join = join_to_world(data, world, name_col, value_col, world_name_col)
    logger.info(
        f"Map join on '{value_col}': {join.n_matched} matched, {len(join.unmatched)} unmatched"
    )

    if join.unmatched:
        if on_unmatched == "raise":
            raise UnmatchedCountriesError(join.unmatched)
        if on_unmatched == "warn":
            logger.warning(
                f"{len(join.unmatched)} country name(s) not found in world geometry: {join.unmatched}"
            )

    if audit_csv:
        write_unmatched_audit(join.unmatched, audit_csv, world=world, world_name_col=world_name_col)

    render_choropleth(join, value_col, title, out_path, style)
    return join
