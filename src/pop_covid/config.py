"""
config.py
---------
Input/output locations and rendering settings for the population vs.
COVID-19 case growth analysis.

Every stage receives one of these objects explicitly; nothing reads module
level paths.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Dict, Tuple

from .transform import COUNTRY_ALIASES

NATURAL_EARTH_URL = "https://naciscdn.org/naturalearth/110m/cultural/ne_110m_admin_0_countries.zip"

PALETTE: Tuple[str, ...] = (
    "#cbdef0",
    "#abd0e6",
    "#82badb",
    "#59a1cf",
    "#3788c0",
    "#1c6aaf",
    "#0b4e94",
)


@dataclass(frozen=True)
class Paths:
    covid_csv: str = "data/derived/01_COVID-19_global_data_country.csv"
    population_csv: str = "data/derived/03_population_by_country.csv"
    population_2024_csv: str = "data/derived/04_population_by_country_24.csv"
    world_geometry: str = "data/raw/ne_110m_admin_0_countries.zip"
    fig_dir: str = "outputs/figures"
    tab_dir: str = "outputs/tables"
    log_dir: str = ""

    @property
    def population_map_png(self) -> str:
        return os.path.join(self.fig_dir, "01_plot-population_map.png")

    @property
    def case_map_png(self) -> str:
        return os.path.join(self.fig_dir, "02_plot-COVID19_2324.png")

    @property
    def correlation_png(self) -> str:
        return os.path.join(self.fig_dir, "03_plot-correlation.png")

    @property
    def correlation_summary_csv(self) -> str:
        return os.path.join(self.tab_dir, "correlation_summary.csv")

    @property
    def ols_csv(self) -> str:
        return os.path.join(self.tab_dir, "ols_log_case_change_on_log_pop.csv")

    @property
    def unmatched_population_csv(self) -> str:
        return os.path.join(self.tab_dir, "unmatched_population_map.csv")

    @property
    def unmatched_cases_csv(self) -> str:
        return os.path.join(self.tab_dir, "unmatched_case_map.csv")


@dataclass(frozen=True)
class MapStyle:
    """Raster size, palette and legend placement for the choropleths."""

    width_px: int = 3200
    height_px: int = 1860
    dpi: int = 300
    top_margin_in: float = 0.2
    palette: Tuple[str, ...] = PALETTE
    missing_color: str = "white"
    border_color: str = "grey"
    border_width: float = 0.2
    legend_shrink: float = 0.7
    legend_pad: float = 0.02

    @property
    def n_bins(self) -> int:
        return len(self.palette)

    @property
    def figsize(self) -> Tuple[float, float]:
        return self.width_px / self.dpi, self.height_px / self.dpi


@dataclass(frozen=True)
class Config:
    case_map_years: Tuple[int, ...] = (2023, 2024)
    country_aliases: Dict[str, str] = field(default_factory=lambda: dict(COUNTRY_ALIASES))
    world_url: str = NATURAL_EARTH_URL
    world_name_column: str = "NAME_LONG"
    on_unmatched: str = "warn"
    timeout_connect: int = 10
    timeout_read: int = 180
    scatter_dpi: int = 300
    map_style: MapStyle = field(default_factory=MapStyle)


def ensure_dirs(paths: Paths) -> None:
    os.makedirs(paths.fig_dir, exist_ok=True)
    os.makedirs(paths.tab_dir, exist_ok=True)
    if paths.log_dir:
        os.makedirs(paths.log_dir, exist_ok=True)
