"""
pipeline.py
-----------
Runs the full analysis: population and COVID-19 case change (2023–2024)
world maps, and the log population vs. log case change correlation.

Inputs
------
data/derived/01_COVID-19_global_data_country.csv
data/derived/03_population_by_country.csv
data/derived/04_population_by_country_24.csv
data/raw/ne_110m_admin_0_countries.zip   (downloaded when absent)

Outputs
-------
Figures (outputs/figures):
- 01_plot-population_map.png
- 02_plot-COVID19_2324.png
- 03_plot-correlation.png

Tables (outputs/tables):
- correlation_summary.csv
- ols_log_case_change_on_log_pop.csv
- unmatched_population_map.csv
- unmatched_case_map.csv

Notes
-----
- These are descriptive associations, not causal estimates.
"""

from __future__ import annotations

from typing import Optional

import geopandas as gpd

from .config import Config, Paths, ensure_dirs
from .correlation import CorrelationResult, analyze_correlation
from .geometry import load_world_geometry
from .loader import load_inputs
from .logging_config import create_logger, log_exception
from .maps import plot_country_map
from .transform import (
    annual_case_change,
    case_change_for_years,
    prepare_population,
    prepare_population_2024,
)


def run(
    paths: Paths,
    cfg: Config,
    world: Optional[gpd.GeoDataFrame] = None,
) -> CorrelationResult:
    ensure_dirs(paths)

    inputs = load_inputs(paths)
    if world is None:
        world = load_world_geometry(paths, cfg)

    # Population map (2024)
    pop_24 = prepare_population_2024(inputs.population_2024, cfg.country_aliases)
    plot_country_map(
        pop_24,
        world,
        name_col="country",
        value_col="log_pop2024",
        title="Total Population by Country with Log Transformation (2024)",
        out_path=paths.population_map_png,
        style=cfg.map_style,
        world_name_col=cfg.world_name_column,
        on_unmatched=cfg.on_unmatched,
        audit_csv=paths.unmatched_population_csv,
    )

    # Case change map
    annual = annual_case_change(inputs.covid, cfg.country_aliases)
    cases_map = case_change_for_years(annual, cfg.case_map_years)
    first, last = min(cfg.case_map_years), max(cfg.case_map_years)
    plot_country_map(
        cases_map,
        world,
        name_col="country",
        value_col="log_case_change",
        title=f"The number of COVID-19 Cases with Log Transformation ({first} - {last})",
        out_path=paths.case_map_png,
        style=cfg.map_style,
        world_name_col=cfg.world_name_column,
        on_unmatched=cfg.on_unmatched,
        audit_csv=paths.unmatched_cases_csv,
    )

    # Correlation
    population = prepare_population(inputs.population, cfg.country_aliases)
    return analyze_correlation(population, annual, paths, cfg)


def main() -> None:
    paths = Paths()
    cfg = Config()
    logger = create_logger("pop_covid", log_dir=paths.log_dir or None)

    try:
        result = run(paths, cfg)
    except Exception as e:
        log_exception(logger, e, context="population vs. COVID-19 case change analysis")
        raise

    logger.info("Done.")
    logger.info(f"Correlation (log population, log case change): {result.r:.6f} | n = {result.n_obs}")
    logger.info(f"Saved figures to: {paths.fig_dir}")
    logger.info(f"Saved tables to: {paths.tab_dir}")


if __name__ == "__main__":
    main()
