"""End-to-end runs of the analysis on the fixture tables.

Tests cover:
- All figures and tables written
- Alias substitution reaching the population map
- Correlation over the merged (country, year) rows
- Strict unmatched-country mode
"""

import os

import numpy as np
import pandas as pd
import pytest

from pop_covid.config import Config, MapStyle
from pop_covid.exceptions import UnmatchedCountriesError
from pop_covid.pipeline import run

SMALL = MapStyle(width_px=640, height_px=372, dpi=60)


@pytest.mark.integration
class TestPipeline:

    def test_outputs_written(self, paths, world):
        run(paths, Config(map_style=SMALL, scatter_dpi=50), world=world)

        for p in (
            paths.population_map_png,
            paths.case_map_png,
            paths.correlation_png,
            paths.correlation_summary_csv,
            paths.ols_csv,
            paths.unmatched_population_csv,
            paths.unmatched_cases_csv,
        ):
            assert os.path.exists(p), p

    def test_alias_reaches_map(self, paths, world):
        run(paths, Config(map_style=SMALL, scatter_dpi=50), world=world)

        unmatched = pd.read_csv(paths.unmatched_population_csv)["country"].tolist()
        assert unmatched == ["Atlantis"]
        assert "DR Congo" not in unmatched

    def test_correlation_on_merged_rows(self, paths, world):
        result = run(paths, Config(map_style=SMALL, scatter_dpi=50), world=world)

        # France 2023/2024, Brazil 2023/2024, India 2023
        assert result.n_merged == 5
        assert result.n_obs == 5
        assert -1.0 <= result.r <= 1.0
        assert not np.isnan(result.slope)

    def test_strict_mode_raises(self, paths, world):
        with pytest.raises(UnmatchedCountriesError):
            run(paths, Config(map_style=SMALL, on_unmatched="raise"), world=world)

    def test_geometry_read_from_paths(self, paths, world):
        world.to_file(paths.world_geometry, driver="GeoJSON")

        result = run(paths, Config(map_style=SMALL, scatter_dpi=50))

        assert result.n_merged == 5

    def test_alias_applied_to_case_and_population_tables(self, paths, world):
        covid = pd.read_csv(paths.covid_csv)
        extra = pd.DataFrame(
            {
                "Country": ["DR Congo", "DR Congo"],
                "Date": ["2023-01-01", "2023-12-31"],
                "Cases": [1, 100],
                "Deaths": [0, 0],
            }
        )
        pd.concat([covid, extra], ignore_index=True).to_csv(paths.covid_csv, index=False)
        population = pd.read_csv(paths.population_csv)
        extra_pop = pd.DataFrame({"Country": ["DR Congo"], "Year": [2023], "pop": [105e6]})
        pd.concat([population, extra_pop], ignore_index=True).to_csv(paths.population_csv, index=False)

        result = run(paths, Config(map_style=SMALL, scatter_dpi=50), world=world)

        unmatched = pd.read_csv(paths.unmatched_cases_csv)["country"].tolist()
        assert unmatched == ["Atlantis"]
        assert result.n_merged == 6
