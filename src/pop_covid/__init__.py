"""Population vs. COVID-19 case growth: world maps and correlation."""

from .config import Config, MapStyle, Paths
from .exceptions import AnalysisError, SchemaError, UnmatchedCountriesError

__all__ = [
    "AnalysisError",
    "Config",
    "MapStyle",
    "Paths",
    "SchemaError",
    "UnmatchedCountriesError",
]

__version__ = "0.1.0"
