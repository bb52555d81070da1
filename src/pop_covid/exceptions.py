"""
Exceptions raised by the analysis stages.

File-system and CSV parsing errors are not wrapped; they propagate as the
standard library and pandas raise them.
"""

from typing import Iterable, List


class AnalysisError(Exception):
    """Base exception for all errors raised by pop_covid."""

    pass


class SchemaError(AnalysisError, ValueError):
    """Raised when an input table lacks required columns."""

    def __init__(self, source: str, missing: Iterable[str]):
        self.source = source
        self.missing: List[str] = sorted(missing)
        super().__init__(f"Missing required columns in {source}: {self.missing}")


class UnmatchedCountriesError(AnalysisError):
    """Raised in strict mode when country names find no map polygon."""

    def __init__(self, unmatched: Iterable[str]):
        self.unmatched: List[str] = list(unmatched)
        super().__init__(
            f"{len(self.unmatched)} country name(s) did not match the world geometry: "
            f"{self.unmatched}"
        )
