"""
hyperex/exceptions.py

Errors that abort a run. Per-record and per-primer-pair conditions are not
exceptions; they are reported as outcome values by the extractor.
"""
from __future__ import annotations

from typing import Optional

__all__ = [
    "HyperexError",
    "ConfigurationError",
    "PatternTooLongError",
    "UnknownRegionError",
    "InputFormatError",
    "OutputExistsError",
]


class HyperexError(RuntimeError):
    """Base class for fatal hyperex errors."""


class ConfigurationError(HyperexError):
    """Raised when primers, regions or run options are unusable."""

    def __init__(self, message: str, parameter: Optional[str] = None) -> None:
        self.parameter = parameter
        if parameter is not None:
            message = f"{message} (parameter: {parameter})"
        super().__init__(message)


class PatternTooLongError(ConfigurationError):
    """Raised when a search pattern does not fit the matcher's word width."""

    def __init__(self, pattern: str, limit: int) -> None:
        self.pattern = pattern
        self.limit = limit
        super().__init__(
            f"pattern {pattern!r} has length {len(pattern)}; "
            f"patterns must be between 1 and {limit} symbols"
        )


class UnknownRegionError(ConfigurationError):
    """Raised when a region name is not in the primer catalog."""

    def __init__(self, region: str) -> None:
        self.region = region
        super().__init__(f"unknown hypervariable region {region!r}", parameter="region")


class InputFormatError(HyperexError):
    """Raised when an input stream cannot be decoded as (compressed) FASTA."""


class OutputExistsError(HyperexError):
    """Raised when output files already exist and overwriting was not requested."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"output file {path} already exists; use --force to overwrite")
