"""Primer-based extraction of hypervariable regions from nucleotide sequences."""
from .exceptions import (
    ConfigurationError,
    HyperexError,
    InputFormatError,
    OutputExistsError,
    PatternTooLongError,
    UnknownRegionError,
)
from .extractor import OutcomeStatus, PairOutcome, Region, RegionExtractor
from .myers import Match, MyersMatcher, search
from .primers import Primer, PrimerPair, PrimerRegionCatalog, default_catalog
from .sequence_utils import Alphabet, classify_alphabet, complement, reverse_complement

__version__ = "0.2.0"

__all__ = [
    "Alphabet",
    "ConfigurationError",
    "HyperexError",
    "InputFormatError",
    "Match",
    "MyersMatcher",
    "OutcomeStatus",
    "OutputExistsError",
    "PairOutcome",
    "PatternTooLongError",
    "Primer",
    "PrimerPair",
    "PrimerRegionCatalog",
    "Region",
    "RegionExtractor",
    "UnknownRegionError",
    "classify_alphabet",
    "complement",
    "default_catalog",
    "reverse_complement",
    "search",
]
