"""Run configuration for hyperex."""

from __future__ import annotations

import argparse
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from hyperex.exceptions import ConfigurationError
from hyperex.myers import MAX_PATTERN_LENGTH
from hyperex.primers import PrimerPair, PrimerRegionCatalog, default_catalog, pair_primers, region_pairs

logger = logging.getLogger(__name__)

DEFAULT_PREFIX = "hyperex_out"


@dataclass
class RunConfig:
    """Settings for one extraction run."""

    pairs: List[PrimerPair]
    input_file: Optional[Path] = None  # None reads standard input
    max_mismatch: int = 0
    prefix: Path = Path(DEFAULT_PREFIX)
    force: bool = False
    quiet: bool = False
    threads: int = 1
    regions: List[str] = field(default_factory=list)

    def __post_init__(self):
        """Validate configuration after initialization."""
        if self.input_file is not None and str(self.input_file) != "-":
            self.input_file = Path(self.input_file)
            if not self.input_file.exists():
                raise ConfigurationError(f"Input file not found: {self.input_file}", parameter="FILE")
        else:
            self.input_file = None
        self.prefix = Path(self.prefix)

        if not self.pairs:
            raise ConfigurationError("No primer pairs to search for")
        if self.max_mismatch < 0:
            raise ConfigurationError(f"Invalid mismatch count: {self.max_mismatch}", parameter="mismatch")
        if self.threads <= 0:
            raise ConfigurationError(f"Invalid threads: {self.threads}", parameter="threads")
        for pair in self.pairs:
            for primer in (pair.forward, pair.reverse):
                if not 0 < len(primer) <= MAX_PATTERN_LENGTH:
                    raise ConfigurationError(
                        f"Primer {primer.sequence!r} must be 1 to {MAX_PATTERN_LENGTH} bases long",
                        parameter="primer",
                    )

    @property
    def shortest_primer(self) -> int:
        return min(min(len(p.forward), len(p.reverse)) for p in self.pairs)

    @property
    def mismatch_too_high(self) -> bool:
        """True when the mismatch bound lets a primer match anywhere."""
        return self.max_mismatch >= self.shortest_primer

    @classmethod
    def from_args(cls, args: argparse.Namespace, catalog: Optional[PrimerRegionCatalog] = None) -> "RunConfig":
        """Create configuration from parsed command-line arguments."""
        catalog = catalog or default_catalog()
        forwards = args.forward_primer or []
        reverses = args.reverse_primer or []
        regions = list(args.region or [])

        if regions and (forwards or reverses):
            raise ConfigurationError("--region cannot be combined with --forward-primer/--reverse-primer")
        if forwards or reverses:
            pairs = pair_primers(forwards, reverses, catalog)
        else:
            if not regions:
                regions = list(catalog.regions)
                logger.info("No region or primers given; searching all %d catalogued regions", len(regions))
            pairs = region_pairs(regions, catalog)

        return cls(
            pairs=pairs,
            input_file=args.file,
            max_mismatch=args.mismatch,
            prefix=args.prefix,
            force=args.force,
            quiet=args.quiet,
            threads=args.threads,
            regions=regions,
        )
