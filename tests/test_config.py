from __future__ import annotations

import argparse
import sys
from pathlib import Path

import pytest

PROJECT_ROOT = str(Path(__file__).resolve().parents[1])
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from hyperex.config import DEFAULT_PREFIX, RunConfig
from hyperex.exceptions import ConfigurationError
from hyperex.primers import PrimerPair, default_catalog


def _args(**overrides) -> argparse.Namespace:
    values = dict(
        file=None, forward_primer=None, reverse_primer=None, region=None,
        mismatch=0, prefix=Path(DEFAULT_PREFIX), force=False, quiet=False, threads=1,
    )
    values.update(overrides)
    return argparse.Namespace(**values)


def test_from_args_with_regions() -> None:
    config = RunConfig.from_args(_args(region=["v4", "v3v4"]))
    assert [p.region for p in config.pairs] == ["v4", "v3v4"]
    assert config.input_file is None
    assert config.regions == ["v4", "v3v4"]


def test_from_args_defaults_to_every_region() -> None:
    config = RunConfig.from_args(_args())
    assert [p.region for p in config.pairs] == list(default_catalog().regions)


def test_from_args_with_primers() -> None:
    config = RunConfig.from_args(_args(forward_primer=["ACGTACGT"], reverse_primer=["GGGGCCCC"]))
    assert config.pairs == [PrimerPair.build("ACGTACGT", "GGGGCCCC")]
    assert config.shortest_primer == 8


def test_stdin_dash_means_no_file() -> None:
    assert RunConfig.from_args(_args(file="-", region=["v4"])).input_file is None


def test_missing_input_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError):
        RunConfig.from_args(_args(file=str(tmp_path / "missing.fa"), region=["v4"]))


@pytest.mark.parametrize(
    "overrides",
    [
        dict(region=["v4"], forward_primer=["ACGT"], reverse_primer=["ACGT"]),
        dict(forward_primer=["ACGT"], reverse_primer=None),
        dict(region=["v4"], threads=0),
        dict(region=["v4"], mismatch=-2),
        dict(region=["nope"]),
        dict(forward_primer=[""], reverse_primer=["ACGT"]),
    ],
)
def test_invalid_configurations(overrides) -> None:
    with pytest.raises(ConfigurationError):
        RunConfig.from_args(_args(**overrides))


def test_mismatch_too_high() -> None:
    pairs = [PrimerPair.build("ACGTAC", "GGGGCCCCAA")]
    assert RunConfig(pairs, max_mismatch=5).mismatch_too_high is False
    assert RunConfig(pairs, max_mismatch=6).mismatch_too_high is True
