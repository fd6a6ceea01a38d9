from __future__ import annotations

import gzip
import sys
from pathlib import Path

import pytest

PROJECT_ROOT = str(Path(__file__).resolve().parents[1])
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

import main as cli
from hyperex.fasta_io import read_fasta

FWD_27F = "AGAGTTTGATCCTGGCTCAG"
RC_1492R = "AAGTCGTAACAAGGTAGCCGTA"
MIDDLE = "GGCTTAACACATGCAAGTCGAACGGTAAGGCCC"
AMPLICON = FWD_27F + MIDDLE + RC_1492R


@pytest.fixture
def input_fasta(tmp_path: Path) -> Path:
    path = tmp_path / "input.fa.gz"
    data = f">s1 first record\nTTT{AMPLICON}TTT\n>s2\n{MIDDLE}\n"
    path.write_bytes(gzip.compress(data.encode()))
    return path


def test_extracts_named_region(tmp_path: Path, input_fasta: Path, capsys: pytest.CaptureFixture[str]) -> None:
    prefix = tmp_path / "out" / "run"
    rc = cli.main([str(input_fasta), "--region", "v1v9", "-p", str(prefix)])

    assert rc == 0
    records = list(read_fasta(f"{prefix}.fa"))
    assert len(records) == 1
    assert records[0].id == "s1"
    assert records[0].description == (
        "region=v1v9 forward=AGAGTTTGATCMTGGCTCAG reverse=TACGGYTACCTTGTTAYGACTT"
    )
    assert records[0].sequence == AMPLICON

    gff = Path(f"{prefix}.gff").read_text().splitlines()
    assert gff[0] == "##gff-version 3"
    assert gff[1].split("\t") == [
        "s1", "hyperex", "region", "3", str(3 + len(AMPLICON)), ".", ".", ".",
        "Note=Hypervariable region v1v9",
    ]
    assert (tmp_path / "out" / "hyperex.log").exists()

    out = capsys.readouterr().out
    assert "v1v9" in out
    assert "[SUCCESS]" in out


def test_explicit_primers(tmp_path: Path, input_fasta: Path) -> None:
    prefix = tmp_path / "custom"
    rc = cli.main([
        str(input_fasta),
        "-f", "AGAGTTTGATCMTGGCTCAG",
        "-r", "TACGGYTACCTTGTTAYGACTT",
        "-p", str(prefix), "-q",
    ])
    assert rc == 0
    [record] = list(read_fasta(f"{prefix}.fa"))
    assert record.description.startswith("region=v1v9 ")


def test_rerun_with_force_is_byte_identical(tmp_path: Path, input_fasta: Path) -> None:
    prefix = tmp_path / "idem"
    args = [str(input_fasta), "--region", "v1v9", "--region", "v4", "-p", str(prefix), "-q"]

    assert cli.main(args) == 0
    first = (Path(f"{prefix}.fa").read_bytes(), Path(f"{prefix}.gff").read_bytes())
    assert cli.main(args + ["--force"]) == 0
    second = (Path(f"{prefix}.fa").read_bytes(), Path(f"{prefix}.gff").read_bytes())

    assert first == second


def test_existing_output_without_force_fails(tmp_path: Path, input_fasta: Path) -> None:
    prefix = tmp_path / "again"
    args = [str(input_fasta), "--region", "v1v9", "-p", str(prefix), "-q"]
    assert cli.main(args) == 0
    assert cli.main(args) == 1


@pytest.mark.parametrize(
    "extra",
    [
        ["--region", "v4", "-f", "ACGT", "-r", "ACGT"],
        ["-f", "ACGT", "-f", "CCCC", "-r", "GGGG"],
        ["-f", "A" * 70, "-r", "ACGT"],
        ["--threads", "0"],
    ],
)
def test_configuration_errors_exit_1(tmp_path: Path, input_fasta: Path, extra: list[str]) -> None:
    assert cli.main([str(input_fasta), "-p", str(tmp_path / "bad"), "-q", *extra]) == 1
    assert not Path(f"{tmp_path / 'bad'}.fa").exists()


def test_missing_input_exits_1(tmp_path: Path) -> None:
    assert cli.main([str(tmp_path / "nope.fa"), "-p", str(tmp_path / "x"), "-q"]) == 1


@pytest.mark.parametrize("extra", [["--region", "v2v3"], ["-m", "-1"]])
def test_invalid_arguments_are_usage_errors(tmp_path: Path, input_fasta: Path, extra: list[str]) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main([str(input_fasta), "-p", str(tmp_path / "x"), *extra])
    assert excinfo.value.code == 2


def test_high_mismatch_warns(tmp_path: Path, input_fasta: Path, caplog: pytest.LogCaptureFixture) -> None:
    rc = cli.main([str(input_fasta), "--region", "v4", "-m", "25", "-p", str(tmp_path / "wide"), "-q"])
    assert rc == 0
    assert any("match anywhere" in r.getMessage() for r in caplog.records)


def test_defaults_to_all_regions(tmp_path: Path, input_fasta: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert cli.main([str(input_fasta), "-p", str(tmp_path / "all")]) == 0
    out = capsys.readouterr().out
    for region in ("v1v2", "v3v4", "v7v9"):
        assert region in out


@pytest.mark.parametrize(
    ("name", "payload"),
    [
        ("input.fa.zst", b"\x28\xb5\x2f\xfd" + b"\x00" * 16),
        ("input.fa.gz", b"\x1f\x8b" + b"\xff" * 16),
    ],
)
def test_unreadable_input_leaves_no_outputs(tmp_path: Path, name: str, payload: bytes) -> None:
    path = tmp_path / name
    path.write_bytes(payload)
    prefix = tmp_path / "run"

    assert cli.main([str(path), "--region", "v4", "-p", str(prefix), "-q"]) == 1
    assert not Path(f"{prefix}.fa").exists()
    assert not Path(f"{prefix}.gff").exists()
