# hyperex/fasta_io.py
"""
FASTA reader with transparent decompression, plus the FASTA/GFF3 writer for
extracted regions.

API:
  - open_guess(path, mode) -> TextIO/BinaryIO for plain/gz/bz2/xz or '-'
  - read_fasta(path) -> iterator of SequenceRecord
  - write_record(handle, rid, seq, desc=None, width=80)
  - RegionWriter(prefix, force=False): context manager owning <prefix>.fa/.gff
"""
from __future__ import annotations

import bz2
import gzip
import io
import logging
import lzma
import os
import sys
import zlib
from dataclasses import dataclass
from pathlib import Path
from typing import (
    TYPE_CHECKING,
    BinaryIO,
    Iterator,
    Literal,
    Optional,
    TextIO,
    Tuple,
    Union,
    cast,
    overload,
)

from hyperex.exceptions import InputFormatError, OutputExistsError

if TYPE_CHECKING:
    from hyperex.extractor import Region

PathLike = Union[str, os.PathLike]
FileOrPath = Union[PathLike, TextIO, None]

__all__ = [
    "SequenceRecord",
    "RegionWriter",
    "GFF_HEADER",
    "open_guess",
    "read_fasta",
    "sniff_compression",
    "write_record",
]

logger = logging.getLogger(__name__)

GFF_HEADER = "##gff-version 3\n"

_MAGIC = (
    (b"\x1f\x8b", "gzip"),
    (b"BZh", "bzip2"),
    (b"\xfd7zXZ\x00", "xz"),
    (b"\x28\xb5\x2f\xfd", "zstd"),
)


@dataclass(frozen=True)
class SequenceRecord:
    id: str
    description: str
    sequence: str

    def __len__(self) -> int:
        return len(self.sequence)


def sniff_compression(head: bytes) -> Optional[str]:
    """Name of the compression format announced by the leading bytes, if any."""
    for magic, name in _MAGIC:
        if head.startswith(magic):
            return name
    return None


def _decompressing_reader(raw: BinaryIO, label: str) -> BinaryIO:
    peek = getattr(raw, "peek", None)
    head = peek(6)[:6] if peek is not None else b""
    fmt = sniff_compression(head)
    logger.debug("Input %s: compression %s", label, fmt or "none")
    if fmt is None:
        return raw
    if fmt == "gzip":
        return cast(BinaryIO, gzip.GzipFile(fileobj=raw, mode="rb"))
    if fmt == "bzip2":
        return cast(BinaryIO, bz2.BZ2File(raw, mode="rb"))
    if fmt == "xz":
        return cast(BinaryIO, lzma.LZMAFile(raw, mode="rb"))
    raw.close()
    raise InputFormatError(f"Could not read {label}: {fmt} compressed input is not supported")


@overload
def open_guess(
    path: Optional[PathLike],
    mode: Literal["rt", "wt"],
    encoding: str = "utf-8",
) -> TextIO: ...
@overload
def open_guess(
    path: Optional[PathLike],
    mode: Literal["rb", "wb"],
    encoding: str = "utf-8",
) -> BinaryIO: ...
def open_guess(
    path: Optional[PathLike],
    mode: str = "rt",
    encoding: str = "utf-8",
) -> TextIO | BinaryIO:
    """
    Open a path or '-' for stdio.

    Reads detect gzip, bzip2 and xz from the magic bytes rather than the file
    name. Writes compress with gzip when the path ends in '.gz'.
    """
    is_read = "r" in mode
    is_text = "t" in mode

    if path in (None, "-", ""):
        if is_read:
            raw = cast(BinaryIO, sys.stdin.buffer)
            if not hasattr(raw, "peek"):
                raw = cast(BinaryIO, io.BufferedReader(raw))  # type: ignore[arg-type]
            stream = _decompressing_reader(raw, "<stdin>")
        else:
            stream = cast(BinaryIO, sys.stdout.buffer)
        return io.TextIOWrapper(stream, encoding=encoding) if is_text else stream

    p = os.fspath(path)

    if is_read:
        stream = _decompressing_reader(cast(BinaryIO, open(p, "rb")), p)
    elif p.endswith(".gz"):
        stream = cast(BinaryIO, gzip.open(p, "wb"))
    else:
        stream = cast(BinaryIO, open(p, "wb"))
    return io.TextIOWrapper(stream, encoding=encoding) if is_text else stream


def read_fasta(path: FileOrPath) -> Iterator[SequenceRecord]:
    """
    Stream-parse FASTA from a path (compressed or not), '-'/None for stdin,
    or an open text handle. Sequences are upper-cased with whitespace removed.
    """
    if hasattr(path, "read"):
        fh = cast(TextIO, path)
        _close = False
    else:
        fh = open_guess(cast(Optional[PathLike], path), "rt")
        _close = True

    try:
        header: Optional[str] = None
        seq_chunks: list[str] = []
        for lineno, line in enumerate(fh, 1):
            if not line.strip():
                continue
            ch = line[0]
            if ch == ">":
                if header is not None:
                    yield _make_record(header, seq_chunks)
                header = line[1:].strip()
                seq_chunks = []
            elif ch == ";" and header is None:
                continue
            elif header is None:
                raise InputFormatError(f"Line {lineno}: expected a '>' header, found {line[:30]!r}")
            else:
                seq_chunks.append("".join(line.split()))
        if header is not None:
            yield _make_record(header, seq_chunks)
    except (OSError, EOFError, UnicodeDecodeError, lzma.LZMAError, zlib.error) as e:
        raise InputFormatError(f"Could not read FASTA input: {e}") from e
    finally:
        if _close:
            fh.close()


def write_record(
    handle: TextIO,
    rid: str,
    seq: str,
    desc: Optional[str] = None,
    width: int = 80,
) -> None:
    """Write a single FASTA record to an open text handle."""
    handle.write(f">{rid} {desc}\n" if desc else f">{rid}\n")
    _write_wrapped(handle, (seq or "").strip().upper(), width)


class RegionWriter:
    """
    Owns the two output streams of a run: <prefix>.fa with the cropped
    regions and <prefix>.gff with one annotation line per region.
    """

    def __init__(self, prefix: PathLike, force: bool = False, width: int = 80) -> None:
        prefix = os.fspath(prefix)
        self.fasta_path = Path(f"{prefix}.fa")
        self.gff_path = Path(f"{prefix}.gff")
        self.force = force
        self.width = width
        self.written = 0
        self._fasta: Optional[TextIO] = None
        self._gff: Optional[TextIO] = None

    def open(self) -> "RegionWriter":
        for path in (self.fasta_path, self.gff_path):
            if path.exists() and not self.force:
                raise OutputExistsError(str(path))
        self.fasta_path.parent.mkdir(parents=True, exist_ok=True)
        self._fasta = open_guess(self.fasta_path, "wt")
        self._gff = open_guess(self.gff_path, "wt")
        self._gff.write(GFF_HEADER)
        logger.debug("Writing regions to %s and %s", self.fasta_path, self.gff_path)
        return self

    def close(self) -> None:
        for handle in (self._fasta, self._gff):
            if handle is not None:
                handle.close()
        self._fasta = self._gff = None

    def __enter__(self) -> "RegionWriter":
        return self.open()

    def __exit__(self, *exc: object) -> None:
        self.close()

    def write(self, region: "Region") -> None:
        if self._fasta is None or self._gff is None:
            raise RuntimeError("RegionWriter is not open")
        write_record(self._fasta, region.record_id, region.sequence, region.attributes, self.width)
        self._gff.write(region.to_gff())
        self.written += 1

    @property
    def paths(self) -> Tuple[Path, Path]:
        return self.fasta_path, self.gff_path


# ---------------------- internal helpers ----------------------


def _make_record(header: str, chunks: list[str]) -> SequenceRecord:
    rid, desc = _split_header(header)
    return SequenceRecord(rid, desc, "".join(chunks).upper())


def _split_header(header: str) -> Tuple[str, str]:
    # ID is the first whitespace-delimited token, the rest is the description.
    parts = header.strip().split(None, 1)
    if not parts:
        return "", ""
    return parts[0], parts[1] if len(parts) > 1 else ""


def _write_wrapped(out: TextIO, seq: str, width: int) -> None:
    if width > 0:
        for i in range(0, len(seq), width):
            out.write(seq[i : i + width] + "\n")
    else:
        out.write(seq + "\n")
