"""
hyperex/extractor.py

Hypervariable region extraction: for every record and every primer pair,
locate the forward primer and the reverse complement of the reverse primer,
then cut the sequence between the two hits.

Each (record, pair) combination yields a PairOutcome value; nothing here logs
misses. run_extraction() is the run loop that turns outcomes into log entries
and output records.
"""
from __future__ import annotations

import logging
from collections import Counter, deque
from concurrent.futures import Future, ProcessPoolExecutor
from dataclasses import dataclass
from enum import Enum
from itertools import islice
from typing import Deque, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from hyperex.fasta_io import RegionWriter, SequenceRecord
from hyperex.myers import Match, MyersMatcher
from hyperex.primers import PrimerPair
from hyperex.sequence_utils import Alphabet, classify_alphabet, reverse_complement

__all__ = [
    "MIN_EXPECTED_LENGTH",
    "OutcomeStatus",
    "PairOutcome",
    "Region",
    "RegionExtractor",
    "describe",
    "extract_records",
    "run_extraction",
]

logger = logging.getLogger(__name__)

# Full-length 16S genes are ~1500 bp; shorter records may lack some regions.
MIN_EXPECTED_LENGTH = 1500

_BATCH_SIZE = 64
_IN_FLIGHT = 2


class OutcomeStatus(Enum):
    FOUND = "found"
    FORWARD_MISSING = "forward primer absent"
    REVERSE_MISSING = "reverse primer absent"
    BOTH_MISSING = "both primers absent"
    INVERTED = "primers in wrong order"
    UNKNOWN_ALPHABET = "unrecognized alphabet"


@dataclass(frozen=True)
class Region:
    """A cropped region; start is inclusive, end exclusive (0-based)."""
    record_id: str
    label: str
    start: int
    end: int
    forward: str
    reverse: str
    sequence: str

    @property
    def attributes(self) -> str:
        primers = f"forward={self.forward} reverse={self.reverse}"
        return f"region={self.label} {primers}" if self.label else primers

    def to_gff(self) -> str:
        note = f"Hypervariable region {self.label}" if self.label else "Hypervariable region"
        return (
            f"{self.record_id}\thyperex\tregion\t{self.start}\t{self.end}"
            f"\t.\t.\t.\tNote={note}\n"
        )


@dataclass(frozen=True)
class PairOutcome:
    record_id: str
    pair: PrimerPair
    status: OutcomeStatus
    region: Optional[Region] = None
    forward_hit: Optional[Match] = None
    reverse_hit: Optional[Match] = None

    @property
    def found(self) -> bool:
        return self.status is OutcomeStatus.FOUND

    def found_region(self) -> Region:
        """The extracted region of a FOUND outcome."""
        if not self.found or self.region is None:
            raise RuntimeError(f"No region extracted for {self.record_id} ({self.status.value})")
        return self.region


def describe(outcome: PairOutcome) -> str:
    """Log message for an outcome, naming the record, region and primers involved."""
    pair = outcome.pair
    where = f"Region {pair.region or '(unnamed)'} in {outcome.record_id}"
    status = outcome.status
    if status is OutcomeStatus.FOUND:
        region = outcome.found_region()
        return f"{where} found at {region.start}-{region.end}"
    if status is OutcomeStatus.FORWARD_MISSING:
        return f"{where} not found because primer {pair.forward} was not found in the sequence"
    if status is OutcomeStatus.REVERSE_MISSING:
        return f"{where} not found because primer {pair.reverse} was not found in the sequence"
    if status is OutcomeStatus.BOTH_MISSING:
        return (f"{where} not found because primers {pair.forward}, {pair.reverse} "
                f"were not found in the sequence")
    if status is OutcomeStatus.INVERTED:
        return (f"{where} not extracted because reverse primer {pair.reverse} "
                f"binds upstream of forward primer {pair.forward}")
    return (f"{where} skipped: sequence type is not recognized as DNA or RNA "
            f"(primers {pair.forward}, {pair.reverse})")


class RegionExtractor:
    """
    Matches a fixed set of primer pairs against sequence records.

    Forward matchers are built up front; reverse-complement matchers are built
    per alphabet the first time a DNA or RNA record needs them.
    """

    def __init__(self, pairs: Sequence[PrimerPair], max_mismatch: int = 0) -> None:
        if max_mismatch < 0:
            raise ValueError(f"max_mismatch must be >= 0, got {max_mismatch}")
        self.pairs: Tuple[PrimerPair, ...] = tuple(pairs)
        self.max_mismatch = max_mismatch
        self._forward = [MyersMatcher(p.forward.sequence) for p in self.pairs]
        self._reverse: Dict[Tuple[int, Alphabet], MyersMatcher] = {}
        # Fail on over-long reverse primers now, not on the first record.
        for pair in self.pairs:
            MyersMatcher(pair.reverse.sequence)

    def _reverse_matcher(self, index: int, alphabet: Alphabet) -> MyersMatcher:
        key = (index, alphabet)
        matcher = self._reverse.get(key)
        if matcher is None:
            pattern = reverse_complement(self.pairs[index].reverse.sequence, alphabet)
            matcher = self._reverse[key] = MyersMatcher(pattern)
        return matcher

    @staticmethod
    def is_short(record: SequenceRecord) -> bool:
        return len(record.sequence) <= MIN_EXPECTED_LENGTH

    def extract(self, record: SequenceRecord) -> List[PairOutcome]:
        alphabet = classify_alphabet(record.sequence)
        if alphabet is None:
            return [PairOutcome(record.id, pair, OutcomeStatus.UNKNOWN_ALPHABET) for pair in self.pairs]
        return [self._extract_pair(record, i, alphabet) for i in range(len(self.pairs))]

    def _extract_pair(self, record: SequenceRecord, index: int, alphabet: Alphabet) -> PairOutcome:
        pair = self.pairs[index]
        seq = record.sequence
        fwd = self._forward[index].best_hit(seq, self.max_mismatch)
        rev = self._reverse_matcher(index, alphabet).best_hit(seq, self.max_mismatch)

        if fwd is None and rev is None:
            status = OutcomeStatus.BOTH_MISSING
        elif fwd is None:
            status = OutcomeStatus.FORWARD_MISSING
        elif rev is None:
            status = OutcomeStatus.REVERSE_MISSING
        else:
            start = fwd.start if fwd.start is not None else fwd.end - len(pair.forward) + 1
            rev_start = rev.start if rev.start is not None else rev.end - len(pair.reverse) + 1
            start = max(start, 0)
            end = min(rev_start + len(pair.reverse), len(seq))
            if end <= start:
                status = OutcomeStatus.INVERTED
            else:
                region = Region(
                    record_id=record.id,
                    label=pair.region,
                    start=start,
                    end=end,
                    forward=pair.forward.sequence,
                    reverse=pair.reverse.sequence,
                    sequence=seq[start:end],
                )
                return PairOutcome(record.id, pair, OutcomeStatus.FOUND, region, fwd, rev)
        return PairOutcome(record.id, pair, status, None, fwd, rev)


def extract_records(
    extractor: RegionExtractor,
    records: Sequence[SequenceRecord],
) -> List[List[PairOutcome]]:
    """Worker for multiprocessing: outcomes for a batch of records, in order."""
    return [extractor.extract(record) for record in records]


def _batched(records: Iterable[SequenceRecord], size: int) -> Iterator[List[SequenceRecord]]:
    it = iter(records)
    while True:
        batch = list(islice(it, size))
        if not batch:
            return
        yield batch


def _outcomes(
    extractor: RegionExtractor,
    records: Iterable[SequenceRecord],
    threads: int,
) -> Iterator[Tuple[SequenceRecord, List[PairOutcome]]]:
    if threads <= 1:
        for record in records:
            yield record, extractor.extract(record)
        return
    batches = _batched(records, _BATCH_SIZE)
    pending: Deque[Tuple[List[SequenceRecord], Future]] = deque()
    with ProcessPoolExecutor(max_workers=threads) as ex:
        # At most threads * _IN_FLIGHT batches are read ahead of the consumer;
        # futures are drained oldest first so output order is stable.
        for batch in islice(batches, threads * _IN_FLIGHT):
            pending.append((batch, ex.submit(extract_records, extractor, batch)))
        while pending:
            batch, future = pending.popleft()
            yield from zip(batch, future.result())
            for batch in islice(batches, 1):
                pending.append((batch, ex.submit(extract_records, extractor, batch)))


def run_extraction(
    records: Iterable[SequenceRecord],
    extractor: RegionExtractor,
    writer: RegionWriter,
    *,
    threads: int = 1,
    progress=None,
    task=None,
) -> Counter:
    """
    Extract every configured region from every record and write the found
    regions. Returns a Counter keyed by (region label, OutcomeStatus).

    Misses are logged and counted; they never stop the run.
    """
    tally: Counter = Counter()
    n_records = 0
    for record, outcomes in _outcomes(extractor, records, threads):
        n_records += 1
        if extractor.is_short(record):
            logger.warning(
                "Sequence %s is %d bp (<= %d bp); some regions may not be found",
                record.id, len(record.sequence), MIN_EXPECTED_LENGTH,
            )
        for outcome in outcomes:
            tally[(outcome.pair.display_name, outcome.status)] += 1
            if outcome.found:
                writer.write(outcome.found_region())
                logger.debug(describe(outcome))
            elif outcome.status is OutcomeStatus.UNKNOWN_ALPHABET:
                logger.error(describe(outcome))
            else:
                logger.warning(describe(outcome))
        if progress is not None and task is not None:
            progress.update(task, advance=1)
    logger.info("Processed %d record(s), wrote %d region(s)", n_records, writer.written)
    return tally
