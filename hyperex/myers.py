"""
hyperex/myers.py

Approximate primer search with Myers' bit-vector algorithm (Hyyro's
formulation), generalized to IUPAC ambiguity codes.

Every pattern position is one bit of the DP column, so a pattern of up to 64
symbols is advanced one text symbol per step with a handful of integer
operations. Ambiguity never branches during the scan: the match bitmask for
each possible text symbol (literal or ambiguity code) is computed once when
the matcher is built.

Positions are 0-based. ``Match.end`` is inclusive and ``Match.start`` is the
first text index covered by the alignment.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Dict, FrozenSet, Iterator, Mapping, Optional

from hyperex.exceptions import PatternTooLongError
from hyperex.sequence_utils import AMBIGUITY_CLASSES, symbols_match

__all__ = [
    "MAX_PATTERN_LENGTH",
    "Match",
    "MyersMatcher",
    "search",
]

MAX_PATTERN_LENGTH = 64


@dataclass(frozen=True)
class Match:
    """A hit of a pattern in a text, with its edit distance."""
    end: int
    distance: int
    start: Optional[int] = None

    @property
    def length(self) -> Optional[int]:
        if self.start is None:
            return None
        return self.end - self.start + 1


def _check_distance(max_distance: int) -> None:
    if isinstance(max_distance, bool) or not isinstance(max_distance, int) or max_distance < 0:
        raise ValueError(f"max_distance must be a non-negative integer, got {max_distance!r}")


def _build_peq(pattern: str, classes: Mapping[str, FrozenSet[str]]) -> Dict[str, int]:
    """Map each text symbol to the bitmask of pattern positions it satisfies."""
    alphabet = set(classes) | set(pattern)
    peq: Dict[str, int] = {}
    for text_symbol in alphabet:
        bits = 0
        for i, pattern_symbol in enumerate(pattern):
            if symbols_match(pattern_symbol, text_symbol, classes):
                bits |= 1 << i
        peq[text_symbol] = bits
        peq[text_symbol.lower()] = bits
    return peq


class MyersMatcher:
    """
    Bounded edit-distance search of one (possibly ambiguous) pattern.

    Build once per primer and reuse across records; the instance holds no
    per-scan state.
    """

    def __init__(
        self,
        pattern: str,
        ambiguities: Mapping[str, FrozenSet[str]] = AMBIGUITY_CLASSES,
    ) -> None:
        pattern = pattern.upper()
        if not 0 < len(pattern) <= MAX_PATTERN_LENGTH:
            raise PatternTooLongError(pattern, MAX_PATTERN_LENGTH)
        self.pattern = pattern
        self._mask = (1 << len(pattern)) - 1
        self._last = 1 << (len(pattern) - 1)
        self._peq = _build_peq(pattern, ambiguities)
        # Bitmasks for the reversed pattern, used to recover match starts.
        reversed_peq = {}
        for symbol, bits in self._peq.items():
            rev = 0
            for i in range(len(pattern)):
                if bits >> i & 1:
                    rev |= 1 << (len(pattern) - 1 - i)
            reversed_peq[symbol] = rev
        self._rev_peq = reversed_peq

    def __len__(self) -> int:
        return len(self.pattern)

    def __repr__(self) -> str:
        return f"MyersMatcher({self.pattern!r})"

    def find_all(self, text: str, max_distance: int) -> Iterator[Match]:
        """
        Yield a Match for every end position in ``text`` where the pattern
        aligns with at most ``max_distance`` edits, scanning left to right.
        The start of each alignment is not computed here; see hit_at().
        """
        _check_distance(max_distance)
        mask = self._mask
        last = self._last
        peq = self._peq
        pv = mask
        mv = 0
        score = len(self.pattern)
        for j, symbol in enumerate(text):
            eq = peq.get(symbol, 0)
            xv = eq | mv
            xh = ((((eq & pv) + pv) & mask) ^ pv) | eq
            ph = mv | (~(xh | pv) & mask)
            mh = pv & xh
            if ph & last:
                score += 1
            elif mh & last:
                score -= 1
            # The pattern may start anywhere: no carry into the first row.
            ph = (ph << 1) & mask
            mh = (mh << 1) & mask
            pv = mh | (~(xv | ph) & mask)
            mv = ph & xv
            if score <= max_distance:
                yield Match(j, score)

    def best_hit(self, text: str, max_distance: int) -> Optional[Match]:
        """
        Return the lowest-distance hit with its start recovered, or None.
        Ties go to the earliest end position.
        """
        best: Optional[Match] = None
        for match in self.find_all(text, max_distance):
            if best is None or match.distance < best.distance:
                best = match
                if best.distance == 0:
                    break
        if best is None:
            return None
        located = self.hit_at(text, best.end, best.distance)
        if located is None:
            return best
        return replace(best, start=located.start)

    def hit_at(self, text: str, end: int, max_distance: int) -> Optional[Match]:
        """
        Recover the alignment start for a hit ending at ``end``.

        Runs the reversed pattern backwards from ``end`` over at most
        len(pattern) + max_distance symbols, with the alignment anchored at
        ``end``. Among starts with the lowest distance the one whose span is
        closest to the pattern length wins, then the shorter span.
        """
        _check_distance(max_distance)
        if not 0 <= end < len(text):
            raise IndexError(f"end position {end} outside text of length {len(text)}")
        m = len(self.pattern)
        mask = self._mask
        last = self._last
        peq = self._rev_peq
        pv = mask
        mv = 0
        score = m
        best = None
        best_key = None
        window = min(end + 1, m + max_distance)
        for i in range(window):
            eq = peq.get(text[end - i], 0)
            xv = eq | mv
            xh = ((((eq & pv) + pv) & mask) ^ pv) | eq
            ph = mv | (~(xh | pv) & mask)
            mh = pv & xh
            if ph & last:
                score += 1
            elif mh & last:
                score -= 1
            # Anchored at ``end``: the first row grows by one per symbol.
            ph = ((ph << 1) | 1) & mask
            mh = (mh << 1) & mask
            pv = mh | (~(xv | ph) & mask)
            mv = ph & xv
            if score > max_distance:
                continue
            span = i + 1
            key = (score, abs(span - m), span)
            if best_key is None or key < best_key:
                best_key = key
                best = Match(end, score, end - i)
        return best


def search(pattern: str, text: str, max_distance: int = 0) -> Optional[Match]:
    """Best hit of ``pattern`` in ``text`` (convenience wrapper)."""
    return MyersMatcher(pattern).best_hit(text, max_distance)
