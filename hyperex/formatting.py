"""
hyperex/formatting.py
"""
from typing import Iterable, List, Mapping, Sequence, Tuple

from tabulate import tabulate

from hyperex.extractor import OutcomeStatus

SUMMARY_HEADERS = [
    "Region",
    "Found",
    "Fwd missing",
    "Rev missing",
    "Both missing",
    "Inverted",
    "Bad alphabet",
]

_STATUS_COLUMNS = (
    OutcomeStatus.FOUND,
    OutcomeStatus.FORWARD_MISSING,
    OutcomeStatus.REVERSE_MISSING,
    OutcomeStatus.BOTH_MISSING,
    OutcomeStatus.INVERTED,
    OutcomeStatus.UNKNOWN_ALPHABET,
)


def format_table(headers: Sequence[str], rows: Iterable[Sequence[object]], style="plain") -> str:
    """
    Render rows as an aligned table.
    - style: "grid" (ASCII box), "plain" (no borders) or any tabulate format
    numbers are right-aligned; text is left-aligned
    """
    fmt = {"plain": "simple", "grid": "grid", "markdown": "github"}.get(style, style)
    return tabulate(list(rows), headers=list(headers), tablefmt=fmt)


def summarize_outcomes(tally: Mapping[Tuple[str, OutcomeStatus], int]) -> List[List[object]]:
    """One row per region with outcome counts, plus a [TOTAL] row."""
    regions = list(dict.fromkeys(region for region, _ in tally))
    rows: List[List[object]] = []
    totals = [0] * len(_STATUS_COLUMNS)
    for region in regions:
        counts = [tally.get((region, status), 0) for status in _STATUS_COLUMNS]
        totals = [a + b for a, b in zip(totals, counts)]
        rows.append([region, *counts])
    if rows:
        rows.append(["[TOTAL]", *totals])
    return rows
