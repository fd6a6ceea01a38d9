"""
hyperex/primers.py

16S rRNA primer catalog: named hypervariable regions, the primer pair that
delimits each one, and the sub-region label of every catalogued primer.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from functools import lru_cache
from types import MappingProxyType
from typing import Iterable, List, Mapping, Optional, Sequence, Tuple

from hyperex.exceptions import ConfigurationError, UnknownRegionError

__all__ = [
    "Primer",
    "PrimerPair",
    "PrimerRegionCatalog",
    "default_catalog",
    "pair_primers",
    "region_pairs",
]

FORWARD_PRIMERS = {
    "27F": "AGAGTTTGATCMTGGCTCAG",
    "341F": "CCTACGGGNGGCWGCAG",
    "515F": "GTGCCAGCMGCCGCGGTAA",
    "515F-Y": "GTGYCAGCMGCCGCGGTAA",
    "799F": "AACMGGATTAGATACCCKG",
    "928F": "TAAAACTYAAAKGAATTGACGGGG",
    "1100F": "YAACGAGCGCAACCC",
}

# 337R carries an inosine (I); it is searched as a literal symbol.
REVERSE_PRIMERS = {
    "337R": "CYIACTGCTGCCTCCCGTAG",
    "534R": "ATTACCGCGGCTGCTGG",
    "805R": "GACTACHVGGGTATCTAATCC",
    "926Rb": "CCGTCAATTYMTTTRAGT",
    "806R": "GGACTACHVGGGTWTCTAAT",
    "909-928R": "CCCCGYCAATTCMTTTRAGT",
    "1193R": "ACGTCATCCCCACCTTCC",
    "1492Rmod": "TACGGYTACCTTGTTAYGACTT",
}

REGION_PRIMERS = {
    "v1v2": ("27F", "337R"),
    "v1v3": ("27F", "534R"),
    "v1v9": ("27F", "1492Rmod"),
    "v3v4": ("341F", "805R"),
    "v3v5": ("341F", "926Rb"),
    "v4": ("515F", "806R"),
    "v4v5": ("515F-Y", "909-928R"),
    "v5v7": ("799F", "1193R"),
    "v6v9": ("928F", "1492Rmod"),
    "v7v9": ("1100F", "1492Rmod"),
}

PRIMER_SUB_REGIONS = {
    "AGAGTTTGATCMTGGCTCAG": "v1",
    "CCTACGGGNGGCWGCAG": "v3",
    "GTGCCAGCMGCCGCGGTAA": "v4",
    "GTGYCAGCMGCCGCGGTAA": "v4",
    "AACMGGATTAGATACCCKG": "v5",
    "TAAAACTYAAAKGAATTGACGGGG": "v6",
    "YAACGAGCGCAACCC": "v7",
    "CYIACTGCTGCCTCCCGTAG": "v2",
    "ATTACCGCGGCTGCTGG": "v3",
    "GACTACHVGGGTATCTAATCC": "v4",
    "CCGTCAATTYMTTTRAGT": "v5",
    "GGACTACHVGGGTWTCTAAT": "v4",
    "CCCCGYCAATTCMTTTRAGT": "v5",
    "ACGTCATCCCCACCTTCC": "v7",
    "TACGGYTACCTTGTTAYGACTT": "v9",
}


@dataclass(frozen=True)
class Primer:
    sequence: str
    name: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "sequence", self.sequence.strip().upper())

    def __len__(self) -> int:
        return len(self.sequence)

    def __str__(self) -> str:
        return self.sequence


@dataclass(frozen=True)
class PrimerPair:
    """Forward and reverse primer with the region label they delimit."""
    forward: Primer
    reverse: Primer
    region: str = field(default="", compare=False)

    @classmethod
    def build(
        cls,
        forward: str,
        reverse: str,
        catalog: Optional["PrimerRegionCatalog"] = None,
    ) -> "PrimerPair":
        catalog = catalog or default_catalog()
        fwd, rev = Primer(forward), Primer(reverse)
        fwd = replace(fwd, name=catalog.primer_name(fwd.sequence))
        rev = replace(rev, name=catalog.primer_name(rev.sequence))
        return cls(fwd, rev, catalog.label_for(fwd.sequence, rev.sequence))

    @property
    def display_name(self) -> str:
        return self.region or f"{self.forward}/{self.reverse}"


class PrimerRegionCatalog:
    """
    Read-only lookup between region names, primer pairs and sub-region labels.

    Args:
        regions: region name -> (forward primer name, reverse primer name)
        sub_regions: primer literal -> sub-region label (e.g. "v4")
        forward_primers: forward primer name -> literal
        reverse_primers: reverse primer name -> literal
    """

    def __init__(
        self,
        regions: Mapping[str, Tuple[str, str]],
        sub_regions: Mapping[str, str],
        forward_primers: Mapping[str, str],
        reverse_primers: Mapping[str, str],
    ) -> None:
        for region, (fwd_name, rev_name) in regions.items():
            if fwd_name not in forward_primers or rev_name not in reverse_primers:
                raise ConfigurationError(
                    f"region {region!r} refers to an unknown primer ({fwd_name}, {rev_name})"
                )
        self._regions = MappingProxyType(dict(regions))
        self._sub_regions = MappingProxyType({k.upper(): v for k, v in sub_regions.items()})
        self._forward = MappingProxyType(dict(forward_primers))
        self._reverse = MappingProxyType(dict(reverse_primers))
        names = {}
        for table in (self._forward, self._reverse):
            for name, literal in table.items():
                names.setdefault(literal.upper(), name)
        self._names = MappingProxyType(names)

    @property
    def regions(self) -> Tuple[str, ...]:
        return tuple(self._regions)

    def __contains__(self, region: object) -> bool:
        return region in self._regions

    def primers_for(self, region: str) -> PrimerPair:
        try:
            fwd_name, rev_name = self._regions[region]
        except KeyError:
            raise UnknownRegionError(region) from None
        forward = Primer(self._forward[fwd_name], fwd_name)
        reverse = Primer(self._reverse[rev_name], rev_name)
        return PrimerPair(forward, reverse, self.label_for(forward.sequence, reverse.sequence))

    def sub_region(self, primer: str) -> str:
        return self._sub_regions.get(primer.upper(), "")

    def label_for(self, forward: str, reverse: str) -> str:
        """
        Region label of a primer pair. Unknown primers contribute nothing; two
        primers with the same sub-region give that label once ("v4", not "v4v4").
        """
        first = self.sub_region(forward)
        second = self.sub_region(reverse)
        if first and first == second:
            return first
        return f"{first}{second}"

    def primer_name(self, primer: str) -> str:
        return self._names.get(primer.upper(), "")


@lru_cache(maxsize=None)
def default_catalog() -> PrimerRegionCatalog:
    """The built-in 16S rRNA catalog; built on first use and shared afterwards."""
    return PrimerRegionCatalog(REGION_PRIMERS, PRIMER_SUB_REGIONS, FORWARD_PRIMERS, REVERSE_PRIMERS)


def pair_primers(
    forwards: Sequence[str],
    reverses: Sequence[str],
    catalog: Optional[PrimerRegionCatalog] = None,
) -> List[PrimerPair]:
    """Pair forward and reverse primers position by position."""
    if len(forwards) != len(reverses):
        raise ConfigurationError(
            f"got {len(forwards)} forward primer(s) but {len(reverses)} reverse primer(s)",
            parameter="reverse_primer",
        )
    return [PrimerPair.build(f, r, catalog) for f, r in zip(forwards, reverses)]


def region_pairs(regions: Iterable[str], catalog: Optional[PrimerRegionCatalog] = None) -> List[PrimerPair]:
    catalog = catalog or default_catalog()
    return [catalog.primers_for(region) for region in regions]
