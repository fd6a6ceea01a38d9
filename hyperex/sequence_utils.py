"""
hyperex/sequence_utils.py

Nucleotide alphabet helpers: DNA/RNA classification, IUPAC-aware complement
and reverse complement, and the ambiguity classes used by the matcher.
"""
from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import FrozenSet, Mapping, Optional, Union

from Bio.Data import IUPACData

__all__ = [
    "Alphabet",
    "DNA_IUPAC",
    "RNA_IUPAC",
    "AMBIGUITY_CLASSES",
    "classify_alphabet",
    "complement",
    "reverse_complement",
    "symbols_match",
]

DNA_IUPAC = "ACGTRYSWKMBDHVN"
RNA_IUPAC = "ACGURYSWKMBDHVN"


class Alphabet(Enum):
    """Nucleotide alphabet of a sequence record."""
    DNA = "dna"
    RNA = "rna"

    def __str__(self) -> str:
        return self.value


def classify_alphabet(sequence: str) -> Optional[Alphabet]:
    """
    Return Alphabet.DNA when every symbol is a DNA IUPAC code, Alphabet.RNA when
    every symbol is an RNA IUPAC code, and None when the sequence fits neither.
    DNA wins for sequences that fit both (no T and no U).
    """
    symbols = set(sequence.upper())
    if symbols.issubset(DNA_IUPAC):
        return Alphabet.DNA
    if symbols.issubset(RNA_IUPAC):
        return Alphabet.RNA
    return None


# Pairs shared by both alphabets. S, W and N are their own complement.
_SHARED_COMPLEMENT = {
    "C": "G", "G": "C",
    "R": "Y", "Y": "R",
    "K": "M", "M": "K",
    "B": "V", "V": "B",
    "D": "H", "H": "D",
    "S": "S", "W": "W", "N": "N",
}


def _complement_table(a_partner: str) -> Mapping[int, str]:
    pairs = dict(_SHARED_COMPLEMENT, A=a_partner, **{a_partner: "A"})
    pairs.update({k.lower(): v.lower() for k, v in list(pairs.items())})
    return MappingProxyType(str.maketrans(pairs))


_COMPLEMENT_TABLES = MappingProxyType({
    Alphabet.DNA: _complement_table("T"),
    Alphabet.RNA: _complement_table("U"),
})


def _coerce_alphabet(alphabet: Union[Alphabet, str]) -> Alphabet:
    if isinstance(alphabet, Alphabet):
        return alphabet
    if isinstance(alphabet, str):
        try:
            return Alphabet(alphabet.lower())
        except ValueError:
            raise ValueError(f"unknown alphabet {alphabet!r}; expected 'dna' or 'rna'") from None
    raise TypeError(f"alphabet must be an Alphabet or 'dna'/'rna', not {alphabet!r}")


def complement(seq: str, alphabet: Union[Alphabet, str]) -> str:
    """
    Complement a sequence symbol by symbol, including IUPAC ambiguity codes.

    A pairs with T for DNA and with U for RNA. Symbols outside the table are
    returned unchanged. The alphabet is required; None raises TypeError.
    """
    return seq.translate(_COMPLEMENT_TABLES[_coerce_alphabet(alphabet)])


def reverse_complement(seq: str, alphabet: Union[Alphabet, str]) -> str:
    """Return the reverse complement of a DNA or RNA sequence (IUPAC aware)."""
    return complement(seq, alphabet)[::-1]


def _build_ambiguity_classes() -> Mapping[str, FrozenSet[str]]:
    # Biopython keeps separate DNA and RNA tables; merging them lets an
    # ambiguity code stand for T in DNA text and U in RNA text.
    classes = {}
    for symbol in sorted(set(DNA_IUPAC) | set(RNA_IUPAC)):
        bases = set(IUPACData.ambiguous_dna_values.get(symbol, ""))
        bases |= set(IUPACData.ambiguous_rna_values.get(symbol, ""))
        if symbol in "TU":
            bases = {symbol}
        classes[symbol] = frozenset(bases)
    return MappingProxyType(classes)


AMBIGUITY_CLASSES: Mapping[str, FrozenSet[str]] = _build_ambiguity_classes()


def symbols_match(
    pattern_symbol: str,
    text_symbol: str,
    classes: Mapping[str, FrozenSet[str]] = AMBIGUITY_CLASSES,
) -> bool:
    """
    True if a pattern symbol and a text symbol are equal under IUPAC ambiguity.

    Identical symbols always match. Otherwise one symbol's base set has to
    contain the other's: N matches every code, V matches A, C, G, M, R and S,
    but M and R do not match each other.
    """
    p = pattern_symbol.upper()
    t = text_symbol.upper()
    if p == t:
        return True
    p_bases = classes.get(p)
    t_bases = classes.get(t)
    if not p_bases or not t_bases:
        return False
    return t_bases <= p_bases or p_bases <= t_bases
