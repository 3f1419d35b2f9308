"""Text analysis: turning free text into a sequence of normalized terms.

The classifier only depends on the :class:`Analyzer` contract (text in,
ordered term sequence out). :class:`StandardAnalyzer` is the default
implementation: Unicode normalization, lowercase word tokens, English
stopword removal. No stemming is performed; plug in another analyzer for
that.
"""

from __future__ import annotations

import re
import unicodedata
from typing import Protocol, runtime_checkable

STOP_WORDS: frozenset[str] = frozenset({
    "a", "an", "the", "and", "or", "but", "in", "on", "at", "to", "for",
    "of", "with", "by", "from", "as", "is", "was", "are", "were", "be",
    "been", "being", "have", "has", "had", "do", "does", "did", "will",
    "would", "could", "should", "may", "might", "shall", "can", "must",
    "not", "no", "nor", "so", "if", "then", "than", "that", "this",
    "these", "those", "it", "its", "he", "she", "they", "them", "their",
    "his", "her", "our", "your", "we", "you", "who", "whom", "which",
    "what", "where", "when", "how", "there", "into", "such",
})


@runtime_checkable
class Analyzer(Protocol):
    """Anything that splits text into normalized terms."""

    def analyze(self, text: str) -> list[str]:
        ...


class StandardAnalyzer:
    """Regex word tokenizer with lowercasing and stopword filtering.

    Example::

        analyzer = StandardAnalyzer()
        analyzer.analyze("The cat sat on the mat")  # ["cat", "sat", "mat"]

    Args:
        stop_words: Terms to discard. Pass an empty set to keep everything.
        min_length: Shortest term kept.
        normalize_unicode: Apply NFKC normalization before tokenizing.
    """

    _WORD_RE = re.compile(r"[^\W_]+(?:['-][^\W_]+)*")

    def __init__(
        self,
        stop_words: frozenset[str] | set[str] = STOP_WORDS,
        min_length: int = 1,
        normalize_unicode: bool = True,
    ) -> None:
        self.stop_words = frozenset(stop_words)
        self.min_length = min_length
        self.normalize_unicode = normalize_unicode

    def analyze(self, text: str) -> list[str]:
        """Return the terms of ``text`` in reading order, duplicates kept."""
        if not text:
            return []
        if self.normalize_unicode:
            text = unicodedata.normalize("NFKC", text)
        terms = [m.group().lower() for m in self._WORD_RE.finditer(text)]
        return [
            t for t in terms
            if len(t) >= self.min_length and t not in self.stop_words
        ]

    def __repr__(self) -> str:
        return (
            f"StandardAnalyzer(stop_words={len(self.stop_words)}, "
            f"min_length={self.min_length})"
        )
