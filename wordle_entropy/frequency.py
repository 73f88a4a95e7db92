"""
Frequency prior
===============

Turns a frequency-ranked word list into a probability distribution.

Each word's rank is mapped to x in [0, 1] (0 = most frequent) and weighted
with a sigmoid of the inverted position::

    raw(w) = 1 / (1 + exp(-steepness * ((1 - x) - midpoint)))

Raw weights are normalized to sum to 1 over the full list. Common words
get most of the mass while rare words keep a small, non-zero share.
"""

import logging
import numpy as np
from typing import Dict, Iterable, List

from .exceptions import EmptyCorpusError
from .words import normalize_word


log = logging.getLogger(__name__)


DEFAULT_MIDPOINT = 0.5
DEFAULT_STEEPNESS = 10.0


def sigmoid(z):
    return 1.0 / (1.0 + np.exp(-z))


class WordFrequencyModel:
    """Sigmoid prior over a frequency-sorted vocabulary (most frequent first)."""

    def __init__(self, frequency_sorted_words: List[str],
                 midpoint: float = DEFAULT_MIDPOINT,
                 steepness: float = DEFAULT_STEEPNESS):
        words = [normalize_word(w) for w in frequency_sorted_words]
        if not words:
            raise EmptyCorpusError("Frequency model needs at least one word")

        self.midpoint = float(midpoint)
        self.steepness = float(steepness)
        self.word_probabilities: Dict[str, float] = {}
        self._assign_probabilities(words)

        log.info(f"WordFrequencyModel initialized with {len(words)} words "
                 f"(midpoint={self.midpoint}, steepness={self.steepness}). "
                 f"Normalized probability sum: {self.total_probability():.6f}")

    def _assign_probabilities(self, sorted_words: List[str]):
        n = len(sorted_words)
        if n > 1:
            x = np.arange(n, dtype=np.float64) / (n - 1)
        else:
            x = np.zeros(1, dtype=np.float64)

        inverted_x = 1.0 - x
        raw = sigmoid(self.steepness * (inverted_x - self.midpoint))
        normalized = raw / raw.sum()

        # A word listed twice keeps its best (first) rank
        for word, p in zip(sorted_words, normalized):
            if word not in self.word_probabilities:
                self.word_probabilities[word] = float(p)
        if len(self.word_probabilities) != n:
            total = sum(self.word_probabilities.values())
            for word in self.word_probabilities:
                self.word_probabilities[word] /= total

    def probability(self, word: str) -> float:
        """Prior of ``word``; 0 if it is not in the model."""
        return self.word_probabilities.get(word, 0.0)

    def probabilities(self, words: Iterable[str]) -> Dict[str, float]:
        """Unnormalized prior restricted to ``words`` (unknown words are left out)."""
        return {w: self.word_probabilities[w] for w in words if w in self.word_probabilities}

    def normalized_probabilities(self, words: Iterable[str]) -> Dict[str, float]:
        """
        Prior restricted to ``words`` and rescaled to sum to 1.

        Returns an empty dict when the subset carries no probability mass.
        """
        result = self.probabilities(words)
        total = sum(result.values())
        if total <= 0.0:
            return {}
        return {w: p / total for w, p in result.items()}

    def total_probability(self) -> float:
        return float(sum(self.word_probabilities.values()))

    def diagnostics(self) -> str:
        values = list(self.word_probabilities.values())
        return (
            "WordFrequencyModel Diagnostics:\n"
            f"  Total words: {len(values)}\n"
            f"  Probability sum: {self.total_probability():.6f}\n"
            f"  Min probability: {min(values):.4e}\n"
            f"  Max probability: {max(values):.4e}\n"
            f"  Sigmoid midpoint: {self.midpoint}\n"
            f"  Sigmoid steepness: {self.steepness}"
        )
