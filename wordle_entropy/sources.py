"""
Pattern sources
===============

The solver asks a pattern source for two things: the candidates consistent
with some feedback, and the entropy of one or many guesses over a candidate
set. Two interchangeable sources exist:

- ``CachedPatternSource`` reads the precomputed matrix.
- ``LivePatternSource`` evaluates patterns on the fly.

``select_pattern_source`` picks one at construction time; a cache that is
missing, empty, or does not cover the vocabulary yields the live source.
"""

import logging
import numpy as np
from collections import Counter
from numba import jit, prange
from typing import Dict, List, Optional

from .pattern_cache import INVALID_ENTROPY, PatternCache, entropy_from_buckets
from .patterns import N_PATTERNS, compute_feedback, filter_by_pattern, get_pattern
from .words import words_to_chars


log = logging.getLogger(__name__)


@jit(nopython=True, parallel=True, cache=True)
def live_entropy_sweep(guess_chars: np.ndarray, candidate_chars: np.ndarray,
                       weights: np.ndarray, total: float) -> np.ndarray:
    """Like ``entropy_sweep`` but computes every pattern instead of reading it."""
    n = guess_chars.shape[0]
    out = np.zeros(n, dtype=np.float64)

    for k in prange(n):
        buckets = np.zeros(N_PATTERNS, dtype=np.float64)
        for j in range(candidate_chars.shape[0]):
            buckets[compute_feedback(guess_chars[k], candidate_chars[j])] += weights[j]
        out[k] = entropy_from_buckets(buckets, total)

    return out


def _weight_array(candidates: List[str], weights: Optional[Dict[str, float]]):
    if weights is None:
        return np.ones(len(candidates), dtype=np.float64), float(len(candidates))
    return np.array([weights.get(w, 0.0) for w in candidates], dtype=np.float64), 1.0


class LivePatternSource:
    """Computes every pattern with the codec. Slow, but needs no cache."""

    cached = False

    def filter(self, guess: str, pattern_id: int, candidates: List[str]) -> List[str]:
        return filter_by_pattern(candidates, guess, pattern_id)

    def entropy(self, guess: str, candidates: List[str],
                weights: Optional[Dict[str, float]] = None) -> float:
        """Single guess entropy from a manually built pattern distribution."""
        if not candidates:
            return 0.0
        mass = Counter()
        for answer in candidates:
            mass[get_pattern(guess, answer)] += 1.0 if weights is None else weights.get(answer, 0.0)

        total = float(len(candidates)) if weights is None else 1.0
        h = 0.0
        for m in mass.values():
            if m > 0.0:
                p = m / total
                h += p * np.log2(1.0 / p)
        return float(h)

    def entropies(self, guesses: List[str], candidates: List[str],
                  weights: Optional[Dict[str, float]] = None) -> np.ndarray:
        if not guesses:
            return np.zeros(0, dtype=np.float64)
        w, total = _weight_array(candidates, weights)
        return live_entropy_sweep(words_to_chars(guesses), words_to_chars(candidates), w, total)


class CachedPatternSource:
    """Reads patterns from a ``PatternCache``; misses fall back to live evaluation."""

    cached = True

    def __init__(self, cache: PatternCache):
        self.cache = cache
        self._live = LivePatternSource()

    def filter(self, guess: str, pattern_id: int, candidates: List[str]) -> List[str]:
        return self.cache.filter(guess, pattern_id, candidates)

    def entropy(self, guess: str, candidates: List[str],
                weights: Optional[Dict[str, float]] = None) -> float:
        h = self.cache.entropy(guess, candidates, weights)
        if h == INVALID_ENTROPY:
            return self._live.entropy(guess, candidates, weights)
        return h

    def entropies(self, guesses: List[str], candidates: List[str],
                  weights: Optional[Dict[str, float]] = None) -> np.ndarray:
        out = self.cache.entropies(guesses, candidates, weights)
        missing = [i for i, h in enumerate(out) if h == INVALID_ENTROPY]
        if missing:
            log.warning(f"{len(missing)} guesses not in pattern cache, computing live")
            out[missing] = self._live.entropies([guesses[i] for i in missing], candidates, weights)
        return out


def select_pattern_source(cache: Optional[PatternCache], guesses: List[str],
                          answers: List[str]):
    """Use the cache when it covers the whole vocabulary, otherwise go live."""
    if cache is None or not cache.is_initialized():
        log.warning("Pattern cache not available. Solver will run slower without precomputed patterns.")
        return LivePatternSource()
    if not cache.covers(guesses, answers):
        log.warning("Pattern cache does not cover the solver vocabulary, using live patterns")
        return LivePatternSource()
    return CachedPatternSource(cache)
