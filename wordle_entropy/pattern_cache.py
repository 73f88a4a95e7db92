"""
Pattern Cache
=============

Precomputed guess x answer matrix of pattern ids (one byte each).

Row i holds the patterns of ``guesses[i]`` against every answer, in
``answers`` order. Both lists are persisted with the matrix so the
guess -> row and answer -> column maps are rebuilt exactly as they were
written.

File layout (little-endian)::

    int32  guessCount
    int32  answerCount
    [guessCount]  length-prefixed UTF-8 string
    [answerCount] length-prefixed UTF-8 string
    [guessCount]  byte[answerCount]

A 13k x 13k matrix is ~170MB and builds in seconds with the parallel kernel.
"""

import logging
import os
import time
import numpy as np
from numba import jit, prange
from typing import Dict, Iterable, List, Optional, Tuple

from .binary import BinaryReader, BinaryWriter
from .exceptions import CorruptCacheError, EmptyCorpusError
from .patterns import (
    N_PATTERNS, compute_feedback, filter_by_pattern, get_pattern,
)
from .words import normalize_word, words_to_chars


log = logging.getLogger(__name__)


# ============================================================================
# CONSTANTS
# ============================================================================

CACHE_FILENAME = "pattern_cache.bytes"
INVALID_ENTROPY = -1.0  # returned when a guess is not in the cache


# ============================================================================
# NUMBA KERNELS
# ============================================================================

@jit(nopython=True, parallel=True, cache=True)
def compute_feedback_matrix(guess_chars: np.ndarray, answer_chars: np.ndarray) -> np.ndarray:
    """
    Compute feedback for all guess/answer pairs in parallel.

    Args:
        guess_chars: shape (n_guesses, 5) array of char codes
        answer_chars: shape (n_answers, 5) array of char codes

    Returns:
        shape (n_guesses, n_answers) feedback matrix
    """
    n_guesses = guess_chars.shape[0]
    n_answers = answer_chars.shape[0]
    result = np.zeros((n_guesses, n_answers), dtype=np.uint8)

    for i in prange(n_guesses):
        for j in range(n_answers):
            result[i, j] = compute_feedback(guess_chars[i], answer_chars[j])

    return result


@jit(nopython=True, cache=True)
def entropy_from_buckets(buckets: np.ndarray, total: float) -> float:
    """H = sum(p * log2(1/p)) over non-empty buckets, p = bucket / total."""
    if total <= 0.0:
        return 0.0
    h = 0.0
    for i in range(N_PATTERNS):
        if buckets[i] > 0.0:
            p = buckets[i] / total
            h += p * np.log2(1.0 / p)
    return h


@jit(nopython=True, cache=True)
def row_entropy(feedback_row: np.ndarray, candidates: np.ndarray,
                weights: np.ndarray, total: float) -> float:
    """Entropy of one guess row; the 243 buckets are local to the call."""
    buckets = np.zeros(N_PATTERNS, dtype=np.float64)
    for j in range(candidates.shape[0]):
        buckets[feedback_row[candidates[j]]] += weights[j]
    return entropy_from_buckets(buckets, total)


@jit(nopython=True, parallel=True, cache=True)
def entropy_sweep(feedback_matrix: np.ndarray, guess_rows: np.ndarray,
                  candidates: np.ndarray, weights: np.ndarray, total: float) -> np.ndarray:
    """
    Entropy of every guess row over the same candidate columns.

    Each iteration owns its bucket array and output slot.
    Uniform entropy: weights all 1.0, total = number of candidates.
    Weighted entropy: normalized weights, total = 1.0.
    """
    n = guess_rows.shape[0]
    out = np.zeros(n, dtype=np.float64)

    for k in prange(n):
        out[k] = row_entropy(feedback_matrix[guess_rows[k]], candidates, weights, total)

    return out


# ============================================================================
# PATTERN CACHE
# ============================================================================

def _index(words: List[str]) -> Dict[str, int]:
    index = {}
    for i, w in enumerate(words):
        if w in index:
            raise ValueError(f"Duplicate word in cache vocabulary: '{w}'")
        index[w] = i
    return index


class PatternCache:
    """
    Read-only lookup table of pattern ids.

    Built once (``build``) or loaded (``load`` / ``from_bytes``); never
    mutated afterwards, so it can be shared by any number of sessions.
    """

    def __init__(self, guesses: List[str] = None, answers: List[str] = None,
                 matrix: np.ndarray = None):
        self.guesses = list(guesses or [])
        self.answers = list(answers or [])
        self.guess_to_idx = _index(self.guesses)
        self.answer_to_idx = _index(self.answers)

        shape = (len(self.guesses), len(self.answers))
        if matrix is None:
            matrix = np.zeros(shape, dtype=np.uint8)
        if matrix.shape != shape:
            raise ValueError(f"Matrix shape {matrix.shape} does not match word lists {shape}")
        self.feedback_matrix = np.ascontiguousarray(matrix, dtype=np.uint8)

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def build(cls, guesses: Iterable[str], answers: Iterable[str]) -> 'PatternCache':
        """Compute the full matrix; rows are computed in parallel across guesses."""
        guesses = [normalize_word(w) for w in guesses]
        answers = [normalize_word(w) for w in answers]
        if not guesses or not answers:
            raise EmptyCorpusError("Word lists are empty, cannot precompute pattern cache")

        n_pairs = len(guesses) * len(answers)
        log.info(f"Precomputing feedback matrix ({len(guesses)} guesses × {len(answers)} answers "
                 f"= {n_pairs:,} patterns)...")
        start = time.time()
        matrix = compute_feedback_matrix(words_to_chars(guesses), words_to_chars(answers))
        elapsed = time.time() - start
        log.info(f"Pattern cache computed in {elapsed:.2f}s")

        return cls(guesses, answers, matrix)

    def to_bytes(self) -> bytes:
        writer = BinaryWriter()
        writer.write_int32(len(self.guesses))
        writer.write_int32(len(self.answers))
        for guess in self.guesses:
            writer.write_string(guess)
        for answer in self.answers:
            writer.write_string(answer)
        writer.write_bytes(self.feedback_matrix.tobytes())
        return writer.getvalue()

    @classmethod
    def from_bytes(cls, data) -> 'PatternCache':
        """
        Parse a serialized cache.

        Raises:
            CorruptCacheError: if the data is truncated or inconsistent.
        """
        reader = BinaryReader(data)
        guess_count = reader.read_int32()
        answer_count = reader.read_int32()
        if guess_count < 0 or answer_count < 0:
            raise CorruptCacheError(f"Negative header counts: {guess_count}, {answer_count}")

        guesses = [reader.read_string() for _ in range(guess_count)]
        answers = [reader.read_string() for _ in range(answer_count)]

        raw = reader.read_bytes(guess_count * answer_count)
        if reader.remaining:
            raise CorruptCacheError(f"{reader.remaining} trailing bytes after pattern matrix")

        matrix = np.frombuffer(raw, dtype=np.uint8).reshape(guess_count, answer_count).copy()
        if matrix.size and int(matrix.max()) >= N_PATTERNS:
            raise CorruptCacheError("Pattern id out of range in matrix")

        try:
            return cls(guesses, answers, matrix)
        except ValueError as e:
            raise CorruptCacheError(str(e)) from e

    def save(self, path: str = CACHE_FILENAME):
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        start = time.time()
        with open(path, 'wb') as f:
            f.write(self.to_bytes())
        size_mb = os.path.getsize(path) / 1024 / 1024
        log.info(f"Pattern cache saved in {time.time() - start:.2f}s ({size_mb:.1f}MB at {path})")

    @classmethod
    def load(cls, path: str = CACHE_FILENAME) -> Optional['PatternCache']:
        """
        Load a cache file.

        Returns None (and logs a warning) when the file is missing or corrupt;
        callers fall back to live pattern computation.
        """
        if not os.path.exists(path):
            log.warning(f"Pattern cache file not found at: {path}")
            return None

        start = time.time()
        try:
            with open(path, 'rb') as f:
                cache = cls.from_bytes(f.read())
        except (OSError, CorruptCacheError) as e:
            log.warning(f"Failed to load pattern cache from {path}: {e}")
            return None

        log.info(f"Pattern cache loaded in {time.time() - start:.2f}s "
                 f"({len(cache.guesses)} guesses × {len(cache.answers)} answers)")
        return cache

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def is_initialized(self) -> bool:
        return len(self.guesses) > 0 and len(self.answers) > 0

    def covers(self, guesses: Iterable[str], answers: Iterable[str]) -> bool:
        """True if every guess has a row and every answer has a column."""
        return (all(g in self.guess_to_idx for g in guesses)
                and all(a in self.answer_to_idx for a in answers))

    def row(self, guess: str) -> Optional[np.ndarray]:
        """Byte array of patterns for ``guess``, indexed by answer position."""
        gi = self.guess_to_idx.get(guess)
        if gi is None:
            return None
        return self.feedback_matrix[gi]

    def lookup(self, guess: str, answer: str) -> int:
        """Pattern id for the pair; computed live (with a warning) on a miss."""
        gi = self.guess_to_idx.get(guess)
        ai = self.answer_to_idx.get(answer)
        if gi is None or ai is None:
            log.warning(f"Pattern cache miss for {guess}/{answer}, computing live")
            return get_pattern(guess, answer)
        return int(self.feedback_matrix[gi, ai])

    def _candidate_arrays(self, candidates: Iterable[str],
                          weights: Optional[Dict[str, float]]) -> Tuple[np.ndarray, np.ndarray, float]:
        """Column indices and weights of cached candidates, plus the bucket total."""
        idx = []
        w = []
        for word in candidates:
            i = self.answer_to_idx.get(word)
            if i is None:
                continue
            idx.append(i)
            w.append(1.0 if weights is None else weights.get(word, 0.0))
        idx = np.array(idx, dtype=np.int64)
        w = np.array(w, dtype=np.float64)
        total = float(len(idx)) if weights is None else 1.0
        return idx, w, total

    def entropy(self, guess: str, candidates: Iterable[str],
                weights: Optional[Dict[str, float]] = None) -> float:
        """
        Expected information (bits) of ``guess`` over ``candidates``.

        Args:
            guess: the probe word
            candidates: remaining possible answers; words missing from the
                cache columns are skipped
            weights: optional normalized probability per candidate; uniform
                counts are used when omitted

        Returns:
            Entropy in bits, or INVALID_ENTROPY if the guess has no row.
        """
        gi = self.guess_to_idx.get(guess)
        if gi is None:
            log.warning(f"Pattern cache miss for guess: {guess}")
            return INVALID_ENTROPY

        idx, w, total = self._candidate_arrays(candidates, weights)
        return float(row_entropy(self.feedback_matrix[gi], idx, w, total))

    def entropies(self, guesses: List[str], candidates: Iterable[str],
                  weights: Optional[Dict[str, float]] = None) -> np.ndarray:
        """
        Entropy of every guess, computed in parallel.

        Guesses without a row get INVALID_ENTROPY.
        """
        rows = np.array([self.guess_to_idx.get(g, -1) for g in guesses], dtype=np.int64)
        out = np.full(len(guesses), INVALID_ENTROPY, dtype=np.float64)
        present = rows >= 0
        if not present.any():
            return out

        idx, w, total = self._candidate_arrays(candidates, weights)
        out[present] = entropy_sweep(self.feedback_matrix, rows[present], idx, w, total)
        return out

    def filter(self, guess: str, pattern_id: int, candidates: List[str]) -> List[str]:
        """Candidates whose pattern against ``guess`` equals ``pattern_id``."""
        feedback_row = self.row(guess)
        if feedback_row is None:
            log.warning(f"Pattern cache miss for guess: {guess}, filtering live")
            return filter_by_pattern(candidates, guess, pattern_id)

        result = []
        for word in candidates:
            ai = self.answer_to_idx.get(word)
            code = feedback_row[ai] if ai is not None else get_pattern(guess, word)
            if code == pattern_id:
                result.append(word)
        return result
