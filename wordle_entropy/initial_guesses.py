"""
Initial-guess memo
==================

The first-turn entropy sweep is the same for every game played with the same
vocabulary, cache and prior, so it is computed once and stored as an ordered
(best first) list of (word, entropy) pairs.

File layout (little-endian)::

    int32  entryCount
    [entryCount]  length-prefixed UTF-8 string, float32 entropy

The file does not record the prior it was computed with. Regenerate it with
``compute_initial_guesses`` whenever the word lists or the sigmoid
parameters change.
"""

import logging
import os
from typing import Dict, List, Optional, Tuple

from .binary import BinaryReader, BinaryWriter
from .exceptions import CorruptCacheError


log = logging.getLogger(__name__)


CACHE_FILENAME = "initial_guesses_cache.bytes"


class InitialGuessesCache:

    def __init__(self, entries: List[Tuple[str, float]] = None):
        self.entries: List[Tuple[str, float]] = list(entries or [])

    @classmethod
    def from_entropies(cls, entropies: Dict[str, float], top_n: Optional[int] = None) -> 'InitialGuessesCache':
        """Rank an entropy map best-first (stable for equal entropies)."""
        ranked = sorted(entropies.items(), key=lambda kv: kv[1], reverse=True)
        if top_n is not None:
            ranked = ranked[:top_n]
        return cls(ranked)

    def is_loaded(self) -> bool:
        return len(self.entries) > 0

    def best_guess(self) -> Optional[str]:
        return self.entries[0][0] if self.entries else None

    def as_distribution(self) -> Dict[str, float]:
        return {word: entropy for word, entropy in self.entries}

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def to_bytes(self) -> bytes:
        writer = BinaryWriter()
        writer.write_int32(len(self.entries))
        for word, entropy in self.entries:
            writer.write_string(word)
            writer.write_float32(entropy)
        return writer.getvalue()

    @classmethod
    def from_bytes(cls, data) -> 'InitialGuessesCache':
        reader = BinaryReader(data)
        count = reader.read_int32()
        if count < 0:
            raise CorruptCacheError(f"Negative entry count: {count}")
        entries = []
        for _ in range(count):
            word = reader.read_string()
            entries.append((word, reader.read_float32()))
        if reader.remaining:
            raise CorruptCacheError(f"{reader.remaining} trailing bytes after memo entries")
        return cls(entries)

    def save(self, path: str = CACHE_FILENAME):
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(path, 'wb') as f:
            f.write(self.to_bytes())
        log.info(f"Initial guesses cache saved: {len(self.entries)} entries to {path}")

    @classmethod
    def load(cls, path: str = CACHE_FILENAME) -> Optional['InitialGuessesCache']:
        """Returns None (with a warning) if the file is missing or corrupt."""
        if not os.path.exists(path):
            log.warning(f"Initial guesses cache not found at: {path}")
            return None
        try:
            with open(path, 'rb') as f:
                memo = cls.from_bytes(f.read())
        except (OSError, CorruptCacheError) as e:
            log.warning(f"Failed to load initial guesses cache from {path}: {e}")
            return None

        log.info(f"Initial guesses cache loaded: {len(memo.entries)} entries, best guess: {memo.best_guess()}")
        return memo


def compute_initial_guesses(solver, top_n: Optional[int] = None) -> InitialGuessesCache:
    """
    Run the first-turn sweep on a fresh session and memoize it.

    The entropies come from the solver's own scoring (prior-weighted when it
    has a frequency model), so the memo matches what the solver would
    compute live.
    """
    solver.reset()
    return InitialGuessesCache.from_entropies(solver.compute_entropies(), top_n)
