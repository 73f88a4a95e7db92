"""
Word helpers
============

Normalization and validation of 5-letter words, word-list loading, and
conversion to the char-code arrays the numba kernels work on.
"""

import numpy as np
from typing import Iterable, List

from .exceptions import EmptyCorpusError, InvalidGuessError, InvalidWordListError


WORD_LENGTH = 5


def normalize_word(word: str) -> str:
    """Lower-case and strip a word. Words are only compared in this form."""
    return word.strip().lower()


def is_valid_word(word: str) -> bool:
    """True for a normalized 5-letter word over a-z."""
    return (
        isinstance(word, str)
        and len(word) == WORD_LENGTH
        and all('a' <= c <= 'z' for c in word)
    )


def validate_guess(guess: str) -> str:
    """
    Normalize a guess and check it is playable.

    Raises:
        InvalidGuessError: if the guess is empty, not 5 letters, or not a-z.
    """
    if not guess:
        raise InvalidGuessError("Empty guess")
    word = normalize_word(guess)
    if not is_valid_word(word):
        raise InvalidGuessError(f"Invalid guess: '{guess}' (length: {len(word)})")
    return word


def normalize_words(words: Iterable[str]) -> List[str]:
    """Normalize a word list, dropping duplicates but keeping first-seen order."""
    seen = set()
    result = []
    for w in words:
        w = normalize_word(w)
        if w and w not in seen:
            seen.add(w)
            result.append(w)
    return result


def load_words(filepath: str) -> List[str]:
    """Load word list from file (one word per line), keeping file order."""
    try:
        with open(filepath, 'r', encoding='utf-8') as f:
            words = normalize_words(line for line in f if line.strip())
    except UnicodeDecodeError as e:
        raise InvalidWordListError(f"{filepath}: not a UTF-8 word list ({e.reason})") from e
    if not words:
        raise EmptyCorpusError(f"No words loaded from {filepath}")
    bad = [w for w in words if not is_valid_word(w)]
    if bad:
        raise InvalidWordListError(f"{filepath}: {len(bad)} invalid words, e.g. {bad[:5]}")
    return words


def words_to_chars(words: List[str]) -> np.ndarray:
    """Convert words to a (n, 5) char code array (a=0 .. z=25)."""
    arr = np.zeros((len(words), WORD_LENGTH), dtype=np.int32)
    for i, w in enumerate(words):
        if not is_valid_word(w):
            raise ValueError(f"Cannot encode word '{w}'")
        for j, c in enumerate(w):
            arr[i, j] = ord(c) - ord('a')
    return arr
