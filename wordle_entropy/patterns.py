"""
Pattern Codec
=============

Evaluates a guess against an answer and encodes the feedback as a base-3
integer in [0, 242], position 0 being the least significant digit.

Two implementations live here:
- ``evaluate_guess`` works on strings and returns a ``Pattern``. It is used
  for live (uncached) lookups and anything user facing.
- ``compute_feedback`` is the numba kernel used by the matrix builders. It
  works on char code arrays and returns only the pattern id.
Both follow the Wordle rule for repeated letters: greens are assigned first,
then each remaining guess letter (left to right) takes one unconsumed
occurrence of that letter in the answer, if any.
"""

import numpy as np
from numba import jit
from enum import IntEnum
from typing import List, NamedTuple, Tuple

from .words import WORD_LENGTH


# ============================================================================
# CONSTANTS
# ============================================================================

N_PATTERNS = 243  # 3^5 possible feedback patterns
CORRECT_PATTERN = 242  # 2 + 2*3 + 2*9 + 2*27 + 2*81 = 242 (all green)


class LetterResult(IntEnum):
    ABSENT = 0
    PRESENT = 1
    CORRECT = 2


_TILES = {
    LetterResult.ABSENT: "⬛",
    LetterResult.PRESENT: "\U0001f7e8",
    LetterResult.CORRECT: "\U0001f7e9",
}


# ============================================================================
# PATTERN
# ============================================================================

class Pattern(NamedTuple):
    """Feedback for one guess: per-position results plus the encoded id."""

    guess: str
    results: Tuple[LetterResult, ...]
    pattern_id: int

    @classmethod
    def from_results(cls, guess: str, results) -> 'Pattern':
        results = tuple(LetterResult(r) for r in results)
        if len(results) != WORD_LENGTH:
            raise ValueError(f"Expected {WORD_LENGTH} results, got {len(results)}")
        return cls(guess, results, to_pattern_id(results))

    @classmethod
    def from_id(cls, guess: str, pattern_id: int) -> 'Pattern':
        return cls(guess, from_pattern_id(pattern_id), pattern_id)

    @property
    def is_winning(self) -> bool:
        return self.pattern_id == CORRECT_PATTERN

    def __str__(self) -> str:
        return "".join(_TILES[r] for r in self.results)


def to_pattern_id(results) -> int:
    """Encode per-position results as sum(result[i] * 3^i)."""
    code = 0
    multiplier = 1
    for r in results:
        code += int(r) * multiplier
        multiplier *= 3
    return code


def from_pattern_id(pattern_id: int) -> Tuple[LetterResult, ...]:
    """Inverse of ``to_pattern_id`` by repeated % 3, // 3."""
    if not 0 <= pattern_id < N_PATTERNS:
        raise ValueError(f"Pattern id out of range: {pattern_id}")
    results = []
    remaining = pattern_id
    for _ in range(WORD_LENGTH):
        results.append(LetterResult(remaining % 3))
        remaining //= 3
    return tuple(results)


# ============================================================================
# EVALUATION
# ============================================================================

def evaluate_guess(guess: str, answer: str) -> Pattern:
    """
    Evaluate a guess against the answer.

    Inputs must already be normalized 5-letter words; this function does
    not validate them.
    """
    results = [LetterResult.ABSENT] * WORD_LENGTH
    answer_used = [False] * WORD_LENGTH

    # Greens first
    for i in range(WORD_LENGTH):
        if guess[i] == answer[i]:
            results[i] = LetterResult.CORRECT
            answer_used[i] = True

    # Yellows take the leftmost unconsumed occurrence
    for i in range(WORD_LENGTH):
        if results[i] == LetterResult.CORRECT:
            continue
        for j in range(WORD_LENGTH):
            if not answer_used[j] and guess[i] == answer[j]:
                results[i] = LetterResult.PRESENT
                answer_used[j] = True
                break

    results = tuple(results)
    return Pattern(guess, results, to_pattern_id(results))


def get_pattern(guess: str, answer: str) -> int:
    """Pattern id for a guess/answer pair."""
    return evaluate_guess(guess, answer).pattern_id


def is_winning_pattern(pattern) -> bool:
    """Accepts a ``Pattern`` or a raw pattern id."""
    if isinstance(pattern, Pattern):
        return pattern.is_winning
    return int(pattern) == CORRECT_PATTERN


def pattern_to_string(pattern_id: int) -> str:
    """Debug helper: render a pattern id as tiles."""
    return str(Pattern.from_id("", pattern_id))


def parse_feedback(feedback: str) -> int:
    """
    Parse a typed feedback string into a pattern id.

    Accepts digits ``012`` or letters ``bgy``/``.`` (b or . = absent,
    y = present, g = correct).
    """
    mapping = {'0': 0, 'b': 0, '.': 0, '1': 1, 'y': 1, '2': 2, 'g': 2}
    feedback = feedback.strip().lower()
    if len(feedback) != WORD_LENGTH or any(c not in mapping for c in feedback):
        raise ValueError(f"Invalid feedback string: '{feedback}'")
    return to_pattern_id(mapping[c] for c in feedback)


def filter_by_pattern(words: List[str], guess: str, pattern_id: int) -> List[str]:
    """Words that would produce ``pattern_id`` if they were the answer."""
    return [w for w in words if get_pattern(guess, w) == pattern_id]



# ============================================================================
# NUMBA-ACCELERATED FEEDBACK COMPUTATION
# ============================================================================

@jit(nopython=True, cache=True)
def compute_feedback(guess: np.ndarray, answer: np.ndarray) -> int:
    """
    Compute Wordle feedback for a guess against an answer.

    Args:
        guess: shape (5,) array of char codes (0-25 for a-z)
        answer: shape (5,) array of char codes

    Returns:
        Integer feedback pattern (0-242)
    """
    feedback = np.zeros(5, dtype=np.int32)
    answer_counts = np.zeros(26, dtype=np.int32)

    # Count letters in answer
    for i in range(5):
        answer_counts[answer[i]] += 1

    # First pass: mark greens
    for i in range(5):
        if guess[i] == answer[i]:
            feedback[i] = 2
            answer_counts[guess[i]] -= 1

    # Second pass: mark yellows
    for i in range(5):
        if feedback[i] == 0:
            c = guess[i]
            if answer_counts[c] > 0:
                feedback[i] = 1
                answer_counts[c] -= 1

    return feedback[0] + 3*feedback[1] + 9*feedback[2] + 27*feedback[3] + 81*feedback[4]
