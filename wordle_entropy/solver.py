"""
Entropy Solver
==============

One solver session per game. Every turn it scores each word of the guess
vocabulary by the expected information (Shannon entropy, in bits) of the
feedback it would produce over the remaining candidates, weighted by the
frequency prior renormalized to those candidates, and proposes the best one.

The guess vocabulary can be larger than the candidate set: any valid word
is a legal probe even if it cannot be the answer.

Session life cycle: active until a single candidate remains or a winning
pattern is observed, then resolved. Candidates only ever shrink.
"""

import logging
import math
import numpy as np
from typing import Dict, List, Optional, Tuple

from .exceptions import EmptyCorpusError, SessionResolvedError
from .frequency import WordFrequencyModel
from .initial_guesses import InitialGuessesCache
from .pattern_cache import PatternCache
from .patterns import CORRECT_PATTERN, Pattern
from .sources import select_pattern_source
from .words import normalize_word, normalize_words


log = logging.getLogger(__name__)


def information_gained(candidates_before: int, candidates_after: int) -> float:
    """Bits actually gained by a guess: log2(before) - log2(after)."""
    if candidates_before <= 0 or candidates_after <= 0:
        raise ValueError(f"Candidate counts must be positive: {candidates_before} -> {candidates_after}")
    return math.log2(candidates_before) - math.log2(candidates_after)


class WordleSolver:
    """
    Entropy-maximizing solver session.

    The cache, prior and memo are shared, read-only collaborators; the
    candidate set and distribution belong to this session alone.
    """

    def __init__(self, answers: List[str], guesses: List[str] = None,
                 cache: Optional[PatternCache] = None,
                 frequency_model: Optional[WordFrequencyModel] = None,
                 initial_guesses: Optional[InitialGuessesCache] = None,
                 source=None):
        """
        Initialize solver with word lists.

        Args:
            answers: Words that can be the answer (the initial candidate set)
            guesses: Words that may be guessed (if None, uses answers)
            cache: Precomputed pattern cache; live evaluation is used if it
                is missing or does not cover both lists
            frequency_model: Prior used to weight candidates; uniform if None
            initial_guesses: Memo of first-turn entropies
            source: Explicit pattern source, overrides ``cache``
        """
        self.answers = normalize_words(answers)
        self.guesses = normalize_words(guesses or answers)
        if not self.answers or not self.guesses:
            raise EmptyCorpusError("Solver needs non-empty answer and guess lists")

        self.source = source or select_pattern_source(cache, self.guesses, self.answers)
        self.frequency_model = frequency_model
        self.initial_guesses = initial_guesses

        self.reset()

    def reset(self):
        """Start a new game over the full answer corpus."""
        self.candidates: List[str] = list(self.answers)
        self.history: List[Pattern] = []
        self.won = False
        self.word_entropies: Dict[str, float] = {}
        self._renormalize()

    def _renormalize(self):
        """Restrict the prior to the candidates; uniform when there is no usable prior."""
        self.weighted = False
        if self.frequency_model is not None:
            distribution = self.frequency_model.normalized_probabilities(self.candidates)
            if distribution:
                self.probabilities = distribution
                self.weighted = True
                return
            log.debug("Candidates carry no prior mass, using uniform weights")

        n = len(self.candidates)
        self.probabilities = {w: 1.0 / n for w in self.candidates} if n else {}

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def turn(self) -> int:
        return len(self.history)

    def remaining_count(self) -> int:
        return len(self.candidates)

    def is_initial_state(self) -> bool:
        """True until the first feedback is processed."""
        return not self.history

    def is_resolved(self) -> bool:
        return self.won or len(self.candidates) <= 1

    # ------------------------------------------------------------------
    # Guess selection
    # ------------------------------------------------------------------

    def compute_entropies(self) -> Dict[str, float]:
        """Expected entropy of every guess over the current candidates."""
        weights = self.probabilities if self.weighted else None
        entropies = self.source.entropies(self.guesses, self.candidates, weights)
        return dict(zip(self.guesses, entropies.tolist()))

    def best_guess(self) -> str:
        """
        Word with the highest expected entropy.

        Uses the initial-guess memo on the first turn when it is loaded.
        Ties go to the first word in guess-list order.
        """
        if self.won:
            return self.history[-1].guess

        if (self.is_initial_state() and self.initial_guesses is not None
                and self.initial_guesses.is_loaded()):
            self.word_entropies = self.initial_guesses.as_distribution()
            return self.initial_guesses.best_guess()

        if not self.candidates:
            raise ValueError("No candidates remaining")

        if len(self.candidates) == 1:
            self.word_entropies = {self.candidates[0]: 0.0}
            return self.candidates[0]

        weights = self.probabilities if self.weighted else None
        entropies = self.source.entropies(self.guesses, self.candidates, weights)
        self.word_entropies = dict(zip(self.guesses, entropies.tolist()))

        best = self.guesses[int(np.argmax(entropies))]
        log.debug(f"Turn {self.turn + 1}: best guess {best} "
                  f"({entropies.max():.4f} bits, {len(self.candidates)} candidates)")
        return best

    def guess_entropy(self, guess: str) -> float:
        """Expected entropy of one guess over the current candidates."""
        weights = self.probabilities if self.weighted else None
        return self.source.entropy(normalize_word(guess), self.candidates, weights)

    def top_guesses(self, n: int = 10) -> List[Tuple[str, float]]:
        """Highest-entropy guesses from the last computed entropy map."""
        ranked = sorted(self.word_entropies.items(), key=lambda kv: kv[1], reverse=True)
        return ranked[:n]

    # ------------------------------------------------------------------
    # Feedback
    # ------------------------------------------------------------------

    def process_feedback(self, guess: str, pattern) -> int:
        """
        Keep only candidates that would have produced ``pattern`` for ``guess``.

        Args:
            guess: the word that was played
            pattern: a ``Pattern`` or a raw pattern id

        Returns:
            Number of remaining candidates
        """
        if self.won:
            raise SessionResolvedError("Session already solved, start a new one")

        guess = normalize_word(guess)
        pattern_id = pattern.pattern_id if isinstance(pattern, Pattern) else int(pattern)

        self.candidates = self.source.filter(guess, pattern_id, self.candidates)
        self.history.append(Pattern.from_id(guess, pattern_id))
        self.won = pattern_id == CORRECT_PATTERN

        self._renormalize()
        self.word_entropies = {}

        if not self.candidates:
            log.warning(f"No candidates remain after {guess} {self.history[-1]}; "
                        f"the answer is not in the answer list")
        return len(self.candidates)
