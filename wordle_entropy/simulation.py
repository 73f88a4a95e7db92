"""
Batch simulation
================

Plays one full game per answer in the corpus: a fixed opening guess, then
the solver's choice each turn, up to 6 guesses. Outcomes are collected into
a solve distribution of length 7 (index 0 = failed, 1-6 = solved in N).

Games are independent and run in answer-list order. ``iter_games`` yields
after every game, so a run can be stopped and resumed at game boundaries.
"""

import logging
import time
from typing import Callable, Iterator, List, NamedTuple, Optional, Tuple

from .exceptions import CacheUnavailableError, EmptyCorpusError, InvalidGuessError
from .frequency import WordFrequencyModel
from .pattern_cache import PatternCache
from .patterns import evaluate_guess
from .solver import WordleSolver
from .words import normalize_word, normalize_words, validate_guess


log = logging.getLogger(__name__)


# ============================================================================
# CONSTANTS
# ============================================================================

DEFAULT_FIRST_GUESS = "tares"
MAX_GUESSES = 6
PROGRESS_INTERVAL = 10  # games between progress callbacks


# ============================================================================
# RESULT RECORDS
# ============================================================================

class GameOutcome(NamedTuple):
    answer: str
    guesses: Tuple[str, ...]
    solved: bool
    aborted: bool = False

    @property
    def guess_count(self) -> int:
        return len(self.guesses)


class OptimizationResult(NamedTuple):
    """Statistics of one full batch run with one (midpoint, steepness) pair."""

    midpoint: Optional[float]
    steepness: Optional[float]
    games_completed: int
    total_guesses: int
    wins: int
    losses: int
    solve_distribution: Tuple[int, ...]
    average_guesses: float
    win_rate: float
    execution_time_ms: int
    aborted: int = 0

    def __str__(self) -> str:
        return (f"M={_fmt(self.midpoint, 2)}, S={_fmt(self.steepness, 1)} -> "
                f"Avg={self.average_guesses:.4f}, Win={self.win_rate:.2%}")


def _fmt(value: Optional[float], digits: int) -> str:
    return "-" if value is None else f"{value:.{digits}f}"


class SimulationStats:
    """Running totals for one batch."""

    def __init__(self):
        self.games_completed = 0
        self.total_guesses = 0
        self.wins = 0
        self.losses = 0
        self.aborted = 0
        self.solve_distribution = [0] * (MAX_GUESSES + 1)

    def record(self, outcome: GameOutcome):
        if outcome.aborted:
            self.aborted += 1
            return

        self.games_completed += 1
        self.total_guesses += outcome.guess_count
        if outcome.solved:
            self.wins += 1
            self.solve_distribution[outcome.guess_count] += 1
        else:
            self.losses += 1
            self.solve_distribution[0] += 1

    @property
    def average_guesses(self) -> float:
        return self.total_guesses / self.games_completed if self.games_completed else 0.0

    @property
    def win_rate(self) -> float:
        return self.wins / self.games_completed if self.games_completed else 0.0

    def to_result(self, midpoint: Optional[float], steepness: Optional[float],
                  execution_time_ms: int) -> OptimizationResult:
        return OptimizationResult(
            midpoint=midpoint,
            steepness=steepness,
            games_completed=self.games_completed,
            total_guesses=self.total_guesses,
            wins=self.wins,
            losses=self.losses,
            solve_distribution=tuple(self.solve_distribution),
            average_guesses=self.average_guesses,
            win_rate=self.win_rate,
            execution_time_ms=execution_time_ms,
            aborted=self.aborted,
        )


# ============================================================================
# GAMES
# ============================================================================

def play_game(solver: WordleSolver, answer: str, first_guess: Optional[str] = DEFAULT_FIRST_GUESS,
              max_guesses: int = MAX_GUESSES) -> GameOutcome:
    """
    Play one game against ``answer`` with a fresh session.

    An invalid guess aborts the game (logged); it never raises.
    """
    solver.reset()
    answer = normalize_word(answer)
    guesses: List[str] = []

    for turn in range(max_guesses):
        guess = first_guess if turn == 0 and first_guess else solver.best_guess()

        try:
            guess = validate_guess(guess)
        except InvalidGuessError as e:
            log.error(f"{e} for answer '{answer}'")
            return GameOutcome(answer, tuple(guesses), solved=False, aborted=True)

        guesses.append(guess)
        pattern = evaluate_guess(guess, answer)
        if pattern.is_winning:
            return GameOutcome(answer, tuple(guesses), solved=True)

        if solver.process_feedback(guess, pattern) == 0:
            break

    return GameOutcome(answer, tuple(guesses), solved=False)


class BatchSimulator:
    """
    Runs the solver over every answer with a forced opener.

    The pattern cache is required: without it every game would fall back to
    live pattern evaluation, which is far too slow for full-corpus runs.
    """

    def __init__(self, cache: Optional[PatternCache], answers: List[str],
                 guesses: List[str] = None,
                 frequency_model: Optional[WordFrequencyModel] = None,
                 first_guess: Optional[str] = DEFAULT_FIRST_GUESS,
                 max_guesses: int = MAX_GUESSES):
        if not 1 <= max_guesses <= MAX_GUESSES:
            raise ValueError(f"max_guesses must be between 1 and {MAX_GUESSES}, got {max_guesses}")
        if cache is None or not cache.is_initialized():
            raise CacheUnavailableError(
                "Pattern cache not loaded! Cannot run simulation without cache "
                "(run the 'precompute' command first).")

        self.answers = normalize_words(answers)
        self.guesses = normalize_words(guesses or answers)
        if not self.answers:
            raise EmptyCorpusError("No possible answers to simulate")
        if not cache.covers(self.guesses, self.answers):
            raise CacheUnavailableError(
                "Pattern cache does not cover the simulation word lists; rebuild it")

        self.frequency_model = frequency_model
        self.first_guess = first_guess
        self.max_guesses = max_guesses
        self.solver = WordleSolver(self.answers, self.guesses, cache=cache,
                                   frequency_model=frequency_model)

        self.stats = SimulationStats()
        self.current_index = 0
        self.current_answer: Optional[str] = None

    @property
    def total_games(self) -> int:
        return len(self.answers)

    def progress(self) -> float:
        return self.current_index / self.total_games if self.total_games else 0.0

    def iter_games(self, start: int = 0) -> Iterator[GameOutcome]:
        """Play games from ``start`` on, recording each before yielding it."""
        for i in range(start, self.total_games):
            self.current_index = i
            self.current_answer = self.answers[i]
            outcome = play_game(self.solver, self.current_answer, self.first_guess, self.max_guesses)
            self.stats.record(outcome)
            log.debug(f"Answer: {outcome.answer}, Solved: {outcome.solved}, "
                      f"Guesses: {' -> '.join(outcome.guesses)}")
            self.current_index = i + 1
            yield outcome

    def run(self, progress: Optional[Callable[[int, int, GameOutcome], None]] = None,
            progress_interval: int = PROGRESS_INTERVAL, start: int = 0,
            stats: Optional[SimulationStats] = None) -> OptimizationResult:
        """
        Play the whole corpus and return the aggregated result.

        Args:
            progress: called as ``progress(games_done, total, last_outcome)``
                every ``progress_interval`` games and after the last one
            start: index of the first answer to play (resume point)
            stats: totals from an interrupted run to continue from
        """
        self.stats = stats if stats is not None else SimulationStats()
        started = time.time()

        for outcome in self.iter_games(start):
            done = self.current_index
            if progress is not None and (done % progress_interval == 0 or done == self.total_games):
                progress(done, self.total_games, outcome)

        elapsed_ms = int((time.time() - started) * 1000)
        model = self.frequency_model
        return self.stats.to_result(
            model.midpoint if model is not None else None,
            model.steepness if model is not None else None,
            elapsed_ms,
        )


def print_result(result: OptimizationResult):
    """Pretty print a simulation result."""
    total = result.games_completed
    print("\n" + "=" * 50)
    print("SIMULATION RESULTS")
    print("=" * 50)
    print(f"Games: {total}")
    print(f"Average guesses: {result.average_guesses:.4f}")
    print(f"Wins: {result.wins}, Losses: {result.losses} ({result.win_rate:.2%} win rate)")
    if result.aborted:
        print(f"Aborted games: {result.aborted}")
    print(f"Time: {result.execution_time_ms / 1000:.1f}s")
    print("\nDistribution:")
    for n, count in enumerate(result.solve_distribution):
        pct = 100 * count / total if total else 0.0
        bar = "█" * int(pct / 2)
        label = "X" if n == 0 else str(n)
        print(f"  {label}: {count:5d} ({pct:5.2f}%) {bar}")
    print("=" * 50)
