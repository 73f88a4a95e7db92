"""
Sigmoid parameter optimizer
===========================

Grid search over the frequency prior's (midpoint, steepness). Every
combination runs a full batch simulation with the same opener; the
combination with the lowest average guess count wins.

Typical use is coarse-to-fine: run the fixed coarse grid, then a fine grid
centred on the best coarse point (``fine_search_from_best``).

Reports (written after the grid completes):
- ``sigmoid_optimization_<type>_<timestamp>.txt``: summary, best, top 5, full table
- ``sigmoid_optimization_<type>_<timestamp>.csv``: one row per combination
Both are sorted by ascending average guesses.
"""

import csv
import logging
import os
import time
from datetime import datetime
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from .exceptions import CacheUnavailableError, EmptyCorpusError
from .frequency import DEFAULT_MIDPOINT, DEFAULT_STEEPNESS, WordFrequencyModel
from .pattern_cache import PatternCache
from .simulation import (
    DEFAULT_FIRST_GUESS, MAX_GUESSES, BatchSimulator, GameOutcome, OptimizationResult,
)
from .words import normalize_words


log = logging.getLogger(__name__)


# ============================================================================
# CONSTANTS
# ============================================================================

COARSE_MIDPOINTS = (0.2, 0.4, 0.6, 0.8)
COARSE_STEEPNESS = (5.0, 10.0, 15.0, 20.0)

FINE_MIDPOINT_RANGE = 0.1
FINE_MIDPOINT_STEPS = 3
FINE_STEEPNESS_RANGE = 2.0
FINE_STEEPNESS_STEPS = 3

RESULTS_DIR = "optimization_results"

CSV_COLUMNS = [
    "midpoint", "steepness", "avgGuesses", "winRate", "wins", "losses", "fail",
    "solve1", "solve2", "solve3", "solve4", "solve5", "solve6", "executionTimeMs",
]


# ============================================================================
# GRIDS
# ============================================================================

def generate_range(center: float, spread: float, steps: int) -> List[float]:
    """``steps`` evenly spaced values over [center - spread, center + spread]."""
    if steps < 1:
        raise ValueError(f"steps must be >= 1, got {steps}")
    if steps == 1:
        return [center]
    start = center - spread
    step = (spread * 2) / (steps - 1)
    return [start + step * i for i in range(steps)]


def coarse_grid(midpoints: Sequence[float] = COARSE_MIDPOINTS,
                steepness: Sequence[float] = COARSE_STEEPNESS) -> List[Tuple[float, float]]:
    return [(m, s) for m in midpoints for s in steepness]


def fine_grid(midpoint_center: float = DEFAULT_MIDPOINT,
              steepness_center: float = DEFAULT_STEEPNESS,
              midpoint_range: float = FINE_MIDPOINT_RANGE,
              midpoint_steps: int = FINE_MIDPOINT_STEPS,
              steepness_range: float = FINE_STEEPNESS_RANGE,
              steepness_steps: int = FINE_STEEPNESS_STEPS) -> List[Tuple[float, float]]:
    return [(m, s)
            for m in generate_range(midpoint_center, midpoint_range, midpoint_steps)
            for s in generate_range(steepness_center, steepness_range, steepness_steps)]


def sort_results(results: Iterable[OptimizationResult]) -> List[OptimizationResult]:
    """Ascending average guesses; equal averages keep run order."""
    return sorted(results, key=lambda r: r.average_guesses)


# ============================================================================
# OPTIMIZER
# ============================================================================

class SigmoidOptimizer:
    """
    Runs one batch simulation per parameter combination.

    The same cache and word lists are shared by every combination; only the
    frequency model is rebuilt.
    """

    def __init__(self, cache: Optional[PatternCache], answers: List[str],
                 guesses: List[str], frequency_sorted_words: List[str],
                 first_guess: str = DEFAULT_FIRST_GUESS,
                 max_guesses: int = MAX_GUESSES):
        if not 1 <= max_guesses <= MAX_GUESSES:
            raise ValueError(f"max_guesses must be between 1 and {MAX_GUESSES}, got {max_guesses}")
        if cache is None or not cache.is_initialized():
            raise CacheUnavailableError(
                "Pattern cache not loaded! Cannot run optimization without cache "
                "(run the 'precompute' command first).")

        self.cache = cache
        self.answers = normalize_words(answers)
        self.guesses = normalize_words(guesses)
        self.frequency_sorted_words = normalize_words(frequency_sorted_words)
        if not self.answers or not self.guesses or not self.frequency_sorted_words:
            raise EmptyCorpusError("Optimizer needs non-empty answer, guess and frequency lists")
        if not cache.covers(self.guesses, self.answers):
            raise CacheUnavailableError(
                "Pattern cache does not cover the optimizer word lists; rebuild it")

        self.first_guess = first_guess
        self.max_guesses = max_guesses

        self.results: List[OptimizationResult] = []
        self.best_result: Optional[OptimizationResult] = None
        self.search_type = "coarse"
        self.current_combination = 0
        self.total_combinations = 0
        self.total_time_ms = 0

    def progress(self) -> float:
        return self.current_combination / self.total_combinations if self.total_combinations else 0.0

    def simulate(self, midpoint: float, steepness: float,
                 on_game: Optional[Callable[[int, int, GameOutcome], None]] = None) -> OptimizationResult:
        """Full batch run for one parameter pair."""
        model = WordFrequencyModel(self.frequency_sorted_words, midpoint, steepness)
        simulator = BatchSimulator(self.cache, self.answers, self.guesses, model,
                                   first_guess=self.first_guess, max_guesses=self.max_guesses)
        return simulator.run(progress=on_game)

    def run(self, combinations: List[Tuple[float, float]], search_type: str = "coarse",
            previous_results: Iterable[OptimizationResult] = (),
            on_combination: Optional[Callable[[OptimizationResult], None]] = None,
            on_game: Optional[Callable[[int, int, GameOutcome], None]] = None,
            on_complete: Optional[Callable[[Optional[OptimizationResult]], None]] = None) -> Optional[OptimizationResult]:
        """
        Evaluate every combination and return the best result.

        Args:
            combinations: (midpoint, steepness) pairs, in run order
            search_type: label used in logs and report names
            previous_results: results of an interrupted run; their
                combinations are not simulated again
            on_combination: called with each finished result
            on_game: per-game progress callback forwarded to the simulator
            on_complete: called with the best result once the grid is done
        """
        self.search_type = search_type
        self.results = []
        self.best_result = None
        self.total_combinations = len(combinations)
        self.current_combination = 0

        done = {(r.midpoint, r.steepness): r for r in previous_results}

        log.info(f"=== STARTING {search_type.upper()} GRID SEARCH ===")
        log.info(f"Total combinations: {self.total_combinations}")
        log.info(f"Games per combination: {len(self.answers)}")
        log.info(f"Total games: {self.total_combinations * len(self.answers)}")
        log.info(f"Fixed first guess: {self.first_guess}")

        started = time.time()
        for midpoint, steepness in combinations:
            self.current_combination += 1
            log.info(f"--- Testing Combination {self.current_combination}/{self.total_combinations}: "
                     f"Midpoint: {midpoint}, Steepness: {steepness} ---")

            result = done.get((midpoint, steepness))
            if result is None:
                result = self.simulate(midpoint, steepness, on_game)
            else:
                log.info("Already evaluated, reusing previous result")

            self.results.append(result)
            log.info(f"Results: Avg = {result.average_guesses:.3f}, Win Rate = {result.win_rate:.2%}, "
                     f"Time = {result.execution_time_ms}ms")
            log.info(f"Distribution: {', '.join(str(c) for c in result.solve_distribution)}")

            if self.best_result is None or result.average_guesses < self.best_result.average_guesses:
                self.best_result = result
                log.info(f"*** NEW BEST: {result} ***")

            if on_combination is not None:
                on_combination(result)

        self.total_time_ms = int((time.time() - started) * 1000)
        if on_complete is not None:
            on_complete(self.best_result)
        return self.best_result

    def fine_search_from_best(self, midpoint_range: float = FINE_MIDPOINT_RANGE,
                              midpoint_steps: int = FINE_MIDPOINT_STEPS,
                              steepness_range: float = FINE_STEEPNESS_RANGE,
                              steepness_steps: int = FINE_STEEPNESS_STEPS) -> List[Tuple[float, float]]:
        """Fine grid centred on the best result of the last run."""
        if self.best_result is None:
            raise RuntimeError("No best result available. Run coarse search first!")
        log.info(f"Fine search configured around: Midpoint={self.best_result.midpoint}, "
                 f"Steepness={self.best_result.steepness}")
        return fine_grid(self.best_result.midpoint, self.best_result.steepness,
                         midpoint_range, midpoint_steps, steepness_range, steepness_steps)

    def summary(self, timestamp: Optional[datetime] = None) -> str:
        return build_summary(self.results, self.best_result, self.search_type,
                             self.total_time_ms, len(self.answers), self.first_guess, timestamp)

    def write_reports(self, directory: str = RESULTS_DIR,
                      timestamp: Optional[datetime] = None) -> Tuple[str, str]:
        timestamp = timestamp or datetime.now()
        return write_reports(self.results, self.summary(timestamp), directory,
                             self.search_type, timestamp)


# ============================================================================
# REPORTS
# ============================================================================

def build_summary(results: List[OptimizationResult], best: Optional[OptimizationResult],
                  search_type: str, total_time_ms: int, games_per_combination: int,
                  first_guess: str, timestamp: Optional[datetime] = None) -> str:
    """Human-readable report: header, best result, top 5, full sorted table."""
    timestamp = timestamp or datetime.now()
    ranked = sort_results(results)

    lines = [
        "",
        "========================================",
        "     OPTIMIZATION COMPLETE",
        "========================================",
        f"Search type: {search_type.upper()}",
        f"Total time: {total_time_ms / 1000:.1f}s ({total_time_ms / 60000:.1f} minutes)",
        f"Combinations tested: {len(results)}",
        f"Games per combination: {games_per_combination}",
        f"Total games: {len(results) * games_per_combination}",
        f"Fixed first guess: {first_guess}",
        f"Timestamp: {timestamp:%Y-%m-%d %H:%M:%S}",
        "",
        "=== BEST RESULT ===",
    ]
    if best is not None:
        lines += [
            f"Midpoint: {best.midpoint}",
            f"Steepness: {best.steepness}",
            f"Average Guesses: {best.average_guesses:.4f}",
            f"Win Rate: {best.win_rate:.2%}",
            f"Wins: {best.wins}",
            f"Losses: {best.losses}",
            f"Distribution [Fail,1,2,3,4,5,6]: {', '.join(str(c) for c in best.solve_distribution)}",
            f"Execution time: {best.execution_time_ms}ms",
        ]

    lines += ["", "=== TOP 5 RESULTS ==="]
    for i, r in enumerate(ranked[:5], 1):
        lines.append(f"{i}. {r}")

    lines += [
        "",
        "=== ALL RESULTS (sorted by avg guesses) ===",
        "Midpoint, Steepness, AvgGuesses, WinRate, Wins, Losses, ExecutionTimeMs",
    ]
    for r in ranked:
        lines.append(f"{r.midpoint:.2f}, {r.steepness:.2f}, {r.average_guesses:.4f}, "
                     f"{r.win_rate:.2%}, {r.wins}, {r.losses}, {r.execution_time_ms}")
    lines += ["========================================", ""]

    return "\n".join(lines)


def write_csv(results: List[OptimizationResult], path: str):
    with open(path, 'w', newline='', encoding='utf-8') as f:
        writer = csv.writer(f)
        writer.writerow(CSV_COLUMNS)
        for r in sort_results(results):
            writer.writerow([
                r.midpoint, r.steepness, f"{r.average_guesses:.4f}", f"{r.win_rate:.4f}",
                r.wins, r.losses, *r.solve_distribution, r.execution_time_ms,
            ])


def write_reports(results: List[OptimizationResult], summary: str, directory: str,
                  search_type: str, timestamp: Optional[datetime] = None) -> Tuple[str, str]:
    """Write the text summary and the CSV table; returns both paths."""
    timestamp = timestamp or datetime.now()
    os.makedirs(directory, exist_ok=True)
    stem = f"sigmoid_optimization_{search_type}_{timestamp:%Y-%m-%d_%H-%M-%S}"

    text_path = os.path.join(directory, stem + ".txt")
    with open(text_path, 'w', encoding='utf-8') as f:
        f.write(summary)

    csv_path = os.path.join(directory, stem + ".csv")
    write_csv(results, csv_path)

    log.info(f"Results saved to:\n  Text: {text_path}\n  CSV:  {csv_path}")
    return text_path, csv_path
