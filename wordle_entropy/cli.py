"""
Command line jobs: precompute the pattern cache and first-guess memo, trace
a single game, suggest guesses for a game played elsewhere, run a batch
simulation, or grid-search the prior.

    python -m wordle_entropy precompute
    python -m wordle_entropy memo
    python -m wordle_entropy solve crane
    python -m wordle_entropy suggest
    python -m wordle_entropy simulate --first-guess tares
    python -m wordle_entropy optimize --search coarse-then-fine
"""

import argparse
import logging
import os
import sys

from . import __version__
from .exceptions import WordleEntropyError
from .frequency import DEFAULT_MIDPOINT, DEFAULT_STEEPNESS, WordFrequencyModel
from .initial_guesses import CACHE_FILENAME as MEMO_FILENAME, InitialGuessesCache, compute_initial_guesses
from .optimizer import (
    FINE_MIDPOINT_RANGE, FINE_MIDPOINT_STEPS,
    FINE_STEEPNESS_RANGE, FINE_STEEPNESS_STEPS, RESULTS_DIR, SigmoidOptimizer,
    coarse_grid, fine_grid,
)
from .pattern_cache import CACHE_FILENAME, PatternCache
from .patterns import evaluate_guess, is_winning_pattern, parse_feedback, pattern_to_string
from .simulation import DEFAULT_FIRST_GUESS, MAX_GUESSES, BatchSimulator, print_result
from .solver import WordleSolver, information_gained
from .words import load_words, normalize_word, validate_guess


log = logging.getLogger(__name__)


def _word_lists(args):
    answers = load_words(args.answers)
    guesses = load_words(args.guesses)
    log.info(f"Answers: {len(answers)} words, Guesses: {len(guesses)} words")
    return answers, guesses


def _frequency_model(args):
    if not args.frequency or not os.path.exists(args.frequency):
        log.warning(f"Frequency list not found ({args.frequency}), using uniform weights")
        return None
    model = WordFrequencyModel(load_words(args.frequency), args.midpoint, args.steepness)
    log.info(model.diagnostics())
    return model


# ============================================================================
# COMMANDS
# ============================================================================

def cmd_precompute(args):
    answers, guesses = _word_lists(args)
    PatternCache.build(guesses, answers).save(args.cache)


def cmd_memo(args):
    answers, guesses = _word_lists(args)
    solver = WordleSolver(answers, guesses, cache=PatternCache.load(args.cache),
                          frequency_model=_frequency_model(args))
    memo = compute_initial_guesses(solver, args.top)
    memo.save(args.memo)
    for word, entropy in memo.entries[:10]:
        print(f"  {word}: {entropy:.4f} bits")


def cmd_solve(args):
    """Trace one game turn by turn."""
    answers, guesses = _word_lists(args)
    answer = normalize_word(args.answer)
    solver = WordleSolver(answers, guesses, cache=PatternCache.load(args.cache),
                          frequency_model=_frequency_model(args),
                          initial_guesses=InitialGuessesCache.load(args.memo))

    print(f"\n=== Solving: {answer} ===\n")
    for turn in range(args.max_guesses):
        before = solver.remaining_count()
        if args.first_guess and turn == 0:
            guess = normalize_word(args.first_guess)
        else:
            guess = solver.best_guess()
            top = ", ".join(f"{w}={h:.3f}" for w, h in solver.top_guesses(5))
            print(f"  Top guesses: {top}")

        pattern = evaluate_guess(guess, answer)
        if pattern.is_winning:
            print(f"Turn {turn + 1}: {guess} {pattern} ({before} candidates)")
            print(f"\n✓ Solved in {turn + 1} guesses!")
            return

        after = solver.process_feedback(guess, pattern)
        bits = information_gained(before, after) if after else 0.0
        print(f"Turn {turn + 1}: {guess} {pattern} ({before} -> {after} candidates, {bits:.2f} bits)")
        if after <= 10:
            print(f"  Candidates: {solver.candidates}")
        if after == 0:
            print(f"\n✗ '{answer}' is not in the answer list")
            return

    print(f"\n✗ Failed to solve in {args.max_guesses} guesses")


def _print_suggestions(solver, n):
    best = solver.best_guess()
    print(f"\n{solver.remaining_count()} candidates, best guess: {best}")
    for word, entropy in solver.top_guesses(n):
        print(f"  {word}: {entropy:.4f} bits")


def cmd_suggest(args):
    """
    Interactive helper for a game played elsewhere.

    Each turn, type the guess and the feedback received, e.g. ``tares bgyyb``
    (b/y/g or 0/1/2 per letter). ``reset`` starts over, ``quit`` or an empty
    line exits.
    """
    answers, guesses = _word_lists(args)
    solver = WordleSolver(answers, guesses, cache=PatternCache.load(args.cache),
                          frequency_model=_frequency_model(args),
                          initial_guesses=InitialGuessesCache.load(args.memo))

    print("Enter '<guess> <feedback>' each turn (feedback: b/y/g or 0/1/2), 'reset' or 'quit'.")
    _print_suggestions(solver, args.top)

    while True:
        try:
            line = input("> ").strip().lower()
        except EOFError:
            break
        if line in ("", "q", "quit"):
            break
        if line == "reset":
            solver.reset()
            _print_suggestions(solver, args.top)
            continue

        parts = line.split()
        try:
            if len(parts) != 2:
                raise ValueError(f"Expected '<guess> <feedback>', got '{line}'")
            guess = validate_guess(parts[0])
            pattern_id = parse_feedback(parts[1])
        except ValueError as e:
            print(f"  {e}")
            continue

        expected = solver.guess_entropy(guess)
        before = solver.remaining_count()
        after = solver.process_feedback(guess, pattern_id)
        if is_winning_pattern(pattern_id):
            print(f"{guess} {pattern_to_string(pattern_id)}")
            print(f"\n✓ Solved in {solver.turn} guesses!")
            break
        if after == 0:
            print(f"{guess} {pattern_to_string(pattern_id)} leaves no candidates; "
                  f"check the feedback or 'reset'")
            break

        print(f"{guess} {pattern_to_string(pattern_id)} ({before} -> {after} candidates, "
              f"expected {expected:.2f} bits, got {information_gained(before, after):.2f} bits)")
        _print_suggestions(solver, args.top)


def cmd_simulate(args):
    answers, guesses = _word_lists(args)
    simulator = BatchSimulator(PatternCache.load(args.cache), answers, guesses,
                               _frequency_model(args), first_guess=args.first_guess,
                               max_guesses=args.max_guesses)

    def progress(done, total, outcome):
        stats = simulator.stats
        print(f"[{done}/{total}] avg={stats.average_guesses:.4f} wins={stats.wins} "
              f"losses={stats.losses} last={outcome.answer}")

    print_result(simulator.run(progress=progress, progress_interval=args.progress_interval))


def cmd_optimize(args):
    answers, guesses = _word_lists(args)
    optimizer = SigmoidOptimizer(PatternCache.load(args.cache), answers, guesses,
                                 load_words(args.frequency), first_guess=args.first_guess,
                                 max_guesses=args.max_guesses)

    if args.search == "fine":
        combinations = fine_grid(args.midpoint, args.steepness,
                                 args.midpoint_range, args.midpoint_steps,
                                 args.steepness_range, args.steepness_steps)
        search_type = "fine"
    else:
        combinations = coarse_grid()
        search_type = "coarse"

    optimizer.run(combinations, search_type)
    print(optimizer.summary())
    optimizer.write_reports(args.results_dir)

    if args.search == "coarse-then-fine":
        combinations = optimizer.fine_search_from_best(args.midpoint_range, args.midpoint_steps,
                                                       args.steepness_range, args.steepness_steps)
        optimizer.run(combinations, "fine")
        print(optimizer.summary())
        optimizer.write_reports(args.results_dir)


# ============================================================================
# MAIN
# ============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="wordle_entropy",
                                     description="Entropy-maximizing Wordle solver")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="count", default=0,
                        help="-v for info logging, -vv for debug")
    parser.add_argument("--answers", default=os.path.join("words", "answers.txt"))
    parser.add_argument("--guesses", default=os.path.join("words", "allowed_guesses.txt"))
    parser.add_argument("--frequency", default=os.path.join("words", "frequency_sorted.txt"),
                        help="Word list sorted from most to least frequent")
    parser.add_argument("--cache", default=CACHE_FILENAME)
    parser.add_argument("--memo", default=MEMO_FILENAME)
    parser.add_argument("--midpoint", type=float, default=DEFAULT_MIDPOINT)
    parser.add_argument("--steepness", type=float, default=DEFAULT_STEEPNESS)
    parser.add_argument("--max-guesses", type=int, default=MAX_GUESSES,
                        choices=range(1, MAX_GUESSES + 1), metavar=f"1-{MAX_GUESSES}")

    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("precompute", help="Build and save the pattern cache")
    p.set_defaults(func=cmd_precompute)

    p = sub.add_parser("memo", help="Precompute the first-guess entropies")
    p.add_argument("--top", type=int, default=None, help="Keep only the N best entries")
    p.set_defaults(func=cmd_memo)

    p = sub.add_parser("solve", help="Trace the solver on one answer")
    p.add_argument("answer")
    p.add_argument("--first-guess", default=None)
    p.set_defaults(func=cmd_solve)

    p = sub.add_parser("suggest", help="Suggest guesses from feedback typed in each turn")
    p.add_argument("--top", type=int, default=14, help="Number of ranked guesses to show")
    p.set_defaults(func=cmd_suggest)

    p = sub.add_parser("simulate", help="Play every answer with a fixed opener")
    p.add_argument("--first-guess", default=DEFAULT_FIRST_GUESS)
    p.add_argument("--progress-interval", type=int, default=100)
    p.set_defaults(func=cmd_simulate)

    p = sub.add_parser("optimize", help="Grid search over the sigmoid prior parameters")
    p.add_argument("--search", choices=["coarse", "fine", "coarse-then-fine"], default="coarse")
    p.add_argument("--first-guess", default=DEFAULT_FIRST_GUESS)
    p.add_argument("--midpoint-range", type=float, default=FINE_MIDPOINT_RANGE)
    p.add_argument("--midpoint-steps", type=int, default=FINE_MIDPOINT_STEPS)
    p.add_argument("--steepness-range", type=float, default=FINE_STEEPNESS_RANGE)
    p.add_argument("--steepness-steps", type=int, default=FINE_STEEPNESS_STEPS)
    p.add_argument("--results-dir", default=RESULTS_DIR)
    p.set_defaults(func=cmd_optimize)

    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    level = logging.WARNING if args.verbose == 0 else logging.INFO if args.verbose == 1 else logging.DEBUG
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    try:
        args.func(args)
    except (WordleEntropyError, OSError) as e:
        log.error(str(e))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
