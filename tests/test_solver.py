import numpy as np
import pytest

from wordle_entropy.exceptions import EmptyCorpusError, SessionResolvedError
from wordle_entropy.initial_guesses import InitialGuessesCache
from wordle_entropy.pattern_cache import PatternCache
from wordle_entropy.patterns import CORRECT_PATTERN, evaluate_guess
from wordle_entropy.solver import WordleSolver, information_gained
from wordle_entropy.sources import CachedPatternSource, LivePatternSource, select_pattern_source


class FixedEntropySource(LivePatternSource):
    """Live source whose entropy sweep returns preset values."""

    def __init__(self, values):
        self.values = np.array(values, dtype=np.float64)
        self.calls = 0

    def entropies(self, guesses, candidates, weights=None):
        self.calls += 1
        return self.values[:len(guesses)]


def test_winning_feedback_leaves_one_candidate(vocab, cache, frequency_model):
    solver = WordleSolver(vocab, vocab, cache=cache, frequency_model=frequency_model)
    remaining = solver.process_feedback("crane", CORRECT_PATTERN)
    assert remaining == 1
    assert solver.candidates == ["crane"]
    assert solver.is_resolved()
    assert solver.best_guess() == "crane"
    with pytest.raises(SessionResolvedError):
        solver.process_feedback("crane", CORRECT_PATTERN)


def test_winning_feedback_for_unknown_word_empties_candidates(vocab, cache):
    solver = WordleSolver(vocab, vocab, cache=cache)
    assert solver.process_feedback("zzzzz", CORRECT_PATTERN) == 0


def test_tares_then_solver_finds_crane(vocab, cache, frequency_model):
    solver = WordleSolver(vocab, vocab, cache=cache, frequency_model=frequency_model)
    counts = [solver.remaining_count()]
    guess = "tares"

    for turn in range(6):
        pattern = evaluate_guess(guess, "crane")
        if turn == 0:
            assert pattern.pattern_id == 39
        if pattern.is_winning:
            break
        counts.append(solver.process_feedback(guess, pattern))
        assert "crane" in solver.candidates
        guess = solver.best_guess()
    else:
        pytest.fail(f"crane not solved, guesses left {solver.candidates}")

    assert all(a > b for a, b in zip(counts, counts[1:]))
    assert len(solver.history) + 1 <= 6


def test_initial_state_and_reset(vocab, cache):
    solver = WordleSolver(vocab, vocab, cache=cache)
    assert solver.is_initial_state()
    solver.process_feedback("tares", evaluate_guess("tares", "crane"))
    assert not solver.is_initial_state()
    assert solver.turn == 1
    solver.reset()
    assert solver.is_initial_state()
    assert solver.remaining_count() == len(vocab)


def test_memo_short_circuits_first_turn(vocab):
    source = FixedEntropySource([0.0] * len(vocab))
    memo = InitialGuessesCache([("crane", 6.1), ("tares", 6.0)])
    solver = WordleSolver(vocab, vocab, source=source, initial_guesses=memo)

    assert solver.best_guess() == "crane"
    assert source.calls == 0
    assert solver.top_guesses(2) == [("crane", 6.1), ("tares", 6.0)]

    solver.process_feedback("crane", evaluate_guess("crane", "house"))
    solver.best_guess()
    assert source.calls == 1


def test_unloaded_memo_is_ignored(vocab):
    source = FixedEntropySource(range(len(vocab)))
    solver = WordleSolver(vocab, vocab, source=source, initial_guesses=InitialGuessesCache())
    assert solver.best_guess() == vocab[-1]
    assert source.calls == 1


def test_ties_go_to_first_word(vocab):
    values = [0.0] * len(vocab)
    values[3] = values[7] = 2.5
    solver = WordleSolver(vocab, vocab, source=FixedEntropySource(values))
    assert solver.best_guess() == vocab[3]


def test_best_guess_is_argmax_of_entropies(vocab, cache, frequency_model):
    solver = WordleSolver(vocab, vocab, cache=cache, frequency_model=frequency_model)
    best = solver.best_guess()
    entropies = solver.compute_entropies()
    assert entropies[best] == max(entropies.values())
    assert solver.word_entropies == entropies


def test_cached_and_live_sources_agree(vocab, cache, frequency_model):
    answers = vocab[::4]
    cached = WordleSolver(answers, vocab, cache=cache, frequency_model=frequency_model)
    live = WordleSolver(answers, vocab, frequency_model=frequency_model)
    assert isinstance(cached.source, CachedPatternSource)
    assert isinstance(live.source, LivePatternSource)

    cached_h = cached.compute_entropies()
    live_h = live.compute_entropies()
    for word in vocab[:30]:
        assert cached_h[word] == pytest.approx(live_h[word])
    assert cached.best_guess() == live.best_guess()


def test_distribution_is_renormalized_each_turn(vocab, cache, frequency_model):
    solver = WordleSolver(vocab, vocab, cache=cache, frequency_model=frequency_model)
    assert solver.weighted
    solver.process_feedback("tares", evaluate_guess("tares", "crane"))
    assert set(solver.probabilities) == set(solver.candidates)
    assert sum(solver.probabilities.values()) == pytest.approx(1.0)
    assert solver.word_entropies == {}


def test_candidates_without_prior_mass_fall_back_to_uniform(vocab, cache):
    from wordle_entropy.frequency import WordFrequencyModel

    model = WordFrequencyModel(["zzzzz"])
    solver = WordleSolver(vocab, vocab, cache=cache, frequency_model=model)
    assert not solver.weighted
    assert sum(solver.probabilities.values()) == pytest.approx(1.0)


def test_information_gained():
    assert information_gained(8, 2) == pytest.approx(2.0)
    assert information_gained(5, 5) == 0.0
    with pytest.raises(ValueError):
        information_gained(5, 0)


def test_select_pattern_source(vocab, cache):
    assert isinstance(select_pattern_source(None, vocab, vocab), LivePatternSource)
    assert isinstance(select_pattern_source(PatternCache(), vocab, vocab), LivePatternSource)
    assert isinstance(select_pattern_source(cache, vocab, vocab), CachedPatternSource)
    assert isinstance(select_pattern_source(cache, vocab + ["zzzzz"], vocab), LivePatternSource)


def test_words_are_normalized(cache):
    solver = WordleSolver(["CRANE", " Brace "], ["TARES", "crane", "brace"], cache=cache)
    assert solver.candidates == ["crane", "brace"]
    assert isinstance(solver.source, CachedPatternSource)


def test_empty_answers_rejected():
    with pytest.raises(EmptyCorpusError):
        WordleSolver([])


def test_guess_entropy_matches_sweep(vocab, cache, frequency_model):
    solver = WordleSolver(vocab, vocab, cache=cache, frequency_model=frequency_model)
    solver.process_feedback("tares", evaluate_guess("tares", "crane"))
    entropies = solver.compute_entropies()
    assert solver.guess_entropy("CRANE") == pytest.approx(entropies["crane"])


def test_guess_entropy_for_word_outside_cache(vocab, cache):
    solver = WordleSolver(vocab, vocab, cache=cache)
    live = WordleSolver(vocab, vocab)
    assert solver.guess_entropy("zebra") == pytest.approx(live.guess_entropy("zebra"))
