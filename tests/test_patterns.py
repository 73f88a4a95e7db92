import numpy as np
import pytest

from wordle_entropy.patterns import (
    CORRECT_PATTERN, LetterResult, Pattern, compute_feedback, evaluate_guess,
    from_pattern_id, get_pattern, is_winning_pattern, parse_feedback, pattern_to_string,
)
from wordle_entropy.words import words_to_chars

A, P, C = LetterResult.ABSENT, LetterResult.PRESENT, LetterResult.CORRECT


def test_identical_words_win():
    result = evaluate_guess("abcde", "abcde")
    assert result.results == (C, C, C, C, C)
    assert result.pattern_id == CORRECT_PATTERN == 242
    assert is_winning_pattern(result)
    assert is_winning_pattern(242)


def test_repeated_letters_marked_at_most_answer_count():
    # answer ERASE has two e's and one s
    result = evaluate_guess("speed", "erase")
    assert result.results == (P, A, P, P, A)
    assert result.pattern_id == 1 + 9 + 27


def test_greens_take_precedence_over_earlier_yellows():
    # THOSE has a single e, already matched in place by the last letter
    result = evaluate_guess("geese", "those")
    assert result.results == (A, A, A, C, C)
    assert result.pattern_id == 2 * 27 + 2 * 81


def test_extra_copies_of_a_letter_are_absent():
    result = evaluate_guess("llama", "hello")
    # only two l's in HELLO, the first two l's of LLAMA take them
    assert result.results[:2] == (P, P)
    assert result.results[2:] == (A, A, A)


def test_tares_against_crane():
    result = evaluate_guess("tares", "crane")
    assert result.results == (A, P, P, P, A)
    assert result.pattern_id == 39


def test_pattern_id_round_trip(vocab):
    for guess in vocab[:40]:
        for answer in vocab[::7]:
            result = evaluate_guess(guess, answer)
            assert Pattern.from_id(guess, result.pattern_id).results == result.results


def test_encoding_is_a_bijection():
    ids = {Pattern.from_results("", from_pattern_id(i)).pattern_id for i in range(243)}
    assert ids == set(range(243))


def test_from_pattern_id_rejects_out_of_range():
    with pytest.raises(ValueError):
        from_pattern_id(243)
    with pytest.raises(ValueError):
        from_pattern_id(-1)


def test_numba_kernel_matches_string_codec(vocab):
    chars = words_to_chars(vocab)
    for i in range(0, len(vocab), 5):
        for j in range(0, len(vocab), 11):
            assert compute_feedback(chars[i], chars[j]) == get_pattern(vocab[i], vocab[j])


def test_parse_feedback():
    assert parse_feedback("bgyyb") == 0 + 2 * 3 + 1 * 9 + 1 * 27
    assert parse_feedback("22222") == CORRECT_PATTERN
    with pytest.raises(ValueError):
        parse_feedback("bgy")


def test_pattern_string_has_one_tile_per_letter():
    assert len(pattern_to_string(39)) == 5
    assert str(evaluate_guess("abcde", "abcde")) == pattern_to_string(242)


def test_words_to_chars_rejects_bad_words():
    with pytest.raises(ValueError):
        words_to_chars(["ab-de"])
    assert words_to_chars(["azazz"]).tolist() == [[0, 25, 0, 25, 25]]
    assert words_to_chars([]).shape == (0, 5)
    assert words_to_chars(["abcde"]).dtype == np.int32
