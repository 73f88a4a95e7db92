import csv
from datetime import datetime

import pytest

from wordle_entropy.exceptions import CacheUnavailableError, EmptyCorpusError
from wordle_entropy.optimizer import (
    CSV_COLUMNS, SigmoidOptimizer, build_summary, coarse_grid, fine_grid, generate_range,
    sort_results, write_reports,
)
from wordle_entropy.simulation import OptimizationResult


def make_result(midpoint, steepness, average):
    return OptimizationResult(
        midpoint=midpoint, steepness=steepness, games_completed=10,
        total_guesses=int(average * 10), wins=10, losses=0,
        solve_distribution=(0, 0, 2, 4, 4, 0, 0), average_guesses=average,
        win_rate=1.0, execution_time_ms=5,
    )


@pytest.fixture
def optimizer(cache, small_corpus, vocab):
    return SigmoidOptimizer(cache, small_corpus, small_corpus, vocab)


def test_generate_range():
    assert generate_range(0.5, 0.1, 3) == pytest.approx([0.4, 0.5, 0.6])
    assert generate_range(10.0, 2.0, 5) == pytest.approx([8.0, 9.0, 10.0, 11.0, 12.0])
    assert generate_range(0.5, 0.1, 1) == [0.5]
    with pytest.raises(ValueError):
        generate_range(0.5, 0.1, 0)


def test_coarse_grid():
    grid = coarse_grid()
    assert len(grid) == 16
    assert grid[0] == (0.2, 5.0)
    assert grid[-1] == (0.8, 20.0)


def test_fine_grid_is_centred():
    grid = fine_grid(0.4, 10.0, 0.1, 3, 2.0, 3)
    assert len(grid) == 9
    assert grid[4] == pytest.approx((0.4, 10.0))


def test_run_small_grid(optimizer):
    seen = []
    best = optimizer.run([(0.4, 5.0), (0.6, 10.0)], on_combination=seen.append)

    assert len(optimizer.results) == 2
    assert len(seen) == 2
    assert best is not None
    assert best.average_guesses == min(r.average_guesses for r in optimizer.results)
    for result in optimizer.results:
        assert result.games_completed == 10
        assert sum(result.solve_distribution) == 10
    assert optimizer.progress() == 1.0


def test_ties_keep_first_combination(optimizer, monkeypatch):
    monkeypatch.setattr(optimizer, "simulate",
                        lambda m, s, on_game=None: make_result(m, s, 3.5))
    best = optimizer.run([(0.2, 5.0), (0.4, 5.0), (0.6, 5.0)])
    assert (best.midpoint, best.steepness) == (0.2, 5.0)


def test_lowest_average_wins(optimizer, monkeypatch):
    averages = {0.2: 3.9, 0.4: 3.4, 0.6: 3.6}
    monkeypatch.setattr(optimizer, "simulate",
                        lambda m, s, on_game=None: make_result(m, s, averages[m]))
    best = optimizer.run([(0.2, 5.0), (0.4, 5.0), (0.6, 5.0)])
    assert best.midpoint == 0.4
    assert optimizer.fine_search_from_best(0.1, 3, 2.0, 3)[4] == pytest.approx((0.4, 5.0))


def test_resume_skips_evaluated_combinations(optimizer, monkeypatch):
    simulated = []

    def fake_simulate(m, s, on_game=None):
        simulated.append((m, s))
        return make_result(m, s, 4.0)

    monkeypatch.setattr(optimizer, "simulate", fake_simulate)
    previous = [make_result(0.2, 5.0, 3.0)]
    best = optimizer.run([(0.2, 5.0), (0.4, 5.0)], previous_results=previous)

    assert simulated == [(0.4, 5.0)]
    assert best.midpoint == 0.2
    assert len(optimizer.results) == 2


def test_fine_search_needs_a_best_result(optimizer):
    with pytest.raises(RuntimeError):
        optimizer.fine_search_from_best()


def test_sort_results_is_stable():
    results = [make_result(0.2, 5.0, 3.6), make_result(0.4, 5.0, 3.5), make_result(0.6, 5.0, 3.5)]
    assert [r.midpoint for r in sort_results(results)] == [0.4, 0.6, 0.2]


def test_summary_sections():
    results = [make_result(0.2, 5.0, 3.6), make_result(0.4, 5.0, 3.5)]
    text = build_summary(results, results[1], "coarse", 1234, 10, "tares")
    assert "=== BEST RESULT ===" in text
    assert "=== TOP 5 RESULTS ===" in text
    assert "=== ALL RESULTS (sorted by avg guesses) ===" in text
    assert "Search type: COARSE" in text
    assert "Midpoint: 0.4" in text


def test_write_reports(tmp_path):
    results = [make_result(0.2, 5.0, 3.6), make_result(0.4, 5.0, 3.5)]
    stamp = datetime(2024, 3, 1, 12, 30, 5)
    text_path, csv_path = write_reports(results, "summary", str(tmp_path / "out"), "fine", stamp)

    assert text_path.endswith("sigmoid_optimization_fine_2024-03-01_12-30-05.txt")
    assert csv_path.endswith("sigmoid_optimization_fine_2024-03-01_12-30-05.csv")
    with open(text_path, encoding="utf-8") as f:
        assert f.read() == "summary"

    with open(csv_path, newline="", encoding="utf-8") as f:
        rows = list(csv.reader(f))
    assert rows[0] == CSV_COLUMNS
    assert len(rows) == 3
    assert rows[1][0] == "0.4"
    assert rows[1][2] == "3.5000"
    assert rows[1][6:13] == ["0", "0", "2", "4", "4", "0", "0"]


def test_cache_required(small_corpus, vocab):
    with pytest.raises(CacheUnavailableError):
        SigmoidOptimizer(None, small_corpus, small_corpus, vocab)


def test_empty_frequency_list_rejected(cache, small_corpus):
    with pytest.raises(EmptyCorpusError):
        SigmoidOptimizer(cache, small_corpus, small_corpus, [])


def test_on_complete_receives_best(optimizer, monkeypatch):
    monkeypatch.setattr(optimizer, "simulate",
                        lambda m, s, on_game=None: make_result(m, s, 3.0 + m))
    finished = []
    optimizer.run([(0.4, 5.0), (0.2, 5.0)], on_complete=finished.append)
    assert [r.midpoint for r in finished] == [0.2]


def test_max_guesses_above_cap_rejected(cache, small_corpus, vocab):
    with pytest.raises(ValueError):
        SigmoidOptimizer(cache, small_corpus, small_corpus, vocab, max_guesses=7)
