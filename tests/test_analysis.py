import random

import matplotlib.pyplot as plt
import pytest

from noguess import (
    Board,
    plot_fairness_traces,
    random_clue_reveal,
    run_level_analysis,
    run_many_sessions,
    run_session,
)


def test_random_clue_reveal_finds_a_realizable_number():
    board = Board(3, 3, 1)
    new_board, rejected = random_clue_reveal(board, 0, 0, random.Random(3))

    assert new_board is not None
    # Two unsettled neighbors and a single mine: only 0 or 1 can be shown.
    assert new_board.numbers[0] in (0, 1)
    assert 0 <= rejected <= 7


def test_random_clue_reveal_on_revealed_cell():
    new_board, rejected = random_clue_reveal(Board(3, 3, 1), 1, 1, random.Random(0))
    assert new_board is None
    assert rejected == 9


@pytest.mark.parametrize("seed", [0, 1, 2])
def test_safest_session_always_wins(seed):
    result = run_session(4, 4, 3, seed=seed)

    assert result["status"] == 1
    trace = result["fairness_trace"]
    assert len(trace) == result["reveal_moves_count"] + 1
    assert trace[0] == 1.0
    assert all(0.0 < f <= 1.0 for f in trace)
    assert all(a >= b for a, b in zip(trace, trace[1:]))
    assert result["fairness"] == trace[-1]
    # Mines are only ever settled by deduction in a won session.
    deduced = sum(
        result[f"inferred_{method}_count"]
        for method in ("trivial", "exhaustive", "saturation")
    )
    assert deduced >= 3


def test_sessions_are_reproducible():
    assert run_session(4, 4, 3, seed=11) == run_session(4, 4, 3, seed=11)


@pytest.mark.parametrize("seed", range(4))
def test_random_session_ends(seed):
    result = run_session(4, 4, 4, seed=seed, strategy="random")
    assert result["status"] in (-1, 1)
    assert result["reveal_moves_count"] >= 1


def test_show_boards_prints_final_board(capsys):
    run_session(3, 3, 1, seed=0, show_boards=True)
    out = capsys.readouterr().out
    assert "Final board" in out
    assert "Finished with status 1" in out


def test_unknown_strategy():
    with pytest.raises(ValueError):
        run_session(3, 3, 1, strategy="greedy")


def test_run_many_sessions():
    results = run_many_sessions(4, 4, 3, runs=3, seed=5)

    assert results["win_rate"] == 1.0
    assert 0.0 < results["min_fairness"] <= results["avg_fairness"] <= 1.0
    assert results["std_fairness"] >= 0.0
    assert results["avg_reveal_moves_count"] > 0.0
    assert results["avg_rejected_numbers_count"] >= 0.0
    assert (
        results["avg_inferred_trivial_count"]
        + results["avg_inferred_exhaustive_count"]
        + results["avg_inferred_saturation_count"]
    ) >= 3.0


def test_run_many_sessions_rejects_zero_runs():
    with pytest.raises(ValueError):
        run_many_sessions(3, 3, 1, runs=0)


def test_plot_fairness_traces():
    fig = plot_fairness_traces([[1.0, 0.5, 0.5], [1.0, 1.0]], show=False)
    assert len(fig.axes) == 1
    assert len(fig.axes[0].lines) == 2
    plt.close(fig)


def test_run_level_analysis():
    plt.close("all")
    levels = {"tiny": (3, 3, 1), "small": (4, 4, 2)}
    results = run_level_analysis(2, levels=levels, show=False)
    assert set(results) == {"tiny", "small"}
    assert results["tiny"]["win_rate"] == 1.0
    assert results["small"]["avg_inferred_saturation_count"] >= 0.0
    # Fairness summary and deductions per pass
    assert len(plt.get_fignums()) == 2
    plt.close("all")
