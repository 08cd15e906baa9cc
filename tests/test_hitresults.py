from __future__ import annotations

import pytest

from strainpp.hitresults import (
    HitResultPriority,
    generate_hitresults,
    resolve_from_accuracy,
    resolve_from_counts,
)


def _percent(state) -> float:
    return 100.0 * state.accuracy()


@pytest.mark.parametrize("priority", list(HitResultPriority))
def test_accuracy_only_lands_near_target(priority):
    state = resolve_from_accuracy(1234, 97.5, priority=priority)

    assert state.total_hits() == 1234
    assert abs(_percent(state) - 97.5) < 1.0


@pytest.mark.parametrize("priority", list(HitResultPriority))
def test_fixed_n50_moves_little(priority):
    state = resolve_from_accuracy(1234, 97.5, n50=30, priority=priority)

    assert abs(state.n50 - 30) <= 4
    assert state.total_hits() == 1234
    assert abs(_percent(state) - 97.5) < 1.0


def test_fixed_n50_best_case_distribution():
    state = resolve_from_accuracy(1234, 97.5, n50=30)
    assert (state.n300, state.n100, state.n50, state.n_miss) == (1196, 8, 30, 0)


def test_missing_counts_fill_to_total():
    state = resolve_from_counts(1234, n300=1000, n100=200, n50=30)

    assert state.total_hits() == 1234
    assert state.n300 == 1004


def test_best_case_accuracy_distributions():
    state = resolve_from_accuracy(601, 98.0, n_miss=2)
    assert (state.n300, state.n100, state.n50, state.n_miss) == (584, 15, 0, 2)

    state = resolve_from_accuracy(601, 90.0)
    assert (state.n300, state.n100, state.n50) == (511, 89, 1)


@pytest.mark.parametrize("n_objects", [1, 2, 7, 100, 601, 1234])
@pytest.mark.parametrize("n_miss", [0, 1, 5])
@pytest.mark.parametrize("accuracy", [0.0, 33.3, 60.0, 85.0, 95.5, 99.0, 100.0])
def test_best_case_never_has_fewer_300s(n_objects, n_miss, accuracy):
    best = resolve_from_accuracy(n_objects, accuracy, n_miss=n_miss, priority=HitResultPriority.BEST_CASE)
    worst = resolve_from_accuracy(n_objects, accuracy, n_miss=n_miss, priority=HitResultPriority.WORST_CASE)

    assert best.total_hits() == n_objects
    assert worst.total_hits() == n_objects
    assert best.n300 >= worst.n300
    assert min(best.n300, best.n100, best.n50, worst.n300, worst.n100, worst.n50) >= 0


def test_worst_case_prefers_100s_as_filler():
    state = resolve_from_accuracy(1000, 90.0, priority=HitResultPriority.WORST_CASE)

    assert state.total_hits() == 1000
    assert state.n100 > state.n50
    assert abs(_percent(state) - 90.0) < 1.0


@pytest.mark.parametrize(
    "fixed",
    [
        {"n300": 900},
        {"n100": 40},
        {"n300": 900, "n100": 40},
        {"n300": 900, "n50": 10},
        {"n100": 40, "n50": 10},
        {"n300": 900, "n100": 40, "n50": 10},
    ],
)
@pytest.mark.parametrize("priority", list(HitResultPriority))
def test_fixed_counts_keep_total(fixed, priority):
    state = resolve_from_accuracy(1000, 95.0, n_miss=3, priority=priority, **fixed)

    assert state.total_hits() == 1000
    assert state.n_miss == 3
    # With all three fixed, the leftover lands on n300 or n50 depending on priority.
    kept = ["n100"] if len(fixed) == 3 else list(fixed)
    for name in kept:
        assert getattr(state, name) == fixed[name]


def test_counts_priority_decides_fill_slot():
    best = resolve_from_counts(601, n50=10, n_miss=2)
    assert (best.n300, best.n100, best.n50) == (589, 0, 10)

    worst = resolve_from_counts(601, n300=500, n_miss=2, priority=HitResultPriority.WORST_CASE)
    assert (worst.n300, worst.n100, worst.n50) == (500, 0, 99)

    worst_all_set = resolve_from_counts(601, n300=500, n100=50, n50=10, priority=HitResultPriority.WORST_CASE)
    assert worst_all_set.n50 == 51


def test_overspecified_counts_are_clamped():
    state = resolve_from_counts(10, n300=8, n100=8, n50=8, n_miss=4)

    assert state.n_miss == 4
    assert (state.n300, state.n100, state.n50) == (6, 0, 0)
    assert state.total_hits() == 10


def test_misses_beyond_object_count_saturate():
    state = resolve_from_accuracy(10, 100.0, n_miss=50)

    assert state.n_miss == 10
    assert (state.n300, state.n100, state.n50) == (0, 0, 0)


def test_empty_play_resolves_to_zero():
    state = generate_hitresults(0, accuracy=95.0)

    assert state.total_hits() == 0
    assert state.accuracy() == 0.0


def test_generate_dispatches_on_accuracy():
    from_accuracy = generate_hitresults(601, accuracy=90.0)
    from_counts = generate_hitresults(601, n100=89, n50=1)

    assert (from_accuracy.n300, from_accuracy.n100, from_accuracy.n50) == (511, 89, 1)
    assert (from_counts.n300, from_counts.n100, from_counts.n50) == (511, 89, 1)


def test_combo_passes_through():
    assert generate_hitresults(10, accuracy=100.0, max_combo=7).max_combo == 7


def test_priority_parsing():
    assert HitResultPriority.parse("worst-case") is HitResultPriority.WORST_CASE
    assert HitResultPriority.parse("BEST_CASE") is HitResultPriority.BEST_CASE
    assert HitResultPriority.parse(HitResultPriority.WORST_CASE) is HitResultPriority.WORST_CASE

    with pytest.raises(ValueError):
        HitResultPriority.parse("median")


def _points(state) -> int:
    return 6 * state.n300 + 2 * state.n100 + state.n50


@pytest.mark.parametrize("priority", list(HitResultPriority))
@pytest.mark.parametrize("n_objects", [7, 40, 81])
@pytest.mark.parametrize("accuracy", [10.0, 45.0, 70.0, 88.8, 97.0, 100.0])
def test_more_misses_never_raise_accuracy(n_objects, accuracy, priority):
    points = []
    for n_miss in range(n_objects + 1):
        state = resolve_from_accuracy(n_objects, accuracy, n_miss=n_miss, priority=priority)
        assert state.total_hits() == n_objects
        assert min(state.n300, state.n100, state.n50) >= 0
        points.append(_points(state))

    assert all(later <= earlier for earlier, later in zip(points, points[1:]))


@pytest.mark.parametrize("priority", list(HitResultPriority))
def test_unreachable_totals_round_down_near_the_top(priority):
    # 70% of 81 objects is 340 points; 57 hits can reach 338 or 342 but not 340.
    fewer = resolve_from_accuracy(81, 70.0, n_miss=23, priority=priority)
    more = resolve_from_accuracy(81, 70.0, n_miss=24, priority=priority)

    assert (fewer.n300, fewer.n100, fewer.n50) == (56, 2, 0)
    assert (more.n300, more.n100, more.n50) == (56, 1, 0)
    assert _points(more) == 338


def test_reachable_targets_are_hit_exactly():
    for n_miss in range(0, 10):
        state = resolve_from_accuracy(601, 95.0, n_miss=n_miss)
        assert _points(state) == round(0.95 * 601 * 6)
