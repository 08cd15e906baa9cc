# -*- coding: utf-8 -*-
########################
# hitresults.py
########################
# Purpose:
# - Reconstruct a full hit-result distribution (n300, n100, n50, misses) from partial counts
#   or from a target accuracy.
#
# Design notes:
# - Pure integer arithmetic. Every subtraction saturates at zero.
# - Fixed counts are clamped in the order misses, n300, n100, n50 so they never exceed the object count.
# - Points scale: 300 = 6, 100 = 2, 50 = 1, miss = 0. Accuracy = points / (6 * objects).
# - Output invariant: n300 + n100 + n50 + n_miss == n_objects.
# - With only misses fixed, the points total is chosen first and never rises when misses rise.
#   Near the top of the scale not every total is reachable; the nearest one at or below the
#   total for one fewer miss is used.
# - Priority decides ties:
#   - BEST_CASE fills n300 first and turns n50 quads into n100s by giving up n300s.
#   - WORST_CASE uses the fewest n300 that still reach the target, n100 before n50 as filler.
#
########################
# Interfaces:
# Public enums:
# - class HitResultPriority(enum.Enum): BEST_CASE | WORST_CASE
#
# Public functions:
# - resolve_from_counts(n_objects, *, n300=None, n100=None, n50=None, n_miss=0, max_combo=0, priority=BEST_CASE) -> ScoreState
# - resolve_from_accuracy(n_objects, accuracy, *, n300=None, n100=None, n50=None, n_miss=0, max_combo=0,
#                         priority=BEST_CASE) -> ScoreState
# - generate_hitresults(n_objects, *, accuracy=None, ...) -> ScoreState
#
# Inputs:
# - accuracy is a percentage between 0 and 100.
#
########################

from __future__ import annotations

import enum
import logging
import math
from typing import Optional, Tuple

from strainpp.attributes import ScoreState

logger = logging.getLogger(__name__)


class HitResultPriority(enum.Enum):
    BEST_CASE = "best_case"
    WORST_CASE = "worst_case"

    @classmethod
    def parse(cls, value: object) -> HitResultPriority:
        if isinstance(value, HitResultPriority):
            return value
        normalized = str(value or "").strip().lower().replace("-", "_").replace(" ", "_")
        for priority in cls:
            if priority.value == normalized or priority.name.lower() == normalized:
                return priority
        raise ValueError(f"Unknown hit result priority: {value!r}")


def _clamp_count(value: Optional[int], limit: int) -> Optional[int]:
    if value is None:
        return None
    return max(0, min(int(value), int(limit)))


def _clamp_fixed(
    n_objects: int,
    n300: Optional[int],
    n100: Optional[int],
    n50: Optional[int],
    n_miss: int,
) -> Tuple[int, int, Optional[int], Optional[int], Optional[int]]:
    n_objects = max(0, int(n_objects))
    n_miss = max(0, min(int(n_miss), n_objects))
    remaining = n_objects - n_miss

    n300 = _clamp_count(n300, remaining)
    remaining -= n300 or 0
    n100 = _clamp_count(n100, remaining)
    remaining -= n100 or 0
    n50 = _clamp_count(n50, remaining)

    return n_objects, n_miss, n300, n100, n50


def _round_half_up(value: float) -> int:
    return int(math.floor(float(value) + 0.5))


def _ceil_div(numerator: int, denominator: int) -> int:
    return -((-numerator) // denominator)


def resolve_from_counts(
    n_objects: int,
    *,
    n300: Optional[int] = None,
    n100: Optional[int] = None,
    n50: Optional[int] = None,
    n_miss: int = 0,
    max_combo: int = 0,
    priority: HitResultPriority = HitResultPriority.BEST_CASE,
) -> ScoreState:
    """Fill unset counts so the distribution covers ``n_objects``.

    BEST_CASE gives the remainder to the first unset slot of n300, n100, n50 and to n300
    when all are set. WORST_CASE uses the order n50, n100, n300 and falls back to n50.
    """
    n_objects, n_miss, n300, n100, n50 = _clamp_fixed(n_objects, n300, n100, n50, n_miss)
    remaining = n_objects - n_miss - (n300 or 0) - (n100 or 0) - (n50 or 0)

    if priority is HitResultPriority.BEST_CASE:
        if n300 is None:
            n300 = remaining
        elif n100 is None:
            n100 = remaining
        elif n50 is None:
            n50 = remaining
        else:
            n300 += remaining
    else:
        if n50 is None:
            n50 = remaining
        elif n100 is None:
            n100 = remaining
        elif n300 is None:
            n300 = remaining
        else:
            n50 += remaining

    return ScoreState(
        max_combo=int(max_combo),
        n300=int(n300 or 0),
        n100=int(n100 or 0),
        n50=int(n50 or 0),
        n_miss=n_miss,
    )


def _max_points_at_most(remaining: int, bound: int) -> Optional[int]:
    if bound < remaining:
        return None
    n300 = min(remaining, (bound - remaining) // 5)
    return min(2 * remaining + 4 * n300, bound)


def _min_points_at_least(remaining: int, bound: int) -> Optional[int]:
    if bound <= remaining:
        return remaining
    if bound > 6 * remaining:
        return None
    n300 = max(0, _ceil_div(bound - 2 * remaining, 4))
    return max(remaining + 5 * n300, bound)


def _nearest_points(remaining: int, target_total: int, cap: Optional[int]) -> int:
    """Reachable points closest to ``target_total`` and not above ``cap``; ties go to fewer points."""
    upper = target_total if cap is None else min(target_total, cap)
    below = _max_points_at_most(remaining, upper)
    if cap is not None and target_total >= cap:
        return int(below)

    above = _min_points_at_least(remaining, target_total)
    if above is not None and cap is not None and above > cap:
        above = None
    if below is None:
        return int(above)
    if above is None or target_total - below <= above - target_total:
        return below
    return above


def _target_points(n_objects: int, remaining: int, target_total: int) -> int:
    # From this many hit objects up, every total between remaining and target_total is reachable.
    steady = _ceil_div(target_total + 12, 6)
    if remaining >= steady:
        return max(target_total, remaining)

    # Walk down one hit at a time; each step keeps or lowers the total.
    size = min(n_objects, steady)
    points = _nearest_points(size, target_total, None)
    for size in range(size - 1, remaining - 1, -1):
        points = _nearest_points(size, target_total, points)
    return points


def _best_case_split(remaining: int, points: int) -> Tuple[int, int, int]:
    extra = points - remaining
    n300 = min(extra // 5, remaining)
    n100 = extra - 5 * n300
    n50 = remaining - n300 - n100

    # Sacrifice n300s to turn n50s into n100s at equal points.
    n = min(n300, n50 // 4)
    n300 -= n
    n100 += 5 * n
    n50 -= 4 * n

    return n300, n100, n50


def _worst_case_split(remaining: int, points: int) -> Tuple[int, int, int]:
    extra = points - remaining
    n300 = max(0, _ceil_div(extra - remaining, 4))
    n100 = extra - 5 * n300
    n50 = remaining - n300 - n100
    return n300, n100, n50


def _with_fixed_n50(
    remaining: int,
    target_total: int,
    n50: int,
    priority: HitResultPriority,
) -> Tuple[int, int, int]:
    free = remaining - n50
    numerator = target_total - n50 - 2 * free

    if priority is HitResultPriority.BEST_CASE:
        n300 = _ceil_div(numerator, 4)
    else:
        n300 = numerator // 4

    if n300 < 0:
        # Even all n100s overshoot; more n50s are needed than were fixed.
        n300 = 0
        n100 = max(0, min(target_total - remaining, remaining))
        return n300, n100, remaining - n100

    if n300 > free:
        # The fixed n50s cost too much accuracy; give up as few of them as possible.
        n50 = min(n50, max(0, _ceil_div(6 * remaining - target_total, 5)))
        return remaining - n50, 0, n50

    return n300, free - n300, n50


def resolve_from_accuracy(
    n_objects: int,
    accuracy: float,
    *,
    n300: Optional[int] = None,
    n100: Optional[int] = None,
    n50: Optional[int] = None,
    n_miss: int = 0,
    max_combo: int = 0,
    priority: HitResultPriority = HitResultPriority.BEST_CASE,
) -> ScoreState:
    """Build the distribution whose accuracy is closest to ``accuracy`` (0 to 100).

    Misses are always fixed. Fixed n300/n100/n50 values are kept unless the target cannot be
    reached otherwise; when only n50 is fixed it is moved as little as possible.
    """
    n_objects, n_miss, n300, n100, n50 = _clamp_fixed(n_objects, n300, n100, n50, n_miss)
    remaining = n_objects - n_miss

    acc = min(max(float(accuracy) / 100.0, 0.0), 1.0)
    target_total = _round_half_up(acc * n_objects * 6.0)
    # Points above the baseline of all remaining objects being n50s.
    delta = max(0, target_total - remaining)

    if n300 is not None and n100 is not None and n50 is not None:
        leftover = remaining - n300 - n100 - n50
        if priority is HitResultPriority.BEST_CASE:
            n300 += leftover
        else:
            n50 += leftover
    elif n300 is not None and n100 is not None:
        n50 = remaining - n300 - n100
    elif n300 is not None and n50 is not None:
        n100 = remaining - n300 - n50
    elif n100 is not None and n50 is not None:
        n300 = remaining - n100 - n50
    elif n300 is not None:
        free = remaining - n300
        n100 = max(0, min(delta - 5 * n300, free))
        n50 = free - n100
    elif n100 is not None:
        free = remaining - n100
        budget = max(0, delta - n100)
        if priority is HitResultPriority.BEST_CASE:
            n300 = min((budget + 2) // 5, free)
        else:
            n300 = min(budget // 5, free)
        n50 = free - n300
    elif n50 is not None:
        n300, n100, n50 = _with_fixed_n50(remaining, target_total, n50, priority)
    else:
        points = _target_points(n_objects, remaining, target_total)
        if priority is HitResultPriority.BEST_CASE:
            n300, n100, n50 = _best_case_split(remaining, points)
        else:
            n300, n100, n50 = _worst_case_split(remaining, points)

    state = ScoreState(max_combo=int(max_combo), n300=int(n300), n100=int(n100), n50=int(n50), n_miss=n_miss)
    logger.debug(
        "Resolved %.2f%% over %d objects (%s): %d/%d/%d/%d",
        acc * 100.0,
        n_objects,
        priority.value,
        state.n300,
        state.n100,
        state.n50,
        state.n_miss,
    )
    return state


def generate_hitresults(
    n_objects: int,
    *,
    accuracy: Optional[float] = None,
    n300: Optional[int] = None,
    n100: Optional[int] = None,
    n50: Optional[int] = None,
    n_miss: int = 0,
    max_combo: int = 0,
    priority: HitResultPriority = HitResultPriority.BEST_CASE,
) -> ScoreState:
    if accuracy is not None:
        return resolve_from_accuracy(
            n_objects,
            accuracy,
            n300=n300,
            n100=n100,
            n50=n50,
            n_miss=n_miss,
            max_combo=max_combo,
            priority=priority,
        )
    return resolve_from_counts(
        n_objects,
        n300=n300,
        n100=n100,
        n50=n50,
        n_miss=n_miss,
        max_combo=max_combo,
        priority=priority,
    )


def _run_unit_tests() -> None:
    state = resolve_from_accuracy(601, 98.0, n_miss=2)
    assert (state.n300, state.n100, state.n50, state.n_miss) == (584, 15, 0, 2)

    state = resolve_from_accuracy(601, 90.0)
    assert (state.n300, state.n100, state.n50) == (511, 89, 1)

    state = resolve_from_accuracy(81, 70.0, n_miss=23)
    assert (state.n300, state.n100, state.n50) == (56, 2, 0)
    state = resolve_from_accuracy(81, 70.0, n_miss=24)
    assert (state.n300, state.n100, state.n50) == (56, 1, 0)

    state = resolve_from_counts(601, n300=300, n50=10, n_miss=2)
    assert (state.n300, state.n100, state.n50) == (300, 289, 10)

    state = resolve_from_counts(601, n50=10, n_miss=2, priority=HitResultPriority.WORST_CASE)
    assert (state.n300, state.n100, state.n50) == (0, 589, 10)

    for accuracy in (0.0, 16.0, 50.0, 90.0, 99.9, 100.0):
        best = resolve_from_accuracy(77, accuracy, n_miss=3)
        worst = resolve_from_accuracy(77, accuracy, n_miss=3, priority=HitResultPriority.WORST_CASE)
        assert best.total_hits() == worst.total_hits() == 77
        assert best.n300 >= worst.n300


if __name__ == "__main__":
    _run_unit_tests()
    print("hitresults.py: ok")
