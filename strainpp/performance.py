# -*- coding: utf-8 -*-
########################
# performance.py
########################
# Purpose:
# - Performance (pp) of a play: aim, speed, accuracy and flashlight sub-values plus their total.
# - Builder surface that records options and resolves them once in calculate().
#
# Design notes:
# - Setters only record values. calculate() runs one ordered resolution:
#   attributes -> hit results -> accuracy -> sub-values. Last write wins per option.
# - Reused attributes must come from the same modifier set; that is not checked.
# - Hit results are counted against passed_objects when set, otherwise against all targets.
# - A play with zero hits yields zero pp rather than dividing by zero.
# - The hit-result priority defaults to BEST_CASE. No config file or environment is read here;
#   entry points that want the configured priority pass config.default_hitresult_priority().
#
########################
# Interfaces:
# Public classes:
# - class PerformanceCalculator
#   - __init__(converted_map: ConvertedMap)
#   - mods(mods) / combo(int) / n300(int) / n100(int) / n50(int) / n_misses(int) / passed_objects(int)
#   - accuracy(percent: float) / attributes(DifficultyAttributes | PerformanceAttributes) / state(ScoreState)
#   - hitresult_priority(HitResultPriority | str)
#   - calculate() -> PerformanceAttributes
#
# Public functions:
# - calculate_performance(converted_map, mods=None, **options) -> PerformanceAttributes
#
########################

from __future__ import annotations

from dataclasses import dataclass
import logging
import math
from typing import Optional

from strainpp.attributes import (
    AttributeSource,
    DifficultyAttributes,
    PerformanceAttributes,
    ScoreState,
    attributes_of,
)
from strainpp.difficulty import PERFORMANCE_BASE_MULTIPLIER, DifficultyCalculator
from strainpp.hitresults import HitResultPriority, generate_hitresults
from strainpp.map_models import ConvertedMap
from strainpp.mods import ModifierSet, as_modifier_set

logger = logging.getLogger(__name__)

TOTAL_POWER = 1.1


@dataclass(frozen=True)
class _Play:
    """Resolved inputs shared by every sub-value."""

    attributes: DifficultyAttributes
    mods: ModifierSet
    state: ScoreState
    combo: int
    total_hits: float
    accuracy: float
    effective_miss_count: float


def _strain_to_performance(rating: float) -> float:
    return (5.0 * max(rating / 0.0675, 1.0) - 4.0) ** 3 / 100000.0


def _length_bonus(total_hits: float, *, base: float, scale: float) -> float:
    bonus = base + scale * min(total_hits / 2000.0, 1.0)
    if total_hits > 2000.0:
        bonus += 0.5 * math.log10(total_hits / 2000.0)
    return bonus


def _miss_penalty(effective_miss_count: float, total_hits: float) -> float:
    return 0.97 * (1.0 - (effective_miss_count / total_hits) ** 0.5) ** (1.0 + effective_miss_count / 1.5)


def _ar_factor(approach_rate: float) -> float:
    ar_factor = 0.0
    if approach_rate > 10.33:
        ar_factor = 0.3 * (approach_rate - 10.33)
    if approach_rate < 8.0:
        ar_factor = 0.025 * (8.0 - approach_rate)
    return ar_factor


def effective_miss_count(attributes: DifficultyAttributes, *, combo: int, n100: int, n50: int, n_miss: int) -> float:
    """Misses plus the combo breaks a short combo implies, bounded by the non-300 count."""
    combo_based_miss_count = 0.0

    if attributes.n_sliders > 0:
        full_combo_threshold = float(attributes.max_combo) - 0.1 * float(attributes.n_sliders)
        if float(combo) < full_combo_threshold:
            combo_based_miss_count = full_combo_threshold / max(float(combo), 1.0)

    combo_based_miss_count = min(combo_based_miss_count, float(n100 + n50 + n_miss))
    return max(combo_based_miss_count, float(n_miss))


def aim_value(play: _Play) -> float:
    attributes = play.attributes
    mods = play.mods
    total_hits = play.total_hits

    raw_aim = attributes.aim
    if mods.is_touch_device():
        raw_aim = raw_aim ** 0.8

    value = _strain_to_performance(raw_aim)

    length_bonus = _length_bonus(total_hits, base=0.88, scale=0.4)
    value *= length_bonus

    if play.effective_miss_count > 0.0:
        value *= _miss_penalty(play.effective_miss_count, total_hits)

    approach_rate = attributes.approach_rate
    value *= 1.0 + _ar_factor(approach_rate) * length_bonus

    if mods.is_hidden():
        value *= 1.0 + 0.05 * (11.0 - approach_rate)

    if mods.is_flashlight():
        flashlight_bonus = 1.0 + 0.3 * min(total_hits / 200.0, 1.0)
        if total_hits > 200.0:
            flashlight_bonus += 0.25 * min((total_hits - 200.0) / 300.0, 1.0)
        if total_hits > 500.0:
            flashlight_bonus += (total_hits - 500.0) / 1600.0
        value *= flashlight_bonus

    if attributes.circle_size > 8.0:
        value *= max(0.6 - 0.2 * (attributes.circle_size - 8.0), 0.2)

    # Both Easy adjustments apply on top of the AR factor above.
    if mods.is_easy():
        base_buff = 1.08
        if approach_rate <= 8.0:
            base_buff += (7.0 - approach_rate) / 100.0
        value *= base_buff

    overall_difficulty = attributes.overall_difficulty
    value *= 0.3 + play.accuracy / 2.0
    value *= 0.95 + overall_difficulty * overall_difficulty / 1900.0

    return value


def speed_value(play: _Play) -> float:
    attributes = play.attributes
    total_hits = play.total_hits

    value = _strain_to_performance(attributes.speed)

    length_bonus = _length_bonus(total_hits, base=0.83, scale=0.5)
    value *= length_bonus

    if play.effective_miss_count > 0.0:
        value *= _miss_penalty(play.effective_miss_count, total_hits)

    approach_rate = attributes.approach_rate
    if approach_rate > 10.33:
        value *= 1.0 + _ar_factor(approach_rate) * length_bonus

    if play.mods.is_hidden():
        value *= 1.0 + 0.05 * (11.0 - approach_rate)

    overall_difficulty = attributes.overall_difficulty
    value *= (0.87 + overall_difficulty * overall_difficulty / 770.0) * play.accuracy ** (
        (14.5 - max(overall_difficulty, 8.0)) / 2.0
    )

    n50 = float(play.state.n50)
    n50_excess = 0.0 if n50 < total_hits / 500.0 else n50 - total_hits / 500.0
    value *= 0.98 ** n50_excess

    return value


def accuracy_value(play: _Play) -> float:
    attributes = play.attributes
    state = play.state
    n_circles = float(attributes.n_circles)

    better_accuracy = 0.0
    if n_circles > 0.0:
        better_accuracy = max(
            ((float(state.n300) - (play.total_hits - n_circles)) * 6.0 + float(state.n100) * 2.0 + float(state.n50))
            / (n_circles * 6.0),
            0.0,
        )

    value = 1.52163 ** attributes.overall_difficulty * better_accuracy ** 24 * 2.8

    # Bonus for many circles.
    value *= min((n_circles / 1000.0) ** 0.3, 1.05)

    if play.mods.is_hidden():
        value *= 1.08
    if play.mods.is_flashlight():
        value *= 1.02

    return value


def flashlight_value(play: _Play) -> float:
    if not play.mods.is_flashlight():
        return 0.0

    attributes = play.attributes
    total_hits = play.total_hits

    raw_flashlight = attributes.flashlight
    if play.mods.is_touch_device():
        raw_flashlight = raw_flashlight ** 0.8

    value = raw_flashlight ** 2 * 25.0

    miss_count = play.effective_miss_count
    if miss_count > 0.0:
        value *= 0.97 * (1.0 - (miss_count / total_hits) ** 0.775) ** (miss_count ** 0.875)

    if attributes.max_combo > 0:
        value *= min(float(play.combo) ** 0.8 / float(attributes.max_combo) ** 0.8, 1.0)

    length_factor = 0.7 + 0.1 * min(1.0, total_hits / 200.0)
    if total_hits > 200.0:
        length_factor += 0.2 * min(1.0, (total_hits - 200.0) / 200.0)
    value *= length_factor

    overall_difficulty = attributes.overall_difficulty
    value *= 0.5 + play.accuracy / 2.0
    value *= 0.98 + overall_difficulty * overall_difficulty / 2500.0

    return value


class PerformanceCalculator:
    def __init__(self, converted_map: ConvertedMap) -> None:
        self._map = converted_map
        self._mods: ModifierSet = as_modifier_set(None)
        self._attributes: Optional[DifficultyAttributes] = None
        self._combo: Optional[int] = None
        self._accuracy: Optional[float] = None
        self._n300: Optional[int] = None
        self._n100: Optional[int] = None
        self._n50: Optional[int] = None
        self._n_misses = 0
        self._passed_objects: Optional[int] = None
        self._priority = HitResultPriority.BEST_CASE

    def mods(self, mods) -> PerformanceCalculator:
        self._mods = as_modifier_set(mods)
        return self

    def attributes(self, attributes: AttributeSource) -> PerformanceCalculator:
        self._attributes = attributes_of(attributes)
        return self

    def combo(self, combo: int) -> PerformanceCalculator:
        self._combo = max(0, int(combo))
        return self

    def n300(self, n300: int) -> PerformanceCalculator:
        self._n300 = max(0, int(n300))
        return self

    def n100(self, n100: int) -> PerformanceCalculator:
        self._n100 = max(0, int(n100))
        return self

    def n50(self, n50: int) -> PerformanceCalculator:
        self._n50 = max(0, int(n50))
        return self

    def n_misses(self, n_misses: int) -> PerformanceCalculator:
        self._n_misses = max(0, int(n_misses))
        return self

    def passed_objects(self, passed_objects: int) -> PerformanceCalculator:
        self._passed_objects = max(0, int(passed_objects))
        return self

    def accuracy(self, accuracy: float) -> PerformanceCalculator:
        """Target accuracy in percent. Counts set before calculate() are kept fixed."""
        self._accuracy = float(accuracy)
        return self

    def state(self, state: ScoreState) -> PerformanceCalculator:
        """Take all counts and the combo from a score state, replacing any earlier accuracy."""
        self._combo = int(state.max_combo)
        self._n300 = int(state.n300)
        self._n100 = int(state.n100)
        self._n50 = int(state.n50)
        self._n_misses = int(state.n_miss)
        self._accuracy = None
        return self

    def hitresult_priority(self, priority) -> PerformanceCalculator:
        self._priority = HitResultPriority.parse(priority)
        return self

    def _n_objects(self) -> int:
        if self._passed_objects is not None:
            return min(self._passed_objects, len(self._map))
        return len(self._map)

    def _resolve_attributes(self) -> DifficultyAttributes:
        if self._attributes is not None:
            return self._attributes

        calculator = DifficultyCalculator(self._map, self._mods)
        if self._passed_objects is not None:
            calculator.passed_objects(self._passed_objects)
        return calculator.calculate()

    def _resolve_state(self, attributes: DifficultyAttributes, n_objects: int) -> ScoreState:
        combo = self._combo if self._combo is not None else attributes.max_combo

        return generate_hitresults(
            n_objects,
            accuracy=self._accuracy,
            n300=self._n300,
            n100=self._n100,
            n50=self._n50,
            n_miss=self._n_misses,
            max_combo=combo,
            priority=self._priority,
        )

    def calculate(self) -> PerformanceAttributes:
        attributes = self._resolve_attributes()
        n_objects = self._n_objects()
        state = self._resolve_state(attributes, n_objects)

        total_hits = float(min(state.total_hits(), n_objects))
        if total_hits <= 0.0:
            logger.debug("No hits to rate over %d objects", n_objects)
            return PerformanceAttributes(difficulty=attributes, state=state)

        accuracy = float(6 * state.n300 + 2 * state.n100 + state.n50) / float(6 * n_objects)
        miss_count = effective_miss_count(
            attributes,
            combo=state.max_combo,
            n100=state.n100,
            n50=state.n50,
            n_miss=state.n_miss,
        )

        play = _Play(
            attributes=attributes,
            mods=self._mods,
            state=state,
            combo=state.max_combo,
            total_hits=total_hits,
            accuracy=accuracy,
            effective_miss_count=miss_count,
        )

        multiplier = PERFORMANCE_BASE_MULTIPLIER
        if self._mods.is_no_fail():
            multiplier *= max(0.9, 1.0 - 0.02 * miss_count)
        if self._mods.is_spun_out():
            multiplier *= 1.0 - (float(attributes.n_spinners) / total_hits) ** 0.85

        pp_aim = aim_value(play)
        pp_speed = speed_value(play)
        pp_accuracy = accuracy_value(play)
        pp_flashlight = flashlight_value(play)

        pp_total = (
            pp_aim ** TOTAL_POWER
            + pp_speed ** TOTAL_POWER
            + pp_accuracy ** TOTAL_POWER
            + pp_flashlight ** TOTAL_POWER
        ) ** (1.0 / TOTAL_POWER) * multiplier

        logger.debug(
            "Performance %.3f (aim %.3f, speed %.3f, acc %.3f, fl %.3f) over %d hits",
            pp_total,
            pp_aim,
            pp_speed,
            pp_accuracy,
            pp_flashlight,
            int(total_hits),
        )

        return PerformanceAttributes(
            difficulty=attributes,
            pp_aim=pp_aim,
            pp_speed=pp_speed,
            pp_accuracy=pp_accuracy,
            pp_flashlight=pp_flashlight,
            pp_total=pp_total,
            effective_miss_count=miss_count,
            state=state,
        )


def calculate_performance(
    converted_map: ConvertedMap,
    mods=None,
    *,
    attributes: Optional[AttributeSource] = None,
    combo: Optional[int] = None,
    accuracy: Optional[float] = None,
    n300: Optional[int] = None,
    n100: Optional[int] = None,
    n50: Optional[int] = None,
    n_misses: int = 0,
    passed_objects: Optional[int] = None,
    priority=None,
) -> PerformanceAttributes:
    calculator = PerformanceCalculator(converted_map).mods(mods).n_misses(n_misses)
    if attributes is not None:
        calculator.attributes(attributes)
    if passed_objects is not None:
        calculator.passed_objects(passed_objects)
    if combo is not None:
        calculator.combo(combo)
    if n300 is not None:
        calculator.n300(n300)
    if n100 is not None:
        calculator.n100(n100)
    if n50 is not None:
        calculator.n50(n50)
    if accuracy is not None:
        calculator.accuracy(accuracy)
    if priority is not None:
        calculator.hitresult_priority(priority)
    return calculator.calculate()
