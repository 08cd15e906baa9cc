# -*- coding: utf-8 -*-
########################
# difficulty.py
########################
# Purpose:
# - Difficulty aggregation: run every skill over the target sequence and reduce the results
#   to DifficultyAttributes including the star rating.
# - Strain peak export for plotting difficulty over time.
#
# Design notes:
# - One pass over the difficulty targets feeds all skills; skills do not share state.
# - passed_objects limits the calculation to the first K targets (failed plays, gradual calculation).
# - Map metadata (AR, OD, CS, HP) and object tallies are copied from the converted map, not derived from strain.
# - The flashlight rating is only produced when the Flashlight modifier is active.
# - Touch Device dampens aim and flashlight for the star rating only; the stored aim stays raw
#   because the performance formula applies its own Touch Device penalty.
#
########################
# Interfaces:
# Public classes:
# - class DifficultyCalculator
#   - __init__(converted_map: ConvertedMap, mods: ModifierSet | int | None = None)
#   - passed_objects(passed_objects: int) -> DifficultyCalculator
#   - calculate() -> DifficultyAttributes
#   - strains() -> Strains
#
# Public functions:
# - calculate_difficulty(converted_map, mods=None, passed_objects=None) -> DifficultyAttributes
# - calculate_strains(converted_map, mods=None) -> Strains
# - attributes_from_skills(skills: SkillSet, converted_map: ConvertedMap, mods: ModifierSet) -> DifficultyAttributes
# - star_rating(aim: float, speed: float, flashlight: float, mods: ModifierSet) -> float
#
########################

from __future__ import annotations

import logging
import math
from typing import Optional, Tuple

from strainpp.attributes import DifficultyAttributes, Strains
from strainpp.difficulty_object import build_difficulty_targets, hit_window_great
from strainpp.map_models import ConvertedMap
from strainpp.mods import ModifierSet, as_modifier_set
from strainpp.skills import SkillSet

logger = logging.getLogger(__name__)

DIFFICULTY_MULTIPLIER = 0.0675
PERFORMANCE_BASE_MULTIPLIER = 1.12
STAR_RATING_EPSILON = 1e-5


def _rating(difficulty_value: float) -> float:
    return math.sqrt(difficulty_value) * DIFFICULTY_MULTIPLIER


def _base_performance(rating: float) -> float:
    return (5.0 * max(1.0, rating / DIFFICULTY_MULTIPLIER) - 4.0) ** 3 / 100000.0


def star_rating(aim: float, speed: float, flashlight: float, mods: ModifierSet) -> float:
    if mods.is_touch_device():
        aim = aim ** 0.8
        flashlight = flashlight ** 0.8

    base_aim_performance = _base_performance(aim)
    base_speed_performance = _base_performance(speed)
    base_flashlight_performance = 0.0
    if mods.is_flashlight():
        base_flashlight_performance = flashlight ** 2.0 * 25.0

    base_performance = (
        base_aim_performance ** 1.1 + base_speed_performance ** 1.1 + base_flashlight_performance ** 1.1
    ) ** (1.0 / 1.1)

    if base_performance <= STAR_RATING_EPSILON:
        return 0.0

    return (
        PERFORMANCE_BASE_MULTIPLIER ** (1.0 / 3.0)
        * 0.027
        * ((100000.0 / 2.0 ** (1.0 / 1.1) * base_performance) ** (1.0 / 3.0) + 4.0)
    )


def _counts(converted_map: ConvertedMap) -> Tuple[int, int, int]:
    return converted_map.n_circles, converted_map.n_sliders, converted_map.n_spinners


def attributes_from_skills(skills: SkillSet, converted_map: ConvertedMap, mods: ModifierSet) -> DifficultyAttributes:
    """Reduce the skills' peaks recorded so far and attach the map's metadata.

    ``converted_map`` must already be limited to the targets the skills have seen.
    """
    aim_rating = _rating(skills.aim.difficulty_value())
    aim_no_sliders_rating = _rating(skills.aim_no_sliders.difficulty_value())
    speed_rating = _rating(skills.speed.difficulty_value())
    speed_note_count = skills.speed.relevant_note_count()

    flashlight_rating = 0.0
    if mods.is_flashlight():
        flashlight_rating = _rating(skills.flashlight.difficulty_value())

    slider_factor = aim_no_sliders_rating / aim_rating if aim_rating > 0.0 else 1.0

    n_circles, n_sliders, n_spinners = _counts(converted_map)

    return DifficultyAttributes(
        aim=aim_rating,
        aim_no_sliders=aim_no_sliders_rating,
        speed=speed_rating,
        speed_note_count=speed_note_count,
        flashlight=flashlight_rating,
        slider_factor=slider_factor,
        star_rating=star_rating(aim_rating, speed_rating, flashlight_rating, mods),
        approach_rate=float(converted_map.approach_rate),
        overall_difficulty=float(converted_map.overall_difficulty),
        circle_size=float(converted_map.circle_size),
        health=float(converted_map.health),
        max_combo=converted_map.max_combo,
        n_circles=n_circles,
        n_sliders=n_sliders,
        n_spinners=n_spinners,
    )


def new_skill_set(converted_map: ConvertedMap, mods: ModifierSet) -> SkillSet:
    return SkillSet(
        great_window=hit_window_great(converted_map.overall_difficulty),
        hidden=mods.is_hidden(),
    )


class DifficultyCalculator:
    def __init__(self, converted_map: ConvertedMap, mods=None) -> None:
        self._map = converted_map
        self._mods = as_modifier_set(mods)
        self._passed_objects: Optional[int] = None

    def passed_objects(self, passed_objects: int) -> DifficultyCalculator:
        self._passed_objects = max(0, int(passed_objects))
        return self

    def _run_skills(self) -> Tuple[SkillSet, ConvertedMap]:
        converted_map = self._map.truncated(self._passed_objects)
        skills = new_skill_set(converted_map, self._mods)

        for current in build_difficulty_targets(converted_map):
            skills.process(current)

        return skills, converted_map

    def calculate(self) -> DifficultyAttributes:
        skills, converted_map = self._run_skills()

        if not converted_map.targets:
            n_circles, n_sliders, n_spinners = _counts(converted_map)
            return DifficultyAttributes(
                approach_rate=float(converted_map.approach_rate),
                overall_difficulty=float(converted_map.overall_difficulty),
                circle_size=float(converted_map.circle_size),
                health=float(converted_map.health),
                n_circles=n_circles,
                n_sliders=n_sliders,
                n_spinners=n_spinners,
            )

        attributes = attributes_from_skills(skills, converted_map, self._mods)
        logger.debug(
            "Difficulty over %d targets: stars=%.4f aim=%.4f speed=%.4f flashlight=%.4f",
            len(converted_map),
            attributes.star_rating,
            attributes.aim,
            attributes.speed,
            attributes.flashlight,
        )
        return attributes

    def strains(self) -> Strains:
        skills, converted_map = self._run_skills()
        if len(converted_map) < 2:
            return Strains()

        return Strains(
            aim=skills.aim.finalize(),
            aim_no_sliders=skills.aim_no_sliders.finalize(),
            speed=skills.speed.finalize(),
            flashlight=skills.flashlight.finalize(),
        )


def calculate_difficulty(
    converted_map: ConvertedMap,
    mods=None,
    passed_objects: Optional[int] = None,
) -> DifficultyAttributes:
    calculator = DifficultyCalculator(converted_map, mods)
    if passed_objects is not None:
        calculator.passed_objects(passed_objects)
    return calculator.calculate()


def calculate_strains(converted_map: ConvertedMap, mods=None) -> Strains:
    return DifficultyCalculator(converted_map, mods).strains()
