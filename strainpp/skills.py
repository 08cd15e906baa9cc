# -*- coding: utf-8 -*-
########################
# skills.py
########################
# Purpose:
# - Skills pair a StrainTracker with an evaluator and know how to reduce their peaks to one value.
# - SkillSet drives all four skills over the same difficulty targets.
#
# Design notes:
# - Skills never share state. Each one decays and records its own strain.
# - Reduction: the hardest sections are dampened, then peaks are summed with weights 0.9^i
#   in descending order.
# - Speed decays by strain time and multiplies its strain by the rhythm complexity of the target.
#
########################
# Interfaces:
# Public classes:
# - class ReducedStrainSkill(StrainTracker)
#   - difficulty_value() -> float
# - class AimSkill(ReducedStrainSkill): __init__(with_sliders: bool)
# - class SpeedSkill(ReducedStrainSkill): __init__(great_window: float)
#   - relevant_note_count() -> float
# - class FlashlightSkill(StrainTracker): __init__(hidden: bool)
#   - difficulty_value() -> float
# - class SkillSet
#   - __init__(*, great_window: float, hidden: bool)
#   - process(current: DifficultyTarget) -> None
#
########################

from __future__ import annotations

import math
from typing import List

from strainpp import evaluators
from strainpp.difficulty_object import DifficultyTarget
from strainpp.strain_tracker import StrainTracker, weighted_sum

DEFAULT_DIFFICULTY_MULTIPLIER = 1.06


def _lerp(start: float, final: float, amount: float) -> float:
    return start + (final - start) * amount


class ReducedStrainSkill(StrainTracker):
    reduced_section_count = 10
    reduced_strain_baseline = 0.75
    difficulty_multiplier = DEFAULT_DIFFICULTY_MULTIPLIER
    decay_weight = 0.9

    def difficulty_value(self) -> float:
        strains = [peak for peak in self.finalize() if peak > 0.0]
        strains.sort(reverse=True)

        # Dampen the hardest sections so a few outlier peaks cannot carry the whole rating.
        for index in range(min(len(strains), self.reduced_section_count)):
            amount = min(max(float(index) / float(self.reduced_section_count), 0.0), 1.0)
            scale = math.log10(_lerp(1.0, 10.0, amount))
            strains[index] *= _lerp(self.reduced_strain_baseline, 1.0, scale)

        strains.sort(reverse=True)
        return weighted_sum(strains, self.decay_weight) * self.difficulty_multiplier


class AimSkill(ReducedStrainSkill):
    skill_multiplier = 23.55
    decay_base = 0.15

    def __init__(self, with_sliders: bool) -> None:
        super().__init__()
        self.with_sliders = bool(with_sliders)

    def strain_value_at(self, current: DifficultyTarget) -> float:
        state = self.state
        state.current_strain *= self.strain_decay(current.delta_time)
        state.current_strain += evaluators.evaluate_aim(current, self.with_sliders) * self.skill_multiplier
        return state.current_strain


class SpeedSkill(ReducedStrainSkill):
    skill_multiplier = 1375.0
    decay_base = 0.3
    reduced_section_count = 5
    difficulty_multiplier = 1.04

    def __init__(self, great_window: float) -> None:
        super().__init__()
        self.great_window = float(great_window)
        self.current_rhythm = 0.0
        self.object_strains: List[float] = []

    def calculate_initial_strain(self, time: float, current: DifficultyTarget) -> float:
        previous = current.previous(0)
        previous_start_time = previous.start_time if previous is not None else current.start_time
        return (self.state.current_strain * self.current_rhythm) * self.strain_decay(float(time) - previous_start_time)

    def strain_value_at(self, current: DifficultyTarget) -> float:
        state = self.state
        state.current_strain *= self.strain_decay(current.strain_time)
        state.current_strain += evaluators.evaluate_speed(current, self.great_window) * self.skill_multiplier

        self.current_rhythm = evaluators.evaluate_rhythm(current, self.great_window)

        total_strain = state.current_strain * self.current_rhythm
        self.object_strains.append(total_strain)
        return total_strain

    def relevant_note_count(self) -> float:
        """Number of notes weighted by how close their strain comes to the hardest one."""
        if not self.object_strains:
            return 0.0

        max_strain = max(self.object_strains)
        if max_strain == 0.0:
            return 0.0

        return sum(1.0 / (1.0 + math.exp(-(strain / max_strain * 12.0 - 6.0))) for strain in self.object_strains)


class FlashlightSkill(StrainTracker):
    skill_multiplier = 0.052
    decay_base = 0.15

    def __init__(self, hidden: bool) -> None:
        super().__init__()
        self.hidden = bool(hidden)

    def strain_value_at(self, current: DifficultyTarget) -> float:
        state = self.state
        state.current_strain *= self.strain_decay(current.delta_time)
        state.current_strain += evaluators.evaluate_flashlight(current, self.hidden) * self.skill_multiplier
        return state.current_strain

    def difficulty_value(self) -> float:
        return sum(self.finalize()) * DEFAULT_DIFFICULTY_MULTIPLIER


class SkillSet:
    def __init__(self, *, great_window: float, hidden: bool) -> None:
        self.aim = AimSkill(with_sliders=True)
        self.aim_no_sliders = AimSkill(with_sliders=False)
        self.speed = SpeedSkill(great_window=great_window)
        self.flashlight = FlashlightSkill(hidden=hidden)

    def process(self, current: DifficultyTarget) -> None:
        self.aim.process(current)
        self.aim_no_sliders.process(current)
        self.speed.process(current)
        self.flashlight.process(current)
