# -*- coding: utf-8 -*-
########################
# strain_tracker.py
########################
# Purpose:
# - Decaying strain bookkeeping for one skill across fixed 400 ms sections.
# - Records the peak strain of every section in chronological order.
#
# Design notes:
# - One StrainTracker owns exactly one StrainState. Nothing else mutates it.
# - Subclasses supply strain_value_at() and calculate_initial_strain(); this module only handles time.
# - The first section boundary is the first target's time rounded up to a multiple of the section length.
# - finalize() includes the open section without closing it, so a tracker can keep advancing afterwards.
#
########################
# Interfaces:
# Public constants:
# - SECTION_LENGTH = 400.0
#
# Public dataclasses:
# - StrainState(current_strain: float, section_end: float, section_peak: float, peaks: list[float])
#
# Public classes:
# - class StrainTracker
#   - strain_decay(ms: float) -> float
#   - start_new_section_if_needed(current: DifficultyTarget) -> None
#   - process(current: DifficultyTarget) -> float
#   - finalize() -> list[float]
#   - sorted_peaks() -> list[float]
#
# Public functions:
# - weighted_sum(sorted_values: Iterable[float], decay_weight: float) -> float
#
########################

from __future__ import annotations

from dataclasses import dataclass, field
import math
from typing import Iterable, List

from strainpp.difficulty_object import DifficultyTarget

SECTION_LENGTH = 400.0


@dataclass
class StrainState:
    current_strain: float = 0.0
    section_end: float = 0.0
    section_peak: float = 0.0
    peaks: List[float] = field(default_factory=list)


class StrainTracker:
    decay_base = 0.15
    skill_multiplier = 1.0

    def __init__(self) -> None:
        self.state = StrainState()

    def strain_decay(self, ms: float) -> float:
        return self.decay_base ** (float(ms) / 1000.0)

    def strain_value_at(self, current: DifficultyTarget) -> float:
        raise NotImplementedError

    def calculate_initial_strain(self, time: float, current: DifficultyTarget) -> float:
        previous = current.previous(0)
        previous_start_time = previous.start_time if previous is not None else current.start_time
        return self.state.current_strain * self.strain_decay(float(time) - previous_start_time)

    def start_new_section_if_needed(self, current: DifficultyTarget) -> None:
        state = self.state
        if current.index == 0:
            state.section_end = math.ceil(current.start_time / SECTION_LENGTH) * SECTION_LENGTH

        while current.start_time > state.section_end:
            state.peaks.append(state.section_peak)
            # The new section starts with the strain carried over from before its boundary.
            state.section_peak = self.calculate_initial_strain(state.section_end, current)
            state.section_end += SECTION_LENGTH

    def process(self, current: DifficultyTarget) -> float:
        self.start_new_section_if_needed(current)
        strain = self.strain_value_at(current)
        self.state.section_peak = max(strain, self.state.section_peak)
        return strain

    def finalize(self) -> List[float]:
        """Chronological section peaks including the section that is still open."""
        return list(self.state.peaks) + [self.state.section_peak]

    def sorted_peaks(self) -> List[float]:
        return sorted(self.finalize(), reverse=True)


def weighted_sum(sorted_values: Iterable[float], decay_weight: float) -> float:
    """Sum values with weights 1, w, w^2, ... in the given order."""
    total = 0.0
    weight = 1.0
    for value in sorted_values:
        total += float(value) * weight
        weight *= decay_weight
    return total


def _run_unit_tests() -> None:
    class _Constant(StrainTracker):
        decay_base = 0.5

        def strain_value_at(self, current: DifficultyTarget) -> float:
            self.state.current_strain *= self.strain_decay(current.delta_time)
            self.state.current_strain += 1.0
            return self.state.current_strain

    class _Point:
        def __init__(self, index: int, start_time: float, delta_time: float, objects: list) -> None:
            self.index = index
            self.start_time = start_time
            self.delta_time = delta_time
            self._objects = objects

        def previous(self, backwards_index: int):
            position = self.index - (backwards_index + 1)
            return self._objects[position] if position >= 0 else None

    objects: list = []
    for index, time in enumerate([100.0, 1100.0, 1200.0]):
        delta = time - (objects[-1].start_time if objects else 0.0)
        objects.append(_Point(index, time, delta, objects))

    tracker = _Constant()
    for point in objects:
        tracker.process(point)

    peaks = tracker.finalize()
    assert len(peaks) == 3
    assert peaks[0] == 1.0
    assert tracker.sorted_peaks()[0] == max(peaks)
    assert tracker.finalize() == peaks
    assert weighted_sum([2.0, 1.0], 0.5) == 2.5


if __name__ == "__main__":
    _run_unit_tests()
    print("strain_tracker.py: ok")
