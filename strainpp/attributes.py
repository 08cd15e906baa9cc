# -*- coding: utf-8 -*-
########################
# attributes.py
########################
# Purpose:
# - Result value objects of the calculators and the hit-result score state.
#
# Design notes:
# - Attributes are frozen. A calculation produces them once and nothing mutates them afterwards.
# - DifficultyAttributes computed for one modifier set must only be reused with that same set.
#   This is a caller precondition and is not checked here.
# - ScoreState is mutable like the gameplay score state it mirrors; solvers return fresh instances.
#
########################
# Interfaces:
# Public dataclasses:
# - DifficultyAttributes(aim, aim_no_sliders, speed, speed_note_count, flashlight, slider_factor, star_rating,
#                        approach_rate, overall_difficulty, circle_size, health, max_combo,
#                        n_circles, n_sliders, n_spinners)
#   - n_objects() -> int
# - ScoreState(max_combo: int, n300: int, n100: int, n50: int, n_miss: int)
#   - total_hits() -> int
#   - accuracy() -> float
# - PerformanceAttributes(difficulty, pp_aim, pp_speed, pp_accuracy, pp_flashlight, pp_total,
#                         effective_miss_count, state)
# - Strains(aim, aim_no_sliders, speed, flashlight)
#
# Public functions:
# - attributes_of(value: DifficultyAttributes | PerformanceAttributes) -> DifficultyAttributes
#
########################

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Union

from strainpp.strain_tracker import SECTION_LENGTH


@dataclass(frozen=True)
class DifficultyAttributes:
    aim: float = 0.0
    aim_no_sliders: float = 0.0
    speed: float = 0.0
    speed_note_count: float = 0.0
    flashlight: float = 0.0
    slider_factor: float = 1.0
    star_rating: float = 0.0
    approach_rate: float = 0.0
    overall_difficulty: float = 0.0
    circle_size: float = 0.0
    health: float = 0.0
    max_combo: int = 0
    n_circles: int = 0
    n_sliders: int = 0
    n_spinners: int = 0

    def n_objects(self) -> int:
        return int(self.n_circles + self.n_sliders + self.n_spinners)


@dataclass
class ScoreState:
    max_combo: int = 0
    n300: int = 0
    n100: int = 0
    n50: int = 0
    n_miss: int = 0

    def total_hits(self) -> int:
        return int(self.n300 + self.n100 + self.n50 + self.n_miss)

    def accuracy(self) -> float:
        """Weighted accuracy between 0.0 and 1.0. An empty state has 0.0 accuracy."""
        total_hits = self.total_hits()
        if total_hits == 0:
            return 0.0

        numerator = 6 * self.n300 + 2 * self.n100 + self.n50
        denominator = 6 * total_hits
        return float(numerator) / float(denominator)


@dataclass(frozen=True)
class PerformanceAttributes:
    difficulty: DifficultyAttributes
    pp_aim: float = 0.0
    pp_speed: float = 0.0
    pp_accuracy: float = 0.0
    pp_flashlight: float = 0.0
    pp_total: float = 0.0
    effective_miss_count: float = 0.0
    state: Optional[ScoreState] = None

    @property
    def star_rating(self) -> float:
        return float(self.difficulty.star_rating)

    @property
    def max_combo(self) -> int:
        return int(self.difficulty.max_combo)


@dataclass(frozen=True)
class Strains:
    """Chronological strain peaks per skill, one value per section."""

    SECTION_LENGTH = SECTION_LENGTH

    aim: List[float] = field(default_factory=list)
    aim_no_sliders: List[float] = field(default_factory=list)
    speed: List[float] = field(default_factory=list)
    flashlight: List[float] = field(default_factory=list)

    def section_count(self) -> int:
        return len(self.aim)


AttributeSource = Union[DifficultyAttributes, PerformanceAttributes]


def attributes_of(value: AttributeSource) -> DifficultyAttributes:
    if isinstance(value, DifficultyAttributes):
        return value
    if isinstance(value, PerformanceAttributes):
        return value.difficulty
    raise TypeError(f"Expected DifficultyAttributes or PerformanceAttributes, got {type(value).__name__}")


def _run_unit_tests() -> None:
    state = ScoreState(max_combo=10, n300=10, n100=0, n50=0, n_miss=0)
    assert state.accuracy() == 1.0
    assert ScoreState().accuracy() == 0.0

    difficulty = DifficultyAttributes(star_rating=5.0, n_circles=2, n_sliders=1)
    performance = PerformanceAttributes(difficulty=difficulty, pp_total=100.0)
    assert attributes_of(performance) is difficulty
    assert attributes_of(difficulty) is difficulty
    assert difficulty.n_objects() == 3
    assert Strains.SECTION_LENGTH == 400.0


if __name__ == "__main__":
    _run_unit_tests()
    print("attributes.py: ok")
