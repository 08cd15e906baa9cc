# -*- coding: utf-8 -*-
########################
# map_models.py
########################
# Purpose:
# - Data models for a converted map: the ordered target sequence plus map metadata.
# - This is the shape the external map converter hands to the difficulty pipeline.
#
# Design notes:
# - Keep these models stable. Prefer extending with new optional fields rather than breaking changes.
# - Times are milliseconds and already divided by the clock rate of the active modifiers.
# - Positions are stacked playfield positions in osu!pixels.
# - Targets are sorted by start time once, in ConvertedMap, and never mutated afterwards.
#
########################
# Interfaces:
# Public enums:
# - class TargetKind(enum.Enum): CIRCLE | SLIDER | SPINNER
#
# Public dataclasses:
# - NestedTarget(time: float, position: tuple[float, float], is_repeat: bool = False)
# - Target(kind: TargetKind, start_time: float, position: tuple[float, float], end_time: float = None,
#          end_position: tuple[float, float] = None, nested: tuple[NestedTarget, ...] = (), repeat_count: int = 0)
#   - combo() -> int
# - ConvertedMap(targets: list[Target], approach_rate: float, overall_difficulty: float,
#                circle_size: float, health: float)
#   - n_circles / n_sliders / n_spinners / max_combo (properties)
#   - truncated(passed_objects: int) -> ConvertedMap
#
# Inputs/Outputs:
# - Produced by the caller's converter, consumed by difficulty.py and performance.py.
#
########################

from __future__ import annotations

from dataclasses import dataclass
import enum
from typing import List, Optional, Tuple

Position = Tuple[float, float]


class TargetKind(enum.Enum):
    CIRCLE = "circle"
    SLIDER = "slider"
    SPINNER = "spinner"


@dataclass(frozen=True)
class NestedTarget:
    time: float
    position: Position
    is_repeat: bool = False


@dataclass(frozen=True)
class Target:
    kind: TargetKind
    start_time: float
    position: Position
    end_time: Optional[float] = None
    end_position: Optional[Position] = None
    # Slider ticks, repeats and the tracking end, in time order.
    nested: Tuple[NestedTarget, ...] = ()
    repeat_count: int = 0

    def __post_init__(self) -> None:
        if self.end_time is None:
            object.__setattr__(self, "end_time", float(self.start_time))
        if self.end_position is None:
            object.__setattr__(self, "end_position", self.position)
        object.__setattr__(self, "nested", tuple(self.nested))

    @property
    def is_circle(self) -> bool:
        return self.kind is TargetKind.CIRCLE

    @property
    def is_slider(self) -> bool:
        return self.kind is TargetKind.SLIDER

    @property
    def is_spinner(self) -> bool:
        return self.kind is TargetKind.SPINNER

    def combo(self) -> int:
        if self.is_slider:
            return 1 + len(self.nested)
        return 1


@dataclass(frozen=True)
class ConvertedMap:
    targets: List[Target]
    approach_rate: float
    overall_difficulty: float
    circle_size: float
    health: float

    def __post_init__(self) -> None:
        ordered = sorted(self.targets, key=lambda item: float(item.start_time))
        object.__setattr__(self, "targets", ordered)

    @property
    def n_circles(self) -> int:
        return sum(1 for target in self.targets if target.is_circle)

    @property
    def n_sliders(self) -> int:
        return sum(1 for target in self.targets if target.is_slider)

    @property
    def n_spinners(self) -> int:
        return sum(1 for target in self.targets if target.is_spinner)

    @property
    def max_combo(self) -> int:
        return sum(target.combo() for target in self.targets)

    def __len__(self) -> int:
        return len(self.targets)

    def truncated(self, passed_objects: Optional[int]) -> ConvertedMap:
        """Return the map limited to its first ``passed_objects`` targets.

        ``None`` returns the map itself.
        """
        if passed_objects is None or int(passed_objects) >= len(self.targets):
            return self
        return ConvertedMap(
            targets=self.targets[: max(0, int(passed_objects))],
            approach_rate=float(self.approach_rate),
            overall_difficulty=float(self.overall_difficulty),
            circle_size=float(self.circle_size),
            health=float(self.health),
        )


def _run_unit_tests() -> None:
    slider = Target(
        kind=TargetKind.SLIDER,
        start_time=500.0,
        position=(100.0, 100.0),
        end_time=900.0,
        end_position=(200.0, 100.0),
        nested=(NestedTarget(time=700.0, position=(150.0, 100.0)), NestedTarget(time=864.0, position=(196.0, 100.0))),
    )
    circle = Target(kind=TargetKind.CIRCLE, start_time=100.0, position=(0.0, 0.0))
    converted = ConvertedMap(targets=[slider, circle], approach_rate=9.0, overall_difficulty=8.0, circle_size=4.0, health=5.0)

    assert [target.start_time for target in converted.targets] == [100.0, 500.0]
    assert circle.end_time == 100.0
    assert circle.end_position == (0.0, 0.0)
    assert converted.max_combo == 4
    assert (converted.n_circles, converted.n_sliders, converted.n_spinners) == (1, 1, 0)
    assert len(converted.truncated(1)) == 1
    assert converted.truncated(None) is converted


if __name__ == "__main__":
    _run_unit_tests()
    print("map_models.py: ok")
