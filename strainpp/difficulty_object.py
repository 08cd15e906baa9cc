# -*- coding: utf-8 -*-
########################
# difficulty_object.py
########################
# Purpose:
# - Turn the converted target sequence into difficulty targets: per-target spacing and timing
#   measurements relative to the previous targets.
# - Simulate the lazy slider cursor so sliders contribute their travel distance.
#
# Design notes:
# - The first target has no predecessor and therefore no difficulty target.
#   Difficulty target index 0 belongs to the second target of the map.
# - Distances are scaled to a uniform circle radius of 50 so circle size does not change spacing.
# - No decay, no strain. Evaluators read these measurements, skills turn them into strain.
#
########################
# Interfaces:
# Public constants:
# - NORMALISED_RADIUS, MIN_DELTA_TIME, MAXIMUM_SLIDER_RADIUS, ASSUMED_SLIDER_RADIUS
#
# Public dataclasses:
# - SliderCursor(lazy_end_position, lazy_travel_distance, lazy_travel_time)
#
# Public classes:
# - class DifficultyTarget
#   - previous(backwards_index: int) -> Optional[DifficultyTarget]
#   - next(forwards_index: int) -> Optional[DifficultyTarget]
#   - opacity_at(time: float, hidden: bool) -> float
#
# Public functions:
# - circle_radius(circle_size: float) -> float
# - difficulty_range(value: float, minimum: float, middle: float, maximum: float) -> float
# - preempt_for(approach_rate: float) -> float
# - hit_window_great(overall_difficulty: float) -> float
# - compute_slider_cursor(target: Target, radius: float) -> SliderCursor
# - build_difficulty_targets(converted_map: ConvertedMap) -> list[DifficultyTarget]
#
########################

from __future__ import annotations

from dataclasses import dataclass
import math
from typing import Dict, List, Optional

from strainpp.map_models import ConvertedMap, Position, Target

NORMALISED_RADIUS = 50.0
MIN_DELTA_TIME = 25.0
MAXIMUM_SLIDER_RADIUS = NORMALISED_RADIUS * 2.4
ASSUMED_SLIDER_RADIUS = NORMALISED_RADIUS * 1.8

OBJECT_RADIUS = 64.0
BROKEN_GAMEFIELD_ROUNDING_ALLOWANCE = 1.00041

PREEMPT_MIN = 450.0
HIDDEN_FADE_OUT_DURATION_MULTIPLIER = 0.3


def _sub(left: Position, right: Position) -> Position:
    return (float(left[0]) - float(right[0]), float(left[1]) - float(right[1]))


def _add(left: Position, right: Position) -> Position:
    return (float(left[0]) + float(right[0]), float(left[1]) + float(right[1]))


def _scale(vector: Position, factor: float) -> Position:
    return (float(vector[0]) * factor, float(vector[1]) * factor)


def _length(vector: Position) -> float:
    return math.sqrt(float(vector[0]) * float(vector[0]) + float(vector[1]) * float(vector[1]))


def circle_radius(circle_size: float) -> float:
    scale = (1.0 - 0.7 * (float(circle_size) - 5.0) / 5.0) / 2.0
    return OBJECT_RADIUS * scale * BROKEN_GAMEFIELD_ROUNDING_ALLOWANCE


def difficulty_range(value: float, minimum: float, middle: float, maximum: float) -> float:
    if value > 5.0:
        return middle + (maximum - middle) * (value - 5.0) / 5.0
    if value < 5.0:
        return middle - (middle - minimum) * (5.0 - value) / 5.0
    return middle


def preempt_for(approach_rate: float) -> float:
    return difficulty_range(float(approach_rate), 1800.0, 1200.0, PREEMPT_MIN)


def fade_in_for(preempt: float) -> float:
    return 400.0 * min(1.0, float(preempt) / PREEMPT_MIN)


def hit_window_great(overall_difficulty: float) -> float:
    return difficulty_range(float(overall_difficulty), 80.0, 50.0, 20.0)


@dataclass(frozen=True)
class SliderCursor:
    lazy_end_position: Position
    lazy_travel_distance: float
    lazy_travel_time: float


def compute_slider_cursor(target: Target, radius: float) -> SliderCursor:
    """Follow a slider with a cursor that only moves as far as the follow circle requires.

    The last nested target is the tracking end of the slider. The returned travel distance is
    already scaled to the normalised radius.
    """
    if not target.is_slider or not target.nested:
        return SliderCursor(lazy_end_position=target.position, lazy_travel_distance=0.0, lazy_travel_time=0.0)

    nested = target.nested
    lazy_travel_time = float(nested[-1].time) - float(target.start_time)
    lazy_end_position = nested[-1].position
    lazy_travel_distance = 0.0

    scaling_factor = NORMALISED_RADIUS / float(radius)
    cursor_position = target.position
    last_index = len(nested) - 1

    for index, nested_target in enumerate(nested):
        movement = _sub(nested_target.position, cursor_position)
        movement_length = scaling_factor * _length(movement)

        required_movement = ASSUMED_SLIDER_RADIUS

        if index == last_index:
            lazy_movement = _sub(lazy_end_position, cursor_position)
            if _length(lazy_movement) < _length(movement):
                movement = lazy_movement
            movement_length = scaling_factor * _length(movement)
        elif nested_target.is_repeat:
            # Repeats must be hit with the cursor inside the circle, not the follow circle.
            required_movement = NORMALISED_RADIUS

        if movement_length > required_movement:
            cursor_position = _add(cursor_position, _scale(movement, (movement_length - required_movement) / movement_length))
            movement_length *= (movement_length - required_movement) / movement_length
            lazy_travel_distance += movement_length

        if index == last_index:
            lazy_end_position = cursor_position

    return SliderCursor(
        lazy_end_position=lazy_end_position,
        lazy_travel_distance=float(lazy_travel_distance),
        lazy_travel_time=float(lazy_travel_time),
    )


class DifficultyTarget:
    def __init__(
        self,
        *,
        target: Target,
        last_target: Target,
        last_last_target: Optional[Target],
        index: int,
        objects: List[DifficultyTarget],
        radius: float,
        preempt: float,
        cursors: Dict[int, SliderCursor],
    ) -> None:
        self.target = target
        self.index = int(index)
        self.radius = float(radius)
        self.preempt = float(preempt)
        self.fade_in = fade_in_for(preempt)
        self._objects = objects

        self.start_time = float(target.start_time)
        self.end_time = float(target.end_time)
        self.delta_time = self.start_time - float(last_target.start_time)
        self.strain_time = max(self.delta_time, MIN_DELTA_TIME)

        self.lazy_jump_distance = 0.0
        self.minimum_jump_distance = 0.0
        self.minimum_jump_time = 0.0
        self.travel_distance = 0.0
        self.travel_time = 0.0
        self.angle: Optional[float] = None

        self._set_distances(last_target, last_last_target, cursors)

    def _cursor(self, target: Target, cursors: Dict[int, SliderCursor]) -> SliderCursor:
        key = id(target)
        cursor = cursors.get(key)
        if cursor is None:
            cursor = compute_slider_cursor(target, self.radius)
            cursors[key] = cursor
        return cursor

    def _end_cursor_position(self, target: Target, cursors: Dict[int, SliderCursor]) -> Position:
        if target.is_slider:
            return self._cursor(target, cursors).lazy_end_position
        return target.position

    def _set_distances(
        self,
        last_target: Target,
        last_last_target: Optional[Target],
        cursors: Dict[int, SliderCursor],
    ) -> None:
        if self.target.is_slider:
            cursor = self._cursor(self.target, cursors)
            self.travel_distance = cursor.lazy_travel_distance
            self.travel_time = max(cursor.lazy_travel_time, MIN_DELTA_TIME)

        # Neither distance nor angle is meaningful next to a spinner.
        if self.target.is_spinner or last_target.is_spinner:
            return

        scaling_factor = NORMALISED_RADIUS / self.radius
        if self.radius < 30.0:
            small_circle_bonus = min(30.0 - self.radius, 5.0) / 50.0
            scaling_factor *= 1.0 + small_circle_bonus

        last_cursor_position = self._end_cursor_position(last_target, cursors)

        self.lazy_jump_distance = _length(
            _sub(_scale(self.target.position, scaling_factor), _scale(last_cursor_position, scaling_factor))
        )
        self.minimum_jump_time = self.strain_time
        self.minimum_jump_distance = self.lazy_jump_distance

        if last_target.is_slider:
            last_travel_time = max(self._cursor(last_target, cursors).lazy_travel_time, MIN_DELTA_TIME)
            self.minimum_jump_time = max(self.strain_time - last_travel_time, MIN_DELTA_TIME)

            tail_jump_distance = _length(_sub(last_target.end_position, self.target.position)) * scaling_factor
            self.minimum_jump_distance = max(
                0.0,
                min(
                    self.lazy_jump_distance - (MAXIMUM_SLIDER_RADIUS - ASSUMED_SLIDER_RADIUS),
                    tail_jump_distance - MAXIMUM_SLIDER_RADIUS,
                ),
            )

        if last_last_target is not None and not last_last_target.is_spinner:
            last_last_cursor_position = self._end_cursor_position(last_last_target, cursors)

            v1 = _sub(last_last_cursor_position, last_target.position)
            v2 = _sub(self.target.position, last_cursor_position)

            dot = v1[0] * v2[0] + v1[1] * v2[1]
            det = v1[0] * v2[1] - v1[1] * v2[0]

            self.angle = abs(math.atan2(det, dot))

    def previous(self, backwards_index: int) -> Optional[DifficultyTarget]:
        position = self.index - (int(backwards_index) + 1)
        if position < 0:
            return None
        return self._objects[position]

    def next(self, forwards_index: int) -> Optional[DifficultyTarget]:
        position = self.index + (int(forwards_index) + 1)
        if position >= len(self._objects):
            return None
        return self._objects[position]

    def opacity_at(self, time: float, hidden: bool) -> float:
        """Visibility of this target at ``time``, between 0.0 and 1.0."""
        if time > self.start_time:
            # Consider a target invisible once its start time has passed.
            return 0.0

        fade_in_start_time = self.start_time - self.preempt
        fade_in_duration = self.fade_in

        if hidden:
            fade_out_start_time = self.start_time - self.preempt + self.fade_in
            fade_out_duration = self.preempt * HIDDEN_FADE_OUT_DURATION_MULTIPLIER

            return min(
                _clamp01((time - fade_in_start_time) / fade_in_duration),
                1.0 - _clamp01((time - fade_out_start_time) / fade_out_duration),
            )

        return _clamp01((time - fade_in_start_time) / fade_in_duration)


def _clamp01(value: float) -> float:
    return min(max(float(value), 0.0), 1.0)


def build_difficulty_targets(converted_map: ConvertedMap) -> List[DifficultyTarget]:
    targets = converted_map.targets
    radius = circle_radius(converted_map.circle_size)
    preempt = preempt_for(converted_map.approach_rate)

    objects: List[DifficultyTarget] = []
    cursors: Dict[int, SliderCursor] = {}

    for position in range(1, len(targets)):
        last_last_target = targets[position - 2] if position > 1 else None
        objects.append(
            DifficultyTarget(
                target=targets[position],
                last_target=targets[position - 1],
                last_last_target=last_last_target,
                index=len(objects),
                objects=objects,
                radius=radius,
                preempt=preempt,
                cursors=cursors,
            )
        )

    return objects


def _run_unit_tests() -> None:
    from strainpp.map_models import NestedTarget, TargetKind

    assert abs(circle_radius(4.0) - 36.48 * BROKEN_GAMEFIELD_ROUNDING_ALLOWANCE) < 1e-9
    assert preempt_for(5.0) == 1200.0
    assert abs(hit_window_great(10.0) - 20.0) < 1e-9

    targets = [
        Target(kind=TargetKind.CIRCLE, start_time=0.0, position=(0.0, 0.0)),
        Target(kind=TargetKind.CIRCLE, start_time=10.0, position=(100.0, 0.0)),
        Target(
            kind=TargetKind.SLIDER,
            start_time=300.0,
            position=(100.0, 100.0),
            end_time=600.0,
            end_position=(300.0, 100.0),
            nested=(NestedTarget(time=564.0, position=(296.0, 100.0)),),
        ),
        Target(kind=TargetKind.CIRCLE, start_time=800.0, position=(400.0, 100.0)),
    ]
    converted = ConvertedMap(targets=targets, approach_rate=9.0, overall_difficulty=8.0, circle_size=4.0, health=5.0)
    objects = build_difficulty_targets(converted)

    assert len(objects) == 3
    assert objects[0].strain_time == MIN_DELTA_TIME
    assert objects[0].angle is None
    assert objects[1].angle is not None
    assert objects[1].travel_distance > 0.0
    assert objects[0].previous(0) is None
    assert objects[2].previous(0) is objects[1]
    assert objects[0].next(0) is objects[1]
    assert objects[1].opacity_at(objects[1].start_time + 1.0, hidden=False) == 0.0


if __name__ == "__main__":
    _run_unit_tests()
    print("difficulty_object.py: ok")
