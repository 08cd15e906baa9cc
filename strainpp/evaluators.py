# -*- coding: utf-8 -*-
########################
# evaluators.py
########################
# Purpose:
# - Per-target difficulty contributions for each skill: aim, speed, rhythm and flashlight.
#
# Design notes:
# - Pure functions. Inputs are a DifficultyTarget and its neighbours, output is a non-negative float.
# - Every numeric literal here is a calibration constant. Changing one changes every rating.
# - Operation order in the formulas is part of the contract; floating point is not associative.
#
########################
# Interfaces:
# Public functions:
# - evaluate_aim(current: DifficultyTarget, with_sliders: bool) -> float
# - evaluate_speed(current: DifficultyTarget, great_window: float) -> float
# - evaluate_rhythm(current: DifficultyTarget, great_window: float) -> float
# - evaluate_flashlight(current: DifficultyTarget, hidden: bool) -> float
#
########################

from __future__ import annotations

import math

from strainpp.difficulty_object import DifficultyTarget, NORMALISED_RADIUS

# Aim
WIDE_ANGLE_MULTIPLIER = 1.5
ACUTE_ANGLE_MULTIPLIER = 2.0
SLIDER_MULTIPLIER = 1.5
VELOCITY_CHANGE_MULTIPLIER = 0.75

# Speed
SINGLE_SPACING_THRESHOLD = 125.0
MIN_SPEED_BONUS = 75.0
SPEED_BALANCING_FACTOR = 40.0

# Rhythm
HISTORY_TIME_MAX = 5000.0
HISTORY_OBJECTS_MAX = 32
RHYTHM_MULTIPLIER = 0.75

# Flashlight
MAX_OPACITY_BONUS = 0.4
HIDDEN_BONUS = 0.2
MIN_VELOCITY = 0.5
FLASHLIGHT_SLIDER_MULTIPLIER = 1.3
MIN_ANGLE_MULTIPLIER = 0.2


def _clamp(value: float, minimum: float, maximum: float) -> float:
    return min(max(value, minimum), maximum)


def _wide_angle_bonus(angle: float) -> float:
    return math.sin(3.0 / 4.0 * (min(5.0 / 6.0 * math.pi, max(math.pi / 6.0, angle)) - math.pi / 6.0)) ** 2


def _acute_angle_bonus(angle: float) -> float:
    return 1.0 - _wide_angle_bonus(angle)


def evaluate_aim(current: DifficultyTarget, with_sliders: bool) -> float:
    """Difficulty of moving the cursor onto ``current``.

    Starts from the jump velocity, adds a bonus for wide or acute angles or for velocity
    changes (whichever is larger) and, with sliders enabled, the velocity of the previous slider.
    """
    last = current.previous(0)
    last_last = current.previous(1)

    if current.target.is_spinner or last is None or last_last is None or last.target.is_spinner:
        return 0.0

    # Regular jump velocity from the previous target into this one.
    curr_velocity = current.lazy_jump_distance / current.strain_time

    # A previous slider extends the travel through its body into this target.
    if last.target.is_slider and with_sliders:
        travel_velocity = last.travel_distance / last.travel_time
        movement_velocity = current.minimum_jump_distance / current.minimum_jump_time
        curr_velocity = max(curr_velocity, movement_velocity + travel_velocity)

    prev_velocity = last.lazy_jump_distance / last.strain_time

    if last_last.target.is_slider and with_sliders:
        travel_velocity = last_last.travel_distance / last_last.travel_time
        movement_velocity = last.minimum_jump_distance / last.minimum_jump_time
        prev_velocity = max(prev_velocity, movement_velocity + travel_velocity)

    wide_angle_bonus = 0.0
    acute_angle_bonus = 0.0
    slider_bonus = 0.0
    velocity_change_bonus = 0.0

    aim_strain = curr_velocity

    # Angle bonuses only apply when both rhythms are about the same.
    if max(current.strain_time, last.strain_time) < 1.25 * min(current.strain_time, last.strain_time):
        if current.angle is not None and last.angle is not None and last_last.angle is not None:
            curr_angle = current.angle
            last_angle = last.angle
            last_last_angle = last_last.angle

            angle_bonus = min(curr_velocity, prev_velocity)

            wide_angle_bonus = _wide_angle_bonus(curr_angle)
            acute_angle_bonus = _acute_angle_bonus(curr_angle)

            # Only buff delta times faster than 300 bpm 1/2.
            if current.strain_time > 100.0:
                acute_angle_bonus = 0.0
            else:
                acute_angle_bonus *= (
                    _acute_angle_bonus(last_angle)
                    * min(angle_bonus, 125.0 / current.strain_time)
                    * math.sin(math.pi / 2.0 * min(1.0, (100.0 - current.strain_time) / 25.0)) ** 2
                    * math.sin(math.pi / 2.0 * (_clamp(current.lazy_jump_distance, 50.0, 100.0) - 50.0) / 50.0) ** 2
                )

            # Repeated wide angles are penalized less as the last angle gets more acute.
            wide_angle_bonus *= angle_bonus * (1.0 - min(wide_angle_bonus, _wide_angle_bonus(last_angle) ** 3))
            # Repeated acute angles are penalized less as the angle before last gets wider.
            acute_angle_bonus *= 0.5 + 0.5 * (1.0 - min(acute_angle_bonus, _acute_angle_bonus(last_last_angle) ** 3))

    if max(prev_velocity, curr_velocity) != 0.0:
        # Average velocity over the whole object, not the separate jump and slider path velocities.
        prev_velocity = (last.lazy_jump_distance + last_last.travel_distance) / last.strain_time
        curr_velocity = (current.lazy_jump_distance + last.travel_distance) / current.strain_time

        dist_ratio = math.sin(math.pi / 2.0 * abs(prev_velocity - curr_velocity) / max(prev_velocity, curr_velocity)) ** 2

        overlap_velocity_buff = min(
            125.0 / min(current.strain_time, last.strain_time),
            abs(prev_velocity - curr_velocity),
        )

        non_overlap_velocity_buff = abs(prev_velocity - curr_velocity) * math.sin(
            math.pi / 2.0 * min(1.0, min(current.lazy_jump_distance, last.lazy_jump_distance) / 100.0)
        ) ** 2

        velocity_change_bonus = max(overlap_velocity_buff, non_overlap_velocity_buff) * dist_ratio

        # Penalize rhythm changes.
        velocity_change_bonus *= (
            min(current.strain_time, last.strain_time) / max(current.strain_time, last.strain_time)
        ) ** 2

    if last.travel_time != 0.0:
        slider_bonus = last.travel_distance / last.travel_time

    aim_strain += max(
        acute_angle_bonus * ACUTE_ANGLE_MULTIPLIER,
        wide_angle_bonus * WIDE_ANGLE_MULTIPLIER + velocity_change_bonus * VELOCITY_CHANGE_MULTIPLIER,
    )

    if with_sliders:
        aim_strain += slider_bonus * SLIDER_MULTIPLIER

    return aim_strain


def evaluate_speed(current: DifficultyTarget, great_window: float) -> float:
    """Difficulty of tapping ``current`` given its delta time and the spacing to the previous target."""
    if current.target.is_spinner:
        return 0.0

    previous = current.previous(0)
    following = current.next(0)

    strain_time = current.strain_time
    great_window_full = great_window * 2.0

    # Nerf doubletappable doubles.
    doubletapness = 1.0
    if following is not None:
        curr_delta_time = max(1.0, current.delta_time)
        next_delta_time = max(1.0, following.delta_time)
        delta_difference = abs(next_delta_time - curr_delta_time)
        speed_ratio = curr_delta_time / max(curr_delta_time, delta_difference)
        window_ratio = min(1.0, curr_delta_time / great_window_full) ** 2
        doubletapness = speed_ratio ** (1.0 - window_ratio)

    # Cap delta time to the great hit window.
    strain_time /= _clamp((strain_time / great_window_full) / 0.93, 0.92, 1.0)

    speed_bonus = 1.0
    if strain_time < MIN_SPEED_BONUS:
        speed_bonus = 1.0 + 0.75 * ((MIN_SPEED_BONUS - strain_time) / SPEED_BALANCING_FACTOR) ** 2

    travel_distance = previous.travel_distance if previous is not None else 0.0
    distance = min(SINGLE_SPACING_THRESHOLD, travel_distance + current.minimum_jump_distance)

    return (speed_bonus + speed_bonus * (distance / SINGLE_SPACING_THRESHOLD) ** 3.5) * doubletapness / strain_time


def evaluate_rhythm(current: DifficultyTarget, great_window: float) -> float:
    """Rhythm complexity multiplier for ``current``, 1.0 for a steady rhythm."""
    if current.target.is_spinner:
        return 0.0

    previous_island_size = 0
    rhythm_complexity_sum = 0.0
    island_size = 1
    start_ratio = 0.0
    first_delta_switch = False

    historical_note_count = min(current.index, HISTORY_OBJECTS_MAX)

    rhythm_start = 0
    while (
        rhythm_start < historical_note_count - 2
        and current.start_time - current.previous(rhythm_start).start_time < HISTORY_TIME_MAX
    ):
        rhythm_start += 1

    for i in range(rhythm_start, 0, -1):
        curr_obj = current.previous(i - 1)
        prev_obj = current.previous(i)
        last_obj = current.previous(i + 1)

        # Scales note 0 to 1 from history to now, limited by time or by object count.
        curr_historical_decay = (HISTORY_TIME_MAX - (current.start_time - curr_obj.start_time)) / HISTORY_TIME_MAX
        curr_historical_decay = min(
            float(historical_note_count - i) / float(historical_note_count),
            curr_historical_decay,
        )

        curr_delta = curr_obj.strain_time
        prev_delta = prev_obj.strain_time
        last_delta = last_obj.strain_time

        curr_ratio = 1.0 + 6.0 * min(
            0.5,
            math.sin(math.pi / (min(prev_delta, curr_delta) / max(prev_delta, curr_delta))) ** 2,
        )

        window_penalty = min(1.0, max(0.0, abs(prev_delta - curr_delta) - great_window * 0.6) / (great_window * 0.6))

        effective_ratio = window_penalty * curr_ratio

        if first_delta_switch:
            if not (prev_delta > 1.25 * curr_delta or prev_delta * 1.25 < curr_delta):
                # Island is still progressing.
                if island_size < 7:
                    island_size += 1
            else:
                # Rhythm change into a slider is an easy accuracy window.
                if curr_obj.target.is_slider:
                    effective_ratio *= 0.125
                # Rhythm change out of a slider is easier than circle to circle.
                if prev_obj.target.is_slider:
                    effective_ratio *= 0.25
                # Repeated island size, e.g. triplet into triplet.
                if previous_island_size == island_size:
                    effective_ratio *= 0.25
                # Repeated island polarity, e.g. 2 into 4.
                if previous_island_size % 2 == island_size % 2:
                    effective_ratio *= 0.50
                # The previous increase happened a note ago, 1/1 -> 1/2 -> 1/4.
                if last_delta > prev_delta + 10.0 and prev_delta > curr_delta + 10.0:
                    effective_ratio *= 0.125

                rhythm_complexity_sum += (
                    math.sqrt(effective_ratio * start_ratio)
                    * curr_historical_decay
                    * math.sqrt(4.0 + island_size)
                    / 2.0
                    * math.sqrt(4.0 + previous_island_size)
                    / 2.0
                )

                start_ratio = effective_ratio
                previous_island_size = island_size

                # Slowing down ends the island; speeding up keeps counting.
                if prev_delta * 1.25 < curr_delta:
                    first_delta_switch = False

                island_size = 1
        elif prev_delta > 1.25 * curr_delta:
            # Speeding up starts a new island.
            first_delta_switch = True
            start_ratio = effective_ratio
            island_size = 1

    return math.sqrt(4.0 + rhythm_complexity_sum * RHYTHM_MULTIPLIER) / 2.0


def evaluate_flashlight(current: DifficultyTarget, hidden: bool) -> float:
    """Memorisation difficulty of ``current`` from the distances to up to ten preceding targets."""
    if current.target.is_spinner:
        return 0.0

    scaling_factor = 52.0 / current.radius
    small_dist_nerf = 1.0
    cumulative_strain_time = 0.0

    result = 0.0

    last_obj = current
    angle_repeat_count = 0.0

    for i in range(min(current.index, 10)):
        current_obj = current.previous(i)

        if not current_obj.target.is_spinner:
            jump_distance = math.sqrt(
                (current.target.position[0] - current_obj.target.end_position[0]) ** 2
                + (current.target.position[1] - current_obj.target.end_position[1]) ** 2
            )

            cumulative_strain_time += last_obj.strain_time

            # Targets visible inside the flashlight circle are easy to find.
            if i == 0:
                small_dist_nerf = min(1.0, jump_distance / 75.0)

            # Only the first target of a stack counts.
            stack_nerf = min(1.0, (current_obj.lazy_jump_distance / scaling_factor) / 25.0)

            opacity_bonus = 1.0 + MAX_OPACITY_BONUS * (1.0 - current.opacity_at(current_obj.start_time, hidden))

            result += stack_nerf * opacity_bonus * scaling_factor * jump_distance / cumulative_strain_time

            if current_obj.angle is not None and current.angle is not None:
                # Older targets count less towards the repeated angle nerf.
                if abs(current_obj.angle - current.angle) < 0.02:
                    angle_repeat_count += max(1.0 - 0.1 * i, 0.0)

        last_obj = current_obj

    result = (small_dist_nerf * result) ** 2.0

    # No approach circles with Hidden.
    if hidden:
        result *= 1.0 + HIDDEN_BONUS

    result *= MIN_ANGLE_MULTIPLIER + (1.0 - MIN_ANGLE_MULTIPLIER) / (angle_repeat_count + 1.0)

    slider_bonus = 0.0

    if current.target.is_slider:
        # Undo the radius scaling to get the travel distance independent of circle size.
        pixel_travel_distance = current.travel_distance / (NORMALISED_RADIUS / current.radius)

        slider_bonus = max(0.0, pixel_travel_distance / current.travel_time - MIN_VELOCITY) ** 0.5

        # Longer sliders require more memorisation.
        slider_bonus *= pixel_travel_distance

        # Repeats need less memorisation.
        if current.target.repeat_count > 0:
            slider_bonus /= current.target.repeat_count + 1

    result += slider_bonus * FLASHLIGHT_SLIDER_MULTIPLIER

    return result
