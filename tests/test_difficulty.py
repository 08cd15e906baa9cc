from __future__ import annotations

import math

import pytest

from sample_maps import build_sample_map
from strainpp import Mods, calculate_difficulty, calculate_strains
from strainpp.attributes import DifficultyAttributes, Strains
from strainpp.difficulty import DifficultyCalculator, star_rating
from strainpp.map_models import ConvertedMap, Target, TargetKind


def test_calculation_is_idempotent(hard_map):
    first = DifficultyCalculator(hard_map, Mods.HIDDEN).calculate()
    second = DifficultyCalculator(hard_map, Mods.HIDDEN).calculate()

    assert first == second


def test_harder_map_rates_higher(easy_map, hard_map):
    easy = calculate_difficulty(easy_map)
    hard = calculate_difficulty(hard_map)

    assert easy.star_rating > 0.0
    assert hard.star_rating > easy.star_rating
    assert hard.speed > easy.speed


def test_metadata_copied_from_map(medium_map):
    attributes = calculate_difficulty(medium_map)

    assert attributes.approach_rate == medium_map.approach_rate
    assert attributes.overall_difficulty == medium_map.overall_difficulty
    assert attributes.circle_size == medium_map.circle_size
    assert attributes.health == medium_map.health
    assert attributes.n_circles == medium_map.n_circles
    assert attributes.n_sliders == medium_map.n_sliders
    assert attributes.n_spinners == medium_map.n_spinners
    assert attributes.max_combo == medium_map.max_combo
    assert attributes.n_objects() == len(medium_map)


def test_flashlight_only_rated_with_flashlight(medium_map):
    without = calculate_difficulty(medium_map)
    with_flashlight = calculate_difficulty(medium_map, Mods.FLASHLIGHT)

    assert without.flashlight == 0.0
    assert with_flashlight.flashlight > 0.0
    assert with_flashlight.aim == without.aim
    assert with_flashlight.star_rating > without.star_rating


def test_touch_device_only_changes_star_rating(medium_map):
    plain = calculate_difficulty(medium_map)
    touch = calculate_difficulty(medium_map, Mods.TOUCH_DEVICE)

    assert touch.aim == plain.aim
    assert touch.star_rating == star_rating(plain.aim, plain.speed, 0.0, Mods.TOUCH_DEVICE)
    assert star_rating(2.0, 1.0, 0.0, Mods.TOUCH_DEVICE) < star_rating(2.0, 1.0, 0.0, Mods.NO_MOD)


def test_speed_note_count_bounded(hard_map):
    attributes = calculate_difficulty(hard_map)

    assert 0.0 < attributes.speed_note_count <= len(hard_map)


def test_slider_factor_is_one_without_sliders():
    attributes = calculate_difficulty(build_sample_map(difficulty="medium", with_sliders=False))

    assert attributes.aim > 0.0
    assert attributes.slider_factor == pytest.approx(1.0)


def test_passed_objects_limits_calculation(hard_map):
    partial = DifficultyCalculator(hard_map).passed_objects(20).calculate()
    direct = calculate_difficulty(hard_map, passed_objects=20)
    full = calculate_difficulty(hard_map)

    assert partial == direct
    assert partial.n_objects() == 20
    assert partial.max_combo == hard_map.truncated(20).max_combo
    assert partial.star_rating < full.star_rating


def test_passed_objects_beyond_length_is_full_map(easy_map):
    assert calculate_difficulty(easy_map, passed_objects=10_000) == calculate_difficulty(easy_map)


def test_empty_and_single_target_maps_have_no_strain():
    empty = ConvertedMap(targets=[], approach_rate=9.0, overall_difficulty=8.0, circle_size=4.0, health=5.0)
    single = ConvertedMap(
        targets=[Target(kind=TargetKind.CIRCLE, start_time=0.0, position=(256.0, 192.0))],
        approach_rate=9.0,
        overall_difficulty=8.0,
        circle_size=4.0,
        health=5.0,
    )

    empty_attributes = calculate_difficulty(empty)
    single_attributes = calculate_difficulty(single)

    assert empty_attributes.star_rating == 0.0
    assert empty_attributes.approach_rate == 9.0
    assert single_attributes.aim == 0.0
    assert single_attributes.speed == 0.0
    assert single_attributes.star_rating == star_rating(0.0, 0.0, 0.0, Mods.NO_MOD)
    assert single_attributes.n_circles == 1
    assert single_attributes.max_combo == 1


def test_star_rating_formula_floor():
    # Ratings below 0.0675 are clamped to the minimum base performance.
    floor = star_rating(0.0, 0.0, 0.0, Mods.NO_MOD)
    assert floor > 0.0
    assert star_rating(0.05, 0.05, 0.0, Mods.NO_MOD) == floor


def test_star_rating_grows_with_aim():
    low = star_rating(1.0, 1.0, 0.0, Mods.NO_MOD)
    high = star_rating(2.0, 1.0, 0.0, Mods.NO_MOD)

    assert 0.0 < low < high


def test_strain_sections_cover_the_map(medium_map):
    strains = calculate_strains(medium_map)

    duration = medium_map.targets[-1].start_time - medium_map.targets[0].start_time
    expected_sections = math.ceil(duration / Strains.SECTION_LENGTH)

    assert abs(strains.section_count() - expected_sections) <= 2
    assert len(strains.aim) == len(strains.aim_no_sliders) == len(strains.speed) == len(strains.flashlight)
    assert max(strains.aim) > 0.0


def test_strains_empty_for_tiny_maps():
    single = ConvertedMap(
        targets=[Target(kind=TargetKind.CIRCLE, start_time=0.0, position=(0.0, 0.0))],
        approach_rate=5.0,
        overall_difficulty=5.0,
        circle_size=4.0,
        health=5.0,
    )
    assert calculate_strains(single) == Strains()


def test_zero_attributes_default():
    assert DifficultyAttributes().slider_factor == 1.0
