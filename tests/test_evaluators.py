from __future__ import annotations

import pytest

from strainpp import calculate_difficulty
from strainpp.difficulty_object import build_difficulty_targets, compute_slider_cursor, hit_window_great
from strainpp.evaluators import evaluate_aim, evaluate_flashlight, evaluate_rhythm
from strainpp.map_models import ConvertedMap, NestedTarget, Target, TargetKind


def _circle(time: float, position) -> Target:
    return Target(kind=TargetKind.CIRCLE, start_time=time, position=position)


def _map(targets, *, approach_rate: float = 9.0, overall_difficulty: float = 8.0) -> ConvertedMap:
    return ConvertedMap(
        targets=targets,
        approach_rate=approach_rate,
        overall_difficulty=overall_difficulty,
        circle_size=4.0,
        health=5.0,
    )


def _back_and_forth(count: int, interval_ms: float):
    return [
        _circle(1000.0 + index * interval_ms, (100.0, 100.0) if index % 2 == 0 else (300.0, 100.0))
        for index in range(count)
    ]


def _there_and_back_slider(*, is_repeat: bool, repeat_count: int = 0) -> Target:
    return Target(
        kind=TargetKind.SLIDER,
        start_time=0.0,
        position=(0.0, 0.0),
        end_time=300.0,
        end_position=(0.0, 0.0),
        nested=(
            NestedTarget(time=150.0, position=(200.0, 0.0), is_repeat=is_repeat),
            NestedTarget(time=264.0, position=(0.0, 0.0)),
        ),
        repeat_count=repeat_count,
    )


def test_slider_cursor_follows_repeats_closely():
    # A radius of 50 keeps distances unscaled.
    with_repeat = compute_slider_cursor(_there_and_back_slider(is_repeat=True, repeat_count=1), 50.0)
    without_repeat = compute_slider_cursor(_there_and_back_slider(is_repeat=False), 50.0)

    # Repeat: 200 - 50 out, then 150 - 90 back.
    assert with_repeat.lazy_travel_distance == pytest.approx(210.0)
    assert with_repeat.lazy_end_position == pytest.approx((90.0, 0.0))
    assert with_repeat.lazy_travel_time == 264.0
    # Tick: 200 - 90 out, then 110 - 90 back.
    assert without_repeat.lazy_travel_distance == pytest.approx(130.0)
    assert without_repeat.lazy_end_position == pytest.approx((90.0, 0.0))


def test_slider_cursor_for_circles_is_empty():
    cursor = compute_slider_cursor(_circle(0.0, (10.0, 20.0)), 36.0)

    assert cursor.lazy_travel_distance == 0.0
    assert cursor.lazy_end_position == (10.0, 20.0)


def test_no_slider_aim_keeps_slider_targets_and_drops_slider_velocity(medium_map):
    objects = build_difficulty_targets(medium_map)
    with_sliders = [evaluate_aim(current, True) for current in objects]
    without_sliders = [evaluate_aim(current, False) for current in objects]

    slider_heads = [
        index
        for index, current in enumerate(objects)
        if current.target.is_slider
        and not current.previous(0).target.is_slider
        and not current.previous(1).target.is_slider
    ]
    assert slider_heads
    for index in slider_heads:
        assert without_sliders[index] == with_sliders[index]
        assert without_sliders[index] > 0.0

    after_slider = [index for index, current in enumerate(objects) if current.previous(0) and current.previous(0).target.is_slider]
    assert any(with_sliders[index] > without_sliders[index] for index in after_slider)
    assert all(plain <= full + 1e-12 for plain, full in zip(without_sliders, with_sliders))


def test_slider_factor_below_one_on_slider_maps(medium_map):
    attributes = calculate_difficulty(medium_map)

    assert attributes.n_sliders > 0
    assert 0.0 < attributes.slider_factor < 1.0
    assert attributes.slider_factor == pytest.approx(attributes.aim_no_sliders / attributes.aim)


def test_hidden_opacity_fades_out_before_the_hit():
    # AR 5: preempt 1200, fade in 400, hidden fade out starts 800 before the hit and lasts 360.
    objects = build_difficulty_targets(_map([_circle(0.0, (0.0, 0.0)), _circle(2000.0, (100.0, 0.0))], approach_rate=5.0))
    current = objects[0]

    assert current.opacity_at(700.0, hidden=False) == 0.0
    assert current.opacity_at(1000.0, hidden=False) == pytest.approx(0.5)
    assert current.opacity_at(1000.0, hidden=True) == pytest.approx(0.5)
    assert current.opacity_at(1380.0, hidden=False) == 1.0
    assert current.opacity_at(1380.0, hidden=True) == pytest.approx(0.5)
    assert current.opacity_at(1600.0, hidden=True) == 0.0
    assert current.opacity_at(2001.0, hidden=False) == 0.0


def test_flashlight_hidden_bonus_when_nothing_was_visible():
    # Targets 1000 ms apart with AR 10 are never visible together, so only the flat bonus differs.
    current = build_difficulty_targets(_map(_back_and_forth(8, 1000.0), approach_rate=10.0))[-1]

    plain = evaluate_flashlight(current, False)
    hidden = evaluate_flashlight(current, True)

    assert plain > 0.0
    assert hidden == pytest.approx(1.2 * plain)


def test_flashlight_hidden_counts_faded_targets():
    current = build_difficulty_targets(_map(_back_and_forth(8, 300.0), approach_rate=5.0))[-1]

    plain = evaluate_flashlight(current, False)
    hidden = evaluate_flashlight(current, True)

    assert plain > 0.0
    assert hidden > 1.2 * plain


def test_flashlight_slider_bonus_is_split_across_repeats():
    def ending_with(last: Target) -> float:
        targets = [_circle(0.0, (100.0, 100.0)), _circle(300.0, (300.0, 100.0)), _circle(600.0, (100.0, 100.0)), last]
        return evaluate_flashlight(build_difficulty_targets(_map(targets))[-1], False)

    def slider(repeat_count: int) -> Target:
        return Target(
            kind=TargetKind.SLIDER,
            start_time=900.0,
            position=(300.0, 200.0),
            end_time=1050.0,
            end_position=(600.0, 200.0),
            nested=(NestedTarget(time=1050.0, position=(600.0, 200.0)),),
            repeat_count=repeat_count,
        )

    circle = ending_with(_circle(900.0, (300.0, 200.0)))
    single = ending_with(slider(0))
    repeated = ending_with(slider(1))

    assert single > repeated > circle
    assert single - circle == pytest.approx(2.0 * (repeated - circle))


def test_rhythm_is_neutral_for_a_steady_stream(stream_map):
    great_window = hit_window_great(stream_map.overall_difficulty)

    assert all(evaluate_rhythm(current, great_window) == 1.0 for current in build_difficulty_targets(stream_map))


def test_rhythm_rewards_uneven_timing():
    deltas = [300.0, 100.0, 100.0, 100.0] * 10
    times = [1000.0]
    for delta in deltas:
        times.append(times[-1] + delta)
    targets = [_circle(time, (100.0 + (index % 5) * 60.0, 192.0)) for index, time in enumerate(times)]
    great_window = hit_window_great(8.0)

    values = [evaluate_rhythm(current, great_window) for current in build_difficulty_targets(_map(targets))]

    assert min(values) >= 1.0
    assert max(values) > 1.0
