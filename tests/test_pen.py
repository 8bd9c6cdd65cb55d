from __future__ import annotations

import pytest

from micra_bridge.models import PenState
from micra_bridge.pen import (
    direction_to_degrees,
    down_pen,
    pitch_to_degrees,
    round_half_up,
    set_pen,
    stroke_pen,
    stroke_target,
    turn_pen,
    up_pen,
)


def test_round_half_up_matches_editor_rounding() -> None:
    assert round_half_up(2.5) == 3
    assert round_half_up(-2.5) == -2
    assert round_half_up(-2.6) == -3
    assert round_half_up(6.123e-16) == 0


def test_menu_keys_and_numbers_translate_to_degrees() -> None:
    assert direction_to_degrees("N") == 270
    assert direction_to_degrees("sw") == 135
    assert direction_to_degrees("12.5") == 12.5
    assert pitch_to_degrees("Below") == 90
    assert pitch_to_degrees(-30) == -30

    with pytest.raises(ValueError):
        pitch_to_degrees("sideways")


def test_stroke_along_x_axis() -> None:
    pen = PenState()
    set_pen(pen, "5", 64, -5, "E", "horizontal")
    stroke_pen(pen, 10)

    assert (pen.x, pen.y, pen.z) == (15, 64, -5)


def test_stroke_follows_heading_and_pitch() -> None:
    pen = PenState()
    set_pen(pen, 0, 0, 0, "S", "lower45")

    assert stroke_target(pen, 10) == (0, 7, 7)

    set_pen(pen, 0, 0, 0, "N", "above")
    stroke_pen(pen, 4)
    assert (pen.x, pen.y, pen.z) == (0, -4, 0)


def test_turn_wraps_into_full_circle() -> None:
    pen = PenState(heading=350, pitch=10)
    turn_pen(pen, -20, 30)

    assert pen.heading == 20
    assert pen.pitch == 350


def test_down_and_up_track_block_and_flag() -> None:
    pen = PenState()
    down_pen(pen, 35, 14)
    assert (pen.block_id, pen.block_data, pen.down) == (35, 14, True)

    up_pen(pen)
    assert pen.down is False
    assert pen.block_id == 35


@pytest.mark.parametrize("value", ["nan", "inf", "-inf", "1e309", float("nan")])
def test_non_finite_values_are_refused(value) -> None:
    pen = PenState(x=1, y=2, z=3)

    with pytest.raises(ValueError):
        stroke_target(pen, value)
    with pytest.raises(ValueError):
        turn_pen(pen, value, 0)
    with pytest.raises(ValueError):
        direction_to_degrees(value)
    with pytest.raises(ValueError):
        set_pen(pen, value, 0, 0, "horizontal", "N")

    assert (pen.x, pen.y, pen.z, pen.heading, pen.pitch) == (1, 2, 3, 0, 0)
