"""Local turtle model behind the pen commands."""

from __future__ import annotations

import math

from micra_bridge.models import PenState

# Compass heading in degrees, measured from +x towards +z.
DIRECTION_DEGREES = {"N": 270, "NE": 315, "E": 0, "SE": 45, "S": 90, "SW": 135, "W": 180, "NW": 225}
# Positive pitch points down.
PITCH_DEGREES = {"above": -90, "upper45": -45, "horizontal": 0, "lower45": 45, "below": 90}


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _finite(value) -> float:
    number = float(value)
    if not math.isfinite(number):
        raise ValueError(f"Pen values must be finite, got {value!r}")
    return number


def _angle(value: str | float | int, table: dict[str, int]) -> float:
    if isinstance(value, str):
        key = value.strip()
        for candidate in (key, key.upper(), key.lower()):
            if candidate in table:
                return table[candidate]
        return _finite(key)
    return _finite(value)


def direction_to_degrees(value: str | float | int) -> float:
    """Translate a compass menu key (``"NE"``) or a plain number into a heading."""
    return _angle(value, DIRECTION_DEGREES)


def pitch_to_degrees(value: str | float | int) -> float:
    """Translate a pitch menu key (``"lower45"``) or a plain number into a pitch."""
    return _angle(value, PITCH_DEGREES)


def set_pen(pen: PenState, x, y, z, rotation, pitch) -> None:
    position = int(_finite(x)), int(_finite(y)), int(_finite(z))
    heading, pen_pitch = direction_to_degrees(rotation), pitch_to_degrees(pitch)
    pen.x, pen.y, pen.z = position
    pen.heading, pen.pitch = heading, pen_pitch


def turn_pen(pen: PenState, pitch, rotation) -> None:
    pen.pitch, pen.heading = (pen.pitch + _finite(pitch)) % 360, (pen.heading + _finite(rotation)) % 360


def stroke_target(pen: PenState, length) -> tuple[int, int, int]:
    """Where the pen ends up after moving ``length`` blocks along its heading and pitch."""
    distance = _finite(length)
    heading = math.radians(pen.heading)
    pitch = math.radians(pen.pitch)
    return (
        pen.x + round_half_up(distance * math.cos(pitch) * math.cos(heading)),
        pen.y + round_half_up(distance * math.sin(pitch)),
        pen.z + round_half_up(distance * math.cos(pitch) * math.sin(heading)),
    )


def stroke_pen(pen: PenState, length) -> None:
    pen.x, pen.y, pen.z = stroke_target(pen, length)


def down_pen(pen: PenState, block_id: int | None, block_data: int | None) -> None:
    pen.block_id = block_id
    pen.block_data = block_data
    pen.down = True


def up_pen(pen: PenState) -> None:
    pen.down = False
