"""Fill plans for resetting terrain through primitive ``setBlocks`` commands."""

from __future__ import annotations

from micra_bridge.models import Cuboid

AIR = 0
STONE = 1
GRASS = 2

RESET_HALF_EXTENT = 50
ORIGIN_HALF_EXTENT = 100


def reset_around_player_plan(x: int, y: int, z: int, half_extent: int = RESET_HALF_EXTENT) -> list[Cuboid]:
    """Cuboids that flatten the world around ``(x, y, z)``.

    Three bands keyed on the player's height: fully above ground (air only), straddling
    the ground (air body, grass surface row at y=-1, stone below), fully underground
    (stone only). ``y == -51`` falls between the bands and yields an empty plan.
    """
    e = half_extent
    if y >= 50:
        return [Cuboid(x - e, y - e, z - e, x + e, y + e, z + e, AIR)]
    if -51 < y < 50:
        plan = [Cuboid(x - e, 0, z - e, x + e, y + e, z + e, AIR)]
        if y <= 49:
            plan.append(Cuboid(x - e, -1, z - e, x + e, -1, z + e, GRASS))
        if y <= 48:
            plan.append(Cuboid(x - e, y - e, z - e, x + e, -2, z + e, STONE))
        return plan
    if y <= -52:
        return [Cuboid(x - e, y - e, z - e, x + e, y + e, z + e, STONE)]
    return []


def reset_origin_plan(half_extent: int = ORIGIN_HALF_EXTENT) -> list[Cuboid]:
    e = half_extent
    return [
        Cuboid(-e, 0, -e, e, 63, e, AIR),
        Cuboid(-e, -63, -e, e, -2, e, STONE),
        Cuboid(-e, -1, -e, e, -1, e, GRASS),
    ]
