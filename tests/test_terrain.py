from __future__ import annotations

from micra_bridge.models import Cuboid
from micra_bridge.terrain import AIR, GRASS, STONE, reset_around_player_plan, reset_origin_plan


def test_above_ground_clears_one_cube_of_air() -> None:
    assert reset_around_player_plan(10, 60, -10) == [Cuboid(-40, 10, -60, 60, 110, 40, AIR)]


def test_at_ground_level_rebuilds_surface_and_underground() -> None:
    assert reset_around_player_plan(0, 0, 0) == [
        Cuboid(-50, 0, -50, 50, 50, 50, AIR),
        Cuboid(-50, -1, -50, 50, -1, 50, GRASS),
        Cuboid(-50, -50, -50, 50, -2, 50, STONE),
    ]


def test_band_edges_drop_layers() -> None:
    assert [cuboid.block_id for cuboid in reset_around_player_plan(0, 49, 0)] == [AIR, GRASS]
    assert [cuboid.block_id for cuboid in reset_around_player_plan(0, 48, 0)] == [AIR, GRASS, STONE]
    assert [cuboid.block_id for cuboid in reset_around_player_plan(0, 50, 0)] == [AIR]


def test_deep_underground_fills_with_stone() -> None:
    assert reset_around_player_plan(0, -60, 0) == [Cuboid(-50, -110, -50, 50, -10, 50, STONE)]


def test_gap_between_bands_yields_no_plan() -> None:
    assert reset_around_player_plan(0, -51, 0) == []


def test_origin_plan_is_fixed() -> None:
    assert reset_origin_plan() == [
        Cuboid(-100, 0, -100, 100, 63, 100, AIR),
        Cuboid(-100, -63, -100, 100, -2, 100, STONE),
        Cuboid(-100, -1, -100, 100, -1, 100, GRASS),
    ]
