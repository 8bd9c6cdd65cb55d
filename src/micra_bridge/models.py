from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class BridgeMode(str, Enum):
    """Which backend the bridge talks to."""

    DIRECT = "direct"
    HELPER = "helper"


class StatusCode(str, Enum):
    """Outcome of the last bridge operation, rendered per locale for the caller."""

    OK = "ok"
    NO_BACKEND = "no_backend"
    TRANSPORT_DOWN = "transport_down"
    INVALID_VALUE = "invalid_value"
    UNSUPPORTED = "unsupported"


class ConnectionState(str, Enum):
    """Lifecycle of the persistent session connection."""

    ABSENT = "absent"
    OPENING = "opening"
    OPEN = "open"
    CLOSED = "closed"


@dataclass(slots=True)
class Position:
    x: int = 0
    y: int = 0
    z: int = 0


@dataclass(slots=True)
class Cuboid:
    """Inclusive block range filled with one block type."""

    x0: int
    y0: int
    z0: int
    x1: int
    y1: int
    z1: int
    block_id: int
    block_data: int = 0


@dataclass(slots=True)
class PenState:
    x: int = 0
    y: int = 0
    z: int = 0
    heading: float = 0
    pitch: float = 0
    block_id: int | None = 0
    block_data: int | None = 0
    down: bool = False
