"""Shared constants and enumerations for the module solver."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Tuple, Union

Coord = Tuple[int, int, int]

NONE_LABEL = "none"


class Direction(int, Enum):
    """The six axis-aligned directions. Y is the vertical axis."""

    X_POS = 0
    X_NEG = 1
    Y_POS = 2
    Y_NEG = 3
    Z_POS = 4
    Z_NEG = 5

    @property
    def offset(self) -> Coord:
        return DIRECTION_OFFSETS[self.value]

    def opposite(self) -> "Direction":
        return Direction(self.value ^ 1)

    @property
    def short(self) -> str:
        return DIRECTION_NAMES[self.value]


DIRECTION_OFFSETS: Tuple[Coord, ...] = (
    (1, 0, 0),
    (-1, 0, 0),
    (0, 1, 0),
    (0, -1, 0),
    (0, 0, 1),
    (0, 0, -1),
)
DIRECTION_NAMES: Tuple[str, ...] = ("X+", "X-", "Y+", "Y-", "Z+", "Z-")
OPPOSITE_ORDER: Tuple[int, ...] = (1, 0, 3, 2, 5, 4)
POSITIVE_DIRECTIONS: Tuple[Direction, ...] = (Direction.X_POS, Direction.Y_POS, Direction.Z_POS)


class ModuleKind(str, Enum):
    """Coarse module families used by presets and structural constraints."""

    FLOOR = "floor"
    WALL = "wall"
    WINDOW = "window"
    DOOR = "door"
    ROOF = "roof"
    CORNER = "corner"
    COLUMN = "column"
    STAIRS = "stairs"
    DECORATION = "decoration"
    SPECIAL = "special"


class CellStatus(str, Enum):
    OPEN = "OPEN"
    COLLAPSED = "COLLAPSED"


class StepResult(str, Enum):
    """Outcome of a single solver step."""

    PROGRESSED = "PROGRESSED"
    COMPLETED = "COMPLETED"
    CONTRADICTION_HANDLED = "CONTRADICTION_HANDLED"
    FAILED = "FAILED"

    @property
    def terminal(self) -> bool:
        return self in (StepResult.COMPLETED, StepResult.FAILED)


@dataclass(frozen=True)
class Dimensions:
    """Grid extent along X (width), Y (height) and Z (depth)."""

    width: int
    height: int
    depth: int

    def __post_init__(self) -> None:
        for name in ("width", "height", "depth"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ValueError(f"Grid {name} must be a positive integer, got {value!r}")

    @classmethod
    def of(cls, value: Union["Dimensions", Tuple[int, int, int]]) -> "Dimensions":
        if isinstance(value, Dimensions):
            return value
        width, height, depth = value
        return cls(width, height, depth)

    @property
    def volume(self) -> int:
        return self.width * self.height * self.depth

    def as_tuple(self) -> Coord:
        return (self.width, self.height, self.depth)

    def contains(self, coord: Coord) -> bool:
        x, y, z = coord
        return 0 <= x < self.width and 0 <= y < self.height and 0 <= z < self.depth
