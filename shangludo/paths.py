"""Static board geometry: the shared ring, per-color paths and safe squares.

Squares are cells of the 15x15 cross board encoded as ``y * 15 + x``. Every
table here is built once at import time and never mutated.
"""

from __future__ import annotations

from typing import Dict, FrozenSet, Tuple

from .config import config
from .types import Color


def square(x: int, y: int) -> int:
    return y * config.GRID_SIZE + x


def coordinates(sq: int) -> Tuple[int, int]:
    """Inverse of :func:`square`, returns ``(x, y)``."""
    return sq % config.GRID_SIZE, sq // config.GRID_SIZE


def _build_ring() -> Tuple[int, ...]:
    # Clockwise from red's entry square on the left arm.
    cells = (
        [(x, 6) for x in range(1, 6)]
        + [(6, y) for y in range(5, -1, -1)]
        + [(7, 0)]
        + [(8, y) for y in range(0, 6)]
        + [(x, 6) for x in range(9, 15)]
        + [(14, 7)]
        + [(x, 8) for x in range(14, 8, -1)]
        + [(8, y) for y in range(9, 15)]
        + [(7, 14)]
        + [(6, y) for y in range(14, 8, -1)]
        + [(x, 8) for x in range(5, -1, -1)]
        + [(0, 7), (0, 6)]
    )
    ring = tuple(square(x, y) for x, y in cells)
    if len(ring) != config.RING_LENGTH or len(set(ring)) != config.RING_LENGTH:
        raise RuntimeError("Board ring is malformed")
    return ring


RING: Tuple[int, ...] = _build_ring()

ENTRY_SQUARES: Dict[Color, int] = {
    Color.RED: square(1, 6),
    Color.GREEN: square(8, 1),
    Color.YELLOW: square(13, 8),
    Color.BLUE: square(6, 13),
}

# Five middle-lane squares of the color's arm, then its triangle of the centre.
HOME_STRETCHES: Dict[Color, Tuple[int, ...]] = {
    Color.RED: tuple(square(x, 7) for x in range(1, 7)),
    Color.GREEN: tuple(square(7, y) for y in range(1, 7)),
    Color.YELLOW: tuple(square(x, 7) for x in range(13, 7, -1)),
    Color.BLUE: tuple(square(7, y) for y in range(13, 7, -1)),
}


def _build_path(color: Color) -> Tuple[int, ...]:
    start = RING.index(ENTRY_SQUARES[color])
    rotated = RING[start:] + RING[:start]
    path = rotated[: config.RING_STEPS] + HOME_STRETCHES[color]
    if len(path) != config.PATH_LENGTH:
        raise RuntimeError(f"Path for {color.label} has {len(path)} squares")
    return path


PATHS: Dict[Color, Tuple[int, ...]] = {color: _build_path(color) for color in Color}

_PATH_INDEX: Dict[Color, Dict[int, int]] = {
    color: {sq: idx for idx, sq in enumerate(path)} for color, path in PATHS.items()
}

STAR_SQUARES: FrozenSet[int] = frozenset(
    RING[(RING.index(ENTRY_SQUARES[color]) + config.SAFE_STAR_OFFSET) % len(RING)]
    for color in Color
)

_PRIMARY_SAFE: FrozenSet[int] = frozenset(ENTRY_SQUARES.values())


def path_of(color: Color) -> Tuple[int, ...]:
    return PATHS[color]


def entry_square(color: Color) -> int:
    return ENTRY_SQUARES[color]


def home_square(color: Color) -> int:
    return PATHS[color][config.HOME_INDEX]


def path_index(color: Color, sq: int) -> int:
    """Index of ``sq`` on ``color``'s path, or -1 if it is not on it."""
    return _PATH_INDEX[color].get(sq, -1)


def safe_squares(secondary_safe_points: bool = True) -> FrozenSet[int]:
    if secondary_safe_points:
        return _PRIMARY_SAFE | STAR_SQUARES
    return _PRIMARY_SAFE


def is_safe(sq: int, secondary_safe_points: bool = True) -> bool:
    return sq in safe_squares(secondary_safe_points)
