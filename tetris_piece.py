"""Piece model: kinds, per-rotation offsets, simple rotation"""
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple

from tetris_config import COLS

Cell = Tuple[int, int]


class PieceKind(Enum):
    I = 1
    J = 2
    L = 3
    O = 4
    S = 5
    T = 6
    Z = 7


# Display tags per kind (RGB)
COLORS: Dict[PieceKind, Tuple[int, int, int]] = {
    PieceKind.I: (102, 224, 255),
    PieceKind.J: (106, 119, 255),
    PieceKind.L: (255, 158, 94),
    PieceKind.O: (255, 224, 102),
    PieceKind.S: (94, 224, 142),
    PieceKind.T: (200, 119, 255),
    PieceKind.Z: (255, 102, 119),
}

_O = [(1, 0), (2, 0), (1, 1), (2, 1)]

# (dx, dy) inside a 4x4 box, y grows downward; index = rotation state
SHAPES: Dict[PieceKind, List[List[Cell]]] = {
    PieceKind.I: [
        [(0, 1), (1, 1), (2, 1), (3, 1)],
        [(2, 0), (2, 1), (2, 2), (2, 3)],
        [(0, 2), (1, 2), (2, 2), (3, 2)],
        [(1, 0), (1, 1), (1, 2), (1, 3)],
    ],
    PieceKind.J: [
        [(0, 0), (0, 1), (1, 1), (2, 1)],
        [(1, 0), (2, 0), (1, 1), (1, 2)],
        [(0, 1), (1, 1), (2, 1), (2, 2)],
        [(1, 0), (1, 1), (0, 2), (1, 2)],
    ],
    PieceKind.L: [
        [(2, 0), (0, 1), (1, 1), (2, 1)],
        [(1, 0), (1, 1), (1, 2), (2, 2)],
        [(0, 1), (1, 1), (2, 1), (0, 2)],
        [(0, 0), (1, 0), (1, 1), (1, 2)],
    ],
    PieceKind.O: [_O, _O, _O, _O],
    PieceKind.S: [
        [(1, 0), (2, 0), (0, 1), (1, 1)],
        [(1, 0), (1, 1), (2, 1), (2, 2)],
        [(1, 1), (2, 1), (0, 2), (1, 2)],
        [(0, 0), (0, 1), (1, 1), (1, 2)],
    ],
    PieceKind.T: [
        [(1, 0), (0, 1), (1, 1), (2, 1)],
        [(1, 0), (1, 1), (2, 1), (1, 2)],
        [(0, 1), (1, 1), (2, 1), (1, 2)],
        [(1, 0), (0, 1), (1, 1), (1, 2)],
    ],
    PieceKind.Z: [
        [(0, 0), (1, 0), (1, 1), (2, 1)],
        [(2, 0), (1, 1), (2, 1), (1, 2)],
        [(0, 1), (1, 1), (1, 2), (2, 2)],
        [(1, 0), (0, 1), (1, 1), (0, 2)],
    ],
}

SPAWN_X, SPAWN_Y = COLS // 2 - 2, 0

CW, CCW = 1, -1


def piece_kind(value) -> PieceKind:
    """Resolve a kind from an enum member, a name ("T") or an id (6)."""
    if isinstance(value, PieceKind):
        return value
    if isinstance(value, str):
        try:
            return PieceKind[value.upper()]
        except KeyError:
            raise ValueError(f"unknown piece kind: {value!r}") from None
    if isinstance(value, int) and not isinstance(value, bool):
        try:
            return PieceKind(value)
        except ValueError:
            raise ValueError(f"unknown piece kind: {value!r}") from None
    raise ValueError(f"unknown piece kind: {value!r}")


def offsets(kind: PieceKind, state: int) -> List[Cell]:
    if not 0 <= state < 4:
        raise ValueError(f"rotation state must be 0..3, got {state!r}")
    return list(SHAPES[kind][state])


def rotate_state(state: int, direction: int) -> int:
    if direction not in (CW, CCW):
        raise ValueError(f"rotation direction must be {CW} or {CCW}, got {direction!r}")
    return (state + direction) % 4


@dataclass
class Piece:
    kind: PieceKind
    x: int = SPAWN_X
    y: int = SPAWN_Y
    rotation: int = 0

    @staticmethod
    def spawn(kind) -> "Piece":
        return Piece(piece_kind(kind))

    @property
    def color(self) -> Tuple[int, int, int]:
        return COLORS[self.kind]

    @property
    def blocks(self) -> List[Cell]:
        return offsets(self.kind, self.rotation)

    def cells(self) -> List[Cell]:
        """Absolute board cells at the current position and rotation."""
        return self.cells_at(0, 0)

    def cells_at(self, dx: int, dy: int, rotation: Optional[int] = None) -> List[Cell]:
        state = self.rotation if rotation is None else rotation
        return [(self.x + ox + dx, self.y + oy + dy) for ox, oy in offsets(self.kind, state)]

    def rotated_cells(self, direction: int) -> List[Cell]:
        return self.cells_at(0, 0, rotate_state(self.rotation, direction))

    def rotate(self, direction: int) -> List[Cell]:
        # No kicks: the caller checks the board and decides whether to call this
        self.rotation = rotate_state(self.rotation, direction)
        return self.blocks

    def move(self, dx: int, dy: int):
        self.x += dx
        self.y += dy

    def reset(self):
        self.x, self.y, self.rotation = SPAWN_X, SPAWN_Y, 0

    def clone(self) -> "Piece":
        return Piece(self.kind, self.x, self.y, self.rotation)
