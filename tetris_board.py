"""Board: collision, placement, row sweep, ghost distance"""
from typing import Iterable, List, Optional, Sequence

from tetris_config import COLS, ROWS
from tetris_piece import Cell, Piece, PieceKind, piece_kind

Grid = List[List[Optional[PieceKind]]]


class Board:
    """ROWS x COLS grid indexed ``grid[y][x]``; row 0 is the top."""

    width = COLS
    height = ROWS

    def __init__(self):
        self.grid: Grid = [[None] * COLS for _ in range(ROWS)]
        self.rows_cleared = 0

    def clear(self):
        self.grid = [[None] * COLS for _ in range(ROWS)]
        self.rows_cleared = 0

    def clone(self) -> "Board":
        b = Board()
        b.grid = [row[:] for row in self.grid]
        b.rows_cleared = self.rows_cleared
        return b

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < COLS and 0 <= y < ROWS

    def is_empty(self, x: int, y: int) -> bool:
        """Out-of-bounds cells count as occupied."""
        return self.in_bounds(x, y) and self.grid[y][x] is None

    def can_place(self, cells: Iterable[Cell]) -> bool:
        return all(self.is_empty(x, y) for x, y in cells)

    def place(self, cells: Iterable[Cell], kind: PieceKind):
        """Mark cells as occupied (no collision check; validate with can_place first)."""
        for x, y in cells:
            self.grid[y][x] = kind

    def is_row_full(self, y: int) -> bool:
        if not 0 <= y < ROWS:
            return False
        return all(v is not None for v in self.grid[y])

    def find_full_rows(self) -> List[int]:
        """Full row indices, top to bottom."""
        return [y for y in range(ROWS) if self.is_row_full(y)]

    def clear_rows(self, rows: Sequence[int]) -> int:
        """Remove the given rows in one pass and pad the top with empty rows.

        Surviving rows keep their relative order, so non-adjacent rows are
        compacted without shifting anything twice.
        """
        doomed = {y for y in rows if 0 <= y < ROWS}
        if not doomed:
            return 0
        kept = [row for y, row in enumerate(self.grid) if y not in doomed]
        self.grid = [[None] * COLS for _ in doomed] + kept
        self.rows_cleared += len(doomed)
        return len(doomed)

    def sweep(self) -> List[int]:
        """Clear every full row and return the indices that were removed."""
        full = self.find_full_rows()
        self.clear_rows(full)
        return full

    def is_game_over(self) -> bool:
        return any(v is not None for v in self.grid[0])

    def drop_distance(self, piece: Piece) -> int:
        """How many rows the piece can fall before it collides."""
        d = 0
        while self.can_place(piece.cells_at(0, d + 1)):
            d += 1
        return d

    def occupied(self) -> int:
        return sum(v is not None for row in self.grid for v in row)

    def to_rows(self) -> List[List[Optional[str]]]:
        return [[v.name if v else None for v in row] for row in self.grid]

    @staticmethod
    def from_rows(rows: Sequence[Sequence[Optional[str]]], rows_cleared: int = 0) -> "Board":
        if len(rows) != ROWS or any(len(r) != COLS for r in rows):
            raise ValueError(f"board must be {ROWS} rows of {COLS} cells")
        b = Board()
        b.grid = [[None if v is None else piece_kind(v) for v in row] for row in rows]
        b.rows_cleared = rows_cleared
        return b

    def __str__(self):
        return "\n".join(" ".join(v.name if v else "." for v in row) for row in self.grid)
