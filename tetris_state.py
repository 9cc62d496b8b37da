"""Serializable game snapshot used for save/load and resume.

A snapshot is a plain dict of JSON-safe values (strings, ints, bools, lists,
None) so it can be written with :mod:`json` as-is.  ``GameState.from_dict``
validates everything it reads and raises :class:`InvalidSnapshotError` on the
first problem; nothing outside the returned object is touched.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from tetris_board import Board
from tetris_config import (CHALLENGE_ROWS_TARGET, COLS, DIFFICULTY_NAMES, ROWS, Difficulty, GameMode,
                           difficulty_of, game_mode_of, level_for_rows)
from tetris_piece import Piece, piece_kind

SNAPSHOT_VERSION = "1.0"


class InvalidSnapshotError(ValueError):
    """Snapshot data is corrupted or violates a game invariant."""


@dataclass
class SaveMetadata:
    saved_at: str = field(default_factory=lambda: datetime.now().isoformat(timespec="seconds"))
    version: str = SNAPSHOT_VERSION
    save_name: str = ""
    description: str = ""
    game_mode_display: str = ""
    difficulty_display: str = ""


@dataclass
class PieceState:
    kind: str
    x: int
    y: int
    rotation: int

    @staticmethod
    def from_piece(piece: Piece) -> "PieceState":
        return PieceState(piece.kind.name, piece.x, piece.y, piece.rotation)

    def to_piece(self) -> Piece:
        return Piece(piece_kind(self.kind), self.x, self.y, self.rotation)


@dataclass
class GameState:
    board: List[List[Optional[str]]]
    current_piece: PieceState
    next_piece: PieceState
    score: int = 0
    level: int = 1
    difficulty: Difficulty = Difficulty.MEDIUM
    game_mode: GameMode = GameMode.CLASSIC
    remaining_ms: int = 0
    target_rows: int = 0
    total_rows: int = 0
    single_row_clears: int = 0
    double_row_clears: int = 0
    triple_row_clears: int = 0
    tetris_row_clears: int = 0
    elapsed_ms: int = 0
    paused: bool = False
    fast_drop_active: bool = False
    metadata: SaveMetadata = field(default_factory=SaveMetadata)

    def to_dict(self) -> dict:
        return {
            "metadata": vars(self.metadata).copy(),
            "board": [list(row) for row in self.board],
            "current_piece": vars(self.current_piece).copy(),
            "next_piece": vars(self.next_piece).copy(),
            "score": self.score,
            "level": self.level,
            "difficulty": self.difficulty.name,
            "game_mode": self.game_mode.name,
            "remaining_ms": self.remaining_ms,
            "target_rows": self.target_rows,
            "total_rows": self.total_rows,
            "single_row_clears": self.single_row_clears,
            "double_row_clears": self.double_row_clears,
            "triple_row_clears": self.triple_row_clears,
            "tetris_row_clears": self.tetris_row_clears,
            "elapsed_ms": self.elapsed_ms,
            "paused": self.paused,
            "fast_drop_active": self.fast_drop_active,
        }

    @staticmethod
    def from_dict(data) -> "GameState":
        if not isinstance(data, dict):
            raise InvalidSnapshotError("snapshot must be a mapping")
        try:
            meta = data.get("metadata") or {}
            if not isinstance(meta, dict):
                raise InvalidSnapshotError("metadata must be a mapping")
            metadata = SaveMetadata(**{k: str(v) for k, v in meta.items() if k in SaveMetadata.__dataclass_fields__})
            state = GameState(
                board=_board_rows(data["board"]),
                current_piece=_piece(data["current_piece"], "current_piece"),
                next_piece=_piece(data["next_piece"], "next_piece"),
                score=_int(data, "score"),
                level=_int(data, "level", minimum=1),
                difficulty=difficulty_of(data["difficulty"]),
                game_mode=game_mode_of(data["game_mode"]),
                remaining_ms=_int(data, "remaining_ms"),
                target_rows=_int(data, "target_rows"),
                total_rows=_int(data, "total_rows"),
                single_row_clears=_int(data, "single_row_clears"),
                double_row_clears=_int(data, "double_row_clears"),
                triple_row_clears=_int(data, "triple_row_clears"),
                tetris_row_clears=_int(data, "tetris_row_clears"),
                elapsed_ms=_int(data, "elapsed_ms", required=False),
                paused=_bool(data, "paused"),
                fast_drop_active=_bool(data, "fast_drop_active"),
                metadata=metadata,
            )
        except KeyError as e:
            raise InvalidSnapshotError(f"missing field {e.args[0]!r}") from None
        except InvalidSnapshotError:
            raise
        except (TypeError, ValueError) as e:
            raise InvalidSnapshotError(str(e)) from None
        state.validate()
        return state

    def validate(self):
        if self.metadata.version != SNAPSHOT_VERSION:
            raise InvalidSnapshotError(f"unsupported snapshot version {self.metadata.version!r}")
        breakdown = (self.single_row_clears + 2 * self.double_row_clears
                     + 3 * self.triple_row_clears + 4 * self.tetris_row_clears)
        if breakdown != self.total_rows:
            raise InvalidSnapshotError(
                f"row clear counters add up to {breakdown}, expected {self.total_rows}")
        if self.level != level_for_rows(self.total_rows):
            raise InvalidSnapshotError(f"level {self.level} does not match {self.total_rows} cleared rows")
        if self.game_mode is GameMode.TIMED and self.remaining_ms <= 0:
            raise InvalidSnapshotError("timed game has no time left")
        if self.game_mode is GameMode.CHALLENGE:
            if self.target_rows <= 0:
                raise InvalidSnapshotError("challenge game has no row target")
            if self.total_rows >= self.target_rows:
                raise InvalidSnapshotError("challenge game is already won")
        board = Board.from_rows(self.board, self.total_rows)
        if board.find_full_rows():
            raise InvalidSnapshotError("board contains full rows")
        if board.is_game_over():
            raise InvalidSnapshotError("board top row is occupied")
        if not board.can_place(self.current_piece.to_piece().cells()):
            raise InvalidSnapshotError("current piece overlaps the board")

    def describe(self) -> str:
        return f"{self.game_mode.name.title()} / {DIFFICULTY_NAMES[self.difficulty]}: score {self.score}, level {self.level}"


def default_target(mode: GameMode, difficulty: Difficulty) -> int:
    return CHALLENGE_ROWS_TARGET[difficulty] if mode is GameMode.CHALLENGE else 0


def _int(data: dict, key: str, minimum: int = 0, required: bool = True) -> int:
    if not required and key not in data:
        return 0
    v = data[key]
    if isinstance(v, bool) or not isinstance(v, int):
        raise InvalidSnapshotError(f"{key} must be an integer, got {v!r}")
    if v < minimum:
        raise InvalidSnapshotError(f"{key} must be >= {minimum}, got {v}")
    return v


def _bool(data: dict, key: str) -> bool:
    v = data.get(key, False)
    if not isinstance(v, bool):
        raise InvalidSnapshotError(f"{key} must be a boolean, got {v!r}")
    return v


def _board_rows(rows) -> List[List[Optional[str]]]:
    if not isinstance(rows, list) or len(rows) != ROWS:
        raise InvalidSnapshotError(f"board must have {ROWS} rows")
    out = []
    for row in rows:
        if not isinstance(row, list) or len(row) != COLS:
            raise InvalidSnapshotError(f"every board row must have {COLS} cells")
        out.append([None if v is None else piece_kind(v).name for v in row])
    return out


def _piece(data, name: str) -> PieceState:
    if not isinstance(data, dict):
        raise InvalidSnapshotError(f"{name} must be a mapping")
    rotation = _int(data, "rotation")
    if rotation > 3:
        raise InvalidSnapshotError(f"{name} rotation must be 0..3, got {rotation}")
    x, y = data["x"], data["y"]
    if not all(isinstance(v, int) and not isinstance(v, bool) for v in (x, y)):
        raise InvalidSnapshotError(f"{name} position must be integers")
    return PieceState(piece_kind(data["kind"]).name, x, y, rotation)
