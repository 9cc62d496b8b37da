"""
Game engine: the falling piece against the board.

The engine is a small state machine::

    IDLE -> RUNNING <-> PAUSED
              |
              +-> GAME_OVER   (spawn blocked, top row filled, player quit)
              +-> WON         (challenge row target met, timed countdown expired)

It never sleeps or owns a timer. The front end calls ``update(dt_ms)`` once per
loop iteration and the engine converts elapsed time into gravity steps and
countdown ticks. Time passed while paused is dropped, so resuming never
releases a burst of queued drops.

Player commands (move, rotate, drops) return ``True`` when they changed the
piece and ``False`` when the board rejected them; rejection is ordinary
gameplay and leaves the piece exactly as it was. Notifications go into
``engine.events`` and are delivered when the caller drains the queue.
"""
from enum import Enum
from typing import Dict, List, Optional

from loguru import logger

from tetris_board import Board, Grid
from tetris_config import (CONFIG, DIFFICULTY_NAMES, FAST_DROP_MS, SCORE_MULTIPLIER, SCORE_TABLE,
                           TIMED_MODE_SECONDS, Difficulty, GameMode, difficulty_of, fall_interval_ms, game_mode_of,
                           level_for_rows)
from tetris_events import (EventQueue, GameOver, GameOverReason, GameWon, LevelIncreased, RemainingTimeChanged,
                           RowsCleared, ScoreChanged)
from tetris_piece import CCW, CW, Cell, Piece
from tetris_rng import PieceFactory
from tetris_state import GameState, InvalidSnapshotError, PieceState, SaveMetadata, default_target

CLEAR_NAMES = {1: "Single", 2: "Double", 3: "Triple", 4: "Tetris"}


class GameStatus(Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    GAME_OVER = "game over"
    WON = "won"


class GameEngine:
    def __init__(self, factory: Optional[PieceFactory] = None, events: Optional[EventQueue] = None):
        self.factory = factory or PieceFactory(CONFIG["SEED"])
        self.events = events or EventQueue()
        self.board = Board()
        self.status = GameStatus.IDLE
        self.mode: GameMode = CONFIG["GAME_MODE"]
        self.difficulty: Difficulty = CONFIG["DIFFICULTY"]
        self.game_over_reason: Optional[GameOverReason] = None
        self._current: Optional[Piece] = None
        self._next: Optional[Piece] = None
        self._reset_progress()

    def _reset_progress(self):
        self.board.clear()
        self._score = 0
        self._level = 1
        self._clears: Dict[int, int] = {1: 0, 2: 0, 3: 0, 4: 0}
        self._remaining_ms = 0
        self._target_rows = 0
        self._elapsed_ms = 0
        self._gravity_acc = 0
        self._fast_drop = False
        self.game_over_reason = None

    # ---------- read-only state ----------
    @property
    def current_piece(self) -> Optional[Piece]:
        return self._current

    @property
    def next_piece(self) -> Optional[Piece]:
        return self._next

    @property
    def score(self) -> int:
        return self._score

    @property
    def level(self) -> int:
        return self._level

    @property
    def total_rows(self) -> int:
        return self.board.rows_cleared

    @property
    def single_row_clears(self) -> int:
        return self._clears[1]

    @property
    def double_row_clears(self) -> int:
        return self._clears[2]

    @property
    def triple_row_clears(self) -> int:
        return self._clears[3]

    @property
    def tetris_row_clears(self) -> int:
        return self._clears[4]

    def line_statistics(self) -> Dict[str, int]:
        return {CLEAR_NAMES[n]: c for n, c in self._clears.items()}

    @property
    def remaining_ms(self) -> int:
        return self._remaining_ms

    @property
    def remaining_seconds(self) -> int:
        return -(-self._remaining_ms // 1000)

    @property
    def target_rows(self) -> int:
        return self._target_rows

    @property
    def elapsed_ms(self) -> int:
        return self._elapsed_ms

    @property
    def is_running(self) -> bool:
        return self.status is GameStatus.RUNNING

    @property
    def is_paused(self) -> bool:
        return self.status is GameStatus.PAUSED

    @property
    def is_game_over(self) -> bool:
        return self.status is GameStatus.GAME_OVER

    @property
    def is_won(self) -> bool:
        return self.status is GameStatus.WON

    @property
    def is_fast_drop_active(self) -> bool:
        return self._fast_drop

    @property
    def fall_interval_ms(self) -> int:
        if self._fast_drop:
            return FAST_DROP_MS
        return fall_interval_ms(self._level, self.difficulty)

    # ---------- lifecycle ----------
    def start_new_game(self, mode=None, difficulty=None):
        self.mode = game_mode_of(CONFIG["GAME_MODE"] if mode is None else mode)
        self.difficulty = difficulty_of(CONFIG["DIFFICULTY"] if difficulty is None else difficulty)
        self._reset_progress()
        self.events.clear()
        if self.mode is GameMode.TIMED:
            self._remaining_ms = TIMED_MODE_SECONDS[self.difficulty] * 1000
        self._target_rows = default_target(self.mode, self.difficulty)
        self._current = None
        self._next = self.factory.create_random()
        self.status = GameStatus.RUNNING
        logger.info(f"New {self.mode.name.lower()} game on {DIFFICULTY_NAMES[self.difficulty]}")
        self.events.publish(ScoreChanged(0, 0))
        if self.mode is GameMode.TIMED:
            self.events.publish(RemainingTimeChanged(self.remaining_seconds))
        self.spawn()

    def spawn(self) -> bool:
        """Promote the next piece to current and draw a new next piece.

        If the new piece overlaps the board the game ends with
        NO_SPACE_FOR_NEW_PIECE and nothing is written to the board.
        """
        if self.status is not GameStatus.RUNNING:
            return False
        piece = self._next if self._next is not None else self.factory.create_random()
        piece.reset()
        self._current = piece
        self._next = self.factory.create_random()
        self._gravity_acc = 0
        if not self.board.can_place(piece.cells()):
            self._end(GameOverReason.NO_SPACE_FOR_NEW_PIECE)
            return False
        return True

    def pause(self) -> bool:
        if self.status is not GameStatus.RUNNING:
            return False
        self.status = GameStatus.PAUSED
        logger.debug("Game paused")
        return True

    def resume(self) -> bool:
        if self.status is not GameStatus.PAUSED:
            return False
        self.status = GameStatus.RUNNING
        logger.debug("Game resumed")
        return True

    def toggle_pause(self) -> bool:
        return self.pause() or self.resume()

    def end_game(self) -> bool:
        if self.status not in (GameStatus.RUNNING, GameStatus.PAUSED):
            return False
        self._end(GameOverReason.PLAYER_ENDED)
        return True

    # ---------- timing ----------
    def update(self, dt_ms: float):
        """Advance the countdown and gravity by dt_ms of wall-clock time."""
        if self.status is not GameStatus.RUNNING or dt_ms <= 0:
            return
        dt_ms = int(dt_ms)
        self._elapsed_ms += dt_ms
        if self.mode is GameMode.TIMED:
            self._advance_countdown(dt_ms)
            if self.status is not GameStatus.RUNNING:
                return
        self._gravity_acc += dt_ms
        while self.status is GameStatus.RUNNING and self._gravity_acc >= self.fall_interval_ms:
            self._gravity_acc -= self.fall_interval_ms
            self.tick()

    def _advance_countdown(self, dt_ms: int):
        before = self.remaining_seconds
        self._remaining_ms = max(0, self._remaining_ms - dt_ms)
        if self.remaining_seconds != before:
            self.events.publish(RemainingTimeChanged(self.remaining_seconds))
        if self._remaining_ms == 0:
            self._win()

    def tick(self) -> bool:
        """One gravity step. Returns False when the piece locked instead of falling."""
        if self.status is not GameStatus.RUNNING:
            return False
        if self._shift(0, 1):
            return True
        self._lock()
        return False

    # ---------- player commands ----------
    def can_piece_move(self, dx: int, dy: int) -> bool:
        if self._current is None:
            return False
        return self.board.can_place(self._current.cells_at(dx, dy))

    def _shift(self, dx: int, dy: int) -> bool:
        if self.status is not GameStatus.RUNNING or not self.can_piece_move(dx, dy):
            return False
        self._current.move(dx, dy)
        return True

    def move_left(self) -> bool:
        return self._shift(-1, 0)

    def move_right(self) -> bool:
        return self._shift(1, 0)

    def move_down(self) -> bool:
        return self._shift(0, 1)

    def _rotate(self, direction: int) -> bool:
        if self.status is not GameStatus.RUNNING:
            return False
        if not self.board.can_place(self._current.rotated_cells(direction)):
            logger.debug(f"rotation of {self._current.kind.name} rejected at ({self._current.x}, {self._current.y})")
            return False
        self._current.rotate(direction)
        return True

    def rotate_clockwise(self) -> bool:
        return self._rotate(CW)

    def rotate_counter_clockwise(self) -> bool:
        return self._rotate(CCW)

    def activate_fast_drop(self) -> bool:
        if self.status is not GameStatus.RUNNING or self._fast_drop:
            return False
        self._fast_drop = True
        self._gravity_acc = 0
        return True

    def deactivate_fast_drop(self) -> bool:
        if not self._fast_drop:
            return False
        self._fast_drop = False
        self._gravity_acc = 0
        return True

    def hard_drop(self) -> int:
        """Drop to the floor, lock and spawn. Returns the rows fallen."""
        if self.status is not GameStatus.RUNNING:
            return 0
        d = self.board.drop_distance(self._current)
        self._current.move(0, d)
        self._lock()
        return d

    # ---------- locking & scoring ----------
    def _lock(self):
        piece = self._current
        self.board.place(piece.cells(), piece.kind)
        full = self.board.find_full_rows()
        if full:
            self.board.clear_rows(full)
            self._score_rows(full)
        if self.board.is_game_over():
            self._end(GameOverReason.BOARD_FULL)
            return
        if self.mode is GameMode.CHALLENGE and self.total_rows >= self._target_rows:
            self._win()
            return
        self.spawn()

    def _score_rows(self, rows: List[int]):
        n = len(rows)
        gained = int(SCORE_TABLE[n] * self._level * SCORE_MULTIPLIER[self.difficulty])
        self._score += gained
        self._clears[n] += 1
        self.events.publish(RowsCleared(n, gained, tuple(rows)))
        self.events.publish(ScoreChanged(self._score, gained))
        new_level = level_for_rows(self.total_rows)
        if new_level > self._level:
            old, self._level = self._level, new_level
            logger.info(f"Level up: {old} -> {new_level}")
            self.events.publish(LevelIncreased(old, new_level))

    def _end(self, reason: GameOverReason):
        self.status = GameStatus.GAME_OVER
        self.game_over_reason = reason
        self._fast_drop = False
        logger.info(f"Game over ({reason.value}): score {self._score}, level {self._level}, rows {self.total_rows}")
        self.events.publish(GameOver(self._score, self._level, self.total_rows, self.line_statistics(), reason))

    def _win(self):
        self.status = GameStatus.WON
        self._fast_drop = False
        logger.info(f"{self.mode.name.title()} game won: score {self._score}, rows {self.total_rows}")
        self.events.publish(GameWon(self._score, self._level, self.total_rows, self.mode))

    # ---------- previews (never touch the live board) ----------
    def ghost_cells(self) -> List[Cell]:
        if self._current is None:
            return []
        scratch = self.board.clone()
        return self._current.cells_at(0, scratch.drop_distance(self._current))

    def board_with_current_piece(self) -> Grid:
        scratch = self.board.clone()
        if self._current is not None and scratch.can_place(self._current.cells()):
            scratch.place(self._current.cells(), self._current.kind)
        return scratch.grid

    # ---------- snapshots ----------
    def create_snapshot(self) -> dict:
        if self.status not in (GameStatus.RUNNING, GameStatus.PAUSED):
            raise RuntimeError(f"cannot snapshot a game that is {self.status.value}")
        state = GameState(
            board=self.board.to_rows(),
            current_piece=PieceState.from_piece(self._current),
            next_piece=PieceState.from_piece(self._next),
            score=self._score,
            level=self._level,
            difficulty=self.difficulty,
            game_mode=self.mode,
            remaining_ms=self._remaining_ms,
            target_rows=self._target_rows,
            total_rows=self.total_rows,
            single_row_clears=self._clears[1],
            double_row_clears=self._clears[2],
            triple_row_clears=self._clears[3],
            tetris_row_clears=self._clears[4],
            elapsed_ms=self._elapsed_ms,
            paused=self.is_paused,
            fast_drop_active=self._fast_drop,
            metadata=SaveMetadata(game_mode_display=self.mode.name.title(),
                                  difficulty_display=DIFFICULTY_NAMES[self.difficulty]),
        )
        return state.to_dict()

    def restore_from_snapshot(self, data: dict):
        """Replace the session with a saved one.

        Raises InvalidSnapshotError and leaves the current session as it was
        if the data is corrupted.
        """
        try:
            state = GameState.from_dict(data)
        except InvalidSnapshotError as e:
            logger.warning(f"Rejected snapshot: {e}")
            raise
        self.board = Board.from_rows(state.board, state.total_rows)
        self._current = state.current_piece.to_piece()
        self._next = state.next_piece.to_piece()
        self._score = state.score
        self._level = state.level
        self.mode = state.game_mode
        self.difficulty = state.difficulty
        self._clears = {1: state.single_row_clears, 2: state.double_row_clears,
                        3: state.triple_row_clears, 4: state.tetris_row_clears}
        self._remaining_ms = state.remaining_ms
        self._target_rows = state.target_rows
        self._elapsed_ms = state.elapsed_ms
        self._fast_drop = state.fast_drop_active
        self._gravity_acc = 0
        self.game_over_reason = None
        self.status = GameStatus.PAUSED if state.paused else GameStatus.RUNNING
        self.events.clear()
        self.events.publish(ScoreChanged(self._score, 0))
        if self.mode is GameMode.TIMED:
            self.events.publish(RemainingTimeChanged(self.remaining_seconds))
        logger.info(f"Restored {state.describe()}")
