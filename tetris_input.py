"""Input actions, the controller that maps them onto the engine, key bindings, DAS/ARR"""
from enum import Enum, auto
from typing import Optional

import pygame

from tetris_board import Grid
from tetris_config import CONFIG
from tetris_engine import GameEngine


class InputAction(Enum):
    MOVE_LEFT = auto()
    MOVE_RIGHT = auto()
    ROTATE_CW = auto()
    ROTATE_CCW = auto()
    SOFT_DROP_START = auto()
    SOFT_DROP_END = auto()
    HARD_DROP = auto()


# key -> action on KEYDOWN; soft drop ends on KEYUP of the same key
KEY_BINDINGS = {
    pygame.K_LEFT: InputAction.MOVE_LEFT,
    pygame.K_RIGHT: InputAction.MOVE_RIGHT,
    pygame.K_UP: InputAction.ROTATE_CW,
    pygame.K_x: InputAction.ROTATE_CW,
    pygame.K_z: InputAction.ROTATE_CCW,
    pygame.K_DOWN: InputAction.SOFT_DROP_START,
    pygame.K_SPACE: InputAction.HARD_DROP,
}


def action_for_key(key: int, pressed: bool = True) -> Optional[InputAction]:
    action = KEY_BINDINGS.get(key)
    if pressed:
        return action
    if action is InputAction.SOFT_DROP_START:
        return InputAction.SOFT_DROP_END
    return None


class TetrominoController:
    """Translates discrete actions into engine commands.

    The only state held here is whether soft drop is engaged.
    """

    def __init__(self, engine: GameEngine):
        if engine is None:
            raise ValueError("controller needs an engine")
        self.engine = engine
        self.soft_drop_active = False

    @property
    def is_soft_drop_active(self) -> bool:
        return self.soft_drop_active

    def reset(self):
        """Forget soft drop after the engine starts or restores a session."""
        self.soft_drop_active = self.engine.is_fast_drop_active

    def move_left(self) -> bool:
        return self.engine.move_left()

    def move_right(self) -> bool:
        return self.engine.move_right()

    def rotate_clockwise(self) -> bool:
        return self.engine.rotate_clockwise()

    def rotate_counter_clockwise(self) -> bool:
        return self.engine.rotate_counter_clockwise()

    def toggle_soft_drop(self, activate: bool) -> bool:
        """Returns True when soft drop actually switched on or off."""
        if activate and not self.soft_drop_active:
            self.soft_drop_active = self.engine.activate_fast_drop()
            return self.soft_drop_active
        if not activate and self.soft_drop_active:
            self.engine.deactivate_fast_drop()
            self.soft_drop_active = False
            return True
        return False

    def hard_drop(self) -> int:
        return self.engine.hard_drop()

    def process_input(self, action: InputAction) -> bool:
        if action is InputAction.MOVE_LEFT:
            return self.move_left()
        if action is InputAction.MOVE_RIGHT:
            return self.move_right()
        if action is InputAction.ROTATE_CW:
            return self.rotate_clockwise()
        if action is InputAction.ROTATE_CCW:
            return self.rotate_counter_clockwise()
        if action is InputAction.SOFT_DROP_START:
            return self.toggle_soft_drop(True)
        if action is InputAction.SOFT_DROP_END:
            return self.toggle_soft_drop(False)
        if action is InputAction.HARD_DROP:
            self.hard_drop()
            return True
        raise ValueError(f"unknown input action: {action!r}")

    def board_with_current_piece(self) -> Grid:
        return self.engine.board_with_current_piece()

    def hard_drop_preview(self) -> Grid:
        """Board copy with the current piece drawn where a hard drop would land it."""
        scratch = self.engine.board.clone()
        piece = self.engine.current_piece
        if piece is not None:
            cells = piece.cells_at(0, scratch.drop_distance(piece))
            if scratch.can_place(cells):
                scratch.place(cells, piece.kind)
        return scratch.grid


class ShiftRepeat:
    """Held left/right: one step on press, then repeats after DAS_MS every ARR_MS."""

    def __init__(self):
        self.dir = 0
        self.held_ms = 0
        self.last = 0
        self.initial = False

    def reset(self):
        self.dir = 0; self.held_ms = 0; self.last = 0; self.initial = False

    def update(self, dt, left: bool, right: bool) -> Optional[InputAction]:
        nd = (-1 if left else 0) + (1 if right else 0)
        if nd != self.dir:
            self.dir = nd; self.held_ms = 0; self.last = 0; self.initial = False
        if self.dir == 0:
            return None
        step = InputAction.MOVE_LEFT if self.dir < 0 else InputAction.MOVE_RIGHT
        self.held_ms += dt
        if not self.initial:
            self.initial = True
            return step
        if self.held_ms < CONFIG["DAS_MS"]:
            return None
        arr = CONFIG["ARR_MS"]
        if arr == 0:
            return step
        self.last += dt
        if self.last >= arr:
            self.last = 0
            return step
        return None
