"""Gameplay constants, difficulty and mode tables"""
import os
from enum import Enum
from typing import Dict

COLS, ROWS = 10, 20

ROWS_PER_LEVEL = 10
FAST_DROP_MS = 50
SCORE_TABLE = {1: 100, 2: 300, 3: 500, 4: 800}   # multiplied by level and difficulty


class Difficulty(Enum):
    EASY = 0
    MEDIUM = 1
    HARD = 2


class GameMode(Enum):
    CLASSIC = 0
    TIMED = 1
    CHALLENGE = 2


CONFIG = {
    "CELL_SIZE": 32,
    "DAS_MS": 170,
    "ARR_MS": 50,
    "SEED": None,
    "DIFFICULTY": Difficulty.MEDIUM,
    "GAME_MODE": GameMode.CLASSIC,
    "LOG_LEVEL": "INFO",
    "SAVE_DIR": os.path.join(os.path.expanduser("~"), ".tetris"),
}

# Per-difficulty gravity and scoring (ms, ms, ms, factor)
INITIAL_FALL_MS: Dict[Difficulty, int] = {Difficulty.EASY: 1200, Difficulty.MEDIUM: 1000, Difficulty.HARD: 800}
REDUCTION_PER_LEVEL_MS: Dict[Difficulty, int] = {Difficulty.EASY: 40, Difficulty.MEDIUM: 50, Difficulty.HARD: 60}
MIN_FALL_MS: Dict[Difficulty, int] = {Difficulty.EASY: 150, Difficulty.MEDIUM: 100, Difficulty.HARD: 80}
SCORE_MULTIPLIER: Dict[Difficulty, float] = {Difficulty.EASY: 1.0, Difficulty.MEDIUM: 1.5, Difficulty.HARD: 2.0}

DIFFICULTY_NAMES = {Difficulty.EASY: "Easy", Difficulty.MEDIUM: "Medium", Difficulty.HARD: "Hard"}
DIFFICULTY_DESCRIPTIONS = {
    Difficulty.EASY: "Slower falling speed, standard scoring",
    Difficulty.MEDIUM: "Standard falling speed and scoring",
    Difficulty.HARD: "Faster falling speed, double scoring",
}

TIMED_MODE_SECONDS = {Difficulty.EASY: 180, Difficulty.MEDIUM: 120, Difficulty.HARD: 90}
CHALLENGE_ROWS_TARGET = {Difficulty.EASY: 20, Difficulty.MEDIUM: 40, Difficulty.HARD: 60}


def fall_interval_ms(level: int, difficulty: Difficulty = Difficulty.MEDIUM) -> int:
    """Milliseconds between gravity steps; shrinks per level down to a floor."""
    delay = INITIAL_FALL_MS[difficulty] - (level - 1) * REDUCTION_PER_LEVEL_MS[difficulty]
    return max(delay, MIN_FALL_MS[difficulty])


def level_for_rows(total_rows: int) -> int:
    return total_rows // ROWS_PER_LEVEL + 1


def difficulty_of(value) -> Difficulty:
    if isinstance(value, Difficulty):
        return value
    try:
        if isinstance(value, str):
            return Difficulty[value.upper()]
        return Difficulty(value)
    except (KeyError, ValueError):
        raise ValueError(f"unknown difficulty: {value!r}") from None


def game_mode_of(value) -> GameMode:
    if isinstance(value, GameMode):
        return value
    try:
        if isinstance(value, str):
            return GameMode[value.upper()]
        return GameMode(value)
    except (KeyError, ValueError):
        raise ValueError(f"unknown game mode: {value!r}") from None
