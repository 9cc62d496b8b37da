"""Save slots and lifetime statistics as JSON files under CONFIG["SAVE_DIR"]"""
import json
import os
import re
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import List, Optional

from loguru import logger

from tetris_config import CONFIG
from tetris_events import GameOver, GameWon
from tetris_state import GameState, InvalidSnapshotError

SAVE_EXT = ".tetris"
QUICK_SAVE = "quicksave"
MAX_NAME_LEN = 50


class StorageError(Exception):
    """A save file could not be written or read back."""


@dataclass
class SaveInfo:
    name: str
    saved_at: str
    game_mode: str
    difficulty: str
    score: int
    level: int
    path: str


def safe_file_name(name: str) -> str:
    return re.sub(r"[^A-Za-z0-9_-]+", "_", name.strip()).strip("_") or "save"


def _write_json(path: str, data):
    """Dump to ``path + ".tmp"`` and move it over ``path``; the old file survives a failed dump."""
    tmp = path + ".tmp"
    try:
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
        os.replace(tmp, path)
    finally:
        if os.path.exists(tmp):
            os.remove(tmp)


class SaveStore:
    def __init__(self, directory: Optional[str] = None):
        self.directory = directory or os.path.join(CONFIG["SAVE_DIR"], "saves")
        os.makedirs(self.directory, exist_ok=True)

    def path_for(self, name: str) -> str:
        return os.path.join(self.directory, safe_file_name(name) + SAVE_EXT)

    @staticmethod
    def validate_name(name: str):
        if not name or not name.strip():
            raise ValueError("save name cannot be empty")
        if len(name) > MAX_NAME_LEN:
            raise ValueError(f"save name cannot be longer than {MAX_NAME_LEN} characters")

    def exists(self, name: str) -> bool:
        return os.path.isfile(self.path_for(name))

    def save_game(self, snapshot: dict, name: str, description: str = "") -> str:
        self.validate_name(name)
        return self._write(snapshot, self.path_for(name), name, description)

    def quick_save(self, snapshot: dict) -> str:
        mode = snapshot.get("game_mode", "")
        return self._write(snapshot, self.path_for(QUICK_SAVE), "Quick Save", f"Quick save from {mode.title()} mode")

    def _write(self, snapshot: dict, path: str, name: str, description: str) -> str:
        data = dict(snapshot)
        meta = dict(data.get("metadata") or {})
        meta.update(save_name=name, description=description,
                    saved_at=datetime.now().isoformat(timespec="seconds"))
        data["metadata"] = meta
        try:
            _write_json(path, data)
        except (OSError, TypeError, ValueError) as e:
            raise StorageError(f"failed to save game to {path!r}: {e}") from e
        logger.success(f"Saved game '{name}' to {path}")
        return path

    def load_game(self, name: str) -> dict:
        """Read and validate a save; the returned dict is ready for restore_from_snapshot."""
        self.validate_name(name)
        path = self.path_for(name)
        if not os.path.isfile(path):
            raise StorageError(f"save {name!r} not found")
        return self._read(path, name)

    def _read(self, path: str, name: str) -> dict:
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
            GameState.from_dict(data)
        except (OSError, json.JSONDecodeError, InvalidSnapshotError) as e:
            logger.error(f"Could not load save '{name}': {e}")
            raise StorageError(f"save {name!r} is corrupted or unreadable: {e}") from e
        return data

    def load_quick_save(self) -> Optional[dict]:
        path = self.path_for(QUICK_SAVE)
        if not os.path.isfile(path):
            return None
        try:
            return self._read(path, QUICK_SAVE)
        except StorageError:
            return None

    def delete_save(self, name: str) -> bool:
        path = self.path_for(name)
        if not os.path.isfile(path):
            return False
        os.remove(path)
        logger.info(f"Deleted save '{name}'")
        return True

    def list_saves(self) -> List[SaveInfo]:
        """Readable saves, newest first; the quick save slot is not listed."""
        saves = []
        for entry in os.listdir(self.directory):
            stem, ext = os.path.splitext(entry)
            if ext != SAVE_EXT or stem.lower() == QUICK_SAVE:
                continue
            path = os.path.join(self.directory, entry)
            try:
                with open(path, encoding="utf-8") as f:
                    data = json.load(f)
                meta = data.get("metadata") or {}
                saves.append(SaveInfo(
                    name=meta.get("save_name") or stem,
                    saved_at=meta.get("saved_at", ""),
                    game_mode=meta.get("game_mode_display") or str(data.get("game_mode", "")).title(),
                    difficulty=meta.get("difficulty_display", ""),
                    score=int(data.get("score", 0)),
                    level=int(data.get("level", 1)),
                    path=path,
                ))
            except (OSError, ValueError, TypeError, AttributeError) as e:
                logger.warning(f"Skipping unreadable save {path}: {e}")
        saves.sort(key=lambda s: s.saved_at, reverse=True)
        return saves


@dataclass
class GameStatistics:
    total_games_played: int = 0
    total_games_completed: int = 0
    highest_score: int = 0
    highest_level: int = 0
    total_score: int = 0
    total_rows_cleared: int = 0
    total_time_played_seconds: float = 0.0
    single_row_clears: int = 0
    double_row_clears: int = 0
    triple_row_clears: int = 0
    tetris_row_clears: int = 0
    created_at: str = field(default_factory=lambda: datetime.now().isoformat(timespec="seconds"))
    last_updated: str = ""

    @property
    def average_score(self) -> float:
        return self.total_score / self.total_games_played if self.total_games_played else 0.0

    @property
    def average_rows_per_game(self) -> float:
        return self.total_rows_cleared / self.total_games_played if self.total_games_played else 0.0

    @property
    def average_time_per_game(self) -> float:
        return self.total_time_played_seconds / self.total_games_played if self.total_games_played else 0.0

    @property
    def completion_rate(self) -> float:
        return 100.0 * self.total_games_completed / self.total_games_played if self.total_games_played else 0.0

    @property
    def formatted_total_time(self) -> str:
        secs = int(self.total_time_played_seconds)
        days, secs = divmod(secs, 86400)
        h, rem = divmod(secs, 3600)
        m, s = divmod(rem, 60)
        if days:
            return f"{days}d {h:02}:{m:02}:{s:02}"
        return f"{h:02}:{m:02}:{s:02}"

    def update_from_game(self, final_score: int, final_level: int, rows: int, seconds: float,
                         completed: bool, line_statistics: Optional[dict] = None):
        self.total_games_played += 1
        if completed:
            self.total_games_completed += 1
        self.total_score += final_score
        self.total_rows_cleared += rows
        self.total_time_played_seconds += seconds
        self.highest_score = max(self.highest_score, final_score)
        self.highest_level = max(self.highest_level, final_level)
        stats = line_statistics or {}
        self.single_row_clears += stats.get("Single", 0)
        self.double_row_clears += stats.get("Double", 0)
        self.triple_row_clears += stats.get("Triple", 0)
        self.tetris_row_clears += stats.get("Tetris", 0)
        self.last_updated = datetime.now().isoformat(timespec="seconds")


def _checked_statistics(data) -> dict:
    """Known fields from a loaded statistics file; any field of the wrong type raises TypeError."""
    if not isinstance(data, dict):
        raise TypeError("statistics file must hold a JSON object")
    defaults = asdict(GameStatistics())
    out = {}
    for key, value in data.items():
        if key not in defaults:
            continue
        expected = type(defaults[key])
        numeric_ok = expected is float and isinstance(value, int)
        if isinstance(value, bool) or not (isinstance(value, expected) or numeric_ok):
            raise TypeError(f"{key} should be {expected.__name__}, got {value!r}")
        out[key] = value
    return out


class StatisticsStore:
    def __init__(self, path: Optional[str] = None):
        self.path = path or os.path.join(CONFIG["SAVE_DIR"], "statistics.json")
        self.stats = self.load()

    def load(self) -> GameStatistics:
        if not os.path.isfile(self.path):
            return GameStatistics()
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
            return GameStatistics(**_checked_statistics(data))
        except (OSError, ValueError, TypeError, AttributeError) as e:
            logger.error(f"Statistics file {self.path} unreadable, starting fresh: {e}")
            return GameStatistics()

    def save(self):
        os.makedirs(os.path.dirname(self.path) or ".", exist_ok=True)
        try:
            _write_json(self.path, asdict(self.stats))
        except OSError as e:
            raise StorageError(f"failed to write statistics to {self.path!r}: {e}") from e

    def record_game_over(self, event: GameOver, seconds: float):
        self.stats.update_from_game(event.final_score, event.final_level, event.total_rows, seconds,
                                    completed=False, line_statistics=event.line_statistics)
        self.save()

    def record_game_won(self, event: GameWon, seconds: float, line_statistics: Optional[dict] = None):
        self.stats.update_from_game(event.final_score, event.final_level, event.total_rows, seconds,
                                    completed=True, line_statistics=line_statistics)
        self.save()

