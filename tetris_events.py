"""Engine notifications and the queue the front end drains once per frame"""
from collections import defaultdict, deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Tuple

from loguru import logger

from tetris_config import GameMode


class GameOverReason(Enum):
    BOARD_FULL = "board full"
    NO_SPACE_FOR_NEW_PIECE = "no space for new piece"
    PLAYER_ENDED = "player ended"


@dataclass(frozen=True)
class ScoreChanged:
    score: int
    delta: int


@dataclass(frozen=True)
class LevelIncreased:
    old_level: int
    new_level: int


@dataclass(frozen=True)
class RowsCleared:
    count: int
    score_gained: int
    rows: Tuple[int, ...] = ()


@dataclass(frozen=True)
class GameOver:
    final_score: int
    final_level: int
    total_rows: int
    line_statistics: Dict[str, int] = field(default_factory=dict)
    reason: GameOverReason = GameOverReason.BOARD_FULL


@dataclass(frozen=True)
class GameWon:
    final_score: int
    final_level: int
    total_rows: int
    mode: GameMode = GameMode.CHALLENGE


@dataclass(frozen=True)
class RemainingTimeChanged:
    remaining_seconds: int


Handler = Callable[[object], None]


class EventQueue:
    """Events are queued while the engine mutates and delivered on dispatch()."""

    def __init__(self):
        self.pending = deque()
        self._handlers: Dict[type, List[Handler]] = defaultdict(list)

    def subscribe(self, event_type: type, handler: Handler):
        self._handlers[event_type].append(handler)

    def unsubscribe(self, event_type: type, handler: Handler):
        try:
            self._handlers[event_type].remove(handler)
        except ValueError:
            pass

    def publish(self, event):
        logger.debug(f"event queued: {event}")
        self.pending.append(event)

    def clear(self):
        self.pending.clear()

    def dispatch(self) -> list:
        """Deliver every queued event, including ones queued by handlers."""
        delivered = []
        while self.pending:
            event = self.pending.popleft()
            for handler in list(self._handlers[type(event)]):
                handler(event)
            delivered.append(event)
        return delivered
