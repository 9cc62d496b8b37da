"""Piece factory: uniform random or specific pieces"""
import random
from typing import Iterable, Optional

from tetris_piece import Piece, PieceKind, piece_kind


class PieceFactory:
    """Every kind equally likely on every call; no bag, repeats allowed."""

    KINDS = list(PieceKind)

    def __init__(self, seed: Optional[int] = None):
        self.rng = random.Random(seed)

    def create_random(self) -> Piece:
        return Piece.spawn(self.rng.choice(self.KINDS))

    def create_by_kind(self, kind) -> Piece:
        return Piece.spawn(piece_kind(kind))


class ScriptedFactory(PieceFactory):
    """Hands out a fixed sequence of kinds first, then falls back to random."""

    def __init__(self, kinds: Iterable, seed: Optional[int] = None):
        super().__init__(seed)
        self.queue = [piece_kind(k) for k in kinds]

    def push(self, *kinds):
        self.queue.extend(piece_kind(k) for k in kinds)

    def create_random(self) -> Piece:
        if self.queue:
            return Piece.spawn(self.queue.pop(0))
        return super().create_random()
