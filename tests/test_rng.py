from collections import Counter

import pytest

from tetris_piece import PieceKind
from tetris_rng import PieceFactory, ScriptedFactory


def _kinds(factory, n):
    return [factory.create_random().kind for _ in range(n)]


def test_same_seed_same_sequence():
    assert _kinds(PieceFactory(42), 50) == _kinds(PieceFactory(42), 50)


def test_every_kind_shows_up():
    counts = Counter(_kinds(PieceFactory(3), 700))
    assert set(counts) == set(PieceKind)
    assert min(counts.values()) > 50


def test_pieces_spawn_at_origin():
    p = PieceFactory(1).create_random()
    assert (p.x, p.y, p.rotation) == (3, 0, 0)


def test_create_by_kind():
    f = PieceFactory()
    assert f.create_by_kind("s").kind is PieceKind.S
    assert f.create_by_kind(PieceKind.Z).kind is PieceKind.Z
    with pytest.raises(ValueError):
        f.create_by_kind("X")


def test_scripted_factory_then_random():
    f = ScriptedFactory(["T", "T", PieceKind.I], seed=5)
    f.push("O")
    assert _kinds(f, 4) == [PieceKind.T, PieceKind.T, PieceKind.I, PieceKind.O]
    assert _kinds(f, 10) == _kinds(PieceFactory(5), 10)
