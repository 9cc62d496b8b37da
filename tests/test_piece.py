import pytest

from tetris_piece import CCW, CW, SHAPES, SPAWN_X, SPAWN_Y, Piece, PieceKind, offsets, piece_kind, rotate_state


@pytest.mark.parametrize("kind", list(PieceKind))
def test_every_rotation_has_four_distinct_cells_in_a_4x4_box(kind):
    for state in range(4):
        cells = offsets(kind, state)
        assert len(cells) == 4
        assert len(set(cells)) == 4
        assert all(0 <= dx < 4 and 0 <= dy < 4 for dx, dy in cells)


def test_o_piece_is_identical_in_all_states():
    first = offsets(PieceKind.O, 0)
    assert all(offsets(PieceKind.O, s) == first for s in range(4))


def test_non_o_pieces_change_shape_when_rotated():
    for kind in PieceKind:
        if kind is PieceKind.O:
            continue
        assert set(SHAPES[kind][0]) != set(SHAPES[kind][1])


def test_rotate_state_wraps_both_ways():
    assert rotate_state(3, CW) == 0
    assert rotate_state(0, CCW) == 3
    with pytest.raises(ValueError):
        rotate_state(0, 2)


def test_offsets_rejects_bad_state():
    with pytest.raises(ValueError):
        offsets(PieceKind.T, 4)


@pytest.mark.parametrize("value,expected", [("t", PieceKind.T), ("I", PieceKind.I), (7, PieceKind.Z),
                                            (PieceKind.O, PieceKind.O)])
def test_piece_kind_accepts_names_ids_and_members(value, expected):
    assert piece_kind(value) is expected


@pytest.mark.parametrize("value", ["Q", "", 0, 8, True, None, 1.0])
def test_unknown_piece_kind_fails_fast(value):
    with pytest.raises(ValueError):
        piece_kind(value)


def test_spawn_position_and_cells():
    p = Piece.spawn("T")
    assert (p.x, p.y, p.rotation) == (SPAWN_X, SPAWN_Y, 0) == (3, 0, 0)
    assert p.cells() == [(4, 0), (3, 1), (4, 1), (5, 1)]


def test_rotate_mutates_state_and_returns_new_offsets():
    p = Piece.spawn(PieceKind.I)
    assert p.rotate(CW) == offsets(PieceKind.I, 1)
    assert p.rotation == 1
    p.rotate(CCW)
    p.rotate(CCW)
    assert p.rotation == 3


def test_rotated_cells_do_not_touch_the_piece():
    p = Piece.spawn(PieceKind.L)
    before = p.clone()
    assert p.rotated_cells(CW) == Piece(PieceKind.L, p.x, p.y, 1).cells()
    assert p == before


def test_clone_is_independent():
    p = Piece(PieceKind.S, 5, 7, 2)
    c = p.clone()
    assert c == p and c is not p
    c.move(1, 1)
    c.rotate(CW)
    assert (p.x, p.y, p.rotation) == (5, 7, 2)


def test_reset_returns_to_spawn():
    p = Piece(PieceKind.J, 0, 12, 3)
    p.reset()
    assert (p.x, p.y, p.rotation) == (SPAWN_X, SPAWN_Y, 0)
