from tetris_config import COLS
from tetris_piece import PieceKind


def fill_row(board, y, skip=(), kind=PieceKind.Z):
    board.place([(x, y) for x in range(COLS) if x not in skip], kind)


def drop_i_in_last_column(engine):
    """Stand the current I piece up and hard drop it into column 9."""
    assert engine.current_piece.kind is PieceKind.I
    assert engine.rotate_clockwise()
    for _ in range(4):
        assert engine.move_right()
    return engine.hard_drop()


def clear_tetris(engine):
    for y in range(16, 20):
        fill_row(engine.board, y, skip=(9,))
    return drop_i_in_last_column(engine)


def without_metadata(snapshot):
    return {k: v for k, v in snapshot.items() if k != "metadata"}
