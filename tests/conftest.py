import pytest

from tetris_config import CONFIG, Difficulty, GameMode
from tetris_engine import GameEngine
from tetris_rng import ScriptedFactory


@pytest.fixture(autouse=True)
def isolated_save_dir(tmp_path, monkeypatch):
    monkeypatch.setitem(CONFIG, "SAVE_DIR", str(tmp_path))


@pytest.fixture
def make_engine():
    def _make(kinds=(), mode=GameMode.CLASSIC, difficulty=Difficulty.EASY, seed=7):
        engine = GameEngine(factory=ScriptedFactory(kinds, seed=seed))
        engine.start_new_game(mode, difficulty)
        engine.events.dispatch()
        return engine
    return _make


@pytest.fixture
def engine(make_engine):
    # current I, next O
    return make_engine(["I", "O", "T", "O"])
