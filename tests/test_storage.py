import json
import os

import pytest

from helpers import fill_row
from tetris_config import CONFIG, GameMode
from tetris_events import GameOver, GameOverReason, GameWon
from tetris_storage import (GameStatistics, SaveStore, StatisticsStore, StorageError, safe_file_name)


@pytest.fixture
def store(tmp_path):
    return SaveStore(str(tmp_path / "saves"))


@pytest.fixture
def snapshot(engine):
    fill_row(engine.board, 19, skip=(3, 4, 5, 6))
    engine.hard_drop()
    return engine.create_snapshot()


def test_default_locations_follow_config():
    assert SaveStore().directory == os.path.join(CONFIG["SAVE_DIR"], "saves")
    assert StatisticsStore().path == os.path.join(CONFIG["SAVE_DIR"], "statistics.json")


def test_save_and_load(store, snapshot):
    path = store.save_game(snapshot, "My Game", "before the big drop")
    assert path.endswith("My_Game.tetris")
    assert store.exists("My Game")
    loaded = store.load_game("My Game")
    assert loaded["score"] == 100
    assert loaded["metadata"]["save_name"] == "My Game"
    assert loaded["metadata"]["description"] == "before the big drop"
    assert loaded["board"] == snapshot["board"]


def test_saved_file_restores_into_engine(store, snapshot, make_engine):
    store.save_game(snapshot, "slot")
    other = make_engine(["Z", "Z"])
    other.restore_from_snapshot(store.load_game("slot"))
    assert other.score == 100
    assert other.current_piece.kind.name == "O"


@pytest.mark.parametrize("name", ["", "   ", "x" * 51])
def test_bad_save_names(store, snapshot, name):
    with pytest.raises(ValueError):
        store.save_game(snapshot, name)


def test_missing_save(store):
    with pytest.raises(StorageError):
        store.load_game("nothing here")


def test_corrupted_save_is_reported(store, snapshot):
    path = store.save_game(snapshot, "broken")
    with open(path, "w", encoding="utf-8") as f:
        f.write("{ not json")
    with pytest.raises(StorageError):
        store.load_game("broken")


def test_invalid_save_is_reported(store, snapshot):
    bad = dict(snapshot, level=7)
    store.save_game(bad, "cheater")
    with pytest.raises(StorageError):
        store.load_game("cheater")


def test_quick_save_round_trip(store, snapshot):
    assert store.load_quick_save() is None
    store.quick_save(snapshot)
    data = store.load_quick_save()
    assert data["score"] == 100
    assert data["metadata"]["description"] == "Quick save from Classic mode"


def test_corrupted_quick_save_returns_none(store, snapshot):
    path = store.quick_save(snapshot)
    with open(path, "w", encoding="utf-8") as f:
        json.dump({"score": 1}, f)
    assert store.load_quick_save() is None


def test_list_saves_newest_first_without_quick_save(store, snapshot):
    for name, stamp in (("older", "2024-01-01T10:00:00"), ("newer", "2024-06-01T10:00:00")):
        path = store.save_game(snapshot, name)
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        data["metadata"]["saved_at"] = stamp
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f)
    store.quick_save(snapshot)
    with open(os.path.join(store.directory, "junk.tetris"), "w", encoding="utf-8") as f:
        f.write("[")
    saves = store.list_saves()
    assert [s.name for s in saves] == ["newer", "older"]
    assert saves[0].game_mode == "Classic"
    assert saves[0].difficulty == "Easy"
    assert saves[0].score == 100


def test_delete_save(store, snapshot):
    store.save_game(snapshot, "gone")
    assert store.delete_save("gone")
    assert not store.exists("gone")
    assert not store.delete_save("gone")


def test_safe_file_name():
    assert safe_file_name("  a/b\\c d  ") == "a_b_c_d"
    assert safe_file_name("???") == "save"


def test_statistics_accumulate_and_persist(tmp_path):
    path = str(tmp_path / "stats.json")
    stats = StatisticsStore(path)
    stats.record_game_over(GameOver(1000, 3, 25, {"Single": 5, "Tetris": 5}, GameOverReason.BOARD_FULL), 90)
    stats.record_game_won(GameWon(3000, 5, 40, GameMode.CHALLENGE), 3700.5, {"Double": 4, "Tetris": 8})

    again = StatisticsStore(path).stats
    assert again.total_games_played == 2
    assert again.total_games_completed == 1
    assert again.highest_score == 3000
    assert again.highest_level == 5
    assert again.total_rows_cleared == 65
    assert again.single_row_clears == 5
    assert again.double_row_clears == 4
    assert again.tetris_row_clears == 13
    assert again.average_score == 2000
    assert again.completion_rate == 50.0
    assert again.formatted_total_time == "01:03:10"


def test_unreadable_statistics_start_fresh(tmp_path):
    path = tmp_path / "stats.json"
    path.write_text("oops", encoding="utf-8")
    assert StatisticsStore(str(path)).stats.total_games_played == 0


def test_statistics_formatting_and_empty_averages():
    stats = GameStatistics()
    assert stats.average_score == 0.0
    assert stats.completion_rate == 0.0
    stats.total_time_played_seconds = 90061
    assert stats.formatted_total_time == "1d 01:01:01"


@pytest.mark.parametrize("content", [
    {"highest_score": "lots", "total_score": None},
    {"total_games_played": True},
    {"total_time_played_seconds": "1h"},
    ["not", "an", "object"],
])
def test_wrongly_typed_statistics_start_fresh_and_still_record(tmp_path, content):
    path = tmp_path / "stats.json"
    path.write_text(json.dumps(content), encoding="utf-8")
    store = StatisticsStore(str(path))
    assert store.stats.total_games_played == 0
    store.record_game_over(GameOver(100, 1, 1, {}, GameOverReason.BOARD_FULL), 1.0)
    assert StatisticsStore(str(path)).stats.total_score == 100


def test_statistics_accept_whole_seconds(tmp_path):
    path = tmp_path / "stats.json"
    path.write_text(json.dumps({"total_games_played": 3, "total_time_played_seconds": 90}), encoding="utf-8")
    stats = StatisticsStore(str(path)).stats
    assert stats.total_games_played == 3
    assert stats.total_time_played_seconds == 90


def test_failed_write_keeps_previous_save(store, snapshot):
    path = store.save_game(snapshot, "keeper")
    with pytest.raises(StorageError):
        store.save_game(dict(snapshot, score=object()), "keeper")
    assert store.load_game("keeper")["score"] == 100
    assert not os.path.exists(path + ".tmp")


def test_failed_quick_save_keeps_previous_quick_save(store, snapshot):
    store.quick_save(snapshot)
    with pytest.raises(StorageError):
        store.quick_save(dict(snapshot, board=object()))
    assert store.load_quick_save()["score"] == 100
