import json
import logging

import pytest

from falling_blocks.game import (
    FallingBlockGame,
    JsonHighScoreStore,
    MemoryHighScoreStore,
    default_highscore_path,
)


def test_missing_file_means_no_high_score(tmp_path):
    store = JsonHighScoreStore(tmp_path / "missing.json")
    assert store.load_high_score() == 0


def test_save_then_load(tmp_path):
    path = tmp_path / "nested" / "dir" / "highscore.json"
    store = JsonHighScoreStore(path)
    store.save_high_score(1200)
    assert json.loads(path.read_text(encoding="utf-8")) == {"high_score": 1200}
    assert JsonHighScoreStore(path).load_high_score() == 1200
    # No temp files left behind
    assert [p.name for p in path.parent.iterdir()] == ["highscore.json"]


@pytest.mark.parametrize("content", ["not json", "[]", '{"high_score": "12"}', '{"high_score": -5}', "{}"])
def test_malformed_file_raises(tmp_path, content):
    path = tmp_path / "highscore.json"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(ValueError):
        JsonHighScoreStore(path).load_high_score()


def test_engine_starts_from_zero_on_corrupt_file(tmp_path, caplog):
    path = tmp_path / "highscore.json"
    path.write_text("garbage", encoding="utf-8")
    with caplog.at_level(logging.WARNING):
        game = FallingBlockGame(store=JsonHighScoreStore(path))
    assert game.high_score == 0
    assert any("load high score" in r.getMessage() for r in caplog.records)


def test_engine_loads_existing_high_score(tmp_path):
    path = tmp_path / "highscore.json"
    JsonHighScoreStore(path).save_high_score(777)
    game = FallingBlockGame(store=JsonHighScoreStore(path))
    assert game.high_score == 777


def test_memory_store_round_trip():
    store = MemoryHighScoreStore(10)
    assert store.load_high_score() == 10
    store.save_high_score(25)
    assert store.load_high_score() == 25


def test_default_path_lives_in_home(monkeypatch, tmp_path):
    monkeypatch.setenv("HOME", str(tmp_path))
    assert default_highscore_path() == tmp_path / ".falling_blocks" / "highscore.json"
    assert JsonHighScoreStore().path == default_highscore_path()
