"""Unit tests for catalog normalization, validation and source selection."""
from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

# Ensure project root is on path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import pytest
from components.game_catalog import build_catalog, load_catalog, normalize_raw_game
from data.sample_games import SAMPLE_GAMES


# ══════════════════════════════════════════════════════════════════════
# Record normalization
# ══════════════════════════════════════════════════════════════════════

class TestNormalizeRawGame:
    def test_alternate_field_names(self):
        out = normalize_raw_game({"guid": 42, "name": "Gradius", "genre": "Shooter", "platform": "Arcade"})
        assert out["id"] == 42
        assert out["title"] == "Gradius"
        assert out["genres"] == ["Shooter"]
        assert out["platforms"] == ["Arcade"]
        assert out["tags"] == []

    def test_does_not_mutate_input(self):
        raw = {"name": "Gradius"}
        normalize_raw_game(raw)
        assert raw == {"name": "Gradius"}


# ══════════════════════════════════════════════════════════════════════
# Validation
# ══════════════════════════════════════════════════════════════════════

class TestBuildCatalog:
    def test_incomplete_records_load_with_warnings(self, caplog):
        records = [
            {"id": "ok", "title": "Fine", "year": 1988, "genres": ["RPG"]},
            {"title": "No Id Or Year", "tags": ["moonwalk"]},
        ]
        with caplog.at_level(logging.WARNING):
            games = build_catalog(records)
        assert len(games) == 2
        assert "missing required field 'id'" in caplog.text
        assert "unknown tag 'moonwalk' ignored" in caplog.text
        assert "no genres" in caplog.text

    def test_non_list_genres_and_tags_do_not_raise(self, caplog):
        with caplog.at_level(logging.WARNING):
            games = build_catalog([
                {"id": "x", "title": "X", "year": 1986, "genres": ["RPG"], "tags": 5},
                {"id": "y", "title": "Y", "year": 1986, "genres": 3},
            ])
        assert [g.game_id for g in games] == ["x", "y"]
        assert "tags should be a list" in caplog.text
        assert "genres should be a list" in caplog.text
        assert games[1].features.genre_weights == {"Action": 1.0}

    def test_string_tags_validated_as_one_tag(self, caplog):
        with caplog.at_level(logging.WARNING):
            games = build_catalog([{"id": "x", "title": "X", "year": 1986, "genres": ["RPG"], "tags": "Stealth"}])
        assert "unknown tag" not in caplog.text
        assert "Stealth" in games[0].features.mechanics

    def test_duplicate_id_replaced(self):
        games = build_catalog([
            {"id": "x", "title": "Old", "year": 1985, "genres": ["RPG"]},
            {"id": "x", "title": "New", "year": 1985, "genres": ["Puzzle"]},
        ])
        assert [g.title for g in games] == ["New"]


# ══════════════════════════════════════════════════════════════════════
# Catalog sources
# ══════════════════════════════════════════════════════════════════════

class TestLoadCatalog:
    def test_builtin_sample_when_no_files(self, tmp_path):
        games, source = load_catalog(tmp_path)
        assert source is None
        assert len(games) == len(SAMPLE_GAMES)

    def test_live_catalog_preferred(self, tmp_path):
        data_dir = tmp_path / "data"
        data_dir.mkdir()
        (data_dir / "games.json").write_text(json.dumps([{"id": "static", "title": "S", "year": 1985}]))
        (data_dir / "games_live.json").write_text(json.dumps([{"id": "live", "title": "L", "year": 1990}]))
        games, source = load_catalog(tmp_path)
        assert source == data_dir / "games_live.json"
        assert [g.game_id for g in games] == ["live"]

    def test_empty_live_catalog_falls_back(self, tmp_path):
        data_dir = tmp_path / "data"
        data_dir.mkdir()
        (data_dir / "games_live.json").write_text("[]")
        (data_dir / "games.json").write_text(json.dumps([{"id": "static", "title": "S", "year": 1985}]))
        games, source = load_catalog(tmp_path)
        assert source == data_dir / "games.json"

    def test_explicit_path_must_exist(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_catalog(tmp_path, path=tmp_path / "missing.json")
