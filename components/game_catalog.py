"""Game catalog: loads, validates, and normalizes raw game records for the blending engine.

Supports two catalog sources plus a bundled fallback:
- data/games_live.json: catalog produced by the external ingestion pipeline
- data/games.json: static hand-curated catalog
- data/sample_games.py: small built-in catalog used when neither file exists

Validation never blocks loading: problems are collected and logged, and the
feature model fills in defaults for whatever is missing.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from config import GENRE_ALIASES
from blending.features import GameMetadata, as_tags, build_game
from blending.vocabulary import DEFAULT_VOCABULARY, MechanicVocabulary
from data.sample_games import SAMPLE_GAMES

logger = logging.getLogger(__name__)

_REQUIRED_FIELDS = {"id", "title", "year"}


def _validate_game(raw: Dict[str, Any], index: int, vocabulary: MechanicVocabulary) -> List[str]:
    """Validate a raw record against the expected schema. Returns list of warnings."""
    warnings = []
    name = raw.get("title") or raw.get("name") or f"game[{index}]"

    for field in sorted(_REQUIRED_FIELDS):
        if raw.get(field) in (None, ""):
            warnings.append(f"{name}: missing required field '{field}'")

    raw_genres = raw.get("genres")
    genres = as_tags(raw_genres)
    if not genres:
        warnings.append(f"{name}: no genres, defaulting")
    if raw_genres not in (None, "") and not isinstance(raw_genres, (str, list, tuple)):
        warnings.append(f"{name}: genres should be a list, got {type(raw_genres).__name__}")
    for genre in genres:
        if genre.lower() not in GENRE_ALIASES:
            warnings.append(f"{name}: non-standard genre '{genre}'")

    raw_tags = raw.get("tags")
    if raw_tags not in (None, "") and not isinstance(raw_tags, (str, list, tuple)):
        warnings.append(f"{name}: tags should be a list, got {type(raw_tags).__name__}")
    for tag in as_tags(raw_tags):
        if vocabulary.match(tag) is None and tag.lower() not in GENRE_ALIASES:
            warnings.append(f"{name}: unknown tag '{tag}' ignored")

    return warnings


def normalize_raw_game(raw: Dict[str, Any]) -> Dict[str, Any]:
    """Flatten the alternate field names upstream sources use."""
    out = dict(raw)
    if not out.get("id"):
        for key in ("game_id", "guid"):
            if out.get(key):
                out["id"] = out[key]
                break
    if not out.get("title") and out.get("name"):
        out["title"] = out["name"]
    if not out.get("genres") and out.get("genre"):
        out["genres"] = [out["genre"]]
    if not out.get("platforms") and out.get("platform"):
        out["platforms"] = [out["platform"]]

    out.setdefault("genres", [])
    out.setdefault("tags", [])
    out.setdefault("platforms", [])
    return out


def build_catalog(
    records: List[Dict[str, Any]],
    vocabulary: MechanicVocabulary = DEFAULT_VOCABULARY,
) -> List[GameMetadata]:
    normalized = [normalize_raw_game(r) for r in records]

    # Validate all records and log warnings (non-blocking)
    all_warnings = []
    for i, raw in enumerate(normalized):
        all_warnings.extend(_validate_game(raw, i, vocabulary))
    if all_warnings:
        logger.warning("Game catalog validation found %d issues:", len(all_warnings))
        for w in all_warnings[:20]:  # cap log output
            logger.warning("  - %s", w)

    games: Dict[str, GameMetadata] = {}
    for raw in normalized:
        game = build_game(raw, vocabulary=vocabulary)
        if game.game_id in games:
            logger.info("Duplicate game id %s; later entry replaces earlier one", game.game_id)
        games[game.game_id] = game
    return list(games.values())


def load_catalog(base_dir: Path, path: Optional[Path] = None) -> Tuple[List[GameMetadata], Optional[Path]]:
    """Load the first available catalog. Returns (games, source path or None for the built-in one)."""
    candidates = [path] if path else [base_dir / "data" / "games_live.json", base_dir / "data" / "games.json"]

    for candidate in candidates:
        if candidate.exists():
            records = json.loads(candidate.read_text())
            if records:
                return build_catalog(records), candidate

    if path:
        raise FileNotFoundError(f"Catalog not found or empty: {path}")
    return build_catalog([dict(r) for r in SAMPLE_GAMES]), None
