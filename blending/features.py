"""Feature model: turns raw (best-effort) game metadata into a fixed-shape feature vector.

Genre tags become a normalized genre -> weight mapping, raw tags are matched
against the mechanic vocabulary, and the three scalar fields are derived from
genre/mechanic heuristics (see the tables in config.py). Nothing here raises on
missing or out-of-range input: absent fields fall back to defaults and scalars
are clamped, because upstream catalog data is externally sourced.

build_features() is pure: the same raw record always yields an equal vector.
"""
from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, List, Mapping, Optional

from config import (
    ACTION_STRATEGY_DEFAULT,
    BALANCE_RANGE,
    COMPLEXITY_DEFAULT,
    COMPLEXITY_RANGE,
    DEFAULT_GENERATION,
    DEFAULT_GENRE,
    DEFAULT_YEAR,
    ERA_BASE_YEAR,
    ERA_CATEGORIES,
    ERA_COMPLEXITY_CAP,
    GENERATION_RANGE,
    GENRE_ACTION_STRATEGY,
    GENRE_ALIASES,
    GENRE_COMPLEXITY,
    GENRE_IMPLIED_MECHANICS,
    GENRE_SINGLE_MULTI,
    MECHANIC_NUDGES,
    PLATFORM_GENERATIONS,
    SINGLE_MULTI_DEFAULT,
    YEAR_GENERATIONS,
)
from blending.vocabulary import DEFAULT_VOCABULARY, MechanicVocabulary

_SUM_TOLERANCE = 1e-9


def _clamp(value: Any, lo: float, hi: float, default: float) -> float:
    try:
        x = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(x):
        return default
    return max(lo, min(hi, x))


def normalize_genre_weights(weights: Mapping[str, Any]) -> Dict[str, float]:
    """Drop unusable weights and rescale the rest to sum to 1.0.

    A mapping that already sums to 1.0 (to within float noise) is returned
    unchanged, so re-normalizing a normalized mapping never moves its bits.
    """
    clean: Dict[str, float] = {}
    for genre, raw in weights.items():
        w = _clamp(raw, 0.0, math.inf, 0.0)
        if genre and w > 0.0:
            clean[str(genre)] = w
    total = sum(clean.values())
    if total <= 0.0:
        return {DEFAULT_GENRE: 1.0}
    if abs(total - 1.0) <= _SUM_TOLERANCE:
        return clean
    return {g: w / total for g, w in clean.items()}


@dataclass(frozen=True)
class FeatureVector:
    genre_weights: Mapping[str, float] = field(default_factory=dict)
    mechanics: FrozenSet[str] = frozenset()
    platform_generation: int = DEFAULT_GENERATION
    complexity: float = COMPLEXITY_DEFAULT
    action_strategy_balance: float = ACTION_STRATEGY_DEFAULT
    single_multi_balance: float = SINGLE_MULTI_DEFAULT

    def __post_init__(self) -> None:
        # Clamp rather than reject: every vector satisfies the range invariants.
        genres = normalize_genre_weights(self.genre_weights or {})
        object.__setattr__(self, "genre_weights", MappingProxyType(genres))
        object.__setattr__(self, "mechanics", frozenset(self.mechanics or ()))

        lo, hi = GENERATION_RANGE
        generation = _clamp(self.platform_generation, lo, hi, DEFAULT_GENERATION)
        object.__setattr__(self, "platform_generation", int(round(generation)))
        object.__setattr__(
            self, "complexity", _clamp(self.complexity, *COMPLEXITY_RANGE, COMPLEXITY_DEFAULT)
        )
        object.__setattr__(
            self,
            "action_strategy_balance",
            _clamp(self.action_strategy_balance, *BALANCE_RANGE, ACTION_STRATEGY_DEFAULT),
        )
        object.__setattr__(
            self,
            "single_multi_balance",
            _clamp(self.single_multi_balance, *BALANCE_RANGE, SINGLE_MULTI_DEFAULT),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "genre_weights": dict(self.genre_weights),
            "mechanics": sorted(self.mechanics),
            "platform_generation": self.platform_generation,
            "complexity": self.complexity,
            "action_strategy_balance": self.action_strategy_balance,
            "single_multi_balance": self.single_multi_balance,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FeatureVector":
        return cls(
            genre_weights=data.get("genre_weights") or {},
            mechanics=frozenset(data.get("mechanics") or ()),
            platform_generation=data.get("platform_generation", DEFAULT_GENERATION),
            complexity=data.get("complexity", COMPLEXITY_DEFAULT),
            action_strategy_balance=data.get("action_strategy_balance", ACTION_STRATEGY_DEFAULT),
            single_multi_balance=data.get("single_multi_balance", SINGLE_MULTI_DEFAULT),
        )


def get_era_category(year: int) -> str:
    for first, last, label in ERA_CATEGORIES:
        if first <= year <= last:
            return label
    return "unknown"


@dataclass(frozen=True)
class GameMetadata:
    game_id: str
    title: str
    year: int
    platform: str
    features: FeatureVector

    @property
    def era(self) -> str:
        return get_era_category(self.year)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "game_id": self.game_id,
            "title": self.title,
            "year": self.year,
            "platform": self.platform,
            "features": self.features.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "GameMetadata":
        return cls(
            game_id=str(data["game_id"]),
            title=str(data.get("title", "Unknown")),
            year=_as_int(data.get("year"), DEFAULT_YEAR),
            platform=str(data.get("platform", "Unknown")),
            features=FeatureVector.from_dict(data.get("features") or {}),
        )


# ── Raw field helpers ──────────────────────────────────────────────────

def _as_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default

    """Coerce a raw tag field (string, list, or garbage) into clean strings."""

def as_tags(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple)):
        return []
    return [t.strip() for t in value if isinstance(t, str) and t.strip()]


def _platforms(raw: Mapping[str, Any]) -> List[str]:
    return as_tags(raw.get("platforms")) or as_tags(raw.get("platform"))


def canonical_genre(tag: str) -> str:
    key = " ".join(tag.lower().split())
    return GENRE_ALIASES.get(key, tag.strip())


def _genre_tags(raw: Mapping[str, Any]) -> List[str]:
    return as_tags(raw.get("genres")) or as_tags(raw.get("genre"))


# ── Heuristics ─────────────────────────────────────────────────────────

def _genre_weighted(genres: Mapping[str, float], table: Mapping[str, float], default: float) -> float:
    return sum(w * table.get(g, default) for g, w in genres.items())


def _nudge(field_name: str, mechanics: FrozenSet[str]) -> float:
    # Iterate the config table, not the set, so the sum order is fixed.
    return sum(
        deltas.get(field_name, 0.0)
        for mechanic, deltas in MECHANIC_NUDGES.items()
        if mechanic in mechanics
    )


def platform_generation(platforms: List[str], year: int) -> int:
    for name in platforms:
        for needle, generation in PLATFORM_GENERATIONS:
            if needle in name:
                return generation
    for first, last, generation in YEAR_GENERATIONS:
        if first <= year <= last:
            return generation
    return DEFAULT_GENERATION


def _era_modifier(year: int) -> float:
    return max(0.0, min(ERA_COMPLEXITY_CAP, (year - ERA_BASE_YEAR) / 15.0))


def _explicit(raw: Mapping[str, Any], key: str) -> Optional[Any]:
    value = raw.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value


def build_features(
    raw: Mapping[str, Any],
    vocabulary: MechanicVocabulary = DEFAULT_VOCABULARY,
    infer_mechanics: bool = True,
) -> FeatureVector:
    counts: Dict[str, int] = {}
    for tag in _genre_tags(raw):
        genre = canonical_genre(tag)
        counts[genre] = counts.get(genre, 0) + 1
    total = sum(counts.values())
    genres = {g: c / total for g, c in counts.items()} if total else {DEFAULT_GENRE: 1.0}

    mechanics = set(vocabulary.match_all(as_tags(raw.get("tags")) + as_tags(raw.get("mechanics"))))
    if infer_mechanics:
        for genre in genres:
            mechanics.update(m for m in GENRE_IMPLIED_MECHANICS.get(genre, []) if m in vocabulary)
    mechanics = frozenset(mechanics)

    year = _as_int(raw.get("year"), DEFAULT_YEAR)

    generation = _explicit(raw, "platform_generation")
    if generation is None:
        generation = platform_generation(_platforms(raw), year)

    complexity = _explicit(raw, "complexity")
    if complexity is None:
        complexity = (
            _genre_weighted(genres, GENRE_COMPLEXITY, COMPLEXITY_DEFAULT)
            + _era_modifier(year)
            + _nudge("complexity", mechanics)
        )

    action_strategy = _explicit(raw, "action_strategy_balance")
    if action_strategy is None:
        action_strategy = (
            _genre_weighted(genres, GENRE_ACTION_STRATEGY, ACTION_STRATEGY_DEFAULT)
            + _nudge("action_strategy_balance", mechanics)
        )

    single_multi = _explicit(raw, "single_multi_balance")
    if single_multi is None:
        single_multi = (
            _genre_weighted(genres, GENRE_SINGLE_MULTI, SINGLE_MULTI_DEFAULT)
            + _nudge("single_multi_balance", mechanics)
        )

    return FeatureVector(
        genre_weights=genres,
        mechanics=mechanics,
        platform_generation=generation,
        complexity=complexity,
        action_strategy_balance=action_strategy,
        single_multi_balance=single_multi,
    )


def _slug(text: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", text.lower()).strip("-") or "unknown"


def build_game(
    raw: Mapping[str, Any],
    vocabulary: MechanicVocabulary = DEFAULT_VOCABULARY,
    infer_mechanics: bool = True,
) -> GameMetadata:
    title = str(raw.get("title") or raw.get("name") or "Unknown").strip()
    year = _as_int(raw.get("year"), DEFAULT_YEAR)
    game_id = raw.get("id", raw.get("game_id", raw.get("guid")))
    if game_id is None or str(game_id).strip() == "":
        game_id = f"{_slug(title)}-{year}"
    platforms = _platforms(raw)

    return GameMetadata(
        game_id=str(game_id).strip(),
        title=title,
        year=year,
        platform=platforms[0] if platforms else "Unknown",
        features=build_features(raw, vocabulary=vocabulary, infer_mechanics=infer_mechanics),
    )
