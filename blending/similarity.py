"""Similarity engine: compatibility score between two feature vectors.

Three sub-scores feed a fixed weighted average:
- genre:     cosine similarity of the genre-weight mappings (absent genre = 0)
- mechanics: Jaccard index of the mechanic sets (1.0 when both are empty)
- scalars:   mean of 1 - |a - b| / range over complexity, action/strategy
             balance and single/multiplayer balance

Default weights are 0.40 / 0.35 / 0.25 (config.SIMILARITY_WEIGHTS). They may be
overridden, but must stay fixed for as long as a graph built with them is in
use, otherwise cached edges stop being comparable.

score() touches no shared state and is safe to call from any thread. It is
symmetric bit for bit: every sum runs in an order that does not depend on
which argument comes first.
"""
from __future__ import annotations

import math
import os
from dataclasses import dataclass
from typing import Dict, Mapping, Optional

from config import BALANCE_RANGE, COMPLEXITY_RANGE, SIMILARITY_WEIGHTS
from blending.features import FeatureVector

_SCALAR_FIELDS = (
    ("complexity", COMPLEXITY_RANGE[1] - COMPLEXITY_RANGE[0]),
    ("action_strategy_balance", BALANCE_RANGE[1] - BALANCE_RANGE[0]),
    ("single_multi_balance", BALANCE_RANGE[1] - BALANCE_RANGE[0]),
)


@dataclass(frozen=True)
class SimilarityWeights:
    genre: float = SIMILARITY_WEIGHTS["genre"]
    mechanics: float = SIMILARITY_WEIGHTS["mechanics"]
    scalars: float = SIMILARITY_WEIGHTS["scalars"]

    def __post_init__(self) -> None:
        for name in ("genre", "mechanics", "scalars"):
            value = getattr(self, name)
            if not math.isfinite(value) or value < 0:
                raise ValueError(f"Similarity weight {name!r} must be a non-negative number, got {value}")
        if self.genre + self.mechanics + self.scalars <= 0:
            raise ValueError("At least one similarity weight must be positive")

    @classmethod
    def from_env(cls) -> "SimilarityWeights":
        """Weights from BLEND_WEIGHT_GENRE / _MECHANICS / _SCALARS, config defaults otherwise."""
        return cls(
            genre=float(os.getenv("BLEND_WEIGHT_GENRE", SIMILARITY_WEIGHTS["genre"])),
            mechanics=float(os.getenv("BLEND_WEIGHT_MECHANICS", SIMILARITY_WEIGHTS["mechanics"])),
            scalars=float(os.getenv("BLEND_WEIGHT_SCALARS", SIMILARITY_WEIGHTS["scalars"])),
        )

    def to_dict(self) -> Dict[str, float]:
        return {"genre": self.genre, "mechanics": self.mechanics, "scalars": self.scalars}


DEFAULT_WEIGHTS = SimilarityWeights()


@dataclass(frozen=True)
class SimilarityBreakdown:
    genre: float
    mechanics: float
    scalars: float
    score: float

    def to_dict(self) -> Dict[str, float]:
        return {
            "genre": self.genre,
            "mechanics": self.mechanics,
            "scalars": self.scalars,
            "score": self.score,
        }


def _clamp01(x: float) -> float:
    return max(0.0, min(1.0, x))


def genre_similarity(a: Mapping[str, float], b: Mapping[str, float]) -> float:
    dot = 0.0
    for genre in sorted(a.keys() & b.keys()):
        dot += a[genre] * b[genre]
    norm_a = sum(a[g] * a[g] for g in sorted(a))
    norm_b = sum(b[g] * b[g] for g in sorted(b))
    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0
    # sqrt of the product (not product of sqrts) keeps self-similarity at exactly 1.0
    return _clamp01(dot / math.sqrt(norm_a * norm_b))


def mechanic_similarity(a: frozenset, b: frozenset) -> float:
    union = len(a | b)
    if union == 0:
        return 1.0
    return len(a & b) / union


def scalar_similarity(a: FeatureVector, b: FeatureVector) -> float:
    total = 0.0
    for name, span in _SCALAR_FIELDS:
        total += 1.0 - abs(getattr(a, name) - getattr(b, name)) / span
    return _clamp01(total / len(_SCALAR_FIELDS))


def score(
    a: FeatureVector,
    b: FeatureVector,
    weights: Optional[SimilarityWeights] = None,
) -> SimilarityBreakdown:
    w = weights or DEFAULT_WEIGHTS
    genre = genre_similarity(a.genre_weights, b.genre_weights)
    mechanics = mechanic_similarity(a.mechanics, b.mechanics)
    scalars = scalar_similarity(a, b)

    # Dividing by the weight total (summed in the same order as the
    # numerator) makes three perfect sub-scores come out as exactly 1.0.
    weighted = w.genre * genre + w.mechanics * mechanics + w.scalars * scalars
    total = w.genre + w.mechanics + w.scalars
    return SimilarityBreakdown(
        genre=genre,
        mechanics=mechanics,
        scalars=scalars,
        score=_clamp01(weighted / total),
    )
