"""Game-similarity and blending engine.

The calls a caller needs: precompute() at build time, load_graph() to
restore a persisted graph, blend() on every selection change and edge_score()
to explain a single pairing. blend_path() reports the strongest links that
hold a selection together.
"""
from __future__ import annotations

from blending.blend_engine import (
    BlendPath,
    BlendResult,
    BlendSelection,
    SynergyHighlight,
    blend,
    blend_path,
)
from blending.errors import BlendingError, InvalidSelection, UnknownGame
from blending.features import FeatureVector, GameMetadata, build_features, build_game
from blending.graph import (
    CompatibilityEdge,
    CompatibilityGraph,
    edge_score,
    get_or_compute,
    load_graph,
    precompute,
)
from blending.similarity import SimilarityBreakdown, SimilarityWeights, score

__all__ = [
    "BlendPath",
    "BlendResult",
    "BlendSelection",
    "BlendingError",
    "CompatibilityEdge",
    "CompatibilityGraph",
    "FeatureVector",
    "GameMetadata",
    "InvalidSelection",
    "SimilarityBreakdown",
    "SimilarityWeights",
    "SynergyHighlight",
    "UnknownGame",
    "blend",
    "blend_path",
    "build_features",
    "build_game",
    "edge_score",
    "get_or_compute",
    "load_graph",
    "precompute",
    "score",
]
