"""Pair explanation: human-readable synergies and conflicts between two games.

Used by the UI next to a compatibility percentage, and by the blend engine to
flag clashing members of a blend.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from config import (
    COMPLEXITY_CONFLICT_THRESHOLD,
    ERA_MATCH_STRENGTH,
    SHARED_MECHANIC_STRENGTH,
    STYLE_CONFLICT_THRESHOLD,
)
from blending.features import GameMetadata
from blending.graph import CompatibilityEdge
from blending.vocabulary import DEFAULT_VOCABULARY


@dataclass(frozen=True)
class Synergy:
    type_name: str
    description: str
    strength: float


@dataclass(frozen=True)
class Conflict:
    type_name: str
    description: str
    severity: float
    resolution_hint: str


@dataclass(frozen=True)
class PairAnalysis:
    game_a: str
    game_b: str
    score: Optional[float]
    synergies: List[Synergy] = field(default_factory=list)
    conflicts: List[Conflict] = field(default_factory=list)


def find_conflicts(game_a: GameMetadata, game_b: GameMetadata) -> List[Conflict]:
    a, b = game_a.features, game_b.features
    conflicts: List[Conflict] = []

    complexity_diff = abs(a.complexity - b.complexity)
    if complexity_diff > COMPLEXITY_CONFLICT_THRESHOLD:
        # Always name the more complex game first
        more, less = (game_a, game_b) if a.complexity > b.complexity else (game_b, game_a)
        conflicts.append(Conflict(
            type_name="Complexity Mismatch",
            description=f"{more.title} is much more complex than {less.title}",
            severity=round(complexity_diff, 3),
            resolution_hint="Consider adjusting difficulty curves or adding tutorial layers",
        ))

    balance_diff = abs(a.action_strategy_balance - b.action_strategy_balance)
    if balance_diff > STYLE_CONFLICT_THRESHOLD:
        conflicts.append(Conflict(
            type_name="Gameplay Style Conflict",
            description="One game is action-focused while the other is strategy-focused",
            severity=round(balance_diff / 2.0, 3),
            resolution_hint="Blend by creating strategic action sequences or real-time strategy elements",
        ))

    return conflicts


def analyze_pair(
    game_a: GameMetadata,
    game_b: GameMetadata,
    edge: Optional[CompatibilityEdge] = None,
) -> PairAnalysis:
    synergies: List[Synergy] = []

    if game_a.era == game_b.era and game_a.era != "unknown":
        synergies.append(Synergy(
            type_name="Era Match",
            description=f"Both games are from the {game_a.era}",
            strength=ERA_MATCH_STRENGTH,
        ))

    shared = game_a.features.mechanics & game_b.features.mechanics
    for mechanic in sorted(shared, key=lambda m: (DEFAULT_VOCABULARY.order(m), m)):
        synergies.append(Synergy(
            type_name="Shared Mechanic",
            description=f"Both games feature {mechanic}",
            strength=SHARED_MECHANIC_STRENGTH,
        ))

    return PairAnalysis(
        game_a=game_a.game_id,
        game_b=game_b.game_id,
        score=edge.score if edge is not None else None,
        synergies=synergies,
        conflicts=find_conflicts(game_a, game_b),
    )
