"""Blend engine: combines 2+ selected games with per-game weights into one profile.

Called by the UI on every selection or slider change, so it only does O(m^2)
work in the selection size m once the relevant edges are cached:

1. validate the selection (>= 2 entries, known games, non-negative weights
   summing to 1.0); a bad selection raises InvalidSelection and is never
   silently corrected
2. combine the member feature vectors (weighted genre sum renormalized,
   mechanic kept when its weighted presence exceeds the threshold, scalars
   weighted-averaged)
3. synergy = average of pairwise edge scores, each pair weighted by the
   product of its two members' weights, so a low-weight outlier cannot
   drag the whole blend down
4. highlights = mechanics shared by two or more members, ranked by the
   summed weight of the members that have them
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Sequence, Tuple, Union

from config import HIGHLIGHT_LIMIT, MECHANIC_BLEND_THRESHOLD, MIN_SELECTION_SIZE, WEIGHT_EPSILON
from blending.errors import InvalidSelection
from blending.explain import Conflict, Synergy, analyze_pair, find_conflicts
from blending.features import FeatureVector, GameMetadata
from blending.graph import CompatibilityEdge, CompatibilityGraph
from blending.score_cache import pair_key
from blending.vocabulary import DEFAULT_VOCABULARY

Entry = Tuple[str, float]


@dataclass(frozen=True)
class BlendSelection:
    entries: Tuple[Entry, ...]

    def __post_init__(self) -> None:
        entries = tuple(self.entries)
        if any(not isinstance(e, (tuple, list)) or len(e) != 2 for e in entries):
            raise InvalidSelection("Selection entries must be (game_id, weight) pairs")
        object.__setattr__(self, "entries", tuple((gid, w) for gid, w in entries))

    @classmethod
    def from_slider_values(cls, values: Iterable[Entry]) -> "BlendSelection":
        """Scale raw slider positions so they sum to 1.0.

        This is the one place weights get normalized, and only because the
        caller asked for it; blend() itself rejects unnormalized weights.
        """
        values = [(gid, float(v)) for gid, v in values]
        if any(v < 0 or not math.isfinite(v) for _, v in values):
            raise InvalidSelection("Slider values must be non-negative numbers")
        total = sum(v for _, v in values)
        if total <= 0:
            raise InvalidSelection("At least one slider must be above zero")
        return cls(tuple((gid, v / total) for gid, v in values))

    @property
    def game_ids(self) -> List[str]:
        return [gid for gid, _ in self.entries]

    @property
    def weights(self) -> List[float]:
        return [w for _, w in self.entries]

    def __len__(self) -> int:
        return len(self.entries)


@dataclass(frozen=True)
class SynergyHighlight:
    mechanic: str
    weight: float
    game_ids: Tuple[str, ...]


@dataclass(frozen=True)
class BlendResult:
    features: FeatureVector
    synergy: float
    highlights: List[SynergyHighlight] = field(default_factory=list)
    edges: List[CompatibilityEdge] = field(default_factory=list)
    conflicts: List[Conflict] = field(default_factory=list)


def validate_selection(
    selection: BlendSelection,
    graph: CompatibilityGraph,
) -> List[Tuple[GameMetadata, float]]:
    if len(selection) < MIN_SELECTION_SIZE:
        raise InvalidSelection(
            f"A blend needs at least {MIN_SELECTION_SIZE} games, got {len(selection)}"
        )

    members: List[Tuple[GameMetadata, float]] = []
    for game_id, weight in selection.entries:
        if game_id not in graph:
            raise InvalidSelection(f"Unknown game {game_id!r} in selection")
        if isinstance(weight, bool) or not isinstance(weight, (int, float)) or not math.isfinite(weight):
            raise InvalidSelection(f"Weight for {game_id!r} is not a number: {weight!r}")
        if weight < 0:
            raise InvalidSelection(f"Weight for {game_id!r} is negative: {weight}")
        members.append((graph.get_game(game_id), float(weight)))

    total = sum(w for _, w in members)
    if abs(total - 1.0) > WEIGHT_EPSILON:
        raise InvalidSelection(f"Selection weights must sum to 1.0, got {total:.6f}")
    return members


def combine_features(members: Sequence[Tuple[GameMetadata, float]]) -> FeatureVector:
    total = sum(w for _, w in members)

    genres: Dict[str, float] = {}
    presence: Dict[str, float] = {}
    for game, w in members:
        for genre, gw in game.features.genre_weights.items():
            genres[genre] = genres.get(genre, 0.0) + w * gw
        for mechanic in game.features.mechanics:
            presence[mechanic] = presence.get(mechanic, 0.0) + w

    def _avg(field_name: str) -> float:
        return sum(w * getattr(game.features, field_name) for game, w in members) / total

    return FeatureVector(
        genre_weights=genres,  # renormalized by FeatureVector
        mechanics=frozenset(m for m, p in presence.items() if p > MECHANIC_BLEND_THRESHOLD),
        platform_generation=round(_avg("platform_generation")),
        complexity=_avg("complexity"),
        action_strategy_balance=_avg("action_strategy_balance"),
        single_multi_balance=_avg("single_multi_balance"),
    )


def synergy_highlights(
    members: Sequence[Tuple[GameMetadata, float]],
    limit: int = HIGHLIGHT_LIMIT,
) -> List[SynergyHighlight]:
    weight: Dict[str, float] = {}
    holders: Dict[str, List[str]] = {}
    for game, w in members:
        for mechanic in game.features.mechanics:
            weight[mechanic] = weight.get(mechanic, 0.0) + w
            holders.setdefault(mechanic, []).append(game.game_id)

    shared = [m for m, ids in holders.items() if len(ids) >= 2]
    shared.sort(key=lambda m: (-weight[m], DEFAULT_VOCABULARY.order(m), m))
    return [
        SynergyHighlight(mechanic=m, weight=weight[m], game_ids=tuple(holders[m]))
        for m in shared[:limit]
    ]


def blend(
    selection: Union[BlendSelection, Sequence[Entry]],
    graph: CompatibilityGraph,
) -> BlendResult:
    if not isinstance(selection, BlendSelection):
        selection = BlendSelection(tuple(selection))
    members = validate_selection(selection, graph)

    weighted = 0.0
    pair_weight = 0.0
    scores: List[float] = []
    edges: Dict[Tuple[str, str], CompatibilityEdge] = {}
    conflicts: List[Conflict] = []
    for i in range(len(members)):
        game_i, w_i = members[i]
        for j in range(i + 1, len(members)):
            game_j, w_j = members[j]
            edge = graph.get_or_compute(game_i.game_id, game_j.game_id)
            weighted += w_i * w_j * edge.score
            pair_weight += w_i * w_j
            scores.append(edge.score)
            key = pair_key(game_i.game_id, game_j.game_id)
            if key not in edges:
                edges[key] = edge
                if game_i.game_id != game_j.game_id:
                    conflicts.extend(find_conflicts(game_i, game_j))

    if pair_weight > 0.0:
        synergy = weighted / pair_weight
    else:
        # Every pair includes a zero-weight member: fall back to the plain mean.
        synergy = sum(scores) / len(scores)

    return BlendResult(
        features=combine_features(members),
        synergy=max(0.0, min(1.0, synergy)),
        highlights=synergy_highlights(members),
        edges=list(edges.values()),
        conflicts=conflicts,
    )


@dataclass(frozen=True)
class BlendPath:
    games: List[str]
    total_compatibility: float
    edges: List[CompatibilityEdge] = field(default_factory=list)
    synergies: List[Synergy] = field(default_factory=list)
    conflicts: List[Conflict] = field(default_factory=list)


def blend_path(game_ids: Sequence[str], graph: CompatibilityGraph) -> BlendPath:
    """Maximum spanning tree over the selected games.

    Only the strongest links that still connect every game are kept, so the
    synergies and conflicts reported are the ones along the backbone of the
    blend rather than every pairing.
    """
    game_ids = list(game_ids)
    if len(game_ids) < MIN_SELECTION_SIZE:
        raise InvalidSelection(
            f"A blend needs at least {MIN_SELECTION_SIZE} games, got {len(game_ids)}"
        )
    for game_id in game_ids:
        if game_id not in graph:
            raise InvalidSelection(f"Unknown game {game_id!r} in selection")

    nodes = list(dict.fromkeys(game_ids))
    candidates = [
        graph.get_or_compute(nodes[i], nodes[j])
        for i in range(len(nodes))
        for j in range(i + 1, len(nodes))
    ]
    candidates.sort(key=lambda e: (-e.score, e.pair))

    # Kruskal with path-halving union-find
    parent = {gid: gid for gid in nodes}

    def _root(gid: str) -> str:
        while parent[gid] != gid:
            parent[gid] = parent[parent[gid]]
            gid = parent[gid]
        return gid

    tree: List[CompatibilityEdge] = []
    for edge in candidates:
        root_a, root_b = _root(edge.game_a), _root(edge.game_b)
        if root_a == root_b:
            continue
        parent[root_b] = root_a
        tree.append(edge)
        if len(tree) == len(nodes) - 1:
            break

    synergies: List[Synergy] = []
    conflicts: List[Conflict] = []
    for edge in tree:
        analysis = analyze_pair(graph.get_game(edge.game_a), graph.get_game(edge.game_b), edge)
        synergies.extend(analysis.synergies)
        conflicts.extend(analysis.conflicts)

    return BlendPath(
        games=game_ids,
        total_compatibility=sum(e.score for e in tree),
        edges=tree,
        synergies=synergies,
        conflicts=conflicts,
    )
