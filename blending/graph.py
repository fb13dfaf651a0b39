"""Compatibility graph: undirected weighted graph of game-to-game compatibility.

Nodes are game ids (holding their GameMetadata); edges are CompatibilityEdge
values stored in a ScoreCache. A missing edge means "not computed yet", never
"incompatible".

There is exactly one way an edge gets computed (compute_edge), used both by
build-time precompute() and by run-time get_or_compute(). Small catalogs get
every unordered pair; above FULL_PRECOMPUTE_LIMIT games only each node's top-K
genre-overlap neighbors are scored, bounding the work to roughly O(n * K).

The graph is read-mostly shared state. get_or_compute() and replace_game() are
the run-time mutations; both are safe alongside concurrent readers (see
score_cache.py), and an edge scored against metadata replaced mid-computation
is never cached.
"""
from __future__ import annotations

import concurrent.futures
import heapq
import json
import logging
import threading
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Set, Tuple, Union

from config import FULL_PRECOMPUTE_LIMIT, HUB_LIMIT, NEIGHBOR_K, PRECOMPUTE_WORKERS
from blending.errors import UnknownGame
from blending.features import GameMetadata
from blending.score_cache import PairKey, ScoreCache, pair_key
from blending.similarity import DEFAULT_WEIGHTS, SimilarityBreakdown, SimilarityWeights, score
from blending.vocabulary import DEFAULT_VOCABULARY

logger = logging.getLogger(__name__)

GRAPH_FORMAT_VERSION = 1
_BATCH_SIZE = 512


@dataclass(frozen=True)
class CompatibilityEdge:
    game_a: str
    game_b: str
    score: float
    breakdown: SimilarityBreakdown

    @property
    def pair(self) -> PairKey:
        return (self.game_a, self.game_b)

    def other(self, game_id: str) -> str:
        return self.game_b if game_id == self.game_a else self.game_a

    def to_dict(self) -> Dict[str, Any]:
        return {
            "game_a": self.game_a,
            "game_b": self.game_b,
            "score": self.score,
            "breakdown": {
                "genre": self.breakdown.genre,
                "mechanics": self.breakdown.mechanics,
                "scalars": self.breakdown.scalars,
            },
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CompatibilityEdge":
        game_a, game_b = pair_key(str(data["game_a"]), str(data["game_b"]))
        parts = data["breakdown"]
        value = float(data["score"])
        return cls(
            game_a=game_a,
            game_b=game_b,
            score=value,
            breakdown=SimilarityBreakdown(
                genre=float(parts["genre"]),
                mechanics=float(parts["mechanics"]),
                scalars=float(parts["scalars"]),
                score=value,
            ),
        )


def compute_edge(
    first: GameMetadata,
    second: GameMetadata,
    weights: SimilarityWeights = DEFAULT_WEIGHTS,
) -> CompatibilityEdge:
    game_a, game_b = pair_key(first.game_id, second.game_id)
    if game_a != first.game_id:
        first, second = second, first
    breakdown = score(first.features, second.features, weights)
    return CompatibilityEdge(game_a=game_a, game_b=game_b, score=breakdown.score, breakdown=breakdown)


class CompatibilityGraph:
    def __init__(
        self,
        games: Iterable[GameMetadata] = (),
        weights: Optional[SimilarityWeights] = None,
        vocabulary_version: int = DEFAULT_VOCABULARY.version,
    ) -> None:
        self.weights = weights or DEFAULT_WEIGHTS
        self.vocabulary_version = vocabulary_version
        self._games: Dict[str, GameMetadata] = {}
        for game in games:
            # Later entries replace earlier ones with the same id.
            self._games[game.game_id] = game
        self._edges: ScoreCache[CompatibilityEdge] = ScoreCache()
        # Orders replace_game against run-time inserts.
        self._lock = threading.Lock()

    # ── Nodes ──

    @property
    def game_ids(self) -> List[str]:
        return list(self._games)

    def get_game(self, game_id: str) -> GameMetadata:
        try:
            return self._games[game_id]
        except KeyError:
            raise UnknownGame(game_id) from None

    def replace_game(self, game: GameMetadata) -> int:
        """Add or wholesale-replace a game; its previously computed edges are dropped."""
        with self._lock:
            games = dict(self._games)
            games[game.game_id] = game
            self._games = games
            dropped = self._edges.discard(game.game_id)
        if dropped:
            logger.info("Replaced %s; dropped %d stale edges", game.game_id, dropped)
        return dropped

    def __contains__(self, game_id: object) -> bool:
        return game_id in self._games

    def __len__(self) -> int:
        return len(self._games)

    # ── Edges ──

    @property
    def cache(self) -> ScoreCache[CompatibilityEdge]:
        return self._edges

    @property
    def edge_count(self) -> int:
        return len(self._edges)

    def edges(self) -> List[CompatibilityEdge]:
        return [edge for _, edge in self._edges.items()]

    def get_edge(self, id_a: str, id_b: str) -> Optional[CompatibilityEdge]:
        """Cached edge only; None means not computed yet."""
        return self._edges.get(id_a, id_b)

    def insert_edge(self, edge: CompatibilityEdge) -> CompatibilityEdge:
        return self._edges.put(edge.game_a, edge.game_b, edge)

    def get_or_compute(self, id_a: str, id_b: str) -> CompatibilityEdge:
        cached = self._edges.get(id_a, id_b)
        if cached is not None:
            self._edges.record_hit()
            return cached
        first, second = self.get_game(id_a), self.get_game(id_b)
        self._edges.record_miss()
        edge = compute_edge(first, second, self.weights)
        with self._lock:
            if self._games.get(id_a) is first and self._games.get(id_b) is second:
                return self._edges.put(id_a, id_b, edge)
        # A game was replaced while scoring; score again against the new metadata.
        return self.get_or_compute(id_a, id_b)

    def neighbors(self, game_id: str, limit: int = 10) -> List[Tuple[str, float]]:
        """Most compatible games among the edges already computed for game_id."""
        self.get_game(game_id)
        found = [
            (edge.other(game_id), edge.score)
            for (a, b), edge in self._edges.items()
            if game_id in (a, b) and a != b
        ]
        found.sort(key=lambda x: (-x[1], x[0]))
        return found[:limit]

    def stats(self, hub_limit: int = HUB_LIMIT) -> Dict[str, Any]:
        edges = [e for e in self.edges() if e.game_a != e.game_b]
        connections: Dict[str, int] = {gid: 0 for gid in self._games}
        for edge in edges:
            connections[edge.game_a] = connections.get(edge.game_a, 0) + 1
            connections[edge.game_b] = connections.get(edge.game_b, 0) + 1
        hubs = sorted(connections.items(), key=lambda x: (-x[1], x[0]))[:hub_limit]
        return {
            "node_count": len(self._games),
            "edge_count": len(edges),
            "average_score": round(sum(e.score for e in edges) / len(edges), 6) if edges else 0.0,
            "top_hubs": [
                {"game_id": gid, "title": self._games[gid].title, "connections": count}
                for gid, count in hubs
                if gid in self._games
            ],
        }

    # ── Persistence ──

    def to_dict(self) -> Dict[str, Any]:
        edges = sorted(self.edges(), key=lambda e: e.pair)
        return {
            "format_version": GRAPH_FORMAT_VERSION,
            "weights": self.weights.to_dict(),
            "vocabulary_version": self.vocabulary_version,
            "games": [g.to_dict() for g in self._games.values()],
            "edges": [e.to_dict() for e in edges],
        }


def get_or_compute(graph: CompatibilityGraph, id_a: str, id_b: str) -> CompatibilityEdge:
    return graph.get_or_compute(id_a, id_b)


def edge_score(graph: CompatibilityGraph, id_a: str, id_b: str) -> CompatibilityEdge:
    """Compatibility between two specific games, for explaining a pairing in the UI."""
    return graph.get_or_compute(id_a, id_b)


# ── Precomputation ─────────────────────────────────────────────────────

def genre_overlap(a: GameMetadata, b: GameMetadata) -> float:
    """Cheap pre-filter: histogram intersection of the two genre mappings."""
    ga, gb = a.features.genre_weights, b.features.genre_weights
    return sum(min(ga[g], gb[g]) for g in sorted(ga.keys() & gb.keys()))


def candidate_pairs(
    games: Sequence[GameMetadata],
    full_limit: int = FULL_PRECOMPUTE_LIMIT,
    neighbor_k: int = NEIGHBOR_K,
) -> List[PairKey]:
    ordered = sorted(games, key=lambda g: g.game_id)
    if len(ordered) <= full_limit:
        return [
            (ordered[i].game_id, ordered[j].game_id)
            for i in range(len(ordered))
            for j in range(i + 1, len(ordered))
        ]

    by_genre: Dict[str, List[GameMetadata]] = {}
    for game in ordered:
        for genre in game.features.genre_weights:
            by_genre.setdefault(genre, []).append(game)

    pairs: Set[PairKey] = set()
    for game in ordered:
        seen: Dict[str, GameMetadata] = {}
        for genre in game.features.genre_weights:
            for other in by_genre[genre]:
                if other.game_id != game.game_id:
                    seen[other.game_id] = other
        candidates = [seen[gid] for gid in sorted(seen)]
        nearest = heapq.nlargest(neighbor_k, candidates, key=lambda o: genre_overlap(game, o))
        for other in nearest:
            pairs.add(pair_key(game.game_id, other.game_id))
    return sorted(pairs)


def _score_batch(
    batch: Sequence[PairKey],
    games: Mapping[str, GameMetadata],
    weights: SimilarityWeights,
) -> List[CompatibilityEdge]:
    return [compute_edge(games[a], games[b], weights) for a, b in batch]


def precompute(
    catalog: Iterable[GameMetadata],
    weights: Optional[SimilarityWeights] = None,
    full_limit: int = FULL_PRECOMPUTE_LIMIT,
    neighbor_k: int = NEIGHBOR_K,
    max_workers: int = PRECOMPUTE_WORKERS,
) -> CompatibilityGraph:
    graph = CompatibilityGraph(catalog, weights=weights)
    games = {gid: graph.get_game(gid) for gid in graph.game_ids}
    pairs = candidate_pairs(list(games.values()), full_limit=full_limit, neighbor_k=neighbor_k)
    mode = "all pairs" if len(games) <= full_limit else f"top-{neighbor_k} neighbors"
    logger.info("Precomputing %d edges over %d games (%s)", len(pairs), len(games), mode)

    batches = [pairs[i:i + _BATCH_SIZE] for i in range(0, len(pairs), _BATCH_SIZE)]
    if max_workers <= 1 or len(batches) <= 1:
        for batch in batches:
            for edge in _score_batch(batch, games, graph.weights):
                graph.insert_edge(edge)
    else:
        with concurrent.futures.ThreadPoolExecutor(max_workers=max_workers) as ex:
            futures = [ex.submit(_score_batch, batch, games, graph.weights) for batch in batches]
            for fut in concurrent.futures.as_completed(futures):
                for edge in fut.result():
                    graph.insert_edge(edge)

    logger.info("Precomputed graph: %d nodes, %d edges", len(graph), graph.edge_count)
    return graph


def load_graph(
    persisted: Union[str, bytes, Mapping[str, Any]],
    weights: Optional[SimilarityWeights] = None,
) -> CompatibilityGraph:
    """Rebuild a graph from CompatibilityGraph.to_dict() output (or its JSON text).

    Edges are only trusted when they were built with the weights and mechanic
    vocabulary in use now; otherwise they are dropped and recomputed on demand.
    """
    data = json.loads(persisted) if isinstance(persisted, (str, bytes)) else persisted
    version = data.get("format_version", GRAPH_FORMAT_VERSION)
    if version != GRAPH_FORMAT_VERSION:
        raise ValueError(f"Unsupported graph format version: {version}")

    games = [GameMetadata.from_dict(g) for g in data.get("games", [])]
    graph = CompatibilityGraph(games, weights=weights)

    stored_weights = SimilarityWeights(**data["weights"]) if data.get("weights") else graph.weights
    stored_vocab = data.get("vocabulary_version", graph.vocabulary_version)
    edges = data.get("edges", [])
    if stored_weights != graph.weights or stored_vocab != graph.vocabulary_version:
        logger.warning(
            "Discarding %d persisted edges built with weights=%s vocabulary=v%s "
            "(current weights=%s vocabulary=v%s)",
            len(edges), stored_weights.to_dict(), stored_vocab,
            graph.weights.to_dict(), graph.vocabulary_version,
        )
        return graph

    skipped = 0
    for raw in edges:
        edge = CompatibilityEdge.from_dict(raw)
        if edge.game_a not in graph or edge.game_b not in graph:
            skipped += 1
            continue
        graph.insert_edge(edge)
    if skipped:
        logger.warning("Skipped %d persisted edges referencing unknown games", skipped)
    logger.info("Loaded graph: %d nodes, %d edges", len(graph), graph.edge_count)
    return graph
