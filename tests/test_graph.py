"""Unit tests for the score cache and the compatibility graph."""
from __future__ import annotations

import concurrent.futures
import itertools
import json
import logging
import sys
from pathlib import Path

# Ensure project root is on path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import pytest
from blending.errors import UnknownGame
from blending.features import FeatureVector, GameMetadata, build_game
from blending.graph import (
    CompatibilityGraph,
    candidate_pairs,
    compute_edge,
    edge_score,
    get_or_compute,
    load_graph,
    precompute,
)
from blending.score_cache import ScoreCache, pair_key
from blending.similarity import SimilarityWeights
from data.sample_games import SAMPLE_GAMES


def _game(game_id, genres, mechanics=(), year=1986, **scalars):
    return GameMetadata(
        game_id=game_id,
        title=game_id.upper(),
        year=year,
        platform="NES",
        features=FeatureVector(genre_weights=genres, mechanics=frozenset(mechanics), **scalars),
    )


@pytest.fixture
def abc_catalog():
    return [
        _game("a", {"RPG": 1.0}),
        _game("b", {"RPG": 0.6, "Action": 0.4}),
        _game("c", {"Action": 1.0}),
    ]


@pytest.fixture
def sample_catalog():
    return [build_game(raw) for raw in SAMPLE_GAMES]


@pytest.fixture
def large_catalog():
    genres = ["Action", "Adventure", "RPG", "Strategy", "Puzzle", "Platform", "Shooter"]
    games = []
    for i in range(60):
        mix = {genres[i % 7]: 1.0 + (i % 3), genres[(i * 3) % 7]: 1.0}
        games.append(_game(f"g{i:03d}", mix, complexity=(i % 10) / 10))
    return games


# ══════════════════════════════════════════════════════════════════════
# Score cache
# ══════════════════════════════════════════════════════════════════════

class TestScoreCache:
    def test_pair_key_is_unordered(self):
        assert pair_key("b", "a") == pair_key("a", "b") == ("a", "b")

    def test_first_insert_wins(self):
        cache = ScoreCache()
        assert cache.put("a", "b", "first") == "first"
        assert cache.put("b", "a", "second") == "first"
        assert cache.get("b", "a") == "first"
        assert len(cache) == 1

    def test_get_or_compute_counts(self):
        cache = ScoreCache()
        calls = []
        compute = lambda: calls.append(1) or "edge"
        cache.get_or_compute("a", "b", compute)
        cache.get_or_compute("b", "a", compute)
        assert len(calls) == 1
        assert cache.hits == 1
        assert cache.misses == 1

    def test_discard(self):
        cache = ScoreCache()
        cache.put("a", "b", 1)
        cache.put("a", "c", 2)
        cache.put("b", "c", 3)
        assert cache.discard("a") == 2
        assert ("c", "b") in cache
        assert ("a", "b") not in cache


# ══════════════════════════════════════════════════════════════════════
# Precomputation
# ══════════════════════════════════════════════════════════════════════

class TestPrecompute:
    def test_abc_genre_scenario(self, abc_catalog):
        graph = precompute(abc_catalog)
        ab = graph.get_edge("a", "b")
        ac = graph.get_edge("a", "c")
        assert graph.edge_count == 3
        assert ab.breakdown.genre > ac.breakdown.genre
        assert ab.breakdown.genre > 0
        assert ac.breakdown.genre == 0.0

    def test_all_pairs_for_small_catalog(self, sample_catalog):
        graph = precompute(sample_catalog)
        n = len(sample_catalog)
        assert graph.edge_count == n * (n - 1) // 2

    def test_neighbor_bound_for_large_catalog(self, large_catalog):
        pairs = candidate_pairs(large_catalog, full_limit=10, neighbor_k=4)
        assert len(pairs) <= len(large_catalog) * 4
        assert len(pairs) < len(large_catalog) * (len(large_catalog) - 1) // 2
        per_node = {g.game_id: 0 for g in large_catalog}
        for a, b in pairs:
            assert a < b
            per_node[a] += 1
            per_node[b] += 1
        assert all(count >= 1 for count in per_node.values())

    def test_nearest_neighbor_chosen_by_genre_overlap(self):
        games = [
            _game("a", {"RPG": 1.0}),
            _game("b", {"RPG": 0.9, "Action": 0.1}),
            _game("c", {"RPG": 0.1, "Action": 0.9}),
        ]
        pairs = candidate_pairs(games, full_limit=1, neighbor_k=1)
        assert ("a", "b") in pairs, "a's closest genre match should be kept"
        assert ("a", "c") not in pairs, "low-overlap partner should be pruned"
        assert pairs == [("a", "b"), ("b", "c")]

    def test_precompute_top_k_edges_match_candidates(self, large_catalog):
        pairs = candidate_pairs(large_catalog, full_limit=10, neighbor_k=4)
        graph = precompute(large_catalog, full_limit=10, neighbor_k=4, max_workers=4)
        assert sorted(e.pair for e in graph.edges()) == pairs
        games = {g.game_id: g for g in large_catalog}
        for a, b in pairs[:10]:
            assert graph.get_edge(a, b) == compute_edge(games[a], games[b])

    def test_parallel_matches_serial(self, large_catalog):
        serial = precompute(large_catalog, max_workers=1)
        parallel = precompute(large_catalog, max_workers=4)
        assert serial.to_dict() == parallel.to_dict()

    def test_duplicate_ids_replace_earlier(self):
        old = _game("a", {"RPG": 1.0})
        new = _game("a", {"Puzzle": 1.0})
        graph = precompute([old, new, _game("b", {"RPG": 1.0})])
        assert len(graph) == 2
        assert graph.get_game("a") is new

    def test_stats(self, sample_catalog):
        stats = precompute(sample_catalog).stats(hub_limit=3)
        assert stats["node_count"] == len(sample_catalog)
        assert stats["edge_count"] == 45
        assert 0.0 < stats["average_score"] < 1.0
        assert len(stats["top_hubs"]) == 3


# ══════════════════════════════════════════════════════════════════════
# Runtime lookups
# ══════════════════════════════════════════════════════════════════════

class TestGetOrCompute:
    def test_idempotent(self, abc_catalog):
        graph = CompatibilityGraph(abc_catalog)
        first = get_or_compute(graph, "a", "b")
        second = get_or_compute(graph, "a", "b")
        assert first is second
        assert first == compute_edge(abc_catalog[0], abc_catalog[1])
        assert graph.edge_count == 1

    def test_unordered(self, abc_catalog):
        graph = CompatibilityGraph(abc_catalog)
        assert get_or_compute(graph, "b", "a") is get_or_compute(graph, "a", "b")
        assert compute_edge(abc_catalog[1], abc_catalog[0]) == compute_edge(abc_catalog[0], abc_catalog[1])

    def test_missing_edge_is_not_zero(self, abc_catalog):
        graph = CompatibilityGraph(abc_catalog)
        assert graph.get_edge("a", "b") is None
        assert edge_score(graph, "a", "b").score > 0

    def test_unknown_game(self, abc_catalog):
        graph = CompatibilityGraph(abc_catalog)
        with pytest.raises(UnknownGame):
            get_or_compute(graph, "a", "zzz")
        with pytest.raises(KeyError):
            edge_score(graph, "zzz", "a")

    def test_concurrent_inserts(self, large_catalog):
        graph = CompatibilityGraph(large_catalog)
        ids = [g.game_id for g in large_catalog[:25]]
        pairs = list(itertools.combinations(ids, 2)) * 2
        with concurrent.futures.ThreadPoolExecutor(max_workers=8) as ex:
            list(ex.map(lambda p: graph.get_or_compute(*p), pairs))
        assert graph.edge_count == 25 * 24 // 2
        assert graph.cache.hits + graph.cache.misses == len(pairs)
        games = {g.game_id: g for g in large_catalog}
        for a, b in itertools.combinations(ids, 2):
            assert graph.get_edge(a, b) == compute_edge(games[a], games[b])

    def test_replace_game_drops_stale_edges(self, abc_catalog):
        graph = precompute(abc_catalog)
        dropped = graph.replace_game(_game("a", {"Puzzle": 1.0}))
        assert dropped == 2
        assert graph.get_edge("a", "b") is None
        assert graph.get_edge("b", "c") is not None
        assert graph.get_or_compute("a", "b").breakdown.genre == 0.0

    def test_replace_during_compute_never_caches_stale_edge(self, abc_catalog, monkeypatch):
        import blending.graph as graph_module

        graph = CompatibilityGraph(abc_catalog)
        replacement = _game("a", {"Puzzle": 1.0})
        real_compute = graph_module.compute_edge
        calls = []

        def compute_then_replace(first, second, weights):
            edge = real_compute(first, second, weights)
            if not calls:
                graph.replace_game(replacement)
            calls.append(first.game_id)
            return edge

        monkeypatch.setattr(graph_module, "compute_edge", compute_then_replace)
        edge = graph.get_or_compute("a", "b")
        assert len(calls) == 2
        assert edge.breakdown.genre == 0.0
        assert graph.get_edge("a", "b") is edge
        assert edge == real_compute(replacement, abc_catalog[1])

    def test_neighbors(self, abc_catalog):
        graph = precompute(abc_catalog)
        neighbors = graph.neighbors("a")
        assert [gid for gid, _ in neighbors] == ["b", "c"]
        assert neighbors[0][1] >= neighbors[1][1]


# ══════════════════════════════════════════════════════════════════════
# Persistence
# ══════════════════════════════════════════════════════════════════════

class TestLoadGraph:
    def test_round_trip(self, sample_catalog):
        graph = precompute(sample_catalog)
        loaded = load_graph(json.dumps(graph.to_dict()))
        assert len(loaded) == len(graph)
        assert loaded.edge_count == graph.edge_count
        for edge in graph.edges():
            assert loaded.get_edge(edge.game_a, edge.game_b) == edge
        assert loaded.get_game("zelda-1986") == graph.get_game("zelda-1986")

    def test_edges_from_other_weights_dropped(self, abc_catalog, caplog):
        persisted = precompute(abc_catalog).to_dict()
        other = SimilarityWeights(genre=0.5, mechanics=0.25, scalars=0.25)
        with caplog.at_level(logging.WARNING):
            loaded = load_graph(persisted, weights=other)
        assert len(loaded) == 3
        assert loaded.edge_count == 0
        assert "Discarding 3 persisted edges" in caplog.text

    def test_edges_for_unknown_games_skipped(self, abc_catalog):
        persisted = precompute(abc_catalog).to_dict()
        persisted["games"] = [g for g in persisted["games"] if g["game_id"] != "c"]
        loaded = load_graph(persisted)
        assert loaded.edge_count == 1

    def test_unsupported_format_version(self):
        with pytest.raises(ValueError):
            load_graph({"format_version": 99, "games": [], "edges": []})
