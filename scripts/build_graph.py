from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from dotenv import load_dotenv
load_dotenv(PROJECT_ROOT / ".env")

from config import FULL_PRECOMPUTE_LIMIT, NEIGHBOR_K, PRECOMPUTE_WORKERS
from blending.graph import precompute
from blending.similarity import SimilarityWeights
from components.game_catalog import load_catalog


def main() -> None:
    parser = argparse.ArgumentParser(description="Precompute the game compatibility graph")
    parser.add_argument("--catalog", default=None,
                        help="Catalog JSON (default: data/games_live.json, data/games.json, built-in sample)")
    parser.add_argument("--out", default="data/compatibility_graph.json")
    parser.add_argument("--workers", type=int, default=PRECOMPUTE_WORKERS)
    parser.add_argument("--full-limit", type=int, default=FULL_PRECOMPUTE_LIMIT,
                        help="Score every pair for catalogs up to this size")
    parser.add_argument("--neighbors", type=int, default=NEIGHBOR_K,
                        help="Neighbors per game for catalogs above --full-limit")
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    catalog_path = Path(args.catalog) if args.catalog else None
    games, source = load_catalog(PROJECT_ROOT, path=catalog_path)
    weights = SimilarityWeights.from_env()

    print(f"Catalog: {source or 'built-in sample'} ({len(games)} games)")
    print(f"Weights: {weights.to_dict()}")

    graph = precompute(
        games,
        weights=weights,
        full_limit=args.full_limit,
        neighbor_k=args.neighbors,
        max_workers=max(1, args.workers),
    )

    out_path = Path(args.out)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(json.dumps(graph.to_dict(), indent=2))

    stats = graph.stats()
    print(f"\n{'='*50}")
    print(f"Wrote graph -> {out_path}")
    print(f"  Nodes: {stats['node_count']}")
    print(f"  Edges: {stats['edge_count']}")
    print(f"  Average score: {stats['average_score']:.3f}")
    for hub in stats["top_hubs"]:
        print(f"  Hub: {hub['title']} ({hub['connections']} connections)")
    print(f"{'='*50}")


if __name__ == "__main__":
    main()
