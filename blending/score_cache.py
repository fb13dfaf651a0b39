"""Score cache: memoizes compatibility edges keyed by an unordered game-id pair.

Reads are lock-free dict lookups. A single lock serializes insertion, and the
value stored is an immutable edge object published by one reference
assignment, so a concurrent reader either sees a complete edge or no edge.
Values are computed outside the lock: two threads racing on the same pair may
both compute it, the first insert wins and the second is a no-op (both
computations are bit-identical anyway).
"""
from __future__ import annotations

import threading
from typing import Callable, Dict, Generic, Iterator, List, Optional, Tuple, TypeVar

V = TypeVar("V")

PairKey = Tuple[str, str]


def pair_key(id_a: str, id_b: str) -> PairKey:
    return (id_a, id_b) if id_a <= id_b else (id_b, id_a)


class ScoreCache(Generic[V]):
    def __init__(self) -> None:
        self._entries: Dict[PairKey, V] = {}
        self._lock = threading.Lock()
        self._stats_lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def get(self, id_a: str, id_b: str) -> Optional[V]:
        return self._entries.get(pair_key(id_a, id_b))

    def put(self, id_a: str, id_b: str, value: V) -> V:
        """Insert unless the pair is already present; returns the stored value."""
        key = pair_key(id_a, id_b)
        with self._lock:
            return self._entries.setdefault(key, value)

    def record_hit(self) -> None:
        with self._stats_lock:
            self.hits += 1

    def record_miss(self) -> None:
        with self._stats_lock:
            self.misses += 1

    def get_or_compute(self, id_a: str, id_b: str, compute: Callable[[], V]) -> V:
        cached = self.get(id_a, id_b)
        if cached is not None:
            self.record_hit()
            return cached
        self.record_miss()
        return self.put(id_a, id_b, compute())

    def discard(self, game_id: str) -> int:
        """Drop every entry touching game_id. Returns how many were removed."""
        with self._lock:
            stale = [k for k in self._entries if game_id in k]
            # Swap in a new dict; readers holding the old one are unaffected.
            self._entries = {k: v for k, v in self._entries.items() if game_id not in k}
        return len(stale)

    def items(self) -> List[Tuple[PairKey, V]]:
        return list(self._entries.items())

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, tuple) or len(key) != 2:
            return False
        return pair_key(*key) in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[PairKey]:
        return iter(list(self._entries))
