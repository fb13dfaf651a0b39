"""Mechanic vocabulary: a versioned, append-only list of known mechanic flags.

Raw catalog tags are matched against the vocabulary case-insensitively (plus a
small alias table). Tags that match nothing are ignored rather than rejected,
so the vocabulary can grow between builds without breaking older catalogs.
"""
from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from config import MECHANIC_ALIASES, MECHANIC_VOCABULARY_VERSIONS


def _key(tag: str) -> str:
    return " ".join(tag.strip().lower().split())


class MechanicVocabulary:
    def __init__(
        self,
        versions: Sequence[Tuple[int, Sequence[str]]],
        aliases: Optional[Dict[str, str]] = None,
    ) -> None:
        self._versions: List[Tuple[int, Tuple[str, ...]]] = []
        self._names: List[str] = []
        self._added_in: Dict[str, int] = {}
        self._lookup: Dict[str, str] = {}

        last = 0
        for version, names in versions:
            if version <= last:
                raise ValueError(f"Vocabulary versions must increase: {version} after {last}")
            for name in names:
                if _key(name) in self._lookup:
                    raise ValueError(f"Mechanic {name!r} already defined")
                self._names.append(name)
                self._added_in[name] = version
                self._lookup[_key(name)] = name
            self._versions.append((version, tuple(names)))
            last = version

        for alias, target in (aliases or {}).items():
            if target not in self._added_in:
                raise ValueError(f"Alias {alias!r} points at unknown mechanic {target!r}")
            self._lookup.setdefault(_key(alias), target)

    @property
    def version(self) -> int:
        return self._versions[-1][0] if self._versions else 0

    @property
    def names(self) -> Tuple[str, ...]:
        return tuple(self._names)

    def added_in(self, mechanic: str) -> int:
        return self._added_in[mechanic]

    def match(self, tag: str) -> Optional[str]:
        """Canonical mechanic for a raw tag, or None for an unknown tag."""
        if not isinstance(tag, str):
            return None
        return self._lookup.get(_key(tag))

    def match_all(self, tags: Iterable[str]) -> frozenset:
        found = (self.match(t) for t in tags)
        return frozenset(m for m in found if m is not None)

    def order(self, mechanic: str) -> int:
        """Position in the vocabulary; used as a stable tie-breaker."""
        try:
            return self._names.index(mechanic)
        except ValueError:
            return len(self._names)

    def extend(self, version: int, names: Sequence[str]) -> "MechanicVocabulary":
        """Return a new vocabulary with one more version appended.

        Existing entries are never touched; re-declaring one is an error.
        """
        aliases = {a: t for a, t in self._lookup.items() if a != _key(t)}
        return MechanicVocabulary(self._versions + [(version, tuple(names))], aliases)

    def __contains__(self, mechanic: object) -> bool:
        return mechanic in self._added_in

    def __len__(self) -> int:
        return len(self._names)


DEFAULT_VOCABULARY = MechanicVocabulary(MECHANIC_VOCABULARY_VERSIONS, MECHANIC_ALIASES)
