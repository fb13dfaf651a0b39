"""Centralized configuration for Retro Blend Lab.

Single source of truth for the genre/mechanic vocabularies, feature heuristics,
similarity weights and blend thresholds. Every module that needs one of these
lists or constants should import it from here.
"""
from __future__ import annotations

# ── Genre vocabulary ───────────────────────────────────────────────────
# Canonical genre names. Tags outside this list are kept as written by the
# feature model; they still count toward the genre mapping.

GENRES = [
    "Action", "Adventure", "RPG", "Strategy", "Puzzle", "Platform",
    "Shooter", "Fighting", "Racing", "Sports", "Simulation", "Horror",
]

DEFAULT_GENRE = "Action"

# lower-case alias -> canonical genre
GENRE_ALIASES = {
    **{g.lower(): g for g in GENRES},
    "role-playing": "RPG",
    "role playing": "RPG",
    "jrpg": "RPG",
    "platformer": "Platform",
    "platforming": "Platform",
    "shmup": "Shooter",
    "shoot 'em up": "Shooter",
    "beat 'em up": "Fighting",
    "driving": "Racing",
    "sim": "Simulation",
    "survival horror": "Horror",
    "point and click": "Adventure",
    "tactics": "Strategy",
}

# ── Mechanic vocabulary (versioned, append-only) ───────────────────────
# Each version lists only the mechanics it adds. Never reorder, rename or
# remove an entry: old feature vectors must keep their meaning.

MECHANIC_VOCABULARY_VERSIONS = [
    (1, [
        "Combat", "Exploration", "Puzzle Solving", "Platform Jumping",
        "Resource Management", "Character Progression", "Story Choices",
        "Time Pressure", "Collection", "Stealth", "Multiplayer",
        "Turn-Based", "Real-Time", "Physics-Based", "Procedural Generation",
    ]),
    (2, ["Open World", "Co-op", "Boss Battles", "Crafting"]),
]

# lower-case alias -> canonical mechanic
MECHANIC_ALIASES = {
    "turn based": "Turn-Based",
    "turnbased": "Turn-Based",
    "real time": "Real-Time",
    "realtime": "Real-Time",
    "open-world": "Open World",
    "coop": "Co-op",
    "co-operative": "Co-op",
    "cooperative": "Co-op",
    "multi-player": "Multiplayer",
    "versus": "Multiplayer",
    "roguelike": "Procedural Generation",
    "procgen": "Procedural Generation",
    "puzzles": "Puzzle Solving",
    "jumping": "Platform Jumping",
    "leveling": "Character Progression",
    "levelling": "Character Progression",
    "branching story": "Story Choices",
    "timer": "Time Pressure",
    "collectibles": "Collection",
    "bosses": "Boss Battles",
}

# Mechanics implied by a genre when the raw record only names the genre.
GENRE_IMPLIED_MECHANICS = {
    "Action": ["Combat", "Real-Time"],
    "RPG": ["Character Progression", "Exploration", "Story Choices"],
    "Strategy": ["Resource Management", "Turn-Based"],
    "Platform": ["Platform Jumping", "Collection"],
    "Puzzle": ["Puzzle Solving"],
    "Shooter": ["Combat", "Real-Time"],
    "Fighting": ["Combat", "Real-Time"],
    "Racing": ["Real-Time", "Time Pressure"],
}

# ── Feature heuristics ─────────────────────────────────────────────────
# Per-genre base values; a game's scalar is the genre-weighted average.
# Genres not listed fall back to the *_DEFAULT value.

GENRE_COMPLEXITY = {
    "Strategy": 0.8, "RPG": 0.8, "Simulation": 0.8,
    "Adventure": 0.6, "Fighting": 0.6,
    "Action": 0.4, "Platform": 0.4, "Shooter": 0.4,
    "Puzzle": 0.3, "Sports": 0.3,
}
COMPLEXITY_DEFAULT = 0.5

# negative = action-focused, positive = strategy-focused
GENRE_ACTION_STRATEGY = {
    "Action": -0.8, "Shooter": -0.8, "Platform": -0.8,
    "Fighting": -0.6, "Racing": -0.6,
    "Sports": -0.4,
    "Adventure": 0.0,
    "RPG": 0.2,
    "Puzzle": 0.4,
    "Simulation": 0.6,
    "Strategy": 0.8,
}
ACTION_STRATEGY_DEFAULT = 0.0

# negative = single player, positive = multiplayer
GENRE_SINGLE_MULTI = {
    "Fighting": 0.8, "Sports": 0.8,
    "Racing": 0.4,
    "Action": -0.4, "Platform": -0.4,
    "RPG": -0.8, "Adventure": -0.8, "Strategy": -0.8,
}
SINGLE_MULTI_DEFAULT = -0.5

# Small nudges applied on top of the genre averages.
MECHANIC_NUDGES = {
    "Turn-Based": {"action_strategy_balance": 0.2, "complexity": 0.05},
    "Real-Time": {"action_strategy_balance": -0.1},
    "Resource Management": {"complexity": 0.1},
    "Story Choices": {"complexity": 0.05},
    "Multiplayer": {"single_multi_balance": 0.5},
    "Co-op": {"single_multi_balance": 0.3},
}

# Games got more complex over time: +1/15 per year after 1980, capped.
ERA_BASE_YEAR = 1980
ERA_COMPLEXITY_CAP = 0.2

# Case-sensitive substring -> generation. Checked in order, first hit wins,
# so longer names ("PlayStation 2", "SNES") precede their prefixes.
PLATFORM_GENERATIONS = [
    ("Dreamcast", 5), ("PlayStation 2", 5), ("GameCube", 5), ("Xbox", 5),
    ("Arcade", 1), ("Atari", 1), ("ColecoVision", 1), ("Intellivision", 1),
    ("SNES", 3), ("Super Nintendo", 3), ("Genesis", 3), ("Mega Drive", 3),
    ("TurboGrafx", 3), ("Neo Geo", 3), ("Amiga", 3),
    ("NES", 2), ("Nintendo Entertainment System", 2), ("Master System", 2),
    ("Commodore 64", 2), ("C64", 2), ("ZX Spectrum", 2), ("Game Boy", 2),
    ("PlayStation", 4), ("Saturn", 4), ("Nintendo 64", 4), ("N64", 4),
]

# (first year, last year, generation) used when no platform matches
YEAR_GENERATIONS = [
    (0, 1983, 1),
    (1984, 1987, 2),
    (1988, 1991, 3),
    (1992, 1997, 4),
    (1998, 9999, 5),
]
DEFAULT_GENERATION = 3
DEFAULT_YEAR = 1985

GENERATION_RANGE = (1, 5)
COMPLEXITY_RANGE = (0.0, 1.0)
BALANCE_RANGE = (-1.0, 1.0)

ERA_CATEGORIES = [
    (1980, 1983, "early_80s"),
    (1984, 1986, "mid_80s"),
    (1987, 1989, "late_80s"),
    (1990, 1992, "early_90s"),
    (1993, 1995, "mid_90s"),
]

# ── Similarity weights ─────────────────────────────────────────────────
# Must stay fixed for the lifetime of a graph; persisted graphs record the
# weights they were built with and edges built under other weights are dropped.

SIMILARITY_WEIGHTS = {"genre": 0.40, "mechanics": 0.35, "scalars": 0.25}

# ── Graph precomputation ───────────────────────────────────────────────

FULL_PRECOMPUTE_LIMIT = 250   # catalogs up to this size get every pair
NEIGHBOR_K = 20               # neighbors per node above the limit
PRECOMPUTE_WORKERS = 4
HUB_LIMIT = 5

# ── Blending ───────────────────────────────────────────────────────────

WEIGHT_EPSILON = 1e-6
MECHANIC_BLEND_THRESHOLD = 0.5
HIGHLIGHT_LIMIT = 5
MIN_SELECTION_SIZE = 2

# ── Pair explanation ───────────────────────────────────────────────────

COMPLEXITY_CONFLICT_THRESHOLD = 0.5
STYLE_CONFLICT_THRESHOLD = 1.0
ERA_MATCH_STRENGTH = 0.8
SHARED_MECHANIC_STRENGTH = 0.6
