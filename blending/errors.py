from __future__ import annotations


class BlendingError(ValueError):
    pass


class InvalidSelection(BlendingError):
    """Raised by blend() for a selection it refuses to score.

    Covers fewer than two entries, negative weights, weights that do not sum
    to 1.0 and references to games missing from the graph. The selection is
    never corrected on the caller's behalf.
    """


class UnknownGame(BlendingError, KeyError):
    def __init__(self, game_id: str) -> None:
        super().__init__(f"Game {game_id!r} not found in graph")
        self.game_id = game_id

    def __str__(self) -> str:
        return self.args[0]
