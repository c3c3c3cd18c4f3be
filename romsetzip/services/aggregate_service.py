"""
services/aggregate_service.py – Group classified files by their owning game.

Game sets are keyed by game name, not by object identity, so the aggregator
does not depend on how the catalog represents its games.  The aggregator is
not thread-safe; if classification is ever parallelised it must stay the
single writer.
"""

from pathlib import Path
from typing import Dict, Iterable, Iterator, Optional, Tuple

from romsetzip.models.catalog import Game
from romsetzip.models.game_set import GameSet


class GameSetAggregator:
    """Accumulates matched paths per game in first-seen order."""

    def __init__(self) -> None:
        self._sets: Dict[str, GameSet] = {}

    def record(self, game: Game, path: Path) -> GameSet:
        """Append *path* to *game*'s set, creating the set on first sight."""
        game_set = self._sets.get(game.name)
        if game_set is None:
            game_set = self._sets[game.name] = GameSet(game)
        game_set.paths.append(path)
        return game_set

    def record_all(self, matches: Iterable[Tuple[Game, Path]]) -> None:
        for game, path in matches:
            self.record(game, path)

    def get(self, name: str) -> Optional[GameSet]:
        return self._sets.get(name)

    def __iter__(self) -> Iterator[GameSet]:
        return iter(list(self._sets.values()))

    def __len__(self) -> int:
        return len(self._sets)
