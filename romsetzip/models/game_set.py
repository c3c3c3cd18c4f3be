"""
models/game_set.py – Mutable record of the files found for one game.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from romsetzip.models.catalog import Game


@dataclass
class GameSet:
    """
    The on-disk files confirmed to satisfy *game*'s required files.

    Paths are appended in the order they were matched and are never
    removed.  The same path may be recorded more than once, which inflates
    ``found_count`` past ``required_count``.
    """

    game: Game
    paths: List[Path] = field(default_factory=list)

    @property
    def name(self) -> str:
        return self.game.name

    @property
    def found_count(self) -> int:
        return len(self.paths)

    @property
    def required_count(self) -> int:
        return self.game.required_count

    @property
    def is_complete(self) -> bool:
        return self.found_count == self.required_count

    @property
    def is_overfull(self) -> bool:
        return self.found_count > self.required_count
