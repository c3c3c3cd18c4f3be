"""
models/catalog.py – Immutable data model for DAT catalog games and their ROMs.
"""

from dataclasses import dataclass, field
from typing import Tuple


@dataclass(frozen=True)
class RomEntry:
    """
    One required file of one game, as declared in the catalog.

    Attributes
    ----------
    name : Declared file name; a candidate must carry exactly this base name.
    game : Name of the owning game (resolve with ``Catalog.parent_of``).
    size : Declared size in bytes (0 when the DAT omits it).
    crc  : Lower-case CRC32 hex string, empty if absent.
    sha1 : Lower-case SHA-1 hex string, empty if absent.
    md5  : Lower-case MD5 hex string, empty if absent.
    """

    name: str
    game: str
    size: int = 0
    crc: str = ""
    sha1: str = ""
    md5: str = ""

    def __str__(self) -> str:
        return f"{self.game}/{self.name}"


@dataclass(frozen=True)
class Game:
    """
    A named collection of required files forming one complete release.

    Attributes
    ----------
    name        : Unique game name; also the archive's base name.
    description : Optional human-readable description from the DAT.
    roms        : Required files, in catalog order.
    """

    name: str
    description: str = ""
    roms: Tuple[RomEntry, ...] = field(default_factory=tuple)

    @property
    def required_count(self) -> int:
        return len(self.roms)

    def __str__(self) -> str:
        if self.description and self.description != self.name:
            return f"{self.name}  ({self.description})"
        return self.name
