"""
services/dat_service.py – Load a Logiqx XML DAT file into a searchable catalog.

The catalog is read-only once built.  It answers the two questions the
assembler asks: which ROM entries share a fingerprint, and which game owns a
given entry.

Sources
-------
  local path        – read from disk
  http:// https://  – fetched with httpx
"""

import logging
from collections import defaultdict
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Union

import httpx
from bs4 import BeautifulSoup, Tag

from romsetzip.models.catalog import Game, RomEntry
from romsetzip.services.exceptions import CatalogError

logger = logging.getLogger(__name__)

# ── Configuration ────────────────────────────────────────────────────────────

# Element names that describe one game; MAME-derived DATs use <machine>.
GAME_ELEMENTS = ["game", "machine"]

# ROM status values that mean the file is not part of the required set.
SKIPPED_STATUSES = {"nodump"}

# HTTP timeout (seconds)
HTTP_TIMEOUT: float = 30.0


class Catalog:
    """In-memory index of games, keyed by ROM SHA-1 and by game name."""

    def __init__(self, games: Iterable[Game] = ()) -> None:
        self._games: Dict[str, Game] = {}
        self._by_sha1: Dict[str, List[RomEntry]] = defaultdict(list)
        for game in games:
            self.add(game)

    def add(self, game: Game) -> None:
        if game.name in self._games:
            logger.warning("Duplicate game %s in catalog, keeping the first.", game.name)
            return
        self._games[game.name] = game
        for rom in game.roms:
            if rom.sha1:
                self._by_sha1[rom.sha1.lower()].append(rom)

    def lookup_by_fingerprint(self, fingerprint: str) -> List[RomEntry]:
        """Return every ROM entry whose SHA-1 equals *fingerprint*."""
        return list(self._by_sha1.get(fingerprint.lower(), ()))

    def parent_of(self, entry: RomEntry) -> Game:
        """Return the game that owns *entry*."""
        try:
            return self._games[entry.game]
        except KeyError:
            raise CatalogError(f"ROM {entry} refers to unknown game {entry.game!r}") from None

    @property
    def games(self) -> List[Game]:
        return list(self._games.values())

    def __contains__(self, name: object) -> bool:
        return name in self._games

    def __iter__(self) -> Iterator[Game]:
        return iter(self._games.values())

    def __len__(self) -> int:
        return len(self._games)


# ── Public API ───────────────────────────────────────────────────────────────


def load_catalog(source: Union[str, Path]) -> Catalog:
    """
    Read the DAT at *source* (a path or an http(s) URL) and index it.

    Raises
    ------
    CatalogError
        On any network, I/O or parse failure.
    """
    text = str(source)
    if text.startswith(("http://", "https://")):
        data = _fetch(text)
    else:
        try:
            data = Path(source).read_bytes()
        except OSError as exc:
            raise CatalogError(f"Cannot read DAT file '{source}': {exc}") from exc

    catalog = parse_dat(data)
    logger.debug("Loaded %d game(s) from %s", len(catalog), source)
    return catalog


def parse_dat(document: Union[str, bytes]) -> Catalog:
    """
    Parse a Logiqx XML DAT document.

    Raises
    ------
    CatalogError
        When the document contains no game entries.
    """
    soup = BeautifulSoup(document, "xml")
    games = [_parse_game(element) for element in soup.find_all(GAME_ELEMENTS)]
    games = [game for game in games if game is not None]

    if not games:
        raise CatalogError(
            "DAT document was read but no game entries could be parsed. "
            "Is it a Logiqx XML DAT file?"
        )
    return Catalog(games)


# ── Private helpers ───────────────────────────────────────────────────────────


def _fetch(url: str) -> bytes:
    try:
        response = httpx.get(url, timeout=HTTP_TIMEOUT, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise CatalogError(
            f"DAT server returned HTTP {exc.response.status_code}."
        ) from exc
    except httpx.RequestError as exc:
        raise CatalogError(f"Network error while fetching DAT: {exc}") from exc
    return response.content


def _parse_game(element: Tag):
    name = (element.get("name") or "").strip()
    if not name:
        return None

    description = element.find("description")
    roms = []
    for rom in element.find_all("rom"):
        rom_name = rom.get("name")
        if not rom_name:
            continue
        if (rom.get("status") or "").lower() in SKIPPED_STATUSES:
            continue
        roms.append(
            RomEntry(
                name=rom_name,
                game=name,
                size=_safe_int(rom.get("size")),
                crc=(rom.get("crc") or "").lower(),
                sha1=(rom.get("sha1") or "").lower(),
                md5=(rom.get("md5") or "").lower(),
            )
        )

    return Game(
        name=name,
        description=description.get_text(strip=True) if description else "",
        roms=tuple(roms),
    )


def _safe_int(value) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0
