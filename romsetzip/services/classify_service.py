"""
services/classify_service.py – Match one candidate file against the catalog.

A candidate belongs to a game when its content fingerprint equals one of the
game's ROM fingerprints *and* its base name equals that ROM's declared name.
One file may satisfy ROMs of several games; every satisfying pair is returned.

Skipped candidates (unreadable metadata, excluded extension, anything that is
not a regular file) are logged and yield no matches.  A candidate that passes
those checks but cannot be opened for hashing raises FingerprintError.
"""

import logging
import stat
from pathlib import Path
from typing import Iterable, List, Protocol, Set, Tuple

from romsetzip.models.catalog import Game, RomEntry
from romsetzip.services import hash_service

logger = logging.getLogger(__name__)

Match = Tuple[Game, Path]


class ContentMatcher(Protocol):
    """What the classifier needs from a catalog."""

    def lookup_by_fingerprint(self, fingerprint: str) -> List[RomEntry]: ...

    def parent_of(self, entry: RomEntry) -> Game: ...


def normalize_extensions(extensions: Iterable[str]) -> Set[str]:
    """Strip leading dots so ``txt`` and ``.txt`` exclude the same files."""
    return {ext.lstrip(".") for ext in extensions if ext.lstrip(".")}


def extension_of(path: Path) -> str:
    """
    Text after the last dot of *path*'s base name ('' when there is none).

    Unlike ``Path.suffix`` a leading dot counts, so ``.bashrc`` has the
    extension ``bashrc``.
    """
    name = path.name
    dot = name.rfind(".")
    return name[dot + 1:] if dot >= 0 else ""


def classify(
    path: Path,
    catalog: ContentMatcher,
    exclude: Iterable[str] = (),
) -> List[Match]:
    """
    Return the (game, path) pairs that *path* satisfies.

    Parameters
    ----------
    path    : Candidate file.
    catalog : Anything providing lookup_by_fingerprint() and parent_of().
    exclude : Extensions (with or without the leading dot) to skip unopened.

    Raises
    ------
    FingerprintError if the file cannot be opened or read.
    """
    path = Path(path)

    try:
        st = path.stat()
    except OSError as exc:
        logger.error("Cannot check %s, skipping. Reason: %s", path, exc)
        return []

    if extension_of(path) in normalize_extensions(exclude):
        logger.info("%s has excluded extension, skipping.", path)
        return []

    if not stat.S_ISREG(st.st_mode):
        logger.warning("%s is not a regular file, skipping.", path)
        return []

    digest = hash_service.fingerprint_file(path)
    entries = catalog.lookup_by_fingerprint(digest)
    logger.debug("found %d matches for %s", len(entries), path)

    return [
        (catalog.parent_of(entry), path)
        for entry in entries
        if entry.name == path.name
    ]
