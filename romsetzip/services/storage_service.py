"""
services/storage_service.py – Output directory preparation and source cleanup.

Responsibilities
----------------
1. Make sure the archive output directory exists before the first archive
   is written.
2. Remove source files once they are safely inside an archive.  Removal
   failures are logged per file and never abort the run, since a file left
   behind must not mask a successful archive.
"""

import logging
from pathlib import Path
from typing import Iterable, List

from romsetzip.services.exceptions import StorageError

logger = logging.getLogger(__name__)


def ensure_output_dir(path: Path) -> Path:
    """
    Create *path* (and parents) if it does not exist yet.

    Raises
    ------
    StorageError on any filesystem error.
    """
    path = Path(path)
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise StorageError(f"Cannot create output directory '{path}': {exc}") from exc
    return path


def remove_sources(paths: Iterable[Path]) -> List[Path]:
    """
    Delete each of *paths* once, in order.

    Returns
    -------
    The paths that were actually removed.
    """
    removed: List[Path] = []
    for path in dict.fromkeys(Path(p) for p in paths):
        logger.info("Removing file %s", path)
        try:
            path.unlink()
        except OSError as exc:
            logger.error("Unable to remove file %s. Reason: %s", path, exc)
            continue
        removed.append(path)
    return removed
