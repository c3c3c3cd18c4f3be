"""
services/hash_service.py – Content fingerprints for candidate files.

Fingerprints are SHA-1 hex digests, which is the strongest hash Logiqx DAT
files carry for every ROM.  Files are streamed in fixed-size chunks so large
disc images are never loaded fully into memory.
"""

import hashlib
from pathlib import Path
from typing import BinaryIO

from romsetzip.services.exceptions import FingerprintError

# ── Configuration ────────────────────────────────────────────────────────────
CHUNK_SIZE: int = 1024 * 1024  # 1 MiB


def fingerprint(stream: BinaryIO) -> str:
    """Return the lower-case SHA-1 hex digest of everything left in *stream*."""
    digest = hashlib.sha1()
    for chunk in iter(lambda: stream.read(CHUNK_SIZE), b""):
        digest.update(chunk)
    return digest.hexdigest()


def fingerprint_file(path: Path) -> str:
    """
    Open *path*, fingerprint its content and release the handle.

    Raises
    ------
    FingerprintError if the file cannot be opened or read.
    """
    try:
        with open(path, "rb") as fh:
            return fingerprint(fh)
    except OSError as exc:
        raise FingerprintError(f"Cannot read '{path}' for hashing: {exc}") from exc
