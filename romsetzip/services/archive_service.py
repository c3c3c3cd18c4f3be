"""
services/archive_service.py – Build one ZIP archive from an ordered file list.

Two interchangeable backends implement the same capability:

  internal – stdlib zipfile, deflate, one entry per file named by its base
             name with the source's modification time and mode bits
  external – Info-ZIP ``zip`` (or whatever ROMSETZIP_ZIP points at), invoked
             as ``zip <archive> <file1> <file2> ...``

Security notes
--------------
* Arguments are passed to subprocess as a list (never shell=True).
* A backend that fails removes any archive it created, so a truncated ZIP is
  never left behind under the final name.
"""

import logging
import os
import shutil
import subprocess
import zipfile
from pathlib import Path
from typing import Dict, Literal, Protocol, Sequence, Type

from romsetzip.models.catalog import Game
from romsetzip.services.exceptions import ArchiveError, ArchiverNotFoundError

logger = logging.getLogger(__name__)

# ── Configuration ────────────────────────────────────────────────────────────
ARCHIVE_SUFFIX: str = ".zip"
DEFAULT_ZIP_EXECUTABLE: str = "zip"
ZIP_EXECUTABLE_ENV: str = "ROMSETZIP_ZIP"
COPY_CHUNK_SIZE: int = 1024 * 1024  # 1 MiB

# ── Types ────────────────────────────────────────────────────────────────────
ArchiveFormat = Literal["internal", "external"]


class ArchiveBackend(Protocol):
    def build(self, archive_path: Path, files: Sequence[Path]) -> Path: ...


def archive_name(game: Game) -> str:
    """File name of *game*'s archive, e.g. ``Alpha.zip``."""
    return game.name + ARCHIVE_SUFFIX


def is_safe_name(name: str) -> bool:
    """
    True when *name* can be used as a file name inside the output directory.

    Rejects empty names, ``.``/``..`` and anything carrying a path separator,
    so a catalog entry can never place an archive outside the output dir.
    """
    if name in ("", ".", ".."):
        return False
    if "/" in name or "\\" in name:
        return False
    return Path(name).name == name


# ── Backends ──────────────────────────────────────────────────────────────────


class InternalZipBackend:
    """Stream each file into a deflate-compressed ZIP container."""

    def build(self, archive_path: Path, files: Sequence[Path]) -> Path:
        archive_path = Path(archive_path)
        try:
            with zipfile.ZipFile(
                archive_path, "w", compression=zipfile.ZIP_DEFLATED, strict_timestamps=False
            ) as zf:
                for source in files:
                    self._write_entry(zf, Path(source), archive_path.name)
        except (OSError, zipfile.BadZipFile, zipfile.LargeZipFile) as exc:
            _remove_partial(archive_path)
            raise ArchiveError(f"Failed to write '{archive_path}': {exc}") from exc
        except BaseException:
            _remove_partial(archive_path)
            raise

        return archive_path

    @staticmethod
    def _write_entry(zf: zipfile.ZipFile, source: Path, zip_name: str) -> None:
        logger.debug("Writing %s to %s...", source.name, zip_name)
        # from_file carries mtime and st_mode over into the entry header.
        info = zipfile.ZipInfo.from_file(source, arcname=source.name, strict_timestamps=False)
        info.compress_type = zipfile.ZIP_DEFLATED
        with open(source, "rb") as fin, zf.open(info, "w") as fout:
            shutil.copyfileobj(fin, fout, COPY_CHUNK_SIZE)
        logger.debug("Done!")


class ExternalZipBackend:
    """Delegate archive creation to an external ``zip`` executable."""

    def __init__(self, executable: str = "") -> None:
        self.executable = executable or os.environ.get(ZIP_EXECUTABLE_ENV, DEFAULT_ZIP_EXECUTABLE)

    def command(self, archive_path: Path, files: Sequence[Path]) -> list:
        return [self.executable, str(archive_path), *(str(f) for f in files)]

    def build(self, archive_path: Path, files: Sequence[Path]) -> Path:
        archive_path = Path(archive_path)
        existed = archive_path.exists()
        cmd = self.command(archive_path, files)

        try:
            # stdout is inherited so the tool's own progress stays visible.
            result = subprocess.run(
                cmd,
                stderr=subprocess.PIPE,
                text=True,
                shell=False,
            )
        except FileNotFoundError as exc:
            raise ArchiverNotFoundError(self.executable) from exc
        except OSError as exc:
            raise ArchiveError(f"OS error launching {self.executable}: {exc}") from exc

        if result.returncode != 0:
            if not existed:
                _remove_partial(archive_path)
            stderr_snippet = (result.stderr or "")[:500]
            raise ArchiveError(
                f"{self.executable} exited with code {result.returncode} "
                f"while writing '{archive_path}'.\n"
                f"STDERR: {stderr_snippet}"
            )
        if result.stderr:
            logger.warning("%s: %s", self.executable, result.stderr.strip())

        return archive_path


_BACKENDS: Dict[str, Type] = {
    "internal": InternalZipBackend,
    "external": ExternalZipBackend,
}


def get_backend(fmt: ArchiveFormat) -> ArchiveBackend:
    """Instantiate the backend registered for *fmt*."""
    try:
        return _BACKENDS[fmt]()
    except KeyError:
        raise ArchiveError(f"Unknown archive backend: {fmt!r}") from None


# ── Helper ────────────────────────────────────────────────────────────────────


def _remove_partial(archive_path: Path) -> None:
    try:
        if archive_path.exists():
            archive_path.unlink()
    except OSError as exc:
        logger.warning("Could not remove partial archive '%s': %s", archive_path, exc)
