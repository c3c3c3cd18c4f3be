"""
services/exceptions.py – Structured custom exception hierarchy for romsetzip.

Every error raised here is fatal to a run.  Per-file problems (unreadable
metadata, excluded extensions, failed source removal) are logged where they
occur and never surface as exceptions.
"""


class RomSetZipError(Exception):
    """Base class for all romsetzip exceptions."""


class CatalogError(RomSetZipError):
    """Raised when the DAT catalog cannot be fetched or parsed."""


class FingerprintError(RomSetZipError):
    """Raised when a candidate file cannot be opened or read for hashing."""


class StorageError(RomSetZipError):
    """Raised when the output directory cannot be created."""


class ArchiveError(RomSetZipError):
    """Raised when an archive cannot be created, written or finalized."""


class ArchiverNotFoundError(ArchiveError):
    """
    Raised when the external archiving executable cannot be launched.

    Attributes
    ----------
    executable : The command name or path that was attempted.
    """

    def __init__(self, executable: str) -> None:
        self.executable = executable
        super().__init__(
            f"External archiver '{executable}' was not found. "
            "Install Info-ZIP or set ROMSETZIP_ZIP to its location."
        )
