"""
workers/assembly_worker.py – Orchestrates the classify → group → archive run.

Pipeline
--------
  1. classify every candidate path against the catalog
  2. group the matches into one GameSet per game
  3. for each game set whose file count equals the game's ROM count,
     write ``<output_dir>/<game>.zip`` and optionally remove the sources

Everything runs on the calling thread, one path and then one game at a time.
Services raise RomSetZipError subclasses for fatal conditions; the worker
lets them propagate so the caller decides how to report them.
"""

import logging
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import FrozenSet, Iterable, List, Optional

from romsetzip.models.game_set import GameSet
from romsetzip.services import archive_service, classify_service, storage_service
from romsetzip.services.aggregate_service import GameSetAggregator
from romsetzip.services.archive_service import ArchiveBackend, ArchiveFormat
from romsetzip.services.classify_service import ContentMatcher

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AssemblyOptions:
    """
    Run-wide settings.

    Attributes
    ----------
    exclude        : Extensions whose files are skipped without hashing.
    archive_format : 'internal' (zipfile) or 'external' (zip executable).
    output_dir     : Directory receiving the archives; created on demand.
    remove_sources : Delete the matched files after their archive is written.
    """

    exclude: FrozenSet[str] = frozenset()
    archive_format: ArchiveFormat = "internal"
    output_dir: Path = Path(".")
    remove_sources: bool = False


@dataclass
class AssemblyReport:
    """What one run produced."""

    archived: List[Path] = field(default_factory=list)
    incomplete: List[GameSet] = field(default_factory=list)
    removed: List[Path] = field(default_factory=list)
    rejected: List[GameSet] = field(default_factory=list)


class AssemblyWorker:
    """
    Runs one assembly pass over a list of candidate paths.

    Instantiate with a catalog and options, then call run().
    """

    def __init__(
        self,
        catalog: ContentMatcher,
        options: AssemblyOptions = AssemblyOptions(),
        backend: Optional[ArchiveBackend] = None,
    ) -> None:
        self._catalog = catalog
        self._options = options
        self._backend = backend or archive_service.get_backend(options.archive_format)
        self._exclude = classify_service.normalize_extensions(options.exclude)
        self.aggregator = GameSetAggregator()

    # ── Entry point ───────────────────────────────────────────────────────────

    def run(self, paths: Iterable[Path]) -> AssemblyReport:
        self.classify_all(paths)
        return self.archive_complete()

    # ── Pipeline steps ────────────────────────────────────────────────────────

    def classify_all(self, paths: Iterable[Path]) -> GameSetAggregator:
        for path in paths:
            matches = classify_service.classify(Path(path), self._catalog, self._exclude)
            self.aggregator.record_all(matches)
        return self.aggregator

    def archive_complete(self) -> AssemblyReport:
        report = AssemblyReport()
        game_sets = list(self.aggregator)

        # Paths still needed by complete sets that have not been archived yet.
        pending = Counter(
            path
            for game_set in game_sets
            if game_set.is_complete and archive_service.is_safe_name(game_set.name)
            for path in game_set.paths
        )

        for game_set in game_sets:
            logger.info(
                "Game %s needs %d file(s), found %d",
                game_set.name,
                game_set.required_count,
                game_set.found_count,
            )
            if not game_set.is_complete:
                if game_set.is_overfull:
                    logger.warning(
                        "Game %s matched more files than it requires, skipping.",
                        game_set.name,
                    )
                report.incomplete.append(game_set)
                continue

            if not archive_service.is_safe_name(game_set.name):
                logger.error(
                    "Game name %r cannot be used as an archive name, skipping.",
                    game_set.name,
                )
                report.rejected.append(game_set)
                continue

            report.archived.append(self._archive(game_set))

            for path in game_set.paths:
                pending[path] -= 1
            if self._options.remove_sources:
                logger.info("Cleaning up...")
                ready = [path for path in game_set.paths if pending[path] <= 0]
                report.removed.extend(storage_service.remove_sources(ready))

            logger.info("Finished writing %s", archive_service.archive_name(game_set.game))

        return report

    def _archive(self, game_set: GameSet) -> Path:
        output_dir = storage_service.ensure_output_dir(self._options.output_dir)
        zip_name = archive_service.archive_name(game_set.game)
        logger.info("Creating %s with %d file(s)...", zip_name, game_set.found_count)
        return self._backend.build(output_dir / zip_name, list(game_set.paths))
