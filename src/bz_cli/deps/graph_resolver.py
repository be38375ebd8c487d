"""Dependency resolution engine: project config to resolved dependency tree."""

import os
from pathlib import Path
from typing import List, Optional, Tuple

from ..errors import (
    DownloadError,
    LockFileReadError,
    LockFileWriteError,
    UnresolvableCoordinateError,
)
from ..models.config_content import FuzzyConfigContent, LockedConfigContent
from ..models.coord import FuzzyCoord, LockedCoord
from ..models.version import Version
from ..utils.console import _rich_debug, _rich_info, _rich_warning
from ..utils.helpers import find_first_existing
from .archive import remove_dir
from .dependency_graph import CircularDependencyDetector, ResolvedDependency

ROOT_COORD = LockedCoord(server="localhost", owner="local", repo="local", version=Version.parse("0.0.0"))


class DependencyGraphResolver:
    """Resolves a project directory into a tree of installed dependencies.

    The project config (``.bz.yml``, ``.bz.json``, ...) is read when there is
    no lock file, when it is newer than the lock file or when the lock file
    is unreadable; the lock file is rewritten in those cases. Every
    dependency is downloaded and extracted into the cache once, then its own
    lock file drives the recursion.
    """

    def __init__(self, app_context):
        """Initialize the resolver.

        Args:
            app_context: AppContext carrying file names, cache dir and collaborators
        """
        self.app_context = app_context

    # Reading configs

    def find_fuzzy_config_file(self, dir: str) -> Optional[str]:
        return find_first_existing(dir, self.app_context.config_file_names)

    def _lock_file(self, dir: str) -> str:
        return os.path.join(dir, self.app_context.lock_file_name)

    def _should_read_fuzzy(self, dir: str) -> bool:
        lock_file = self._lock_file(dir)
        if not os.path.exists(lock_file):
            _rich_debug("lock file not found, reading project config")
            return True

        config_file = self.find_fuzzy_config_file(dir)
        if config_file and os.path.getmtime(config_file) > os.path.getmtime(lock_file):
            _rich_debug(f"{config_file} is newer than the lock file, reading project config")
            return True

        _rich_debug(f"reading {lock_file}")
        return False

    def read_locked_config(self, dir: str) -> LockedConfigContent:
        """Load ``<dir>/.bz.lock``.

        Raises:
            LockFileReadError: If the lock file is missing or corrupt
        """
        return LockedConfigContent.from_file(self._lock_file(dir))

    def read_fuzzy_config(self, dir: str) -> LockedConfigContent:
        """Load the project config of ``dir`` and lock each of its dependencies.

        A directory without any config file yields an empty config.

        Raises:
            ConfigError: If the config file is invalid
            CoordinateFormatError: If a dependency string is malformed
            UnresolvableCoordinateError: If no resolver can lock a dependency
        """
        config_file = self.find_fuzzy_config_file(dir)
        if config_file:
            content = FuzzyConfigContent.from_file(config_file)
        else:
            content = FuzzyConfigContent()

        locked_deps = [self.lock_coord(FuzzyCoord.parse(dep)) for dep in content.deps]
        return LockedConfigContent(
            bin_dir=content.bin_dir,
            deps=locked_deps,
            export=dict(content.export),
            alias=dict(content.alias),
            triggers=content.triggers,
        )

    def lock_coord(self, coord: FuzzyCoord) -> LockedCoord:
        """Ask each resolver in turn; the first non-None answer wins."""
        for resolver in self.app_context.resolvers:
            _rich_debug(f"calling {resolver}.resolve_coord({coord})")
            locked = resolver.resolve_coord(coord)
            if locked is not None:
                return locked
        raise UnresolvableCoordinateError(coord)

    def _read_root_config(self, dir: str, force_fuzzy: bool) -> Tuple[LockedConfigContent, bool]:
        if force_fuzzy or self._should_read_fuzzy(dir):
            return self.read_fuzzy_config(dir), True

        try:
            return self.read_locked_config(dir), False
        except LockFileReadError as e:
            _rich_warning(f"{e}; re-resolving from the project config", symbol="warning")
            return self.read_fuzzy_config(dir), True

    # Resolving

    def resolve(self, dir: str, force_fuzzy: bool = False) -> ResolvedDependency:
        """Resolve the project in ``dir`` into a dependency tree.

        Args:
            dir: Project directory
            force_fuzzy: Ignore an existing lock file and re-resolve every dependency

        Returns:
            ResolvedDependency: Root node of the tree

        Raises:
            BzError: On any resolution failure other than lock file read/write
        """
        dir = os.path.abspath(dir)
        content, update_lock = self._read_root_config(dir, force_fuzzy)

        root = self._resolve(dir, ROOT_COORD, content, CircularDependencyDetector())

        if update_lock:
            try:
                self.update_lock_file(dir, root)
            except LockFileWriteError as e:
                _rich_warning(str(e), symbol="warning")
        return root

    def _resolve(
        self,
        dir: str,
        coord: LockedCoord,
        content: LockedConfigContent,
        detector: CircularDependencyDetector,
    ) -> ResolvedDependency:
        sub: List[ResolvedDependency] = []
        for sub_coord in content.deps:
            child_detector = detector.clone().push(sub_coord.canonical_name_no_version())

            extract_dir = os.path.join(self.cache_dir_for(sub_coord), "extracted")
            self.download_and_install_if_missing(sub_coord, extract_dir)

            try:
                sub_content = self.read_locked_config(extract_dir)
            except LockFileReadError as e:
                raise LockFileReadError(f"Unable to load dependency {sub_coord}: {e}") from e

            sub.append(self._resolve(extract_dir, sub_coord, sub_content, child_detector))

        return ResolvedDependency(
            coord=coord,
            dir=os.path.abspath(dir),
            bin_dir=content.bin_dir,
            exports=dict(content.export),
            alias=dict(content.alias),
            triggers=content.triggers,
            sub=tuple(sub),
        )

    # Installing

    def cache_dir_for(self, coord: LockedCoord) -> str:
        """``<cache>/deps/<server>/<owner>/<repo>/v<version>``."""
        return os.path.join(
            self.app_context.cache_dir,
            "deps",
            coord.server,
            coord.owner,
            coord.repo,
            f"v{coord.version.canonical()}",
        )

    def _download(self, coord: LockedCoord, cache_dir: str) -> str:
        for resolver in self.app_context.resolvers:
            _rich_debug(f"calling {resolver}.download_resolved_coord({coord})")
            try:
                file = resolver.download_resolved_coord(coord, cache_dir)
            except DownloadError:
                raise
            except Exception as e:
                raise DownloadError(f"Failed to download {coord}: {e}") from e
            if file and os.path.isfile(file):
                return file
        raise DownloadError(f"No resolver could download {coord}")

    def download_and_install_if_missing(self, coord: LockedCoord, extract_dir: str):
        """Download, extract and run the install trigger of ``coord`` unless cached.

        Raises:
            DownloadError: If no resolver provides the archive
            ExtractionError: If the archive cannot be extracted
            LockFileReadError: If the extracted dependency carries no lock file
            TriggerError: If the install trigger fails
        """
        if os.path.exists(extract_dir):
            return

        _rich_info(f"Installing {coord}", symbol="download")
        file = self._download(coord, self.cache_dir_for(coord))

        # A dependency only stays cached once its install trigger succeeded
        try:
            self.app_context.extractor.extract(file, extract_dir)
            content = self.read_locked_config(extract_dir)
            if content.triggers.install_script:
                self.app_context.trigger_runner.run_install_script(
                    content.triggers.install_script,
                    cwd=extract_dir,
                    env={"DIR": os.path.abspath(extract_dir)},
                )
        except Exception:
            remove_dir(extract_dir)
            raise

    # Persisting

    def update_lock_file(self, dir: str, root: ResolvedDependency):
        """Write the direct dependencies and settings of ``root`` to ``<dir>/.bz.lock``.

        Raises:
            LockFileWriteError: If the file cannot be written
        """
        content = LockedConfigContent(
            bin_dir=root.bin_dir,
            deps=[child.coord for child in root.sub],
            export=dict(root.exports),
            alias=dict(root.alias),
            triggers=root.triggers,
        )
        lock_file = Path(self._lock_file(dir))
        try:
            lock_file.write_text(content.to_json(), encoding="utf-8")
        except OSError as e:
            raise LockFileWriteError(f"Unable to write {lock_file}: {e}") from e
        _rich_debug(f"wrote {lock_file}")
