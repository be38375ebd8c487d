"""Fake collaborators for bz tests."""

import json
import os
from pathlib import Path
from typing import Dict, List, Optional

from bz_cli.deps.resolvers.base import Resolver
from bz_cli.errors import ExtractionError
from bz_cli.models.coord import FuzzyCoord, LockedCoord
from bz_cli.models.version import Version


class FakeResolver(Resolver):
    """Resolves from an in-memory catalogue and "downloads" JSON lock documents.

    ``versions`` maps ``server/owner/repo`` to the version to lock.
    ``packages`` maps ``server/owner/repo`` to the lock file content the
    downloaded archive carries.
    """

    def __init__(self, versions: Dict[str, str], packages: Optional[Dict[str, dict]] = None):
        self.versions = versions
        self.packages = packages or {}
        self.resolve_calls: List[FuzzyCoord] = []
        self.download_calls: List[LockedCoord] = []

    def resolve_coord(self, coord: FuzzyCoord) -> Optional[LockedCoord]:
        self.resolve_calls.append(coord)
        version = self.versions.get(coord.canonical_name_no_version())
        if version is None:
            return None
        return LockedCoord(coord.server, coord.owner, coord.repo, Version.parse(version))

    def download_resolved_coord(self, coord: LockedCoord, dest_dir: str) -> Optional[str]:
        self.download_calls.append(coord)
        package = self.packages.get(coord.canonical_name_no_version())
        if package is None:
            return None
        os.makedirs(dest_dir, exist_ok=True)
        archive = os.path.join(dest_dir, f"{coord.repo}.zip")
        Path(archive).write_text(json.dumps(package))
        return archive


class FakeExtractor:
    """Writes the JSON document of a fake archive as ``.bz.lock`` of the destination."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.calls = []

    def extract(self, file, dest_dir):
        self.calls.append((file, dest_dir))
        os.makedirs(dest_dir, exist_ok=True)
        if self.fail:
            Path(dest_dir, "partial").write_text("x")
            raise ExtractionError(f"cannot extract {file}")
        Path(dest_dir, ".bz.lock").write_text(Path(file).read_text())


class FakeTriggerRunner:
    def __init__(self, pre_run=None):
        self.install_calls = []
        self.pre_run_calls = []
        self.pre_run = pre_run

    def run_install_script(self, script, cwd, env=None):
        self.install_calls.append((script, cwd, env))

    def run_pre_run(self, script, path, env, cwd=None):
        self.pre_run_calls.append((script, list(path), dict(env), cwd))
        if self.pre_run:
            return self.pre_run(path, env)
        return path, env


def lock_doc(deps=None, env=None, alias=None, bin_dir="", triggers=None) -> dict:
    """Build the content of a dependency's ``.bz.lock``."""
    return {
        "binDir": bin_dir,
        "deps": [
            {"server": s, "owner": o, "repo": r, "version": v}
            for s, o, r, v in (deps or [])
        ],
        "env": env or {},
        "alias": alias or {},
        "triggers": triggers or {},
    }
