"""Extraction of downloaded dependency archives."""

import os
import shutil
import tarfile
import zipfile
from pathlib import Path
from typing import Union

from ..errors import ExtractionError
from ..utils.console import _rich_debug

ZIP_EXTENSIONS = (".zip",)
TAR_EXTENSIONS = (".tgz", ".tar.gz")


def _tar_filter_args():
    # Extraction filters only exist on 3.10.12+ and 3.11.4+
    if hasattr(tarfile, "data_filter"):
        return {"filter": "data"}
    return {}


def _ensure_inside(dest_dir: Path, target: Path, member: str):
    if not target.resolve().is_relative_to(dest_dir):
        raise ExtractionError(f"Archive entry '{member}' would be extracted outside of {dest_dir}")


class ArchiveExtractor:
    """Extracts ``.zip``, ``.tgz`` and ``.tar.gz`` archives.

    Entries (and symlink targets) that would land outside the destination
    directory are rejected. File permissions stored in the archive are kept
    so extracted tools stay executable.
    """

    def supports(self, file: Union[str, Path]) -> bool:
        name = str(file).lower()
        return name.endswith(ZIP_EXTENSIONS) or name.endswith(TAR_EXTENSIONS)

    def extract(self, file: Union[str, Path], dest_dir: Union[str, Path]):
        """Extract ``file`` into ``dest_dir``.

        Args:
            file: Archive path
            dest_dir: Destination directory, created when missing

        Raises:
            ExtractionError: If the extension is unsupported or extraction fails
        """
        name = str(file).lower()
        dest = Path(dest_dir)
        _rich_debug(f"extracting {file} into {dest}")
        try:
            dest.mkdir(parents=True, exist_ok=True)
            dest = dest.resolve()
            if name.endswith(ZIP_EXTENSIONS):
                self._extract_zip(Path(file), dest)
            elif name.endswith(TAR_EXTENSIONS):
                self._extract_tar(Path(file), dest)
            else:
                raise ExtractionError(f"Unsupported archive format: {file}")
        except (OSError, zipfile.BadZipFile, tarfile.TarError) as e:
            raise ExtractionError(f"Failed to extract {file}: {e}") from e

    def _extract_zip(self, file: Path, dest: Path):
        with zipfile.ZipFile(file, "r") as zip_ref:
            for info in zip_ref.infolist():
                target = dest / info.filename
                _ensure_inside(dest, target, info.filename)
                zip_ref.extract(info, dest)

                mode = (info.external_attr >> 16) & 0o777
                if mode and not info.is_dir():
                    os.chmod(target, mode)

    def _extract_tar(self, file: Path, dest: Path):
        with tarfile.open(file, "r:gz") as tar_ref:
            for member in tar_ref.getmembers():
                target = dest / member.name
                _ensure_inside(dest, target, member.name)
                if member.issym() or member.islnk():
                    link_base = target.parent if member.issym() else dest
                    _ensure_inside(dest, link_base / member.linkname, member.name)
                elif not (member.isfile() or member.isdir()):
                    _rich_debug(f"skipping special archive entry {member.name}")
                    continue
                tar_ref.extract(member, dest, set_attrs=True, **_tar_filter_args())


def remove_dir(path: Union[str, Path]):
    """Remove a partially extracted directory, ignoring errors."""
    shutil.rmtree(path, ignore_errors=True)
