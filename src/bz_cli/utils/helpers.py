"""Helper utility functions for bz."""

import os
import platform
import re
from pathlib import Path
from string import Template
from typing import Iterable, Mapping, Optional, Tuple

_ENV_KEY_FOLD = re.compile(r"[.\-/]")


def detect_os():
    """Detect the current operating system, named as in release asset names.

    Returns:
        str: Platform name (darwin, linux, windows, or the lowercased system name).
    """
    return platform.system().lower()


def detect_arch():
    """Detect the current CPU architecture, named as in release asset names.

    Returns:
        str: Architecture name (amd64, arm64, 386, arm, or the raw machine name).
    """
    machine = platform.machine().lower()

    if machine in ("x86_64", "amd64"):
        return "amd64"
    elif machine in ("aarch64", "arm64"):
        return "arm64"
    elif machine in ("i386", "i686", "x86"):
        return "386"
    elif machine.startswith("armv"):
        return "arm"
    else:
        return machine


def detect_os_arch():
    """``<os>-<arch>``, e.g. ``linux-amd64``."""
    return f"{detect_os()}-{detect_arch()}"


def to_env_key(value: str) -> str:
    """Uppercase ``value`` and fold ``.``, ``-`` and ``/`` into ``_``."""
    return _ENV_KEY_FOLD.sub("_", value.upper())


def expand_template(value: str, env: Mapping[str, str]) -> str:
    """Substitute ``$NAME`` and ``${NAME}`` references from ``env``.

    Unknown names are left in place verbatim, and so is ``$$``.
    """
    return Template(value.replace("$$", "$$$$")).safe_substitute(env)


def find_file_upwards(names: Iterable[str], start: Optional[str] = None) -> Tuple[Optional[str], Optional[str]]:
    """Search ``start`` and its parents for the first of ``names`` that exists.

    Args:
        names: Candidate file names, in order of preference
        start: Directory to start from (defaults to the working directory)

    Returns:
        Tuple of (directory containing the file, file path), or (None, None)
    """
    names = list(names)
    current = Path(start or os.getcwd()).resolve()
    for directory in [current, *current.parents]:
        for name in names:
            candidate = directory / name
            if candidate.is_file():
                return str(directory), str(candidate)
    return None, None


def find_first_existing(directory: str, names: Iterable[str]) -> Optional[str]:
    """Return the first of ``names`` that is a file in ``directory``."""
    for name in names:
        candidate = os.path.join(directory, name)
        if os.path.isfile(candidate):
            return candidate
    return None
