"""Models for bz data structures."""

from .version import Version, VersionPattern, new_version, new_version_pattern, compare_versions
from .coord import FuzzyCoord, LockedCoord, parse_coord
from .config_content import (
    Triggers,
    FuzzyConfigContent,
    LockedConfigContent,
    load_config_data,
)

__all__ = [
    "Version",
    "VersionPattern",
    "new_version",
    "new_version_pattern",
    "compare_versions",
    "FuzzyCoord",
    "LockedCoord",
    "parse_coord",
    "Triggers",
    "FuzzyConfigContent",
    "LockedConfigContent",
    "load_config_data",
]
