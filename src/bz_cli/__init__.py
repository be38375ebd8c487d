"""bz: project-local tool dependency manager."""

from .version import get_version

__version__ = get_version()
