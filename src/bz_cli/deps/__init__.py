"""Dependency resolution package for bz."""

from .archive import ArchiveExtractor
from .dependency_graph import CircularDependencyDetector, ResolvedDependency
from .graph_resolver import DependencyGraphResolver, ROOT_COORD
from .resolvers import Resolver, GitHubReleaseResolver, LocalDevResolver

__all__ = [
    'ArchiveExtractor',
    'CircularDependencyDetector',
    'ResolvedDependency',
    'DependencyGraphResolver',
    'ROOT_COORD',
    'Resolver',
    'GitHubReleaseResolver',
    'LocalDevResolver',
]
