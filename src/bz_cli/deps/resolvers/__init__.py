"""Resolvers that lock and download dependencies."""

from .base import Resolver
from .github_resolver import GitHubReleaseResolver, possible_asset_names
from .local_dev_resolver import LocalDevResolver

__all__ = [
    'Resolver',
    'GitHubReleaseResolver',
    'LocalDevResolver',
    'possible_asset_names',
]
