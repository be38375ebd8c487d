"""Composition root: builds the collaborators shared by every command."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .config import APP_NAME, CONFIG_FILE_NAMES, LOCK_FILE_NAME, get_cache_dir, get_config, get_user_dir
from .core.token_manager import GitHubTokenManager
from .core.triggers import TriggerRunner
from .deps.archive import ArchiveExtractor
from .deps.resolvers import GitHubReleaseResolver, LocalDevResolver, Resolver
from .errors import ConfigError


@dataclass
class AppContext:
    """Names, directories and collaborators used during resolution.

    Resolvers are consulted in list order.
    """
    app_name: str = APP_NAME
    lock_file_name: str = LOCK_FILE_NAME
    config_file_names: List[str] = field(default_factory=lambda: list(CONFIG_FILE_NAMES))
    user_dir: str = ""
    cache_dir: str = ""
    user_config: Dict[str, Any] = field(default_factory=dict)
    resolvers: List[Resolver] = field(default_factory=list)
    extractor: Any = field(default_factory=ArchiveExtractor)
    trigger_runner: Any = field(default_factory=TriggerRunner)

    def add_resolver(self, resolver: Resolver):
        self.resolvers.append(resolver)

    @classmethod
    def default(cls, user_config: Optional[Dict[str, Any]] = None) -> "AppContext":
        """Create the context used by the CLI.

        Registers the GitHub release resolver, then the local development resolver.

        Raises:
            ConfigError: If the user config file is not valid JSON
        """
        if user_config is None:
            try:
                user_config = get_config()
            except ValueError as e:
                raise ConfigError(f"Invalid user config: {e}") from e

        context = cls(
            user_dir=get_user_dir(),
            cache_dir=get_cache_dir(),
            user_config=user_config,
        )
        context.add_resolver(GitHubReleaseResolver(GitHubTokenManager(user_config)))
        context.add_resolver(LocalDevResolver())
        return context


def get_app_context(obj: Optional[Dict[str, Any]]) -> AppContext:
    """Return the AppContext stored in a click context object, creating the default one."""
    if obj is None:
        return AppContext.default()
    if obj.get("app_context") is None:
        obj["app_context"] = AppContext.default()
    return obj["app_context"]
