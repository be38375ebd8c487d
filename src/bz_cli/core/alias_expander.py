"""Alias expansion of command lines against the composed environment."""

import shlex
from typing import Dict, List, Optional, Sequence

from ..errors import ConfigError
from ..utils.console import _rich_debug
from ..utils.helpers import expand_template
from .environment import ComposedEnvironment


class AliasExpander:
    """Rewrites the first word of a command line using alias tables.

    The root scope is consulted first, then every descendant scope in
    pre-order. Each scope only looks at the current first word, so an alias
    of the project may point to an alias a dependency defines.
    """

    def __init__(self, composed: ComposedEnvironment, env: Optional[Dict[str, str]] = None):
        """Initialize the expander.

        Args:
            composed: Composed environment of the root of the tree
            env: Variables used to expand alias values (defaults to ``composed.env``)
        """
        self.composed = composed
        self.env = composed.env if env is None else env

    def resolve_alias(self, argv: Sequence[str]) -> List[str]:
        """Expand ``argv[0]`` through every scope; empty input is returned unchanged."""
        return self._resolve(self.composed, list(argv))

    def _resolve(self, scope: ComposedEnvironment, argv: List[str]) -> List[str]:
        if not argv:
            return argv

        value = scope.alias.get(argv[0])
        if value is not None:
            try:
                expanded = shlex.split(expand_template(value, self.env))
            except ValueError as e:
                raise ConfigError(f"Invalid alias '{argv[0]}': {e}") from e
            _rich_debug(f"alias {argv[0]} -> {' '.join(expanded)}")
            argv = expanded + argv[1:]

        for sub in scope.sub:
            argv = self._resolve(sub, argv)
        return argv


def resolve_alias(composed: ComposedEnvironment, argv: Sequence[str]) -> List[str]:
    return AliasExpander(composed).resolve_alias(argv)
