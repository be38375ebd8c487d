"""Locating the current project and resolving it for a command."""

import os
from typing import Optional

from ..deps.dependency_graph import ResolvedDependency
from ..deps.graph_resolver import DependencyGraphResolver
from ..utils.console import _rich_debug
from ..utils.helpers import find_file_upwards
from .environment import ComposedEnvironment, EnvironmentComposer


def find_project_dir(app_context, start: Optional[str] = None) -> str:
    """Nearest directory from ``start`` upwards holding a config or lock file.

    Falls back to ``start`` itself when no parent has one.
    """
    start = os.path.abspath(start or os.getcwd())
    names = list(app_context.config_file_names) + [app_context.lock_file_name]
    project_dir, found = find_file_upwards(names, start)
    if project_dir is None:
        _rich_debug(f"no project config found above {start}")
        return start
    _rich_debug(f"using {found}")
    return project_dir


def resolve_project(app_context, start: Optional[str] = None, force_fuzzy: bool = False) -> ResolvedDependency:
    project_dir = find_project_dir(app_context, start)
    return DependencyGraphResolver(app_context).resolve(project_dir, force_fuzzy=force_fuzzy)


def compose_project(app_context, root: ResolvedDependency) -> ComposedEnvironment:
    return EnvironmentComposer(app_context.trigger_runner).compose(root)
