"""Composition of the runtime environment from a resolved dependency tree."""

import os
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional

from ..deps.dependency_graph import ResolvedDependency
from ..errors import TriggerError
from ..utils.console import _rich_debug
from ..utils.helpers import expand_template, to_env_key


@dataclass
class ComposedEnvironment:
    """Variables, PATH entries and aliases contributed by one tree node.

    ``env`` and ``path`` already include everything merged up from the
    node's descendants. ``sub`` mirrors the tree so aliases can be resolved
    scope by scope.
    """
    env: Dict[str, str] = field(default_factory=dict)
    path: List[str] = field(default_factory=list)
    alias: Dict[str, str] = field(default_factory=dict)
    sub: List["ComposedEnvironment"] = field(default_factory=list)

    def final_path(self, base_path: Optional[str] = None) -> List[str]:
        """Composed PATH entries followed by the existing PATH."""
        if base_path is None:
            base_path = os.environ.get("PATH", "")
        inherited = [entry for entry in base_path.split(os.pathsep) if entry]
        return list(self.path) + inherited

    def to_process_env(self, base_env: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        """Environment for a child process: ``base_env`` overlaid with the composed values."""
        process_env = dict(os.environ if base_env is None else base_env)
        process_env.update(self.env)
        process_env["PATH"] = os.pathsep.join(self.final_path(process_env.get("PATH", "")))
        return process_env


def namespace_prefixes(node: ResolvedDependency) -> List[str]:
    """Variable prefixes identifying a node, most qualified first.

    ``github.com/acme/tool@1.0.0`` gives ``GITHUB_COM_ACME_TOOL_1_0_0``,
    ``GITHUB_COM_ACME_TOOL``, ``ACME_TOOL_1_0_0``, ``ACME_TOOL``,
    ``TOOL_1_0_0`` and ``TOOL``.
    """
    c = node.coord
    version = c.version.canonical()
    return [
        to_env_key(f"{c.server}_{c.owner}_{c.repo}_{version}"),
        to_env_key(f"{c.server}_{c.owner}_{c.repo}"),
        to_env_key(f"{c.owner}_{c.repo}_{version}"),
        to_env_key(f"{c.owner}_{c.repo}"),
        to_env_key(f"{c.repo}_{version}"),
        to_env_key(c.repo),
    ]


class EnvironmentComposer:
    """Merges a resolved tree into one environment, bottom-up.

    For every node, children are composed first in declaration order (a
    later child overrides an earlier one). The node then adds ``DIR``,
    ``CURDIR`` and ``BZ_PROJECT_DIR``, its expanded exports, ``BINDIR`` and
    the namespaced ``<PREFIX>_DIR``/``<PREFIX>_BINDIR`` variables, all of
    which win over inherited values. Its PATH is its own bin dir followed
    by the children's entries.
    """

    def __init__(self, trigger_runner=None, cwd: Optional[str] = None):
        """Initialize the composer.

        Args:
            trigger_runner: Runs pre-run scripts; nodes with a pre-run script
                require one
            cwd: Value of ``CURDIR`` (defaults to the process working directory)
        """
        self.trigger_runner = trigger_runner
        self.cwd = cwd

    def compose(self, root: ResolvedDependency) -> ComposedEnvironment:
        return self._run_pre_run(root, self._compose(root, project_dir=root.dir))

    def _compose(self, node: ResolvedDependency, project_dir: str) -> ComposedEnvironment:
        env: Dict[str, str] = {}
        sub_paths: List[str] = []
        subs: List[ComposedEnvironment] = []

        for child in node.sub:
            composed = self._run_pre_run(child, self._compose(child, project_dir))
            env.update(composed.env)
            sub_paths.extend(composed.path)
            subs.append(composed)

        env.update(self._local_env(node, env, project_dir))

        bin_dir = expand_template(node.bin_dir_or_default(), env)
        return ComposedEnvironment(
            env=env,
            path=[bin_dir] + sub_paths,
            alias=dict(node.alias),
            sub=subs,
        )

    def _local_env(self, node: ResolvedDependency, inherited: Dict[str, str], project_dir: str) -> Dict[str, str]:
        """Variables declared or implied by ``node`` alone, expanded against ``inherited``."""
        env = dict(inherited)
        env["DIR"] = node.dir
        env["CURDIR"] = self.cwd or os.getcwd()
        env["BZ_PROJECT_DIR"] = project_dir

        for key, value in node.exports.items():
            env[key] = expand_template(value, env)

        env["BINDIR"] = expand_template(node.bin_dir_or_default(), env)

        for prefix in namespace_prefixes(node):
            env[f"{prefix}_DIR"] = env["DIR"]
            env[f"{prefix}_BINDIR"] = env["BINDIR"]

        return env

    def _run_pre_run(self, node: ResolvedDependency, composed: ComposedEnvironment) -> ComposedEnvironment:
        script = node.triggers.pre_run_script
        if not script:
            return composed
        if self.trigger_runner is None:
            raise TriggerError(f"{node.get_display_name()} declares a pre-run script but no trigger runner is set")

        _rich_debug(f"running pre-run script of {node.get_display_name()}")
        path, env = self.trigger_runner.run_pre_run(script, composed.path, composed.env, cwd=node.dir)
        return replace(composed, path=path, env=env)


def compose_environment(root: ResolvedDependency, trigger_runner=None) -> ComposedEnvironment:
    return EnvironmentComposer(trigger_runner).compose(root)
