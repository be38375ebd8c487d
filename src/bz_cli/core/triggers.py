"""Runner for install and pre-run trigger scripts."""

import json
import os
import subprocess
from typing import Dict, List, Optional, Tuple

from ..errors import TriggerError
from ..utils.console import _rich_debug, _rich_info


class TriggerRunner:
    """Executes trigger scripts through the shell.

    Pre-run scripts receive ``{"path": [...], "env": {...}}`` as JSON on stdin
    and must print the (possibly modified) document of the same shape on
    stdout.
    """

    def _process_env(self, env: Optional[Dict[str, str]]) -> Dict[str, str]:
        process_env = os.environ.copy()
        if env:
            process_env.update(env)
        return process_env

    def run_install_script(self, script: str, cwd: str, env: Optional[Dict[str, str]] = None):
        """Run an install script once, right after a dependency is extracted.

        Args:
            script: Shell command line
            cwd: Directory the dependency was extracted into
            env: Extra environment variables

        Raises:
            TriggerError: If the script exits with a non-zero status
        """
        _rich_info(f"Running install script in {cwd}", symbol="running")
        _rich_debug(f"installScript: {script}")
        try:
            subprocess.run(script, shell=True, check=True, cwd=cwd, env=self._process_env(env))
        except subprocess.CalledProcessError as e:
            raise TriggerError(f"Install script failed with exit code {e.returncode}: {script}") from e
        except OSError as e:
            raise TriggerError(f"Unable to run install script '{script}': {e}") from e

    def run_pre_run(
        self,
        script: str,
        path: List[str],
        env: Dict[str, str],
        cwd: Optional[str] = None,
    ) -> Tuple[List[str], Dict[str, str]]:
        """Let a pre-run script rewrite a node's PATH entries and variables.

        Args:
            script: Shell command line
            path: PATH entries contributed by the node
            env: Variables contributed by the node
            cwd: Working directory for the script

        Returns:
            Tuple of (path, env) as returned by the script

        Raises:
            TriggerError: If the script fails or prints invalid JSON
        """
        _rich_debug(f"preRunScript: {script}")
        payload = json.dumps({"path": list(path), "env": dict(env)})
        try:
            result = subprocess.run(
                script,
                shell=True,
                cwd=cwd,
                env=self._process_env(env),
                input=payload,
                capture_output=True,
                text=True,
            )
        except OSError as e:
            raise TriggerError(f"Unable to run pre-run script '{script}': {e}") from e

        if result.returncode != 0:
            raise TriggerError(
                f"Pre-run script failed with exit code {result.returncode}: {script}\n{result.stderr.strip()}"
            )

        try:
            data = json.loads(result.stdout)
        except json.JSONDecodeError as e:
            raise TriggerError(f"Pre-run script '{script}' returned invalid JSON: {e}") from e
        if not isinstance(data, dict):
            raise TriggerError(f"Pre-run script '{script}' must print a JSON object")

        new_path = data.get("path") or []
        new_env = data.get("env") or {}
        if not isinstance(new_path, list) or not isinstance(new_env, dict):
            raise TriggerError(f"Pre-run script '{script}' returned an invalid 'path' or 'env'")
        return [str(p) for p in new_path], {str(k): str(v) for k, v in new_env.items()}
