"""Execution of the wrapped command."""

import shutil
import subprocess
from typing import Dict, Sequence

from ..utils.console import _rich_debug, _rich_error

COMMAND_NOT_EXECUTABLE = 126
COMMAND_NOT_FOUND = 127


class CommandRunner:
    """Runs a command with the composed environment, inheriting stdio."""

    def run(self, argv: Sequence[str], env: Dict[str, str]) -> int:
        """Run ``argv`` and return its exit code.

        The program is looked up on the PATH of ``env``, so tools installed
        by dependencies are found.

        Args:
            argv: Program and arguments, already alias-expanded
            env: Complete process environment

        Returns:
            int: Exit code of the command, 127 if the program does not exist
        """
        if not argv:
            return 0

        program = shutil.which(argv[0], path=env.get("PATH")) or argv[0]
        _rich_debug(f"command: {' '.join(argv)}")
        try:
            result = subprocess.run([program, *argv[1:]], env=env)
        except FileNotFoundError:
            _rich_error(f"`{argv[0]}`: command not found")
            return COMMAND_NOT_FOUND
        except PermissionError as e:
            _rich_error(f"`{argv[0]}`: {e}")
            return COMMAND_NOT_EXECUTABLE
        return result.returncode
