"""GitHub token lookup for release downloads.

Token precedence for a server:
- the ``token`` of that server in the user config (``~/.bz/config.json``)
- BZ_GITHUB_TOKEN: token dedicated to bz
- GITHUB_TOKEN / GH_TOKEN: tokens already exported for other GitHub tools
"""

import os
import re
from typing import Dict, Optional

from ..config import get_server_token


class GitHubTokenManager:
    """Finds the token to authenticate GitHub API calls with."""

    TOKEN_PRECEDENCE = ['BZ_GITHUB_TOKEN', 'GITHUB_TOKEN', 'GH_TOKEN']

    def __init__(self, user_config: Optional[Dict] = None):
        """Initialize token manager.

        Args:
            user_config: Loaded user config; read from disk when None
        """
        self.user_config = user_config

    def get_token_for_server(self, server: str, env: Optional[Dict[str, str]] = None) -> Optional[str]:
        """Get the best available token for a server.

        Args:
            server: Server name as written in coordinates (e.g. "github.com")
            env: Environment to check (defaults to os.environ)

        Returns:
            Token string, or None for anonymous access
        """
        token = get_server_token(server, self.user_config)
        if token:
            return token

        if env is None:
            env = os.environ
        for token_var in self.TOKEN_PRECEDENCE:
            token = env.get(token_var)
            if token:
                return token
        return None


def sanitize_token_error(error_message: str) -> str:
    """Remove anything that looks like a GitHub token from an error message."""
    sanitized = re.sub(r'(ghp_|gho_|ghu_|ghs_|ghr_|github_pat_)[a-zA-Z0-9_]+', '***', error_message)
    sanitized = re.sub(r'(Bearer|token)\s+[^\s\'"]+', r'\1 ***', sanitized)
    return sanitized
