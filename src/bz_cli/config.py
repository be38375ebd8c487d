"""Configuration management for bz."""

import os
import json
from typing import Dict, Optional


APP_NAME = "bz"
LOCK_FILE_NAME = f".{APP_NAME}.lock"
CONFIG_FILE_NAMES = [
    f".{APP_NAME}.yml",
    f".{APP_NAME}.yaml",
    f".{APP_NAME}.json",
    f".{APP_NAME}",
]
DEFAULT_CONFIG = {"servers": {}}


def get_user_dir():
    """Get the bz user directory (``BZ_HOME`` or ``~/.bz``).

    Returns:
        str: Absolute path of the user directory.
    """
    return os.environ.get("BZ_HOME") or os.path.expanduser(f"~/.{APP_NAME}")


def get_config_file():
    return os.path.join(get_user_dir(), "config.json")


def get_cache_dir():
    """Get the download cache directory (``BZ_CACHE_DIR`` or ``<user dir>/cache``).

    Returns:
        str: Absolute path of the cache directory.
    """
    return os.environ.get("BZ_CACHE_DIR") or os.path.join(get_user_dir(), "cache")


def ensure_config_exists():
    """Ensure the configuration directory and file exist."""
    config_dir = get_user_dir()
    if not os.path.exists(config_dir):
        os.makedirs(config_dir)

    config_file = get_config_file()
    if not os.path.exists(config_file):
        with open(config_file, "w") as f:
            json.dump(DEFAULT_CONFIG, f, indent=2)


def get_config():
    """Get the current user configuration.

    Returns:
        dict: Current configuration, or the defaults if no file exists yet.
    """
    config_file = get_config_file()
    if not os.path.exists(config_file):
        return json.loads(json.dumps(DEFAULT_CONFIG))
    with open(config_file, "r") as f:
        return json.load(f)


def update_config(updates):
    """Update the configuration with new values.

    Args:
        updates (dict): Dictionary of configuration values to update.
    """
    ensure_config_exists()
    config = get_config()
    config.update(updates)

    with open(get_config_file(), "w") as f:
        json.dump(config, f, indent=2)


def get_server_token(server: str, config: Optional[Dict] = None) -> Optional[str]:
    """Get the token configured for a server, matching names case-insensitively.

    Args:
        server (str): Server name, e.g. "github.com".
        config (dict, optional): Loaded configuration; read from disk when None.

    Returns:
        str: The token, or None if not configured.
    """
    if config is None:
        config = get_config()
    servers = config.get("servers") or {}
    for name, settings in servers.items():
        if name.lower() == server.lower() and isinstance(settings, dict):
            return settings.get("token") or None
    return None


def set_server_token(server: str, token: str):
    """Store the token used for a server.

    Args:
        server (str): Server name, e.g. "github.com".
        token (str): Access token.
    """
    servers = dict(get_config().get("servers") or {})
    settings = dict(servers.get(server) or {})
    settings["token"] = token
    servers[server] = settings
    update_config({"servers": servers})
