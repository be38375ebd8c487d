"""Project config (fuzzy) and lock file (locked) content models."""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from ..errors import ConfigError, LockFileReadError
from .coord import LockedCoord

JSON_EXTENSIONS = (".json", ".lock")
YAML_EXTENSIONS = (".yml", ".yaml")


def _string_map(data: Dict[str, Any], key: str) -> Dict[str, str]:
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"'{key}' must be a mapping, got {type(value).__name__}")
    return {str(k): "" if v is None else str(v) for k, v in value.items()}


def _looks_like_json(text: str) -> bool:
    """Detect JSON content by its first meaningful line."""
    for line in text.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("//") or stripped.startswith("#"):
            continue
        return stripped.startswith("{")
    return False


def load_config_data(path: Path) -> Dict[str, Any]:
    """Load a JSON or YAML config file into a dict.

    ``.json`` files are JSON, ``.yml``/``.yaml`` files are YAML and anything
    else (the bare ``.bz`` file) is detected from its content.

    Raises:
        ValueError: If the file is not valid JSON/YAML or not an object
        OSError: If the file cannot be read
    """
    text = path.read_text(encoding="utf-8")
    suffix = path.suffix.lower()
    use_json = suffix in JSON_EXTENSIONS or (suffix not in YAML_EXTENSIONS and _looks_like_json(text))

    try:
        data = json.loads(text) if use_json else yaml.safe_load(text)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON format in {path}: {e}")
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML format in {path}: {e}")

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"{path.name} must contain an object, got {type(data).__name__}")
    return data


@dataclass(frozen=True)
class Triggers:
    """Script hooks declared by a dependency."""
    install_script: Optional[str] = None
    pre_run_script: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "Triggers":
        if not data:
            return cls()
        if not isinstance(data, dict):
            raise ValueError(f"'triggers' must be a mapping, got {type(data).__name__}")
        return cls(
            install_script=data.get("installScript") or None,
            pre_run_script=data.get("preRunScript") or None,
        )

    def to_dict(self) -> Dict[str, str]:
        result = {}
        if self.install_script:
            result["installScript"] = self.install_script
        if self.pre_run_script:
            result["preRunScript"] = self.pre_run_script
        return result


@dataclass
class FuzzyConfigContent:
    """A project config as written by the user; deps are coordinate strings."""
    bin_dir: str = ""
    deps: List[str] = field(default_factory=list)
    export: Dict[str, str] = field(default_factory=dict)
    alias: Dict[str, str] = field(default_factory=dict)
    triggers: Triggers = field(default_factory=Triggers)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FuzzyConfigContent":
        deps = data.get("deps") or []
        if not isinstance(deps, list):
            raise ValueError(f"'deps' must be a list, got {type(deps).__name__}")
        return cls(
            bin_dir=str(data.get("binDir") or ""),
            deps=[str(dep) for dep in deps],
            export=_string_map(data, "env"),
            alias=_string_map(data, "alias"),
            triggers=Triggers.from_dict(data.get("triggers")),
        )

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "FuzzyConfigContent":
        """Load a project config file.

        Raises:
            ConfigError: If the file cannot be read or has an invalid shape
        """
        path = Path(path)
        try:
            return cls.from_dict(load_config_data(path))
        except (OSError, ValueError) as e:
            raise ConfigError(f"Error reading {path}: {e}") from e


@dataclass
class LockedConfigContent:
    """Config content with every dependency resolved to an exact coordinate."""
    bin_dir: str = ""
    deps: List[LockedCoord] = field(default_factory=list)
    export: Dict[str, str] = field(default_factory=dict)
    alias: Dict[str, str] = field(default_factory=dict)
    triggers: Triggers = field(default_factory=Triggers)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LockedConfigContent":
        deps = data.get("deps") or []
        if not isinstance(deps, list):
            raise ValueError(f"'deps' must be a list, got {type(deps).__name__}")
        return cls(
            bin_dir=str(data.get("binDir") or ""),
            deps=[LockedCoord.from_dict(dep) for dep in deps],
            export=_string_map(data, "env"),
            alias=_string_map(data, "alias"),
            triggers=Triggers.from_dict(data.get("triggers")),
        )

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "LockedConfigContent":
        """Load a lock file.

        Raises:
            LockFileReadError: If the lock file is missing or corrupt
        """
        path = Path(path)
        if not path.is_file():
            raise LockFileReadError(f"Lock file not found: {path}")
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            if not isinstance(data, dict):
                raise ValueError(f"lock file must contain an object, got {type(data).__name__}")
            return cls.from_dict(data)
        except (OSError, ValueError) as e:
            raise LockFileReadError(f"Error reading {path}: {e}") from e

    def to_dict(self) -> Dict[str, Any]:
        return {
            "binDir": self.bin_dir,
            "deps": [coord.to_dict() for coord in self.deps],
            "env": dict(self.export),
            "alias": dict(self.alias),
            "triggers": self.triggers.to_dict(),
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2) + "\n"
