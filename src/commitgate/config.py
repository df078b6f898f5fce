"""Gate configuration loader.

Looks for, in order: ``.commitgate.toml``, ``.commitgate.yaml``,
``.commitgate.yml`` and the ``[tool.commitgate]`` table of ``pyproject.toml``.
The first source found is validated against :data:`CONFIG_SCHEMA` and laid
over the defaults.
"""

import logging
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from jsonschema.validators import Draft202012Validator

logger = logging.getLogger(__name__)

KNOWN_CHECKS = ("ui-lint", "ci-config")

_TUPLE_FIELDS = ("checks", "ci_disallowed_extensions", "ci_tool_version_args", "ci_verify_command")

_STRING_LIST = {"type": "array", "items": {"type": "string", "minLength": 1}}

CONFIG_SCHEMA: dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "checks": {
            "type": "array",
            "items": {"enum": list(KNOWN_CHECKS)},
            "uniqueItems": True,
        },
        "ui_dir": {"type": "string", "minLength": 1},
        "ui_linter": {"type": "string", "minLength": 1},
        "ci_config_dir": {"type": "string", "minLength": 1},
        "ci_config_extension": {"type": "string", "pattern": r"^\.[A-Za-z0-9]+$"},
        "ci_disallowed_extensions": {
            "type": "array",
            "items": {"type": "string", "pattern": r"^\.[A-Za-z0-9]+$"},
        },
        "ci_tool": {"type": "string", "minLength": 1},
        "ci_tool_version_args": _STRING_LIST,
        "ci_tool_min_version": {"type": "string", "pattern": r"^\d+(\.\d+)*"},
        "ci_verify_command": {**_STRING_LIST, "minItems": 1},
        "command_timeout": {"type": ["number", "null"], "exclusiveMinimum": 0},
    },
}


class ConfigError(RuntimeError):
    """Raised when a configuration file is malformed or invalid."""


@dataclass(frozen=True)
class GateConfig:
    """Adjustable constants for the pre-commit gate."""

    checks: tuple[str, ...] = KNOWN_CHECKS
    ui_dir: str = "ui"
    ui_linter: str = "node_modules/.bin/lint-staged"
    ci_config_dir: str = ".circleci"
    ci_config_extension: str = ".yml"
    ci_disallowed_extensions: tuple[str, ...] = (".yaml",)
    ci_tool: str = "circleci"
    ci_tool_version_args: tuple[str, ...] = ("version", "--skip-update-check")
    ci_tool_min_version: str = "0.1.5575"
    ci_verify_command: tuple[str, ...] = ("make", "ci-verify")
    command_timeout: float | None = None
    source: Path | None = field(default=None, compare=False)

    @classmethod
    def from_dict(cls, data: dict[str, Any], source: Path | None = None) -> "GateConfig":
        """Validate *data* and overlay it on the defaults."""
        normalised = {str(k).replace("-", "_"): v for k, v in data.items()}

        validator = Draft202012Validator(CONFIG_SCHEMA)
        errors = sorted(validator.iter_errors(normalised), key=lambda e: [str(p) for p in e.path])
        if errors:
            messages = [
                f"{'.'.join(str(p) for p in e.path)}: {e.message}" if e.path else e.message
                for e in errors
            ]
            where = source or "configuration"
            raise ConfigError(
                f"Invalid config in {where}:\n" + "\n".join(f"  - {msg}" for msg in messages)
            )

        values = {k: tuple(v) if k in _TUPLE_FIELDS else v for k, v in normalised.items()}
        return cls(**values, source=source)

    def tool_version_argv(self) -> list[str]:
        return [self.ci_tool, *self.ci_tool_version_args]


def _load_toml(path: Path) -> dict[str, Any]:
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Malformed TOML config at {path}: {e}") from e


def _load_yaml(path: Path) -> dict[str, Any]:
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Malformed YAML config at {path}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid config structure in {path}: expected a mapping")
    return data


def _read_source(path: Path) -> dict[str, Any]:
    if path.name == "pyproject.toml":
        table = _load_toml(path).get("tool", {}).get("commitgate", {})
        if not isinstance(table, dict):
            raise ConfigError(f"Invalid config structure in {path}: [tool.commitgate] must be a table")
        return table
    if path.suffix == ".toml":
        return _load_toml(path)
    if path.suffix in (".yaml", ".yml"):
        return _load_yaml(path)
    raise ConfigError(f"Unsupported config format: {path}")


def find_config_file(repo_root: Path) -> Path | None:
    """Return the first config source present under *repo_root*."""
    for name in (".commitgate.toml", ".commitgate.yaml", ".commitgate.yml"):
        candidate = repo_root / name
        if candidate.is_file():
            return candidate

    pyproject = repo_root / "pyproject.toml"
    if pyproject.is_file():
        data = _load_toml(pyproject)
        if "commitgate" in data.get("tool", {}):
            return pyproject
    return None


def load_config(repo_root: Path, path: Path | None = None) -> GateConfig:
    """Load gate configuration for *repo_root*.

    Args:
        repo_root: Repository root searched for config files
        path: Explicit config file; must exist when given

    Returns:
        GateConfig (defaults when no source is found)

    Raises:
        ConfigError: If the config file is missing, malformed or invalid
    """
    if path is not None:
        if not path.is_file():
            raise ConfigError(f"Config file not found: {path}")
        source: Path | None = path
    else:
        source = find_config_file(repo_root)

    if source is None:
        logger.debug("no config file under %s; using defaults", repo_root)
        return GateConfig()

    logger.debug("loading config from %s", source)
    return GateConfig.from_dict(_read_source(source), source=source)
