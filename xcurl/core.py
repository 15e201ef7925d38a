"""xcurl core - profile loading and environment resolution."""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any

import yaml
from dotenv import dotenv_values

from xcurl.errors import ConfigError

GLOBAL_DIR = Path.home() / ".xcurl"
GLOBAL_CONFIG = GLOBAL_DIR / "config.yaml"

CWD_CONFIG_CANDIDATES = [
    ".xcurl.yaml",
    ".xcurl.yml",
    "xcurl.yaml",
    "xcurl.yml",
]


def resolve_path(
    candidates: list[Path],
    default: Path | None = None,
) -> Path | None:
    """Return the first existing path from candidates, else default."""
    for p in candidates:
        if p.exists():
            return p.resolve()
    return default


def resolve_profile_path(name: str) -> Path:
    return GLOBAL_DIR / f"{name}.yaml"


def resolve_config_path(
    config_file: str | None = None,
    profile: str | None = None,
) -> Path | None:
    """Find the profile file to use.

    Resolution order:
      1. Explicit -c flag (hard - a missing file is an error)
      2. -p NAME -> ~/.xcurl/NAME.yaml (hard)
      3. .xcurl.yaml (variants) in CWD
      4. ~/.xcurl/config.yaml
    """
    if config_file:
        path = resolve_path([Path(config_file)])
        if path is None:
            raise ConfigError(f"config file not found: {config_file}")
        return path
    if profile:
        path = resolve_path([resolve_profile_path(profile)])
        if path is None:
            raise ConfigError(f"profile '{profile}' not found: {resolve_profile_path(profile)}")
        return path
    return resolve_path([Path(c) for c in CWD_CONFIG_CANDIDATES] + [GLOBAL_CONFIG])


def load_config(config_path: str | Path | None) -> dict:
    """Load a YAML profile and return its "common" section.

    Stores '_config_dir' so env_file can be resolved relative to the
    profile. A missing path gives empty defaults.
    """
    if config_path is None:
        return {"common": {}, "_config_dir": None}
    path = Path(config_path)
    if not path.exists():
        return {"common": {}, "_config_dir": None}
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"cannot read {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid YAML in {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: top level must be a mapping")
    common = data.get("common") or {}
    if not isinstance(common, dict):
        raise ConfigError(f"{path}: 'common' must be a mapping")
    headers = common.get("headers") or {}
    if not isinstance(headers, dict):
        raise ConfigError(f"{path}: 'common.headers' must be a mapping")
    query = common.get("query") or {}
    if not isinstance(query, dict):
        raise ConfigError(f"{path}: 'common.query' must be a mapping")
    return {"common": common, "_config_dir": path.resolve().parent}


def load_env(env_file: str | None, base_dir: str | Path | None = None) -> dict[str, str]:
    """Load .env file and merge with os.environ.

    .env values take precedence over os.environ.
    """
    env = dict(os.environ)
    if env_file:
        dotenv_path = Path(base_dir or ".") / env_file
        if dotenv_path.exists():
            dotenv_vars = dotenv_values(str(dotenv_path))
            env.update({k: v for k, v in dotenv_vars.items() if v is not None})
    return env


def resolve_value(value: Any, env: dict[str, str]) -> Any:
    """Resolve $VAR and ${VAR} references in a string value.

    Unknown references are left as written.
    """
    if not isinstance(value, str):
        return value

    def _replace(m: re.Match) -> str:
        var_name = m.group(1) or m.group(2)
        return env.get(var_name, m.group(0))

    return re.sub(r"\$\{([^}]+)\}|\$([A-Za-z_][A-Za-z0-9_]*)", _replace, value)


def _scalar(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    return str(value)


def flatten_query(obj: Any, prefix: str = "") -> list[tuple[str, str]]:
    """Flatten a query document into pairs using bracket notation.

    {"a": 1, "f": {"s": ["x", "y"]}} -> [("a", "1"), ("f[s][0]", "x"), ("f[s][1]", "y")]
    """
    pairs: list[tuple[str, str]] = []
    if isinstance(obj, dict):
        for key, value in obj.items():
            name = f"{prefix}[{key}]" if prefix else str(key)
            pairs.extend(flatten_query(value, name))
    elif isinstance(obj, list):
        for i, value in enumerate(obj):
            pairs.extend(flatten_query(value, f"{prefix}[{i}]"))
    elif prefix:
        pairs.append((prefix, _scalar(obj)))
    return pairs


def build_defaults(config: dict) -> dict:
    """Turn a loaded profile into request defaults.

    Returns {"headers": {...}, "query": [(k, v), ...], "theme": ..., "timeout": ...}
    with $VAR references in header values resolved.
    """
    common = config.get("common", {})
    env = load_env(common.get("env_file"), config.get("_config_dir"))

    headers = {
        str(k): _scalar(resolve_value(v, env)) for k, v in (common.get("headers") or {}).items()
    }
    query = flatten_query(common.get("query") or {})
    return {
        "headers": headers,
        "query": query,
        "theme": common.get("theme"),
        "timeout": common.get("timeout"),
    }
