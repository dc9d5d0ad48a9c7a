import json
import os
from pathlib import Path
from typing import Any

from loguru import logger

_CONFIG_ENV_KEYS = ("ROCKETPOOL_PATHS_CONFIG_PATH", "ROCKETPOOL_PATHS_CONFIG")
_DEFAULT_CONFIG_FILENAME = "config.json"
_ROCKETPOOL_KEY = "rocketpool"


def _find_project_root(start: Path) -> Path | None:
    cur = start.resolve()
    for parent in [cur, *cur.parents]:
        if (parent / "pyproject.toml").exists():
            return parent
    return None


def _project_root() -> Path | None:
    return _find_project_root(Path.cwd()) or _find_project_root(Path(__file__).parent)


def resolve_config_path(path: str | Path | None = None) -> Path:
    if path is not None:
        return Path(path).expanduser()

    env_path = next(
        (os.getenv(k, "").strip() for k in _CONFIG_ENV_KEYS if os.getenv(k)), ""
    )
    if env_path:
        p = Path(env_path).expanduser()
        if p.is_absolute():
            return p
        root = _project_root()
        return (root / p) if root else p

    root = _project_root()
    return (root / _DEFAULT_CONFIG_FILENAME) if root else Path(_DEFAULT_CONFIG_FILENAME)


def load_config_json(
    path: str | Path | None = None, *, require_exists: bool = False
) -> dict[str, Any]:
    cfg_path = resolve_config_path(path)
    if not cfg_path.exists():
        if require_exists:
            raise FileNotFoundError(f"Config file not found: {cfg_path}")
        return {}
    try:
        return json.loads(cfg_path.read_text())
    except (OSError, json.JSONDecodeError) as exc:
        logger.warning(f"Ignoring unreadable config file {cfg_path}: {exc}")
        return {}


CONFIG: dict[str, Any] = load_config_json()


def set_config(config: dict[str, Any]) -> None:
    """Replace the global CONFIG dict in-place.

    This allows code that imported CONFIG at module import time to see updates.
    """
    CONFIG.clear()
    CONFIG.update(config)


def load_config(
    path: str | Path | None = None, *, require_exists: bool = False
) -> None:
    """Load config from disk into the global CONFIG dict."""
    set_config(load_config_json(path, require_exists=require_exists))


def set_rpc_urls(rpc_urls):
    if "strategy" not in CONFIG:
        CONFIG["strategy"] = {}
    CONFIG["strategy"]["rpc_urls"] = rpc_urls


def get_rpc_urls() -> dict[str, Any]:
    return CONFIG.get("strategy", {}).get("rpc_urls", {})


def get_rocket_storage_address(chain_id: int) -> str | None:
    overrides = CONFIG.get(_ROCKETPOOL_KEY, {}).get("storage_address", {})
    value = overrides.get(str(chain_id))
    if value is None:
        value = overrides.get(chain_id)  # allow int keys
    if value:
        return str(value).strip()
    return None


def get_minipool_bytecode_override() -> str | None:
    value = CONFIG.get(_ROCKETPOOL_KEY, {}).get("minipool_bytecode")
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None
