"""Static configuration for logpoints.

Operator settings (database location, logging, query defaults) live in a
single JSON file. Environment variables, optionally loaded from a .env file,
can point at a different config file or database.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))

# Default config location; LOGPOINTS_CONFIG overrides it.
CONFIG_PATH = os.path.join(PROJECT_ROOT, "config.json")

# Default database location; config.json db_path or LOGPOINTS_DB_PATH override it.
DB_PATH = os.path.join(PROJECT_ROOT, "logpoints.db")


@dataclass(frozen=True)
class Settings:
    """Resolved settings consumed by the CLI."""

    db_path: str
    logging: dict = field(default_factory=dict)
    default_workspace: Optional[str] = None
    default_user: Optional[str] = None


def _load_json_config(path: str) -> dict:
    """Load config.json with a flat, operator-friendly schema."""

    if not os.path.exists(path):
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, "r", encoding="utf-8") as handle:
        return json.load(handle)


def _resolve_path(path: str) -> str:
    if os.path.isabs(path):
        return path
    return os.path.join(PROJECT_ROOT, path)


def load_settings(config_path: Optional[str] = None) -> Settings:
    """Build Settings from .env, the environment and config.json."""

    load_dotenv()
    path = config_path or os.getenv("LOGPOINTS_CONFIG") or CONFIG_PATH
    config = _load_json_config(path)

    db_path = os.getenv("LOGPOINTS_DB_PATH") or config.get("db_path") or DB_PATH
    query = config.get("query", {})
    return Settings(
        db_path=_resolve_path(db_path),
        logging=config.get("logging", {}),
        default_workspace=query.get("workspace_id"),
        default_user=query.get("user_id"),
    )
