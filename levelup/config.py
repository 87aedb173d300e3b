"""
levelup.config — YAML Configuration Loader
===========================================

Reads ``config.yaml`` for **non-secret** settings (display name, Whop API
base URL, token lifetime, page sizes).  Secrets and deployment URLs
(``JWT_SECRET``, ``WHOP_CLIENT_SECRET``, ``DATABASE_URL`` …) live in the
environment / ``.env``.

Usage::

    from levelup.config import load_config

    cfg = load_config()          # reads ./config.yaml by default
    print(cfg.app_name)          # "LevelUp"
    print(cfg.token_ttl_days)    # 7
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import yaml

DEFAULT_WHOP_API_URL = "https://api.whop.com/v2"


# ---------------------------------------------------------------------------
# Typed settings object
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class LevelUpConfig:
    """Immutable configuration loaded from ``config.yaml``."""

    # Identity
    app_name: str

    # Whop
    whop_api_url: str = DEFAULT_WHOP_API_URL

    # Auth
    token_ttl_days: int = 7  # Lifetime of issued bearer tokens

    # Display
    leaderboard_page_size: int = 50
    activity_page_size: int = 20


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def load_config(path: str | Path = "config.yaml") -> LevelUpConfig:
    """Read *path* and return a :class:`LevelUpConfig` instance.

    Parameters
    ----------
    path:
        Filesystem path to the YAML configuration file.
        Defaults to ``config.yaml`` in the current working directory.

    Raises
    ------
    FileNotFoundError
        If the YAML file doesn't exist.
    KeyError
        If a required key is missing from the YAML file.
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Configuration file not found: {config_path.resolve()}\n"
            "Hint: copy config.yaml.example → config.yaml and edit it."
        )

    with open(config_path, encoding="utf-8") as fh:
        raw: dict = yaml.safe_load(fh) or {}

    return LevelUpConfig(
        app_name=raw["app_name"],
        whop_api_url=str(raw.get("whop_api_url") or DEFAULT_WHOP_API_URL).rstrip("/"),
        token_ttl_days=int(raw.get("token_ttl_days", 7)),
        leaderboard_page_size=int(raw.get("leaderboard_page_size", 50)),
        activity_page_size=int(raw.get("activity_page_size", 20)),
    )
