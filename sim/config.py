"""Configuration loading from settings.yaml and .env."""

from __future__ import annotations

import os
from pathlib import Path

import yaml
from dotenv import load_dotenv


def load_config(
    config_dir: str | Path | None = None,
) -> dict:
    """Load settings.yaml and .env, return merged config dict."""
    if config_dir is None:
        config_dir = Path(__file__).resolve().parent.parent / "config"
    config_dir = Path(config_dir)

    # Load .env (silently skip if missing)
    env_path = config_dir / ".env"
    load_dotenv(env_path)

    settings_path = config_dir / "settings.yaml"
    if not settings_path.exists():
        raise FileNotFoundError(f"Config not found: {settings_path}")

    with open(settings_path, encoding="utf-8") as f:
        cfg = yaml.safe_load(f) or {}

    sim_cfg = cfg.setdefault("simulation", {})
    env_seed = os.getenv("ARC_ENGINE_SEED", "")
    if env_seed:
        sim_cfg["seed"] = env_seed

    storage = cfg.setdefault("storage", {})
    for key, env_name in (
        ("ledger_file", "ARC_ENGINE_LEDGER_FILE"),
        ("history_db", "ARC_ENGINE_HISTORY_DB"),
    ):
        value = os.getenv(env_name, "")
        if value:
            storage[key] = value

    return cfg
