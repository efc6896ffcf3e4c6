"""Logging setup for the ballot service."""
from __future__ import annotations

import logging.config
from pathlib import Path

import yaml  # type: ignore[import-untyped]

DEFAULT_LOGGING_CONFIG = Path(__file__).resolve().parents[2] / "configs" / "logging.yaml"


def configure_logging(config_path: Path | None = None, *, level: int = logging.INFO) -> None:
    """Apply the YAML dictConfig at ``config_path``, or a basic console setup when it is absent."""
    path = config_path or DEFAULT_LOGGING_CONFIG
    if not path.exists():
        logging.basicConfig(level=level)
        return

    with path.open("r", encoding="utf-8") as config_file:
        logging.config.dictConfig(yaml.safe_load(config_file))


__all__ = ["DEFAULT_LOGGING_CONFIG", "configure_logging"]
