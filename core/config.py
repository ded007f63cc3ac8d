from __future__ import annotations
import logging
import os
from typing import Any, Dict, Optional

import yaml

DEFAULT_CONFIG_PATH = "configs/config.yaml"
DEFAULT_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def load_cfg(path: Optional[str] = None) -> Dict[str, Any]:
    path = path or os.getenv("COMPOSER_CONFIG", DEFAULT_CONFIG_PATH)
    with open(path, "r", encoding="utf-8") as f:
        cfg = yaml.safe_load(f) or {}
    if not isinstance(cfg, dict):
        raise ValueError(f"Config root must be a mapping: {path}")
    return cfg


def setup_logging(cfg: Dict[str, Any]) -> None:
    log_cfg = cfg.get("logging", {}) or {}
    level_name = str(log_cfg.get("level", "INFO")).upper()
    level = getattr(logging, level_name, None)
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {level_name}")
    logging.basicConfig(level=level, format=log_cfg.get("format", DEFAULT_LOG_FORMAT))
