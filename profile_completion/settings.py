from __future__ import annotations

import logging
import os
from typing import List

from dotenv import load_dotenv
from pydantic import BaseModel, Field
from rich.logging import RichHandler


ENV_PREFIX = "PROFILE_COMPLETION_"


class Settings(BaseModel):
    """Runtime configuration for normalization and the CLI.

    Fields:
        home_nationalities: Nationality values that mark a local resident
            (cohort-A). Compared case-insensitively.
        log_level: Logging level name for the CLI.
    """

    home_nationalities: List[str] = Field(default_factory=lambda: ["日本", "japan"])
    log_level: str = "WARNING"


def load_settings() -> Settings:
    """Read settings from the environment (and a .env file if present)."""
    load_dotenv()
    raw = {}
    nationalities = os.environ.get(f"{ENV_PREFIX}HOME_NATIONALITIES")
    if nationalities:
        raw["home_nationalities"] = [n.strip() for n in nationalities.split(",") if n.strip()]
    level = os.environ.get(f"{ENV_PREFIX}LOG_LEVEL")
    if level:
        raw["log_level"] = level.strip().upper()
    return Settings(**raw)


def setup_logging(level: str = "WARNING") -> logging.Logger:
    logger = logging.getLogger("profile_completion")
    if not logger.handlers:
        logger.addHandler(RichHandler(show_path=False, markup=False))
    logger.setLevel(getattr(logging, level.upper(), logging.WARNING))
    return logger
