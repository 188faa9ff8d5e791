"""Configuration for stationv."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field

from stationv.llm import LLMConfig


@dataclass(frozen=True)
class Config:
    """Runtime configuration, populated from environment variables."""

    llm: LLMConfig = field(default_factory=LLMConfig)
    data_dir: str = "~/.stationv"
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls) -> Config:
        log_level = os.environ.get("STATIONV_LOG_LEVEL", cls.log_level).upper()
        # Only level names known to logging are kept.
        if log_level not in logging.getLevelNamesMapping():
            log_level = cls.log_level
        return cls(
            llm=LLMConfig.from_env(),
            data_dir=os.environ.get("STATIONV_DATA_DIR", cls.data_dir),
            log_level=log_level,
        )
