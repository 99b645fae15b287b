"""Runtime settings read from environment variables."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Mapping, Optional

from .conversation import DEFAULT_HISTORY_FILE
from .errors import ConfigError

DEFAULT_TIMEOUT = 60.0


@dataclass
class Settings:
    history_file: Path = Path(DEFAULT_HISTORY_FILE)
    # provider name -> base URL override
    base_urls: Dict[str, str] = field(default_factory=dict)
    timeout: float = DEFAULT_TIMEOUT
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ

        base_urls = {}
        for name, var in (("openai", "OPENAI_BASE_URL"), ("deepseek", "DEEPSEEK_BASE_URL")):
            if env.get(var):
                base_urls[name] = env[var]

        raw_timeout = env.get("NERDCHAT_TIMEOUT")
        timeout = DEFAULT_TIMEOUT
        if raw_timeout:
            try:
                timeout = float(raw_timeout)
            except ValueError:
                raise ConfigError(f"NERDCHAT_TIMEOUT must be a number of seconds, got {raw_timeout!r}")
            if timeout <= 0:
                raise ConfigError("NERDCHAT_TIMEOUT must be positive")

        log_level = env.get("NERDCHAT_LOG_LEVEL", "WARNING").upper()
        if not isinstance(logging.getLevelName(log_level), int):
            raise ConfigError(f"Unknown log level: {log_level}")

        return cls(
            history_file=Path(env.get("NERDCHAT_HISTORY_FILE") or DEFAULT_HISTORY_FILE),
            base_urls=base_urls,
            timeout=timeout,
            log_level=log_level,
        )
