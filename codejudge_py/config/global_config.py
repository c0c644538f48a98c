"""Global configuration management (~/.codejudge_py.global)."""

import json
import os
import pickle
from pathlib import Path
from typing import Optional
from dataclasses import dataclass

from ..client.client import JudgeClient


BASE_URL_ENV = "CODEJUDGE_BASE_URL"


@dataclass
class GlobalConfig:
    """
    Global configuration: judge service address and polling cadence.
    Stored at ~/.codejudge_py.global. Session cookies live in a separate
    pickle file next to it.
    """

    base_url: str = JudgeClient.DEFAULT_BASE_URL
    poll_interval: float = 0.5
    first_poll_delay: float = 0.3

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "GlobalConfig":
        """Load global config from file, applying the environment override."""
        if path is None:
            path = Path.home() / ".codejudge_py.global"

        config = cls()
        if path.exists():
            try:
                with open(path, "r", encoding="utf-8") as f:
                    data = json.load(f)
                config = cls(
                    base_url=data.get("base_url", config.base_url),
                    poll_interval=float(data.get("poll_interval", config.poll_interval)),
                    first_poll_delay=float(
                        data.get("first_poll_delay", config.first_poll_delay)
                    ),
                )
            except (json.JSONDecodeError, IOError, TypeError, ValueError):
                config = cls()

        if os.environ.get(BASE_URL_ENV):
            config.base_url = os.environ[BASE_URL_ENV]
        return config

    def save(self, path: Optional[Path] = None) -> None:
        """Save global config to file."""
        if path is None:
            path = Path.home() / ".codejudge_py.global"

        data = {
            "base_url": self.base_url,
            "poll_interval": self.poll_interval,
            "first_poll_delay": self.first_poll_delay,
        }
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)

    @staticmethod
    def save_cookies(cookies, path: Optional[Path] = None) -> None:
        """Save cookies using pickle."""
        if path is None:
            path = Path.home() / ".codejudge_py.cookies"

        with open(path, "wb") as f:
            pickle.dump(cookies, f)

    @staticmethod
    def load_cookies(path: Optional[Path] = None):
        """Load cookies using pickle."""
        if path is None:
            path = Path.home() / ".codejudge_py.cookies"

        if not path.exists():
            return None

        try:
            with open(path, "rb") as f:
                return pickle.load(f)
        except (EOFError, pickle.UnpicklingError):
            return None
