"""Per-directory settings: default language and contest (.codejudge_py.local)."""

import json
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Optional


CONFIG_NAME = ".codejudge_py.local"


@dataclass
class LocalConfig:
    """
    Settings for the solutions kept under one directory tree.

    ``default_lang`` indexes the problem's language list; ``contest_id``
    routes problem lookups and submissions through the contest endpoints.
    """

    default_lang: int = 0
    contest_id: Optional[str] = None

    @classmethod
    def load(cls, path: Optional[Path] = None) -> Optional["LocalConfig"]:
        """Read the nearest local config, or None when there is none or it is broken."""
        path = path or cls.find_config()
        if path is None or not path.exists():
            return None

        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            known = {f.name for f in fields(cls)}
            config = cls(**{k: v for k, v in data.items() if k in known})
            config.default_lang = int(config.default_lang)
        except (json.JSONDecodeError, OSError, AttributeError, TypeError, ValueError):
            return None
        return config

    def save(self, path: Optional[Path] = None) -> Path:
        path = path or self.find_config() or Path.cwd() / CONFIG_NAME
        path.write_text(json.dumps(asdict(self), indent=2), encoding="utf-8")
        return path

    @staticmethod
    def find_config(start: Optional[Path] = None) -> Optional[Path]:
        """Nearest CONFIG_NAME in ``start`` (default: cwd) or any parent."""
        start = start or Path.cwd()
        for directory in (start, *start.parents):
            candidate = directory / CONFIG_NAME
            if candidate.exists():
                return candidate
        return None
