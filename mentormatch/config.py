"""
Runtime configuration.

Values come from, in order of precedence: process environment (after
.env is loaded), config.json in the project root, built-in defaults.
config.json keeps the nested layout of the previous deployment:

    {
      "dashscope": {"apiKey": "...", "model": "qwen-turbo",
                    "temperature": 0.7, "maxTokens": 2000},
      "data": {"teachersFile": "teachers.json", "casesDb": "data/cases.db"}
    }
"""

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict

from .errors import ConfigError
from .logger import get_logger
from .qwen import DASHSCOPE_ENDPOINT

logger = get_logger()


def load_config_file(path: Path) -> Dict[str, Any]:
    if not path.exists():
        logger.warning("config.json not found, using defaults", path=str(path))
        return {}
    try:
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        logger.error("Failed to read config file, using defaults", path=str(path), error=str(e))
        return {}
    if not isinstance(data, dict):
        logger.error("config.json must contain an object, using defaults", path=str(path))
        return {}
    return data


def _section(config: Dict[str, Any], name: str) -> Dict[str, Any]:
    value = config.get(name)
    return value if isinstance(value, dict) else {}


def _float(raw: Any, default: float) -> float:
    try:
        return float(raw)
    except (TypeError, ValueError):
        return default


def _int(raw: Any, default: int) -> int:
    try:
        return int(raw)
    except (TypeError, ValueError):
        return default


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _log_level(raw: Any) -> str:
    level = str(raw or "INFO").strip().upper()
    if level not in LOG_LEVELS:
        logger.warning("Unknown LOG_LEVEL, using INFO", value=raw)
        return "INFO"
    return level


@dataclass(frozen=True)
class Settings:
    root: Path

    # text generation
    api_key: str
    model: str
    endpoint: str
    temperature: float
    max_tokens: int
    timeout_s: float

    # data
    teachers_file: Path
    cases_db: Path

    # logging
    log_level: str
    log_dir: Path

    @classmethod
    def load(cls, root: Path | None = None) -> "Settings":
        root = root or Path.cwd()
        config = load_config_file(root / "config.json")
        dashscope = _section(config, "dashscope")
        data = _section(config, "data")

        def resolve(p: str) -> Path:
            path = Path(p)
            return path if path.is_absolute() else root / path

        return cls(
            root=root,
            api_key=os.getenv("DASHSCOPE_API_KEY") or dashscope.get("apiKey") or "",
            model=os.getenv("DASHSCOPE_MODEL") or dashscope.get("model") or "qwen-turbo",
            endpoint=os.getenv("DASHSCOPE_ENDPOINT") or dashscope.get("endpoint") or DASHSCOPE_ENDPOINT,
            temperature=_float(dashscope.get("temperature"), 0.7),
            max_tokens=_int(dashscope.get("maxTokens"), 2000),
            timeout_s=_float(os.getenv("DASHSCOPE_TIMEOUT") or dashscope.get("timeout"), 30.0),
            teachers_file=resolve(os.getenv("TEACHERS_FILE") or data.get("teachersFile") or "teachers.json"),
            cases_db=resolve(os.getenv("CASES_DB") or data.get("casesDb") or "data/cases.db"),
            log_level=_log_level(os.getenv("LOG_LEVEL")),
            log_dir=resolve(os.getenv("LOG_DIR") or "logs"),
        )

    def require_api_key(self) -> str:
        if not self.api_key:
            raise ConfigError(
                "DashScope API key not configured. Set dashscope.apiKey in "
                "config.json or the DASHSCOPE_API_KEY environment variable."
            )
        return self.api_key

    def public_view(self) -> Dict[str, Any]:
        """Settings safe to print; the API key is reduced to a flag."""
        return {
            "model": self.model,
            "endpoint": self.endpoint,
            "teachers_file": str(self.teachers_file),
            "cases_db": str(self.cases_db),
            "api_key_configured": bool(self.api_key),
        }
