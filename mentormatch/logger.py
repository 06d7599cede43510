"""
Structured logging for MentorMatch.

One process-wide logger writes to stderr and to a daily file under the
log directory. Keyword arguments passed to a log call are appended to
the line as a JSON context blob. The same object keeps counters for the
matching pipeline: requests served, DashScope calls made, how the
relevance oracle fared and which tier filled each slot.

stdout is left alone because the CLI prints its JSON results there.
"""

import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

CONSOLE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
FILE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _new_metrics() -> Dict[str, Any]:
    return {
        "match_requests": 0,
        "llm_calls": 0,
        "oracle_calls": 0,
        "oracle_successes": 0,
        "oracle_failures": 0,
        "errors_by_type": {},
        "candidates_by_tier": {},
    }


def _bump(counter: Dict[str, int], key: str, by: int = 1):
    counter[key] = counter.get(key, 0) + by


class StructuredLogger:
    """Wrapper over a stdlib logger with JSON context and pipeline counters."""

    def __init__(
        self,
        name: str = "mentormatch",
        level: str = "INFO",
        log_dir: Optional[Path] = None,
        enable_file: bool = True,
        enable_console: bool = True,
    ):
        self.logger = logging.getLogger(name)
        self.logger.propagate = False
        self.metrics = _new_metrics()
        self.configure(level, log_dir, enable_file, enable_console)

    def configure(
        self,
        level: str = "INFO",
        log_dir: Optional[Path] = None,
        enable_file: bool = True,
        enable_console: bool = True,
    ):
        """
        Swap the handlers for a new level and destination.

        Called once the CLI knows the configured log directory. Counters
        survive reconfiguration. The file handler always records DEBUG.
        """
        numeric_level = getattr(logging, level.upper())
        self.logger.setLevel(logging.DEBUG if enable_file else numeric_level)
        for handler in list(self.logger.handlers):
            self.logger.removeHandler(handler)
            handler.close()

        if enable_console:
            console = logging.StreamHandler(sys.stderr)
            console.setLevel(numeric_level)
            console.setFormatter(logging.Formatter(CONSOLE_FORMAT, DATE_FORMAT))
            self.logger.addHandler(console)

        if enable_file:
            log_dir = Path(log_dir) if log_dir is not None else Path("logs")
            log_dir.mkdir(parents=True, exist_ok=True)
            log_file = log_dir / f"mentormatch_{datetime.now():%Y%m%d}.log"
            file_handler = logging.FileHandler(log_file, encoding="utf-8")
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(logging.Formatter(FILE_FORMAT, DATE_FORMAT))
            self.logger.addHandler(file_handler)

    def debug(self, message: str, **context):
        self._log(logging.DEBUG, message, context)

    def info(self, message: str, **context):
        self._log(logging.INFO, message, context)

    def warning(self, message: str, **context):
        self._log(logging.WARNING, message, context)

    def error(self, message: str, **context):
        self._log(logging.ERROR, message, context)

    def _log(self, level: int, message: str, context: Dict[str, Any]):
        if context:
            # Mentor names and directions are Chinese; keep them readable.
            message = f"{message} | Context: {json.dumps(context, ensure_ascii=False, default=str)}"
        self.logger.log(level, message)

    # Pipeline counters

    def record_match_request(self):
        self.metrics["match_requests"] += 1

    def record_llm_call(self):
        self.metrics["llm_calls"] += 1

    def record_oracle_call(self):
        self.metrics["oracle_calls"] += 1

    def record_oracle_success(self):
        self.metrics["oracle_successes"] += 1

    def record_oracle_failure(self, error_type: str):
        self.metrics["oracle_failures"] += 1
        _bump(self.metrics["errors_by_type"], error_type)

    def record_candidates(self, tier: str, count: int):
        """Add `count` short-list slots filled by `tier`."""
        _bump(self.metrics["candidates_by_tier"], tier, count)

    def get_metrics(self) -> Dict[str, Any]:
        """Snapshot of the counters; adds oracle_success_rate once the oracle has been called."""
        snapshot = dict(self.metrics)
        snapshot["errors_by_type"] = dict(self.metrics["errors_by_type"])
        snapshot["candidates_by_tier"] = dict(self.metrics["candidates_by_tier"])
        if snapshot["oracle_calls"]:
            snapshot["oracle_success_rate"] = round(snapshot["oracle_successes"] / snapshot["oracle_calls"], 3)
        return snapshot

    def log_metrics_summary(self):
        """Write the counters to the log at DEBUG level."""
        m = self.get_metrics()
        rate = m.get("oracle_success_rate", 0) * 100
        lines = [
            "Session metrics",
            f"  match requests: {m['match_requests']}",
            f"  DashScope calls: {m['llm_calls']}",
            f"  Oracle: {m['oracle_successes']}/{m['oracle_calls']} ({rate:.1f}% success)",
        ]
        lines += [f"  tier {tier}: {count}" for tier, count in m["candidates_by_tier"].items()]
        lines += [f"  error {kind}: {count}" for kind, count in m["errors_by_type"].items()]
        for line in lines:
            self.debug(line)


_global_logger: Optional[StructuredLogger] = None


def get_logger(name: str = "mentormatch", level: str = "INFO", **kwargs) -> StructuredLogger:
    """Return the process-wide logger, creating it on first use."""
    global _global_logger
    if _global_logger is None:
        _global_logger = StructuredLogger(name=name, level=level, **kwargs)
    return _global_logger


def reset_logger():
    """Forget the process-wide logger (tests only)."""
    global _global_logger
    _global_logger = None
