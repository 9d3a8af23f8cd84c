"""
Logging configuration for Tourmail.

Two files under log/:
- <timestamp>.log    everything from the tourmail namespace for this run
                     (last `logging.keep` runs kept)
- delivery.log       send outcomes only, appended across runs, so the
                     history of what went to whom survives log pruning

The console gets coloured output in dev mode only. httpx/httpcore request
lines are capped at WARNING since every SendGrid call would log one.
"""

from __future__ import annotations

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .config import Config

NAMESPACE = "tourmail"
DELIVERY_FILE = "delivery.log"

# Loggers whose records describe a send attempt or a skipped trigger
DELIVERY_LOGGERS = ("tourmail.dispatch", "tourmail.processor", "tourmail.manual")

_RUN_LOG_GLOB = "????-??-??_??????.log"
_NOISY_LOGGERS = ("httpx", "httpcore")


class TourmailFormatter(logging.Formatter):
    """timestamp  LEVEL  [logger]  message, with the tourmail. prefix dropped."""

    FMT = "%(asctime)s  %(levelname)-7s [%(name)-12s] %(message)s"
    DATE_FMT = "%Y-%m-%d %H:%M:%S"

    def format(self, record: logging.LogRecord) -> str:
        record = logging.makeLogRecord(record.__dict__)
        record.name = record.name.removeprefix(NAMESPACE + ".")
        return super().format(record)


class ColorFormatter(TourmailFormatter):
    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        color = self.COLORS.get(record.levelname)
        return f"{color}{line}{self.RESET}" if color else line


class DeliveryFilter(logging.Filter):
    """Passes send outcomes: everything from the delivery loggers at INFO and up."""

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno >= logging.INFO and record.name.startswith(DELIVERY_LOGGERS)


def _prune_run_logs(log_dir: Path, keep: int) -> None:
    """Delete the oldest per-run files so that `keep` remain once the new one exists."""
    runs = sorted(log_dir.glob(_RUN_LOG_GLOB))
    for old in runs[: max(0, len(runs) - keep + 1)]:
        try:
            old.unlink()
        except OSError:
            pass


def _file_handler(path: Path, level: int) -> logging.FileHandler:
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setFormatter(TourmailFormatter(fmt=TourmailFormatter.FMT, datefmt=TourmailFormatter.DATE_FMT))
    handler.setLevel(level)
    return handler


def configure_logging(config: "Config") -> Path:
    """Install handlers on the tourmail logger. Returns this run's log file."""
    log_dir = config.log_dir
    log_dir.mkdir(parents=True, exist_ok=True)
    _prune_run_logs(log_dir, config.log_keep)

    level = getattr(logging, config.log_level, logging.INFO)
    run_file = log_dir / (datetime.now().strftime("%Y-%m-%d_%H%M%S") + ".log")

    delivery = _file_handler(log_dir / DELIVERY_FILE, logging.INFO)
    delivery.addFilter(DeliveryFilter())
    handlers: list[logging.Handler] = [_file_handler(run_file, level), delivery]

    if config.dev_mode:
        console = logging.StreamHandler(sys.stdout)
        console.setFormatter(ColorFormatter(fmt=TourmailFormatter.FMT, datefmt=TourmailFormatter.DATE_FMT))
        console.setLevel(level)
        handlers.append(console)

    app_logger = logging.getLogger(NAMESPACE)
    # Delivery lines must reach delivery.log even when the run log is quieter
    app_logger.setLevel(min(level, logging.INFO))
    for old in app_logger.handlers[:]:
        app_logger.removeHandler(old)
        old.close()
    for h in handlers:
        app_logger.addHandler(h)
    app_logger.propagate = False

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return run_file
