import logging
import sys
from pathlib import Path
from logging.handlers import RotatingFileHandler
from typing import Optional, Any
from pythonjsonlogger import jsonlogger

from techprobe.core.constants import MAX_LOG_SIZE_BYTES


class Logger:
    """Unified logging system/manager for TechProbe."""

    _instance = None

    def __init__(self):
        self.logger = logging.getLogger("techprobe")
        self.logger.setLevel(logging.DEBUG)

    @classmethod
    def get_logger(cls):
        if cls._instance is None:
            cls._instance = Logger()
        return cls._instance.logger

    @classmethod
    def setup_logging(cls, log_dir: Optional[Path] = None, verbose: bool = False):
        """Configure logging with console, file, and JSON handlers."""
        logger = cls.get_logger()
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
        console_handler.setFormatter(logging.Formatter('%(message)s'))
        logger.addHandler(console_handler)

        if log_dir:
            log_dir = Path(log_dir)
            log_dir.mkdir(parents=True, exist_ok=True)

            # Human readable run log
            file_handler = RotatingFileHandler(
                log_dir / "master.log", maxBytes=MAX_LOG_SIZE_BYTES, backupCount=5, encoding='utf-8'
            )
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            ))
            logger.addHandler(file_handler)

            # Structured events (extra fields included)
            json_handler = RotatingFileHandler(
                log_dir / "events.json", maxBytes=MAX_LOG_SIZE_BYTES, backupCount=5, encoding='utf-8'
            )
            json_handler.setLevel(logging.DEBUG)
            json_handler.setFormatter(jsonlogger.JsonFormatter(
                '%(asctime)s %(name)s %(levelname)s %(message)s'
            ))
            logger.addHandler(json_handler)

    @classmethod
    def remove_handler(cls, handler):
        logger = cls.get_logger()
        logger.removeHandler(handler)
        handler.close()


def log(msg: str, level: str = "info", **extra: Any):
    """Convenience function for logging with optional structured data."""
    l = Logger.get_logger()
    log_func = getattr(l, level.lower(), l.info)
    log_func(msg, extra=extra)
