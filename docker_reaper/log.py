import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
FALLBACK_LOG_FILE = os.path.expanduser("~/.docker-reaper.log")


def _rotating_handler(log_file) -> RotatingFileHandler:
    return RotatingFileHandler(
        log_file,
        maxBytes=10*1024*1024,  # 10MB
        backupCount=5
    )


def setup_logging(log_level: str = "INFO", log_file: Optional[Path] = None) -> logging.Logger:
    """Setup console logging, plus a rotating log file when one is configured."""
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    handlers = []

    if log_file is not None:
        try:
            os.makedirs(os.path.dirname(os.path.abspath(log_file)), exist_ok=True)
            handlers.append(_rotating_handler(log_file))
        except PermissionError:
            try:
                # Fallback to user home directory
                handlers.append(_rotating_handler(FALLBACK_LOG_FILE))
            except OSError:
                pass

    # Always add console handler for immediate feedback
    console_handler = logging.StreamHandler()
    console_handler.setLevel(numeric_level)
    handlers.append(console_handler)

    logging.basicConfig(
        level=numeric_level,
        format=LOG_FORMAT,
        handlers=handlers,
        force=True  # Override any existing configuration
    )

    return logging.getLogger("docker_reaper")
