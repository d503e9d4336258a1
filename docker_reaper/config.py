import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

CONFIG_DIR = Path("/etc/docker-reaper")
CONFIG_FILE = CONFIG_DIR / "config.json"

DEFAULT_CONFIG = {
    "settle_delay_seconds": 10,
    "lock_file": "/var/run/docker-reaper.lock",
    "log_level": "INFO",
    "log_file": None,  # console only unless set
    "dry_run_mode": False,
}


def load_config(path: Optional[Path] = None) -> dict:
    """Loads the configuration from the JSON file, filling in defaults."""
    config_file = Path(path) if path is not None else CONFIG_FILE
    config = dict(DEFAULT_CONFIG)
    if not config_file.exists():
        return config
    try:
        with open(config_file, "r") as f:
            loaded = json.load(f)
    except (json.JSONDecodeError, IOError) as e:
        logger.warning(f"Ignoring unreadable config file {config_file}: {e}")
        return config
    if not isinstance(loaded, dict):
        logger.warning(f"Ignoring config file {config_file}: expected a JSON object")
        return config
    for key, value in loaded.items():
        if key not in DEFAULT_CONFIG:
            logger.warning(f"Unknown config key '{key}' in {config_file}")
            continue
        config[key] = value
    return config


@dataclass(frozen=True)
class ReaperOptions:
    """Settings for one invocation, fixed once the command line is parsed."""

    settle_delay: float = DEFAULT_CONFIG["settle_delay_seconds"]
    lock_file: Path = Path(DEFAULT_CONFIG["lock_file"])
    log_level: str = DEFAULT_CONFIG["log_level"]
    log_file: Optional[Path] = None
    dry_run: bool = False

    @classmethod
    def from_config(cls, config: dict, **overrides) -> "ReaperOptions":
        """Builds options from a loaded config; non-None overrides win."""
        values = dict(DEFAULT_CONFIG)
        # null in the config file means "use the default"
        values.update({key: value for key, value in config.items() if value is not None})
        values.update({key: value for key, value in overrides.items() if value is not None})
        try:
            settle_delay = float(values["settle_delay_seconds"])
        except (TypeError, ValueError):
            raise ValueError(f"settle delay must be a number, got {values['settle_delay_seconds']!r}") from None
        if settle_delay < 0:
            raise ValueError(f"settle delay must not be negative, got {settle_delay}")
        log_file = values["log_file"]
        return cls(
            settle_delay=settle_delay,
            lock_file=Path(values["lock_file"]),
            log_level=str(values["log_level"]).upper(),
            log_file=Path(log_file) if log_file else None,
            dry_run=bool(values["dry_run_mode"]),
        )
