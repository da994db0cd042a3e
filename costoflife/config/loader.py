"""
Configuration management and loading.

Handles where the ledger lives and how searches behave.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

import typer
import yaml

from costoflife.storage.ledger import DEFAULT_SEARCH_THRESHOLD

APP_NAME = "costoflife"
DEFAULT_LOG_FILENAME = "costoflife.data.txt"


def default_data_dir() -> Path:
    """Per-user application directory for the ledger."""
    return Path(typer.get_app_dir(APP_NAME))


@dataclass(frozen=True)
class AppConfig:
    """Application settings."""
    data_dir: Path = field(default_factory=default_data_dir)
    log_filename: str = DEFAULT_LOG_FILENAME
    search_threshold: int = DEFAULT_SEARCH_THRESHOLD

    def __post_init__(self):
        """Validate file name and threshold."""
        if not self.log_filename or not self.log_filename.strip():
            raise ValueError("log_filename cannot be empty")
        if Path(self.log_filename).name != self.log_filename:
            raise ValueError(f"log_filename must be a file name, not a path: {self.log_filename}")
        if not 0 <= self.search_threshold <= 100:
            raise ValueError("search_threshold must be between 0 and 100")

    @property
    def ledger_path(self) -> Path:
        """Full path of the ledger file."""
        return self.data_dir / self.log_filename


def default_config() -> AppConfig:
    return AppConfig()


def load_config(path: str) -> AppConfig:
    """Load and validate the configuration from a YAML file.

    Unknown keys and wrong types are rejected rather than ignored. An
    empty file gives the defaults.

    Args:
        path: Path to YAML configuration file

    Returns:
        Validated AppConfig object

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If YAML is invalid
        ValueError: If configuration is invalid
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(config_path, 'r', encoding='utf-8') as f:
        try:
            raw_config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise yaml.YAMLError(f"Invalid YAML in config file {path}: {e}")

    if raw_config is None:
        return default_config()
    if not isinstance(raw_config, dict):
        raise ValueError("Configuration must be a dictionary")

    allowed_keys = {'data_dir', 'log_filename', 'search_threshold'}
    unknown_keys = set(raw_config.keys()) - allowed_keys
    if unknown_keys:
        raise ValueError(f"Unknown configuration keys: {unknown_keys}")

    kwargs: Dict[str, object] = {}

    data_dir = _get_str(raw_config, 'data_dir')
    if data_dir is not None:
        kwargs['data_dir'] = Path(data_dir).expanduser()

    log_filename = _get_str(raw_config, 'log_filename')
    if log_filename is not None:
        kwargs['log_filename'] = log_filename

    if 'search_threshold' in raw_config:
        threshold = raw_config['search_threshold']
        # bool is an int subclass
        if isinstance(threshold, bool) or not isinstance(threshold, int):
            raise ValueError("'search_threshold' must be an integer")
        kwargs['search_threshold'] = threshold

    return AppConfig(**kwargs)


def _get_str(data: Dict, key: str) -> Optional[str]:
    """Read an optional non-empty string value."""
    if key not in data:
        return None
    value = data[key]
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"'{key}' must be a non-empty string")
    return value
