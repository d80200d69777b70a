"""
Configuration loader for lsext
Handles loading of the optional YAML file holding default options
"""

import os
import yaml
import logging
from pathlib import Path
from typing import Dict, Any, List, Optional
from dataclasses import dataclass, field

from .logger import DEFAULT_LEVEL, is_valid_level

logger = logging.getLogger(__name__)

LOCAL_CONFIG_NAME = "lsext.yml"


@dataclass
class Settings:
    """Default run options, before command line overrides"""
    include_all: bool = False
    aggregate: int = 0
    log_level: str = DEFAULT_LEVEL
    log_file: Optional[str] = None

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> 'Settings':
        """Create Settings from a configuration dictionary, skipping invalid values"""
        settings = cls()

        include_all = config.get('all')
        if include_all is not None:
            if isinstance(include_all, bool):
                settings.include_all = include_all
            else:
                logger.warning(f"Ignoring config value all={include_all!r}: expected true or false")

        aggregate = config.get('aggregate')
        if aggregate is not None:
            if isinstance(aggregate, int) and not isinstance(aggregate, bool) and aggregate >= 0:
                settings.aggregate = aggregate
            else:
                logger.warning(f"Ignoring config value aggregate={aggregate!r}: expected an integer >= 0")

        log_level = config.get('log_level')
        if log_level is not None:
            if isinstance(log_level, str) and is_valid_level(log_level):
                settings.log_level = log_level.upper()
            else:
                logger.warning(f"Ignoring config value log_level={log_level!r}: unknown level")

        log_file = config.get('log_file')
        if log_file is not None:
            if isinstance(log_file, str) and log_file:
                settings.log_file = log_file
            else:
                logger.warning(f"Ignoring config value log_file={log_file!r}: expected a path")

        return settings


def user_config_path() -> Path:
    """Per-user config file location"""
    config_home = os.environ.get("XDG_CONFIG_HOME")
    base = Path(config_home) if config_home else Path.home() / ".config"
    return base / "lsext" / "config.yml"


@dataclass
class ConfigLoader:
    """Configuration loader for lsext"""

    config_path: Optional[Path] = None
    config: Dict[str, Any] = field(default_factory=dict, init=False)
    source: Optional[Path] = field(default=None, init=False)

    def __post_init__(self):
        """Locate and load the first available config file"""
        for candidate in self.candidate_paths():
            if candidate.is_file():
                self.load_config(candidate)
                return
        logger.debug("No config file found, using defaults")

    def candidate_paths(self) -> List[Path]:
        """Config files in lookup order"""
        if self.config_path is not None:
            return [Path(self.config_path)]
        return [Path.cwd() / LOCAL_CONFIG_NAME, user_config_path()]

    def load_config(self, config_path: Path) -> None:
        """Load configuration from a YAML file"""
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                loaded = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Error loading config from {config_path}: {e}")
            self.config = {}
            return

        if not isinstance(loaded, dict):
            logger.error(f"Config file {config_path} must contain a mapping, ignoring it")
            self.config = {}
            return

        self.config = loaded
        self.source = config_path
        logger.info(f"Loaded config from {config_path}")
        logger.debug(f"Config keys: {list(self.config.keys())}")

    def get_settings(self) -> Settings:
        return Settings.from_config(self.config)


def load_settings(config_path: Optional[Path] = None) -> Settings:
    """Convenience function to resolve settings from the first available config file"""
    return ConfigLoader(config_path).get_settings()
