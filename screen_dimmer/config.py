"""
Configuration Management
========================
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .controller import DEFAULT_DEBOUNCE_MS
from .redshift import DEFAULT_COMMAND, DEFAULT_METHOD, DEFAULT_TIMEOUT

logger = logging.getLogger(__name__)


@dataclass
class RedshiftConfig:
    """How redshift is invoked."""
    command: str = DEFAULT_COMMAND
    method: str = DEFAULT_METHOD
    timeout: float = DEFAULT_TIMEOUT


@dataclass
class TimingConfig:
    """Debounce timing."""
    debounce_ms: int = DEFAULT_DEBOUNCE_MS


@dataclass
class GUIConfig:
    """GUI configuration."""
    theme: str = "dark"
    topmost: bool = False
    remember_geometry: bool = True


class Config:
    """
    Configuration manager for the screen dimmer.

    Handles loading, saving, and accessing configuration settings.
    """

    DEFAULT_CONFIG_PATH = Path.home() / ".config" / "screen-dimmer" / "config.yaml"

    def __init__(self, config_path: Optional[Path] = None):
        """
        Initialize configuration.

        Args:
            config_path: Path to configuration file, or None for default
        """
        self.config_path = config_path or self.DEFAULT_CONFIG_PATH
        self._data: Dict[str, Any] = {}

        self.redshift = RedshiftConfig()
        self.timing = TimingConfig()
        self.gui = GUIConfig()

    def load(self) -> bool:
        """
        Load configuration from file.

        Returns:
            True if configuration was loaded successfully
        """
        if not self.config_path.exists():
            logger.warning(f"Configuration file not found: {self.config_path}")
            return False

        try:
            with open(self.config_path, 'r') as f:
                self._data = yaml.safe_load(f) or {}
            self._parse_config()
            logger.info(f"Loaded configuration from {self.config_path}")
            return True
        except yaml.YAMLError as e:
            logger.error(f"Failed to parse configuration: {e}")
            return False
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Failed to load configuration: {e}")
            return False

    def _parse_config(self):
        """Parse loaded configuration data into typed objects."""
        if not isinstance(self._data, dict):
            raise TypeError(f"expected a mapping at top level, got {type(self._data).__name__}")

        redshift = self._section('redshift')
        self.redshift = RedshiftConfig(
            command=str(redshift.get('command', DEFAULT_COMMAND)),
            method=str(redshift.get('method', DEFAULT_METHOD)),
            timeout=float(redshift.get('timeout', DEFAULT_TIMEOUT)),
        )
        if self.redshift.timeout <= 0:
            logger.warning(f"Invalid timeout {self.redshift.timeout}, using {DEFAULT_TIMEOUT}")
            self.redshift.timeout = DEFAULT_TIMEOUT

        timing = self._section('timing')
        self.timing = TimingConfig(
            debounce_ms=int(timing.get('debounce_ms', DEFAULT_DEBOUNCE_MS)),
        )
        if self.timing.debounce_ms < 0:
            logger.warning(f"Invalid debounce_ms {self.timing.debounce_ms}, using {DEFAULT_DEBOUNCE_MS}")
            self.timing.debounce_ms = DEFAULT_DEBOUNCE_MS

        gui = self._section('gui')
        self.gui = GUIConfig(
            theme=gui.get('theme', 'dark'),
            topmost=bool(gui.get('topmost', False)),
            remember_geometry=bool(gui.get('remember_geometry', True)),
        )

    def _section(self, name: str) -> Dict[str, Any]:
        """Return a top-level section, or {} if it is missing or not a mapping."""
        section = self._data.get(name)
        if section is None:
            return {}
        if not isinstance(section, dict):
            logger.warning(f"Ignoring config section '{name}': expected a mapping, got {section!r}")
            return {}
        return section

    def to_dict(self) -> Dict[str, Any]:
        return {
            'redshift': {
                'command': self.redshift.command,
                'method': self.redshift.method,
                'timeout': self.redshift.timeout,
            },
            'timing': {
                'debounce_ms': self.timing.debounce_ms,
            },
            'gui': {
                'theme': self.gui.theme,
                'topmost': self.gui.topmost,
                'remember_geometry': self.gui.remember_geometry,
            },
        }

    def save(self) -> bool:
        """
        Save current configuration to file.

        Returns:
            True if configuration was saved successfully
        """
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_path, 'w') as f:
                yaml.safe_dump(self.to_dict(), f, default_flow_style=False)
            logger.info(f"Saved configuration to {self.config_path}")
            return True
        except OSError as e:
            logger.error(f"Failed to save configuration: {e}")
            return False
