"""
Configuration management for dockdash.

This module provides configuration file support with YAML format,
user preferences, and default settings.

Features:
- YAML configuration file at ~/.config/dockdash/config.yaml
- Default values with user overrides
- Keybinding customization (each action accepts several keys)
- Tick rate and refresh cadence
- Docker connection settings
- Log location and rotation override

Architecture:
- ConfigManager: Main configuration interface
- Merges user config with defaults, section by section
- Provides typed access to settings
- Handles missing/invalid config gracefully
"""

import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

logger = logging.getLogger(__name__)


def _keys(*names: str):
    return field(default_factory=lambda: list(names))


@dataclass
class KeyBindings:
    """Customizable key bindings. Key names match event.Key.name."""
    force_quit: List[str] = _keys("ctrl+c")
    quit: List[str] = _keys("q", "esc")
    back: List[str] = _keys("q", "esc")
    up: List[str] = _keys("up", "k")
    down: List[str] = _keys("down", "j")
    previous_pane: List[str] = _keys("left")
    next_pane: List[str] = _keys("right")
    scroll_left: List[str] = _keys("h")
    scroll_right: List[str] = _keys("l")
    scroll_start: List[str] = _keys("home")
    scroll_end: List[str] = _keys("end")
    scroll_top: List[str] = _keys("pageup")
    scroll_bottom: List[str] = _keys("pagedown")
    details: List[str] = _keys("enter")
    restart: List[str] = _keys("r")
    stop: List[str] = _keys("s")
    kill: List[str] = _keys("x")
    remove: List[str] = _keys("d", "delete")
    force_remove: List[str] = _keys("f")
    toggle_all: List[str] = _keys("t")
    next_tab: List[str] = _keys("tab")
    previous_tab: List[str] = _keys("backtab")

    def matches(self, action: str, key_name: str) -> bool:
        """Check if key matches one of the bindings for action."""
        return key_name in getattr(self, action, [])


@dataclass
class UIConfig:
    """UI-related configuration."""
    tick_rate_ms: int = 33
    refresh_every_ticks: int = 10
    show_all: bool = True

    @property
    def tick_rate(self) -> float:
        """Clock period in seconds."""
        return max(1, self.tick_rate_ms) / 1000.0


@dataclass
class DockerConfig:
    """Docker-related configuration."""
    base_url: Optional[str] = None  # None for environment defaults
    timeout: int = 60  # seconds


@dataclass
class LogConfig:
    """Logging configuration."""
    level: str = "INFO"
    file_path: Optional[str] = None  # None for default
    max_size_mb: int = 10
    backup_count: int = 5


@dataclass
class AppConfig:
    """Main application configuration."""
    keybindings: KeyBindings = field(default_factory=KeyBindings)
    ui: UIConfig = field(default_factory=UIConfig)
    docker: DockerConfig = field(default_factory=DockerConfig)
    logging: LogConfig = field(default_factory=LogConfig)


class ConfigManager:
    """Configuration manager with YAML file support."""

    def __init__(self, config_dir: Optional[Path] = None):
        self.config_dir = Path(config_dir) if config_dir else Path.home() / ".config" / "dockdash"
        self.config_file = self.config_dir / "config.yaml"
        self._config: AppConfig = AppConfig()
        self.load_config()

    def load_config(self) -> None:
        """Load configuration from YAML file."""
        try:
            if self.config_file.exists():
                with open(self.config_file, 'r') as f:
                    user_config = yaml.safe_load(f) or {}
                if not isinstance(user_config, dict):
                    raise ValueError("top level must be a mapping")

                self._config = self._merge_configs(AppConfig(), user_config)
                logger.debug(f"Loaded configuration from {self.config_file}")
            else:
                self.save_config()
                logger.info(f"Created default configuration at {self.config_file}")
        except (OSError, yaml.YAMLError, ValueError) as e:
            logger.error(f"Failed to load config: {e}, using defaults")
            self._config = AppConfig()

    def save_config(self) -> None:
        """Save current configuration to YAML file."""
        try:
            self.config_dir.mkdir(parents=True, exist_ok=True)
            with open(self.config_file, 'w') as f:
                yaml.safe_dump(asdict(self._config), f, default_flow_style=False, indent=2)
            logger.debug(f"Saved configuration to {self.config_file}")
        except OSError as e:
            logger.error(f"Failed to save config: {e}")

    def get_config(self) -> AppConfig:
        """Get current configuration."""
        return self._config

    def _merge_configs(self, default: AppConfig, user: Dict[str, Any]) -> AppConfig:
        """Merge user config with defaults."""
        for section in ('keybindings', 'ui', 'docker', 'logging'):
            updates = user.get(section)
            if isinstance(updates, dict):
                self._merge_dataclass(getattr(default, section), updates)
        return default

    def _merge_dataclass(self, obj: Any, updates: Dict[str, Any]) -> None:
        """Merge updates into dataclass object."""
        for key, value in updates.items():
            if not hasattr(obj, key):
                logger.warning(f"Ignoring unknown config key: {key}")
                continue
            if isinstance(obj, KeyBindings) and isinstance(value, str):
                value = [value]
            setattr(obj, key, value)
