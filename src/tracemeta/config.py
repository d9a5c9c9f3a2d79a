"""
tracemeta Configuration

Loads configuration from a YAML file, then applies environment variable
overrides.
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from tracemeta.registry.session import SessionRegistry
from tracemeta.registry.sessions import DEFAULT_SESSION_NAME

logger = logging.getLogger(__name__)


# Default configuration file locations (checked in order)
CONFIG_SEARCH_PATHS = [
    Path.home() / ".tracemeta" / "config.yaml",
    Path(__file__).parent / "config.yaml",
]


DEFAULT_CONFIG = {
    # Where mirrored metadata files are written
    "metadata_dir": str(Path.home() / ".tracemeta" / "metadata"),
    "mirror_metadata": False,
    "log_level": "WARNING",
    # Printed as trace_name for sessions with generated names
    "default_session_name": DEFAULT_SESSION_NAME,
}


class MetadataConfig:
    """Configuration for metadata generation."""

    def __init__(self, config_path: Optional[Path] = None):
        self._config: Dict[str, Any] = dict(DEFAULT_CONFIG)
        self._config_path: Optional[Path] = None

        # Load from file if found
        self._load_config(config_path)

        # Override with environment variables
        self._apply_env_overrides()

    def _load_config(self, explicit_path: Optional[Path] = None) -> None:
        """Load configuration from YAML file."""
        search_paths = [Path(explicit_path)] if explicit_path else CONFIG_SEARCH_PATHS

        for config_path in search_paths:
            if config_path and config_path.exists():
                try:
                    with open(config_path, 'r', encoding='utf-8') as f:
                        user_config = yaml.safe_load(f) or {}
                except (OSError, yaml.YAMLError) as e:
                    logger.warning(f"Failed to load config from {config_path}: {e}")
                    continue
                if not isinstance(user_config, dict):
                    logger.warning(f"Ignoring config {config_path}: expected a mapping")
                    continue
                self._config.update(user_config)
                self._config_path = config_path
                return

    def _apply_env_overrides(self) -> None:
        """Apply environment variable overrides."""
        env_mappings = {
            "TRACEMETA_METADATA_DIR": "metadata_dir",
            "TRACEMETA_LOG_LEVEL": "log_level",
            "TRACEMETA_DEFAULT_SESSION_NAME": "default_session_name",
        }

        for env_var, config_key in env_mappings.items():
            if env_var in os.environ:
                self._config[config_key] = os.environ[env_var]

        if "TRACEMETA_MIRROR_METADATA" in os.environ:
            value = os.environ["TRACEMETA_MIRROR_METADATA"].strip().lower()
            self._config["mirror_metadata"] = value in ("1", "true", "yes", "on")

    @property
    def config_path(self) -> Optional[Path]:
        """Path to loaded config file, or None if using defaults."""
        return self._config_path

    @property
    def metadata_dir(self) -> Path:
        return Path(self._config["metadata_dir"]).expanduser()

    @property
    def mirror_metadata(self) -> bool:
        return bool(self._config.get("mirror_metadata", False))

    @property
    def log_level(self) -> str:
        return str(self._config.get("log_level", "WARNING")).upper()

    @property
    def default_session_name(self) -> str:
        return str(self._config.get("default_session_name", DEFAULT_SESSION_NAME))

    def to_dict(self) -> Dict[str, Any]:
        """Export current configuration as dict."""
        return {
            "metadata_dir": str(self.metadata_dir),
            "mirror_metadata": self.mirror_metadata,
            "log_level": self.log_level,
            "default_session_name": self.default_session_name,
            "config_file": str(self._config_path) if self._config_path else None,
        }


# Global config instance (lazy-loaded)
_config: Optional[MetadataConfig] = None


def get_config(config_path: Optional[Path] = None) -> MetadataConfig:
    """Get the global config instance, loading if needed."""
    global _config
    if _config is None or config_path is not None:
        _config = MetadataConfig(config_path)
    return _config


def configure_logging(config: Optional[MetadataConfig] = None) -> None:
    """Set the tracemeta logger level from configuration."""
    config = config or get_config()
    level = getattr(logging, config.log_level, logging.WARNING)
    logging.getLogger("tracemeta").setLevel(level)


def metadata_mirror_path(registry: SessionRegistry, config: MetadataConfig) -> Path:
    """Mirror file location: <metadata_dir>/<tracing id>/<uuid>/metadata."""
    return config.metadata_dir / str(registry.tracing_id) / str(registry.uuid) / "metadata"


def open_metadata_mirror(registry: SessionRegistry,
                         config: Optional[MetadataConfig] = None) -> Optional[Path]:
    """
    Attach the mirrored metadata file to a registry when mirroring is enabled.

    Returns the mirror path, or None if mirroring is disabled.
    """
    config = config or get_config()
    if not config.mirror_metadata:
        return None
    path = metadata_mirror_path(registry, config)
    registry.attach_mirror(path)
    return path
