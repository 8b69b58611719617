"""Configuration models and loaders."""

from .config import (
    CheckerConfig,
    Config,
    MonitoringConfig,
    OutputConfig,
    PlaylistConfig,
    find_config_file,
    load_config,
)

__all__ = [
    "CheckerConfig",
    "Config",
    "MonitoringConfig",
    "OutputConfig",
    "PlaylistConfig",
    "find_config_file",
    "load_config",
]
