"""
Configuration management for m3usieve using Pydantic.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# --- Setup Logging ---
log = logging.getLogger(__name__)

# --- Nested Configuration Models ---


class PlaylistConfig(BaseModel):
    """Markers that identify the structural lines of a playlist."""

    header: str = Field(default="#EXTM3U", description="Header line written at the top of every output document.")
    metadata_prefix: str = Field(default="#EXTINF", description="Prefix of a metadata marker line.")
    uri_schemes: List[str] = Field(
        default=["http"],
        description="Prefixes that identify a resource reference line. 'http' also matches 'https'.",
    )

    @field_validator("uri_schemes")
    @classmethod
    def validate_uri_schemes(cls, v: List[str]) -> List[str]:
        """Ensure at least one scheme is recognised."""
        schemes = [scheme.strip() for scheme in v if scheme.strip()]
        if not schemes:
            raise ValueError("uri_schemes must contain at least one scheme")
        return schemes


class CheckerConfig(BaseModel):
    """Stream probing configuration."""

    concurrency_limit: int = Field(default=10, ge=1, description="Maximum number of probes in flight.")
    timeout: float = Field(default=3.0, gt=0, description="Timeout for a single probe in seconds.")
    max_redirects: int = Field(default=3, ge=0, description="Redirect hops followed before the final attempt.")
    final_hop_attempts: int = Field(
        default=1,
        ge=0,
        description="Probes issued against the last redirect target once max_redirects is reached.",
    )
    user_agent: str = Field(
        default="VLC/3.0.18 LibVLC/3.0.18",
        description="User-Agent string sent with every probe.",
    )


class OutputConfig(BaseModel):
    """Where and how checked playlists are written."""

    input_dir: Path = Field(default=Path("m3u-files"), description="Directory scanned for playlists.")
    output_dir: Path = Field(default=Path("m3u-checked"), description="Directory receiving checked playlists.")
    suffix: str = Field(default="_checked", description="Appended to the stem of every output file.")
    extensions: List[str] = Field(default=[".m3u", ".m3u8"], description="Playlist file extensions.")


class MonitoringConfig(BaseModel):
    """Configuration for logging and metrics."""

    log_level: str = Field(default="INFO", description="Logging level (e.g., DEBUG, INFO, WARNING).")
    log_file: str | None = Field(default=None, description="Path to log file. If None, logs to console.")
    prometheus_port: int | None = Field(default=None, description="Port for Prometheus metrics exporter.")

    @field_validator("log_file", mode="before")
    @classmethod
    def create_parent_dir(cls, v: str | Path | None) -> str | None:
        if v is None:
            return None
        path = Path(v)
        path.parent.mkdir(parents=True, exist_ok=True)
        return str(path)


# --- Main Configuration Class ---


class Config(BaseSettings):
    project_name: str = "m3usieve"
    version: str = "0.1.0"
    playlist: PlaylistConfig = Field(default_factory=PlaylistConfig)
    checker: CheckerConfig = Field(default_factory=CheckerConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    monitoring: MonitoringConfig = Field(default_factory=MonitoringConfig)

    model_config = SettingsConfigDict(env_prefix="M3USIEVE_", env_nested_delimiter="__", case_sensitive=False)

    @classmethod
    def from_yaml(cls, path: Path) -> Config:
        log.debug("Loading configuration from YAML file: %s", path)
        if not path.is_file():
            raise FileNotFoundError(f"Configuration file not found or is not a file: {path}")
        with open(path, "r", encoding="utf-8") as f:
            yaml_data = yaml.safe_load(f)
        if not yaml_data:
            log.warning("Configuration file is empty: %s. Using default settings.", path)
            return cls.model_validate({})
        return cls.model_validate(yaml_data)


def find_config_file() -> Path | None:
    current_dir = Path.cwd()
    for path in (current_dir / "config.yaml", current_dir / "config.yml"):
        if path.exists():
            return path
    return None


def load_config(path: Path | None = None) -> Config:
    """Load configuration from an explicit path, a discovered file or defaults."""
    config_path = path or find_config_file()
    if config_path is None:
        return Config()
    return Config.from_yaml(config_path)
