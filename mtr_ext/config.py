"""Configuration for mtr_ext using Pydantic for validation and type safety."""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, PositiveInt, field_validator


class MtrOptions(BaseModel):
    """Options that shape the mtr command line.

    Instances are immutable; build a new one with ``model_copy(update=...)``.
    """

    model_config = ConfigDict(frozen=True)

    packet_length: PositiveInt | None = 60
    resolve_dns: bool = False
    extended_report: bool = True


class ProcessConfig(BaseModel):
    """How the mtr process is started."""

    binary: str = "mtr"
    chunk_size: PositiveInt = 4096
    max_concurrency: PositiveInt = 5

    @field_validator("binary")
    @classmethod
    def validate_binary(cls, v: str) -> str:
        """Reject empty binary names."""
        if not v.strip():
            raise ValueError("binary must not be empty")
        return v


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    file: Path | None = None

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Accept only level names the logging module knows."""
        name = v.upper()
        if not isinstance(logging.getLevelName(name), int):
            raise ValueError(f"unknown logging level: {v}")
        return name


class OutputConfig(BaseModel):
    """Output configuration."""

    columns: list[str] = Field(
        default=[
            "ip",
            "mtr.host",
            "mtr.datetime",
            "hop.hop",
            "hop.asn",
            "hop.host",
            "hop.loss",
            "hop.snt",
            "hop.drop",
            "hop.rcv",
            "hop.last",
            "hop.best",
            "hop.avg",
            "hop.wrst",
            "hop.jttr",
            "hop.javg",
            "hop.jmax",
            "hop.jint",
        ]
    )


class MtrExtConfig(BaseModel):
    """Main configuration for mtr_ext."""

    mtr: MtrOptions = MtrOptions()
    process: ProcessConfig = ProcessConfig()
    logging: LoggingConfig = LoggingConfig()
    output: OutputConfig = OutputConfig()


def load_from_env() -> dict[str, Any]:
    """Load configuration from environment variables.

    Environment variables should follow the pattern:
    MTR_EXT_<SECTION>_<KEY>=value

    Examples:
        MTR_EXT_MTR_PACKET_LENGTH=120
        MTR_EXT_MTR_RESOLVE_DNS=true
        MTR_EXT_PROCESS_BINARY=/usr/sbin/mtr
    """
    config = {}
    prefix = "MTR_EXT_"

    for key, value in os.environ.items():
        if not key.startswith(prefix):
            continue

        # Remove prefix and split into section and field
        config_key = key[len(prefix) :].lower()
        parts = config_key.split("_", 1)

        if len(parts) != 2:
            continue

        section, field = parts

        # Convert string values to appropriate types
        match value.lower():
            case "true" | "yes" | "on":
                value = True
            case "false" | "no" | "off":
                value = False
            case _ if value.isdigit():
                value = int(value)

        if section not in config:
            config[section] = {}
        config[section][field] = value

    return config


def find_config_file() -> Path | None:
    """Find configuration file in standard locations.

    Search order:
    1. ./mtr_ext.toml (current directory)
    2. ~/.config/mtr-ext/config.toml (XDG config)
    3. ~/.mtr-ext.toml (home directory)
    """
    candidates = [
        Path.cwd() / "mtr_ext.toml",
        Path.home() / ".config" / "mtr-ext" / "config.toml",
        Path.home() / ".mtr-ext.toml",
    ]

    for candidate in candidates:
        if candidate.exists():
            return candidate

    return None


def load_config(config_file: Path | None = None) -> MtrExtConfig:
    """Load configuration from multiple sources with proper validation.

    Sources are loaded in this order (later sources override earlier ones):
    1. Default configuration (embedded in code)
    2. Configuration file (TOML format)
    3. Environment variables

    Args:
        config_file: Path to configuration file. If None, will search standard locations.

    Returns:
        Validated configuration object.

    Raises:
        ConfigurationError: If configuration is invalid.
    """
    config_dict = {}

    if config_file is None:
        config_file = find_config_file()

    if config_file and config_file.exists():
        try:
            with open(config_file, "rb") as f:
                file_config = tomllib.load(f)
                config_dict.update(file_config)
        except (OSError, tomllib.TOMLDecodeError) as e:
            raise ConfigurationError(
                f"Failed to load config file {config_file}: {e}"
            ) from e

    env_config = load_from_env()
    for section, values in env_config.items():
        if section not in config_dict:
            config_dict[section] = {}
        config_dict[section].update(values)

    try:
        return MtrExtConfig(**config_dict)
    except Exception as e:
        raise ConfigurationError(f"Configuration validation failed: {e}") from e


def create_default_config(output_file: Path) -> None:
    """Create a default configuration file with sensible defaults."""

    toml_content = """# mtr-ext configuration

[mtr]
packet_length = 60
resolve_dns = false
# AS numbers and host (address) columns
extended_report = true

[process]
# Looked up on PATH unless absolute
binary = "mtr"
chunk_size = 4096
max_concurrency = 5

[logging]
level = "INFO"
# file = "mtr_ext.log"

[output]
columns = [
    "ip",
    "mtr.host",
    "mtr.datetime",
    "hop.hop",
    "hop.asn",
    "hop.host",
    "hop.loss",
    "hop.snt",
    "hop.rcv",
    "hop.best",
    "hop.avg",
    "hop.wrst",
    "hop.jttr",
]
"""

    output_file.parent.mkdir(parents=True, exist_ok=True)
    output_file.write_text(toml_content)


class ConfigurationError(Exception):
    """Configuration-related errors."""

    pass
