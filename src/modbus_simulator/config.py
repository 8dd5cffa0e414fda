"""
Simulator Configuration
=======================

Application settings and their JSON file representation.

The JSON file uses PascalCase keys::

    {
      "HostAddress": "127.0.0.1",
      "HostPort": 50200,
      "SamplingIntervalMs": 1000,
      "IsLoggingEnabled": true,
      "LogFileName": "Log.csv",
      "Channels": [
        {"Name": "Sine_Sample", "Address": 0, "SignalType": "Sine", ...}
      ]
    }

Loading never aborts the program: a missing file is created with defaults,
an unreadable one is reported and replaced by defaults in memory.

Author: Guilherme F. G. Santos
Date: October 2026
License: MIT
"""

import json
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List

from .core.channel import ConfigurationError, RegisterChannel, SignalType

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config.json"


def _parse_int(data: Dict[str, Any], key: str) -> int:
    try:
        return int(data[key])
    except (TypeError, ValueError):
        raise ConfigurationError(f"{key} must be an integer, got {data[key]!r}") from None


def _parse_bool(data: Dict[str, Any], key: str) -> bool:
    """Accept JSON booleans and the strings "true"/"false" (any case)."""
    value = data[key]

    if isinstance(value, bool):
        return value

    if isinstance(value, str) and value.strip().lower() in ("true", "false"):
        return value.strip().lower() == "true"

    raise ConfigurationError(f"{key} must be true or false, got {value!r}")


def default_channels() -> List[RegisterChannel]:
    """One sine (temperature-like) and one ramp (level-like) channel."""
    return [
        RegisterChannel(
            name="Sine_Sample",
            address=0,
            signal_type=SignalType.SINE.value,
            base_value=250,
            amplitude=50,
            period=60,
            noise_range=0,
        ),
        RegisterChannel(
            name="Ramp_Sample",
            address=1,
            signal_type=SignalType.RAMP.value,
            min=0,
            max=1000,
            step_size=100,
        ),
    ]


@dataclass
class AppConfig:
    """Simulator settings."""

    # Network
    host_address: str = "127.0.0.1"
    host_port: int = 50200  # 502 needs admin rights

    # Simulation
    sampling_interval_ms: int = 1000

    # Telemetry
    logging_enabled: bool = True
    log_file_name: str = "Log.csv"

    channels: List[RegisterChannel] = field(default_factory=default_channels)

    def validate(self):
        """Validate application-level settings (channels are checked separately)."""
        if not self.host_address:
            raise ConfigurationError("Host address must be non-empty")

        if not 1 <= self.host_port <= 65535:
            raise ConfigurationError(f"Host port {self.host_port} out of range [1, 65535]")

        if self.sampling_interval_ms <= 0:
            raise ConfigurationError(
                f"Sampling interval must be positive, got {self.sampling_interval_ms} ms"
            )

    @property
    def sampling_interval_sec(self) -> float:
        return self.sampling_interval_ms / 1000.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "HostAddress": self.host_address,
            "HostPort": self.host_port,
            "SamplingIntervalMs": self.sampling_interval_ms,
            "IsLoggingEnabled": self.logging_enabled,
            "LogFileName": self.log_file_name,
            "Channels": [ch.to_dict() for ch in self.channels],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AppConfig":
        """Build config from parsed JSON; missing keys keep their defaults."""
        config = cls()

        if "HostAddress" in data:
            config.host_address = str(data["HostAddress"])
        if "HostPort" in data:
            config.host_port = _parse_int(data, "HostPort")
        if "SamplingIntervalMs" in data:
            config.sampling_interval_ms = _parse_int(data, "SamplingIntervalMs")
        if "IsLoggingEnabled" in data:
            config.logging_enabled = _parse_bool(data, "IsLoggingEnabled")
        if "LogFileName" in data:
            config.log_file_name = str(data["LogFileName"])

        # A configured channel list replaces the defaults entirely
        if "Channels" in data:
            config.channels = [RegisterChannel.from_dict(ch) for ch in data["Channels"]]

        return config


def save_config(config: AppConfig, path: str = DEFAULT_CONFIG_PATH) -> bool:
    """
    Write config as indented JSON.

    Returns:
        True on success, False if the file could not be written
    """
    try:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(config.to_dict(), f, indent=2)
            f.write("\n")
    except OSError as e:
        logger.error(f"Error saving config to {path}: {e}")
        return False

    return True


def load_config(path: str = DEFAULT_CONFIG_PATH) -> AppConfig:
    """
    Read config from a JSON file.

    Args:
        path: Config file location

    Returns:
        Loaded config, or defaults if the file is missing or invalid
    """
    if not os.path.exists(path):
        logger.info(f"Config file {path} not found. Creating a default one.")
        config = AppConfig()
        save_config(config, path)
        return config

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)

        if not isinstance(data, dict):
            raise ValueError("top-level JSON value must be an object")

        return AppConfig.from_dict(data)

    except (OSError, ValueError, TypeError, KeyError, AttributeError) as e:
        logger.error(f"Error reading config from {path}: {e}. Using defaults.")
        return AppConfig()
