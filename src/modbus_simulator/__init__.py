"""
Modbus Signal Simulator
=======================

Simulated PLC exposing time-varying measurements as Modbus holding
registers, for developing SCADA displays and Modbus masters without
hardware.

Author: Guilherme F. G. Santos
Date: October 2026
License: MIT
"""

__version__ = "1.0.0"
__author__ = "Guilherme F. G. Santos"

from .core import (
    ConfigurationError,
    RegisterChannel,
    SignalGenerator,
    SignalType,
    SimulatorEngine,
    StrategyRegistry,
    TelemetrySink,
)
from .config import AppConfig, load_config, save_config

__all__ = [
    "AppConfig",
    "load_config",
    "save_config",
    "ConfigurationError",
    "RegisterChannel",
    "SignalGenerator",
    "SignalType",
    "SimulatorEngine",
    "StrategyRegistry",
    "TelemetrySink",
]
