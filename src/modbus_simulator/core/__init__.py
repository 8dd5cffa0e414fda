"""
Simulation Core Package
=======================

Signal generation and channel update engine.

This package provides:
- Channel model: one simulated signal bound to a holding register
- Generators: sine, noisy sine and sawtooth ramp waveforms
- Strategies: signal type name -> waveform dispatch
- Telemetry: append-only CSV record of computed values
- Engine: background loop publishing values on a fixed cadence

USAGE EXAMPLE
============

```python
from modbus_simulator.config import AppConfig
from modbus_simulator.core import SimulatorEngine, SignalGenerator

engine = SimulatorEngine(AppConfig(), generator=SignalGenerator(seed=42))
engine.start()
...
engine.stop()
```

WHAT THIS PACKAGE DOES NOT DO:
- NO Modbus framing or networking (see modbus_simulator.modbus)
- NO config file parsing (see modbus_simulator.config)

Author: Guilherme F. G. Santos
Date: October 2026
License: MIT
"""

from .channel import (
    DISPLAY_SCALE,
    ConfigurationError,
    RegisterChannel,
    SignalType,
)
from .generators import SignalGenerator, round_half_away
from .strategies import (
    RampStrategy,
    SignalStrategy,
    SineStrategy,
    StrategyRegistry,
    UnsupportedSignalError,
)
from .telemetry import TelemetrySink
from .engine import SimulatorEngine

__all__ = [
    "DISPLAY_SCALE",
    "ConfigurationError",
    "RegisterChannel",
    "SignalType",
    "SignalGenerator",
    "round_half_away",
    "SignalStrategy",
    "SineStrategy",
    "RampStrategy",
    "StrategyRegistry",
    "UnsupportedSignalError",
    "TelemetrySink",
    "SimulatorEngine",
]
