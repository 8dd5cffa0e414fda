"""
Modbus Interface Package
=========================

Modbus/TCP transport for exposing simulated channel values.

This package provides a pure protocol layer:
- Modbus TCP server (pymodbus)
- Holding register layout and validation
- int16 register encoding

It does NOT:
- Compute waveforms
- Schedule updates
- Record telemetry

Components:
- slave.py: Modbus TCP server and holding register view
- register_map.py: Channel -> address layout
- protocols.py: Data encoding/decoding

Usage Example:
>>> from modbus_simulator.modbus import ModbusSlave
>>>
>>> slave = ModbusSlave()
>>> slave.start(("127.0.0.1", 50200))
>>> slave.holding_registers[0] = 300
>>> slave.stop()

Author: Guilherme F. G. Santos
Date: October 2026
License: MIT
"""

from .protocols import ModbusEncoder, ModbusDecoder
from .register_map import ChannelRegisterMap, RegisterDefinition
from .slave import HoldingRegisterView, ModbusServerConfig, ModbusSlave

__all__ = [
    "ModbusSlave",
    "ModbusServerConfig",
    "HoldingRegisterView",
    "ChannelRegisterMap",
    "RegisterDefinition",
    "ModbusEncoder",
    "ModbusDecoder",
]
