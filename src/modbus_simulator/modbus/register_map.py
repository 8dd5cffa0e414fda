"""
Modbus Register Map
===================

Defines the mapping between configured channels and holding registers.

This module contains ONLY the register layout - it does not:
- Compute signal values
- Write the register buffer
- Talk to the network

Register Types:
- Holding Registers (FC 03/06/16): one int16 word per channel

Layout rules (checked before the simulation starts):
- Every address must fit inside the transport's holding register block
- No two channels may share an address

Author: Guilherme F. G. Santos
Date: October 2026
License: MIT
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence

from ..core.channel import ConfigurationError, RegisterChannel


@dataclass
class RegisterDefinition:
    """
    Definition of a single holding register.

    Attributes:
        address: Register address (0-based)
        name: Channel name
        signal_type: Waveform feeding this register
        description: Configured physical range
        data_type: 'int16'
    """

    address: int
    name: str
    signal_type: str
    description: str
    data_type: str = "int16"

    @classmethod
    def from_channel(cls, channel: RegisterChannel) -> "RegisterDefinition":
        return cls(
            address=channel.address,
            name=channel.name,
            signal_type=channel.signal_type,
            description=channel.range_display,
        )

    def validate(self, capacity: int):
        """Validate register definition against the block capacity."""
        if self.address < 0 or self.address >= capacity:
            raise ConfigurationError(
                f"Register address {self.address} ({self.name}) out of range "
                f"[0, {capacity - 1}]"
            )

    @property
    def modbus_address(self) -> int:
        """Conventional 4xxxx reference (1-based)."""
        return 40001 + self.address


class ChannelRegisterMap:
    """
    Holding register layout derived from the channel list.

    It only defines WHERE channel values go in the Modbus address space.
    Construction fails with ConfigurationError if the layout is invalid.
    """

    def __init__(self, channels: Sequence[RegisterChannel], capacity: int):
        if capacity <= 0:
            raise ConfigurationError(f"Register capacity must be positive, got {capacity}")

        self.capacity = capacity
        self.holding_registers: List[RegisterDefinition] = [
            RegisterDefinition.from_channel(ch) for ch in channels
        ]

        self._validate_all()

    def _validate_all(self):
        """Validate all register definitions and check for conflicts."""
        for reg in self.holding_registers:
            reg.validate(self.capacity)

        self._check_address_conflicts(self.holding_registers)

    @staticmethod
    def _check_address_conflicts(registers: List[RegisterDefinition]):
        """Reject channels sharing a register address."""
        seen = {}

        for reg in registers:
            other = seen.get(reg.address)
            if other is not None:
                raise ConfigurationError(
                    f"Holding register address conflict: {other.name} and "
                    f"{reg.name} both map to address {reg.address}"
                )
            seen[reg.address] = reg

    def get_register_by_name(self, name: str) -> Optional[RegisterDefinition]:
        """
        Find register definition by channel name.

        Returns:
            First RegisterDefinition with that name, None otherwise
        """
        for reg in self.holding_registers:
            if reg.name == name:
                return reg

        return None

    def get_register_by_address(self, address: int) -> Optional[RegisterDefinition]:
        for reg in self.holding_registers:
            if reg.address == address:
                return reg

        return None

    def describe(self) -> List[str]:
        """Aligned one-line summaries, in configured order."""
        return [
            f"{reg.name:<15} | Addr: {reg.address:<5} ({reg.modbus_address}) | "
            f"{reg.description}"
            for reg in self.holding_registers
        ]
