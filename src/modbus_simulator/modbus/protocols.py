"""
Modbus Register Encoding
========================

Data conversion utilities for 16-bit holding registers.

This module handles ONLY data format conversion:
- Signed Python ints <-> unsigned 16-bit register words
- Narrowing of generator output to the int16 register width

Simulated signals are stored as signed 16-bit integers (two's complement),
so a client reading register value 65535 should interpret it as -1.

Author: Guilherme F. G. Santos
Date: October 2026
License: MIT
"""

import struct

INT16_MIN = -32768
INT16_MAX = 32767


class ModbusEncoder:
    """
    Encoder for converting Python values to Modbus register format.

    Byte Order: Big-endian (network byte order) - Modbus standard
    """

    @staticmethod
    def wrap_int16(value: int) -> int:
        """
        Narrow an arbitrary integer to the int16 range.

        Values outside [-32768, 32767] wrap around (two's complement),
        the same way a 16-bit register would truncate them.

        Args:
            value: Any integer

        Returns:
            Signed integer in range [-32768, 32767]
        """
        return ((int(value) + 32768) & 0xFFFF) - 32768

    @staticmethod
    def int16_to_register(value: int) -> int:
        """
        Convert Python signed int to 16-bit Modbus register.

        Args:
            value: Signed integer in range [-32768, 32767]

        Returns:
            16-bit unsigned register value

        Raises:
            ValueError: If value out of range
        """
        if not INT16_MIN <= value <= INT16_MAX:
            raise ValueError(f"int16 value {value} out of range [-32768, 32767]")

        # Pack as signed 16-bit, unpack as unsigned
        packed = struct.pack(">h", value)
        (result,) = struct.unpack(">H", packed)

        return result


class ModbusDecoder:
    """Inverse operations of ModbusEncoder."""

    @staticmethod
    def register_to_int16(value: int) -> int:
        """
        Convert 16-bit Modbus register to Python signed int.

        Args:
            value: 16-bit unsigned register value

        Returns:
            Signed integer in range [-32768, 32767]
        """
        # Pack as unsigned 16-bit, unpack as signed
        packed = struct.pack(">H", value)
        (result,) = struct.unpack(">h", packed)

        return result
