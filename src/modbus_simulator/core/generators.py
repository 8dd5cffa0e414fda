"""
Signal Generators
=================

Waveform computations for simulated channels.

All waveforms take the logical time step as an explicit argument, so the
output of ``sine`` and ``ramp`` is a pure function of their parameters.
The only state is the random source used for jitter, which is owned by the
generator instance and seeded once at construction.

Waveforms:
- Sine: base + amplitude * sin(2π * step / period)
- Noisy sine: sine with integer jitter added to the rounded value
- Ramp: repeating sawtooth from min towards max

Every result is rounded half away from zero and narrowed to int16, the
width of a holding register.

Author: Guilherme F. G. Santos
Date: October 2026
License: MIT
"""

import logging
import math
import secrets
import threading
from typing import Optional

import numpy as np

from ..modbus.protocols import ModbusEncoder

logger = logging.getLogger(__name__)


def round_half_away(value: float) -> int:
    """Round to nearest integer, ties away from zero (2.5 -> 3, -2.5 -> -3)."""
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


class SignalGenerator:
    """
    Waveform generator with an owned random source.

    Args:
        seed: Seed for the jitter random source. None draws a fresh
              128-bit seed, so sequences differ between runs.
    """

    def __init__(self, seed: Optional[int] = None):
        if seed is None:
            seed = secrets.randbits(128)

        self.seed = seed
        self._rng = np.random.default_rng(seed=seed)
        self._rng_lock = threading.Lock()

    def sine(
        self, base_value: float, amplitude: float, period_steps: float, step: float
    ) -> int:
        """
        Sine wave value at a given step.

        Args:
            base_value: Center of the wave (e.g. 250 for 25.0 °C)
            amplitude: Peak deviation from the center
            period_steps: Steps for one full cycle
            step: Global time step

        Returns:
            Register value (int16)

        Raises:
            ValueError: If period_steps is not positive
        """
        if period_steps <= 0:
            raise ValueError(f"Sine period must be positive, got {period_steps}")

        radians = (2.0 * math.pi / period_steps) * step
        value = base_value + amplitude * math.sin(radians)

        return ModbusEncoder.wrap_int16(round_half_away(value))

    def jitter(self, value: int, jitter_range: int) -> int:
        """
        Add a uniform integer draw from [-jitter_range, jitter_range).

        Args:
            value: Value to perturb
            jitter_range: Half-width of the noise band (0 disables noise)

        Returns:
            Perturbed register value (int16)
        """
        jitter_range = int(jitter_range)
        if jitter_range < 0:
            raise ValueError(f"Jitter range must be non-negative, got {jitter_range}")
        if jitter_range == 0:
            return ModbusEncoder.wrap_int16(value)

        with self._rng_lock:
            noise = int(self._rng.integers(-jitter_range, jitter_range))

        return ModbusEncoder.wrap_int16(value + noise)

    def noisy_sine(
        self,
        base_value: float,
        amplitude: float,
        period_steps: float,
        step: float,
        noise_range: int,
    ) -> int:
        """Sine wave with jitter applied to the already rounded value."""
        return self.jitter(
            self.sine(base_value, amplitude, period_steps, step), noise_range
        )

    def ramp(self, min_value: float, max_value: float, step_size: float, step: float) -> int:
        """
        Sawtooth ramp value at a given step.

        The ramp climbs by step_size per step and wraps back to min_value
        every (max_value - min_value) / step_size steps.

        Args:
            min_value: Start value
            max_value: Wrap value (exclusive)
            step_size: Increase per global step
            step: Global time step

        Returns:
            Register value in [min_value, max_value), or min_value if the
            bounds are invalid
        """
        if max_value <= min_value:
            logger.error(
                f"Ramp max ({max_value}) must be greater than min ({min_value})"
            )
            return ModbusEncoder.wrap_int16(round_half_away(min_value))

        span = max_value - min_value
        distance = step_size * step

        # Python float modulo takes the sign of the divisor: always in [0, span]
        offset = distance % span
        if offset >= span:
            offset = 0.0

        # Rounding may step outside [min, max) when the bounds are fractional
        value = round_half_away(offset + min_value)
        if value < min_value or value >= max_value:
            value = math.ceil(min_value)

        return ModbusEncoder.wrap_int16(value)
