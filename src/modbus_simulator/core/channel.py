"""
Register Channel Model
======================

Data-only description of one simulated signal bound to a holding register.

A channel is constructed once at configuration time and lives for the whole
simulation run. The engine mutates ``current_value`` once per tick; nothing
else writes it.

Register values are scaled integers: a base value of 250 represents 25.0
physical units, so clients divide the raw register by ``DISPLAY_SCALE``.

Author: Guilherme F. G. Santos
Date: October 2026
License: MIT
"""

from dataclasses import dataclass, asdict
from enum import Enum
from typing import Any, Dict

DISPLAY_SCALE = 10.0

# Channel attribute <-> JSON config key
_JSON_KEYS = {
    "name": "Name",
    "address": "Address",
    "signal_type": "SignalType",
    "base_value": "BaseValue",
    "amplitude": "Amplitude",
    "period": "Period",
    "noise_range": "NoiseRange",
    "min": "Min",
    "max": "Max",
    "step_size": "StepSize",
}

_FIELD_TYPES = {
    "name": str,
    "address": int,
    "signal_type": str,
    "base_value": float,
    "amplitude": float,
    "period": float,
    "noise_range": int,
    "min": float,
    "max": float,
    "step_size": float,
}


class ConfigurationError(ValueError):
    """Invalid simulator configuration detected before or while running."""


class SignalType(str, Enum):
    """Built-in waveform families."""

    SINE = "Sine"
    RAMP = "Ramp"


@dataclass
class RegisterChannel:
    """
    One simulated signal.

    Attributes:
        name: Display label used in logs
        address: Holding register index (0-based)
        signal_type: Waveform identifier, case-sensitive ("Sine", "Ramp", ...)
        base_value: Sine center value (raw register units)
        amplitude: Sine peak deviation from base_value
        period: Steps for one full sine cycle (> 0)
        noise_range: Jitter range added to the sine, draws from [-n, n)
        min: Ramp start value
        max: Ramp wrap value (exclusive, must exceed min)
        step_size: Ramp increment per global step
        current_value: Last computed register value
    """

    name: str = "DefaultChannelZERO"
    address: int = 256
    signal_type: str = SignalType.SINE.value

    # Sine parameters
    base_value: float = 0.0
    amplitude: float = 5.0
    period: float = 60.0
    noise_range: int = 0

    # Ramp parameters
    min: float = 0.0
    max: float = 1000.0
    step_size: float = 100.0

    current_value: int = 0

    def validate(self):
        """
        Validate channel definition.

        Ramp bounds are not checked here: the generator degrades to ``min``
        on every tick where max <= min.
        """
        if not isinstance(self.name, str) or not self.name:
            raise ConfigurationError("Channel name must be non-empty string")

        if self.address < 0:
            raise ConfigurationError(
                f"Channel '{self.name}': address {self.address} must be non-negative"
            )

        if self.signal_type == SignalType.SINE.value and self.period <= 0:
            raise ConfigurationError(
                f"Channel '{self.name}': sine period must be positive, got {self.period}"
            )

        if self.noise_range < 0:
            raise ConfigurationError(
                f"Channel '{self.name}': noise range must be non-negative, "
                f"got {self.noise_range}"
            )

    @property
    def scaled_value(self) -> float:
        """Current value in physical units."""
        return self.current_value / DISPLAY_SCALE

    @property
    def range_display(self) -> str:
        """Pre-configured physical boundaries, for the startup header."""
        if self.signal_type == SignalType.SINE.value:
            low = (self.base_value - abs(self.amplitude)) / DISPLAY_SCALE
            high = (self.base_value + abs(self.amplitude)) / DISPLAY_SCALE
            return f"Sine | {low:.1f} ~ {high:.1f} | noise ±{self.noise_range}"

        if self.signal_type == SignalType.RAMP.value:
            low = self.min / DISPLAY_SCALE
            high = self.max / DISPLAY_SCALE
            step = self.step_size / DISPLAY_SCALE
            return f"Ramp | {low:.1f} ~ {high:.1f} | step {step:.1f}"

        return f"{self.signal_type} | unsupported"

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the JSON config layout (runtime state excluded)."""
        values = asdict(self)
        return {key: values[attr] for attr, key in _JSON_KEYS.items()}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RegisterChannel":
        """Build a channel from a JSON config entry; unknown keys are ignored."""
        kwargs = {}

        for attr, key in _JSON_KEYS.items():
            if key not in data:
                continue

            convert = _FIELD_TYPES[attr]
            try:
                kwargs[attr] = convert(data[key])
            except (TypeError, ValueError):
                raise ConfigurationError(
                    f"Channel field {key} must be {convert.__name__}, got {data[key]!r}"
                ) from None

        return cls(**kwargs)
