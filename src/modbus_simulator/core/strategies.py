"""
Signal Strategy Dispatch
========================

Maps a channel's declared signal type to the strategy that computes it.

The registry is open: callers may register additional strategies under new
names. Looking up a name that was never registered raises
``UnsupportedSignalError`` instead of returning a silent miss, so the engine
can report it per channel and leave the register untouched.

Author: Guilherme F. G. Santos
Date: October 2026
License: MIT
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from .channel import RegisterChannel, SignalType
from .generators import SignalGenerator


class UnsupportedSignalError(KeyError):
    """Raised when no strategy is registered for a signal type."""

    def __init__(self, signal_type: str):
        super().__init__(signal_type)
        self.signal_type = signal_type

    def __str__(self) -> str:
        return f"Signal type '{self.signal_type}' is not supported"


class SignalStrategy(ABC):
    """Computes the next register value for one waveform family."""

    @abstractmethod
    def calculate(
        self, channel: RegisterChannel, step: float, generator: SignalGenerator
    ) -> int:
        """
        Compute the register value for a channel at a global step.

        Args:
            channel: Channel configuration
            step: Global time step shared by all channels in the tick
            generator: Waveform generator owning the random source

        Returns:
            Register value (int16)
        """
        pass


class SineStrategy(SignalStrategy):
    """Sine wave with optional jitter."""

    def calculate(self, channel, step, generator):
        return generator.noisy_sine(
            channel.base_value,
            channel.amplitude,
            channel.period,
            step,
            channel.noise_range,
        )


class RampStrategy(SignalStrategy):
    """Linear sawtooth from min to max."""

    def calculate(self, channel, step, generator):
        return generator.ramp(channel.min, channel.max, channel.step_size, step)


class StrategyRegistry:
    """Case-sensitive signal type name -> strategy."""

    def __init__(self, strategies: Optional[Dict[str, SignalStrategy]] = None):
        self._strategies: Dict[str, SignalStrategy] = dict(strategies or {})

    @classmethod
    def default(cls) -> "StrategyRegistry":
        """Registry with the built-in Sine and Ramp strategies."""
        return cls(
            {
                SignalType.SINE.value: SineStrategy(),
                SignalType.RAMP.value: RampStrategy(),
            }
        )

    def register(self, signal_type: str, strategy: SignalStrategy):
        """Register (or replace) the strategy for a signal type."""
        if not isinstance(strategy, SignalStrategy):
            raise TypeError(
                f"Strategy for '{signal_type}' must be a SignalStrategy, "
                f"got {type(strategy).__name__}"
            )
        self._strategies[signal_type] = strategy

    def resolve(self, signal_type: str) -> SignalStrategy:
        """
        Find the strategy for a signal type.

        Raises:
            UnsupportedSignalError: If nothing is registered under that name
        """
        try:
            return self._strategies[signal_type]
        except KeyError:
            raise UnsupportedSignalError(signal_type) from None

    def names(self) -> List[str]:
        return list(self._strategies)

    def __contains__(self, signal_type: str) -> bool:
        return signal_type in self._strategies
