import pytest

from modbus_simulator.core.channel import RegisterChannel
from modbus_simulator.core.generators import SignalGenerator
from modbus_simulator.core.strategies import (
    RampStrategy,
    SignalStrategy,
    SineStrategy,
    StrategyRegistry,
    UnsupportedSignalError,
)


class ConstantStrategy(SignalStrategy):
    def __init__(self, value):
        self.value = value

    def calculate(self, channel, step, generator):
        return self.value


def test_default_registry_resolves_builtins():
    registry = StrategyRegistry.default()
    assert isinstance(registry.resolve("Sine"), SineStrategy)
    assert isinstance(registry.resolve("Ramp"), RampStrategy)
    assert sorted(registry.names()) == ["Ramp", "Sine"]


def test_lookup_is_case_sensitive():
    registry = StrategyRegistry.default()
    assert "sine" not in registry
    with pytest.raises(UnsupportedSignalError) as exc_info:
        registry.resolve("sine")
    assert exc_info.value.signal_type == "sine"
    assert "not supported" in str(exc_info.value)


def test_unsupported_error_is_a_key_error():
    with pytest.raises(KeyError):
        StrategyRegistry().resolve("Square")


def test_register_custom_strategy():
    registry = StrategyRegistry.default()
    registry.register("Constant", ConstantStrategy(42))

    strategy = registry.resolve("Constant")
    assert strategy.calculate(RegisterChannel(), 0.0, SignalGenerator(seed=0)) == 42


def test_register_rejects_non_strategy():
    registry = StrategyRegistry()
    with pytest.raises(TypeError):
        registry.register("Bad", lambda channel, step, gen: 0)


def test_sine_strategy_uses_channel_parameters():
    channel = RegisterChannel(
        name="Temp", address=0, signal_type="Sine",
        base_value=250, amplitude=50, period=60, noise_range=0,
    )
    assert SineStrategy().calculate(channel, 15.0, SignalGenerator(seed=0)) == 300


def test_ramp_strategy_uses_channel_parameters():
    channel = RegisterChannel(
        name="Level", address=1, signal_type="Ramp", min=0, max=1000, step_size=100,
    )
    assert RampStrategy().calculate(channel, 12.0, SignalGenerator(seed=0)) == 200
