import logging
import threading
import time

import pytest

from modbus_simulator.core import (
    ConfigurationError,
    RegisterChannel,
    SignalGenerator,
    SignalStrategy,
    SimulatorEngine,
    StrategyRegistry,
)

from conftest import FakeTransport


def make_engine(config, transport, **kwargs):
    kwargs.setdefault("generator", SignalGenerator(seed=1234))
    kwargs.setdefault("grace_period_sec", 1.0)
    return SimulatorEngine(config, transport=transport, **kwargs)


def wait_until(predicate, timeout=2.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.005)
    return False


class ExplodingStrategy(SignalStrategy):
    def __init__(self, fail_times):
        self.fail_times = fail_times

    def calculate(self, channel, step, generator):
        if self.fail_times > 0:
            self.fail_times -= 1
            raise ZeroDivisionError("boom")
        return 7


class SlowStrategy(SignalStrategy):
    """Holds each tick open and records how many run at once."""

    def __init__(self, delay):
        self.delay = delay
        self.active = 0
        self.max_active = 0
        self.calls = 0
        self._lock = threading.Lock()

    def calculate(self, channel, step, generator):
        with self._lock:
            self.active += 1
            self.calls += 1
            self.max_active = max(self.max_active, self.active)
        time.sleep(self.delay)
        with self._lock:
            self.active -= 1
        return 1


def test_tick_writes_registers_and_channels(config, transport):
    engine = make_engine(config, transport)

    assert engine.tick() == [250, 0]
    assert transport.holding_registers[0] == 250
    assert transport.holding_registers[1] == 0
    assert engine.global_step == 1.0

    for _ in range(14):
        engine.tick()

    assert engine.global_step == 15.0
    assert engine.tick() == [300, 500]
    assert [ch.current_value for ch in config.channels] == [300, 500]


def test_channels_share_the_step_within_a_tick(config, transport):
    config.channels = [
        RegisterChannel(name="A", address=2, signal_type="Ramp", min=0, max=100, step_size=1),
        RegisterChannel(name="B", address=5, signal_type="Ramp", min=0, max=100, step_size=1),
    ]
    engine = make_engine(config, transport)

    for _ in range(4):
        a, b = engine.tick()
        assert a == b

    # writes happen in configured channel order
    assert [addr for addr, _ in transport.holding_registers.writes[:2]] == [2, 5]


def test_unknown_signal_type_leaves_register_unchanged(config, transport, caplog):
    config.channels = [
        RegisterChannel(name="Mystery", address=3, signal_type="Square"),
        RegisterChannel(name="Level", address=4, signal_type="Ramp", min=0, max=1000, step_size=100),
    ]
    transport.holding_registers.values[3] = 42
    engine = make_engine(config, transport)

    with caplog.at_level(logging.WARNING):
        engine.tick()
        engine.tick()

    assert transport.holding_registers[3] == 42
    assert config.channels[0].current_value == 0
    assert transport.holding_registers[4] == 100

    warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert len(warnings) == 2
    assert all("'Square' is not supported" in r.getMessage() for r in warnings)


def test_tick_logs_summary_and_records_telemetry(config, transport, caplog, tmp_path):
    engine = make_engine(config, transport)

    with caplog.at_level(logging.INFO):
        engine.tick()

    assert "Sine_Sample: 25.0 | Ramp_Sample: 0.0 | Step: 0" in caplog.text

    lines = (tmp_path / "telemetry.csv").read_text().splitlines()
    assert len(lines) == 1
    assert lines[0].endswith(",250,0,0")


def test_logging_disabled_skips_summary_and_telemetry(config, transport, caplog, tmp_path):
    config.logging_enabled = False
    engine = make_engine(config, transport)

    with caplog.at_level(logging.INFO):
        engine.tick()

    assert "Step:" not in caplog.text
    assert not (tmp_path / "telemetry.csv").exists()


def test_start_rejects_address_beyond_capacity(config):
    transport = FakeTransport(capacity=4)
    config.channels.append(RegisterChannel(name="Far", address=4))
    engine = make_engine(config, transport)

    with pytest.raises(ConfigurationError):
        engine.start()

    assert transport.started_with is None
    assert not engine.is_running


def test_start_rejects_duplicate_addresses(config, transport):
    config.channels[1].address = 0
    engine = make_engine(config, transport)

    with pytest.raises(ConfigurationError, match="conflict"):
        engine.start()
    assert not engine.is_running


def test_start_rejects_zero_sine_period(config, transport):
    config.channels[0].period = 0
    engine = make_engine(config, transport)

    with pytest.raises(ConfigurationError, match="period"):
        engine.start()


def test_transport_bind_failure_propagates(config):
    transport = FakeTransport(fail_on_start=True)
    engine = make_engine(config, transport)

    with pytest.raises(RuntimeError, match="already in use"):
        engine.start()

    assert not engine.is_running
    assert engine.global_step == 0.0


def test_start_and_stop_lifecycle(config, transport):
    engine = make_engine(config, transport)

    engine.start()
    try:
        assert engine.is_running
        assert transport.started_with == ("127.0.0.1", 50200)
        assert wait_until(lambda: engine.global_step >= 3)
    finally:
        engine.stop()

    assert not engine.is_running
    assert transport.stopped

    writes = len(transport.holding_registers.writes)
    step = engine.global_step
    time.sleep(0.1)

    assert len(transport.holding_registers.writes) == writes
    assert engine.global_step == step


def test_restart_continues_global_step(config, transport):
    engine = make_engine(config, transport)

    engine.start()
    assert wait_until(lambda: engine.global_step >= 2)
    engine.stop()
    first_run = engine.global_step

    engine.start()
    assert wait_until(lambda: engine.global_step >= first_run + 2)
    engine.stop()

    assert engine.global_step >= first_run + 2


def test_stop_when_not_started_is_noop(config, transport):
    engine = make_engine(config, transport)
    engine.stop()
    assert not transport.stopped


def test_loop_survives_tick_errors(config, transport, caplog):
    registry = StrategyRegistry.default()
    registry.register("Flaky", ExplodingStrategy(fail_times=2))
    config.channels = [RegisterChannel(name="Flaky", address=0, signal_type="Flaky")]
    engine = make_engine(config, transport, strategies=registry)

    with caplog.at_level(logging.ERROR):
        engine.start()
        try:
            assert wait_until(lambda: engine.global_step >= 2)
        finally:
            engine.stop()

    assert transport.holding_registers[0] == 7
    assert caplog.text.count("Loop error") == 2


def test_restart_during_slow_tick_never_runs_two_loops(config, transport, caplog):
    slow = SlowStrategy(delay=0.3)
    registry = StrategyRegistry.default()
    registry.register("Slow", slow)
    config.channels = [RegisterChannel(name="Slow", address=0, signal_type="Slow")]
    engine = make_engine(config, transport, strategies=registry, grace_period_sec=0.05)

    with caplog.at_level(logging.WARNING):
        engine.start()
        assert wait_until(lambda: slow.calls >= 1)
        engine.stop()
        assert "still busy" in caplog.text

        engine.start()
        try:
            time.sleep(1.0)
        finally:
            engine.stop()

    assert slow.max_active == 1
    assert wait_until(lambda: slow.active == 0)
