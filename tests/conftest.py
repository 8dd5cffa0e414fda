import pytest

from modbus_simulator.config import AppConfig


class FakeRegisters:
    """In-memory stand-in for the holding register view."""

    def __init__(self, capacity=16):
        self.values = [0] * capacity
        self.writes = []

    def __len__(self):
        return len(self.values)

    def __getitem__(self, address):
        return self.values[address]

    def __setitem__(self, address, value):
        self.values[address] = value
        self.writes.append((address, value))


class FakeTransport:
    def __init__(self, capacity=16, fail_on_start=False):
        self.holding_registers = FakeRegisters(capacity)
        self.fail_on_start = fail_on_start
        self.started_with = None
        self.stopped = False

    def start(self, endpoint):
        if self.fail_on_start:
            raise RuntimeError("address already in use")
        self.started_with = endpoint

    def stop(self):
        self.stopped = True


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def config(tmp_path):
    return AppConfig(
        sampling_interval_ms=10,
        log_file_name=str(tmp_path / "telemetry.csv"),
    )
