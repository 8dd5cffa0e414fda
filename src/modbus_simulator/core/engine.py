"""
Simulation Engine
=================

Owns the channel list, the global step counter, the strategy registry and
the background update loop.

Lifecycle:
    Stopped --start()--> Running --stop()--> Stopped (start() may re-enter)

Per tick, in configured channel order:
1. Resolve the channel's strategy
2. Compute the value at the current global step
3. Write it to the holding register at the channel's address
4. Store it as the channel's current value

Then log a one-line summary, append a telemetry record, and advance the
global step. Every channel in a tick sees the same step, so waveforms stay
phase-locked to one clock.

Author: Guilherme F. G. Santos
Date: October 2026
License: MIT
"""

import logging
import threading
from datetime import datetime
from typing import List, Optional

from ..config import AppConfig
from ..modbus import ChannelRegisterMap, ModbusSlave
from .channel import RegisterChannel
from .generators import SignalGenerator
from .strategies import StrategyRegistry, UnsupportedSignalError
from .telemetry import TelemetrySink, format_decimal

logger = logging.getLogger(__name__)


class SimulatorEngine:
    """
    Background simulation of Modbus holding registers.

    Args:
        config: Application configuration (channels, endpoint, interval)
        transport: Object exposing start(endpoint), stop() and an indexable
                   ``holding_registers`` view. Defaults to a ModbusSlave.
        generator: Waveform generator; pass one with a fixed seed for
                   reproducible jitter
        strategies: Signal type registry, defaults to Sine and Ramp
        telemetry: CSV sink, defaults to config.log_file_name
        grace_period_sec: How long stop() waits for an in-flight tick
    """

    def __init__(
        self,
        config: AppConfig,
        transport=None,
        generator: Optional[SignalGenerator] = None,
        strategies: Optional[StrategyRegistry] = None,
        telemetry: Optional[TelemetrySink] = None,
        grace_period_sec: float = 0.2,
    ):
        self.config = config
        self.transport = transport if transport is not None else ModbusSlave()
        self.generator = generator or SignalGenerator()
        self.strategies = strategies or StrategyRegistry.default()
        self.telemetry = telemetry or TelemetrySink(
            config.log_file_name, enabled=config.logging_enabled
        )
        self.grace_period_sec = grace_period_sec

        self.register_map: Optional[ChannelRegisterMap] = None

        self._global_step = 0.0

        # One stop token per run; a loop only ever watches its own
        self._stop_requested = threading.Event()
        self._stop_requested.set()
        self._loop_thread: Optional[threading.Thread] = None

        # Loop that outlived the grace period of the last stop()
        self._draining_thread: Optional[threading.Thread] = None

    @property
    def channels(self) -> List[RegisterChannel]:
        return self.config.channels

    @property
    def global_step(self) -> float:
        return self._global_step

    @property
    def is_running(self) -> bool:
        return self._loop_thread is not None and not self._stop_requested.is_set()

    def validate(self) -> ChannelRegisterMap:
        """
        Pre-flight configuration check.

        Returns:
            Register layout for the configured channels

        Raises:
            ConfigurationError: Invalid settings, invalid channel parameters,
                                addresses outside the register block, or
                                two channels sharing an address
        """
        self.config.validate()

        for channel in self.channels:
            channel.validate()

        return ChannelRegisterMap(self.channels, len(self.transport.holding_registers))

    def start(self):
        """
        Validate, bind the transport and launch the update loop.

        Raises:
            ConfigurationError: If pre-flight validation fails
            RuntimeError: If the transport cannot bind (engine stays stopped)
        """
        if self.is_running:
            logger.warning("Simulation already running")
            return

        self.register_map = self.validate()

        endpoint = (self.config.host_address, self.config.host_port)
        self.transport.start(endpoint)

        self._log_system_header()

        # A tick still running from the previous run must finish first
        draining = self._draining_thread
        if draining is not None and draining.is_alive():
            logger.info("Waiting for previous simulation loop to finish its tick")
            draining.join()
        self._draining_thread = None

        stop_event = threading.Event()
        self._stop_requested = stop_event
        self._loop_thread = threading.Thread(
            target=self._run_loop, args=(stop_event,), daemon=True, name="SimulationLoop"
        )
        self._loop_thread.start()

    def stop(self):
        """
        Signal the loop to stop, wait for the in-flight tick, release transport.

        The loop is never interrupted mid-tick; it exits at its next check.
        """
        thread = self._loop_thread
        if thread is None:
            return

        self._stop_requested.set()

        thread.join(timeout=self.grace_period_sec)
        if thread.is_alive():
            logger.warning(
                f"Simulation loop still busy after {self.grace_period_sec:.1f}s grace period"
            )
            self._draining_thread = thread

        self._loop_thread = None
        self.transport.stop()
        logger.info("Simulation stopped")

    def tick(self) -> List[int]:
        """
        Run one update of every channel.

        Returns:
            Current channel values in configured order
        """
        registers = self.transport.holding_registers
        step = self._global_step

        for channel in self.channels:
            self._process_channel(channel, registers, step)

        values = [channel.current_value for channel in self.channels]

        if self.config.logging_enabled:
            summary = " | ".join(
                f"{channel.name}: {channel.scaled_value}" for channel in self.channels
            )
            logger.info(f"{summary} | Step: {format_decimal(step)}")

            self.telemetry.record(datetime.now(), values, step)

        self._global_step += 1
        return values

    def _process_channel(self, channel: RegisterChannel, registers, step: float):
        """Compute one channel and publish it; unsupported types are skipped."""
        try:
            strategy = self.strategies.resolve(channel.signal_type)
        except UnsupportedSignalError as e:
            logger.warning(f"{e} (channel '{channel.name}', address {channel.address})")
            return

        value = strategy.calculate(channel, step, self.generator)

        registers[channel.address] = value
        channel.current_value = value

    def _run_loop(self, stop_event: threading.Event):
        """Background thread body; runs until its own stop token is set."""
        logger.info("Background loop started")

        while not stop_event.is_set():
            try:
                self.tick()
            except Exception as e:
                logger.error(
                    f"Loop error at step {format_decimal(self._global_step)}: "
                    f"{type(e).__name__}: {e}"
                )

            stop_event.wait(self.config.sampling_interval_sec)

        logger.info("Background loop gracefully stopped")

    def _log_system_header(self):
        """One-time summary of the endpoint and channel layout."""
        logger.info("=" * 60)
        logger.info(
            f"[STATUS] Server: {self.config.host_address}:{self.config.host_port} | "
            f"Channels: {len(self.channels)} | "
            f"Interval: {self.config.sampling_interval_ms} ms"
        )
        logger.info("=" * 60)

        for line in self.register_map.describe():
            logger.info(line)

        logger.info("=" * 60)
