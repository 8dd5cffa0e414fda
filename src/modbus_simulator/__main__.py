"""
Simulator Entry Point
=====================

Loads the configuration, starts the Modbus server and the simulation loop,
and runs until Ctrl+C / SIGTERM.

Usage:
    python -m modbus_simulator --config config.json
    python -m modbus_simulator --port 5020 --interval 500 --no-log

Author: Guilherme F. G. Santos
Date: October 2026
"""

import argparse
import logging
import signal
import sys
import threading

from .config import DEFAULT_CONFIG_PATH, AppConfig, load_config
from .core import ConfigurationError, SignalGenerator, SimulatorEngine

logger = logging.getLogger(__name__)

# Set by the signal handler, waited on by main()
shutdown_requested = threading.Event()


def signal_handler(sig, frame):
    """Handle Ctrl+C for clean shutdown."""
    logger.info("Shutdown signal received. Stopping simulation...")
    shutdown_requested.set()


def configure_logging(verbose: bool = False):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def apply_overrides(config: AppConfig, args: argparse.Namespace) -> AppConfig:
    """Command-line options take precedence over the config file."""
    if args.host is not None:
        config.host_address = args.host
    if args.port is not None:
        config.host_port = args.port
    if args.interval is not None:
        config.sampling_interval_ms = args.interval
    if args.no_log:
        config.logging_enabled = False
    return config


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Modbus TCP Signal Simulator")
    parser.add_argument(
        "--config",
        type=str,
        default=DEFAULT_CONFIG_PATH,
        help="JSON config file (created with defaults if missing)",
    )
    parser.add_argument("--host", type=str, default=None, help="Modbus bind address")
    parser.add_argument("--port", type=int, default=None, help="Modbus TCP port")
    parser.add_argument(
        "--interval", type=int, default=None, help="Sampling interval [ms]"
    )
    parser.add_argument(
        "--no-log",
        action="store_true",
        help="Disable console summaries and CSV telemetry",
    )
    parser.add_argument(
        "--seed", type=int, default=None, help="Seed for reproducible signal noise"
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    config = apply_overrides(load_config(args.config), args)
    engine = SimulatorEngine(config, generator=SignalGenerator(seed=args.seed))

    try:
        engine.start()
    except ConfigurationError as e:
        logger.error(f"Invalid configuration: {e}")
        return 1
    except RuntimeError as e:
        logger.error(f"Modbus server startup failed: {e}")
        return 1

    logger.info("Press Ctrl+C to stop gracefully")

    try:
        while not shutdown_requested.wait(timeout=0.5):
            pass
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received")
    finally:
        logger.info("Shutting down...")
        engine.stop()

    return 0


if __name__ == "__main__":
    sys.exit(main())
