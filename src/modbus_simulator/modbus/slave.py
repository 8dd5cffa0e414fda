"""
Modbus TCP Slave Server
=====================================================

Modbus/TCP transport for the simulator, with a thread-owned async lifecycle.

The simulation engine only needs three things from the transport:
- start(endpoint): bind and serve in the background
- stop(): shut the server down
- holding_registers: indexable view of the holding register block

Author: Guilherme F. G. Santos
Date: October 2026
License: MIT
"""

import asyncio
import threading
import logging
from typing import Optional, Tuple
from dataclasses import dataclass
from contextlib import suppress

# Modern pymodbus 3.x imports
from pymodbus import ModbusDeviceIdentification
from pymodbus.server import ModbusTcpServer
from pymodbus.datastore import (
    ModbusSequentialDataBlock,
    ModbusDeviceContext,
    ModbusServerContext,
)

from .protocols import ModbusEncoder, ModbusDecoder

logger = logging.getLogger(__name__)

Endpoint = Tuple[str, int]


@dataclass
class ModbusServerConfig:
    """Configuration for Modbus TCP server."""

    unit_id: int = 1

    # Full 16-bit address space
    holding_register_count: int = 65536

    # Server identification
    vendor_name: str = "Modbus Signal Simulator"
    product_code: str = "MSS-100"
    vendor_url: str = "https://github.com/modbus-signal-simulator"
    product_name: str = "Simulated PLC"
    model_name: str = "Virtual PLC v1.0"
    version: str = "1.0.0"

    # Timeouts
    startup_timeout_sec: float = 5.0
    shutdown_timeout_sec: float = 3.0


class HoldingRegisterView:
    """
    Indexable int16 view over a holding register data block.

    ``view[address]`` reads and writes signed values; the block stores the
    unsigned 16-bit encoding that clients receive on the wire.
    """

    # ModbusDeviceContext shifts request addresses by one before hitting
    # the data block, so register N lives at block address N + 1.
    BLOCK_OFFSET = 1

    def __init__(
        self,
        block: ModbusSequentialDataBlock,
        capacity: int,
        lock: Optional[threading.RLock] = None,
    ):
        self._block = block
        self._capacity = capacity
        self._lock = lock or threading.RLock()

    def __len__(self) -> int:
        return self._capacity

    def _check_address(self, address: int):
        if not 0 <= address < self._capacity:
            raise IndexError(
                f"Holding register address {address} out of range "
                f"[0, {self._capacity - 1}]"
            )

    def __getitem__(self, address: int) -> int:
        return ModbusDecoder.register_to_int16(self.raw(address))

    def __setitem__(self, address: int, value: int):
        self._check_address(address)
        reg_val = ModbusEncoder.int16_to_register(ModbusEncoder.wrap_int16(value))

        with self._lock:
            self._block.setValues(address + self.BLOCK_OFFSET, [reg_val])

    def raw(self, address: int) -> int:
        """Unsigned register word as served to clients."""
        self._check_address(address)

        with self._lock:
            values = self._block.getValues(address + self.BLOCK_OFFSET, 1)

        return values[0]


class ModbusSlave:
    """
    Modbus TCP slave serving a holding register block.

    The server runs in its own thread with its own event loop, so the
    caller's thread stays free. Bind failures are reported from start().
    """

    def __init__(self, config: Optional[ModbusServerConfig] = None):
        """Initialize Modbus slave server."""

        self.config = config or ModbusServerConfig()

        capacity = self.config.holding_register_count
        self.hr_block = ModbusSequentialDataBlock(
            0, [0] * (capacity + HoldingRegisterView.BLOCK_OFFSET)
        )

        device_context = ModbusDeviceContext(hr=self.hr_block)
        self.context = ModbusServerContext(
            devices={self.config.unit_id: device_context}, single=False
        )

        self.identity = ModbusDeviceIdentification()
        self.identity.VendorName = self.config.vendor_name
        self.identity.ProductCode = self.config.product_code
        self.identity.VendorUrl = self.config.vendor_url
        self.identity.ProductName = self.config.product_name
        self.identity.ModelName = self.config.model_name
        self.identity.MajorMinorRevision = self.config.version

        # Synchronization
        self._lock = threading.RLock()
        self._running = threading.Event()
        self._server_ready = threading.Event()
        self._shutdown_requested: Optional[asyncio.Event] = None

        self._holding_registers = HoldingRegisterView(
            self.hr_block, capacity, self._lock
        )

        # Lifecycle management
        self.server: Optional[ModbusTcpServer] = None
        self.server_thread: Optional[threading.Thread] = None
        self.endpoint: Optional[Endpoint] = None
        self._event_loop: Optional[asyncio.AbstractEventLoop] = None
        self._startup_error: Optional[BaseException] = None

        logger.debug(
            f"Modbus slave initialized: unit_id={self.config.unit_id}, "
            f"holding_registers={capacity}"
        )

    @property
    def holding_registers(self) -> HoldingRegisterView:
        return self._holding_registers

    def start(self, endpoint: Endpoint):
        """
        Bind to endpoint and serve in a background thread.

        Args:
            endpoint: (host, port) to listen on

        Raises:
            RuntimeError: If the server cannot bind or does not come up
                          within the startup timeout
        """
        if self._running.is_set():
            logger.warning("Modbus server already running")
            return

        self.endpoint = (endpoint[0], int(endpoint[1]))
        self._server_ready.clear()
        self._startup_error = None

        self.server_thread = threading.Thread(
            target=self._run_server, daemon=True, name="ModbusTCPServer"
        )
        self.server_thread.start()

        if not self._server_ready.wait(timeout=self.config.startup_timeout_sec):
            self.stop()
            raise RuntimeError("Server startup timeout")

        if self._startup_error is not None:
            self.server_thread.join(timeout=self.config.shutdown_timeout_sec)
            self.server_thread = None
            raise RuntimeError(
                f"Modbus server failed to bind {self.endpoint[0]}:{self.endpoint[1]}: "
                f"{self._startup_error}"
            ) from self._startup_error

        self._running.set()
        logger.info(f"Modbus server started on {self.endpoint[0]}:{self.endpoint[1]}")

    def _run_server(self):
        """Thread body: own event loop for the async server."""
        loop = None
        try:
            loop = asyncio.new_event_loop()
            asyncio.set_event_loop(loop)
            self._event_loop = loop

            loop.run_until_complete(self._async_run_server())

        except Exception as e:
            logger.error(f"Modbus server error: {type(e).__name__}: {e}")
            if not self._server_ready.is_set():
                self._startup_error = e

        finally:
            # Signal ready even on error (to unblock waiting threads)
            self._server_ready.set()
            self._running.clear()

            if loop and not loop.is_closed():
                pending = asyncio.all_tasks(loop)
                for task in pending:
                    task.cancel()

                with suppress(Exception):
                    loop.run_until_complete(
                        asyncio.gather(*pending, return_exceptions=True)
                    )

                loop.close()

            self._event_loop = None

    async def _async_run_server(self):
        """Create, bind and serve until shutdown is requested."""
        # Server must be created inside the running loop
        self._shutdown_requested = asyncio.Event()
        self.server = ModbusTcpServer(
            context=self.context,
            identity=self.identity,
            address=self.endpoint,
        )

        try:
            if not await self.server.listen():
                raise OSError(f"cannot listen on {self.endpoint[0]}:{self.endpoint[1]}")

            self._server_ready.set()
            await self._shutdown_requested.wait()

        finally:
            with suppress(Exception):
                await self.server.shutdown()
            self.server = None

    def stop(self):
        """Stop Modbus server (graceful shutdown)."""
        thread = self.server_thread
        if thread is None:
            return

        self._running.clear()

        loop = self._event_loop
        if loop and not loop.is_closed() and self._shutdown_requested is not None:
            with suppress(RuntimeError):
                loop.call_soon_threadsafe(self._shutdown_requested.set)

        if thread.is_alive():
            thread.join(timeout=self.config.shutdown_timeout_sec)

            if thread.is_alive():
                logger.warning("Server thread did not terminate cleanly")

        self.server_thread = None
        logger.info("Modbus server stopped")

    @property
    def is_running(self) -> bool:
        """Check if server is running."""
        return self._running.is_set()
