"""
CAT24M01 EEPROM driver over a Linux I2C bus.

The CAT24M01 answers on two I2C addresses: the base address for the
lower 64 KiB and base + 1 for the upper 64 KiB (bit 16 of the byte
address). Every transfer starts with the 16-bit memory address, high
byte first. Writes need a write-cycle pause before the chip answers
again.

Example:
    with Cat24Device(bus_number=1) as eeprom:
        eeprom.write_page(24, b"12/05/24;\\r\\n\\xa3")
"""

from __future__ import annotations

import logging
import time
from typing import Optional

from smbus2 import SMBus, i2c_msg

from eeprom_datalogger.core.geometry import (
    DEFAULT_GEOMETRY,
    EepromGeometry,
    PhysicalAddress,
    map_address,
    map_page,
)
from . import AddressError, IEepromDevice, NoDeviceError, TransportError

logger = logging.getLogger(__name__)

# Datasheet write cycle time is 5 ms
WRITE_CYCLE_TIME = 0.005


class Cat24Device(IEepromDevice):
    """
    CAT24M01 on an smbus2 bus.

    Args:
        bus_number: Linux I2C bus (/dev/i2c-N)
        geometry: EEPROM geometry, including the base I2C address
        write_cycle_time: Seconds to wait after each write
        bus: Already-open SMBus to use instead of opening bus_number
    """

    def __init__(self, bus_number: int = 1,
                 geometry: EepromGeometry = DEFAULT_GEOMETRY,
                 write_cycle_time: float = WRITE_CYCLE_TIME,
                 bus: Optional[SMBus] = None):
        self._geometry = geometry
        self.bus_number = bus_number
        self.write_cycle_time = write_cycle_time
        self._owns_bus = bus is None

        if bus is None:
            try:
                bus = SMBus(bus_number)
            except OSError as e:
                raise NoDeviceError(
                    f"Cannot open I2C bus {bus_number}: {e}",
                    device_info=self.describe(),
                ) from e

        self._bus = bus
        logger.debug("Cat24Device initialized (bus=%d, base=0x%02X)",
                     bus_number, geometry.base_address)

    @property
    def geometry(self) -> EepromGeometry:
        return self._geometry

    def _map_page(self, page: int) -> PhysicalAddress:
        try:
            return map_page(page, self._geometry)
        except ValueError as e:
            raise AddressError(str(e), value=page,
                               limit=self._geometry.total_pages) from e

    def _map_address(self, address: int) -> PhysicalAddress:
        try:
            return map_address(address, self._geometry)
        except ValueError as e:
            raise AddressError(str(e), value=address,
                               limit=self._geometry.total_bytes) from e

    def _write(self, target: PhysicalAddress, data: bytes, operation: str,
               page: Optional[int] = None) -> None:
        msg = i2c_msg.write(target.device_address, target.address_bytes + bytes(data))
        try:
            self._bus.i2c_rdwr(msg)
        except OSError as e:
            raise TransportError(
                f"I2C write failed: {e}",
                page=page, address=target.linear_address, operation=operation,
                errno=e.errno, device_info=self.describe(),
            ) from e

        time.sleep(self.write_cycle_time)

    def _read(self, target: PhysicalAddress, length: int, operation: str,
              page: Optional[int] = None) -> bytes:
        set_address = i2c_msg.write(target.device_address, target.address_bytes)
        read = i2c_msg.read(target.device_address, length)
        try:
            self._bus.i2c_rdwr(set_address, read)
        except OSError as e:
            raise TransportError(
                f"I2C read failed: {e}",
                page=page, address=target.linear_address, operation=operation,
                errno=e.errno, device_info=self.describe(),
            ) from e

        return bytes(list(read))

    def write_page(self, page: int, data: bytes) -> None:
        target = self._map_page(page)
        if len(data) > self._geometry.bytes_per_page:
            raise ValueError(
                f"Data must be at most {self._geometry.bytes_per_page} bytes, "
                f"got {len(data)} bytes"
            )
        self._write(target, data, "write_page", page=page)

    def read_page(self, page: int) -> bytes:
        target = self._map_page(page)
        return self._read(target, self._geometry.bytes_per_page, "read_page", page=page)

    def read_byte(self, address: int) -> int:
        target = self._map_address(address)
        return self._read(target, 1, "read_byte")[0]

    def write_bytes(self, address: int, data: bytes) -> None:
        target = self._map_address(address)
        page_size = self._geometry.bytes_per_page
        if (address % page_size) + len(data) > page_size:
            raise ValueError(
                f"Write of {len(data)} bytes at 0x{address:X} crosses a page boundary"
            )
        self._write(target, data, "write_bytes")

    def close(self) -> None:
        if self._bus is not None and self._owns_bus:
            try:
                self._bus.close()
            except OSError as e:
                logger.warning("Error closing I2C bus %d: %s", self.bus_number, e)
        self._bus = None

    def describe(self) -> str:
        return f"CAT24M01 i2c-{self.bus_number}@0x{self._geometry.base_address:02X}"

    def __enter__(self) -> "Cat24Device":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
