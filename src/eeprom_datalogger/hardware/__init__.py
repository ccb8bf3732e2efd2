"""
EEPROM hardware abstraction layer for the data logger.

This module provides the page-level interface the logger core talks to.
The core never touches a bus directly: it writes and reads whole pages
(or a handful of bytes for the persisted entry counter) through an
IEepromDevice, and any transport failure surfaces as an EepromError.

Classes:
    IEepromDevice: Abstract interface for paged EEPROM implementations
    EepromImage: In-memory / image-file backed store (image_device)
    Cat24Device: CAT24M01 on a Linux I2C bus (cat24_device)

Exceptions:
    EepromError: Base exception for all EEPROM-related errors
    TransportError: Page or byte read/write failed on the bus
    AddressError: Page or byte address outside the device
    NoDeviceError: No EEPROM answered on the bus
"""

from abc import ABC, abstractmethod
from typing import Optional
import logging

from eeprom_datalogger.core.geometry import EepromGeometry

logger = logging.getLogger(__name__)


# =============================================================================
# Custom Exceptions
# =============================================================================

class EepromError(Exception):
    """Base exception for all EEPROM-related errors."""

    def __init__(self, message: str, device_info: Optional[str] = None):
        self.message = message
        self.device_info = device_info
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if self.device_info:
            return f"{self.message} [Device: {self.device_info}]"
        return self.message


class TransportError(EepromError):
    """Raised when a page or byte transfer fails."""

    def __init__(self, message: str, page: Optional[int] = None,
                 address: Optional[int] = None, operation: Optional[str] = None,
                 errno: Optional[int] = None,
                 device_info: Optional[str] = None):
        self.page = page
        self.address = address
        self.operation = operation
        self.errno = errno
        super().__init__(message, device_info)

    def _format_message(self) -> str:
        base = super()._format_message()
        parts = []
        if self.operation:
            parts.append(f"Op: {self.operation}")
        if self.page is not None:
            parts.append(f"Page {self.page}")
        if self.address is not None:
            parts.append(f"Addr 0x{self.address:05X}")
        if parts:
            return f"{base} [{', '.join(parts)}]"
        return base


class AddressError(EepromError, ValueError):
    """Raised when a page index or byte address is outside the device."""

    def __init__(self, message: str, value: Optional[int] = None,
                 limit: Optional[int] = None):
        self.value = value
        self.limit = limit
        super().__init__(message)

    def _format_message(self) -> str:
        base = super()._format_message()
        if self.value is not None and self.limit is not None:
            return f"{base} [{self.value} not in 0..{self.limit - 1}]"
        return base


class NoDeviceError(EepromError):
    """Raised when no EEPROM answers at the configured address."""

    def __init__(self, message: str = "No EEPROM device found",
                 device_info: Optional[str] = None):
        super().__init__(message, device_info)


# =============================================================================
# Abstract Interface
# =============================================================================

class IEepromDevice(ABC):
    """
    Abstract interface for paged EEPROM implementations.

    Page writes start at the first byte of the page and touch only as
    many bytes as supplied; the rest of the page keeps whatever it held
    before. This is what lets the logger write short records and find
    their end by a sentinel byte.
    """

    @property
    @abstractmethod
    def geometry(self) -> EepromGeometry:
        """Page size, page count and bus addressing of this device."""
        pass

    @abstractmethod
    def write_page(self, page: int, data: bytes) -> None:
        """
        Write up to one page of data starting at the page boundary.

        Args:
            page: Page index (0 to page_count - 1)
            data: At most page_size bytes

        Raises:
            AddressError: If page is out of range
            ValueError: If data is longer than one page
            TransportError: If the write fails
        """
        pass

    @abstractmethod
    def read_page(self, page: int) -> bytes:
        """
        Read a full page.

        Args:
            page: Page index (0 to page_count - 1)

        Returns:
            Exactly page_size bytes

        Raises:
            AddressError: If page is out of range
            TransportError: If the read fails
        """
        pass

    @abstractmethod
    def read_byte(self, address: int) -> int:
        """
        Read a single byte at a linear address.

        Raises:
            AddressError: If address is out of range
            TransportError: If the read fails
        """
        pass

    @abstractmethod
    def write_bytes(self, address: int, data: bytes) -> None:
        """
        Write a small buffer at a linear address (must stay in one page).

        Raises:
            AddressError: If address is out of range
            ValueError: If the buffer crosses a page boundary
            TransportError: If the write fails
        """
        pass

    def close(self) -> None:
        """Release any bus or file resources. Safe to call twice."""
        pass

    def describe(self) -> str:
        """Short human-readable device description for logs."""
        return self.__class__.__name__


__all__ = [
    "EepromError",
    "TransportError",
    "AddressError",
    "NoDeviceError",
    "IEepromDevice",
]
