"""
Serial channel for transmitting logged data.

The board sends its stored pages as plain text over the micro:bit USB
serial port at 115200 baud. On the host side the same stream can go to
a real serial port (pyserial) or to any text stream such as stdout.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Optional, TextIO

import serial

from . import EepromError

logger = logging.getLogger(__name__)

DEFAULT_BAUDRATE = 115200
SERIAL_ENCODING = "latin-1"


class SerialLinkError(EepromError):
    """Raised when the serial channel cannot be opened or written."""

    def __init__(self, message: str, port: Optional[str] = None):
        self.port = port
        super().__init__(message, device_info=port)


class ISerialLink(ABC):
    """Abstract text sink for transmitted data."""

    @abstractmethod
    def open(self) -> None:
        pass

    @abstractmethod
    def is_open(self) -> bool:
        pass

    @abstractmethod
    def write_string(self, text: str) -> None:
        """Send text exactly as given (no newline added)."""
        pass

    @abstractmethod
    def close(self) -> None:
        pass

    def describe(self) -> str:
        return self.__class__.__name__

    def __enter__(self):
        if not self.is_open():
            self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


class SerialLink(ISerialLink):
    """
    pyserial-backed link.

    Args:
        port: Serial device, e.g. /dev/ttyACM0 or COM3
        baudrate: Line speed (default: 115200)
        timeout: Write timeout in seconds
    """

    def __init__(self, port: str, baudrate: int = DEFAULT_BAUDRATE,
                 timeout: float = 1.0):
        self.port = port
        self.baudrate = baudrate
        self.timeout = timeout
        self._serial: Optional[serial.Serial] = None

    def open(self) -> None:
        if self.is_open():
            logger.debug("Serial port %s already open", self.port)
            return

        try:
            self._serial = serial.Serial(
                self.port, baudrate=self.baudrate, write_timeout=self.timeout
            )
        except serial.SerialException as e:
            raise SerialLinkError(f"Failed to open serial port {self.port}: {e}",
                                  port=self.port) from e

        logger.info("Opened serial port %s at %d baud", self.port, self.baudrate)

    def is_open(self) -> bool:
        return self._serial is not None and self._serial.is_open

    def write_string(self, text: str) -> None:
        if not self.is_open():
            raise SerialLinkError("Serial port not open", port=self.port)

        try:
            self._serial.write(text.encode(SERIAL_ENCODING))
        except serial.SerialException as e:
            raise SerialLinkError(f"Serial write failed: {e}", port=self.port) from e

    def close(self) -> None:
        if self._serial is not None:
            try:
                self._serial.flush()
                self._serial.close()
            except serial.SerialException as e:
                logger.warning("Error closing serial port %s: %s", self.port, e)
            finally:
                self._serial = None

    def describe(self) -> str:
        return f"{self.port}@{self.baudrate}"


class StreamLink(ISerialLink):
    """Link writing to a text stream (stdout, a file, a StringIO)."""

    def __init__(self, stream: TextIO, name: str = "stream"):
        self.stream = stream
        self.name = name
        self._open = False

    def open(self) -> None:
        self._open = True

    def is_open(self) -> bool:
        return self._open

    def write_string(self, text: str) -> None:
        if not self._open:
            raise SerialLinkError("Stream link not open", port=self.name)
        self.stream.write(text)

    def close(self) -> None:
        if self._open:
            self.stream.flush()
        self._open = False

    def describe(self) -> str:
        return self.name
