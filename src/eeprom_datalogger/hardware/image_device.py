"""
In-memory EEPROM backed by an optional binary image file.

EepromImage behaves like the CAT24M01 as far as the logger can tell:
it starts erased (every byte 0xFF), page writes touch only the bytes
supplied, and reads always return whole pages. The contents can be
loaded from and saved to a raw 128 KiB image, which lets the logger run
on a host without any hardware attached.

Example:
    with EepromImage.open_image("logger.bin") as eeprom:
        data = eeprom.read_page(23)
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from eeprom_datalogger.core.geometry import (
    BLANK_BYTE,
    DEFAULT_GEOMETRY,
    EepromGeometry,
)
from . import AddressError, IEepromDevice, TransportError

logger = logging.getLogger(__name__)


class EepromImage(IEepromDevice):
    """
    Bytearray-backed paged EEPROM.

    Attributes:
        path: Image file loaded from / saved to, if any
        dirty: True when memory differs from the saved image
    """

    def __init__(self, geometry: EepromGeometry = DEFAULT_GEOMETRY,
                 initial_data: Optional[bytes] = None,
                 path: Optional[Path] = None):
        self._geometry = geometry
        if initial_data is not None:
            if len(initial_data) != geometry.total_bytes:
                raise ValueError(
                    f"Image must be {geometry.total_bytes} bytes, got {len(initial_data)}"
                )
            self._data = bytearray(initial_data)
        else:
            self._data = bytearray([BLANK_BYTE] * geometry.total_bytes)

        self.path = Path(path) if path is not None else None
        self.dirty = False
        self.write_count = 0
        self.read_count = 0

    # =========================================================================
    # Image Files
    # =========================================================================

    @classmethod
    def open_image(cls, path, geometry: EepromGeometry = DEFAULT_GEOMETRY) -> "EepromImage":
        """
        Load an image file, or start blank if it does not exist yet.

        Raises:
            TransportError: If the file cannot be read or has the wrong size
        """
        image_path = Path(path)

        if not image_path.exists():
            logger.info("Image %s not found, starting with a blank store", image_path)
            return cls(geometry, path=image_path)

        try:
            data = image_path.read_bytes()
        except OSError as e:
            raise TransportError(
                f"Cannot read image {image_path}: {e}",
                operation="load", errno=e.errno,
            ) from e

        if len(data) != geometry.total_bytes:
            raise TransportError(
                f"Image {image_path} is {len(data)} bytes, expected {geometry.total_bytes}",
                operation="load",
            )

        logger.info("Loaded image %s", image_path)
        return cls(geometry, initial_data=data, path=image_path)

    def save(self, path=None) -> None:
        """
        Write the store to its image file (temp file then rename).

        Raises:
            TransportError: If the file cannot be written
            ValueError: If no path was given or set
        """
        target = Path(path) if path is not None else self.path
        if target is None:
            raise ValueError("No image path to save to")

        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            temp_file = target.with_suffix(target.suffix + ".tmp")
            temp_file.write_bytes(bytes(self._data))
            temp_file.replace(target)
        except OSError as e:
            raise TransportError(
                f"Cannot write image {target}: {e}",
                operation="save", errno=e.errno,
            ) from e

        self.dirty = False
        logger.debug("Saved image %s", target)

    def snapshot(self) -> bytes:
        """Copy of the whole store."""
        return bytes(self._data)

    # =========================================================================
    # IEepromDevice
    # =========================================================================

    @property
    def geometry(self) -> EepromGeometry:
        return self._geometry

    def _check_page(self, page: int) -> int:
        if not 0 <= page < self._geometry.total_pages:
            raise AddressError("Page out of range", value=page,
                               limit=self._geometry.total_pages)
        return page * self._geometry.bytes_per_page

    def _check_address(self, address: int) -> None:
        if not 0 <= address < self._geometry.total_bytes:
            raise AddressError("Address out of range", value=address,
                               limit=self._geometry.total_bytes)

    def write_page(self, page: int, data: bytes) -> None:
        offset = self._check_page(page)
        if len(data) > self._geometry.bytes_per_page:
            raise ValueError(
                f"Data must be at most {self._geometry.bytes_per_page} bytes, "
                f"got {len(data)} bytes"
            )

        self._data[offset:offset + len(data)] = data
        self.write_count += 1
        self.dirty = True

    def read_page(self, page: int) -> bytes:
        offset = self._check_page(page)
        self.read_count += 1
        return bytes(self._data[offset:offset + self._geometry.bytes_per_page])

    def read_byte(self, address: int) -> int:
        self._check_address(address)
        self.read_count += 1
        return self._data[address]

    def write_bytes(self, address: int, data: bytes) -> None:
        self._check_address(address)
        page_size = self._geometry.bytes_per_page
        if (address % page_size) + len(data) > page_size:
            raise ValueError(
                f"Write of {len(data)} bytes at 0x{address:X} crosses a page boundary"
            )

        self._data[address:address + len(data)] = data
        self.write_count += 1
        self.dirty = True

    def close(self) -> None:
        """Save pending changes to the image file, if there is one."""
        if self.dirty and self.path is not None:
            self.save()

    def describe(self) -> str:
        if self.path is not None:
            return f"image:{self.path}"
        return "image:<memory>"

    def __enter__(self) -> "EepromImage":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
