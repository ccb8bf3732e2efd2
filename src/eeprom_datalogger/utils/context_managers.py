"""
Context managers for the EEPROM data logger.

Provides safe resource management for EEPROM devices: the backend is
opened on entry and closed on exit, which for an image file means the
pages written during the block are saved back to disk.
"""

import logging
from pathlib import Path
from typing import Optional

from eeprom_datalogger.core.geometry import DEFAULT_GEOMETRY, EepromGeometry
from eeprom_datalogger.core.settings import Backend, DeviceSettings
from eeprom_datalogger.hardware import EepromError, IEepromDevice
from eeprom_datalogger.hardware.image_device import EepromImage
from eeprom_datalogger.utils.logging import log_device_info

logger = logging.getLogger(__name__)


class DeviceContext:
    """
    Context manager for EEPROM device access.

    Attributes:
        backend: Image file or I2C bus
        image_path: Image file for the image backend
        i2c_bus: Linux I2C bus number for the I2C backend
        device: Open device (set during context)

    Example:
        >>> with DeviceContext(Backend.IMAGE, image_path="logger.bin") as eeprom:
        ...     log_data(state, eeprom, sensors)
        >>> # Image saved, device closed
    """

    def __init__(self, backend: Backend, image_path: Optional[Path] = None,
                 i2c_bus: int = 1, geometry: EepromGeometry = DEFAULT_GEOMETRY,
                 write_cycle_time: float = 0.005):
        self.backend = backend
        self.image_path = Path(image_path) if image_path is not None else None
        self.i2c_bus = i2c_bus
        self.geometry = geometry
        self.write_cycle_time = write_cycle_time
        self.device: Optional[IEepromDevice] = None

    @classmethod
    def from_settings(cls, settings: DeviceSettings) -> "DeviceContext":
        """Build a context from the device settings category."""
        geometry = EepromGeometry(
            bytes_per_page=DEFAULT_GEOMETRY.bytes_per_page,
            total_pages=DEFAULT_GEOMETRY.total_pages,
            base_address=settings.base_address,
        )
        return cls(
            settings.get_backend(),
            image_path=settings.get_image_path(),
            i2c_bus=settings.i2c_bus,
            geometry=geometry,
            write_cycle_time=settings.write_cycle_time,
        )

    def _open(self) -> IEepromDevice:
        if self.backend is Backend.I2C:
            # smbus2 imports fcntl, which is POSIX only
            from eeprom_datalogger.hardware.cat24_device import Cat24Device
            return Cat24Device(self.i2c_bus, geometry=self.geometry,
                               write_cycle_time=self.write_cycle_time)

        if self.image_path is None:
            return EepromImage(self.geometry)
        return EepromImage.open_image(self.image_path, self.geometry)

    def __enter__(self) -> IEepromDevice:
        """
        Enter context - open device.

        Raises:
            EepromError: If the device cannot be opened
        """
        try:
            self.device = self._open()
        except EepromError as e:
            logger.error("Failed to open device: %s", e)
            raise

        log_device_info(self.device)
        return self.device

    def __exit__(self, exc_type, exc_val, exc_tb):
        """
        Exit context - close (and save) the device.

        A close failure is raised only when no other exception is
        already propagating.
        """
        if self.device is not None:
            try:
                self.device.close()
                logger.debug("Device closed")
            except EepromError as e:
                logger.error("Failed to close device: %s", e)
                if exc_type is None:
                    raise
            finally:
                self.device = None

        # Don't suppress exceptions
        return False
