"""
Mock device fixtures for testing the EEPROM data logger.

Provides an in-memory EEPROM with fault injection, a serial link that
captures transmitted text, and a sensor source that records which
accessors were called, for testing without the board.
"""

from typing import Dict, List, Optional, Set
import errno

from eeprom_datalogger.core.geometry import DEFAULT_GEOMETRY, EepromGeometry, data_page
from eeprom_datalogger.core.metadata import encode_entry_count
from eeprom_datalogger.core.page_io import encode_page
from eeprom_datalogger.hardware import TransportError
from eeprom_datalogger.hardware.image_device import EepromImage
from eeprom_datalogger.hardware.serial_link import ISerialLink, SerialLinkError
from eeprom_datalogger.sensors import ISensorSource

# errno values raised by the mock bus
ERROR_NO_ACK = errno.ENXIO
ERROR_NOT_READY = errno.ENODEV

COUNTER_ADDRESS = 12 * 128


class MockEepromDevice(EepromImage):
    """
    EEPROM simulating a CAT24M01 on a flaky bus.

    Provides:
    - Pages that fail on write or read
    - A disconnected state where every transfer fails
    - A power cut that drops the next counter write
    - Operation log for checking write ordering
    """

    def __init__(
        self,
        geometry: EepromGeometry = DEFAULT_GEOMETRY,
        initial_data: Optional[bytes] = None,
        bad_pages: Optional[Set[int]] = None,
        bad_read_pages: Optional[Set[int]] = None,
        disconnected: bool = False
    ):
        """
        Initialize mock EEPROM.

        Args:
            geometry: EEPROM geometry (default: 1024 x 128)
            initial_data: Full image to start from (default: erased)
            bad_pages: Pages whose writes fail
            bad_read_pages: Pages whose reads fail
            disconnected: Whether every transfer fails
        """
        super().__init__(geometry, initial_data=initial_data)
        self.bad_pages = bad_pages or set()
        self.bad_read_pages = bad_read_pages or set()
        self.disconnected = disconnected
        self.cut_power_at_counter = False
        self.operations: List[tuple] = []

    def _fail(self, operation: str, page: Optional[int] = None,
              address: Optional[int] = None, code: int = ERROR_NO_ACK) -> None:
        raise TransportError(
            "Mock bus failure", page=page, address=address,
            operation=operation, errno=code, device_info="mock",
        )

    def write_page(self, page: int, data: bytes) -> None:
        if self.disconnected:
            self._fail("write_page", page=page, code=ERROR_NOT_READY)
        if page in self.bad_pages:
            self._fail("write_page", page=page)
        super().write_page(page, data)
        self.operations.append(("write_page", page))

    def read_page(self, page: int) -> bytes:
        if self.disconnected:
            self._fail("read_page", page=page, code=ERROR_NOT_READY)
        if page in self.bad_read_pages:
            self._fail("read_page", page=page)
        return super().read_page(page)

    def read_byte(self, address: int) -> int:
        if self.disconnected:
            self._fail("read_byte", address=address, code=ERROR_NOT_READY)
        return super().read_byte(address)

    def write_bytes(self, address: int, data: bytes) -> None:
        if self.disconnected:
            self._fail("write_bytes", address=address, code=ERROR_NOT_READY)
        if self.cut_power_at_counter:
            # Power lost before the counter reached the chip
            self.cut_power_at_counter = False
            self.disconnected = True
            self._fail("write_bytes", address=address, code=ERROR_NOT_READY)
        super().write_bytes(address, data)
        self.operations.append(("write_bytes", address))

    def disconnect(self):
        """Simulate device disconnection."""
        self.disconnected = True

    def reconnect(self):
        """Simulate device reconnection (power restored)."""
        self.disconnected = False

    def mark_page_bad(self, page: int):
        """Make writes to a page fail."""
        self.bad_pages.add(page)

    def mark_page_good(self, page: int):
        """Make writes to a page succeed again."""
        self.bad_pages.discard(page)

    def counter_bytes(self) -> bytes:
        """Raw persisted counter bytes."""
        return self.snapshot()[COUNTER_ADDRESS:COUNTER_ADDRESS + 2]

    def get_statistics(self) -> dict:
        """Get operation statistics."""
        return {
            'read_count': self.read_count,
            'write_count': self.write_count,
            'bad_pages': len(self.bad_pages),
        }


class MockSerialLink(ISerialLink):
    """Serial link capturing everything written to it."""

    def __init__(self, fail_on_write: bool = False):
        self.fail_on_write = fail_on_write
        self.opened = False
        self.open_count = 0
        self.writes: List[str] = []

    def open(self) -> None:
        self.opened = True
        self.open_count += 1

    def is_open(self) -> bool:
        return self.opened

    def write_string(self, text: str) -> None:
        if not self.opened:
            raise SerialLinkError("Mock link not open", port="mock")
        if self.fail_on_write:
            raise SerialLinkError("Mock write failure", port="mock")
        self.writes.append(text)

    def close(self) -> None:
        self.opened = False

    @property
    def text(self) -> str:
        """Everything transmitted, concatenated."""
        return "".join(self.writes)


class MockSensorSource(ISensorSource):
    """
    Sensor source with fixed readings that records accessor calls.

    Temperature in degrees C, pressure in Pascals.
    """

    def __init__(self, **readings):
        self.readings: Dict[str, object] = {
            'date': "12/05/24",
            'time': "10:30:00",
            'temperature': 22.5,
            'pressure': 101325,
            'humidity': 41,
            'iaq': 25,
            'eco2': 400,
            'light': 128,
        }
        self.readings.update(readings)
        self.calls: List[str] = []

    def _read(self, name: str):
        self.calls.append(name)
        return self.readings[name]

    def read_date(self) -> str:
        return self._read('date')

    def read_time(self) -> str:
        return self._read('time')

    def read_temperature(self):
        return self._read('temperature')

    def read_pressure(self):
        return self._read('pressure')

    def read_humidity(self):
        return self._read('humidity')

    def get_air_quality_score(self):
        return self._read('iaq')

    def read_eco2(self):
        return self._read('eco2')

    def read_light_level(self):
        return self._read('light')


def create_blank_eeprom() -> MockEepromDevice:
    """
    Create a freshly erased EEPROM (every byte 0xFF).

    Returns:
        MockEepromDevice with no counter and no pages written
    """
    return MockEepromDevice()


def create_eeprom_with_count(count: int) -> MockEepromDevice:
    """
    Create an EEPROM whose persisted counter already holds count.

    Data pages are left blank.
    """
    device = MockEepromDevice()
    device.write_bytes(COUNTER_ADDRESS, encode_entry_count(count))
    device.operations.clear()
    return device


def create_eeprom_with_records(records: List[str]) -> MockEepromDevice:
    """
    Create an EEPROM holding the given page texts in slots 0..n-1.

    The persisted counter is set to len(records).
    """
    device = create_eeprom_with_count(len(records))
    for slot, text in enumerate(records):
        device.write_page(data_page(slot), encode_page(text))
    device.operations.clear()
    return device


def create_failing_eeprom(bad_pages: Set[int]) -> MockEepromDevice:
    """Create an erased EEPROM whose writes fail on bad_pages."""
    return MockEepromDevice(bad_pages=set(bad_pages))


def create_disconnected_eeprom() -> MockEepromDevice:
    """Create an EEPROM on which every transfer fails."""
    return MockEepromDevice(disconnected=True)
