"""
Test fixtures for the EEPROM data logger.

Provides mock EEPROM devices, serial links and sensor sources for
testing without the board.
"""

from tests.fixtures.mock_devices import (
    MockEepromDevice,
    MockSerialLink,
    MockSensorSource,
    ERROR_NO_ACK,
    ERROR_NOT_READY,
    create_blank_eeprom,
    create_eeprom_with_count,
    create_eeprom_with_records,
    create_failing_eeprom,
    create_disconnected_eeprom,
)

__all__ = [
    "MockEepromDevice",
    "MockSerialLink",
    "MockSensorSource",
    "ERROR_NO_ACK",
    "ERROR_NOT_READY",
    "create_blank_eeprom",
    "create_eeprom_with_count",
    "create_eeprom_with_records",
    "create_failing_eeprom",
    "create_disconnected_eeprom",
]
