"""
Sensor and clock collaborators for the data logger.

The logger does not drive the BME688 or the RTC itself. It asks an
ISensorSource for the current value of each enabled field and renders
whatever comes back. Temperatures come in as degrees C and pressures
as Pascals; the conversions for the other selectable units live here.

Classes:
    ISensorSource: Abstract accessor interface for the board readings
    SensorSnapshot: One set of readings captured for a single record
    TemperatureUnit / PressureUnit: Unit selectors
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Optional, TYPE_CHECKING, Union
import logging

if TYPE_CHECKING:
    from eeprom_datalogger.core.record import FieldSelection

logger = logging.getLogger(__name__)

Number = Union[int, float]


# =============================================================================
# Units
# =============================================================================

class TemperatureUnit(Enum):
    """Temperature unit for logged values."""
    C = "C"
    F = "F"


class PressureUnit(Enum):
    """Pressure unit for logged values."""
    PA = "Pa"
    MBAR = "mBar"


def convert_temperature(celsius: Number, unit: TemperatureUnit) -> Number:
    """
    Convert a reading in degrees C to the selected unit.

    Fahrenheit uses the board's tenths arithmetic, (c * 18 + 320) / 10.

    Example:
        >>> convert_temperature(25, TemperatureUnit.F)
        77.0
    """
    if unit is TemperatureUnit.F:
        return ((celsius * 18) + 320) / 10
    return celsius


def convert_pressure(pascals: Number, unit: PressureUnit) -> Number:
    """
    Convert a reading in Pascals to the selected unit.

    Example:
        >>> convert_pressure(101325, PressureUnit.MBAR)
        1013.25
    """
    if unit is PressureUnit.MBAR:
        return pascals / 100
    return pascals


# =============================================================================
# Abstract Interface
# =============================================================================

class ISensorSource(ABC):
    """
    Abstract accessor interface for the board's readings.

    Each accessor returns the current value; none of them is expected to
    fail because of logger state. Air quality accessors may return 0 if
    the gas sensor was never set up, as the board does.
    """

    @abstractmethod
    def read_date(self) -> str:
        """Current date as DD/MM/YY."""
        pass

    @abstractmethod
    def read_time(self) -> str:
        """Current time as HH:MM:SS."""
        pass

    @abstractmethod
    def read_temperature(self) -> Number:
        """Temperature in degrees C."""
        pass

    @abstractmethod
    def read_pressure(self) -> Number:
        """Pressure in Pascals."""
        pass

    @abstractmethod
    def read_humidity(self) -> Number:
        """Relative humidity in percent."""
        pass

    @abstractmethod
    def get_air_quality_score(self) -> Number:
        """IAQ score (0 = excellent, 500 = bad)."""
        pass

    @abstractmethod
    def read_eco2(self) -> Number:
        """Estimated CO2 in ppm."""
        pass

    @abstractmethod
    def read_light_level(self) -> Number:
        """Ambient light level (0-255)."""
        pass


# =============================================================================
# Snapshot
# =============================================================================

@dataclass
class SensorSnapshot:
    """
    Readings captured for one record.

    Fields left as None were not enabled at capture time. Temperature
    is in degrees C and pressure in Pascals; the record formatter
    applies the selected units.
    """
    date: Optional[str] = None
    time: Optional[str] = None
    temperature: Optional[Number] = None
    pressure: Optional[Number] = None
    humidity: Optional[Number] = None
    iaq_score: Optional[Number] = None
    eco2: Optional[Number] = None
    light: Optional[Number] = None


def capture_snapshot(source: ISensorSource, selection: "FieldSelection") -> SensorSnapshot:
    """
    Read every enabled field from the source, in canonical order.

    Disabled fields are never read.

    Args:
        source: Sensor/clock accessor
        selection: Current field-inclusion configuration

    Returns:
        SensorSnapshot with the enabled fields filled in
    """
    snapshot = SensorSnapshot()

    if selection.date:
        snapshot.date = source.read_date()
    if selection.time:
        snapshot.time = source.read_time()
    if selection.temperature:
        snapshot.temperature = source.read_temperature()
    if selection.pressure:
        snapshot.pressure = source.read_pressure()
    if selection.humidity:
        snapshot.humidity = source.read_humidity()
    if selection.iaq:
        snapshot.iaq_score = source.get_air_quality_score()
    if selection.eco2:
        snapshot.eco2 = source.read_eco2()
    if selection.light:
        snapshot.light = source.read_light_level()

    logger.debug("Captured %s", snapshot)
    return snapshot


__all__ = [
    "TemperatureUnit",
    "PressureUnit",
    "convert_temperature",
    "convert_pressure",
    "ISensorSource",
    "SensorSnapshot",
    "capture_snapshot",
]
