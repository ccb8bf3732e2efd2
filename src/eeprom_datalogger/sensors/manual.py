"""
Sensor source with values supplied by the caller.

Used by the command line, where readings come from flags, and anywhere
a host needs to feed known values through the logger.
"""

from dataclasses import dataclass, field
from typing import Optional

from eeprom_datalogger.sensors import ISensorSource, Number
from eeprom_datalogger.sensors.rtc import SystemClock


@dataclass
class ManualSensorSource(ISensorSource):
    """
    Fixed readings plus a clock.

    Temperature is in degrees C and pressure in Pascals, like the
    board's own accessors. Date and time come from the clock unless
    overridden.
    """
    temperature: Number = 0
    pressure: Number = 0
    humidity: Number = 0
    iaq_score: Number = 0
    eco2: Number = 0
    light: Number = 0
    date: Optional[str] = None
    time: Optional[str] = None
    clock: SystemClock = field(default_factory=SystemClock)

    def read_date(self) -> str:
        return self.date if self.date is not None else self.clock.read_date()

    def read_time(self) -> str:
        return self.time if self.time is not None else self.clock.read_time()

    def read_temperature(self) -> Number:
        return self.temperature

    def read_pressure(self) -> Number:
        return self.pressure

    def read_humidity(self) -> Number:
        return self.humidity

    def get_air_quality_score(self) -> Number:
        return self.iaq_score

    def read_eco2(self) -> Number:
        return self.eco2

    def read_light_level(self) -> Number:
        return self.light
