"""
Field-inclusion configuration and record formatting.

A record is one delimited text line built from the enabled fields in a
fixed canonical order:

    Date, Time, Temperature, Pressure, Humidity, IAQ Score, eCO2, Light

Every enabled value is followed by the delimiter and disabled fields
leave no empty slot, so columns only line up with the title page when
the same selection was active for both.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import List, Optional, Tuple

from eeprom_datalogger.core.page_io import TERMINATOR
from eeprom_datalogger.sensors import (
    Number,
    PressureUnit,
    SensorSnapshot,
    TemperatureUnit,
    convert_pressure,
    convert_temperature,
)

logger = logging.getLogger(__name__)


class Separator(Enum):
    """Delimiter choices between logged values."""
    TAB = "\t"
    SEMICOLON = ";"
    COMMA = ","
    SPACE = " "


# (attribute on FieldSelection/SensorSnapshot, column title)
CANONICAL_FIELDS: Tuple[Tuple[str, str], ...] = (
    ("date", "Date"),
    ("time", "Time"),
    ("temperature", "Temperature"),
    ("pressure", "Pressure"),
    ("humidity", "Humidity"),
    ("iaq", "IAQ Score"),
    ("eco2", "eCO2"),
    ("light", "Light"),
)

_SNAPSHOT_ATTRS = {
    "iaq": "iaq_score",
}


@dataclass
class FieldSelection:
    """
    Which fields go into each record, their units and the delimiter.

    Process-wide session state with no persistence of its own; it has
    to be applied again every session before logging starts.
    """
    date: bool = True
    time: bool = True
    temperature: bool = True
    pressure: bool = True
    humidity: bool = True
    iaq: bool = True
    eco2: bool = True
    light: bool = True
    temperature_unit: TemperatureUnit = TemperatureUnit.C
    pressure_unit: PressureUnit = PressureUnit.PA
    delimiter: str = Separator.SEMICOLON.value

    def enabled_fields(self) -> List[str]:
        """Attribute names of enabled fields, in canonical order."""
        return [name for name, _ in CANONICAL_FIELDS if getattr(self, name)]

    def enabled_titles(self) -> List[str]:
        """Column titles of enabled fields, in canonical order."""
        return [title for name, title in CANONICAL_FIELDS if getattr(self, name)]


def format_value(value: Optional[Number]) -> str:
    """
    Render one value the way the board prints numbers.

    Whole floats drop their fractional part (22.0 -> "22"), other floats
    use the shortest round-trip form in plain decimal notation
    (1013.25 -> "1013.25", 1e-05 -> "0.00001").
    """
    if value is None:
        return ""
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return format(Decimal(repr(value)), "f")
    return str(value)


def format_record(snapshot: SensorSnapshot, selection: FieldSelection) -> str:
    """
    Build the record line for one snapshot, without the page terminator.

    Temperature and pressure are converted to the selected units here.

    Args:
        snapshot: Readings in degrees C / Pascals
        selection: Field-inclusion configuration

    Returns:
        Delimited line, e.g. "12/05/24;22.5;41;"
    """
    entry = ""
    for name in selection.enabled_fields():
        value = getattr(snapshot, _SNAPSHOT_ATTRS.get(name, name))

        if value is not None and name == "temperature":
            value = convert_temperature(value, selection.temperature_unit)
        elif value is not None and name == "pressure":
            value = convert_pressure(value, selection.pressure_unit)

        entry += format_value(value) + selection.delimiter

    return entry


def record_page_text(snapshot: SensorSnapshot, selection: FieldSelection) -> str:
    """Record line plus the page terminator, ready for a data page."""
    return format_record(snapshot, selection) + TERMINATOR
