"""
EEPROM Data Logger - circular record store for the Kitronik Air Quality board.

Logs delimited sensor records to the 1000 rotating data pages of a
CAT24M01 EEPROM, keeps a persisted entry counter so logging resumes
after power loss, and replays the store over a serial link. Runs against
real hardware on a Linux I2C bus or against an EEPROM image file.
"""

__version__ = "1.0.0"
__license__ = "MIT"

from eeprom_datalogger.core.geometry import (
    EepromGeometry,
    DEFAULT_GEOMETRY,
)
from eeprom_datalogger.core.datalogger import (
    LoggerState,
    log_data,
    erase_data,
    send_all_data,
)
from eeprom_datalogger.hardware import (
    EepromError,
    TransportError,
    IEepromDevice,
)
from eeprom_datalogger.hardware.image_device import EepromImage

__all__ = [
    "__version__",

    # Geometry
    "EepromGeometry",
    "DEFAULT_GEOMETRY",

    # Logger operations
    "LoggerState",
    "log_data",
    "erase_data",
    "send_all_data",

    # Hardware
    "EepromError",
    "TransportError",
    "IEepromDevice",
    "EepromImage",
]
