"""
Real-time clock helpers.

The board's MCP7940N keeps time in BCD registers and the logger records
its date and time as fixed-width strings, "DD/MM/YY" and "HH:MM:SS".
These helpers cover the register conversions, the date clamping the
board applies when the clock is set, and a host clock that produces the
same strings.
"""

import logging
from datetime import date, datetime
from typing import Callable, Optional

logger = logging.getLogger(__name__)

# Register value masks (control bits share the registers)
SECONDS_MASK = 0x7F
MINUTES_MASK = 0x7F
HOURS_MASK = 0x3F
DAY_MASK = 0x3F
MONTH_MASK = 0x1F
YEAR_MASK = 0xFF

THIRTY_DAY_MONTHS = (4, 6, 9, 11)


# =============================================================================
# BCD Conversion
# =============================================================================

def dec_to_bcd(value: int) -> int:
    """
    Convert 0-99 to packed BCD.

    Example:
        >>> hex(dec_to_bcd(59))
        '0x59'
    """
    if not 0 <= value <= 99:
        raise ValueError(f"BCD value must be 0-99, got {value}")
    return ((value // 10) << 4) | (value % 10)


def bcd_to_dec(value: int, mask: int = 0xFF) -> int:
    """
    Convert a packed BCD register value to decimal.

    Args:
        value: Raw register byte
        mask: Bits holding the BCD value (control bits are dropped)
    """
    value &= mask
    return ((value >> 4) * 10) + (value & 0x0F)


# =============================================================================
# Calendar
# =============================================================================

def calc_weekday(day: int, month: int, year: int) -> int:
    """Day of the week for a full year, 1 = Monday ... 7 = Sunday."""
    return date(year, month, day).isoweekday()


def clamp_day(day: int, month: int, year: int) -> int:
    """
    Clamp a day of month the way the board does when setting the date.

    30-day months cap at 30. February caps at 29 when the two-digit year
    is divisible by 4 and at 28 otherwise.
    """
    if month in THIRTY_DAY_MONTHS and day == 31:
        return 30
    if month == 2 and day >= 29:
        return 29 if year % 4 == 0 else 28
    return day


def format_date(day: int, month: int, year: int) -> str:
    """
    Render a date as DD/MM/YY.

    Example:
        >>> format_date(5, 3, 2024)
        '05/03/24'
    """
    return f"{day:02d}/{month:02d}/{year % 100:02d}"


def format_time(hours: int, minutes: int, seconds: int) -> str:
    """
    Render a time as HH:MM:SS.

    Example:
        >>> format_time(9, 4, 0)
        '09:04:00'
    """
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


# =============================================================================
# Host Clock
# =============================================================================

class SystemClock:
    """
    Date and time strings from the host clock.

    Args:
        now: Callable returning the current datetime (default: datetime.now)
    """

    def __init__(self, now: Optional[Callable[[], datetime]] = None):
        self._now = now or datetime.now

    def read_date(self) -> str:
        current = self._now()
        return format_date(current.day, current.month, current.year)

    def read_time(self) -> str:
        current = self._now()
        return format_time(current.hour, current.minute, current.second)
