"""
Unit tests for RTC helpers and the host sensor sources.
"""

from datetime import datetime

import pytest
from eeprom_datalogger.sensors.manual import ManualSensorSource
from eeprom_datalogger.sensors.rtc import (
    SECONDS_MASK,
    SystemClock,
    bcd_to_dec,
    calc_weekday,
    clamp_day,
    dec_to_bcd,
    format_date,
    format_time,
)


class TestBcd:
    """Test BCD conversion."""

    def test_dec_to_bcd(self):
        assert dec_to_bcd(0) == 0x00
        assert dec_to_bcd(59) == 0x59
        assert dec_to_bcd(99) == 0x99

    def test_dec_to_bcd_out_of_range(self):
        with pytest.raises(ValueError):
            dec_to_bcd(100)

    def test_bcd_to_dec(self):
        assert bcd_to_dec(0x23) == 23

    def test_bcd_to_dec_drops_control_bits(self):
        """The oscillator bit in the seconds register is masked off."""
        assert bcd_to_dec(0x80 | 0x59, SECONDS_MASK) == 59


class TestCalendar:
    """Test calc_weekday() and clamp_day()."""

    def test_weekday(self):
        """12 May 2024 was a Sunday."""
        assert calc_weekday(12, 5, 2024) == 7
        assert calc_weekday(13, 5, 2024) == 1

    @pytest.mark.parametrize("day,month,year,expected", [
        (31, 4, 24, 30),
        (31, 11, 24, 30),
        (31, 1, 24, 31),
        (30, 2, 24, 29),
        (29, 2, 23, 28),
        (31, 2, 23, 28),
        (15, 2, 23, 15),
    ])
    def test_clamp_day(self, day, month, year, expected):
        assert clamp_day(day, month, year) == expected


class TestFormatting:
    """Test date and time strings."""

    def test_format_date_zero_padded(self):
        assert format_date(5, 3, 2024) == "05/03/24"
        assert format_date(25, 12, 9) == "25/12/09"

    def test_format_time_zero_padded(self):
        assert format_time(9, 4, 0) == "09:04:00"
        assert format_time(23, 59, 59) == "23:59:59"

    def test_system_clock(self):
        """The host clock renders the same strings."""
        clock = SystemClock(now=lambda: datetime(2024, 5, 12, 9, 4, 7))

        assert clock.read_date() == "12/05/24"
        assert clock.read_time() == "09:04:07"


class TestManualSensorSource:
    """Test ManualSensorSource."""

    def test_fixed_readings(self):
        source = ManualSensorSource(temperature=21.5, pressure=100800, humidity=40,
                                    iaq_score=30, eco2=410, light=200)

        assert source.read_temperature() == 21.5
        assert source.read_pressure() == 100800
        assert source.read_humidity() == 40
        assert source.get_air_quality_score() == 30
        assert source.read_eco2() == 410
        assert source.read_light_level() == 200

    def test_clock_used_by_default(self):
        clock = SystemClock(now=lambda: datetime(2024, 1, 2, 3, 4, 5))
        source = ManualSensorSource(clock=clock)

        assert source.read_date() == "02/01/24"
        assert source.read_time() == "03:04:05"

    def test_date_override(self):
        source = ManualSensorSource(date="01/01/24", time="00:00:00")

        assert source.read_date() == "01/01/24"
        assert source.read_time() == "00:00:00"
