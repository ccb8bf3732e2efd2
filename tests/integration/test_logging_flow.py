"""
Integration tests for complete logging sessions.

Tests logging, wrap-around, erase, transmission, resuming after a
restart and behaviour under transport failures.
"""

import logging

import pytest
from eeprom_datalogger.core.cursor import CursorState, TitleState
from eeprom_datalogger.core.datalogger import (
    CommsMode,
    LoggerState,
    add_project_info,
    erase_data,
    include_co2,
    include_iaq,
    include_light,
    include_pressure,
    include_temperature,
    include_time,
    log_data,
    select_separator,
    send_all_data,
    set_data_for_usb,
    stored_entry_count,
    transmission_pages,
    write_titles,
)
from eeprom_datalogger.core.metadata import HEADER_TEXT, read_persisted_entry_count
from eeprom_datalogger.core.page_io import read_text_page
from eeprom_datalogger.core.record import Separator
from eeprom_datalogger.hardware import TransportError
from eeprom_datalogger.hardware.serial_link import SerialLinkError
from eeprom_datalogger.sensors import PressureUnit, TemperatureUnit
from tests.fixtures import (
    MockSensorSource,
    MockSerialLink,
    create_blank_eeprom,
    create_eeprom_with_count,
    create_eeprom_with_records,
    create_failing_eeprom,
)


def date_temp_humidity_state() -> LoggerState:
    """Session logging date, temperature and humidity only."""
    state = LoggerState()
    include_time(state, False)
    include_pressure(state, PressureUnit.PA, False)
    include_iaq(state, False)
    include_co2(state, False)
    include_light(state, False)
    return state


class TestLogging:
    """Test log_data() on a fresh store."""

    def test_first_record(self):
        """The first record goes to page 24 and the counter becomes 1."""
        device = create_blank_eeprom()
        state = date_temp_humidity_state()

        page = log_data(state, device, MockSensorSource())

        assert page == 24
        assert device.read_page(24)[:20] == b"12/05/24;22.5;41;\r\n\xa3"
        assert device.counter_bytes() == bytes([0x10, 0x01])
        assert state.cursor.count == 1

    def test_header_and_titles_written_once(self):
        """Header and titles are written before the first record only."""
        device = create_blank_eeprom()
        state = date_temp_humidity_state()

        log_data(state, device, MockSensorSource())
        log_data(state, device, MockSensorSource())

        page_writes = [op for op in device.operations if op[0] == "write_page"]
        assert page_writes == [
            ("write_page", 21), ("write_page", 23),
            ("write_page", 24), ("write_page", 25),
        ]
        assert read_text_page(device, 21) == HEADER_TEXT
        assert read_text_page(device, 23) == "Date;Temperature;Humidity;\r\n£"
        assert state.titles is TitleState.WRITTEN

    def test_record_written_before_counter(self):
        """Each record reaches its page before the counter is updated."""
        device = create_blank_eeprom()
        state = date_temp_humidity_state()

        log_data(state, device, MockSensorSource())

        assert device.operations[-2:] == [("write_page", 24), ("write_bytes", 12 * 128)]

    def test_units_and_separator(self):
        """Selected units and separator show up in the record."""
        device = create_blank_eeprom()
        state = date_temp_humidity_state()
        include_temperature(state, TemperatureUnit.F, True)
        select_separator(state, Separator.COMMA)

        log_data(state, device, MockSensorSource(temperature=25))

        assert read_text_page(device, 24) == "12/05/24,77,41,\r\n£"
        assert read_text_page(device, 23) == "Date,Temperature,Humidity,\r\n£"

    def test_record_too_long(self):
        """A record that does not fit a page is rejected without advancing."""
        device = create_blank_eeprom()
        state = date_temp_humidity_state()

        with pytest.raises(ValueError):
            log_data(state, device, MockSensorSource(date="x" * 130))

        assert state.cursor.count == 0
        assert read_persisted_entry_count(device) == (0, False)

    def test_selection_change_keeps_titles(self):
        """Titles stay as first written until write_titles() is called."""
        device = create_blank_eeprom()
        state = date_temp_humidity_state()
        log_data(state, device, MockSensorSource())

        include_light(state, True)
        log_data(state, device, MockSensorSource())

        assert read_text_page(device, 23) == "Date;Temperature;Humidity;\r\n£"
        assert read_text_page(device, 25) == "12/05/24;22.5;41;128;\r\n£"

        write_titles(state, device)

        assert read_text_page(device, 23) == "Date;Temperature;Humidity;Light;\r\n£"


class TestWrapAround:
    """Test the circular data area."""

    def test_last_slot_then_wrap(self):
        """Slot 999 is page 1023; the next record wraps to page 24."""
        device = create_eeprom_with_count(999)
        state = date_temp_humidity_state()

        assert log_data(state, device, MockSensorSource()) == 1023
        assert read_persisted_entry_count(device) == (0, True)
        assert state.cursor.full

        assert log_data(state, device, MockSensorSource()) == 24
        assert read_persisted_entry_count(device) == (1, True)

    def test_1001_records(self):
        """The 1001st record overwrites slot 0 and all 1000 slots are sent."""
        device = create_blank_eeprom()
        state = date_temp_humidity_state()

        for n in range(1000):
            log_data(state, device, MockSensorSource(humidity=n))

        assert state.cursor.count == 0
        assert state.cursor.full
        assert read_text_page(device, 24) == "12/05/24;22.5;0;\r\n£"

        page = log_data(state, device, MockSensorSource(humidity=1000))

        assert page == 24
        assert state.cursor.count == 1
        assert read_text_page(device, 24) == "12/05/24;22.5;1000;\r\n£"

        link = MockSerialLink()
        assert send_all_data(state, device, link) == 1000
        # Project info page is blank and sends nothing
        assert link.writes[2] == "12/05/24;22.5;1000;\r\n"
        assert link.writes[3] == "12/05/24;22.5;1;\r\n"
        assert link.writes[-1] == "12/05/24;22.5;999;\r\n"


class TestResume:
    """Test a new session continuing from the persisted counter."""

    def test_new_session_continues(self):
        """A restarted session appends after the last record."""
        device = create_blank_eeprom()
        first = date_temp_humidity_state()
        for _ in range(5):
            log_data(first, device, MockSensorSource())

        second = date_temp_humidity_state()
        page = log_data(second, device, MockSensorSource())

        assert page == 29
        assert second.cursor.state is CursorState.ACTIVE
        assert not second.cursor.full

    def test_power_cut_before_counter(self):
        """A record written without its counter update is overwritten next time."""
        device = create_blank_eeprom()
        state = date_temp_humidity_state()
        for _ in range(5):
            log_data(state, device, MockSensorSource())

        device.cut_power_at_counter = True
        with pytest.raises(TransportError):
            log_data(state, device, MockSensorSource(humidity=77))

        device.reconnect()
        assert read_text_page(device, 29) == "12/05/24;22.5;77;\r\n£"

        restarted = date_temp_humidity_state()

        assert read_persisted_entry_count(device) == (5, True)
        assert log_data(restarted, device, MockSensorSource(humidity=50)) == 29
        assert read_text_page(device, 29) == "12/05/24;22.5;50;\r\n£"

    def test_untagged_counter_starts_at_zero(self):
        """A counter without its tag bit is ignored."""
        device = create_blank_eeprom()
        device.write_bytes(12 * 128, bytes([0x00, 0x05]))
        state = date_temp_humidity_state()

        assert log_data(state, device, MockSensorSource()) == 24


class TestTransportFailures:
    """Test behaviour when the bus fails."""

    def test_failed_record_still_advances(self):
        """The cursor and counter move past a page that failed to write."""
        device = create_failing_eeprom({24})
        state = date_temp_humidity_state()

        with pytest.raises(TransportError):
            log_data(state, device, MockSensorSource())

        assert state.cursor.count == 1
        assert read_persisted_entry_count(device) == (1, True)
        assert log_data(state, device, MockSensorSource()) == 25

    def test_failed_header_leaves_session_pending(self):
        """Nothing is logged when the header cannot be written."""
        device = create_failing_eeprom({21})
        state = date_temp_humidity_state()

        with pytest.raises(TransportError):
            log_data(state, device, MockSensorSource())

        assert state.titles is TitleState.PENDING
        assert not state.cursor.is_active

        device.mark_page_good(21)
        assert log_data(state, device, MockSensorSource()) == 24


class TestErase:
    """Test erase_data()."""

    def test_erase_resets_everything(self):
        """Every page is blank and the counter reads 0."""
        device = create_blank_eeprom()
        state = date_temp_humidity_state()
        add_project_info(state, device, "Ada", "Greenhouse")
        for _ in range(3):
            log_data(state, device, MockSensorSource())

        erase_data(state, device)

        image = device.snapshot()
        assert image[12 * 128:12 * 128 + 2] == bytes([0x10, 0x00])
        assert image[:12 * 128] == b"\xff" * (12 * 128)
        assert image[12 * 128 + 2:] == b"\xff" * (len(image) - 12 * 128 - 2)
        assert state.cursor.state is CursorState.UNINITIALIZED
        assert state.titles is TitleState.PENDING

    def test_log_after_erase(self):
        """Logging after an erase starts at slot 0 and rewrites the titles."""
        device = create_blank_eeprom()
        state = date_temp_humidity_state()
        for _ in range(3):
            log_data(state, device, MockSensorSource())
        erase_data(state, device)

        assert log_data(state, device, MockSensorSource()) == 24
        assert read_text_page(device, 23) == "Date;Temperature;Humidity;\r\n£"
        assert read_persisted_entry_count(device) == (1, True)

    def test_erase_clears_full_flag(self):
        device = create_eeprom_with_count(999)
        state = date_temp_humidity_state()
        log_data(state, device, MockSensorSource())
        assert state.cursor.full

        erase_data(state, device)

        assert not state.cursor.full
        assert stored_entry_count(state, device) == 0

    def test_erase_timing_logged(self, caplog):
        """Erase reports its duration through the performance log."""
        device = create_blank_eeprom()

        with caplog.at_level(logging.INFO):
            erase_data(date_temp_humidity_state(), device)

        assert "Performance - erase" in caplog.text
        assert "pages=1024" in caplog.text

    def test_erase_failure_propagates(self):
        device = create_failing_eeprom({500})
        state = date_temp_humidity_state()

        with pytest.raises(TransportError):
            erase_data(state, device)

        assert state.cursor.state is CursorState.UNINITIALIZED


class TestTransmit:
    """Test send_all_data()."""

    def test_send_session(self, caplog):
        """Header, project info, titles, then records in storage order."""
        device = create_blank_eeprom()
        state = date_temp_humidity_state()
        add_project_info(state, device, "Ada", "Greenhouse")
        for humidity in (40, 41, 42):
            log_data(state, device, MockSensorSource(humidity=humidity))
        link = MockSerialLink()

        with caplog.at_level(logging.INFO):
            records = send_all_data(state, device, link)

        assert records == 3
        assert "Performance - send_all_data" in caplog.text
        assert link.writes == [
            HEADER_TEXT[:-1],
            "Name: Ada\r\nSubject: Greenhouse\r\n",
            "Date;Temperature;Humidity;\r\n",
            "12/05/24;22.5;40;\r\n",
            "12/05/24;22.5;41;\r\n",
            "12/05/24;22.5;42;\r\n",
        ]
        assert state.comms is CommsMode.USB

    def test_pound_sign_in_project_info(self):
        """Project info containing a pound sign is sent whole."""
        device = create_blank_eeprom()
        state = LoggerState()
        add_project_info(state, device, "Ada", "Budget £5")
        link = MockSerialLink()

        send_all_data(state, device, link)

        assert link.writes == ["Name: Ada\r\nSubject: Budget £5\r\n"]

    def test_send_without_logging(self):
        """A new session sends the persisted number of records."""
        device = create_eeprom_with_records(["a;\r\n£", "b;\r\n£"])
        state = LoggerState()
        link = MockSerialLink()

        assert send_all_data(state, device, link) == 2
        assert link.writes == ["a;\r\n", "b;\r\n"]

    def test_blank_data_pages_send_nothing(self):
        device = create_eeprom_with_count(3)
        link = MockSerialLink()

        assert send_all_data(LoggerState(), device, link) == 3
        assert link.writes == []

    def test_empty_store(self):
        assert transmission_pages(LoggerState(), create_blank_eeprom()) == [21, 22, 23]

    def test_link_opened_once(self):
        """An explicit USB selection is not repeated by the transmitter."""
        device = create_eeprom_with_records(["a;\r\n£"])
        state = LoggerState()
        link = MockSerialLink()

        set_data_for_usb(state, link)
        send_all_data(state, device, link)

        assert link.open_count == 1

    def test_link_failure_propagates(self):
        device = create_eeprom_with_records(["a;\r\n£"])
        link = MockSerialLink(fail_on_write=True)

        with pytest.raises(SerialLinkError):
            send_all_data(LoggerState(), device, link)
