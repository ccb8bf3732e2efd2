"""
EEPROM-backed circular data logger.

This module maps a growing sequence of text records onto the 1000
rotating data pages of the EEPROM (pages 24-1023), keeps the persisted
entry counter in step, erases the store and replays it over a serial
channel.

All session state lives in one LoggerState passed to every operation:
the field selection, the entry cursor, whether the title pages have
been written, and the comms mode. The operations themselves follow the
board's flat error policy: transport errors from the device propagate
to the caller unwrapped and nothing is retried here.

Example:
    >>> state = LoggerState()
    >>> include_light(state, False)
    >>> add_project_info(state, device, "Ada", "Greenhouse")
    >>> log_data(state, device, sensors)
    >>> send_all_data(state, device, link)
"""

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, List

from eeprom_datalogger.core.cursor import EntryCursor, TitleState
from eeprom_datalogger.core.geometry import (
    FIRST_DATA_PAGE,
    HEADER_PAGE,
    INFO_PAGE,
    TITLES_PAGE,
)
from eeprom_datalogger.core.metadata import (
    read_persisted_entry_count,
    write_header,
    write_persisted_entry_count,
    write_project_info,
)
from eeprom_datalogger.core import metadata
from eeprom_datalogger.core.page_io import blank_page, encode_page, page_payload
from eeprom_datalogger.core.record import FieldSelection, Separator, record_page_text
from eeprom_datalogger.sensors import (
    ISensorSource,
    PressureUnit,
    TemperatureUnit,
    capture_snapshot,
)
from eeprom_datalogger.utils.logging import log_performance

if TYPE_CHECKING:
    from eeprom_datalogger.hardware import IEepromDevice
    from eeprom_datalogger.hardware.serial_link import ISerialLink

logger = logging.getLogger(__name__)


class CommsMode(Enum):
    """Where transmitted data goes."""
    NONE = "none"
    USB = "usb"


@dataclass
class LoggerState:
    """
    Everything the logger remembers between calls in one session.

    Attributes:
        selection: Field-inclusion configuration
        cursor: Next free data slot and wrap flag
        titles: PENDING until header and titles are written this session
        comms: Serial output mode
    """
    selection: FieldSelection = field(default_factory=FieldSelection)
    cursor: EntryCursor = field(default_factory=EntryCursor)
    titles: TitleState = TitleState.PENDING
    comms: CommsMode = CommsMode.NONE


# =============================================================================
# Configuration
# =============================================================================


def include_date(state: LoggerState, include: bool) -> None:
    state.selection.date = include


def include_time(state: LoggerState, include: bool) -> None:
    state.selection.time = include


def include_temperature(state: LoggerState, unit: TemperatureUnit, include: bool) -> None:
    """Set the temperature unit and whether temperature is logged."""
    state.selection.temperature_unit = unit
    state.selection.temperature = include


def include_pressure(state: LoggerState, unit: PressureUnit, include: bool) -> None:
    """Set the pressure unit and whether pressure is logged."""
    state.selection.pressure_unit = unit
    state.selection.pressure = include


def include_humidity(state: LoggerState, include: bool) -> None:
    state.selection.humidity = include


def include_iaq(state: LoggerState, include: bool) -> None:
    state.selection.iaq = include


def include_co2(state: LoggerState, include: bool) -> None:
    state.selection.eco2 = include


def include_light(state: LoggerState, include: bool) -> None:
    state.selection.light = include


def select_separator(state: LoggerState, separator: Separator) -> None:
    """
    Choose the character written between values.

    Takes effect on the title page at the next header/titles write.
    """
    state.selection.delimiter = separator.value


def set_data_for_usb(state: LoggerState, link: "ISerialLink") -> None:
    """Route transmitted data to the USB serial link and open it."""
    if not link.is_open():
        link.open()
    state.comms = CommsMode.USB
    logger.info("Data output set to USB serial (%s)", link.describe())


# =============================================================================
# Metadata
# =============================================================================


def add_project_info(state: LoggerState, device: "IEepromDevice",
                     name: str, subject: str) -> None:
    """
    Write the user's name and project subject to the info page.

    Raises:
        ValueError: If the text does not fit one page
        TransportError: If the write fails
    """
    write_project_info(device, name, subject)


def write_titles(state: LoggerState, device: "IEepromDevice") -> str:
    """
    Write the header and the column titles for the current selection.

    log_data calls this once per session. Titles are not rewritten when
    the selection changes afterwards; a caller that reconfigures fields
    mid-session calls this again to bring page 23 back in line.

    Returns:
        The title line written to page 23
    """
    write_header(device)
    titles = metadata.write_titles(device, state.selection)
    state.titles = TitleState.WRITTEN
    logger.info("Header and titles written (%d fields)", len(state.selection.enabled_fields()))
    return titles


def _activate_cursor(state: LoggerState, device: "IEepromDevice") -> None:
    count, present = read_persisted_entry_count(device)
    if not present:
        logger.info("No persisted entry count, starting at slot 0")
    state.cursor.activate(count)


def ensure_ready(state: LoggerState, device: "IEepromDevice") -> None:
    """
    Bring the session to the point where a record can be written.

    Writes the header and title pages if this session has not done so
    yet and loads the entry cursor from the persisted counter.
    """
    if state.titles is TitleState.PENDING:
        write_titles(state, device)
    if not state.cursor.is_active:
        _activate_cursor(state, device)


# =============================================================================
# Circular Writer
# =============================================================================


def log_data(state: LoggerState, device: "IEepromDevice", sensors: ISensorSource) -> int:
    """
    Capture the enabled fields and append them as one record.

    The record goes to data page 24 + cursor.count. The cursor then
    advances (wrapping after slot 999) and the new count is persisted.
    The cursor advances even when the page write raises; the error is
    re-raised after the counter update.

    Args:
        state: Session state
        device: EEPROM page device
        sensors: Accessors for the current readings

    Returns:
        Page the record was written to

    Raises:
        ValueError: If the record does not fit one page
        TransportError: If a page or counter write fails
    """
    ensure_ready(state, device)

    snapshot = capture_snapshot(sensors, state.selection)
    text = record_page_text(snapshot, state.selection)
    data = encode_page(text, device.geometry.bytes_per_page)
    page = state.cursor.next_page

    try:
        device.write_page(page, data)
        logger.debug("Record written to page %d: %r", page, text)
    except Exception as e:
        logger.error("Record write to page %d failed: %s", page, e)
        raise
    finally:
        new_count = state.cursor.advance()
        write_persisted_entry_count(device, new_count)

    return page


# =============================================================================
# Eraser
# =============================================================================


def erase_data(state: LoggerState, device: "IEepromDevice") -> None:
    """
    Blank every page of the EEPROM and reset the persisted counter.

    All 1024 pages, reserved pages included, are written with 0xFF one
    page at a time, then the counter is stored as 0. The session goes
    back to the start: cursor UNINITIALIZED and titles PENDING. There is
    no resume; if a write fails the store is a mix of erased and stale
    pages and the caller has to erase again.

    Raises:
        TransportError: If any page write fails
    """
    geometry = device.geometry
    blank = blank_page(geometry.bytes_per_page)

    state.cursor.reset()
    state.titles = TitleState.PENDING

    logger.info("Erasing %d pages", geometry.total_pages)
    start_time = time.time()

    for page in range(geometry.total_pages):
        try:
            device.write_page(page, blank)
        except Exception as e:
            logger.error("Erase failed at page %d: %s", page, e)
            raise

    write_persisted_entry_count(device, 0)

    log_performance("erase", time.time() - start_time, pages=geometry.total_pages)


# =============================================================================
# Transmitter
# =============================================================================


def stored_entry_count(state: LoggerState, device: "IEepromDevice") -> int:
    """
    Number of data pages currently holding records.

    Uses the session cursor when it is active, otherwise the persisted
    counter (which cannot tell a wrapped store from a partial one).
    """
    if state.cursor.is_active:
        return state.cursor.valid_entries

    count, _ = read_persisted_entry_count(device)
    return count


def transmission_pages(state: LoggerState, device: "IEepromDevice") -> List[int]:
    """
    Pages sent by send_all_data, in transmission order.

    Header, info and titles first, then the valid data pages in storage
    order (not recency order).
    """
    entries = stored_entry_count(state, device)
    return [HEADER_PAGE, INFO_PAGE, TITLES_PAGE] + list(
        range(FIRST_DATA_PAGE, FIRST_DATA_PAGE + entries)
    )


def send_all_data(state: LoggerState, device: "IEepromDevice", link: "ISerialLink") -> int:
    """
    Replay header, project info, titles and all stored records.

    When the store has wrapped all 1000 data pages go out, otherwise
    exactly cursor.count pages. Only the text before each sentinel is
    sent.

    Args:
        state: Session state
        device: EEPROM page device
        link: Serial channel

    Returns:
        Number of data records sent

    Raises:
        TransportError: If a page read fails
        SerialLinkError: If the serial write fails
    """
    if state.comms is not CommsMode.USB:
        set_data_for_usb(state, link)

    start_time = time.time()
    pages = transmission_pages(state, device)

    for page in pages:
        text = page_payload(device.read_page(page))
        if text:
            link.write_string(text)

    records = len(pages) - 3
    log_performance("send_all_data", time.time() - start_time, records=records)
    return records
