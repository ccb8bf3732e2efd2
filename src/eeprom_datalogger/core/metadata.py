"""
Reserved metadata pages of the EEPROM data logger.

Four pages sit outside the rotating log:

    12  persisted entry counter (2 bytes, big-endian, tagged with 0x1000)
    21  fixed header string
    22  project info ("Name: ...", "Subject: ...")
    23  column titles for the enabled fields

The counter tag bit tells an initialised counter apart from an erased
page. On read the count is masked with 0xFFF.
"""

import logging
from typing import TYPE_CHECKING, Tuple

from eeprom_datalogger.core.geometry import (
    BLANK_BYTE,
    COUNTER_PAGE,
    DATA_PAGE_COUNT,
    HEADER_PAGE,
    INFO_PAGE,
    TITLES_PAGE,
)
from eeprom_datalogger.core.page_io import LINE_END, TERMINATOR, write_text_page

if TYPE_CHECKING:
    from eeprom_datalogger.core.record import FieldSelection
    from eeprom_datalogger.hardware import IEepromDevice

logger = logging.getLogger(__name__)

HEADER_TEXT = (
    "Kitronik Data Logger - Air Quality & Environmental Board for BBC micro:bit"
    " - www.kitronik.co.uk" + TERMINATOR
)

COUNTER_TAG = 0x1000
COUNTER_MASK = 0x0FFF
COUNTER_BLANK = (BLANK_BYTE << 8) | BLANK_BYTE


# =============================================================================
# Text Pages
# =============================================================================


def format_project_info(name: str, subject: str) -> str:
    """Project info page text."""
    return "Name: " + name + LINE_END + "Subject: " + subject + TERMINATOR


def format_titles(selection: "FieldSelection") -> str:
    """
    Column title line for the enabled fields, in canonical order.

    Every enabled title is followed by the delimiter, so the line ends
    with a delimiter before the terminator, matching the records.
    """
    headings = "".join(
        title + selection.delimiter for title in selection.enabled_titles()
    )
    return headings + TERMINATOR


def write_header(device: "IEepromDevice", text: str = HEADER_TEXT) -> None:
    """Write the fixed header string to page 21."""
    write_text_page(device, HEADER_PAGE, text)
    logger.debug("Header written to page %d", HEADER_PAGE)


def write_project_info(device: "IEepromDevice", name: str, subject: str) -> None:
    """
    Write project info to page 22.

    Raises:
        ValueError: If name and subject together do not fit one page
    """
    write_text_page(device, INFO_PAGE, format_project_info(name, subject))
    logger.info("Project info written: name=%r subject=%r", name, subject)


def write_titles(device: "IEepromDevice", selection: "FieldSelection") -> str:
    """
    Write the column title line to page 23.

    Writing twice with the same selection produces the same page bytes.

    Returns:
        The title line that was written
    """
    titles = format_titles(selection)
    write_text_page(device, TITLES_PAGE, titles)
    logger.debug("Titles written to page %d: %r", TITLES_PAGE, titles)
    return titles


# =============================================================================
# Persisted Entry Counter
# =============================================================================


def encode_entry_count(count: int) -> bytes:
    """
    Encode a count as the two tagged big-endian counter bytes.

    Raises:
        ValueError: If count does not fit the 12-bit field
    """
    if not 0 <= count <= COUNTER_MASK:
        raise ValueError(f"Entry count {count} out of range (0-{COUNTER_MASK})")

    stored = count | COUNTER_TAG
    return bytes([stored >> 8, stored & 0xFF])


def decode_entry_count(high: int, low: int) -> Tuple[int, bool]:
    """
    Decode the two counter bytes.

    Returns:
        Tuple of (count, present). An erased page, a missing tag or a
        count outside the data area reads as (0, False).
    """
    raw = (high << 8) | low

    if raw == COUNTER_BLANK:
        return (0, False)

    if not raw & COUNTER_TAG:
        logger.warning("Persisted entry count 0x%04X has no tag bit, ignoring", raw)
        return (0, False)

    count = raw & COUNTER_MASK
    if count >= DATA_PAGE_COUNT:
        logger.warning("Persisted entry count 0x%04X out of range, ignoring", raw)
        return (0, False)

    return (count, True)


def counter_address(device: "IEepromDevice") -> int:
    """Linear byte address of the counter (first byte of page 12)."""
    return COUNTER_PAGE * device.geometry.bytes_per_page


def read_persisted_entry_count(device: "IEepromDevice") -> Tuple[int, bool]:
    """
    Read the persisted entry counter from page 12.

    Returns:
        Tuple of (count, present)

    Raises:
        TransportError: If the device read fails
    """
    address = counter_address(device)
    high = device.read_byte(address)
    low = device.read_byte(address + 1)
    count, present = decode_entry_count(high, low)
    logger.debug("Persisted entry count: %d (present=%s)", count, present)
    return (count, present)


def write_persisted_entry_count(device: "IEepromDevice", count: int) -> None:
    """
    Store the entry counter in the first two bytes of page 12.

    Raises:
        ValueError: If count is out of range
        TransportError: If the device write fails
    """
    device.write_bytes(counter_address(device), encode_entry_count(count))
    logger.debug("Persisted entry count set to %d", count)
