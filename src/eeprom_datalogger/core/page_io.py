"""
Page text encoding for the EEPROM data logger.

Text lives on the EEPROM one string per page, encoded one byte per
character (latin-1) and closed by a "\\r\\n£" terminator. The pound sign
(0xA3) after CR LF is the end-of-content sentinel: a page written with a
short string keeps the stale tail of whatever was there before, so
readers stop at the sentinel and never look past it. A pound sign
inside the text is kept.
"""

import logging
from typing import TYPE_CHECKING, Tuple

from eeprom_datalogger.core.geometry import BLANK_BYTE, BYTES_PER_PAGE

if TYPE_CHECKING:
    from eeprom_datalogger.hardware import IEepromDevice

logger = logging.getLogger(__name__)

PAGE_ENCODING = "latin-1"

SENTINEL = "£"
SENTINEL_BYTE = 0xA3
LINE_END = "\r\n"
TERMINATOR = LINE_END + SENTINEL


# =============================================================================
# Encoding
# =============================================================================


def encode_page(text: str, bytes_per_page: int = BYTES_PER_PAGE) -> bytes:
    """
    Encode page text into the bytes written to the EEPROM.

    Args:
        text: Page text, normally already ending in TERMINATOR
        bytes_per_page: Page size (default: 128)

    Returns:
        Encoded bytes, at most one page long

    Raises:
        ValueError: If the text is not latin-1 encodable or does not fit

    Example:
        >>> encode_page("Date;\\r\\n\\u00a3")
        b'Date;\\r\\n\\xa3'
    """
    try:
        data = text.encode(PAGE_ENCODING)
    except UnicodeEncodeError as e:
        raise ValueError(f"Page text is not {PAGE_ENCODING} encodable: {e}") from e

    if len(data) > bytes_per_page:
        raise ValueError(
            f"Page text must be at most {bytes_per_page} bytes, got {len(data)} bytes"
        )

    return data


def blank_page(bytes_per_page: int = BYTES_PER_PAGE) -> bytes:
    """Full page of erased (0xFF) bytes."""
    return bytes([BLANK_BYTE] * bytes_per_page)


def is_blank(raw: bytes) -> bool:
    """True if every byte of the page is in the erased state."""
    return all(b == BLANK_BYTE for b in raw)


# =============================================================================
# Decoding
# =============================================================================


def _content_end(raw: bytes) -> Tuple[int, bool]:
    """Index of the terminating sentinel, and whether one was found."""
    # A pound sign inside the text is not a sentinel
    index = raw.find(TERMINATOR.encode(PAGE_ENCODING))
    if index >= 0:
        return (index + len(LINE_END), True)

    # Never written since the last erase: content runs to the first blank byte
    index = raw.find(bytes([BLANK_BYTE]))
    if index >= 0:
        return (index, False)
    return (len(raw), False)


def decode_page(raw: bytes) -> str:
    """
    Decode a page up to and including its sentinel.

    Bytes past the sentinel are stale and dropped. A page that never
    held a terminated string is cut at its first erased byte.

    Args:
        raw: Full page as read from the device

    Returns:
        Page text (ending in TERMINATOR for pages written by the logger)
    """
    end, found = _content_end(raw)
    if found:
        end += 1
    return raw[:end].decode(PAGE_ENCODING)


def page_payload(raw: bytes) -> str:
    """
    Decode the part of a page that gets transmitted.

    This is the page text without its sentinel, so a logger page yields
    a "\\r\\n"-terminated line. Blank pages yield an empty string.

    Args:
        raw: Full page as read from the device

    Returns:
        Text before the sentinel
    """
    end, _ = _content_end(raw)
    return raw[:end].decode(PAGE_ENCODING)


# =============================================================================
# Device Helpers
# =============================================================================


def write_text_page(device: "IEepromDevice", page: int, text: str) -> None:
    """
    Encode text and write it to the start of a page.

    Raises:
        ValueError: If the text does not fit one page
        TransportError: If the device write fails
    """
    data = encode_page(text, device.geometry.bytes_per_page)
    logger.debug("write page %d: %d bytes", page, len(data))
    device.write_page(page, data)


def read_text_page(device: "IEepromDevice", page: int) -> str:
    """
    Read a page and decode it through its sentinel.

    Raises:
        TransportError: If the device read fails
    """
    return decode_page(device.read_page(page))
