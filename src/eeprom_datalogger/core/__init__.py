"""
Core logger logic for the EEPROM data logger.

This package holds the persisted layout (geometry, page text codec,
metadata pages), the entry cursor, the record formatter and the logger
operations that tie them together.
"""

from eeprom_datalogger.core.geometry import (
    BYTES_PER_PAGE,
    TOTAL_PAGES,
    COUNTER_PAGE,
    HEADER_PAGE,
    INFO_PAGE,
    TITLES_PAGE,
    FIRST_DATA_PAGE,
    DATA_PAGE_COUNT,
    EepromGeometry,
    PhysicalAddress,
    DEFAULT_GEOMETRY,
    map_address,
    map_page,
    data_page,
)

from eeprom_datalogger.core.page_io import (
    TERMINATOR,
    encode_page,
    decode_page,
    page_payload,
)

from eeprom_datalogger.core.metadata import (
    HEADER_TEXT,
    read_persisted_entry_count,
    write_persisted_entry_count,
)

from eeprom_datalogger.core.cursor import (
    CursorState,
    TitleState,
    EntryCursor,
)

from eeprom_datalogger.core.record import (
    Separator,
    FieldSelection,
    format_record,
)

from eeprom_datalogger.core.datalogger import (
    CommsMode,
    LoggerState,
    include_date,
    include_time,
    include_temperature,
    include_pressure,
    include_humidity,
    include_iaq,
    include_co2,
    include_light,
    select_separator,
    set_data_for_usb,
    add_project_info,
    write_titles,
    log_data,
    erase_data,
    send_all_data,
    stored_entry_count,
)

__all__ = [
    # Geometry
    "BYTES_PER_PAGE",
    "TOTAL_PAGES",
    "COUNTER_PAGE",
    "HEADER_PAGE",
    "INFO_PAGE",
    "TITLES_PAGE",
    "FIRST_DATA_PAGE",
    "DATA_PAGE_COUNT",
    "EepromGeometry",
    "PhysicalAddress",
    "DEFAULT_GEOMETRY",
    "map_address",
    "map_page",
    "data_page",

    # Page text
    "TERMINATOR",
    "encode_page",
    "decode_page",
    "page_payload",

    # Metadata
    "HEADER_TEXT",
    "read_persisted_entry_count",
    "write_persisted_entry_count",

    # Cursor
    "CursorState",
    "TitleState",
    "EntryCursor",

    # Records
    "Separator",
    "FieldSelection",
    "format_record",

    # Logger operations
    "CommsMode",
    "LoggerState",
    "include_date",
    "include_time",
    "include_temperature",
    "include_pressure",
    "include_humidity",
    "include_iaq",
    "include_co2",
    "include_light",
    "select_separator",
    "set_data_for_usb",
    "add_project_info",
    "write_titles",
    "log_data",
    "erase_data",
    "send_all_data",
    "stored_entry_count",
]
