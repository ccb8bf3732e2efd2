"""
EEPROM geometry, address mapping and reserved page layout.

This module converts logical page indexes into physical bus addresses
and holds the fixed page map used by the data logger. The store is a
CAT24M01 (128 KiB) split into 1024 pages of 128 bytes. Each I2C device
address only carries a 16-bit memory address, so bit 16 of the linear
byte address picks between two bus addresses (base and base + 1).
"""

from dataclasses import dataclass


# Standard CAT24M01 layout as used by the logger
BYTES_PER_PAGE = 128
TOTAL_PAGES = 1024
CAT24_I2C_BASE_ADDR = 0x54
ADDRESS_REGISTER_SPAN = 0x10000  # 16-bit memory address per bus address

# Erased EEPROM byte value
BLANK_BYTE = 0xFF

# Reserved pages (never part of the rotating log)
COUNTER_PAGE = 12
HEADER_PAGE = 21
INFO_PAGE = 22
TITLES_PAGE = 23

# Rotating data area
FIRST_DATA_PAGE = 24
DATA_PAGE_COUNT = TOTAL_PAGES - FIRST_DATA_PAGE  # 1000 logical slots


# =============================================================================
# Geometry Data Classes
# =============================================================================


@dataclass(frozen=True)
class EepromGeometry:
    """
    Physical layout of a paged EEPROM.

    Attributes:
        bytes_per_page: Page size in bytes (128 for the logger)
        total_pages: Number of pages (1024 for a CAT24M01)
        base_address: I2C address for the lower 64 KiB

    Example:
        >>> geometry = EepromGeometry()
        >>> geometry.total_bytes
        131072
    """
    bytes_per_page: int = BYTES_PER_PAGE
    total_pages: int = TOTAL_PAGES
    base_address: int = CAT24_I2C_BASE_ADDR

    @property
    def total_bytes(self) -> int:
        """Total capacity in bytes."""
        return self.bytes_per_page * self.total_pages

    @property
    def device_count(self) -> int:
        """Number of bus addresses needed to reach every byte."""
        return max(1, -(-self.total_bytes // ADDRESS_REGISTER_SPAN))

    def is_logger_layout(self) -> bool:
        """Check the geometry matches the 1024 x 128 byte logger layout."""
        return (
            self.bytes_per_page == BYTES_PER_PAGE and
            self.total_pages == TOTAL_PAGES
        )

    def __str__(self) -> str:
        capacity_kb = self.total_bytes / 1024
        return (
            f"EepromGeometry("
            f"{self.total_pages} pages x {self.bytes_per_page}B, "
            f"{capacity_kb:.0f}KB, "
            f"i2c=0x{self.base_address:02X})"
        )


@dataclass(frozen=True)
class PhysicalAddress:
    """
    Physical location of a byte on the bus.

    Attributes:
        linear_address: Byte offset from the start of the store
        device_address: I2C address that owns this byte
        memory_address: 16-bit address sent to that device
    """
    linear_address: int
    device_address: int
    memory_address: int

    @property
    def address_bytes(self) -> bytes:
        """Memory address as the two big-endian bytes sent on the bus."""
        return bytes([(self.memory_address >> 8) & 0xFF, self.memory_address & 0xFF])


DEFAULT_GEOMETRY = EepromGeometry()


# =============================================================================
# Address Mapping
# =============================================================================


def validate_page(page: int, geometry: EepromGeometry = DEFAULT_GEOMETRY) -> None:
    """
    Check a page index is inside the device.

    Raises:
        ValueError: If page is outside 0..total_pages - 1
    """
    if not 0 <= page < geometry.total_pages:
        raise ValueError(
            f"Page {page} out of range (0-{geometry.total_pages - 1})"
        )


def map_address(address: int, geometry: EepromGeometry = DEFAULT_GEOMETRY) -> PhysicalAddress:
    """
    Map a linear byte address to its bus address and memory address.

    Args:
        address: Byte offset from the start of the store
        geometry: Device geometry

    Returns:
        PhysicalAddress for the byte

    Raises:
        ValueError: If address is outside the store

    Example:
        >>> map_address(0x10080).device_address == CAT24_I2C_BASE_ADDR + 1
        True
    """
    if not 0 <= address < geometry.total_bytes:
        raise ValueError(
            f"Address 0x{address:X} out of range (0-0x{geometry.total_bytes - 1:X})"
        )

    return PhysicalAddress(
        linear_address=address,
        device_address=geometry.base_address + (address >> 16),
        memory_address=address & 0xFFFF,
    )


def map_page(page: int, geometry: EepromGeometry = DEFAULT_GEOMETRY) -> PhysicalAddress:
    """
    Map a logical page index to the physical address of its first byte.

    Pages 0-511 live behind the base I2C address, pages 512-1023 behind
    base + 1.

    Args:
        page: Page index (0-1023)
        geometry: Device geometry

    Returns:
        PhysicalAddress of byte 0 of the page

    Raises:
        ValueError: If page is out of range

    Example:
        >>> addr = map_page(12)
        >>> hex(addr.memory_address), hex(addr.device_address)
        ('0x600', '0x54')
    """
    validate_page(page, geometry)
    return map_address(page * geometry.bytes_per_page, geometry)


def data_page(slot: int) -> int:
    """
    Physical page holding a logical data slot.

    Args:
        slot: Logical slot (0-999)

    Returns:
        Page index (24-1023)

    Raises:
        ValueError: If slot is outside the rotating area
    """
    if not 0 <= slot < DATA_PAGE_COUNT:
        raise ValueError(f"Data slot {slot} out of range (0-{DATA_PAGE_COUNT - 1})")
    return FIRST_DATA_PAGE + slot


# =============================================================================
# Geometry Information
# =============================================================================


def get_geometry_summary(geometry: EepromGeometry) -> str:
    """
    Get a human-readable summary of the EEPROM layout.

    Args:
        geometry: EepromGeometry object

    Returns:
        Multi-line string with layout details
    """
    upper = geometry.base_address + geometry.device_count - 1
    return f"""EEPROM Geometry Summary
=======================
Pages: {geometry.total_pages} x {geometry.bytes_per_page} bytes
Capacity: {geometry.total_bytes:,} bytes
I2C Addresses: 0x{geometry.base_address:02X}-0x{upper:02X}
Counter Page: {COUNTER_PAGE}
Header/Info/Titles Pages: {HEADER_PAGE}/{INFO_PAGE}/{TITLES_PAGE}
Data Pages: {FIRST_DATA_PAGE}-{FIRST_DATA_PAGE + DATA_PAGE_COUNT - 1} ({DATA_PAGE_COUNT} records)"""
