"""
Entry cursor and title state for the EEPROM data logger.

The cursor is the next free logical data slot. It starts UNINITIALIZED,
becomes ACTIVE the first time a record is logged (loading the persisted
counter), and sets its full flag the first time it wraps from slot 999
back to slot 0. Only an erase sends it back to UNINITIALIZED.
"""

import logging
from dataclasses import dataclass
from enum import Enum

from eeprom_datalogger.core.geometry import DATA_PAGE_COUNT, data_page

logger = logging.getLogger(__name__)


class CursorState(Enum):
    """Lifecycle of the entry cursor."""
    UNINITIALIZED = "uninitialized"
    ACTIVE = "active"


class TitleState(Enum):
    """Whether the header and title pages were written this session."""
    PENDING = "pending"
    WRITTEN = "written"


@dataclass
class EntryCursor:
    """
    Next free data slot plus the wrap flag.

    Attributes:
        state: UNINITIALIZED until loaded from the persisted counter
        count: Next slot to write (0-999)
        full: True once the cursor has wrapped at least once
    """
    state: CursorState = CursorState.UNINITIALIZED
    count: int = 0
    full: bool = False

    @property
    def is_active(self) -> bool:
        return self.state is CursorState.ACTIVE

    @property
    def next_page(self) -> int:
        """Physical page the next record goes to."""
        return data_page(self.count)

    @property
    def valid_entries(self) -> int:
        """Number of data pages currently holding records."""
        return DATA_PAGE_COUNT if self.full else self.count

    def activate(self, count: int) -> None:
        """
        Move from UNINITIALIZED to ACTIVE at the given slot.

        Raises:
            RuntimeError: If the cursor is already active
            ValueError: If count is outside the data area
        """
        if self.is_active:
            raise RuntimeError("Entry cursor already active")
        if not 0 <= count < DATA_PAGE_COUNT:
            raise ValueError(f"Entry count {count} out of range (0-{DATA_PAGE_COUNT - 1})")

        self.state = CursorState.ACTIVE
        self.count = count
        self.full = False
        logger.info("Entry cursor active at slot %d", count)

    def advance(self) -> int:
        """
        Step past the slot just written, wrapping after slot 999.

        Returns:
            The new count, which is what gets persisted

        Raises:
            RuntimeError: If the cursor was never activated
        """
        if not self.is_active:
            raise RuntimeError("Entry cursor not active")

        self.count += 1
        if self.count == DATA_PAGE_COUNT:
            self.count = 0
            if not self.full:
                logger.info("Data area full, wrapping to slot 0")
            self.full = True

        return self.count

    def reset(self) -> None:
        """Return to UNINITIALIZED (erase only)."""
        self.state = CursorState.UNINITIALIZED
        self.count = 0
        self.full = False
