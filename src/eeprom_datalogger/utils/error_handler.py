"""
Error handling utilities for the EEPROM data logger.

Turns EEPROM and serial errors into operator messages and classifies
them. The logger core lets transport errors propagate; this is where
the command line decides what to tell the user.
"""

import errno
from typing import Optional

from eeprom_datalogger.hardware import (
    AddressError,
    EepromError,
    NoDeviceError,
    TransportError,
)
from eeprom_datalogger.hardware.serial_link import SerialLinkError


# Linux-only; smbus2 reports a missing ACK this way
EREMOTEIO = getattr(errno, "EREMOTEIO", 121)

ERRNO_MESSAGES = {
    errno.EACCES: (
        "Permission denied. Check:\n"
        "1. User is in the i2c / dialout group?\n"
        "2. Device permissions correct?"
    ),
    errno.ENOENT: "Device does not exist - check the bus number or port",
    errno.ENODEV: "No such device - is the board connected?",
    errno.ENXIO: "No acknowledge from the EEPROM - check the I2C address and wiring",
    EREMOTEIO: "Remote I/O error - the EEPROM did not acknowledge",
    errno.EIO: "I/O error on the bus",
    errno.ETIMEDOUT: "Bus transfer timed out",
    errno.EBUSY: "Device is busy - already in use by another process",
    errno.EAGAIN: "Bus temporarily unavailable",
}


def handle_eeprom_error(error_code: Optional[int], operation: str = "EEPROM operation") -> str:
    """
    Message for an errno raised during an EEPROM or serial operation.

    Args:
        error_code: errno value (e.g., EREMOTEIO), or None
        operation: Description of the operation that failed

    Returns:
        Formatted error message with troubleshooting guidance

    Example:
        >>> handle_eeprom_error(errno.ENXIO, "write page")
        'write page failed: No acknowledge from the EEPROM - check the I2C address and wiring'
    """
    if error_code is None:
        return f"{operation} failed"

    code_name = errno.errorcode.get(error_code, 'UNKNOWN')
    message = ERRNO_MESSAGES.get(error_code, f"Unknown error {error_code}: {code_name}")
    return f"{operation} failed: {message}"


def describe_error(error: Exception) -> str:
    """
    Operator message for an exception raised by a logger operation.

    Args:
        error: Exception caught at the command line

    Returns:
        One message, with errno guidance for transport failures
    """
    if isinstance(error, TransportError):
        operation = error.operation or "EEPROM transfer"
        if error.page is not None:
            operation = f"{operation} (page {error.page})"
        if error.errno is not None:
            return handle_eeprom_error(error.errno, operation)
        return f"{operation} failed: {error.message}"

    if isinstance(error, AddressError):
        return f"Address out of range: {error}"

    if isinstance(error, NoDeviceError):
        return f"No EEPROM found: {error}"

    if isinstance(error, SerialLinkError):
        return f"Serial link error: {error}"

    if isinstance(error, EepromError):
        return str(error)

    return f"{type(error).__name__}: {error}"


def _error_code(error) -> Optional[int]:
    if isinstance(error, int):
        return error
    return getattr(error, "errno", None)


def is_fatal_error(error) -> bool:
    """
    Determine if an error means the device cannot be used at all.

    Args:
        error: errno value or exception

    Returns:
        True if error is fatal, False otherwise
    """
    if isinstance(error, (NoDeviceError, AddressError)):
        return True

    fatal_errors = {
        errno.EACCES,
        errno.ENOENT,
        errno.ENODEV,
        errno.EBUSY,
    }
    return _error_code(error) in fatal_errors


def is_retryable_error(error) -> bool:
    """
    Determine if an operation may succeed when repeated.

    Transient bus errors qualify; the logger never retries by itself,
    the operator does.

    Args:
        error: errno value or exception

    Returns:
        True if error is retryable, False otherwise
    """
    retryable_errors = {
        errno.EIO,
        EREMOTEIO,
        errno.ENXIO,
        errno.ETIMEDOUT,
        errno.EAGAIN,
    }
    return _error_code(error) in retryable_errors

