"""
Utility functions for the EEPROM data logger.

This module provides error handling, logging and context managers for
the data logger tools.
"""

from eeprom_datalogger.utils.error_handler import (
    handle_eeprom_error,
    describe_error,
    is_fatal_error,
    is_retryable_error,
)

from eeprom_datalogger.utils.logging import (
    setup_logging,
    log_system_info,
    log_performance,
    log_device_info,
)

from eeprom_datalogger.utils.context_managers import (
    DeviceContext,
)

__all__ = [
    # Error handling
    "handle_eeprom_error",
    "describe_error",
    "is_fatal_error",
    "is_retryable_error",

    # Logging
    "setup_logging",
    "log_system_info",
    "log_performance",
    "log_device_info",

    # Context managers
    "DeviceContext",
]
