"""
Logging configuration for the EEPROM data logger.

Provides file logging with system information capture for debugging,
and a rich console handler for the command line.
"""

import logging
import sys
import platform
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler


def setup_logging(log_file: Optional[str] = None, level: int = logging.DEBUG,
                  console_level: int = logging.WARNING) -> None:
    """
    Configure logging for the application.

    Sets up optional file-based logging at `level` and a rich console
    handler on stderr, so transmitted data on stdout stays clean.

    Args:
        log_file: Path to log file, or None for console only
        level: File logging level (default: logging.DEBUG)
        console_level: Console logging level (default: logging.WARNING)

    Example:
        >>> setup_logging("eeprom_datalogger.log", console_level=logging.INFO)
        >>> logging.info("Application started")
    """
    root = logging.getLogger()

    if log_file is not None:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        logging.basicConfig(
            filename=log_file,
            level=level,
            format='%(asctime)s - %(levelname)s - %(name)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
    root.setLevel(min(level, console_level) if log_file is not None else console_level)

    # One console handler, even if called again
    for handler in list(root.handlers):
        if isinstance(handler, RichHandler):
            root.removeHandler(handler)

    console_handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    console_handler.setLevel(console_level)
    console_handler.setFormatter(logging.Formatter('%(message)s'))
    root.addHandler(console_handler)

    if log_file is not None:
        log_system_info()


def log_system_info() -> None:
    """
    Log system information for debugging purposes.

    Captures platform and Python details to aid in troubleshooting bus
    and serial port access problems.
    """
    logging.info("=" * 60)
    logging.info("EEPROM Data Logger - System Information")
    logging.info("=" * 60)
    logging.info("Platform: %s %s", platform.system(), platform.release())
    logging.info("Machine: %s", platform.machine())
    logging.info("Python version: %s", sys.version)
    logging.info("Python executable: %s", sys.executable)
    logging.info("=" * 60)


def log_performance(operation: str, duration: float, **metrics) -> None:
    """
    Log performance metrics for an operation.

    Args:
        operation: Name of the operation
        duration: Duration in seconds
        **metrics: Additional metrics (e.g., pages=1024)

    Example:
        >>> log_performance("erase", 5.3, pages=1024)
    """
    metrics_str = ", ".join(f"{k}={v}" for k, v in metrics.items())
    logging.info("Performance - %s: %.2fs, %s", operation, duration, metrics_str)


def log_device_info(device) -> None:
    """
    Log EEPROM device information.

    Args:
        device: IEepromDevice instance
    """
    geometry = device.geometry
    logging.info("Device: %s", device.describe())
    logging.info("Geometry: %s", geometry)
    logging.info("Capacity: %d pages (%d KB)",
                 geometry.total_pages, geometry.total_bytes // 1024)
