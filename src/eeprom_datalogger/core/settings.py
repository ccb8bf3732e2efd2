"""
Settings management module for the EEPROM data logger host tools.

This module provides settings management with JSON-based persistence
and a singleton for global access. Settings only seed a session: the
logger itself keeps no configuration on the EEPROM, so field toggles
chosen here are applied to a fresh LoggerState every time.

Features:
    - Singleton pattern for global settings access
    - JSON-based configuration file persistence
    - Platform-specific settings paths
    - Migration support between versions
    - Edge case handling (file locked, disk full, invalid JSON)

Settings Categories:
    - Device: Backend (image file or I2C), bus, address, write cycle
    - Serial: Port, baud rate, timeout for transmission
    - Fields: Default field toggles, units and separator
"""

import json
import logging
import os
import sys
from dataclasses import dataclass, asdict
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Dict, Any, Optional

from eeprom_datalogger.core.geometry import CAT24_I2C_BASE_ADDR
from eeprom_datalogger.core.record import FieldSelection, Separator
from eeprom_datalogger.sensors import PressureUnit, TemperatureUnit


# Module logger
logger = logging.getLogger(__name__)


# =============================================================================
# Settings File Paths
# =============================================================================

def get_settings_dir() -> Path:
    """
    Get the platform-specific settings directory.

    Returns:
        Path to settings directory

    Platform paths:
        - Linux: ~/.config/eeprom-datalogger/
        - Windows: %APPDATA%/EepromDatalogger/
        - macOS: ~/Library/Application Support/EepromDatalogger/
    """
    if sys.platform == 'win32':
        base = Path(os.environ.get('APPDATA', Path.home() / 'AppData' / 'Roaming'))
        return base / 'EepromDatalogger'
    elif sys.platform == 'darwin':
        return Path.home() / 'Library' / 'Application Support' / 'EepromDatalogger'
    else:
        xdg_config = os.environ.get('XDG_CONFIG_HOME', Path.home() / '.config')
        return Path(xdg_config) / 'eeprom-datalogger'


def get_settings_file() -> Path:
    """Get the settings file path."""
    return get_settings_dir() / 'settings.json'


def get_default_image_path() -> Path:
    """Image file used when no backend is configured."""
    return get_settings_dir() / 'eeprom.bin'


# =============================================================================
# Enumerations
# =============================================================================

class Backend(Enum):
    """Where the logger's pages live."""
    IMAGE = "image"
    I2C = "i2c"


# =============================================================================
# Settings Dataclasses
# =============================================================================

@dataclass
class DeviceSettings:
    """EEPROM backend settings."""
    backend: str = Backend.IMAGE.value       # "image" or "i2c"
    image_path: str = ""                     # Empty = default image in settings dir
    i2c_bus: int = 1                         # /dev/i2c-N
    base_address: int = CAT24_I2C_BASE_ADDR  # Lower 64 KiB I2C address
    write_cycle_time: float = 0.005          # Seconds after each write

    def get_backend(self) -> Backend:
        """Get backend as enum."""
        try:
            return Backend(self.backend)
        except ValueError:
            return Backend.IMAGE

    def get_image_path(self) -> Path:
        """Configured image path, or the default one."""
        if self.image_path:
            return Path(self.image_path).expanduser()
        return get_default_image_path()


@dataclass
class SerialSettings:
    """Transmission channel settings."""
    port: str = ""                           # Empty = write to stdout
    baudrate: int = 115200
    timeout: float = 1.0


@dataclass
class FieldSettings:
    """Default field selection applied at session start."""
    date: bool = True
    time: bool = True
    temperature: bool = True
    pressure: bool = True
    humidity: bool = True
    iaq: bool = True
    eco2: bool = True
    light: bool = True
    temperature_unit: str = TemperatureUnit.C.value
    pressure_unit: str = PressureUnit.PA.value
    separator: str = Separator.SEMICOLON.name

    def get_temperature_unit(self) -> TemperatureUnit:
        try:
            return TemperatureUnit(self.temperature_unit)
        except ValueError:
            return TemperatureUnit.C

    def get_pressure_unit(self) -> PressureUnit:
        try:
            return PressureUnit(self.pressure_unit)
        except ValueError:
            return PressureUnit.PA

    def get_separator(self) -> Separator:
        try:
            return Separator[self.separator]
        except KeyError:
            return Separator.SEMICOLON

    def to_selection(self) -> FieldSelection:
        """Build a fresh FieldSelection from these defaults."""
        return FieldSelection(
            date=self.date,
            time=self.time,
            temperature=self.temperature,
            pressure=self.pressure,
            humidity=self.humidity,
            iaq=self.iaq,
            eco2=self.eco2,
            light=self.light,
            temperature_unit=self.get_temperature_unit(),
            pressure_unit=self.get_pressure_unit(),
            delimiter=self.get_separator().value,
        )


# =============================================================================
# Settings Manager
# =============================================================================

class Settings:
    """
    Singleton settings manager for the data logger tools.

    Usage:
        settings = Settings.instance()
        settings.device.i2c_bus = 3
        settings.save()

        # Or with context manager for auto-save:
        with settings.modify():
            settings.serial.port = "/dev/ttyACM0"
    """

    _instance: Optional["Settings"] = None
    _initialized: bool = False

    # Settings version for migration
    SETTINGS_VERSION = 1

    CATEGORIES = ('device', 'serial', 'fields')

    def __new__(cls) -> "Settings":
        """Ensure singleton pattern."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        """Initialize settings (only runs once due to singleton)."""
        if self._initialized:
            return

        self._initialized = True

        self.device = DeviceSettings()
        self.serial = SerialSettings()
        self.fields = FieldSettings()

        self._dirty = False

        self.load()

        logger.debug("Settings initialized")

    @classmethod
    def instance(cls) -> "Settings":
        """Get the singleton settings instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Reset the singleton instance (for testing)."""
        cls._instance = None
        cls._initialized = False

    # =========================================================================
    # Persistence
    # =========================================================================

    def load(self) -> bool:
        """
        Load settings from file.

        Returns:
            True if settings were loaded successfully
        """
        settings_file = get_settings_file()

        if not settings_file.exists():
            logger.info("Settings file not found: %s", settings_file)
            return False

        try:
            with open(settings_file, 'r', encoding='utf-8') as f:
                data = json.load(f)

            version = data.get('version', 0)
            if version < self.SETTINGS_VERSION:
                data = self._migrate_settings(data, version)

            for category in self.CATEGORIES:
                if isinstance(data.get(category), dict):
                    self._load_dataclass(getattr(self, category), data[category])

            logger.info("Settings loaded from %s", settings_file)
            return True

        except json.JSONDecodeError as e:
            logger.error("Invalid JSON in settings file: %s", e)
            self._backup_corrupted_file(settings_file)
            return False
        except PermissionError as e:
            logger.error("Permission denied reading settings: %s", e)
            return False
        except OSError as e:
            logger.error("Error loading settings: %s", e)
            return False

    def save(self) -> bool:
        """
        Save settings to file.

        Returns:
            True if settings were saved successfully
        """
        settings_dir = get_settings_dir()
        settings_file = get_settings_file()

        try:
            settings_dir.mkdir(parents=True, exist_ok=True)

            data = {
                'version': self.SETTINGS_VERSION,
                'saved_at': datetime.now().isoformat(),
                'device': asdict(self.device),
                'serial': asdict(self.serial),
                'fields': asdict(self.fields),
            }

            # Write to temp file first, then rename (atomic)
            temp_file = settings_file.with_suffix('.tmp')
            with open(temp_file, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2)

            temp_file.replace(settings_file)

            self._dirty = False
            logger.info("Settings saved to %s", settings_file)
            return True

        except PermissionError as e:
            logger.error("Permission denied saving settings: %s", e)
            return False
        except OSError as e:
            if e.errno == 28:
                logger.error("Disk full - cannot save settings")
            else:
                logger.error("OS error saving settings: %s", e)
            return False

    def _load_dataclass(self, target: Any, data: Dict[str, Any]) -> None:
        """Load data into a dataclass, ignoring unknown fields."""
        for key, value in data.items():
            if hasattr(target, key):
                setattr(target, key, value)
            else:
                logger.warning("Ignoring unknown setting %s.%s", type(target).__name__, key)

    def _migrate_settings(self, data: Dict[str, Any], from_version: int) -> Dict[str, Any]:
        """
        Migrate settings from older versions.

        Args:
            data: Settings data dictionary
            from_version: Version of the loaded settings

        Returns:
            Migrated settings data
        """
        logger.info("Migrating settings from version %d to %d",
                    from_version, self.SETTINGS_VERSION)

        # Version 0 stored the separator character instead of its name
        if from_version < 1:
            fields = data.get('fields')
            if isinstance(fields, dict) and 'separator' in fields:
                for separator in Separator:
                    if fields['separator'] == separator.value:
                        fields['separator'] = separator.name

        data['version'] = self.SETTINGS_VERSION
        return data

    def _backup_corrupted_file(self, file_path: Path) -> None:
        """Backup a corrupted settings file."""
        try:
            backup_path = file_path.with_suffix('.backup')
            file_path.replace(backup_path)
            logger.info("Corrupted settings backed up to %s", backup_path)
        except OSError as e:
            logger.error("Could not backup corrupted file: %s", e)

    # =========================================================================
    # Context Manager
    # =========================================================================

    class _ModifyContext:
        """Context manager for modifying settings with auto-save."""

        def __init__(self, settings: "Settings"):
            self.settings = settings

        def __enter__(self) -> "Settings":
            return self.settings

        def __exit__(self, exc_type, exc_val, exc_tb) -> None:
            if exc_type is None:
                self.settings.save()

    def modify(self) -> "_ModifyContext":
        """
        Context manager for modifying settings with auto-save.

        Usage:
            with settings.modify():
                settings.fields.light = False
            # Settings automatically saved on exit
        """
        self._dirty = True
        return self._ModifyContext(self)

    # =========================================================================
    # Reset
    # =========================================================================

    def reset_to_defaults(self, category: Optional[str] = None) -> None:
        """
        Reset settings to defaults.

        Args:
            category: Specific category to reset, or None for all

        Raises:
            ValueError: If category is not a known category
        """
        if category is not None and category not in self.CATEGORIES:
            raise ValueError(f"Unknown settings category: {category}")

        if category is None or category == 'device':
            self.device = DeviceSettings()
        if category is None or category == 'serial':
            self.serial = SerialSettings()
        if category is None or category == 'fields':
            self.fields = FieldSettings()

        self._dirty = True
        logger.info("Settings reset to defaults: %s", category or 'all')

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def is_dirty(self) -> bool:
        """Check if settings have been modified since last save."""
        return self._dirty

    @property
    def settings_file(self) -> Path:
        """Get the settings file path."""
        return get_settings_file()


# =============================================================================
# Module-Level Convenience Functions
# =============================================================================

def get_settings() -> Settings:
    """
    Get the global settings instance.

    Equivalent to Settings.instance().
    """
    return Settings.instance()


__all__ = [
    'Backend',
    'DeviceSettings',
    'SerialSettings',
    'FieldSettings',
    'Settings',
    'get_settings',
    'get_settings_dir',
    'get_settings_file',
    'get_default_image_path',
]
