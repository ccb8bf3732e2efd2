"""Unit tests for the EEPROM data logger."""
