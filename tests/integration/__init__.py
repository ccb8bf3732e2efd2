"""Integration tests for the EEPROM data logger."""
