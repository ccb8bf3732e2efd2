"""
Test suite for the EEPROM data logger.

This package contains:
- Unit tests for individual components
- Integration tests for complete logging sessions
- Mock fixtures for testing without the board
"""
