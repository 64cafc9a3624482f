"""Ethereum helpers — address validation and key custody."""
