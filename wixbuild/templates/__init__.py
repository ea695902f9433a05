"""Embedded WiX Source templates."""
