"""Overtime and billing analysis tool."""

__version__ = "1.0.0"
