"""Noraliva learning backend: mastery tracking, review scheduling and missions."""

__version__ = "0.1.0"
