"""Tipped transaction instruction building and multi-service transaction relay."""

__version__ = "2.0.1"