"""Ratatype: a terminal typing-speed trainer."""

__version__ = "0.1.0"
