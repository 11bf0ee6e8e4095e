"""Reliable, ordered, fragmenting transport over UDP, with its wire formats and small UDP tools."""

__version__ = "0.1.0"