"""Massa wallet token swaps on the Dusa exchange."""

__version__ = "0.1.0"
