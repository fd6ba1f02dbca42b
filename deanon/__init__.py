"""Common-input-ownership address clustering and cluster transaction graphs."""

__version__ = "0.1.0"
