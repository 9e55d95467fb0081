"""Data Alchemist: validate, filter and re-export client/worker/task tables."""

__version__ = "0.1.0"
