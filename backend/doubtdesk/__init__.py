"""DoubtDesk - doubt-resolution chat backend and conversation manager."""

__version__ = "1.0.0"
