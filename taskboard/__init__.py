"""Task board backend and client-side task store."""

__version__ = "1.0.0"
