"""medialib - media library persistence core."""

__version__ = "0.1.0"
