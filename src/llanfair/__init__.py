"""Two-tier settings for the Llanfair split timer."""

__version__ = "0.1.0"
