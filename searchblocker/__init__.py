"""SearchBlocker — request-time search-term validation."""

__version__ = "1.0.0"
