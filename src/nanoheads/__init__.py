"""Editorial fact/gap extraction and draft generation."""

__version__ = "0.3.0"
