"""Mockup Studio - AI apparel mockups from a generated model and an uploaded garment."""

__version__ = "1.0.0"
