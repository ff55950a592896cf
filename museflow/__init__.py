"""MuseFlow: request orchestration and result caching for text actions."""

__version__ = "0.1.0"
