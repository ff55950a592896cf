"""Command-line interface for MuseFlow."""
