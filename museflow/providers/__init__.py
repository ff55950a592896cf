"""Concrete adapters for MuseFlow's external collaborators."""
