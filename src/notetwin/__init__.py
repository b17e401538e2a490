"""Notetwin: markdown note ingestion and query store for the Digital Twin showcase."""

__version__ = "0.1.0"
