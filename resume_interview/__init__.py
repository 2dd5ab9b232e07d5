"""Conversational résumé interview service."""

__version__ = "1.0.0"
