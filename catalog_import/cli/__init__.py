"""Command line interface for the product catalog importer."""

from .command import EXIT_FATAL, EXIT_SUCCESS, main

__all__ = ["EXIT_FATAL", "EXIT_SUCCESS", "main"]
