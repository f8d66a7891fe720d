"""
Command-line interface for the rebirth package.

This module provides the main CLI entry point for the supervisor.
"""

from .main import main_cli

__all__ = [
    "main_cli",
]
