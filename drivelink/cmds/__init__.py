"""Command modules for the drivelink CLI.

This module exports all command groups (Typer apps) that can be registered
with the main application.
"""

from .links import app as links_app
from .images import app as images_app
from .config import app as config_app

__all__ = [
    "links_app",
    "images_app",
    "config_app",
]
