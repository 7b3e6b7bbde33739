"""Utility modules for drivelink.

This package contains helpers shared by the CLI commands.
"""

from .exceptions import format_error_for_user

__all__ = [
    "format_error_for_user",
]
