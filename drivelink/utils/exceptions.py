"""Error formatting helpers for drivelink.

This module turns drivelink exceptions into messages for CLI users.
"""

from ..exceptions import (
    ConfigError,
    DriveLinkError,
    InputError,
    InvalidTransitionError,
    ProbeError,
)


def format_error_for_user(error: Exception, debug: bool = False) -> str:
    """Format an error message for user display.

    Args:
        error: The exception to format
        debug: Whether to include debug information

    Returns:
        Formatted error message
    """
    if isinstance(error, ConfigError):
        message = f"Configuration error: {error.message}"
        if debug and error.details:
            message += f"\nDetails: {error.details}"
        return message

    if isinstance(error, InputError):
        message = f"Input error: {error.message}"
        if error.file_path:
            message += f"\nFile: {error.file_path}"
        return message

    if isinstance(error, ProbeError):
        message = f"Probe failed: {error.message}"
        if error.url:
            message += f"\nURL: {error.url}"
        if error.status_code and debug:
            message += f"\nStatus code: {error.status_code}"
        return message

    if isinstance(error, InvalidTransitionError):
        message = f"Resolver error: {error.message}"
        if debug and error.state:
            message += f"\nState: {error.state}"
        return message

    if isinstance(error, DriveLinkError):
        return f"Error: {error.message}"

    # Default formatting
    if debug:
        return f"Error: {str(error)}\nType: {type(error).__name__}"
    return f"Error: {str(error)}"
