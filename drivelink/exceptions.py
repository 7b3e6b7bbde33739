"""Exception classes for drivelink.

This module defines custom exception classes used throughout the application
for proper error handling and user feedback.
"""

from typing import Optional, Dict, Any


class DriveLinkError(Exception):
    """Base exception class for all drivelink errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error message
            details: Optional additional error details
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigError(DriveLinkError):
    """Exception raised for configuration-related errors."""
    pass


class ValidationError(DriveLinkError):
    """Exception raised for data validation errors."""
    pass


class InputError(DriveLinkError):
    """Exception raised when a bulk input file cannot be read or parsed."""

    def __init__(
        self,
        message: str,
        file_path: Optional[str] = None,
        **kwargs: Any
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error message
            file_path: Path to the input file
            **kwargs: Additional arguments passed to parent class
        """
        super().__init__(message, **kwargs)
        self.file_path = file_path


class ProbeError(DriveLinkError):
    """Exception raised when a single candidate URL fails to load."""

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
        **kwargs: Any
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error message
            url: Candidate URL that was probed
            status_code: HTTP status code, if a response was received
            **kwargs: Additional arguments passed to parent class
        """
        super().__init__(message, **kwargs)
        self.url = url
        self.status_code = status_code


class InvalidTransitionError(DriveLinkError):
    """Exception raised when a resolver receives a signal its state cannot accept."""

    def __init__(self, message: str, state: Optional[str] = None, **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        self.state = state
