"""Data models for drivelink.

This package contains Pydantic models for image references, probe
diagnostics events and resolution outcomes.
"""

from .image import ImageReference
from .event import ProbeEvent
from .outcome import ResolutionOutcome, ResolutionStatus

__all__ = [
    "ImageReference",
    "ProbeEvent",
    "ResolutionOutcome",
    "ResolutionStatus",
]
