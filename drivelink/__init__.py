"""Google Drive image link resolver.

Resolves user-supplied image URLs from portfolio content (carousel images,
case studies, testimonials) into URLs a browser can load, walking a fixed
chain of Google Drive direct-access URL formats and falling back to a
placeholder when none of them loads.
"""

__version__ = "0.1.0"
__description__ = "Resolve Google Drive image links to loadable URLs"

# Re-export main classes for convenience
from .resolver import (
    ProgressiveResolver,
    ResolverState,
    build_candidate_chain,
    extract_file_id,
    is_drive_url,
    resolve,
)
from .links import convert_links, link_variants
from .config import ConfigManager, Settings
from .diagnostics import DiagnosticsSink, LoggingSink, MemorySink, NullSink
from .models import ImageReference, ProbeEvent, ResolutionOutcome, ResolutionStatus
from .probe import HttpProber
from .service import LinkResolverService, ResolutionCache
from .exceptions import (
    DriveLinkError,
    ConfigError,
    ValidationError,
    InputError,
    ProbeError,
    InvalidTransitionError,
)

__all__ = [
    "__version__",
    "__description__",
    "ProgressiveResolver",
    "ResolverState",
    "build_candidate_chain",
    "extract_file_id",
    "is_drive_url",
    "resolve",
    "convert_links",
    "link_variants",
    "ConfigManager",
    "Settings",
    "DiagnosticsSink",
    "LoggingSink",
    "MemorySink",
    "NullSink",
    "ImageReference",
    "ProbeEvent",
    "ResolutionOutcome",
    "ResolutionStatus",
    "HttpProber",
    "LinkResolverService",
    "ResolutionCache",
    "DriveLinkError",
    "ConfigError",
    "ValidationError",
    "InputError",
    "ProbeError",
    "InvalidTransitionError",
]
