"""High-level image link resolution service.

This module ties the resolver to its collaborators: settings, a prober, a
diagnostics sink and a session cache of resolved URLs. It is the entry point
the CLI (and any embedding application) uses.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Iterable, List, Optional
from urllib.parse import quote

from .config import Settings
from .diagnostics import DiagnosticsSink, NullSink
from .models import ImageReference, ResolutionOutcome
from .probe import HttpProber
from .resolver import Prober, ProgressiveResolver

logger = logging.getLogger(__name__)

TROUBLESHOOTING_TIPS = [
    "Make sure the file is shared with 'Anyone with the link' as Viewer",
    "Check that the file ID in the link is correct and the file still exists",
    "Verify the file is an image (JPG, PNG, GIF, WebP)",
    "If sharing was changed recently, wait a few minutes for permissions to apply",
    "Make sure the Google account does not require sign-in for file access",
]


class ResolutionCache:
    """Thread-safe cache of resolved outcomes, keyed by the raw URL as given."""

    def __init__(self) -> None:
        self._entries: Dict[str, ResolutionOutcome] = {}
        self._lock = threading.Lock()

    def get(self, raw_url: str) -> Optional[ResolutionOutcome]:
        with self._lock:
            return self._entries.get(raw_url)

    def put(self, outcome: ResolutionOutcome) -> None:
        if not outcome.is_resolved or not outcome.raw_url:
            return
        with self._lock:
            self._entries[outcome.raw_url] = outcome

    def invalidate(self, raw_url: str) -> None:
        with self._lock:
            self._entries.pop(raw_url, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class LinkResolverService:
    """Resolves user-supplied image URLs to loadable URLs or placeholders."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        prober: Optional[Prober] = None,
        sink: Optional[DiagnosticsSink] = None,
        cache: Optional[ResolutionCache] = None,
    ) -> None:
        """Initialize the service.

        Args:
            settings: Resolver settings; defaults are used when omitted
            prober: Load-outcome source; an ``HttpProber`` built from
                settings is used when omitted
            sink: Diagnostics sink for probe events
            cache: Session cache; a private one is created when omitted
        """
        self.settings = settings or Settings()
        self._owns_prober = prober is None
        self.prober: Prober = prober or HttpProber.from_settings(self.settings)
        self.sink = sink or NullSink()
        self.cache = cache if cache is not None else ResolutionCache()

    def resolve(self, raw_url: Optional[str]) -> ResolutionOutcome:
        """Resolve one URL, reusing a cached result when there is one."""
        if raw_url:
            cached = self.cache.get(raw_url)
            if cached is not None:
                logger.debug("Using cached resolution for %s", raw_url)
                return cached.model_copy(update={"from_cache": True})

        return self._run(ProgressiveResolver(raw_url, self.settings.format_sweep, self.sink))

    def check(self, raw_url: str) -> ResolutionOutcome:
        """Manual accessibility check: probe the chain again from the start.

        The cache is bypassed, and refreshed when the check succeeds.
        """
        if raw_url:
            self.cache.invalidate(raw_url)
        logger.info("Checking accessibility of %s", raw_url)
        return self._run(ProgressiveResolver(raw_url, self.settings.format_sweep, self.sink))

    def resolve_reference(self, reference: ImageReference) -> ResolutionOutcome:
        return self.resolve(reference.raw_url)

    def resolve_many(self, raw_urls: Iterable[Optional[str]]) -> List[ResolutionOutcome]:
        """Resolve several URLs concurrently.

        Each URL walks its own chain sequentially; outcomes are returned in
        input order.
        """
        urls = list(raw_urls)
        if not urls:
            return []

        workers = min(self.settings.max_workers, len(urls))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            return list(executor.map(self.resolve, urls))

    def placeholder_for(self, file_id: Optional[str]) -> str:
        """Placeholder URL for an exhausted image.

        When the placeholder carries a ``text=`` label and the file ID is
        known, the first characters of the ID are appended to the label.
        """
        base = self.settings.placeholder_url
        if file_id and "text=" in base:
            return f"{base}:%20{quote(file_id[:10])}..."
        return base

    def close(self) -> None:
        if self._owns_prober and isinstance(self.prober, HttpProber):
            self.prober.close()

    def __enter__(self) -> "LinkResolverService":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _run(self, resolver: ProgressiveResolver) -> ResolutionOutcome:
        outcome = resolver.run(self.prober)

        if outcome.is_resolved:
            self.cache.put(outcome)
            return outcome

        return outcome.with_placeholder(self.placeholder_for(outcome.file_id), TROUBLESHOOTING_TIPS)
