"""Google Drive image URL resolution.

This module owns the whole resolution pipeline for user-supplied image URLs:
classifying a URL as Drive-hosted, extracting the Drive file ID, building the
ordered list of direct-access candidate URLs, and the progressive resolver
state machine that walks that list as load outcomes are reported.

Nothing here performs I/O. Load outcomes come from a *prober*: any callable
taking a candidate URL and returning True when it loaded as an image.
"""

import logging
import re
from enum import Enum
from typing import Any, Callable, List, Optional

from .diagnostics import DiagnosticsSink, NullSink
from .exceptions import InvalidTransitionError
from .models import ProbeEvent, ResolutionOutcome

logger = logging.getLogger(__name__)

Prober = Callable[[str], bool]

DRIVE_HOST_MARKERS = (
    "drive.google.com",
    "googleusercontent.com",
    "docs.google.com",
)

_ID = r"([A-Za-z0-9_-]+)"

# Declaration order is the tie-break: first match wins
FILE_ID_PATTERNS = (
    re.compile(r"/file/d/" + _ID + r"(?:/|\?|\Z)"),
    re.compile(r"[?&]id=" + _ID + r"(?:&|\Z)"),
    re.compile(r"/d/" + _ID + r"(?:/|\?|\Z)"),
)

CANDIDATE_TEMPLATES = (
    "https://drive.usercontent.google.com/download?id={id}&export=view&authuser=0",
    "https://lh3.googleusercontent.com/d/{id}",
    "https://drive.google.com/thumbnail?id={id}&sz=w800",
    "https://drive.google.com/uc?export=view&id={id}",
)

SWEEP_FORMATS = ("png", "jpg", "jpeg", "gif", "webp")
SWEEP_TEMPLATE = "https://drive.google.com/uc?export=view&id={id}&format={fmt}"


def is_drive_url(url: Any) -> bool:
    """Check whether a URL references a Google Drive hosted asset.

    Args:
        url: Any value; non-strings and empty strings are never Drive URLs

    Returns:
        True if the URL contains a known Drive host
    """
    if not url or not isinstance(url, str):
        return False
    return any(marker in url for marker in DRIVE_HOST_MARKERS)


def extract_file_id(url: Any) -> Optional[str]:
    """Extract the Drive file ID from a URL.

    Supported shapes, tried in this order:
        .../file/d/<id>/...
        ...?id=<id> or ...&id=<id>
        .../d/<id>/...

    Args:
        url: Drive URL

    Returns:
        The file ID, or None when no pattern matches
    """
    if not url or not isinstance(url, str):
        return None

    for pattern in FILE_ID_PATTERNS:
        match = pattern.search(url)
        if match:
            return match.group(1)

    return None


def build_candidate_chain(file_id: str, format_sweep: bool = False) -> List[str]:
    """Build the ordered candidate URLs for a Drive file.

    Args:
        file_id: Drive file ID
        format_sweep: Append ``uc?export=view&format=<ext>`` variants after
            the four standard candidates

    Returns:
        Candidate URLs in probe order
    """
    chain = [template.format(id=file_id) for template in CANDIDATE_TEMPLATES]
    if format_sweep:
        chain.extend(SWEEP_TEMPLATE.format(id=file_id, fmt=fmt) for fmt in SWEEP_FORMATS)
    return chain


class ResolverState(Enum):
    """Progressive resolver states."""
    IDLE = "idle"
    PROBING = "probing"
    RESOLVED = "resolved"
    EXHAUSTED = "exhausted"


class ProgressiveResolver:
    """State machine that walks a candidate chain for one image URL.

    The embedding environment drives it: ``start()`` returns the first URL to
    load, then each ``report_success()`` or ``report_failure()`` moves it
    along. ``report_failure()`` returns the next URL to load, or None once
    the chain is exhausted. ``run()`` drives the same loop with a prober.

    Non-Drive URLs resolve to themselves without a single probe. Drive URLs
    without a recognisable file ID are exhausted without a single probe.
    """

    def __init__(
        self,
        raw_url: Optional[str],
        format_sweep: bool = False,
        sink: Optional[DiagnosticsSink] = None,
    ) -> None:
        """Initialize the resolver.

        Args:
            raw_url: URL as supplied by the content store
            format_sweep: Include extension-variant candidates in the chain
            sink: Diagnostics sink receiving one event per probe
        """
        self.raw_url = raw_url
        # Match on the stripped URL; outcomes keep raw_url verbatim
        url = raw_url.strip() if isinstance(raw_url, str) else raw_url
        self.is_drive = is_drive_url(url)
        self.file_id = extract_file_id(url) if self.is_drive else None
        self.chain: List[str] = (
            build_candidate_chain(self.file_id, format_sweep) if self.file_id else []
        )
        self._sink = sink or NullSink()

        self._state = ResolverState.IDLE
        self._index: Optional[int] = None
        self._attempts: List[str] = []
        self._resolved_url: Optional[str] = None

    @property
    def state(self) -> ResolverState:
        return self._state

    @property
    def index(self) -> Optional[int]:
        """Index of the candidate being probed, or None outside PROBING."""
        return self._index if self._state == ResolverState.PROBING else None

    @property
    def current_candidate(self) -> Optional[str]:
        if self._state != ResolverState.PROBING:
            return None
        return self.chain[self._index]

    @property
    def is_terminal(self) -> bool:
        return self._state in (ResolverState.RESOLVED, ResolverState.EXHAUSTED)

    def start(self) -> Optional[str]:
        """Leave IDLE.

        Returns:
            The first candidate to load, or None if the resolver went
            straight to a terminal state

        Raises:
            InvalidTransitionError: If the resolver is not IDLE
        """
        if self._state != ResolverState.IDLE:
            raise InvalidTransitionError(
                f"Cannot start resolver in state '{self._state.value}'",
                state=self._state.value,
            )

        if not self.raw_url or not isinstance(self.raw_url, str):
            logger.debug("Empty image URL, nothing to resolve")
            self._state = ResolverState.EXHAUSTED
            return None

        if not self.is_drive:
            self._resolved_url = self.raw_url
            self._state = ResolverState.RESOLVED
            return None

        if not self.chain:
            logger.warning("Could not extract Drive file ID from URL: %s", self.raw_url)
            self._state = ResolverState.EXHAUSTED
            return None

        return self._enter(0)

    def report_success(self) -> None:
        """Record that the current candidate loaded.

        Raises:
            InvalidTransitionError: If no candidate is being probed
        """
        candidate = self._require_probing("success")
        self._record(candidate, ok=True)
        logger.debug("Candidate %d/%d loaded: %s", self._index + 1, len(self.chain), candidate)

        self._resolved_url = candidate
        self._state = ResolverState.RESOLVED

    def report_failure(self, error: Optional[str] = None) -> Optional[str]:
        """Record that the current candidate failed to load.

        Args:
            error: Optional description of the failure, for diagnostics

        Returns:
            The next candidate to load, or None if the chain is exhausted

        Raises:
            InvalidTransitionError: If no candidate is being probed
        """
        candidate = self._require_probing("failure")
        self._record(candidate, ok=False, error=error)
        logger.debug(
            "Candidate %d/%d failed: %s%s",
            self._index + 1,
            len(self.chain),
            candidate,
            f" ({error})" if error else "",
        )

        next_index = self._index + 1
        if next_index < len(self.chain):
            return self._enter(next_index)

        logger.info("All %d candidates failed for %s", len(self.chain), self.raw_url)
        self._state = ResolverState.EXHAUSTED
        return None

    def restart(self) -> Optional[str]:
        """Manually re-enter the chain from its first candidate.

        This is the user-initiated "check URL accessibility" action; the
        resolver never restarts on its own.

        Returns:
            The first candidate to load, or None (see ``start``)
        """
        if self._state == ResolverState.PROBING:
            raise InvalidTransitionError("Cannot restart while probing", state=self._state.value)

        self._state = ResolverState.IDLE
        self._index = None
        self._attempts = []
        self._resolved_url = None
        return self.start()

    def outcome(self) -> ResolutionOutcome:
        """Build the outcome of a finished resolution.

        Raises:
            InvalidTransitionError: If the resolver has not finished
        """
        if self._state == ResolverState.RESOLVED:
            return ResolutionOutcome.resolved(
                self.raw_url,
                self._resolved_url,
                file_id=self.file_id,
                attempts=self._attempts,
            )
        if self._state == ResolverState.EXHAUSTED:
            return ResolutionOutcome.exhausted(
                self.raw_url,
                file_id=self.file_id,
                attempts=self._attempts,
            )
        raise InvalidTransitionError(
            f"Resolution not finished (state '{self._state.value}')",
            state=self._state.value,
        )

    def run(self, probe: Prober) -> ResolutionOutcome:
        """Walk the chain with a prober until a terminal state is reached.

        A prober that raises counts as a load error for that candidate.

        Args:
            probe: Callable returning True when a candidate URL loads

        Returns:
            The resolution outcome
        """
        candidate = self.start() if self._state == ResolverState.IDLE else self.current_candidate

        while candidate is not None:
            try:
                loaded = bool(probe(candidate))
                error = None if loaded else "load error"
            except Exception as e:
                logger.debug("Prober raised for %s: %s", candidate, e)
                loaded = False
                error = str(e) or type(e).__name__

            if loaded:
                self.report_success()
                candidate = None
            else:
                candidate = self.report_failure(error)

        return self.outcome()

    def _enter(self, index: int) -> str:
        self._state = ResolverState.PROBING
        self._index = index
        candidate = self.chain[index]
        self._attempts.append(candidate)
        logger.debug("Trying candidate %d/%d: %s", index + 1, len(self.chain), candidate)
        return candidate

    def _require_probing(self, signal: str) -> str:
        if self._state != ResolverState.PROBING:
            raise InvalidTransitionError(
                f"Cannot report load {signal} in state '{self._state.value}'",
                state=self._state.value,
            )
        return self.chain[self._index]

    def _record(self, candidate: str, ok: bool, error: Optional[str] = None) -> None:
        event = ProbeEvent(
            original_url=self.raw_url,
            candidate_url=candidate,
            index=self._index,
            ok=ok,
            file_id=self.file_id,
            error=error,
        )
        try:
            self._sink.record(event)
        except Exception as e:
            # Diagnostics must never break resolution
            logger.warning("Diagnostics sink failed: %s", e)


def resolve(
    raw_url: Optional[str],
    probe: Prober,
    sink: Optional[DiagnosticsSink] = None,
    format_sweep: bool = False,
) -> ResolutionOutcome:
    """Resolve one image URL with a prober.

    Args:
        raw_url: URL as supplied by the content store
        probe: Callable returning True when a candidate URL loads
        sink: Optional diagnostics sink
        format_sweep: Include extension-variant candidates

    Returns:
        The resolution outcome
    """
    return ProgressiveResolver(raw_url, format_sweep=format_sweep, sink=sink).run(probe)
