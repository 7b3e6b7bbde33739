"""Resolution outcome model."""

from enum import Enum
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field, model_validator


class ResolutionStatus(str, Enum):
    """Terminal result of resolving one image URL."""
    RESOLVED = "resolved"
    EXHAUSTED = "exhausted"


class ResolutionOutcome(BaseModel):
    """Result of resolving one image URL.

    ``RESOLVED`` carries the URL the rendering host should use. ``EXHAUSTED``
    carries no URL; the caller shows ``placeholder_url`` and may surface
    ``guidance`` to the user.
    """

    model_config = ConfigDict(frozen=True)

    raw_url: Optional[str] = None
    status: ResolutionStatus
    url: Optional[str] = Field(None, description="Usable URL when resolved")
    file_id: Optional[str] = None
    attempts: List[str] = Field(default_factory=list, description="Candidates probed, in order")
    placeholder_url: Optional[str] = None
    guidance: List[str] = Field(default_factory=list)
    from_cache: bool = False

    @model_validator(mode="after")
    def check_url_matches_status(self) -> "ResolutionOutcome":
        """A resolved outcome always has a URL; an exhausted one never does."""
        if self.status == ResolutionStatus.RESOLVED and not self.url:
            raise ValueError("Resolved outcome requires a url")
        if self.status == ResolutionStatus.EXHAUSTED and self.url:
            raise ValueError("Exhausted outcome cannot carry a url")
        return self

    @classmethod
    def resolved(
        cls,
        raw_url: Optional[str],
        url: str,
        file_id: Optional[str] = None,
        attempts: Optional[List[str]] = None,
    ) -> "ResolutionOutcome":
        return cls(
            raw_url=raw_url,
            status=ResolutionStatus.RESOLVED,
            url=url,
            file_id=file_id,
            attempts=attempts or [],
        )

    @classmethod
    def exhausted(
        cls,
        raw_url: Optional[str],
        file_id: Optional[str] = None,
        attempts: Optional[List[str]] = None,
        placeholder_url: Optional[str] = None,
        guidance: Optional[List[str]] = None,
    ) -> "ResolutionOutcome":
        return cls(
            raw_url=raw_url,
            status=ResolutionStatus.EXHAUSTED,
            file_id=file_id,
            attempts=attempts or [],
            placeholder_url=placeholder_url,
            guidance=guidance or [],
        )

    @property
    def is_resolved(self) -> bool:
        return self.status == ResolutionStatus.RESOLVED

    @property
    def display_url(self) -> Optional[str]:
        """URL to assign to the image element: the resolved URL or the placeholder."""
        return self.url if self.is_resolved else self.placeholder_url

    def with_placeholder(self, placeholder_url: str, guidance: List[str]) -> "ResolutionOutcome":
        """Copy of an exhausted outcome with placeholder and guidance filled in."""
        return self.model_copy(update={"placeholder_url": placeholder_url, "guidance": list(guidance)})

    def to_row(self) -> Dict[str, Any]:
        """Flatten for table/JSON output."""
        return {
            "raw_url": self.raw_url,
            "status": self.status.value,
            "url": self.display_url,
            "file_id": self.file_id,
            "probes": len(self.attempts),
            "cached": self.from_cache,
        }
