"""HTTP prober.

Stands in for a browser's image element: a candidate "loads" when a GET
returns a 2xx response whose content type is an image.
"""

import logging
from typing import Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .config import Settings
from .exceptions import ProbeError

logger = logging.getLogger(__name__)


class HttpProber:
    """Callable prober backed by a pooled requests session."""

    def __init__(
        self,
        timeout: float = 10.0,
        require_image_content_type: bool = True,
        user_agent: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        """Initialize the prober.

        Args:
            timeout: Request timeout in seconds
            require_image_content_type: Reject 2xx responses that are not images
                (Drive answers inaccessible files with an HTML sign-in page)
            user_agent: User-Agent header value
            session: Session to use instead of a new one
        """
        self.timeout = timeout
        self.require_image_content_type = require_image_content_type
        self.session = session or requests.Session()
        if user_agent:
            self.session.headers["User-Agent"] = user_agent
        if session is None:
            self._configure_session()

    @classmethod
    def from_settings(cls, settings: Settings) -> "HttpProber":
        return cls(
            timeout=settings.probe_timeout,
            require_image_content_type=settings.require_image_content_type,
            user_agent=settings.user_agent,
        )

    def _configure_session(self) -> None:
        """Configure connection pooling; the resolver owns fallback, not the adapter."""
        retry_strategy = Retry(total=0, connect=1, read=0, redirect=5)

        adapter = HTTPAdapter(max_retries=retry_strategy, pool_connections=10, pool_maxsize=20)
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)

    def check(self, url: str) -> None:
        """Probe one URL.

        Raises:
            ProbeError: If the URL does not load as an image
        """
        try:
            response = self.session.get(url, timeout=self.timeout, stream=True, allow_redirects=True)
        except requests.exceptions.Timeout as e:
            raise ProbeError(f"Timed out after {self.timeout}s", url=url) from e
        except requests.exceptions.RequestException as e:
            raise ProbeError(f"Request failed: {e}", url=url) from e

        try:
            if not 200 <= response.status_code < 300:
                raise ProbeError(f"HTTP {response.status_code}", url=url, status_code=response.status_code)

            content_type = response.headers.get("Content-Type", "")
            if self.require_image_content_type and not content_type.lower().startswith("image/"):
                raise ProbeError(
                    f"Not an image (content type '{content_type or 'unknown'}')",
                    url=url,
                    status_code=response.status_code,
                )
        finally:
            response.close()

    def __call__(self, url: str) -> bool:
        try:
            self.check(url)
        except ProbeError as e:
            logger.debug("Probe failed for %s: %s", url, e.message)
            return False
        return True

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "HttpProber":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
