"""Fetches the whale count page as a parsed HTML document."""

import logging
import random
from collections.abc import Sequence
from urllib.parse import urlsplit

import httpx
from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0

USER_AGENTS: tuple[str, ...] = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 14_4_1) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/17.4.1 Safari/605.1.15",
    "Mozilla/5.0 (X11; Linux x86_64; rv:125.0) Gecko/20100101 Firefox/125.0",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36 Edg/124.0.2478.80",
)


class FetchError(Exception):
    """The page could not be retrieved (transport failure, timeout or HTTP error)."""

    def __init__(self, url: str, message: str, status_code: int | None = None):
        self.url = url
        self.message = message
        self.status_code = status_code
        super().__init__(f"Failed to fetch {url}: {message}")


class HtmlFetcher:
    """Retrieves a page with browser-like request headers and a bounded timeout.

    There is no retry here; a failed fetch surfaces as FetchError and the
    next scheduled run tries again.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        user_agents: Sequence[str] = USER_AGENTS,
        transport: httpx.AsyncBaseTransport | None = None,
        rng: random.Random | None = None,
    ):
        if timeout <= 0:
            raise ValueError(f"Timeout must be positive: {timeout}")
        if not user_agents:
            raise ValueError("At least one user agent is required")
        self.timeout = timeout
        self.user_agents = tuple(user_agents)
        self.transport = transport
        self._rng = rng or random.Random()

    def build_headers(self, url: str) -> dict[str, str]:
        """Request headers for one fetch, with a user agent picked at random."""
        parts = urlsplit(url)
        return {
            "User-Agent": self._rng.choice(self.user_agents),
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "Accept-Language": "en-US,en;q=0.9",
            "Referer": f"{parts.scheme}://{parts.netloc}/",
            "Cache-Control": "no-cache",
            "Upgrade-Insecure-Requests": "1",
        }

    async def fetch(self, url: str) -> BeautifulSoup:
        """GET ``url`` and parse the body.

        Args:
            url: Absolute http(s) URL of the page

        Returns:
            Parsed document

        Raises:
            FetchError: On timeout, connection failure or an HTTP error status
        """
        headers = self.build_headers(url)
        logger.debug("Fetching %s as %s", url, headers["User-Agent"])

        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                follow_redirects=True,
                transport=self.transport,
            ) as client:
                response = await client.get(url, headers=headers)
                response.raise_for_status()
        except httpx.TimeoutException as e:
            raise FetchError(url, f"timed out after {self.timeout:g}s") from e
        except httpx.HTTPStatusError as e:
            raise FetchError(
                url, f"HTTP {e.response.status_code}", status_code=e.response.status_code
            ) from e
        except httpx.HTTPError as e:
            raise FetchError(url, str(e) or type(e).__name__) from e

        logger.info("Fetched %s (%d bytes)", url, len(response.content))
        return BeautifulSoup(response.text, "html.parser")
