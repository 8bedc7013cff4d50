"""HTTP GET client for the upstream futures quote endpoint."""

import json
import logging
import socket
from typing import Any, Optional
from urllib.error import HTTPError, URLError
from urllib.parse import urlparse
from urllib.request import Request, urlopen

from ..config.defaults import UpstreamParams
from ..errors import ConfigurationError, MalformedResponseError, UpstreamUnavailableError


class UpstreamClient:
    """Fetches and decodes the upstream JSON quote payload."""

    def __init__(self, config: Optional[UpstreamParams] = None):
        self.config = config or UpstreamParams()
        self.logger = logging.getLogger("upstream.client")

        # Validate URL
        parsed = urlparse(self.config.url)
        if not parsed.scheme or not parsed.netloc:
            raise ConfigurationError(f"Invalid upstream URL: {self.config.url}")

    @property
    def url(self) -> str:
        return self.config.url

    def fetch(self) -> Any:
        """
        GET the upstream URL and decode the JSON body.

        Raises:
            UpstreamUnavailableError: network failure, timeout or non-2xx status
            MalformedResponseError: body is not valid JSON
        """
        req = Request(
            self.config.url,
            headers={
                'Accept': 'application/json',
                'User-Agent': self.config.user_agent,
            },
            method='GET'
        )

        try:
            with urlopen(req, timeout=self.config.timeout_seconds) as response:
                response_code = response.getcode()
                body = response.read().decode('utf-8')

        except HTTPError as e:
            raise UpstreamUnavailableError(
                f"HTTP {e.code}: {e.reason}",
                url=self.config.url,
                status_code=e.code
            ) from e

        except (URLError, socket.timeout, OSError) as e:
            raise UpstreamUnavailableError(
                f"Network error: {e}",
                url=self.config.url
            ) from e

        if not 200 <= response_code < 300:
            raise UpstreamUnavailableError(
                f"HTTP {response_code}: {body[:200]}",
                url=self.config.url,
                status_code=response_code
            )

        try:
            payload = json.loads(body)
        except json.JSONDecodeError as e:
            raise MalformedResponseError(
                f"Invalid JSON from upstream: {e}",
                url=self.config.url,
                status_code=response_code,
                body_preview=body[:200]
            ) from e

        self.logger.debug(f"Fetched {len(body)} bytes from {self.config.url}")
        return payload

    def health_check(self) -> bool:
        """Check if the upstream host is reachable."""
        try:
            parsed = urlparse(self.config.url)
            health_url = f"{parsed.scheme}://{parsed.netloc}"

            req = Request(health_url, method='HEAD')
            with urlopen(req, timeout=5) as response:
                return 200 <= response.getcode() < 500

        except HTTPError as e:
            # The host answered
            return e.code < 500
        except (URLError, socket.timeout, OSError) as e:
            self.logger.warning(f"Upstream health check failed: {e}")
            return False
