"""
HTTP client shared by the remote feed loaders.
"""

from typing import Any, Dict, Optional
import logging

import requests

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "tidal-dashboard/0.1 (flood-stage dashboard)"


class FeedApiError(Exception):
    """Exception raised when a feed request fails."""
    def __init__(self, message: str, response: Optional[requests.Response] = None):
        """Initialize the error.

        Args:
            message: Error message
            response: Optional response object that caused the error
        """
        self.message = message
        self.response = response
        super().__init__(self.message)


class FeedHttpError(FeedApiError):
    """A feed answered with a non-2xx status."""
    def __init__(self, status_code: int, reason: str, url: str,
                 response: Optional[requests.Response] = None):
        self.status_code = status_code
        self.reason = reason
        self.url = url
        super().__init__(f"{status_code} {reason} for {url}", response=response)


class FeedClient:
    """Issues GET requests and decodes JSON responses for the feed loaders."""

    def __init__(self, user_agent: str = DEFAULT_USER_AGENT, session: Optional[requests.Session] = None):
        """Initialize the client.

        Args:
            user_agent: User-Agent header sent with every request. The NWS
                API rejects requests without one.
            session: Optional session to reuse; a new one is created otherwise
        """
        self.user_agent = user_agent
        self._session = session or requests.Session()
        self._session.headers.update({
            "User-Agent": user_agent,
            "Accept": "application/json",
        })

    def get(self, url: str, params: Optional[Dict[str, Any]] = None) -> requests.Response:
        """GET a URL and require a 2xx status.

        Raises:
            FeedHttpError: On a non-2xx status
            FeedApiError: If the request could not be completed
        """
        logger.debug(f"GET {url} params={params}")
        try:
            response = self._session.get(url, params=params)
        except requests.exceptions.RequestException as e:
            logger.error(f"Request to {url} failed: {e}")
            raise FeedApiError(f"Request to {url} failed: {e}") from e

        logger.debug(f"Response status {response.status_code} from {url}")
        if not response.ok:
            raise FeedHttpError(response.status_code, response.reason or "", url, response=response)
        return response

    def get_json(self, url: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """GET a URL and decode its JSON body.

        Raises:
            FeedHttpError: On a non-2xx status
            FeedApiError: If the request fails or the body is not JSON
        """
        response = self.get(url, params=params)
        try:
            return response.json()
        except ValueError as e:
            logger.error(f"Invalid JSON from {url}: {e}")
            raise FeedApiError(f"Invalid JSON from {url}: {e}", response=response) from e

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> "FeedClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
