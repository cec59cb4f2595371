"""
NET Bible labs API client.
"""

import httpx
from typing import Optional, Any
from votd.models import VerseOfDay
from votd.verse_parser import VersePayloadError, VerseAPIError, parse_verse_of_day

DEFAULT_API_URL = "https://labs.bible.org/api/"
DEFAULT_TIMEOUT_SECONDS = 2.0


class RequestTimeoutError(VerseAPIError):
    """Request did not complete within the timeout."""
    pass


class ConnectionFailedError(VerseAPIError):
    """Server could not be reached."""
    pass


class VerseClient:
    """
    Synchronous client for the labs.bible.org passage API.

    Only the verse-of-the-day passage is requested.
    """

    def __init__(
        self,
        api_url: str = DEFAULT_API_URL,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: Optional[httpx.BaseTransport] = None
    ):
        """
        Initialize verse client.

        Args:
            api_url: Passage API endpoint
            timeout: Request timeout in seconds
            transport: Optional httpx transport (tests plug a MockTransport here)
        """
        self.api_url = api_url
        self.timeout = timeout
        self.client = httpx.Client(timeout=timeout, transport=transport)

    def close(self):
        """Close HTTP client."""
        self.client.close()

    def __enter__(self) -> "VerseClient":
        return self

    def __exit__(self, *exc_info):
        self.close()

    def _fetch(self, params: dict) -> Any:
        """
        Fetch JSON from the passage API.

        Args:
            params: Query parameters

        Returns:
            Decoded JSON body

        Raises:
            VerseAPIError: On HTTP or transport errors
            VersePayloadError: If the body is not JSON
        """
        try:
            response = self.client.get(self.api_url, params=params)

            # The API answers an invalid passage with 400 and a blank page,
            # so the status has to be checked before decoding
            response.raise_for_status()

            return response.json()

        except httpx.HTTPStatusError as e:
            raise VerseAPIError(
                f"{e.response.status_code}: {e.response.text if e.response.text else 'HTTP error'}",
                status_code=e.response.status_code
            ) from e
        except httpx.TimeoutException as e:
            raise RequestTimeoutError(f"Request timed out after {self.timeout}s", None) from e
        except httpx.ConnectError as e:
            raise ConnectionFailedError(f"Connection failed: {str(e)}", None) from e
        except httpx.RequestError as e:
            raise VerseAPIError(f"Request error: {str(e)}", None) from e
        except ValueError as e:
            raise VersePayloadError(f"Response is not JSON: {str(e)}", None) from e

    def fetch_verse_of_day(self) -> VerseOfDay:
        """
        Get today's verse.

        Returns:
            Verse of the day

        Raises:
            VerseAPIError: If the request or the payload fails
        """
        payload = self._fetch({"passage": "votd", "type": "json"})
        return parse_verse_of_day(payload)
