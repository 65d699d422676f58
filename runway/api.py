"""API client for Roblox Open Cloud asset uploads."""

from __future__ import annotations

import json
import logging
import random
import re
import threading
import time
from collections import deque
from typing import Any, Callable

import httpx

from .exceptions import (
    AuthError,
    RateLimitError,
    RobloxApiError,
    TransientNetworkError,
)

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://apis.roblox.com"
ASSET_DELIVERY_URL = "https://assetdelivery.roblox.com/v1/asset/"
ASSET_DESCRIPTION = "Uploaded by Runway."

TEXTURE_ID_PATTERN = re.compile(r"https?://www\.roblox\.com/asset/\?id=(\d+)")


class RateLimiter:
    """Allows at most ``limit`` acquisitions per sliding ``period`` seconds.

    Shared by all worker threads of a pass.
    """

    def __init__(
        self,
        limit: int,
        period: float,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.limit = limit
        self.period = period
        self._clock = clock
        self._sleep = sleep
        self._calls: deque[float] = deque()
        self._lock = threading.Lock()

    def acquire(self) -> None:
        """Block until a call is allowed."""
        while True:
            with self._lock:
                now = self._clock()
                while self._calls and now - self._calls[0] >= self.period:
                    self._calls.popleft()
                if len(self._calls) < self.limit:
                    self._calls.append(now)
                    return
                wait = self.period - (now - self._calls[0])
            self._sleep(max(wait, 0.0))


class RobloxCloudClient:
    """Client for the Open Cloud Assets API."""

    def __init__(
        self,
        api_key: str,
        api_url: str = DEFAULT_API_URL,
        max_retries: int = 3,
        retry_delay: float = 1.0,
        timeout: float = 60.0,
        transport: httpx.BaseTransport | None = None,
        sleep: Callable[[float], None] = time.sleep,
        create_limiter: RateLimiter | None = None,
        poll_limiter: RateLimiter | None = None,
    ):
        """Initialize Open Cloud API client.

        Args:
            api_key: Open Cloud API key with asset read and write permissions
            api_url: Base URL of the Open Cloud API
            max_retries: Maximum number of retry attempts (default: 3)
            retry_delay: Initial delay between retries in seconds (default: 1.0)
            timeout: Request timeout in seconds (default: 60.0)
            transport: Optional httpx transport (used by tests)
            sleep: Function used to wait between retries and polls
            create_limiter: Rate limiter for asset creation requests
            poll_limiter: Rate limiter for operation polling requests
        """
        self.api_key = api_key
        self.api_url = api_url.rstrip("/")
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.timeout = timeout
        self._transport = transport
        self._sleep = sleep
        self.create_limiter = create_limiter or RateLimiter(60, 60.0, sleep=sleep)
        self.poll_limiter = poll_limiter or RateLimiter(60, 60.0, sleep=sleep)

        self._client: httpx.Client | None = None
        self._client_lock = threading.Lock()

    def _get_client(self) -> httpx.Client:
        """Get or create the httpx client."""
        with self._client_lock:
            if self._client is None or self._client.is_closed:
                self._client = httpx.Client(
                    headers={"x-api-key": self.api_key},
                    timeout=httpx.Timeout(self.timeout),
                    follow_redirects=True,
                    transport=self._transport,
                )
            return self._client

    def close(self) -> None:
        """Close the client and release connections."""
        with self._client_lock:
            if self._client is not None and not self._client.is_closed:
                self._client.close()
            self._client = None

    def _calculate_retry_delay(self, attempt: int) -> float:
        """Calculate delay before next retry using exponential backoff.

        Args:
            attempt: Current attempt number (0-based)

        Returns:
            Delay in seconds
        """
        base_delay = self.retry_delay * (2**attempt)
        # Add jitter: +/- 25% of base delay
        jitter = base_delay * 0.25 * (2 * random.random() - 1)
        return base_delay + jitter

    def _error_for_status(self, response: httpx.Response) -> Exception:
        """Map an unsuccessful response to the error taxonomy."""
        status_code = response.status_code
        detail = _error_detail(response)

        if status_code == 401:
            return AuthError(f"Invalid API key or unauthorized access{detail}")
        if status_code == 403:
            return AuthError(f"Access forbidden - check the API key's permissions and creator{detail}")
        if status_code == 429:
            retry_after = response.headers.get("Retry-After")
            delay = float(retry_after) if retry_after and retry_after.isdigit() else None
            return RateLimitError(f"Rate limit exceeded{detail}", retry_after=delay)
        if 500 <= status_code < 600:
            return TransientNetworkError(f"Server error {status_code}{detail}")
        return RobloxApiError(f"API request failed with status {status_code}{detail}", status_code)

    def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """Make a request with retry logic.

        Transient failures (network errors, 429, 5xx) are retried with
        exponential backoff; authentication and client errors are not.

        Raises:
            AuthError: On 401/403
            TransientNetworkError: If retries are exhausted
            RobloxApiError: On any other unsuccessful status
        """
        client = self._get_client()
        last_exception: Exception | None = None

        for attempt in range(self.max_retries + 1):
            try:
                response = client.request(method, url, **kwargs)
            except httpx.RequestError as e:
                last_exception = TransientNetworkError(f"Network error: {e}")
                delay = self._calculate_retry_delay(attempt)
            else:
                if response.is_success:
                    return response

                error = self._error_for_status(response)
                if not isinstance(error, TransientNetworkError):
                    raise error

                last_exception = error
                if isinstance(error, RateLimitError) and error.retry_after is not None:
                    delay = error.retry_after
                else:
                    delay = self._calculate_retry_delay(attempt)

            if attempt < self.max_retries:
                logger.debug(f"{method} {url}: {last_exception}; retrying in {delay:.1f}s")
                self._sleep(delay)

        assert last_exception is not None
        raise last_exception

    def _json(self, response: httpx.Response) -> dict[str, Any]:
        try:
            data = response.json()
        except ValueError as e:
            raise RobloxApiError("Invalid JSON response from server") from e
        if not isinstance(data, dict):
            raise RobloxApiError(f"Unexpected response: {data!r}")
        return data

    # =========================
    # Asset Operations
    # =========================

    def create_asset(
        self,
        *,
        asset_type: str,
        display_name: str,
        contents: bytes,
        filename: str,
        content_type: str,
        creator: dict[str, str],
        description: str = ASSET_DESCRIPTION,
    ) -> str:
        """Start an asset upload.

        Args:
            asset_type: Open Cloud asset type ("Decal", "Audio", "Model")
            display_name: Name shown for the asset
            contents: File bytes
            filename: File name sent with the upload
            content_type: MIME type of the file
            creator: ``{"userId": ...}`` or ``{"groupId": ...}``
            description: Asset description

        Returns:
            Operation ID to poll with :meth:`get_operation`
        """
        request = {
            "assetType": asset_type,
            "displayName": display_name,
            "description": description,
            "creationContext": {"creator": creator, "expectedPrice": 0},
        }

        self.create_limiter.acquire()
        response = self._request(
            "POST",
            f"{self.api_url}/assets/v1/assets",
            data={"request": json.dumps(request)},
            files={"fileContent": (filename, contents, content_type)},
        )
        data = self._json(response)

        path = data.get("path") or data.get("operationId")
        if not path:
            raise RobloxApiError(f"Create asset response has no operation: {data!r}")
        return str(path).removeprefix("operations/")

    def get_operation(self, operation_id: str) -> dict[str, Any]:
        """Fetch the state of an upload operation."""
        self.poll_limiter.acquire()
        response = self._request("GET", f"{self.api_url}/assets/v1/operations/{operation_id}")
        return self._json(response)

    def wait_for_asset(self, operation_id: str, *, max_polls: int = 8, max_delay: float = 30.0) -> str:
        """Poll an upload operation until it yields an asset ID.

        Waits 2, 4, 8, ... seconds (capped at ``max_delay``) between polls.

        Returns:
            The assigned asset ID

        Raises:
            TransientNetworkError: If the operation is still running after ``max_polls``
            RobloxApiError: If the operation finished with an error
        """
        for poll in range(1, max_polls + 1):
            self._sleep(min(2.0**poll, max_delay))

            operation = self.get_operation(operation_id)
            if not operation.get("done"):
                logger.debug(f"Operation {operation_id}: not done yet")
                continue

            if "error" in operation:
                raise RobloxApiError(f"Upload failed: {operation['error']}")

            asset_id = (operation.get("response") or {}).get("assetId")
            if not asset_id:
                raise RobloxApiError(f"Finished operation has no asset ID: {operation!r}")
            return str(asset_id)

        raise TransientNetworkError(f"Operation {operation_id} did not finish after {max_polls} polls")

    def get_texture_id(self, asset_id: str, *, attempts: int = 3) -> str:
        """Map a decal asset ID to the ID of its image.

        Raises:
            RobloxApiError: If no attempt produced an image ID
        """
        last_error: Exception | None = None

        for _ in range(attempts):
            try:
                response = self._request("GET", ASSET_DELIVERY_URL, params={"id": asset_id})
            except (TransientNetworkError, RobloxApiError) as e:
                logger.error(f"Error mapping decal ID {asset_id} to image ID: {e}")
                last_error = e
                continue

            match = TEXTURE_ID_PATTERN.search(response.text)
            if match:
                return match.group(1)

            logger.debug(f"Asset delivery response did not contain an image ID: {response.text[:200]}")
            last_error = RobloxApiError("Failed to parse asset delivery response")

        raise RobloxApiError(f"Could not map decal {asset_id} to an image ID: {last_error}")


def _error_detail(response: httpx.Response) -> str:
    """Extract a message from an error response body, if any."""
    try:
        data = response.json()
    except ValueError:
        return ""
    if isinstance(data, dict):
        msg = data.get("message") or data.get("error") or data.get("detail")
        if msg:
            return f": {msg}"
    return ""
