"""
Core HTTP client for the HubSpot CRM API.

Handles authentication, request/response and error handling.
"""

import http.client
import json
import logging
import os
import urllib.error
import urllib.parse
import urllib.request
from typing import Any

# Configuration
DEFAULT_BASE_URL = "https://api.hubapi.com"
DEFAULT_TIMEOUT = 30

logger = logging.getLogger(__name__)


class CLIError(Exception):
    """Base error class for CLI errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for JSON output."""
        result: dict[str, Any] = {"error": self.message}
        if self.details:
            result["details"] = self.details
        return result


class APIError(CLIError):
    """Non-2xx response. Carries the status code and the raw response body."""

    def __init__(self, status: int, body: str):
        super().__init__(f"API error (status {status}): {body}")
        self.status = status
        self.body = body

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for JSON output."""
        result = super().to_dict()
        result["status"] = self.status
        return result


class TransportError(CLIError):
    """The request could not be sent or the response could not be read."""


class EncodingError(CLIError):
    """The request body could not be serialized to JSON."""


class DecodingError(CLIError):
    """A 2xx response body could not be parsed into the expected shape."""


class ValidationError(CLIError):
    """Validation error for local input/data issues (not API errors)."""


class APIClient:
    """
    Low-level HTTP client for the HubSpot CRM API.

    Handles:
    - Bearer token authentication
    - HTTP methods (GET, POST, PATCH, DELETE)
    - Error handling and response parsing
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        """
        Initialize the API client.

        Args:
            api_key: HubSpot private app token (or HUBSPOT_API_KEY env var)
            base_url: API base URL (or HUBSPOT_BASE_URL env var)
            timeout: Request timeout in seconds

        """
        self.api_key = api_key or os.environ.get("HUBSPOT_API_KEY")
        env_base_url = os.environ.get("HUBSPOT_BASE_URL") or DEFAULT_BASE_URL
        self.base_url = (base_url or env_base_url).rstrip("/")
        self.timeout = timeout

    def _ensure_api_key(self) -> str:
        """Ensure API key is configured."""
        if not self.api_key:
            raise ValidationError("API key is required. Set HUBSPOT_API_KEY env var or use --api-key flag")
        return self.api_key

    def _build_url(self, path: str, params: dict[str, Any] | None = None) -> str:
        """Build full URL from path and optional query parameters."""
        url = f"{self.base_url}{path}"
        if params:
            filtered_params = {k: v for k, v in params.items() if v is not None}
            if filtered_params:
                separator = "&" if "?" in path else "?"
                url = f"{url}{separator}{urllib.parse.urlencode(filtered_params)}"
        return url

    @staticmethod
    def _encode_body(data: Any) -> bytes:
        try:
            return json.dumps(data, allow_nan=False).encode("utf-8")
        except (TypeError, ValueError) as e:
            raise EncodingError(f"Failed to marshal request body: {e}") from e

    def _make_request(
        self,
        method: str,
        path: str,
        data: Any = None,
        params: dict[str, Any] | None = None,
    ) -> bytes:
        """
        Make an HTTP request to the API.

        Args:
            method: HTTP method (GET, POST, PATCH, DELETE)
            path: API path (e.g., /crm/v3/objects/contacts)
            data: Request body, serialized to JSON when given
            params: Query parameters, None values are dropped

        Returns:
            Raw response body

        Raises:
            EncodingError: If the body cannot be serialized
            APIError: On a non-2xx status
            TransportError: On connection failure or timeout

        """
        api_key = self._ensure_api_key()

        url = self._build_url(path, params)
        headers = {
            "Authorization": f"Bearer {api_key}",
            "Accept": "application/json",
        }

        body = None
        if data is not None:
            body = self._encode_body(data)
            headers["Content-Type"] = "application/json"

        try:
            req = urllib.request.Request(url, data=body, headers=headers, method=method)
        except ValueError as e:
            raise TransportError(f"Failed to create request: {e}") from e

        logger.debug("%s %s", method, url)
        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as response:
                raw = response.read()
                logger.debug("%s %s -> %s (%d bytes)", method, url, response.status, len(raw))
                return raw

        except urllib.error.HTTPError as e:
            try:
                error_body = e.read().decode("utf-8", errors="replace")
            except OSError as read_error:
                raise TransportError(f"Failed to read response: {read_error}") from read_error
            finally:
                e.close()
            logger.debug("%s %s -> %s", method, url, e.code)
            raise APIError(e.code, error_body) from e

        except urllib.error.URLError as e:
            raise TransportError(f"Failed to execute request: {e.reason}") from e

        except TimeoutError as e:
            raise TransportError(f"Request timed out after {self.timeout} seconds") from e

        except OSError as e:
            raise TransportError(f"Failed to execute request: {e}") from e

        except http.client.HTTPException as e:
            raise TransportError(f"Failed to read response: {e}") from e

    @staticmethod
    def _parse_json(raw: bytes) -> dict[str, Any]:
        """Decode a JSON object from a response body."""
        try:
            result = json.loads(raw)
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise DecodingError(f"Failed to unmarshal response: {e}") from e
        if not isinstance(result, dict):
            raise DecodingError(f"Failed to unmarshal response: expected object, got {type(result).__name__}")
        return result

    # =========================================================================
    # HTTP Methods
    # =========================================================================

    def get(self, path: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        """Make a GET request."""
        return self._parse_json(self._make_request("GET", path, params=params))

    def post(self, path: str, data: Any = None) -> dict[str, Any]:
        """Make a POST request."""
        return self._parse_json(self._make_request("POST", path, data))

    def patch(self, path: str, data: Any = None) -> dict[str, Any]:
        """Make a PATCH request."""
        return self._parse_json(self._make_request("PATCH", path, data))

    def delete(self, path: str) -> None:
        """Make a DELETE request. Any response body is discarded."""
        self._make_request("DELETE", path)
