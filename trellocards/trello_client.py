"""Trello API client with error normalization and credential redaction."""

from __future__ import annotations

import json
import logging
import re
from typing import Any
from urllib.parse import urlencode

import requests

from trellocards.exceptions import (
    ResponseFormatError,
    TransportError,
    TrelloAuthenticationError,
    TrelloNotFoundError,
)
from trellocards.models import Credentials

logger = logging.getLogger(__name__)

# Matches key=... and token=... query parameters in a URL or message
_CREDENTIAL_PARAM_RE = re.compile(r"\b(key|token)=[^&\s'\"]+")

MAX_ERROR_TEXT = 200


def redact_credentials(text: str, credentials: Credentials | None = None) -> str:
    """Replace API key and token values in ``text`` with ``***``.

    Handles both ``key=...``/``token=...`` query parameters and literal
    occurrences of the configured secrets (e.g. inside exception messages
    produced by the HTTP library).

    Example:
        >>> redact_credentials("https://api.trello.com/1/boards/x?key=abc&token=def")
        'https://api.trello.com/1/boards/x?key=***&token=***'
    """
    redacted = _CREDENTIAL_PARAM_RE.sub(r"\1=***", text)
    if credentials is not None:
        for secret in (credentials.api_key, credentials.token):
            if secret:
                redacted = redacted.replace(secret, "***")
    return redacted


class TrelloClient:
    """Issue authenticated requests against the Trello REST API.

    Each call performs exactly one network round-trip. There are no retries
    and no rate limiting: every failure propagates to the caller as one of
    the exceptions below, with credentials stripped from the message.

    Raises (from ``request``):
        TrelloAuthenticationError: 401/403 responses
        TrelloNotFoundError: 404 responses
        TransportError: Any other non-2xx response, or a connection failure
        ResponseFormatError: A 2xx response whose body is not valid JSON
    """

    BASE_URL = "https://api.trello.com/1"

    def __init__(
        self,
        credentials: Credentials,
        timeout: float = 30.0,
        verify_ssl: bool = True,
        base_url: str | None = None,
    ):
        self.credentials = credentials
        self.timeout = timeout
        self.verify_ssl = verify_ssl
        self.base_url = (base_url or self.BASE_URL).rstrip("/")

    def build_url(self, endpoint: str, params: dict[str, Any] | None = None) -> str:
        """Build the full request URL with ``key`` and ``token`` query parameters"""
        query: dict[str, Any] = {"key": self.credentials.api_key, "token": self.credentials.token}
        if params:
            query.update(params)
        return f"{self.base_url}/{endpoint.lstrip('/')}?{urlencode(query)}"

    def _redact(self, text: str) -> str:
        return redact_credentials(text, self.credentials)

    def request(
        self,
        method: str,
        endpoint: str,
        params: dict[str, Any] | None = None,
        body: Any = None,
    ) -> Any:
        """Make one authenticated request and return the decoded JSON body.

        Args:
            method: HTTP method ("GET", "PUT", ...)
            endpoint: Path below the API root, e.g. ``boards/<id>/lists``
            params: Extra query parameters
            body: Optional JSON-serializable request body

        Returns:
            Parsed JSON response (dict or list)
        """
        url = self.build_url(endpoint, params)
        safe_url = self._redact(url)
        logger.debug(f"Making {method} request to: {safe_url}")

        try:
            response = requests.request(
                method,
                url,
                json=body,
                timeout=self.timeout,
                verify=self.verify_ssl,
            )
        except requests.RequestException as e:
            message = self._redact(f"Request failed: {method} {safe_url}: {e}")
            logger.error(message)
            raise TransportError(message, status_code=None, response_text=None) from e

        try:
            response.raise_for_status()
        except requests.HTTPError as e:
            raise self._http_error(response, safe_url) from e

        text = ""
        try:
            text = response.content.decode("utf-8")
            result = json.loads(text)
        except (UnicodeDecodeError, ValueError) as e:
            safe_text = self._redact(text)
            logger.error(
                f"Failed to parse JSON response from {safe_url}: {safe_text[:MAX_ERROR_TEXT]}"
            )
            raise ResponseFormatError(f"Invalid JSON response: {e}", body=safe_text) from e

        logger.debug(
            "Request successful, received %s",
            f"{len(result)} items" if isinstance(result, list) else "data",
        )
        return result

    def _http_error(self, response: requests.Response, safe_url: str) -> TransportError:
        """Normalize a non-2xx response into a TransportError subclass"""
        status_code = response.status_code
        response_text = self._redact(response.content.decode("utf-8", errors="replace"))

        message = f"HTTP {status_code}"
        detail = None
        try:
            error_data = json.loads(response_text)
        except ValueError:
            # Not JSON: fall back to (truncated) raw text
            if response_text.strip():
                detail = response_text.strip()[:MAX_ERROR_TEXT]
        else:
            if isinstance(error_data, dict):
                detail = error_data.get("message") or error_data.get("error")
        if detail:
            message += f": {detail}"

        logger.error(f"Request to {safe_url} failed with status {status_code}: {response_text}")

        if status_code in (401, 403):
            error_class: type[TransportError] = TrelloAuthenticationError
        elif status_code == 404:
            error_class = TrelloNotFoundError
        else:
            error_class = TransportError
        return error_class(message, status_code=status_code, response_text=response_text)
