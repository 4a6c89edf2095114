"""Fetch request usage from Cursor's dashboard usage endpoint.

The dashboard at cursor.com/settings calls the undocumented endpoint:

    GET https://www.cursor.com/api/usage?user=<account id>

authenticated by the ``WorkosCursorSessionToken`` cookie of a logged-in
browser session. The endpoint is not documented and may change without
notice.
"""

from __future__ import annotations

import http.client
import json
import logging
import urllib.error
import urllib.request
from urllib.parse import urlencode

from cursor_usage import constants
from cursor_usage.config import Settings
from cursor_usage.models import Credential, UsagePayload
from cursor_usage.store import CredentialStore

logger = logging.getLogger("cursor-usage")


class UsageError(Exception):
    """Base class for failures talking to the usage endpoint."""


class AuthError(UsageError):
    """The endpoint rejected the session (401/403)."""

    def __init__(self, status: int, reason: str = "") -> None:
        self.status = status
        self.reason = reason
        super().__init__(f"Authentication failed: {status} {reason}".rstrip())


class ApiError(UsageError):
    """Any other unsuccessful response."""

    def __init__(self, status: int, reason: str = "") -> None:
        self.status = status
        self.reason = reason
        super().__init__(f"API error: {status} {reason}".rstrip())


class NetworkError(UsageError):
    """The request never got a response."""


def _cookie_keys(headers: dict[str, str]) -> list[str]:
    return [name for name in headers if name.lower() == "cookie"]


def build_headers(credential: Credential) -> dict[str, str]:
    """Default browser headers overlaid with the credential's own headers.

    The result carries exactly one cookie header, and it always includes
    the session cookie.
    """
    headers = dict(constants.DEFAULT_HEADERS)
    for name, value in (credential.custom_headers or {}).items():
        if name.lower() not in constants.TRANSPORT_HEADERS:
            headers[name] = value

    session_cookie = f"{constants.SESSION_COOKIE_MARKER}{credential.session_token}"
    cookie_keys = _cookie_keys(headers)
    if not cookie_keys:
        headers["Cookie"] = f"{constants.LOCALE_COOKIE}; {session_cookie}"
        return headers

    # Prefer the first cookie header that already carries the session
    keep = next(
        (k for k in cookie_keys if constants.SESSION_COOKIE_NAME in headers[k]),
        cookie_keys[0],
    )
    cookie = headers[keep]
    for name in cookie_keys:
        del headers[name]
    if constants.SESSION_COOKIE_NAME not in cookie:
        cookie = f"{cookie}; {session_cookie}"
    headers["Cookie"] = cookie
    return headers


def usage_url(settings: Settings, account_id: str) -> str:
    return f"{settings.usage_url}?{urlencode({'user': account_id})}"


class UsageClient:
    """Issues the usage request and records successful responses."""

    def __init__(self, settings: Settings, store: CredentialStore) -> None:
        self.settings = settings
        self.store = store

    def fetch_usage(self, credential: Credential) -> UsagePayload:
        """Fetch usage for *credential*.

        On success the raw response is cached and the credential saved with
        a fresh timestamp. Raises :class:`AuthError`, :class:`ApiError` or
        :class:`NetworkError` otherwise.
        """
        req = urllib.request.Request(
            usage_url(self.settings, credential.account_id),
            headers=build_headers(credential),
        )
        logger.info(f"Fetching usage for {credential.account_id}")

        try:
            with urllib.request.urlopen(req, timeout=self.settings.timeout) as resp:
                status = resp.status
                body = resp.read()
        except urllib.error.HTTPError as e:
            if e.code in (401, 403):
                logger.warning(f"Authentication error: {e.code} {e.reason}")
                raise AuthError(e.code, str(e.reason)) from e
            logger.warning(f"API error: {e.code} {e.reason}")
            raise ApiError(e.code, str(e.reason)) from e
        except urllib.error.URLError as e:
            logger.warning(f"Network error: {e.reason}")
            raise NetworkError(str(e.reason)) from e
        except (OSError, http.client.HTTPException) as e:
            logger.warning(f"Network error: {e}")
            raise NetworkError(str(e)) from e

        try:
            data = json.loads(body)
            payload = UsagePayload.from_api(data)
        except (ValueError, TypeError) as e:
            logger.warning(f"Unreadable usage response: {e}")
            raise ApiError(status, "response is not a usage object") from e

        self.store.save_cache(data)
        self.store.save(credential)
        return payload
