"""Locate the session token and derive the account id from it.

A session token looks like ``user_01JMEKPWF0E497XNXQEPMBJ390::eyJhbGci...``
(or with ``%3A%3A`` in place of ``::`` when copied URL-encoded). The part
before the separator is the account id the usage endpoint expects.
"""

from __future__ import annotations

import enum
import logging
import re
import secrets
import string
from dataclasses import dataclass
from urllib.parse import unquote

from cursor_usage.constants import (
    ACCOUNT_ID_PREFIX,
    GENERATED_ID_LENGTH,
    SESSION_COOKIE_MARKER,
)

logger = logging.getLogger("cursor-usage")

_COOKIE_TOKEN_RE = re.compile(re.escape(SESSION_COOKIE_MARKER) + r"([^;]+)")
_RAW_TOKEN_RE = re.compile(re.escape(SESSION_COOKIE_MARKER) + r"""([^'"\s;]+)""")
_TOKEN_ACCOUNT_RE = re.compile(r"^(user_[a-zA-Z0-9]+)(?:%3A%3A|::)", re.IGNORECASE)
_URL_ACCOUNT_RE = re.compile(r"""user=([^'"\s&]+)""")

_ID_ALPHABET = string.digits + string.ascii_uppercase


class AccountIdSource(enum.Enum):
    TOKEN = "token"
    URL = "url"
    GENERATED = "generated"


@dataclass
class TokenResolution:
    token: str = ""
    token_found: bool = False


def resolve_token(headers: dict[str, str] | None, raw_command: str) -> TokenResolution:
    """Find the session token in the Cookie header, else in the raw command."""
    cookie = (headers or {}).get("Cookie", "")
    match = _COOKIE_TOKEN_RE.search(cookie)
    if match and match.group(1).strip():
        return TokenResolution(unquote(match.group(1).strip()), True)

    match = _RAW_TOKEN_RE.search(raw_command or "")
    if match:
        return TokenResolution(unquote(match.group(1)), True)

    return TokenResolution()


def account_id_from_token(token: str) -> str | None:
    """Return the account id embedded in *token*, or ``None``."""
    match = _TOKEN_ACCOUNT_RE.match(token)
    if match:
        return match.group(1)

    for separator in ("::", "%3A%3A"):
        if separator in token:
            head = token.split(separator, 1)[0]
            if head.startswith(ACCOUNT_ID_PREFIX):
                return head
    return None


def generate_account_id() -> str:
    """Random stand-in id (``user_`` + 13 characters of ``[0-9A-Z]``)."""
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(GENERATED_ID_LENGTH))
    return ACCOUNT_ID_PREFIX + suffix


def derive_account_id(token: str, raw_command: str | None = None) -> tuple[str, AccountIdSource]:
    """Work out the account id for *token*.

    Tries, in order: the token's ``user_...::`` prefix (regex, then a plain
    split on ``::`` and on ``%3A%3A``), a ``user=user_...`` query parameter
    in *raw_command* when one is given, and finally a generated id.
    """
    account_id = account_id_from_token(token)
    if account_id:
        return account_id, AccountIdSource.TOKEN

    if raw_command:
        match = _URL_ACCOUNT_RE.search(raw_command)
        if match and match.group(1).startswith(ACCOUNT_ID_PREFIX):
            return match.group(1), AccountIdSource.URL

    account_id = generate_account_id()
    logger.warning(f"No account id found in session token, generated {account_id}")
    return account_id, AccountIdSource.GENERATED


def resolve_account_id(token: str, raw_command: str | None = None) -> str:
    return derive_account_id(token, raw_command)[0]
