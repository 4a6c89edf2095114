"""Pull HTTP headers out of a curl command copied from the browser.

Browsers' "Copy as cURL" produces something like::

    curl 'https://www.cursor.com/api/usage?user=user_01J...' \\
      -H 'accept: */*' \\
      -b 'NEXT_LOCALE=en; WorkosCursorSessionToken=user_01J...%3A%3AeyJ...' \\
      --compressed

Only the header and cookie flags are read; the command is never executed.
Extraction is best-effort: whatever can be recognised is returned.
"""

from __future__ import annotations

import logging
import re

from cursor_usage.constants import SESSION_COOKIE_MARKER

logger = logging.getLogger("cursor-usage")

# Backslash continuation at the end of a line
_CONTINUATION_RE = re.compile(r"\\[ \t]*\r?\n")

# Matched quotes first, then a mismatched pair as a last resort.
_QUOTED = r"""(?:'([^']*)'|"([^"]*)"|['"]([^'"]+)['"])"""
_HEADER_RE = re.compile(r"(?:^|(?<=\s))(?:-H|--header)\s+" + _QUOTED)
_COOKIE_RE = re.compile(r"(?:^|(?<=\s))(?:-b|--cookie)\s+" + _QUOTED)

# Characters that end an unquoted cookie value
_COOKIE_END_RE = re.compile(r"""['"\s]""")


def normalize_command(raw: str) -> str:
    """Collapse shell line continuations and newlines into single spaces."""
    text = _CONTINUATION_RE.sub(" ", raw)
    return text.replace("\r", " ").replace("\n", " ").strip()


def _quoted_content(match: re.Match[str]) -> str:
    return next(group for group in match.groups() if group is not None)


def _cookie_from_marker(command: str) -> str | None:
    """Find the cookie string around a bare ``WorkosCursorSessionToken=``."""
    pos = command.find(SESSION_COOKIE_MARKER)
    if pos < 0:
        return None

    start = command.rfind("'", 0, pos)
    if start == -1:
        start = command.rfind('"', 0, pos)
    end = command.find("'", pos)
    if end == -1:
        end = command.find('"', pos)

    if start != -1 and end != -1 and end > start:
        value = command[start + 1:end]
        return value if SESSION_COOKIE_MARKER in value else None
    return _COOKIE_END_RE.split(command[pos:], maxsplit=1)[0]


def extract_headers(raw: str) -> dict[str, str] | None:
    """Return the headers found in *raw*, or ``None`` if there are none.

    A ``Cookie`` entry is always present when the session cookie appears
    anywhere in the command. Header names keep the case they were given in.
    """
    command = normalize_command(raw)
    headers: dict[str, str] = {}

    try:
        for match in _HEADER_RE.finditer(command):
            content = _quoted_content(match)
            name, sep, value = content.partition(":")
            if not sep or not name.strip():
                continue
            headers[name.strip()] = value.strip()

        cookie_match = _COOKIE_RE.search(command)
        if cookie_match and "Cookie" not in headers:
            headers["Cookie"] = _quoted_content(cookie_match)
    except Exception:
        logger.exception("Header extraction from curl command failed")

    if "Cookie" not in headers and SESSION_COOKIE_MARKER in command:
        cookie = _cookie_from_marker(command)
        if cookie:
            headers["Cookie"] = cookie

    logger.debug(f"Extracted {len(headers)} header(s) from curl command")
    return headers or None
