"""Default constants for the usage endpoint, credentials and display."""

from __future__ import annotations

# Usage endpoint (account id is passed as ?user=...)
USAGE_URL = "https://www.cursor.com/api/usage"
REQUEST_TIMEOUT_SECONDS = 15

# Session cookie set by cursor.com after login
SESSION_COOKIE_NAME = "WorkosCursorSessionToken"
SESSION_COOKIE_MARKER = SESSION_COOKIE_NAME + "="
LOCALE_COOKIE = "NEXT_LOCALE=en"

ACCOUNT_ID_PREFIX = "user_"
GENERATED_ID_LENGTH = 13
MIN_TOKEN_LENGTH = 20

# Sent with every request; headers pasted from the browser override these
DEFAULT_HEADERS: dict[str, str] = {
    "accept": "*/*",
    "accept-language": "en-US,en;q=0.9",
    "referer": "https://www.cursor.com/settings",
    "sec-ch-ua": '"Not;A=Brand";v="99", "Chromium";v="106"',
    "sec-ch-ua-mobile": "?0",
    "sec-ch-ua-platform": '"Windows"',
    "sec-fetch-dest": "empty",
    "sec-fetch-mode": "cors",
    "sec-fetch-site": "same-origin",
    "user-agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/106.0.0.0 Safari/537.36"
    ),
}

# Pasted headers that urllib cannot honour (compressed bodies, fixed lengths)
TRANSPORT_HEADERS = frozenset({"accept-encoding", "content-length", "host", "connection"})

# Model keys returned by the usage endpoint
KNOWN_MODELS = ("gpt-4", "gpt-3.5-turbo", "gpt-4-32k")
DEFAULT_MODEL = "gpt-4"

# Display tiers (usage percentage)
WARNING_THRESHOLD_PCT = 70.0
CRITICAL_THRESHOLD_PCT = 90.0
PROGRESS_BAR_WIDTH = 30

# Interactive authentication
MAX_AUTH_ATTEMPTS = 5   # menu rounds before giving up
MAX_AUTH_RETRIES = 1    # re-authentications after the server rejects credentials

# Files (inside the data directory)
DATA_DIR_ENV = "CURSOR_USAGE_HOME"
DEFAULT_DATA_DIR = "~/.cursor-usage-tracker"
CONFIG_FILE_NAME = "config.toml"
CREDENTIALS_FILE_NAME = "credentials.json"
CACHE_FILE_NAME = "last-response.json"
LOG_FILE_NAME = "cursor-usage.log"
