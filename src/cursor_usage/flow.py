"""Interactive run: load credentials, fetch usage, re-authenticate when needed.

The run is a small state machine driven by a loop::

    NO_CREDENTIALS -> AUTHENTICATING -> FETCHING -> SUCCESS
                                           |    \\-> OTHER_ERROR
                                           \\-> AUTHENTICATING (once) -> AUTH_REJECTED
"""

from __future__ import annotations

import enum
import logging

import click

from cursor_usage import constants
from cursor_usage.api import ApiError, AuthError, NetworkError, UsageClient
from cursor_usage.auth.curl import extract_headers, normalize_command
from cursor_usage.auth.token import AccountIdSource, derive_account_id, resolve_token
from cursor_usage.config import Settings
from cursor_usage.display import display_summary
from cursor_usage.models import Credential, UsagePayload
from cursor_usage.store import CredentialStore

logger = logging.getLogger("cursor-usage")

AUTH_MENU = (
    "How would you like to provide your credentials?\n"
    "1. Import from curl command (recommended)\n"
    "2. Enter token manually\n"
    "Choice (1/2)"
)
TOKEN_PROMPT = f"Paste your {constants.SESSION_COOKIE_NAME} value"


class FlowState(enum.Enum):
    NO_CREDENTIALS = "no_credentials"
    AUTHENTICATING = "authenticating"
    FETCHING = "fetching"
    SUCCESS = "success"
    AUTH_REJECTED = "auth_rejected"
    OTHER_ERROR = "other_error"


_TERMINAL = frozenset({FlowState.SUCCESS, FlowState.AUTH_REJECTED, FlowState.OTHER_ERROR})


def _ask(text: str, **kwargs) -> str:
    """Prompt that accepts an empty answer."""
    return click.prompt(text, default="", show_default=False, **kwargs)


def read_pasted_lines() -> str:
    """Read lines until an empty one and return them joined by newlines."""
    lines: list[str] = []
    while True:
        line = _ask("", prompt_suffix="")
        if not line.strip():
            break
        lines.append(line)
    return "\n".join(lines)


class InteractiveFlow:
    def __init__(
        self,
        settings: Settings,
        store: CredentialStore | None = None,
        client: UsageClient | None = None,
    ) -> None:
        self.settings = settings
        self.store = store or CredentialStore(settings)
        self.client = client or UsageClient(settings, self.store)
        self.state = FlowState.NO_CREDENTIALS
        self.auth_rejections = 0
        self.error: Exception | None = None
        self.payload: UsagePayload | None = None

    def run(self) -> int:
        """Run to a terminal state. Returns the process exit code."""
        credential = self.store.load()
        self.state = FlowState.FETCHING if credential.is_complete else FlowState.NO_CREDENTIALS

        while self.state not in _TERMINAL:
            logger.debug(f"Flow state: {self.state.value}")
            if self.state is FlowState.NO_CREDENTIALS:
                click.echo("\n🌟 Welcome to Cursor Usage Tracker! 🌟")
                click.echo("To get started, you'll need to provide your Cursor credentials.\n")
                self.state = FlowState.AUTHENTICATING

            elif self.state is FlowState.AUTHENTICATING:
                new_credential = self.authenticate()
                if new_credential is None:
                    self.state = FlowState.AUTH_REJECTED
                else:
                    credential = new_credential
                    self.store.save(credential)
                    self.state = FlowState.FETCHING

            elif self.state is FlowState.FETCHING:
                self.state = self._fetch(credential)

        return self._finish()

    def _fetch(self, credential: Credential) -> FlowState:
        click.echo("🔄 Fetching your usage data from Cursor...")
        try:
            self.payload = self.client.fetch_usage(credential)
        except AuthError as e:
            self.error = e
            self.auth_rejections += 1
            self.store.delete()
            if self.auth_rejections > constants.MAX_AUTH_RETRIES:
                return FlowState.AUTH_REJECTED
            click.echo(f"⚠️ {e}", err=True)
            click.echo("\n⚠️ Your Cursor session has expired. You need to provide updated credentials.\n")
            return FlowState.AUTHENTICATING
        except (ApiError, NetworkError) as e:
            self.error = e
            return FlowState.OTHER_ERROR
        return FlowState.SUCCESS

    def _finish(self) -> int:
        if self.state is FlowState.SUCCESS and self.payload is not None:
            display_summary(self.payload, self.settings.model)
            return 0

        if self.state is FlowState.AUTH_REJECTED:
            if self.error is not None:
                click.echo(f"⚠️ {self.error}", err=True)
            click.echo(
                "❌ Could not display your usage data. Please try again with correct credentials.",
                err=True,
            )
        else:
            click.echo(f"⚠️ {self.error}", err=True)
            click.echo(
                "❌ Could not fetch usage data. Please check your internet connection and credentials.",
                err=True,
            )
        logger.error(f"Run ended in state {self.state.value}: {self.error}")
        return 1

    # --- Authentication ---

    def authenticate(self) -> Credential | None:
        """Ask for credentials until one method succeeds or attempts run out."""
        for _attempt in range(self.settings.max_auth_attempts):
            choice = _ask(AUTH_MENU).strip()
            if choice == "1":
                credential = self.credential_from_curl()
            elif choice == "2":
                credential = self.credential_from_token()
            else:
                click.echo("Invalid option. Please select 1 or 2.", err=True)
                continue
            if credential is not None:
                return credential
        logger.warning(f"Gave up after {self.settings.max_auth_attempts} authentication attempts")
        return None

    def credential_from_curl(self) -> Credential | None:
        click.echo("\n📋 Import credentials from curl command")
        click.echo(click.style("Paste the full curl command (press Enter twice when done):", fg="yellow", bold=True))
        click.echo("Tip: Use Ctrl+V on Windows or Cmd+V on Mac to paste")
        command = normalize_command(read_pasted_lines())

        headers = extract_headers(command)
        resolution = resolve_token(headers, command)
        if not resolution.token_found:
            click.echo("❌ Could not extract session token from curl command", err=True)
            return None

        account_id, source = derive_account_id(resolution.token, command)
        self._report_account_id(account_id, source)
        if headers:
            click.echo("✅ Successfully extracted browser headers for compatibility")
        click.echo("✅ Successfully extracted session token")
        return Credential(account_id=account_id, session_token=resolution.token, custom_headers=headers)

    def credential_from_token(self) -> Credential:
        click.echo("\n🔑 Manual credential entry")
        click.echo("\n🔐 We need your Cursor session token.")
        click.echo(
            f"You can find this in the Cookie header of the API request as {constants.SESSION_COOKIE_NAME}."
        )
        click.echo("It's a long string that contains your user ID followed by encoded characters.\n")

        token = _ask(TOKEN_PROMPT).strip()
        while len(token) < constants.MIN_TOKEN_LENGTH:
            click.echo("⚠️ That doesn't look like a valid session token. It should be a long string.")
            token = _ask(TOKEN_PROMPT).strip()

        account_id, source = derive_account_id(token)
        self._report_account_id(account_id, source)
        return Credential(account_id=account_id, session_token=token)

    def _report_account_id(self, account_id: str, source: AccountIdSource) -> None:
        if source is AccountIdSource.GENERATED:
            click.echo(f"⚠️ Could not extract User ID, using generated ID: {account_id}")
            click.echo("Note: This is unusual and may affect API functionality.")
        else:
            click.echo(f"✅ Successfully extracted User ID from {source.value}: {account_id}")
