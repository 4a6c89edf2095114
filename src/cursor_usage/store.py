"""JSON persistence for credentials and the last usage response."""

from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any

import click

from cursor_usage.config import Settings
from cursor_usage.models import CachedUsage, Credential, UsagePayload, parse_dt

logger = logging.getLogger("cursor-usage")


class CredentialStore:
    """Reads and writes ``credentials.json`` and ``last-response.json``.

    A file that cannot be parsed is deleted and treated as absent, so the
    next run starts from a clean slate.
    """

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    @property
    def credentials_file(self) -> Path:
        return self.settings.credentials_file

    @property
    def cache_file(self) -> Path:
        return self.settings.cache_file

    def _ensure_dir(self) -> None:
        self.settings.data_dir.mkdir(parents=True, exist_ok=True)

    def _discard(self, path: Path, what: str) -> None:
        logger.warning(f"Corrupted {what} file {path}, deleting it")
        click.echo(f"Error reading {what} file, deleting corrupted file.", err=True)
        try:
            path.unlink(missing_ok=True)
        except OSError:
            logger.exception(f"Failed to delete corrupted {what} file")

    # --- Credentials ---

    def load(self) -> Credential:
        """Return the stored credential, or an empty one."""
        path = self.credentials_file
        if not path.exists():
            return Credential()
        text = path.read_text()
        try:
            return Credential.from_dict(json.loads(text))
        except (ValueError, TypeError, AttributeError):
            self._discard(path, "credentials")
            return Credential()

    def save(self, credential: Credential) -> None:
        """Write *credential*, stamping ``last_request`` with the current time."""
        self._ensure_dir()
        credential.last_request = datetime.now()
        self.credentials_file.write_text(json.dumps(credential.to_dict(), indent=2))

    def delete(self) -> bool:
        """Remove stored credentials. Returns True if a file was removed."""
        path = self.credentials_file
        if not path.exists():
            return False
        path.unlink()
        logger.info("Deleted stored credentials")
        return True

    # --- Response cache ---

    def load_cache(self) -> CachedUsage | None:
        path = self.cache_file
        if not path.exists():
            return None
        text = path.read_text()
        try:
            cached = json.loads(text)
            if not isinstance(cached, dict) or not isinstance(cached.get("data"), dict):
                raise ValueError("cache file has no data object")
            UsagePayload.from_api(cached["data"])
        except (ValueError, TypeError):
            self._discard(path, "cache")
            return None
        return CachedUsage(
            data=cached["data"],
            timestamp=parse_dt(cached.get("timestamp")) or datetime.fromtimestamp(path.stat().st_mtime),
        )

    def save_cache(self, data: dict[str, Any]) -> None:
        self._ensure_dir()
        cached = {"data": data, "timestamp": datetime.now().isoformat()}
        self.cache_file.write_text(json.dumps(cached, indent=2))
