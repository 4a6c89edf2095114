"""Data models for cursor-usage."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


def parse_dt(s: Any) -> datetime | None:
    """Parse an ISO-8601 timestamp (``Z`` suffix allowed); anything else is None."""
    if not s or not isinstance(s, str):
        return None
    try:
        return datetime.fromisoformat(s.replace("Z", "+00:00"))
    except ValueError:
        return None


@dataclass
class Credential:
    account_id: str = ""
    session_token: str = ""
    custom_headers: dict[str, str] | None = None
    last_request: datetime | None = None

    @property
    def is_complete(self) -> bool:
        return bool(self.account_id and self.session_token)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "account_id": self.account_id,
            "session_token": self.session_token,
        }
        if self.custom_headers is not None:
            data["custom_headers"] = self.custom_headers
        if self.last_request is not None:
            data["last_request"] = self.last_request.isoformat()
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Credential:
        """Build a credential from its stored form.

        Raises ``ValueError`` when *data* does not have the stored shape.
        """
        if not isinstance(data, dict):
            raise ValueError(f"expected an object, got {type(data).__name__}")
        headers = data.get("custom_headers")
        if headers is not None and not isinstance(headers, dict):
            raise ValueError("custom_headers must be an object")
        return cls(
            account_id=str(data.get("account_id") or ""),
            session_token=str(data.get("session_token") or ""),
            custom_headers={str(k): str(v) for k, v in headers.items()} if headers else None,
            last_request=parse_dt(data.get("last_request")),
        )


@dataclass
class CachedUsage:
    data: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass
class ModelUsage:
    num_requests: int = 0
    num_requests_total: int = 0
    num_tokens: int = 0
    max_request_usage: int | None = None  # None = no cap reported
    max_token_usage: int | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> ModelUsage:
        return cls(
            num_requests=int(data.get("numRequests") or 0),
            num_requests_total=int(data.get("numRequestsTotal") or 0),
            num_tokens=int(data.get("numTokens") or 0),
            max_request_usage=_opt_int(data.get("maxRequestUsage")),
            max_token_usage=_opt_int(data.get("maxTokenUsage")),
        )


@dataclass
class UsagePayload:
    """Typed view of a usage response.

    ``models`` holds one entry per model key found in the response; keys
    whose value is not an object (``startOfMonth``) are not models.
    """

    models: dict[str, ModelUsage] = field(default_factory=dict)
    start_of_month: datetime | None = None
    raw: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> UsagePayload:
        if not isinstance(data, dict):
            raise ValueError(f"expected an object, got {type(data).__name__}")
        models = {
            key: ModelUsage.from_api(value)
            for key, value in data.items()
            if isinstance(value, dict)
        }
        return cls(models=models, start_of_month=parse_dt(data.get("startOfMonth")), raw=data)

    def for_model(self, model: str) -> ModelUsage | None:
        return self.models.get(model)


def _opt_int(value: Any) -> int | None:
    if value is None:
        return None
    return int(value)
