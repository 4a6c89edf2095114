"""Tests for auth/token.py — session token and account id resolution."""

from __future__ import annotations

import re

import pytest

from cursor_usage.auth.token import (
    AccountIdSource,
    account_id_from_token,
    derive_account_id,
    generate_account_id,
    resolve_account_id,
    resolve_token,
)

from conftest import CURL_COMMAND, ENCODED_TOKEN, TOKEN

GENERATED_RE = re.compile(r"^user_[A-Z0-9]{13}$")


class TestResolveToken:
    def test_from_cookie_header_is_url_decoded(self):
        headers = {"Cookie": f"NEXT_LOCALE=en; WorkosCursorSessionToken={ENCODED_TOKEN}; other=1"}
        result = resolve_token(headers, "")
        assert result.token_found is True
        assert result.token == TOKEN

    def test_from_raw_command(self):
        result = resolve_token(None, f"curl x WorkosCursorSessionToken={ENCODED_TOKEN} --compressed")
        assert result.token_found is True
        assert result.token == TOKEN

    def test_raw_command_stops_at_quote(self):
        result = resolve_token({}, "curl x -b 'WorkosCursorSessionToken=abc'")
        assert result.token == "abc"

    def test_cookie_without_marker_falls_back_to_raw(self):
        result = resolve_token({"Cookie": "a=1"}, "WorkosCursorSessionToken=raw;x")
        assert result.token == "raw"

    def test_not_found(self):
        result = resolve_token({"accept": "*/*"}, "curl https://x")
        assert result.token_found is False
        assert result.token == ""


class TestAccountId:
    @pytest.mark.parametrize("token", [TOKEN, ENCODED_TOKEN])
    def test_from_token(self, token):
        assert resolve_account_id(token) == "user_TESTUSER123456789"

    def test_encoded_separator_case_insensitive(self):
        assert account_id_from_token("user_ABC123%3a%3apayload") == "user_ABC123"

    def test_split_fallback_allows_non_alnum(self):
        assert account_id_from_token("user_abc-def::payload") == "user_abc-def"
        assert account_id_from_token("user_abc-def%3A%3Apayload") == "user_abc-def"

    def test_split_requires_prefix(self):
        assert account_id_from_token("someone::payload") is None

    def test_token_wins_over_url(self):
        account_id, source = derive_account_id(TOKEN, "curl 'https://x?user=user_OTHER'")
        assert account_id == "user_TESTUSER123456789"
        assert source is AccountIdSource.TOKEN

    def test_from_url_parameter(self):
        account_id, source = derive_account_id("opaque-token-value", CURL_COMMAND)
        assert account_id == "user_TESTUSER123456789"
        assert source is AccountIdSource.URL

    def test_url_parameter_requires_prefix(self):
        account_id, source = derive_account_id("opaque", "curl 'https://x?user=12345'")
        assert source is AccountIdSource.GENERATED
        assert GENERATED_RE.match(account_id)

    @pytest.mark.parametrize("token", [
        "someBadTokenWithoutUserID123",
        "user123-not-valid",
        "user_01JMEKPWF0E497XNXQEPMBJ390eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9",
        "",
    ])
    def test_generated_when_missing(self, token):
        account_id, source = derive_account_id(token)
        assert source is AccountIdSource.GENERATED
        assert GENERATED_RE.match(account_id)

    def test_generated_ids_differ(self):
        assert generate_account_id() != generate_account_id()
