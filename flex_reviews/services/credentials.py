from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from pathlib import Path
from typing import Any, Protocol

import httpx

from flex_reviews.core.config import get_settings
from flex_reviews.core.errors import AuthenticationError
from flex_reviews.core.models import AccessToken

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_FILE = Path.home() / ".cache" / "flex-reviews" / "hostaway_access_token.json"


class TokenStore(Protocol):
    def get(self) -> AccessToken | None: ...

    def set(self, token: AccessToken) -> None: ...

    def clear(self) -> None: ...


class InMemoryTokenStore:
    """Process-lifetime token cache."""

    def __init__(self) -> None:
        self._token: AccessToken | None = None

    def get(self) -> AccessToken | None:
        return self._token

    def set(self, token: AccessToken) -> None:
        self._token = token

    def clear(self) -> None:
        self._token = None


class FileTokenStore:
    """Per-client persistent token cache backed by a JSON file."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def get(self) -> AccessToken | None:
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return None
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("ignoring unreadable token cache path=%s error=%s", self.path, exc)
            return None

        try:
            return AccessToken(
                value=str(payload["value"]),
                issued_at=_as_utc(datetime.fromisoformat(payload["issued_at"])),
                expires_at=_as_utc(datetime.fromisoformat(payload["expires_at"])),
            )
        except (KeyError, TypeError, ValueError):
            logger.warning("ignoring malformed token cache path=%s", self.path)
            return None

    def set(self, token: AccessToken) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = {
            "value": token.value,
            "issued_at": token.issued_at.isoformat(),
            "expires_at": token.expires_at.isoformat(),
        }
        self.path.write_text(json.dumps(payload), encoding="utf-8")

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)


def _as_utc(value: datetime) -> datetime:
    # Hand-edited or older cache files may carry naive timestamps.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class CredentialManager:
    def __init__(
        self,
        *,
        base_url: str,
        client_id: str | None,
        client_secret: str | None,
        store: TokenStore,
        scope: str = "general",
        buffer_seconds: float = 60.0,
        timeout_seconds: float = 10.0,
        client: httpx.AsyncClient | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.client_id = client_id
        self.client_secret = client_secret
        self.store = store
        self.scope = scope
        self.buffer = timedelta(seconds=max(0.0, buffer_seconds))
        self.timeout_seconds = timeout_seconds
        self._client = client
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._refresh_lock = asyncio.Lock()

    async def get_token(self) -> str:
        cached = self._valid_cached_token()
        if cached is not None:
            return cached.value

        async with self._refresh_lock:
            # Another caller may have refreshed while this one waited.
            cached = self._valid_cached_token()
            if cached is not None:
                return cached.value

            logger.info("requesting new access token from %s", self.base_url)
            token = await self._exchange()
            self.store.set(token)
            return token.value

    def clear(self) -> None:
        self.store.clear()

    def _valid_cached_token(self) -> AccessToken | None:
        token = self.store.get()
        if token is None:
            return None
        if self._clock() >= token.expires_at - self.buffer:
            return None
        return token

    async def _exchange(self) -> AccessToken:
        if not self.client_id or not self.client_secret:
            raise AuthenticationError("Hostaway client credentials are not configured")

        form = {
            "grant_type": "client_credentials",
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "scope": self.scope,
        }
        url = f"{self.base_url}/accessTokens"
        try:
            if self._client is not None:
                response = await self._client.post(url, data=form, timeout=self.timeout_seconds)
            else:
                async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                    response = await client.post(url, data=form)
        except httpx.HTTPError as exc:
            raise AuthenticationError(f"token endpoint unreachable: {exc}") from exc

        if response.status_code != 200:
            raise AuthenticationError(
                f"token exchange rejected with status {response.status_code}: {response.text[:200]}"
            )

        try:
            payload: Any = response.json()
        except ValueError as exc:
            raise AuthenticationError("token endpoint returned a malformed body") from exc

        value = payload.get("access_token") if isinstance(payload, dict) else None
        if not isinstance(value, str) or not value:
            raise AuthenticationError("token endpoint response is missing access_token")

        try:
            expires_in = float(payload.get("expires_in", 0))
        except (TypeError, ValueError):
            expires_in = 0.0

        issued_at = self._clock()
        return AccessToken(value=value, issued_at=issued_at, expires_at=issued_at + timedelta(seconds=expires_in))


@lru_cache
def get_token_store() -> TokenStore:
    settings = get_settings()
    if settings.token_store_backend == "file":
        path = Path(settings.token_store_path) if settings.token_store_path else DEFAULT_TOKEN_FILE
        return FileTokenStore(path)
    return InMemoryTokenStore()


@lru_cache
def get_credential_manager() -> CredentialManager:
    settings = get_settings()
    return CredentialManager(
        base_url=settings.hostaway_base_url,
        client_id=settings.hostaway_account_id,
        client_secret=settings.hostaway_api_key,
        store=get_token_store(),
        scope=settings.hostaway_scope,
        buffer_seconds=settings.token_buffer_seconds,
        timeout_seconds=settings.upstream_timeout_seconds,
    )
