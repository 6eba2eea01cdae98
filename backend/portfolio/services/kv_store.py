"""Fault-tolerant accessor for the Upstash Redis REST API.

Public methods never raise: connectivity, TLS and protocol failures are
reported through :mod:`portfolio.observability` and mapped to ``None``,
``False`` or an empty list so callers can fall through to the next tier.
"""

from __future__ import annotations

import json
from typing import Any

import httpx

from ..config import settings
from ..observability import record_degradation
from ..schemas import EntityKind


class KVKeys:
    PROJECTS = "portfolio:projects"
    EXPERIENCES = "portfolio:experiences"
    SKILLS = "portfolio:skills"
    ACHIEVEMENTS = "portfolio:achievements"
    MENTORSHIP = "portfolio:mentorship"
    PERSONAL_INFO = "portfolio:personal_info"
    ADMIN_SESSION = "admin:session"
    ADMIN_TOKEN = "admin:token"


GROUP_KEYS: dict[EntityKind, str] = {
    EntityKind.personal: KVKeys.PERSONAL_INFO,
    EntityKind.projects: KVKeys.PROJECTS,
    EntityKind.experiences: KVKeys.EXPERIENCES,
    EntityKind.skills: KVKeys.SKILLS,
    EntityKind.achievements: KVKeys.ACHIEVEMENTS,
    EntityKind.mentorship: KVKeys.MENTORSHIP,
}


class KVStoreError(RuntimeError):
    """Raised internally when an Upstash command cannot be completed."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        error: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.error = error


def _encode(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


def _decode(value: Any) -> Any:
    if not isinstance(value, str):
        return value
    try:
        return json.loads(value)
    except ValueError:
        return value


class KVStoreClient:
    def __init__(
        self,
        *,
        rest_url: str | None = None,
        token: str | None = None,
        timeout: float | None = None,
        verify: bool | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._rest_url = rest_url or (
            settings.upstash_redis_rest_url.unicode_string()
            if settings.upstash_redis_rest_url is not None
            else None
        )
        self._token = token or settings.upstash_redis_rest_token
        self._timeout = timeout or settings.kv_request_timeout_seconds
        self._verify = settings.kv_verify_tls if verify is None else verify
        self._transport = transport

    @property
    def enabled(self) -> bool:
        return bool(self._rest_url and self._token)

    async def _command(self, *args: Any) -> Any:
        if not self.enabled:
            raise KVStoreError("Upstash Redis is not configured", error="not_configured")

        async with httpx.AsyncClient(
            timeout=self._timeout,
            verify=self._verify,
            transport=self._transport,
        ) as client:
            try:
                response = await client.post(
                    self._rest_url.rstrip("/"),
                    json=[str(arg) for arg in args],
                    headers={"Authorization": f"Bearer {self._token}"},
                )
            except httpx.HTTPError as exc:
                raise KVStoreError("Failed to call Upstash Redis") from exc

        try:
            data = response.json()
        except ValueError:
            data = None

        error = data.get("error") if isinstance(data, dict) else None
        if response.status_code >= 400 or error:
            raise KVStoreError(
                f"Upstash Redis {args[0]} failed with status {response.status_code}",
                status_code=response.status_code,
                error=str(error) if error is not None else None,
            )
        if not isinstance(data, dict):
            raise KVStoreError(
                "Upstash Redis returned a malformed response",
                status_code=response.status_code,
            )
        return data.get("result")

    def _degraded(self, operation: str, key: str, exc: KVStoreError) -> None:
        record_degradation(
            "kv",
            operation,
            str(exc),
            error=exc.__cause__ or exc,
            capture=exc.error != "not_configured",
            key=key,
            status_code=exc.status_code,
        )

    async def get(self, key: str) -> Any | None:
        try:
            result = await self._command("GET", key)
        except KVStoreError as exc:
            self._degraded("get", key, exc)
            return None
        return _decode(result)

    async def set(self, key: str, value: Any, ttl: int | None = None) -> bool:
        args: list[Any] = ["SET", key, _encode(value)]
        if ttl:
            args.extend(["EX", int(ttl)])
        try:
            await self._command(*args)
        except KVStoreError as exc:
            self._degraded("set", key, exc)
            return False
        return True

    async def delete(self, key: str) -> bool:
        try:
            await self._command("DEL", key)
        except KVStoreError as exc:
            self._degraded("delete", key, exc)
            return False
        return True

    async def expire(self, key: str, ttl: int) -> bool:
        try:
            result = await self._command("EXPIRE", key, int(ttl))
        except KVStoreError as exc:
            self._degraded("expire", key, exc)
            return False
        return bool(result)

    async def ttl(self, key: str) -> int | None:
        """Remaining lifetime in seconds; -1 without expiry, -2 when missing."""

        try:
            result = await self._command("TTL", key)
        except KVStoreError as exc:
            self._degraded("ttl", key, exc)
            return None
        try:
            return int(result)
        except (TypeError, ValueError):
            return None

    async def scan(self, pattern: str) -> list[str]:
        keys: list[str] = []
        cursor = "0"
        try:
            while True:
                result = await self._command(
                    "SCAN", cursor, "MATCH", pattern, "COUNT", settings.kv_scan_count
                )
                if not isinstance(result, list) or len(result) != 2:
                    raise KVStoreError("Upstash Redis SCAN returned a malformed result")
                cursor = str(result[0])
                keys.extend(str(key) for key in result[1] or [])
                if cursor == "0":
                    break
        except KVStoreError as exc:
            self._degraded("scan", pattern, exc)
            return []
        return keys


__all__ = ["GROUP_KEYS", "KVKeys", "KVStoreClient", "KVStoreError"]
