from __future__ import annotations

from typing import Any, Mapping, Protocol

import httpx

from .log import get_logger

log = get_logger(__name__)


class FlagClient(Protocol):
    def get_boolean_value(self, flag_key: str, default_value: bool) -> bool: ...

    def close(self) -> None: ...


class StaticFlags:
    """In-memory flag values. Used when no flag service is configured."""

    def __init__(self, values: Mapping[str, bool] | None = None) -> None:
        self._values = dict(values or {})

    def get_boolean_value(self, flag_key: str, default_value: bool) -> bool:
        value = self._values.get(flag_key, default_value)
        return value if isinstance(value, bool) else default_value

    def close(self) -> None:
        pass


class RemoteFlags:
    """Evaluate flags against a flagd instance over OFREP.

    Expected JSON: {"key": "...", "value": true, ...}.
    Any failure (timeout, connection error, non-200, bad payload) returns the
    default value; evaluation never raises.
    """

    def __init__(
        self,
        base_url: str,
        timeout_s: float = 1.0,
        context: Mapping[str, Any] | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._context = dict(context or {})
        self._client = httpx.Client(
            base_url=base_url.rstrip("/"),
            timeout=timeout_s,
            follow_redirects=False,
            transport=transport,
        )

    def get_boolean_value(self, flag_key: str, default_value: bool) -> bool:
        try:
            resp = self._client.post(
                f"/ofrep/v1/evaluate/flags/{flag_key}",
                json={"context": self._context},
            )
        except httpx.HTTPError as e:
            log.warning("Flag evaluation failed", flag=flag_key, error=f"{type(e).__name__}: {e}")
            return default_value

        if resp.status_code != 200:
            log.warning("Flag evaluation failed", flag=flag_key, error=f"HTTP {resp.status_code}")
            return default_value
        try:
            data = resp.json()
        except ValueError:
            log.warning("Flag evaluation failed", flag=flag_key, error="Invalid JSON")
            return default_value

        value = data.get("value") if isinstance(data, dict) else None
        if not isinstance(value, bool):
            log.warning("Flag evaluation failed", flag=flag_key, error=f"Unexpected payload: {data!r}")
            return default_value
        return value

    def close(self) -> None:
        self._client.close()


def build_flag_client(base_url: str | None, timeout_s: float = 1.0) -> FlagClient:
    if not base_url:
        return StaticFlags()
    return RemoteFlags(base_url, timeout_s=timeout_s)
