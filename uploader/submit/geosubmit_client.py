"""Geosubmit v2 HTTP client.

Posts a batch as ``{"items": [...]}`` and maps every failure onto a
SubmitError with an explicit FailureKind so the retry policy never has to
know about httpx.
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from uploader.core.errors import FailureKind, SubmitError

log = structlog.get_logger()


class GeosubmitClient:
    """RemoteSubmitter backed by httpx.AsyncClient."""

    def __init__(
        self,
        endpoint: str,
        timeout_seconds: float = 30.0,
        user_agent: str = "geosubmit-uploader",
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._endpoint = endpoint
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout_seconds)
        self._headers = {"User-Agent": user_agent}

    async def submit(self, items: list[dict[str, Any]]) -> None:
        try:
            resp = await self._client.post(
                self._endpoint,
                json={"items": items},
                headers=self._headers,
            )
        except httpx.TimeoutException as e:
            raise SubmitError(FailureKind.TRANSIENT, f"{type(e).__name__}: {e}") from e
        except httpx.HTTPError as e:
            raise SubmitError(FailureKind.OTHER, f"{type(e).__name__}: {e}") from e

        if resp.is_success:
            log.debug("geosubmit_accepted", items=len(items), status=resp.status_code)
            return

        kind = FailureKind.SERVER_ERROR if resp.is_server_error else FailureKind.CLIENT_ERROR
        raise SubmitError(
            kind,
            f"HTTP {resp.status_code} from {self._endpoint}: {resp.text[:200]}",
            status_code=resp.status_code,
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
