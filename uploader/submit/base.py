"""Remote submission interface (port)."""

from __future__ import annotations

from typing import Any, Protocol


class RemoteSubmitter(Protocol):
    """Port: sends one batch of Geosubmit items in a single call.

    Returns normally when the whole batch was accepted. Raises
    ``uploader.core.errors.SubmitError`` otherwise.
    """

    async def submit(self, items: list[dict[str, Any]]) -> None: ...
