# meeting_scheduler/services/push_client.py
from __future__ import annotations

from typing import Any, Dict, Optional

import httpx

from meeting_scheduler.core.config import get_settings


class PushClientError(RuntimeError):
    """
    Raised when the push webhook rejects a notification or cannot be reached.
    """


class PushClient:
    """
    Minimal client posting push notification payloads to a webhook.

    The webhook (a push gateway, chat integration, ...) receives one JSON
    document per recipient:

        {"recipient": "Ana Pérez", "kind": "meeting", "title": "...", "message": "..."}
    """

    def __init__(self, webhook_url: str, timeout_seconds: float = 5.0) -> None:
        if not webhook_url:
            raise ValueError("webhook_url is required")

        self._webhook_url = webhook_url
        self._timeout_seconds = timeout_seconds

    @property
    def webhook_url(self) -> str:
        return self._webhook_url

    async def send(self, payload: Dict[str, Any]) -> None:
        """
        POST one payload to the webhook.

        Raises PushClientError on transport errors and non-2xx responses.
        """
        try:
            async with httpx.AsyncClient(timeout=self._timeout_seconds) as client:
                resp = await client.post(
                    self._webhook_url,
                    json=payload,
                    headers={"Accept": "application/json"},
                )
        except httpx.HTTPError as exc:
            raise PushClientError(f"Push webhook unreachable: {exc}") from exc

        if resp.status_code // 100 != 2:
            raise PushClientError(
                f"Push webhook failed (status={resp.status_code}): {resp.text}"
            )


_push_client_instance: Optional[PushClient] = None


def get_push_client() -> Optional[PushClient]:
    """
    Lazily construct the shared PushClient, or return None when no webhook
    is configured.
    """
    global _push_client_instance
    settings = get_settings()
    if not settings.PUSH_WEBHOOK_URL:
        return None
    if _push_client_instance is None:
        _push_client_instance = PushClient(
            webhook_url=str(settings.PUSH_WEBHOOK_URL),
            timeout_seconds=settings.PUSH_TIMEOUT_SECONDS,
        )
    return _push_client_instance
