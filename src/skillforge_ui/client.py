"""HTTP transport for the study-assistant chat backend."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from .exceptions import ChatRequestError

LOGGER = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:3000"
DEFAULT_CHAT_PATH = "/chat"


class ChatClient:
    """Send one message per request to ``POST /chat`` and return the reply.

    The backend contract is ``{"message": str}`` in and ``{"reply": str}``
    out. A JSON object without a usable ``reply`` yields ``None``; transport
    errors, non-2xx statuses and non-object bodies raise ``ChatRequestError``.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        path: str = DEFAULT_CHAT_PATH,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.path = path if path.startswith("/") else f"/{path}"
        self.timeout = timeout
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
            headers={"Content-Type": "application/json"},
        )

    async def __aenter__(self) -> ChatClient:
        return self

    async def __aexit__(self, *_exc: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def send(self, message: str) -> str | None:
        try:
            response = await self._client.post(self.path, json={"message": message})
        except httpx.HTTPError as exc:
            raise ChatRequestError(f"Unable to reach chat backend: {exc}") from exc

        if not response.is_success:
            raise ChatRequestError(
                f"Chat backend returned HTTP {response.status_code}"
            )

        try:
            payload: Any = response.json()
        except ValueError as exc:
            raise ChatRequestError("Chat backend returned a non-JSON body") from exc

        if not isinstance(payload, dict):
            raise ChatRequestError("Chat backend returned an unexpected payload")

        reply = payload.get("reply")
        if not isinstance(reply, str) or not reply.strip():
            LOGGER.info(
                "chat.client.empty_reply",
                extra={"event": "chat.client.empty_reply", "status": response.status_code},
            )
            return None
        return reply
