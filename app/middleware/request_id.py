# app/middleware/request_id.py
from __future__ import annotations

"""
# VidTube · Request ID Middleware (pure ASGI)

- Reuses a client-supplied `X-Request-ID` / `X-Correlation-ID` when it is a
  valid UUIDv4 (and trusting client ids is enabled).
- Generates a UUIDv4 otherwise.
- Exposes it as `request.state.request_id` and echoes it in the response.
- Binds `request_id` in the **loguru** context for the whole request.

## Usage
    app.add_middleware(RequestIDMiddleware)
"""

import uuid
from typing import Optional

from loguru import logger
from starlette.datastructures import Headers
from starlette.types import ASGIApp, Message, Receive, Scope, Send

DEFAULT_HEADER = "X-Request-ID"
MAX_ID_LENGTH = 128


class RequestIDMiddleware:
    """Lightweight ASGI middleware managing a per-request correlation id."""

    def __init__(
        self,
        app: ASGIApp,
        header_name: str = DEFAULT_HEADER,
        trust_client_ids: bool = True,
    ) -> None:
        self.app = app
        self.header_name = header_name
        self.trust_client_ids = trust_client_ids

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope.get("type") != "http":
            return await self.app(scope, receive, send)

        req_id = self._choose_request_id(Headers(scope=scope))
        scope.setdefault("state", {})["request_id"] = req_id
        name_bytes = self.header_name.encode("latin-1")

        async def _send_wrapper(message: Message) -> None:
            if message.get("type") == "http.response.start":
                raw = message.setdefault("headers", [])
                message["headers"] = [(k, v) for (k, v) in raw if k.lower() != name_bytes.lower()]
                message["headers"].append((name_bytes, req_id.encode("latin-1")))
            await send(message)

        with logger.contextualize(request_id=req_id):
            await self.app(scope, receive, _send_wrapper)

    def _choose_request_id(self, headers: Headers) -> str:
        """Return a safe request id from headers or generate a UUIDv4."""
        if self.trust_client_ids:
            incoming: Optional[str] = headers.get(self.header_name) or headers.get("X-Correlation-ID")
            if incoming and 0 < len(incoming.strip()) <= MAX_ID_LENGTH:
                try:
                    val = uuid.UUID(incoming.strip())
                except ValueError:
                    val = None
                if val is not None and val.version == 4:
                    return str(val)
        return str(uuid.uuid4())


__all__ = ["RequestIDMiddleware"]
