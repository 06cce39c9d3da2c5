"""WebSocket echo endpoint.

Every frame received on a connection is sent straight back with the same
type (text stays text, binary stays binary) until either side closes the
connection or an I/O error occurs. Connections share nothing.
"""

from __future__ import annotations

import logging
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, Field
from starlette.websockets import WebSocket, WebSocketDisconnect, WebSocketState

logger = logging.getLogger(__name__)

# Close code sent when rejecting an upgrade; surfaces as HTTP 403.
POLICY_VIOLATION = 1008


class Upgrader(BaseModel):
    """Process-wide WebSocket upgrade options, built once per application."""

    model_config = ConfigDict(frozen=True)

    check_origin: bool = Field(
        default=True,
        description="Reject handshakes whose Origin host differs from Host",
    )

    def origin_allowed(self, websocket: WebSocket) -> bool:
        """Same-origin check; handshakes without an Origin header pass."""
        if not self.check_origin:
            return True
        origin = websocket.headers.get("origin")
        if not origin:
            return True
        origin_host = urlsplit(origin).netloc
        return origin_host.lower() == websocket.headers.get("host", "").lower()

    async def upgrade(self, websocket: WebSocket) -> bool:
        """Complete the handshake, or reject it and return False."""
        if not self.origin_allowed(websocket):
            logger.warning(
                "upgrade: origin %r not allowed for host %r",
                websocket.headers.get("origin"),
                websocket.headers.get("host"),
            )
            await websocket.close(code=POLICY_VIOLATION)
            return False
        await websocket.accept()
        return True


async def echo_loop(websocket: WebSocket) -> None:
    """Send every received frame back until the connection ends."""
    while True:
        try:
            message = await websocket.receive()
        except (WebSocketDisconnect, RuntimeError, OSError) as e:
            logger.info("read: %s", e)
            return

        if message["type"] == "websocket.disconnect":
            logger.info("read: connection closed (code %s)", message.get("code"))
            return

        text = message.get("text")
        data = message.get("bytes")
        logger.debug("recv: %r", text if text is not None else data)
        try:
            if text is not None:
                await websocket.send_text(text)
            else:
                await websocket.send_bytes(data or b"")
        except (WebSocketDisconnect, RuntimeError, OSError) as e:
            logger.info("write: %s", e)
            return


async def serve_echo(websocket: WebSocket, upgrader: Upgrader) -> None:
    """Handle one ``/ws/echo`` connection from handshake to close."""
    if not await upgrader.upgrade(websocket):
        return
    client = websocket.client
    logger.debug("Echo connection opened from %s", client)
    try:
        await echo_loop(websocket)
    finally:
        if (
            websocket.client_state == WebSocketState.CONNECTED
            and websocket.application_state == WebSocketState.CONNECTED
        ):
            await websocket.close()
    logger.debug("Echo connection from %s finished", client)
