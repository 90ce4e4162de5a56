import logging
from fastapi import WebSocket, WebSocketDisconnect
from starlette.websockets import WebSocketState
from ed_tracker.platform.ports.session_transport import SessionTransport

log = logging.getLogger("transport.websocket")

class WebSocketTransport(SessionTransport):
    def __init__(self, websocket: WebSocket):
        self.websocket = websocket

    async def send(self, message: dict) -> None:
        await self.websocket.send_json(message)

    async def close(self, code: int = 1000) -> None:
        if self.websocket.application_state == WebSocketState.DISCONNECTED:
            return
        try:
            await self.websocket.close(code=code)
        except RuntimeError as e:
            # the client went away between the state check and the close frame
            log.debug(f"[WS] close skipped: {e}")


async def receive_text_frame(websocket: WebSocket) -> str | None:
    """Next text frame from the client, or None for a binary one."""
    message = await websocket.receive()
    if message["type"] == "websocket.disconnect":
        raise WebSocketDisconnect(message.get("code", 1000), message.get("reason"))
    return message.get("text")
