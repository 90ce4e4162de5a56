import asyncio
import logging
from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from ed_tracker.core.config import Settings
from ed_tracker.core.logging import request_id_ctx
from ed_tracker.modules.display.board import WaitingRoomBoard, run_rotation
from ed_tracker.modules.realtime.hub import BroadcastHub, message
from ed_tracker.platform.adapters.transport_websocket import WebSocketTransport, receive_text_frame
from ed_tracker.platform.ports.session_transport import SessionTransport

log = logging.getLogger("display.ws")

router = APIRouter()

BOARD = "board"

class BoardTransport(SessionTransport):
    """
    Hub session for one waiting-room screen.

    Hub events update the screen's own board and every change is forwarded
    as a rendered frame, so the screen never sees patient records.
    """
    def __init__(self, board: WaitingRoomBoard, downstream: SessionTransport):
        self.board = board
        self.downstream = downstream
        self._lock = asyncio.Lock()

    async def send(self, msg: dict) -> None:
        self.board.handle_event(msg["event"], msg["data"])
        await self.push(self.board.render())

    async def push(self, frame: dict) -> None:
        # hub deliveries and rotation ticks write to the same socket
        async with self._lock:
            await self.downstream.send(message(BOARD, frame))

    async def close(self, code: int = 1000) -> None:
        await self.downstream.close(code=code)


@router.websocket("/ws/display")
async def display_socket(websocket: WebSocket):
    hub: BroadcastHub = websocket.app.state.hub
    config: Settings = websocket.app.state.settings
    await websocket.accept()
    board = WaitingRoomBoard(page_size=config.DISPLAY_PAGE_SIZE)
    transport = BoardTransport(board, WebSocketTransport(websocket))
    session = await hub.connect(transport)
    request_id_ctx.set(session.id)
    rotation = asyncio.create_task(
        run_rotation(board, config.DISPLAY_ROTATION_SECONDS, transport.push),
        name=f"rotation-{session.id}",
    )
    try:
        # read-only surface: inbound frames are ignored
        while session.id in hub.sessions:
            await receive_text_frame(websocket)
    except WebSocketDisconnect:
        log.debug("[WS] display closed the connection")
    finally:
        rotation.cancel()
        for result in await asyncio.gather(rotation, return_exceptions=True):
            if not isinstance(result, asyncio.CancelledError):
                log.warning(f"[WS] display rotation ended with {result!r}")
        await hub.disconnect(session)
