import json
import logging
from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from pydantic import BaseModel, ValidationError
from typing import Any

from ed_tracker.core.logging import request_id_ctx
from ed_tracker.modules.realtime.hub import BroadcastHub
from ed_tracker.platform.adapters.transport_websocket import WebSocketTransport, receive_text_frame

log = logging.getLogger("realtime.ws")

router = APIRouter()

class ClientMessage(BaseModel):
    event: str
    data: Any = None

@router.websocket("/ws")
async def realtime_socket(websocket: WebSocket):
    hub: BroadcastHub = websocket.app.state.hub
    await websocket.accept()
    session = await hub.connect(WebSocketTransport(websocket))
    request_id_ctx.set(session.id)
    try:
        # the hub drops sessions that fail or fall behind
        while session.id in hub.sessions:
            raw = await receive_text_frame(websocket)
            if raw is None:
                log.warning("[WS] dropping non-text frame")
                continue
            try:
                msg = ClientMessage.model_validate(json.loads(raw))
            except (ValueError, ValidationError) as e:
                log.warning(f"[WS] dropping undecodable frame: {e}")
                continue
            hub.dispatch(session, msg.event, msg.data)
    except WebSocketDisconnect:
        log.debug("[WS] client closed the connection")
    finally:
        await hub.disconnect(session)
