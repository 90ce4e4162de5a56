from fastapi import APIRouter, Depends, Request
from ed_tracker.api.deps import get_hub
from ed_tracker.modules.patients.models import CATEGORY_INFO
from ed_tracker.modules.patients.schemas import AlertState
from ed_tracker.modules.queue.ordering import display_columns
from ed_tracker.modules.realtime.hub import BroadcastHub

router = APIRouter()

@router.get("/queue")
async def get_queue(request: Request, hub: BroadcastHub = Depends(get_hub)):
    config = request.app.state.settings
    columns = display_columns(hub.store.snapshot())
    return {
        "alert_mode": hub.alert_mode,
        # displays page their columns locally with these
        "display": {"page_size": config.DISPLAY_PAGE_SIZE, "rotation_seconds": config.DISPLAY_ROTATION_SECONDS},
        "columns": {stage.value: [p.to_wire() for p in items] for stage, items in columns.items()},
    }

@router.get("/categories")
async def list_categories():
    return [{"id": c.value, **info} for c, info in CATEGORY_INFO.items()]

@router.get("/alert", response_model=AlertState)
async def get_alert(hub: BroadcastHub = Depends(get_hub)):
    return AlertState(enabled=hub.alert_mode)

@router.put("/alert", response_model=AlertState)
async def set_alert(payload: AlertState, hub: BroadcastHub = Depends(get_hub)):
    return AlertState(enabled=hub.toggle_alert(payload.enabled))
