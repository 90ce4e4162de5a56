from fastapi import Request
from ed_tracker.modules.realtime.hub import BroadcastHub

def get_hub(request: Request) -> BroadcastHub:
    return request.app.state.hub
