from fastapi import APIRouter
from ed_tracker.modules.patients.router import router as patients_router, stages_router
from ed_tracker.modules.queue.router import router as queue_router
from ed_tracker.modules.realtime.router import router as realtime_router
from ed_tracker.modules.display.router import router as display_router

api_router = APIRouter()
api_router.include_router(patients_router, prefix="/patients", tags=["patients"])
api_router.include_router(stages_router, tags=["patients"])
api_router.include_router(queue_router, tags=["queue"])
api_router.include_router(realtime_router, tags=["realtime"])
api_router.include_router(display_router, tags=["display"])

@api_router.get("/health", tags=["health"])
async def health():
    return {"status": "ok"}
