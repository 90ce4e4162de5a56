import time
import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from dotenv import load_dotenv

# Load environment variables from .env file before anything else
load_dotenv()

from ed_tracker.core.config import settings, Settings
from ed_tracker.core.logging import setup_logging, request_id_ctx
from ed_tracker.api.router import api_router
from ed_tracker.modules.patients.repository import PatientStore
from ed_tracker.modules.patients.seed import seed_demo_patients
from ed_tracker.modules.realtime.hub import BroadcastHub
from ed_tracker.modules.realtime.router import router as realtime_router
from ed_tracker.modules.display.router import router as display_router

setup_logging()
logger = logging.getLogger(__name__)


def create_app(config: Settings = settings) -> FastAPI:
    app = FastAPI(title=config.APP_NAME)

    # one store per process, owned by the hub
    store = PatientStore(time_format=config.DISPLAY_TIME_FORMAT)
    if config.SEED_DEMO_DATA:
        seed_demo_patients(store)
    app.state.hub = BroadcastHub(store, session_queue_maxsize=config.SESSION_QUEUE_MAXSIZE)
    app.state.settings = config

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def add_request_id(request: Request, call_next):
        rid = request.headers.get("x-request-id", "-")
        request_id_ctx.set(rid)
        response = await call_next(request)
        return response

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start_time = time.time()

        response = await call_next(request)

        process_time = (time.time() - start_time) * 1000
        formatted_process_time = f"{process_time:.2f}ms"

        logger.info(
            f"Request: {request.method} {request.url.path} - Response: {response.status_code} - Time: {formatted_process_time}"
        )

        return response

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.critical(f"Unhandled exception for request {request.method} {request.url.path}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"message": "An internal server error occurred."},
        )

    @app.on_event("shutdown")
    async def on_shutdown():
        await app.state.hub.close()

    app.include_router(api_router, prefix=config.API_PREFIX)
    # existing clients connect to the bare path
    app.include_router(realtime_router)
    app.include_router(display_router)
    return app


app = create_app()


def run():
    import uvicorn
    uvicorn.run("ed_tracker.main:app", host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    run()
