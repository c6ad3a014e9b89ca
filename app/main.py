import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.features.health.routes.health import router as health_router
from app.features.scan.services.orchestration.builder import build_scan_services
from app.features.scan.workers.periodic import ScanTriggers
from app.platform.config import settings
from app.platform.exceptions import add_exception_handlers
from app.platform.logger import LOG_FORMAT

# Configure logging to show INFO level messages
logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)


@asynccontextmanager
async def lifespan(app: FastAPI):
    triggers = None
    if settings.SCHEDULER_BACKEND == "inprocess":
        services = build_scan_services()
        triggers = ScanTriggers(services.processor, services.scheduler)
        triggers.start()
    app.state.scan_triggers = triggers

    yield

    if triggers is not None:
        await triggers.stop()


app = FastAPI(
    title="WebPulse API",
    description="Scheduled website quality audits and regression alerts",
    version="1.0.0",
    lifespan=lifespan,
)

add_exception_handlers(app)
app.include_router(health_router)
