from fastapi import APIRouter, Request, status

from app.platform.config import settings
from app.platform.response import api_response

router = APIRouter()


@router.get("/health", tags=["health"])
async def health_check(request: Request):
    triggers = getattr(request.app.state, "scan_triggers", None)
    scheduler = {
        "backend": settings.SCHEDULER_BACKEND,
        "tasks": {task.name: task.running for task in triggers.tasks} if triggers else {},
    }
    return api_response(
        data={"status": "ok", "service": settings.APP_NAME, "scheduler": scheduler},
        message="Service is healthy",
        status_code=status.HTTP_200_OK,
    )
