from typing import Any, Optional

from fastapi import status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def api_response(
    *,
    data: Optional[Any] = None,
    message: str = "OK",
    status_code: int = status.HTTP_200_OK,
) -> JSONResponse:
    """Envelope shared by the health route and the WebPulse error handlers.

    `status` is "error" for any 4xx/5xx code; `data` is always an object.
    """
    return JSONResponse(
        status_code=status_code,
        content={
            "status_code": status_code,
            "status": "error" if status_code >= 400 else "success",
            "message": message,
            "data": jsonable_encoder(data) if data is not None else {},
        },
    )
