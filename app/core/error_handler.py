"""
Global exception handler.
Turns any unhandled exception into a JSON 500 response and logs the traceback.
HTTPException subclasses never reach this handler; FastAPI renders them itself.
"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        f"Unhandled error on {request.method} {request.url.path}: {exc}",
        exc_info=exc,
    )
    return JSONResponse(
        status_code=500,
        content={"success": False, "message": "Internal server error"},
    )
