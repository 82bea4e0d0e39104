"""Service banner and health check."""

from typing import Any, Dict

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse, PlainTextResponse

from edu_learn_api.app.core.config import settings
from edu_learn_api.app.core.db import is_database_available


router = APIRouter()


@router.get("/", response_class=PlainTextResponse)
async def welcome() -> str:
    return "Welcome to Edu-Learn-Server"


@router.get("/health")
def health() -> JSONResponse:
    """Report whether MongoDB is reachable (503 if it is not)."""
    database_ok = is_database_available()
    body: Dict[str, Any] = {
        "status": "ok" if database_ok else "degraded",
        "database": "connected" if database_ok else "unavailable",
        "version": settings.api_version,
    }
    code = status.HTTP_200_OK if database_ok else status.HTTP_503_SERVICE_UNAVAILABLE
    return JSONResponse(status_code=code, content=body)
