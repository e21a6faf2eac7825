"""
Envelope JSON comune: {"success": true, "data": ..., "message"?: ...}
oppure {"success": false, "error": "..."}.
"""

import logging
from typing import Any

import httpx
from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class NotFoundError(LookupError):
    """Risorsa richiesta inesistente (404). KeyError e IndexError restano errori interni."""


def ok(data: Any = None, message: str | None = None, **extra: Any) -> dict[str, Any]:
    body: dict[str, Any] = {"success": True, "data": data}
    if message:
        body["message"] = message
    body.update(extra)
    return body


def http_error(exc: Exception, context: str) -> HTTPException:
    """Eccezione di servizio -> HTTPException con lo status corrispondente."""
    if isinstance(exc, HTTPException):
        return exc
    if isinstance(exc, ValueError):
        logger.warning("%s: %s", context, exc)
        return HTTPException(status_code=400, detail=str(exc))
    if isinstance(exc, PermissionError):
        logger.warning("%s: %s", context, exc)
        return HTTPException(status_code=403, detail=str(exc))
    if isinstance(exc, NotFoundError):
        logger.info("%s: %s", context, exc)
        return HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, RuntimeError):
        logger.error("%s config: %s", context, exc)
        return HTTPException(status_code=503, detail=str(exc))
    if isinstance(exc, httpx.HTTPError):
        logger.warning("%s upstream: %s", context, exc)
        return HTTPException(status_code=502, detail=f"Upstream error: {exc}")
    logger.exception("%s failed: %s", context, exc)
    return HTTPException(status_code=500, detail="Internal server error")


def install_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def _http_exception_handler(request: Request, exc: StarletteHTTPException):
        if isinstance(exc.detail, dict):
            content = {"success": False, **exc.detail}
        else:
            content = {"success": False, "error": exc.detail}
        return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def _validation_exception_handler(request: Request, exc: RequestValidationError):
        errors = [
            f"{'.'.join(str(p) for p in err.get('loc', []) if p != 'body')}: {err.get('msg')}"
            for err in exc.errors()
        ]
        return JSONResponse(
            status_code=400,
            content={"success": False, "error": "Invalid request", "details": errors},
        )

    @app.exception_handler(Exception)
    async def _unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("%s %s failed: %s", request.method, request.url.path, exc)
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": "Internal server error"},
        )
