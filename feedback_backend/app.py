"""
FastAPI application entry point for the feedback backend.
"""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from feedback_backend.admin_routes import router as admin_router
from feedback_backend.certificates import (
    ActiveTemplateError,
    TemplateNotFound,
    TemplateValidationError,
)
from feedback_backend.config import get_settings
from feedback_backend.feedback_service import SessionNotFound
from feedback_backend.routes import router
from feedback_backend.sessions import SessionBusy
from feedback_backend.workshops import WorkshopNotFound, WorkshopValidationError


def _not_found(message: str):
    async def handler(request: Request, exc: Exception) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": message})

    return handler


async def _validation_failed(request: Request, exc: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content={"detail": {"message": str(exc), "fields": exc.errors}},
    )


async def _conflict(request: Request, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=409, content={"detail": str(exc)})


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(title="Workshop Feedback Backend", version="0.1.0")
    app.include_router(router, prefix=settings.api_prefix)
    app.include_router(admin_router, prefix=settings.api_prefix)

    app.add_exception_handler(
        SessionNotFound, _not_found("Session not found or expired")
    )
    app.add_exception_handler(WorkshopNotFound, _not_found("Workshop not found"))
    app.add_exception_handler(TemplateNotFound, _not_found("Template not found"))
    app.add_exception_handler(WorkshopValidationError, _validation_failed)
    app.add_exception_handler(TemplateValidationError, _validation_failed)
    app.add_exception_handler(ActiveTemplateError, _conflict)
    app.add_exception_handler(SessionBusy, _conflict)
    return app


app = create_app()
