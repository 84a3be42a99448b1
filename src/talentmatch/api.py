"""FastAPI surface over the function registry and the candidate response page."""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import Body, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from . import __version__
from .errors import FunctionError
from .functions import Action, FunctionRegistry
from .services import InterviewService

logger = structlog.get_logger(__name__)


def create_app(registry: FunctionRegistry, interview_service: InterviewService) -> FastAPI:
    app = FastAPI(title="talentmatch", version=__version__)

    @app.exception_handler(FunctionError)
    async def function_error_handler(request: Request, exc: FunctionError) -> JSONResponse:
        logger.info(
            "api.function_error",
            path=request.url.path,
            status_code=exc.status_code,
            error=exc.message,
        )
        return JSONResponse(status_code=exc.status_code, content=exc.to_payload())

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        details = [
            {"loc": ".".join(str(part) for part in item["loc"]), "message": item["msg"]}
            for item in exc.errors()
        ]
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"success": False, "error": "Invalid request", "details": details},
        )

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("api.unhandled_error", path=request.url.path, method=request.method)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"success": False, "error": "Internal server error"},
        )

    @app.get("/health")
    def health() -> dict[str, Any]:
        return {"status": "ok", "version": __version__, "functions": registry.names()}

    @app.post("/functions/{name}")
    def invoke_function(name: str, payload: dict[str, Any] | None = Body(None)) -> dict[str, Any]:
        return registry.invoke(name, payload)

    @app.get("/interview/respond/{token}")
    def view_invitation(token: str) -> dict[str, Any]:
        return interview_service.view(token)

    @app.post("/interview/respond/{token}")
    def respond_to_invitation(
        token: str, payload: dict[str, Any] | None = Body(None)
    ) -> dict[str, Any]:
        body = dict(payload or {})
        body["responseToken"] = token
        return registry.invoke(Action.PROCESS_INTERVIEW_RESPONSE.value, body)

    return app


__all__ = ["create_app"]
