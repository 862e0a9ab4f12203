"""
FastAPI API layer for the image recognition gateway.

Exposes:
- `/recognize` : download image URLs, run the recognizer, return result URLs
- `/output`    : static files written by the recognition service
- `/health`    : Basic health check
"""

from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import FastAPI, HTTPException, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.schemas import ErrorResponse, RecognizeRequest
from pipeline.graph import build_graph
from pipeline.settings import Settings

log = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, GET, OPTIONS, PUT, DELETE",
    "Access-Control-Allow-Headers": (
        "Accept, Content-Type, Content-Length, Accept-Encoding, X-CSRF-Token, Authorization"
    ),
}

# Statuses that must not carry a body when propagated from the recognizer
BODYLESS_STATUSES = {204, 304}

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the gateway application.

    Usable directly as a uvicorn factory; without explicit settings the
    environment is read.
    """
    settings = settings or Settings.from_env()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    pipeline = build_graph(settings)

    app = FastAPI(
        title="Image Recognition Gateway",
        version="1.0.0",
        description="Downloads images and hands them to an external recognition service.",
    )
    app.state.settings = settings

    @app.middleware("http")
    async def allow_cross_origin(request: Request, call_next):
        response = await call_next(request)
        response.headers.update(CORS_HEADERS)
        return response

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code < 200 or exc.status_code in BODYLESS_STATUSES:
            return Response(status_code=exc.status_code, headers=getattr(exc, "headers", None))
        return JSONResponse(
            status_code=exc.status_code,
            content={"reason": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        message = errors[0].get("msg", "validation failed") if errors else "validation failed"
        log.warning("Rejected recognize request: %s", message)
        return JSONResponse(
            status_code=400,
            content={"reason": f"invalid json body: {message}"},
        )

    # Runs in ServerErrorMiddleware, outside allow_cross_origin.
    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        log.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content={"reason": f"internal error: {exc}"},
            headers=CORS_HEADERS,
        )

    @app.options("/recognize")
    def recognize_preflight():
        """
        CORS preflight: empty body, headers added by middleware.
        """
        return Response(status_code=200)

    @app.api_route(
        "/recognize",
        methods=["GET", "PUT", "PATCH", "DELETE"],
        include_in_schema=False,
    )
    def recognize_without_body():
        """
        Only POST carries a recognize request; other methods get a 400.
        """
        raise HTTPException(status_code=400, detail="invalid json body: POST a JSON object")

    @app.post("/recognize", response_model=List[str], responses=ERROR_RESPONSES)
    def recognize(payload: RecognizeRequest):
        """
        Download the images, run the recognizer and list its output files.

        Runs in the threadpool; every step blocks this request until done.
        """
        if not payload.image_urls:
            log.warning("Rejected recognize request: no image urls")
            raise HTTPException(status_code=400, detail="invalid json body: image_urls is empty")

        log.info("Got recognize request %s", payload.image_urls)

        result = pipeline.invoke({"image_urls": payload.image_urls})

        if result.get("error"):
            status_code = result.get("status_code") or 500
            log.info("Sending recognize error %d: %s", status_code, result["error"])
            raise HTTPException(status_code=status_code, detail=result["error"])

        images = result.get("results") or []
        log.info("Sending recognize response: %s", images)
        return images

    @app.get("/health")
    def health():
        """
        Basic health check.
        """
        return {"status": "ok"}

    app.mount(
        settings.output_prefix,
        StaticFiles(directory=settings.output_dir, check_dir=False),
        name="output",
    )

    return app
