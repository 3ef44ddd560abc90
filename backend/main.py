from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from backend.config import Settings, get_settings
from backend.errors import GatewayError
from backend.meetings import router as meetings_router
from backend.meetings.controller import MeetingsController
from backend.proxy import router as proxy_router
from backend.proxy.controller import ImageProxyController
from backend.services.local_storage import LocalUploadStorage
from backend.services.vika_client import VikaClient
from backend.uploads import router as uploads_router
from backend.uploads.controller import UploadController

logger = logging.getLogger(__name__)

UPLOADS_MOUNT = "/uploads"
LATENCY_WARNING_SECONDS = 300
RECORDS_PATH = "/api/meetings"


def _is_record_route(request: Request) -> bool:
    return request.url.path.startswith(RECORDS_PATH)


def create_app(
    settings: Settings | None = None,
    vika: VikaClient | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> FastAPI:
    settings = settings or get_settings()
    owned: list = []
    if vika is None:
        vika = VikaClient(settings)
        owned.append(vika.client)
    if http_client is None:
        http_client = httpx.AsyncClient()
        owned.append(http_client)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        worst_case = settings.worst_case_create_seconds()
        if worst_case > LATENCY_WARNING_SECONDS:
            logger.warning("A single record create may take up to %.0fs with the current retry settings", worst_case)
        try:
            yield
        finally:
            for client in owned:
                await client.aclose()

    app = FastAPI(title="Meeting Records Gateway", debug=settings.api_debug, lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    storage = LocalUploadStorage(settings.upload_dir, url_prefix=UPLOADS_MOUNT)
    app.state.settings = settings
    app.state.meetings_controller = MeetingsController(vika, settings)
    app.state.upload_controller = UploadController(vika, storage, settings)
    app.state.proxy_controller = ImageProxyController(http_client, settings.proxy_referer)

    @app.exception_handler(GatewayError)
    async def gateway_error_handler(request: Request, exc: GatewayError):
        return JSONResponse(status_code=exc.status_code, content=exc.body())

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        if not _is_record_route(request):
            return await request_validation_exception_handler(request, exc)
        return JSONResponse(
            status_code=400,
            content={
                "code": 400,
                "success": False,
                "message": "Invalid request body",
                "error": jsonable_encoder(exc.errors()),
            },
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        content = {"success": False, "message": "Internal server error", "error": str(exc)}
        if _is_record_route(request):
            content = {"code": 500, **content}
        return JSONResponse(status_code=500, content=content)

    app.include_router(meetings_router, prefix="/api", tags=["meetings"])
    app.include_router(uploads_router, prefix="/api", tags=["uploads"])
    app.include_router(proxy_router, prefix="/api", tags=["proxy"])

    @app.get("/health")
    def health_check():
        return {"status": "ok"}

    app.mount(UPLOADS_MOUNT, StaticFiles(directory=settings.upload_dir), name="uploads")
    if settings.static_dir.is_dir():
        app.mount("/", StaticFiles(directory=settings.static_dir, html=True), name="static")
    else:
        logger.warning("Static directory %s not found, front-end bundle will not be served", settings.static_dir)

    return app
