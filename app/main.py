"""
FastAPI application for reportvault.

Accepts report uploads for a wallet, stores them in IPFS and keeps an
in-memory index of the resulting CIDs per wallet.

Usage:
    uvicorn app.main:app --host 127.0.0.1 --port 3001
"""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from app.reports.errors import ReportUploadError
from app.reports.factory import build_report_services
from app.reports.routes import router as reports_router
from app.reports.schemas import UploadResponse
from reportvault_core.config import Settings, settings as default_settings
from reportvault_core.infrastructure.telemetry import setup_telemetry
from reportvault_core.logging import setup_logging


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await app.state.report_services.http_client.close()
    logger.info("Closed storage HTTP client")


async def handle_report_upload_error(request: Request, exc: ReportUploadError) -> JSONResponse:
    """Render any upload failure in the upload response shape."""
    logger.opt(exception=exc.cause).error(
        f"[{exc.request_id or '-'}] Upload failed [{exc.code}] debug_id={exc.debug_id} "
        f"owner={exc.owner!r} file_name={exc.file_name!r}: "
        f"{exc.message_safe} | {exc.message_debug}"
    )
    body = UploadResponse(
        success=False,
        message=exc.message_safe,
        cid=None,
        file_name=exc.file_name,
    )
    return JSONResponse(status_code=exc.http_status, content=body.model_dump())


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create the FastAPI application with its own report index."""
    settings = settings or default_settings

    setup_logging(settings.LOG_LEVEL)
    telemetry = setup_telemetry(settings)

    app = FastAPI(
        title="reportvault",
        description="Store wallet reports in IPFS and list their CIDs",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.report_services = build_report_services(settings)

    telemetry.instrument_app(app, settings)

    app.add_exception_handler(ReportUploadError, handle_report_upload_error)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.CORS_ALLOWED_ORIGIN],
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
        max_age=settings.CORS_MAX_AGE,
    )

    app.include_router(reports_router, tags=["Reports"])

    @app.get("/health")
    def health():
        """
        Health check endpoint.

        Returns:
            dict: Status, service name and number of wallets with reports.
        """
        return {
            "status": "ok",
            "service": settings.SERVICE_NAME,
            "owners": len(app.state.report_services.report_index),
        }

    logger.info(f"Storage backend: {settings.IPFS_API_URL}{settings.IPFS_ADD_PATH}")
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    logger.info(f"Starting reportvault on http://{default_settings.APP_HOST}:{default_settings.APP_PORT}")
    uvicorn.run(app, host=default_settings.APP_HOST, port=default_settings.APP_PORT)
