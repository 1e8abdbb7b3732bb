from typing import Optional
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse

from reworkit import __version__
from reworkit.api.routes import health, logs, packages
from reworkit.api.middleware.logging_middleware import LoggingMiddleware
from reworkit.common.config.settings import CollectorSettings, get_collector_settings
from reworkit.common.config.logging_config import get_logger
from reworkit.common.exceptions.base_exceptions import ReworkitBaseException
from reworkit.storage.factory import create_result_store
from reworkit.storage.log_storage import LogBlobSink
from reworkit.storage.result_store import ResultStore


logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting ReworkIt collector")
    await app.state.store.initialize()
    yield
    logger.info("Shutting down ReworkIt collector")
    await app.state.log_sink.drain()
    await app.state.store.close()


async def reworkit_exception_handler(
    request: Request,
    exc: ReworkitBaseException,
) -> PlainTextResponse:
    logger.info(f"Returning {exc.http_status} for {request.method} {request.url.path}: {exc}")
    return PlainTextResponse(exc.message, status_code=exc.http_status)


async def unhandled_exception_handler(request: Request, exc: Exception) -> PlainTextResponse:
    logger.exception(f"Unhandled error for {request.method} {request.url.path}")
    return PlainTextResponse(str(exc), status_code=500)


def create_app(
    settings: Optional[CollectorSettings] = None,
    store: Optional[ResultStore] = None,
    log_sink: Optional[LogBlobSink] = None,
    title: str = "ReworkIt! collector",
    version: str = __version__,
) -> FastAPI:
    settings = settings or get_collector_settings()

    app = FastAPI(
        title=title,
        version=version,
        description="Collects per-package, per-architecture build results",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.secret = settings.get_secret()
    app.state.store = store or create_result_store(settings.store_url)
    app.state.log_sink = log_sink or LogBlobSink(settings.log_dir)

    app.add_middleware(LoggingMiddleware)

    app.add_exception_handler(ReworkitBaseException, reworkit_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    app.include_router(logs.router, tags=["Logs"])
    app.include_router(packages.router, tags=["Packages"])
    app.include_router(health.router, tags=["Health"])

    logger.info(f"Collector configured: {title} v{version}")

    return app
