"""FastAPI application entry point."""

import random
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from loguru import logger

from numbers_lottery.config import Settings, settings as default_settings
from numbers_lottery.errors import LotteryError
from numbers_lottery.scheduler import DrawScheduler
from numbers_lottery.schemas.lottery import ErrorDetail, ErrorResponse
from numbers_lottery.services.access_policy import AccessPolicy
from numbers_lottery.services.lottery_service import LotteryLedger, LotteryLimits
from numbers_lottery.storage.json_store import JsonFileStore
from numbers_lottery.storage.repository import JsonLedgerRepository
from numbers_lottery.storage.serializer import WriteSerializer


def configure_logging(settings: Settings) -> None:
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if settings.DEBUG else settings.LOG_LEVEL)
    if settings.LOG_FILE is not None:
        logger.add(str(settings.LOG_FILE), rotation="10 MB", retention="7 days", level="INFO")


def build_ledger(
    settings: Settings, serializer: WriteSerializer, rng: random.Random | None = None
) -> LotteryLedger:
    """Wire the ledger from settings around an injected serializer."""
    repository = JsonLedgerRepository(
        settings.LOTTERY_DB_PATH,
        JsonFileStore(corruption_policy=settings.CORRUPTION_POLICY),
    )
    policy = AccessPolicy(
        admin_role=settings.ADMIN_ROLE,
        admin_email_suffix=settings.ADMIN_EMAIL_SUFFIX,
    )
    limits = LotteryLimits(
        max_pending_tickets=settings.MAX_TICKETS_PER_DRAW,
        max_pending_per_user=settings.MAX_TICKETS_PER_USER,
    )
    return LotteryLedger(repository, serializer, policy=policy, limits=limits, rng=rng)


def _error_response(status_code: int, code: str, message: str) -> JSONResponse:
    body = ErrorResponse(error=ErrorDetail(code=code, message=message))
    return JSONResponse(status_code=status_code, content=body.model_dump())


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(LotteryError)
    async def _handle_lottery_error(request: Request, exc: LotteryError):
        if exc.status_code >= 500:
            logger.error("{} {} failed: {}", request.method, request.url.path, exc.message)
            return _error_response(exc.status_code, "internal_error", "Internal server error")
        return _error_response(exc.status_code, exc.code, exc.message)

    @app.exception_handler(Exception)
    async def _handle_unexpected(request: Request, exc: Exception):
        logger.exception("Unhandled exception on {} {}", request.method, request.url.path)
        return _error_response(500, "internal_error", "Internal server error")


def create_app(settings: Settings | None = None, *, rng: random.Random | None = None) -> FastAPI:
    """Application factory."""
    settings = settings or default_settings
    configure_logging(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan: startup and shutdown."""
        logger.info("Starting {} ...", settings.APP_NAME)

        serializer = WriteSerializer()
        ledger = build_ledger(settings, serializer, rng=rng)
        app.state.serializer = serializer
        app.state.ledger = ledger
        app.state.policy = ledger.policy
        app.state.scheduler = None

        if settings.AUTO_DRAW_ENABLED:
            scheduler = DrawScheduler(
                ledger,
                admin_role=settings.ADMIN_ROLE,
                day_of_week=settings.AUTO_DRAW_DAY_OF_WEEK,
                hour=settings.AUTO_DRAW_HOUR,
                minute=settings.AUTO_DRAW_MINUTE,
            )
            scheduler.start()
            app.state.scheduler = scheduler

        yield

        if app.state.scheduler is not None:
            app.state.scheduler.stop()
        await serializer.close()
        logger.info("Application shutdown complete")

    app = FastAPI(
        title=settings.APP_NAME,
        version="1.0.0",
        description="Numbers lottery over a flat JSON ledger",
        lifespan=lifespan,
    )
    app.state.settings = settings
    register_error_handlers(app)

    from numbers_lottery.api.v1.router import api_router
    app.include_router(api_router, prefix="/api/v1")

    return app


app = create_app()
