"""FastAPI application entry point."""

import uuid
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from shoppinglist.config import settings
from shoppinglist.database import Base, async_engine
from shoppinglist.logging_config import LoggingContext, configure_logging, get_logger
from shoppinglist.routers import data_router, lists_router, meal_plans_router

configure_logging(settings.log_level)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Create missing tables on startup and release the pool on shutdown."""
    logger.info("Starting Shopping List API")

    async with async_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables initialized")

    yield

    logger.info("Shutting down Shopping List API")
    await async_engine.dispose()


app = FastAPI(
    title="Shopping List API",
    description="Weekly meal plans, consolidated grocery lists and data backups",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=[
        "Content-Disposition",
        "X-Export-Version",
        "X-Export-Date",
        "X-Total-Plans",
        "X-Total-Lists",
        "X-Total-Items",
        "X-Request-ID",
    ],
)


@app.middleware("http")
async def request_context(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    """Tag every log line of a request with its id, echoed back in X-Request-ID."""
    request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
    with LoggingContext(request_id=request_id):
        response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


app.include_router(meal_plans_router)
app.include_router(lists_router)
app.include_router(data_router)


@app.get("/health")
async def health_check() -> dict:
    """Basic health check endpoint."""
    return {"status": "ok", "service": "shoppinglist-api"}


@app.get("/")
async def root() -> dict:
    """Root endpoint with API information."""
    return {
        "name": "Shopping List API",
        "version": "0.1.0",
        "docs": "/docs",
        "health": "/health",
    }
