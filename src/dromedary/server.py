"""HTTP server entrypoint.

Responsibilities (and nothing more):
- Configure structlog
- Build AppState and start the cache reset scheduler in the lifespan
- Map URL paths onto handlers and handler results onto HTTP responses
- Start uvicorn
"""

from __future__ import annotations

import asyncio
import logging
import sys
from contextlib import asynccontextmanager, suppress
from pathlib import Path
from typing import TYPE_CHECKING

import structlog
import uvicorn
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.responses import (
    HTMLResponse,
    JSONResponse,
    PlainTextResponse,
    RedirectResponse,
    Response,
)
from starlette.routing import Route

import dromedary.handlers.admin as t_admin
import dromedary.handlers.get_document as t_document
import dromedary.handlers.get_feed as t_feed
import dromedary.handlers.get_index_page as t_index
import dromedary.handlers.listings as t_listings
from dromedary import __version__
from dromedary.cache import ContentCache
from dromedary.config import Settings
from dromedary.errors import DromedaryError, ErrorCode
from dromedary.middleware import PoweredByMiddleware
from dromedary.models.content import Redirect
from dromedary.renderer import DocumentRenderer
from dromedary.schedulers import run_cache_reset_scheduler
from dromedary.state import AppState
from dromedary.store import FileDocumentStore
from dromedary.templates import SiteTemplates

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from starlette.requests import Request

log = structlog.get_logger()

# Single numeric path segments below this are not treated as years.
MIN_ARCHIVE_YEAR = 2000
NOT_FOUND_IDENTIFIER = "404"


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------


def _setup_logging(settings: Settings) -> None:
    """Configure structlog. Called once at startup before any log statements."""
    log_level = logging.getLevelNamesMapping()[settings.logging.level]

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if settings.logging.format == "json":
        processors = [*shared_processors, structlog.processors.JSONRenderer()]
    else:
        processors = [*shared_processors, structlog.dev.ConsoleRenderer()]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


# ---------------------------------------------------------------------------
# State and lifespan
# ---------------------------------------------------------------------------


def build_state(settings: Settings) -> AppState:
    """Wire the store, cache, templates and renderer from settings."""
    content = settings.content
    templates = SiteTemplates.load(Path(content.templates_root).expanduser())
    return AppState(
        settings=settings,
        store=FileDocumentStore(
            Path(content.posts_root).expanduser(), marker=content.metadata_marker
        ),
        cache=ContentCache(settings.cache.max_size),
        renderer=DocumentRenderer(templates, marker=content.metadata_marker),
    )


@asynccontextmanager
async def lifespan(app: Starlette) -> AsyncGenerator[None, None]:
    """Run the cache reset scheduler for the server's lifetime."""
    state: AppState = app.state.dromedary
    log.info(
        "server_starting",
        version=__version__,
        posts_root=state.settings.content.posts_root,
    )

    cache_reset_task = asyncio.create_task(run_cache_reset_scheduler(state))

    log.info(
        "server_started",
        version=__version__,
        cache_max_size=state.cache.max_size,
        cache_reset_interval_seconds=state.settings.cache.reset_interval_seconds,
    )

    try:
        yield
    finally:
        cache_reset_task.cancel()
        with suppress(asyncio.CancelledError):
            await cache_reset_task
        log.info("server_stopping")


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


def _state(request: Request) -> AppState:
    return request.app.state.dromedary


def _redirect(redirect: Redirect) -> Response:
    return RedirectResponse(redirect.location, status_code=redirect.status_code)


async def _not_found(state: AppState, path: str) -> Response:
    """Render the ``404`` document with status 404, or plain text if it is missing."""
    log.info("not_found", path=path)
    try:
        page = await t_document.handle(NOT_FOUND_IDENTIFIER, state)
    except DromedaryError:
        return PlainTextResponse("Not found", status_code=404)
    if isinstance(page, Redirect):
        return PlainTextResponse("Not found", status_code=404)
    return HTMLResponse(page.html, status_code=404)


async def _handle_error(request: Request, exc: DromedaryError) -> Response:
    if exc.code in (ErrorCode.DOCUMENT_NOT_FOUND, ErrorCode.INVALID_INPUT):
        return await _not_found(_state(request), request.url.path)
    log.error("request_failed", path=request.url.path, code=exc.code, message=exc.message)
    return JSONResponse(exc.to_dict(), status_code=500)


def _int_params(request: Request, *names: str) -> list[int]:
    values = [request.path_params[name] for name in names]
    if all(value.isdecimal() for value in values):
        # int() rejects decimal strings past the interpreter's digit limit.
        with suppress(ValueError):
            return [int(value) for value in values]
    raise DromedaryError(
        code=ErrorCode.INVALID_INPUT,
        message=f"Expected numeric path segments: {'/'.join(values)}",
    )


async def _document_response(path: str, state: AppState) -> Response:
    if path.endswith(".md"):
        source = await t_document.handle_source(path, state)
        return Response(source, media_type="text/x-markdown; charset=utf-8")
    result = await t_document.handle(path, state)
    if isinstance(result, Redirect):
        return _redirect(result)
    return HTMLResponse(result.html)


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


async def home(request: Request) -> Response:
    try:
        page = int(request.query_params.get("p", "1"))
    except ValueError:
        return RedirectResponse("/", status_code=302)
    result = await t_index.handle(page, _state(request))
    if isinstance(result, Redirect):
        return _redirect(result)
    return HTMLResponse(result.html)


async def rss(request: Request) -> Response:
    xml = await t_feed.handle(_state(request))
    return Response(xml, media_type="application/rss+xml")


async def toss_cache(request: Request) -> Response:
    t_admin.flush(_state(request))
    return Response(status_code=205)


async def count(request: Request) -> Response:
    articles, days = await t_admin.count(_state(request))
    return PlainTextResponse(
        f"{articles} articles, across {days} days that have at least one post."
    )


async def slug_or_year(request: Request) -> Response:
    slug: str = request.path_params["slug"]
    state = _state(request)
    if not slug.isdecimal():
        return await _document_response(slug, state)
    (year,) = _int_params(request, "slug")
    if year < MIN_ARCHIVE_YEAR:
        return await _not_found(state, request.url.path)
    return HTMLResponse(await t_listings.handle_year(year, state))


async def month_listing(request: Request) -> Response:
    year, month = _int_params(request, "year", "month")
    return HTMLResponse(await t_listings.handle_month(year, month, _state(request)))


async def day_listing(request: Request) -> Response:
    year, month, day = _int_params(request, "year", "month", "day")
    return HTMLResponse(await t_listings.handle_day(year, month, day, _state(request)))


async def post(request: Request) -> Response:
    _int_params(request, "year", "month", "day")
    params = request.path_params
    path = f"{params['year']}/{params['month']}/{params['day']}/{params['slug']}"
    return await _document_response(path, _state(request))


ROUTES = [
    Route("/", home),
    Route("/rss", rss),
    Route("/tosscache", toss_cache),
    Route("/count", count),
    Route("/{year}/{month}/{day}/{slug}", post),
    Route("/{year}/{month}/{day}", day_listing),
    Route("/{year}/{month}", month_listing),
    Route("/{slug}", slug_or_year),
]


def create_app(state: AppState) -> Starlette:
    app = Starlette(
        routes=ROUTES,
        middleware=[Middleware(PoweredByMiddleware)],
        exception_handlers={DromedaryError: _handle_error},
        lifespan=lifespan,
    )
    app.state.dromedary = state
    return app


# ---------------------------------------------------------------------------
# Entrypoint
# ---------------------------------------------------------------------------


def run_http_server(settings: Settings) -> None:
    """Serve the blog with uvicorn."""
    _setup_logging(settings)
    app = create_app(build_state(settings))
    uvicorn.run(
        app,
        host=settings.server.host,
        port=settings.server.port,
        log_config=None,  # Disable uvicorn's default logging; structlog handles it
    )


def main() -> None:
    run_http_server(Settings())


if __name__ == "__main__":
    main()
