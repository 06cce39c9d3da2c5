"""FastAPI application for the diagnostic server.

Every route is stateless: it reads the request, optionally builds a fresh
information snapshot, and answers. Routes:

    /                      -> text snapshot
    /content/json, /json/  -> JSON snapshot
    /content/html, /html/  -> HTML snapshot rendered from the template
    /status/{code}         -> responds with the requested status code
    /exectime/{duration}   -> sleeps for the duration, then 200
    /redirect              -> 302 to the configured URL
    WS /ws/echo            -> echoes every frame back

HTTP routes answer every common method, not just GET, so proxies can be
exercised with HEAD health checks and POST traffic alike.
"""

from __future__ import annotations

import asyncio
import functools
import logging
import re
from contextlib import asynccontextmanager
from http import HTTPStatus
from typing import AsyncIterator, Callable

import uvicorn
from fastapi import FastAPI, Request, WebSocket
from fastapi.responses import (
    HTMLResponse,
    JSONResponse,
    PlainTextResponse,
    RedirectResponse,
    Response,
)

from devserver.config.settings import Settings
from devserver.domain.models import InfoSnapshot
from devserver.endpoint.echo import Upgrader, serve_echo
from devserver.endpoint.templates import render_snapshot
from devserver.errors import DevServerError
from devserver.utils.durations import SECOND, DurationError, format_duration, parse_duration
from devserver.utils.network import get_outbound_ip

logger = logging.getLogger(__name__)

INVALID_STATUS_CODE = "invalid status code"
INVALID_DURATION = "invalid duration"

_STATUS_CODE_RE = re.compile(r"([+-]?)([0-9]+)")

# Longest status code, once leading zeros are stripped.
_MAX_STATUS_DIGITS = 3

METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def reason_phrase(code: int) -> str | None:
    """Standard reason phrase for ``code``, or None if it has none."""
    try:
        return HTTPStatus(code).phrase or None
    except ValueError:
        return None


def _allows_body(code: int) -> bool:
    return code not in (HTTPStatus.NO_CONTENT, HTTPStatus.NOT_MODIFIED)


def parse_status_code(raw: str) -> int | None:
    """Parse an optionally signed decimal status code, or return None."""
    match = _STATUS_CODE_RE.fullmatch(raw)
    if match is None:
        return None
    sign, digits = match.groups()
    digits = digits.lstrip("0") or "0"
    if len(digits) > _MAX_STATUS_DIGITS:
        return None
    return int(sign + digits)


def create_app(
    settings: Settings | None = None,
    resolve_ip: Callable[[], str] | None = None,
) -> FastAPI:
    """Create the diagnostic server application.

    Args:
        settings: Loaded settings; defaults are used when omitted.
        resolve_ip: Returns the host address reported in snapshots
            (for testing). Defaults to probing the configured address.
    """
    if settings is None:
        settings = Settings()
    cfg = settings.server
    if resolve_ip is None:
        resolve_ip = functools.partial(get_outbound_ip, cfg.probe_host, cfg.probe_port)
    max_exec_time = int(cfg.max_exec_time * SECOND)
    too_long = f"execution time must under {cfg.max_exec_time:.0f} second"

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if not cfg.template_path.is_file():
            logger.warning(
                "Template %s not found; HTML endpoints will return 500 until it exists.",
                cfg.template_path,
            )
        logger.info("devserver ready (port=%d)", cfg.port)
        yield
        logger.info("devserver stopped")

    app = FastAPI(
        title="devserver",
        description="Diagnostic HTTP server for exercising clients, proxies and load balancers",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.upgrader = Upgrader(check_origin=cfg.check_origin)

    def _snapshot() -> InfoSnapshot:
        return InfoSnapshot.capture(cfg.welcome_message, resolve_ip)

    @app.exception_handler(DevServerError)
    async def environment_error(request: Request, exc: DevServerError) -> PlainTextResponse:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc, exc_info=exc)
        return PlainTextResponse(f"internal server error: {exc}", status_code=500)

    # -------------------------------------------------------------------
    # Informational endpoints
    # -------------------------------------------------------------------

    @app.api_route("/", methods=METHODS, response_class=PlainTextResponse)
    def text_snapshot() -> str:
        return str(_snapshot())

    @app.api_route("/content/json", methods=METHODS)
    @app.api_route("/json/", methods=METHODS)
    def json_snapshot() -> JSONResponse:
        return JSONResponse(_snapshot().to_wire())

    @app.api_route("/content/html", methods=METHODS)
    @app.api_route("/html/", methods=METHODS)
    def html_snapshot() -> HTMLResponse:
        body = render_snapshot(cfg.template_path, _snapshot())
        return HTMLResponse(body, headers={"Content-Type": "text/html; charset=UTF-8"})

    # -------------------------------------------------------------------
    # Diagnostic endpoints
    # -------------------------------------------------------------------

    @app.api_route("/status/{code}", methods=METHODS)
    async def status(code: str) -> Response:
        value = parse_status_code(code)
        phrase = reason_phrase(value) if value is not None else None
        if phrase is None:
            return PlainTextResponse(INVALID_STATUS_CODE, status_code=400)
        if value < 200:
            # A 1xx code cannot be the final response; answer 200 carrying it.
            return PlainTextResponse(f"{value} {phrase}")
        if not _allows_body(value):
            return Response(status_code=value)
        return PlainTextResponse(f"{value} {phrase}", status_code=value)

    @app.api_route("/exectime/{duration}", methods=METHODS)
    async def exec_time(duration: str) -> PlainTextResponse:
        try:
            nanoseconds = parse_duration(duration)
        except DurationError as e:
            logger.debug("Rejected duration %r: %s", duration, e)
            return PlainTextResponse(INVALID_DURATION, status_code=400)
        if nanoseconds > max_exec_time:
            return PlainTextResponse(too_long, status_code=400)

        if nanoseconds > 0:
            await asyncio.sleep(nanoseconds / SECOND)
        return PlainTextResponse(f"got duration {format_duration(nanoseconds)}")

    @app.api_route("/redirect", methods=METHODS)
    async def redirect() -> RedirectResponse:
        return RedirectResponse(cfg.redirect_url, status_code=302)

    # -------------------------------------------------------------------
    # WebSocket echo
    # -------------------------------------------------------------------

    @app.websocket("/ws/echo")
    async def ws_echo(websocket: WebSocket) -> None:
        await serve_echo(websocket, app.state.upgrader)

    @app.api_route("/ws/echo", methods=METHODS)
    async def ws_echo_without_upgrade(request: Request) -> PlainTextResponse:
        logger.warning(
            "upgrade: client %s is not using the websocket protocol",
            request.client.host if request.client else "unknown",
        )
        return PlainTextResponse("Bad Request", status_code=400)

    return app


def run(settings: Settings) -> None:
    """Serve the application until interrupted.

    uvicorn logs bind failures and exits the process with status 1.
    """
    app = create_app(settings)
    uvicorn.run(
        app,
        host=settings.server.host,
        port=settings.server.port,
        log_level=settings.logging.level.lower(),
    )
