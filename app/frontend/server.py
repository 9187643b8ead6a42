"""Development server for the single-page frontend.

Serves the rendered `MessageView` page and proxies `/api/*` to the backend so
the browser only ever talks to one origin during development. Run with
`uvicorn app.frontend.server:app --port 5173`.
"""

import logging
from contextlib import asynccontextmanager

import httpx
import uvicorn
from fastapi import APIRouter, FastAPI, HTTPException, Request, status
from fastapi.responses import HTMLResponse, Response

from app.core.config import Settings, settings as default_settings
from app.core.logging import configure_logging
from app.frontend.view import MessageView

logger = logging.getLogger(__name__)

# Headers scoped to a single connection; never forwarded by the proxy.
HOP_BY_HOP_HEADERS = frozenset(
    {
        "connection",
        "keep-alive",
        "proxy-authenticate",
        "proxy-authorization",
        "te",
        "trailers",
        "transfer-encoding",
        "upgrade",
        "host",
        "content-length",
        "content-encoding",
    }
)

PROXY_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "HEAD"]

# Added to every forwarded request; seeing it on an incoming call means API_BASE_URL points back here.
VIA_TOKEN = "1.1 message-frontend"


def _forwardable(headers) -> list[tuple[str, str]]:
    """Drop hop-by-hop headers, keeping repeated ones (e.g. Set-Cookie) as separate pairs."""
    return [(key, value) for key, value in headers if key.lower() not in HOP_BY_HOP_HEADERS]


def _api_client(request: Request) -> httpx.AsyncClient:
    """Build a client pointed at the backend, honouring a test transport if set."""
    settings: Settings = request.app.state.settings
    return httpx.AsyncClient(base_url=settings.API_BASE_URL, transport=request.app.state.transport)


def _view_client(request: Request) -> httpx.AsyncClient:
    """Client the page's view fetches with.

    Without `VIEW_BASE_URL` the relative path resolves against the page's own
    origin and is served in-process by the `/api` proxy below, the same route a
    browser script on this page would hit.
    """
    settings: Settings = request.app.state.settings
    if settings.VIEW_BASE_URL:
        return httpx.AsyncClient(base_url=settings.VIEW_BASE_URL, transport=request.app.state.transport)
    return httpx.AsyncClient(base_url=str(request.base_url), transport=httpx.ASGITransport(app=request.app))


def _upstream_target(request: Request) -> str:
    """Path and query exactly as the client sent them, still percent-encoded."""
    target = request.scope.get("raw_path") or request.url.path.encode()
    query = request.scope.get("query_string", b"")
    if query:
        target += b"?" + query
    return target.decode("latin-1")


router = APIRouter()


@router.get("/", response_class=HTMLResponse)
async def index(request: Request) -> HTMLResponse:
    """Mount a fresh view (one fetch) and return the rendered page."""

    settings: Settings = request.app.state.settings
    async with _view_client(request) as client:
        view = MessageView(client, path=settings.API_MESSAGE_PATH, title=settings.PROJECT_NAME)
        await view.mount()
    return HTMLResponse(view.render())


@router.api_route("/api/{path:path}", methods=PROXY_METHODS)
async def proxy_api(path: str, request: Request) -> Response:
    """Forward an API call to the backend and relay its answer unchanged."""

    if any(VIA_TOKEN in value for value in request.headers.getlist("via")):
        raise HTTPException(
            status_code=status.HTTP_508_LOOP_DETECTED,
            detail="API_BASE_URL points back at the frontend server.",
        )

    headers = _forwardable(request.headers.items())
    headers.append(("via", VIA_TOKEN))
    async with _api_client(request) as client:
        try:
            upstream = await client.request(
                request.method,
                _upstream_target(request),
                headers=headers,
                content=await request.body(),
            )
        except httpx.HTTPError as exc:
            logger.warning("Proxy request to %s failed: %s", client.base_url, exc)
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail=f"Backend at {client.base_url} is unreachable.",
            )

    response = Response(content=upstream.content, status_code=upstream.status_code)
    for key, value in _forwardable(upstream.headers.multi_items()):
        response.headers.append(key, value)
    return response


def create_frontend_application(
    settings: Settings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Assemble the frontend dev server; `transport` replaces the network in tests."""

    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(settings.LOG_LEVEL)
        logger.info(
            "Frontend is running at http://localhost:%s (proxying /api to %s)",
            settings.FRONTEND_PORT,
            settings.API_BASE_URL,
        )
        yield

    application = FastAPI(title=f"{settings.PROJECT_NAME} frontend", lifespan=lifespan)
    application.state.settings = settings
    application.state.transport = transport
    application.include_router(router)
    return application


app = create_frontend_application()


if __name__ == "__main__":
    uvicorn.run(app, host=default_settings.FRONTEND_HOST, port=default_settings.FRONTEND_PORT)
