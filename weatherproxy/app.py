"""CWA weather proxy: FastAPI application serving cached city forecasts."""

import logging
import time
from datetime import timedelta
from pathlib import Path

from fastapi import APIRouter, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, HTMLResponse, JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from weatherproxy.config.schema import ProxyConfig
from weatherproxy.errors import InternalProxyError, ProxyError
from weatherproxy.ingest.cwa_client import CwaClient
from weatherproxy.ingest.forecast_cache import ForecastCache
from weatherproxy.ingest.forecast_fetcher import ForecastFetcher
from weatherproxy.models.common import utc_now_iso

logger = logging.getLogger(__name__)

INDEX_HTML = Path(__file__).parent / "static" / "index.html"

ENDPOINTS = {
    "getWeather": "GET /api/weather/:city",
    "health": "GET /api/health",
    "debug": "GET /api/debug",
    "clearCache": "POST /api/cache/clear",
    "discovery": "GET /api",
}

router = APIRouter()


def create_app(
    config: ProxyConfig,
    cache: ForecastCache | None = None,
    client: CwaClient | None = None,
) -> FastAPI:
    """Build the app around an explicitly constructed cache and upstream client."""
    if cache is None:
        cache = ForecastCache(ttl=timedelta(minutes=config.cache.ttl_minutes))
    if client is None:
        client = CwaClient(
            api_key=config.upstream.api_key,
            base_url=config.upstream.base_url,
            dataset_id=config.upstream.dataset_id,
            timeout=config.upstream.timeout_seconds,
        )

    app = FastAPI(
        title="CWA Weather Proxy",
        version="0.1.0",
        docs_url="/docs" if config.is_development else None,
        redoc_url=None,
    )
    # Last added is outermost: CORS headers also land on mapped 500s.
    app.add_middleware(BaseHTTPMiddleware, dispatch=_catch_unhandled)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(config.server.cors_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.config = config
    app.state.cache = cache
    app.state.fetcher = ForecastFetcher(config, client, cache)
    app.state.started_at = time.monotonic()

    app.include_router(router)
    app.add_exception_handler(ProxyError, _proxy_error_handler)
    app.add_exception_handler(StarletteHTTPException, _http_error_handler)
    return app


# ── Error handlers ──────────────────────────────────────────────


async def _proxy_error_handler(request: Request, exc: ProxyError) -> JSONResponse:
    logger.warning("%s %s -> %d %s", request.method, request.url.path, exc.status_code, exc.message)
    return JSONResponse(exc.to_body(), status_code=exc.status_code)


async def _http_error_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    if exc.status_code == 404:
        return JSONResponse(
            {
                "success": False,
                "error": "Not found",
                "message": f"No route for {request.method} {request.url.path}",
                "availableEndpoints": list(ENDPOINTS.values()),
            },
            status_code=404,
        )
    return JSONResponse(
        {"success": False, "error": "HTTP error", "message": str(exc.detail)},
        status_code=exc.status_code,
        headers=getattr(exc, "headers", None),
    )


async def _catch_unhandled(request: Request, call_next) -> Response:
    """Map any escaped exception to a 500 body; runs inside CORSMiddleware."""
    try:
        return await call_next(request)
    except Exception as e:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        config: ProxyConfig = request.app.state.config
        message = str(e) if config.is_development else "Internal server error"
        err = InternalProxyError(message)
        return JSONResponse(err.to_body(), status_code=err.status_code)


# ── Weather ─────────────────────────────────────────────────────


@router.get("/api/weather/{city}")
def get_city_weather(city: str, request: Request):
    """Forecast for one supported city, served from cache when fresh."""
    fetcher: ForecastFetcher = request.app.state.fetcher
    lookup = fetcher.fetch(city)
    return {
        "success": True,
        "data": lookup.result.to_dict(),
        "cached": lookup.cached,
    }


# ── Operations ──────────────────────────────────────────────────


@router.get("/api/health")
def get_health(request: Request):
    cache: ForecastCache = request.app.state.cache
    return {
        "status": "OK",
        "uptime": round(time.monotonic() - request.app.state.started_at, 3),
        "timestamp": utc_now_iso(),
        "cache_size": cache.size(),
    }


@router.get("/api/debug")
def get_debug(request: Request):
    """Environment and cache introspection. Never exposes the API key itself."""
    config: ProxyConfig = request.app.state.config
    cache: ForecastCache = request.app.state.cache
    api_key = config.upstream.api_key
    entries = []
    for key in cache.keys():
        captured = cache.captured_at(key)
        entries.append(
            {"key": key, "captured_at": captured.isoformat() if captured else None}
        )
    return {
        "environment": config.server.environment.value,
        "host": config.server.host,
        "port": config.server.port,
        "cors_origins": list(config.server.cors_origins),
        "upstream_base_url": config.upstream.base_url,
        "upstream_timeout_seconds": config.upstream.timeout_seconds,
        "api_key_configured": bool(api_key),
        "api_key_length": len(api_key),
        "supported_cities": config.city_map,
        "cache": {
            "size": cache.size(),
            "ttl_minutes": cache.ttl.total_seconds() / 60,
            "entries": entries,
        },
        "timestamp": utc_now_iso(),
    }


@router.post("/api/cache/clear")
def clear_cache(request: Request):
    cache: ForecastCache = request.app.state.cache
    cleared = cache.clear()
    logger.info("Cache cleared (%d entries)", cleared)
    return {
        "success": True,
        "message": f"Cleared {cleared} cached entries",
        "cleared": cleared,
    }


# ── Discovery ───────────────────────────────────────────────────


@router.get("/")
@router.get("/api")
def get_discovery(request: Request):
    if _wants_html(request):
        if INDEX_HTML.exists():
            return FileResponse(INDEX_HTML, media_type="text/html")
        return HTMLResponse("<h1>Page not found</h1>", status_code=404)

    config: ProxyConfig = request.app.state.config
    cities = list(config.city_map)
    return {
        "message": "CWA weather forecast proxy",
        "endpoints": ENDPOINTS,
        "supportedCities": cities,
        "example": f"/api/weather/{cities[0]}" if cities else None,
    }


def _wants_html(request: Request) -> bool:
    accept = request.headers.get("accept", "").lower()
    return "text/html" in accept and "application/json" not in accept
