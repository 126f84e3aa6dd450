"""
Hunt Radar - HTTP API

A lightweight FastAPI server exposing Product Hunt top products, Algolia
search, timeframe resolution and the chat agent.

Usage:
    uvicorn agent.api:app --host 0.0.0.0 --port 8787

Or run directly:
    python -m agent.api

Security:
    Set HUNT_API_KEY env var to enable API key authentication.
    Clients must pass X-API-Key header or ?api_key= query parameter.
    If HUNT_API_KEY is not set, authentication is disabled (open access).
"""

import os
import sys
import time
from collections import defaultdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from fastapi import Depends, FastAPI, HTTPException, Query, Request, Security
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.security import APIKeyHeader, APIKeyQuery
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel, Field
from starlette.middleware.base import BaseHTTPMiddleware

from _version import __version__
from main import load_config, validate_config
from services.tools import TOOL_DEFINITIONS, HuntTools, build_tools
from timeframe.clock import TIMEZONE_ERRORS
from timeframe.parser import resolve_timeframe
from timeframe.query import SEARCH_LIMIT_BOUNDS, TOOL_LIMIT_BOUNDS, PostsOrder
from utils import llm_client
from utils.logging_config import get_logger, setup_from_config

logger = get_logger("api")

CONFIG = load_config(os.environ.get("HUNT_CONFIG", "config.yaml"))
setup_from_config(CONFIG)
validate_config(CONFIG)


# ============================================================
# Security: API Key Authentication
# ============================================================

API_KEY = os.environ.get("HUNT_API_KEY", "")

api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)
api_key_query = APIKeyQuery(name="api_key", auto_error=False)


async def verify_api_key(
    header_key: Optional[str] = Security(api_key_header),
    query_key: Optional[str] = Security(api_key_query),
) -> Optional[str]:
    """Verify API key from header or query parameter."""
    if not API_KEY:
        return None  # Auth disabled
    key = header_key or query_key
    if not key or key != API_KEY:
        raise HTTPException(status_code=401, detail="Invalid or missing API key")
    return key


# ============================================================
# Security: Rate Limiting Middleware (chat only)
# ============================================================

# Per-IP request timestamps for /api/chat
_rate_limit_store: dict[str, list[float]] = defaultdict(list)
RATE_LIMIT_REQUESTS = int(os.environ.get("HUNT_CHAT_RATE_LIMIT", "20"))
RATE_LIMIT_WINDOW = 60  # seconds


class ChatRateLimitMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        if request.url.path != "/api/chat" or request.method != "POST":
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        now = time.time()
        recent = [t for t in _rate_limit_store[client_ip] if now - t < RATE_LIMIT_WINDOW]

        if len(recent) >= RATE_LIMIT_REQUESTS:
            _rate_limit_store[client_ip] = recent
            return JSONResponse(
                status_code=429,
                content={"error": "Rate limit exceeded. Try again later."},
                headers={"Retry-After": str(RATE_LIMIT_WINDOW)},
            )

        recent.append(now)
        _rate_limit_store[client_ip] = recent
        return await call_next(request)


app = FastAPI(
    title="Hunt Radar API",
    description="Product Hunt top products, search and chat",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(ChatRateLimitMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "X-API-Key"],
)

if not API_KEY:
    logger.info("HUNT_API_KEY not set, API is open without authentication")


@app.exception_handler(Exception)
async def server_error_handler(request: Request, exc: Exception):
    logger.error("Unhandled error on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=500, content={"error": "Server error", "detail": str(exc)})


# ============================================================
# Models & dependencies
# ============================================================


class ChatRequest(BaseModel):
    message: str = Field("", description="User message for the Product Hunt agent")


async def get_tools():
    """Per-request tool set; the HTTP session is closed after the response."""
    tools = build_tools(CONFIG)
    try:
        yield tools
    finally:
        await tools.close()


def _default_tz() -> str:
    return CONFIG.get("timeframe", {}).get("default_timezone", "America/New_York")


def _bad_request(message: str) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": message})


# ============================================================
# Endpoints
# ============================================================


@app.get("/api/health")
async def health():
    """Health check endpoint."""
    return {"ok": True}


@app.get("/api/top", dependencies=[Security(verify_api_key)])
async def top_products(
    date: Optional[str] = Query(None, description="Day in YYYY-MM-DD format (default: today, UTC)"),
    limit: int = Query(3, description="Number of posts (1-10)"),
    tools: HuntTools = Depends(get_tools),
):
    """Top products for a single UTC day."""
    date = date or datetime.now(timezone.utc).strftime("%Y-%m-%d")
    posts = await tools.producthunt.get_top_products_by_day(
        date, limit, tz="UTC", bounds=tools.limit_bounds
    )
    return {"posts": posts, "date": date}


@app.get("/api/top/timeframe", dependencies=[Security(verify_api_key)])
async def top_products_by_timeframe(
    timeframe: Optional[str] = Query(None, description="today, this-week, 'last 7 days', ..."),
    tz: Optional[str] = Query(None, description="IANA timezone"),
    limit: int = Query(3, description=f"Number of posts ({TOOL_LIMIT_BOUNDS[0]}-{TOOL_LIMIT_BOUNDS[1]})"),
    order: str = Query(PostsOrder.RANKING.value, description="RANKING, VOTES, NEWEST or FEATURED_AT"),
    tools: HuntTools = Depends(get_tools),
):
    """Ranked products inside a flexible timeframe."""
    tz = tz or _default_tz()
    try:
        window, posts = await tools.producthunt.get_top_products_by_timeframe(
            timeframe,
            tz,
            limit,
            PostsOrder.parse(order),
            clock=tools.clock,
            bounds=tools.limit_bounds,
        )
    except TIMEZONE_ERRORS:
        return _bad_request(f"Unknown timezone: {tz}")
    return {"posts": posts, "window": window.to_dict()}


@app.get("/api/timeframe", dependencies=[Security(verify_api_key)])
async def timeframe_window(
    timeframe: Optional[str] = Query(None),
    tz: Optional[str] = Query(None, description="IANA timezone"),
):
    """Resolve a timeframe expression into its UTC window."""
    tz = tz or _default_tz()
    try:
        return resolve_timeframe(timeframe, tz).to_dict()
    except TIMEZONE_ERRORS:
        return _bad_request(f"Unknown timezone: {tz}")


@app.get("/api/search", dependencies=[Security(verify_api_key)])
async def search(
    q: str = Query("", description="Search keywords"),
    limit: int = Query(10, description=f"Number of hits ({SEARCH_LIMIT_BOUNDS[0]}-{SEARCH_LIMIT_BOUNDS[1]})"),
    tools: HuntTools = Depends(get_tools),
):
    """Search Product Hunt posts via Algolia."""
    q = q.strip()
    if not q:
        return _bad_request("Missing q")
    hits = await tools.algolia.search(q, limit)
    return {"hits": hits, "q": q}


@app.post("/api/chat", dependencies=[Security(verify_api_key)])
async def chat(
    request: Optional[ChatRequest] = None,
    tools: HuntTools = Depends(get_tools),
):
    """Chat with the Product Hunt agent."""
    message = (request.message if request else "").strip()
    if not message:
        return _bad_request("Missing message")
    try:
        reply = await llm_client.chat(message, tools)
    except Exception as e:
        logger.error("Chat failed: %s", e)
        return JSONResponse(status_code=500, content={"error": "Chat failed", "detail": str(e)})
    return {"reply": reply}


@app.get("/api/tools", dependencies=[Security(verify_api_key)])
async def get_tool_definitions():
    """Tool definitions for function calling."""
    return {"name": "hunt-radar", "tools": TOOL_DEFINITIONS}


# ============================================================
# Static front end
# ============================================================

_static_dir = Path(__file__).parent / "static"
if _static_dir.is_dir():
    app.mount("/", StaticFiles(directory=str(_static_dir), html=True), name="web")


# ============================================================
# Main
# ============================================================

if __name__ == "__main__":
    import uvicorn

    port = int(os.environ.get("PORT", "8787"))
    print(f"\n  Server running on http://localhost:{port}\n")
    uvicorn.run(app, host="0.0.0.0", port=port, log_level="warning")
