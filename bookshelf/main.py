"""
FastAPI application — the catalog API consumed by the explorer.

Features:
- Book CRUD over DynamoDB with a Redis-cached listing
- Cover image upload/delete over S3
- CORS restrictions and security headers
- Prometheus metrics endpoint
- Structured JSON logging
- Health / readiness / liveness probes
"""

from __future__ import annotations

import time
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import Counter, Histogram, generate_latest

from bookshelf.config import get_settings
from bookshelf.logging_config import setup_logging
from bookshelf.middleware.security_headers import SecurityHeadersMiddleware
from bookshelf.routers import books, covers

settings = get_settings()
setup_logging(settings.log_level, settings.log_format)
logger = structlog.get_logger()

# ── Prometheus metrics ──
REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"],
)
REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint"],
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and graceful shutdown."""
    logger.info(
        "catalog_api_starting",
        environment=settings.environment,
        table=settings.books_table_name,
    )
    yield
    logger.info("catalog_api_shutting_down")
    from bookshelf.services.cache import close_redis
    await close_redis()


app = FastAPI(
    title="Bookshelf Catalog",
    description="Book catalog API: records in DynamoDB, covers in S3",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# ── CORS ──
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── Security headers ──
app.add_middleware(SecurityHeadersMiddleware)


# ── Request metrics middleware ──
@app.middleware("http")
async def metrics_middleware(request: Request, call_next):
    start = time.time()
    response = await call_next(request)
    duration = time.time() - start

    route = request.scope.get("route")
    endpoint = getattr(route, "path", request.url.path)
    REQUEST_COUNT.labels(
        method=request.method,
        endpoint=endpoint,
        status=response.status_code,
    ).inc()
    REQUEST_LATENCY.labels(
        method=request.method,
        endpoint=endpoint,
    ).observe(duration)

    return response


# ── Routers ──
app.include_router(books.router)
app.include_router(covers.router)


# ── Health / Readiness / Liveness ──
@app.get("/health", tags=["Health"])
async def health():
    return {"status": "healthy", "service": "catalog"}


@app.get("/ready", tags=["Health"])
async def readiness():
    """Readiness probe — checks DynamoDB and Redis connectivity."""
    checks = {}
    try:
        from bookshelf.database import get_books_table
        table = get_books_table()
        await run_in_threadpool(lambda: table.table_status)
        checks["dynamodb"] = "ok"
    except Exception:
        checks["dynamodb"] = "error"

    if settings.cache_enabled:
        try:
            from bookshelf.services.cache import get_redis
            r = await get_redis()
            await r.ping()
            checks["redis"] = "ok"
        except Exception:
            checks["redis"] = "error"

    all_ok = all(v == "ok" for v in checks.values())
    return JSONResponse(
        status_code=200 if all_ok else 503,
        content={"status": "ready" if all_ok else "not_ready", "checks": checks},
    )


@app.get("/live", tags=["Health"])
async def liveness():
    return {"status": "alive"}


# ── Prometheus metrics endpoint ──
@app.get("/metrics", tags=["Monitoring"])
async def metrics():
    from starlette.responses import Response
    return Response(content=generate_latest(), media_type="text/plain")
