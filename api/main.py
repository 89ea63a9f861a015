import logging
import time
import uuid
from datetime import datetime
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.responses import JSONResponse

from api.settings import Settings, load_settings
from services.cache import InMemoryCache

API_VERSION = "0.3.0"


class _DefaultRequestIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:  # pragma: no cover
        if not hasattr(record, "request_id"):
            record.request_id = "-"
        return True


def _configure_logging(settings: Settings) -> logging.Logger:
    logger = logging.getLogger("coursepace")
    logger.setLevel(logging.INFO)
    logger.propagate = False

    # Avoid duplicate handlers (e.g. reload/test runner).
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(
        fmt="%(asctime)s %(levelname)s [%(name)s] [request_id=%(request_id)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(logging.INFO)
    stream_handler.setFormatter(formatter)
    stream_handler.addFilter(_DefaultRequestIdFilter())
    logger.addHandler(stream_handler)

    log_path = None
    if settings.log_dir is not None:
        settings.log_dir.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_path = settings.log_dir / f"backend_{timestamp}.log"

        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setLevel(logging.INFO)
        file_handler.setFormatter(formatter)
        file_handler.addFilter(_DefaultRequestIdFilter())
        logger.addHandler(file_handler)

    logger.info("backend_start", extra={"request_id": "-"})
    logger.info("log_file=%s", str(log_path), extra={"request_id": "-"})
    return logger


settings = load_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.settings = settings
    app.state.logger = _configure_logging(settings)
    app.state.profile_cache = InMemoryCache(max_items=settings.profile_cache_items)

    yield


app = FastAPI(
    title="CoursePace API",
    description="Plan d'allure ajuste a la pente pour traces GPX",
    version=API_VERSION,
    lifespan=lifespan,
)


@app.middleware("http")
async def request_logging_middleware(request: Request, call_next):
    logger: logging.Logger = request.app.state.logger
    request_id = str(uuid.uuid4())
    request.state.request_id = request_id

    start = time.perf_counter()
    try:
        response = await call_next(request)
    except Exception:
        duration_ms = (time.perf_counter() - start) * 1000
        logger.exception(
            "request_unhandled_exception",
            extra={
                "request_id": request_id,
                "method": request.method,
                "path": request.url.path,
                "duration_ms": round(duration_ms, 2),
            },
        )
        response = JSONResponse(
            status_code=500,
            content={"detail": "Internal Server Error", "request_id": request_id},
        )

    duration_ms = (time.perf_counter() - start) * 1000
    response.headers["X-Request-ID"] = request_id

    logger.info(
        "request",
        extra={
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "status": getattr(response, "status_code", None),
            "duration_ms": round(duration_ms, 2),
        },
    )
    return response

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_origins),
    allow_origin_regex=r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$",
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

from api.routes.course import router as course_router
from api.routes.plan import router as plan_router

app.include_router(course_router)
app.include_router(plan_router)

# Same routes under /api/* for the web client
app.include_router(course_router, prefix="/api", include_in_schema=False)
app.include_router(plan_router, prefix="/api", include_in_schema=False)


def get_profile_cache() -> InMemoryCache:
    return app.state.profile_cache


@app.get("/")
async def root():
    return {
        "message": "CoursePace API",
        "version": API_VERSION,
        "docs": "/docs",
        "status": "operational",
    }


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    logger = logging.getLogger("coursepace")
    try:
        stats = get_profile_cache().stats()
        result = {
            "status": "healthy",
            "profile_cache": {"size": stats.size, "hits": stats.hits, "misses": stats.misses},
        }
        logger.info("health_ok", extra={"request_id": "-"})
        return result
    except Exception as e:
        logger.exception("health_failed", extra={"request_id": "-"})
        raise HTTPException(status_code=503, detail=f"Service unavailable: {str(e)}")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info",
    )
