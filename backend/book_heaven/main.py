import logging
import time
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from book_heaven.api.router import api_router
from book_heaven.core.config import settings
from book_heaven.core.errors import ServiceError
from book_heaven.core.logging import configure_logging, ensure_request_id, request_id_ctx_var

configure_logging(settings.log_level, settings.app_name, settings.environment)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.app_name)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

RATE_LIMIT_WINDOW_SECONDS = 60
_rate_limit_store: dict[str, list[float]] = {}
_last_sweep = 0.0


def _sweep_idle_clients(now: float) -> None:
    global _last_sweep
    if now - _last_sweep < RATE_LIMIT_WINDOW_SECONDS:
        return
    _last_sweep = now
    idle = [
        ip
        for ip, history in _rate_limit_store.items()
        if not history or now - history[-1] >= RATE_LIMIT_WINDOW_SECONDS
    ]
    for ip in idle:
        del _rate_limit_store[ip]


def _over_rate_limit(client_ip: str, now: float) -> bool:
    _sweep_idle_clients(now)
    history = [t for t in _rate_limit_store.get(client_ip, []) if now - t < RATE_LIMIT_WINDOW_SECONDS]
    if len(history) >= settings.rate_limit_per_min:
        _rate_limit_store[client_ip] = history
        return True
    history.append(now)
    _rate_limit_store[client_ip] = history
    return False


@app.middleware("http")
async def add_request_id(request: Request, call_next):
    request_id = ensure_request_id(request.headers.get("X-Request-ID"))
    request_id_ctx_var.set(request_id)
    started = time.time()
    client_ip = request.client.host if request.client else "unknown"
    if settings.environment.lower() == "prod" and _over_rate_limit(client_ip, started):
        logger.warning("Rate limit exceeded", extra={"client_ip": client_ip, "path": request.url.path})
        response = JSONResponse(status_code=429, content={"detail": "Rate limit exceeded"})
    else:
        response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    logger.info(
        "Request handled",
        extra={
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "duration_ms": round((time.time() - started) * 1000, 1),
        },
    )
    return response


@app.exception_handler(ServiceError)
async def handle_service_error(request: Request, exc: ServiceError):
    logger.warning(
        exc.message,
        extra={
            "error": type(exc).__name__,
            "status_code": exc.status_code,
            "path": request.url.path,
            "method": request.method,
        },
    )
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.get("/health")
def health():
    return {"status": "ok", "service": settings.app_name, "environment": settings.environment}


app.include_router(api_router)
