import logging
import time
import traceback
import uuid
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv

# Uvicorn nereden çalışırsa çalışsın .env proje kökünden yüklensin
_PROJ_ROOT = Path(__file__).resolve().parent.parent
load_dotenv(_PROJ_ROOT / ".env")

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from sqlmodel import Session

from app.api.catalog import router as catalog_router
from app.api.merchant import router as merchant_router
from app.api.orders import router as orders_router
from app.core.config import settings
from app.core.database import engine, init_db, ping_db
from app.core.errors import GiftError
from app.core.rate_limit import client_ip, limiter
from app.logging import setup_logging
from app.models import ErrorLog, SecurityLog
from app.services.container import build_services
from app.services.seed import seed_demo_data

setup_logging(level=logging.INFO)
log = logging.getLogger("giftlink")


def _cors_origins_list() -> list[str]:
    if not settings.cors_origins or settings.cors_origins.strip() == "*":
        return ["*"]
    return [o.strip() for o in settings.cors_origins.split(",") if o.strip()]


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    if settings.seed_demo_data:
        seed_demo_data(engine)
    # Test/bağımlılık enjeksiyonu için önceden kurulmuş servisler korunur
    if getattr(app.state, "services", None) is None:
        app.state.services = build_services(settings, engine)
    log.info("Gift services ready (storage=%s, env=%s)", settings.storage_backend, settings.environment)
    yield


app = FastAPI(
    title="Giftlink API",
    description="Hediye siparişi, paylaşılabilir link ve merchant redeem API",
    lifespan=lifespan,
)
app.state.limiter = limiter
app.state.services = None


def _error_response(request: Request, status_code: int, detail: str, code: str | None = None) -> JSONResponse:
    rid = getattr(request.state, "request_id", None)
    body = {"error": detail, "status_code": status_code}
    if code:
        body["code"] = code
    if rid:
        body["request_id"] = rid
    return JSONResponse(status_code=status_code, content=body)


def _rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    try:
        with Session(engine) as db:
            db.add(SecurityLog(event="rate_limit", ip=client_ip(request), endpoint=request.url.path, detail=str(exc.detail)))
            db.commit()
    except Exception as e:
        log.warning("SecurityLog rate_limit write failed: %s", e)
    return _error_response(request, 429, "Too many requests. Please wait a minute.", code="RateLimited")


app.add_exception_handler(RateLimitExceeded, _rate_limit_handler)


@app.exception_handler(GiftError)
def gift_error_handler(request: Request, exc: GiftError) -> JSONResponse:
    if exc.status_code >= 500:
        log.error("Internal gift error on %s: %s (%s)", request.url.path, exc.message, exc.kind)
        return _error_response(request, 500, "Unexpected server error.")
    return _error_response(request, exc.status_code, exc.message, code=exc.kind)


@app.exception_handler(RequestValidationError)
def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errs = exc.errors()
    log.info("Request validation error (422): path=%s method=%s", request.url.path, request.method)
    first = errs[0] if errs else {}
    loc = ".".join(str(p) for p in (first.get("loc") or []) if p != "body")
    msg = first.get("msg") or "Invalid request."
    rid = getattr(request.state, "request_id", None)
    body = {
        "error": f"{loc}: {msg}" if loc else msg,
        "status_code": 422,
        "code": "ValidationError",
        "detail": [{"loc": list(e.get("loc") or []), "msg": e.get("msg"), "type": e.get("type")} for e in errs],
    }
    if rid:
        body["request_id"] = rid
    return JSONResponse(status_code=422, content=body)


@app.exception_handler(HTTPException)
def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return _error_response(request, exc.status_code, exc.detail if isinstance(exc.detail, str) else str(exc.detail))


@app.exception_handler(Exception)
def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    log.exception("Unhandled exception: path=%s %s", request.url.path, exc)
    try:
        with Session(engine) as db:
            db.add(ErrorLog(
                endpoint=request.url.path,
                method=request.method,
                error_message=str(exc)[:2000],
                stack_trace=traceback.format_exc()[:10000],
            ))
            db.commit()
    except Exception as e:
        log.warning("ErrorLog write failed: %s", e)
    return JSONResponse(status_code=500, content={"error": "Unexpected server error.", "status_code": 500})


@app.middleware("http")
async def request_id_and_latency(request: Request, call_next):
    request.state.request_id = str(uuid.uuid4())
    start = time.perf_counter()
    response = await call_next(request)
    latency_ms = (time.perf_counter() - start) * 1000
    response.headers["X-Request-ID"] = request.state.request_id
    log.info(
        "request_id=%s method=%s path=%s status=%s latency_ms=%.2f",
        request.state.request_id,
        request.method,
        request.url.path,
        response.status_code,
        latency_ms,
    )
    return response


app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins_list(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(catalog_router)
app.include_router(orders_router)
app.include_router(merchant_router)


@app.get("/health")
def health():
    return {
        "status": "ok",
        "database": "ok" if ping_db() else "error",
        "storage": settings.storage_backend,
    }
