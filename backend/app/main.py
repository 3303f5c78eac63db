"""
Clinic Desk Backend — inventory and billing API for the clinic front desk.

ARCHITECTURE:
- React front end: medicine cart, invoice screen, inventory, bills ledger
- FastAPI backend: stock rules and invoice records (this app)
- In-memory stores: built at startup, cleared on restart

STOCK MODEL:
- Stock never goes negative; short requests are refused, never clamped
- Checkout re-validates, deducts and stores the invoice under one lock
- Invoices are snapshots; later price changes do not touch them
"""
import logging
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse

from app.api.routes import invoices, medicines, stock
from app.core.config import Settings, settings as default_settings
from app.core.exceptions import ValidationError, error_body
from app.core.rate_limiter import RateLimitMiddleware
from app.db.init_db import init_db

logger = logging.getLogger(__name__)


async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Malformed bodies and params are a 400 with one entry per bad field."""
    details = [
        {
            "field": ".".join(str(part) for part in err.get("loc", ())[1:]) or "body",
            "message": err.get("msg", "Invalid value"),
        }
        for err in exc.errors()
    ]
    logger.info(f"Validation failed on {request.method} {request.url.path}: {len(details)} error(s)")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": error_body(ValidationError.code, "Validation failed", details)},
    )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the API with its own stores. Tests call this for a clean slate."""
    settings = settings or default_settings

    app = FastAPI(
        title=settings.APP_NAME,
        description="Medicine inventory, stock checks and invoices for the clinic front desk.",
        version="1.0.0",
    )
    app.state.settings = settings
    app.state.db = init_db(seed=settings.SEED_SAMPLE_DATA)
    logger.info(
        f"Store ready: {len(app.state.db.medicines)} medicines "
        f"(seed={'on' if settings.SEED_SAMPLE_DATA else 'off'})"
    )

    app.add_exception_handler(RequestValidationError, request_validation_handler)

    app.add_middleware(TrustedHostMiddleware, allowed_hosts=settings.ALLOWED_HOSTS)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Accept", "Origin"],
        max_age=600,  # Cache preflight for 10 minutes
        expose_headers=["Content-Type", "Content-Disposition"],
    )

    if settings.RATE_LIMIT_ENABLED:
        app.add_middleware(
            RateLimitMiddleware,
            requests=settings.RATE_LIMIT_REQUESTS,
            window=settings.RATE_LIMIT_WINDOW_SECONDS,
        )

    @app.middleware("http")
    async def add_security_headers(request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        return response

    app.include_router(medicines.router, prefix="/api", tags=["medicines"])
    app.include_router(stock.router, prefix="/api", tags=["stock"])
    app.include_router(invoices.router, prefix="/api", tags=["invoices"])

    @app.get("/health")
    def health():
        return {
            "status": "ok",
            "medicines": len(app.state.db.medicines),
            "invoices": len(app.state.db.invoices),
        }

    return app


app = create_app()
