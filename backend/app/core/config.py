"""Application configuration.

Environment variables override all defaults. A `.env` file next to the
backend directory is loaded for local development.
"""

import os
from pathlib import Path
from typing import List

from dotenv import load_dotenv

_BACKEND_DIR = Path(__file__).resolve().parents[2]
load_dotenv(dotenv_path=_BACKEND_DIR / ".env", override=False)


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


def _env_list(name: str, default: str) -> List[str]:
    return [part.strip() for part in os.getenv(name, default).split(",") if part.strip()]


class Settings:
    APP_NAME: str = "Clinic Desk API"
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    DEBUG: bool = ENVIRONMENT == "development"
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "info")
    HOST: str = os.getenv("HOST", "127.0.0.1")
    PORT: int = int(os.getenv("PORT", "8000"))

    # CORS (specific origins only, no wildcards)
    CORS_ORIGINS: List[str] = _env_list(
        "CORS_ORIGINS",
        "http://localhost:5000,http://127.0.0.1:5000,http://localhost:5173,http://127.0.0.1:5173",
    )
    ALLOWED_HOSTS: List[str] = _env_list("ALLOWED_HOSTS", "localhost,127.0.0.1")

    # Rate limiting
    RATE_LIMIT_ENABLED: bool = _env_bool("RATE_LIMIT_ENABLED", "true")
    RATE_LIMIT_REQUESTS: int = int(os.getenv("RATE_LIMIT_REQUESTS", "100"))
    RATE_LIMIT_WINDOW_SECONDS: int = int(os.getenv("RATE_LIMIT_WINDOW_SECONDS", "60"))

    # Store
    SEED_SAMPLE_DATA: bool = _env_bool("SEED_SAMPLE_DATA", "true")

    # Billing
    LOW_STOCK_THRESHOLD: int = int(os.getenv("LOW_STOCK_THRESHOLD", "20"))
    # Off: totals are accepted as submitted by the cart screen
    VERIFY_INVOICE_TOTALS: bool = _env_bool("VERIFY_INVOICE_TOTALS", "false")

    # Invoice letterhead
    CLINIC_NAME: str = os.getenv(
        "CLINIC_NAME", "MALKANI HEALTH OF ELECTROHOMEOPATHY & RESEARCH CENTRE"
    )
    CLINIC_ADDRESS: str = os.getenv("CLINIC_ADDRESS", "64, Street No. 2, Vill- Sadipur Delhi 110094.")
    CLINIC_GSTIN: str = os.getenv("CLINIC_GSTIN", "07AHCPM0625Q1Z5")
    CLINIC_CONTACT: str = os.getenv(
        "CLINIC_CONTACT", "malkani.clinic@gmail.com | +91-9839239874 | www.electrohomeopathy.in"
    )
    # Base-14 PDF fonts have no rupee glyph
    CURRENCY_LABEL: str = os.getenv("CURRENCY_LABEL", "Rs.")


settings = Settings()
