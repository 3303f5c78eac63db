"""Run the API with uvicorn. Host, port and log level come from settings."""
import logging
import signal
import sys

import uvicorn

from app.core.config import settings


def handle_signal(sig, frame):
    print(f"\nReceived signal {sig}, shutting down gracefully...")
    sys.exit(0)


signal.signal(signal.SIGINT, handle_signal)
signal.signal(signal.SIGTERM, handle_signal)

if __name__ == "__main__":
    # Route app and audit loggers to stderr next to uvicorn's own output
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    print("=" * 50)
    print(f"  Starting {settings.APP_NAME} ({settings.ENVIRONMENT})")
    print(f"  http://{settings.HOST}:{settings.PORT}/docs")
    print("=" * 50)
    uvicorn.run(
        "app.main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL,
        reload=settings.DEBUG,
    )
