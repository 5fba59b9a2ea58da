import logging
import sys
import time
from fastapi import Request

logger = logging.getLogger("users_api.requests")


def configure_logging(level: str = "INFO"):
    """Configure root logging to stdout; repeated calls are no-ops"""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)]
    )


async def log_requests(request: Request, call_next):
    """HTTP middleware - one line per request with status and elapsed time"""
    start = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - start) * 1000
    logger.info(f"{request.method} {request.url.path} -> {response.status_code} ({elapsed_ms:.1f} ms)")
    return response
