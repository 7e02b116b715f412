"""Utility for logging outgoing feed requests when GTFS_LOG_REQUESTS is enabled."""

import json
import logging
import os

logger = logging.getLogger(__name__)


def should_log_requests() -> bool:
    """Check if request logging is enabled via GTFS_LOG_REQUESTS environment variable."""
    return os.getenv("GTFS_LOG_REQUESTS", "").lower() == "true"


def _redact_sensitive_headers(headers: dict[str, str]) -> dict[str, str]:
    """Redact sensitive headers from logging."""
    sensitive_keys = {"authorization", "cookie", "x-api-key", "apikey"}
    return {k: "***REDACTED***" if k.lower() in sensitive_keys else v for k, v in headers.items()}


def log_api_request(method: str, url: str, headers: dict[str, str] | None = None) -> None:
    """Log request details if GTFS_LOG_REQUESTS is enabled.

    Args:
        method: HTTP method (GET, POST, etc.).
        url: Request URL.
        headers: Request headers (optional, sensitive headers are redacted).
    """
    if not should_log_requests():
        return

    log_parts = [f"{method} {url}"]
    if headers:
        safe_headers = _redact_sensitive_headers(headers)
        log_parts.append(f"Headers: {json.dumps(safe_headers, indent=2)}")

    logger.info("API Request:\n" + "\n".join(log_parts))


def log_api_response(url: str, status: int, size_bytes: int) -> None:
    """Log response summary if GTFS_LOG_REQUESTS is enabled.

    Args:
        url: Request URL.
        status: HTTP status code.
        size_bytes: Size of the response body.
    """
    if not should_log_requests():
        return

    logger.info(f"API Response: {url} -> {status} ({size_bytes} bytes)")
