"""
Structured Logger Module

Configures structlog for JSON-formatted structured logging with correlation IDs.
Every service, view and the HTTP layer log through this module so one CLI
invocation can be traced end to end.

Example Usage:
    from jobflow.utils.logger import get_logger

    # Get logger with context
    logger = get_logger(
        correlation_id="a1b2c3d4-e5f6-7890-abcd-ef1234567890",
        view="job_urls",
        component="job_url_service"
    )

    # Log with context automatically included
    logger.info("Job URLs loaded", count=12)
    logger.warning("Retrying request", attempt=2, status=503)
    logger.error("Request failed", status=500, error="db unavailable")

Log Levels:
    - DEBUG: Request URLs, cache hits/misses
    - INFO: Successful mutations, logins, uploads
    - WARNING: Retries, fallbacks (proxy upload -> presigned upload)
    - ERROR: Failed requests surfaced to the user
    - CRITICAL: Unused; nothing is fatal to the process
"""

import logging
import sys
import uuid
from pathlib import Path
from typing import Optional
import structlog
from structlog.types import BindableLogger, EventDict, WrappedLogger


def mask_credentials(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """
    Processor to mask sensitive credentials in log output.

    Args:
        logger: Logger instance
        method_name: Logging method name
        event_dict: Event dictionary to process

    Returns:
        Event dictionary with masked credentials

    Masks:
        - password, api_key, token, secret, credential, auth, authorization fields
        - Replaces values with "***MASKED***"
        - Uses word boundary matching to avoid false positives
    """
    sensitive_fields = {
        "password",
        "api_key",
        "token",
        "secret",
        "credential",
        "auth",
        "authorization",
    }

    for key in list(event_dict.keys()):
        key_lower = key.lower()
        for sensitive in sensitive_fields:
            if (
                key_lower == sensitive
                or key_lower.endswith(f"_{sensitive}")
                or key_lower.endswith(f"-{sensitive}")
                or key_lower.startswith(f"{sensitive}_")
                or key_lower.startswith(f"{sensitive}-")
            ):
                event_dict[key] = "***MASKED***"
                break

    return event_dict


def configure_logging(
    log_file: str = "logs/jobflow.log",
    log_level: str = "INFO",
    console_level: str = "WARNING",
) -> None:
    """
    Configure structlog with JSON output and file logging.

    Console output goes to stderr so JSON log lines never interleave with
    the tables rendered on stdout.

    Args:
        log_file: Path to log file (default: "logs/jobflow.log")
        log_level: File logging level (default: "INFO")
        console_level: Minimum level echoed to stderr (default: "WARNING")

    Log Format (JSON):
        {
            "timestamp": "2024-10-06T10:30:45Z",
            "level": "info",
            "correlation_id": "a1b2c3d4-...",
            "view": "job_urls",
            "component": "job_url_service",
            "event": "Job URL added",
            "job_url_id": "42"
        }
    """
    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    file_handler = logging.FileHandler(log_file)
    file_handler.setLevel(getattr(logging, log_level.upper()))
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(getattr(logging, console_level.upper()))

    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, log_level.upper()),
        handlers=[file_handler, console_handler],
        force=True,
    )

    # httpx logs every request at INFO; our own request logging replaces it
    logging.getLogger("httpx").setLevel(logging.WARNING)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            mask_credentials,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(
    correlation_id: Optional[str] = None,
    view: Optional[str] = None,
    component: Optional[str] = None,
) -> BindableLogger:
    """
    Get structured logger with bound context.

    Args:
        correlation_id: Correlation ID for request tracing (generates UUID if not provided)
        view: Dashboard view or tab (e.g., "job_urls", "auth", "upload")
        component: Component name (e.g., "api_client", "query_client")

    Returns:
        BoundLogger with correlation_id, view, and component bound to context
    """
    if correlation_id is None:
        correlation_id = str(uuid.uuid4())

    logger = structlog.get_logger()

    if correlation_id:
        logger = logger.bind(correlation_id=correlation_id)
    if view:
        logger = logger.bind(view=view)
    if component:
        logger = logger.bind(component=component)

    return logger


# Initialize logging on module import with default settings
configure_logging()
