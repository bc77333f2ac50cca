"""
Structured logging for the booking API using structlog.

Events are snake_case and carry their context as key/value pairs:
  - request_completed / request_failed (middleware: request_id, method,
    path, status_code, duration_ms)
  - booking_created, booking_updated, booking_deleted, booking_approved
  - booking_not_found, bookings_table_empty, booking_edit_rejected
  - booking_*_failed with the driver error string on storage failures
  - confirmation_email_sent / _failed / _logged (console email backend)

Output is JSON in production and colored console text elsewhere;
LOG_FORMAT=json|console overrides the environment-based choice.
"""

import logging
import sys
import structlog
from booking_api.core.config import get_settings


def _use_json(settings) -> bool:
    if settings.LOG_FORMAT == "json":
        return True
    if settings.LOG_FORMAT == "console":
        return False
    return settings.ENVIRONMENT == "production"


def _service_fields(settings):
    """Processor stamping every event with the app name, version and environment."""

    def add_service_fields(logger, method_name, event_dict):
        event_dict.setdefault("service", settings.APP_NAME)
        event_dict.setdefault("version", settings.APP_VERSION)
        event_dict.setdefault("env", settings.ENVIRONMENT)
        return event_dict

    return add_service_fields


def setup_logging() -> None:
    settings = get_settings()

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        _service_fields(settings),
    ]

    if _use_json(settings):
        # Machine-parseable, tracebacks flattened into the event
        shared_processors.append(structlog.processors.format_exc_info)
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ]
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    # Lifespan may run more than once in the same process (tests, reloads)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosmtplib").setLevel(logging.WARNING)


def get_logger(name: str = __name__) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
