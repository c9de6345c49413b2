"""Logging and tracing for the analytics services using Pydantic Logfire.

Services log through the standard library (``logging.getLogger(__name__)``) and
wrap each public operation in ``span()``. Nothing is shipped anywhere until the
embedding application calls ``configure_logfire()`` once at startup, before the
first metrics computation (a web app's lifespan hook, a CLI's ``main``, a
worker's boot function).

    from src.core.logging import configure_logfire
    configure_logfire()

Structured context goes through ``extra``:

    log_with_context(logger, "info", "Metrics computed", user_id="e1", total_tasks=12)
"""

import logging

import logfire

from src.core.config import settings


# Root of the package's loggers; the Logfire handler is attached here
PACKAGE_LOGGER = "src"


def configure_logfire(*, service_version: str = "0.1.0", capture_logging: bool = True) -> None:
    """Configure Pydantic Logfire from settings.

    Data is only sent when ``LOGFIRE_TOKEN`` is set; spans are still created locally.
    With ``capture_logging`` the package's standard-library log records are forwarded
    to Logfire as well. Calling it again does not attach a second handler.
    """
    logfire.configure(
        token=settings.logfire_token,
        service_name=settings.service_name,
        service_version=service_version,
        environment=settings.environment,
        send_to_logfire="if-token-present",
    )

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    if capture_logging and not any(
        isinstance(handler, logfire.LogfireLoggingHandler) for handler in package_logger.handlers
    ):
        package_logger.addHandler(logfire.LogfireLoggingHandler())

    package_logger.info(
        "Logfire configured",
        extra={"service_name": settings.service_name, "environment": settings.environment},
    )


def span(name: str) -> logfire.LogfireSpan:
    """Open a Logfire span named ``<module>.<function>`` around a service operation."""
    return logfire.span(name)


def log_with_context(
    logger: logging.Logger,
    level: str,
    message: str,
    *,
    user_id: str | None = None,
    **context: object,
) -> None:
    """Log a message with structured context fields.

    Args:
        logger: Logger instance to use
        level: Log level name ("debug", "info", "warning", "error", "critical")
        message: Log message
        user_id: Subject of the computation, included only when given
        **context: Additional fields (total_tasks, data_quality_score, ...)
    """
    if user_id:
        context["user_id"] = user_id
    getattr(logger, level.lower())(message, extra=context)
