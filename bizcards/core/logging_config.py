import logging
import sys


def setup_logging():
    """
    Configure structured logging for the application.

    Sets up logging to stdout with timestamps, log levels, and module names.
    Request-level detail (user ids, emails, raw upstream errors) is only
    emitted in development; see ``log_diagnostic``.
    """
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)]
    )

    # Reduce SQLAlchemy and HTTP client noise in logs
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)

    return logging.getLogger("bizcards")


def log_diagnostic(message: str, **details) -> None:
    """
    Log an operation failure, attaching identifying details only in development.

    Args:
        message: Operation label (always logged)
        **details: user_id, email, raw error and similar fields
    """
    from bizcards.core.config import settings

    if settings.is_development and details:
        rendered = ", ".join(f"{key}={value}" for key, value in details.items())
        logger.warning(f"{message}: {rendered}")
    else:
        logger.warning(message)


# Create global logger instance
logger = setup_logging()
