import logging
import sys
from contextvars import ContextVar
from typing import Optional

from scout.config import settings

# Report currently being processed, bound by the memory processor
report_id_ctx: ContextVar[Optional[str]] = ContextVar("report_id", default=None)


def get_report_id() -> str:
    """Return the report bound to the current context, or '-' outside report processing."""
    return report_id_ctx.get() or "-"


class ReportIDFilter(logging.Filter):
    """Injects report_id into log records."""
    def filter(self, record):
        record.report_id = get_report_id()
        return True


def configure_logging(level: str = "INFO"):
    """Configures the root logger with a standard format including report_id."""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers to avoid duplication
    if logger.handlers:
        logger.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    formatter = logging.Formatter(
        "%(asctime)s | %(levelname)-8s | [%(report_id)s] | %(name)s:%(funcName)s:%(lineno)d - %(message)s"
    )
    handler.setFormatter(formatter)
    handler.addFilter(ReportIDFilter())

    logger.addHandler(handler)

    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

# Initialize logging on import with configured settings
configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger("scout")
