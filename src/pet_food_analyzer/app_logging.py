"""Logging configuration helpers."""

import logging


def configure_logging() -> None:
    """Configure application logging with a single stream handler."""
    logger = logging.getLogger("pet_food_analyzer")
    logger.setLevel(logging.INFO)
    if logger.handlers:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(
        logging.Formatter("%(levelname)s: %(name)s: %(message)s [%(correlation_id)s]")
    )
    handler.addFilter(_CorrelationIdFilter())
    logger.addHandler(handler)
    logger.propagate = False


class _CorrelationIdFilter(logging.Filter):
    """Default the correlation id for records logged outside a request."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "correlation_id"):
            record.correlation_id = "-"
        return True
