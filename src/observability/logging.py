"""Structured JSON logging with node execution context."""
import logging
import sys
from typing import Any

from pythonjsonlogger import jsonlogger

from src.config import get_settings


CONTEXT_FIELDS = ("workflow_id", "node_name", "resource", "operation", "item_index")


class NodeContextFilter(logging.Filter):
    """Add node execution context to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        """Add default context fields if not present."""
        for field in CONTEXT_FIELDS:
            if not hasattr(record, field):
                setattr(record, field, None)
        return True


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with standardized field names."""

    def add_fields(
        self,
        log_record: dict[str, Any],
        record: logging.LogRecord,
        message_dict: dict[str, Any],
    ) -> None:
        """Add custom fields to the log record."""
        super().add_fields(log_record, record, message_dict)

        if not log_record.get("timestamp"):
            log_record["timestamp"] = self.formatTime(record, self.datefmt)

        log_record["level"] = record.levelname
        log_record["logger"] = record.name

        # item_index may legitimately be 0
        for field in CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                log_record[field] = value
            else:
                log_record.pop(field, None)


def setup_logging(level: str | None = None) -> None:
    """Configure structured JSON logging for the node runtime."""
    settings = get_settings()

    handler = logging.StreamHandler(sys.stdout)

    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
    )
    handler.setFormatter(formatter)
    handler.addFilter(NodeContextFilter())

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level or settings.log_level)

    # Reduce noise from third-party libraries
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def with_node_context(
    workflow_id: str | None = None,
    node_name: str | None = None,
    resource: str | None = None,
    operation: str | None = None,
    item_index: int | None = None,
    **kwargs: Any,
) -> dict[str, Any]:
    """
    Build the ``extra`` dict for a log call made while processing an item.

    Empty identifiers are left out; ``item_index`` is kept whenever set,
    including 0. Extra keyword arguments pass through unchanged.
    """
    extra = dict(kwargs)
    for key, value in (
        ("workflow_id", workflow_id),
        ("node_name", node_name),
        ("resource", resource),
        ("operation", operation),
    ):
        if value:
            extra[key] = value
    if item_index is not None:
        extra["item_index"] = item_index
    return extra
