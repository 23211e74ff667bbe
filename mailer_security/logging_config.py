"""
Logging Setup
=============
Structured logging for the service, built on structlog over stdlib logging.

Records are handed to a ``QueueHandler`` and written by a background
``QueueListener`` so request handling never waits on log I/O.

Usage:
    from mailer_security.logging_config import setup_logging

    setup_logging(service_name="mailer-api")
"""

import logging
import queue
import sys
from logging.handlers import QueueHandler, QueueListener
from typing import Optional
import structlog

_listener: Optional[QueueListener] = None


def _add_service_name(service_name: str):
    def processor(logger, method_name, event_dict):
        event_dict.setdefault("service", service_name)
        return event_dict
    return processor


def setup_logging(
    service_name: str,
    level: str = "INFO",
    json_output: bool = True,
) -> logging.Logger:
    """
    Configure logging for the service.

    Args:
        service_name: Name added to every log line
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: JSON lines for production, console rendering otherwise

    Returns:
        Configured root logger
    """
    global _listener

    log_level = getattr(logging, level.upper(), logging.INFO)

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        _add_service_name(service_name),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]

    structlog.configure(
        processors=shared_processors + [
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info,
            renderer,
        ],
    )

    # Records are rendered before queueing; the writer thread only does I/O
    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(logging.Formatter("%(message)s"))

    shutdown_logging()
    log_queue: "queue.Queue[logging.LogRecord]" = queue.Queue(-1)
    _listener = QueueListener(log_queue, stream_handler, respect_handler_level=False)
    _listener.start()

    queue_handler = QueueHandler(log_queue)
    queue_handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(queue_handler)
    root_logger.setLevel(log_level)

    structlog.get_logger(__name__).info("logging_configured", level=logging.getLevelName(log_level))
    return root_logger


def shutdown_logging() -> None:
    """Flush queued records and stop the background writer."""
    global _listener
    if _listener is not None:
        _listener.stop()
        _listener = None
