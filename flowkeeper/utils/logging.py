"""
Logging Utilities

Library modules log through `logging.getLogger(__name__)`; applications call
configure_logging() once to choose the output.
"""

import logging
import sys
from typing import Any, Optional

import structlog

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_SHARED_PROCESSORS = [
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.stdlib.PositionalArgumentsFormatter(),
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.format_exc_info,
]


def configure_logging(
    level: str = "INFO",
    format_string: Optional[str] = None,
    use_structlog: bool = True,
) -> None:
    """
    Configure logging for flowkeeper components

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_string: Custom format string (plain logging only)
        use_structlog: Render stdlib records through structlog's console
            renderer
    """
    handler = logging.StreamHandler(sys.stderr)

    # structlog loggers always hand their events to stdlib logging
    structlog.configure(
        processors=[structlog.stdlib.filter_by_level]
        + _SHARED_PROCESSORS
        + [
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter
            if use_structlog
            else structlog.stdlib.render_to_log_kwargs
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    if use_structlog:
        handler.setFormatter(
            structlog.stdlib.ProcessorFormatter(
                processor=structlog.dev.ConsoleRenderer(colors=False),
                foreign_pre_chain=_SHARED_PROCESSORS,
            )
        )
    else:
        handler.setFormatter(logging.Formatter(format_string or DEFAULT_FORMAT))

    root_logger = logging.getLogger()
    for existing in list(root_logger.handlers):
        if getattr(existing, "_flowkeeper", False):
            root_logger.removeHandler(existing)
    handler._flowkeeper = True  # type: ignore[attr-defined]
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, level.upper()))


def get_logger(name: str) -> Any:
    """
    Get a structured logger for the specified name

    Args:
        name: Logger name (usually module or component name)

    Returns:
        structlog bound logger
    """
    return structlog.get_logger(name)
