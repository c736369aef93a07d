import logging
import sys
from typing import Any, List, Union

import structlog

_CONFIGURED = False


def _pre_chain() -> List[Any]:
    return [
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.format_exc_info,
    ]


def build_formatter(json_output: bool = False) -> structlog.stdlib.ProcessorFormatter:
    """Build the formatter for stdlib log records.

    Records from ``logging.getLogger`` loggers run through the same
    processors as structlog loggers, then render as JSON lines or as
    console text.
    """
    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    return structlog.stdlib.ProcessorFormatter(
        processor=renderer,
        foreign_pre_chain=_pre_chain(),
    )


def configure_logging(level: Union[str, int] = "INFO", json_output: bool = False) -> None:
    """Configure stdlib logging and structlog to write to stdout.

    Only the first call has an effect, so bootstrap code may call it freely.

    Args:
        level: Root log level.
        json_output: Emit JSON lines instead of console text.
    """
    global _CONFIGURED
    if _CONFIGURED:
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(build_formatter(json_output))

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level.upper() if isinstance(level, str) else level)

    structlog.configure(
        processors=[
            *_pre_chain(),
            structlog.processors.StackInfoRenderer(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    _CONFIGURED = True

