"""structlog setup shared by the server and the API.

Human-readable lines go to stderr (JSON lines when ``log_json`` is set) and,
unless disabled, every event is also appended to a log file.
"""
import logging
import sys
from typing import List, Optional

import structlog


def configure_logging(
    *,
    level: str = "INFO",
    log_json: bool = False,
    log_file: Optional[str] = None,
) -> None:
    shared_processors: List[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if log_json:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    def formatter(final: structlog.types.Processor) -> logging.Formatter:
        return structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared_processors,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                final,
            ],
        )

    handlers: List[logging.Handler] = []
    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(formatter(renderer))
    handlers.append(console)

    if log_file:
        # the file always gets uncoloured key=value lines
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(
            formatter(
                structlog.processors.JSONRenderer()
                if log_json
                else structlog.dev.ConsoleRenderer(colors=False)
            )
        )
        handlers.append(file_handler)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    for handler in handlers:
        root_logger.addHandler(handler)
    root_logger.setLevel(logging.WARNING)

    logging.getLogger("projtrack").setLevel(level.upper())
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(f"projtrack.{name}")
