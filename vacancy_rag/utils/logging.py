"""structlog setup for the vacancy-rag CLI and any embedding host.

Every module logs through ``structlog.get_logger(logger_name=__name__)``
with snake_case event names.  Ingestion and synthesis bind ``position_id``
and ``document_id`` with ``structlog.contextvars.bound_contextvars``, so
the ``merge_contextvars`` processor stamps those ids onto every event a
pipeline run emits, including events from the provider adapters.

Output goes to stderr by default: the CLI prints its results on stdout
and the two streams must not interleave.  Rendering is a coloured console
in development and one JSON object per line when ``json_output`` is set or
``APP_ENV=production``.
"""

import logging
import os
import sys
from typing import TextIO

import structlog

# Third-party loggers that emit one INFO line per HTTP request or per
# collection call.  Ingestion makes one embedding request per chunk.
_NOISY_LOGGERS = ("httpx", "httpcore", "openai", "chromadb")


def configure_logging(
    log_level: str = "INFO",
    json_output: bool = False,
    stream: TextIO | None = None,
) -> None:
    """Configure structlog and route stdlib logging through the same renderer.

    Args:
        log_level: Level name (DEBUG, INFO, WARNING, ERROR).
        json_output: Force JSON lines. Production (``APP_ENV``) forces it too.
        stream: Destination; ``sys.stderr`` at call time when omitted.
    """
    stream = stream or sys.stderr
    use_json = json_output or os.environ.get("APP_ENV", "development") == "production"
    level = logging.getLevelName(log_level.upper())

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    renderer: structlog.types.Processor
    if use_json:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=stream.isatty())

    structlog.configure(
        processors=[*shared_processors, renderer],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(stream)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                *shared_processors,
                renderer,
            ],
        )
    )
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
