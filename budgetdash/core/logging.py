import logging
import sys

import structlog
from structlog.contextvars import bind_contextvars, clear_contextvars

def configure_logging(env: str = "dev") -> None:
    # request / import-run context bound via bind_log_context shows up on every event
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
    ]
    if env == "prod":
        processors += [structlog.processors.dict_tracebacks, structlog.processors.JSONRenderer()]
    else:
        processors += [structlog.processors.format_exc_info, structlog.dev.ConsoleRenderer(colors=env == "dev")]

    structlog.configure(
        processors=processors,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=logging.WARNING if env == "test" else logging.INFO,
    )

def bind_log_context(**kw) -> None:
    clear_contextvars()
    bind_contextvars(**{k: v for k, v in kw.items() if v is not None})

logger = structlog.get_logger()
