"""
Structured logging for hemesh.

Library modules log through structlog event names with key/value context
(``octree_built``, ``holes_filled``, ``missing_twin``). Until
``configure_logging`` runs, structlog's defaults print to stdout, so the
library stays usable without any setup. The CLI configures logging once per
invocation and tags every event with the mesh file being processed::

    from hemesh.core.logging import configure_logging, get_logger, mesh_context

    configure_logging(level="DEBUG")
    logger = get_logger(__name__)
    with mesh_context(path="part.stl"):
        logger.info("octree_built", nodes=512, leaves=448)
"""

import logging
import sys
from contextlib import contextmanager
from typing import Any, Iterator, Optional

import structlog

# Third-party loggers that are noisy below WARNING
_QUIET_LOGGERS = ("trimesh",)

_SHARED_PROCESSORS: list[structlog.types.Processor] = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.UnicodeDecoder(),
]


def configure_logging(
    level: str = "INFO",
    json_output: bool = False,
    log_file: Optional[str] = None,
) -> None:
    """
    Route structlog and stdlib logging through one renderer.

    Args:
        level: Minimum log level name; unknown names fall back to INFO.
        json_output: Emit JSON lines instead of colored console lines.
        log_file: Also append records to this file.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        format="%(message)s",
        level=log_level,
        handlers=handlers,
        force=True,
    )
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))

    structlog.configure(
        processors=[
            *_SHARED_PROCESSORS,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # Plain stdlib records (the geometry loader, trimesh) share the renderer
    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=_SHARED_PROCESSORS,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            _renderer(json_output),
        ],
    )
    for handler in logging.root.handlers:
        handler.setFormatter(formatter)


def _renderer(json_output: bool) -> structlog.types.Processor:
    if json_output:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer()


@contextmanager
def mesh_context(**values: Any) -> Iterator[None]:
    """Bind ``values`` to every event logged inside the block."""
    with structlog.contextvars.bound_contextvars(**values):
        yield


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return a structlog logger for a module, typically ``__name__``."""
    return structlog.get_logger(name)
