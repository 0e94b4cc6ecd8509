"""Logging setup for the jvl command line.

The index modules log dotted structlog events (``index.import.merged``,
``registry.publish``, ...). ``configure_logging`` renders them through one
stdlib handler per configured output, and every record of an invocation
carries that invocation's request id.
"""

from __future__ import annotations

import logging
import sys
from contextvars import ContextVar
from pathlib import Path
from typing import TYPE_CHECKING, Any
from uuid import uuid4

import structlog

if TYPE_CHECKING:
    from jaivalens.config.models import LoggingConfig, LogOutputConfig

_request_id: ContextVar[str | None] = ContextVar("request_id", default=None)

_CONSOLES = ("stderr", "stdout")


def set_request_id(request_id: str | None = None) -> str:
    """Tag subsequent records with request_id, generating one when omitted."""
    rid = request_id or uuid4().hex[:12]
    _request_id.set(rid)
    return rid


def _add_request_id(
    _logger: structlog.types.WrappedLogger,
    _method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    rid = _request_id.get()
    if rid is not None:
        event_dict.setdefault("request_id", rid)
    return event_dict


def _handler_for(output: LogOutputConfig) -> logging.Handler:
    if output.destination == "stderr":
        return logging.StreamHandler(sys.stderr)
    if output.destination == "stdout":
        return logging.StreamHandler(sys.stdout)
    path = Path(output.destination)
    path.parent.mkdir(parents=True, exist_ok=True)
    return logging.FileHandler(path, encoding="utf-8")


def _renderer_for(output: LogOutputConfig) -> structlog.types.Processor:
    if output.format == "json":
        return structlog.processors.JSONRenderer()
    colors = output.destination in _CONSOLES and sys.stderr.isatty()
    return structlog.dev.ConsoleRenderer(colors=colors, pad_event_to=0, pad_level=False)


def configure_logging(config: LoggingConfig, *, verbose: bool = False) -> None:
    """Route structlog events to the outputs in config.

    Args:
        config: Root level plus one entry per output; an output without its
            own level uses the root level.
        verbose: ``jvl -v``. Lowers the root level and every console output
            to DEBUG. File outputs keep their configured level.
    """
    levels = logging.getLevelNamesMapping()
    root_level = logging.DEBUG if verbose else levels[config.level]

    shared: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S", key="timestamp"),
        _add_request_id,  # type: ignore[list-item]
    ]
    structlog.configure(
        processors=[*shared, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.make_filtering_bound_logger(root_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(root_level)
    for output in config.outputs:
        handler = _handler_for(output)
        if verbose and output.destination in _CONSOLES:
            handler.setLevel(logging.DEBUG)
        else:
            handler.setLevel(levels[output.level or config.level])
        handler.setFormatter(
            structlog.stdlib.ProcessorFormatter(
                processor=_renderer_for(output), foreign_pre_chain=shared
            )
        )
        root.addHandler(handler)
