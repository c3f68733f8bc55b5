# src/streamwire/core/logging.py
"""Log output for plan compilation.

Compilation messages come from structlog loggers (the parser, resolver and
builder) and from stdlib loggers in third-party code. Both end up on one
stderr handler with one renderer, so a ``--json-logs`` run yields only JSON
lines and stdout carries nothing but command output.

Every line logged inside ``plan_log_context`` carries the plan name and tenant.
"""

import logging
import sys
from contextlib import AbstractContextManager
from typing import Any

import structlog
from structlog.stdlib import ProcessorFormatter

# Raised to WARNING even under --verbose
_QUIET_LOGGERS: tuple[str, ...] = (
    "dynaconf",
    "markdown_it",
)


def _drop_formatter_keys(
    logger: logging.Logger | None,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    # ProcessorFormatter injects both keys on every record
    del event_dict["_record"]
    del event_dict["_from_structlog"]
    return event_dict


def _renderers(json_output: bool) -> list[Any]:
    if json_output:
        return [
            _drop_formatter_keys,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    return [_drop_formatter_keys, structlog.dev.ConsoleRenderer(colors=True)]


def configure_logging(
    *,
    json_output: bool = False,
    level: str = "INFO",
) -> None:
    """Route structlog and stdlib records to stderr.

    Safe to call repeatedly; the CLI calls it once for global flags and again
    after loading a settings file.

    Args:
        json_output: Render JSON lines instead of console output
        level: Root level name (DEBUG, INFO, WARNING, ERROR)
    """
    root_level = logging.getLevelNamesMapping()[level.upper()]

    pre_chain: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
    ]

    structlog.configure(
        processors=[*pre_chain, ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(ProcessorFormatter(processors=_renderers(json_output), foreign_pre_chain=pre_chain))

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(root_level)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(root_level, logging.WARNING))


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """structlog logger for a streamwire module."""
    logger: structlog.stdlib.BoundLogger = structlog.get_logger(name)
    return logger


def plan_log_context(plan_name: str, tenant_id: int) -> AbstractContextManager[None]:
    """Tag every line logged inside the block with plan and tenant."""
    return structlog.contextvars.bound_contextvars(plan=plan_name, tenant_id=tenant_id)
