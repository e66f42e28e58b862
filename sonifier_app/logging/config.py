"""
structlog setup for the price sonifier.

Two subsystems log on their own channel: the sync engine (per-tick dispatch
and sink failures) and playback state (clock and session transitions, kept
as an audit trail). Everything else uses a plain module logger.
"""
import logging
import sys
from typing import Any, Optional

import structlog
from structlog.types import FilteringBoundLogger

SYNC_SUBSYSTEM = "sync_engine"
STATE_SUBSYSTEM = "playback_state"


def configure_logging(
    level: str = "INFO",
    format_json: bool = False,
    include_timestamp: bool = True
) -> None:
    """
    Route structlog through stdlib logging on stdout.

    Args:
        level: Name of a stdlib logging level, case-insensitive
        format_json: Render JSON lines instead of the coloured console format
        include_timestamp: Prefix each entry with an ISO timestamp
    """
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        stream=sys.stdout,
        format="%(message)s"
    )

    processors: list[Any] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.format_exc_info,
    ]
    if include_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="iso"))

    processors.append(
        structlog.processors.JSONRenderer() if format_json
        else structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())
    )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> FilteringBoundLogger:
    return structlog.get_logger(name)


def get_sync_logger(name: str) -> FilteringBoundLogger:
    """Logger for the per-frame dispatch path."""
    return get_logger(name).bind(subsystem=SYNC_SUBSYSTEM)


def get_state_logger(name: str) -> FilteringBoundLogger:
    """Logger for clock and session lifecycle changes."""
    return get_logger(name).bind(subsystem=STATE_SUBSYSTEM, audit_trail=True)


def log_state_transition(
    logger: FilteringBoundLogger,
    asset_id: Optional[str],
    from_state: str,
    to_state: str,
    trigger: str,
    context: Optional[dict[str, Any]] = None
) -> None:
    """
    Record one lifecycle change of a clock or session.

    ``trigger`` names the control or event that caused it (``start``,
    ``return_home``, ``series_end``...). ``context`` is attached only when
    non-empty.
    """
    fields: dict[str, Any] = {
        "asset_id": asset_id,
        "from_state": from_state,
        "to_state": to_state,
        "trigger": trigger,
    }
    if context:
        fields["context"] = context
    logger.info("State transition", **fields)
