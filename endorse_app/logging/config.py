"""
Centralized logging configuration for the endorsement flow.

This module provides standardized logging configuration using structlog
for all components. Access tokens are never passed to these helpers; notes
are logged by length only.
"""
import logging
import sys
from typing import Any, Optional

import structlog
from structlog.types import FilteringBoundLogger


def configure_logging(
    level: str = "INFO",
    format_json: bool = False,
    include_timestamp: bool = True,
    include_caller: bool = False,
    extra_processors: Optional[list] = None
) -> None:
    """
    Configure structlog for the entire application.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_json: If True, output JSON format; otherwise human-readable
        include_timestamp: Include timestamp in log output
        include_caller: Include caller information (filename, line number)
        extra_processors: Additional structlog processors to include
    """
    log_level = getattr(logging, level.upper())

    logging.basicConfig(
        level=log_level,
        stream=sys.stdout,
        format="%(message)s"  # structlog will handle formatting
    )

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if include_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="iso"))

    if include_caller:
        processors.append(structlog.processors.CallsiteParameterAdder(
            parameters=[structlog.processors.CallsiteParameter.FILENAME,
                        structlog.processors.CallsiteParameter.LINENO]
        ))

    if extra_processors:
        processors.extend(extra_processors)

    if format_json:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> FilteringBoundLogger:
    """
    Get a configured structlog logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger instance
    """
    return structlog.get_logger(name)


def get_submission_logger(name: str) -> FilteringBoundLogger:
    """
    Get a logger for submission attempts and response classification.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger bound to the submission subsystem
    """
    return get_logger(name).bind(subsystem="submission")


def get_flow_logger(name: str) -> FilteringBoundLogger:
    """
    Get a logger for the pending-endorsement resume state machine.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger bound to the endorsement flow
    """
    return get_logger(name).bind(
        subsystem="endorsement_flow",
        audit_trail=True
    )


def log_submission_outcome(
    logger: FilteringBoundLogger,
    card_id: str,
    status: str,
    signal_count: int,
    interactive: bool,
    context: Optional[dict[str, Any]] = None
) -> None:
    """
    Log the classified outcome of one submission attempt.

    Args:
        logger: Structlog logger instance
        card_id: Card the endorsement targets
        status: Classified submission status
        signal_count: Number of signals in the payload
        interactive: False when the attempt came from the resume path
        context: Additional context data
    """
    bound_logger = logger.bind(
        card_id=card_id,
        submission_status=status,
        signal_count=signal_count,
        interactive=interactive,
    )

    if context:
        bound_logger = bound_logger.bind(context=context)

    if status == "success":
        bound_logger.info("Endorsement submitted")
    else:
        bound_logger.warning("Endorsement submission did not succeed")


def log_state_transition(
    logger: FilteringBoundLogger,
    card_id: str,
    from_state: str,
    to_state: str,
    trigger: str,
    context: Optional[dict[str, Any]] = None
) -> None:
    """
    Log a resume state transition with standardized format.

    Args:
        logger: Structlog logger instance
        card_id: Card whose pending endorsement is transitioning
        from_state: Current state
        to_state: Target state
        trigger: What triggered the transition
        context: Additional context data
    """
    bound_logger = logger.bind(
        card_id=card_id,
        from_state=from_state,
        to_state=to_state,
        trigger=trigger,
    )

    if context:
        bound_logger = bound_logger.bind(context=context)

    bound_logger.info("State transition")
