"""
Centralized logging configuration for the transaction application engine.

This module provides standardized logging configuration using structlog
for all components. Status transitions and step validation decisions are
logged through the helpers below so the audit trail has a uniform shape.
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
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

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


def get_validation_logger(name: str) -> FilteringBoundLogger:
    """
    Get a logger bound for step validation decisions.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Structlog logger bound to the step_validation subsystem
    """
    logger = get_logger(name)
    return logger.bind(
        subsystem="step_validation",
        audit_trail=True
    )


def get_state_logger(name: str) -> FilteringBoundLogger:
    """
    Get a logger bound for application engine state changes.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Structlog logger bound to the application_engine subsystem
    """
    logger = get_logger(name)
    return logger.bind(
        subsystem="application_engine",
        audit_trail=True
    )


def log_validation_decision(
    logger: FilteringBoundLogger,
    step_id: str,
    passed: bool,
    transaction_id: str,
    reason: str,
    context: Optional[dict[str, Any]] = None
) -> None:
    """
    Log a step validation decision with standardized format.

    Args:
        logger: Structlog logger instance
        step_id: Step whose validator ran
        passed: Whether validation passed
        transaction_id: Transaction being edited
        reason: Short explanation of the outcome
        context: Additional context data
    """
    bound_logger = logger.bind(
        step_id=step_id,
        validation_result="PASS" if passed else "FAIL",
        transaction_id=transaction_id,
        reason=reason,
    )

    if context:
        bound_logger = bound_logger.bind(context=context)

    if passed:
        bound_logger.info("Step validation passed")
    else:
        bound_logger.warning("Step validation failed")


def log_status_transition(
    logger: FilteringBoundLogger,
    transaction_id: str,
    from_status: str,
    to_status: str,
    trigger: str,
    context: Optional[dict[str, Any]] = None
) -> None:
    """
    Log a transaction status transition with standardized format.

    Args:
        logger: Structlog logger instance
        transaction_id: Transaction changing status
        from_status: Current status
        to_status: Target status
        trigger: What triggered the transition (submit, complete, cancel)
        context: Additional context data
    """
    bound_logger = logger.bind(
        transaction_id=transaction_id,
        from_status=from_status,
        to_status=to_status,
        trigger=trigger,
    )

    if context:
        bound_logger = bound_logger.bind(context=context)

    bound_logger.info("Status transition")
