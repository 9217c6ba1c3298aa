import structlog
import logging
import sys
from typing import Dict, Any, Optional, List
from datetime import datetime, timezone


# Context keys copied from structlog contextvars onto every event
CONTEXT_KEYS = ("session_id", "trace_id")


def _renderer(log_format: str):
    if log_format == "console":
        return structlog.dev.ConsoleRenderer()
    return structlog.processors.JSONRenderer()


def setup_logging(
    log_level: str = "INFO",
    log_format: str = "json",
    service_name: str = "task-wizard",
    version: str = "unknown"
) -> None:
    """Configure structlog on top of stdlib logging for the wizard service"""

    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            add_service_context,
            _renderer(log_format),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # Service identity is bound once; turns add session_id on top
    structlog.contextvars.bind_contextvars(service=service_name, version=version)


def add_service_context(logger: logging.Logger, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Stamp each event with a UTC timestamp and the turn's context ids"""

    event_dict.setdefault("timestamp", datetime.now(timezone.utc).isoformat())

    context = structlog.contextvars.get_contextvars()
    for key in CONTEXT_KEYS:
        value = context.get(key)
        if value and key not in event_dict:
            event_dict[key] = value

    return event_dict


class WizardLogger:
    """Structured events for the wizard's state machine"""

    def __init__(self, name: str):
        self.logger = structlog.get_logger(name)

    def log_tool_extraction(self, tool_name: str, fields: List[str], force_validate: bool = False, **kwargs):
        self.logger.info(
            "tool_extraction",
            tool_name=tool_name,
            fields=fields,
            force_validate=force_validate,
            **kwargs
        )

    def log_step_transition(self, session_id: str, from_step: int, to_step: int, reason: Optional[str] = None):
        self.logger.info(
            "step_transition",
            session_id=session_id,
            from_step=from_step,
            to_step=to_step,
            reason=reason
        )

    def log_session_update(self, session_id: str, action: str, state_summary: Optional[Dict[str, Any]] = None):
        """Record a write of the session record"""

        self.logger.info(
            "session_update",
            session_id=session_id,
            session_action=action,
            **(state_summary or {})
        )


wizard_logger = WizardLogger("task_wizard")
