"""
Action Logger - Structured logging for dispatched admin actions.

Every dispatch produces JSON log lines that capture:
- The request (operation name, argument preview)
- The outcome (latency, result preview)
- Errors (typed error name, message, pipeline stage)

Log Format:
==========
Each log entry includes:
- Timestamp
- Request ID (for tracing one dispatch through its log lines)
- Operation name
- Success/failure status

This is the only record kept of what the agent did; there is no separate
audit store.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from tutor_admin.core.config import settings

# Configure the actions logger
logger = logging.getLogger("tutor_admin.actions")
logger.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))

# Create console handler if not exists
if not logger.handlers:
    handler = logging.StreamHandler(sys.stdout)
    formatter = logging.Formatter(
        '[%(asctime)s] %(levelname)s [%(name)s] %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


PREVIEW_LENGTH = 100


def _preview(value: Any) -> Any:
    """Shorten long strings (recursively) so message bodies do not flood the log."""
    if isinstance(value, str):
        return value[:PREVIEW_LENGTH] + "..." if len(value) > PREVIEW_LENGTH else value
    if isinstance(value, dict):
        return {k: _preview(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_preview(v) for v in value[:10]] + (["..."] if len(value) > 10 else [])
    return value


class ActionLogger:
    """
    Structured logger for dispatched actions.

    Usage:
        action_logger.log_dispatch(
            request_id="abc123",
            operation="grantSubscription",
            arguments={"userId": "u-1", "plan": "WEEKLY", "level": "BASIC"},
        )

        action_logger.log_result(
            request_id="abc123",
            operation="grantSubscription",
            result="Granted WEEKLY BASIC subscription to user u-1.",
            latency_ms=12.3,
        )
    """

    def __init__(self):
        self._logger = logger

    def log_dispatch(
        self,
        request_id: str,
        operation: str,
        arguments: Optional[Dict[str, Any]] = None,
    ) -> None:
        log_data = {
            "event": "action_dispatch",
            "request_id": request_id,
            "operation": operation,
            "arguments": _preview(arguments or {}),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        self._logger.info(f"Action Dispatch: {json.dumps(log_data, default=str)}")

    def log_result(
        self,
        request_id: str,
        operation: str,
        result: Any,
        latency_ms: float = 0.0,
    ) -> None:
        """
        Log a successful action.

        List results (listing operations) are logged by size only.
        """
        log_data: Dict[str, Any] = {
            "event": "action_result",
            "request_id": request_id,
            "operation": operation,
            "success": True,
            "latency_ms": round(latency_ms, 2),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        if isinstance(result, list):
            log_data["result_count"] = len(result)
        else:
            log_data["result"] = _preview(str(result))

        self._logger.info(f"Action Result: {json.dumps(log_data, default=str)}")

    def log_error(
        self,
        request_id: str,
        operation: str,
        error: Exception,
        stage: str,
        latency_ms: float = 0.0,
    ) -> None:
        """
        Log a failed action.

        Args:
            request_id: Request identifier
            operation: Operation name as requested
            error: The raised error
            stage: Where it failed (lookup, validation, execution)
            latency_ms: Time spent before failing
        """
        log_data = {
            "event": "action_error",
            "request_id": request_id,
            "operation": operation,
            "error_type": type(error).__name__,
            "error": getattr(error, "message", str(error)),
            "stage": stage,
            "latency_ms": round(latency_ms, 2),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        # Caller mistakes are warnings; execution failures are errors
        level = logging.WARNING if stage in ("lookup", "validation") else logging.ERROR
        self._logger.log(level, f"Action Error: {json.dumps(log_data, default=str)}")


# ---------------------------------------------------------------------------
# SINGLETON INSTANCE
# ---------------------------------------------------------------------------
action_logger = ActionLogger()
