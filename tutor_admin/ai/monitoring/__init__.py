"""
Monitoring Module - logging and metrics for dispatched admin actions.

Usage:
======
    from tutor_admin.ai.monitoring import action_logger, action_metrics

    action_logger.log_dispatch(request_id, "banUser", {"userId": "u-1"})
    action_metrics.record_call("banUser", latency_ms=4.2, success=True)

    stats = action_metrics.get_stats()
"""

from tutor_admin.ai.monitoring.logger import ActionLogger, action_logger
from tutor_admin.ai.monitoring.metrics import ActionMetrics, action_metrics

__all__ = [
    "ActionLogger",
    "action_logger",
    "ActionMetrics",
    "action_metrics",
]
