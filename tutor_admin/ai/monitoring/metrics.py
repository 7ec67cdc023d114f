"""
Action Metrics - per-operation call tracking.

Tracks, for every operation the agent calls:
- how often it was called
- how often it succeeded or failed (and with which error type)
- latency

Metrics are in-memory and reset on restart; they back GET /admin/stats.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from threading import Lock
from typing import Dict, Optional


@dataclass
class OperationMetrics:
    """Aggregated metrics for one operation."""
    total_calls: int = 0
    successful_calls: int = 0
    failed_calls: int = 0
    total_latency_ms: float = 0.0
    max_latency_ms: float = 0.0
    errors_by_type: Dict[str, int] = field(default_factory=dict)

    @property
    def avg_latency_ms(self) -> float:
        if self.total_calls == 0:
            return 0.0
        return self.total_latency_ms / self.total_calls

    @property
    def success_rate(self) -> float:
        """Success rate as a percentage."""
        if self.total_calls == 0:
            return 0.0
        return (self.successful_calls / self.total_calls) * 100

    def to_dict(self) -> Dict:
        return {
            "total_calls": self.total_calls,
            "successful_calls": self.successful_calls,
            "failed_calls": self.failed_calls,
            "success_rate": f"{self.success_rate:.1f}%",
            "avg_latency_ms": round(self.avg_latency_ms, 2),
            "max_latency_ms": round(self.max_latency_ms, 2),
            "errors_by_type": dict(self.errors_by_type),
        }


class ActionMetrics:
    """
    Tracks and aggregates dispatch metrics.

    Usage:
        metrics = ActionMetrics()
        metrics.record_call("banUser", latency_ms=8.1, success=True)
        metrics.record_call("banUser", latency_ms=2.0, success=False, error_type="NotFound")

        stats = metrics.get_stats()
        print(stats["operations"]["banUser"]["failed_calls"])
    """

    def __init__(self):
        self._lock = Lock()
        self._by_operation: Dict[str, OperationMetrics] = defaultdict(OperationMetrics)

    def record_call(
        self,
        operation: str,
        latency_ms: float,
        success: bool,
        error_type: Optional[str] = None,
    ) -> None:
        with self._lock:
            op = self._by_operation[operation]
            op.total_calls += 1
            op.total_latency_ms += latency_ms
            op.max_latency_ms = max(op.max_latency_ms, latency_ms)
            if success:
                op.successful_calls += 1
            else:
                op.failed_calls += 1
                key = error_type or "unknown"
                op.errors_by_type[key] = op.errors_by_type.get(key, 0) + 1

    def get_operation(self, operation: str) -> OperationMetrics:
        with self._lock:
            return self._by_operation.get(operation, OperationMetrics())

    def get_stats(self) -> Dict:
        """Totals plus a per-operation breakdown."""
        with self._lock:
            operations = {name: m.to_dict() for name, m in self._by_operation.items()}
            total = sum(m.total_calls for m in self._by_operation.values())
            failed = sum(m.failed_calls for m in self._by_operation.values())

        return {
            "total_calls": total,
            "failed_calls": failed,
            "operations": operations,
        }

    def reset(self) -> None:
        with self._lock:
            self._by_operation.clear()


# ---------------------------------------------------------------------------
# SINGLETON INSTANCE
# ---------------------------------------------------------------------------
action_metrics = ActionMetrics()
