"""
Performance Instrumentation for the Fibertel Station client
===========================================================

Records how long every station request takes. Diagnostics retrieval is slow
on the device, so the per-operation breakdown is the first thing to look at
when scrapes start timing out.

"""

import logging
import time
from typing import Any, Dict, List, Optional

from .models import TimingMetrics

logger = logging.getLogger("fibertel-exporter")


class PerformanceInstrumentation:
    """
    Timing collector for one station session.

    Tracks:
    - Individual request timing (bootstrap, salts, login, menu, status, logout)
    - Success and failure per operation
    - Response sizes
    """

    def __init__(self) -> None:
        self.timing_metrics: List[TimingMetrics] = []
        self.session_start_time = time.time()
        self.request_metrics: Dict[str, List[float]] = {}

    def start_timer(self, operation: str) -> float:
        """Start timing an operation."""
        return time.time()

    def record_timing(
        self,
        operation: str,
        start_time: float,
        success: bool = True,
        error_type: Optional[str] = None,
        http_status: Optional[int] = None,
        response_size: int = 0,
    ) -> TimingMetrics:
        """Record timing metrics for an operation."""
        end_time = time.time()
        duration = end_time - start_time

        metric = TimingMetrics(
            operation=operation,
            start_time=start_time,
            end_time=end_time,
            duration=duration,
            success=success,
            error_type=error_type,
            http_status=http_status,
            response_size=response_size,
        )

        self.timing_metrics.append(metric)
        self.request_metrics.setdefault(operation, []).append(duration)

        logger.debug(f"📊 {operation}: {duration * 1000:.1f}ms (success: {success})")
        return metric

    def get_performance_summary(self) -> Dict[str, Any]:
        """Get a per-operation summary of the recorded requests."""
        if not self.timing_metrics:
            return {"error": "No timing metrics recorded"}

        total_session_time = time.time() - self.session_start_time

        operation_stats = {}
        for operation, durations in self.request_metrics.items():
            recorded = [m for m in self.timing_metrics if m.operation == operation]
            operation_stats[operation] = {
                "count": len(durations),
                "total_time": sum(durations),
                "avg_time": sum(durations) / len(durations),
                "max_time": max(durations),
                "success_rate": len([m for m in recorded if m.success]) / len(recorded),
            }

        slowest = max(self.timing_metrics, key=lambda m: m.duration)

        return {
            "session_metrics": {
                "total_session_time": total_session_time,
                "total_operations": len(self.timing_metrics),
                "successful_operations": len([m for m in self.timing_metrics if m.success]),
                "failed_operations": len([m for m in self.timing_metrics if not m.success]),
                "slowest_operation": slowest.operation,
            },
            "operation_breakdown": operation_stats,
        }


__all__ = ["PerformanceInstrumentation"]
