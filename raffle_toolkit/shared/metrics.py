"""
Observability sink for operation timings and error counts.

Timings and errors are bucketed per operation and platform ("mobile" /
"desktop"). The sink is write-only from the pipeline's point of view: nothing
reads it to decide whether to retry, cache or drop.
"""

import time
from collections import deque
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Deque, Dict, Iterator, List, Optional

from raffle_toolkit.shared.logging import get_logger

logger = get_logger(__name__)

MAX_TIMINGS = 100  # Most recent timings kept for aggregation
MAX_ERRORS_PER_KEY = 10  # Most recent errors kept per operation/platform


@dataclass
class OperationTiming:
    """One recorded operation."""

    operation: str
    platform: str
    duration_ms: float
    outcome: str  # "ok", "error", "cache_hit", ...
    context: Dict[str, Any] = field(default_factory=dict)
    recorded_at: float = field(default_factory=time.time)


@dataclass
class ErrorRecord:
    """Error counter and recent samples for one operation/platform key."""

    count: int = 0
    errors: List[Dict[str, Any]] = field(default_factory=list)


class MetricsSink:
    """In-process sink for timings and errors."""

    def __init__(self, max_timings: int = MAX_TIMINGS):
        self._timings: Deque[OperationTiming] = deque(maxlen=max_timings)
        self._errors: Dict[str, ErrorRecord] = {}

    def record(
        self,
        operation: str,
        platform: str,
        duration_ms: float,
        outcome: str,
        **context: Any,
    ) -> None:
        """Record a finished operation."""
        self._timings.append(
            OperationTiming(
                operation=operation,
                platform=platform,
                duration_ms=duration_ms,
                outcome=outcome,
                context=context,
            )
        )
        logger.debug(
            f"{operation} ({platform}) completed in {duration_ms:.2f}ms "
            f"[{outcome}] {context or ''}"
        )

    @contextmanager
    def time_operation(
        self, operation: str, platform: str, **context: Any
    ) -> Iterator[Dict[str, Any]]:
        """
        Time the enclosed block.

        Yields a dict the caller may fill with extra context (counts, flags)
        that is stored with the timing. The outcome is "ok" unless the block
        raises, in which case it is "error" and the exception propagates.
        """
        extra: Dict[str, Any] = {}
        start = time.perf_counter()
        outcome = "ok"
        try:
            yield extra
        except Exception:
            outcome = "error"
            raise
        finally:
            duration_ms = (time.perf_counter() - start) * 1000
            outcome = extra.pop("outcome", outcome)
            self.record(
                operation, platform, duration_ms, outcome, **{**context, **extra}
            )

    def track_error(
        self,
        operation: str,
        platform: str,
        error: BaseException,
        **context: Any,
    ) -> None:
        """Count an error under its operation/platform key."""
        key = f"{operation}_{platform}"
        record = self._errors.setdefault(key, ErrorRecord())
        record.count += 1
        record.errors.append(
            {
                "timestamp": time.time(),
                "type": error.__class__.__name__,
                "message": str(error),
                "context": context,
            }
        )
        if len(record.errors) > MAX_ERRORS_PER_KEY:
            record.errors = record.errors[-MAX_ERRORS_PER_KEY:]

        logger.error(f"Error in {operation} ({platform}): {error!r}")

    def get_performance_metrics(self) -> Dict[str, Dict[str, Any]]:
        """Aggregate recent timings per platform and operation."""
        stats: Dict[str, Dict[str, Any]] = {}
        for timing in self._timings:
            platform_stats = stats.setdefault(
                timing.platform,
                {"operations": {}, "total_operations": 0, "avg_duration": 0.0},
            )
            op_stats = platform_stats["operations"].setdefault(
                timing.operation,
                {
                    "count": 0,
                    "total_duration": 0.0,
                    "avg_duration": 0.0,
                    "min_duration": float("inf"),
                    "max_duration": 0.0,
                },
            )
            op_stats["count"] += 1
            op_stats["total_duration"] += timing.duration_ms
            op_stats["avg_duration"] = op_stats["total_duration"] / op_stats["count"]
            op_stats["min_duration"] = min(op_stats["min_duration"], timing.duration_ms)
            op_stats["max_duration"] = max(op_stats["max_duration"], timing.duration_ms)
            platform_stats["total_operations"] += 1

        for platform_stats in stats.values():
            total = sum(
                op["total_duration"] for op in platform_stats["operations"].values()
            )
            count = platform_stats["total_operations"]
            platform_stats["avg_duration"] = total / count if count else 0.0

        return stats

    def get_error_stats(self) -> Dict[str, Dict[str, Any]]:
        stats = {}
        for key, record in self._errors.items():
            stats[key] = {
                "count": record.count,
                "last_error": record.errors[-1] if record.errors else None,
                "recent_errors": record.errors[-3:],
            }
        return stats

    def error_count(self, operation: str, platform: Optional[str] = None) -> int:
        """Total errors recorded for an operation, optionally per platform."""
        return sum(
            record.count
            for key, record in self._errors.items()
            if key.rsplit("_", 1)[0] == operation
            and (platform is None or key == f"{operation}_{platform}")
        )

    def timings(self) -> List[OperationTiming]:
        return list(self._timings)
