"""
Result types for explicit success/failure tracking during raffle fetches.

A full fetch never raises for a single bad raffle; instead the dropped
addresses are recorded here so callers can tell a partial collection from a
complete one.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class ErrorSeverity(Enum):
    """Severity levels for processing errors."""

    WARNING = "warning"  # Continue processing, log issue
    ERROR = "error"  # Skip this item, continue others
    CRITICAL = "critical"  # Stop processing entirely


@dataclass
class ProcessingError:
    """
    Represents a single processing error with context.

    Attributes:
        source: Component that generated the error (e.g., "fetcher", "orchestrator")
        message: Human-readable error description
        severity: How severe the error is
        context: Additional context like raffle address, method, platform
        exception: Original exception if available
    """

    source: str
    message: str
    severity: ErrorSeverity
    context: Dict[str, Any] = field(default_factory=dict)
    exception: Optional[Exception] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "source": self.source,
            "message": self.message,
            "severity": self.severity.value,
            "context": self.context,
        }


@dataclass
class FetchSummary:
    """
    Summary of one full raffle fetch.

    Counts are per address handed to the orchestrator.
    """

    chain_id: int
    platform: str
    requested: int = 0
    fetched: int = 0
    dropped: int = 0
    from_cache: bool = False

    errors: List[ProcessingError] = field(default_factory=list)
    dropped_addresses: List[str] = field(default_factory=list)

    def add_dropped(
        self,
        address: str,
        message: str,
        exception: Optional[Exception] = None,
    ) -> None:
        """Record a raffle that did not make it into the collection."""
        self.dropped += 1
        self.dropped_addresses.append(address)
        self.errors.append(
            ProcessingError(
                source="orchestrator",
                message=message,
                severity=ErrorSeverity.ERROR,
                context={"address": address, "platform": self.platform},
                exception=exception,
            )
        )

    @property
    def is_partial(self) -> bool:
        return self.dropped > 0

    def has_errors(self) -> bool:
        """Check if any errors (not just warnings) occurred."""
        return any(
            e.severity in (ErrorSeverity.ERROR, ErrorSeverity.CRITICAL)
            for e in self.errors
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert summary to dictionary for JSON serialization."""
        return {
            "chain_id": self.chain_id,
            "platform": self.platform,
            "success_rate": f"{self.fetched}/{self.requested}"
            if self.requested
            else "N/A",
            "counts": {
                "requested": self.requested,
                "fetched": self.fetched,
                "dropped": self.dropped,
            },
            "from_cache": self.from_cache,
            "dropped_addresses": self.dropped_addresses,
            "errors": [e.to_dict() for e in self.errors],
        }
