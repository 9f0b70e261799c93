"""Process-wide holder of the result cache and the metrics sink."""

from dataclasses import dataclass, field
from typing import Optional

from raffle_toolkit.shared.metrics import MetricsSink
from raffle_toolkit.utils.cache import ResultCache


@dataclass
class Aggregator:
    """
    Shared mutable state of the fetch pipeline.

    Construct one per process and pass it to every service that needs the
    cache or the metrics sink. There is no module-level instance.
    """

    cache: ResultCache = field(default_factory=ResultCache)
    metrics: MetricsSink = field(default_factory=MetricsSink)

    @classmethod
    def create(cls, ttl: Optional[float] = None) -> "Aggregator":
        return cls(cache=ResultCache(ttl=ttl), metrics=MetricsSink())
