"""
Prometheus metrics for access control decisions.
"""

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Optional

from prometheus_client import (
    CollectorRegistry, Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
)


logger = logging.getLogger(__name__)


@dataclass
class MetricConfig:
    """Configuration for decision metrics."""

    enabled: bool = True
    namespace: str = "gatekeeper"


class DecisionMetrics:
    """Counts decisions and votes in a private Prometheus registry."""

    def __init__(self, config: Optional[MetricConfig] = None,
                 registry: Optional[CollectorRegistry] = None):
        self.config = config or MetricConfig()
        self.registry = registry or CollectorRegistry()

        ns = self.config.namespace
        self.decisions = Counter(
            f'{ns}_access_decisions_total',
            'Total number of access control decisions',
            ['strategy', 'allowed'],
            registry=self.registry
        )

        self.votes = Counter(
            f'{ns}_votes_total',
            'Total number of votes cast by voters',
            ['voter', 'vote'],
            registry=self.registry
        )

        self.decision_latency = Histogram(
            f'{ns}_decision_duration_seconds',
            'Access decision duration in seconds',
            ['strategy'],
            buckets=[0.00001, 0.00005, 0.0001, 0.0005, 0.001, 0.005, 0.01, 0.05],
            registry=self.registry
        )

        if not self.config.enabled:
            logger.info("Decision metrics disabled")

    def record_vote(self, voter: str, vote: int) -> None:
        if not self.config.enabled:
            return
        label = "grant" if vote > 0 else "deny" if vote < 0 else "abstain"
        self.votes.labels(voter=voter, vote=label).inc()

    def record_decision(self, strategy: str, allowed: bool) -> None:
        if not self.config.enabled:
            return
        self.decisions.labels(strategy=strategy, allowed=str(allowed).lower()).inc()

    @contextmanager
    def time_decision(self, strategy: str) -> Iterator[None]:
        """Observe the duration of the enclosed decision."""
        start = time.perf_counter()
        try:
            yield
        finally:
            if self.config.enabled:
                self.decision_latency.labels(strategy=strategy).observe(
                    time.perf_counter() - start
                )

    def get_sample(self, name: str, **labels) -> Optional[float]:
        """Return the current value of a sample, or None if it was never set."""
        return self.registry.get_sample_value(name, labels)

    def export(self) -> bytes:
        """Render the registry in the Prometheus text exposition format."""
        return generate_latest(self.registry)

    @property
    def content_type(self) -> str:
        return CONTENT_TYPE_LATEST
