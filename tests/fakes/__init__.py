"""Shared test doubles: re-export memory backends and mock services."""

from __future__ import annotations

from citeflow.persistence.memory_backend import (
    MemoryCacheBackend,
    MemoryMessageQueue,
    MemoryObjectFetcher,
)
from citeflow.services.mock_services import MockEnrichmentClient, MockExtractionClient


class FakeClock:
    """Manually advanced monotonic clock; ``sleep`` advances it instead of blocking."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


__all__ = [
    "FakeClock",
    "MemoryCacheBackend",
    "MemoryMessageQueue",
    "MemoryObjectFetcher",
    "MockEnrichmentClient",
    "MockExtractionClient",
]
