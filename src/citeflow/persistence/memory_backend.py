"""In-memory backends for unit tests and local runs: dict-backed fakes."""

from __future__ import annotations

import queue
import threading

from citeflow.core.exceptions import ExtensionError, ObjectNotFoundError
from citeflow.models.messages import QueueMessage


class MemoryObjectFetcher:
    """Dict-backed IObjectFetcher keyed by (bucket, key)."""

    def __init__(self) -> None:
        self._objects: dict[tuple[str, str], bytes] = {}
        self.calls: list[tuple[str, str]] = []

    def put(self, bucket: str, key: str, data: bytes) -> None:
        self._objects[(bucket, key)] = data

    def fetch(self, bucket: str, key: str) -> bytes:
        self.calls.append((bucket, key))
        try:
            return self._objects[(bucket, key)]
        except KeyError:
            raise ObjectNotFoundError(bucket, key, "object not found (NoSuchKey)") from None


class MemoryMessageQueue:
    """Thread-safe IMessageQueue double recording visibility extensions."""

    def __init__(self, fail_extensions: bool = False) -> None:
        self._pending: queue.Queue[QueueMessage] = queue.Queue()
        self._lock = threading.Lock()
        self._fail_extensions = fail_extensions
        self.extensions: list[tuple[str, int]] = []

    def send(self, message: QueueMessage) -> None:
        self._pending.put(message)

    def receive(self, max_messages: int = 10, wait_time_seconds: int = 20) -> list[QueueMessage]:
        messages: list[QueueMessage] = []
        try:
            messages.append(self._pending.get(timeout=min(wait_time_seconds, 0.05)))
            while len(messages) < max_messages:
                messages.append(self._pending.get_nowait())
        except queue.Empty:
            pass
        return messages

    def extend_visibility(self, receipt_handle: str, seconds: int) -> None:
        if self._fail_extensions:
            raise ExtensionError(f"visibility extension rejected for {receipt_handle!r}")
        with self._lock:
            self.extensions.append((receipt_handle, seconds))


class MemoryCacheBackend:
    """Dict-backed ICacheBackend for unit tests."""

    def __init__(self) -> None:
        self._store: dict[str, str] = {}
        self.ttls: dict[str, int] = {}

    def get(self, key: str) -> str | None:
        return self._store.get(key)

    def setex(self, key: str, ttl: int, value: str) -> None:
        self._store[key] = value
        self.ttls[key] = ttl

    def delete(self, key: str) -> None:
        self._store.pop(key, None)
        self.ttls.pop(key, None)
