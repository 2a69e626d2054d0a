"""WorkerPool: one poller feeding N worker threads through a bounded channel."""

from __future__ import annotations

import logging
import queue
import threading

from citeflow.core.exceptions import CiteflowError
from citeflow.core.protocols import IMessageQueue
from citeflow.models.messages import QueueMessage
from citeflow.models.pipeline import PoolStats, ProcessingOutcome, ProcessingStage
from citeflow.worker.processor import MessageProcessor

logger = logging.getLogger(__name__)

_CHANNEL_TIMEOUT_SECONDS = 0.5
_RECEIVE_ERROR_BACKOFF_SECONDS = 5.0


class WorkerPool:
    """Runs ``worker_count`` independent workers over a shared inbound channel.

    Each worker handles one message at a time and hands it to the processor
    synchronously. There is no worker-level retry: failed messages become
    visible again on the queue once their visibility timeout expires.
    """

    def __init__(
        self,
        processor: MessageProcessor,
        source: IMessageQueue,
        *,
        worker_count: int,
        channel_size: int = 10,
        max_messages: int = 10,
        wait_time_seconds: int = 20,
    ) -> None:
        if worker_count < 1:
            raise ValueError(f"worker_count must be at least 1, got {worker_count}")
        self._processor = processor
        self._source = source
        self._worker_count = worker_count
        self._max_messages = max_messages
        self._wait_time_seconds = wait_time_seconds
        self._channel: queue.Queue[QueueMessage] = queue.Queue(maxsize=channel_size)
        self._stop = threading.Event()
        self._stats_lock = threading.Lock()
        self._stats = PoolStats()
        self._threads: list[threading.Thread] = []

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def start(self, *, poll: bool = True) -> None:
        """Spawn the worker threads, and the queue poller unless ``poll`` is False."""
        if self._threads:
            raise RuntimeError("WorkerPool already started")
        self._stop.clear()
        for worker_id in range(1, self._worker_count + 1):
            thread = threading.Thread(
                target=self._worker_loop, args=(worker_id,), name=f"worker-{worker_id}", daemon=True,
            )
            thread.start()
            self._threads.append(thread)
        if poll:
            poller = threading.Thread(target=self._poll_loop, name="poller", daemon=True)
            poller.start()
            self._threads.append(poller)

    def run_forever(self) -> None:
        """Start the pool and block until ``stop()`` is called or Ctrl-C."""
        self.start()
        try:
            while not self._stop.wait(timeout=1.0):
                pass
        except KeyboardInterrupt:
            logger.info("Interrupted, stopping worker pool")
        finally:
            self.stop()

    def submit(self, message: QueueMessage, timeout: float | None = None) -> None:
        """Put a message on the channel directly, blocking while it is full."""
        self._channel.put(message, timeout=timeout)

    def drain(self) -> None:
        """Block until every message put on the channel has been processed."""
        self._channel.join()

    def stop(self, timeout: float | None = 5.0) -> None:
        if self._stop.is_set() and not self._threads:
            return
        self._stop.set()
        for thread in self._threads:
            thread.join(timeout=timeout)
        self._threads.clear()
        dropped = self._discard_pending()
        if dropped:
            logger.info("Dropped %d undelivered messages; the queue will redeliver them", dropped)
        logger.info("Worker pool stopped: %s", self.stats().model_dump())

    def stats(self) -> PoolStats:
        with self._stats_lock:
            return self._stats.model_copy(deep=True)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _poll_loop(self) -> None:
        logger.info("Starting queue poller")
        while not self._stop.is_set():
            try:
                messages = self._source.receive(
                    max_messages=self._max_messages, wait_time_seconds=self._wait_time_seconds,
                )
            except CiteflowError as exc:
                logger.error("Queue receive failed, backing off: %s", exc)
                self._stop.wait(_RECEIVE_ERROR_BACKOFF_SECONDS)
                continue
            for message in messages:
                while not self._stop.is_set():
                    try:
                        self._channel.put(message, timeout=_CHANNEL_TIMEOUT_SECONDS)
                        break
                    except queue.Full:
                        continue

    def _worker_loop(self, worker_id: int) -> None:
        logger.info("Starting worker %d...", worker_id)
        while not self._stop.is_set():
            try:
                message = self._channel.get(timeout=_CHANNEL_TIMEOUT_SECONDS)
            except queue.Empty:
                continue
            try:
                outcome = self._processor.process(message, worker_id=worker_id)
            except Exception:
                # A bug in one message must not take the worker down with it.
                logger.exception("Worker %d crashed processing message %s", worker_id, message.message_id)
                with self._stats_lock:
                    self._stats.received += 1
                    self._stats.crashed += 1
            else:
                self._record(outcome)
            finally:
                self._channel.task_done()

    def _discard_pending(self) -> int:
        dropped = 0
        while True:
            try:
                self._channel.get_nowait()
            except queue.Empty:
                return dropped
            self._channel.task_done()
            dropped += 1

    def _record(self, outcome: ProcessingOutcome) -> None:
        with self._stats_lock:
            self._stats.received += 1
            if outcome.stage == ProcessingStage.ABORTED:
                self._stats.aborted += 1
                key = str(outcome.failed_stage)
                self._stats.aborted_by_stage[key] = self._stats.aborted_by_stage.get(key, 0) + 1
            else:
                self._stats.completed += 1
                if not outcome.extended:
                    self._stats.extension_failures += 1
