# FILE: services/task_queue.py
import heapq
import itertools
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional


@dataclass(order=True)
class ScheduledJob:
    run_at: float
    seq: int
    name: str = field(compare=False)
    kwargs: Dict[str, Any] = field(compare=False, default_factory=dict)


class TaskQueue:
    """In-memory deferred job queue ordered by due time, then enqueue order."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._heap: List[ScheduledJob] = []
        self._counter = itertools.count()
        self._lock = threading.RLock()
        self._wakeup = threading.Condition(self._lock)

    def enqueue(self, name: str, run_after: float = 0.0, **kwargs) -> ScheduledJob:
        job = ScheduledJob(
            run_at=self._clock() + max(0.0, run_after),
            seq=next(self._counter),
            name=name,
            kwargs=kwargs,
        )
        with self._lock:
            heapq.heappush(self._heap, job)
            self._wakeup.notify_all()
        return job

    def pop_due(self, now: Optional[float] = None) -> Optional[ScheduledJob]:
        with self._lock:
            current = self._clock() if now is None else now
            if self._heap and self._heap[0].run_at <= current:
                return heapq.heappop(self._heap)
            return None

    def pop_next(self) -> Optional[ScheduledJob]:
        # Ignores due time.
        with self._lock:
            return heapq.heappop(self._heap) if self._heap else None

    def wait(self, timeout: float) -> None:
        with self._lock:
            self._wakeup.wait(timeout)

    def notify(self) -> None:
        with self._lock:
            self._wakeup.notify_all()

    def pending(self) -> List[ScheduledJob]:
        with self._lock:
            return sorted(self._heap)

    def __len__(self) -> int:
        with self._lock:
            return len(self._heap)


class JobWorker:
    """
    Dequeues jobs and runs each inside its own application context.

    A job that raises is logged and dropped; the loop keeps going. Tests call
    ``run_pending`` / ``drain`` directly instead of starting the thread.
    """

    def __init__(self, app, queue: TaskQueue, handlers: Dict[str, Callable[..., Any]], poll_interval: float = 0.5):
        self.app = app
        self.queue = queue
        self.handlers = handlers
        self.poll_interval = poll_interval
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def execute(self, job: ScheduledJob) -> bool:
        handler = self.handlers.get(job.name)
        if handler is None:
            self.app.logger.error("No handler registered for job %s", job.name)
            return False
        with self.app.app_context():
            try:
                handler(**job.kwargs)
                return True
            except Exception as exc:
                self.app.logger.exception("Job %s failed with %s: %s", job.name, job.kwargs, exc)
                return False

    def run_pending(self, now: Optional[float] = None) -> int:
        ran = 0
        while True:
            job = self.queue.pop_due(now)
            if job is None:
                return ran
            self.execute(job)
            ran += 1

    def drain(self, limit: int = 1000) -> int:
        # Runs everything, including jobs enqueued by jobs, in due-time order.
        ran = 0
        while ran < limit:
            job = self.queue.pop_next()
            if job is None:
                break
            self.execute(job)
            ran += 1
        return ran

    def _loop(self) -> None:
        self.app.logger.info("Job worker started")
        while not self._stop.is_set():
            if self.run_pending() == 0:
                self.queue.wait(self.poll_interval)
        self.app.logger.info("Job worker stopped")

    def start(self) -> None:
        if self._thread and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._loop, name="interview-job-worker", daemon=True)
        self._thread.start()

    def stop(self, timeout: float = 5.0) -> None:
        self._stop.set()
        self.queue.notify()
        if self._thread:
            self._thread.join(timeout)
