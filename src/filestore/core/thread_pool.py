"""
=============================================================================
CONNECTION WORKER POOL
=============================================================================

Runs connection handlers on a bounded set of worker threads so that one
slow client (a large upload, a stalled header block) never blocks the
accept loop or any other connection.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                         POOL LAYOUT                                  │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   accept loop ──submit()──►  ┌──────────────────────┐               │
    │                              │  Task queue (bounded) │               │
    │                              └──────────┬───────────┘               │
    │                                         │ get()                      │
    │                     ┌───────────────────┼───────────────────┐        │
    │                     ▼                   ▼                   ▼        │
    │                ┌─────────┐         ┌─────────┐         ┌─────────┐   │
    │                │Worker-0 │         │Worker-1 │   ...   │Worker-N │   │
    │                └─────────┘         └─────────┘         └─────────┘   │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

    - min_workers threads start immediately
    - submit() adds workers while every one is committed (running or
      queued work), up to max_workers
    - a full queue makes submit(block=False) return False; the caller
      decides what to do with the rejected connection
    - shutdown() sends one None "poison pill" per worker

Each connection is one task, so a connection is always handled start to
finish by a single thread.

=============================================================================
OVERFLOW
=============================================================================

With no socket timeout, a client that never finishes its header block
holds its worker forever. Once max_workers such clients are connected,
queued work would wait behind them indefinitely:

    Worker-0 ── stalled client A (waiting for \r\n\r\n)
    Worker-1 ── stalled client B
    ...
    Worker-N ── stalled client N
    queue    ── GET /notes.txt   ← never picked up

With overflow=True, a task submitted while every worker is already
committed (busy, or spoken for by a queued task) and the pool is at
max_workers runs on a one-off OverflowWorker thread instead of waiting.
The thread exits when its task is done.

=============================================================================
"""

import threading
import queue
import time
import logging
from typing import Callable, Optional, Any
from dataclasses import dataclass, field
from enum import Enum


logger = logging.getLogger(__name__)


class WorkerState(Enum):
    IDLE = "idle"
    BUSY = "busy"
    STOPPED = "stopped"


@dataclass
class Task:
    """A deferred call: func(*args, **kwargs)."""
    func: Callable[..., Any]
    args: tuple = ()
    kwargs: dict = field(default_factory=dict)
    submitted_at: float = field(default_factory=time.time)


class Worker(threading.Thread):
    """Pulls tasks off the shared queue until it receives None."""

    def __init__(self, task_queue: queue.Queue, worker_id: int):
        super().__init__(name=f"Worker-{worker_id}", daemon=True)
        self.task_queue = task_queue
        self.worker_id = worker_id
        self.state = WorkerState.IDLE
        self.tasks_completed = 0
        self.tasks_failed = 0

    def run(self):
        logger.debug(f"Worker {self.worker_id} started")

        while True:
            task = self.task_queue.get()
            try:
                if task is None:
                    break
                self._execute_task(task)
            finally:
                self.task_queue.task_done()

        self.state = WorkerState.STOPPED
        logger.debug(f"Worker {self.worker_id} stopped")

    def _execute_task(self, task: Task):
        self.state = WorkerState.BUSY
        start_time = time.time()

        try:
            task.func(*task.args, **task.kwargs)
            self.tasks_completed += 1
            logger.debug(
                f"Worker {self.worker_id} completed task in {time.time() - start_time:.3f}s"
            )
        except Exception as e:
            # A crashing handler must not take the worker down with it
            self.tasks_failed += 1
            logger.exception(f"Worker {self.worker_id} task failed: {e}")
        finally:
            self.state = WorkerState.IDLE


class OverflowWorker(Worker):
    """Runs a single task on its own thread, then exits."""

    def __init__(self, task: Task, worker_id: int):
        super().__init__(task_queue=None, worker_id=worker_id)
        self.name = f"Overflow-{worker_id}"
        self.task = task

    def run(self):
        self._execute_task(self.task)
        self.state = WorkerState.STOPPED


class ThreadPool:
    """
    Thread pool for connection handling.

    Usage:
        pool = ThreadPool(min_workers=4, max_workers=16, overflow=True)
        pool.start()
        pool.submit(handle_connection, args=(conn,))
        pool.shutdown(wait=True, timeout=30)
    """

    def __init__(
        self,
        min_workers: int = 4,
        max_workers: int = 16,
        queue_size: int = 100,
        overflow: bool = False,
    ):
        self.min_workers = min_workers
        self.max_workers = max_workers
        self.queue_size = queue_size
        self.overflow = overflow

        self._task_queue: queue.Queue[Optional[Task]] = queue.Queue(maxsize=queue_size)
        self._workers: list[Worker] = []
        self._overflow_workers: list[OverflowWorker] = []
        self._overflow_count = 0
        self._lock = threading.Lock()  # Protects _workers and _overflow_workers
        self._started = False
        self._shutdown = False

    def start(self):
        if self._started:
            return

        logger.info(f"Starting thread pool with {self.min_workers} workers")
        with self._lock:
            for _ in range(self.min_workers):
                self._add_worker()
        self._started = True

    def _add_worker(self) -> Worker:
        # Caller holds self._lock
        worker = Worker(self._task_queue, worker_id=len(self._workers))
        self._workers.append(worker)
        worker.start()
        return worker

    def submit(
        self,
        func: Callable[..., Any],
        args: tuple = (),
        kwargs: Optional[dict] = None,
        block: bool = False,
        queue_timeout: Optional[float] = None,
    ) -> bool:
        """
        Queue a call for a worker.

        With overflow enabled, a call that no worker could start right
        away runs on its own OverflowWorker thread instead of queueing.

        Returns:
            True if queued or started, False if the queue was full.

        Raises:
            RuntimeError: If the pool is not started or is shutting down.
        """
        if not self._started:
            raise RuntimeError("Thread pool not started")
        if self._shutdown:
            raise RuntimeError("Thread pool is shutting down")

        task = Task(func=func, args=args, kwargs=kwargs or {})

        overflow_worker = None
        with self._lock:
            if not self._reserve_worker() and self.overflow:
                overflow_worker = self._add_overflow_worker(task)

        if overflow_worker is not None:
            logger.debug(f"All {self.max_workers} workers committed, starting {overflow_worker.name}")
            overflow_worker.start()
            return True

        try:
            self._task_queue.put(task, block=block, timeout=queue_timeout)
        except queue.Full:
            return False

        return True

    def _reserve_worker(self) -> bool:
        """
        Make sure one more task can start without waiting.

        Committed work is every task put on the queue and not yet finished
        (queued or running). Workers are added up to max_workers until
        there is one free for the next task.

        Returns:
            False if every worker is committed and the pool is at max_workers.
        """
        # Caller holds self._lock
        committed = self._task_queue.unfinished_tasks
        while committed >= len(self._workers) and len(self._workers) < self.max_workers:
            logger.debug(f"Scaling up: {len(self._workers)} -> {len(self._workers) + 1} workers")
            self._add_worker()
        return committed < len(self._workers)

    def _add_overflow_worker(self, task: Task) -> OverflowWorker:
        # Caller holds self._lock
        self._overflow_workers = [w for w in self._overflow_workers if w.is_alive()]
        worker = OverflowWorker(task, worker_id=self._overflow_count)
        self._overflow_count += 1
        self._overflow_workers.append(worker)
        return worker

    def shutdown(self, wait: bool = True, timeout: Optional[float] = None):
        """
        Stop every worker after the queued tasks have run.

        Overflow threads are not interrupted; with wait=True they are
        joined within the same timeout as the regular workers.

        Args:
            wait: Join the worker threads.
            timeout: Upper bound in seconds for the whole join.
        """
        if self._shutdown or not self._started:
            return
        self._shutdown = True

        with self._lock:
            workers = list(self._workers)
            overflow_workers = list(self._overflow_workers)

        logger.info(
            f"Shutting down thread pool ({len(workers)} workers, "
            f"{len(overflow_workers)} overflow)"
        )

        # Poison pills queue behind any pending work
        for _ in workers:
            self._task_queue.put(None)

        if wait:
            deadline = None if timeout is None else time.time() + timeout
            for worker in workers + overflow_workers:
                remaining = None if deadline is None else max(0.0, deadline - time.time())
                worker.join(remaining)
                if worker.is_alive():
                    logger.warning(f"{worker.name} did not stop in time")

    @property
    def stats(self) -> dict:
        with self._lock:
            workers = list(self._workers)
            overflow_workers = list(self._overflow_workers)
        everyone = workers + overflow_workers
        return {
            "workers": len(workers),
            "busy": sum(1 for w in workers if w.state == WorkerState.BUSY),
            "overflow": sum(1 for w in overflow_workers if w.is_alive()),
            "queued": self._task_queue.qsize(),
            "completed": sum(w.tasks_completed for w in everyone),
            "failed": sum(w.tasks_failed for w in everyone),
        }
