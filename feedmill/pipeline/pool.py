import logging
import queue
from concurrent.futures import ThreadPoolExecutor
from threading import Event
from typing import Any, Callable, Iterable, List, Optional

from feedmill.errors import BatchTimeoutError
from feedmill.utils.time_utils import Deadline

logger = logging.getLogger(__name__)

DEFAULT_WORKERS = 10
DEFAULT_TIMEOUT = 10.0

Enricher = Callable[[Any, Deadline], Any]

_DONE = object()  # pushed by each worker when it stops pulling


class EnrichmentPool:
    """
    Bounded fan-out/fan-in over a fixed number of worker threads.

    All items go into one shared queue, `workers` threads pull from it and
    push (result, error) pairs onto one result queue, and the calling thread
    drains that queue. The first error, or the batch deadline passing, sets
    the shared cancel event and is raised; a failed batch never returns a
    partial result.
    """

    def __init__(self, workers: int = DEFAULT_WORKERS, timeout: float = DEFAULT_TIMEOUT):
        if workers < 1:
            raise ValueError("workers must be >= 1")
        self.workers = workers
        self.timeout = timeout

    def run(self, items: Iterable[Any], enrich: Enricher, key: Optional[Callable[[Any], Any]] = None) -> List[Any]:
        """
        Enrich every item and return the results, newest first by `key`.

        Sorting is stable, but results with equal keys keep their arrival
        order, which varies from run to run.
        """
        items = list(items)
        if not items:
            return []

        deadline = Deadline(self.timeout)
        cancel = Event()
        pending: "queue.Queue[Any]" = queue.Queue()
        for item in items:
            pending.put(item)
        results: "queue.Queue[Any]" = queue.Queue()

        n = min(self.workers, len(items))
        executor = ThreadPoolExecutor(max_workers=n, thread_name_prefix="enrich")
        try:
            for _ in range(n):
                executor.submit(_worker, pending, results, enrich, deadline, cancel)
            out = _drain(results, n, deadline)
        finally:
            # stops idle workers; ones blocked on I/O exit when their request times out
            cancel.set()
            executor.shutdown(wait=False, cancel_futures=True)

        logger.debug("Enriched %d items with %d workers", len(out), n)
        if key is not None:
            out.sort(key=key, reverse=True)
        return out


def _worker(pending: "queue.Queue[Any]", results: "queue.Queue[Any]", enrich: Enricher,
            deadline: Deadline, cancel: Event) -> None:
    try:
        while not cancel.is_set():
            try:
                item = pending.get_nowait()
            except queue.Empty:
                return
            try:
                results.put((enrich(item, deadline), None))
            except Exception as e:
                results.put((None, e))
    finally:
        results.put(_DONE)


def _drain(results: "queue.Queue[Any]", workers: int, deadline: Deadline) -> List[Any]:
    out: List[Any] = []
    running = workers
    while running:
        left = deadline.remaining()
        if left <= 0:
            raise BatchTimeoutError(f"batch timed out with {len(out)} items enriched")
        try:
            msg = results.get(timeout=left)
        except queue.Empty:
            raise BatchTimeoutError(f"batch timed out with {len(out)} items enriched") from None
        if msg is _DONE:
            running -= 1
            continue
        value, err = msg
        if err is not None:
            raise err
        out.append(value)
    return out
