"""
Periodic tasks and fire-and-forget dispatch.

``RepeatingTask`` runs a callback on a daemon thread every ``interval``
seconds until its stop flag is set. Dispatchers run outbound writes off
the caller's thread so no user action waits on the network.
"""
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Optional

from ..utils import get_logger

log = get_logger(__name__)


class RepeatingTask:
    """Cancellable repeating task with a stop flag checked before each run."""

    def __init__(self, name: str, interval: float, callback: Callable[[], Any]):
        self.name = name
        self.interval = interval
        self.callback = callback
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def stopped(self) -> bool:
        return self._stop.is_set()

    def start(self) -> None:
        if self._thread is not None:
            log.warning("Task %s already running; ignoring duplicate start", self.name)
            return
        self._thread = threading.Thread(target=self._run, name=f"hoopsync-{self.name}", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        self._stop.set()

    def join(self, timeout: Optional[float] = None) -> None:
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout)

    def run_once(self) -> None:
        """Run the callback now; errors are logged and never stop the loop."""
        try:
            self.callback()
        except Exception:
            log.exception("Task %s raised; rescheduling", self.name)

    def _run(self) -> None:
        while not self._stop.wait(self.interval):
            self.run_once()


class ThreadDispatcher:
    """Runs fire-and-forget jobs on a small thread pool."""

    def __init__(self, max_workers: int = 4):
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="hoopsync-write")

    def submit(self, fn: Callable[..., Any], *args: Any) -> Future:
        return self._executor.submit(fn, *args)

    def shutdown(self, wait: bool = False) -> None:
        self._executor.shutdown(wait=wait)


class ImmediateDispatcher:
    """Runs jobs inline on the caller's thread (scripts and tests)."""

    def submit(self, fn: Callable[..., Any], *args: Any) -> Future:
        future: Future = Future()
        try:
            future.set_result(fn(*args))
        except Exception as e:
            future.set_exception(e)
        return future

    def shutdown(self, wait: bool = False) -> None:
        pass
