"""Fire-and-forget persistence writes."""

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)

# one worker keeps writes in submission order
executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="family-writes")

Job = Callable[[], Any]
FailureCallback = Callable[[BaseException], None]


def _running_loop() -> Optional[asyncio.AbstractEventLoop]:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None


class PersistenceWriter:
    """Run store writes without blocking the caller.

    Inside an asyncio loop (the NiceGUI case) jobs run on a single worker
    thread and their callbacks come back on the loop. Without a loop, jobs
    run inline, which is what scripts and tests get.
    """

    def __init__(self, pool: Optional[ThreadPoolExecutor] = None):
        self.pool = pool or executor
        self.pending = 0
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    def attach(self) -> None:
        """Remember the running loop so call_soon can marshal onto it."""
        self._loop = _running_loop() or self._loop

    @property
    def idle(self) -> bool:
        return self.pending == 0

    def submit(self, description: str, job: Job,
               on_success: Optional[Callable[[], None]] = None,
               on_failure: Optional[FailureCallback] = None) -> None:
        """Queue a write. Errors are logged and passed to on_failure, never raised."""
        self.pending += 1
        loop = _running_loop()
        if loop is None:
            try:
                job()
            except Exception as e:
                self._finish(description, e, on_success, on_failure)
            else:
                self._finish(description, None, on_success, on_failure)
            return

        self._loop = loop
        future = loop.run_in_executor(self.pool, job)

        def done(f: asyncio.Future):
            if f.cancelled():
                error: Optional[BaseException] = asyncio.CancelledError()
            else:
                error = f.exception()
            self._finish(description, error, on_success, on_failure)

        future.add_done_callback(done)

    def _finish(self, description, error, on_success, on_failure):
        self.pending -= 1
        if error is None:
            logger.debug("Saved: %s", description)
            if on_success:
                on_success()
            return
        logger.error("Failed to save %s: %s", description, error)
        if on_failure:
            on_failure(error)

    def call_soon(self, callback: Callable[..., None], *args) -> None:
        """Run a callback on the owning loop, from any thread."""
        loop = self._loop
        if loop is not None and not loop.is_closed():
            loop.call_soon_threadsafe(callback, *args)
        else:
            callback(*args)
