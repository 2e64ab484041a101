"""
Async dispatcher that replays planned requests at their offsets.

One task per planned request is created up front. Each task sleeps until its
offset (measured from the moment all tasks were spawned), issues a GET over
the shared client session and records either a measurement or a failure.
"""

import asyncio
import logging
import signal
import time
from typing import List, Optional, Sequence, Union

import aiohttp
from yarl import URL

from repeater.configuration import (
    DEFAULT_CONNECTION_LIMIT,
    LOG_URL_TRUNCATE,
    REQUEST_TIMEOUT_SECONDS,
    SUCCESS_STATUS_MAX,
    SUCCESS_STATUS_MIN,
)
from repeater.errors import RequestFailureError
from repeater.observability.progress import ProgressReporter
from repeater.persistence.record import MeasurementRecord, PlannedRequest

# Suppress aiohttp internals before any session is created
logging.getLogger('aiohttp').setLevel(logging.WARNING)

logger = logging.getLogger(__name__)

DispatchResult = Union[MeasurementRecord, RequestFailureError]


class Dispatcher:
    """Dispatches a replay plan over a single shared aiohttp session.

    There is no throttling beyond each task's initial sleep. A late task does
    not delay the ones planned after it.
    """

    def __init__(
        self,
        plan: Sequence[PlannedRequest],
        progress: Optional[ProgressReporter] = None,
        timeout: Optional[float] = REQUEST_TIMEOUT_SECONDS,
        connection_limit: int = DEFAULT_CONNECTION_LIMIT,
        handle_interrupt: bool = True,
    ):
        """Initialize the dispatcher.

        Args:
            plan: Planned requests, offsets relative to the plan's anchor
            progress: Reporter incremented once per finished request
            timeout: Total per-request timeout in seconds (None keeps the client default)
            connection_limit: Connection pool size (0 means unlimited)
            handle_interrupt: Install a SIGINT handler that stops the run
        """
        self.plan = list(plan)
        self.progress = progress
        self.timeout = timeout
        self.connection_limit = connection_limit
        self.handle_interrupt = handle_interrupt

        self.stop_event = asyncio.Event()
        self.interrupted = False

        self._results: List[DispatchResult] = []
        self._completed = 0
        self._finished = asyncio.Event()
        self._started_at = 0.0

    def stop(self) -> None:
        """Stop collecting results; unfinished requests are discarded."""
        self.stop_event.set()

    async def run(self) -> List[DispatchResult]:
        """Dispatch every planned request and collect the results.

        Returns:
            Results in completion order. After an interrupt only the results
            collected up to that point are returned and ``interrupted`` is set.
        """
        loop = asyncio.get_running_loop()
        interrupt_installed = self.handle_interrupt and self._install_interrupt_handler(loop)

        try:
            async with self._create_session() as session:
                self._started_at = loop.time()
                tasks = [
                    asyncio.create_task(self._dispatch_and_record(session, planned))
                    for planned in self.plan
                ]
                if not tasks:
                    self._finished.set()

                finished = asyncio.create_task(self._finished.wait())
                stopped = asyncio.create_task(self.stop_event.wait())
                await asyncio.wait({finished, stopped}, return_when=asyncio.FIRST_COMPLETED)

                self.interrupted = not self._finished.is_set()
                results = list(self._results)

                finished.cancel()
                stopped.cancel()
                if not self.interrupted:
                    # Re-raises anything other than a request failure
                    await asyncio.gather(*tasks)
                else:
                    pending = [task for task in tasks if not task.done()]
                    logger.warning(f"Interrupted, discarding {len(pending)} unfinished requests")
                    for task in pending:
                        task.cancel()
                    await asyncio.gather(*pending, return_exceptions=True)
        finally:
            if interrupt_installed:
                loop.remove_signal_handler(signal.SIGINT)

        return results

    def _install_interrupt_handler(self, loop: asyncio.AbstractEventLoop) -> bool:
        try:
            loop.add_signal_handler(signal.SIGINT, self.stop)
        except (NotImplementedError, RuntimeError, ValueError) as e:
            logger.debug(f"Cannot install SIGINT handler, relying on KeyboardInterrupt: {e}")
            return False
        return True

    def _create_session(self) -> aiohttp.ClientSession:
        """Create the shared session: pooled connector, no cookie state."""
        options = {
            "connector": aiohttp.TCPConnector(limit=self.connection_limit),
            "cookie_jar": aiohttp.DummyCookieJar(),
        }
        if self.timeout is not None:
            options["timeout"] = aiohttp.ClientTimeout(total=self.timeout)
        return aiohttp.ClientSession(**options)

    async def _dispatch_and_record(self, session: aiohttp.ClientSession, planned: PlannedRequest):
        try:
            result = await self._dispatch(session, planned)
        except RequestFailureError as e:
            result = e
        except Exception:
            self._mark_completed()
            raise

        self._results.append(result)
        self._mark_completed()

    def _mark_completed(self) -> None:
        self._completed += 1
        if self.progress is not None:
            self.progress.increment()
        if self._completed == len(self.plan):
            self._finished.set()

    async def _dispatch(self, session: aiohttp.ClientSession, planned: PlannedRequest) -> MeasurementRecord:
        """Sleep until the planned offset, then GET the URL and measure it.

        Raises:
            RequestFailureError: If the request fails or the status is not 2xx
        """
        loop = asyncio.get_running_loop()
        delay = self._started_at + planned.offset.total_seconds() - loop.time()
        if delay > 0:
            await asyncio.sleep(delay)
        waited_for = loop.time() - self._started_at

        start = time.perf_counter()
        try:
            async with session.get(URL(planned.url, encoded=True)) as response:
                await response.read()
                status = response.status
                reason = response.reason
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            raise RequestFailureError(planned.url, str(e) or type(e).__name__) from e
        required_time = time.perf_counter() - start

        logger.debug(
            f"Request={planned.url[:LOG_URL_TRUNCATE]}..., waited_for={waited_for:.3f}s, "
            f"status={status}, required_time={required_time:.6f}s"
        )

        if not SUCCESS_STATUS_MIN <= status <= SUCCESS_STATUS_MAX:
            raise RequestFailureError(planned.url, f"HTTP status {status} {reason or ''}".rstrip())

        return MeasurementRecord(
            url=planned.url,
            status=status,
            required_time=required_time,
            original_time=planned.record.required_time,
        )
