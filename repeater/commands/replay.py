"""
The ``run`` command: replay an export against the target host with the
recorded relative timing.
"""

import logging
from typing import Any, Dict, Optional, TextIO

from tqdm.contrib.logging import logging_redirect_tqdm

from repeater.algorithms.plan import PlanBuilder
from repeater.common.dispatcher import Dispatcher
from repeater.common.metrics_utils import summarize_run
from repeater.configuration import DEFAULT_CONNECTION_LIMIT, REQUEST_TIMEOUT_SECONDS
from repeater.errors import AbortedError
from repeater.observability.progress import ProgressReporter
from repeater.persistence.emitter import ResultEmitter
from repeater.persistence.reader import read_records
from repeater.persistence.record import MeasurementRecord
from repeater.systems.base import HostResolver

logger = logging.getLogger(__name__)


class ReplayRunner:
    """Reads, plans, dispatches and emits one replay run."""

    def __init__(
        self,
        input_file: str,
        resolver: HostResolver,
        time_factor: Optional[float] = None,
        timeout: Optional[float] = REQUEST_TIMEOUT_SECONDS,
        connection_limit: int = DEFAULT_CONNECTION_LIMIT,
        show_progress: bool = True,
        stream: Optional[TextIO] = None,
        diagnostics: Optional[TextIO] = None,
    ):
        self.input_file = input_file
        self.timeout = timeout
        self.connection_limit = connection_limit
        self.show_progress = show_progress
        self.stream = stream
        self.diagnostics = diagnostics

        # Validates the time factor before the input is read
        self.plan_builder = PlanBuilder(resolver, time_factor)

    async def run_replay(self) -> Dict[str, Any]:
        """Execute the replay.

        Returns:
            Run summary (see ``summarize_run``)

        Raises:
            AbortedError: If the run was interrupted; collected results are
                emitted before this is raised
        """
        records = read_records(self.input_file)
        plan = self.plan_builder.build(records)

        logger.info(
            f"Starting to execute {len(plan)} requests, "
            f"minimum runtime is: {plan[-1].offset.total_seconds():.3f}s"
        )

        with logging_redirect_tqdm():
            with ProgressReporter(len(plan), enabled=self.show_progress, stream=self.diagnostics) as progress:
                dispatcher = Dispatcher(
                    plan,
                    progress=progress,
                    timeout=self.timeout,
                    connection_limit=self.connection_limit,
                )
                results = await dispatcher.run()

        emitter = ResultEmitter(self.stream, self.diagnostics)
        emitter.emit(results)

        measurements = [result for result in results if isinstance(result, MeasurementRecord)]
        summary = summarize_run(measurements, planned=len(plan), failed=emitter.failed)
        self._log_summary(summary)

        if dispatcher.interrupted:
            raise AbortedError("Aborted with CTRL-C")
        return summary

    def _log_summary(self, summary: Dict[str, Any]) -> None:
        logger.info(
            f"Requests: {summary['planned_requests']} planned, "
            f"{summary['successful_requests']} succeeded, {summary['failed_requests']} failed, "
            f"{summary['unfinished_requests']} unfinished"
        )
        if summary['successful_requests']:
            timing = summary['required_time']
            change = summary['change_percentage']
            logger.info(
                f"Required time: avg={timing['avg']:.4f}s, p50={timing['p50']:.4f}s, "
                f"p95={timing['p95']:.4f}s, p99={timing['p99']:.4f}s"
            )
            logger.info(
                f"Change: avg={change['avg']:.1f}%, p50={change['p50']:.1f}%, "
                f"p95={change['p95']:.1f}%, p99={change['p99']:.1f}%"
            )
