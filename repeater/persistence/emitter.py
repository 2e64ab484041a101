"""
Emission of dispatch results: JSON lines on stdout, failures on stderr.
"""

import json
import logging
import sys
from typing import Iterable, Optional, TextIO

from repeater.errors import RequestFailureError
from repeater.persistence.record import MeasurementRecord

logger = logging.getLogger(__name__)


class ResultEmitter:
    """Writes measurements as compact JSON lines and failures as diagnostics.

    Attributes:
        stream: Primary output, receives one JSON object per measurement
        diagnostics: Diagnostic output, receives one line per failure
        emitted: Number of measurement lines written
        failed: Number of failure lines written
    """

    def __init__(self, stream: Optional[TextIO] = None, diagnostics: Optional[TextIO] = None):
        self.stream = stream or sys.stdout
        self.diagnostics = diagnostics or sys.stderr
        self.emitted = 0
        self.failed = 0

    def emit(self, results: Iterable[object]) -> None:
        """Write every result, then flush both streams."""
        for result in results:
            if isinstance(result, MeasurementRecord):
                self.write_measurement(result)
            elif isinstance(result, RequestFailureError):
                self.write_failure(result)
            else:
                raise TypeError(f"Unexpected dispatch result: {result!r}")

        self.stream.flush()
        self.diagnostics.flush()
        logger.debug(f"Emitted {self.emitted} measurements and {self.failed} failures")

    def write_measurement(self, record: MeasurementRecord) -> None:
        self.stream.write(json.dumps(record.to_dict(), separators=(",", ":")))
        self.stream.write("\n")
        self.emitted += 1

    def write_failure(self, error: RequestFailureError) -> None:
        self.diagnostics.write(f"{error}\n")
        self.failed += 1
