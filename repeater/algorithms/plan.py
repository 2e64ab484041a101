"""
Plan builder: turns sorted access records into offset-annotated requests.
"""

import logging
import math
from operator import attrgetter
from typing import Iterable, List, Optional

from repeater.configuration import DEFAULT_TIME_FACTOR
from repeater.errors import BadConfigError, EmptyPlanError
from repeater.persistence.record import AccessRecord, PlannedRequest
from repeater.systems.base import HostResolver

logger = logging.getLogger(__name__)


class PlanBuilder:
    """Builds the replay plan for a set of records.

    The anchor is the timestamp of the first record that survives host
    resolution, so the first planned request always has a zero offset. Every
    offset is scaled by the time factor: 0.5 finishes the replay in half the
    time (double the load), 2.0 in double the time (half the load).
    """

    def __init__(self, resolver: HostResolver, time_factor: Optional[float] = None):
        if time_factor is None:
            time_factor = DEFAULT_TIME_FACTOR
        if not math.isfinite(time_factor) or time_factor < 0:
            raise BadConfigError(f"Time factor must be a non-negative number, got {time_factor}")

        self.resolver = resolver
        self.time_factor = time_factor

        logger.debug(f"Initialized PlanBuilder with {resolver!r}, time_factor={time_factor}")

    def build(self, records: Iterable[AccessRecord]) -> List[PlannedRequest]:
        """Build the plan.

        Raises:
            UnmappedDomainError: If a record's domain has no mapping entry
            EmptyPlanError: If no record survives host resolution
        """
        records = sorted(records, key=attrgetter("timestamp"))
        plan: List[PlannedRequest] = []
        anchor = None
        dropped = 0

        for record in records:
            scheme_and_host = self.resolver.resolve(record)
            if scheme_and_host is None:
                dropped += 1
                continue

            if anchor is None:
                anchor = record.timestamp
            offset = (record.timestamp - anchor) * self.time_factor

            url = f"{scheme_and_host}{record.path}{record.parameters}"
            plan.append(PlannedRequest(offset=offset, url=url, record=record))

        if not plan:
            if records:
                raise EmptyPlanError(f"All {len(records)} records were dropped by host resolution")
            raise EmptyPlanError("No records in provided file")

        if dropped:
            logger.info(f"Dropped {dropped} of {len(records)} records during host resolution")

        return plan
