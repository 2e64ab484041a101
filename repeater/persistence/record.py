"""
Data structures for the repeater: recorded requests, planned requests and
measurements.
"""

import math
from datetime import datetime, timedelta
from typing import Any, Dict, Optional


class AccessRecord:
    """One recorded request from an access-log export."""

    def __init__(self, timestamp: datetime, path: str, parameters: str = "",
                 required_time: float = 0.0, domain_name: Optional[str] = None):
        self.timestamp = timestamp
        self.domain_name = domain_name or None
        self.path = path
        self.parameters = parameters or ""
        self.required_time = required_time

    @property
    def path_and_parameters(self) -> str:
        """Path with the recorded query fragment appended verbatim."""
        return f"{self.path}{self.parameters}"

    def __repr__(self) -> str:
        return (
            f"AccessRecord(timestamp={self.timestamp.isoformat()}, domain_name={self.domain_name!r}, "
            f"path={self.path!r}, parameters={self.parameters!r}, required_time={self.required_time})"
        )


class PlannedRequest:
    """A record paired with its dispatch offset and absolute URL."""

    def __init__(self, offset: timedelta, url: str, record: AccessRecord):
        self.offset = offset
        self.url = url
        self.record = record

    def __repr__(self) -> str:
        return f"PlannedRequest(offset={self.offset.total_seconds():.3f}s, url={self.url!r})"


class MeasurementRecord:
    """Result of one successful dispatch."""

    def __init__(self, url: str, status: int, required_time: float, original_time: float):
        self.url = url
        self.status = status
        self.required_time = required_time
        self.original_time = original_time
        self.change_percentage = calculate_change_percentage(required_time, original_time)

    def to_dict(self) -> Dict[str, Any]:
        """Serialisable form, keys in output order.

        A non-finite change percentage (recorded time of zero) becomes None.
        """
        change_percentage = self.change_percentage
        if not math.isfinite(change_percentage):
            change_percentage = None
        return {
            "url": self.url,
            "status": self.status,
            "required_time": self.required_time,
            "original_time": self.original_time,
            "change_percentage": change_percentage,
        }

    def __repr__(self) -> str:
        return (
            f"MeasurementRecord(url={self.url!r}, status={self.status}, "
            f"required_time={self.required_time:.6f}, change_percentage={self.change_percentage:.2f})"
        )


def calculate_change_percentage(required_time: float, original_time: float) -> float:
    """Relative change of the measured time against the recorded one, in percent."""
    try:
        return (required_time - original_time) / original_time * 100.0
    except ZeroDivisionError:
        if required_time == original_time:
            return math.nan
        return math.copysign(math.inf, required_time - original_time)
