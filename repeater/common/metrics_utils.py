"""
Summary statistics over the measurements of a replay run.
"""

from typing import Dict, List

import pandas as pd

from repeater.persistence.record import MeasurementRecord


def measurements_to_frame(records: List[MeasurementRecord]) -> pd.DataFrame:
    """Convert measurement records to a DataFrame, one row per record."""
    return pd.DataFrame(
        [record.to_dict() for record in records],
        columns=["url", "status", "required_time", "original_time", "change_percentage"],
    )


def calculate_latency_stats(data: pd.DataFrame, latency_col: str = 'required_time') -> Dict[str, float]:
    """
    Calculate mean and percentiles of a timing column.

    Non-finite values (serialised as None) are skipped.

    Args:
        data: DataFrame of measurements
        latency_col: Column to summarise (default: 'required_time')

    Returns:
        Dictionary with avg, p50, p95, p99
    """
    if len(data) == 0 or latency_col not in data.columns:
        return {'avg': 0.0, 'p50': 0.0, 'p95': 0.0, 'p99': 0.0}

    values = pd.to_numeric(data[latency_col], errors='coerce').dropna()
    if values.empty:
        return {'avg': 0.0, 'p50': 0.0, 'p95': 0.0, 'p99': 0.0}

    return {
        'avg': float(values.mean()),
        'p50': float(values.quantile(0.5)),
        'p95': float(values.quantile(0.95)),
        'p99': float(values.quantile(0.99)),
    }


def summarize_run(records: List[MeasurementRecord], planned: int, failed: int) -> Dict[str, object]:
    """Build the end-of-run summary logged on the diagnostic stream."""
    frame = measurements_to_frame(records)
    return {
        'planned_requests': planned,
        'successful_requests': len(records),
        'failed_requests': failed,
        'unfinished_requests': planned - len(records) - failed,
        'required_time': calculate_latency_stats(frame, 'required_time'),
        'change_percentage': calculate_latency_stats(frame, 'change_percentage'),
    }
