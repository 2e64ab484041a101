"""
The ``print`` command: list the records of an export in timestamp order.
"""

import logging
import sys
from datetime import timedelta
from typing import Optional, TextIO

from repeater.common.timestamps import format_offset, format_timestamp
from repeater.persistence.reader import read_records

logger = logging.getLogger(__name__)


class RecordPrinter:
    """Prints one line per record: timestamp, offset from the previous record, path."""

    def __init__(self, input_file: str, stream: Optional[TextIO] = None):
        self.input_file = input_file
        self.stream = stream

    def run(self) -> int:
        """Print all records and return how many were printed."""
        stream = self.stream or sys.stdout
        last_timestamp = None
        count = 0

        for record in read_records(self.input_file):
            if last_timestamp is None:
                offset = timedelta(0)
            else:
                offset = record.timestamp - last_timestamp

            stream.write(
                f"{format_timestamp(record.timestamp)} {format_offset(offset)} "
                f"{record.path_and_parameters}\n"
            )
            last_timestamp = record.timestamp
            count += 1

        stream.flush()
        return count
