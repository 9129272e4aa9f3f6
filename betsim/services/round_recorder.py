"""
Round Recorder Service
Writes one line per simulated round to a new <strategy>-<timestamp>.csv
"""

import itertools
import logging
import os
from datetime import datetime

from ..exceptions import OutputSinkException
from ..models import RoundRecord

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%dT%H-%M-%S"  # ISO-like; no ':' so the name is valid on every filesystem
FIELD_SEPARATOR = ", "


def build_record_filename(strategy_name: str, when: datetime = None, sequence: int = 1) -> str:
    """<strategy>-<timestamp>.csv; later runs within the same second get -2, -3, ..."""
    when = when or datetime.now()
    suffix = f"-{sequence}" if sequence > 1 else ""
    return f"{strategy_name}-{when.strftime(TIMESTAMP_FORMAT)}{suffix}.csv"


def format_record(record: RoundRecord) -> str:
    """balance_before, stake, amount_won, balance_after with Decimal values at full precision. No header."""
    return FIELD_SEPARATOR.join(str(value) for value in record.as_fields())


class RoundRecorder:
    """
    Write-only sink for round records. The file is created up front so an
    unwritable destination fails before any round is simulated. An existing
    file is never reused, so each run gets its own record history.
    """

    def __init__(self, strategy_name: str, output_dir: str = ".", when: datetime = None):
        when = when or datetime.now()
        self.records_written = 0
        for sequence in itertools.count(1):
            self.path = os.path.join(output_dir, build_record_filename(strategy_name, when, sequence))
            try:
                self._file = open(self.path, "x", encoding="utf-8", newline="")
                break
            except FileExistsError:
                continue
            except OSError as e:
                logger.error(f"Cannot open round record file {self.path}: {e}")
                raise OutputSinkException(
                    f"Cannot open round record file {self.path}: {e.strerror or e}",
                    details={"path": self.path}
                ) from e
        logger.info(f"Recording rounds to {self.path}")

    def record(self, record: RoundRecord) -> None:
        self._file.write(format_record(record) + "\n")
        self.records_written += 1

    def close(self) -> None:
        if not self._file.closed:
            self._file.close()
            logger.info(f"Closed {self.path} after {self.records_written} records")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
