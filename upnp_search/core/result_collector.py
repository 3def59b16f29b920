"""
Result collection for search sessions.

A ResultCollector accumulates accepted device records, keeping only the
first record seen for each address. How the report is emitted depends on
the session mode and is decided once, when the collector is created:

- StreamingCollector writes the header up front and one row per device
  the moment it is accepted.
- SortedCollector writes nothing until the search is over, then sorts the
  records and writes them as one aligned table.
"""

import threading
from abc import ABC, abstractmethod
from typing import List, Optional, Set

from .data_models import DeviceRecord, SearchOptions, NO_DEVICES_FOUND
from .sort_policy import SortPolicy
from ..utils.logger import Logger, get_logger
from ..utils.report_writer import ReportWriter
from ..utils.table_formatter import TableFormatter


class ResultCollector(ABC):
    """
    Deduplicating accumulator of device records.

    Subclasses decide when and how records reach the report.
    """

    def __init__(self, writer: ReportWriter, formatter: TableFormatter,
                 logger: Optional[Logger] = None):
        """
        Initialize the collector.

        Args:
            writer: Sink receiving the report
            formatter: Formatter for header and rows
            logger: Logger instance
        """
        self.writer = writer
        self.formatter = formatter
        self.logger = logger or get_logger(__name__)
        self._records: List[DeviceRecord] = []
        self._seen_addresses: Set[str] = set()
        self._closed = False

    @property
    def records(self) -> List[DeviceRecord]:
        """Accepted records in arrival order."""
        return list(self._records)

    def __len__(self) -> int:
        return len(self._records)

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Stop accepting records; the session is ending."""
        self._closed = True

    def _accept(self, record: DeviceRecord) -> bool:
        if self._closed:
            self.logger.debug(f"Session closed, dropping late device at {record.address}")
            return False
        if record.address in self._seen_addresses:
            self.logger.debug(f"Ignoring duplicate device at {record.address}")
            return False
        self._records.append(record)
        self._seen_addresses.add(record.address)
        return True

    def add(self, record: DeviceRecord) -> bool:
        """
        Add a record unless its address was already seen or the
        collector is closed.

        Args:
            record: Record that passed the filter

        Returns:
            bool: True if the record was new and kept
        """
        return self._accept(record)

    @abstractmethod
    def begin(self) -> None:
        """Emit whatever belongs in the report before the search starts."""
        pass

    @abstractmethod
    def render_body(self) -> str:
        """Render what is left to report once the search is over."""
        pass

    def finish(self) -> str:
        """
        Render the remaining report body and emit it.

        Returns:
            str: The rendered body (may be empty)
        """
        body = self.render_body()
        if body:
            self.writer.emit(body)
        return body


class StreamingCollector(ResultCollector):
    """Emits each accepted record immediately as one fixed-width row."""

    def __init__(self, writer: ReportWriter, formatter: TableFormatter,
                 logger: Optional[Logger] = None):
        super().__init__(writer, formatter, logger)
        # add() runs on the discovery service's threads
        self._lock = threading.Lock()

    def begin(self) -> None:
        self.writer.emit(self.formatter.header_line())

    def close(self) -> None:
        with self._lock:
            self._closed = True

    def add(self, record: DeviceRecord) -> bool:
        with self._lock:
            accepted = self._accept(record)
            if accepted:
                self.writer.emit(self.formatter.row_line(record))
            return accepted

    def render_body(self) -> str:
        with self._lock:
            return NO_DEVICES_FOUND if not self._records else ""


class SortedCollector(ResultCollector):
    """Sorts all records once the search is over and emits them as a table."""

    def __init__(self, writer: ReportWriter, formatter: TableFormatter,
                 sort_policy: SortPolicy, logger: Optional[Logger] = None):
        super().__init__(writer, formatter, logger)
        self.sort_policy = sort_policy

    def begin(self) -> None:
        # The header is part of the table rendered at the end
        pass

    def render_body(self) -> str:
        ordered = self.sort_policy.sort(self._records)
        body = self.formatter.table(ordered)
        if not ordered:
            body += NO_DEVICES_FOUND
        return body


def create_collector(options: SearchOptions, writer: ReportWriter,
                     logger: Optional[Logger] = None) -> ResultCollector:
    """
    Create the collector matching the session mode.

    Args:
        options: Options of the search session
        writer: Sink receiving the report
        logger: Logger instance

    Returns:
        StreamingCollector when no sort key is set, SortedCollector otherwise
    """
    formatter = TableFormatter(verbose=options.verbose, gutter=options.table_gutter)
    if options.stream_mode:
        return StreamingCollector(writer, formatter, logger)
    return SortedCollector(writer, formatter, SortPolicy(options.sort_by), logger)
