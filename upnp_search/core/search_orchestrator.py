"""
Search Orchestrator for UPnP Search Module.

This module provides the SearchOrchestrator class that drives one
time-bounded discovery session: it starts the discovery service, wires
device intake either to arrival events (stream mode) or to the list of
known devices after the wait (batch mode), renders the report and stops
the service again.
"""

import time
from typing import Callable, Optional, Union

from .data_models import SearchOptions, SearchResult, SearchStatus, SortKey, WILDCARD_FILTER
from .device_intake import DeviceFilter, DeviceIntake
from .result_collector import create_collector
from ..services.base_service import DiscoveryService
from ..utils.logger import Logger, get_logger
from ..utils.report_writer import ReportWriter


class SearchOrchestrator:
    """
    Orchestrates one search session against a discovery service.

    The wait for responses is the only blocking step. It cannot be
    shortened by arriving devices; an interrupted wait counts as elapsed.
    """

    def __init__(
        self,
        service: DiscoveryService,
        writer: Optional[ReportWriter] = None,
        sleep: Callable[[float], None] = time.sleep,
        logger: Optional[Logger] = None,
    ):
        """
        Initialize the search orchestrator.

        Args:
            service: Discovery backend to drive
            writer: Sink receiving the report (default: stdout)
            sleep: Function used for the bounded wait
            logger: Logger instance
        """
        self.service = service
        self.writer = writer or ReportWriter()
        self.sleep = sleep
        self.logger = logger or get_logger(__name__)

    def run(
        self,
        timeout: int,
        sort_by: Union[SortKey, str] = SortKey.NONE,
        filter: str = WILDCARD_FILTER,
        verbose: bool = False,
        table_gutter: int = 4,
    ) -> SearchResult:
        """
        Run a search session.

        Args:
            timeout: Seconds to wait for devices to answer
            sort_by: Sort key or its name, "none" streams rows
            filter: Literal substring filter, "*" for all devices
            verbose: Five report columns instead of three
            table_gutter: Extra spaces between columns of a sorted table

        Returns:
            SearchResult holding the report text and the status code

        Raises:
            ServiceStartError: If the discovery service cannot be started
        """
        options = SearchOptions(
            timeout=timeout,
            sort_by=sort_by,
            filter=filter,
            verbose=verbose,
            table_gutter=table_gutter,
        )
        return self.execute(options)

    def execute(self, options: SearchOptions) -> SearchResult:
        """
        Run a search session with prepared options.

        Args:
            options: Options of the session

        Returns:
            SearchResult holding the report text and the status code
        """
        started = time.monotonic()
        collector = create_collector(options, self.writer, self.logger)
        intake = DeviceIntake(collector, DeviceFilter(options.filter, self.logger), self.logger)

        self.logger.debug("Starting UPnP discovery service...")
        self.service.start()

        try:
            if options.stream_mode:
                self.service.on_device_discovered(intake.handle)
            collector.begin()

            self.logger.debug("Sending SEARCH message to all devices...")
            self.service.search_all()

            self._wait(options.timeout)

            if not options.stream_mode:
                self.logger.debug("Processing results...")
                for device in self.service.list_known_devices():
                    intake.handle(device)

            # Deliveries racing the end of the session must not reach the report
            collector.close()
            collector.finish()
        finally:
            collector.close()
            self._stop_service()

        duration = time.monotonic() - started
        self.logger.info(
            f"Search finished with {len(collector)} device(s) in {duration:.1f} seconds"
        )
        return SearchResult(
            report_text=self.writer.text,
            status=SearchStatus.OK,
            device_count=len(collector),
            duration=duration,
        )

    def _wait(self, timeout: int) -> None:
        """Block for the search timeout; an interruption ends the wait."""
        self.logger.debug(f"Waiting {timeout} seconds before shutting down...")
        try:
            self.sleep(timeout)
        except (KeyboardInterrupt, InterruptedError) as e:
            self.logger.warning(
                f"Wait for responses interrupted ({type(e).__name__}), processing results so far"
            )

    def _stop_service(self) -> None:
        """Stop the discovery service; failures are logged only."""
        self.logger.debug("Stopping UPnP discovery service...")
        try:
            self.service.stop()
        except Exception as e:
            self.logger.error("Error during shutdown", exception=e)
