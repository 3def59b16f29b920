"""
Main entry point for the UPnP Search Module.

This module provides the command-line interface for the search tool,
including argument parsing, configuration loading and graceful shutdown
handling.
"""

import argparse
import signal
import sys
import time
from typing import List, Optional

from . import __version__
from .config.config_loader import AppConfig, ConfigLoader
from .core.data_models import SearchOptions, SortKey, SORT_KEY_ALIASES
from .core.search_orchestrator import SearchOrchestrator
from .services.ssdp_service import SSDPDiscoveryService
from .utils.error_handler import ConfigurationError, ErrorHandler, ServiceStartError
from .utils.logger import LogLevel, get_logger, set_log_level
from .utils.report_writer import ReportWriter
from .utils.violation_reporter import ViolationReporter


class UPnPSearchApp:
    """
    Main application class for UPnP Search Module.

    Handles configuration, the discovery backend and the application lifecycle.
    """

    def __init__(self, service_factory=None, writer: Optional[ReportWriter] = None,
                 sleep=time.sleep):
        """
        Initialize the application.

        Args:
            service_factory: Callable building the discovery service from
                             an AppConfig (default: SSDP backend)
            writer: Sink receiving the report (default: stdout)
            sleep: Function used for the bounded wait
        """
        self.logger = get_logger(__name__)
        self.error_handler = ErrorHandler(self.logger)
        self.service_factory = service_factory or self._create_ssdp_service
        self.writer = writer or ReportWriter()
        self.sleep = sleep
        self.shutdown_requested = False

    def install_signal_handlers(self) -> None:
        signal.signal(signal.SIGTERM, self._signal_handler)

    def _signal_handler(self, signum: int, frame) -> None:
        """
        Handle shutdown signals gracefully.

        The first signal interrupts the wait so the results found so far
        are still reported; a second one terminates immediately.

        Args:
            signum: Signal number
            frame: Current stack frame
        """
        if not self.shutdown_requested:
            self.logger.warning(f"Received signal {signum} - finishing search...")
            self.shutdown_requested = True
            raise KeyboardInterrupt
        self.logger.error("Force shutdown requested - terminating immediately")
        sys.exit(1)

    def _create_ssdp_service(self, config: AppConfig) -> SSDPDiscoveryService:
        reporter = ViolationReporter(enabled=config.ssdp.report_violations)
        return SSDPDiscoveryService(config.ssdp, reporter=reporter)

    def build_options(self, args: argparse.Namespace, config: AppConfig) -> SearchOptions:
        """
        Merge command line arguments over the configured defaults.

        Args:
            args: Parsed command line arguments
            config: Loaded configuration

        Returns:
            SearchOptions for the session
        """
        return SearchOptions(
            timeout=args.timeout if args.timeout is not None else config.search.timeout,
            sort_by=args.sort_by if args.sort_by is not None else config.search.sort_by,
            filter=args.filter if args.filter is not None else config.search.filter,
            verbose=args.verbose or config.search.verbose,
            table_gutter=config.search.table_gutter,
        )

    def run(self, args: argparse.Namespace) -> int:
        """
        Run the UPnP search application.

        Args:
            args: Parsed command line arguments

        Returns:
            int: Exit code (0 for success, non-zero for failure)
        """
        # An explicitly given config directory must hold a usable file
        loader = ConfigLoader(args.config_dir, self.logger, strict=args.config_dir is not None)
        try:
            config = loader.load()
        except ConfigurationError as e:
            context = self.error_handler.context_for(e, "load", "ConfigLoader")
            self.error_handler.handle_error(e, context)
            return 1
        set_log_level(LogLevel.DEBUG if args.debug else config.log_level)

        options = self.build_options(args, config)
        self.logger.info(
            f"Searching for {options.timeout}s "
            f"(sort: {getattr(options.sort_by, 'value', options.sort_by)}, filter: '{options.filter}')"
        )

        service = self.service_factory(config)
        orchestrator = SearchOrchestrator(service, writer=self.writer, sleep=self.sleep,
                                          logger=self.logger)

        try:
            result = orchestrator.execute(options)
        except ServiceStartError as e:
            context = self.error_handler.context_for(e, "start", "SearchOrchestrator")
            self.error_handler.handle_error(e, context)
            return 1
        except KeyboardInterrupt:
            self.logger.warning("Search interrupted by user")
            return 130

        self.logger.success(f"Found {result.device_count} device(s)")
        return result.status.value


def positive_int(value: str) -> int:
    """argparse type for strictly positive integers."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer value: '{value}'")
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be a positive integer: '{value}'")
    return number


def create_argument_parser() -> argparse.ArgumentParser:
    """
    Create and configure the command line argument parser.

    Returns:
        argparse.ArgumentParser: Configured argument parser
    """
    sort_choices = [key.value for key in SortKey] + list(SORT_KEY_ALIASES)

    parser = argparse.ArgumentParser(
        prog="upnp-search",
        description="UPnP Search - find UPnP devices on the local network via SSDP",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  upnp-search                              # Stream devices found within 5 seconds
  upnp-search --timeout 10 --sort-by ip    # Wait 10 seconds, then print a table sorted by address
  upnp-search --filter Philips --verbose   # Only devices mentioning "Philips", all columns
  python -m upnp_search --debug            # Enable debug logging on stderr
        """
    )

    parser.add_argument(
        "--timeout", "-t",
        type=positive_int,
        help="Seconds to wait for devices to answer (default from configuration: 5)"
    )

    parser.add_argument(
        "--sort-by", "-s",
        choices=sort_choices,
        help="Sort the report by this column after the wait; 'none' streams rows as devices answer"
    )

    parser.add_argument(
        "--filter", "-f",
        type=str,
        help="Only report devices whose address, model, manufacturer, UDN, serial number "
             "or name contains this text (case-sensitive); '*' reports all"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Also report manufacturer and UDN"
    )

    parser.add_argument(
        "--config-dir",
        type=str,
        help="Directory containing search_config.yml. Defaults to upnp_search/config/"
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging output"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"UPnP Search {__version__}"
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the UPnP Search Module.

    Returns:
        int: Exit code (0 for success, non-zero for failure)
    """
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    app = UPnPSearchApp()
    app.install_signal_handlers()
    return app.run(args)


if __name__ == "__main__":
    sys.exit(main())
