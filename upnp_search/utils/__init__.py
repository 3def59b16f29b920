"""
Utility functions and helper classes.
"""

from .logger import Logger, LogLevel, logger, set_log_level, get_logger
from .error_handler import (
    ErrorHandler, ErrorContext, ErrorType, ErrorSeverity,
    UPnPSearchError, ServiceStartError, ServiceStopError, DescriptionError,
    ConfigurationError
)
from .report_writer import ReportWriter
from .table_formatter import TableFormatter, fixed_width, format_table
from .violation_reporter import ViolationReporter
from . import network_utils

__all__ = [
    'Logger',
    'LogLevel',
    'logger',
    'set_log_level',
    'get_logger',
    'ErrorHandler',
    'ErrorContext',
    'ErrorType',
    'ErrorSeverity',
    'UPnPSearchError',
    'ServiceStartError',
    'ServiceStopError',
    'DescriptionError',
    'ConfigurationError',
    'ReportWriter',
    'TableFormatter',
    'fixed_width',
    'format_table',
    'ViolationReporter',
    'network_utils'
]
