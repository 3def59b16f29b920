"""
Error handling for the UPnP Search Module.

This module provides the exception hierarchy used across the package,
context information attached to errors, and an ErrorHandler that logs
errors by severity and prints user-friendly troubleshooting suggestions.
Nothing in this package retries a failed operation.
"""

import errno
from typing import Optional, Any, Dict
from enum import Enum
from dataclasses import dataclass

from .logger import Logger, get_logger


class ErrorType(Enum):
    """Enumeration for different types of errors."""
    NETWORK_ERROR = "network_error"
    PERMISSION_ERROR = "permission_error"
    CONFIGURATION_ERROR = "configuration_error"
    TIMEOUT_ERROR = "timeout_error"


class ErrorSeverity(Enum):
    """Enumeration for error severity levels."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


@dataclass
class ErrorContext:
    """
    Context information for error handling.

    Attributes:
        error_type: Type of error that occurred
        severity: Severity level of the error
        operation: Operation that was being performed when error occurred
        component: Component/module where error occurred
        additional_info: Additional context information
    """
    error_type: ErrorType
    severity: ErrorSeverity
    operation: str
    component: str
    additional_info: Dict[str, Any] = None

    def __post_init__(self):
        if self.additional_info is None:
            self.additional_info = {}


class UPnPSearchError(Exception):
    """Base exception class for UPnP Search Module."""

    def __init__(self, message: str, error_context: Optional[ErrorContext] = None):
        super().__init__(message)
        self.error_context = error_context


class ServiceStartError(UPnPSearchError):
    """Raised when the discovery service cannot acquire its network resources."""
    pass


class ServiceStopError(UPnPSearchError):
    """Raised when the discovery service fails to release its resources."""
    pass


class DescriptionError(UPnPSearchError):
    """Raised when a device description cannot be fetched or parsed."""
    pass


class ConfigurationError(UPnPSearchError):
    """Exception for configuration-related errors."""
    pass


def classify_os_error(error: OSError) -> ErrorType:
    """
    Map an OSError raised by socket operations onto an ErrorType.

    Args:
        error: The OSError to classify

    Returns:
        ErrorType best describing the failure
    """
    if error.errno in (errno.EACCES, errno.EPERM):
        return ErrorType.PERMISSION_ERROR
    if error.errno == errno.ETIMEDOUT:
        return ErrorType.TIMEOUT_ERROR
    return ErrorType.NETWORK_ERROR


class ErrorHandler:
    """
    Centralized error reporting.

    Logs errors with a level that follows their severity, keeps per-type
    statistics and prints troubleshooting suggestions.
    """

    def __init__(self, logger: Optional[Logger] = None):
        """
        Initialize the ErrorHandler.

        Args:
            logger: Logger instance for error reporting
        """
        self.logger = logger or get_logger(__name__)
        self.error_statistics: Dict[ErrorType, int] = {
            error_type: 0 for error_type in ErrorType
        }

    def handle_error(self, error: Exception, context: ErrorContext) -> bool:
        """
        Report an error based on its type and context.

        Args:
            error: The exception that occurred
            context: Error context information

        Returns:
            bool: Always False, failed operations are never retried
        """
        self.error_statistics[context.error_type] += 1
        self._log_error(error, context)

        if context.error_type == ErrorType.NETWORK_ERROR:
            self._suggest_network_troubleshooting(error, context)
        elif context.error_type == ErrorType.PERMISSION_ERROR:
            self._suggest_permission_solutions(error, context)
        elif context.error_type == ErrorType.CONFIGURATION_ERROR:
            self._suggest_configuration_fixes(error, context)
        elif context.error_type == ErrorType.TIMEOUT_ERROR:
            self._suggest_timeout_solutions(error, context)
        return False

    def context_for(self, error: Exception, operation: str, component: str) -> ErrorContext:
        """
        Build a context for an error that did not carry one.

        Args:
            error: The exception that occurred
            operation: Operation being performed
            component: Component that raised the error

        Returns:
            ErrorContext describing the error
        """
        if isinstance(error, UPnPSearchError) and error.error_context is not None:
            return error.error_context

        cause = error.__cause__ if error.__cause__ is not None else error
        if isinstance(cause, OSError):
            error_type = classify_os_error(cause)
        elif isinstance(error, ConfigurationError):
            error_type = ErrorType.CONFIGURATION_ERROR
        else:
            error_type = ErrorType.NETWORK_ERROR

        return ErrorContext(
            error_type=error_type,
            severity=ErrorSeverity.CRITICAL,
            operation=operation,
            component=component,
        )

    def _log_error(self, error: Exception, context: ErrorContext) -> None:
        """
        Log error information with appropriate detail level.

        Args:
            error: The exception that occurred
            context: Error context information
        """
        error_msg = f"Error in {context.component}.{context.operation}: {str(error)}"

        if context.severity == ErrorSeverity.CRITICAL:
            self.logger.error(error_msg, exception=error)
        elif context.severity == ErrorSeverity.HIGH:
            self.logger.error(error_msg)
        elif context.severity == ErrorSeverity.MEDIUM:
            self.logger.warning(error_msg)
        else:
            self.logger.debug(error_msg)

    def _suggest_network_troubleshooting(self, error: Exception, context: ErrorContext) -> None:
        """Provide network troubleshooting suggestions."""
        self.logger.error("Network troubleshooting suggestions:")
        self.logger.error("  • Check that a network interface with multicast support is up")
        self.logger.error("  • Check firewall rules for UDP port 1900")
        self.logger.error("  • Make sure no other process holds the configured port exclusively")

    def _suggest_permission_solutions(self, error: Exception, context: ErrorContext) -> None:
        """Provide permission error solutions."""
        self.logger.error("Permission error solutions:")
        self.logger.error("  • Run with elevated privileges (sudo)")
        self.logger.error("  • Check that multicast traffic is allowed for this user")

    def _suggest_configuration_fixes(self, error: Exception, context: ErrorContext) -> None:
        """Provide configuration error solutions."""
        config_file = context.additional_info.get('config_file', 'search_config.yml')
        self.logger.error(f"Configuration error solutions for {config_file}:")
        self.logger.error("  • Check YAML syntax and indentation")
        self.logger.error("  • Ensure configuration values are valid")
        self.logger.error("  • Use the default configuration as reference")

    def _suggest_timeout_solutions(self, error: Exception, context: ErrorContext) -> None:
        """Provide timeout error solutions."""
        self.logger.error("Timeout error solutions:")
        self.logger.error("  • Increase the search timeout (--timeout)")
        self.logger.error("  • Increase ssdp.description_timeout in configuration")
