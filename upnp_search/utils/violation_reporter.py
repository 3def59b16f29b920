"""
Reporting of UPnP protocol violations.

Many devices answer discovery requests with responses or descriptions that
do not follow the UPnP Device Architecture. These are reported as warnings
so they can be traced, and reporting can be switched off on networks where
such devices would flood the log.
"""

import threading
from typing import Optional

from .logger import Logger, get_logger


class ViolationReporter:
    """Logs protocol violations when reporting is enabled."""

    def __init__(self, enabled: bool = True, logger: Optional[Logger] = None):
        self._enabled = enabled
        self._lock = threading.Lock()
        self.logger = logger or get_logger(__name__)
        self.count = 0

    @property
    def enabled(self) -> bool:
        return self._enabled

    def enable(self) -> None:
        self._enabled = True

    def disable(self) -> None:
        self._enabled = False

    def violate(self, message: str, device: Optional[str] = None) -> None:
        """
        Report a violation.

        Args:
            message: What is wrong
            device: Optional description of the offending device
        """
        if not self._enabled:
            return
        with self._lock:
            self.count += 1
        where = f" of device '{device}'" if device else ""
        self.logger.warning(f"UPnP specification violation{where}: {message}")
