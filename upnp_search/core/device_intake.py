"""
Device intake for search sessions.

Turns device handles reported by the discovery service into DeviceRecords,
applies the free-text filter and hands accepted records to the collector.
"""

from typing import Optional

from .data_models import DeviceRecord, WILDCARD_FILTER, normalize_serial_number
from .result_collector import ResultCollector
from ..services.base_service import DiscoveredDevice
from ..utils.logger import Logger, get_logger


def extract_record(device: DiscoveredDevice) -> DeviceRecord:
    """
    Build the report record of a device.

    Args:
        device: Device handle from the discovery service

    Returns:
        DeviceRecord with a normalized serial number
    """
    return DeviceRecord(
        address=device.address,
        model=device.model_name or "",
        manufacturer=device.manufacturer or "",
        serial_number=normalize_serial_number(device.serial_number),
        identifier=device.udn or "",
    )


def match_text(record: DeviceRecord, display_name: str) -> str:
    """Text the filter is matched against, one field per line."""
    return "\n".join([
        record.address,
        record.model,
        record.manufacturer,
        record.identifier,
        record.serial_number,
        display_name or "",
    ])


class DeviceFilter:
    """Literal, case-sensitive substring filter; "*" accepts everything."""

    def __init__(self, pattern: str = WILDCARD_FILTER, logger: Optional[Logger] = None):
        self.pattern = pattern
        self.logger = logger or get_logger(__name__)

    @property
    def accepts_all(self) -> bool:
        return self.pattern == WILDCARD_FILTER

    def matches(self, text: str) -> bool:
        """
        Check the text against the filter.

        Args:
            text: Match text of one device

        Returns:
            bool: True if the device passes the filter
        """
        if self.accepts_all:
            return True
        if self.pattern in text:
            self.logger.debug(f"Filter check: filter '{self.pattern}' matched {text!r}")
            return True
        self.logger.debug(f"Filter check: filter '{self.pattern}' NOT matched {text!r}")
        return False


class DeviceIntake:
    """
    Feeds reported devices into a collector.

    Only root devices are considered; embedded devices are skipped.
    A device rejected by the filter leaves no trace in the collector.
    """

    def __init__(self, collector: ResultCollector, device_filter: DeviceFilter,
                 logger: Optional[Logger] = None):
        self.collector = collector
        self.device_filter = device_filter
        self.logger = logger or get_logger(__name__)

    def handle(self, device: DiscoveredDevice) -> bool:
        """
        Run one device through extraction, filter and collection.

        Args:
            device: Device handle from the discovery service

        Returns:
            bool: True if the device ended up in the collector as a new record
        """
        if not device.is_root:
            return False

        record = extract_record(device)
        if not self.device_filter.matches(match_text(record, device.display_name)):
            return False
        return self.collector.add(record)
