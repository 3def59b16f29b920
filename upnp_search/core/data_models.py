"""
Core data models and enums for the UPnP Search Module.

This module defines the data structures used throughout a search session:
the device record shown in reports, the sort keys, the options of one
search and its result.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

# Shown instead of a serial number a device did not report
SERIAL_PLACEHOLDER = "-"

# Filter value that accepts every device
WILDCARD_FILTER = "*"

NO_DEVICES_FOUND = "<no devices found>"


class SortKey(Enum):
    """Report columns a batch report can be sorted by."""
    NONE = "none"
    ADDRESS = "address"
    MODEL = "model"
    SERIAL_NUMBER = "serialNumber"
    MANUFACTURER = "manufacturer"
    IDENTIFIER = "identifier"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["SortKey"]:
        """
        Look up a sort key by name.

        Accepts the canonical names plus the aliases "ip" and "udn".

        Args:
            value: Name of the sort key

        Returns:
            The matching SortKey, or None for an unknown name
        """
        if value is None:
            return cls.NONE
        name = SORT_KEY_ALIASES.get(value, value)
        for key in cls:
            if key.value == name:
                return key
        return None


SORT_KEY_ALIASES = {
    "ip": "address",
    "udn": "identifier",
}


class SearchStatus(Enum):
    """Status codes of a search session."""
    OK = 0


def normalize_serial_number(serial_number: Optional[str]) -> str:
    """
    Replace an absent serial number by the placeholder.

    Some devices report the literal string "null" instead of omitting the
    element, so that counts as absent as well.

    Args:
        serial_number: Serial number as reported by the device

    Returns:
        The serial number, or SERIAL_PLACEHOLDER
    """
    if not serial_number or serial_number == "null":
        return SERIAL_PLACEHOLDER
    return serial_number


@dataclass(frozen=True)
class DeviceRecord:
    """
    Reportable attributes of one discovered root device.

    Attributes:
        address: Dotted IPv4 address taken from the description URL
        model: Model name
        manufacturer: Manufacturer name
        serial_number: Serial number, or "-" when the device reports none
        identifier: Unique device name (UDN)
    """
    address: str
    model: str
    manufacturer: str
    serial_number: str
    identifier: str


@dataclass
class SearchOptions:
    """
    Options of one search session.

    Attributes:
        timeout: Seconds to wait for devices to answer
        sort_by: Sort key; SortKey.NONE streams rows as devices arrive.
                 An unknown name is kept as a string and sorts nothing.
        filter: Literal substring a device must contain, "*" for all
        verbose: Five report columns instead of three
        table_gutter: Extra spaces between columns of a sorted table
    """
    timeout: int = 5
    sort_by: Union[SortKey, str] = SortKey.NONE
    filter: str = WILDCARD_FILTER
    verbose: bool = False
    table_gutter: int = 4

    def __post_init__(self):
        if isinstance(self.sort_by, str):
            self.sort_by = SortKey.parse(self.sort_by) or self.sort_by

    @property
    def stream_mode(self) -> bool:
        return self.sort_by is SortKey.NONE


@dataclass
class SearchResult:
    """
    Result of one search session.

    Attributes:
        report_text: Everything emitted as the report
        status: Status code of the session
        device_count: Number of devices in the report
        duration: Wall-clock duration in seconds
    """
    report_text: str
    status: SearchStatus = SearchStatus.OK
    device_count: int = 0
    duration: float = 0.0

    def __iter__(self):
        # Unpacks as (report_text, status)
        return iter((self.report_text, self.status))
