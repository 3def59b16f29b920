"""
Discovery service interface for the UPnP Search Module.

This module defines the abstract base class a discovery backend must
implement and the read-only device handle it reports. The search
orchestrator only talks to this interface, never to a protocol directly.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Callable, List, Optional


@dataclass(frozen=True)
class DiscoveredDevice:
    """
    A device known to a discovery service.

    Attributes:
        address: Host of the device description URL
        udn: Unique device name
        model_name: Model name from the description
        manufacturer: Manufacturer from the description
        display_name: Human readable name (friendly name)
        serial_number: Serial number, None when not reported
        descriptor_url: URL of the device description
        is_root: False for devices embedded in another device
        embedded: Devices embedded in this one
    """
    address: str
    udn: str
    model_name: str = ""
    manufacturer: str = ""
    display_name: str = ""
    serial_number: Optional[str] = None
    descriptor_url: str = ""
    is_root: bool = True
    embedded: tuple = field(default_factory=tuple)

    def all_devices(self) -> List["DiscoveredDevice"]:
        """This device followed by every device embedded in it, depth first."""
        devices = [self]
        for child in self.embedded:
            devices.extend(child.all_devices())
        return devices


DeviceCallback = Callable[[DiscoveredDevice], None]


class DiscoveryService(ABC):
    """
    Abstract base class for discovery backends.

    Callbacks registered with on_device_discovered() may be invoked from
    threads owned by the service, concurrently with the caller.
    """

    @abstractmethod
    def start(self) -> None:
        """
        Acquire network resources.

        Raises:
            ServiceStartError: If the resources cannot be acquired
        """
        pass

    @abstractmethod
    def stop(self) -> None:
        """
        Release network resources.

        Raises:
            ServiceStopError: If releasing the resources failed
        """
        pass

    @abstractmethod
    def search_all(self) -> None:
        """Broadcast one request asking every device to announce itself."""
        pass

    @abstractmethod
    def on_device_discovered(self, callback: DeviceCallback) -> None:
        """
        Register a callback invoked once per newly known device.

        Both root and embedded devices are reported.

        Args:
            callback: Function receiving the new device
        """
        pass

    @abstractmethod
    def list_known_devices(self) -> List[DiscoveredDevice]:
        """Snapshot of every device currently known, root and embedded."""
        pass
