"""Shared pytest configuration and fixtures for the UPnP search test suite."""

import sys
from pathlib import Path
from typing import List

import pytest

# Ensure the project root is in the path for imports
PROJECT_ROOT = Path(__file__).parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from upnp_search.core.data_models import DeviceRecord  # noqa: E402
from upnp_search.services.base_service import DiscoveredDevice, DiscoveryService  # noqa: E402
from upnp_search.utils.report_writer import ReportWriter  # noqa: E402


class FakeDiscoveryService(DiscoveryService):
    """In-memory discovery service recording how it is driven."""

    def __init__(self, fail_start=None, fail_stop=None):
        self.calls: List[str] = []
        self.callbacks = []
        self.known: List[DiscoveredDevice] = []
        self.fail_start = fail_start
        self.fail_stop = fail_stop

    def start(self):
        self.calls.append("start")
        if self.fail_start is not None:
            raise self.fail_start

    def stop(self):
        self.calls.append("stop")
        if self.fail_stop is not None:
            raise self.fail_stop

    def search_all(self):
        self.calls.append("search_all")

    def on_device_discovered(self, callback):
        self.calls.append("on_device_discovered")
        self.callbacks.append(callback)

    def list_known_devices(self):
        self.calls.append("list_known_devices")
        return list(self.known)

    def announce(self, device: DiscoveredDevice) -> None:
        """Make a device known and notify every registered callback."""
        self.known.append(device)
        for callback in self.callbacks:
            callback(device)


def make_device(address="192.168.1.5", udn=None, model_name="MediaRenderer",
                manufacturer="Acme", display_name="Living Room", serial_number="SN-1",
                is_root=True, embedded=()):
    return DiscoveredDevice(
        address=address,
        udn=udn or f"uuid:{address}",
        model_name=model_name,
        manufacturer=manufacturer,
        display_name=display_name,
        serial_number=serial_number,
        descriptor_url=f"http://{address}:49152/description.xml",
        is_root=is_root,
        embedded=tuple(embedded),
    )


def make_record(address="192.168.1.5", model="MediaRenderer", manufacturer="Acme",
                serial_number="SN-1", identifier=None):
    return DeviceRecord(
        address=address,
        model=model,
        manufacturer=manufacturer,
        serial_number=serial_number,
        identifier=identifier or f"uuid:{address}",
    )


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def fake_service() -> FakeDiscoveryService:
    return FakeDiscoveryService()


@pytest.fixture
def writer() -> ReportWriter:
    """Report writer that captures output without printing it."""
    return ReportWriter(echo=False)
