"""
SSDP discovery backend for the UPnP Search Module.

This module implements DiscoveryService on top of SSDP: it multicasts an
M-SEARCH request, listens for unicast responses on a background thread and
fetches each responding device's description document on a worker pool.
Failed description fetches are logged and not retried.
"""

import socket
import threading
import xml.etree.ElementTree as ET
from dataclasses import replace
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Dict, List, Optional, Set, Tuple

import requests

from .base_service import DeviceCallback, DiscoveredDevice, DiscoveryService
from ..config.config_loader import SSDPConfig
from ..utils.error_handler import (
    DescriptionError, ErrorContext, ErrorSeverity, ServiceStartError, ServiceStopError,
    classify_os_error,
)
from ..utils.logger import Logger, get_logger
from ..utils.network_utils import host_from_url
from ..utils.violation_reporter import ViolationReporter

RECEIVE_BUFFER_SIZE = 65507
LISTEN_POLL_INTERVAL = 0.5
# Longest time stop() waits for running description fetches
DESCRIPTION_DRAIN_TIMEOUT = 2.0


def build_search_message(config: SSDPConfig) -> bytes:
    """
    Build the M-SEARCH request.

    Args:
        config: SSDP configuration

    Returns:
        bytes: Encoded request
    """
    lines = [
        "M-SEARCH * HTTP/1.1",
        f"HOST: {config.multicast_address}:{config.port}",
        'MAN: "ssdp:discover"',
        f"MX: {config.mx}",
        f"ST: {config.search_target}",
        "",
        "",
    ]
    return "\r\n".join(lines).encode("utf-8")


def parse_ssdp_headers(text: str) -> Tuple[str, Dict[str, str]]:
    """
    Split an SSDP message into its start line and headers.

    Args:
        text: Decoded datagram

    Returns:
        Tuple of (start line, headers with lower-case names)
    """
    lines = text.splitlines()
    start_line = lines[0].strip() if lines else ""
    headers = {}
    for line in lines[1:]:
        if ':' in line:
            key, value = line.split(':', 1)
            headers[key.strip().lower()] = value.strip()
    return start_line, headers


def _child_text(element: ET.Element, tag: str) -> Optional[str]:
    child = element.find(f"{{*}}{tag}")
    if child is None or child.text is None:
        return None
    return child.text.strip()


def parse_device_description(content: bytes, location: str,
                             reporter: Optional[ViolationReporter] = None) -> DiscoveredDevice:
    """
    Parse a UPnP device description document.

    Args:
        content: Raw XML document
        location: URL the document was loaded from
        reporter: Receives protocol violations found in the document

    Returns:
        DiscoveredDevice for the root device, embedded devices attached

    Raises:
        DescriptionError: If the document is not XML or has no device element
    """
    try:
        root = ET.fromstring(content)
    except ET.ParseError as e:
        raise DescriptionError(f"Invalid device description at {location}: {e}") from e

    device_element = root.find("{*}device")
    if device_element is None:
        raise DescriptionError(f"No device element in description at {location}")

    return _parse_device_element(device_element, host_from_url(location), location,
                                 True, reporter)


def _parse_device_element(element: ET.Element, address: str, location: str,
                          is_root: bool, reporter: Optional[ViolationReporter]) -> DiscoveredDevice:
    udn = _child_text(element, "UDN") or ""
    model_name = _child_text(element, "modelName")
    serial_number = _child_text(element, "serialNumber")

    if reporter is not None:
        if not udn:
            reporter.violate("device has no UDN", location)
        if model_name is None:
            reporter.violate("device has no modelName", udn or location)
        if serial_number == "null":
            reporter.violate("serialNumber is the literal 'null'", udn or location)

    embedded = []
    device_list = element.find("{*}deviceList")
    if device_list is not None:
        for child in device_list.findall("{*}device"):
            embedded.append(_parse_device_element(child, address, location, False, reporter))

    return DiscoveredDevice(
        address=address,
        udn=udn,
        model_name=model_name or "",
        manufacturer=_child_text(element, "manufacturer") or "",
        display_name=_child_text(element, "friendlyName") or "",
        serial_number=serial_number,
        descriptor_url=location,
        is_root=is_root,
        embedded=tuple(embedded),
    )


class SSDPDiscoveryService(DiscoveryService):
    """
    SSDP implementation of the discovery service.

    Responses are received on a daemon listener thread. Every new
    description location is fetched once on a thread pool, and callbacks
    run on those pool threads.
    """

    def __init__(self, config: Optional[SSDPConfig] = None, logger: Optional[Logger] = None,
                 reporter: Optional[ViolationReporter] = None,
                 session: Optional[requests.Session] = None):
        """
        Initialize the SSDP service.

        Args:
            config: SSDP configuration
            logger: Logger instance
            reporter: Receives protocol violations
            session: HTTP session used to fetch device descriptions
        """
        self.config = config or SSDPConfig()
        self.logger = logger or get_logger(__name__)
        self.reporter = reporter or ViolationReporter(self.config.report_violations)
        self.session = session or requests.Session()

        self._socket: Optional[socket.socket] = None
        self._listener: Optional[threading.Thread] = None
        self._executor: Optional[ThreadPoolExecutor] = None
        self._stop_event = threading.Event()
        self._lock = threading.Lock()
        self._callbacks: List[DeviceCallback] = []
        self._devices: Dict[str, DiscoveredDevice] = {}
        self._locations: Set[str] = set()
        self._pending: Set[Future] = set()

    def start(self) -> None:
        self.logger.debug("Opening SSDP socket")
        sock = None
        try:
            sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM, socket.IPPROTO_UDP)
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.setsockopt(socket.IPPROTO_IP, socket.IP_MULTICAST_TTL, self.config.ttl)
            sock.bind(("", 0))
            sock.settimeout(LISTEN_POLL_INTERVAL)
        except OSError as e:
            if sock is not None:
                sock.close()
            context = ErrorContext(
                error_type=classify_os_error(e),
                severity=ErrorSeverity.CRITICAL,
                operation="start",
                component="SSDPDiscoveryService",
                additional_info={"port": self.config.port},
            )
            raise ServiceStartError(f"Cannot open SSDP socket: {e}", context) from e

        self._socket = sock
        self._stop_event.clear()
        self._executor = ThreadPoolExecutor(
            max_workers=self.config.description_workers,
            thread_name_prefix="upnp-description",
        )
        self._listener = threading.Thread(
            target=self._listen, name="ssdp-listener", daemon=True
        )
        self._listener.start()
        self.logger.debug(f"SSDP listener started on port {sock.getsockname()[1]}")

    def stop(self) -> None:
        with self._lock:
            self._stop_event.set()
            self._callbacks.clear()
        errors = []

        if self._socket is not None:
            try:
                self._socket.close()
            except OSError as e:
                errors.append(f"closing socket: {e}")
            self._socket = None

        if self._listener is not None:
            self._listener.join(timeout=LISTEN_POLL_INTERVAL * 4)
            if self._listener.is_alive():
                errors.append("listener thread did not terminate")
            self._listener = None

        if self._executor is not None:
            self._executor.shutdown(wait=False, cancel_futures=True)
            self._executor = None

        with self._lock:
            pending = set(self._pending)
        if pending:
            _, not_done = wait(pending, timeout=DESCRIPTION_DRAIN_TIMEOUT)
            if not_done:
                self.logger.debug(
                    f"{len(not_done)} description fetch(es) still running at shutdown"
                )

        self.session.close()

        if errors:
            raise ServiceStopError("; ".join(errors))
        self.logger.debug("SSDP service stopped")

    def search_all(self) -> None:
        if self._socket is None:
            raise RuntimeError("SSDP service is not started")

        message = build_search_message(self.config)
        try:
            self._socket.sendto(message, (self.config.multicast_address, self.config.port))
        except OSError as e:
            self.logger.error("Failed to send M-SEARCH request", exception=e)
            return
        self.logger.debug(f"M-SEARCH sent to {self.config.multicast_address}:{self.config.port}")

    def on_device_discovered(self, callback: DeviceCallback) -> None:
        with self._lock:
            self._callbacks.append(callback)

    def list_known_devices(self) -> List[DiscoveredDevice]:
        with self._lock:
            return list(self._devices.values())

    def _listen(self) -> None:
        while not self._stop_event.is_set():
            sock = self._socket
            if sock is None:
                break
            try:
                data, addr = sock.recvfrom(RECEIVE_BUFFER_SIZE)
            except socket.timeout:
                continue
            except OSError as e:
                if not self._stop_event.is_set():
                    self.logger.error("SSDP listener failed", exception=e)
                break
            self.handle_response(data, addr[0])

    def handle_response(self, data: bytes, sender: str) -> None:
        """
        Process one datagram received in answer to the search.

        Args:
            data: Raw datagram
            sender: Address the datagram came from
        """
        start_line, headers = parse_ssdp_headers(data.decode("utf-8", errors="replace"))

        if not start_line.startswith("HTTP/"):
            self.reporter.violate(f"unexpected SSDP message '{start_line[:40]}'", sender)
            return

        location = headers.get("location")
        if not location:
            self.reporter.violate("search response without LOCATION header", sender)
            return
        if not headers.get("usn"):
            self.reporter.violate("search response without USN header", sender)

        with self._lock:
            if location in self._locations:
                return
            self._locations.add(location)
            executor = self._executor

        if executor is None:
            return
        self.logger.debug(f"New device description at {location} (from {sender})")
        try:
            future = executor.submit(self._retrieve_description, location, sender)
        except RuntimeError:
            self.logger.debug(f"Search already stopped, ignoring {location}")
            return
        with self._lock:
            self._pending.add(future)
        future.add_done_callback(self._forget_future)

    def _forget_future(self, future: Future) -> None:
        with self._lock:
            self._pending.discard(future)

    def _retrieve_description(self, location: str, sender: str) -> None:
        try:
            response = self.session.get(location, timeout=self.config.description_timeout)
            response.raise_for_status()
            device = parse_device_description(response.content, location, self.reporter)
        except (requests.RequestException, DescriptionError) as e:
            self.logger.debug(f"Could not retrieve device description from {location}: {e}")
            return

        if not device.address:
            self.reporter.violate(f"description URL '{location}' has no host", sender)
            device = _with_address(device, sender)

        self._register(device)

    def _register(self, root: DiscoveredDevice) -> None:
        new_devices = []
        with self._lock:
            if self._stop_event.is_set():
                self.logger.debug(f"Service stopped, dropping late device {root.udn}")
                return
            for device in root.all_devices():
                key = device.udn or f"{device.descriptor_url}#{len(self._devices)}"
                if key in self._devices:
                    continue
                self._devices[key] = device
                new_devices.append(device)
            callbacks = list(self._callbacks)

        for device in new_devices:
            for callback in callbacks:
                try:
                    callback(device)
                except Exception as e:
                    self.logger.error(f"Device callback failed for {device.udn}", exception=e)


def _with_address(device: DiscoveredDevice, address: str) -> DiscoveredDevice:
    embedded = tuple(_with_address(child, address) for child in device.embedded)
    return replace(device, address=address, embedded=embedded)
