"""
Discovery backends for UPnP Search.

This package contains the discovery service interface and the SSDP
implementation used by the command line tool.
"""

from .base_service import DiscoveryService, DiscoveredDevice
from .ssdp_service import SSDPDiscoveryService

__all__ = [
    'DiscoveryService',
    'DiscoveredDevice',
    'SSDPDiscoveryService'
]
