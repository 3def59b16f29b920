"""
Network utility functions for address handling.

This module provides helpers for checking multicast addresses, splitting dotted
addresses into numeric segments and extracting the host part of device
description URLs.
"""

import ipaddress
from typing import Optional, Tuple
from urllib.parse import urlparse


def is_multicast_ip(ip_address: str) -> bool:
    """
    Check if an IP address is an IPv4 multicast address.

    Args:
        ip_address: IP address to check

    Returns:
        bool: True if IP is multicast, False otherwise
    """
    try:
        return ipaddress.IPv4Address(ip_address).is_multicast
    except ipaddress.AddressValueError:
        return False


def address_segments(address: str) -> Optional[Tuple[int, ...]]:
    """
    Split a dotted address into its unsigned integer segments.

    Args:
        address: Dotted address such as "192.168.1.10"

    Returns:
        Tuple of segment values, or None if any segment is not a
        non-negative integer
    """
    segments = []
    for part in address.split("."):
        if not part.isdigit():
            return None
        segments.append(int(part))
    return tuple(segments)


def host_from_url(url: str) -> str:
    """
    Return the host part of a URL, or an empty string if it has none.

    Args:
        url: Absolute URL such as "http://192.168.1.5:49152/desc.xml"

    Returns:
        str: Host name or address without port
    """
    try:
        return urlparse(url).hostname or ""
    except ValueError:
        return ""

