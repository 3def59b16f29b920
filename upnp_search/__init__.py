"""
UPnP Search Module

A Python module that searches the local network for UPnP devices via SSDP
and reports them as a streamed or sorted table.
"""

__version__ = "1.0.0"
__author__ = "UPnP Search Team"
