"""
Configuration module for UPnP Search.
Provides configuration loading and validation.
"""

from .config_loader import ConfigLoader, AppConfig, SearchConfig, SSDPConfig

__all__ = ['ConfigLoader', 'AppConfig', 'SearchConfig', 'SSDPConfig']
