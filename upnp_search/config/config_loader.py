"""
Configuration loader for UPnP Search Module.
Handles loading and validation of the YAML configuration file with fallback to defaults.
"""

import yaml
from typing import Dict, Any, Optional
from dataclasses import dataclass, field
from pathlib import Path

from ..core.data_models import SortKey, WILDCARD_FILTER
from ..utils.error_handler import ConfigurationError, ErrorContext, ErrorSeverity, ErrorType
from ..utils.logger import Logger, LogLevel, get_logger, parse_log_level
from ..utils.network_utils import is_multicast_ip

CONFIG_FILE_NAME = "search_config.yml"


@dataclass
class SearchConfig:
    """Defaults for search sessions."""
    timeout: int = 5
    sort_by: str = "none"
    filter: str = WILDCARD_FILTER
    verbose: bool = False
    table_gutter: int = 4


@dataclass
class SSDPConfig:
    """Configuration for the SSDP discovery backend."""
    multicast_address: str = "239.255.255.250"
    port: int = 1900
    mx: int = 3
    ttl: int = 2
    search_target: str = "ssdp:all"
    description_timeout: int = 5
    description_workers: int = 8
    report_violations: bool = True


@dataclass
class AppConfig:
    """Complete application configuration."""
    search: SearchConfig = field(default_factory=SearchConfig)
    ssdp: SSDPConfig = field(default_factory=SSDPConfig)
    log_level: LogLevel = LogLevel.WARNING


class ConfigLoader:
    """
    Loads and validates the YAML configuration file.
    Provides fallback to default configuration when the file or a section is missing.
    A strict loader instead raises ConfigurationError when the file is missing
    or unreadable; invalid values still fall back per field.
    """

    def __init__(self, config_dir: Optional[str] = None, logger: Optional[Logger] = None,
                 strict: bool = False):
        """
        Initialize ConfigLoader.

        Args:
            config_dir: Directory containing the configuration file.
                       Defaults to the config directory relative to this file.
            logger: Logger instance
            strict: Raise ConfigurationError instead of falling back to
                    defaults when the file is missing or cannot be parsed
        """
        if config_dir is None:
            self.config_dir = Path(__file__).parent
        else:
            self.config_dir = Path(config_dir)

        self.logger = logger or get_logger(__name__)
        self.strict = strict

    @property
    def config_path(self) -> Path:
        return self.config_dir / CONFIG_FILE_NAME

    def load(self) -> AppConfig:
        """
        Load the complete configuration.

        Returns:
            AppConfig with loaded or default values
        """
        config_data = self._read_config_file()
        return AppConfig(
            search=self._load_search_config(config_data.get('search')),
            ssdp=self._load_ssdp_config(config_data.get('ssdp')),
            log_level=self._load_log_level(config_data.get('logging')),
        )

    def _config_error(self, message: str) -> ConfigurationError:
        context = ErrorContext(
            error_type=ErrorType.CONFIGURATION_ERROR,
            severity=ErrorSeverity.CRITICAL,
            operation="load",
            component="ConfigLoader",
            additional_info={"config_file": str(self.config_path)},
        )
        return ConfigurationError(message, context)

    def _read_config_file(self) -> Dict[str, Any]:
        """
        Read the raw configuration mapping.

        Returns:
            Parsed mapping, or an empty dict when falling back to defaults

        Raises:
            ConfigurationError: In strict mode, if the file is missing,
                                unreadable or not a YAML mapping
        """
        config_path = self.config_path

        if not config_path.exists():
            if self.strict:
                raise self._config_error(f"Config file not found at {config_path}")
            self.logger.warning(f"Config file not found at {config_path}. Using default configuration.")
            return {}

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                config_data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            if self.strict:
                raise self._config_error(f"Error parsing config file {config_path}: {e}") from e
            self.logger.error(f"Error parsing config file {config_path}: {e}")
            self.logger.warning("Using default configuration.")
            return {}
        except OSError as e:
            if self.strict:
                raise self._config_error(f"Cannot read config file {config_path}: {e}") from e
            self.logger.error(f"Cannot read config file {config_path}: {e}")
            self.logger.warning("Using default configuration.")
            return {}

        if not isinstance(config_data, dict):
            if self.strict:
                raise self._config_error(f"Invalid config structure in {config_path}")
            self.logger.warning(f"Invalid config structure in {config_path}. Using default configuration.")
            return {}
        return config_data

    def _load_search_config(self, search_data: Any) -> SearchConfig:
        if not isinstance(search_data, dict):
            if search_data is not None:
                self.logger.warning("Invalid 'search' section. Using default search configuration.")
            return SearchConfig()

        return SearchConfig(
            timeout=self._validate_positive_int(search_data.get('timeout', 5), 'timeout', 5),
            sort_by=self._validate_sort_by(search_data.get('sort_by', 'none')),
            filter=self._validate_filter(search_data.get('filter', WILDCARD_FILTER)),
            verbose=self._validate_bool(search_data.get('verbose', False), 'verbose', False),
            table_gutter=self._validate_non_negative_int(search_data.get('table_gutter', 4), 'table_gutter', 4),
        )

    def _load_ssdp_config(self, ssdp_data: Any) -> SSDPConfig:
        if not isinstance(ssdp_data, dict):
            if ssdp_data is not None:
                self.logger.warning("Invalid 'ssdp' section. Using default SSDP configuration.")
            return SSDPConfig()

        return SSDPConfig(
            multicast_address=self._validate_multicast_address(
                ssdp_data.get('multicast_address', "239.255.255.250")),
            port=self._validate_port(ssdp_data.get('port', 1900)),
            mx=self._validate_positive_int(ssdp_data.get('mx', 3), 'mx', 3),
            ttl=self._validate_positive_int(ssdp_data.get('ttl', 2), 'ttl', 2),
            search_target=str(ssdp_data.get('search_target', "ssdp:all")),
            description_timeout=self._validate_positive_int(
                ssdp_data.get('description_timeout', 5), 'description_timeout', 5),
            description_workers=self._validate_positive_int(
                ssdp_data.get('description_workers', 8), 'description_workers', 8),
            report_violations=self._validate_bool(
                ssdp_data.get('report_violations', True), 'report_violations', True),
        )

    def _load_log_level(self, logging_data: Any) -> LogLevel:
        if not isinstance(logging_data, dict):
            return LogLevel.WARNING
        value = logging_data.get('level', 'WARNING')
        level = parse_log_level(value, default=None)
        if level is None:
            self.logger.warning(f"Invalid log level: {value}. Using default: WARNING")
            return LogLevel.WARNING
        return level

    def _validate_positive_int(self, value: Any, field_name: str, default: int) -> int:
        """
        Validate that a value is a positive integer.

        Args:
            value: Value to validate
            field_name: Name of the field for error messages
            default: Default value to use if validation fails

        Returns:
            Validated integer value or default
        """
        if isinstance(value, bool):
            self.logger.warning(f"Invalid {field_name}: {value}. Must be an integer. Using default: {default}")
            return default
        try:
            int_value = int(value)
            if int_value <= 0:
                self.logger.warning(f"Invalid {field_name}: {value}. Must be positive. Using default: {default}")
                return default
            return int_value
        except (ValueError, TypeError):
            self.logger.warning(f"Invalid {field_name}: {value}. Must be an integer. Using default: {default}")
            return default

    def _validate_non_negative_int(self, value: Any, field_name: str, default: int) -> int:
        if value == 0 and not isinstance(value, bool):
            return 0
        return self._validate_positive_int(value, field_name, default)

    def _validate_port(self, value: Any) -> int:
        port = self._validate_positive_int(value, 'port', 1900)
        if port > 65535:
            self.logger.warning(f"Invalid port: {value}. Must be at most 65535. Using default: 1900")
            return 1900
        return port

    def _validate_bool(self, value: Any, field_name: str, default: bool) -> bool:
        if isinstance(value, bool):
            return value
        self.logger.warning(f"Invalid {field_name}: {value}. Must be true or false. Using default: {default}")
        return default

    def _validate_sort_by(self, value: Any) -> str:
        """
        Validate the default sort key.

        Args:
            value: Sort key name to validate

        Returns:
            Validated canonical sort key name or "none"
        """
        key = SortKey.parse(str(value))
        if key is None:
            valid = [k.value for k in SortKey]
            self.logger.warning(f"Invalid sort_by: {value}. Must be one of {valid}. Using default: none")
            return SortKey.NONE.value
        return key.value

    def _validate_filter(self, value: Any) -> str:
        if value is None or str(value) == "":
            self.logger.warning(f"Empty filter in configuration. Using default: {WILDCARD_FILTER}")
            return WILDCARD_FILTER
        return str(value)

    def _validate_multicast_address(self, value: Any) -> str:
        address = str(value)
        if not is_multicast_ip(address):
            self.logger.warning(
                f"Invalid multicast_address: {value}. Must be an IPv4 multicast address. "
                "Using default: 239.255.255.250"
            )
            return "239.255.255.250"
        return address

    def create_default_config(self) -> None:
        """
        Create the default configuration file if it doesn't exist.
        """
        config_path = self.config_path
        if config_path.exists():
            return

        default_config = {
            'search': {
                'timeout': 5,
                'sort_by': 'none',
                'filter': WILDCARD_FILTER,
                'verbose': False,
                'table_gutter': 4
            },
            'ssdp': {
                'multicast_address': '239.255.255.250',
                'port': 1900,
                'mx': 3,
                'ttl': 2,
                'search_target': 'ssdp:all',
                'description_timeout': 5,
                'description_workers': 8,
                'report_violations': True
            },
            'logging': {
                'level': 'WARNING'
            }
        }

        try:
            self.config_dir.mkdir(parents=True, exist_ok=True)
            with open(config_path, 'w', encoding='utf-8') as f:
                yaml.dump(default_config, f, default_flow_style=False, indent=2, sort_keys=False)
            self.logger.info(f"Created default config at {config_path}")
        except OSError as e:
            self.logger.error(f"Failed to create default config: {e}")
