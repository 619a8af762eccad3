"""
Configuration for ical-filter.

Values come from an optional TOML file, then environment variables.
The resulting Config is built once at startup and passed explicitly to
the pipeline and the web application; it is never modified afterwards.
"""

import tomllib
import os
from pathlib import Path
from dataclasses import dataclass, replace
from typing import Optional

from . import __version__
from .errors import ConfigError


SOCKETADDR_ENV = "ICAL_FILTER_SOCKETADDR"
LOG_LEVEL_ENV = "ICAL_FILTER_LOG_LEVEL"


@dataclass(frozen=True)
class Config:
    """Process-wide settings for ical-filter."""
    host: str = "127.0.0.1"
    port: int = 8080
    log_level: str = "INFO"
    log_format: str = "console"  # "console" or "json"
    fetch_timeout: float = 30.0  # Upstream request timeout in seconds
    user_agent: str = f"ical-filter/{__version__}"
    prodid: str = "-//ical-filter//ical-filter//EN"

    @property
    def socketaddr(self) -> str:
        return f"{self.host}:{self.port}"

    @classmethod
    def get_default_config_path(cls) -> Path:
        """Get the default configuration file path."""
        xdg_config = os.environ.get('XDG_CONFIG_HOME', os.path.expanduser('~/.config'))
        return Path(xdg_config) / 'ical-filter' / 'ical-filter.toml'

    @classmethod
    def load(
        cls,
        config_path: Optional[Path] = None,
        environ: Optional[dict] = None
    ) -> 'Config':
        """
        Load configuration.

        Args:
            config_path: TOML file to read. If None, the default path is
                used when it exists and built-in defaults otherwise.
            environ: Environment mapping (defaults to os.environ)

        Returns:
            The loaded Config.

        Raises:
            FileNotFoundError: config_path was given but does not exist
            ConfigError: a value has the wrong type or format
        """
        if environ is None:
            environ = os.environ

        data = {}
        if config_path is not None:
            if not config_path.exists():
                raise FileNotFoundError(f"Configuration file not found: {config_path}")
            data = cls._read_toml(config_path)
        else:
            default_path = cls.get_default_config_path()
            if default_path.exists():
                data = cls._read_toml(default_path)

        config = cls.from_dict(data)

        socketaddr = environ.get(SOCKETADDR_ENV)
        if socketaddr:
            host, port = parse_socketaddr(socketaddr)
            config = replace(config, host=host, port=port)

        log_level = environ.get(LOG_LEVEL_ENV)
        if log_level:
            config = replace(config, log_level=log_level.upper())

        return config

    @staticmethod
    def _read_toml(path: Path) -> dict:
        with open(path, 'rb') as f:
            try:
                return tomllib.load(f)
            except tomllib.TOMLDecodeError as e:
                raise ConfigError(f"Invalid configuration file {path}: {e}") from e

    @classmethod
    def from_dict(cls, data: dict) -> 'Config':
        """Build a Config from parsed TOML data."""
        server = data.get('Server', {})
        logging_data = data.get('Logging', {})
        upstream = data.get('Upstream', {})

        log_format = logging_data.get('format', cls.log_format)
        if log_format not in ("console", "json"):
            raise ConfigError(f"Logging.format must be 'console' or 'json', got {log_format!r}")

        try:
            return cls(
                host=str(server.get('host', cls.host)),
                port=int(server.get('port', cls.port)),
                log_level=str(logging_data.get('level', cls.log_level)).upper(),
                log_format=log_format,
                fetch_timeout=float(upstream.get('timeout', cls.fetch_timeout)),
                user_agent=str(upstream.get('user_agent', cls.user_agent)),
                prodid=str(data.get('General', {}).get('prodid', cls.prodid)),
            )
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid configuration value: {e}") from e


def parse_socketaddr(value: str) -> tuple[str, int]:
    """
    Split ``host:port`` into its parts.

    IPv6 hosts are written in brackets: ``[::1]:8080``.
    """
    host, sep, port = value.rpartition(':')
    if not sep or not host:
        raise ConfigError(f"{SOCKETADDR_ENV} must be host:port, got {value!r}")
    if host.startswith('[') and host.endswith(']'):
        host = host[1:-1]
    try:
        port_number = int(port)
    except ValueError:
        raise ConfigError(f"Invalid port in {value!r}") from None
    if not 0 < port_number < 65536:
        raise ConfigError(f"Port out of range in {value!r}")
    return host, port_number
