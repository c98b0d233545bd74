"""
Configuration module for DNS-Failover.
"""

import ipaddress
import os
import re
from pathlib import Path
from typing import Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator, model_validator

from dns_failover.errors import ConfigError
from dns_failover.models.models import (
    Endpoint,
    ManagedRecord,
    Role,
    normalize_hostname,
    record_type_for,
)


class Config(BaseModel):
    """Configuration for DNS-Failover."""

    model_config = ConfigDict(frozen=True)

    # Provider configuration
    cloudflare_api_token: str = ""
    cloudflare_api_email: str = ""
    cloudflare_api_key: str = ""
    cloudflare_timeout: str = "10s"

    # Managed record
    zone_id: str
    record_id: str
    hostname: str
    ttl: int = 120
    proxied: bool = True

    # Endpoints
    primary_ip: str
    failover_ip: str

    # Health check configuration
    health_check_path: str = "/health"
    health_check_port: int = 443
    health_check_timeout: str = "5s"

    # Controller configuration
    once: bool = True
    interval: str = "1m"
    dry_run: bool = False

    # Status server configuration
    status_server_enabled: bool = False
    status_server_host: str = "0.0.0.0"
    status_server_port: int = 8080

    # Logging configuration
    log_level: str = "info"

    @field_validator("zone_id", "record_id", "hostname")
    @classmethod
    def _required(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("must not be empty")
        return value.strip()

    @field_validator("hostname")
    @classmethod
    def _ascii_hostname(cls, value: str) -> str:
        return normalize_hostname(value)

    @field_validator("primary_ip", "failover_ip")
    @classmethod
    def _ip_literal(cls, value: str) -> str:
        try:
            return str(ipaddress.ip_address(value.strip()))
        except ValueError:
            raise ValueError(f"{value!r} is not an IPv4 or IPv6 address")

    @field_validator("health_check_path")
    @classmethod
    def _absolute_path(cls, value: str) -> str:
        if not value.startswith("/"):
            raise ValueError("must start with '/'")
        return value

    @field_validator("cloudflare_timeout", "health_check_timeout", "interval")
    @classmethod
    def _duration(cls, value: str) -> str:
        parse_duration(value)
        return value

    @model_validator(mode="after")
    def _check_consistency(self) -> "Config":
        if not self.cloudflare_api_token and not (
            self.cloudflare_api_email and self.cloudflare_api_key
        ):
            raise ValueError(
                "cloudflare.api_token or both cloudflare.api_email and cloudflare.api_key are required"
            )
        if self.primary_ip == self.failover_ip:
            raise ValueError("endpoints.primary and endpoints.failover must differ")
        if record_type_for(self.primary_ip) != record_type_for(self.failover_ip):
            raise ValueError(
                "endpoints.primary and endpoints.failover must share an IP version"
            )
        return self

    @classmethod
    def from_yaml(cls, config_path: Optional[Union[str, Path]] = None) -> "Config":
        """
        Load configuration from a YAML file.

        Args:
            config_path: Path to the YAML configuration file

        Returns:
            Config: Config instance populated with values from the YAML file

        Raises:
            ConfigError: If no file is found or the values are invalid
        """
        # Default configuration paths to check
        default_paths = [
            Path("./dns-failover.yaml"),
            Path("./dns-failover.yml"),
            Path("/etc/dns-failover/dns-failover.yaml"),
            Path("/etc/dns-failover/config.yaml"),
        ]

        # If config_path is provided, use it
        if config_path:
            paths = [Path(config_path)]
        else:
            paths = default_paths

        for path in paths:
            if path.exists():
                with open(path, "r") as f:
                    yaml_content = f.read()
                break
        else:
            raise ConfigError(
                f"No configuration file found (looked in: {', '.join(str(p) for p in paths)})"
            )

        return cls.from_string(yaml_content)

    @classmethod
    def from_string(cls, yaml_content: str) -> "Config":
        """
        Build a Config from YAML text, substituting environment variables first.
        """
        try:
            config_data = yaml.safe_load(cls._substitute_env_vars(yaml_content)) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML: {e}") from e
        if not isinstance(config_data, dict):
            raise ConfigError("Configuration must be a mapping")

        try:
            return cls(**cls._flatten_config(config_data))
        except ValidationError as e:
            raise ConfigError(str(e)) from e

    @staticmethod
    def _substitute_env_vars(content: str) -> str:
        """
        Substitute environment variables in the configuration content.

        Args:
            content: Configuration content

        Returns:
            str: Configuration content with environment variables substituted
        """
        # Pattern for ${ENV_VAR} or ${ENV_VAR:-default}
        pattern = r"\${([^}]+)}"

        def replace_env_var(match):
            env_var = match.group(1)
            if ":-" in env_var:
                env_var, default = env_var.split(":-", 1)
                return os.environ.get(env_var, default)
            return os.environ.get(env_var, "")

        return re.sub(pattern, replace_env_var, content)

    @staticmethod
    def _section(config_data: dict, name: str) -> dict:
        """
        Return a nested section, empty if absent.

        Raises:
            ConfigError: If the section is not a mapping
        """
        section = config_data.get(name)
        if section is None:
            return {}
        if not isinstance(section, dict):
            raise ConfigError(f"Section '{name}' must be a mapping")
        return section

    @classmethod
    def _flatten_config(cls, config_data: dict) -> dict:
        """
        Flatten nested configuration.

        Args:
            config_data: Nested configuration data

        Returns:
            dict: Flattened configuration data
        """
        flat_config = {}

        # Cloudflare provider configuration
        cloudflare = cls._section(config_data, "cloudflare")
        flat_config["cloudflare_api_token"] = str(cloudflare.get("api_token") or "")
        flat_config["cloudflare_api_email"] = str(cloudflare.get("api_email") or "")
        flat_config["cloudflare_api_key"] = str(cloudflare.get("api_key") or "")
        flat_config["cloudflare_timeout"] = str(cloudflare.get("timeout", "10s"))

        # Managed record
        record = cls._section(config_data, "record")
        flat_config["zone_id"] = str(record.get("zone_id") or "")
        flat_config["record_id"] = str(record.get("record_id") or "")
        flat_config["hostname"] = str(record.get("hostname") or "")
        flat_config["ttl"] = record.get("ttl", 120)
        flat_config["proxied"] = record.get("proxied", True)

        # Endpoints
        endpoints = cls._section(config_data, "endpoints")
        flat_config["primary_ip"] = str(endpoints.get("primary") or "")
        flat_config["failover_ip"] = str(endpoints.get("failover") or "")

        # Health check configuration
        health_check = cls._section(config_data, "health_check")
        flat_config["health_check_path"] = health_check.get("path", "/health")
        flat_config["health_check_port"] = health_check.get("port", 443)
        flat_config["health_check_timeout"] = str(health_check.get("timeout", "5s"))

        # Controller configuration
        controller = cls._section(config_data, "controller")
        flat_config["once"] = controller.get("once", True)
        flat_config["interval"] = str(controller.get("interval", "1m"))
        flat_config["dry_run"] = controller.get("dry_run", False)

        # Status server configuration
        status_server = cls._section(config_data, "status_server")
        flat_config["status_server_enabled"] = status_server.get("enabled", False)
        flat_config["status_server_host"] = status_server.get("host", "0.0.0.0")
        flat_config["status_server_port"] = status_server.get("port", 8080)

        # Logging configuration
        logging = cls._section(config_data, "logging")
        flat_config["log_level"] = logging.get("level", "info")

        return flat_config

    def record(self) -> ManagedRecord:
        """The managed record, with its type derived from the endpoint addresses."""
        return ManagedRecord(
            zone_id=self.zone_id,
            record_id=self.record_id,
            hostname=self.hostname,
            record_type=record_type_for(self.primary_ip),
            ttl=self.ttl,
            proxied=self.proxied,
        )

    def primary(self) -> Endpoint:
        return Endpoint(Role.PRIMARY, self.primary_ip)

    def failover(self) -> Endpoint:
        return Endpoint(Role.FAILOVER, self.failover_ip)


def parse_duration(duration: str) -> float:
    """
    Parse a duration string like '15m' into seconds.

    A bare number is taken as seconds.

    Args:
        duration: Duration string

    Returns:
        float: Duration in seconds

    Raises:
        ValueError: If the string is not a positive duration
    """
    # Pattern for duration string (e.g., 15m, 1h, 30s, 2.5)
    match = re.match(r"^\s*(\d+(?:\.\d+)?)\s*([smhd]?)\s*$", str(duration))
    if not match:
        raise ValueError(f"invalid duration {duration!r}")

    value, unit = match.groups()
    seconds = float(value) * {"": 1, "s": 1, "m": 60, "h": 60 * 60, "d": 60 * 60 * 24}[unit]
    if seconds <= 0:
        raise ValueError(f"duration {duration!r} must be positive")
    return seconds
