"""
Configuration management for the tunnel.
Reads optional JSON configuration files and merges them with command-line values.
"""
import os
import copy
import json
import shutil
import logging
from typing import Dict, Any, Optional, List

DEFAULT_PORT = 55555

DEFAULT_CONFIG: Dict[str, Any] = {
    "version": "1.0.0",
    "tunnel": {
        "port": DEFAULT_PORT,
        "local_port": None,
        "bind_address": "0.0.0.0",
        "device_mode": "tun",
        "peer_policy": "roaming",
        "token": "Wazaaaaaaaaaaahhhh !",
        "strict_handshake": False
    },
    "logging": {
        "level": "INFO",
        "file": None
    },
    "web": {
        "enabled": False,
        "host": "127.0.0.1",
        "port": 8080
    }
}


class ConfigManager:
    """
    Configuration manager for tunnel settings
    """

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize the configuration manager

        Args:
            config_path: Path to a JSON configuration file (None for built-in defaults only)
        """
        self.config_path = config_path
        self.config = copy.deepcopy(DEFAULT_CONFIG)
        self.logger = logging.getLogger("udptun.config")

        if self.config_path:
            self.load()

    def load(self) -> bool:
        """
        Load configuration from file, layered over the defaults

        Returns:
            True if the file was read, False if it does not exist
        """
        if not os.path.exists(self.config_path):
            self.logger.warning(f"Configuration file {self.config_path} not found, using defaults")
            return False

        try:
            with open(self.config_path, 'r') as f:
                loaded = json.load(f)
        except (OSError, ValueError) as e:
            raise ValueError(f"Failed to load configuration {self.config_path}: {e}") from e

        if not isinstance(loaded, dict):
            raise ValueError(f"Configuration {self.config_path} must contain a JSON object")

        self.update(loaded)
        self.logger.info(f"Configuration loaded from {self.config_path}")
        return True

    def save(self, path: Optional[str] = None) -> None:
        """
        Save configuration to file

        Args:
            path: Destination (None for the loaded path)
        """
        path = path or self.config_path
        if not path:
            raise ValueError("No configuration path to save to")

        # Create backup if file exists
        if os.path.exists(path):
            backup_path = f"{path}.bak"
            shutil.copy2(path, backup_path)
            self.logger.debug(f"Created backup of configuration at {backup_path}")

        with open(path, 'w') as f:
            json.dump(self.config, f, indent=4)

        self.logger.info(f"Configuration saved to {path}")

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value

        Args:
            key: Configuration key (dot notation for nested keys)
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        keys = key.split('.')
        value = self.config

        try:
            for k in keys:
                value = value[k]
            return value
        except (KeyError, TypeError):
            return default

    def set(self, key: str, value: Any) -> None:
        """
        Set a configuration value

        Args:
            key: Configuration key (dot notation for nested keys)
            value: Value to set
        """
        keys = key.split('.')
        config = self.config

        for k in keys[:-1]:
            if k not in config:
                config[k] = {}
            config = config[k]

        config[keys[-1]] = value

    def update(self, config_dict: Dict[str, Any]) -> None:
        """
        Update multiple configuration values

        Args:
            config_dict: Dictionary of configuration values to update
        """
        self._recursive_update(self.config, config_dict)

    def _recursive_update(self, target: Dict[str, Any], source: Dict[str, Any]) -> None:
        for key, value in source.items():
            if key in target and isinstance(target[key], dict) and isinstance(value, dict):
                self._recursive_update(target[key], value)
            else:
                target[key] = value

    def validate(self) -> List[str]:
        """
        Validate the configuration

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []

        for key in ("tunnel.port", "web.port"):
            port = self.get(key)
            if not isinstance(port, int) or isinstance(port, bool) or not 0 < port < 65536:
                errors.append(f"{key} must be an integer between 1 and 65535")

        local_port = self.get("tunnel.local_port")
        if local_port is not None and (not isinstance(local_port, int) or isinstance(local_port, bool)
                                       or not 0 <= local_port < 65536):
            errors.append("tunnel.local_port must be an integer between 0 and 65535")

        if self.get("tunnel.device_mode") not in ("tun", "tap"):
            errors.append("tunnel.device_mode must be 'tun' or 'tap'")

        if self.get("tunnel.peer_policy") not in ("fixed", "roaming"):
            errors.append("tunnel.peer_policy must be 'fixed' or 'roaming'")

        token = self.get("tunnel.token")
        if not isinstance(token, str) or not token or not token.isascii():
            errors.append("tunnel.token must be a non-empty ASCII string")

        for key in ("tunnel.strict_handshake", "web.enabled"):
            if not isinstance(self.get(key), bool):
                errors.append(f"{key} must be true or false")

        return errors


class TunnelSettings:
    """
    Settings for one tunnel process, built once at startup
    """

    def __init__(self, interface: str, server_address: Optional[str] = None,
                 port: int = DEFAULT_PORT, local_port: Optional[int] = None,
                 bind_address: str = "0.0.0.0", device_mode: str = "tun",
                 peer_policy: str = "roaming", token: str = DEFAULT_CONFIG["tunnel"]["token"],
                 strict_handshake: bool = False, debug: bool = False,
                 log_level: str = "INFO", log_file: Optional[str] = None,
                 web_enabled: bool = False, web_host: str = "127.0.0.1",
                 web_port: int = 8080):
        self.interface = interface
        self.server_address = server_address
        self.port = port
        self.local_port = port if local_port is None else local_port
        self.bind_address = bind_address
        self.device_mode = device_mode
        self.peer_policy = peer_policy
        self.token = token
        self.strict_handshake = strict_handshake
        self.debug = debug
        self.log_level = "DEBUG" if debug else log_level
        self.log_file = log_file
        self.web_enabled = web_enabled
        self.web_host = web_host
        self.web_port = web_port

    @property
    def is_server(self) -> bool:
        return self.server_address is None

    @classmethod
    def from_sources(cls, config: ConfigManager, **overrides: Any) -> "TunnelSettings":
        """
        Merge configuration file values with command-line overrides

        Args:
            config: Loaded configuration
            overrides: Command-line values; None means "not given"

        Returns:
            The merged settings
        """
        values = {
            "port": config.get("tunnel.port"),
            "local_port": config.get("tunnel.local_port"),
            "bind_address": config.get("tunnel.bind_address"),
            "device_mode": config.get("tunnel.device_mode"),
            "peer_policy": config.get("tunnel.peer_policy"),
            "token": config.get("tunnel.token"),
            "strict_handshake": config.get("tunnel.strict_handshake"),
            "log_level": config.get("logging.level"),
            "log_file": config.get("logging.file"),
            "web_enabled": config.get("web.enabled"),
            "web_host": config.get("web.host"),
            "web_port": config.get("web.port"),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    def as_dict(self) -> Dict[str, Any]:
        return dict(vars(self))
