"""
Configuration loader with priority: CLI > env > TOML > defaults
"""
import os
import tomllib
from pathlib import Path
from typing import Dict, Any, Optional

from ...core.constants import ENV_PREFIX
from ...core.exceptions import ConfigError

# environment variable (without prefix) -> dotted config key
ENV_MAPPINGS = {
    "LOG_LEVEL": "log_level",
    "LOG_FILE": "log_file",
    "STATE_DIR": "state_dir",
    "HEADLESS": "headless",
    "NOTICE_TTL": "notice_ttl",
    "SERVICE_POLL_INTERVAL": "poll.service_interval",
    "ROUTER_POLL_INTERVAL": "poll.router_interval",
    "LIST_TIMEOUT": "bridge.list_timeout",
    "ENGINE_PATH": "bridge.engine_path",
    "REQUIRE_ENGINE": "bridge.require_engine",
}


class ConfigLoader:
    """Configuration loader with priority support"""

    def __init__(self, env_prefix: str = ENV_PREFIX):
        self._env_prefix = env_prefix

    def load_toml(self, path: Path) -> Dict[str, Any]:
        """Load TOML configuration file"""
        path = Path(path).expanduser()
        if not path.exists():
            raise ConfigError(f"Configuration file not found: {path}")

        try:
            return tomllib.loads(path.read_text(encoding='utf-8'))
        except (OSError, tomllib.TOMLDecodeError) as e:
            raise ConfigError(f"Failed to parse TOML configuration: {e}") from e

    def load_env(self, environ: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
        """Load configuration from environment variables"""
        environ = os.environ if environ is None else environ
        config: Dict[str, Any] = {}

        for env_key, config_key in ENV_MAPPINGS.items():
            value = environ.get(self._env_prefix + env_key)
            if value:
                self._set_dotted(config, config_key, self._convert_value(value))

        return config

    @staticmethod
    def _set_dotted(config: Dict[str, Any], dotted_key: str, value: Any) -> None:
        parts = dotted_key.split(".")
        node = config
        for part in parts[:-1]:
            node = node.setdefault(part, {})
        node[parts[-1]] = value

    def _convert_value(self, value: str) -> Any:
        """Convert string value to appropriate type"""
        if value.lower() in ("true", "yes", "on"):
            return True
        if value.lower() in ("false", "no", "off"):
            return False

        try:
            return int(value)
        except ValueError:
            pass

        try:
            return float(value)
        except ValueError:
            pass

        return value

    def merge_configs(self, *configs: Dict[str, Any]) -> Dict[str, Any]:
        """
        Merge multiple configurations with priority.
        Later configs override earlier ones.
        """
        result: Dict[str, Any] = {}

        for config in configs:
            result = self._deep_merge(result, config)

        return result

    def _deep_merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Deep merge two dictionaries; None values in override are ignored"""
        result = base.copy()

        for key, value in override.items():
            if value is None:
                continue
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result

    def load(
        self,
        toml_path: Optional[Path] = None,
        cli_overrides: Optional[Dict[str, Any]] = None,
        use_env: bool = True,
    ) -> Dict[str, Any]:
        """
        Load configuration with priority: CLI > env > TOML > defaults

        Args:
            toml_path: Path to TOML configuration file
            cli_overrides: CLI parameter overrides (None values are skipped)
            use_env: Whether to load from environment variables

        Returns:
            Merged configuration dictionary
        """
        configs = []

        if toml_path:
            configs.append(self.load_toml(toml_path))

        if use_env:
            env_config = self.load_env()
            if env_config:
                configs.append(env_config)

        if cli_overrides:
            configs.append(cli_overrides)

        return self.merge_configs(*configs)
