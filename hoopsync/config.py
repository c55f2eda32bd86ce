"""
Runtime configuration for the HoopSync live stat-keeper client.

Defaults come from ``utils.constants``; an optional JSON file and then
environment variables override them.
"""
import json
import os
from dataclasses import dataclass, fields
from typing import Any, Dict, Optional

from .utils import constants


class ConfigurationError(Exception):
    """Raised when the client is missing settings it needs to talk to the store."""
    pass


@dataclass
class AppConfig:
    """
    Settings for one stat-keeper client process.

    Attributes:
        endpoint_url: Remote store web app URL (query string and fragment are ignored)
        access_token: Shared secret sent with every read and write
        poll_interval_sec: Delay between live snapshot polls
        tick_interval_sec: Wall-clock length of one game-clock second
        playtime_publish_interval_sec: Delay between playtime publications
        meta_publish_interval_sec: Delay between Primary clock/meta publications
        write_timeout_sec: Bounded wait for fire-and-forget POSTs
        read_timeout_sec: Bounded wait for callback-wrapped GET reads
        period_length_sec: Nominal period length used on quarter change
        pbp_window: Number of trailing play-by-play rows kept in memory
        web_host: Bind address for the local web API
        web_port: Port for the local web API
        preferences_path: JSON file holding keeper preferences
    """
    endpoint_url: str = ""
    access_token: str = ""
    poll_interval_sec: float = constants.POLL_INTERVAL_SEC
    tick_interval_sec: float = constants.CLOCK_TICK_INTERVAL_SEC
    playtime_publish_interval_sec: float = constants.PLAYTIME_PUBLISH_INTERVAL_SEC
    meta_publish_interval_sec: float = constants.META_PUBLISH_INTERVAL_SEC
    write_timeout_sec: float = constants.WRITE_TIMEOUT_SEC
    read_timeout_sec: float = constants.READ_TIMEOUT_SEC
    period_length_sec: int = constants.PERIOD_LENGTH_SEC
    pbp_window: int = constants.PBP_WINDOW
    web_host: str = constants.DEFAULT_WEB_HOST
    web_port: int = constants.DEFAULT_WEB_PORT
    preferences_path: str = "hoopsync_prefs.json"

    @property
    def base_url(self) -> str:
        """Endpoint URL stripped of any query string or fragment."""
        return str(self.endpoint_url or "").split("#")[0].split("?")[0]

    def require_remote(self) -> None:
        """
        Ensure the endpoint and token are set before any network call.

        Raises:
            ConfigurationError: If either value is missing
        """
        if not self.base_url or not self.access_token:
            raise ConfigurationError("Set API URL + token.")

    def to_json(self) -> dict:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    @staticmethod
    def from_json(data: dict) -> "AppConfig":
        """Build a config from a dictionary, ignoring unknown keys."""
        config = AppConfig()
        for f in fields(AppConfig):
            if f.name in data and data[f.name] is not None:
                current = getattr(config, f.name)
                setattr(config, f.name, type(current)(data[f.name]))
        return config


ENV_OVERRIDES = {
    "HOOPSYNC_ENDPOINT": "endpoint_url",
    "HOOPSYNC_TOKEN": "access_token",
    "HOOPSYNC_PREFS": "preferences_path",
    "HOOPSYNC_HOST": "web_host",
    "HOOPSYNC_PORT": "web_port",
}


def load_config(path: Optional[str] = None, environ: Optional[Dict[str, str]] = None) -> AppConfig:
    """
    Load configuration from an optional JSON file plus environment overrides.

    Args:
        path: JSON file to read; missing files are treated as empty
        environ: Environment mapping (defaults to ``os.environ``)

    Returns:
        Populated AppConfig instance

    Raises:
        ConfigurationError: If the file exists but is not a JSON object or
                            a value has the wrong type
    """
    environ = os.environ if environ is None else environ
    data: Dict[str, Any] = {}

    if path and os.path.exists(path):
        with open(path, "r", encoding="utf-8") as f:
            try:
                loaded = json.load(f)
            except json.JSONDecodeError as e:
                raise ConfigurationError(f"Invalid config file {path}: {e}") from e
        if not isinstance(loaded, dict):
            raise ConfigurationError(f"Config file {path} must contain a JSON object")
        data.update(loaded)

    for env_name, field_name in ENV_OVERRIDES.items():
        if environ.get(env_name):
            data[field_name] = environ[env_name]

    try:
        return AppConfig.from_json(data)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid configuration value: {e}") from e
