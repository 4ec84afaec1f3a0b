import json
import math
import os
from dataclasses import dataclass
from typing import Optional

from yt_live_recorder.recorder import DEFAULT_RECORDER

CONFIG_ENV_VAR = "YT_LIVE_RECORDER_CONFIG"


def default_config_path():
    """
    $YT_LIVE_RECORDER_CONFIG if set, otherwise config.json in the user's
    config directory (never inside the installed package).
    """
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return override
    base_dir = os.environ.get("XDG_CONFIG_HOME") or os.path.join(os.path.expanduser("~"), ".config")
    return os.path.join(base_dir, "yt-live-recorder", "config.json")


CONFIG_PATH = default_config_path()

DEFAULT_POLLING_INTERVAL = 10
DEFAULT_REQUEST_TIMEOUT = 10


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class Config:
    """Everything a tick needs, resolved once at startup."""
    api_key: str
    channel: str
    polling_interval: float = DEFAULT_POLLING_INTERVAL
    recorder_binary: str = DEFAULT_RECORDER
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    quiet: bool = False


def load_config(config_path):
    """Loads the configuration from config.json."""
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigError(f"{config_path} is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"{config_path} must contain a JSON object.")
    return data


def save_config(config_path, data):
    os.makedirs(os.path.dirname(config_path) or '.', exist_ok=True)
    with open(config_path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=4)


def build_config(file_values: Optional[dict] = None, **overrides) -> Config:
    """
    Merges config.json values with command-line overrides (which win when
    not None) into a Config. Raises ConfigError if credentials are missing
    or a numeric value is invalid.
    """
    values = file_values or {}

    def pick(key, file_key, default=None):
        if overrides.get(key) is not None:
            return overrides[key]
        return values.get(file_key, default)

    api_key = pick('api_key', 'API_KEY')
    channel = pick('channel', 'CHANNEL')
    if not api_key:
        raise ConfigError("An API key is required (--api-key or API_KEY in config.json).")
    if not channel:
        raise ConfigError("A channel is required (--channel or CHANNEL in config.json).")

    try:
        interval = float(pick('polling_interval', 'POLLING_INTERVAL_SECONDS', DEFAULT_POLLING_INTERVAL))
        timeout = float(pick('request_timeout', 'REQUEST_TIMEOUT_SECONDS', DEFAULT_REQUEST_TIMEOUT))
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid numeric setting: {e}") from e
    if not math.isfinite(interval) or not math.isfinite(timeout):
        raise ConfigError("The polling interval and request timeout must be finite numbers.")
    if interval <= 0:
        raise ConfigError("The polling interval must be positive.")
    if timeout <= 0:
        raise ConfigError("The request timeout must be positive.")

    return Config(
        api_key=str(api_key),
        channel=str(channel),
        polling_interval=interval,
        recorder_binary=str(pick('recorder_binary', 'RECORDER_BINARY', DEFAULT_RECORDER)),
        request_timeout=timeout,
        quiet=bool(overrides.get('quiet') or values.get('QUIET', False)),
    )
