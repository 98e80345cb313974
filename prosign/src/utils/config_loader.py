import os
from pathlib import Path
import toml
from typing import Dict, Any, List, Optional

from prosign.src.core.exceptions import ConfigError

DEFAULT_FETCH_TIMEOUT = 10.0


def get_config_path() -> Path:
    """Return the path to the configuration file."""
    env_config = os.environ.get("PROSIGN_CONFIG")
    if env_config:
        return Path(env_config)
    return Path.home() / ".prosign" / "config.toml"


def load_config() -> Dict[str, Any]:
    """Load configuration from TOML file."""
    config_path = get_config_path()
    if not config_path.exists():
        return {}

    try:
        return toml.load(config_path)
    except (OSError, toml.TomlDecodeError) as e:
        raise ConfigError(f"Failed to load config: {e}") from e


def get_output_dir() -> Path:
    """Get the durable output directory from environment or config."""
    env_output_dir = os.environ.get("PROSIGN_OUTPUT_DIR")
    if env_output_dir:
        return Path(env_output_dir).expanduser()

    output_config = load_config().get("output", {})
    directory = output_config.get("directory")
    if directory:
        return Path(directory).expanduser()

    # Default to ~/Documents/prosign if not specified
    return Path.home() / "Documents" / "prosign"


def get_zsign_path() -> str:
    """Get the zsign executable name or path."""
    env_zsign = os.environ.get("PROSIGN_ZSIGN")
    if env_zsign:
        return env_zsign

    signing_config = load_config().get("signing", {})
    return signing_config.get("zsign_path", "zsign")


def get_p12_password() -> Optional[str]:
    """Get the key container password, if one is configured."""
    env_password = os.environ.get("PROSIGN_P12_PASSWORD")
    if env_password is not None:
        return env_password

    signing_config = load_config().get("signing", {})
    return signing_config.get("p12_password")


def get_fetch_timeout() -> float:
    """Get the per-request timeout for source fetching."""
    env_timeout = os.environ.get("PROSIGN_FETCH_TIMEOUT")
    raw = env_timeout
    if raw is None:
        raw = load_config().get("sources", {}).get("timeout")
    if raw is None:
        return DEFAULT_FETCH_TIMEOUT

    try:
        return float(raw)
    except (TypeError, ValueError):
        raise ConfigError(f"Invalid fetch timeout: {raw!r}")


def get_source_urls() -> List[str]:
    """Get the default list of source URLs from config."""
    urls = load_config().get("sources", {}).get("urls", [])
    if not isinstance(urls, list):
        raise ConfigError(
            f"sources.urls must be a list in {get_config_path()}"
        )
    return [str(url) for url in urls]
