"""Source RCON client: packet codec, sessions and configuration."""

from .config import RCONConfig, configure_logging, load_config_from_env

__all__ = ["RCONConfig", "configure_logging", "load_config_from_env"]
