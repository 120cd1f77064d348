# templating/config.py
"""
Configuration for the rendering environment.
Provides centralized configuration for time zone, undefined handling and caching.
"""

import os
from dataclasses import dataclass

import pytz


def _env_bool(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class RenderConfig:
    """Configuration for template environments and date helpers."""
    
    # Zone used for "now" arithmetic and date helper output
    timezone: str = "UTC"
    
    # Jinja2 behaviour
    strict_undefined: bool = False
    autoescape: bool = False
    cache_size: int = 400
    source_name: str = "unknown"
    
    # Logging
    log_level: str = "INFO"
    
    def __post_init__(self):
        try:
            pytz.timezone(self.timezone)
        except pytz.exceptions.UnknownTimeZoneError:
            raise ValueError(f"Unknown timezone: {self.timezone}")
        if self.cache_size < 0:
            raise ValueError(f"cache_size must be >= 0, got {self.cache_size}")
    
    @property
    def tzinfo(self):
        """pytz zone object for the configured timezone."""
        return pytz.timezone(self.timezone)
    
    @classmethod
    def from_environment(cls) -> "RenderConfig":
        """Create configuration from environment variables."""
        return cls(
            timezone=os.environ.get("STENCIL_TIMEZONE", "UTC"),
            strict_undefined=_env_bool("STENCIL_STRICT_UNDEFINED", False),
            autoescape=_env_bool("STENCIL_AUTOESCAPE", False),
            cache_size=int(os.environ.get("STENCIL_CACHE_SIZE", "400")),
            source_name=os.environ.get("STENCIL_SOURCE_NAME", "unknown"),
            log_level=os.environ.get("STENCIL_LOG_LEVEL", "INFO"),
        )
    
    @classmethod
    def from_dict(cls, config_dict: dict) -> "RenderConfig":
        """Create configuration from dictionary."""
        return cls(
            timezone=config_dict.get("timezone", "UTC"),
            strict_undefined=config_dict.get("strict_undefined", False),
            autoescape=config_dict.get("autoescape", False),
            cache_size=config_dict.get("cache_size", 400),
            source_name=config_dict.get("source_name", "unknown"),
            log_level=config_dict.get("log_level", "INFO"),
        )
