"""
Configuration defaults, loading and validation for chartpilot.
"""
from .defaults import DefaultConfig, get_default_config
from .loader import ConfigLoader, load_config

__all__ = ["ConfigLoader", "DefaultConfig", "get_default_config", "load_config"]
