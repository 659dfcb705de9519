"""Configuration loading for layered YAML settings."""

from workbranch.config.settings import (
    AwsProfile,
    CodeArtifactSettings,
    RdsSettings,
    Settings,
    get_config,
    get_config_loaded_sources,
    get_settings,
    reload_config,
)

__all__ = [
    "get_config",
    "reload_config",
    "get_config_loaded_sources",
    "get_settings",
    "Settings",
    "AwsProfile",
    "CodeArtifactSettings",
    "RdsSettings",
]
