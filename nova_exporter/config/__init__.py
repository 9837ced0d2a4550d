"""Configuration surface: environment adapter, settings, clouds.yaml."""
from .clouds import CloudConfig, load_cloud_config
from .settings import ExporterSettings, load_settings

__all__ = ["CloudConfig", "load_cloud_config", "ExporterSettings", "load_settings"]
