"""Configuration adapters."""

from gtfs_departures.adapters.config.app_config import AppConfig
from gtfs_departures.adapters.config.query_configuration_loader import QueryConfigurationLoader

__all__ = ["AppConfig", "QueryConfigurationLoader"]
