from .config import Config, LazyConfig, MonitoringConfig, ResolverConfig, find_config_file, settings

__all__ = ["Config", "LazyConfig", "MonitoringConfig", "ResolverConfig", "find_config_file", "settings"]
