from settings.config import (
    CONFIG_FILENAME,
    ConfigError,
    ProjectConfig,
    RunConfig,
    load_config,
)

__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "ProjectConfig",
    "RunConfig",
    "load_config",
]
