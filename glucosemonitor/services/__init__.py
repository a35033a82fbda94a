# Business Logic Services
from glucosemonitor.services.cob_settings import (
    ConfigStore,
    config_store,
    default_engine_config,
    get_config_store,
)

__all__ = [
    "ConfigStore",
    "config_store",
    "default_engine_config",
    "get_config_store",
]
