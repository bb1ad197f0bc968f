"""Configuration management for trendfeed."""

from .loader import Config, load_config, save_config
from .models import (
    CollectionConfig,
    ConfigModel,
    HatenaConfig,
    LiveConfig,
    LLMConfig,
    NoteConfig,
    PostgresConfig,
    QiitaConfig,
    QueryConfig,
    SourcesConfig,
    ZennConfig,
)

__all__ = [
    "Config",
    "ConfigModel",
    "CollectionConfig",
    "HatenaConfig",
    "LiveConfig",
    "LLMConfig",
    "NoteConfig",
    "PostgresConfig",
    "QiitaConfig",
    "QueryConfig",
    "SourcesConfig",
    "ZennConfig",
    "load_config",
    "save_config",
]
