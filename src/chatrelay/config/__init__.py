from .manager import ConfigManager, Settings
from .providers import PROVIDER_CONFIGS, ProviderConfig, ProviderType

__all__ = [
    "ConfigManager",
    "Settings",
    "ProviderType",
    "ProviderConfig",
    "PROVIDER_CONFIGS",
]
