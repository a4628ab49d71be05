from .preferences import Preferences, load_preferences
from .settings import DEFAULT_CONFIG_DIR, Settings, load_settings

__all__ = [
    "Preferences",
    "load_preferences",
    "Settings",
    "load_settings",
    "DEFAULT_CONFIG_DIR",
]
