"""
RanchHand — Configuration

- system_loader → static settings (settings.yaml + environment)
- profiles      → per-task model defaults with deep merge
"""

from .system_loader import get_system_config, get_backend_config
from .profiles import DEFAULT_PROFILES, Profiles, ProfileStore, deep_merge


__all__ = [
    "get_system_config",
    "get_backend_config",
    "DEFAULT_PROFILES",
    "Profiles",
    "ProfileStore",
    "deep_merge",
]
