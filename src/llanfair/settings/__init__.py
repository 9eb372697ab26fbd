"""Application settings management.

This package provides:
- PropertyRegistry: declarations of every known property
- BackingStore: protocol of a settings tier, with YAML and in-memory stores
- SettingsService: resolution of properties across the global and local tiers
"""

from llanfair.settings.errors import (
    DeclarationError,
    InvalidListenerError,
    InvalidValueError,
    NotInitializedError,
    SettingsError,
    StoreLoadError,
    UndeclaredPropertyError,
)
from llanfair.settings.events import ChangeEvent, ChangeListener, ChangeNotifier
from llanfair.settings.paths import SettingsPaths
from llanfair.settings.registry import (
    Category,
    PropertyDeclaration,
    PropertyRegistry,
    Setting,
    default_registry,
)
from llanfair.settings.service import SettingsService, Tier
from llanfair.settings.store import BackingStore, MemoryStore, PropertyStore, YamlStore

__all__ = [
    "BackingStore",
    "Category",
    "ChangeEvent",
    "ChangeListener",
    "ChangeNotifier",
    "DeclarationError",
    "InvalidListenerError",
    "InvalidValueError",
    "MemoryStore",
    "NotInitializedError",
    "PropertyDeclaration",
    "PropertyRegistry",
    "PropertyStore",
    "Setting",
    "SettingsError",
    "SettingsPaths",
    "SettingsService",
    "StoreLoadError",
    "Tier",
    "UndeclaredPropertyError",
    "YamlStore",
    "default_registry",
]
