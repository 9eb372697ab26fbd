from pathlib import Path

import pytest

from llanfair.settings import (
    Category,
    MemoryStore,
    PropertyDeclaration,
    PropertyRegistry,
    SettingsPaths,
    SettingsService,
)

MEMORY_PATHS = SettingsPaths.from_base_dir(Path("/memory/home"))


@pytest.fixture
def registry() -> PropertyRegistry:
    return PropertyRegistry(
        [
            PropertyDeclaration("P", Category.SETTINGS, int, 10),
            PropertyDeclaration("name", Category.SETTINGS, str, "anonymous"),
            PropertyDeclaration("color", Category.THEME, str, "#000000"),
        ]
    )


@pytest.fixture
def stores() -> dict[Path, MemoryStore]:
    """Memory stores created by the service, keyed by location."""
    return {}


@pytest.fixture
def make_service(registry: PropertyRegistry, stores: dict[Path, MemoryStore]):
    def factory(location: Path) -> MemoryStore:
        store = MemoryStore(location, stores[location].persisted if location in stores else None)
        stores[location] = store
        return store

    def make(notify_on_undefine: bool = False) -> SettingsService:
        return SettingsService(
            MEMORY_PATHS,
            registry=registry,
            store_factory=factory,
            notify_on_undefine=notify_on_undefine,
        )

    return make


@pytest.fixture
def service(make_service) -> SettingsService:
    settings = make_service()
    assert settings.initialize()
    return settings
