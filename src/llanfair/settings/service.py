# src/llanfair/settings/service.py
"""Settings service resolving properties across the global and local tiers."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from enum import Enum
from pathlib import Path
from typing import Any, Final

from llanfair.constants import GLOBAL_LABEL, LOCAL_LABEL
from llanfair.settings.errors import NotInitializedError, SettingsError
from llanfair.settings.events import ChangeListener, ChangeNotifier
from llanfair.settings.paths import SettingsPaths
from llanfair.settings.registry import (
    PropertyDeclaration,
    PropertyRegistry,
    Setting,
    default_registry,
)
from llanfair.settings.store import BackingStore, YamlStore

logger: Final = logging.getLogger(__name__)

StoreFactory = Callable[[Path], BackingStore]


class Tier(Enum):
    """Settings tier a value is read from or written to."""

    GLOBAL = GLOBAL_LABEL
    LOCAL = LOCAL_LABEL


def _define(store: BackingStore, declaration: PropertyDeclaration) -> None:
    store.define(declaration.category, declaration.value_type, declaration.name, declaration.default)


class SettingsService:
    """Two-tier application settings.

    The global tier holds every declared property and persists across
    sessions. The local tier belongs to the current run and starts empty;
    a property present there overrides its global value.

    initialize() must succeed before any property is read or written. All
    operations are serialized by a re-entrant lock, so change listeners may
    read and write settings while being notified.

    Examples:
        settings = SettingsService(SettingsPaths.from_base_dir(home))
        if not settings.initialize():
            raise SystemExit(1)

        settings.set(Setting.ACCURACY, "hundredth", Tier.LOCAL)
        settings.get(Setting.ACCURACY)  # "hundredth"
        settings.undefine(Setting.ACCURACY)
    """

    def __init__(
        self,
        paths: SettingsPaths | None = None,
        registry: PropertyRegistry | None = None,
        store_factory: StoreFactory = YamlStore,
        notify_on_undefine: bool = False,
    ):
        """Create the service; no store is touched until initialize().

        Args:
            paths: Directories of the two tiers (default: from environment)
            registry: Declared properties (default: application properties)
            store_factory: Builds the backing store of a tier from its directory
            notify_on_undefine: Notify listeners when undefine() changes the
                effective value of a property
        """
        self.paths = paths or SettingsPaths.from_env()
        self.registry = registry if registry is not None else default_registry()
        self._store_factory = store_factory
        self._notify_on_undefine = notify_on_undefine
        self._notifier = ChangeNotifier()
        self._lock = threading.RLock()
        self._global: BackingStore | None = None
        self._local: BackingStore | None = None

    @property
    def initialized(self) -> bool:
        return self._global is not None

    def initialize(self) -> bool:
        """Declare every property in the global tier and load it.

        The local tier is created but left empty until load_run().

        Returns:
            True if the settings are ready to use. On failure the error is
            logged and the settings stay unusable.
        """
        with self._lock:
            self._global = self._local = None
            try:
                global_store = self._store_factory(self.paths.global_dir)
                local_store = self._store_factory(self.paths.run_dir)
                for declaration in self.registry:
                    _define(global_store, declaration)
                global_store.load()
            except (SettingsError, OSError) as exc:
                logger.error("init failure: %s", exc)
                return False

            self._global, self._local = global_store, local_store
        logger.debug("Settings initialized from %s", self.paths.global_dir)
        return True

    def _tiers(self) -> tuple[BackingStore, BackingStore]:
        if self._global is None or self._local is None:
            raise NotInitializedError("settings have not been initialized")
        return self._global, self._local

    # ---- resolution ----
    def get(self, identifier: Setting | str) -> Any:
        """Return the effective value of a property.

        The local value wins when the property is overridden for this run,
        otherwise the global value is returned.

        Raises:
            UndeclaredPropertyError: If the identifier is not declared
            NotInitializedError: If initialize() has not succeeded
        """
        name = self.registry[identifier].name
        with self._lock:
            global_store, local_store = self._tiers()
            if local_store.has(name):
                return local_store.get(name)
            return global_store.get(name)

    def source(self, identifier: Setting | str) -> Tier:
        """Return the tier currently supplying the value of a property."""
        name = self.registry[identifier].name
        with self._lock:
            _, local_store = self._tiers()
            return Tier.LOCAL if local_store.has(name) else Tier.GLOBAL

    def snapshot(self) -> dict[str, Any]:
        """Return the effective value of every declared property."""
        with self._lock:
            return {name: self.get(name) for name in self.registry.names()}

    # ---- mutation ----
    def set(self, identifier: Setting | str, value: Any, scope: Tier = Tier.GLOBAL) -> None:
        """Change the value of a property in one tier and notify listeners.

        Setting a property locally overrides its global value for this run.

        Raises:
            UndeclaredPropertyError: If the identifier is not declared
            InvalidValueError: If the value does not match the declared type
            NotInitializedError: If initialize() has not succeeded
        """
        declaration = self.registry[identifier]
        with self._lock:
            global_store, local_store = self._tiers()
            # Checked up front so a rejected value never creates an override
            declaration.validate(value)
            if scope is Tier.LOCAL:
                _define(local_store, declaration)
                local_store.set(declaration.name, value)
            else:
                global_store.set(declaration.name, value)
            self._notifier.notify(self, declaration.name)

    def undefine(self, identifier: Setting | str) -> None:
        """Remove the local override of a property.

        The property resolves to its global value afterwards. Nothing
        happens if the property is not overridden. Listeners are only
        notified when the service was created with notify_on_undefine and
        the effective value actually changed.
        """
        name = self.registry[identifier].name
        with self._lock:
            global_store, local_store = self._tiers()
            changed = False
            if self._notify_on_undefine and local_store.has(name):
                changed = local_store.get(name) != global_store.get(name)
            local_store.undefine(name)
            if changed:
                self._notifier.notify(self, name)

    # ---- listeners ----
    def add_change_listener(self, listener: ChangeListener) -> None:
        """Register a listener called whenever a property value is set.

        The ChangeEvent passed to the listener names the changed property.

        Raises:
            InvalidListenerError: If listener is None or not callable
        """
        with self._lock:
            self._notifier.add_listener(listener)

    def remove_change_listener(self, listener: ChangeListener) -> None:
        """Unregister a listener."""
        with self._lock:
            self._notifier.remove_listener(listener)

    # ---- persistence ----
    def get_unsaved(self) -> list[str]:
        """Return the "tier/category" labels of changes not yet saved.

        Global categories come first, then local ones.
        """
        with self._lock:
            global_store, local_store = self._tiers()
            labels = [f"{GLOBAL_LABEL}/{c}" for c in global_store.get_unsaved_categories()]
            labels.extend(f"{LOCAL_LABEL}/{c}" for c in local_store.get_unsaved_categories())
            return labels

    def save(self) -> None:
        """Write both tiers to their backing locations, global first."""
        with self._lock:
            global_store, local_store = self._tiers()
            global_store.save()
            local_store.save()

    def load_run(self, run_dir: Path | None = None) -> None:
        """Load the local overrides of a run.

        Args:
            run_dir: Directory of the run to switch to (default: keep the
                current run directory)

        Raises:
            StoreLoadError: If the run settings cannot be read or hold an
                invalid value; the current local tier is then left as it was
        """
        with self._lock:
            self._tiers()
            # Loaded into a fresh store, swapped in only once fully valid
            local_store = self._store_factory(
                run_dir if run_dir is not None else self.paths.run_dir
            )
            local_store.load()

            for name in local_store.stored_names():
                if name not in self.registry:
                    logger.warning("Ignoring unknown property %r in run settings", name)
                    continue
                declaration = self.registry[name]
                if name not in local_store.stored_names(declaration.category):
                    logger.warning(
                        "Ignoring %r stored outside the %s category", name, declaration.category
                    )
                    continue
                _define(local_store, declaration)

            self._local = local_store
            if run_dir is not None:
                self.paths = SettingsPaths(global_dir=self.paths.global_dir, run_dir=run_dir)
        logger.debug("Run settings loaded from %s", self.paths.run_dir)
