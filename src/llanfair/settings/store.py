# src/llanfair/settings/store.py
"""Backing stores holding the values of one settings tier.

A store keeps category-partitioned property values in memory and knows how
to read and write them at its backing location. The settings service only
relies on the BackingStore protocol; PropertyStore provides the shared
in-memory behaviour, and its subclasses decide where the data lives.
"""

from __future__ import annotations

import copy
import logging
from pathlib import Path
from typing import Any, Final, Protocol, runtime_checkable

import yaml

from llanfair.settings.errors import (
    DeclarationError,
    InvalidValueError,
    StoreLoadError,
    UndeclaredPropertyError,
)
from llanfair.settings.registry import Category, PropertyDeclaration
from llanfair.utils.file import ensure_directory_exists

logger: Final = logging.getLogger(__name__)

# Persisted form: category -> {property name -> plain value}
StoredData = dict[Category, dict[str, Any]]


@runtime_checkable
class BackingStore(Protocol):
    """Protocol defining the interface of a settings tier.

    Implementations hold declared properties and their values, and persist
    them to a backing location (distinct for each tier). Failures to read or
    write the backing location must be raised as SettingsError (typically
    StoreLoadError); the settings service also tolerates OSError.
    """

    def define(self, category: Category, value_type: Any, name: str, default: Any) -> None:
        """Declare a property; idempotent for an identical declaration."""
        ...

    def load(self) -> None:
        """Populate values from the backing location."""
        ...

    def save(self) -> None:
        """Persist every value to the backing location."""
        ...

    def has(self, name: str) -> bool:
        """Check whether the property is defined in this store."""
        ...

    def get(self, name: str) -> Any:
        """Return the value of a defined property."""
        ...

    def set(self, name: str, value: Any) -> None:
        """Change the value of a defined property."""
        ...

    def undefine(self, name: str) -> None:
        """Remove a property and its value."""
        ...

    def get_unsaved_categories(self) -> list[Category]:
        """Return the categories holding changes not yet saved."""
        ...

    def stored_names(self, category: Category | None = None) -> list[str]:
        """Return names present at the backing location but not defined."""
        ...


class PropertyStore:
    """In-memory tier shared by every store implementation.

    Subclasses implement _read() and _write() to move StoredData to and
    from their backing location.
    """

    def __init__(self, location: str) -> None:
        self.location = location
        self._declarations: dict[str, PropertyDeclaration] = {}
        self._values: dict[str, Any] = {}
        # Loaded entries whose property is not defined (yet)
        self._stored: dict[str, tuple[Category, Any]] = {}
        self._unsaved: set[Category] = set()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.location!r})"

    # ---- declarations ----
    def define(self, category: Category, value_type: Any, name: str, default: Any) -> None:
        """Declare a property in this store.

        A freshly defined property takes its loaded value when one is
        waiting in the store, else its default. A loaded value waiting
        under another category is discarded. Defining it again with the
        same category, type and default is a no-op.

        Raises:
            DeclarationError: If the default is invalid or the name is
                already defined differently
            StoreLoadError: If the waiting loaded value is invalid
        """
        existing = self._declarations.get(name)
        if existing is not None:
            if not existing.matches(category, value_type, default):
                raise DeclarationError(name, f"conflicting redefinition in {self.location}")
            return

        declaration = PropertyDeclaration(name, category, value_type, default)
        try:
            value = declaration.validate(default)
        except InvalidValueError as err:
            raise DeclarationError(name, f"bad default: {err}") from err

        stored = self._stored.pop(name, None)
        if stored is not None:
            if stored[0] is category:
                value = self._parse(declaration, stored[1])
            else:
                logger.warning(
                    "Discarding %r stored under %s in %s, it belongs to %s",
                    name,
                    stored[0],
                    self.location,
                    category,
                )

        self._declarations[name] = declaration
        self._values[name] = value

    def has(self, name: str) -> bool:
        return name in self._declarations

    def undefine(self, name: str) -> None:
        """Remove a property and its value; unknown names are ignored."""
        self._stored.pop(name, None)
        declaration = self._declarations.pop(name, None)
        if declaration is None:
            return
        del self._values[name]
        self._unsaved.add(declaration.category)

    def stored_names(self, category: Category | None = None) -> list[str]:
        """Return loaded names whose property is not defined, optionally
        restricted to those stored under category.
        """
        return [
            name
            for name, (stored_category, _) in self._stored.items()
            if category is None or stored_category is category
        ]

    # ---- values ----
    def get(self, name: str) -> Any:
        if name not in self._values:
            raise UndeclaredPropertyError(name)
        return self._values[name]

    def set(self, name: str, value: Any) -> None:
        """Change the value of a defined property.

        Raises:
            UndeclaredPropertyError: If the property is not defined here
            InvalidValueError: If the value does not match the declared type
        """
        declaration = self._declarations.get(name)
        if declaration is None:
            raise UndeclaredPropertyError(name)
        self._values[name] = declaration.validate(value)
        self._unsaved.add(declaration.category)

    def get_unsaved_categories(self) -> list[Category]:
        return [category for category in Category if category in self._unsaved]

    # ---- persistence ----
    def load(self) -> None:
        """Read values from the backing location.

        Values of defined properties are replaced by their stored value;
        other stored entries wait until their property is defined.

        Raises:
            StoreLoadError: If the location cannot be read or a stored
                value is invalid
        """
        data = self._read()
        values: dict[str, Any] = {}
        stored: dict[str, tuple[Category, Any]] = {}
        for category, entries in data.items():
            for name, raw in entries.items():
                declaration = self._declarations.get(name)
                if declaration is not None and declaration.category is category:
                    values[name] = self._parse(declaration, raw)
                else:
                    stored[name] = (category, raw)

        self._values.update(values)
        self._stored = stored
        self._unsaved.clear()
        logger.debug(
            "Loaded %d value(s) from %s (%d undefined)", len(values), self.location, len(stored)
        )

    def save(self) -> None:
        """Write every category to the backing location."""
        data: StoredData = {category: {} for category in Category}
        for name, declaration in self._declarations.items():
            data[declaration.category][name] = declaration.dump(self._values[name])
        for name, (category, raw) in self._stored.items():
            if name not in self._declarations:
                data[category][name] = raw

        self._write(data)
        self._unsaved.clear()
        logger.debug("Saved %d value(s) to %s", len(self._declarations), self.location)

    def _parse(self, declaration: PropertyDeclaration, raw: Any) -> Any:
        try:
            return declaration.parse(raw)
        except InvalidValueError as err:
            raise StoreLoadError(self.location, str(err), err) from err

    def _read(self) -> StoredData:
        raise NotImplementedError

    def _write(self, data: StoredData) -> None:
        raise NotImplementedError


class MemoryStore(PropertyStore):
    """Store persisting into a dictionary held in memory.

    Useful for tests and dry runs; ``persisted`` shows what was last saved.
    """

    def __init__(self, location: str | Path = "memory", persisted: StoredData | None = None) -> None:
        super().__init__(str(location))
        self.persisted: StoredData = persisted or {}
        self.save_calls = 0

    def _read(self) -> StoredData:
        return copy.deepcopy(self.persisted)

    def _write(self, data: StoredData) -> None:
        self.persisted = copy.deepcopy(data)
        self.save_calls += 1


class YamlStore(PropertyStore):
    """Store persisting one YAML file per category in a directory.

    ``<directory>/settings.yaml`` holds the SETTINGS category and
    ``<directory>/theme.yaml`` the THEME category. A missing file simply
    means that nothing is stored for its category.
    """

    def __init__(self, directory: Path) -> None:
        super().__init__(str(directory))
        self.directory = directory

    def path_for(self, category: Category) -> Path:
        return self.directory / f"{category.value}.yaml"

    def _read(self) -> StoredData:
        data: StoredData = {}
        for category in Category:
            path = self.path_for(category)
            if not path.exists():
                continue

            try:
                content = yaml.safe_load(path.read_text(encoding="utf-8"))
            except (OSError, UnicodeDecodeError, yaml.YAMLError) as exc:
                raise StoreLoadError(str(path), f"unable to read YAML: {exc}", exc) from exc

            if content is None:
                content = {}
            if not isinstance(content, dict):
                raise StoreLoadError(str(path), "expected a mapping of property names to values")
            data[category] = {str(name): value for name, value in content.items()}
        return data

    def _write(self, data: StoredData) -> None:
        ensure_directory_exists(self.directory)
        for category, entries in data.items():
            self.path_for(category).write_text(
                yaml.safe_dump(entries, sort_keys=False), encoding="utf-8"
            )
