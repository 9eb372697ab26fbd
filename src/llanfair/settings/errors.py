"""Exception classes for the settings tiers.

This module defines the hierarchy of errors raised while declaring,
loading, resolving and mutating settings. Initialization problems are
reported by ``SettingsService.initialize`` returning False; everything
else is a programmer error and is raised to the caller.
"""

from __future__ import annotations

from typing import Any


class SettingsError(Exception):
    """Base class for every settings error."""


class DeclarationError(SettingsError, ValueError):
    """Raised when a property declaration is malformed or conflicts
    with an earlier declaration of the same name.
    """

    def __init__(self, name: str, message: str) -> None:
        """Initialize the exception.

        Args:
            name: Name of the offending property
            message: Human-readable description of the problem
        """
        super().__init__(f"{name}: {message}")
        self.name: str = name


class StoreLoadError(SettingsError):
    """Raised when a backing location cannot be read or holds invalid data."""

    def __init__(self, location: str, message: str, original_error: Exception | None = None) -> None:
        """Initialize with load failure details.

        Args:
            location: Backing location that failed to load
            message: Description of the failure
            original_error: The original exception that was caught
        """
        super().__init__(f"{location}: {message}")
        self.location = location
        self.original_error = original_error


class InvalidValueError(SettingsError, TypeError):
    """Raised when a value does not validate against the declared type."""

    def __init__(self, name: str, value: Any, message: str) -> None:
        super().__init__(f"invalid value {value!r} for {name}: {message}")
        self.name = name
        self.value = value


class UndeclaredPropertyError(SettingsError, KeyError):
    """Raised when an identifier has no declaration."""

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"undeclared property: {self.name}"


class NotInitializedError(SettingsError, RuntimeError):
    """Raised when properties are accessed before a successful initialize()."""


class InvalidListenerError(SettingsError, ValueError):
    """Raised when a listener is None or not callable."""
