"""Declarations of every known property.

Each property is declared exactly once with its category, value type and
default. The registry is plain data: identifiers are looked up by name and
the declarations are handed to the backing stores by the settings service.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from enum import Enum
from functools import cached_property
from typing import Annotated, Any, Final, Literal

from pydantic import Field, TypeAdapter, ValidationError

from llanfair.settings.errors import DeclarationError, InvalidValueError, UndeclaredPropertyError

Color = Annotated[str, Field(pattern=r"^#[0-9a-fA-F]{6}$")]
LocaleTag = Annotated[str, Field(pattern=r"^[a-z]{2}(_[A-Z]{2})?$")]


class Category(Enum):
    """Grouping used to partition properties on disk."""

    SETTINGS = "settings"
    THEME = "theme"

    def __str__(self) -> str:
        return self.value


class Setting(Enum):
    """Identifiers of the application's properties."""

    LOCALE = "locale"
    ALWAYS_ON_TOP = "always_on_top"
    COMPARE_METHOD = "compare_method"
    ACCURACY = "accuracy"
    WARN_ON_RESET = "warn_on_reset"
    HISTORY_ROWS = "history_rows"
    BACKGROUND_COLOR = "background_color"
    FOREGROUND_COLOR = "foreground_color"
    TIME_COLOR = "time_color"
    AHEAD_COLOR = "ahead_color"
    BEHIND_COLOR = "behind_color"
    FONT_SIZE = "font_size"

    def __str__(self) -> str:
        return self.value


def property_name(identifier: Setting | str) -> str:
    """Normalize an identifier to its string name."""
    if isinstance(identifier, Enum):
        return str(identifier.value)
    return identifier


@dataclass(frozen=True)
class PropertyDeclaration:
    """Category, type and default of a single property."""

    name: str
    category: Category
    value_type: Any
    default: Any

    @cached_property
    def adapter(self) -> TypeAdapter[Any]:
        return TypeAdapter(self.value_type)

    def validate(self, value: Any) -> Any:
        """Validate a value set from code.

        Validation is strict: no coercion between types takes place.

        Raises:
            InvalidValueError: If the value does not match the declared type
        """
        try:
            return self.adapter.validate_python(value, strict=True)
        except ValidationError as err:
            raise InvalidValueError(self.name, value, _first_error(err)) from err

    def parse(self, raw: Any) -> Any:
        """Validate a value read from text (YAML, command line).

        Unlike validate(), compatible values are coerced, so "12" is
        accepted for an integer property.
        """
        try:
            return self.adapter.validate_python(raw)
        except ValidationError as err:
            raise InvalidValueError(self.name, raw, _first_error(err)) from err

    def dump(self, value: Any) -> Any:
        """Convert a value to plain data for serialization."""
        return self.adapter.dump_python(value, mode="json")

    def matches(self, category: Category, value_type: Any, default: Any) -> bool:
        return (
            self.category == category
            and self.value_type == value_type
            and self.default == default
        )


def _first_error(err: ValidationError) -> str:
    errors = err.errors()
    return errors[0]["msg"] if errors else str(err)


class PropertyRegistry:
    """Ordered mapping from property name to declaration."""

    def __init__(self, declarations: Iterable[PropertyDeclaration] = ()) -> None:
        self._declarations: dict[str, PropertyDeclaration] = {}
        for declaration in declarations:
            self.declare(declaration)

    def declare(self, declaration: PropertyDeclaration) -> None:
        """Add a declaration.

        Declaring an identical declaration twice is a no-op.

        Raises:
            DeclarationError: If the default does not fit the type, or the
                name is already declared differently
        """
        try:
            declaration.validate(declaration.default)
        except InvalidValueError as err:
            raise DeclarationError(declaration.name, f"bad default: {err}") from err

        existing = self._declarations.get(declaration.name)
        if existing is not None:
            if existing != declaration:
                raise DeclarationError(declaration.name, "conflicting redefinition")
            return
        self._declarations[declaration.name] = declaration

    def __getitem__(self, identifier: Setting | str) -> PropertyDeclaration:
        name = property_name(identifier)
        try:
            return self._declarations[name]
        except KeyError:
            raise UndeclaredPropertyError(name) from None

    def __contains__(self, identifier: object) -> bool:
        if not isinstance(identifier, (Setting, str)):
            return False
        return property_name(identifier) in self._declarations

    def __iter__(self) -> Iterator[PropertyDeclaration]:
        return iter(self._declarations.values())

    def __len__(self) -> int:
        return len(self._declarations)

    def names(self) -> list[str]:
        return list(self._declarations)


DEFAULT_DECLARATIONS: Final[tuple[PropertyDeclaration, ...]] = (
    # Behaviour
    PropertyDeclaration("locale", Category.SETTINGS, LocaleTag, "en"),
    PropertyDeclaration("always_on_top", Category.SETTINGS, bool, False),
    PropertyDeclaration(
        "compare_method",
        Category.SETTINGS,
        Literal["best_overall_run", "sum_of_best_segments"],
        "best_overall_run",
    ),
    PropertyDeclaration(
        "accuracy", Category.SETTINGS, Literal["seconds", "tenth", "hundredth"], "tenth"
    ),
    PropertyDeclaration("warn_on_reset", Category.SETTINGS, bool, True),
    PropertyDeclaration("history_rows", Category.SETTINGS, Annotated[int, Field(ge=0)], 8),
    # Appearance
    PropertyDeclaration("background_color", Category.THEME, Color, "#000000"),
    PropertyDeclaration("foreground_color", Category.THEME, Color, "#c0c0c0"),
    PropertyDeclaration("time_color", Category.THEME, Color, "#ffffff"),
    PropertyDeclaration("ahead_color", Category.THEME, Color, "#00cc36"),
    PropertyDeclaration("behind_color", Category.THEME, Color, "#cc1200"),
    PropertyDeclaration("font_size", Category.THEME, Annotated[int, Field(gt=0)], 12),
)


def default_registry() -> PropertyRegistry:
    """Build the registry holding every application property."""
    return PropertyRegistry(DEFAULT_DECLARATIONS)
