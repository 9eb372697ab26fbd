from pathlib import Path

import pytest
import yaml

from llanfair.settings import (
    BackingStore,
    Category,
    DeclarationError,
    InvalidValueError,
    MemoryStore,
    StoreLoadError,
    UndeclaredPropertyError,
    YamlStore,
)


def _define_defaults(store: BackingStore) -> None:
    store.define(Category.SETTINGS, int, "P", 10)
    store.define(Category.THEME, str, "color", "#000000")


class TestPropertyStore:
    def test_memory_store_is_backing_store(self) -> None:
        assert isinstance(MemoryStore(), BackingStore)
        assert isinstance(YamlStore(Path("unused")), BackingStore)

    def test_define_uses_default(self) -> None:
        store = MemoryStore()
        assert not store.has("P")
        _define_defaults(store)
        assert store.has("P")
        assert store.get("P") == 10

    def test_define_is_idempotent(self) -> None:
        store = MemoryStore()
        _define_defaults(store)
        store.set("P", 42)
        store.define(Category.SETTINGS, int, "P", 10)
        assert store.get("P") == 42

    def test_conflicting_define(self) -> None:
        store = MemoryStore()
        _define_defaults(store)
        with pytest.raises(DeclarationError):
            store.define(Category.SETTINGS, str, "P", "10")

    def test_define_bad_default(self) -> None:
        with pytest.raises(DeclarationError):
            MemoryStore().define(Category.SETTINGS, int, "P", "ten")

    def test_get_and_set_undefined(self) -> None:
        store = MemoryStore()
        with pytest.raises(UndeclaredPropertyError):
            store.get("P")
        with pytest.raises(UndeclaredPropertyError):
            store.set("P", 1)

    def test_set_rejects_wrong_type(self) -> None:
        store = MemoryStore()
        _define_defaults(store)
        with pytest.raises(InvalidValueError):
            store.set("P", "42")
        assert store.get("P") == 10
        assert store.get_unsaved_categories() == []

    def test_unsaved_categories_in_category_order(self) -> None:
        store = MemoryStore()
        _define_defaults(store)
        assert store.get_unsaved_categories() == []
        store.set("color", "#ffffff")
        store.set("P", 1)
        assert store.get_unsaved_categories() == [Category.SETTINGS, Category.THEME]

    def test_save_clears_unsaved(self) -> None:
        store = MemoryStore()
        _define_defaults(store)
        store.set("P", 1)
        store.save()
        assert store.get_unsaved_categories() == []
        assert store.persisted == {
            Category.SETTINGS: {"P": 1},
            Category.THEME: {"color": "#000000"},
        }

    def test_undefine(self) -> None:
        store = MemoryStore()
        _define_defaults(store)
        store.undefine("P")
        assert not store.has("P")
        assert store.get_unsaved_categories() == [Category.SETTINGS]

    def test_undefine_unknown_is_noop(self) -> None:
        store = MemoryStore()
        store.undefine("P")
        assert store.get_unsaved_categories() == []

    def test_loaded_value_waits_for_definition(self) -> None:
        store = MemoryStore(persisted={Category.SETTINGS: {"P": 7, "other": "x"}})
        store.load()
        assert not store.has("P")
        assert store.stored_names() == ["P", "other"]
        assert store.stored_names(Category.THEME) == []

        store.define(Category.SETTINGS, int, "P", 10)
        assert store.get("P") == 7
        assert store.stored_names() == ["other"]

    def test_load_replaces_defined_values(self) -> None:
        store = MemoryStore(persisted={Category.SETTINGS: {"P": "12"}})
        _define_defaults(store)
        store.set("P", 1)
        store.load()
        assert store.get("P") == 12
        assert store.get("color") == "#000000"
        assert store.get_unsaved_categories() == []

    def test_load_invalid_value(self) -> None:
        store = MemoryStore(persisted={Category.SETTINGS: {"P": "many"}})
        _define_defaults(store)
        with pytest.raises(StoreLoadError):
            store.load()
        assert store.get("P") == 10

    def test_misplaced_entry_discarded_on_define(self) -> None:
        store = MemoryStore(persisted={Category.THEME: {"P": 3}})
        store.load()
        store.define(Category.SETTINGS, int, "P", 10)
        assert store.get("P") == 10
        assert store.stored_names() == []

        store.set("P", 4)
        store.save()
        assert store.persisted == {Category.SETTINGS: {"P": 4}, Category.THEME: {}}

    def test_misplaced_copy_of_defined_name_not_saved(self) -> None:
        store = MemoryStore(persisted={Category.THEME: {"P": 3}})
        _define_defaults(store)
        store.load()
        assert store.get("P") == 10

        store.save()
        assert store.persisted == {
            Category.SETTINGS: {"P": 10},
            Category.THEME: {"color": "#000000"},
        }

    def test_save_keeps_undefined_entries(self) -> None:
        store = MemoryStore(persisted={Category.THEME: {"legacy": 3}})
        store.load()
        store.save()
        assert store.persisted[Category.THEME] == {"legacy": 3}
        assert store.persisted[Category.SETTINGS] == {}


class TestYamlStore:
    def test_missing_files_keep_defaults(self, tmp_path: Path) -> None:
        store = YamlStore(tmp_path / "absent")
        _define_defaults(store)
        store.load()
        assert store.get("P") == 10

    def test_save_writes_one_file_per_category(self, tmp_path: Path) -> None:
        store = YamlStore(tmp_path / "home")
        _define_defaults(store)
        store.set("P", 42)
        store.save()

        assert yaml.safe_load((tmp_path / "home" / "settings.yaml").read_text()) == {"P": 42}
        assert yaml.safe_load((tmp_path / "home" / "theme.yaml").read_text()) == {
            "color": "#000000"
        }

    def test_save_then_load(self, tmp_path: Path) -> None:
        store = YamlStore(tmp_path)
        _define_defaults(store)
        store.set("P", 42)
        store.set("color", "#123456")
        store.save()

        reloaded = YamlStore(tmp_path)
        _define_defaults(reloaded)
        reloaded.load()
        assert reloaded.get("P") == 42
        assert reloaded.get("color") == "#123456"

    def test_empty_file(self, tmp_path: Path) -> None:
        (tmp_path / "settings.yaml").write_text("")
        store = YamlStore(tmp_path)
        _define_defaults(store)
        store.load()
        assert store.get("P") == 10

    def test_malformed_yaml(self, tmp_path: Path) -> None:
        (tmp_path / "settings.yaml").write_text("P: [1, 2\n")
        store = YamlStore(tmp_path)
        _define_defaults(store)
        with pytest.raises(StoreLoadError):
            store.load()

    def test_undecodable_file(self, tmp_path: Path) -> None:
        (tmp_path / "settings.yaml").write_bytes(b"P: \xff\xfe\n")
        store = YamlStore(tmp_path)
        _define_defaults(store)
        with pytest.raises(StoreLoadError):
            store.load()

    def test_not_a_mapping(self, tmp_path: Path) -> None:
        (tmp_path / "theme.yaml").write_text("- a\n- b\n")
        store = YamlStore(tmp_path)
        with pytest.raises(StoreLoadError):
            store.load()

    def test_invalid_stored_value(self, tmp_path: Path) -> None:
        (tmp_path / "settings.yaml").write_text("P: lots\n")
        store = YamlStore(tmp_path)
        _define_defaults(store)
        with pytest.raises(StoreLoadError):
            store.load()
