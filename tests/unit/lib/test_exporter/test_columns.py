"""Tests for the export column registry."""

from constituency_api.lib.exporter.columns import (
    COLUMN_REGISTRY_VERSION,
    DEFAULT_COLUMNS,
    EXPORT_COLUMNS,
    get_column,
    resolve_columns,
)


class TestRegistry:
    """Tests for the registry contents."""

    def test_version(self) -> None:
        assert COLUMN_REGISTRY_VERSION == 1

    def test_registry_order(self) -> None:
        assert DEFAULT_COLUMNS[0] == "epic_number"
        assert DEFAULT_COLUMNS[-1] == "is_voted_2024"
        assert len(DEFAULT_COLUMNS) == 17

    def test_keys_and_aliases_are_unique(self) -> None:
        keys = [c.key for c in EXPORT_COLUMNS]
        aliases = [c.alias for c in EXPORT_COLUMNS]
        assert len(set(keys)) == len(keys)
        assert len(set(aliases)) == len(aliases)

    def test_lookup_by_alias(self) -> None:
        assert get_column("isVoted2024").key == "is_voted_2024"
        assert get_column("epic_number").label == "EPIC Number"


class TestColumnFormat:
    """Tests for ExportColumn.format."""

    def test_flag_renders_yes_no(self) -> None:
        column = get_column("is_voted_2024")
        assert column.format(True) == "Yes"
        assert column.format(False) == "No"
        assert column.format(None) == "No"

    def test_none_renders_empty(self) -> None:
        assert get_column("address").format(None) == ""

    def test_value_renders_as_text(self) -> None:
        assert get_column("age").format(42) == "42"


class TestResolveColumns:
    """Tests for resolve_columns."""

    def test_empty_selection_means_all(self) -> None:
        assert [c.key for c in resolve_columns([])] == DEFAULT_COLUMNS
        assert [c.key for c in resolve_columns(None)] == DEFAULT_COLUMNS

    def test_explicit_subset_keeps_order(self) -> None:
        result = resolve_columns(["age", "full_name", "epic_number"])
        assert [c.key for c in result] == ["age", "full_name", "epic_number"]

    def test_unknown_keys_dropped(self) -> None:
        result = resolve_columns(["full_name", "password_hash", "age"])
        assert [c.key for c in result] == ["full_name", "age"]

    def test_only_unknown_keys_falls_back_to_all(self) -> None:
        assert [c.key for c in resolve_columns(["nope", "also_nope"])] == DEFAULT_COLUMNS

    def test_duplicates_keep_first_position(self) -> None:
        result = resolve_columns(["gender", "age", "gender", "fullName", "full_name"])
        assert [c.key for c in result] == ["gender", "age", "full_name"]
