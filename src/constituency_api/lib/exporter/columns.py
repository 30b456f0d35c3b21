"""Registry of exportable voter columns.

The registry is versioned and shared with clients (``GET /exports/columns``)
so that an empty column selection means "every registry column, in
registry order".
"""

from dataclasses import dataclass
from typing import Any

COLUMN_REGISTRY_VERSION = 1


@dataclass(frozen=True)
class ExportColumn:
    """A column that can appear in an export.

    Attributes:
        key: Stable snake_case identifier.
        label: Human-readable header.
        alias: camelCase key accepted from older clients.
        is_flag: Render as Yes/No instead of the raw value.
    """

    key: str
    label: str
    alias: str
    is_flag: bool = False

    def format(self, value: Any) -> str:
        """Render a raw database value as output text."""
        if self.is_flag:
            return "Yes" if value else "No"
        if value is None:
            return ""
        return str(value)


EXPORT_COLUMNS: tuple[ExportColumn, ...] = (
    ExportColumn("epic_number", "EPIC Number", "epicNumber"),
    ExportColumn("full_name", "Full Name", "fullName"),
    ExportColumn("relation_type", "Relation Type", "relationType"),
    ExportColumn("relation_name", "Relation Name", "relationName"),
    ExportColumn("age", "Age", "age"),
    ExportColumn("gender", "Gender", "gender"),
    ExportColumn("mobile_number", "Mobile Number", "mobileNumber"),
    ExportColumn("alternate_mobile_number", "Alternate Mobile Number", "alternateMobileNumber"),
    ExportColumn("house_number", "House Number", "houseNumber"),
    ExportColumn("address", "Address", "address"),
    ExportColumn("pincode", "Pincode", "pincode"),
    ExportColumn("ac_no", "AC No", "acNo"),
    ExportColumn("ward_no", "Ward No", "wardNo"),
    ExportColumn("part_no", "Part No", "partNo"),
    ExportColumn("booth_name", "Booth Name", "boothName"),
    ExportColumn("religion", "Religion", "religion"),
    ExportColumn("is_voted_2024", "Voted 2024", "isVoted2024", is_flag=True),
)

DEFAULT_COLUMNS: list[str] = [column.key for column in EXPORT_COLUMNS]

_COLUMNS_BY_NAME: dict[str, ExportColumn] = {}
for _column in EXPORT_COLUMNS:
    _COLUMNS_BY_NAME[_column.key] = _column
    _COLUMNS_BY_NAME[_column.alias] = _column


def get_column(key: str) -> ExportColumn:
    """Look up a registry column by key or alias.

    Raises:
        KeyError: If the key is not in the registry.
    """
    return _COLUMNS_BY_NAME[key]


def resolve_columns(selected: list[str] | None) -> list[ExportColumn]:
    """Normalise a client column selection into an ordered manifest.

    Unknown keys are dropped, duplicates keep their first position, and an
    empty result falls back to the full registry.

    Args:
        selected: Column keys (snake_case or camelCase alias) in output order.

    Returns:
        Registry columns in the order they should be written.
    """
    manifest: list[ExportColumn] = []
    seen: set[str] = set()
    for name in selected or []:
        column = _COLUMNS_BY_NAME.get(name)
        if column is None or column.key in seen:
            continue
        seen.add(column.key)
        manifest.append(column)
    return manifest or list(EXPORT_COLUMNS)
