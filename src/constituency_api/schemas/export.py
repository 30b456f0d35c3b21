"""Export Pydantic v2 request/response schemas.

Request bodies accept camelCase (``minAge``) as well as snake_case
(``min_age``) keys. Value ranges are checked by the export service so that
they are reported as 400 rather than schema errors.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class ExportFilters(BaseModel):
    """Filter criteria and column selection for an export request."""

    model_config = {"alias_generator": to_camel, "populate_by_name": True, "extra": "forbid"}

    area_codes: list[str | int] | None = Field(default=None, description="Polling part numbers")
    ward_codes: list[str | int] | None = Field(default=None, description="Ward numbers")
    ac_codes: list[str | int] | None = Field(default=None, description="Assembly constituency numbers")
    gender: str | None = Field(default=None, description="M, F or O")
    min_age: int | None = None
    max_age: int | None = None
    has_phone: bool | None = Field(default=None, description="Only voters with (true) or without (false) a mobile")
    religion: str | None = None
    voted_flag: bool | None = Field(default=None, description="Voted in the last election")
    selected_columns: list[str] = Field(
        default_factory=list,
        description="Column keys in output order; empty means every column",
    )

    def predicates(self) -> dict:
        """Return the filter predicates without the column selection."""
        return self.model_dump(exclude={"selected_columns"}, exclude_none=True)


class ExportRequest(BaseModel):
    """Request to create a bulk data export."""

    type: str = Field(default="voters", description="Dataset to export")
    format: str = Field(..., description="Output format: csv, excel or pdf")
    filters: ExportFilters = Field(default_factory=ExportFilters)


class ExportJobResponse(BaseModel):
    """Response for an export job."""

    id: UUID
    type: str
    format: str
    status: str
    progress_percent: int
    total_records: int | None = None
    processed_records: int | None = None
    filters: dict
    selected_columns: list[str]
    artifact_name: str | None = None
    artifact_size_kb: int | None = None
    error_message: str | None = None
    created_at: datetime
    started_at: datetime | None = None
    completed_at: datetime | None = None
    download_url: str | None = None

    model_config = {"from_attributes": True}


class ExportColumnResponse(BaseModel):
    """A column that can be selected for export."""

    key: str
    label: str
    alias: str

    model_config = {"from_attributes": True}


class ColumnRegistryResponse(BaseModel):
    """The versioned list of exportable columns."""

    version: int
    columns: list[ExportColumnResponse]
