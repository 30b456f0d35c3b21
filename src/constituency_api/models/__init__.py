"""ORM model registry — import all models so Alembic autogenerate discovers them."""

from constituency_api.models.export_job import ExportFormat, ExportJob, ExportJobStatus, ExportType
from constituency_api.models.part_number import PartNumber
from constituency_api.models.voter import Voter

__all__ = [
    "ExportFormat",
    "ExportJob",
    "ExportJobStatus",
    "ExportType",
    "PartNumber",
    "Voter",
]
