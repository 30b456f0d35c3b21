"""PartNumber model — polling part (booth) with its ward assignment."""

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from constituency_api.models.base import Base, TimestampMixin


class PartNumber(Base, TimestampMixin):
    """A polling part of the constituency and the ward it belongs to."""

    __tablename__ = "part_numbers"

    part_no: Mapped[str] = mapped_column(String(10), primary_key=True)
    ward_no: Mapped[str | None] = mapped_column(String(10), nullable=True, index=True)
    booth_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    booth_address: Mapped[str | None] = mapped_column(Text, nullable=True)
