"""Voter model — electoral roll entry for the constituency."""

from sqlalchemy import Boolean, ForeignKey, Integer, String, Text, false
from sqlalchemy.orm import Mapped, mapped_column

from constituency_api.models.base import Base, TimestampMixin


class Voter(Base, TimestampMixin):
    """Individual voter record keyed by EPIC (elector photo identity card) number."""

    __tablename__ = "voters"

    epic_number: Mapped[str] = mapped_column(String(20), primary_key=True)

    # Name and relation
    full_name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    relation_type: Mapped[str | None] = mapped_column(String(50), nullable=True)
    relation_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    family_grouping: Mapped[str | None] = mapped_column(String(100), nullable=True)

    # Electoral geography
    ac_no: Mapped[str | None] = mapped_column(String(10), nullable=True, index=True)
    part_no: Mapped[str | None] = mapped_column(
        String(10), ForeignKey("part_numbers.part_no"), nullable=True, index=True
    )
    sr_no: Mapped[str | None] = mapped_column(String(10), nullable=True)

    # Demographics
    age: Mapped[int | None] = mapped_column(Integer, nullable=True, index=True)
    gender: Mapped[str | None] = mapped_column(String(10), nullable=True, index=True)
    religion: Mapped[str | None] = mapped_column(String(50), nullable=True)

    # Contact and residence
    mobile_no_primary: Mapped[str | None] = mapped_column(String(15), nullable=True)
    mobile_no_secondary: Mapped[str | None] = mapped_column(String(15), nullable=True)
    house_number: Mapped[str | None] = mapped_column(String(127), nullable=True)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    pincode: Mapped[str | None] = mapped_column(String(10), nullable=True)

    # Participation
    is_voted_2024: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=false())
