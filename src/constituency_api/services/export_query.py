"""Compile export filters and a column selection into an executable query plan."""

from collections.abc import AsyncIterator
from dataclasses import dataclass
from typing import Any

from sqlalchemy import ColumnElement, Select, and_, case, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from constituency_api.lib.exporter.columns import ExportColumn, resolve_columns
from constituency_api.lib.exporter.filters import FilterSpec, parse_filters
from constituency_api.models.part_number import PartNumber
from constituency_api.models.voter import Voter

EXPORT_STREAM_BATCH_SIZE = 1000


def _has_value(column: Any) -> ColumnElement[bool]:
    return and_(column.is_not(None), column != "")


def _lacks_value(column: Any) -> ColumnElement[bool]:
    return or_(column.is_(None), column == "")


# Projection expressions for every registry column key
_COLUMN_EXPRESSIONS: dict[str, Any] = {
    "epic_number": Voter.epic_number,
    "full_name": Voter.full_name,
    "relation_type": Voter.relation_type,
    "relation_name": Voter.relation_name,
    "age": Voter.age,
    "gender": Voter.gender,
    "mobile_number": func.coalesce(
        func.nullif(Voter.mobile_no_primary, ""),
        func.nullif(Voter.mobile_no_secondary, ""),
    ),
    "alternate_mobile_number": case(
        (_has_value(Voter.mobile_no_primary), func.nullif(Voter.mobile_no_secondary, "")),
        else_=None,
    ),
    "house_number": Voter.house_number,
    "address": Voter.address,
    "pincode": Voter.pincode,
    "ac_no": Voter.ac_no,
    "ward_no": PartNumber.ward_no,
    "part_no": Voter.part_no,
    "booth_name": PartNumber.booth_name,
    "religion": Voter.religion,
    "is_voted_2024": Voter.is_voted_2024,
}


def _build_conditions(spec: FilterSpec) -> list[ColumnElement[bool]]:
    """Translate a FilterSpec into WHERE clauses (combined with AND)."""
    conditions: list[ColumnElement[bool]] = []

    if spec.area_codes:
        conditions.append(Voter.part_no.in_(spec.area_codes))
    if spec.ward_codes:
        conditions.append(PartNumber.ward_no.in_(spec.ward_codes))
    if spec.ac_codes:
        conditions.append(Voter.ac_no.in_(spec.ac_codes))
    if spec.gender:
        conditions.append(Voter.gender == spec.gender)
    if spec.min_age is not None:
        conditions.append(Voter.age >= spec.min_age)
    if spec.max_age is not None:
        conditions.append(Voter.age <= spec.max_age)
    if spec.has_phone is True:
        conditions.append(or_(_has_value(Voter.mobile_no_primary), _has_value(Voter.mobile_no_secondary)))
    elif spec.has_phone is False:
        conditions.append(and_(_lacks_value(Voter.mobile_no_primary), _lacks_value(Voter.mobile_no_secondary)))
    if spec.religion:
        conditions.append(Voter.religion == spec.religion)
    if spec.voted_flag is not None:
        conditions.append(Voter.is_voted_2024 == spec.voted_flag)

    return conditions


@dataclass(frozen=True)
class QueryPlan:
    """An export query ready to run against the voter table.

    ``statement`` and ``count_statement`` share the same FROM clause and
    predicates, so the pre-count matches the number of streamed rows for
    an unchanged dataset.
    """

    filters: FilterSpec
    columns: list[ExportColumn]
    statement: Select
    count_statement: Select

    @property
    def column_keys(self) -> list[str]:
        return [column.key for column in self.columns]

    async def count(self, session: AsyncSession) -> int:
        """Return the number of matching voters without streaming them."""
        result = await session.execute(self.count_statement)
        return int(result.scalar_one())

    async def stream(
        self,
        session: AsyncSession,
        *,
        batch_size: int = EXPORT_STREAM_BATCH_SIZE,
    ) -> AsyncIterator[dict[str, Any]]:
        """Yield matching rows as ``{column_key: value}`` dicts.

        Uses a server-side cursor so at most ``batch_size`` rows are held
        in memory at once.
        """
        result = await session.stream(self.statement)
        async for partition in result.mappings().partitions(batch_size):
            for row in partition:
                yield dict(row)


def compile_export_plan(
    filters: dict[str, Any] | FilterSpec | None,
    columns: list[str] | None,
) -> QueryPlan:
    """Compile filters and a column selection into a QueryPlan.

    Args:
        filters: Raw filter mapping or an already validated FilterSpec.
        columns: Requested column keys in output order; unknown keys are
            dropped and an empty selection means every registry column.

    Returns:
        The executable plan.

    Raises:
        ExportValidationError: If the filters are malformed.
    """
    spec = filters if isinstance(filters, FilterSpec) else parse_filters(filters)
    manifest = resolve_columns(columns)
    conditions = _build_conditions(spec)

    source = Voter.__table__.outerjoin(PartNumber.__table__, PartNumber.part_no == Voter.part_no)

    statement = (
        select(*[_COLUMN_EXPRESSIONS[column.key].label(column.key) for column in manifest])
        .select_from(source)
        .where(*conditions)
        .order_by(Voter.full_name, Voter.epic_number)
    )
    count_statement = select(func.count()).select_from(source).where(*conditions)

    return QueryPlan(filters=spec, columns=manifest, statement=statement, count_statement=count_statement)
