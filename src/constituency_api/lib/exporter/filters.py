"""Export filter specification and its validation.

A filter specification is a set of optional predicates combined with AND.
Values are checked here, once, so that a malformed request is rejected
before a job is created instead of failing inside a worker.
"""

from dataclasses import asdict, dataclass, field
from typing import Any

from constituency_api.lib.exporter.errors import ExportValidationError

MIN_AGE = 0
MAX_AGE = 130
GENDERS = ("M", "F", "O")
_MAX_CODES = 500
_MAX_RELIGION_LENGTH = 50

_LIST_FIELDS = ("area_codes", "ward_codes", "ac_codes")
_KNOWN_FIELDS = frozenset((*_LIST_FIELDS, "gender", "min_age", "max_age", "has_phone", "religion", "voted_flag"))


@dataclass(frozen=True)
class FilterSpec:
    """Validated, normalised export filters. Empty means "all voters"."""

    area_codes: tuple[str, ...] = field(default_factory=tuple)
    ward_codes: tuple[str, ...] = field(default_factory=tuple)
    ac_codes: tuple[str, ...] = field(default_factory=tuple)
    gender: str | None = None
    min_age: int | None = None
    max_age: int | None = None
    has_phone: bool | None = None
    religion: str | None = None
    voted_flag: bool | None = None

    @property
    def is_empty(self) -> bool:
        return self == FilterSpec()

    def to_dict(self) -> dict[str, Any]:
        """Return the set predicates as a JSON-serialisable mapping."""
        result: dict[str, Any] = {}
        for name, value in asdict(self).items():
            if value is None or value == ():
                continue
            result[name] = list(value) if isinstance(value, tuple) else value
        return result

    def describe(self) -> str:
        """Return a short human-readable summary for report headers."""
        parts: list[str] = []
        if self.ac_codes:
            parts.append(f"AC: {', '.join(self.ac_codes)}")
        if self.ward_codes:
            parts.append(f"Ward: {', '.join(self.ward_codes)}")
        if self.area_codes:
            parts.append(f"Part: {', '.join(self.area_codes)}")
        if self.gender:
            parts.append(f"Gender: {self.gender}")
        if self.min_age is not None or self.max_age is not None:
            low = self.min_age if self.min_age is not None else MIN_AGE
            high = self.max_age if self.max_age is not None else MAX_AGE
            parts.append(f"Age: {low}-{high}")
        if self.has_phone is not None:
            parts.append(f"Has phone: {'Yes' if self.has_phone else 'No'}")
        if self.religion:
            parts.append(f"Religion: {self.religion}")
        if self.voted_flag is not None:
            parts.append(f"Voted: {'Yes' if self.voted_flag else 'No'}")
        return "; ".join(parts) if parts else "All Records"


def _parse_codes(name: str, value: Any) -> tuple[str, ...]:
    if not isinstance(value, list | tuple):
        msg = f"{name} must be a list of codes"
        raise ExportValidationError(msg)
    codes: list[str] = []
    for item in value:
        if isinstance(item, bool) or not isinstance(item, str | int):
            msg = f"{name} entries must be strings, got {item!r}"
            raise ExportValidationError(msg)
        code = str(item).strip()
        if code and code not in codes:
            codes.append(code)
    if len(codes) > _MAX_CODES:
        msg = f"{name} accepts at most {_MAX_CODES} codes"
        raise ExportValidationError(msg)
    return tuple(codes)


def _parse_age(name: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        msg = f"{name} must be an integer, got {value!r}"
        raise ExportValidationError(msg)
    if not MIN_AGE <= value <= MAX_AGE:
        msg = f"{name} must be between {MIN_AGE} and {MAX_AGE}, got {value}"
        raise ExportValidationError(msg)
    return value


def _parse_flag(name: str, value: Any) -> bool:
    if not isinstance(value, bool):
        msg = f"{name} must be true or false, got {value!r}"
        raise ExportValidationError(msg)
    return value


def parse_filters(raw: dict[str, Any] | None) -> FilterSpec:
    """Validate a raw filter mapping into a FilterSpec.

    ``None`` values and empty lists are treated as absent predicates.

    Args:
        raw: Filter mapping with snake_case keys.

    Returns:
        The normalised FilterSpec.

    Raises:
        ExportValidationError: If a key is unknown or a value is ill-typed,
            out of range, or contradicts another predicate.
    """
    raw = raw or {}
    unknown = sorted(set(raw) - _KNOWN_FIELDS)
    if unknown:
        msg = f"Unknown filter(s): {', '.join(unknown)}"
        raise ExportValidationError(msg)

    values: dict[str, Any] = {}
    for name in _LIST_FIELDS:
        if raw.get(name) is not None:
            values[name] = _parse_codes(name, raw[name])

    gender = raw.get("gender")
    if gender is not None:
        normalized = str(gender).strip().upper()
        if normalized not in GENDERS:
            msg = f"gender must be one of {', '.join(GENDERS)}, got {gender!r}"
            raise ExportValidationError(msg)
        values["gender"] = normalized

    for name in ("min_age", "max_age"):
        if raw.get(name) is not None:
            values[name] = _parse_age(name, raw[name])
    if values.get("min_age") is not None and values.get("max_age") is not None:
        if values["min_age"] > values["max_age"]:
            msg = f"min_age ({values['min_age']}) cannot be greater than max_age ({values['max_age']})"
            raise ExportValidationError(msg)

    for name in ("has_phone", "voted_flag"):
        if raw.get(name) is not None:
            values[name] = _parse_flag(name, raw[name])

    religion = raw.get("religion")
    if religion is not None:
        if not isinstance(religion, str):
            msg = f"religion must be a string, got {religion!r}"
            raise ExportValidationError(msg)
        religion = religion.strip()
        if len(religion) > _MAX_RELIGION_LENGTH:
            msg = f"religion must be at most {_MAX_RELIGION_LENGTH} characters"
            raise ExportValidationError(msg)
        if religion:
            values["religion"] = religion

    return FilterSpec(**values)
