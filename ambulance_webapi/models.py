"""Data model of ambulances, their waiting lists and patient conditions."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Mapping

INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1

ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)
"""The unset timestamp; it is written as ``0001-01-01T00:00:00Z``."""

_RFC3339 = re.compile(
    r"(\d{4}-\d{2}-\d{2})T(\d{2}:\d{2}:\d{2})(?:\.(\d+))?(Z|z|[+-]\d{2}:\d{2})"
)


def parse_timestamp(value: Any) -> datetime:
    """Turn an RFC 3339 string or a datetime into an aware datetime.

    ``None`` stands for the unset timestamp; naive datetimes are taken as UTC.
    """
    if value is None:
        return ZERO_TIME
    if isinstance(value, datetime):
        return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)
    if not isinstance(value, str):
        raise ValueError(f"timestamp must be a string, not {type(value).__name__}")
    match = _RFC3339.fullmatch(value)
    if match is None:
        raise ValueError(f"invalid RFC 3339 timestamp: {value!r}")
    date_part, time_part, fraction, offset = match.groups()
    micros = (fraction or "")[:6].ljust(6, "0")
    if offset in ("Z", "z"):
        offset = "+00:00"
    try:
        return datetime.fromisoformat(f"{date_part}T{time_part}.{micros}{offset}")
    except ValueError as exc:
        raise ValueError(f"invalid RFC 3339 timestamp: {value!r}") from exc


def format_timestamp(value: datetime) -> str:
    """Write a datetime as RFC 3339, with ``Z`` for UTC and no trailing zero fractions."""
    value = parse_timestamp(value)
    text = (
        f"{value.year:04d}-{value.month:02d}-{value.day:02d}"
        f"T{value.hour:02d}:{value.minute:02d}:{value.second:02d}"
    )
    if value.microsecond:
        text += "." + f"{value.microsecond:06d}".rstrip("0")
    offset = value.utcoffset() or timedelta(0)
    if not offset:
        return text + "Z"
    minutes = int(offset.total_seconds()) // 60
    sign = "+" if minutes >= 0 else "-"
    hours, minutes = divmod(abs(minutes), 60)
    return f"{text}{sign}{hours:02d}:{minutes:02d}"


def _require_object(data: Any) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise ValueError("expected a JSON object")
    return data


def _string(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"field {key!r} must be a string")
    return value


def _int32(data: Mapping[str, Any], key: str) -> int:
    value = data.get(key)
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        if isinstance(value, float) and value.is_integer():
            value = int(value)
        else:
            raise ValueError(f"field {key!r} must be an integer")
    if not INT32_MIN <= value <= INT32_MAX:
        raise ValueError(f"field {key!r} is out of range")
    return value


def _list(data: Mapping[str, Any], key: str) -> list[Any]:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"field {key!r} must be an array")
    return value


@dataclass
class Condition:
    """Disease, symptoms or other reason of a patient's visit."""

    value: str = ""
    code: str = ""
    reference: str = ""
    typical_duration_minutes: int = 0

    @classmethod
    def from_dict(cls, data: Any) -> Condition:
        data = _require_object(data)
        return cls(
            value=_string(data, "value"),
            code=_string(data, "code"),
            reference=_string(data, "reference"),
            typical_duration_minutes=_int32(data, "typicalDurationMinutes"),
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"value": self.value}
        if self.code:
            result["code"] = self.code
        if self.reference:
            result["reference"] = self.reference
        if self.typical_duration_minutes:
            result["typicalDurationMinutes"] = self.typical_duration_minutes
        return result


@dataclass
class WaitingListEntry:
    """A patient waiting in an ambulance's waiting list."""

    id: str = ""
    name: str = ""
    patient_id: str = ""
    waiting_since: datetime = ZERO_TIME
    estimated_start: datetime = ZERO_TIME
    estimated_duration_minutes: int = 0
    condition: Condition = field(default_factory=Condition)

    def __post_init__(self) -> None:
        self.waiting_since = parse_timestamp(self.waiting_since)
        self.estimated_start = parse_timestamp(self.estimated_start)

    @classmethod
    def from_dict(cls, data: Any) -> WaitingListEntry:
        data = _require_object(data)
        condition = data.get("condition")
        return cls(
            id=_string(data, "id"),
            name=_string(data, "name"),
            patient_id=_string(data, "patientId"),
            waiting_since=parse_timestamp(data.get("waitingSince")),
            estimated_start=parse_timestamp(data.get("estimatedStart")),
            estimated_duration_minutes=_int32(data, "estimatedDurationMinutes"),
            condition=Condition() if condition is None else Condition.from_dict(condition),
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"id": self.id}
        if self.name:
            result["name"] = self.name
        result.update(
            patientId=self.patient_id,
            waitingSince=format_timestamp(self.waiting_since),
            estimatedStart=format_timestamp(self.estimated_start),
            estimatedDurationMinutes=self.estimated_duration_minutes,
            condition=self.condition.to_dict(),
        )
        return result


@dataclass
class Ambulance:
    """An ambulance with its waiting list and predefined conditions."""

    id: str = ""
    name: str = ""
    room_number: str = ""
    waiting_list: list[WaitingListEntry] = field(default_factory=list)
    predefined_conditions: list[Condition] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> Ambulance:
        data = _require_object(data)
        return cls(
            id=_string(data, "id"),
            name=_string(data, "name"),
            room_number=_string(data, "roomNumber"),
            waiting_list=[WaitingListEntry.from_dict(e) for e in _list(data, "waitingList")],
            predefined_conditions=[
                Condition.from_dict(c) for c in _list(data, "predefinedConditions")
            ],
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "roomNumber": self.room_number,
        }
        if self.waiting_list:
            result["waitingList"] = [entry.to_dict() for entry in self.waiting_list]
        if self.predefined_conditions:
            result["predefinedConditions"] = [c.to_dict() for c in self.predefined_conditions]
        return result

    def reconcile_waiting_list(self) -> None:
        """Order the waiting list and recompute estimated start times.

        The first entry keeps its estimate unless it lies before the patient
        arrived or before now; each later entry starts no earlier than the end
        of the previous visit and no earlier than its own arrival.
        """
        if not self.waiting_list:
            return
        self.waiting_list.sort(key=lambda entry: entry.waiting_since)

        first = self.waiting_list[0]
        if first.estimated_start < first.waiting_since:
            first.estimated_start = first.waiting_since
        now = datetime.now(timezone.utc)
        if first.estimated_start < now:
            first.estimated_start = now

        next_start = first.estimated_start + timedelta(
            minutes=first.estimated_duration_minutes
        )
        for entry in self.waiting_list[1:]:
            if entry.estimated_start < next_start:
                entry.estimated_start = next_start
            if entry.estimated_start < entry.waiting_since:
                entry.estimated_start = entry.waiting_since
            next_start = entry.estimated_start + timedelta(
                minutes=entry.estimated_duration_minutes
            )