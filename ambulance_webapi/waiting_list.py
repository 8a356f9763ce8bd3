"""Handlers of an ambulance's waiting list."""

from __future__ import annotations

import json
import uuid
from http import HTTPStatus
from typing import Any

from .models import ZERO_TIME, Ambulance, WaitingListEntry
from .updater import Response, update_ambulance


def _decode(payload: Any) -> Any:
    if isinstance(payload, (bytes, bytearray)):
        payload = payload.decode("utf-8")
    if isinstance(payload, str):
        payload = json.loads(payload)
    return payload


def _parse_entry(payload: Any) -> WaitingListEntry:
    return WaitingListEntry.from_dict(_decode(payload))


def _failure(status: HTTPStatus, message: str, error: str | None = None):
    body: dict[str, Any] = {"status": int(status), "message": message}
    if error is not None:
        body["error"] = error
    return None, body, int(status)


def _find(ambulance: Ambulance, entry_id: str) -> WaitingListEntry | None:
    return next((entry for entry in ambulance.waiting_list if entry.id == entry_id), None)


def create_waiting_list_entry(db: Any, ambulance_id: str, payload: Any) -> Response:
    """Add a new entry to the waiting list of an ambulance."""

    def change(ambulance: Ambulance):
        try:
            entry = _parse_entry(payload)
        except ValueError as exc:
            return _failure(HTTPStatus.BAD_REQUEST, "Invalid request body", str(exc))

        if not entry.patient_id:
            return _failure(HTTPStatus.BAD_REQUEST, "Patient ID is required")

        if entry.id in ("", "@new"):
            entry.id = str(uuid.uuid4())

        if any(
            entry.id == waiting.id or entry.patient_id == waiting.patient_id
            for waiting in ambulance.waiting_list
        ):
            return _failure(HTTPStatus.CONFLICT, "Entry already exists")

        ambulance.waiting_list.append(entry)
        ambulance.reconcile_waiting_list()
        return ambulance, entry.to_dict(), int(HTTPStatus.OK)

    return update_ambulance(db, ambulance_id, change)


def delete_waiting_list_entry(db: Any, ambulance_id: str, entry_id: str) -> Response:
    """Remove an entry from the waiting list."""

    def change(ambulance: Ambulance):
        if not entry_id:
            return _failure(HTTPStatus.BAD_REQUEST, "Entry ID is required")
        entry = _find(ambulance, entry_id)
        if entry is None:
            return _failure(HTTPStatus.NOT_FOUND, "Entry not found")
        ambulance.waiting_list.remove(entry)
        ambulance.reconcile_waiting_list()
        return ambulance, None, int(HTTPStatus.NO_CONTENT)

    return update_ambulance(db, ambulance_id, change)


def get_waiting_list_entries(db: Any, ambulance_id: str) -> Response:
    """Return the whole waiting list of an ambulance."""

    def read(ambulance: Ambulance):
        return None, [entry.to_dict() for entry in ambulance.waiting_list], int(HTTPStatus.OK)

    return update_ambulance(db, ambulance_id, read)


def get_waiting_list_entry(db: Any, ambulance_id: str, entry_id: str) -> Response:
    """Return one entry of the waiting list."""

    def read(ambulance: Ambulance):
        if not entry_id:
            return _failure(HTTPStatus.BAD_REQUEST, "Entry ID is required")
        entry = _find(ambulance, entry_id)
        if entry is None:
            return _failure(HTTPStatus.NOT_FOUND, "Entry not found")
        return None, entry.to_dict(), int(HTTPStatus.OK)

    return update_ambulance(db, ambulance_id, read)


def update_waiting_list_entry(
    db: Any, ambulance_id: str, entry_id: str, payload: Any
) -> Response:
    """Change the set fields of an entry and recompute the waiting list."""

    def change(ambulance: Ambulance):
        try:
            update = _parse_entry(payload)
        except ValueError as exc:
            return _failure(HTTPStatus.BAD_REQUEST, "Invalid request body", str(exc))

        if not entry_id:
            return _failure(HTTPStatus.BAD_REQUEST, "Entry ID is required")

        entry = _find(ambulance, entry_id)
        if entry is None:
            return _failure(HTTPStatus.NOT_FOUND, "Entry not found")

        if update.patient_id:
            entry.patient_id = update.patient_id
        if update.id:
            entry.id = update.id
        if update.waiting_since > ZERO_TIME:
            entry.waiting_since = update.waiting_since
        if update.estimated_duration_minutes > 0:
            entry.estimated_duration_minutes = update.estimated_duration_minutes

        ambulance.reconcile_waiting_list()
        return ambulance, entry.to_dict(), int(HTTPStatus.OK)

    return update_ambulance(db, ambulance_id, change)