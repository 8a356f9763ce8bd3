"""Handlers creating and deleting ambulances."""

from __future__ import annotations

import json
import uuid
from http import HTTPStatus
from typing import Any

from .db_service import ConflictError, DbService, NotFoundError
from .models import Ambulance
from .updater import Response


def _error(status: HTTPStatus, message: str, error: str) -> Response:
    return Response(int(status), {"status": status.phrase, "message": message, "error": error})


def _decode(payload: Any) -> Any:
    if isinstance(payload, (bytes, bytearray)):
        payload = payload.decode("utf-8")
    if isinstance(payload, str):
        payload = json.loads(payload)
    return payload


def create_ambulance(db: Any, payload: Any) -> Response:
    """Store a new ambulance, giving it an id when it has none."""
    if db is None:
        return _error(HTTPStatus.INTERNAL_SERVER_ERROR, "db not found", "db not found")
    if not isinstance(db, DbService):
        return _error(
            HTTPStatus.INTERNAL_SERVER_ERROR,
            "db context is not of required type",
            "cannot cast db context to db_service.DbService",
        )

    try:
        ambulance = Ambulance.from_dict(_decode(payload))
    except ValueError as exc:
        return _error(HTTPStatus.BAD_REQUEST, "Invalid request body", str(exc))

    if not ambulance.id:
        ambulance.id = str(uuid.uuid4())

    document = ambulance.to_dict()
    try:
        db.create_document(ambulance.id, document)
    except ConflictError as exc:
        return _error(HTTPStatus.CONFLICT, "Ambulance already exists", str(exc))
    except Exception as exc:
        return _error(
            HTTPStatus.BAD_GATEWAY, "Failed to create ambulance in database", str(exc)
        )
    return Response(int(HTTPStatus.CREATED), document)


def delete_ambulance(db: Any, ambulance_id: str) -> Response:
    """Remove an ambulance."""
    if db is None:
        return _error(
            HTTPStatus.INTERNAL_SERVER_ERROR, "db_service not found", "db_service not found"
        )
    if not isinstance(db, DbService):
        return _error(
            HTTPStatus.INTERNAL_SERVER_ERROR,
            "db_service context is not of type db_service.DbService",
            "cannot cast db_service context to db_service.DbService",
        )

    try:
        db.delete_document(ambulance_id)
    except NotFoundError as exc:
        return _error(HTTPStatus.NOT_FOUND, "Ambulance not found", str(exc))
    except Exception as exc:
        return _error(
            HTTPStatus.BAD_GATEWAY, "Failed to delete ambulance from database", str(exc)
        )
    return Response(int(HTTPStatus.NO_CONTENT))