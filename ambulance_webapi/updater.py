"""Load an ambulance, let a function change it and store the result."""

from __future__ import annotations

from dataclasses import dataclass
from http import HTTPStatus
from typing import Any, Callable

from .db_service import DbService, NotFoundError
from .models import Ambulance

Updater = Callable[[Ambulance], "tuple[Ambulance | None, Any, int]"]


@dataclass(frozen=True)
class Response:
    """HTTP status and JSON-ready body of a handled request; no body when ``None``."""

    status: int
    body: Any = None


def _error(status: HTTPStatus, message: str, error: str) -> Response:
    return Response(
        int(status),
        {"status": status.phrase, "message": message, "error": error},
    )


def _db_problem(db: Any) -> Response | None:
    if db is None:
        return _error(
            HTTPStatus.INTERNAL_SERVER_ERROR,
            "db_service not found",
            "db_service not found",
        )
    if not isinstance(db, DbService):
        return _error(
            HTTPStatus.INTERNAL_SERVER_ERROR,
            "db_service context is not of type db_service.DbService",
            "cannot cast db_service context to db_service.DbService",
        )
    return None


def update_ambulance(db: Any, ambulance_id: str, updater: Updater) -> Response:
    """Run ``updater`` on the stored ambulance and save what it hands back.

    The updater returns the ambulance to store (or ``None`` to leave the
    database alone), the response body and the response status.
    """
    problem = _db_problem(db)
    if problem is not None:
        return problem

    try:
        document = db.find_document(ambulance_id)
    except NotFoundError as exc:
        return _error(HTTPStatus.NOT_FOUND, "Ambulance not found", str(exc))
    except Exception as exc:
        return _error(
            HTTPStatus.BAD_GATEWAY, "Failed to load ambulance from database", str(exc)
        )

    try:
        ambulance = Ambulance.from_dict(document)
    except ValueError:
        return _error(
            HTTPStatus.INTERNAL_SERVER_ERROR,
            "Failed to cast ambulance from database",
            "Failed to cast ambulance from database",
        )

    updated, content, status = updater(ambulance)

    if updated is not None:
        try:
            db.update_document(ambulance_id, updated.to_dict())
        except NotFoundError as exc:
            return _error(
                HTTPStatus.NOT_FOUND,
                "Ambulance was deleted while processing the request",
                str(exc),
            )
        except Exception as exc:
            return _error(
                HTTPStatus.BAD_GATEWAY,
                "Failed to update ambulance in database",
                str(exc),
            )

    return Response(int(status), content)