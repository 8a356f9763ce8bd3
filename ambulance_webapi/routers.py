"""HTTP routes of the waiting-list API and the Flask application serving them."""

from __future__ import annotations

from dataclasses import dataclass
from http import HTTPStatus
from typing import Any, Callable, Mapping

from flask import Flask, current_app, jsonify, request
from flask import Response as FlaskResponse

from .ambulances import create_ambulance, delete_ambulance
from .conditions import get_conditions
from .updater import Response
from .waiting_list import (
    create_waiting_list_entry,
    delete_waiting_list_entry,
    get_waiting_list_entries,
    get_waiting_list_entry,
    update_waiting_list_entry,
)

DB_EXTENSION = "db_service"
SUPPORTED_METHODS = frozenset({"GET", "POST", "PUT", "PATCH", "DELETE"})

Handler = Callable[[Any, Mapping[str, str], bytes], Response]
"""Handles a request given the store, the path parameters and the raw body."""


@dataclass(frozen=True)
class Route:
    """One endpoint: its name, HTTP method, URL pattern and handler."""

    name: str
    method: str
    pattern: str
    handler: Handler | None = None


def get_routes() -> list[Route]:
    """Return every endpoint of the API, in registration order."""
    entries = "/api/waiting-list/<ambulanceId>/entries"
    entry = entries + "/<entryId>"
    return [
        Route(
            "GetConditions",
            "GET",
            "/api/waiting-list/<ambulanceId>/condition",
            lambda db, params, body: get_conditions(db, params["ambulanceId"]),
        ),
        Route(
            "CreateWaitingListEntry",
            "POST",
            entries,
            lambda db, params, body: create_waiting_list_entry(
                db, params["ambulanceId"], body
            ),
        ),
        Route(
            "DeleteWaitingListEntry",
            "DELETE",
            entry,
            lambda db, params, body: delete_waiting_list_entry(
                db, params["ambulanceId"], params["entryId"]
            ),
        ),
        Route(
            "GetWaitingListEntries",
            "GET",
            entries,
            lambda db, params, body: get_waiting_list_entries(db, params["ambulanceId"]),
        ),
        Route(
            "GetWaitingListEntry",
            "GET",
            entry,
            lambda db, params, body: get_waiting_list_entry(
                db, params["ambulanceId"], params["entryId"]
            ),
        ),
        Route(
            "UpdateWaitingListEntry",
            "PUT",
            entry,
            lambda db, params, body: update_waiting_list_entry(
                db, params["ambulanceId"], params["entryId"], body
            ),
        ),
        Route(
            "CreateAmbulance",
            "POST",
            "/api/ambulance",
            lambda db, params, body: create_ambulance(db, body),
        ),
        Route(
            "DeleteAmbulance",
            "DELETE",
            "/api/ambulance/<ambulanceId>",
            lambda db, params, body: delete_ambulance(db, params["ambulanceId"]),
        ),
    ]


def default_handler() -> FlaskResponse:
    """Answer for routes that have no handler."""
    status = HTTPStatus.NOT_IMPLEMENTED
    return FlaskResponse(f"{int(status)} not implemented", status=int(status), mimetype="text/plain")


def _to_flask(result: Response) -> Any:
    if result.body is None:
        return FlaskResponse(status=result.status)
    return jsonify(result.body), result.status


def _make_view(route: Route) -> Callable[..., Any]:
    def view(**params: str) -> Any:
        if route.handler is None:
            return default_handler()
        db = current_app.extensions.get(DB_EXTENSION)
        return _to_flask(route.handler(db, params, request.get_data()))

    view.__name__ = route.name
    return view


def create_app(db: Any) -> Flask:
    """Create a Flask application with all routes registered, backed by ``db``."""
    app = Flask(__name__)
    app.extensions[DB_EXTENSION] = db
    for route in get_routes():
        if route.method not in SUPPORTED_METHODS:
            continue
        app.add_url_rule(
            route.pattern,
            endpoint=route.name,
            view_func=_make_view(route),
            methods=[route.method],
        )
    return app