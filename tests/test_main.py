import copy
from http import HTTPStatus

import pytest

from ambulance_webapi.db_service import ConflictError, NotFoundError
from ambulance_webapi.main import build_app, main


class FakeDb:
    def __init__(self):
        self.documents = {}

    def create_document(self, document_id, document):
        if document_id in self.documents:
            raise ConflictError()
        self.documents[document_id] = copy.deepcopy(dict(document))

    def find_document(self, document_id):
        if document_id not in self.documents:
            raise NotFoundError()
        return copy.deepcopy(self.documents[document_id])

    def update_document(self, document_id, document):
        if document_id not in self.documents:
            raise NotFoundError()
        self.documents[document_id] = copy.deepcopy(dict(document))

    def delete_document(self, document_id):
        if document_id not in self.documents:
            raise NotFoundError()
        del self.documents[document_id]

    def disconnect(self):
        pass


def test_default_port():
    app = build_app({}, FakeDb())
    assert app.config["AMBULANCE_API_PORT"] == "8080"


def test_port_from_environment():
    app = build_app({"AMBULANCE_API_PORT": "9090"}, FakeDb())
    assert app.config["AMBULANCE_API_PORT"] == "9090"


@pytest.mark.parametrize(
    "environment, expected",
    [("production", False), ("PRODUCTION", False), ("", True), ("staging", True)],
)
def test_debug_mode_unless_production(environment, expected):
    app = build_app({"AMBULANCE_API_ENVIRONMENT": environment}, FakeDb())
    assert app.config["DEBUG_MODE"] is expected


def test_routes_are_served():
    db = FakeDb()
    client = build_app({}, db).test_client()
    response = client.post("/api/ambulance", data='{"id": "amb-1"}')
    assert response.status_code == HTTPStatus.CREATED
    assert "amb-1" in db.documents


def test_cors_origin_header_on_response():
    client = build_app({}, FakeDb()).test_client()
    response = client.get(
        "/api/waiting-list/unknown/entries", headers={"Origin": "http://example.com"}
    )
    assert response.status_code == HTTPStatus.NOT_FOUND
    assert response.headers["Access-Control-Allow-Origin"] == "*"


def test_cors_preflight():
    client = build_app({}, FakeDb()).test_client()
    response = client.options(
        "/api/ambulance",
        headers={"Origin": "http://example.com", "Access-Control-Request-Method": "POST"},
    )
    assert response.status_code == HTTPStatus.NO_CONTENT
    methods = response.headers["Access-Control-Allow-Methods"].split(",")
    assert set(methods) == {"GET", "PUT", "POST", "DELETE", "PATCH"}
    headers = response.headers["Access-Control-Allow-Headers"].split(",")
    assert "Authorization" in headers


def test_main_help_exits_cleanly():
    with pytest.raises(SystemExit) as excinfo:
        main(["--help"])
    assert excinfo.value.code == 0