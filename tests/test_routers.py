import copy
from datetime import datetime, timezone
from http import HTTPStatus

import pytest

from ambulance_webapi.db_service import ConflictError, NotFoundError
from ambulance_webapi.models import Ambulance, WaitingListEntry
from ambulance_webapi.routers import create_app, default_handler, get_routes


class FakeDb:
    def __init__(self, documents=None):
        self.documents = {k: copy.deepcopy(v) for k, v in (documents or {}).items()}
        self.updates = []

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
        self.updates.append(document_id)
        self.documents[document_id] = copy.deepcopy(dict(document))

    def delete_document(self, document_id):
        if document_id not in self.documents:
            raise NotFoundError()
        del self.documents[document_id]

    def disconnect(self):
        pass


def _ambulance_doc():
    return Ambulance(
        id="test-ambulance",
        waiting_list=[
            WaitingListEntry(
                id="test-entry",
                patient_id="test-patient",
                waiting_since=datetime.now(timezone.utc),
                estimated_duration_minutes=101,
            )
        ],
    ).to_dict()


@pytest.fixture
def db():
    return FakeDb({"test-ambulance": _ambulance_doc()})


@pytest.fixture
def client(db):
    return create_app(db).test_client()


def test_route_names_in_order():
    assert [route.name for route in get_routes()] == [
        "GetConditions",
        "CreateWaitingListEntry",
        "DeleteWaitingListEntry",
        "GetWaitingListEntries",
        "GetWaitingListEntry",
        "UpdateWaitingListEntry",
        "CreateAmbulance",
        "DeleteAmbulance",
    ]


def test_every_route_is_registered(db):
    app = create_app(db)
    rules = {(rule.endpoint, rule.rule) for rule in app.url_map.iter_rules()}
    for route in get_routes():
        assert (route.name, route.pattern) in rules
        assert route.handler is not None


def test_default_handler_is_not_implemented():
    response = default_handler()
    assert response.status_code == HTTPStatus.NOT_IMPLEMENTED
    assert response.get_data(as_text=True) == "501 not implemented"


def test_update_entry_stores_ambulance(client, db):
    response = client.put(
        "/api/waiting-list/test-ambulance/entries/test-entry",
        data='{"id": "test-entry", "patientId": "test-patient", "estimatedDurationMinutes": 42}',
    )
    assert response.status_code == HTTPStatus.OK
    assert db.updates == ["test-ambulance"]
    assert response.get_json()["estimatedDurationMinutes"] == 42
    stored = db.documents["test-ambulance"]["waitingList"][0]
    assert stored["estimatedDurationMinutes"] == 42


def test_create_and_list_entries(client, db):
    response = client.post(
        "/api/waiting-list/test-ambulance/entries",
        data='{"patientId": "other-patient", "estimatedDurationMinutes": 15}',
    )
    assert response.status_code == HTTPStatus.OK
    created = response.get_json()
    assert created["patientId"] == "other-patient"

    listed = client.get("/api/waiting-list/test-ambulance/entries").get_json()
    assert {entry["id"] for entry in listed} == {"test-entry", created["id"]}


def test_get_single_entry(client):
    response = client.get("/api/waiting-list/test-ambulance/entries/test-entry")
    assert response.status_code == HTTPStatus.OK
    assert response.get_json()["patientId"] == "test-patient"


def test_missing_entry_is_not_found(client):
    response = client.get("/api/waiting-list/test-ambulance/entries/nope")
    assert response.status_code == HTTPStatus.NOT_FOUND
    assert response.get_json()["message"] == "Entry not found"


def test_delete_entry_has_no_body(client, db):
    response = client.delete("/api/waiting-list/test-ambulance/entries/test-entry")
    assert response.status_code == HTTPStatus.NO_CONTENT
    assert response.get_data() == b""
    assert "waitingList" not in db.documents["test-ambulance"]


def test_conditions_of_unknown_ambulance(client):
    response = client.get("/api/waiting-list/unknown/condition")
    assert response.status_code == HTTPStatus.NOT_FOUND
    assert response.get_json()["message"] == "Ambulance not found"


def test_conditions_empty_list(client):
    response = client.get("/api/waiting-list/test-ambulance/condition")
    assert response.status_code == HTTPStatus.OK
    assert response.get_json() == []


def test_create_and_delete_ambulance(client, db):
    response = client.post("/api/ambulance", data='{"id": "amb-2", "name": "Second"}')
    assert response.status_code == HTTPStatus.CREATED
    assert response.get_json()["name"] == "Second"
    assert "amb-2" in db.documents

    response = client.delete("/api/ambulance/amb-2")
    assert response.status_code == HTTPStatus.NO_CONTENT
    assert "amb-2" not in db.documents


def test_duplicate_ambulance_conflicts(client):
    response = client.post("/api/ambulance", data='{"id": "test-ambulance"}')
    assert response.status_code == HTTPStatus.CONFLICT
    assert response.get_json()["message"] == "Ambulance already exists"


def test_invalid_body_is_bad_request(client):
    response = client.post("/api/waiting-list/test-ambulance/entries", data="{not json")
    assert response.status_code == HTTPStatus.BAD_REQUEST
    assert response.get_json()["message"] == "Invalid request body"


def test_missing_db_is_internal_error():
    client = create_app(None).test_client()
    response = client.get("/api/waiting-list/test-ambulance/entries")
    assert response.status_code == HTTPStatus.INTERNAL_SERVER_ERROR
    assert response.get_json()["message"] == "db_service not found"