# ambulance-webapi

An HTTP API for managing ambulance waiting lists, built on Flask. Ambulances,
their waiting list entries and their predefined patient conditions are stored
as documents in a MongoDB collection.

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Running the service

```
ambulance-api-service
```

The command starts the server on all interfaces and runs until it is
interrupted; on exit it closes the database connection. It takes no options
besides `--help` and is configured through environment variables:

| Variable | Default | Meaning |
| --- | --- | --- |
| `AMBULANCE_API_PORT` | `8080` | Port the HTTP server listens on |
| `AMBULANCE_API_ENVIRONMENT` | (empty) | Unless this is `production` (any letter case), the application logger is set to debug level |
| `AMBULANCE_API_MONGODB_HOST` | `localhost` | MongoDB host |
| `AMBULANCE_API_MONGODB_PORT` | `27017` | MongoDB port |
| `AMBULANCE_API_MONGODB_USERNAME` | (empty) | MongoDB user name; credentials go into the URI only when it is set |
| `AMBULANCE_API_MONGODB_PASSWORD` | (empty) | MongoDB password |
| `AMBULANCE_API_MONGODB_DATABASE` | `xpoky-ambulance-wl` | Database name |
| `AMBULANCE_API_MONGODB_COLLECTION` | `ambulance` | Collection name |
| `AMBULANCE_API_MONGODB_TIMEOUT_SECONDS` | `10` | Timeout for database operations |

An invalid port or timeout value is logged and the default is used instead.

The application built by `ambulance_webapi.main.build_app` answers CORS
preflight requests for any origin, allowing `GET`, `PUT`, `POST`, `DELETE` and
`PATCH` with the `Origin`, `Authorization` and `Content-Type` headers, cached
for 12 hours.

## Endpoints

| Method | Path | Purpose |
| --- | --- | --- |
| `POST` | `/api/ambulance` | Create an ambulance (201, or 409 if the id is taken) |
| `DELETE` | `/api/ambulance/<ambulanceId>` | Delete an ambulance (204) |
| `GET` | `/api/waiting-list/<ambulanceId>/condition` | List predefined conditions |
| `GET` | `/api/waiting-list/<ambulanceId>/entries` | List waiting list entries |
| `POST` | `/api/waiting-list/<ambulanceId>/entries` | Add an entry |
| `GET` | `/api/waiting-list/<ambulanceId>/entries/<entryId>` | Get one entry |
| `PUT` | `/api/waiting-list/<ambulanceId>/entries/<entryId>` | Update an entry |
| `DELETE` | `/api/waiting-list/<ambulanceId>/entries/<entryId>` | Remove an entry (204) |

A new entry needs a `patientId`; an entry whose `id` is empty or `@new` is
given a fresh UUID, and an entry with the same id or patient as an existing one
is refused with 409. An update changes only the fields it sets: `patientId`,
`id`, `waitingSince` and a positive `estimatedDurationMinutes`.

After every change the waiting list is reordered by the time patients joined
it, and each entry's estimated start is recomputed so that visits follow one
another without overlap and never start before the patient arrived or before
the current time.

Timestamps are read and written as RFC 3339 (`ambulance_webapi.models.parse_timestamp`
and `format_timestamp`).

## Using it from Python

`ambulance_webapi.routers.create_app(db)` builds a Flask application with all
routes, around any object that implements the
`ambulance_webapi.db_service.DbService` protocol (`create_document`,
`find_document`, `update_document`, `delete_document`, `disconnect`).
`MongoService` is the MongoDB implementation; it connects lazily and fills
unset `MongoServiceConfig` fields from the environment variables above.

```python
from ambulance_webapi.routers import create_app
from ambulance_webapi.db_service import MongoService, MongoServiceConfig

with MongoService(MongoServiceConfig(server_host="localhost")) as db:
    app = create_app(db)
    app.run(port=8080)
```

The request handlers are also plain functions, for example
`ambulance_webapi.waiting_list.get_waiting_list_entries(db, ambulance_id)`,
each returning an `ambulance_webapi.updater.Response` with a status code and a
JSON-ready body.

## What it does not do

The service does not serve an OpenAPI description of its endpoints; there is
no `/openapi` route.