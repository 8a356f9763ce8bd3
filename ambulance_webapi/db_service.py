"""Document storage for ambulances, backed by MongoDB."""

from __future__ import annotations

import logging
import os
import re
import threading
from dataclasses import dataclass, replace
from typing import Any, Callable, Mapping, Protocol, runtime_checkable
from urllib.parse import quote_plus

import pymongo

log = logging.getLogger(__name__)

DEFAULT_PORT = 27017
DEFAULT_TIMEOUT_SECONDS = 10.0
CONNECT_TIMEOUT_SECONDS = 10.0

_INTEGER = re.compile(r"[+-]?\d+")


class DbServiceError(Exception):
    """Base class of errors reported by a document store."""


class NotFoundError(DbServiceError):
    """The requested document does not exist."""

    def __init__(self, message: str = "document not found") -> None:
        super().__init__(message)


class ConflictError(DbServiceError):
    """A document with the same id already exists."""

    def __init__(self, message: str = "conflict: document already exists") -> None:
        super().__init__(message)


@runtime_checkable
class DbService(Protocol):
    """A store of JSON-like documents addressed by their ``id`` field."""

    def create_document(self, document_id: str, document: Mapping[str, Any]) -> None: ...

    def find_document(self, document_id: str) -> dict[str, Any]: ...

    def update_document(self, document_id: str, document: Mapping[str, Any]) -> None: ...

    def delete_document(self, document_id: str) -> None: ...

    def disconnect(self) -> None: ...


@dataclass(frozen=True)
class MongoServiceConfig:
    """Connection settings; empty or zero values are filled from the environment."""

    server_host: str = ""
    server_port: int = 0
    user_name: str = ""
    password: str = ""
    db_name: str = ""
    collection: str = ""
    timeout: float = 0.0


def _parse_int(text: str) -> int | None:
    return int(text) if _INTEGER.fullmatch(text) else None


def resolve_config(
    config: MongoServiceConfig | None = None,
    environ: Mapping[str, str] | None = None,
) -> MongoServiceConfig:
    """Return ``config`` with its unset fields taken from ``environ`` or defaults."""
    config = config or MongoServiceConfig()
    environ = os.environ if environ is None else environ
    changes: dict[str, Any] = {}

    if not config.server_host:
        changes["server_host"] = environ.get("AMBULANCE_API_MONGODB_HOST", "localhost")

    if config.server_port == 0:
        text = environ.get("AMBULANCE_API_MONGODB_PORT", str(DEFAULT_PORT))
        port = _parse_int(text)
        if port is None:
            log.warning("Invalid port value: %s", text)
            port = DEFAULT_PORT
        changes["server_port"] = port

    if not config.user_name:
        changes["user_name"] = environ.get("AMBULANCE_API_MONGODB_USERNAME", "")

    if not config.password:
        changes["password"] = environ.get("AMBULANCE_API_MONGODB_PASSWORD", "")

    if not config.db_name:
        changes["db_name"] = environ.get("AMBULANCE_API_MONGODB_DATABASE", "xpoky-ambulance-wl")

    if not config.collection:
        changes["collection"] = environ.get("AMBULANCE_API_MONGODB_COLLECTION", "ambulance")

    if config.timeout == 0:
        text = environ.get("AMBULANCE_API_MONGODB_TIMEOUT_SECONDS", "10")
        seconds = _parse_int(text)
        if seconds is None:
            log.warning("Invalid timeout value: %s", text)
            changes["timeout"] = DEFAULT_TIMEOUT_SECONDS
        else:
            changes["timeout"] = float(seconds)

    return replace(config, **changes)


ClientFactory = Callable[[str, float], Any]


def _default_client_factory(uri: str, timeout: float) -> Any:
    selection_ms = int(timeout * 1000) if timeout > 0 else None
    return pymongo.MongoClient(
        uri,
        connectTimeoutMS=int(CONNECT_TIMEOUT_SECONDS * 1000),
        serverSelectionTimeoutMS=selection_ms,
    )


class MongoService:
    """Document store kept in one MongoDB collection, connected lazily."""

    def __init__(
        self,
        config: MongoServiceConfig | None = None,
        client_factory: ClientFactory | None = None,
    ) -> None:
        self.config = resolve_config(config, os.environ)
        self._client_factory = client_factory or _default_client_factory
        self._client: Any = None
        self._lock = threading.Lock()
        log.info(
            "MongoDB config: //%s@%s:%s/%s/%s",
            self.config.user_name,
            self.config.server_host,
            self.config.server_port,
            self.config.db_name,
            self.config.collection,
        )

    def __enter__(self) -> MongoService:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.disconnect()

    def _connect(self) -> Any:
        client = self._client
        if client is not None:
            return client
        with self._lock:
            if self._client is not None:
                return self._client
            cfg = self.config
            uri = f"mongodb://{cfg.server_host}:{cfg.server_port}"
            log.info("Using URI: %s", uri)
            if cfg.user_name:
                uri = (
                    f"mongodb://{quote_plus(cfg.user_name)}:{quote_plus(cfg.password)}"
                    f"@{cfg.server_host}:{cfg.server_port}"
                )
            self._client = self._client_factory(uri, cfg.timeout)
            return self._client

    def _collection(self) -> Any:
        return self._connect()[self.config.db_name][self.config.collection]

    def _deadline(self) -> Any:
        return pymongo.timeout(self.config.timeout if self.config.timeout > 0 else None)

    def create_document(self, document_id: str, document: Mapping[str, Any]) -> None:
        """Insert a document; raise ConflictError if the id is taken."""
        with self._deadline():
            collection = self._collection()
            if collection.find_one({"id": document_id}) is not None:
                raise ConflictError()
            collection.insert_one(dict(document))

    def find_document(self, document_id: str) -> dict[str, Any]:
        """Return the document with the id; raise NotFoundError if absent."""
        with self._deadline():
            found = self._collection().find_one({"id": document_id})
        if found is None:
            raise NotFoundError()
        return {key: value for key, value in found.items() if key != "_id"}

    def update_document(self, document_id: str, document: Mapping[str, Any]) -> None:
        """Replace the document with the id; raise NotFoundError if absent."""
        with self._deadline():
            collection = self._collection()
            if collection.find_one({"id": document_id}) is None:
                raise NotFoundError()
            collection.replace_one({"id": document_id}, dict(document))

    def delete_document(self, document_id: str) -> None:
        """Remove the document with the id; raise NotFoundError if absent."""
        with self._deadline():
            collection = self._collection()
            if collection.find_one({"id": document_id}) is None:
                raise NotFoundError()
            collection.delete_one({"id": document_id})

    def disconnect(self) -> None:
        """Close the client, if one is open."""
        if self._client is None:
            return
        with self._lock:
            client, self._client = self._client, None
            if client is not None:
                client.close()