"""
This module provides the document store clients used by the ingestion service:
- Firestore (REST API via httpx)
- In-memory store (local runs and tests)
- CustomerRepository, which writes canonical customer records into a store
Each client encapsulates its protocol logic and error translation. Storage failures
are raised as StorageError and never retried here.
"""

import copy
import logging
import os
from typing import Any, Dict, Optional, Protocol
from urllib.parse import quote

import httpx

from .models import CustomerIngestionPayload

# Service-Adressen (normalerweise aus Env Vars)
DOCUMENT_STORE_BACKEND = os.environ.get("DOCUMENT_STORE_BACKEND", "memory")
FIRESTORE_PROJECT_ID = os.environ.get("FIRESTORE_PROJECT_ID", "marketing-dashboard")
FIRESTORE_DATABASE = os.environ.get("FIRESTORE_DATABASE", "(default)")
FIRESTORE_BASE_URL = os.environ.get("FIRESTORE_BASE_URL", "https://firestore.googleapis.com/v1")
FIRESTORE_EMULATOR_HOST = os.environ.get("FIRESTORE_EMULATOR_HOST")
FIRESTORE_ACCESS_TOKEN = os.environ.get("FIRESTORE_ACCESS_TOKEN")
FIRESTORE_TIMEOUT = float(os.environ.get("FIRESTORE_TIMEOUT", "10.0"))

CUSTOMERS_COLLECTION = "customers"

log = logging.getLogger(__name__)


class StorageError(Exception):
    """
    Raised when a document store operation fails.

    Attributes:
        kind (str): One of CONNECTIVITY, PERMISSION or BACKEND.
    """
    CONNECTIVITY = "connectivity"
    PERMISSION = "permission"
    BACKEND = "backend"

    def __init__(self, kind: str, message: str):
        super().__init__(message)
        self.kind = kind


class DocumentStore(Protocol):
    """A key-value document store addressed by collection name and document id."""

    def set_document(self, collection: str, document_id: str, data: Dict[str, Any]) -> None:
        ...

    def get_document(self, collection: str, document_id: str) -> Optional[Dict[str, Any]]:
        ...


# --- In-Memory Store ---
class InMemoryDocumentStore:
    """
    Document store kept in process memory.
    Documents are deep-copied on write and read, so callers never share state with the store.
    """
    def __init__(self):
        self._collections: Dict[str, Dict[str, Dict[str, Any]]] = {}

    def set_document(self, collection: str, document_id: str, data: Dict[str, Any]) -> None:
        """Creates or fully replaces the document."""
        self._collections.setdefault(collection, {})[document_id] = copy.deepcopy(data)

    def get_document(self, collection: str, document_id: str) -> Optional[Dict[str, Any]]:
        document = self._collections.get(collection, {}).get(document_id)
        return copy.deepcopy(document) if document is not None else None

    def count(self, collection: str) -> int:
        return len(self._collections.get(collection, {}))


# --- Firestore Value Encoding ---
def encode_value(value: Any) -> Dict[str, Any]:
    """
    Encodes a JSON-compatible Python value as a Firestore typed value.

    Args:
        value (Any): None, bool, int, float, str, list or dict (nested freely).

    Returns:
        dict: The Firestore REST representation, e.g. {"stringValue": "abc"}.

    Raises:
        TypeError: If the value has no Firestore representation.
    """
    if value is None:
        return {"nullValue": None}
    # bool ist eine Unterklasse von int
    if isinstance(value, bool):
        return {"booleanValue": value}
    if isinstance(value, int):
        return {"integerValue": str(value)}
    if isinstance(value, float):
        return {"doubleValue": value}
    if isinstance(value, str):
        return {"stringValue": value}
    if isinstance(value, list):
        return {"arrayValue": {"values": [encode_value(item) for item in value]}}
    if isinstance(value, dict):
        return {"mapValue": {"fields": encode_fields(value)}}
    raise TypeError(f"Unsupported type for Firestore encoding: {type(value).__name__}")


def encode_fields(data: Dict[str, Any]) -> Dict[str, Any]:
    return {key: encode_value(value) for key, value in data.items()}


def decode_value(value: Dict[str, Any]) -> Any:
    """
    Decodes a Firestore typed value back into a plain Python value.

    Raises:
        ValueError: If the value type is not one written by encode_value().
    """
    if "nullValue" in value:
        return None
    if "booleanValue" in value:
        return value["booleanValue"]
    if "integerValue" in value:
        return int(value["integerValue"])
    if "doubleValue" in value:
        return float(value["doubleValue"])
    if "stringValue" in value:
        return value["stringValue"]
    if "arrayValue" in value:
        return [decode_value(item) for item in value["arrayValue"].get("values", [])]
    if "mapValue" in value:
        return decode_fields(value["mapValue"].get("fields", {}))
    raise ValueError(f"Unsupported Firestore value: {value}")


def decode_fields(fields: Dict[str, Any]) -> Dict[str, Any]:
    return {key: decode_value(value) for key, value in fields.items()}


# --- Firestore Client (REST) ---
class FirestoreClient:
    """
    Client for Cloud Firestore (REST API v1).
    Writes documents with full-replace semantics and translates transport and HTTP
    failures into StorageError.
    """
    def __init__(
            self,
            project_id: str = FIRESTORE_PROJECT_ID,
            database: str = FIRESTORE_DATABASE,
            client: Optional[httpx.Client] = None
    ):
        """
        Initializes the HTTP client with proper timeout configuration.

        Args:
            project_id (str): Google Cloud project that owns the database.
            database (str): Firestore database id.
            client (httpx.Client | None): Preconfigured client, e.g. for the emulator or tests.
                When omitted, a client for the configured base URL is created.
        """
        self.project_id = project_id
        self.database = database
        if client is None:
            base_url = FIRESTORE_BASE_URL
            if FIRESTORE_EMULATOR_HOST:
                base_url = f"http://{FIRESTORE_EMULATOR_HOST}/v1"
            headers = {}
            if FIRESTORE_ACCESS_TOKEN:
                headers["Authorization"] = f"Bearer {FIRESTORE_ACCESS_TOKEN}"
            client = httpx.Client(base_url=base_url, headers=headers, timeout=httpx.Timeout(FIRESTORE_TIMEOUT))
        self.client = client

    def close(self):
        """Closes the HTTP client session."""
        self.client.close()

    def _document_path(self, collection: str, document_id: str) -> str:
        return (
            f"/projects/{self.project_id}/databases/{self.database}/documents/"
            f"{quote(collection, safe='')}/{quote(document_id, safe='')}"
        )

    def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            response = self.client.request(method, path, **kwargs)
        except httpx.TransportError as e:
            log.error(f"Firestore nicht erreichbar ({method} {path}): {e}")
            raise StorageError(StorageError.CONNECTIVITY, f"Firestore unreachable: {e}") from e
        return response

    @staticmethod
    def _raise_for_status(response: httpx.Response):
        try:
            response.raise_for_status()  # Löst HTTPStatusError bei 4xx/5xx aus
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            if status in (401, 403):
                log.error(f"Firestore verweigert den Zugriff (HTTP {status}).")
                raise StorageError(StorageError.PERMISSION, f"Firestore denied access (HTTP {status})") from e
            log.error(f"HTTP-Fehler von Firestore: {e}")
            raise StorageError(StorageError.BACKEND, f"Firestore request failed (HTTP {status})") from e

    def set_document(self, collection: str, document_id: str, data: Dict[str, Any]) -> None:
        """
        Creates or fully replaces a document.

        The PATCH is sent without an update mask, so fields missing from `data` are
        removed from an existing document.

        Args:
            collection (str): Collection name, e.g. "customers".
            document_id (str): Document key.
            data (dict): JSON-compatible document body.

        Raises:
            StorageError: If Firestore is unreachable, denies access or fails.
        """
        path = self._document_path(collection, document_id)
        response = self._request("PATCH", path, json={"fields": encode_fields(data)})
        self._raise_for_status(response)

    def get_document(self, collection: str, document_id: str) -> Optional[Dict[str, Any]]:
        """
        Reads a document.

        Returns:
            dict | None: The decoded document body, or None if it does not exist.

        Raises:
            StorageError: If Firestore is unreachable, denies access, fails or returns
                an unreadable document.
        """
        path = self._document_path(collection, document_id)
        response = self._request("GET", path)
        if response.status_code == 404:
            return None
        self._raise_for_status(response)
        try:
            return decode_fields(response.json().get("fields", {}))
        except ValueError as e:
            log.error(f"Ungültige Antwort von Firestore für {path}: {e}")
            raise StorageError(StorageError.BACKEND, "Firestore returned an unreadable document") from e


def create_document_store() -> DocumentStore:
    """
    Creates the document store selected by DOCUMENT_STORE_BACKEND ("firestore" or "memory").

    Raises:
        ValueError: If the backend name is unknown.
    """
    if DOCUMENT_STORE_BACKEND == "firestore":
        log.info(f"Verwende Firestore (Projekt: {FIRESTORE_PROJECT_ID}, Datenbank: {FIRESTORE_DATABASE}).")
        return FirestoreClient()
    if DOCUMENT_STORE_BACKEND == "memory":
        log.warning("Verwende In-Memory Document Store. Daten gehen beim Neustart verloren.")
        return InMemoryDocumentStore()
    raise ValueError(f"Unknown DOCUMENT_STORE_BACKEND: {DOCUMENT_STORE_BACKEND}")


# --- Customer Repository ---
class CustomerRepository:
    """
    Persists canonical customer records in the `customers` collection.
    The customer's external id is the document key; a repeated write replaces the document (last write wins).
    """
    def __init__(self, store: DocumentStore):
        self.store = store

    def upsert(self, customer: CustomerIngestionPayload) -> None:
        """
        Writes the customer, including passthrough fields, under its id.

        Raises:
            StorageError: Propagated unchanged from the document store.
        """
        self.store.set_document(CUSTOMERS_COLLECTION, customer.id, customer.to_document())
        log.info(f"[Customer: {customer.id}] Kundendaten im Document Store gespeichert.")

    def get(self, customer_id: str) -> Optional[Dict[str, Any]]:
        return self.store.get_document(CUSTOMERS_COLLECTION, customer_id)
