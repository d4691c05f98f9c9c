"""
mock_document_store.py — Mock Implementation of the Firestore REST API

This module provides a simulated document store for testing the ingestion service.
It exposes a small FastAPI application that mimics the subset of the Firestore REST
API (v1) used by `FirestoreClient`: writing a whole document and reading it back.

Simulation Scenarios:
    • Successful write (create or full replace)
    • Permission denied (HTTP 403) for document ids starting with "perm_denied_"
    • Backend unavailable (HTTP 503) for document ids starting with "unavailable_"

Endpoints:
    PATCH /v1/projects/{project}/databases/{database}/documents/{collection}/{document_id}
    GET   /v1/projects/{project}/databases/{database}/documents/{collection}/{document_id}

Port:
    Default: 8080 (HTTP), usable through FIRESTORE_EMULATOR_HOST=localhost:8080
"""

from fastapi import Body, FastAPI, HTTPException
import logging
import time

app = FastAPI(title="Mock Document Store")
logging.basicConfig(level=logging.INFO)

DOCUMENT_PATH = "/v1/projects/{project}/databases/{database}/documents/{collection}/{document_id}"

# (collection, document_id) -> Firestore document resource
DOCUMENTS = {}


def _simulate_failures(document_id: str):
    """
    Raises the HTTP error selected by the document id prefix, if any.

    Raises:
        HTTPException(403): For ids starting with "perm_denied_".
        HTTPException(503): For ids starting with "unavailable_".
    """
    if document_id.startswith("perm_denied_"):
        logging.warning(f"[DS] Zugriff auf {document_id} verweigert.")
        raise HTTPException(
            status_code=403,
            detail={"code": 403, "status": "PERMISSION_DENIED", "message": "Missing or insufficient permissions."}
        )
    if document_id.startswith("unavailable_"):
        logging.error(f"[DS] Simuliere Ausfall für {document_id}.")
        raise HTTPException(
            status_code=503,
            detail={"code": 503, "status": "UNAVAILABLE", "message": "The service is currently unavailable."}
        )


@app.patch(DOCUMENT_PATH)
def write_document(project: str, database: str, collection: str, document_id: str, document: dict = Body(...)):
    """
    Creates or fully replaces a document.

    Like Firestore without an update mask, the stored fields are exactly the
    fields of the request; nothing is merged with the previous version.

    Args:
        project (str): Project id from the path.
        database (str): Database id from the path.
        collection (str): Collection name.
        document_id (str): Document key.
        document (dict): Request body in the form {"fields": {...}}.

    Returns:
        dict: The stored document resource (name, fields, createTime, updateTime).
    """
    _simulate_failures(document_id)

    now = time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime())
    previous = DOCUMENTS.get((collection, document_id))
    stored = {
        "name": f"projects/{project}/databases/{database}/documents/{collection}/{document_id}",
        "fields": document.get("fields", {}),
        "createTime": previous["createTime"] if previous else now,
        "updateTime": now,
    }
    DOCUMENTS[(collection, document_id)] = stored
    logging.info(f"[DS] Dokument {collection}/{document_id} geschrieben.")
    return stored


@app.get(DOCUMENT_PATH)
def read_document(project: str, database: str, collection: str, document_id: str):
    """
    Returns a stored document.

    Raises:
        HTTPException(404): If the document does not exist.
    """
    _simulate_failures(document_id)

    stored = DOCUMENTS.get((collection, document_id))
    if stored is None:
        raise HTTPException(
            status_code=404,
            detail={"code": 404, "status": "NOT_FOUND", "message": f"No document to get: {collection}/{document_id}"}
        )
    return stored


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8080)
