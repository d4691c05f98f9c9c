"""Shared test fixtures for the ingestion service test suite."""

import os

# Vor dem Import von main setzen: keine Log-Datei, In-Memory Store
os.environ.setdefault("INGESTION_LOG_FILE", "")
os.environ.setdefault("DOCUMENT_STORE_BACKEND", "memory")

from typing import Any, Dict

import pytest
from fastapi.testclient import TestClient

from ingestion_service.clients import CustomerRepository, FirestoreClient, InMemoryDocumentStore
from ingestion_service.main import app, get_customer_repository
from mock_services import mock_document_store


@pytest.fixture
def customer_payload() -> Dict[str, Any]:
    """A complete, valid customer payload including a passthrough field."""
    return {
        "id": "cust_12345",
        "name": "John Doe",
        "email": "john.doe@example.com",
        "phone": "555-123-4567",
        "address": {
            "street": "123 Main St",
            "city": "Anytown",
            "state": "CA",
            "zipCode": "90210",
            "country": "USA",
        },
        "tags": ["vip", "newsletter_subscriber"],
        "registrationDate": "2023-01-15T10:00:00Z",
        "lastLoginDate": "2024-07-20T15:30:00Z",
        "custom_field": "custom_value",
    }


@pytest.fixture
def order_payload() -> Dict[str, Any]:
    """A complete, valid order payload including a passthrough field."""
    return {
        "id": "order_67890",
        "customerId": "cust_12345",
        "orderDate": "2024-07-21T14:35:00Z",
        "items": [
            {"productId": "prod_ABC", "productName": "Awesome T-Shirt",
             "quantity": 2, "unitPrice": 25.0, "totalPrice": 50.0},
            {"productId": "prod_XYZ", "productName": "Cool Hat",
             "quantity": 1, "unitPrice": 15.75, "totalPrice": 15.75},
        ],
        "totalAmount": 65.75,
        "currency": "USD",
        "status": "processing",
        "shippingAddress": {"street": "456 Oak Ave", "city": "Otherville", "country": "USA"},
        "paymentMethod": "Credit Card",
        "custom_order_field": "some_value",
    }


@pytest.fixture
def store() -> InMemoryDocumentStore:
    """Empty in-memory document store."""
    return InMemoryDocumentStore()


@pytest.fixture
def repository(store: InMemoryDocumentStore) -> CustomerRepository:
    return CustomerRepository(store)


@pytest.fixture
def client(repository: CustomerRepository):
    """Test client for the ingestion API, backed by the in-memory store."""
    app.dependency_overrides[get_customer_repository] = lambda: repository
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def firestore() -> FirestoreClient:
    """FirestoreClient talking to the mock document store."""
    mock_document_store.DOCUMENTS.clear()
    http_client = TestClient(mock_document_store.app, base_url="http://testserver/v1")
    yield FirestoreClient(project_id="demo-project", client=http_client)
    mock_document_store.DOCUMENTS.clear()
