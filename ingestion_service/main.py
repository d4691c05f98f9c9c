"""
main.py — FastAPI Entry Point for the Ingestion Service

This module provides the REST API through which third-party systems push customer
and order data into the marketing dashboard.

Responsibilities:
    • Accept customer data, validate it and save it to the document store
    • Accept order data, validate it and echo it back (not persisted yet)
    • Answer every request with a deterministic status code and JSON body
    • Provide system health information

The endpoints read the raw request body themselves instead of declaring a FastAPI
body model, so malformed JSON and schema violations are answered in the service's
own response format.
"""

from fastapi import Depends, FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from .clients import CustomerRepository, create_document_store
from .logging_config import setup_logging, get_logger
from .models import CustomerIngestedResponse, ErrorResponse, OrderIngestedResponse
from .workflow import (
    CUSTOMER_INTERNAL_ERROR_MESSAGE,
    ORDER_INTERNAL_ERROR_MESSAGE,
    IngestionResult,
    ingest_customer,
    ingest_order,
    internal_failure,
)

# Initialization
# Configure logging and initialize FastAPI app
setup_logging()
log = get_logger(__name__)
app = FastAPI(title="Marketing Dashboard Ingestion API", separate_input_output_schemas=False)

_customer_repository = None


def get_customer_repository() -> CustomerRepository:
    """
    Returns the process-wide CustomerRepository, creating its document store on first use.
    """
    global _customer_repository
    if _customer_repository is None:
        _customer_repository = CustomerRepository(create_document_store())
    return _customer_repository


# Startup Event: Connect Document Store
@app.on_event("startup")
def on_startup():
    """
    FastAPI startup event handler.

    Creates the document store client once, so the first ingestion request does
    not pay for it.
    """
    log.info("Ingestion-Service startet...")
    get_customer_repository()
    log.info("Document Store bereit.")


def _request_body_schema(name: str) -> dict:
    return {
        "requestBody": {
            "required": True,
            "content": {"application/json": {"schema": {"$ref": f"#/components/schemas/{name}"}}},
        }
    }


def _to_response(result: IngestionResult, internal_error_message: str) -> JSONResponse:
    """
    Renders an IngestionResult as JSONResponse.

    A body that cannot be rendered as JSON becomes a generic 500 response.
    """
    try:
        return JSONResponse(status_code=result.status_code, content=result.body)
    except ValueError as e:
        log.critical(f"Antwort konnte nicht serialisiert werden: {e}", exc_info=True)
        failure = internal_failure(internal_error_message)
        return JSONResponse(status_code=failure.status_code, content=failure.body)


# API Endpoint: External System → Customers
@app.post(
    "/ingest/customers",
    summary="Ingest customer data",
    responses={
        200: {"model": CustomerIngestedResponse, "description": "Customer data received and saved successfully."},
        400: {"model": ErrorResponse, "description": "Invalid JSON or invalid request payload."},
        500: {"model": ErrorResponse, "description": "Internal server error or database error."},
    },
    openapi_extra=_request_body_schema("CustomerIngestionPayload"),
)
async def submit_customer(
        request: Request,
        repository: CustomerRepository = Depends(get_customer_repository)
):
    """
    Accepts customer data, validates it and saves it to the `customers` collection.

    The customer's `id` is used as the document key. Sending the same id again
    replaces the stored document.

    Returns:
        JSONResponse:
            - 200: {"message", "data"} with the canonical customer record.
            - 400: {"message"} for malformed JSON, {"message", "errors"} for invalid payloads.
            - 500: {"message"} with a generic error text.
    """
    log.info("--- CUSTOMER INGESTION /ingest/customers ---")
    log.debug(f"Request: {request.method} {request.url} Headers: {dict(request.headers)}")

    try:
        body = await request.body()
    except Exception as e:
        log.critical(f"[Customer] Request Body konnte nicht gelesen werden: {e}", exc_info=True)
        return _to_response(internal_failure(CUSTOMER_INTERNAL_ERROR_MESSAGE), CUSTOMER_INTERNAL_ERROR_MESSAGE)

    result = await run_in_threadpool(ingest_customer, body, repository)
    log.info(f"[Customer] Antwort mit Status {result.status_code} ({result.kind.value}).")
    return _to_response(result, CUSTOMER_INTERNAL_ERROR_MESSAGE)


# API Endpoint: External System → Orders
@app.post(
    "/ingest/orders",
    summary="Ingest order data",
    responses={
        200: {"model": OrderIngestedResponse, "description": "Order data received successfully."},
        400: {"model": ErrorResponse, "description": "Invalid JSON or invalid request payload."},
        500: {"model": ErrorResponse, "description": "Internal server error."},
    },
    openapi_extra=_request_body_schema("OrderIngestionPayload"),
)
async def submit_order(request: Request):
    """
    Accepts order data, validates it and (currently) returns it without saving.

    Returns:
        JSONResponse:
            - 200: {"message", "data"} with the canonical order record.
            - 400: {"message"} for malformed JSON, {"message", "errors"} for invalid payloads.
            - 500: {"message"} with a generic error text.
    """
    try:
        body = await request.body()
    except Exception as e:
        log.critical(f"[Order] Request Body konnte nicht gelesen werden: {e}", exc_info=True)
        return _to_response(internal_failure(ORDER_INTERNAL_ERROR_MESSAGE), ORDER_INTERNAL_ERROR_MESSAGE)

    result = await run_in_threadpool(ingest_order, body)
    log.info(f"[Order] Antwort mit Status {result.status_code} ({result.kind.value}).")
    return _to_response(result, ORDER_INTERNAL_ERROR_MESSAGE)


# Health Check Endpoint
@app.get("/health")
def health_check():
    """
    Simple health check endpoint.

    Can be used by monitoring systems or container orchestrators
    (e.g., Docker, Kubernetes) to verify that the service is running.

    Returns:
        dict: A basic JSON object indicating service availability.
    """
    return {"status": "ok"}
