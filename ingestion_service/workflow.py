"""
workflow.py — Core Ingestion Logic for Customer and Order Data

This module contains the request pipeline behind the ingestion endpoints.
Every call is a single synchronous operation without shared state between requests.

Workflow Overview:
1. Parse the raw request body as JSON
2. Validate the payload against its schema (see validation.py)
3. Customers only: upsert the canonical record into the document store
4. Translate the outcome into a deterministic HTTP status and response body

Malformed JSON and validation failures are normal outcomes and are reported to the
caller in detail. Storage and unexpected failures are logged and answered with a
generic message that does not expose internals.
"""

import enum
import json
import logging
import math
from dataclasses import dataclass
from typing import Any, Dict

from .clients import CustomerRepository, StorageError
from .validation import validate_customer, validate_order

log = logging.getLogger(__name__)

INVALID_PAYLOAD_MESSAGE = "Invalid request payload."

CUSTOMER_INVALID_JSON_MESSAGE = "Invalid JSON payload. Please ensure the request body is correctly formatted JSON."
CUSTOMER_STORAGE_ERROR_MESSAGE = "Database operation failed. Please check server logs."
CUSTOMER_INTERNAL_ERROR_MESSAGE = "An unexpected error occurred during request processing. Please check server logs."

ORDER_INVALID_JSON_MESSAGE = "Invalid JSON payload."
ORDER_INTERNAL_ERROR_MESSAGE = "Internal server error."


class IngestionOutcome(str, enum.Enum):
    ACCEPTED = "accepted"
    MALFORMED = "malformed"
    INVALID = "invalid"
    STORAGE_FAILURE = "storage_failure"
    INTERNAL_FAILURE = "internal_failure"


_STATUS_CODES = {
    IngestionOutcome.ACCEPTED: 200,
    IngestionOutcome.MALFORMED: 400,
    IngestionOutcome.INVALID: 400,
    IngestionOutcome.STORAGE_FAILURE: 500,
    IngestionOutcome.INTERNAL_FAILURE: 500,
}


@dataclass(frozen=True)
class IngestionResult:
    """
    Outcome of one ingestion request.

    Attributes:
        kind (IngestionOutcome): What happened.
        body (dict): JSON response body for the caller.
    """
    kind: IngestionOutcome
    body: Dict[str, Any]

    @property
    def status_code(self) -> int:
        return _STATUS_CODES[self.kind]


def internal_failure(message: str) -> IngestionResult:
    return IngestionResult(IngestionOutcome.INTERNAL_FAILURE, {"message": message})


def _reject_constant(name: str):
    # NaN/Infinity sind kein gültiges JSON
    raise ValueError(f"Invalid JSON constant: {name}")


def _parse_finite_float(literal: str) -> float:
    value = float(literal)
    # z.B. 1e400 wird sonst zu inf
    if not math.isfinite(value):
        raise ValueError(f"Number out of range: {literal}")
    return value


def parse_json(body: bytes) -> Any:
    """
    Parses a request body as JSON.

    Raises:
        ValueError: If the body is not valid UTF-8 encoded JSON or contains a
            number that does not fit into a finite float.
    """
    return json.loads(body, parse_constant=_reject_constant, parse_float=_parse_finite_float)


def ingest_customer(body: bytes, repository: CustomerRepository) -> IngestionResult:
    """
    Validates a customer payload and saves it to the document store.

    Args:
        body (bytes): Raw request body.
        repository (CustomerRepository): Target of the upsert.

    Returns:
        IngestionResult: ACCEPTED (200) with the canonical record, MALFORMED or
        INVALID (400), STORAGE_FAILURE or INTERNAL_FAILURE (500).
    """
    try:
        try:
            data = parse_json(body)
        except ValueError as e:
            log.warning(f"[Customer] Ungültiges JSON erhalten: {e}")
            return IngestionResult(IngestionOutcome.MALFORMED, {"message": CUSTOMER_INVALID_JSON_MESSAGE})

        outcome = validate_customer(data)
        if not outcome.ok:
            errors = [error.model_dump() for error in outcome.errors]
            log.info(f"[Customer] Validierungsfehler: {errors}")
            return IngestionResult(
                IngestionOutcome.INVALID,
                {"message": INVALID_PAYLOAD_MESSAGE, "errors": errors}
            )

        customer = outcome.record
        log_prefix = f"[Customer: {customer.id}]"
        log.info(f"{log_prefix} Kundendaten empfangen und validiert.")

        try:
            repository.upsert(customer)
        except StorageError as e:
            # Details nur ins Log, nicht an den Aufrufer
            log.error(f"{log_prefix} Speichern fehlgeschlagen ({e.kind}): {e}")
            return IngestionResult(IngestionOutcome.STORAGE_FAILURE, {"message": CUSTOMER_STORAGE_ERROR_MESSAGE})

        return IngestionResult(
            IngestionOutcome.ACCEPTED,
            {
                "message": f"Customer data received and saved for customer ID {customer.id}.",
                "data": customer.to_document(),
            }
        )

    except Exception as e:
        log.critical(f"[Customer] Unbekannter Fehler bei der Annahme: {e}", exc_info=True)
        return internal_failure(CUSTOMER_INTERNAL_ERROR_MESSAGE)


def ingest_order(body: bytes) -> IngestionResult:
    """
    Validates an order payload and echoes it back.

    Orders are not persisted yet; a valid order is only logged and returned.

    Args:
        body (bytes): Raw request body.

    Returns:
        IngestionResult: ACCEPTED (200) with the canonical record, MALFORMED or
        INVALID (400), INTERNAL_FAILURE (500).
    """
    try:
        try:
            data = parse_json(body)
        except ValueError as e:
            log.warning(f"[Order] Ungültiges JSON erhalten: {e}")
            return IngestionResult(IngestionOutcome.MALFORMED, {"message": ORDER_INVALID_JSON_MESSAGE})

        outcome = validate_order(data)
        if not outcome.ok:
            errors = [error.model_dump() for error in outcome.errors]
            log.info(f"[Order] Validierungsfehler: {errors}")
            return IngestionResult(
                IngestionOutcome.INVALID,
                {"message": INVALID_PAYLOAD_MESSAGE, "errors": errors}
            )

        order = outcome.record
        document = order.to_document()
        log.info(f"[Order: {order.id}] Bestelldaten empfangen: {document}")

        return IngestionResult(
            IngestionOutcome.ACCEPTED,
            {"message": f"Order data received for order ID {order.id}.", "data": document}
        )

    except Exception as e:
        log.critical(f"[Order] Unbekannter Fehler bei der Annahme: {e}", exc_info=True)
        return internal_failure(ORDER_INTERNAL_ERROR_MESSAGE)
