"""
validation.py — Schema Validation for Ingestion Payloads

Runs untrusted, already-parsed JSON values against the ingestion models and turns
the result into a ValidationOutcome: either the canonical record or the complete,
ordered list of field errors. Validation never raises and has no side effects.
"""

from dataclasses import dataclass, field
from typing import Any, List, Optional, Type

from pydantic import ValidationError

from .models import CustomerIngestionPayload, FieldError, IngestionRecord, OrderIngestionPayload


@dataclass(frozen=True)
class ValidationOutcome:
    """
    Result of validating a payload.

    Exactly one of ``record`` and ``errors`` is meaningful: a successful outcome
    carries the canonical record and no errors, a failed one carries at least one
    error and no record.
    """
    record: Optional[IngestionRecord] = None
    errors: List[FieldError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.record is not None


def to_field_errors(exc: ValidationError) -> List[FieldError]:
    """
    Converts a Pydantic ValidationError into FieldError objects.

    Args:
        exc (ValidationError): The error raised by model validation.

    Returns:
        List[FieldError]: One entry per violated rule, in the order Pydantic reports them.
    """
    return [
        FieldError(
            path=[str(part) for part in err["loc"]],
            message=err["msg"],
            code=err["type"],
        )
        for err in exc.errors(include_url=False)
    ]


def _validate(schema: Type[IngestionRecord], data: Any) -> ValidationOutcome:
    try:
        record = schema.model_validate(data)
    except ValidationError as e:
        return ValidationOutcome(errors=to_field_errors(e))
    return ValidationOutcome(record=record)


def validate_customer(data: Any) -> ValidationOutcome:
    """Validates a parsed customer payload against CustomerIngestionPayload."""
    return _validate(CustomerIngestionPayload, data)


def validate_order(data: Any) -> ValidationOutcome:
    """Validates a parsed order payload against OrderIngestionPayload."""
    return _validate(OrderIngestionPayload, data)
