"""
models.py — Data Models for Customer and Order Ingestion

This module defines the schema contracts for payloads pushed by third-party systems
into the ingestion endpoints. It uses Pydantic models to validate the structure,
types and constraints of the incoming data.

The models are deliberately strict: values are never coerced (e.g. "10" is not
accepted as a number, 1.5 is not accepted as an integer). Unknown top-level keys
are kept on the record (``extra="allow"``) and written back on output.

Models:
    - Address: Shared postal address shape (all fields optional).
    - CustomerIngestionPayload: A customer record pushed by an external system.
    - OrderItem: A single line item of an order.
    - OrderIngestionPayload: An order record pushed by an external system.
    - FieldError: A single field-level validation error returned to the caller.
"""

import re
from datetime import datetime
from typing import Annotated, Any, Dict, List, Literal, Optional

from email_validator import EmailNotValidError, validate_email
from pydantic import (
    AfterValidator,
    AllowInfNan,
    BaseModel,
    ConfigDict,
    Field,
    Strict,
    StrictInt,
    StrictStr,
)
from pydantic_core import PydanticCustomError

# Full date-time required; timezone suffix optional
_ISO_TIMESTAMP = re.compile(
    r"(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2}):(\d{2})(\.\d+)?(Z|[+-](\d{2}):(\d{2}))?",
    re.ASCII,
)


def _check_iso_timestamp(value: str) -> str:
    """
    Ensures that a string is an ISO-8601 date-time such as "2024-07-21T14:35:00Z".

    Date-only strings and Unix timestamps are rejected. The original string is
    returned unchanged so the record keeps the caller's formatting.

    Raises:
        PydanticCustomError: If the string is not a valid ISO-8601 date-time.
    """
    match = _ISO_TIMESTAMP.fullmatch(value)
    if match is not None:
        year, month, day, hour, minute, second = (int(part) for part in match.group(1, 2, 3, 4, 5, 6))
        offset_hours, offset_minutes = match.group(9, 10)
        try:
            datetime(year, month, day, hour, minute, second)
        except ValueError:
            match = None
        if offset_hours is not None and (int(offset_hours) > 23 or int(offset_minutes) > 59):
            match = None
    if match is None:
        raise PydanticCustomError(
            "invalid_datetime",
            "Invalid datetime, expected an ISO 8601 timestamp",
        )
    return value


def _check_email(value: str) -> str:
    """
    Ensures that a string has the shape of an email address.

    No DNS lookup is made and special-use domains (e.g. ".local") are allowed.
    The address is returned as sent, without normalisation.

    Raises:
        PydanticCustomError: If email-validator rejects the address.
    """
    try:
        validate_email(value, check_deliverability=False, globally_deliverable=False)
    except EmailNotValidError as e:
        raise PydanticCustomError(
            "value_error",
            "value is not a valid email address: {reason}",
            {"reason": str(e)},
        ) from None
    return value


IsoTimestamp = Annotated[StrictStr, AfterValidator(_check_iso_timestamp)]
EmailAddress = Annotated[StrictStr, AfterValidator(_check_email)]
# Integers are accepted, numeric strings and inf/nan are not
Amount = Annotated[float, Strict(), AllowInfNan(False)]

OrderStatus = Literal["pending", "processing", "shipped", "delivered", "cancelled", "refunded"]


class Address(BaseModel):
    """
    Represents a postal address. Every field is optional.

    Attributes:
        street (str | None): Street and house number.
        city (str | None): City name.
        state (str | None): State or region.
        zipCode (str | None): Postal code.
        country (str | None): Country name or code.
    """
    model_config = ConfigDict(frozen=True)

    street: Optional[StrictStr] = None
    city: Optional[StrictStr] = None
    state: Optional[StrictStr] = None
    zipCode: Optional[StrictStr] = None
    country: Optional[StrictStr] = None


class IngestionRecord(BaseModel):
    """
    Base class for canonical records.

    Declared fields are regular attributes; undeclared keys from the payload are
    kept in ``model_extra`` and merged back by :meth:`to_document`.
    """
    model_config = ConfigDict(extra="allow", frozen=True)

    def to_document(self) -> Dict[str, Any]:
        """
        Returns the JSON-compatible representation of the record.

        Only fields that were present in the payload are included, passthrough
        fields are included verbatim.
        """
        return self.model_dump(mode="json", exclude_unset=True)


class CustomerIngestionPayload(IngestionRecord):
    """
    Represents a customer pushed by an external system.

    Attributes:
        id (str): External unique ID for the customer. Used as the document key.
        name (str): Customer's full name.
        email (str): Customer's email address.
        phone (str | None): Customer's phone number.
        address (Address | None): Customer's postal address.
        tags (List[str] | None): Tags associated with the customer.
        registrationDate (str | None): Registration date (ISO 8601).
        lastLoginDate (str | None): Last login date (ISO 8601).
    """
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
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
        }
    )

    id: StrictStr = Field(..., min_length=1, description="External unique ID for the customer.")
    name: StrictStr
    email: EmailAddress = Field(..., json_schema_extra={"format": "email"})
    phone: Optional[StrictStr] = None
    address: Optional[Address] = None
    tags: Optional[List[StrictStr]] = None
    registrationDate: Optional[IsoTimestamp] = None
    lastLoginDate: Optional[IsoTimestamp] = None


class OrderItem(BaseModel):
    """
    Represents a single line item in an order.

    No cross-field check is made: ``totalPrice`` is not compared with
    ``quantity * unitPrice``.

    Attributes:
        productId (str): Product identifier.
        productName (str): Product display name.
        quantity (int): Ordered quantity. Must be at least 1.
        unitPrice (float): Price per unit. Must not be negative.
        totalPrice (float): Line total. Must not be negative.
    """
    model_config = ConfigDict(frozen=True)

    productId: StrictStr
    productName: StrictStr
    quantity: StrictInt = Field(..., ge=1)
    unitPrice: Amount = Field(..., ge=0)
    totalPrice: Amount = Field(..., ge=0)


class OrderIngestionPayload(IngestionRecord):
    """
    Represents an order pushed by an external system.

    Attributes:
        id (str): External unique ID for the order.
        customerId (str): ID of the customer who placed the order.
        orderDate (str): Date and time the order was placed (ISO 8601).
        items (List[OrderItem]): Line items, at least one.
        totalAmount (float): Total amount of the order. Must not be negative.
        currency (str): Currency code with exactly three characters (e.g. USD, INR).
        status (str | None): One of pending, processing, shipped, delivered, cancelled, refunded.
        shippingAddress (Address | None): Delivery address.
        paymentMethod (str | None): Payment method label.
        discountAmount (float | None): Discount applied to the order.
        shippingCost (float | None): Shipping cost of the order.
    """
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "order_67890",
                "customerId": "cust_12345",
                "orderDate": "2024-07-21T14:35:00Z",
                "items": [
                    {"productId": "prod_ABC", "productName": "Awesome T-Shirt",
                     "quantity": 2, "unitPrice": 25.00, "totalPrice": 50.00},
                    {"productId": "prod_XYZ", "productName": "Cool Hat",
                     "quantity": 1, "unitPrice": 15.75, "totalPrice": 15.75},
                ],
                "totalAmount": 65.75,
                "currency": "USD",
                "status": "processing",
                "shippingAddress": {
                    "street": "456 Oak Ave",
                    "city": "Otherville",
                    "state": "TX",
                    "zipCode": "75001",
                    "country": "USA",
                },
                "paymentMethod": "Credit Card",
                "custom_order_field": "some_value",
            }
        }
    )

    id: StrictStr
    customerId: StrictStr
    orderDate: IsoTimestamp
    items: List[OrderItem] = Field(..., min_length=1)
    totalAmount: Amount = Field(..., ge=0)
    currency: StrictStr = Field(..., min_length=3, max_length=3)
    status: Optional[OrderStatus] = None
    shippingAddress: Optional[Address] = None
    paymentMethod: Optional[StrictStr] = None
    discountAmount: Optional[Amount] = None
    shippingCost: Optional[Amount] = None


class FieldError(BaseModel):
    """
    A single field-level validation error.

    Attributes:
        path (List[str]): Location of the offending field, e.g. ["items", "0", "quantity"].
        message (str): Human-readable reason.
        code (str): Machine-readable identifier of the violated rule (e.g. "missing").
    """
    path: List[str]
    message: str
    code: str


class CustomerIngestedResponse(BaseModel):
    """Response body of a successful customer ingestion."""
    message: str
    data: CustomerIngestionPayload


class OrderIngestedResponse(BaseModel):
    """Response body of a successful order ingestion."""
    message: str
    data: OrderIngestionPayload


class ErrorResponse(BaseModel):
    """
    Response body of a failed ingestion.

    Attributes:
        message (str): Generic description of the failure.
        errors (List[FieldError] | None): Field errors, only present for invalid payloads.
    """
    message: str
    errors: Optional[List[FieldError]] = None
