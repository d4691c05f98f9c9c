"""Unit tests for customer and order schema validation."""

import pytest

from ingestion_service.models import CustomerIngestionPayload, OrderIngestionPayload
from ingestion_service.validation import validate_customer, validate_order


def _paths(outcome):
    return [error.path for error in outcome.errors]


class TestCustomerValidation:
    """Tests for validate_customer()."""

    def test_valid_payload_yields_canonical_record(self, customer_payload) -> None:
        outcome = validate_customer(customer_payload)

        assert outcome.ok
        assert outcome.errors == []
        assert isinstance(outcome.record, CustomerIngestionPayload)
        assert outcome.record.to_document() == customer_payload

    def test_minimal_payload_keeps_only_given_fields(self) -> None:
        payload = {"id": "cust_1", "name": "A", "email": "a@example.com"}

        outcome = validate_customer(payload)

        assert outcome.ok
        assert outcome.record.phone is None
        assert outcome.record.to_document() == payload

    def test_passthrough_fields_are_preserved(self) -> None:
        payload = {
            "id": "cust_1", "name": "A", "email": "a@example.com",
            "loyalty": {"tier": "gold", "points": 120}, "source": "shopify",
        }

        outcome = validate_customer(payload)

        assert outcome.record.model_extra == {"loyalty": {"tier": "gold", "points": 120}, "source": "shopify"}
        assert outcome.record.to_document()["loyalty"] == {"tier": "gold", "points": 120}

    def test_missing_email_reports_single_error(self) -> None:
        outcome = validate_customer({"id": "cust_1", "name": "A"})

        assert not outcome.ok
        assert outcome.record is None
        assert _paths(outcome) == [["email"]]
        assert outcome.errors[0].code == "missing"

    def test_invalid_email_format(self) -> None:
        outcome = validate_customer({"id": "cust_1", "name": "A", "email": "not-an-email"})

        assert _paths(outcome) == [["email"]]
        assert outcome.errors[0].code == "value_error"

    def test_email_is_kept_as_sent(self) -> None:
        payload = {"id": "cust_1", "name": "A", "email": "John.Doe@EXAMPLE.COM"}

        outcome = validate_customer(payload)

        assert outcome.ok
        assert outcome.record.email == "John.Doe@EXAMPLE.COM"
        assert outcome.record.to_document() == payload

    @pytest.mark.parametrize("email", ["a@b.local", "dev@shop.test"])
    def test_special_use_domains_are_accepted(self, email) -> None:
        assert validate_customer({"id": "cust_1", "name": "A", "email": email}).ok

    @pytest.mark.parametrize("email", ["a@", "@example.com", "a b@example.com"])
    def test_malformed_email_is_rejected(self, email) -> None:
        outcome = validate_customer({"id": "cust_1", "name": "A", "email": email})

        assert _paths(outcome) == [["email"]]

    def test_registration_date_rejects_unix_timestamp(self) -> None:
        payload = {"id": "cust_1", "name": "A", "email": "a@example.com", "registrationDate": "1700000000"}

        outcome = validate_customer(payload)

        assert _paths(outcome) == [["registrationDate"]]
        assert outcome.errors[0].code == "invalid_datetime"

    def test_empty_id_is_rejected(self) -> None:
        outcome = validate_customer({"id": "", "name": "A", "email": "a@example.com"})

        assert _paths(outcome) == [["id"]]
        assert outcome.errors[0].code == "string_too_short"

    def test_all_errors_are_collected(self) -> None:
        outcome = validate_customer({})

        assert _paths(outcome) == [["id"], ["name"], ["email"]]

    def test_optional_fields_accept_null(self) -> None:
        payload = {
            "id": "cust_1", "name": "A", "email": "a@example.com",
            "phone": None, "address": None, "tags": None, "registrationDate": None,
        }

        assert validate_customer(payload).ok

    def test_nested_type_errors_carry_full_path(self) -> None:
        payload = {
            "id": "cust_1", "name": "A", "email": "a@example.com",
            "address": {"city": 42}, "tags": ["vip", 7],
        }

        outcome = validate_customer(payload)

        assert _paths(outcome) == [["address", "city"], ["tags", "1"]]
        assert [error.code for error in outcome.errors] == ["string_type", "string_type"]

    def test_invalid_timestamp(self) -> None:
        payload = {"id": "cust_1", "name": "A", "email": "a@example.com", "lastLoginDate": "yesterday"}

        outcome = validate_customer(payload)

        assert _paths(outcome) == [["lastLoginDate"]]
        assert outcome.errors[0].code == "invalid_datetime"

    def test_timestamp_keeps_original_string(self) -> None:
        payload = {"id": "cust_1", "name": "A", "email": "a@example.com",
                   "registrationDate": "2023-01-15T10:00:00+02:00"}

        outcome = validate_customer(payload)

        assert outcome.record.registrationDate == "2023-01-15T10:00:00+02:00"

    def test_number_is_not_coerced_to_string(self) -> None:
        outcome = validate_customer({"id": 123, "name": "A", "email": "a@example.com"})

        assert _paths(outcome) == [["id"]]
        assert outcome.errors[0].code == "string_type"

    @pytest.mark.parametrize("data", [[], "customer", 42, None])
    def test_non_object_input_is_rejected(self, data) -> None:
        outcome = validate_customer(data)

        assert not outcome.ok
        assert _paths(outcome) == [[]]


class TestOrderValidation:
    """Tests for validate_order()."""

    def test_valid_payload_yields_canonical_record(self, order_payload) -> None:
        outcome = validate_order(order_payload)

        assert outcome.ok
        assert isinstance(outcome.record, OrderIngestionPayload)
        assert outcome.record.to_document() == order_payload

    def test_integer_amounts_are_accepted(self) -> None:
        payload = {
            "id": "ord_1", "customerId": "cust_1", "orderDate": "2024-01-01T00:00:00Z",
            "items": [{"productId": "p1", "productName": "X", "quantity": 1, "unitPrice": 10, "totalPrice": 10}],
            "totalAmount": 10, "currency": "USD",
        }

        outcome = validate_order(payload)

        assert outcome.ok
        assert outcome.record.to_document() == payload

    def test_empty_items_violates_minimum_length(self, order_payload) -> None:
        order_payload["items"] = []

        outcome = validate_order(order_payload)

        assert _paths(outcome) == [["items"]]
        assert outcome.errors[0].code == "too_short"

    @pytest.mark.parametrize("currency, code", [("US", "string_too_short"), ("USDX", "string_too_long")])
    def test_currency_must_have_three_characters(self, order_payload, currency, code) -> None:
        order_payload["currency"] = currency

        outcome = validate_order(order_payload)

        assert _paths(outcome) == [["currency"]]
        assert outcome.errors[0].code == code

    def test_each_item_is_validated(self, order_payload) -> None:
        order_payload["items"][1]["quantity"] = 0
        order_payload["items"][1]["unitPrice"] = -1

        outcome = validate_order(order_payload)

        assert _paths(outcome) == [["items", "1", "quantity"], ["items", "1", "unitPrice"]]
        assert [error.code for error in outcome.errors] == ["greater_than_equal", "greater_than_equal"]

    def test_total_price_is_not_checked_against_quantity(self, order_payload) -> None:
        order_payload["items"][0]["totalPrice"] = 999.0

        assert validate_order(order_payload).ok

    def test_negative_total_amount(self, order_payload) -> None:
        order_payload["totalAmount"] = -0.01

        outcome = validate_order(order_payload)

        assert _paths(outcome) == [["totalAmount"]]

    def test_numeric_string_is_not_coerced(self, order_payload) -> None:
        order_payload["totalAmount"] = "65.75"

        outcome = validate_order(order_payload)

        assert _paths(outcome) == [["totalAmount"]]
        assert outcome.errors[0].code == "float_type"

    def test_fractional_quantity_is_rejected(self, order_payload) -> None:
        order_payload["items"][0]["quantity"] = 1.5

        outcome = validate_order(order_payload)

        assert _paths(outcome) == [["items", "0", "quantity"]]

    def test_unknown_status_is_rejected(self, order_payload) -> None:
        order_payload["status"] = "lost"

        outcome = validate_order(order_payload)

        assert _paths(outcome) == [["status"]]
        assert outcome.errors[0].code == "literal_error"

    @pytest.mark.parametrize("status", ["pending", "processing", "shipped", "delivered", "cancelled", "refunded", None])
    def test_known_or_missing_status_is_accepted(self, order_payload, status) -> None:
        order_payload["status"] = status

        assert validate_order(order_payload).ok

    def test_invalid_order_date(self, order_payload) -> None:
        order_payload["orderDate"] = "21.07.2024"

        outcome = validate_order(order_payload)

        assert _paths(outcome) == [["orderDate"]]

    @pytest.mark.parametrize("order_date", [
        "1700000000",
        "0",
        "2024-01-01",
        "2024-01-01T00:00",
        "2024-02-30T00:00:00Z",
        "2024-01-01T24:00:00Z",
        "2024-01-01T00:00:00+25:00",
        " 2024-01-01T00:00:00Z",
    ])
    def test_order_date_must_be_full_iso_timestamp(self, order_payload, order_date) -> None:
        order_payload["orderDate"] = order_date

        outcome = validate_order(order_payload)

        assert _paths(outcome) == [["orderDate"]]
        assert outcome.errors[0].code == "invalid_datetime"

    @pytest.mark.parametrize("order_date", [
        "2024-01-01T00:00:00Z",
        "2024-01-01T00:00:00",
        "2024-07-21T14:35:00.5+05:30",
        "2024-07-21T14:35:00.123456-08:00",
    ])
    def test_iso_timestamp_variants_are_accepted(self, order_payload, order_date) -> None:
        order_payload["orderDate"] = order_date

        outcome = validate_order(order_payload)

        assert outcome.ok
        assert outcome.record.orderDate == order_date

    @pytest.mark.parametrize("field", ["totalAmount", "discountAmount", "shippingCost"])
    def test_non_finite_amounts_are_rejected(self, order_payload, field) -> None:
        order_payload[field] = float("inf")

        outcome = validate_order(order_payload)

        assert _paths(outcome) == [[field]]
        assert outcome.errors[0].code == "finite_number"

    def test_non_finite_item_price_is_rejected(self, order_payload) -> None:
        order_payload["items"][0]["unitPrice"] = float("nan")

        outcome = validate_order(order_payload)

        assert _paths(outcome) == [["items", "0", "unitPrice"]]

    def test_missing_required_fields_are_reported_together(self) -> None:
        outcome = validate_order({"id": "ord_1"})

        assert _paths(outcome) == [["customerId"], ["orderDate"], ["items"], ["totalAmount"], ["currency"]]
        assert {error.code for error in outcome.errors} == {"missing"}
