# lm_core/invoices/tests/test_quote_api.py
import pytest

pytestmark = pytest.mark.django_db

URL = "/api/v1/invoices/quote/"


def _lines():
    return [
        {
            "service": {"id": 1, "name": "Wash & Fold", "unit_type": "WEIGHT", "base_price": "100.00"},
            "quantity": "5",
        },
        {
            "service": {"id": 3, "name": "Alterations", "unit_type": "PIECE", "base_price": "500.00", "gst_rate": "5"},
            "quantity": "1",
        },
    ]


def test_quote_blended(api_client):
    resp = api_client.post(URL, {"lines": _lines()}, format="json")

    assert resp.status_code == 200
    assert resp.data["subtotal"] == "1000.00"
    assert resp.data["gst_rate"] == "11.50"
    assert resp.data["total_gst"] == "115.00"
    assert resp.data["grand_total"] == "1115.00"
    assert resp.data["tax_strategy"] == "BLENDED"
    assert len(resp.data["lines"]) == 2
    assert resp.data["lines"][0]["line_total"] == "500.00"


def test_quote_per_line_with_discount(api_client):
    resp = api_client.post(
        URL,
        {"lines": _lines(), "tax_strategy": "PER_LINE", "discount_amount": "100.00"},
        format="json",
    )

    assert resp.status_code == 200
    assert resp.data["gst_rate"] is None
    assert resp.data["taxable_amount"] == "900.00"
    assert resp.data["total_gst"] == "103.50"
    assert resp.data["effective_gst_rate"] == "11.50"
    assert len(resp.data["tax_breakdowns"]) == 2


def test_quote_inclusive_inter_state(api_client):
    lines = [{"service": {"id": 7, "name": "Shirt", "unit_type": "PIECE", "base_price": "1180.00"}, "quantity": "1"}]
    resp = api_client.post(URL, {"lines": lines, "gst_inclusive": True, "inter_state": True}, format="json")

    assert resp.status_code == 200
    assert resp.data["base_amount"] == "1000.00"
    assert resp.data["igst"] == "180.00"
    assert resp.data["tax_mode"] == "IGST"
    assert resp.data["grand_total"] == "1180.00"


def test_quote_bulk_discount_and_express(api_client):
    resp = api_client.post(URL, {"lines": _lines(), "apply_bulk_discount": True, "is_express": True}, format="json")

    assert resp.status_code == 200
    assert resp.data["discount_percent"] == "5.00"
    assert resp.data["discount_amount"] == "50.00"
    assert resp.data["express_charge"] == "500.00"
    assert resp.data["taxable_amount"] == "1450.00"


def test_quote_sets_request_id_header(api_client):
    resp = api_client.post(URL, {"lines": _lines()}, format="json", HTTP_X_REQUEST_ID="till-7-0042")

    assert resp.status_code == 200
    assert resp["X-Request-Id"] == "till-7-0042"


def test_quote_requires_lines(api_client):
    resp = api_client.post(URL, {"lines": []}, format="json")

    assert resp.status_code == 400
    assert resp.data["error"]["code"] == "validation_error"
    assert "lines" in resp.data["error"]["details"]


def test_quote_discount_over_subtotal(api_client):
    resp = api_client.post(URL, {"lines": _lines(), "discount_amount": "5000.00"}, format="json", HTTP_X_REQUEST_ID="r-1")

    assert resp.status_code == 400
    assert resp.data["error"]["code"] == "invalid_discount"
    assert resp.data["error"]["message"] == "Discount cannot exceed the subtotal."
    assert resp.data["error"]["request_id"] == "r-1"


def test_quote_two_discount_forms(api_client):
    resp = api_client.post(
        URL,
        {"lines": _lines(), "discount_amount": "10.00", "discount_percent": "5"},
        format="json",
    )

    assert resp.status_code == 400
    assert resp.data["error"]["code"] == "invalid_discount"


def test_quote_dynamic_service_without_variant(api_client):
    lines = [
        {
            "service": {"id": 4, "name": "Dry Clean", "unit_type": "PIECE", "base_price": "0", "is_dynamic": True},
            "quantity": "1",
        }
    ]
    resp = api_client.post(URL, {"lines": lines}, format="json")

    assert resp.status_code == 400
    assert resp.data["error"]["code"] == "validation_error"
    assert "variant" in resp.data["error"]["details"]


def test_quote_with_variant(api_client):
    lines = [
        {
            "service": {"id": 4, "name": "Dry Clean", "unit_type": "PIECE", "base_price": "0", "is_dynamic": True},
            "variant": {"id": 41, "service_id": 4, "name": "Silk Saree", "base_price": "250.00", "gst_rate": "5"},
            "quantity": "2",
        }
    ]
    resp = api_client.post(URL, {"lines": lines}, format="json")

    assert resp.status_code == 200
    assert resp.data["lines"][0]["pricing"]["variant"]["name"] == "Silk Saree"
    assert resp.data["total_gst"] == "25.00"
