import json
from datetime import datetime
from decimal import Decimal

import httpx
import pytest

from teashop.core.exceptions import DeliveryError
from teashop.services.notification_service import (
    ConfirmationItem,
    NotificationService,
    OrderConfirmation,
    format_customizations,
    format_pickup_time,
)


def _confirmation(**overrides):
    data = dict(
        order_number="YBT-LX2K9-AB12",
        customer_name="An Peeters",
        customer_email="an@example.com",
        pickup_time=datetime(2026, 10, 17, 14, 30),
        total=Decimal("9.00"),
        points_earned=90,
        items=[
            ConfirmationItem(
                name="Taro Milk Tea",
                quantity=2,
                price=Decimal("4.50"),
                customizations={"sugarLevel": 50, "iceLevel": "weinig", "toppings": [{"name": "Boba"}]},
            ),
        ],
    )
    data.update(overrides)
    return OrderConfirmation(**data)


def _service(handler, api_key="xkeysib-test"):
    return NotificationService(
        api_key=api_key,
        from_email="noreply@yibeitea.be",
        from_name="Yibei Tea",
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )


def test_pickup_time_in_dutch():
    assert format_pickup_time(datetime(2026, 10, 17, 14, 30)) == "zaterdag 17 oktober om 14:30"


def test_customizations_summary():
    summary = format_customizations({"sugarLevel": 25, "iceLevel": "geen", "toppings": [{"name": "Boba"}, {"name": "Pudding"}]})
    assert summary == " (Suiker: 25%, IJs: geen, Toppings: Boba, Pudding)"
    assert format_customizations(None) == ""
    assert format_customizations({"toppings": []}) == ""


def test_render_contains_order_details():
    html = _service(lambda r: httpx.Response(201)).render_order_confirmation(_confirmation())

    assert "YBT-LX2K9-AB12" in html
    assert "2x Taro Milk Tea (Suiker: 50%, IJs: weinig, Toppings: Boba)" in html
    assert "&euro;9.00" in html
    assert "90 punten" in html
    assert "zaterdag 17 oktober om 14:30" in html


def test_render_escapes_customer_input():
    html = _service(lambda r: httpx.Response(201)).render_order_confirmation(
        _confirmation(customer_name="<script>alert(1)</script>")
    )
    assert "<script>" not in html


async def test_sends_through_brevo():
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["api_key"] = request.headers["api-key"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(201, json={"messageId": "<abc@smtp-relay.mailin.fr>"})

    sent = await _service(handler).send_order_confirmation(_confirmation())

    assert sent is True
    assert seen["url"] == "https://api.brevo.com/v3/smtp/email"
    assert seen["api_key"] == "xkeysib-test"
    assert seen["body"]["to"] == [{"email": "an@example.com", "name": "An Peeters"}]
    assert seen["body"]["sender"] == {"name": "Yibei Tea", "email": "noreply@yibeitea.be"}
    assert seen["body"]["subject"] == "Bevestiging bestelling YBT-LX2K9-AB12 - Yibei Tea"


async def test_without_api_key_nothing_is_sent():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(201)

    sent = await _service(handler, api_key=None).send_order_confirmation(_confirmation())

    assert sent is False
    assert calls == []


async def test_provider_rejection_raises_delivery_error():
    def handler(request):
        return httpx.Response(400, json={"code": "invalid_parameter", "message": "email is not valid"})

    with pytest.raises(DeliveryError):
        await _service(handler).send_order_confirmation(_confirmation())


async def test_transport_failure_raises_delivery_error():
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(DeliveryError):
        await _service(handler).send_order_confirmation(_confirmation())
