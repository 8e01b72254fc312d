import pytest
import pytest_asyncio

from app.features.identity.models.user_role import UserRole

ORDER = {
    "orderId": "ord-1001",
    "customerEmail": "customer@x.com",
    "orderDetails": {
        "items": [
            {"name": "Pork Belly 1kg", "quantity": 2, "price": 12.5},
            {"name": "Sausages", "quantity": 1, "price": 89.99},
        ],
        "total": 114.99,
        "phone": "+27 82 000 0000",
        "address": "12 Farm Road, Stellenbosch",
    },
}


@pytest_asyncio.fixture
async def admins(db, identity):
    db.add_all([UserRole(user_id="admin-1", role="admin"), UserRole(user_id="cust-1", role="customer")])
    await db.commit()
    identity.add_user("admin-1", "owner@farm.co.za")
    identity.add_user("cust-1", "customer@x.com")
    identity.add_user("other-1", "someone@x.com")


@pytest.mark.asyncio
async def test_notifies_customer_and_admins(client, email_client, admins):
    response = await client.post("/send-order-notification", json=ORDER)

    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Order notifications sent"}

    by_recipient = {sent["to"]: sent for sent in email_client.sent}
    assert set(by_recipient) == {"customer@x.com", "owner@farm.co.za"}

    customer = by_recipient["customer@x.com"]
    assert customer["subject"] == "Order Confirmation - ord-1001"
    assert customer["from_name"] == "PureBreed Pork"
    assert "R25.00" in customer["html"]
    assert "R89.99" in customer["html"]
    assert "Total: R114.99" in customer["html"]
    assert "12 Farm Road, Stellenbosch" in customer["html"]

    admin = by_recipient["owner@farm.co.za"]
    assert admin["subject"] == "New Order Received - ord-1001"
    assert "customer@x.com" in admin["html"]
    assert "Pork Belly 1kg" in admin["html"]


@pytest.mark.asyncio
async def test_without_admins_only_customer_is_notified(client, email_client):
    response = await client.post("/send-order-notification", json=ORDER)

    assert response.status_code == 200
    assert [sent["to"] for sent in email_client.sent] == ["customer@x.com"]


@pytest.mark.asyncio
async def test_order_fields_are_escaped(client, email_client):
    order = {**ORDER, "orderDetails": {**ORDER["orderDetails"], "address": "<script>x</script>"}}

    await client.post("/send-order-notification", json=order)

    html = email_client.sent[0]["html"]
    assert "<script>" not in html
    assert "&lt;script&gt;" in html


@pytest.mark.asyncio
async def test_email_failure_returns_500(client, email_client):
    email_client.fail = True

    response = await client.post("/send-order-notification", json=ORDER)

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to send order notifications"}


@pytest.mark.asyncio
async def test_identity_failure_returns_500(client, identity, admins):
    identity.fail_on.add("list_users")

    response = await client.post("/send-order-notification", json=ORDER)

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to fetch admin user details"}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "order",
    [
        {k: v for k, v in ORDER.items() if k != "orderId"},
        {**ORDER, "customerEmail": "not-an-email"},
        {**ORDER, "orderDetails": {**ORDER["orderDetails"], "items": []}},
    ],
)
async def test_invalid_order_returns_500(client, email_client, order):
    response = await client.post("/send-order-notification", json=order)

    assert response.status_code == 500
    assert "error" in response.json()
    assert email_client.sent == []


@pytest.mark.asyncio
async def test_options_preflight(client):
    response = await client.options("/send-order-notification")

    assert response.status_code == 200


@pytest.mark.asyncio
async def test_malformed_json_returns_500(client, email_client):
    response = await client.post(
        "/send-order-notification",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 500
    assert response.json() == {"error": "Request body must be valid JSON"}
    assert email_client.sent == []


@pytest.mark.asyncio
async def test_missing_field_is_named_in_500(client):
    response = await client.post("/send-order-notification", json={"orderId": "1"})

    assert response.status_code == 500
    assert response.json() == {"error": "customerEmail is required"}


@pytest.mark.asyncio
async def test_one_failed_send_still_attempts_the_rest(client, email_client, admins):
    email_client.fail_for.add("owner@farm.co.za")

    response = await client.post("/send-order-notification", json=ORDER)

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to send order notifications"}
    assert [sent["to"] for sent in email_client.sent] == ["customer@x.com"]


@pytest.mark.asyncio
async def test_browser_preflight_gets_empty_200(client):
    response = await client.options(
        "/send-order-notification",
        headers={
            "Origin": "https://shop.example.com",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "content-type, x-requested-with",
        },
    )

    assert response.status_code == 200
    assert response.content == b""
    assert response.headers["access-control-allow-origin"] == "*"
