# tests/test_receiver_api.py
import asyncio
import json

import pytest


def parse(frame):
    return json.loads(frame[len("data: "):-2])


@pytest.mark.asyncio
async def test_webhook_then_patch_scenario(client, broadcaster):
    sub = broadcaster.register()

    r = await client.post("/webhook/orders", json={"order_id": "A1", "customer": {"name": "Tom"}})
    assert r.status_code == 200
    assert r.json() == {"received": True, "order_id": "A1"}

    r = await client.get("/admin/orders")
    body = r.json()
    assert body["success"] is True and body["count"] == 1
    assert body["orders"][0]["status"] == "pending"

    r = await client.patch("/admin/orders/A1/status", json={"status": "confirmed", "confirm_minutes": 20})
    assert r.status_code == 200
    order = r.json()["order"]
    assert order["status"] == "confirmed"
    assert order["confirm_minutes"] == 20
    assert order["updated_at"]

    frames = [parse(f) for f in sub.drain()]
    assert [f["__type"] for f in frames] == ["order_created", "status_update"]
    assert {f["order_id"] for f in frames} == {"A1"}


@pytest.mark.asyncio
async def test_webhook_rejects_missing_fields(client, store):
    r = await client.post("/webhook/orders", json={"customer": {"name": "Tom"}})
    assert r.status_code == 400
    assert "Invalid order payload" in r.json()["error"]

    r = await client.post("/webhook/orders", content=b"not json",
                          headers={"content-type": "application/json"})
    assert r.status_code == 400
    assert store.count == 0


@pytest.mark.asyncio
async def test_patch_errors(client):
    await client.post("/webhook/orders", json={"order_id": "A1", "customer": {"name": "Tom"}})

    r = await client.patch("/admin/orders/A1/status", json={"status": "shipped"})
    assert r.status_code == 400
    assert r.json()["error"].startswith("status must be one of")

    r = await client.patch("/admin/orders/B2/status", json={"status": "confirmed"})
    assert r.status_code == 404
    assert r.json() == {"error": "Order not found"}

    r = await client.patch("/admin/orders/A1/status", json={"status": "confirmed", "confirm_minutes": "soon"})
    assert r.status_code == 400
    assert "error" in r.json()


@pytest.mark.asyncio
async def test_orders_listed_newest_first(client):
    for oid in ("A1", "A2", "A3"):
        await client.post("/webhook/orders", json={"order_id": oid, "customer": {"name": "x"}})
    r = await client.get("/admin/orders")
    assert [o["order_id"] for o in r.json()["orders"]] == ["A3", "A2", "A1"]


@pytest.mark.asyncio
async def test_concurrent_ingestions(client, broadcaster):
    sub = broadcaster.register()
    rs = await asyncio.gather(
        client.post("/webhook/orders", json={"order_id": "C1", "customer": {"name": "a"}}),
        client.post("/webhook/orders", json={"order_id": "C2", "customer": {"name": "b"}}),
    )
    assert all(r.status_code == 200 for r in rs)

    body = (await client.get("/admin/orders")).json()
    assert body["count"] == 2
    assert {o["order_id"] for o in body["orders"]} == {"C1", "C2"}
    assert {parse(f)["order_id"] for f in sub.drain()} == {"C1", "C2"}


@pytest.mark.asyncio
async def test_health(client, broadcaster):
    broadcaster.register()
    await client.post("/webhook/orders", json={"order_id": "A1", "customer": {"name": "Tom"}})
    r = await client.get("/health")
    assert r.json() == {"status": "ok", "orders": 1, "clients": 1}


@pytest.mark.asyncio
async def test_dashboard_and_static(client):
    r = await client.get("/")
    assert r.status_code == 302
    assert r.headers["location"] == "/admin"

    r = await client.get("/admin")
    assert r.status_code == 200
    assert "dash" in r.text

    r = await client.get("/app.js")
    assert r.status_code == 200


@pytest.mark.asyncio
async def test_stream_endpoint_delivers_frames_until_shutdown(client, broadcaster):
    async def drive():
        while broadcaster.count == 0:
            await asyncio.sleep(0.01)
        await client.post("/webhook/orders", json={"order_id": "S1", "customer": {"name": "Tom"}})
        await asyncio.sleep(0.15)
        broadcaster.close_all()

    driver = asyncio.create_task(drive())
    r = await asyncio.wait_for(client.get("/admin/stream"), timeout=5)
    await driver

    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/event-stream")
    assert r.headers["cache-control"] == "no-cache"
    assert 'data: {"__type":"order_created","order_id":"S1"' in r.text
    assert ": heartbeat\n\n" in r.text  # heartbeat_s is 0.05 in the test settings
    assert broadcaster.count == 0
