"""
Order Sheet Backend: Orders API Tests
======================================

What:  Endpoint tests through the full FastAPI stack (middleware, handlers, store).
How:   HTTPX AsyncClient over ASGITransport; each test gets its own temp workbook.

What we test:
    ✅ Create → get → update → delete → get(404) scenario
    ✅ List returns data rows only, in file order
    ✅ Status mapping: 404 plain text, 400 on write faults, 500 on read/delete faults
    ✅ Unparseable bodies are 400; an empty body creates an id-only order
    ✅ Two concurrent creates leave at least one order retrievable
    ✅ Request ID, access log, CORS and health plumbing
"""

import asyncio
import logging
import os

import pytest


async def _create(client, body):
    response = await client.post("/orders", json=body)
    assert response.status_code == 201, response.text
    return response.json()


class TestOrderLifecycle:

    @pytest.mark.asyncio
    async def test_full_scenario(self, test_client):
        response = await test_client.post(
            "/orders",
            json={"name": "X", "address": "Y", "contact": "Z", "totalAmount": 100},
        )
        assert response.status_code == 201
        created = response.json()
        order_id = created["id"]
        assert order_id.isdigit()
        assert created["name"] == "X"
        assert created["address"] == "Y"
        assert created["contact"] == "Z"
        assert created["totalAmount"] == 100

        response = await test_client.get(f"/orders/{order_id}")
        assert response.status_code == 200
        row = response.json()
        assert row[:4] == [order_id, "X", "Y", "Z"]
        assert row[4] == created["dateOfCreation"]
        assert row[6] == 100

        response = await test_client.put(f"/orders/{order_id}", json={"totalAmount": 150})
        assert response.status_code == 200
        updated = response.json()
        assert updated["totalAmount"] == 150
        assert updated["name"] == "X"
        assert updated["address"] == "Y"
        assert updated["contact"] == "Z"

        response = await test_client.get(f"/orders/{order_id}")
        assert response.json()[6] == 150

        response = await test_client.delete(f"/orders/{order_id}")
        assert response.status_code == 200
        assert response.json() == {"success": True}

        response = await test_client.get(f"/orders/{order_id}")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_created_fields_round_trip_positionally(self, test_client, sample_order):
        created = await _create(test_client, sample_order)

        response = await test_client.get("/orders")

        assert response.status_code == 200
        assert response.json() == [[
            created["id"],
            sample_order["name"],
            sample_order["address"],
            sample_order["contact"],
            created["dateOfCreation"],
            sample_order["orderDetails"],
            sample_order["totalAmount"],
            sample_order["advanceAmount"],
            sample_order["challanDetail"],
            sample_order["orderCompletionStatus"],
        ]]

    @pytest.mark.asyncio
    async def test_create_echoes_extra_fields(self, test_client):
        created = await _create(test_client, {"name": "X", "note": "not a column"})

        assert created["note"] == "not a column"
        row = (await test_client.get(f"/orders/{created['id']}")).json()
        assert "not a column" not in row


class TestList:

    @pytest.mark.asyncio
    async def test_empty_workbook_lists_nothing(self, test_client):
        response = await test_client.get("/orders")
        assert response.status_code == 200
        assert response.json() == []

    @pytest.mark.asyncio
    async def test_list_in_file_order_without_header(self, test_client):
        for order_id in ("b", "a", "c"):
            await _create(test_client, {"id": order_id, "name": order_id})

        rows = (await test_client.get("/orders")).json()

        assert [row[0] for row in rows] == ["b", "a", "c"]
        assert all(row[0] != "id" for row in rows)


class TestNotFound:

    @pytest.mark.asyncio
    async def test_get_unknown_id_plain_text(self, test_client):
        response = await test_client.get("/orders/123")
        assert response.status_code == 404
        assert response.text == "Order not found"
        assert response.headers["content-type"].startswith("text/plain")

    @pytest.mark.asyncio
    async def test_update_unknown_id_performs_no_write(self, test_client, ready_store):
        await _create(test_client, {"id": "1", "name": "one"})
        mtime_before = os.stat(ready_store.path).st_mtime_ns
        rows_before = (await test_client.get("/orders")).json()

        response = await test_client.put("/orders/999", json={"name": "ghost"})

        assert response.status_code == 404
        assert os.stat(ready_store.path).st_mtime_ns == mtime_before
        assert (await test_client.get("/orders")).json() == rows_before

    @pytest.mark.asyncio
    async def test_delete_unknown_id(self, test_client):
        response = await test_client.delete("/orders/999")
        assert response.status_code == 404
        assert response.text == "Order not found"


class TestFaults:

    @pytest.mark.asyncio
    async def test_unstorable_value_on_create_is_400(self, test_client):
        response = await test_client.post("/orders", json={"orderDetails": {"nested": 1}})

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "write_error"
        assert body["message"]
        assert (await test_client.get("/orders")).json() == []

    @pytest.mark.asyncio
    async def test_missing_workbook_on_list_is_500(self, test_client, ready_store):
        os.remove(ready_store.path)

        response = await test_client.get("/orders")

        assert response.status_code == 500
        assert response.json()["error"] == "storage_error"

    @pytest.mark.asyncio
    async def test_missing_workbook_on_get_is_500(self, test_client, ready_store):
        os.remove(ready_store.path)
        response = await test_client.get("/orders/1")
        assert response.status_code == 500

    @pytest.mark.asyncio
    async def test_missing_workbook_on_update_is_400(self, test_client, ready_store):
        os.remove(ready_store.path)
        response = await test_client.put("/orders/1", json={"name": "X"})
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_missing_workbook_on_delete_is_500(self, test_client, ready_store):
        os.remove(ready_store.path)
        response = await test_client.delete("/orders/1")
        assert response.status_code == 500

    @pytest.mark.asyncio
    async def test_malformed_json_on_create_is_400(self, test_client):
        response = await test_client.post(
            "/orders",
            content=b"{bad json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "write_error"
        assert body["message"]
        assert (await test_client.get("/orders")).json() == []

    @pytest.mark.asyncio
    async def test_malformed_json_on_update_is_400(self, test_client):
        created = await _create(test_client, {"name": "kept"})

        response = await test_client.put(
            f"/orders/{created['id']}",
            content=b"[1,",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "write_error"
        row = (await test_client.get(f"/orders/{created['id']}")).json()
        assert row[1] == "kept"

    @pytest.mark.asyncio
    async def test_non_object_body_on_create_is_400(self, test_client):
        response = await test_client.post("/orders", json=[1, 2, 3])
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_empty_body_on_create_makes_id_only_order(self, test_client):
        response = await test_client.post("/orders")

        assert response.status_code == 201
        created = response.json()
        assert created["id"].isdigit()
        assert set(created) == {"id", "dateOfCreation"}
        row = (await test_client.get(f"/orders/{created['id']}")).json()
        assert row == [created["id"], None, None, None, created["dateOfCreation"]]

    @pytest.mark.asyncio
    async def test_empty_body_on_update_keeps_order(self, test_client):
        created = await _create(test_client, {"name": "X", "totalAmount": 5})

        response = await test_client.put(f"/orders/{created['id']}")

        assert response.status_code == 200
        assert response.json()["name"] == "X"
        assert response.json()["totalAmount"] == 5

    @pytest.mark.asyncio
    async def test_corrupt_workbook_on_create_is_400(self, test_client, ready_store):
        with open(ready_store.path, "wb") as f:
            f.write(b"not a zip archive")

        response = await test_client.post("/orders", json={"name": "X"})

        assert response.status_code == 400
        assert "Malformed workbook" in response.json()["message"]


class TestConcurrency:

    @pytest.mark.asyncio
    async def test_concurrent_creates_leave_at_least_one(self, test_client):
        # No writer coordination: the later save may drop the other order
        responses = await asyncio.gather(
            test_client.post("/orders", json={"name": "first"}),
            test_client.post("/orders", json={"name": "second"}),
        )
        assert all(r.status_code == 201 for r in responses)
        accepted = {r.json()["name"] for r in responses}

        rows = (await test_client.get("/orders")).json()
        stored_names = {row[1] for row in rows}

        assert stored_names & accepted
        assert len(rows) <= 2


class TestPlumbing:

    @pytest.mark.asyncio
    async def test_request_id_echoed(self, test_client):
        response = await test_client.get("/orders", headers={"X-Request-ID": "abc123"})
        assert response.headers["X-Request-ID"] == "abc123"

    @pytest.mark.asyncio
    async def test_request_id_generated(self, test_client):
        response = await test_client.get("/orders")
        assert len(response.headers["X-Request-ID"]) == 8

    @pytest.mark.asyncio
    async def test_request_id_with_odd_characters_replaced(self, test_client):
        response = await test_client.get("/orders", headers={"X-Request-ID": "not a token!"})

        rid = response.headers["X-Request-ID"]
        assert rid != "not a token!"
        assert len(rid) == 8

    @pytest.mark.asyncio
    async def test_access_log_line(self, test_client, caplog):
        caplog.set_level(logging.INFO, logger="ordersheet.access")

        await test_client.post("/orders", json={"name": "X"}, headers={"X-Request-ID": "req-42"})
        await test_client.get("/orders/missing")

        messages = [r.getMessage() for r in caplog.records if r.name == "ordersheet.access"]
        assert any(
            m.startswith("POST /orders responded 201 in ") and m.endswith("(request req-42).")
            for m in messages
        )
        warnings = [r for r in caplog.records if r.name == "ordersheet.access" and r.levelno == logging.WARNING]
        assert any("GET /orders/missing responded 404" in r.getMessage() for r in warnings)

    @pytest.mark.asyncio
    async def test_health_not_access_logged(self, test_client, caplog):
        caplog.set_level(logging.DEBUG, logger="ordersheet.access")

        await test_client.get("/health")

        assert not [r for r in caplog.records if r.name == "ordersheet.access"]

    @pytest.mark.asyncio
    async def test_cors_preflight_allows_front_end(self, test_client):
        response = await test_client.options(
            "/orders",
            headers={
                "Origin": "http://localhost:3001",
                "Access-Control-Request-Method": "POST",
            },
        )
        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "http://localhost:3001"

    @pytest.mark.asyncio
    async def test_health_reports_row_count(self, test_client):
        await _create(test_client, {"name": "X"})

        response = await test_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["order_count"] == 1

    @pytest.mark.asyncio
    async def test_health_unhealthy_without_workbook(self, test_client, ready_store):
        os.remove(ready_store.path)

        response = await test_client.get("/health")

        assert response.status_code == 503
        assert response.json()["workbook"] == "unreadable"
