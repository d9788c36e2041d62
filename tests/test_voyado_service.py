"""Unit tests for app.services.voyado_service: VoyadoService on a fake Voyado API."""

import httpx
import pytest


def _raise_connect_error(request):
    raise httpx.ConnectError("connection refused", request=request)


class TestFindContactId:
    @pytest.mark.asyncio
    async def test_bare_string_response(self, voyado_service, voyado_api):
        voyado_api.add("GET", "/contacts/id", json_body="cbe3f42c-c1d0")
        assert await voyado_service.find_contact_id("a@b.com") == "cbe3f42c-c1d0"

        request = voyado_api.calls("GET", "/contacts/id")[0]
        assert request.url.params["email"] == "a@b.com"
        assert request.headers["apikey"] == "test-api-key"
        assert request.headers["User-Agent"] == "DixaVoyadoService/1.0"

    @pytest.mark.asyncio
    async def test_object_response(self, voyado_service, voyado_api):
        voyado_api.add("GET", "/contacts/id", json_body={"id": "c-42"})
        assert await voyado_service.find_contact_id("a@b.com") == "c-42"

    @pytest.mark.asyncio
    async def test_integer_id_in_object_response(self, voyado_service, voyado_api):
        voyado_api.add("GET", "/contacts/id", json_body={"id": 123})
        assert await voyado_service.find_contact_id("a@b.com") == "123"

    @pytest.mark.asyncio
    async def test_phone_uses_mobile_phone_param(self, voyado_service, voyado_api):
        voyado_api.add("GET", "/contacts/id", json_body="c-7")
        assert await voyado_service.find_contact_id("+46701234567", "phone") == "c-7"
        assert voyado_api.calls("GET", "/contacts/id")[0].url.params["mobilePhone"] == "+46701234567"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [None, "", {}, {"name": "x"}, ["c-1"], 12])
    async def test_unknown_shapes_are_not_found(self, voyado_service, voyado_api, body):
        voyado_api.add("GET", "/contacts/id", json_body=body)
        assert await voyado_service.find_contact_id("a@b.com") is None

    @pytest.mark.asyncio
    async def test_http_error_is_not_found(self, voyado_service, voyado_api):
        voyado_api.add("GET", "/contacts/id", status=404, json_body={"message": "Contact not found"})
        assert await voyado_service.find_contact_id("a@b.com") is None

    @pytest.mark.asyncio
    async def test_network_error_is_not_found(self, voyado_service, voyado_api):
        voyado_api.add("GET", "/contacts/id", handler=_raise_connect_error)
        assert await voyado_service.find_contact_id("a@b.com") is None


class TestFindPointAccount:
    @pytest.mark.asyncio
    async def test_bare_array(self, voyado_service, voyado_api):
        voyado_api.add("GET", "/point-accounts", json_body=[{"id": 11}, {"id": 12}])
        assert await voyado_service.find_point_account("c-1") == "11"
        assert voyado_api.calls("GET", "/point-accounts")[0].url.params["contactId"] == "c-1"

    @pytest.mark.asyncio
    async def test_items_envelope(self, voyado_service, voyado_api):
        voyado_api.add("GET", "/point-accounts", json_body={"items": [{"id": "acc-1", "balance": 10}]})
        assert await voyado_service.find_point_account("c-1") == "acc-1"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [[], {"items": []}, {"accounts": [{"id": 1}]}, "acc-1"])
    async def test_empty_or_unknown_is_not_found(self, voyado_service, voyado_api, body):
        voyado_api.add("GET", "/point-accounts", json_body=body)
        assert await voyado_service.find_point_account("c-1") is None

    @pytest.mark.asyncio
    async def test_server_error_is_not_found(self, voyado_service, voyado_api):
        voyado_api.add("GET", "/point-accounts", status=500, json_body={"message": "boom"})
        assert await voyado_service.find_point_account("c-1") is None


class TestPostPointTransaction:
    @pytest.mark.asyncio
    async def test_payload(self, voyado_service, voyado_api):
        voyado_api.add("POST", "/point-transactions", json_body={"status": "ok"})

        result = await voyado_service.post_point_transaction("acc-1", 15, "CSAT feedback")

        assert result == {"status": "ok"}
        sent = voyado_api.sent_json("POST", "/point-transactions")[0]
        assert sent["accountId"] == "acc-1"
        assert sent["amount"] == 15
        assert sent["transactionType"] == "Addition"
        assert sent["source"] == "Automation"
        assert sent["description"] == "CSAT feedback"
        assert sent["validTo"] is None
        assert sent["transactionDate"] == sent["validFrom"]
        assert sent["transactionId"]

    @pytest.mark.asyncio
    async def test_fresh_transaction_id_per_attempt(self, voyado_service, voyado_api):
        voyado_api.add("POST", "/point-transactions", json_body={})
        await voyado_service.post_point_transaction("acc-1", 5, "a")
        await voyado_service.post_point_transaction("acc-1", 5, "a")
        first, second = voyado_api.sent_json("POST", "/point-transactions")
        assert first["transactionId"] != second["transactionId"]

    @pytest.mark.asyncio
    async def test_raises_on_error(self, voyado_service, voyado_api):
        voyado_api.add("POST", "/point-transactions", status=422, json_body={"message": "invalid"})
        with pytest.raises(httpx.HTTPStatusError):
            await voyado_service.post_point_transaction("acc-1", 5, "a")

    @pytest.mark.asyncio
    async def test_raises_on_network_error(self, voyado_service, voyado_api):
        voyado_api.add("POST", "/point-transactions", handler=_raise_connect_error)
        with pytest.raises(httpx.ConnectError):
            await voyado_service.post_point_transaction("acc-1", 5, "a")


class TestInteractions:
    @pytest.mark.asyncio
    async def test_post_interaction(self, voyado_service, voyado_api):
        voyado_api.add("POST", "/interactions", status=201, json_body={"id": "i-1"})

        result = await voyado_service.post_interaction("c-1", "csatRating", {"csatScore": 4})

        assert result == {"id": "i-1"}
        sent = voyado_api.sent_json("POST", "/interactions")[0]
        assert sent["contactId"] == "c-1"
        assert sent["schemaId"] == "csatRating"
        assert sent["payload"] == {"csatScore": 4}
        assert sent["createdDate"]

    @pytest.mark.asyncio
    async def test_post_interaction_raises(self, voyado_service, voyado_api):
        voyado_api.add("POST", "/interactions", status=400, json_body={"message": "unknown schema"})
        with pytest.raises(httpx.HTTPStatusError):
            await voyado_service.post_interaction("c-1", "nope", {})

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [
        [{"id": "i-2"}, {"id": "i-1"}],
        {"items": [{"id": "i-2"}, {"id": "i-1"}], "totalCount": 2},
    ])
    async def test_find_interactions_shapes(self, voyado_service, voyado_api, body):
        voyado_api.add("GET", "/interactions", json_body=body)

        interactions = await voyado_service.find_interactions("c-1", "completedProductRating")

        assert [i.id for i in interactions] == ["i-2", "i-1"]
        params = voyado_api.calls("GET", "/interactions")[0].url.params
        assert params["contactId"] == "c-1"
        assert params["schemaId"] == "completedProductRating"

    @pytest.mark.asyncio
    async def test_find_interactions_failure_is_empty(self, voyado_service, voyado_api):
        voyado_api.add("GET", "/interactions", status=401, json_body={"message": "bad key"})
        assert await voyado_service.find_interactions("c-1", "s") == []

    @pytest.mark.asyncio
    async def test_get_interaction(self, voyado_service, voyado_api):
        voyado_api.add("GET", "/interactions/i-1", json_body={
            "id": "i-1", "contactId": "c-1", "schemaId": "s", "payload": {"productId": "P1", "rating": 4},
        })
        detail = await voyado_service.get_interaction("i-1")
        assert detail.id == "i-1"
        assert detail.payload == {"productId": "P1", "rating": 4}

    @pytest.mark.asyncio
    async def test_get_interaction_missing(self, voyado_service, voyado_api):
        assert await voyado_service.get_interaction("unknown") is None
