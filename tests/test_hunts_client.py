"""Tests for the remote hunt authority client."""

import httpx
import pytest
import respx

from shinytracker.clients.hunts import HuntsClient, RemoteRejected, RemoteUnavailable
from shinytracker.models.hunt import NewHunt, PendingId, ServerId

API = "http://hunts.test/api"


@pytest.fixture
def client() -> HuntsClient:
    return HuntsClient(API + "/")


@pytest.fixture
def hunt_payload() -> dict:
    return {
        "id": 12,
        "species_name": "ralts",
        "game": "Emerald",
        "sprite_url": "https://img.example/280.png",
        "types": ["psychic", "fairy"],
        "encounter_count": 87,
        "target_count": None,
        "completed": False,
        "completed_at": None,
        "started_at": "2024-04-01T08:00:00+00:00",
    }


class TestListHunts:
    @respx.mock
    async def test_parses_hunts(self, client: HuntsClient, hunt_payload: dict) -> None:
        """Server hunts come back as server-backed records."""
        respx.get(f"{API}/hunts").mock(return_value=httpx.Response(200, json=[hunt_payload]))

        (record,) = await client.list_hunts()

        assert record.id == ServerId(12)
        assert record.encounter_count == 87
        assert record.types == ["psychic", "fairy"]

    @respx.mock
    async def test_non_list_body_is_rejected(self, client: HuntsClient) -> None:
        respx.get(f"{API}/hunts").mock(return_value=httpx.Response(200, json={"hunts": []}))

        with pytest.raises(RemoteRejected):
            await client.list_hunts()

    @respx.mock
    async def test_malformed_hunt_is_rejected(self, client: HuntsClient) -> None:
        respx.get(f"{API}/hunts").mock(return_value=httpx.Response(200, json=[{"id": 1}]))

        with pytest.raises(RemoteRejected):
            await client.list_hunts()

    @respx.mock
    async def test_invalid_json_is_rejected(self, client: HuntsClient) -> None:
        respx.get(f"{API}/hunts").mock(return_value=httpx.Response(200, text="<html>"))

        with pytest.raises(RemoteRejected):
            await client.list_hunts()


class TestFailureClassification:
    @respx.mock
    @pytest.mark.parametrize("status", [500, 502, 503, 408, 429])
    async def test_transient_statuses(self, client: HuntsClient, status: int) -> None:
        """Server errors and throttling are retryable."""
        respx.get(f"{API}/hunts").mock(return_value=httpx.Response(status))

        with pytest.raises(RemoteUnavailable):
            await client.list_hunts()

    @respx.mock
    @pytest.mark.parametrize("status", [400, 404, 422])
    async def test_permanent_statuses(self, client: HuntsClient, status: int) -> None:
        respx.put(f"{API}/hunts/12").mock(return_value=httpx.Response(status))

        with pytest.raises(RemoteRejected) as exc_info:
            await client.update_hunt(ServerId(12), {"encounter_count": 1})

        assert exc_info.value.status_code == status

    @respx.mock
    async def test_connection_error_is_transient(self, client: HuntsClient) -> None:
        respx.get(f"{API}/hunts").mock(side_effect=httpx.ConnectError("refused"))

        with pytest.raises(RemoteUnavailable):
            await client.list_hunts()

    @respx.mock
    async def test_timeout_is_transient(self, client: HuntsClient) -> None:
        respx.delete(f"{API}/hunts/12").mock(side_effect=httpx.ReadTimeout("slow"))

        with pytest.raises(RemoteUnavailable):
            await client.delete_hunt(ServerId(12))


class TestMutations:
    @respx.mock
    async def test_create_posts_new_hunt(self, client: HuntsClient, hunt_payload: dict) -> None:
        route = respx.post(f"{API}/hunts").mock(
            return_value=httpx.Response(200, json=hunt_payload)
        )

        record = await client.create_hunt(NewHunt(species_name="ralts", game="Emerald"))

        assert record.id == ServerId(12)
        body = route.calls.last.request.content
        assert b'"species_name":"ralts"' in body.replace(b" ", b"")

    @respx.mock
    async def test_update_ignores_response_body(self, client: HuntsClient) -> None:
        """Only success matters; the body is never adopted."""
        route = respx.put(f"{API}/hunts/12").mock(
            return_value=httpx.Response(200, json={"encounter_count": 999})
        )

        result = await client.update_hunt(ServerId(12), {"encounter_count": 5})

        assert result is None
        assert route.called

    @respx.mock
    async def test_pending_id_path(self, client: HuntsClient) -> None:
        """Replays for local-only hunts use the pending id in the path."""
        route = respx.put(f"{API}/hunts/pending-3").mock(return_value=httpx.Response(404))

        with pytest.raises(RemoteRejected):
            await client.update_hunt(PendingId(-3), {"encounter_count": 1})

        assert route.called

    @respx.mock
    async def test_delete(self, client: HuntsClient) -> None:
        route = respx.delete(f"{API}/hunts/12").mock(
            return_value=httpx.Response(200, json={"success": True})
        )

        await client.delete_hunt(ServerId(12))

        assert route.called

    async def test_shared_http_client(self, hunt_payload: dict) -> None:
        """An injected client is used instead of a per-call one."""
        transport = httpx.MockTransport(lambda request: httpx.Response(200, json=[hunt_payload]))
        async with httpx.AsyncClient(transport=transport) as http_client:
            client = HuntsClient(API, http_client=http_client)

            records = await client.list_hunts()

        assert [r.id for r in records] == [ServerId(12)]
