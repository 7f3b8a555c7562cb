"""
Tests for the HTTP API and live-update websocket, using Quart's test client.
"""
import asyncio
import json

import pytest

from services.config import Config
from services.runtime import AggregatorService
from web.app import create_app
from conftest import StaticAdapter, make_item


@pytest.fixture
def adapter():
    return StaticAdapter("github", [make_item("gh_1", origin_label="GitHub", score=30)])


@pytest.fixture
def service(store, adapter, tmp_path):
    config = Config(LOG_PATH=str(tmp_path / "logs"))
    return AggregatorService(config, store=store, adapters=[adapter])


@pytest.fixture
def client(service):
    return create_app(service).test_client()


async def test_posts_endpoint_filters_and_paginates(client, store):
    store.upsert_many([
        make_item("a", origin_label="ClaudeAI", score=50),
        make_item("b", origin_label="ClaudeAI", score=2),
        make_item("c", origin_label="GitHub", score=70),
        make_item("old", origin_label="ClaudeAI", score=90, days_old=40),
    ])

    response = await client.get("/api/posts?subreddit=claudeai&minUpvotes=10&limit=500")
    body = await response.get_json()

    assert response.status_code == 200
    assert body["success"] is True
    assert [post["reddit_id"] for post in body["posts"]] == ["a"]
    assert body["pagination"]["limit"] == 100
    assert body["pagination"]["total"] == 1
    assert body["lastUpdated"]


async def test_posts_endpoint_tolerates_bad_params(client, store):
    store.upsert_many([make_item("a")])

    response = await client.get("/api/posts?page=abc&limit=&sortBy=nonsense&sortOrder=sideways")
    body = await response.get_json()

    assert response.status_code == 200
    assert body["pagination"]["page"] == 1
    assert body["pagination"]["limit"] == 20
    assert len(body["posts"]) == 1


async def test_posts_sorted_by_score(client, store):
    store.upsert_many([make_item("x", score=1), make_item("y", score=5)])

    response = await client.get("/api/posts?sortBy=upvotes&sortOrder=desc")
    body = await response.get_json()

    assert [post["reddit_id"] for post in body["posts"]] == ["y", "x"]


async def test_stats_endpoint(client, store):
    store.upsert_many([make_item("a"), make_item("b", origin_label="GitHub")])

    body = await (await client.get("/api/stats")).get_json()

    assert body["success"] is True
    assert body["stats"]["totalPosts"] == 2
    assert body["stats"]["subredditCounts"] == {"ClaudeAI": 1, "GitHub": 1}


async def test_refresh_runs_cycle_and_broadcasts(client, service, store):
    queue = service.broadcaster.subscribe()

    response = await client.post("/api/refresh")
    body = await response.get_json()

    assert body == {"success": True, "message": "Refreshed 1 posts"}
    assert store.get("gh_1") is not None
    message = queue.get_nowait()
    assert message["event"] == "posts-updated"
    assert message["data"]["count"] == 1


async def test_sources_endpoint(client):
    body = await (await client.get("/api/sources")).get_json()

    ids = [source["id"] for source in body["sources"]]
    assert ids[:5] == ["reddit", "hackernews", "github", "devto", "anthropic"]


async def test_health_endpoint(client):
    body = await (await client.get("/api/health")).get_json()

    assert body["status"] == "healthy"
    assert body["uptime"] >= 0
    assert body["timestamp"]


async def test_websocket_sends_stats_then_updates(client, service):
    async with client.websocket("/ws") as ws:
        first = json.loads(await ws.receive())
        assert first["event"] == "stats"
        assert first["data"]["totalPosts"] == 0
        assert service.broadcaster.connected_clients == 1

        service.broadcaster.notify_updated(7)
        update = json.loads(await asyncio.wait_for(ws.receive(), timeout=2))

        assert update["event"] == "posts-updated"
        assert update["data"]["count"] == 7


async def test_websocket_request_refresh(client, adapter):
    async with client.websocket("/ws") as ws:
        await ws.receive()
        await ws.send(json.dumps({"event": "request-refresh"}))
        update = json.loads(await asyncio.wait_for(ws.receive(), timeout=2))

    assert update["event"] == "posts-updated"
    assert update["data"]["count"] == 1
    assert adapter.calls == 1


async def test_websocket_ignores_http_cors_origins(service):
    client = create_app(service, cors_origins=["http://localhost:3000"]).test_client()

    async with client.websocket("/ws", headers={"Origin": "http://192.168.1.5:3000"}) as ws:
        first = json.loads(await ws.receive())

    assert first["event"] == "stats"
