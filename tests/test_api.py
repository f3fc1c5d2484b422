"""
End-to-end tests for the HTTP API.
"""

import asyncio
import json

import httpx
import pytest
from fastapi.testclient import TestClient

from shortener.core.setting import settings
from shortener.main import SERVICE_NAME, create_app
from shortener.services.audit_logger import AuditLogger


def shorten(client, **body):
    return client.post("/shorturls", json=body)


class TestCreateShortURL:
    """POST /shorturls"""

    def test_create_with_custom_shortcode(self, client):
        response = shorten(client, url="https://example.com/page", validity=1, shortcode="abc123")

        assert response.status_code == 201
        assert response.json() == {
            "shortLink": f"{settings.BASE_URL.rstrip('/')}/abc123",
            "expiry": "2025-01-01T12:01:00.000Z",
        }

    def test_create_with_defaults(self, client, store):
        response = shorten(client, url="https://example.com/page")

        assert response.status_code == 201
        body = response.json()
        shortcode = body["shortLink"].rsplit("/", 1)[-1]
        assert len(shortcode) == 6
        assert shortcode.isalnum()
        assert body["expiry"] == "2025-01-01T12:30:00.000Z"
        assert store.get(shortcode).validity_minutes == 30

    def test_duplicate_shortcode_conflicts(self, client):
        shorten(client, url="https://first.example.com", shortcode="abc123")

        response = shorten(client, url="https://second.example.com", shortcode="abc123")

        assert response.status_code == 409
        assert response.json()["code"] == "SHORTCODE_COLLISION"

    def test_empty_shortcode_generates_one(self, client, store):
        response = shorten(client, url="https://example.com", shortcode="")

        assert response.status_code == 201
        shortcode = response.json()["shortLink"].rsplit("/", 1)[-1]
        assert len(shortcode) == 6
        assert store.exists(shortcode)

    def test_route_name_cannot_be_claimed(self, client, store):
        response = shorten(client, url="https://example.com", shortcode="health")

        assert response.status_code == 409
        assert response.json()["code"] == "SHORTCODE_COLLISION"
        assert store.count() == 0
        assert client.get("/health").json()["status"] == "healthy"

    @pytest.mark.parametrize("url", [
        "http://intranet/page",
        "http://myhost:8080/x",
        "https://example.com/?next=data:x",
        "https://example.com/users/profile:42",
    ])
    def test_absolute_http_urls_accepted(self, client, url):
        response = shorten(client, url=url)

        assert response.status_code == 201

    @pytest.mark.parametrize("url", ["not-a-url", "ftp://example.com", "", "javascript:alert(1)"])
    def test_invalid_url(self, client, store, url):
        response = shorten(client, url=url, shortcode="abc123")

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_URL_FORMAT"
        assert store.count() == 0

    @pytest.mark.parametrize("validity", [0, -1, 2.5, "ten"])
    def test_invalid_validity(self, client, validity):
        response = shorten(client, url="https://example.com", validity=validity)

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_VALIDITY"

    @pytest.mark.parametrize("shortcode", ["ab", "has-dash", "x" * 21])
    def test_invalid_shortcode(self, client, shortcode):
        response = shorten(client, url="https://example.com", shortcode=shortcode)

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_SHORTCODE_FORMAT"

    def test_missing_url_is_invalid_request(self, client):
        response = client.post("/shorturls", json={"validity": 5})

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid request body", "code": "INVALID_REQUEST"}


class TestRedirect:
    """GET /{shortcode}"""

    def test_redirect_then_expire(self, client, clock):
        shorten(client, url="https://example.com/page", validity=1, shortcode="abc123")

        clock.advance(seconds=30)
        response = client.get("/abc123", follow_redirects=False)
        assert response.status_code == 302
        assert response.headers["location"] == "https://example.com/page"

        clock.advance(seconds=60)
        response = client.get("/abc123", follow_redirects=False)
        assert response.status_code == 410
        assert response.json() == {
            "error": "This short URL has expired",
            "code": "URL_EXPIRED",
            "expiredAt": "2025-01-01T12:01:00.000Z",
        }

        stats = client.get("/shorturls/abc123").json()
        assert stats["isExpired"] is True
        assert stats["totalClicks"] == 1
        assert stats["clickHistory"][0]["timestamp"] == "2025-01-01T12:00:30.000Z"

    def test_unknown_shortcode(self, client):
        response = client.get("/zzz999", follow_redirects=False)

        assert response.status_code == 404
        assert response.json()["code"] == "SHORTCODE_NOT_FOUND"

    def test_malformed_shortcode_is_not_found(self, client):
        response = client.get("/a-b", follow_redirects=False)

        assert response.status_code == 404
        assert response.json()["code"] == "SHORTCODE_NOT_FOUND"

    def test_click_metadata_is_recorded(self, client):
        shorten(client, url="https://example.com", shortcode="abc123")

        client.get(
            "/abc123",
            follow_redirects=False,
            headers={
                "Referer": "https://news.example.org/",
                "User-Agent": "pytest-agent",
                "X-Forwarded-For": "192.168.1.10, 10.0.0.1",
            },
        )
        client.get("/abc123", follow_redirects=False, headers={"User-Agent": ""})

        history = client.get("/shorturls/abc123").json()["clickHistory"]
        assert history[0] == {
            "timestamp": "2025-01-01T12:00:00.000Z",
            "referrer": "https://news.example.org/",
            "userAgent": "pytest-agent",
            "ipAddress": "192.168.1.10",
            "location": "Local Network",
        }
        assert history[1]["referrer"] == "Direct"
        assert history[1]["userAgent"] == "Unknown"
        assert history[1]["location"] == "Unknown Location"


class TestStats:
    """GET /shorturls/{shortcode}"""

    def test_stats_shape(self, client):
        shorten(client, url="https://example.com/page", validity=10, shortcode="abc123")
        for _ in range(3):
            client.get("/abc123", follow_redirects=False)

        response = client.get("/shorturls/abc123")

        assert response.status_code == 200
        body = response.json()
        assert body["shortcode"] == "abc123"
        assert body["originalUrl"] == "https://example.com/page"
        assert body["createdAt"] == "2025-01-01T12:00:00.000Z"
        assert body["expiresAt"] == "2025-01-01T12:10:00.000Z"
        assert body["isExpired"] is False
        assert body["totalClicks"] == 3
        assert len(body["clickHistory"]) == 3

    def test_stats_unknown_code(self, client):
        response = client.get("/shorturls/zzz999")

        assert response.status_code == 404
        assert response.json() == {"error": "Shortcode 'zzz999' not found", "code": "SHORTCODE_NOT_FOUND"}

    def test_stats_malformed_code(self, client):
        response = client.get("/shorturls/ab")

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_SHORTCODE_FORMAT"


class TestServiceEndpoints:
    """Health, root and fallbacks."""

    def test_health_counts_urls(self, client):
        shorten(client, url="https://example.com", shortcode="abc123")
        shorten(client, url="https://example.com")

        response = client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["totalUrls"] == 2
        assert body["uptime"] >= 0
        assert body["timestamp"].endswith("Z")

    def test_root(self, client):
        assert client.get("/").json()["version"] == "1.0.0"

    def test_unknown_route(self, client):
        response = client.get("/shorturls/abc123/extra")

        assert response.status_code == 404
        assert response.json() == {
            "error": "Route not found",
            "code": "ROUTE_NOT_FOUND",
            "path": "/shorturls/abc123/extra",
            "method": "GET",
        }

    def test_process_time_header(self, client):
        assert "x-process-time" in client.get("/health").headers


@pytest.mark.asyncio
async def test_concurrent_creation_of_same_shortcode(store, audit):
    """
    Fire many creations for the same custom shortcode at once.

    Exactly one request wins; every other one gets a collision and the stored
    target is the winner's.
    """
    app = create_app(store=store, audit=audit)
    transport = httpx.ASGITransport(app=app)

    async with httpx.AsyncClient(transport=transport, base_url="http://test") as http:
        responses = await asyncio.gather(*[
            http.post("/shorturls", json={"url": f"https://example.com/{i}", "shortcode": "race01"})
            for i in range(25)
        ])

    statuses = [r.status_code for r in responses]
    assert statuses.count(201) == 1
    assert statuses.count(409) == 24

    winner = statuses.index(201)
    assert store.get("race01").original_url == f"https://example.com/{winner}"
    assert store.count() == 1


@pytest.mark.asyncio
async def test_concurrent_redirects_count_every_click(store, audit):
    app = create_app(store=store, audit=audit)
    transport = httpx.ASGITransport(app=app)

    async with httpx.AsyncClient(transport=transport, base_url="http://test") as http:
        await http.post("/shorturls", json={"url": "https://example.com", "shortcode": "abc123"})
        responses = await asyncio.gather(*[http.get("/abc123") for _ in range(50)])

    assert all(r.status_code == 302 for r in responses)
    assert len(store.get_analytics("abc123")) == 50


def test_lifespan_reports_startup_and_shutdown(store):
    """Startup and shutdown entries are delivered before the app finishes closing."""
    messages = []

    def handler(request: httpx.Request) -> httpx.Response:
        messages.append(json.loads(request.content)["message"])
        return httpx.Response(200, json={"logID": "1"})

    audit = AuditLogger(
        endpoint="http://logs.test/evaluation-service/logs",
        token="secret-token",
        client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )
    app = create_app(store=store, audit=audit)

    with TestClient(app):
        pass

    assert f"{SERVICE_NAME} starting up" in messages
    assert messages[-1] == f"{SERVICE_NAME} shutting down"
    assert audit.pending == 0
