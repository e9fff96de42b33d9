"""Tests for audioscribe.server module."""

from __future__ import annotations

import httpx
import pytest
from fastapi.testclient import TestClient

from audioscribe.server import create_app


def upstream(handler) -> TestClient:
    return TestClient(create_app(transport=httpx.MockTransport(handler)))


def unreachable(request: httpx.Request) -> httpx.Response:
    pytest.fail(f"unexpected upstream request to {request.url}")


class TestProxyAudio:
    def test_missing_url_is_400(self) -> None:
        with upstream(unreachable) as client:
            response = client.get("/api/proxy-audio")
        assert response.status_code == 400
        assert response.json() == {"error": "URL is required"}

    def test_empty_url_is_400(self) -> None:
        with upstream(unreachable) as client:
            response = client.get("/api/proxy-audio", params={"url": ""})
        assert response.status_code == 400
        assert response.json() == {"error": "URL is required"}

    def test_relays_bytes_and_content_type(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert str(request.url) == "https://cdn.example.com/ep.mp3?sig=a%26b"
            return httpx.Response(200, content=b"\xff\xfbaudio", headers={"content-type": "audio/mpeg"})

        with upstream(handler) as client:
            response = client.get(
                "/api/proxy-audio", params={"url": "https://cdn.example.com/ep.mp3?sig=a%26b"}
            )

        assert response.status_code == 200
        assert response.content == b"\xff\xfbaudio"
        assert response.headers["content-type"] == "audio/mpeg"

    def test_upstream_status_passed_through(self) -> None:
        with upstream(lambda request: httpx.Response(404)) as client:
            response = client.get("/api/proxy-audio", params={"url": "https://x.test/missing.mp3"})
        assert response.status_code == 404
        assert response.json() == {"error": "Failed to fetch audio"}

    def test_upstream_exception_is_500(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        with upstream(handler) as client:
            response = client.get("/api/proxy-audio", params={"url": "https://x.test/a.mp3"})
        assert response.status_code == 500
        assert response.json() == {"error": "Failed to fetch audio"}


class TestHeaders:
    @pytest.mark.parametrize("path", ["/api/health", "/api/proxy-audio"])
    def test_cross_origin_isolation_headers(self, path: str) -> None:
        with upstream(unreachable) as client:
            response = client.get(path)
        assert response.headers["cross-origin-opener-policy"] == "same-origin"
        assert response.headers["cross-origin-embedder-policy"] == "require-corp"

    def test_cors_allows_any_origin(self) -> None:
        with upstream(unreachable) as client:
            response = client.get("/api/health", headers={"Origin": "https://app.example.com"})
        assert response.headers["access-control-allow-origin"] == "*"

    def test_health(self) -> None:
        with upstream(unreachable) as client:
            assert client.get("/api/health").json() == {"ok": True}
