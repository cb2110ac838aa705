"""Tests for photo references and signed URLs."""

import json
from datetime import date

import httpx
import pytest

from bodylog.core.config import settings
from bodylog.core.photos import (
    decode_photo_paths,
    encode_photo_paths,
    photo_path,
    sign_photo_url,
    sign_photo_urls,
)


@pytest.fixture
def storage(monkeypatch):
    monkeypatch.setattr(settings, "STORAGE_URL", "https://store.example")
    monkeypatch.setattr(settings, "STORAGE_KEY", "service-key")
    monkeypatch.setattr(settings, "PHOTO_BUCKET", "progress-photos")
    monkeypatch.setattr(settings, "SIGNED_URL_TTL_SECONDS", 3600)


def mock_client(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


class TestPaths:
    def test_photo_path(self):
        assert photo_path("u1", date(2025, 12, 5), "front") == "u1/2025-12-05/front.jpg"

    def test_unknown_slot(self):
        with pytest.raises(ValueError):
            photo_path("u1", date(2025, 12, 5), "top")


class TestJsonBlob:
    def test_encode(self):
        text = encode_photo_paths({"front": "a.jpg", "back": "b.jpg"})
        assert json.loads(text) == {"front": "a.jpg", "back": "b.jpg"}

    def test_encode_empty_is_none(self):
        assert encode_photo_paths({}) is None
        assert encode_photo_paths(None) is None

    def test_decode(self):
        assert decode_photo_paths('{"side": "s.jpg"}') == {"side": "s.jpg"}

    @pytest.mark.parametrize("text", [None, "", "{oops", "[1, 2]", '"front"', "42"])
    def test_decode_garbage_is_empty(self, text):
        assert decode_photo_paths(text) == {}

    def test_decode_deeply_nested_is_empty(self):
        assert decode_photo_paths("[" * 100000) == {}

    def test_decode_drops_unknown_keys_and_non_strings(self):
        text = json.dumps({"front": 3, "other": "x.jpg", "side": "s.jpg", "back": ""})
        assert decode_photo_paths(text) == {"side": "s.jpg"}


class TestSigning:
    def test_signed_url(self, storage):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.method == "POST"
            assert request.url.path == "/storage/v1/object/sign/progress-photos/u1/2025-12-05/front.jpg"
            assert request.headers["Authorization"] == "Bearer service-key"
            assert json.loads(request.content) == {"expiresIn": 3600}
            return httpx.Response(
                200,
                json={"signedURL": "/object/sign/progress-photos/u1/2025-12-05/front.jpg?token=abc"},
            )

        with mock_client(handler) as client:
            url = sign_photo_url("u1/2025-12-05/front.jpg", client=client)

        assert url == (
            "https://store.example/storage/v1/object/sign/progress-photos/"
            "u1/2025-12-05/front.jpg?token=abc"
        )

    def test_path_is_quoted(self, storage):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/storage/v1/object/sign/progress-photos/u1/odd?name#x.jpg"
            assert request.url.query == b""
            return httpx.Response(200, json={"signedURL": "/object/sign/x?token=t"})

        with mock_client(handler) as client:
            assert sign_photo_url("u1/odd?name#x.jpg", client=client) is not None

    def test_custom_validity(self, storage):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen.update(json.loads(request.content))
            return httpx.Response(200, json={"signedURL": "/object/sign/x?token=t"})

        with mock_client(handler) as client:
            sign_photo_url("x", expires_in=60, client=client)

        assert seen == {"expiresIn": 60}

    def test_http_error_is_none(self, storage):
        with mock_client(lambda request: httpx.Response(400, json={"error": "not found"})) as client:
            assert sign_photo_url("missing.jpg", client=client) is None

    def test_bad_body_is_none(self, storage):
        with mock_client(lambda request: httpx.Response(200, text="<html>")) as client:
            assert sign_photo_url("a.jpg", client=client) is None

    def test_not_configured(self, monkeypatch):
        monkeypatch.setattr(settings, "STORAGE_URL", None)
        assert sign_photo_url("a.jpg") is None

    def test_sign_all_slots(self, storage):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"signedURL": f"/object/sign{request.url.path[-10:]}"})

        with mock_client(handler) as client:
            urls = sign_photo_urls({"front": "u1/d/front.jpg"}, client=client)

        assert urls["front"].startswith("https://store.example/storage/v1/object/sign")
        assert urls["side"] is None
        assert urls["back"] is None
