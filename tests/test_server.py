import io
import os

import pytest

from infrastructure.web import store_registry
from shortener.config import Settings
from shortener.errors import GenerationExhausted

BASE: str = "http://short.test"


@pytest.fixture
def client(tmp_path):
    store_registry.configure(Settings(upload_dir=str(tmp_path / "uploads"), public_base_url=BASE))
    from server import app
    app.config["TESTING"] = True
    with app.test_client() as c:
        yield c


def post_file(client, data: bytes = b"hello world", name: str = "hello.txt", ttl=None):
    form: dict = {"file": (io.BytesIO(data), name, "text/plain")}
    if ttl is not None:
        form["ttl"] = str(ttl)
    return client.post("/api/hash/file/upload", data=form, content_type="multipart/form-data")


class TestLinkRoutes:
    """Tests for /api/hash/create and /api/hash/find."""

    def test_create(self, client) -> None:
        resp = client.get("/api/hash/create", query_string={"link": "https://example.com", "ttl": "1000"})
        assert resp.status_code == 201
        body: dict = resp.get_json()
        assert body["ok"] is True
        assert body["reasonCode"] == "success"
        assert body["record"]["link"] == "https://example.com"
        assert body["record"]["ttl"] == 1000
        assert body["shareAddress"] == f"{BASE}/{body['record']['token']}"
        assert 2 <= len(body["record"]["token"]) <= 4

    def test_missing_link(self, client) -> None:
        resp = client.get("/api/hash/create")
        assert resp.status_code == 400
        assert resp.get_json()["reasonCode"] == "invalid_request"

    def test_bad_ttl(self, client) -> None:
        resp = client.get("/api/hash/create", query_string={"link": "https://example.com", "ttl": "-1"})
        assert resp.status_code == 400

    def test_find(self, client) -> None:
        token: str = client.get(
            "/api/hash/create", query_string={"link": "https://example.com"}
        ).get_json()["record"]["token"]
        resp = client.get(f"/api/hash/find/{token}")
        assert resp.status_code == 200
        assert resp.get_json()["record"]["link"] == "https://example.com"

    def test_find_unknown(self, client) -> None:
        resp = client.get("/api/hash/find/zzzz")
        assert resp.status_code == 404
        assert resp.get_json()["reasonCode"] == "not_found"

    def test_exhaustion_maps_to_503(self, client, monkeypatch) -> None:
        def refuse(build, ttl_seconds=None):
            raise GenerationExhausted(12, 16)

        monkeypatch.setattr(store_registry.get_link_store().table, "create", refuse)
        resp = client.get("/api/hash/create", query_string={"link": "https://example.com"})
        assert resp.status_code == 503
        assert resp.headers["Retry-After"] == "1"
        assert resp.get_json()["reasonCode"] == "generation_exhausted"


class TestFileRoutes:
    """Tests for upload and file retrieval."""

    def test_upload(self, client) -> None:
        resp = post_file(client)
        assert resp.status_code == 201
        record: dict = resp.get_json()["record"]
        assert record["originalName"] == "hello.txt"
        assert record["mimeType"] == "text/plain"
        assert resp.get_json()["shareAddress"] == f"{BASE}/api/hash/file/{record['token']}?dl=0"

    def test_upload_ttl(self, client) -> None:
        assert post_file(client, ttl=5000).get_json()["record"]["ttl"] == 5000

    def test_no_file(self, client) -> None:
        resp = client.post("/api/hash/file/upload", data={}, content_type="multipart/form-data")
        assert resp.status_code == 400

    def test_empty_file_rejected_and_removed(self, client) -> None:
        resp = post_file(client, data=b"")
        assert resp.status_code == 400
        medium = store_registry.get_resource_store().reconciler.medium
        assert os.listdir(medium.root) == []

    def test_download_inline_and_attachment(self, client) -> None:
        token: str = post_file(client).get_json()["record"]["token"]

        inline = client.get(f"/api/hash/file/{token}?dl=0")
        assert inline.status_code == 200
        assert inline.data == b"hello world"
        assert inline.headers["Content-Disposition"].startswith("inline")

        attachment = client.get(f"/api/hash/file/{token}?dl=1")
        assert attachment.headers["Content-Disposition"].startswith("attachment")
        assert "hello.txt" in attachment.headers["Content-Disposition"]

    def test_dangling_reference_is_410(self, client) -> None:
        record: dict = post_file(client).get_json()["record"]
        medium = store_registry.get_resource_store().reconciler.medium
        os.unlink(medium.path_for(record["storageKey"]))

        resp = client.get(f"/api/hash/file/{record['token']}")
        assert resp.status_code == 410
        assert resp.get_json()["reasonCode"] == "dangling_reference"

    def test_unknown_file_is_404(self, client) -> None:
        resp = client.get("/api/hash/file/zzzz")
        assert resp.status_code == 404
        assert resp.get_json()["reasonCode"] == "not_found"


class TestResolveAnything:
    """Tests for GET /<token>."""

    def test_redirects_links(self, client) -> None:
        token: str = client.get(
            "/api/hash/create", query_string={"link": "https://example.com/page"}
        ).get_json()["record"]["token"]
        resp = client.get(f"/{token}")
        assert resp.status_code == 302
        assert resp.headers["Location"] == "https://example.com/page"

    def test_serves_files(self, client) -> None:
        token: str = post_file(client, data=b"bytes!").get_json()["record"]["token"]
        resp = client.get(f"/{token}")
        assert resp.status_code == 200
        assert resp.data == b"bytes!"

    def test_unknown(self, client) -> None:
        resp = client.get("/nothing-here")
        assert resp.status_code == 404
        assert resp.get_json()["ok"] is False

    def test_purged_link_is_gone(self, client) -> None:
        token: str = client.get(
            "/api/hash/create", query_string={"link": "https://example.com", "ttl": "1000"}
        ).get_json()["record"]["token"]
        store = store_registry.get_link_store()
        store.purge(now=store.table.find(token).expires_at + 0.1)
        assert client.get(f"/{token}").status_code == 404


class TestApiV1:
    """Tests for the /api/v1 blueprint."""

    def test_links(self, client) -> None:
        created = client.post("/api/v1/links", json={"link": "https://example.com", "ttl": 2000})
        assert created.status_code == 201
        token: str = created.get_json()["record"]["token"]

        found = client.get(f"/api/v1/links/{token}")
        assert found.status_code == 200
        assert found.get_json()["record"]["ttl"] == 2000

    def test_link_without_body(self, client) -> None:
        assert client.post("/api/v1/links").status_code == 400

    @pytest.mark.parametrize(
        "body",
        [
            {"link": 123},
            {"link": ["https://example.com"]},
            {"link": "https://example.com", "ttl": True},
            {"link": "https://example.com", "ttl": [1000]},
            [1],
            "https://example.com",
        ],
    )
    def test_malformed_json_is_400(self, client, body) -> None:
        resp = client.post("/api/v1/links", json=body)
        assert resp.status_code == 400
        payload: dict = resp.get_json()
        assert payload["ok"] is False
        assert payload["reasonCode"] == "invalid_request"

    def test_files(self, client) -> None:
        created = client.post(
            "/api/v1/files",
            data={"file": (io.BytesIO(b"abc"), "a.bin", "application/octet-stream")},
            content_type="multipart/form-data",
        )
        assert created.status_code == 201
        token: str = created.get_json()["record"]["token"]
        found = client.get(f"/api/v1/files/{token}")
        assert found.status_code == 200
        assert found.get_json()["record"]["originalName"] == "a.bin"

    def test_openapi(self, client) -> None:
        resp = client.get("/api/v1/openapi.json")
        assert resp.status_code == 200
        assert "/links" in resp.get_json()["paths"]


class TestHeaders:
    """Tests for response hardening."""

    def test_security_headers(self, client) -> None:
        resp = client.get("/api/hash/find/zzzz")
        assert resp.headers["X-Content-Type-Options"] == "nosniff"
        assert resp.headers["X-Frame-Options"] == "DENY"
        assert "sandbox" in resp.headers["Content-Security-Policy"]


class TestErrorBodies:
    """Tests for framework-level errors carrying a reason code."""

    def test_wrong_method_is_405_with_reason(self, client) -> None:
        resp = client.delete("/api/hash/create")
        assert resp.status_code == 405
        payload: dict = resp.get_json()
        assert payload["ok"] is False
        assert payload["reasonCode"] == "invalid_request"
        assert payload["reasonText"]

    def test_unhandled_error_is_500_without_details(self, client, monkeypatch) -> None:
        def explode(*args, **kwargs):
            raise RuntimeError("secret internals")

        monkeypatch.setattr(store_registry.get_link_store(), "resolve_link", explode)
        resp = client.get("/api/hash/find/abc")
        assert resp.status_code == 500
        payload: dict = resp.get_json()
        assert payload["reasonCode"] == "internal_error"
        assert "secret" not in payload["reasonText"]
