"""Tests for artifact sinks."""

import os

import httpx
import pytest

from pdfpng.exceptions import SinkFailure
from pdfpng.config import reload_config
from pdfpng.sinks.directory import DirectorySink, check_output_dir, resolve_output_dir
from pdfpng.sinks.http_upload import HttpUploadSink, check_upload_url, content_type_for
from pdfpng.sinks.memory import MemorySink


@pytest.fixture
def env(monkeypatch):
    yield monkeypatch
    monkeypatch.undo()
    reload_config()


class TestDirectorySink:
    """Tests for DirectorySink."""

    def test_writes_file_and_creates_directory(self, tmp_path):
        target = tmp_path / "nested" / "out"
        sink = DirectorySink(str(target))

        path = sink.save("doc_page_1.png", b"png-bytes")

        assert path == os.path.join(str(target), "doc_page_1.png")
        assert (target / "doc_page_1.png").read_bytes() == b"png-bytes"

    def test_overwrites_existing_file(self, tmp_path):
        sink = DirectorySink(str(tmp_path))
        sink.save("a.png", b"old")
        sink.save("a.png", b"new")
        assert (tmp_path / "a.png").read_bytes() == b"new"

    def test_rejects_path_components(self, tmp_path):
        sink = DirectorySink(str(tmp_path))
        with pytest.raises(SinkFailure):
            sink.save("../escape.png", b"x")

    def test_write_error_is_sink_failure(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_bytes(b"")
        sink = DirectorySink(str(blocker / "sub"))
        with pytest.raises(SinkFailure, match="Failed to write to selected folder"):
            sink.save("a.png", b"x")

    def test_relative_dir_resolves_against_cwd(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        assert resolve_output_dir("pdf_output") == os.path.join(str(tmp_path), "pdf_output")
        assert resolve_output_dir(str(tmp_path)) == str(tmp_path)


class TestTargetChecks:
    """Tests for client-chosen target validation."""

    def test_any_output_dir_without_root(self, env, tmp_path):
        env.delenv("SAVE_OUTPUT_ROOT", raising=False)
        reload_config()
        assert check_output_dir(str(tmp_path)) == str(tmp_path)

    def test_output_dir_must_stay_in_root(self, env, tmp_path):
        env.setenv("SAVE_OUTPUT_ROOT", str(tmp_path / "root"))
        reload_config()

        inside = check_output_dir(str(tmp_path / "root" / "a"))
        assert inside.endswith(os.path.join("root", "a"))
        with pytest.raises(ValueError):
            check_output_dir(str(tmp_path / "root" / ".." / "other"))
        with pytest.raises(ValueError):
            check_output_dir(str(tmp_path / "rootless"))

    def test_any_upload_url_without_allowlist(self, env):
        env.delenv("SAVE_URL_ALLOWLIST", raising=False)
        reload_config()
        assert check_upload_url("http://example.com/save") == "http://example.com/save"

    def test_upload_url_allowlist(self, env):
        env.setenv("SAVE_URL_ALLOWLIST", "http://localhost:8089/, http://saver/")
        reload_config()

        assert check_upload_url("http://saver/api/save-file")
        with pytest.raises(ValueError):
            check_upload_url("http://169.254.169.254/latest")

    def test_content_type_for(self):
        assert content_type_for("png") == "image/png"
        assert content_type_for("jpg") == "image/jpeg"
        assert content_type_for(".JPEG") == "image/jpeg"


class TestMemorySink:
    """Tests for MemorySink."""

    def test_records_names_in_delivery_order(self):
        sink = MemorySink()
        assert sink.save("b.png", b"2") == "b.png"
        sink.save("a.png", b"1")
        assert sink.delivered == ["b.png", "a.png"]


def make_client(handler):
    return httpx.Client(transport=httpx.MockTransport(handler), base_url="http://saver")


class TestHttpUploadSink:
    """Tests for HttpUploadSink against a mocked endpoint."""

    def test_successful_upload(self):
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["url"] = str(request.url)
            captured["body"] = request.read()
            return httpx.Response(200, json={"success": True, "path": "/srv/out/a_page_1.png"})

        sink = HttpUploadSink("/api/save-file", output_dir=" exports ", client=make_client(handler))
        location = sink.save("a_page_1.png", b"PNGDATA")

        assert location == "/srv/out/a_page_1.png"
        assert captured["url"] == "http://saver/api/save-file"
        body = captured["body"]
        assert b'name="file"; filename="a_page_1.png"' in body
        assert b"PNGDATA" in body
        assert b'name="filename"' in body
        assert b'name="outputDir"' in body
        assert b"exports" in body

    def test_output_dir_omitted_when_unset(self):
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["body"] = request.read()
            return httpx.Response(200, json={"success": True, "path": "p"})

        HttpUploadSink("/save", client=make_client(handler)).save("a.png", b"x")
        assert b"outputDir" not in captured["body"]

    def test_error_response_raises_with_message(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(400, json={"error": "Missing file or filename"})

        sink = HttpUploadSink("/save", client=make_client(handler))
        with pytest.raises(SinkFailure, match="Missing file or filename"):
            sink.save("a.png", b"x")

    def test_non_json_error_response(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(502, content=b"bad gateway")

        sink = HttpUploadSink("/save", client=make_client(handler))
        with pytest.raises(SinkFailure, match="HTTP 502"):
            sink.save("a.png", b"x")

    def test_transport_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        sink = HttpUploadSink("/save", client=make_client(handler))
        with pytest.raises(SinkFailure, match="connection refused"):
            sink.save("a.png", b"x")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
