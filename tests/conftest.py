"""Shared fixtures: an in-memory stand-in for the Figma API client."""

import threading

import pytest

from figma_exporter.models import Document, Node

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


def frame(node_id, name, children=()):
    return Node(id=node_id, name=name, type="FRAME", children=tuple(children))


def make_document(*pages):
    return Document(
        document=Node(id="0:0", name="Document", type="DOCUMENT", children=tuple(pages)),
        name="Design",
    )


class FakeClient:
    """Records calls and serves canned responses, safe to use from worker threads."""

    def __init__(self, document=None, fail_chunks_with=None, fail_urls=(), null_ids=()):
        self.document = document or make_document()
        self.fail_chunks_with = fail_chunks_with
        self.fail_urls = set(fail_urls)
        self.null_ids = set(null_ids)
        self.export_calls = []
        self.fetched_urls = []
        self._lock = threading.Lock()

    def fetch_document(self, project_id):
        return self.document

    def request_export_urls(self, project_id, node_ids, image_format):
        with self._lock:
            self.export_calls.append((list(node_ids), image_format))
        if self.fail_chunks_with is not None and self.fail_chunks_with in node_ids:
            from figma_exporter.errors import TransportError

            raise TransportError("connection reset", operation="request export urls")
        return {
            node_id: None if node_id in self.null_ids else f"https://img.test/{node_id}"
            for node_id in node_ids
        }

    def fetch_bytes(self, url):
        with self._lock:
            self.fetched_urls.append(url)
        if url in self.fail_urls:
            from figma_exporter.errors import ProtocolError

            raise ProtocolError(f"HTTP 500 for {url}", operation="download image")
        return PNG_BYTES

    def close(self):
        pass


@pytest.fixture
def fake_client():
    document = make_document(
        Node(
            id="0:1",
            name="Page 1",
            type="CANVAS",
            children=(frame("1:1", "Login"), frame("1:2", "Signup")),
        )
    )
    return FakeClient(document=document)
