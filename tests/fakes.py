"""Network stand-ins shaped like the parts of ``requests`` the code touches."""

from __future__ import annotations

import io
import json

import requests
from PIL import Image


def png_bytes(size=(64, 64), color=(0, 0, 0, 255), mode="RGBA") -> bytes:
    buf = io.BytesIO()
    Image.new(mode, size, color).save(buf, format="PNG")
    return buf.getvalue()


class FakeResponse:
    def __init__(self, status_code=200, content=b"", json_body=None, reason="OK", headers=None):
        self.status_code = status_code
        self.reason = reason
        if json_body is not None:
            content = json.dumps(json_body).encode()
        self.content = content
        self.headers = dict(headers or {})
        self.bytes_read = 0
        self.closed = False

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.closed = True
        return False

    def iter_content(self, chunk_size=1):
        for start in range(0, len(self.content), chunk_size):
            chunk = self.content[start:start + chunk_size]
            self.bytes_read += len(chunk)
            yield chunk

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    @property
    def text(self) -> str:
        return self.content.decode("utf-8", errors="replace")

    def json(self):
        return json.loads(self.content)


class FakeSession:
    """Records every call; replies with canned responses or raises."""

    def __init__(self, get_response=None, post_response=None, get_exc=None, post_exc=None):
        self.get_response = get_response or FakeResponse(content=png_bytes())
        self.post_response = post_response or FakeResponse(json_body={"IpfsHash": "bafytesthash"})
        self.get_exc = get_exc
        self.post_exc = post_exc
        self.gets: list[dict] = []
        self.posts: list[dict] = []

    @property
    def calls(self) -> int:
        return len(self.gets) + len(self.posts)

    def get(self, url, **kwargs):
        self.gets.append({"url": url, **kwargs})
        if self.get_exc:
            raise self.get_exc
        return self.get_response

    def post(self, url, **kwargs):
        self.posts.append({"url": url, **kwargs})
        if self.post_exc:
            raise self.post_exc
        return self.post_response

    def uploaded_bytes(self, index: int = -1) -> bytes:
        _, data, _ = self.posts[index]["files"]["file"]
        return data


def connection_error(message="connection refused") -> requests.ConnectionError:
    return requests.ConnectionError(message)
