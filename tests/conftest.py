"""Shared fixtures: in-memory images and a fake HTTP session."""

import io
import os
from typing import Dict, Optional

import pytest
from PIL import Image


def make_image_bytes(fmt: str, size=(96, 96), mode: str = "RGB") -> bytes:
    """Random-noise image; noise keeps lossless formats large."""
    width, height = size
    image = Image.frombytes("RGB", size, os.urandom(width * height * 3))
    if mode != "RGB":
        image = image.convert(mode)
    buffer = io.BytesIO()
    image.save(buffer, format=fmt)
    return buffer.getvalue()


class FakeResponse:
    def __init__(self, content: bytes, status_code: int = 200, content_type: str = "", reason: str = "OK"):
        self.content = content
        self.status_code = status_code
        self.reason = reason
        self.headers: Dict[str, str] = {}
        if content_type:
            self.headers["Content-Type"] = content_type
        self.closed = False

    def close(self) -> None:
        self.closed = True


class FakeSession:
    """Stand-in for ``requests.Session`` serving canned responses by URL."""

    def __init__(self, responses: Optional[Dict[str, object]] = None):
        self.responses = dict(responses or {})
        self.requested = []
        self.timeouts = []

    def get(self, url: str, timeout: float = None):
        self.requested.append(url)
        self.timeouts.append(timeout)
        response = self.responses.get(url)
        if response is None:
            return FakeResponse(b"", status_code=404, reason="Not Found")
        if isinstance(response, BaseException):
            raise response
        return response

    def close(self) -> None:
        pass


@pytest.fixture
def png_bytes() -> bytes:
    return make_image_bytes("PNG")


@pytest.fixture
def fake_session() -> FakeSession:
    return FakeSession()
