import json
import os
import sys
from typing import Any, List, Optional

import pytest
import requests

# Ensure project root in path
ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from fastapi.testclient import TestClient

from http_client import ApiClient
from schemas import ImageUpload
from tests.fake_backend import create_app

BASE = "http://testserver"


def make_response(status: int = 200, body: Any = None, content_type: Optional[str] = "application/json", text: Optional[str] = None) -> requests.Response:
    r = requests.Response()
    r.status_code = status
    if text is not None:
        r._content = text.encode("utf-8")
    elif body is not None:
        r._content = json.dumps(body).encode("utf-8")
    else:
        r._content = b""
    if content_type:
        r.headers["content-type"] = content_type
    return r


class RecordingSession:
    """requests-style session that replays canned responses and records calls."""

    def __init__(self, *responses: Any) -> None:
        self.responses: List[Any] = list(responses)
        self.calls: List[dict] = []

    def request(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        self.calls.append({"method": method, "url": url, **kwargs})
        if not self.responses:
            return make_response(200, {})
        nxt = self.responses.pop(0)
        if isinstance(nxt, Exception):
            raise nxt
        return nxt


@pytest.fixture()
def app():
    return create_app()


@pytest.fixture()
def client(app):
    with TestClient(app) as session:
        yield ApiClient(base_url=BASE, session=session)


@pytest.fixture()
def png():
    return ImageUpload(filename="dosa.png", content=b"\x89PNG\r\n\x1a\nfake", content_type="image/png")


@pytest.fixture()
def seed_item(client, png):
    from food_api import create_food_item

    def _seed(**overrides):
        payload = {
            "name": "Masala Dosa",
            "description": "Crispy rice crepe with potato masala",
            "rate": 119,
            "type": "veg",
            "vegan": True,
            "ingredients": ["rice", "potato"],
            "category": "main_course",
            "spiceLevel": 2,
            "image": png,
        }
        payload.update(overrides)
        return create_food_item(payload, client=client)

    return _seed
