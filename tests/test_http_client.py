import pytest
import requests

from http_client import (
    ApiClient,
    ApiResponseError,
    ApiUnavailableError,
    FormPayload,
    UnexpectedContentTypeError,
    build_query,
    form_fetch,
    json_fetch,
)
from tests.conftest import RecordingSession, make_response


# ------------- build_query -------------

def test_build_query_skips_empty_and_repeats_lists():
    assert build_query({"a": None, "b": "", "c": "x", "d": [1, 2]}) == "?c=x&d=1&d=2"


def test_build_query_empty():
    assert build_query({}) == ""
    assert build_query(None) == ""
    assert build_query({"q": None, "sort": ""}) == ""


def test_build_query_booleans_and_numbers():
    assert build_query({"vegan": True, "glutenFree": False, "spiceMin": 0}) == "?vegan=true&glutenFree=false&spiceMin=0"


def test_build_query_encodes_values():
    assert build_query({"q": "paneer tikka & naan"}) == "?q=paneer+tikka+%26+naan"


# ------------- json_fetch -------------

def test_json_fetch_returns_parsed_body():
    session = RecordingSession(make_response(200, [{"_id": "1"}]))
    assert json_fetch("http://api/x", session=session) == [{"_id": "1"}]
    call = session.calls[0]
    assert call["method"] == "GET"
    assert call["headers"]["Content-Type"] == "application/json"


def test_json_fetch_404_uses_message():
    session = RecordingSession(make_response(404, {"message": "Not found"}))
    with pytest.raises(ApiResponseError) as exc:
        json_fetch("http://api/x", session=session)
    assert str(exc.value) == "Not found"
    assert exc.value.status == 404


def test_json_fetch_falls_back_to_error_key():
    session = RecordingSession(make_response(400, {"error": "rate must be positive"}))
    with pytest.raises(ApiResponseError, match="rate must be positive"):
        json_fetch("http://api/x", method="POST", body={"rate": -1}, session=session)


def test_json_fetch_500_without_json():
    session = RecordingSession(make_response(500, text="<html>boom</html>", content_type="text/html"))
    with pytest.raises(ApiResponseError) as exc:
        json_fetch("http://api/x", session=session)
    assert str(exc.value) == "Request failed (500)"
    assert exc.value.data is None


def test_json_fetch_non_json_success_is_none():
    session = RecordingSession(make_response(200, text="ok", content_type="text/plain"))
    assert json_fetch("http://api/x", session=session) is None


def test_json_fetch_caller_headers_win():
    session = RecordingSession(make_response(200, {}))
    json_fetch("http://api/x", headers={"Content-Type": "application/vnd.api+json", "X-Trace": "1"}, session=session)
    headers = session.calls[0]["headers"]
    assert headers["Content-Type"] == "application/vnd.api+json"
    assert headers["X-Trace"] == "1"


def test_transport_failure_is_wrapped():
    session = RecordingSession(requests.ConnectionError("refused"))
    with pytest.raises(ApiUnavailableError) as exc:
        json_fetch("http://api/x", session=session)
    assert isinstance(exc.value.__cause__, requests.ConnectionError)


def test_timeout_is_wrapped():
    session = RecordingSession(requests.Timeout("slow"))
    with pytest.raises(ApiUnavailableError, match="timed out"):
        json_fetch("http://api/x", session=session)


# ------------- form_fetch -------------

def test_form_fetch_never_sets_content_type(png):
    session = RecordingSession(make_response(201, {"_id": "1"}))
    body = FormPayload().append("caption", "Diwali night").append_file("image", png)
    assert form_fetch("http://api/moments", body=body, session=session) == {"_id": "1"}
    call = session.calls[0]
    assert "Content-Type" not in call["headers"]
    assert "json" not in call
    assert call["files"] == [
        ("caption", (None, "Diwali night")),
        ("image", ("dosa.png", png.content, "image/png")),
    ]


def test_form_fetch_error_message():
    session = RecordingSession(make_response(400, {"error": "Image is required"}))
    with pytest.raises(ApiResponseError, match="Image is required"):
        form_fetch("http://api/moments", body=FormPayload().append("caption", ""), session=session)


def test_form_fetch_rejects_empty_body():
    session = RecordingSession()
    with pytest.raises(ValueError):
        form_fetch("http://api/moments", body=FormPayload(), session=session)
    assert session.calls == []


def test_json_label_with_html_body():
    session = RecordingSession(
        make_response(502, text="<html>Bad Gateway</html>"),
        make_response(200, text="<html>ok</html>"),
    )
    with pytest.raises(ApiResponseError, match=r"Request failed \(502\)") as exc:
        json_fetch("http://api/offers", session=session)
    assert exc.value.status == 502
    with pytest.raises(UnexpectedContentTypeError, match="Expected JSON, got: <html>ok"):
        json_fetch("http://api/offers", session=session)


def test_form_payload_text_values(png):
    form = FormPayload()
    form.append("isActive", True).append("displayOrder", 3).append("rate", 12.0).append("price", 12.5)
    form.append_file("image", png)
    assert form.fields() == {"isActive": "true", "displayOrder": "3", "rate": "12", "price": "12.5", "image": "dosa.png"}
    assert form.has_file("image")
    assert not form.has_file("rate")
    assert "rate" in form
    assert len(form) == 5


# ------------- ApiClient -------------

def test_client_joins_base_url():
    session = RecordingSession(make_response(200, {}))
    ApiClient(base_url="http://shop.example/", session=session).json("/api/settings")
    assert session.calls[0]["url"] == "http://shop.example/api/settings"


def test_client_passes_timeout():
    session = RecordingSession(make_response(200, {}))
    ApiClient(base_url="http://shop.example", session=session, timeout=3).json("/api/settings")
    assert session.calls[0]["timeout"] == 3
