import logging

import pytest
import requests

from dashboard_api import get_dashboard_stats, load_dashboard
from http_client import ApiClient, ApiResponseError
from moment_api import create_moment, delete_moment, get_moment, list_moments, update_moment
from offer_api import create_offer, delete_offer, get_active_offers, get_all_offers, toggle_offer_active, update_offer
from review_api import (
    create_review,
    delete_review,
    get_all_reviews,
    get_featured_reviews,
    toggle_review_featured,
    update_review,
)
from schemas import FormValidationError, MomentDraft, OfferDraft, RestaurantSettings
from settings_api import get_settings, update_settings
from storage import MemoryStorage
from tests.conftest import RecordingSession, make_response
from visit_api import VISITED_KEY, track_visit, track_visit_once


# ------------- Moments -------------

def test_moment_lifecycle(client, app, png):
    first = create_moment(MomentDraft(image=png, caption="Pongal lunch", displayOrder=2), client=client)
    hidden = create_moment(MomentDraft(image=png, caption="Kitchen", displayOrder=1, isActive=False), client=client)
    assert first["isActive"] is True
    assert first["displayOrder"] == 2

    assert [m["caption"] for m in list_moments(client=client)] == ["Pongal lunch"]
    assert app.state.log[-1] == ("GET", "/api/moments", "active=true")
    assert [m["caption"] for m in list_moments(active_only=False, client=client)] == ["Kitchen", "Pongal lunch"]
    assert app.state.log[-1] == ("GET", "/api/moments", "")

    updated = update_moment(hidden["_id"], MomentDraft(caption="Our kitchen", displayOrder=1, isActive=True), client=client)
    assert updated["caption"] == "Our kitchen"
    assert updated["imageUrl"] == hidden["imageUrl"]
    assert get_moment(hidden["_id"], client=client)["isActive"] is True

    delete_moment(first["_id"], client=client)
    assert list(app.state.db["moment"]) == [hidden["_id"]]


def test_moment_update_is_multipart_without_image():
    session = RecordingSession(make_response(200, {"_id": "m1"}))
    api = ApiClient(base_url="http://api.example", session=session)
    update_moment("m1", MomentDraft(caption="Evening", displayOrder=4, isActive=False), client=api)
    call = session.calls[0]
    assert call["method"] == "PUT"
    assert call["files"] == [
        ("caption", (None, "Evening")),
        ("displayOrder", (None, "4")),
        ("isActive", (None, "false")),
    ]


def test_moment_create_requires_image():
    session = RecordingSession()
    api = ApiClient(base_url="http://api.example", session=session)
    with pytest.raises(FormValidationError) as exc:
        create_moment(MomentDraft(caption="no picture"), client=api)
    assert exc.value.errors == {"image": "Image is required."}
    assert session.calls == []


# ------------- Offers -------------

def test_offer_crud(client, app):
    created = create_offer(OfferDraft(title="Thali Tuesday", price="149", originalPrice=""), client=client)
    assert app.state.bodies[-1] == {
        "title": "Thali Tuesday",
        "description": "",
        "price": 149.0,
        "originalPrice": None,
        "tag": "Special Offer",
        "color": "from-brand-primary to-brand-secondary",
        "isActive": True,
    }
    assert [o["title"] for o in get_active_offers(client=client)] == ["Thali Tuesday"]

    toggled = toggle_offer_active(created, client=client)
    assert app.state.bodies[-1] == {"isActive": False}
    assert toggled["isActive"] is False
    assert get_active_offers(client=client) == []
    assert len(get_all_offers(client=client)) == 1

    update_offer(created["_id"], {"tag": "Weekend"}, client=client)
    assert app.state.bodies[-1] == {"tag": "Weekend"}

    delete_offer(created["_id"], client=client)
    assert get_all_offers(client=client) == []


def test_offer_draft_validation_runs_before_request():
    session = RecordingSession()
    api = ApiClient(base_url="http://api.example", session=session)
    with pytest.raises(FormValidationError) as exc:
        create_offer(OfferDraft(title=" ", price="abc"), client=api)
    assert exc.value.errors["title"] == "Title is required."
    assert exc.value.errors["price"] == "Price must be a number."
    assert session.calls == []


def test_offer_color_must_come_from_palette():
    with pytest.raises(FormValidationError) as exc:
        OfferDraft(title="Biryani", price=199, color="bg-red-500").validated()
    assert "color" in exc.value.errors


# ------------- Reviews -------------

def test_review_flow(client, app):
    review = create_review({"name": "Anu", "content": " Best dosa in town ", "rating": 5, "email": ""}, client=client)
    assert app.state.bodies[-1] == {"name": "Anu", "content": "Best dosa in town", "rating": 5}
    assert get_featured_reviews(client=client) == []

    featured = toggle_review_featured(review, client=client)
    assert featured["isFeatured"] is True
    assert [r["name"] for r in get_featured_reviews(client=client)] == ["Anu"]

    update_review(review["_id"], {"isFeatured": False}, client=client)
    assert get_featured_reviews(client=client) == []
    assert len(get_all_reviews(client=client)) == 1

    delete_review(review["_id"], client=client)
    assert get_all_reviews(client=client) == []


def test_review_rating_out_of_range():
    with pytest.raises(FormValidationError) as exc:
        create_review({"content": "ok", "rating": 6}, client=ApiClient(session=RecordingSession()))
    assert "rating" in exc.value.errors


def test_review_content_required():
    with pytest.raises(FormValidationError) as exc:
        create_review({"content": "   "}, client=ApiClient(session=RecordingSession()))
    assert exc.value.errors["content"] == "Message is required."


# ------------- Settings / dashboard -------------

def test_settings_round_trip(client):
    assert get_settings(client=client)["openingTime"] == "11:00"
    saved = update_settings(
        RestaurantSettings(openingTime="10:30", closedDays=["Monday"], specialClosedDates=["2025-12-25T00:00:00.000Z"]),
        client=client,
    )
    assert saved["openingTime"] == "10:30"
    assert saved["specialClosedDates"] == ["2025-12-25"]
    assert get_settings(client=client)["closedDays"] == ["Monday"]


def test_update_settings_error_propagates():
    session = RecordingSession(make_response(500, {"message": "db down"}))
    with pytest.raises(ApiResponseError, match="db down"):
        update_settings({"isShopOpen": False}, client=ApiClient(session=session))


def test_dashboard_stats(client, seed_item):
    seed_item()
    track_visit(client=client)
    raw = get_dashboard_stats(client=client)
    assert raw["totalItems"] == 1
    stats = load_dashboard(client=client)
    assert stats.totalVisits == 1
    assert stats.visitorTrend[0].count == 1


# ------------- Visits -------------

def test_track_visit_once_per_session(client, app):
    session_storage = MemoryStorage()
    assert track_visit_once(session_storage, client=client) is True
    assert track_visit_once(session_storage, client=client) is False
    assert app.state.db["visits"] == 1
    assert session_storage.get_item(VISITED_KEY) == "true"

    # a new tab gets a fresh session store
    assert track_visit_once(MemoryStorage(), client=client) is True
    assert app.state.db["visits"] == 2


def test_track_visit_never_raises(caplog):
    api = ApiClient(base_url="http://api.example", session=RecordingSession(requests.ConnectionError("down")))
    with caplog.at_level(logging.WARNING, logger="visit_api"):
        assert track_visit(client=api) is False
    assert "Error tracking visit" in caplog.text


def test_track_visit_logs_bad_status(caplog):
    api = ApiClient(base_url="http://api.example", session=RecordingSession(make_response(503, text="", content_type=None)))
    with caplog.at_level(logging.WARNING, logger="visit_api"):
        assert track_visit(client=api) is False
    assert "Failed to track visit (503)" in caplog.text
