import json
import logging
from typing import Any, Dict, List, Mapping, Optional

from http_client import (
    ApiClient,
    ApiResponseError,
    FormPayload,
    UnexpectedContentTypeError,
    build_query,
    default_client,
    is_json,
)
from schemas import ImageUpload

logger = logging.getLogger(__name__)

FILTER_KEYS = ("q", "category", "type", "vegan", "glutenFree", "available", "spiceMin", "spiceMax", "sort")

# always sent on create, defaulted when missing
BOOLEAN_DEFAULTS = {
    "vegan": False,
    "glutenFree": False,
    "isAvailable": True,
    "isChefRecommended": False,
}


def _append(form: FormPayload, key: str, value: Any) -> None:
    if key == "image":
        if isinstance(value, ImageUpload):
            form.append_file("image", value)
    elif key == "ingredients":
        form.append("ingredients", json.dumps(list(value)))
    else:
        form.append(key, value)


def _create_form(payload: Mapping[str, Any]) -> FormPayload:
    form = FormPayload()
    for key, value in payload.items():
        if key in BOOLEAN_DEFAULTS:
            continue
        if value is None:
            continue
        _append(form, key, value)
    for key, default in BOOLEAN_DEFAULTS.items():
        value = payload.get(key)
        form.append(key, default if value is None else bool(value))
    return form


def _update_form(payload: Mapping[str, Any]) -> FormPayload:
    form = FormPayload()
    for key, value in payload.items():
        if value is None:
            continue
        if key in BOOLEAN_DEFAULTS:
            value = bool(value)
        _append(form, key, value)
    return form


def list_food_items(filters: Optional[Mapping[str, Any]] = None, client: Optional[ApiClient] = None) -> List[Dict[str, Any]]:
    client = client or default_client()
    wanted = {k: v for k, v in (filters or {}).items() if k in FILTER_KEYS}
    return client.json(f"/api/food-items{build_query(wanted)}")


def get_food_item(item_id: str, client: Optional[ApiClient] = None) -> Dict[str, Any]:
    client = client or default_client()
    r = client.raw(f"/api/food-items/{item_id}")
    if not 200 <= r.status_code < 300:
        raise ApiResponseError(f"Request failed {r.status_code}", r.status_code)
    if not is_json(r):
        raise UnexpectedContentTypeError(f"Expected JSON, got: {r.text[:120]}…")
    try:
        return r.json()
    except ValueError:
        raise UnexpectedContentTypeError(f"Expected JSON, got: {r.text[:120]}…")


def create_food_item(payload: Mapping[str, Any], client: Optional[ApiClient] = None) -> Dict[str, Any]:
    client = client or default_client()
    return client.form("/api/food-items", _create_form(payload), method="POST")


def update_food_item(item_id: str, payload: Mapping[str, Any], client: Optional[ApiClient] = None) -> Dict[str, Any]:
    """Multipart when a new image is attached, otherwise a JSON partial update."""
    client = client or default_client()
    if isinstance(payload.get("image"), ImageUpload):
        return client.form(f"/api/food-items/{item_id}", _update_form(payload), method="PUT")
    return client.json(f"/api/food-items/{item_id}", method="PUT", body=dict(payload))


def delete_food_item(item_id: str, client: Optional[ApiClient] = None) -> Any:
    client = client or default_client()
    return client.json(f"/api/food-items/{item_id}", method="DELETE")
