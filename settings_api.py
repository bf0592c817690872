from typing import Any, Dict, Mapping, Optional, Union

from http_client import ApiClient, default_client
from schemas import RestaurantSettings


def get_settings(client: Optional[ApiClient] = None) -> Dict[str, Any]:
    client = client or default_client()
    return client.json("/api/settings")


def update_settings(payload: Union[RestaurantSettings, Mapping[str, Any]], client: Optional[ApiClient] = None) -> Dict[str, Any]:
    client = client or default_client()
    body = payload.model_dump() if isinstance(payload, RestaurantSettings) else dict(payload)
    return client.json("/api/settings", method="PUT", body=body)
