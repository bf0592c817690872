from typing import Any, Dict, List, Mapping, Optional, Union

from http_client import ApiClient, default_client
from schemas import OfferDraft


def _body(data: Union[OfferDraft, Mapping[str, Any]]) -> Dict[str, Any]:
    if isinstance(data, OfferDraft):
        return data.validated().to_payload()
    return dict(data)


def get_active_offers(client: Optional[ApiClient] = None) -> List[Dict[str, Any]]:
    client = client or default_client()
    return client.json("/api/offers")


def get_all_offers(client: Optional[ApiClient] = None) -> List[Dict[str, Any]]:
    """Active and inactive offers, for the admin panel."""
    client = client or default_client()
    return client.json("/api/offers/all")


def create_offer(data: Union[OfferDraft, Mapping[str, Any]], client: Optional[ApiClient] = None) -> Dict[str, Any]:
    client = client or default_client()
    return client.json("/api/offers", method="POST", body=_body(data))


def update_offer(offer_id: str, data: Union[OfferDraft, Mapping[str, Any]], client: Optional[ApiClient] = None) -> Dict[str, Any]:
    client = client or default_client()
    return client.json(f"/api/offers/{offer_id}", method="PUT", body=_body(data))


def toggle_offer_active(offer: Mapping[str, Any], client: Optional[ApiClient] = None) -> Dict[str, Any]:
    return update_offer(offer["_id"], {"isActive": not offer.get("isActive")}, client=client)


def delete_offer(offer_id: str, client: Optional[ApiClient] = None) -> Any:
    client = client or default_client()
    return client.json(f"/api/offers/{offer_id}", method="DELETE")
