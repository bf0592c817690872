from typing import Any, Dict, List, Mapping, Optional, Union

from http_client import ApiClient, default_client
from schemas import ReviewDraft


# Public

def create_review(payload: Union[ReviewDraft, Mapping[str, Any]], client: Optional[ApiClient] = None) -> Dict[str, Any]:
    draft = payload if isinstance(payload, ReviewDraft) else ReviewDraft.build(**payload)
    client = client or default_client()
    return client.json("/api/reviews", method="POST", body=draft.to_payload())


def get_featured_reviews(client: Optional[ApiClient] = None) -> List[Dict[str, Any]]:
    client = client or default_client()
    return client.json("/api/reviews/featured")


# Admin

def get_all_reviews(client: Optional[ApiClient] = None) -> List[Dict[str, Any]]:
    client = client or default_client()
    return client.json("/api/reviews/all")


def update_review(review_id: str, updates: Mapping[str, Any], client: Optional[ApiClient] = None) -> Dict[str, Any]:
    client = client or default_client()
    return client.json(f"/api/reviews/{review_id}", method="PUT", body=dict(updates))


def toggle_review_featured(review: Mapping[str, Any], client: Optional[ApiClient] = None) -> Dict[str, Any]:
    return update_review(review["_id"], {"isFeatured": not review.get("isFeatured")}, client=client)


def delete_review(review_id: str, client: Optional[ApiClient] = None) -> Any:
    client = client or default_client()
    return client.json(f"/api/reviews/{review_id}", method="DELETE")
