import logging
from typing import Optional

from http_client import ApiClient, default_client
from storage import Storage

logger = logging.getLogger(__name__)

VISITED_KEY = "visited_today"


def track_visit(client: Optional[ApiClient] = None) -> bool:
    """Record a site visit. Never raises; returns whether the backend accepted it."""
    client = client or default_client()
    try:
        r = client.raw("/api/visits/track", method="POST")
    except Exception as e:
        logger.warning("Error tracking visit: %s", e)
        return False
    if not 200 <= r.status_code < 300:
        logger.warning("Failed to track visit (%s)", r.status_code)
        return False
    return True


def track_visit_once(session_storage: Storage, client: Optional[ApiClient] = None) -> bool:
    """Track at most once per session store. Returns True if a request was made."""
    if session_storage.get_item(VISITED_KEY):
        return False
    track_visit(client=client)
    session_storage.set_item(VISITED_KEY, "true")
    return True
