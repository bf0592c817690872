from typing import Any, Dict, Optional

from http_client import ApiClient, default_client
from schemas import DashboardStats


def get_dashboard_stats(client: Optional[ApiClient] = None) -> Dict[str, Any]:
    client = client or default_client()
    return client.json("/api/dashboard/stats")


def load_dashboard(client: Optional[ApiClient] = None) -> DashboardStats:
    return DashboardStats.model_validate(get_dashboard_stats(client=client) or {})
