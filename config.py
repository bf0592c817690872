import os
from pathlib import Path

API_URL = (os.getenv("API_URL") or os.getenv("VITE_API_URL") or "http://localhost:5000").rstrip("/")
REQUEST_TIMEOUT = int(os.getenv("API_TIMEOUT", "15"))

STORAGE_PATH = os.getenv(
    "TOM_STORAGE_PATH",
    str(Path.home() / ".taste_of_madurai" / "local_storage.json"),
)

# Opening hours in settings are wall-clock times in this zone
SHOP_TIMEZONE = os.getenv("SHOP_TIMEZONE", "Europe/Stockholm")

SEARCH_DEBOUNCE_SECONDS = 0.3

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
