import re
from typing import Any, Optional

import config

CDN_HOST = "res.cloudinary.com"
UPLOAD_MARKER = "/upload/"

_LOCAL_RASTER = re.compile(r"\.(jpg|jpeg|png)$", re.IGNORECASE)


def resolve_image(url: Any, width: Optional[int] = None, base_url: Optional[str] = None) -> str:
    """
    Turn an image URL from the backend into something a browser can load.

    "/uploads/123.jpg"                       -> "<API_URL>/uploads/123.webp"
    "https://res.cloudinary.com/.../upload/x" -> transformation spliced in when `width` is given
    "https://elsewhere/..."                  -> unchanged
    """
    if not url:
        return ""
    url = str(url)

    if CDN_HOST in url and width:
        idx = url.find(UPLOAD_MARKER)
        if idx != -1:
            cut = idx + len(UPLOAD_MARKER)
            return f"{url[:cut]}w_{width},c_limit,q_auto,f_auto/{url[cut:]}"

    if url.startswith("http"):
        return url

    path = url[1:] if url.startswith("/") else url
    # every local upload has a .webp sibling on the server
    if path.startswith("uploads/"):
        path = _LOCAL_RASTER.sub(".webp", path)

    base = (base_url if base_url is not None else config.API_URL).rstrip("/")
    return f"{base}/{path}"
