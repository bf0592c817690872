from typing import Any, Dict, List, Optional

from http_client import ApiClient, FormPayload, default_client
from schemas import FormValidationError, MomentDraft


def moment_form(draft: MomentDraft) -> FormPayload:
    form = FormPayload()
    if draft.image is not None:
        form.append_file("image", draft.image)
    form.append("caption", draft.caption)
    form.append("displayOrder", draft.displayOrder)
    form.append("isActive", draft.isActive)
    return form


def list_moments(active_only: bool = True, client: Optional[ApiClient] = None) -> List[Dict[str, Any]]:
    client = client or default_client()
    query = "?active=true" if active_only else ""
    return client.json(f"/api/moments{query}")


def get_moment(moment_id: str, client: Optional[ApiClient] = None) -> Dict[str, Any]:
    client = client or default_client()
    return client.json(f"/api/moments/{moment_id}")


def create_moment(draft: MomentDraft, client: Optional[ApiClient] = None) -> Dict[str, Any]:
    if draft.image is None:
        raise FormValidationError({"image": "Image is required."})
    client = client or default_client()
    return client.form("/api/moments", moment_form(draft), method="POST")


def update_moment(moment_id: str, draft: MomentDraft, client: Optional[ApiClient] = None) -> Dict[str, Any]:
    # image is optional here; the server keeps the old one
    client = client or default_client()
    return client.form(f"/api/moments/{moment_id}", moment_form(draft), method="PUT")


def delete_moment(moment_id: str, client: Optional[ApiClient] = None) -> Any:
    client = client or default_client()
    return client.json(f"/api/moments/{moment_id}", method="DELETE")
