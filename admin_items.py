"""
Admin "All items" page: filtered listing, inline editor and delete dialog.

browsing -> editing(id) -> saved | cancelled
browsing -> delete-confirm(id) -> deleted | cancelled

Deletes are optimistic and rolled back when the backend refuses. List loads
are fenced with a sequence number so a slow, older response never overwrites
a newer one.
"""

import logging
import threading
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional

import config
from food_api import delete_food_item, list_food_items, update_food_item
from http_client import ApiClient, ApiError
from image_utils import resolve_image
from menu import item_id, matches_term
from schemas import CATEGORIES, FormValidationError, ImageUpload, add_ingredient, check_image

logger = logging.getLogger(__name__)


class DialogBusyError(RuntimeError):
    """A dialog of the same kind is already open."""
    pass


@dataclass
class Notification:
    level: str
    message: str


class AdminPage:
    """Shared bits of every admin page: the API client and a toast queue."""

    def __init__(self, client: Optional[ApiClient] = None) -> None:
        self.client = client
        self.notifications: List[Notification] = []

    def notify(self, level: str, message: str) -> None:
        self.notifications.append(Notification(level, message))

    def last_notification(self) -> Optional[Notification]:
        return self.notifications[-1] if self.notifications else None


class PreviewRegistry:
    """Hands out blob: handles for picked images and tracks which are still alive."""

    def __init__(self) -> None:
        self._live: Dict[str, ImageUpload] = {}
        self._lock = threading.Lock()

    def acquire(self, upload: ImageUpload) -> str:
        handle = f"blob:{uuid.uuid4()}"
        with self._lock:
            self._live[handle] = upload
        return handle

    def release(self, handle: Optional[str]) -> None:
        if not handle or not handle.startswith("blob:"):
            return
        with self._lock:
            self._live.pop(handle, None)

    def get(self, handle: str) -> Optional[ImageUpload]:
        return self._live.get(handle)

    @property
    def live(self) -> int:
        return len(self._live)


class Debouncer:
    def __init__(self, delay: float, fn: Callable[[], Any]) -> None:
        self.delay = delay
        self.fn = fn
        self._timer: Optional[threading.Timer] = None
        self._lock = threading.Lock()

    def call(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = threading.Timer(self.delay, self._fire)
            self._timer.daemon = True
            self._timer.start()

    def _fire(self) -> None:
        with self._lock:
            self._timer = None
        self.fn()

    def flush(self) -> bool:
        """Run a pending call now. Returns False when nothing was pending."""
        with self._lock:
            timer, self._timer = self._timer, None
        if timer is None:
            return False
        timer.cancel()
        self.fn()
        return True

    def cancel(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = None

    @property
    def pending(self) -> bool:
        return self._timer is not None


@dataclass
class EditBuffer:
    item_id: str
    name: str = ""
    rate: Any = ""
    description: str = ""
    type: str = "veg"
    vegan: bool = False
    glutenFree: bool = False
    ingredients: List[str] = field(default_factory=list)
    category: str = "main_course"
    spiceLevel: int = 0
    ingredient_input: str = ""
    image_file: Optional[ImageUpload] = None
    image_preview: Optional[str] = None
    has_new_image: bool = False

    @classmethod
    def from_item(cls, item: Mapping[str, Any]) -> "EditBuffer":
        spice = item.get("spiceLevel")
        return cls(
            item_id=item_id(item),
            name=item.get("name") or "",
            rate=item.get("rate") if item.get("rate") is not None else "",
            description=item.get("description") or "",
            type=item.get("type") or "veg",
            vegan=bool(item.get("vegan")),
            glutenFree=bool(item.get("glutenFree")),
            ingredients=list(item.get("ingredients") or []),
            category=item.get("category") or "main_course",
            spiceLevel=spice if isinstance(spice, int) and not isinstance(spice, bool) and spice >= 0 else 0,
            image_preview=resolve_image(item.get("imageUrl")) or None,
        )

    def add_ingredient(self, raw: Optional[str] = None) -> None:
        self.ingredients = add_ingredient(self.ingredients, self.ingredient_input if raw is None else raw)
        self.ingredient_input = ""

    def remove_ingredient(self, index: int) -> None:
        del self.ingredients[index]

    def set_type(self, value: str) -> None:
        if value == "nonveg":
            self.vegan = False
        self.type = value

    def to_payload(self) -> Dict[str, Any]:
        if not self.name.strip():
            raise FormValidationError({"name": "Name is required"})
        try:
            rate = float(self.rate)
        except (TypeError, ValueError):
            raise FormValidationError({"rate": "Rate must be a number"})
        if self.type == "nonveg" and self.vegan:
            raise FormValidationError({"vegan": "Non-veg item cannot be vegan."})
        if self.category not in CATEGORIES:
            raise FormValidationError({"category": "Choose a valid category."})

        payload: Dict[str, Any] = {
            "name": self.name.strip(),
            "rate": rate,
            "description": (self.description or "").strip(),
            "type": self.type,
            "vegan": bool(self.vegan),
            "glutenFree": bool(self.glutenFree),
            "category": self.category,
            "spiceLevel": int(self.spiceLevel or 0),
            "ingredients": [str(g).strip() for g in self.ingredients if str(g).strip()],
        }
        if self.has_new_image and self.image_file is not None:
            payload["image"] = self.image_file
        return payload


class ItemBrowser(AdminPage):
    def __init__(
        self,
        client: Optional[ApiClient] = None,
        previews: Optional[PreviewRegistry] = None,
        debounce_seconds: float = config.SEARCH_DEBOUNCE_SECONDS,
    ) -> None:
        super().__init__(client)
        self.previews = previews or PreviewRegistry()

        self.items: List[Dict[str, Any]] = []
        self.loading = False
        self.error = ""

        self.q = ""
        self.filter_type = "all"
        self.filter_category = "all"
        self.filter_vegan = False
        self.filter_gluten = False

        self.edit: Optional[EditBuffer] = None
        self.delete_target: Optional[Dict[str, Any]] = None
        self.deleting = False

        self._seq = 0
        self._lock = threading.Lock()
        self._debouncer = Debouncer(debounce_seconds, self.reload)

    # ------------- Loading -------------

    def filters(self) -> Dict[str, Any]:
        return {
            "q": self.q.strip() or None,
            "type": None if self.filter_type == "all" else self.filter_type,
            "category": None if self.filter_category == "all" else self.filter_category,
            "vegan": True if self.filter_vegan else None,
            "glutenFree": True if self.filter_gluten else None,
            "sort": "-createdAt",
        }

    def load(self, filters: Optional[Mapping[str, Any]] = None) -> bool:
        """Fetch the list. Returns False if it failed or a newer load superseded it."""
        with self._lock:
            self._seq += 1
            seq = self._seq
            self.loading = True
            self.error = ""
        try:
            data = list_food_items(filters, client=self.client)
        except ApiError as e:
            with self._lock:
                if seq == self._seq:
                    self.error = str(e) or "Failed to load items"
                    self.loading = False
            return False
        with self._lock:
            if seq != self._seq:
                logger.debug("Discarding stale item list (request %s, latest %s)", seq, self._seq)
                return False
            self.items = list(data or [])
            self.loading = False
        return True

    def reload(self) -> bool:
        return self.load(self.filters())

    def set_filter(
        self,
        q: Optional[str] = None,
        type: Optional[str] = None,
        category: Optional[str] = None,
        vegan: Optional[bool] = None,
        gluten_free: Optional[bool] = None,
    ) -> None:
        if q is not None:
            self.q = q
        if type is not None:
            self.filter_type = type
        if category is not None:
            self.filter_category = category
        if vegan is not None:
            self.filter_vegan = vegan
        if gluten_free is not None:
            self.filter_gluten = gluten_free
        self._debouncer.call()

    def flush(self) -> bool:
        return self._debouncer.flush()

    def visible_items(self) -> List[Dict[str, Any]]:
        term = self.q.strip()
        if not term:
            return list(self.items)
        return [it for it in self.items if matches_term(it, term)]

    def close(self) -> None:
        self._debouncer.cancel()
        self.cancel_edit()
        self.delete_target = None

    # ------------- Editing -------------

    def _require_edit(self) -> EditBuffer:
        if self.edit is None:
            raise RuntimeError("No item is being edited")
        return self.edit

    def start_edit(self, item: Mapping[str, Any]) -> EditBuffer:
        if self.edit is not None:
            raise DialogBusyError(f"Item {self.edit.item_id} is already being edited")
        self.edit = EditBuffer.from_item(item)
        return self.edit

    def select_image(self, upload: Optional[ImageUpload]) -> bool:
        buf = self._require_edit()
        if upload is not None:
            problem = check_image(upload)
            if problem:
                self.notify("error", problem)
                return False
        self.previews.release(buf.image_preview)
        buf.image_file = upload
        buf.image_preview = self.previews.acquire(upload) if upload is not None else None
        buf.has_new_image = upload is not None
        return True

    def cancel_edit(self) -> None:
        if self.edit is None:
            return
        self.previews.release(self.edit.image_preview)
        self.edit = None

    def save_edit(self) -> Optional[Dict[str, Any]]:
        buf = self._require_edit()
        try:
            payload = buf.to_payload()
        except FormValidationError as e:
            self.notify("error", next(iter(e.errors.values())))
            return None
        try:
            updated = update_food_item(buf.item_id, payload, client=self.client)
        except ApiError as e:
            self.notify("error", str(e) or "Update failed")
            return None
        self.items = [updated if item_id(x) == buf.item_id else x for x in self.items]
        self.cancel_edit()
        self.notify("success", f"Updated: {updated.get('name')}")
        return updated

    # ------------- Deleting -------------

    def ask_delete(self, item: Mapping[str, Any]) -> None:
        if self.delete_target is not None:
            raise DialogBusyError(f"Already confirming delete of {self.delete_target['id']}")
        self.delete_target = {"id": item_id(item), "name": item.get("name")}

    def cancel_delete(self) -> None:
        if not self.deleting:
            self.delete_target = None

    def confirm_delete(self) -> bool:
        if self.delete_target is None:
            return False
        target_id, name = self.delete_target["id"], self.delete_target["name"]
        self.deleting = True
        previous = list(self.items)
        self.items = [x for x in self.items if item_id(x) != target_id]
        try:
            delete_food_item(target_id, client=self.client)
        except ApiError as e:
            self.items = previous
            self.notify("error", str(e) or "Delete failed")
            return False
        finally:
            self.deleting = False
        self.delete_target = None
        self.notify("success", f"Deleted: {name}")
        return True
