"""
State behind the remaining admin screens: add item, moments, offers,
reviews, settings and the dashboard.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional

from admin_items import AdminPage, DialogBusyError, PreviewRegistry
from dashboard_api import load_dashboard
from food_api import create_food_item
from http_client import ApiClient, ApiError
from image_utils import resolve_image
from moment_api import create_moment, delete_moment, list_moments, update_moment
from offer_api import create_offer, delete_offer, get_all_offers, toggle_offer_active, update_offer
from review_api import delete_review, get_all_reviews, toggle_review_featured
from schemas import (
    WEEKDAYS,
    DashboardStats,
    FoodItemDraft,
    FormValidationError,
    ImageUpload,
    MomentDraft,
    OfferDraft,
    RestaurantSettings,
    add_ingredient,
    check_image,
    iso_day,
)
from settings_api import get_settings, update_settings

logger = logging.getLogger(__name__)


# ------------- Add food item -------------

class FoodItemCreator(AdminPage):
    def __init__(self, client: Optional[ApiClient] = None) -> None:
        super().__init__(client)
        self.form = FoodItemDraft()
        self.ingredient_input = ""
        self.errors: Dict[str, str] = {}
        self.server_error = ""
        self.loading = False

    def set_type(self, value: str) -> None:
        self.form.set_type(value)

    def add_ingredient(self, raw: Optional[str] = None) -> None:
        self.form.ingredients = add_ingredient(self.form.ingredients, self.ingredient_input if raw is None else raw)
        self.ingredient_input = ""

    def remove_ingredient(self, ingredient: str) -> None:
        self.form.ingredients = [i for i in self.form.ingredients if i != ingredient]

    def select_image(self, upload: Optional[ImageUpload]) -> bool:
        if upload is None:
            self.form.image = None
            return True
        problem = check_image(upload)
        if problem:
            self.errors["image"] = problem
            return False
        self.errors.pop("image", None)
        self.form.image = upload
        return True

    def reset(self) -> None:
        self.form = FoodItemDraft()
        self.ingredient_input = ""
        self.errors = {}

    def submit(self) -> Optional[Dict[str, Any]]:
        self.server_error = ""
        try:
            submission = self.form.validated()
        except FormValidationError as e:
            self.errors = e.errors
            return None
        self.errors = {}
        self.loading = True
        try:
            created = create_food_item(submission.to_payload(), client=self.client)
        except ApiError as e:
            self.server_error = str(e) or "Failed to save item"
            return None
        finally:
            self.loading = False
        self.notify("success", f"Saved: {created.get('name')}")
        self.reset()
        return created


# ------------- Moments -------------

class MomentDialog:
    def __init__(self, previews: PreviewRegistry, moment: Optional[Mapping[str, Any]] = None) -> None:
        self.previews = previews
        self.moment = dict(moment) if moment else None
        self.draft = MomentDraft.from_moment(moment) if moment else MomentDraft()
        self.preview = resolve_image(moment.get("imageUrl"), 400) if moment else None

    @property
    def editing(self) -> bool:
        return self.moment is not None

    def select_image(self, upload: ImageUpload) -> Optional[str]:
        if upload.size > 5 * 1024 * 1024:
            return "Image must be less than 5MB"
        self.previews.release(self.preview)
        self.draft.image = upload
        self.preview = self.previews.acquire(upload)
        return None

    def close(self) -> None:
        self.previews.release(self.preview)
        self.preview = None


class MomentsPage(AdminPage):
    def __init__(self, client: Optional[ApiClient] = None, previews: Optional[PreviewRegistry] = None) -> None:
        super().__init__(client)
        self.previews = previews or PreviewRegistry()
        self.moments: List[Dict[str, Any]] = []
        self.loading = False
        self.dialog: Optional[MomentDialog] = None
        self.delete_target: Optional[Dict[str, Any]] = None

    def load(self) -> None:
        self.loading = True
        try:
            # admin sees inactive moments too
            self.moments = list_moments(active_only=False, client=self.client)
        except ApiError as e:
            self.notify("error", str(e))
        finally:
            self.loading = False

    def open_dialog(self, moment: Optional[Mapping[str, Any]] = None) -> MomentDialog:
        if self.dialog is not None:
            raise DialogBusyError("A moment dialog is already open")
        self.dialog = MomentDialog(self.previews, moment)
        return self.dialog

    def select_image(self, upload: ImageUpload) -> bool:
        problem = self._require_dialog().select_image(upload)
        if problem:
            self.notify("error", problem)
            return False
        return True

    def close_dialog(self) -> None:
        if self.dialog is not None:
            self.dialog.close()
        self.dialog = None

    def _require_dialog(self) -> MomentDialog:
        if self.dialog is None:
            raise RuntimeError("No moment dialog is open")
        return self.dialog

    def save(self) -> bool:
        dialog = self._require_dialog()
        if not dialog.editing and dialog.draft.image is None:
            self.notify("error", "Please select an image")
            return False
        try:
            if dialog.editing:
                update_moment(dialog.moment["_id"], dialog.draft, client=self.client)
                self.notify("success", "Moment updated successfully")
            else:
                create_moment(dialog.draft, client=self.client)
                self.notify("success", "Moment created successfully")
        except ApiError as e:
            self.notify("error", str(e))
            return False
        self.close_dialog()
        self.load()
        return True

    def ask_delete(self, moment: Mapping[str, Any]) -> None:
        self.delete_target = dict(moment)

    def cancel_delete(self) -> None:
        self.delete_target = None

    def confirm_delete(self) -> bool:
        if self.delete_target is None:
            return False
        target_id = self.delete_target["_id"]
        try:
            delete_moment(target_id, client=self.client)
        except ApiError as e:
            self.notify("error", str(e))
            return False
        self.notify("success", "Moment deleted successfully")
        self.moments = [m for m in self.moments if m.get("_id") != target_id]
        self.delete_target = None
        return True


# ------------- Offers -------------

class OffersPage(AdminPage):
    def __init__(self, client: Optional[ApiClient] = None) -> None:
        super().__init__(client)
        self.offers: List[Dict[str, Any]] = []
        self.loading = False
        self.form = OfferDraft()
        self.editing: Optional[Dict[str, Any]] = None

    def load(self) -> None:
        self.loading = True
        try:
            self.offers = get_all_offers(client=self.client)
        except ApiError:
            self.notify("error", "Failed to load offers")
        finally:
            self.loading = False

    def open_edit(self, offer: Mapping[str, Any]) -> None:
        self.editing = dict(offer)
        self.form = OfferDraft.from_offer(offer)

    def reset_form(self) -> None:
        self.form = OfferDraft()
        self.editing = None

    def submit(self) -> bool:
        try:
            if self.editing is not None:
                update_offer(self.editing["_id"], self.form, client=self.client)
                self.notify("success", "Offer updated successfully")
            else:
                create_offer(self.form, client=self.client)
                self.notify("success", "Offer created successfully")
        except FormValidationError as e:
            self.notify("error", next(iter(e.errors.values())))
            return False
        except ApiError as e:
            self.notify("error", str(e))
            return False
        self.reset_form()
        self.load()
        return True

    def toggle_active(self, offer: Mapping[str, Any]) -> bool:
        try:
            toggle_offer_active(offer, client=self.client)
        except ApiError:
            self.notify("error", "Failed to update status")
            return False
        self.notify("success", f"Offer {'deactivated' if offer.get('isActive') else 'activated'}")
        self.load()
        return True

    def delete(self, offer_id: str) -> bool:
        try:
            delete_offer(offer_id, client=self.client)
        except ApiError:
            self.notify("error", "Failed to delete offer")
            return False
        self.notify("success", "Offer deleted")
        self.load()
        return True


# ------------- Reviews -------------

class ReviewsPage(AdminPage):
    def __init__(self, client: Optional[ApiClient] = None) -> None:
        super().__init__(client)
        self.reviews: List[Dict[str, Any]] = []
        self.loading = False

    def load(self) -> None:
        self.loading = True
        try:
            self.reviews = get_all_reviews(client=self.client)
        except ApiError as e:
            self.notify("error", str(e) or "Failed to load reviews")
        finally:
            self.loading = False

    def toggle_featured(self, review: Mapping[str, Any]) -> bool:
        try:
            updated = toggle_review_featured(review, client=self.client)
        except ApiError as e:
            self.notify("error", str(e) or "Failed to update review")
            return False
        self.reviews = [updated if r.get("_id") == review["_id"] else r for r in self.reviews]
        self.notify("success", "Review featured on website" if updated.get("isFeatured") else "Review removed from website")
        return True

    def delete(self, review_id: str) -> bool:
        try:
            delete_review(review_id, client=self.client)
        except ApiError as e:
            self.notify("error", str(e) or "Failed to delete review")
            return False
        self.reviews = [r for r in self.reviews if r.get("_id") != review_id]
        self.notify("success", "Review deleted")
        return True

    @property
    def featured_count(self) -> int:
        return sum(1 for r in self.reviews if r.get("isFeatured"))

    @property
    def average_rating(self) -> float:
        if not self.reviews:
            return 0.0
        return round(sum(r.get("rating") or 0 for r in self.reviews) / len(self.reviews), 1)


# ------------- Settings -------------

class SettingsPage(AdminPage):
    def __init__(self, client: Optional[ApiClient] = None) -> None:
        super().__init__(client)
        self.form = RestaurantSettings()
        self.loading = False
        self.saving = False

    def load(self) -> None:
        self.loading = True
        try:
            self.form = RestaurantSettings.model_validate(get_settings(client=self.client) or {})
        except ApiError:
            self.notify("error", "Failed to load settings")
        finally:
            self.loading = False

    def toggle_day(self, day: str) -> None:
        if day not in WEEKDAYS:
            raise ValueError(f"Unknown weekday: {day}")
        days = self.form.closedDays
        self.form.closedDays = [d for d in days if d != day] if day in days else [*days, day]

    def add_date(self, value: Any) -> None:
        if not value:
            return
        day = iso_day(value)
        if day not in self.form.specialClosedDates:
            self.form.specialClosedDates = [*self.form.specialClosedDates, day]

    def remove_date(self, value: str) -> None:
        self.form.specialClosedDates = [d for d in self.form.specialClosedDates if d != value]

    def save(self) -> bool:
        self.saving = True
        try:
            update_settings(self.form, client=self.client)
        except ApiError:
            self.notify("error", "Failed to save settings")
            return False
        finally:
            self.saving = False
        self.notify("success", "Settings saved successfully")
        return True


# ------------- Dashboard -------------

class DashboardPage(AdminPage):
    def __init__(self, client: Optional[ApiClient] = None) -> None:
        super().__init__(client)
        self.stats: Optional[DashboardStats] = None

    def load(self) -> None:
        try:
            self.stats = load_dashboard(client=self.client)
        except ApiError as e:
            logger.warning("Dashboard stats unavailable: %s", e)
            self.notify("error", "Failed to fetch dashboard stats")
