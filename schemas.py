"""
Data schemas for the Taste of Madurai client

Records coming back from the backend are round-tripped as plain dicts; the
Pydantic models below describe what the admin forms build and send, and the
few aggregates the client reads field by field.

- ImageUpload         -> a file picked for a multipart upload
- FoodItemDraft       -> add-item form buffer (POST /api/food-items)
- MomentDraft         -> gallery moment form (POST/PUT /api/moments)
- OfferDraft          -> special offer form (POST/PUT /api/offers)
- ReviewDraft         -> public feedback form (POST /api/reviews)
- RestaurantSettings  -> hours and closures (GET/PUT /api/settings)
- DashboardStats      -> admin dashboard aggregate (GET /api/dashboard/stats)
"""

import mimetypes
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

CATEGORIES = ("main_course", "appetizer", "drink", "combo")
FOOD_TYPES = ("veg", "nonveg")

WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")

OFFER_COLORS = (
    "from-brand-primary to-brand-secondary",
    "from-brand-secondary to-yellow-500",
    "from-brand-dark to-gray-800",
    "from-emerald-600 to-emerald-400",
    "from-purple-600 to-pink-500",
)
DEFAULT_OFFER_COLOR = OFFER_COLORS[0]
DEFAULT_OFFER_TAG = "Special Offer"

MAX_IMAGE_MB = 5
ACCEPTED_IMAGE_TYPES = ("image/png", "image/jpg", "image/jpeg", "image/webp")


class FormValidationError(ValueError):
    """Client-side validation failed; nothing was sent."""

    def __init__(self, errors: Dict[str, str]):
        self.errors = dict(errors)
        super().__init__("; ".join(f"{k}: {v}" for k, v in self.errors.items()))


def errors_from(exc: ValidationError) -> Dict[str, str]:
    """Flatten a pydantic ValidationError into {field: first message}."""
    out: Dict[str, str] = {}
    for err in exc.errors():
        field = str(err["loc"][0]) if err["loc"] else "__all__"
        ctx_error = (err.get("ctx") or {}).get("error")
        out.setdefault(field, str(ctx_error) if ctx_error is not None else err["msg"])
    return out


# ---------- Uploads ----------

class ImageUpload(BaseModel):
    filename: str
    content: bytes = Field(..., repr=False)
    content_type: str = "application/octet-stream"

    @property
    def size(self) -> int:
        return len(self.content)

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "ImageUpload":
        p = Path(path)
        guessed, _ = mimetypes.guess_type(p.name)
        return cls(filename=p.name, content=p.read_bytes(), content_type=guessed or "application/octet-stream")


def check_image(upload: ImageUpload) -> Optional[str]:
    """Return the error message for an unacceptable upload, else None."""
    if upload.content_type not in ACCEPTED_IMAGE_TYPES:
        return "Only PNG/JPG/JPEG/WEBP images are allowed."
    if upload.size / (1024 * 1024) > MAX_IMAGE_MB:
        return f"Image must be ≤ {MAX_IMAGE_MB}MB."
    return None


# ---------- Food items ----------

def add_ingredient(ingredients: List[str], raw: str) -> List[str]:
    """Append a trimmed ingredient unless it is blank or already present (case-insensitive)."""
    trimmed = (raw or "").strip()
    if not trimmed:
        return list(ingredients)
    if trimmed.lower() in (i.lower() for i in ingredients):
        return list(ingredients)
    return [*ingredients, trimmed]


class FoodItemDraft(BaseModel):
    """Mutable buffer behind the add-item form. Nothing is checked until submit."""

    name: str = ""
    description: str = ""
    image: Optional[ImageUpload] = None
    rate: Union[str, float, int] = ""
    type: str = "veg"
    vegan: bool = False
    glutenFree: bool = False
    ingredients: List[str] = Field(default_factory=list)
    category: str = "main_course"
    spiceLevel: Union[str, int] = 0
    isChefRecommended: bool = False
    isAvailable: bool = True

    def set_type(self, value: str) -> None:
        # switching to non-veg drops the vegan flag
        if value == "nonveg" and self.vegan:
            self.vegan = False
        self.type = value

    def validated(self) -> "FoodItemSubmission":
        try:
            return FoodItemSubmission.model_validate(dict(self))
        except ValidationError as e:
            raise FormValidationError(errors_from(e)) from e


class FoodItemSubmission(BaseModel):
    name: str
    description: str
    image: Optional[ImageUpload] = Field(None, validate_default=True)
    rate: float
    type: Literal["veg", "nonveg"]
    vegan: bool = False
    glutenFree: bool = False
    ingredients: List[str]
    category: str
    spiceLevel: int = 0
    isChefRecommended: bool = False
    isAvailable: bool = True

    @field_validator("name")
    @classmethod
    def _name_required(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Name is required.")
        return v.strip()

    @field_validator("description")
    @classmethod
    def _description_length(cls, v: str) -> str:
        if len(v.strip()) < 10:
            raise ValueError("Description should be at least 10 characters.")
        return v.strip()

    @field_validator("image")
    @classmethod
    def _image_required(cls, v: Optional[ImageUpload]) -> ImageUpload:
        if v is None:
            raise ValueError("Image is required.")
        return v

    @field_validator("rate", mode="before")
    @classmethod
    def _positive_rate(cls, v: Any) -> float:
        try:
            rate = float(v)
        except (TypeError, ValueError):
            raise ValueError("Rate must be positive.")
        if rate <= 0:
            raise ValueError("Rate must be positive.")
        return rate

    @field_validator("vegan")
    @classmethod
    def _vegan_needs_veg(cls, v: bool, info) -> bool:
        if v and info.data.get("type") == "nonveg":
            raise ValueError("Non-veg item cannot be vegan.")
        return v

    @field_validator("ingredients")
    @classmethod
    def _some_ingredients(cls, v: List[str]) -> List[str]:
        cleaned = [str(i).strip() for i in v if str(i).strip()]
        if not cleaned:
            raise ValueError("Add at least one ingredient.")
        return cleaned

    @field_validator("category")
    @classmethod
    def _known_category(cls, v: str) -> str:
        if not v:
            raise ValueError("Category is required.")
        if v not in CATEGORIES:
            raise ValueError("Choose a valid category.")
        return v

    @field_validator("spiceLevel", mode="before")
    @classmethod
    def _spice_range(cls, v: Any) -> int:
        try:
            level = int(v)
        except (TypeError, ValueError):
            raise ValueError("Choose a spice level between 0 and 5.")
        if level < 0 or level > 5:
            raise ValueError("Choose a spice level between 0 and 5.")
        return level

    def to_payload(self) -> Dict[str, Any]:
        return dict(self)


# ---------- Moments ----------

class MomentDraft(BaseModel):
    image: Optional[ImageUpload] = None
    caption: str = ""
    displayOrder: int = 0
    isActive: bool = True

    @classmethod
    def from_moment(cls, moment: Dict[str, Any]) -> "MomentDraft":
        return cls(
            caption=moment.get("caption") or "",
            displayOrder=moment.get("displayOrder") or 0,
            isActive=moment.get("isActive", True) is not False,
        )


# ---------- Offers ----------

class OfferDraft(BaseModel):
    title: str = ""
    description: str = ""
    price: Union[str, float] = ""
    originalPrice: Union[str, float, None] = ""
    tag: str = DEFAULT_OFFER_TAG
    color: str = DEFAULT_OFFER_COLOR
    isActive: bool = True

    @classmethod
    def from_offer(cls, offer: Dict[str, Any]) -> "OfferDraft":
        return cls(
            title=offer.get("title") or "",
            description=offer.get("description") or "",
            price=offer.get("price", ""),
            originalPrice=offer.get("originalPrice") or "",
            tag=offer.get("tag") or DEFAULT_OFFER_TAG,
            color=offer.get("color") or DEFAULT_OFFER_COLOR,
            isActive=bool(offer.get("isActive", True)),
        )

    def validated(self) -> "OfferSubmission":
        try:
            return OfferSubmission.model_validate(dict(self))
        except ValidationError as e:
            raise FormValidationError(errors_from(e)) from e


class OfferSubmission(BaseModel):
    title: str
    description: str = ""
    price: float = Field(..., ge=0)
    originalPrice: Optional[float] = Field(None, ge=0)
    tag: str = DEFAULT_OFFER_TAG
    color: Literal[OFFER_COLORS] = DEFAULT_OFFER_COLOR
    isActive: bool = True

    @field_validator("title")
    @classmethod
    def _title_required(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Title is required.")
        return v.strip()

    @field_validator("price", mode="before")
    @classmethod
    def _numeric_price(cls, v: Any) -> float:
        try:
            return float(v)
        except (TypeError, ValueError):
            raise ValueError("Price must be a number.")

    @field_validator("originalPrice", mode="before")
    @classmethod
    def _blank_original_price(cls, v: Any) -> Optional[float]:
        if v is None or v == "":
            return None
        try:
            return float(v)
        except (TypeError, ValueError):
            raise ValueError("Original price must be a number.")

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump()


# ---------- Reviews ----------

class ReviewDraft(BaseModel):
    name: str = Field("Anonymous", min_length=1)
    content: str = Field(..., min_length=1)
    rating: int = Field(5, ge=1, le=5)
    email: Optional[str] = None
    phone: Optional[str] = None

    @field_validator("content")
    @classmethod
    def _content_required(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Message is required.")
        return v.strip()

    @field_validator("email", "phone", mode="before")
    @classmethod
    def _blank_is_none(cls, v: Any) -> Optional[str]:
        if v is None or not str(v).strip():
            return None
        return str(v).strip()

    @classmethod
    def build(cls, **data: Any) -> "ReviewDraft":
        try:
            return cls(**data)
        except ValidationError as e:
            raise FormValidationError(errors_from(e)) from e

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


# ---------- Settings and dashboard ----------

def iso_day(value: Any) -> str:
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    text = str(value).strip()
    # accepts "2025-12-24" and "2025-12-24T00:00:00.000Z"
    return date.fromisoformat(text[:10]).isoformat()


class RestaurantSettings(BaseModel):
    model_config = ConfigDict(extra="ignore")

    openingTime: str = Field("11:00", pattern=r"^\d{1,2}:\d{2}$")
    closingTime: str = Field("22:00", pattern=r"^\d{1,2}:\d{2}$")
    closedDays: List[str] = Field(default_factory=list)
    specialClosedDates: List[str] = Field(default_factory=list)
    isShopOpen: bool = True

    @field_validator("openingTime", "closingTime", mode="before")
    @classmethod
    def _blank_time(cls, v: Any, info) -> Any:
        if not v:
            return cls.model_fields[info.field_name].default
        return v

    @field_validator("closedDays", "specialClosedDates", "isShopOpen", mode="before")
    @classmethod
    def _null_is_default(cls, v: Any, info) -> Any:
        if v is None:
            field = cls.model_fields[info.field_name]
            return field.get_default(call_default_factory=True)
        return v

    @field_validator("closedDays")
    @classmethod
    def _known_days(cls, v: List[str]) -> List[str]:
        unknown = [d for d in v if d not in WEEKDAYS]
        if unknown:
            raise ValueError(f"Unknown weekday(s): {', '.join(unknown)}")
        return v

    @field_validator("specialClosedDates", mode="before")
    @classmethod
    def _normalize_dates(cls, v: Any) -> Any:
        if isinstance(v, (list, tuple)):
            return [iso_day(d) for d in v]
        return v


class VisitorPoint(BaseModel):
    model_config = ConfigDict(extra="allow")

    date: str
    count: int = 0


class DashboardStats(BaseModel):
    model_config = ConfigDict(extra="allow")

    totalItems: int = 0
    activeItems: int = 0
    totalOffers: int = 0
    activeOffers: int = 0
    totalReviews: int = 0
    totalMoments: int = 0
    totalVisits: int = 0
    visitorTrend: List[VisitorPoint] = Field(default_factory=list)
    recentReviews: List[Dict[str, Any]] = Field(default_factory=list)
