"""
"Open now" badge logic, evaluated in the shop's own timezone.

Rules, first match wins:
  1. manual override (isShopOpen false)  -> Closed
  2. today is a special closed date       -> Closed (Holiday)
  3. today is a weekly closed day         -> Closed Today
  4. opening <= now < closing             -> Open now
  5. before opening / after closing       -> Closed
"""

from datetime import datetime
from typing import Any, Mapping, NamedTuple, Optional, Union

import pytz

import config
from schemas import WEEKDAYS, RestaurantSettings


class OpenStatus(NamedTuple):
    is_open: bool
    text: str
    detail: str = ""


def to_minutes(hhmm: Optional[str]) -> int:
    if not hhmm:
        return 0
    hours, _, minutes = hhmm.partition(":")
    return int(hours) * 60 + int(minutes or 0)


def compute_status(settings: Union[RestaurantSettings, Mapping[str, Any]], now: datetime) -> OpenStatus:
    """`now` must already be the shop's local wall-clock time."""
    if not isinstance(settings, RestaurantSettings):
        settings = RestaurantSettings.model_validate(settings)

    if settings.isShopOpen is False:
        return OpenStatus(False, "Closed")

    today = now.date().isoformat()
    if any(d.startswith(today) for d in settings.specialClosedDates):
        return OpenStatus(False, "Closed (Holiday)")

    if WEEKDAYS[now.weekday()] in settings.closedDays:
        return OpenStatus(False, "Closed Today")

    mins = now.hour * 60 + now.minute
    open_mins = to_minutes(settings.openingTime)
    close_mins = to_minutes(settings.closingTime)

    if open_mins <= mins < close_mins:
        return OpenStatus(True, "Open now", f"• Closes {settings.closingTime}")
    if mins < open_mins:
        return OpenStatus(False, "Closed", f"• Opens {settings.openingTime}")
    return OpenStatus(False, "Closed", "• Opens tomorrow")


def shop_now(tz_name: Optional[str] = None) -> datetime:
    tz = pytz.timezone(tz_name or config.SHOP_TIMEZONE)
    return datetime.now(tz)


def current_status(settings: Union[RestaurantSettings, Mapping[str, Any]], tz_name: Optional[str] = None) -> OpenStatus:
    return compute_status(settings, shop_now(tz_name))
