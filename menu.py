"""Read-side helpers for the public site: labels, search and the curated lists."""

from typing import Any, Dict, Iterable, List, Mapping

SPICE_LABELS = ("None", "Mild", "Medium", "Hot", "Very Hot", "Fire")

CATEGORY_LABELS = {
    "main_course": "Main Course",
    "appetizer": "Appetizer",
    "drink": "Drinks",
    "combo": "Combos",
}


def item_id(item: Mapping[str, Any]) -> str:
    return str(item.get("id") or item.get("_id") or "")


def spice_label(level: Any) -> str:
    try:
        idx = int(level)
    except (TypeError, ValueError):
        return SPICE_LABELS[0]
    if 0 <= idx < len(SPICE_LABELS):
        return SPICE_LABELS[idx]
    return SPICE_LABELS[0]


def category_label(category: str) -> str:
    return CATEGORY_LABELS.get(category, category)


def format_price(rate: Any) -> str:
    return f"{rate} kr"


def matches_term(item: Mapping[str, Any], term: str) -> bool:
    """Case-insensitive match on name, description or any ingredient."""
    term = (term or "").strip().lower()
    if not term:
        return True
    if term in str(item.get("name") or "").lower():
        return True
    if term in str(item.get("description") or "").lower():
        return True
    return any(term in str(g).lower() for g in item.get("ingredients") or [])


def search_items(items: Iterable[Mapping[str, Any]], term: str) -> List[Mapping[str, Any]]:
    return [it for it in items if matches_term(it, term)]


def chef_recommended(items: List[Dict[str, Any]], fallback: int = 8) -> List[Dict[str, Any]]:
    """Chef picks, or the first few items when nothing is flagged."""
    picks = [x for x in items if x.get("chefRecommended") or x.get("isChefRecommended")]
    return picks if picks else items[:fallback]


def related_items(item: Mapping[str, Any], items: Iterable[Mapping[str, Any]], limit: int = 4) -> List[Mapping[str, Any]]:
    own = item_id(item)
    same = [i for i in items if item_id(i) != own and i.get("type") == item.get("type")]
    return same[:limit]


def gallery_items(items: Iterable[Mapping[str, Any]], limit: int = 8) -> List[Mapping[str, Any]]:
    return [i for i in items if i.get("imageUrl")][:limit]


def sorted_moments(moments: Iterable[Mapping[str, Any]]) -> List[Mapping[str, Any]]:
    # stable, so equal displayOrder keeps server order
    return sorted(moments, key=lambda m: m.get("displayOrder") or 0)
