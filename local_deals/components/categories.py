"""
Deal category catalogue.

Categories are stored as free text by businesses and older listings use
legacy names ("salon", "gym", "pub"). Everything is mapped onto one
canonical tag through a static lookup table before comparison.
"""

import re
from typing import Dict, List, Optional, Tuple

ALL_CATEGORIES = "all"

# (canonical value, display label)
CATEGORY_OPTIONS: List[Tuple[str, str]] = [
    ("food", "Food & Dining"),
    ("beauty-salon", "Beauty & Salon"),
    ("spa-wellness", "Spa & Wellness"),
    ("fitness-gym", "Fitness & Gym"),
    ("fashion-apparel", "Fashion & Apparel"),
    ("electronics-gadgets", "Electronics & Gadgets"),
    ("rentals-travel", "Rentals & Travel"),
    ("shopping", "Shopping"),
    ("home-services", "Home Services"),
    ("automotive", "Automotive"),
    ("entertainment", "Entertainment"),
    ("healthcare", "Healthcare"),
]

CATEGORY_FILTERS: List[Tuple[str, str]] = [(ALL_CATEGORIES, "All")] + CATEGORY_OPTIONS

LEGACY_CATEGORY_MAP: Dict[str, str] = {
    "food": "food",
    "salon": "beauty-salon",
    "beauty": "beauty-salon",
    "beauty-salon": "beauty-salon",
    "spa": "spa-wellness",
    "spa-wellness": "spa-wellness",
    "gym": "fitness-gym",
    "fitness": "fitness-gym",
    "fitness-gym": "fitness-gym",
    "fashion": "fashion-apparel",
    "fashion-apparel": "fashion-apparel",
    "electronics": "electronics-gadgets",
    "electronics-gadgets": "electronics-gadgets",
    "rental bikes and cars": "rentals-travel",
    "rental bikes & cars": "rentals-travel",
    "rentals-travel": "rentals-travel",
    "shopping": "shopping",
    "services": "home-services",
    "home-services": "home-services",
    "auto": "automotive",
    "automobile": "automotive",
    "automotive": "automotive",
    "pub": "entertainment",
    "entertainment": "entertainment",
    "healthcare": "healthcare",
}

_LABELS: Dict[str, str] = dict(CATEGORY_OPTIONS)


def normalize_category(category: Optional[str]) -> str:
    """Map a raw category string onto its canonical tag ("" when missing)."""
    if not category:
        return ""
    key = category.strip().lower()
    return LEGACY_CATEGORY_MAP.get(key, key)


def category_matches_filter(category: Optional[str], category_filter: str) -> bool:
    """True when the deal category passes the category filter value."""
    if not category_filter or category_filter == ALL_CATEGORIES:
        return True
    return normalize_category(category) == normalize_category(category_filter)


def get_category_label(category: Optional[str]) -> str:
    """Display label for a category; unknown tags are title-cased."""
    normalized = normalize_category(category)
    if normalized in _LABELS:
        return _LABELS[normalized]

    words = [part for part in re.split(r"[-_\s]+", category or "") if part]
    return " ".join(word[0].upper() + word[1:] for word in words)
