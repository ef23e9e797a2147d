"""Presentation helpers for deal cards and the business dashboard."""

import math
from datetime import date
from typing import Optional

from ..models.deal import Deal


def get_urgency_label(
    valid_till_date: Optional[date], today: Optional[date] = None
) -> Optional[str]:
    """Short countdown shown on a deal card, or None when not urgent."""
    if valid_till_date is None:
        return None

    days = (valid_till_date - (today or date.today())).days
    if days < 0:
        return "Expired"
    if days == 0:
        return "Ends today"
    if days == 1:
        return "1 day left"
    if days <= 7:
        return f"{days} days left"
    return None


def format_offer_line(
    offer_price: Optional[str] = None,
    original_price: Optional[str] = None,
    discount_label: Optional[str] = None,
) -> str:
    bits = [
        f"Offer {offer_price}" if offer_price else None,
        f"MRP {original_price}" if original_price else None,
        discount_label or None,
    ]
    return " · ".join(bit for bit in bits if bit)


def compute_deal_health(deal: Deal) -> int:
    """
    Listing completeness score shown to businesses, 0-100.

    One point each for an image, a map location, a description of at least
    30 characters, an expiry date and any price.
    """
    checks = [
        bool(deal.image),
        deal.coordinate is not None,
        len((deal.description or "").strip()) >= 30,
        deal.valid_till_date is not None,
        bool(deal.offer_price or deal.original_price),
    ]
    passed = sum(1 for check in checks if check)
    # Round half up, matching the dashboard display
    return int(math.floor(passed / len(checks) * 100 + 0.5))


def location_text(deal: Deal) -> str:
    if deal.area and deal.city:
        return f"{deal.area}, {deal.city}"
    return deal.city or "Nearby"
