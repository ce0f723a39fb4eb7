"""Service categories offered in the directory.

Each category matches places whose ``category`` column contains its name or
any of its search terms (case-insensitive).
"""

from __future__ import annotations

from typing import Iterable, List, Optional

from directory.schemas import ServiceCategory

DEFAULT_SERVICE_CATEGORIES: List[ServiceCategory] = [
    ServiceCategory(
        id="chimney-sweeps",
        name="Chimney Sweep",
        search_terms=["Chimney Cleaning", "Chimney Services"],
    ),
    ServiceCategory(
        id="chimney-repair",
        name="Chimney Repair",
        search_terms=["Chimney Contractor", "Chimney Inspection", "Chimney Services"],
    ),
    ServiceCategory(
        id="masonry-contractors",
        name="Masonry Contractors",
        search_terms=["Mason", "Brick", "Stone"],
    ),
    ServiceCategory(
        id="fireplace-stores",
        name="Fireplace Store",
        search_terms=["Fireplace", "Wood Stove", "Hearth"],
    ),
    ServiceCategory(
        id="roofing-contractors",
        name="Roofing Contractor",
        search_terms=["Roofer", "Roofing"],
    ),
]


def find_category(categories: Iterable[ServiceCategory], category_id: Optional[str]) -> Optional[ServiceCategory]:
    if not category_id:
        return None
    for category in categories:
        if category.id == category_id:
            return category
    return None
