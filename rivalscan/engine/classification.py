"""Category tags and classification merge.

Labels come from the external commentary step as a name -> category map.
Matching is exact on the venue name; anything unmatched gets the fallback.
"""

import logging
from dataclasses import replace

from rivalscan.models.venue import TargetBusiness, VenueRecord

logger = logging.getLogger(__name__)

# Tags every place carries; never a category signal
GENERIC_TAGS = frozenset({"point_of_interest", "establishment"})

# Too broad to count as a shared category between two venues
BROAD_TAGS = GENERIC_TAGS | {"food", "restaurant", "store", "meal_takeaway", "meal_delivery"}

DEFAULT_BASE_TYPES = ("restaurant",)

# Source tag -> display label. Cuisines before service styles so a
# "pizza_restaurant" + "cafe" venue reads as Pizza.
TAG_CATEGORY_LABELS = {
    "pizza_restaurant": "Pizza",
    "italian_restaurant": "Italian",
    "chinese_restaurant": "Chinese",
    "japanese_restaurant": "Japanese",
    "sushi_restaurant": "Japanese",
    "ramen_restaurant": "Japanese",
    "korean_restaurant": "Korean",
    "thai_restaurant": "Thai",
    "vietnamese_restaurant": "Vietnamese",
    "indian_restaurant": "Indian",
    "indonesian_restaurant": "Indonesian",
    "mexican_restaurant": "Mexican",
    "spanish_restaurant": "Spanish",
    "french_restaurant": "French",
    "greek_restaurant": "Greek",
    "turkish_restaurant": "Turkish",
    "lebanese_restaurant": "Middle Eastern",
    "middle_eastern_restaurant": "Middle Eastern",
    "mediterranean_restaurant": "Mediterranean",
    "american_restaurant": "American",
    "brazilian_restaurant": "Brazilian",
    "seafood_restaurant": "Seafood",
    "steak_house": "Steakhouse",
    "hamburger_restaurant": "Burgers",
    "barbecue_restaurant": "Barbecue",
    "vegetarian_restaurant": "Vegetarian",
    "vegan_restaurant": "Vegan",
    "fast_food_restaurant": "Fast Food",
    "sandwich_shop": "Sandwiches",
    "breakfast_restaurant": "Breakfast",
    "brunch_restaurant": "Brunch",
    "ice_cream_shop": "Desserts",
    "dessert_shop": "Desserts",
    "bakery": "Bakery",
    "cafe": "Cafe",
    "coffee_shop": "Cafe",
    "bar": "Bar",
    "pub": "Pub",
    "night_club": "Nightlife",
}


def base_category_types(tags: frozenset[str]) -> list[str]:
    """Target's raw tags minus the generic ones, defaulting to ["restaurant"]."""
    specific = sorted(tags - GENERIC_TAGS)
    return specific or list(DEFAULT_BASE_TYPES)


def shares_category(venue_tags: frozenset[str], target_tags: frozenset[str]) -> bool:
    """True when the two tag sets overlap on anything more specific than "restaurant"."""
    return bool((venue_tags & target_tags) - BROAD_TAGS)


def infer_category_from_tags(tags: frozenset[str]) -> str | None:
    for tag, label in TAG_CATEGORY_LABELS.items():
        if tag in tags:
            return label
    return None


def _clean_label(label: object) -> str | None:
    if isinstance(label, str) and label.strip():
        return label.strip()
    return None


def apply_classification(
    venues: list[VenueRecord],
    labels: dict[str, str],
    fallback: str,
) -> list[VenueRecord]:
    """Return copies of ``venues`` with ``assigned_category`` set.

    Every venue resolves to a label: the exact-name match in ``labels`` or
    ``fallback``. Fallbacks are logged so name mismatches stay visible.
    """
    classified = []
    for venue in venues:
        label = _clean_label(labels.get(venue.name))
        if label is None:
            logger.debug("No category label for %r, using %r", venue.name, fallback)
            label = fallback
        classified.append(replace(venue, assigned_category=label))
    return classified


def classify_target(
    target: TargetBusiness,
    label: str | None,
    fallback: str,
) -> TargetBusiness:
    """Derive the target's primary category.

    Order: the dedicated target label, then the target's own tags, then ``fallback``.
    """
    primary = _clean_label(label) or infer_category_from_tags(target.category_tags) or fallback
    return replace(target, primary_category=primary)
