"""Spending categories and the counterparty -> category lookup"""

import json
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Pattern, Sequence, Tuple, Union

from sms_gateway.domain.exceptions import InvalidTaxonomyError

# Keywords this short only match whole words ("ola" must not hit "motorola")
SHORT_KEYWORD_MAX_LEN = 3


@dataclass(frozen=True)
class Category:
    id: str
    display_name: str
    keywords: Tuple[str, ...] = ()
    _matchers: Tuple[Pattern[str], ...] = field(default=(), init=False, repr=False, compare=False)

    def __post_init__(self):
        matchers = tuple(
            re.compile(rf"(?<![a-z0-9]){re.escape(k)}(?![a-z0-9])")
            for k in self.keywords
            if len(k) <= SHORT_KEYWORD_MAX_LEN
        )
        object.__setattr__(self, "_matchers", matchers)

    def matches(self, normalized_name: str) -> bool:
        """Substring hit on any long keyword, whole-word hit on any short one"""
        if any(k in normalized_name for k in self.keywords if len(k) > SHORT_KEYWORD_MAX_LEN):
            return True
        return any(m.search(normalized_name) for m in self._matchers)


FOOD = Category(
    "food",
    "Food",
    (
        "swiggy", "zomato", "food", "pizza", "burger", "restaurant", "cafe", "dhaba", "kitchen",
        "catering", "hotel", "eats", "dine", "dominos", "mcdonald", "kfc", "subway", "biryani", "chai",
        "bakery", "starbucks", "haldiram", "sweets",
    ),
)
TRANSPORT = Category(
    "transport",
    "Transport",
    (
        "uber", "ola", "rapido", "train", "metro", "railway", "irctc", "bus", "transport", "travel",
        "flight", "airline", "airways", "cab", "taxi", "makemytrip", "yatra", "redbus", "goibibo",
        "petrol", "diesel", "fuel", "indigo", "bounce", "yulu", "parking",
    ),
)
SHOPPING = Category(
    "shopping",
    "Shopping",
    (
        "amazon", "flipkart", "myntra", "ajio", "nykaa", "tatacliq", "tata cliq", "meesho", "snapdeal",
        "shop", "store", "mart", "bazaar", "mall", "market", "clothing", "fashion", "purchase",
        "retail", "bigbasket", "grofer", "blinkit", "zepto", "decathlon", "ikea", "croma",
    ),
)
BILLS = Category(
    "bills",
    "Bills",
    (
        "bill", "recharge", "electric", "water", "gas", "utility", "phone", "mobile", "broadband",
        "internet", "wifi", "dth", "airtel", "jio", "vodafone", "vi", "bsnl", "tata power", "tata play",
        "postpaid", "prepaid", "fastag", "insurance", "rent",
    ),
)
ENTERTAINMENT = Category(
    "entertainment",
    "Entertainment",
    (
        "netflix", "prime", "hotstar", "disney", "sony", "zee", "movie", "game", "play", "sport",
        "subscription", "premium", "theatre", "concert", "event", "ticket", "entertainment", "music",
        "spotify", "gaana", "bookmyshow", "pvr", "inox", "youtube",
    ),
)
HEALTHCARE = Category(
    "healthcare",
    "Healthcare",
    (
        "hospital", "clinic", "doctor", "medical", "pharma", "medicine", "health", "pharmacy",
        "apollo", "diagnostic", "lab", "consultation", "dentist", "physician", "therapy", "treatment",
        "1mg", "netmeds", "practo",
    ),
)
OTHER = Category("other", "Other")

DEFAULT_TAXONOMY: Tuple[Category, ...] = (FOOD, TRANSPORT, SHOPPING, BILLS, ENTERTAINMENT, HEALTHCARE, OTHER)


def load_taxonomy(path: Union[str, Path]) -> Tuple[Category, ...]:
    """
    Read an ordered taxonomy from a JSON file.

    The file holds a list of {"id", "name", "keywords"} objects; list order is
    the match order. An "other" entry is appended when the file has none.
    """
    try:
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise InvalidTaxonomyError(f"Cannot read category taxonomy {path}: {e}") from e

    if not isinstance(raw, list) or not raw:
        raise InvalidTaxonomyError("Category taxonomy must be a non-empty list")

    categories: List[Category] = []
    for item in raw:
        if not isinstance(item, dict) or not item.get("id") or not item.get("name"):
            raise InvalidTaxonomyError(f"Invalid taxonomy entry: {item!r}")
        keywords = item.get("keywords", [])
        if not isinstance(keywords, list) or not all(isinstance(k, str) for k in keywords):
            raise InvalidTaxonomyError(f"Keywords of {item['id']} must be a list of strings")
        categories.append(
            Category(str(item["id"]), str(item["name"]), tuple(k.lower() for k in keywords if k.strip()))
        )

    if not any(c.id == OTHER.id for c in categories):
        categories.append(OTHER)
    return tuple(categories)


class Categorizer:
    """First category whose keywords match the lower-cased counterparty wins"""

    def __init__(self, taxonomy: Sequence[Category] = DEFAULT_TAXONOMY):
        self.taxonomy = tuple(taxonomy)
        self.default = next((c for c in self.taxonomy if c.id == OTHER.id), OTHER)

    def categorize(self, counterparty: Optional[str]) -> str:
        normalized = (counterparty or "").lower()
        if normalized:
            for category in self.taxonomy:
                if category.keywords and category.matches(normalized):
                    return category.display_name
        return self.default.display_name

    def get_by_id(self, category_id: str) -> Category:
        return next((c for c in self.taxonomy if c.id == category_id), self.default)

    def get_by_name(self, name: str) -> Category:
        """Lookup by display name or id, case-insensitive"""
        lowered = (name or "").strip().lower()
        return next(
            (c for c in self.taxonomy if c.display_name.lower() == lowered or c.id.lower() == lowered),
            self.default,
        )
