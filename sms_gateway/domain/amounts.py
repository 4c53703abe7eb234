"""Amount extraction - three-tier cascade from strict currency patterns to a numeric scan"""

import re
from decimal import Decimal, InvalidOperation
from typing import List, Optional, Pattern, Sequence

# Indian grouping ("1,00,000.00") and western grouping both collapse once commas are stripped
_NUM = r"(\d[\d,]*(?:\.\d+)?)"
_CUR = r"(?:₹|rs\.?|inr|usd|\$)"

PLAUSIBLE_MIN = Decimal("10")
PLAUSIBLE_MAX = Decimal("1000000")

PRIMARY_PATTERNS: Sequence[Pattern[str]] = (
    # Rs.2,599.00 / INR 500 / ₹ 45
    re.compile(rf"(?<![a-z]){_CUR}\s*{_NUM}", re.IGNORECASE),
    # 500.00 INR / 250 rupees
    re.compile(rf"{_NUM}\s*(?:rs\.?|inr|usd|rupees)(?![a-z])", re.IGNORECASE),
    # amount of 500 / amt: Rs 500
    re.compile(rf"\b(?:amount|amt)\.?\s*(?:of|:|-)?\s*(?:{_CUR}\s*)?{_NUM}", re.IGNORECASE),
    # paid 500 / debited by 500
    re.compile(
        rf"\b(?:paid|sent|debited|spent|deducted|withdrawn|transferred|charged)\s+(?:of\s+|for\s+|by\s+|with\s+)?(?:{_CUR}\s*)?{_NUM}",
        re.IGNORECASE,
    ),
    # 500 is debited / 500 has been debited
    re.compile(rf"{_NUM}\s+(?:is|has\s+been|was|have\s+been)\s+(?:debited|deducted|spent)", re.IGNORECASE),
    # 500.00 DR
    re.compile(rf"{_NUM}\s*(?:dr|debit)(?![a-z])", re.IGNORECASE),
    # 500.00- trailing minus
    re.compile(r"(\d[\d,]*\.\d{2})-(?![\d])"),
    # 'Rs 500' quoted
    re.compile(rf"['\"]\s*(?:{_CUR}\s*)?{_NUM}\s*['\"]", re.IGNORECASE),
    # for 500 / worth 500
    re.compile(rf"\b(?:for|of|worth)\s+(?:{_CUR}\s*)?{_NUM}", re.IGNORECASE),
)

SECONDARY_PATTERNS: Sequence[Pattern[str]] = (
    # 2,599.00 or 250.50 standing alone, not part of a date like 12.04.23
    re.compile(r"(?<![\d.,/-])(\d{1,3}(?:,\d{2,3})+(?:\.\d{1,2})?|\d+\.\d{2})(?!\.?\d)"),
    # INR500 glued to letters
    re.compile(r"(?:rs|inr)\.?(\d[\d,]*(?:\.\d+)?)", re.IGNORECASE),
    re.compile(rf"\bbal(?:ance)?\.?\s*(?:is|:|-)?\s*(?:{_CUR}\s*)?{_NUM}", re.IGNORECASE),
)

_NUMERIC_TOKEN = re.compile(r"\d[\d,]*(?:\.\d+)?")

# Amounts labelled as a balance or a limit are not the transaction value
_BALANCE_LABEL = re.compile(
    r"(?:\bbal(?:ance)?|\blimit|\bbalance\s+is)\.?\s*(?:is|of|was|:|-)?\s*$", re.IGNORECASE
)

_LACS_TAGGED = re.compile(
    rf"(?:{_CUR}\s*)?\d[\d,]*(?:\.\d+)?\s*(?:lakh|lakhs|lac|lacs|crore|crores|l)(?![a-z])",
    re.IGNORECASE,
)


def parse_amount(raw: str) -> Optional[Decimal]:
    """Strip thousands separators and parse; None when the token is not a number"""
    cleaned = raw.replace(",", "").strip().rstrip(".")
    if not cleaned:
        return None
    try:
        value = Decimal(cleaned)
    except InvalidOperation:
        return None
    return value if value.is_finite() else None


def _is_balance_labelled(body: str, start: int) -> bool:
    window = body[max(0, start - 30):start]
    return _BALANCE_LABEL.search(window) is not None


def _first_positive(body: str, patterns: Sequence[Pattern[str]], skip_balances: bool) -> Optional[Decimal]:
    for pattern in patterns:
        for match in pattern.finditer(body):
            if skip_balances and _is_balance_labelled(body, match.start()):
                continue
            value = parse_amount(match.group(1))
            if value is not None and value > 0:
                return value
    return None


def scan_numeric_tokens(body: str) -> Optional[Decimal]:
    """
    Fallback tier: choose among every plausible number in the body.

    Tokens outside 10..1,000,000 are discarded. The largest token carrying a
    decimal point wins; without any decimal token the largest token wins.
    """
    decimals: List[Decimal] = []
    integers: List[Decimal] = []
    for match in _NUMERIC_TOKEN.finditer(body):
        token = match.group(0).rstrip(",")
        value = parse_amount(token)
        if value is None or value < PLAUSIBLE_MIN or value > PLAUSIBLE_MAX:
            continue
        if "." in token:
            decimals.append(value)
        else:
            integers.append(value)
    if decimals:
        return max(decimals)
    if integers:
        return max(integers)
    return None


class AmountExtractor:
    """Finds the transaction value of an SMS body"""

    def primary(self, body: str) -> Optional[Decimal]:
        """Tier 1: currency-tagged and verb/preposition phrasings"""
        return _first_positive(body, PRIMARY_PATTERNS, skip_balances=True)

    def secondary(self, body: str) -> Optional[Decimal]:
        """Tier 2: looser contextual numbers, including a stated balance"""
        return _first_positive(body, SECONDARY_PATTERNS, skip_balances=False)

    def fallback(self, body: str) -> Optional[Decimal]:
        """Tier 3: numeric token scan"""
        return scan_numeric_tokens(body)

    def extract(self, body: str) -> Optional[Decimal]:
        """Run the tiers in order; None (never zero) means extraction failed"""
        if not body:
            return None
        for tier in (self.primary, self.secondary, self.fallback):
            value = tier(body)
            if value is not None and value > 0:
                return value
        return None

    def has_plausible_amount(self, body: str) -> bool:
        value = self.extract(body)
        return value is not None and PLAUSIBLE_MIN <= value <= PLAUSIBLE_MAX

    def is_lacs_tagged(self, body: str) -> bool:
        """Amounts quoted in lakhs/crores signal an offer, not a transaction"""
        return _LACS_TAGGED.search(body) is not None
