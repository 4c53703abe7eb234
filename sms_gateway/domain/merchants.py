"""Merchant / counterparty extraction - ordered cascade of named tiers"""

import re
from typing import Dict, Optional, Pattern, Sequence, Tuple

from sms_gateway.domain.merchant_catalog import find_known_merchant
from sms_gateway.domain.merchant_cleanup import UNKNOWN, UPI_SUFFIX, clean_counterparty
from sms_gateway.domain.vocabulary import (
    CARD_OR_POS_PATTERN,
    RECURRING_PATTERN,
    contains_keyword,
    keyword_pattern,
)

# A candidate name: starts with a letter, lazily runs until a terminator
_NAME = r"([A-Za-z][A-Za-z0-9 .&'_*-]{0,40}?)"
_STOP_WORDS = (
    "on|via|using|ref|from|for|at|upi|a/?c|avl|avbl|bal|info|dated|thru|through|with|by|and|is|has"
    "|txn|transaction|not|if|call|of|in|your|rs|inr|imps|neft|rtgs"
)
_END = rf"(?=\s+(?:{_STOP_WORDS})\b|\s*[,;:!()|]|\.(?:\s|$)|\s+\d|\s*$)"

GENERIC_NOUNS = {
    "account", "a/c", "ac", "acct", "customer", "your", "you", "self", "beneficiary", "bank", "the",
    "card", "wallet", "mobile", "number", "upi", "ref", "your account", "your a/c", "us", "user",
    "merchant", "payee", "other", "others", "linked", "registered", "sender", "recipient",
}
_LEADING_GENERIC = re.compile(r"^(?:your|a/?c|acct|account)\b", re.IGNORECASE)


def is_valid_candidate(candidate: Optional[str]) -> bool:
    """Reject purely numeric candidates and generic nouns such as "account" or "customer" """
    if not candidate:
        return False
    value = candidate.strip(" .,;:-_")
    if len(value) < 2:
        return False
    if not any(ch.isalpha() for ch in value):
        return False
    if value.lower() in GENERIC_NOUNS:
        return False
    return _LEADING_GENERIC.match(value) is None


def _first_valid(patterns: Sequence[Pattern[str]], body: str) -> Optional[str]:
    for pattern in patterns:
        for match in pattern.finditer(body):
            candidate = match.group(1).strip()
            if is_valid_candidate(candidate):
                return candidate
    return None


def _compile(*sources: str) -> Tuple[Pattern[str], ...]:
    return tuple(re.compile(s, re.IGNORECASE) for s in sources)


# "from Paytm Payments Bank a/c": the paying bank, not the counterparty
_SOURCE_BANK = re.compile(
    r"\bfrom\s+(?:your\s+)?(?:(?!\b(?:to|at|for|towards|on|via)\b)[A-Za-z0-9&' ]){0,40}?\bbank\b",
    re.IGNORECASE,
)


class KnownMerchantTier:
    """Tier 1: curated merchant names, longest alias first; the paying bank is skipped"""

    name = "known_merchant"

    def extract(self, body: str, sender: str) -> Optional[str]:
        return find_known_merchant(_SOURCE_BANK.sub(" ", body))


BANK_MARKERS: Dict[str, Tuple[str, ...]] = {
    "hdfc": ("hdfc",),
    "icici": ("icici",),
    "sbi": ("sbi", "state bank"),
    "axis": ("axis",),
    "kotak": ("kotak",),
    "pnb": ("pnb", "punjab national"),
    "bob": ("bob", "baroda"),
    "yes": ("yes bank", "yesbnk"),
    "idfc": ("idfc",),
    "canara": ("canara", "canbnk"),
    "union": ("union bank", "unionb"),
}

_COMMON_BANK_PATTERNS = _compile(
    rf"\b(?:UPI|VPA)[-:]\s*([\w.\-]+@[\w.\-]+|{_NAME[1:-1]}){_END}",
    rf"(?:;|\band)\s+{_NAME}\s+credited\b",
    rf"\bsent\s+to\s+{_NAME}{_END}",
    rf"\bto\s+{_NAME}\s+on\b",
)

BANK_PATTERNS: Dict[str, Tuple[Pattern[str], ...]] = {
    "hdfc": _compile(
        r"\bto\s+VPA\s+([\w.\-]+@[\w.\-]+)",
        rf"\bTo\s+{_NAME}\s+On\b",
        rf"\bInfo:?\s*(?:UPI|IMPS|NEFT)[-/]{_NAME}{_END}",
    ),
    "icici": _compile(
        rf";\s*{_NAME}\s+credited\b",
        rf"\bUPI-{_NAME}{_END}",
        rf"\bInfo\s*[:\-]?\s*{_NAME}{_END}",
    ),
    "sbi": _compile(
        rf"\b(?:transferred|trf)\s+to\s+{_NAME}{_END}",
        rf"\btransfer\s+(?:from\s+\S+\s+)?to\s+{_NAME}{_END}",
    ),
    "axis": _compile(
        r"\bUPI/P2[AM]/\d+/([^/\n]+?)(?=/|\s|$)",
        rf"\bat\s+{_NAME}{_END}",
    ),
    "kotak": _compile(
        r"\bto\s+([\w.\-]+@[\w.\-]+)",
        rf"\bsent\s+to\s+{_NAME}{_END}",
    ),
    "pnb": _compile(rf"\bVPA[-:\s]+([\w.\-]+@?[\w.\-]*)"),
    "bob": _compile(rf"\bVPA[-:\s]+([\w.\-]+@?[\w.\-]*)", rf"\bcredited\s+to\s+{_NAME}{_END}"),
}


def detect_bank(sender: str, body: str) -> Optional[str]:
    upper_sender = (sender or "").upper()
    for bank, markers in BANK_MARKERS.items():
        if any(m.replace(" ", "").upper() in upper_sender for m in markers):
            return bank
    lowered = body.lower()
    for bank, markers in BANK_MARKERS.items():
        if any(re.search(rf"(?<![a-z]){re.escape(m)}(?![a-z])", lowered) for m in markers):
            return bank
    return None


class BankSpecificTier:
    """Tier 2: phrasing particular to the bank named in the sender or body"""

    name = "bank_specific"

    def extract(self, body: str, sender: str) -> Optional[str]:
        bank = detect_bank(sender, body)
        if bank is None:
            return None
        patterns = BANK_PATTERNS.get(bank, ()) + _COMMON_BANK_PATTERNS
        return _first_valid(patterns, body)


class RecipientTier:
    """Tier 3: generic "paid to" / beneficiary / NEFT-IMPS-RTGS recipient phrasing"""

    name = "recipient"
    patterns = _compile(
        rf"\b(?:paid|sent|transferred|payment\s+made)\s+to\s+{_NAME}{_END}",
        rf"\btowards\s+{_NAME}{_END}",
        rf"\bbeneficiary(?:\s+name)?\s*[:\-]?\s*{_NAME}{_END}",
        rf"\b(?:NEFT|IMPS|RTGS)\s*(?:transfer\s+)?(?:to|-|/)\s*{_NAME}{_END}",
        rf"\bto\s+{_NAME}{_END}",
    )

    def extract(self, body: str, sender: str) -> Optional[str]:
        return _first_valid(self.patterns, body)


class CardPosTier:
    """Tier 4: "at MERCHANT" / "@ MERCHANT" for card and POS purchases"""

    name = "card_pos"
    patterns = _compile(rf"(?:\bat|(?<=\s)@)\s*([A-Za-z0-9][A-Za-z0-9 .&'_*-]{{0,40}}?){_END}")

    def extract(self, body: str, sender: str) -> Optional[str]:
        if not contains_keyword(CARD_OR_POS_PATTERN, body):
            return None
        return _first_valid(self.patterns, body)


class RecurringTier:
    """Tier 5: bill, subscription and recharge phrasing"""

    name = "recurring"
    patterns = _compile(
        rf"\b(?:bill\s+payment|subscription|recharge|renewal|autopay|mandate|emi)\s+(?:for|of|to|towards)\s+{_NAME}{_END}",
        rf"\bfor\s+(?:your\s+)?{_NAME}\s+(?:bill|subscription|recharge|renewal|premium|emi)\b",
        rf"\bfor\s+{_NAME}{_END}",
    )

    def extract(self, body: str, sender: str) -> Optional[str]:
        if not contains_keyword(RECURRING_PATTERN, body):
            return None
        return _first_valid(self.patterns, body)


PURPOSE_WORDS = (
    "rent", "bill", "fee", "fees", "tuition", "school", "college", "electricity", "water", "gas",
    "insurance", "emi", "maintenance", "society", "donation", "salary", "loan",
)

_UPI_ID = re.compile(
    r"(?<![\w.])([a-z0-9][a-z0-9.\-_]{1,})@([a-z][a-z0-9]+)(?![\w]*\.[a-z])", re.IGNORECASE
)
_PURPOSE_SPLIT = re.compile(rf"({'|'.join(sorted(PURPOSE_WORDS, key=len, reverse=True))})")


def format_upi_id(local: str, provider: str) -> str:
    """
    Display name for a VPA.

    Purpose-like local parts ("houserent") become a title-cased phrase, known
    merchants their canonical name, other names are humanised with a "(UPI)"
    suffix. Numeric or very short local parts keep the raw id.
    """
    raw = f"{local}@{provider}".lower()
    letters = re.sub(r"[^a-z]+", " ", local.lower()).strip()

    known = find_known_merchant(letters.replace(" ", "") + " " + letters)
    if known:
        return known

    if any(word in letters for word in PURPOSE_WORDS):
        phrase = _PURPOSE_SPLIT.sub(r" \1 ", letters)
        return " ".join(w.capitalize() for w in phrase.split())

    if len(letters.replace(" ", "")) < 3:
        return raw
    return " ".join(w.capitalize() for w in letters.split()) + UPI_SUFFIX


class UpiIdTier:
    """Tier 6: user@provider payment addresses"""

    name = "upi_id"

    def extract(self, body: str, sender: str) -> Optional[str]:
        match = _UPI_ID.search(body)
        if match is None:
            return None
        return format_upi_id(match.group(1), match.group(2))


UNINFORMATIVE_REMARKS = {
    "upi", "ref", "payment", "transfer", "na", "n/a", "nil", "none", "imps", "neft", "rtgs",
    "upi payment", "fund transfer", "paid", "sent", "pay", "txn", "transaction",
}


class RemarksTier:
    """Tier 7: remarks / purpose / narration labels"""

    name = "remarks"
    patterns = _compile(
        r"\b(?:remarks?|purpose|narration|note|desc(?:ription)?)\s*[:\-]\s*([A-Za-z][A-Za-z0-9 .&'/-]{1,40}?)(?=\s*[,;|]|\.(?:\s|$)|\s+(?:ref|on|avl|bal)\b|\s*$)",
    )

    def extract(self, body: str, sender: str) -> Optional[str]:
        for pattern in self.patterns:
            for match in pattern.finditer(body):
                candidate = match.group(1).strip()
                if candidate.lower() in UNINFORMATIVE_REMARKS:
                    continue
                if is_valid_candidate(candidate):
                    return candidate
        return None


_PAYMENT_VERB = re.compile(
    r"\b(?:paid|sent|spent|debited|purchase|purchased|transferred|payment|paying)\b", re.IGNORECASE
)
_CAPITALIZED_PHRASE = re.compile(r"\b[A-Z][A-Za-z&'.-]*(?:\s+[A-Z][A-Za-z&'.-]*){0,3}")
CAPITALIZED_STOP_WORDS = {
    "rs", "rs.", "inr", "a/c", "ac", "upi", "ref", "on", "your", "from", "to", "the", "avl", "bal",
    "card", "account", "bank", "neft", "imps", "rtgs", "dr", "cr", "info", "txn", "at", "for", "via",
    "using", "by", "is", "has", "been", "xx", "no", "no.", "dear", "customer", "sms", "vpa", "if",
    "not", "you", "call", "balance", "available", "debit", "credit", "amount", "of", "and", "in",
}
SCAN_WINDOW = 50


class CapitalizedWordTier:
    """Tier 8: capitalised phrase within 50 characters after a payment verb"""

    name = "capitalized"

    def extract(self, body: str, sender: str) -> Optional[str]:
        for verb in _PAYMENT_VERB.finditer(body):
            window = body[verb.end():verb.end() + SCAN_WINDOW]
            for phrase in _CAPITALIZED_PHRASE.finditer(window):
                words = [w for w in phrase.group(0).split() if w.lower().strip(".") not in CAPITALIZED_STOP_WORDS]
                words = [w for w in words if not re.fullmatch(r"[Xx*]+\d*", w)]
                candidate = " ".join(words).strip(" .")
                if is_valid_candidate(candidate) and len(candidate) >= 3:
                    return candidate
        return None


# (required keywords, label), first row whose keywords all occur wins
CONTEXT_LABELS: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (("upi", "p2p"), "UPI P2P Transfer"),
    (("upi", "p2a"), "UPI P2P Transfer"),
    (("upi", "p2m"), "UPI Merchant Payment"),
    (("pos", "international"), "International POS Purchase"),
    (("pos",), "POS Purchase"),
    (("atm",), "ATM Withdrawal"),
    (("withdrawn",), "Cash Withdrawal"),
    (("neft",), "NEFT Transfer"),
    (("imps",), "IMPS Transfer"),
    (("rtgs",), "RTGS Transfer"),
    (("ecs",), "ECS Auto Debit"),
    (("nach",), "NACH Auto Debit"),
    (("bill", "electricity"), "Electricity Bill"),
    (("bill", "mobile"), "Mobile Bill"),
    (("recharge",), "Mobile Recharge"),
    (("emi",), "EMI Payment"),
    (("card", "international"), "International Card Payment"),
    (("card",), "Card Payment"),
    (("net banking",), "Net Banking Transfer"),
    (("netbanking",), "Net Banking Transfer"),
    (("cheque",), "Cheque Payment"),
    (("chq",), "Cheque Payment"),
    (("upi",), "UPI Payment"),
)
DEFAULT_LABEL = "Bank Transaction"

_LABEL_KEYWORDS = {kw: keyword_pattern([kw]) for keys, _ in CONTEXT_LABELS for kw in keys}


def context_label(body: str) -> str:
    """Tier 9: generic label from keyword combinations; always succeeds"""
    for keywords, label in CONTEXT_LABELS:
        if all(_LABEL_KEYWORDS[kw].search(body) for kw in keywords):
            return label
    return DEFAULT_LABEL


DEFAULT_TIERS = (
    KnownMerchantTier(),
    BankSpecificTier(),
    RecipientTier(),
    CardPosTier(),
    RecurringTier(),
    UpiIdTier(),
    RemarksTier(),
    CapitalizedWordTier(),
)


class MerchantExtractor:
    """Runs the tiers in order, post-processes the first hit, else labels by context"""

    def __init__(self, tiers: Sequence = DEFAULT_TIERS):
        self.tiers = tuple(tiers)

    def extract_with_tier(self, body: str, sender: str = "") -> Tuple[str, str]:
        """(counterparty, tier name) for diagnostics and tests"""
        for tier in self.tiers:
            candidate = tier.extract(body, sender)
            if candidate:
                cleaned = clean_counterparty(candidate)
                if cleaned != UNKNOWN:
                    return cleaned, tier.name
        return context_label(body), "context_label"

    def extract(self, body: str, sender: str = "") -> str:
        if not body:
            return UNKNOWN
        return self.extract_with_tier(body, sender)[0]
