"""Counterparty post-processing: normalise whatever a merchant tier produced into a display name"""

import re
from typing import List

from sms_gateway.domain.merchant_catalog import canonical_for_alias

UNKNOWN = "Unknown"
UPI_SUFFIX = " (UPI)"

UPI_ID = re.compile(r"[a-z0-9][a-z0-9.\-_]*@[a-z][a-z0-9.]*", re.IGNORECASE)
MASKED_ACCOUNT = re.compile(
    r"(?:a/?c|acct|account)?\.?\s*(?:no\.?)?\s*[x*]+\s*(\d{3,})", re.IGNORECASE
)
TRANSFER_DIGITS = re.compile(r"(neft|imps|rtgs|upi)[\s:/\-]*(\d*)", re.IGNORECASE)

_EMBEDDED_REFERENCE = re.compile(
    r"\b(?:ref|txn|rrn|utr)\.?\s*(?:no\.?)?\s*[:#\-]?\s*[a-z0-9]*\d[a-z0-9]*", re.IGNORECASE
)
_EMBEDDED_CODE = re.compile(r"\b(?=[a-z0-9]*\d{4,})[a-z0-9]+\b", re.IGNORECASE)
_EMBEDDED_DATE = re.compile(
    r"\b\d{1,2}[-/.]\d{1,2}[-/.]\d{2,4}\b"
    r"|\b\d{1,2}[- ]?(?:jan|feb|mar|apr|may|jun|jul|aug|sep|oct|nov|dec)[a-z]*[- ]?\d{2,4}\b",
    re.IGNORECASE,
)
_PUNCTUATION = re.compile(r"[^A-Za-z0-9&' ]+")
_WHITESPACE = re.compile(r"\s+")

LEGAL_SUFFIXES = {"pvt", "private", "ltd", "limited", "llp", "inc", "corp", "corporation", "co"}
NOISE_WORDS = {"bal", "avl", "avbl", "ref", "ecom", "info", "txn", "vpa"}
BANK_NAMES = {
    "hdfc", "icici", "sbi", "axis", "kotak", "pnb", "idfc", "canara", "baroda", "bob", "indusind",
    "yesbank", "bank", "idbi", "federal", "rbl", "hsbc", "citi",
}
COUNTRY_TAILS = {"in", "ind", "india"}

BUSINESS_WORDS = LEGAL_SUFFIXES | {
    "company", "enterprises", "enterprise", "traders", "trading", "stores", "store", "services",
    "solutions", "technologies", "tech", "industries", "retail", "mart", "foods", "food", "restaurant",
    "hotel", "cafe", "pharmacy", "medical", "medicals", "agency", "agencies", "motors", "centre",
    "center", "shop", "bazaar", "supermarket", "petroleum", "fuels", "station", "hospital", "clinic",
    "ventures", "international", "global", "online", "payments", "digital", "kitchen", "bakery",
    "sweets", "electronics", "textiles", "jewellers", "associates", "labs", "diagnostics",
}

ALWAYS_UPPER = {
    "upi", "neft", "imps", "rtgs", "pos", "atm", "emi", "ecs", "nach", "kfc", "irctc", "lic", "bsnl",
    "oyo", "pvr", "dth", "p2p", "p2m", "llp", "mtnl",
}


def _is_business(tokens: List[str]) -> bool:
    return any(t.lower() in BUSINESS_WORDS for t in tokens)


def _capitalize(token: str, business: bool) -> str:
    lowered = token.lower()
    if lowered in ALWAYS_UPPER:
        return token.upper()
    if business:
        # Short all-caps tokens in business names are acronyms ("DLF", "ABC Traders")
        if token.isupper() and token.isalpha() and len(token) <= 3:
            return token
        if any(ch.isdigit() for ch in token):
            return token.upper()
    return lowered[:1].upper() + lowered[1:]


def _first_word_fallback(original: str) -> str:
    for word in _WHITESPACE.split(_PUNCTUATION.sub(" ", original)):
        if len(word) >= 2 and any(ch.isalpha() for ch in word):
            return word[:1].upper() + word[1:].lower()
    return UNKNOWN


def _clean_name(candidate: str) -> str:
    text = _EMBEDDED_REFERENCE.sub(" ", candidate)
    text = _EMBEDDED_DATE.sub(" ", text)
    text = _EMBEDDED_CODE.sub(" ", text)
    text = _PUNCTUATION.sub(" ", text)
    tokens = [t for t in _WHITESPACE.split(text) if t]

    business = _is_business(tokens)
    tokens = [t for t in tokens if t.lower() not in NOISE_WORDS | BANK_NAMES | LEGAL_SUFFIXES]
    if len(tokens) > 1 and tokens[-1].lower() in COUNTRY_TAILS:
        tokens = tokens[:-1]
    tokens = [t.strip("'") for t in tokens if t.strip("'")]
    if not tokens:
        return ""

    joined = " ".join(tokens)
    canonical = canonical_for_alias(joined)
    if canonical:
        return canonical
    return " ".join(_capitalize(t, business) for t in tokens)


def clean_counterparty(candidate: str) -> str:
    """
    Turn a raw tier candidate into a display name.

    UPI ids keep their form in lower case, masked account numbers become
    "Account 1234", bare transfer types become "NEFT Transfer" (or
    "NEFT Account 123456" for short account digits), known merchants get their
    canonical spelling, everything else is stripped of noise and title-cased.
    """
    original = (candidate or "").strip()
    stripped = original.strip(" .,;:-_/|")
    if not stripped:
        return UNKNOWN

    if UPI_ID.fullmatch(stripped):
        return stripped.lower()

    if stripped.endswith(UPI_SUFFIX):
        name = _clean_name(stripped[: -len(UPI_SUFFIX)])
        return f"{name}{UPI_SUFFIX}" if len(name) >= 2 else stripped

    masked = MASKED_ACCOUNT.fullmatch(stripped)
    if masked:
        return f"Account {masked.group(1)[-4:]}"

    transfer = TRANSFER_DIGITS.fullmatch(stripped)
    if transfer:
        kind, digits = transfer.group(1).upper(), transfer.group(2)
        if 3 <= len(digits) <= 6:
            return f"{kind} Account {digits}"
        return f"{kind} Transfer"

    canonical = canonical_for_alias(stripped)
    if canonical:
        return canonical

    cleaned = _clean_name(stripped)
    if len(cleaned) < 2:
        return _first_word_fallback(original)
    return cleaned
