"""Reference number extraction and fingerprint synthesis"""

import hashlib
import re
from datetime import datetime
from decimal import Decimal
from typing import Optional, Pattern, Sequence

from sms_gateway.utils.date_utils import find_date_token, is_date_shaped, minute_token

MIN_REFERENCE_LENGTH = 6

REFERENCE_PATTERNS: Sequence[Pattern[str]] = (
    # Ref 412345678901
    re.compile(r"\bref\.?\s*(?:no\.?|number|#)?\s*[:.\-]?\s*(\d{6,})\b", re.IGNORECASE),
    # UPI Ref ICIC333456 / Reference No: AB12345 / RRN 412345 / UTR: N1234567
    re.compile(
        r"\b(?:ref(?:erence)?|rrn|utr)\.?\s*(?:no\.?|number|id|#)?\s*[:.\-]?\s*(?:is\s+)?([A-Za-z0-9]{6,})\b",
        re.IGNORECASE,
    ),
    # Txn ID: T240215123456 / Transaction No 123456
    re.compile(
        r"\b(?:txn|trxn|txnid|transaction)\.?\s*(?:id|no\.?|number|ref)?\s*[:.\-#]?\s*(?:is\s+)?([A-Za-z0-9]{6,})\b",
        re.IGNORECASE,
    ),
    # UPI:412345678901
    re.compile(r"\bupi\s*[:\-]\s*(\d{6,})\b", re.IGNORECASE),
    # generic "id" / "number" labels
    re.compile(r"\b(?:id|number|no)\.?\s*[:.\-#]?\s*([A-Za-z0-9]{6,})\b", re.IGNORECASE),
    # UPI/P2M/412345678901/...
    re.compile(r"\bupi/p2[a-z]/(\d{6,})", re.IGNORECASE),
)

# XX7290, ****1234: masked account or card numbers are shared by every transaction
_MASKED_NUMBER = re.compile(r"^[xX*]+\d*$")

# "A/c No 50100123456789": an account, card or phone number labelled like a reference
_ACCOUNT_LABEL = re.compile(r"(?:\ba/?c|\bacct|\baccount|\bcard|\bmobile|\bmob|\bphone)\.?\s*$", re.IGNORECASE)


def _is_valid_reference(candidate: str) -> bool:
    if len(candidate) < MIN_REFERENCE_LENGTH:
        return False
    if not any(ch.isdigit() for ch in candidate):
        return False
    if _MASKED_NUMBER.match(candidate):
        return False
    return not is_date_shaped(candidate)


class ReferenceExtractor:
    """Ordered regex cascade over the labelled reference forms banks use"""

    def __init__(self, patterns: Sequence[Pattern[str]] = REFERENCE_PATTERNS):
        self.patterns = tuple(patterns)

    def extract(self, body: str) -> str:
        """First valid reference in pattern order, or "" when none is present"""
        if not body:
            return ""
        for pattern in self.patterns:
            for match in pattern.finditer(body):
                candidate = match.group(1).strip()
                if _ACCOUNT_LABEL.search(body[max(0, match.start() - 12):match.start()]):
                    continue
                if _is_valid_reference(candidate):
                    return candidate
        return ""


def body_digest(body: str) -> str:
    return hashlib.sha256(body.encode("utf-8")).hexdigest()[:16]


def synthesize_fingerprint(amount: Decimal, body: str, received_at: datetime) -> str:
    """
    Fingerprint for messages without a reference number.

    amount + date token from the body (receive minute when the body has no
    date) + body hash: identical resends collapse, while unreferenced
    messages received in different minutes stay distinct.
    """
    time_token = find_date_token(body) or minute_token(received_at)
    normalized_amount = format(abs(amount).quantize(Decimal("0.01")), "f")
    return f"SYN-{normalized_amount}-{time_token}-{body_digest(body)}"


def build_fingerprint(reference: str, amount: Decimal, body: str, received_at: datetime) -> str:
    if reference:
        return f"REF-{reference.upper()}"
    return synthesize_fingerprint(amount, body, received_at)
