"""Domain models - pure Python dataclasses representing SMS transaction entities"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Union


class Direction(str, Enum):
    """Money movement from the account holder's point of view"""

    DEBIT = "debit"
    CREDIT = "credit"


class Verdict(str, Enum):
    """Outcome tag of a single classification"""

    ACCEPTED = "accepted"
    REJECTED_OTP = "rejected_otp"
    REJECTED_PROMOTIONAL = "rejected_promotional"
    REJECTED_BALANCE_ONLY = "rejected_balance_only"
    REJECTED_CREDIT_ONLY = "rejected_credit_only"
    REJECTED_UNKNOWN_SENDER = "rejected_unknown_sender"
    REJECTED_NO_SIGNAL = "rejected_no_signal"
    # Engine outcomes after the message classifier has run
    REJECTED_MALFORMED = "rejected_malformed"
    REJECTED_NO_AMOUNT = "rejected_no_amount"
    REJECTED_DUPLICATE = "rejected_duplicate"


@dataclass(frozen=True)
class InboundMessage:
    """Raw SMS as handed over by the receiving collaborator"""

    sender: str
    body: str
    received_at: datetime


@dataclass(frozen=True)
class Rejection:
    """Message dropped by the engine, with a short diagnostic reason"""

    verdict: Verdict
    reason: str = ""

    @property
    def accepted(self) -> bool:
        return False


@dataclass(frozen=True)
class ExtractedTransaction:
    """Structured transaction extracted from an accepted, non-duplicate SMS"""

    signed_amount: Decimal  # negative iff direction is DEBIT
    direction: Direction
    counterparty: str
    category: str
    fingerprint: str
    source_sender: str
    source_body: str
    observed_at: datetime
    reference: str = ""  # empty when the body carries no reference number

    @property
    def amount(self) -> Decimal:
        """Positive magnitude of the transaction"""
        return abs(self.signed_amount)

    @property
    def verdict(self) -> Verdict:
        return Verdict.ACCEPTED

    @property
    def accepted(self) -> bool:
        return True


ClassificationResult = Union[Rejection, ExtractedTransaction]


@dataclass
class DuplicateCacheEntry:
    """Fingerprint remembered by the receive-time duplicate cache"""

    fingerprint: str
    first_seen_at: datetime
