"""
Message classifier - ordered rule cascade deciding transaction vs. non-transaction.

Rules are evaluated in a fixed sequence and the first one that matches decides
the verdict. Signals are computed lazily and at most once per message, so a
message stopped by an early rule never pays for amount or merchant scans.
"""

import re
from decimal import Decimal
from functools import cached_property
from typing import Optional, Sequence, Tuple

from sms_gateway.domain.amounts import AmountExtractor, scan_numeric_tokens
from sms_gateway.domain.merchant_catalog import find_known_merchant
from sms_gateway.domain.models import Verdict
from sms_gateway.domain.references import ReferenceExtractor
from sms_gateway.domain.senders import SenderClassifier
from sms_gateway.domain.vocabulary import (
    BALANCE_PATTERN,
    BROAD_OTP_PATTERN,
    CARD_USAGE_PATTERN,
    PROMOTIONAL_PATTERN,
    STRONG_OTP_PATTERN,
    contains_keyword,
    has_credit_vocabulary,
    has_debit_vocabulary,
)

OTP_CODE_PATTERNS = (
    re.compile(r"\b\d{4,8}\s+is\s+(?:your|the)\s+(?:otp|code|one[\s-]?time)", re.IGNORECASE),
    re.compile(r"\b(?:otp|code|pin)\s*(?:is|:)\s*\d{4,8}\b", re.IGNORECASE),
)

MAINTAIN_BALANCE = re.compile(
    r"\bmaintain(?:ing)?\s+(?:an?\s+|the\s+|your\s+)?(?:average|avg|minimum|min)\.?\s+"
    r"(?:monthly\s+|quarterly\s+|daily\s+)?bal(?:ance)?\b",
    re.IGNORECASE,
)
MARKETING_URL = re.compile(
    r"\b(?:bit\.ly|tinyurl\.com|goo\.gl|t\.co|cutt\.ly|rb\.gy|amzn\.to)/"
    r"|https?://\S*(?:offer|apply|loan|promo|reward|deal)",
    re.IGNORECASE,
)
ANY_URL = re.compile(r"https?://|\bwww\.", re.IGNORECASE)
INVITE = re.compile(r"\bwe\s+invite\s+you\b", re.IGNORECASE)
PERCENTAGE_OR_RANGE = re.compile(
    r"\d+(?:\.\d+)?\s*%|\d[\d,]*\s*(?:-|to)\s*(?:₹|rs\.?|inr)?\s*\d[\d,]*", re.IGNORECASE
)
ENJOY = re.compile(r"\benjoy\b", re.IGNORECASE)
BENEFITS = re.compile(r"\b(?:benefits?|rewards?|privileges?|perks)\b", re.IGNORECASE)
LOAN_OFFER = re.compile(r"\b(?:personal\s+|instant\s+|pre-?approved\s+)?loan\b|\b(?:get|instant)\s+cash\b", re.IGNORECASE)
APPLY_NOW = re.compile(r"\bapply\s+(?:now|today|here)\b", re.IGNORECASE)

# "Avl Bal: Rs.45,321.56" - stripped before looking for a transaction amount
BALANCE_FIGURE = re.compile(
    r"(?:avl\.?|avbl\.?|available|closing|total|current)?\s*bal(?:ance)?\.?\s*(?:is|of|was|:|-)?\s*"
    r"(?:₹|rs\.?|inr)?\s*\d[\d,]*(?:\.\d+)?",
    re.IGNORECASE,
)
MERCHANT_PREPOSITION = re.compile(r"\b(?:at|to|towards|@)\s+[A-Za-z]", re.IGNORECASE)


class MessageSignals:
    """Facts about one message, each computed on first use"""

    def __init__(
        self,
        body: str,
        sender: str,
        sender_classifier: SenderClassifier,
        amount_extractor: AmountExtractor,
        reference_extractor: ReferenceExtractor,
    ):
        self.body = body
        self.sender = sender
        self._senders = sender_classifier
        self._amounts = amount_extractor
        self._references = reference_extractor

    @cached_property
    def trusted_sender(self) -> bool:
        return self._senders.is_trusted(self.sender)

    @cached_property
    def bank_sender(self) -> bool:
        return self._senders.is_bank_sender(self.sender)

    @cached_property
    def debit_vocabulary(self) -> bool:
        return has_debit_vocabulary(self.body)

    @cached_property
    def credit_vocabulary(self) -> bool:
        return has_credit_vocabulary(self.body)

    @cached_property
    def pattern_amount(self) -> Optional[Decimal]:
        """Amount found by the currency/phrasing tiers, not the bare numeric scan"""
        return self._amounts.primary(self.body) or self._amounts.secondary(self.body)

    @cached_property
    def numeric_token(self) -> Optional[Decimal]:
        return scan_numeric_tokens(self.body)

    @cached_property
    def plausible_amount(self) -> bool:
        return self._amounts.has_plausible_amount(self.body)

    @cached_property
    def lacs_tagged(self) -> bool:
        return self._amounts.is_lacs_tagged(self.body)

    @cached_property
    def reference(self) -> str:
        return self._references.extract(self.body)

    @cached_property
    def known_merchant(self) -> Optional[str]:
        return find_known_merchant(self.body)

    @cached_property
    def merchant_preposition(self) -> bool:
        return MERCHANT_PREPOSITION.search(self.body) is not None

    @cached_property
    def card_usage(self) -> bool:
        return contains_keyword(CARD_USAGE_PATTERN, self.body)

    @cached_property
    def amount_outside_balance(self) -> bool:
        stripped = BALANCE_FIGURE.sub(" ", self.body)
        return self._amounts.primary(stripped) is not None


class OtpRule:
    name = "otp"
    verdict = Verdict.REJECTED_OTP

    def matches(self, signals: MessageSignals) -> bool:
        body = signals.body
        if contains_keyword(STRONG_OTP_PATTERN, body):
            return True
        if any(p.search(body) for p in OTP_CODE_PATTERNS):
            return True
        return contains_keyword(BROAD_OTP_PATTERN, body)


class UnknownSenderRule:
    name = "unknown_sender"
    verdict = Verdict.REJECTED_UNKNOWN_SENDER

    def matches(self, signals: MessageSignals) -> bool:
        return not signals.trusted_sender


class PromotionalRule:
    name = "promotional"
    verdict = Verdict.REJECTED_PROMOTIONAL

    def matches(self, signals: MessageSignals) -> bool:
        body = signals.body
        if contains_keyword(PROMOTIONAL_PATTERN, body):
            return True
        if MAINTAIN_BALANCE.search(body) or MARKETING_URL.search(body):
            return True
        # No single keyword is conclusive here, the combination is
        if INVITE.search(body) and PERCENTAGE_OR_RANGE.search(body):
            return True
        if ENJOY.search(body) and BENEFITS.search(body):
            return True
        if LOAN_OFFER.search(body):
            return signals.lacs_tagged or APPLY_NOW.search(body) is not None or ANY_URL.search(body) is not None
        return False


class BalanceOnlyRule:
    name = "balance_only"
    verdict = Verdict.REJECTED_BALANCE_ONLY

    def matches(self, signals: MessageSignals) -> bool:
        if not contains_keyword(BALANCE_PATTERN, signals.body):
            return False
        return not signals.debit_vocabulary and not signals.amount_outside_balance


class CreditOnlyRule:
    """Money received. Dual-mention bodies carry debit vocabulary and pass through."""

    name = "credit_only"
    verdict = Verdict.REJECTED_CREDIT_ONLY

    def matches(self, signals: MessageSignals) -> bool:
        return signals.credit_vocabulary and not signals.debit_vocabulary


class AcceptRule:
    name = "positive_signal"
    verdict = Verdict.ACCEPTED

    def matches(self, signals: MessageSignals) -> bool:
        has_amount = signals.pattern_amount is not None
        if has_amount and (
            signals.debit_vocabulary
            or bool(signals.reference)
            or signals.merchant_preposition
            or signals.card_usage
        ):
            return True
        if signals.known_merchant and (has_amount or bool(signals.reference)):
            return True
        if signals.numeric_token is not None and signals.debit_vocabulary:
            return True
        # Weakest evidence: a bank said something about a plausible sum
        return signals.bank_sender and signals.plausible_amount and not signals.lacs_tagged


DEFAULT_RULES = (
    OtpRule(),
    UnknownSenderRule(),
    PromotionalRule(),
    BalanceOnlyRule(),
    CreditOnlyRule(),
    AcceptRule(),
)


class MessageClassifier:
    """First matching rule wins; a message no rule claims has no transactional signal"""

    def __init__(
        self,
        rules: Sequence = DEFAULT_RULES,
        sender_classifier: Optional[SenderClassifier] = None,
        amount_extractor: Optional[AmountExtractor] = None,
        reference_extractor: Optional[ReferenceExtractor] = None,
        require_trusted_sender: bool = True,
    ):
        if not require_trusted_sender:
            rules = [r for r in rules if not isinstance(r, UnknownSenderRule)]
        self.rules = tuple(rules)
        self.sender_classifier = sender_classifier or SenderClassifier()
        self.amount_extractor = amount_extractor or AmountExtractor()
        self.reference_extractor = reference_extractor or ReferenceExtractor()

    def signals(self, body: str, sender: str) -> MessageSignals:
        return MessageSignals(body, sender, self.sender_classifier, self.amount_extractor, self.reference_extractor)

    def classify_with_rule(self, body: str, sender: str) -> Tuple[Verdict, str]:
        """(verdict, name of the deciding rule)"""
        signals = self.signals(body, sender)
        for rule in self.rules:
            if rule.matches(signals):
                return rule.verdict, rule.name
        return Verdict.REJECTED_NO_SIGNAL, "no_signal"

    def classify(self, body: str, sender: str) -> Verdict:
        return self.classify_with_rule(body, sender)[0]
