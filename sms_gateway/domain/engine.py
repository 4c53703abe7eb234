"""Transaction engine - SMS in, ExtractedTransaction or a rejection verdict out"""

import logging
from datetime import datetime, timedelta
from typing import List, Optional

from sms_gateway.domain.amounts import AmountExtractor
from sms_gateway.domain.categories import Categorizer
from sms_gateway.domain.classifier import MessageClassifier
from sms_gateway.domain.direction import signed_amount
from sms_gateway.domain.duplicates import DuplicateCache, is_manual_sender
from sms_gateway.domain.merchants import MerchantExtractor
from sms_gateway.domain.models import (
    ClassificationResult,
    ExtractedTransaction,
    InboundMessage,
    Rejection,
    Verdict,
)
from sms_gateway.domain.references import ReferenceExtractor, body_digest, build_fingerprint
from sms_gateway.domain.senders import SenderClassifier
from sms_gateway.utils.date_utils import to_utc_naive

logger = logging.getLogger(__name__)


def body_cache_key(sender: str, body: str) -> str:
    """Second receive-cache key: identical bodies from one sender collapse regardless of fingerprint"""
    return f"BODY-{sender.strip().lower()}-{body_digest(body)}"


class TransactionEngine:
    """
    Runs the classification pipeline for one SMS.

    Every collaborator is injected and defaults to the built-in rule set. The
    only state is the receive-time duplicate cache, owned by this instance.
    """

    def __init__(
        self,
        sender_classifier: Optional[SenderClassifier] = None,
        message_classifier: Optional[MessageClassifier] = None,
        amount_extractor: Optional[AmountExtractor] = None,
        reference_extractor: Optional[ReferenceExtractor] = None,
        merchant_extractor: Optional[MerchantExtractor] = None,
        categorizer: Optional[Categorizer] = None,
        duplicate_cache: Optional[DuplicateCache] = None,
        require_trusted_sender: bool = True,
    ):
        self.sender_classifier = sender_classifier or SenderClassifier()
        self.amount_extractor = amount_extractor or AmountExtractor()
        self.reference_extractor = reference_extractor or ReferenceExtractor()
        self.message_classifier = message_classifier or MessageClassifier(
            sender_classifier=self.sender_classifier,
            amount_extractor=self.amount_extractor,
            reference_extractor=self.reference_extractor,
            require_trusted_sender=require_trusted_sender,
        )
        self.merchant_extractor = merchant_extractor or MerchantExtractor()
        self.categorizer = categorizer or Categorizer()
        self.duplicate_cache = duplicate_cache if duplicate_cache is not None else DuplicateCache()

    def extract(self, message: InboundMessage) -> ClassificationResult:
        """
        Classify and extract without consulting or updating the duplicate cache.

        Pure: the same message always yields the same result.
        """
        sender, body = message.sender, message.body
        if not sender or not sender.strip() or not body or not body.strip():
            return Rejection(Verdict.REJECTED_MALFORMED, "blank sender or body")

        verdict, rule = self.message_classifier.classify_with_rule(body, sender)
        if verdict != Verdict.ACCEPTED:
            logger.debug(
                "Message rejected",
                extra={"step": rule, "verdict": verdict.value, "sender": sender},
            )
            return Rejection(verdict, rule)

        amount = self.amount_extractor.extract(body)
        if amount is None or amount == 0:
            logger.debug(
                "No amount found in accepted message",
                extra={"step": "amount", "verdict": Verdict.REJECTED_NO_AMOUNT.value, "sender": sender},
            )
            return Rejection(Verdict.REJECTED_NO_AMOUNT, "amount extraction failed")

        received_at = to_utc_naive(message.received_at)
        direction, signed = signed_amount(body, amount)
        reference = self.reference_extractor.extract(body)
        fingerprint = build_fingerprint(reference, amount, body, received_at)
        counterparty = self.merchant_extractor.extract(body, sender)

        return ExtractedTransaction(
            signed_amount=signed,
            direction=direction,
            counterparty=counterparty,
            category=self.categorizer.categorize(counterparty),
            fingerprint=fingerprint,
            source_sender=sender,
            source_body=body,
            observed_at=received_at,
            reference=reference,
        )

    def _cache_keys(self, transaction: ExtractedTransaction) -> List[str]:
        return [transaction.fingerprint, body_cache_key(transaction.source_sender, transaction.source_body)]

    def release(self, transaction: ExtractedTransaction) -> None:
        """Forget the receive-cache keys of a transaction that could not be stored"""
        self.duplicate_cache.forget(self._cache_keys(transaction))

    def classify(self, sender: str, body: str, received_at: datetime) -> ClassificationResult:
        """Full pipeline including receive-time duplicate suppression"""
        result = self.extract(InboundMessage(sender=sender, body=body, received_at=received_at))
        if not isinstance(result, ExtractedTransaction) or is_manual_sender(sender):
            return result

        keys = self._cache_keys(result)
        if self.duplicate_cache.check_and_record(keys, result.observed_at):
            logger.info(
                "Duplicate message suppressed",
                extra={
                    "step": "receive_cache",
                    "verdict": Verdict.REJECTED_DUPLICATE.value,
                    "sender": sender,
                    "fingerprint": result.fingerprint,
                },
            )
            return Rejection(Verdict.REJECTED_DUPLICATE, "receive_cache")

        logger.info(
            "Transaction extracted",
            extra={
                "step": "accepted",
                "verdict": Verdict.ACCEPTED.value,
                "sender": sender,
                "fingerprint": result.fingerprint,
            },
        )
        return result


def build_engine(
    require_trusted_sender: bool = True,
    cache_window: timedelta = timedelta(minutes=30),
    cache_max_entries: int = 1024,
    categorizer: Optional[Categorizer] = None,
) -> TransactionEngine:
    """Engine wired from configuration values"""
    return TransactionEngine(
        categorizer=categorizer,
        duplicate_cache=DuplicateCache(window=cache_window, max_entries=cache_max_entries),
        require_trusted_sender=require_trusted_sender,
    )
