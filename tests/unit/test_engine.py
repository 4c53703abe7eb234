"""Unit tests for the end-to-end transaction engine"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from sms_gateway.domain.duplicates import DuplicateCache
from sms_gateway.domain.engine import TransactionEngine, body_cache_key, build_engine
from sms_gateway.domain.models import (
    Direction,
    ExtractedTransaction,
    InboundMessage,
    Rejection,
    Verdict,
)
from tests.sms_samples import (
    DUAL_MENTION_SMS,
    HDFC_AMAZON_SMS,
    ICICI_UPI_SMS,
    OTP_SMS,
    PROMOTIONAL_SMS,
    UNREFERENCED_SMS,
)


def test_pos_purchase_extracted(transaction_engine, received_at):
    """Test a card purchase resolves amount, merchant and category"""
    result = transaction_engine.classify("HDFCBK", HDFC_AMAZON_SMS, received_at)

    assert isinstance(result, ExtractedTransaction)
    assert result.signed_amount == Decimal("-2599.00")
    assert result.direction == Direction.DEBIT
    assert result.counterparty == "Amazon Retail"
    assert result.category == "Shopping"
    assert result.reference == ""
    assert result.fingerprint.startswith("SYN-2599.00-120423-")
    assert result.observed_at == received_at


def test_upi_debit_extracted(transaction_engine, received_at):
    """Test a UPI debit keeps its reference as the fingerprint"""
    result = transaction_engine.classify("ICICIB", ICICI_UPI_SMS, received_at)

    assert isinstance(result, ExtractedTransaction)
    assert result.signed_amount == Decimal("-100.00")
    assert result.amount == Decimal("100.00")
    assert result.reference == "ICIC333456"
    assert result.fingerprint == "REF-ICIC333456"


@pytest.mark.parametrize(
    "sender,body,verdict",
    [
        ("VM-HDFCBK", PROMOTIONAL_SMS, Verdict.REJECTED_PROMOTIONAL),
        ("HDFCBK", OTP_SMS, Verdict.REJECTED_OTP),
        ("+919812345678", OTP_SMS, Verdict.REJECTED_OTP),
        ("+919812345678", HDFC_AMAZON_SMS, Verdict.REJECTED_UNKNOWN_SENDER),
    ],
)
def test_rejections(transaction_engine, received_at, sender, body, verdict):
    """Test non-transactional messages are rejected with the deciding verdict"""
    result = transaction_engine.classify(sender, body, received_at)

    assert isinstance(result, Rejection)
    assert result.verdict == verdict
    assert not result.accepted


@pytest.mark.parametrize("sender,body", [("", HDFC_AMAZON_SMS), ("HDFCBK", "   "), ("  ", "")])
def test_malformed_input(transaction_engine, received_at, sender, body):
    """Test blank sender or body is rejected before any rule runs"""
    result = transaction_engine.classify(sender, body, received_at)
    assert result.verdict == Verdict.REJECTED_MALFORMED


def test_accepted_without_amount(transaction_engine, received_at):
    """Test a merchant-plus-reference message with no usable amount"""
    result = transaction_engine.classify("HDFCBK", "Swiggy order paid. UPI Ref 406123456789", received_at)
    assert result.verdict == Verdict.REJECTED_NO_AMOUNT


def test_sign_matches_direction(transaction_engine, received_at):
    """Test every accepted message has a negative amount iff it is a debit"""
    for sender, body in [
        ("HDFCBK", HDFC_AMAZON_SMS),
        ("ICICIB", ICICI_UPI_SMS),
        ("AX-ICICIB", DUAL_MENTION_SMS),
        ("JM-KOTAKB", UNREFERENCED_SMS),
    ]:
        result = transaction_engine.extract(InboundMessage(sender, body, received_at))
        assert isinstance(result, ExtractedTransaction)
        assert result.amount > 0
        assert (result.signed_amount < 0) == (result.direction == Direction.DEBIT)


def test_dual_mention_is_debit(transaction_engine, received_at):
    """Test a debit that also names a credited recipient"""
    result = transaction_engine.classify("AX-ICICIB", DUAL_MENTION_SMS, received_at)

    assert result.direction == Direction.DEBIT
    assert result.signed_amount == Decimal("-1500.00")
    assert result.counterparty == "Ravi Kumar"
    assert result.reference == "406123456789"


def test_extract_is_idempotent(transaction_engine, received_at):
    """Test extract never touches the duplicate cache"""
    message = InboundMessage("HDFCBK", HDFC_AMAZON_SMS, received_at)

    first = transaction_engine.extract(message)
    second = transaction_engine.extract(message)

    assert first == second
    assert len(transaction_engine.duplicate_cache) == 0


def test_repeat_within_window_is_duplicate(transaction_engine, received_at):
    """Test the second identical message is suppressed by the receive cache"""
    first = transaction_engine.classify("HDFCBK", HDFC_AMAZON_SMS, received_at)
    second = transaction_engine.classify("HDFCBK", HDFC_AMAZON_SMS, received_at + timedelta(minutes=1))

    assert first.accepted
    assert second.verdict == Verdict.REJECTED_DUPLICATE
    assert second.reason == "receive_cache"


def test_same_reference_different_wording_is_duplicate(transaction_engine, received_at):
    """Test bank and UPI app reporting the same payment"""
    bank = "Rs.450.00 debited from A/c XX1111 to Zomato. UPI Ref 406998877665"
    app = "You paid Rs 450 to Zomato. UPI transaction ID 406998877665"

    assert transaction_engine.classify("HDFCBK", bank, received_at).accepted
    result = transaction_engine.classify("GPAY", app, received_at + timedelta(seconds=20))
    assert result.verdict == Verdict.REJECTED_DUPLICATE


def test_distinct_references_both_accepted(transaction_engine, received_at):
    """Test two payments that differ only in reference are two transactions"""
    other = ICICI_UPI_SMS.replace("ICIC333456", "ICIC333457")

    assert transaction_engine.classify("ICICIB", ICICI_UPI_SMS, received_at).accepted
    assert transaction_engine.classify("ICICIB", other, received_at).accepted


def test_repeat_after_window_is_accepted(received_at):
    """Test cache entries expire after the configured window"""
    engine = build_engine(cache_window=timedelta(minutes=30))

    assert engine.classify("JM-KOTAKB", UNREFERENCED_SMS, received_at).accepted
    assert engine.classify("JM-KOTAKB", UNREFERENCED_SMS, received_at + timedelta(minutes=31)).accepted


def test_cache_is_owned_per_engine(received_at):
    """Test two engines never share duplicate state"""
    first = TransactionEngine(duplicate_cache=DuplicateCache())
    second = TransactionEngine(duplicate_cache=DuplicateCache())

    assert first.classify("HDFCBK", HDFC_AMAZON_SMS, received_at).accepted
    assert second.classify("HDFCBK", HDFC_AMAZON_SMS, received_at).accepted


def test_permissive_engine_accepts_unknown_sender(received_at):
    engine = build_engine(require_trusted_sender=False)
    result = engine.classify("+919812345678", HDFC_AMAZON_SMS, received_at)
    assert result.accepted


def test_body_cache_key_normalizes_sender():
    assert body_cache_key(" VM-HDFCBK ", "x") == body_cache_key("vm-hdfcbk", "x")
    assert body_cache_key("HDFCBK", "x") != body_cache_key("HDFCBK", "y")


def test_timezone_aware_receive_time_normalized(transaction_engine):
    """Test observed_at is stored as naive UTC"""
    ist = timezone(timedelta(hours=5, minutes=30))
    result = transaction_engine.classify("ICICIB", ICICI_UPI_SMS, datetime(2024, 2, 15, 16, 0, tzinfo=ist))

    assert result.observed_at == datetime(2024, 2, 15, 10, 30)
    assert result.observed_at.tzinfo is None


def test_debits_from_same_unmasked_account_are_distinct(transaction_engine, received_at):
    """Test an account number in the body never becomes a shared fingerprint"""
    first = "Rs.500.00 debited from A/c No 50100123456789 on 05-03-24 to SWIGGY"
    second = "Rs.1,250.00 debited from A/c No 50100123456789 on 05-03-24 to UBER INDIA"

    r1 = transaction_engine.classify("VM-HDFCBK", first, received_at)
    r2 = transaction_engine.classify("VM-HDFCBK", second, received_at + timedelta(minutes=5))

    assert r1.accepted and r2.accepted
    assert r1.reference == r2.reference == ""
    assert r1.fingerprint != r2.fingerprint


def test_release_allows_the_same_message_again(transaction_engine, received_at):
    """Test a released transaction is not suppressed on its next delivery"""
    first = transaction_engine.classify("HDFCBK", HDFC_AMAZON_SMS, received_at)
    transaction_engine.release(first)

    again = transaction_engine.classify("HDFCBK", HDFC_AMAZON_SMS, received_at + timedelta(seconds=30))

    assert again.accepted
