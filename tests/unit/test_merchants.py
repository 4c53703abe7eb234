"""Unit tests for the merchant cascade and counterparty cleanup"""

import pytest

from sms_gateway.domain.merchant_cleanup import clean_counterparty
from sms_gateway.domain.merchants import (
    MerchantExtractor,
    context_label,
    format_upi_id,
    is_valid_candidate,
)
from tests.sms_samples import DUAL_MENTION_SMS, HDFC_AMAZON_SMS, ICICI_UPI_SMS, UNREFERENCED_SMS


def test_known_merchant_tier():
    """Test curated merchant names resolve to their canonical spelling"""
    name, tier = MerchantExtractor().extract_with_tier(HDFC_AMAZON_SMS, "HDFCBK")
    assert name == "Amazon Retail"
    assert tier == "known_merchant"


def test_known_merchant_alias_inside_upi_handle():
    """Test payment gateway alias embedded in a UPI narration"""
    assert MerchantExtractor().extract(ICICI_UPI_SMS, "ICICIB") == "Razorpay"


def test_bank_specific_credited_recipient():
    """Test "and NAME credited" phrasing of a dual-mention message"""
    name, tier = MerchantExtractor().extract_with_tier(DUAL_MENTION_SMS, "AX-ICICIB")
    assert name == "Ravi Kumar"
    assert tier == "bank_specific"


def test_upi_id_kept_lower_case():
    """Test VPAs survive post-processing as ids"""
    assert MerchantExtractor().extract(UNREFERENCED_SMS, "JM-KOTAKB") == "rahul.sharma@okaxis"


def test_card_pos_tier():
    """Test "at MERCHANT" for card purchases"""
    body = "Rs.450.00 spent on your card XX1234 at CAFE COFFEE CORNER on 05-03-24"
    name, tier = MerchantExtractor().extract_with_tier(body, "SBIINB")
    assert name == "Cafe Coffee Corner"
    assert tier == "card_pos"


def test_upi_purpose_local_part():
    """Test purpose words in a VPA become a title-cased phrase"""
    name, tier = MerchantExtractor().extract_with_tier("Paid Rs.15,000.00 to houserent@ybl", "VM-PHONPE")
    assert name == "House Rent"
    assert tier == "upi_id"


def test_upi_person_local_part():
    """Test a personal VPA is humanised with the (UPI) suffix"""
    body = "Paid Rs.500.00 to priya.menon@oksbi"
    assert MerchantExtractor().extract(body, "VM-PAYTMB") == "Priya Menon (UPI)"


def test_format_upi_id_known_merchant_and_short_ids():
    """Test merchant VPAs map to canonical names and short ids stay raw"""
    assert format_upi_id("swiggy", "icici") == "Swiggy"
    assert format_upi_id("9876543210", "ybl") == "9876543210@ybl"


def test_empty_body_is_unknown():
    """Test the extractor never fails on an empty body"""
    assert MerchantExtractor().extract("") == "Unknown"


@pytest.mark.parametrize(
    "body,label",
    [
        ("Money sent via UPI P2P transfer", "UPI P2P Transfer"),
        ("Cash withdrawal at ATM successful", "ATM Withdrawal"),
        ("NEFT of Rs 500 processed", "NEFT Transfer"),
        ("Amount processed successfully", "Bank Transaction"),
    ],
)
def test_context_label(body, label):
    """Test the keyword decision table and its final default"""
    assert context_label(body) == label


def test_candidate_validation():
    """Test generic nouns and numbers are not counterparties"""
    assert is_valid_candidate("account") is False
    assert is_valid_candidate("Your A/c") is False
    assert is_valid_candidate("123456") is False
    assert is_valid_candidate("Big Bazaar") is True


@pytest.mark.parametrize(
    "raw,cleaned",
    [
        ("XX1234", "Account 1234"),
        ("A/c XX987654", "Account 7654"),
        ("NEFT", "NEFT Transfer"),
        ("IMPS-123456", "IMPS Account 123456"),
        ("RAVI@OKICICI", "ravi@okicici"),
        ("ZOMATO LTD", "Zomato"),
        ("SHARMA GENERAL STORES PVT LTD", "Sharma General Stores"),
        ("   ", "Unknown"),
    ],
)
def test_clean_counterparty(raw, cleaned):
    """Test post-processing rules applied to every tier's output"""
    assert clean_counterparty(raw) == cleaned


def test_paying_bank_is_not_the_counterparty():
    """Test a catalogued payment bank after "from" does not beat the payee"""
    extractor = MerchantExtractor()

    name, tier = extractor.extract_with_tier("Paid Rs.99 to houserent@ybl from Paytm Payments Bank a/c", "VM-PHONPE")
    assert name == "House Rent"
    assert tier == "upi_id"

    name, tier = extractor.extract_with_tier("Paid Rs.99 to Swiggy from Paytm Payments Bank a/c", "VM-PHONPE")
    assert name == "Swiggy"
    assert tier == "known_merchant"
