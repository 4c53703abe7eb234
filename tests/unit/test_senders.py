"""Unit tests for trusted sender classification"""

from sms_gateway.domain.senders import SenderClassifier


def test_bank_code_as_whole_sender():
    """Test bare bank header is trusted"""
    assert SenderClassifier().is_trusted("HDFCBK") is True


def test_dlt_prefixed_headers_are_tokenized():
    """Test operator prefixes and suffixes around the bank code"""
    classifier = SenderClassifier()
    assert classifier.is_bank_sender("VM-HDFCBK") is True
    assert classifier.is_bank_sender("AD-ICICIB-S") is True


def test_payment_app_sender():
    """Test payment/UPI app headers are trusted but are not banks"""
    classifier = SenderClassifier()
    assert classifier.is_payment_sender("VK-PAYTMB") is True
    assert classifier.is_bank_sender("VK-PAYTMB") is False
    assert classifier.is_trusted("VK-PAYTMB") is True


def test_short_codes_match_as_substring():
    """Test codes of at most four characters match inside a longer header"""
    assert SenderClassifier().is_bank_sender("XYIDBIXX") is True


def test_long_codes_require_token_match():
    """Test a long code buried in another token is not trusted"""
    assert SenderClassifier().is_bank_sender("XHDFCBKX") is False


def test_personal_numbers_and_blank_senders_untrusted():
    """Test phone numbers, unrelated brands and empty ids"""
    classifier = SenderClassifier()
    assert classifier.is_trusted("+919812345678") is False
    assert classifier.is_trusted("GOOGLE") is False
    assert classifier.is_trusted("") is False


def test_custom_code_sets():
    """Test injected code sets replace the built-in lists"""
    classifier = SenderClassifier(bank_codes=["MYBANK"], payment_codes=[])
    assert classifier.is_trusted("JD-MYBANK") is True
    assert classifier.is_trusted("HDFCBK") is False
