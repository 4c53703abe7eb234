"""Unit tests for debit/credit direction and keyword boundaries"""

from decimal import Decimal

from sms_gateway.domain.direction import apply_direction, classify_direction, signed_amount
from sms_gateway.domain.models import Direction
from sms_gateway.domain.vocabulary import has_credit_vocabulary, has_debit_vocabulary


def test_debit_vocabulary_negates_amount():
    """Test debit messages produce a negative amount with unchanged magnitude"""
    direction, amount = signed_amount("Rs.500.00 debited from A/c XX12", Decimal("500.00"))
    assert direction == Direction.DEBIT
    assert amount == Decimal("-500.00")


def test_no_debit_vocabulary_is_credit():
    """Test messages without debit words keep a positive amount"""
    direction, amount = signed_amount("Rs.500.00 credited to A/c XX12", Decimal("500.00"))
    assert direction == Direction.CREDIT
    assert amount == Decimal("500.00")


def test_dual_mention_resolves_to_debit():
    """Test debit wins when both debit and credit vocabulary occur"""
    body = "A/c XX12 debited for Rs 300 and RAVI credited"
    assert classify_direction(body) == Direction.DEBIT


def test_apply_direction_uses_magnitude():
    """Test sign is applied to the absolute value"""
    assert apply_direction(Decimal("-20"), Direction.CREDIT) == Decimal("20")
    assert apply_direction(Decimal("20"), Direction.DEBIT) == Decimal("-20")


def test_short_keywords_respect_word_boundaries():
    """Test "dr" does not match inside "address" nor "cr" inside "secret" """
    assert has_debit_vocabulary("Please update your address") is False
    assert has_credit_vocabulary("Keep your card PIN secret") is False
    assert has_debit_vocabulary("Rs 200 Dr. to A/c") is True


def test_credit_card_is_not_credit_vocabulary():
    """Test the product name "credit card" is not a money-in signal"""
    assert has_credit_vocabulary("Payment on your credit card is due") is False
    assert has_credit_vocabulary("Rs 100 credit to your account") is True
