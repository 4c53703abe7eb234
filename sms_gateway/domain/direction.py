"""Debit/credit direction and amount sign"""

from decimal import Decimal
from typing import Tuple

from sms_gateway.domain.models import Direction
from sms_gateway.domain.vocabulary import has_debit_vocabulary


def classify_direction(body: str) -> Direction:
    """
    Any debit keyword makes the message a debit.

    Dual-mention bodies ("debited from A/c XX12 ... RAVI credited") therefore
    always resolve to DEBIT, matching how the message classifier let them through.
    """
    return Direction.DEBIT if has_debit_vocabulary(body) else Direction.CREDIT


def apply_direction(amount: Decimal, direction: Direction) -> Decimal:
    """Signed amount: negative for debits, magnitude unchanged"""
    magnitude = abs(amount)
    return -magnitude if direction == Direction.DEBIT else magnitude


def signed_amount(body: str, amount: Decimal) -> Tuple[Direction, Decimal]:
    direction = classify_direction(body)
    return direction, apply_direction(amount, direction)
