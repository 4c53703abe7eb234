"""Keyword vocabularies shared by the classifier, direction and merchant rules"""

import re
from typing import Iterable, Pattern


def keyword_pattern(words: Iterable[str]) -> Pattern[str]:
    """
    Compile a case-insensitive alternation that only matches whole words.

    Boundaries are "no letter or digit on either side" rather than \\b, so that
    keywords containing punctuation ("a/c", "2fa", "e-mandate") still work and
    short words ("dr", "cr") never match inside longer ones ("address").
    Spaces inside a keyword match any run of whitespace.
    """
    # Longest first so "verification code" wins over "verification"
    ordered = sorted(set(words), key=len, reverse=True)
    alternation = "|".join(re.escape(w).replace(r"\ ", r"\s+") for w in ordered)
    return re.compile(rf"(?<![a-z0-9])(?:{alternation})(?![a-z0-9])", re.IGNORECASE)


def contains_keyword(pattern: Pattern[str], text: str) -> bool:
    return pattern.search(text) is not None


# Direction vocabulary: any hit means the account holder paid
DEBIT_WORDS = (
    "debited",
    "spent",
    "debit",
    "dr",
    "withdrawn",
    "sent",
    "paid",
    "purchase",
    "payment",
    "deducted",
)

# "credit card" is a product name, not a money-in signal
CREDIT_WORDS = (
    "credited",
    "received",
    "deposited",
    "cr",
    "refund",
    "refunded",
    "reversed",
    "added to your",
)

STRONG_OTP_WORDS = (
    "otp",
    "verification code",
    "security code",
    "auth code",
    "one time password",
    "one-time password",
)

BROAD_OTP_WORDS = (
    "login",
    "log in",
    "2fa",
    "two factor",
    "two-factor",
    "passcode",
    "password",
    "verify",
    "verification",
    "authenticate",
    "authentication",
    "secure access",
    "one time pin",
)

PROMOTIONAL_WORDS = (
    "offer",
    "offers",
    "cashback",
    "cash back",
    "discount",
    "voucher",
    "coupon",
    "pre-approved",
    "preapproved",
    "pre approved",
    "congratulations",
    "congrats",
    "you are eligible",
    "apply now",
    "limited period",
    "limited time",
    "hurry",
    "upto",
    "click here",
    "t&c apply",
    "t&c",
    "unsubscribe",
    "opt out",
    "lucky draw",
    "festive",
    "upgrade now",
)

BALANCE_WORDS = (
    "balance",
    "bal",
    "avl bal",
    "avbl bal",
    "available balance",
    "closing balance",
)

CARD_USAGE_WORDS = (
    "using card",
    "used at",
    "card ending",
    "card no",
    "card xx",
    "credit card",
    "debit card",
    "on your card",
    "pos",
    "swiped",
)

CARD_OR_POS_WORDS = (
    "card",
    "pos",
    "purchase",
    "purchased",
    "spent",
    "swiped",
    "txn",
    "transaction",
)

RECURRING_WORDS = (
    "bill",
    "subscription",
    "recharge",
    "renewal",
    "autopay",
    "auto-debit",
    "mandate",
    "e-mandate",
    "emi",
    "premium",
)

DEBIT_PATTERN = keyword_pattern(DEBIT_WORDS)
CREDIT_PATTERN = keyword_pattern(CREDIT_WORDS)
CREDIT_WORD_PATTERN = re.compile(r"(?<![a-z0-9])credit(?!\s*card)(?![a-z0-9])", re.IGNORECASE)
STRONG_OTP_PATTERN = keyword_pattern(STRONG_OTP_WORDS)
BROAD_OTP_PATTERN = keyword_pattern(BROAD_OTP_WORDS)
PROMOTIONAL_PATTERN = keyword_pattern(PROMOTIONAL_WORDS)
BALANCE_PATTERN = keyword_pattern(BALANCE_WORDS)
CARD_USAGE_PATTERN = keyword_pattern(CARD_USAGE_WORDS)
CARD_OR_POS_PATTERN = keyword_pattern(CARD_OR_POS_WORDS)
RECURRING_PATTERN = keyword_pattern(RECURRING_WORDS)


def has_debit_vocabulary(text: str) -> bool:
    return contains_keyword(DEBIT_PATTERN, text)


def has_credit_vocabulary(text: str) -> bool:
    return contains_keyword(CREDIT_PATTERN, text) or contains_keyword(CREDIT_WORD_PATTERN, text)
